"""Create students, fee structures, payments and users.

Revision ID: 5a1f0c9d2e71
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "5a1f0c9d2e71"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade():
    op.create_table(
        "students",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("roll_number", sa.String(50), nullable=False),
        sa.Column("class", sa.String(50), nullable=False),
        sa.Column("section", sa.String(20), nullable=False, server_default=""),
        sa.Column("parent_name", sa.String(100), nullable=False),
        sa.Column("contact_number", sa.String(20), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("admission_date", sa.Date(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_students_name", "students", ["name"])
    op.create_index("ix_students_class", "students", ["class"])

    op.create_table(
        "fee_structures",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("frequency", sa.String(20), nullable=False),
        sa.Column("class", sa.String(50), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_fee_structures_name", "fee_structures", ["name"])

    op.create_table(
        "payments",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("student_id", sa.String(32), nullable=False),
        sa.Column("student_name", sa.String(100), nullable=False),
        sa.Column("roll_number", sa.String(50), nullable=False),
        sa.Column("fee_structure_id", sa.String(32), nullable=False),
        sa.Column("fee_name", sa.String(100), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("payment_method", sa.String(20), nullable=False),
        sa.Column("receipt_number", sa.String(64), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="paid"),
        sa.Column("created_by", sa.String(64), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_payments_student_id", "payments", ["student_id"])
    op.create_index("ix_payments_fee_structure_id", "payments", ["fee_structure_id"])
    op.create_index("ix_payments_payment_date", "payments", ["payment_date"])
    op.create_index("ix_payments_receipt_number", "payments", ["receipt_number"])

    op.create_table(
        "users",
        sa.Column("uid", sa.String(32), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(120), nullable=True),
        sa.Column("role", sa.String(32), nullable=False, server_default="admin"),
        sa.Column("school_id", sa.String(64), nullable=True),
        sa.Column("disabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("last_login", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)


def downgrade():
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    for idx in ("ix_payments_receipt_number", "ix_payments_payment_date",
                "ix_payments_fee_structure_id", "ix_payments_student_id"):
        op.drop_index(idx, table_name="payments")
    op.drop_table("payments")
    op.drop_index("ix_fee_structures_name", table_name="fee_structures")
    op.drop_table("fee_structures")
    op.drop_index("ix_students_class", table_name="students")
    op.drop_index("ix_students_name", table_name="students")
    op.drop_table("students")
