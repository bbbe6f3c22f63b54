from __future__ import annotations

import uuid

from extensions import db
from utils.timezone_helpers import utc_now


def new_id() -> str:
    return uuid.uuid4().hex


def _iso(value):
    return value.isoformat() if value is not None else None


def _money(value):
    return float(value) if value is not None else None


class Student(db.Model):
    __tablename__ = 'students'

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(100), nullable=False, index=True)
    roll_number = db.Column(db.String(50), nullable=False)
    # Attribute is class_name; `class` is reserved in Python
    class_name = db.Column('class', db.String(50), nullable=False, index=True)
    section = db.Column(db.String(20), nullable=False, default='')
    parent_name = db.Column(db.String(100), nullable=False)
    contact_number = db.Column(db.String(20), nullable=False)
    email = db.Column(db.String(255))
    address = db.Column(db.Text, nullable=False)
    admission_date = db.Column(db.Date, nullable=False)
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)
    updated_at = db.Column(db.DateTime, default=utc_now, nullable=False)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'roll_number': self.roll_number,
            'class_name': self.class_name,
            'section': self.section,
            'parent_name': self.parent_name,
            'contact_number': self.contact_number,
            'email': self.email,
            'address': self.address,
            'admission_date': _iso(self.admission_date),
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<Student {self.name} ({self.roll_number})>'


class FeeStructure(db.Model):
    __tablename__ = 'fee_structures'

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(100), nullable=False, index=True)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    frequency = db.Column(db.String(20), nullable=False)  # monthly/quarterly/annually/one-time
    class_name = db.Column('class', db.String(50), nullable=True)  # NULL == all classes
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)
    updated_at = db.Column(db.DateTime, default=utc_now, nullable=False)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'amount': _money(self.amount),
            'frequency': self.frequency,
            'class_name': self.class_name,
            'description': self.description,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<FeeStructure {self.name} {self.amount}/{self.frequency}>'


class Payment(db.Model):
    __tablename__ = 'payments'

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    # Plain indexed references: the repositories check them, the database does not
    student_id = db.Column(db.String(32), nullable=False, index=True)
    student_name = db.Column(db.String(100), nullable=False)
    roll_number = db.Column(db.String(50), nullable=False)
    fee_structure_id = db.Column(db.String(32), nullable=False, index=True)
    fee_name = db.Column(db.String(100), nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    payment_date = db.Column(db.Date, nullable=False, index=True)
    payment_method = db.Column(db.String(20), nullable=False)  # cash/check/bank_transfer/online
    receipt_number = db.Column(db.String(64), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default='paid')  # paid/pending/overdue
    created_by = db.Column(db.String(64), nullable=False)
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)
    updated_at = db.Column(db.DateTime, default=utc_now, nullable=False)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'student_id': self.student_id,
            'student_name': self.student_name,
            'roll_number': self.roll_number,
            'fee_structure_id': self.fee_structure_id,
            'fee_name': self.fee_name,
            'amount': _money(self.amount),
            'payment_date': _iso(self.payment_date),
            'payment_method': self.payment_method,
            'receipt_number': self.receipt_number,
            'status': self.status,
            'created_by': self.created_by,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<Payment {self.receipt_number} StudentID={self.student_id} Paid={self.amount}>'


class User(db.Model):
    __tablename__ = 'users'

    uid = db.Column(db.String(32), primary_key=True, default=new_id)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    display_name = db.Column(db.String(120), nullable=True)
    role = db.Column(db.String(32), nullable=False, default='admin')
    school_id = db.Column(db.String(64), nullable=True)
    disabled = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)

    def to_dict(self) -> dict:
        return {
            'uid': self.uid,
            'email': self.email,
            'display_name': self.display_name,
            'role': self.role,
            'school_id': self.school_id,
            'created_at': _iso(self.created_at),
            'last_login': _iso(self.last_login),
        }

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'
