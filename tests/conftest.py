import os
import sys
from datetime import date

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app import create_app
from config import TestingConfig
from extensions import db
from utils.auth import SESSION_KEY, SessionContext
from utils.fee_structures import FeeStructureRepository
from utils.payments import PaymentRepository
from utils.students import StudentRepository


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def context():
    return SessionContext(uid="admin-1", email="admin@example.org", display_name="Office Admin")


@pytest.fixture
def students(app):
    return StudentRepository()


@pytest.fixture
def fees(app):
    return FeeStructureRepository()


@pytest.fixture
def payments(app, context):
    return PaymentRepository(context)


@pytest.fixture
def student_data():
    return {
        "name": "Asha Mwangi",
        "roll_number": "R1",
        "class_name": "Grade 4",
        "section": "B",
        "parent_name": "Grace Mwangi",
        "contact_number": "0712345678",
        "email": "grace@example.org",
        "address": "12 School Lane",
        "admission_date": date(2024, 1, 8),
    }


@pytest.fixture
def fee_data():
    return {"name": "Tuition", "amount": 500, "frequency": "monthly", "class_name": "Grade 4"}


@pytest.fixture
def make_payment_data():
    def _make(student_id, fee_structure_id, **overrides):
        data = {
            "student_id": student_id,
            "fee_structure_id": fee_structure_id,
            "amount": 500,
            "payment_date": date(2025, 1, 15),
            "payment_method": "cash",
            "receipt_number": "R20250115-0001",
            "status": "paid",
        }
        data.update(overrides)
        return data

    return _make


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client, context):
    with client.session_transaction() as sess:
        sess[SESSION_KEY] = context.to_dict()
    return client
