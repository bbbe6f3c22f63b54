from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from utils.errors import PaymentBatchError

OUTAGE = OperationalError("SELECT 1", {}, Exception("server has gone away"))


def test_reads_return_empty_on_store_failure(students, fees, payments, student_data):
    student = students.add(student_data)
    with patch.object(students.session, "get", side_effect=OUTAGE):
        assert students.get_one(student.id) is None
    with patch.object(students.session, "query", side_effect=OUTAGE):
        assert students.get_all() == []
        assert students.get_by_class("Grade 4") == []
        assert fees.get_all() == []
        assert payments.get_by_student(student.id) == []
        assert payments.get_by_date_range("2025-01-01", "2025-12-31") == []
    assert students.get_one(student.id) is not None


def test_write_failure_propagates_and_saves_nothing(students, student_data):
    with patch.object(students.session, "commit", side_effect=OUTAGE):
        with pytest.raises(OperationalError):
            students.add(student_data)
    assert students.get_all() == []


def test_batch_commit_failure_is_reported(payments, students, fees, student_data, fee_data):
    student = students.add(student_data)
    fee = fees.add(fee_data)
    with patch.object(payments.session, "commit", side_effect=OUTAGE):
        with pytest.raises(PaymentBatchError) as exc:
            payments.record_payments(student.id, [{"fee_structure_id": fee.id}], "2025-03-01", "cash")
    assert exc.value.status_code == 500
    assert exc.value.message == "Failed to record payment. Please try again."
    assert payments.get_all() == []


def test_route_maps_store_failure_to_500(auth_client, student_data, students):
    data = dict(student_data, admission_date="2024-01-08")
    with patch.object(students.session, "commit", side_effect=OUTAGE):
        resp = auth_client.post("/students", json=data)
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "Failed to save changes. Please try again."
