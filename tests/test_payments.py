from datetime import date
from decimal import Decimal

import pytest

from models import Payment
from utils.errors import ConflictError, NotFoundError, PaymentBatchError, ValidationError
from utils.payments import PaymentRepository
from utils.updates import PaymentUpdate


@pytest.fixture
def student(students, student_data):
    return students.add(student_data)


@pytest.fixture
def fee(fees, fee_data):
    return fees.add(fee_data)


def test_end_to_end_payment_lifecycle(students, fees, payments, student_data):
    s = students.add(dict(student_data, roll_number="R1"))
    f = fees.add({"name": "Tuition", "amount": 500, "frequency": "monthly"})

    p = payments.add({
        "student_id": s.id,
        "fee_structure_id": f.id,
        "amount": 500,
        "payment_date": "2025-01-15",
        "payment_method": "cash",
        "receipt_number": "R20250115-0001",
        "status": "paid",
    })
    assert p.student_name == s.name
    assert p.roll_number == "R1"
    assert p.fee_name == f.name
    assert p.amount == 500
    assert p.created_by == "admin-1"

    with pytest.raises(ConflictError):
        fees.delete(f.id)
    assert payments.delete(p.id) is True
    assert fees.delete(f.id) is True


def test_unknown_student_creates_nothing(payments, fee, make_payment_data):
    with pytest.raises(NotFoundError, match="Student not found"):
        payments.add(make_payment_data("ghost", fee.id))
    assert payments.get_all() == []


def test_unknown_fee_structure_creates_nothing(payments, student, make_payment_data):
    with pytest.raises(NotFoundError, match="Fee structure not found"):
        payments.add(make_payment_data(student.id, "ghost"))
    assert payments.get_all() == []


def test_validation_runs_before_lookup(payments, make_payment_data):
    with pytest.raises(ValidationError) as exc:
        payments.add(make_payment_data("ghost", "ghost", amount=-1))
    assert exc.value.field == "amount"


def test_created_by_required_without_context(app, student, fee, make_payment_data):
    repo = PaymentRepository()
    with pytest.raises(ValidationError, match="Creator information is required"):
        repo.add(make_payment_data(student.id, fee.id))
    payment = repo.add(make_payment_data(student.id, fee.id, created_by="clerk-7"))
    assert payment.created_by == "clerk-7"


def test_denormalized_names_are_not_refreshed(students, fees, payments, student, fee, make_payment_data):
    payment = payments.add(make_payment_data(student.id, fee.id))
    students.update(student.id, {"name": "Renamed Student"})
    fees.update(fee.id, {"name": "Renamed Fee"})

    again = payments.get_one(payment.id)
    assert again.student_name == "Asha Mwangi"
    assert again.fee_name == "Tuition"


def test_update_does_not_recopy_names(students, payments, student, fee, student_data, make_payment_data):
    other = students.add(dict(student_data, name="Other Child", roll_number="R9"))
    payment = payments.add(make_payment_data(student.id, fee.id))
    updated = payments.update(payment.id, PaymentUpdate(student_id=other.id, status="overdue"))
    assert updated.student_id == other.id
    assert updated.student_name == "Asha Mwangi"
    assert updated.status == "overdue"


def test_update_missing_payment(payments):
    with pytest.raises(NotFoundError, match="Payment not found"):
        payments.update("missing", {"status": "paid"})


def test_get_all_newest_first(payments, student, fee, make_payment_data):
    for day in (3, 20, 11):
        payments.add(make_payment_data(student.id, fee.id, payment_date=date(2025, 1, day)))
    dates = [p.payment_date for p in payments.get_all()]
    assert dates == sorted(dates, reverse=True)
    assert dates[0] == date(2025, 1, 20)


def test_get_by_student(payments, students, student, fee, student_data, make_payment_data):
    other = students.add(dict(student_data, name="Other", roll_number="R2"))
    payments.add(make_payment_data(student.id, fee.id, payment_date=date(2025, 1, 1)))
    payments.add(make_payment_data(other.id, fee.id))
    payments.add(make_payment_data(student.id, fee.id, payment_date=date(2025, 2, 1)))
    mine = payments.get_by_student(student.id)
    assert [p.payment_date for p in mine] == [date(2025, 2, 1), date(2025, 1, 1)]


def test_get_by_date_range_is_inclusive(payments, student, fee, make_payment_data):
    for d in (date(2024, 12, 31), date(2025, 1, 1), date(2025, 1, 15), date(2025, 1, 31), date(2025, 2, 1)):
        payments.add(make_payment_data(student.id, fee.id, payment_date=d))
    result = payments.get_by_date_range(date(2025, 1, 1), "2025-01-31")
    assert [p.payment_date for p in result] == [date(2025, 1, 31), date(2025, 1, 15), date(2025, 1, 1)]
    assert payments.get_by_date_range("2025-02-02", "2025-01-01") == []


def test_delete_missing_payment(payments):
    with pytest.raises(NotFoundError):
        payments.delete("missing")


def test_receipt_numbers_may_repeat(payments, student, fee, make_payment_data):
    payments.add(make_payment_data(student.id, fee.id, receipt_number="MANUAL-1"))
    payments.add(make_payment_data(student.id, fee.id, receipt_number="MANUAL-1"))
    assert len(payments.get_all()) == 2


class TestRecordPayments:
    def test_one_payment_per_item(self, payments, fees, student, fee):
        bus = fees.add({"name": "Transport", "amount": 120, "frequency": "monthly"})
        created = payments.record_payments(
            student.id,
            [{"fee_structure_id": fee.id}, {"fee_structure_id": bus.id, "amount": "100"}],
            payment_date="2025-03-01",
            payment_method="online",
            receipt_number="R20250301-0007",
        )
        assert [p.receipt_number for p in created] == ["R20250301-0007-1", "R20250301-0007-2"]
        assert created[0].amount == Decimal("500.00")
        assert created[1].amount == Decimal("100.00")
        assert {p.status for p in created} == {"paid"}
        assert len(payments.get_by_student(student.id)) == 2

    def test_generates_receipt_when_blank(self, payments, student, fee):
        created = payments.record_payments(
            student.id, [{"fee_structure_id": fee.id}], date(2025, 3, 1), "cash", receipt_number=""
        )
        assert created[0].receipt_number.startswith("R")
        assert created[0].receipt_number.endswith("-1")

    def test_failure_rolls_back_everything(self, payments, student, fee, app):
        with pytest.raises(PaymentBatchError) as exc:
            payments.record_payments(
                student.id,
                [{"fee_structure_id": fee.id}, {"fee_structure_id": "ghost", "amount": 10}],
                date(2025, 3, 1),
                "cash",
            )
        assert exc.value.index == 2
        assert isinstance(exc.value.cause, NotFoundError)
        assert exc.value.status_code == 404
        assert exc.value.created_ids == []
        assert Payment.query.count() == 0

    def test_rejects_empty_and_duplicate_items(self, payments, student, fee):
        with pytest.raises(ValidationError, match="at least one fee item"):
            payments.record_payments(student.id, [], date(2025, 3, 1), "cash")
        with pytest.raises(ValidationError, match="already added"):
            payments.record_payments(
                student.id,
                [{"fee_structure_id": fee.id}, {"fee_structure_id": fee.id}],
                date(2025, 3, 1),
                "cash",
            )
        assert payments.get_all() == []


def test_context_user_overrides_supplied_creator(payments, student, fee, make_payment_data):
    payment = payments.add(make_payment_data(student.id, fee.id, created_by="someone-else"))
    assert payment.created_by == "admin-1"


def test_batch_items_must_be_mappings(payments, student, fee):
    with pytest.raises(ValidationError) as exc:
        payments.record_payments(student.id, [{"fee_structure_id": fee.id}, "bus"], date(2025, 3, 1), "cash")
    assert exc.value.field == "items"
    assert payments.get_all() == []
