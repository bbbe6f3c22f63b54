from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Mapping

from utils.errors import ValidationError
from utils.timezone_helpers import parse_date

FREQUENCIES = ("monthly", "quarterly", "annually", "one-time")
PAYMENT_METHODS = ("cash", "check", "bank_transfer", "online")
PAYMENT_STATUSES = ("paid", "pending", "overdue")

_CENTS = Decimal("0.01")
# Largest value a Numeric(10, 2) column holds
MAX_AMOUNT = Decimal("99999999.99")

# Column widths from models.py
_STUDENT_LENGTHS = {
    "name": 100,
    "roll_number": 50,
    "class_name": 50,
    "section": 20,
    "parent_name": 100,
    "contact_number": 20,
    "email": 255,
}
_FEE_LENGTHS = {"name": 100, "class_name": 50}
_PAYMENT_LENGTHS = {"receipt_number": 64, "created_by": 64}

# (field, message) pairs checked in order; the first blank one fails.
_STUDENT_REQUIRED = (
    ("name", "Student name is required"),
    ("roll_number", "Roll number is required"),
    ("class_name", "Class is required"),
    ("parent_name", "Parent name is required"),
    ("contact_number", "Contact number is required"),
    ("address", "Address is required"),
)


def _blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def coerce_amount(value: Any) -> Decimal | None:
    """Return ``value`` as a 2-place Decimal, or None when it is not a number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount.quantize(_CENTS, rounding=ROUND_HALF_UP)


def coerce_date(value: Any, field: str, label: str) -> date:
    parsed = parse_date(value)
    if parsed is None:
        raise ValidationError(f"{label} must be a valid date (YYYY-MM-DD)", field=field)
    return parsed


def _require_amount(data: Mapping[str, Any], message: str) -> None:
    amount = coerce_amount(data.get("amount"))
    if amount is None or amount <= 0:
        raise ValidationError(message, field="amount")
    if amount > MAX_AMOUNT:
        raise ValidationError(f"Amount cannot exceed {MAX_AMOUNT:,}", field="amount")


def _check_lengths(data: Mapping[str, Any], limits: Mapping[str, int]) -> None:
    for field, limit in limits.items():
        value = data.get(field)
        if isinstance(value, str) and len(value) > limit:
            label = field.replace("_", " ").capitalize()
            raise ValidationError(f"{label} must be at most {limit} characters", field=field)


def validate_student(student: Mapping[str, Any]) -> bool:
    for field, message in _STUDENT_REQUIRED:
        if _blank(student.get(field)):
            raise ValidationError(message, field=field)
    if not student.get("admission_date"):
        raise ValidationError("Admission date is required", field="admission_date")
    coerce_date(student.get("admission_date"), "admission_date", "Admission date")
    _check_lengths(student, _STUDENT_LENGTHS)
    return True


def validate_fee_structure(fee_structure: Mapping[str, Any]) -> bool:
    if _blank(fee_structure.get("name")):
        raise ValidationError("Fee name is required", field="name")
    _require_amount(fee_structure, "Valid fee amount is required")
    if fee_structure.get("frequency") not in FREQUENCIES:
        raise ValidationError("Valid frequency is required", field="frequency")
    _check_lengths(fee_structure, _FEE_LENGTHS)
    return True


def validate_payment(payment: Mapping[str, Any]) -> bool:
    if _blank(payment.get("student_id")):
        raise ValidationError("Student ID is required", field="student_id")
    if _blank(payment.get("fee_structure_id")):
        raise ValidationError("Fee structure ID is required", field="fee_structure_id")
    _require_amount(payment, "Valid payment amount is required")
    if not payment.get("payment_date"):
        raise ValidationError("Payment date is required", field="payment_date")
    coerce_date(payment.get("payment_date"), "payment_date", "Payment date")
    if payment.get("payment_method") not in PAYMENT_METHODS:
        raise ValidationError("Valid payment method is required", field="payment_method")
    if _blank(payment.get("receipt_number")):
        raise ValidationError("Receipt number is required", field="receipt_number")
    if payment.get("status") not in PAYMENT_STATUSES:
        raise ValidationError("Valid payment status is required", field="status")
    if _blank(payment.get("created_by")):
        raise ValidationError("Creator information is required", field="created_by")
    _check_lengths(payment, _PAYMENT_LENGTHS)
    return True


def optional_text(value: Any) -> str | None:
    """Trim an optional text field; blank becomes None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None
