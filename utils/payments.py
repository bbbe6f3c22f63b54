"""Payment recording.

Creating a payment copies the student's name and roll number and the fee
structure's name onto the payment row. The copies are taken once, at
creation, and are never refreshed: renaming a student later leaves older
payments showing the old name, and changing ``student_id`` or
``fee_structure_id`` through :meth:`PaymentRepository.update` does not
re-copy them either.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, List, Mapping, Optional, Union

from sqlalchemy.exc import SQLAlchemyError

from models import FeeStructure, Payment, Student, new_id
from utils.auth import SessionContext
from utils.errors import FeeDeskError, NotFoundError, PaymentBatchError, ValidationError
from utils.receipts import generate_receipt_number, item_receipt_number
from utils.repository import Repository
from utils.timezone_helpers import utc_now
from utils.updates import PaymentUpdate
from utils.validation import coerce_amount, coerce_date, validate_payment

logger = logging.getLogger(__name__)

_FIELDS = (
    "student_id",
    "fee_structure_id",
    "amount",
    "payment_date",
    "payment_method",
    "receipt_number",
    "status",
    "created_by",
)


class PaymentRepository(Repository):
    model = Payment
    entity = "Payment"

    def __init__(self, context: Optional[SessionContext] = None, session=None):
        super().__init__(session)
        self.context = context

    def _query(self):
        return self.session.query(Payment).order_by(
            Payment.payment_date.desc(), Payment.created_at.desc(), Payment.id.desc()
        )

    def _with_creator(self, data: Mapping[str, Any]) -> dict:
        payload = dict(data)
        # With a signed-in user the creator is always that user
        if self.context is not None:
            payload["created_by"] = self.context.uid
        return payload

    def add(self, data: Mapping[str, Any], commit: bool = True) -> Payment:
        payload = self._with_creator(data)
        validate_payment(payload)

        student = self.session.get(Student, payload["student_id"])
        if student is None:
            raise NotFoundError("Student", payload["student_id"])
        fee = self.session.get(FeeStructure, payload["fee_structure_id"])
        if fee is None:
            raise NotFoundError("Fee structure", payload["fee_structure_id"])

        now = utc_now()
        payment = Payment(
            id=new_id(),
            student_id=student.id,
            student_name=student.name,
            roll_number=student.roll_number,
            fee_structure_id=fee.id,
            fee_name=fee.name,
            amount=coerce_amount(payload["amount"]),
            payment_date=coerce_date(payload["payment_date"], "payment_date", "Payment date"),
            payment_method=payload["payment_method"],
            receipt_number=payload["receipt_number"],
            status=payload["status"],
            created_by=payload["created_by"],
            created_at=now,
            updated_at=now,
        )
        self._save(payment, commit=commit)
        logger.info(
            "Recorded payment %s receipt=%s student=%s amount=%s",
            payment.id, payment.receipt_number, student.id, payment.amount,
        )
        return payment

    def update(self, payment_id: str, changes: Union[PaymentUpdate, Mapping[str, Any]]) -> Payment:
        payment = self._require(payment_id)
        patch = PaymentUpdate.coerce(changes).changes()
        merged = {field: getattr(payment, field) for field in _FIELDS}
        merged.update(patch)
        validate_payment(merged)

        for field, value in patch.items():
            if field == "amount":
                value = coerce_amount(value)
            elif field == "payment_date":
                value = coerce_date(value, "payment_date", "Payment date")
            setattr(payment, field, value)
        payment.updated_at = utc_now()
        self._save(payment)
        return payment

    def get_by_student(self, student_id: str) -> List[Payment]:
        return self._read(
            f"payments for student {student_id}",
            lambda: self._query().filter(Payment.student_id == student_id).all(),
            [],
        )

    def get_by_date_range(self, start: Union[date, str], end: Union[date, str]) -> List[Payment]:
        """Payments with ``start <= payment_date <= end``, newest first."""
        start = coerce_date(start, "start", "Start date")
        end = coerce_date(end, "end", "End date")
        if start > end:
            return []
        return self._read(
            f"payments between {start} and {end}",
            lambda: self._query().filter(Payment.payment_date >= start, Payment.payment_date <= end).all(),
            [],
        )

    def delete(self, payment_id: str) -> bool:
        payment = self._require(payment_id)
        self._remove(payment)
        logger.info("Deleted payment %s", payment_id)
        return True

    def record_payments(
        self,
        student_id: str,
        items: Iterable[Mapping[str, Any]],
        payment_date: Union[date, str],
        payment_method: str,
        status: str = "paid",
        receipt_number: Optional[str] = None,
    ) -> List[Payment]:
        """Record one payment per fee item from a single submission.

        Each item needs ``fee_structure_id`` and may carry ``amount`` (the fee
        structure's amount otherwise). Receipts are numbered ``<base>-1``,
        ``<base>-2``... All items are written in one transaction; if any item
        fails nothing is kept and :class:`PaymentBatchError` is raised.
        """
        items = list(items)
        if not items:
            raise ValidationError("Please add at least one fee item", field="items")
        seen = set()
        for item in items:
            if not isinstance(item, Mapping):
                raise ValidationError("Each fee item must be an object with a fee_structure_id", field="items")
            fee_id = item.get("fee_structure_id")
            if fee_id in seen:
                raise ValidationError("This fee type is already added to the payment", field="items")
            seen.add(fee_id)

        base = (receipt_number or "").strip() or generate_receipt_number()
        created: List[Payment] = []
        for index, item in enumerate(items, start=1):
            try:
                amount = item.get("amount")
                if amount is None:
                    fee = self._find_fee(item.get("fee_structure_id"))
                    amount = fee.amount
                payment = self.add(
                    {
                        "student_id": student_id,
                        "fee_structure_id": item.get("fee_structure_id"),
                        "amount": amount,
                        "payment_date": payment_date,
                        "payment_method": payment_method,
                        "receipt_number": item_receipt_number(base, index),
                        "status": status,
                    },
                    commit=False,
                )
            except (FeeDeskError, SQLAlchemyError) as exc:
                self.session.rollback()
                logger.warning("Payment batch rolled back at item %d: %s", index, exc)
                raise PaymentBatchError(index, exc) from exc
            created.append(payment)

        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Payment batch commit failed")
            raise PaymentBatchError(len(items), exc) from exc
        return created

    def _find_fee(self, fee_id: Optional[str]) -> FeeStructure:
        fee = self.session.get(FeeStructure, fee_id) if fee_id else None
        if fee is None:
            raise NotFoundError("Fee structure", fee_id)
        return fee
