from __future__ import annotations

import random
from datetime import date
from typing import Optional

from models import Payment
from utils.timezone_helpers import format_date, today


def generate_receipt_number(on: Optional[date] = None, rng: Optional[random.Random] = None) -> str:
    """Suggest a receipt number like ``R20250314-0042``.

    The value is only a default for the payment form; receipt numbers are
    editable and are not checked for uniqueness.
    """
    on = on or today()
    suffix = (rng or random).randrange(10000)
    return f"R{on:%Y%m%d}-{suffix:04d}"


def item_receipt_number(base: str, index: int) -> str:
    """Receipt number for the ``index``-th (1-based) fee item of one submission."""
    return f"{base}-{index}"


def receipt_payload(payment: Payment, school_name: str) -> dict:
    """Printable receipt for one payment, laid out like the paper slip."""
    amount = float(payment.amount)
    return {
        "school_name": school_name,
        "title": "PAYMENT RECEIPT",
        "receipt_number": payment.receipt_number,
        "student_name": payment.student_name,
        "roll_number": payment.roll_number,
        "payment_date": format_date(payment.payment_date),
        "fee_name": payment.fee_name,
        "payment_method": payment.payment_method.replace("_", " ").upper(),
        "status": payment.status.upper(),
        "items": [{"description": payment.fee_name, "amount": amount}],
        "total": amount,
        "footer": [
            "This is a computer-generated receipt and does not require a signature.",
            "Thank you for your payment!",
        ],
    }
