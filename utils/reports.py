from __future__ import annotations

import csv
from collections import defaultdict
from datetime import date
from decimal import Decimal
from io import StringIO
from typing import Dict, Iterable, List, Optional, Sequence

from models import FeeStructure, Payment, Student
from utils.errors import ValidationError
from utils.timezone_helpers import format_date, parse_date

CSV_HEADERS = ["Receipt No", "Student Name", "Roll Number", "Fee Type", "Amount", "Date", "Method", "Status"]

_ZERO = Decimal("0.00")


def _money(value) -> float:
    return float(value or _ZERO)


def _contains(value: Optional[str], term: str) -> bool:
    return term in (value or "").lower()


def search_students(students: Iterable[Student], term: Optional[str]) -> List[Student]:
    """Case-insensitive match on name, roll number or class."""
    students = list(students)
    term = (term or "").strip().lower()
    if not term:
        return students
    return [
        s for s in students
        if _contains(s.name, term) or _contains(s.roll_number, term) or _contains(s.class_name, term)
    ]


def filter_payments(
    payments: Iterable[Payment],
    start: Optional[date | str] = None,
    end: Optional[date | str] = None,
    class_name: Optional[str] = None,
    status: Optional[str] = None,
    student_id: Optional[str] = None,
    search: Optional[str] = None,
    students: Optional[Iterable[Student]] = None,
) -> List[Payment]:
    """Apply the report/list filters to an already loaded payment list.

    Date bounds are inclusive and each one is optional. The class filter goes
    through the current ``students`` list, since payments carry no class.
    """
    result = list(payments)
    start_d, end_d = parse_date(start), parse_date(end)
    if start_d:
        result = [p for p in result if p.payment_date >= start_d]
    if end_d:
        result = [p for p in result if p.payment_date <= end_d]
    if class_name:
        in_class = {s.id for s in (students or []) if s.class_name == class_name}
        result = [p for p in result if p.student_id in in_class]
    if status:
        result = [p for p in result if p.status == status]
    if student_id:
        result = [p for p in result if p.student_id == student_id]
    term = (search or "").strip().lower()
    if term:
        result = [
            p for p in result
            if _contains(p.student_name, term) or _contains(p.receipt_number, term) or _contains(p.fee_name, term)
        ]
    return result


def payment_stats(payments: Sequence[Payment], students: Iterable[Student]) -> dict:
    by_id = {s.id: s for s in students}
    paid = [p for p in payments if p.status == "paid"]
    total_collected = sum((p.amount for p in paid), _ZERO)

    by_class: Dict[str, Decimal] = defaultdict(lambda: _ZERO)
    by_method: Dict[str, Decimal] = defaultdict(lambda: _ZERO)
    by_type: Dict[str, Decimal] = defaultdict(lambda: _ZERO)
    for p in paid:
        student = by_id.get(p.student_id)
        if student is not None:
            by_class[student.class_name] += p.amount
        by_method[p.payment_method] += p.amount
        by_type[p.fee_name] += p.amount

    return {
        "total_collected": _money(total_collected),
        "pending_amount": _money(sum((p.amount for p in payments if p.status == "pending"), _ZERO)),
        "overdue_amount": _money(sum((p.amount for p in payments if p.status == "overdue"), _ZERO)),
        "payment_count": len(payments),
        "average_payment": _money(total_collected / len(paid)) if paid else 0.0,
        "unique_students": len({p.student_id for p in payments}),
        "collection_by_class": {k: _money(v) for k, v in by_class.items()},
        "collection_by_method": {k: _money(v) for k, v in by_method.items()},
        "collection_by_type": {k: _money(v) for k, v in by_type.items()},
    }


def student_summary(payments: Iterable[Payment], students: Iterable[Student]) -> List[dict]:
    """Per-student totals, highest total paid first."""
    by_id = {s.id: s for s in students}
    grouped: Dict[str, List[Payment]] = defaultdict(list)
    for p in payments:
        grouped[p.student_id].append(p)

    rows = []
    for student_id, items in grouped.items():
        student = by_id.get(student_id)
        rows.append({
            "student_id": student_id,
            "name": student.name if student else "Unknown",
            "roll_number": student.roll_number if student else "Unknown",
            "class_name": student.class_name if student else "Unknown",
            "total_paid": _money(sum((p.amount for p in items if p.status == "paid"), _ZERO)),
            "total_pending": _money(
                sum((p.amount for p in items if p.status in ("pending", "overdue")), _ZERO)
            ),
            "total_payments": len(items),
        })
    rows.sort(key=lambda r: r["total_paid"], reverse=True)
    return rows


def dashboard_summary(
    students: Sequence[Student],
    payments: Sequence[Payment],
    fee_structures: Sequence[FeeStructure],
    recent_limit: int = 5,
) -> dict:
    recent = sorted(payments, key=lambda p: p.payment_date, reverse=True)[:recent_limit]
    return {
        "student_count": len(students),
        "fee_structure_count": len(fee_structures),
        "payment_count": len(payments),
        "total_collected": _money(sum((p.amount for p in payments if p.status == "paid"), _ZERO)),
        "pending_payments": sum(1 for p in payments if p.status == "pending"),
        "recent_payments": [p.to_dict() for p in recent],
    }


def export_csv(payments: Sequence[Payment]) -> str:
    if not payments:
        raise ValidationError("No data to export")
    buf = StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for p in payments:
        writer.writerow([
            p.receipt_number,
            p.student_name,
            p.roll_number,
            p.fee_name,
            f"{p.amount:.2f}",
            format_date(p.payment_date),
            p.payment_method,
            p.status,
        ])
    return buf.getvalue()


def report_filename(start: Optional[date | str], end: Optional[date | str]) -> str:
    return f"fee-report-{format_date(start) or 'all'}-to-{format_date(end) or 'all'}.csv"
