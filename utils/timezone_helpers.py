from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, the form stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today() -> date:
    return utc_now().date()


def parse_date(value: Any) -> date | None:
    """Convert a date, datetime or ``YYYY-MM-DD`` string to a date.

    Returns None for empty or unparseable input.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def format_date(value: Any, fmt: str = "%Y-%m-%d") -> str:
    d = parse_date(value)
    if d:
        return d.strftime(fmt)
    if isinstance(value, str):
        return value
    return ""
