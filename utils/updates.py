"""Typed partial updates, one struct per entity.

Each struct enumerates the fields an edit form may change. A field left as
None is not touched; pass an empty string to clear an optional text field.
Denormalized payment fields and audit stamps are not updatable.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Type, TypeVar, Union

from utils.errors import ValidationError

U = TypeVar("U", bound="_Update")


class _Update:
    @classmethod
    def from_mapping(cls: Type[U], data: Mapping[str, Any]) -> U:
        allowed = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - allowed)
        if unknown:
            raise ValidationError(f"Field cannot be updated: {unknown[0]}", field=unknown[0])
        return cls(**dict(data))

    @classmethod
    def coerce(cls: Type[U], changes: Union[U, Mapping[str, Any]]) -> U:
        if isinstance(changes, cls):
            return changes
        if isinstance(changes, Mapping):
            return cls.from_mapping(changes)
        raise TypeError(f"expected {cls.__name__} or mapping, got {type(changes).__name__}")

    def changes(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}


@dataclass
class StudentUpdate(_Update):
    name: Optional[str] = None
    roll_number: Optional[str] = None
    class_name: Optional[str] = None
    section: Optional[str] = None
    parent_name: Optional[str] = None
    contact_number: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    admission_date: Optional[Union[date, str]] = None


@dataclass
class FeeStructureUpdate(_Update):
    name: Optional[str] = None
    amount: Optional[Union[Decimal, float, int, str]] = None
    frequency: Optional[str] = None
    class_name: Optional[str] = None
    description: Optional[str] = None


@dataclass
class PaymentUpdate(_Update):
    # Changing student_id/fee_structure_id does not refresh the copied names
    student_id: Optional[str] = None
    fee_structure_id: Optional[str] = None
    amount: Optional[Union[Decimal, float, int, str]] = None
    payment_date: Optional[Union[date, str]] = None
    payment_method: Optional[str] = None
    receipt_number: Optional[str] = None
    status: Optional[str] = None
