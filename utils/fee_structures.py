from __future__ import annotations

import logging
from typing import Any, List, Mapping, Union

from sqlalchemy import or_

from models import FeeStructure, Payment, new_id
from utils.errors import ConflictError
from utils.repository import Repository
from utils.timezone_helpers import utc_now
from utils.updates import FeeStructureUpdate
from utils.validation import coerce_amount, optional_text, validate_fee_structure

logger = logging.getLogger(__name__)

_FIELDS = ("name", "amount", "frequency", "class_name", "description")


class FeeStructureRepository(Repository):
    model = FeeStructure
    entity = "Fee structure"

    def _query(self):
        return self.session.query(FeeStructure).order_by(FeeStructure.name.asc(), FeeStructure.id.asc())

    def add(self, data: Mapping[str, Any]) -> FeeStructure:
        validate_fee_structure(data)
        now = utc_now()
        fee = FeeStructure(
            id=new_id(),
            name=data["name"],
            amount=coerce_amount(data["amount"]),
            frequency=data["frequency"],
            class_name=optional_text(data.get("class_name")),
            description=optional_text(data.get("description")),
            created_at=now,
            updated_at=now,
        )
        self._save(fee)
        logger.info("Created fee structure %s (%s %s)", fee.id, fee.amount, fee.frequency)
        return fee

    def update(self, fee_id: str, changes: Union[FeeStructureUpdate, Mapping[str, Any]]) -> FeeStructure:
        fee = self._require(fee_id)
        patch = FeeStructureUpdate.coerce(changes).changes()
        merged = {field: getattr(fee, field) for field in _FIELDS}
        merged.update(patch)
        validate_fee_structure(merged)

        for field, value in patch.items():
            if field == "amount":
                value = coerce_amount(value)
            elif field in ("class_name", "description"):
                value = optional_text(value)
            setattr(fee, field, value)
        fee.updated_at = utc_now()
        self._save(fee)
        return fee

    def get_by_class(self, class_name: str) -> List[FeeStructure]:
        """Fee structures that apply to ``class_name``, including unscoped ones."""
        return self._read(
            f"fee structures for class {class_name}",
            lambda: self._query()
            .filter(or_(FeeStructure.class_name == class_name, FeeStructure.class_name.is_(None)))
            .all(),
            [],
        )

    def delete(self, fee_id: str) -> bool:
        fee = self._require(fee_id)
        if self._referenced_by_payment(Payment.fee_structure_id, fee_id):
            raise ConflictError("Cannot delete fee structure that has payments")
        self._remove(fee)
        logger.info("Deleted fee structure %s", fee_id)
        return True
