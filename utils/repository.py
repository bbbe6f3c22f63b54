from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import Payment
from utils.errors import NotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Repository:
    """Shared plumbing for the per-entity repositories.

    Read paths swallow store failures (logged, empty result); write paths
    roll the session back and re-raise so the caller knows nothing was saved.
    """

    model: Any = None
    entity = "Record"

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    # -- lookups ---------------------------------------------------------

    def _find(self, record_id: Optional[str]):
        if not record_id:
            return None
        return self.session.get(self.model, record_id)

    def _require(self, record_id: Optional[str]):
        record = self._find(record_id)
        if record is None:
            raise NotFoundError(self.entity, record_id)
        return record

    def _query(self):
        return self.session.query(self.model)

    def _read(self, what: str, fn: Callable[[], T], default: T) -> T:
        try:
            return fn()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Error fetching %s", what)
            return default

    def _referenced_by_payment(self, column, record_id: str) -> bool:
        return self.session.query(Payment.id).filter(column == record_id).first() is not None

    # -- writes ----------------------------------------------------------

    def _save(self, record=None, commit: bool = True) -> None:
        try:
            if record is not None:
                self.session.add(record)
            if commit:
                self.session.commit()
            else:
                self.session.flush()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    def _remove(self, record) -> None:
        try:
            self.session.delete(record)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    # -- common reads ----------------------------------------------------

    def get_one(self, record_id: Optional[str]):
        return self._read(f"{self.entity.lower()} {record_id}", lambda: self._find(record_id), None)

    def get_all(self) -> List[Any]:
        return self._read(f"{self.entity.lower()} list", lambda: self._query().all(), [])
