from __future__ import annotations

from typing import List, Optional


class FeeDeskError(Exception):
    """Base class for domain errors surfaced to callers with a readable message."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(FeeDeskError):
    """Bad input shape or value, raised before anything is written."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.field:
            data["field"] = self.field
        return data


class NotFoundError(FeeDeskError):
    status_code = 404

    def __init__(self, entity: str, record_id: Optional[str] = None):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.record_id = record_id


class ConflictError(FeeDeskError):
    """A delete refused because payments still reference the record."""

    status_code = 409


class PaymentBatchError(FeeDeskError):
    """A multi-item payment submission failed and was rolled back.

    ``index`` is the 1-based position of the fee item that failed and
    ``cause`` the underlying error. ``created_ids`` lists payments that
    remain committed, which is empty because the batch is one transaction.
    """

    def __init__(self, index: int, cause: Exception, created_ids: Optional[List[str]] = None):
        if isinstance(cause, FeeDeskError):
            message = f"Fee item {index}: {cause.message}"
            self.status_code = cause.status_code
        else:
            message = "Failed to record payment. Please try again."
            self.status_code = 500
        super().__init__(message)
        self.index = index
        self.cause = cause
        self.created_ids = list(created_ids or [])

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["item"] = self.index
        data["created_ids"] = self.created_ids
        return data
