from __future__ import annotations

from functools import wraps
from typing import Callable, TypeVar, Any, Optional, cast
from flask import g, jsonify, request, session

from utils.errors import ValidationError

F = TypeVar("F", bound=Callable[..., Any])


def current_context() -> Optional["SessionContext"]:
    """The signed-in user for this request, or None."""
    from utils.auth import SessionContext  # models import utils; avoid a cycle at load

    return SessionContext.from_session(session)


def login_required(func: F) -> F:
    """Decorator that requires a signed-in user.

    - If the session carries a user, stores it on ``g.auth`` and proceeds.
    - Otherwise, answers 401 with a JSON error body.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        context = current_context()
        if context is None:
            return jsonify({"error": "Please sign in to continue."}), 401
        g.auth = context
        return func(*args, **kwargs)

    return cast(F, wrapper)


def json_body() -> dict:
    """Request JSON object, or an empty dict when the body is missing or not an object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def require_confirmation() -> None:
    """Destructive endpoints need ``?confirm=1`` before anything is removed."""
    if (request.args.get("confirm") or "").strip().lower() not in ("1", "true", "yes"):
        raise ValidationError("Please confirm the delete before continuing.", field="confirm")
