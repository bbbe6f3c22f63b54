"""Sign-in, registration and the explicit session context.

Identity lives in the ``users`` table; passwords are werkzeug hashes. Routes
turn a successful sign-in into a :class:`SessionContext`, keep it in the Flask
session, and hand it to whatever needs to know who is acting (for example the
payment repository, which records ``created_by``).
"""
from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from typing import Any, Mapping, MutableMapping, Optional

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from extensions import db
from models import User, new_id
from utils.errors import FeeDeskError
from utils.security import hash_password, verify_password
from utils.timezone_helpers import utc_now

logger = logging.getLogger(__name__)

SESSION_KEY = "auth_user"

AUTH_MESSAGES = {
    "auth/invalid-email": "The email address is not valid.",
    "auth/user-disabled": "This user has been disabled.",
    "auth/user-not-found": "No user found with this email.",
    "auth/wrong-password": "Incorrect password.",
    "auth/email-already-in-use": "This email is already registered.",
    "auth/weak-password": "Password should be at least 6 characters.",
    "auth/network-request-failed": "Network error. Please check your internet connection.",
}

_STATUS = {
    "auth/invalid-email": 400,
    "auth/weak-password": 400,
    "auth/email-already-in-use": 409,
    "auth/user-disabled": 403,
    "auth/network-request-failed": 503,
}

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class AuthError(FeeDeskError):
    def __init__(self, code: str, message: Optional[str] = None):
        super().__init__(message or AUTH_MESSAGES.get(code, "An unknown error occurred."))
        self.code = code
        self.status_code = _STATUS.get(code, 401)

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


def format_auth_error(error: Any) -> str:
    """Map an auth failure to the fixed message shown on the login/sign-up forms."""
    code = getattr(error, "code", "") or ""
    if code in AUTH_MESSAGES:
        return AUTH_MESSAGES[code]
    message = getattr(error, "message", None) or (str(error) if error else "")
    return message or "An unknown error occurred."


@dataclass(frozen=True)
class SessionContext:
    """Who is signed in. Passed explicitly instead of read from globals."""

    uid: str
    email: str
    display_name: Optional[str] = None
    role: str = "admin"
    school_id: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "SessionContext":
        return cls(
            uid=user.uid,
            email=user.email,
            display_name=user.display_name,
            role=user.role,
            school_id=user.school_id,
        )

    @classmethod
    def from_session(cls, store: Mapping[str, Any]) -> Optional["SessionContext"]:
        data = store.get(SESSION_KEY)
        if not data or not data.get("uid"):
            return None
        return cls(**data)

    def to_dict(self) -> dict:
        return asdict(self)


def normalize_email(email: Any) -> str:
    if not isinstance(email, str):
        raise AuthError("auth/invalid-email")
    return email.strip().lower()


class AuthService:
    def __init__(self, session=None, min_password_length: int = 6):
        self.session = session if session is not None else db.session
        self.min_password_length = min_password_length

    def _check_email(self, email: str) -> None:
        if len(email) > 255 or not _EMAIL_RE.match(email):
            raise AuthError("auth/invalid-email")

    def _lookup(self, email: str) -> Optional[User]:
        try:
            return self.session.query(User).filter(User.email == email).first()
        except OperationalError as exc:
            self.session.rollback()
            raise AuthError("auth/network-request-failed") from exc

    def _commit(self) -> None:
        try:
            self.session.commit()
        except OperationalError as exc:
            self.session.rollback()
            raise AuthError("auth/network-request-failed") from exc
        except SQLAlchemyError:
            self.session.rollback()
            raise

    def register(
        self,
        email: str,
        password: str,
        display_name: str,
        role: str = "admin",
        school_id: Optional[str] = None,
    ) -> SessionContext:
        email = normalize_email(email)
        self._check_email(email)
        if not isinstance(password, str) or len(password) < self.min_password_length:
            raise AuthError(
                "auth/weak-password",
                f"Password should be at least {self.min_password_length} characters.",
            )
        if self._lookup(email) is not None:
            raise AuthError("auth/email-already-in-use")

        now = utc_now()
        user = User(
            uid=new_id(),
            email=email,
            password_hash=hash_password(password),
            display_name=(display_name.strip() or None) if isinstance(display_name, str) else None,
            role=role or "admin",
            school_id=school_id,
            created_at=now,
            last_login=now,
        )
        self.session.add(user)
        try:
            self._commit()
        except IntegrityError as exc:
            # Lost a race with another registration for the same email
            raise AuthError("auth/email-already-in-use") from exc
        logger.info("Registered user %s (%s)", user.uid, user.role)
        return SessionContext.from_user(user)

    def sign_in(self, email: str, password: str) -> SessionContext:
        email = normalize_email(email)
        self._check_email(email)
        user = self._lookup(email)
        if user is None:
            raise AuthError("auth/user-not-found")
        if user.disabled:
            raise AuthError("auth/user-disabled")
        if not isinstance(password, str) or not verify_password(user.password_hash, password):
            raise AuthError("auth/wrong-password")
        user.last_login = utc_now()
        self._commit()
        return SessionContext.from_user(user)

    def get_user_data(self, uid: str) -> Optional[dict]:
        try:
            user = self.session.get(User, uid) if uid else None
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Error fetching user data for %s", uid)
            return None
        return user.to_dict() if user else None

    @staticmethod
    def sign_out(store: MutableMapping[str, Any]) -> None:
        store.pop(SESSION_KEY, None)

    @staticmethod
    def remember(store: MutableMapping[str, Any], context: SessionContext) -> None:
        store[SESSION_KEY] = context.to_dict()
