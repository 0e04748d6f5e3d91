"""User accounts and the login / signup actions."""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import bcrypt
import structlog
from pydantic import BaseModel, Field, ValidationError, field_validator

from smartshop.core.results import ResultCode

logger = structlog.get_logger(__name__)


class Credentials(BaseModel):
    """Login / signup form."""

    email: str
    password: str = Field(min_length=6)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        value = value.strip().lower()
        local, _, domain = value.partition("@")
        if not local or not domain:
            raise ValueError("invalid email address")
        return value


@dataclass
class User:
    """A registered user.

    Attributes:
        id: Stable user identifier
        email: Normalized email address
        password_hash: bcrypt hash
    """

    id: str
    email: str
    password_hash: bytes

    @property
    def name(self) -> str:
        return self.email.split("@")[0]


class UserStore:
    """Thread-safe in-memory user accounts with bcrypt password hashes."""

    def __init__(self):
        self._lock = threading.Lock()
        self._users: dict[str, User] = {}

    def get_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            return self._users.get(email.strip().lower())

    def create(self, email: str, password: str) -> Optional[User]:
        """Create a user; returns None if the email is taken."""
        password_hash = bcrypt.hashpw(password.encode(), bcrypt.gensalt())
        with self._lock:
            if email in self._users:
                return None
            user = User(id=str(uuid.uuid4()), email=email, password_hash=password_hash)
            self._users[email] = user
            return user

    def verify(self, email: str, password: str) -> Optional[User]:
        """The user if ``password`` matches, else None."""
        user = self.get_by_email(email)
        if user is None:
            return None
        if not bcrypt.checkpw(password.encode(), user.password_hash):
            return None
        return user


def _parse(data: Mapping[str, Any]) -> Optional[Credentials]:
    try:
        return Credentials(email=data.get("email", ""), password=data.get("password", ""))
    except ValidationError as e:
        logger.info("auth.invalid_form", errors=e.error_count())
        return None


def authenticate(users: UserStore, data: Mapping[str, Any]) -> tuple[ResultCode, Optional[User]]:
    """Check login form data.

    Returns:
        (USER_LOGGED_IN, user), (INVALID_CREDENTIALS, None) or
        (INVALID_SUBMISSION, None)
    """
    credentials = _parse(data)
    if credentials is None:
        return ResultCode.INVALID_SUBMISSION, None

    user = users.verify(credentials.email, credentials.password)
    if user is None:
        return ResultCode.INVALID_CREDENTIALS, None
    return ResultCode.USER_LOGGED_IN, user


def signup(users: UserStore, data: Mapping[str, Any]) -> tuple[ResultCode, Optional[User]]:
    """Register from signup form data.

    Returns:
        (USER_CREATED, user), (USER_ALREADY_EXISTS, None) or
        (INVALID_SUBMISSION, None)
    """
    credentials = _parse(data)
    if credentials is None:
        return ResultCode.INVALID_SUBMISSION, None

    user = users.create(credentials.email, credentials.password)
    if user is None:
        return ResultCode.USER_ALREADY_EXISTS, None
    logger.info("auth.user_created", user_id=user.id)
    return ResultCode.USER_CREATED, user
