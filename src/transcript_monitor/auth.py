"""Password handling for registered users.

This module is independent from the scraper: it only knows how to hash,
verify and reset passwords.
"""

from __future__ import annotations

import base64
import secrets
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

import bcrypt

from .exceptions import RandomnessError
from .utils import format_timestamp, parse_timestamp, utcnow

STANDARD_USER = "standard"
STAFF_USER = "staff"
ADMIN_USER = "admin"

USER_TYPES = (STANDARD_USER, STAFF_USER, ADMIN_USER)

DEFAULT_COST = 10
_RESET_PASSWORD_BYTES = 6


def authenticate(stored_hash: bytes | str, attempt: str) -> bool:
    """Check ``attempt`` against its stored bcrypt hash."""

    if isinstance(stored_hash, str):
        stored_hash = stored_hash.encode("ascii")
    if not stored_hash:
        return False
    try:
        return bcrypt.checkpw(attempt.encode("utf-8"), stored_hash)
    except ValueError:
        return False


def set_password(password: str, *, rounds: int = DEFAULT_COST) -> bytes:
    """Return the bcrypt hash to store for ``password``."""

    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))


def reset_password(*, rounds: int = DEFAULT_COST) -> tuple[str, bytes]:
    """Generate a random password and return it together with its hash."""

    try:
        raw = secrets.token_bytes(_RESET_PASSWORD_BYTES)
    except (OSError, NotImplementedError) as exc:
        raise RandomnessError(f"cannot generate password: {exc}") from exc
    password = base64.b64encode(raw).decode("ascii")
    return password, set_password(password, rounds=rounds)


@dataclass(slots=True)
class User:
    """Information stored for a registered user."""

    password_hash: bytes = b""
    change_password: bool = False
    type: str = STANDARD_USER
    created: datetime = field(default_factory=utcnow)

    def authenticate(self, password: str) -> bool:
        return authenticate(self.password_hash, password)

    def set_password(self, password: str, *, rounds: int = DEFAULT_COST) -> None:
        self.password_hash = set_password(password, rounds=rounds)

    def reset_password(self, *, rounds: int = DEFAULT_COST) -> str:
        """Generate a new password that must be changed right after login."""

        password, password_hash = reset_password(rounds=rounds)
        self.password_hash = password_hash
        self.change_password = True
        return password

    def to_payload(self) -> dict[str, Any]:
        return {
            "password_hash": base64.b64encode(self.password_hash).decode("ascii"),
            "change_password": self.change_password,
            "type": self.type,
            "created": format_timestamp(self.created),
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "User":
        user_type = str(payload.get("type") or STANDARD_USER)
        if user_type not in USER_TYPES:
            raise ValueError(f"unknown user type: {user_type}")
        raw_hash = str(payload.get("password_hash") or "")
        return cls(
            password_hash=base64.b64decode(raw_hash) if raw_hash else b"",
            change_password=bool(payload.get("change_password", False)),
            type=user_type,
            created=parse_timestamp(payload.get("created")) or utcnow(),
        )
