# Overview: Service-layer operations for auth; password hashing and the login state machine.

"""
Authentication Service

WHY: A session is only issued after both the credentials and the chosen
territory check out. Uses bcrypt for password hashing.

LOGIN STATE MACHINE:
    Anonymous -> Authenticating -> Authenticated | Denied

- Authenticating requires username, password and a numeric territoryId.
- Credentials: username lookup, then bcrypt.checkpw (timing-safe). Unknown
  usernames are checked against a dummy hash so both paths cost the same.
- Territory: a REP may only sign in to the territory of their bound lorry;
  ADMIN and VIEWER may pick any existing territory.
- Authenticated: a 24h session is issued (see session_service).

Denials carry a reason code for logging and the HTTP layer; no session is
issued for any denial.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import bcrypt
from flask import current_app

from ..extensions import db
from ..models import Territory, User
from ..permissions import Role
from ..time_utils import utcnow
from ..validation import ValidationError, coerce_int
from . import session_service
from .token_service import SessionPayload


INVALID_INPUT = "INVALID_INPUT"
INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
TERRITORY_DENIED = "TERRITORY_DENIED"

MIN_PASSWORD_LENGTH = 8

_dummy_hash: bytes | None = None


class PasswordValidationError(Exception):
    """Raised when password doesn't meet requirements."""
    pass


def validate_password_strength(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def _rounds() -> int:
    return int(current_app.config.get("BCRYPT_ROUNDS", 12))


def hash_password(password: str) -> str:
    """Validate and bcrypt-hash a password. Cost factor comes from BCRYPT_ROUNDS."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=_rounds())
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns False for malformed hashes instead of raising.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def _burn_password_check(password: str) -> None:
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds=_rounds()))
    bcrypt.checkpw(password.encode('utf-8'), _dummy_hash)


def authenticate(username: str, password: str) -> User | None:
    """
    Check credentials only. Returns the User or None.

    Does not look at territories; see login().
    """
    user = db.session.query(User).filter_by(username=username).first()
    if user is None:
        _burn_password_check(password)
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def territory_allowed(user: User, territory_id: int) -> bool:
    """
    Login-time territory rule.

    REP: territory must equal the bound lorry's territory.
    Others: territory must exist.
    """
    if user.role == Role.REP:
        return user.lorry is not None and user.lorry.territory_id == territory_id
    return db.session.get(Territory, territory_id) is not None


@dataclass(frozen=True)
class LoginOutcome:
    """Result of login(). payload/token are set iff authenticated."""
    authenticated: bool
    code: str | None = None
    reason: str | None = None
    user: User | None = None
    payload: SessionPayload | None = None
    token: str | None = None


def _denied(code: str, reason: str, user: User | None = None) -> LoginOutcome:
    return LoginOutcome(authenticated=False, code=code, reason=reason, user=user)


def login(form: Mapping[str, Any]) -> LoginOutcome:
    """
    Run the login state machine over submitted form fields.

    Fields: username, password, territoryId.
    """
    username = (form.get("username") or "").strip()
    password = form.get("password") or ""
    raw_territory = form.get("territoryId")

    if not username or not password or raw_territory in (None, ""):
        return _denied(INVALID_INPUT, "username, password and territoryId are required")
    try:
        territory_id = coerce_int(raw_territory, "territoryId")
    except ValidationError as exc:
        return _denied(INVALID_INPUT, str(exc))

    user = authenticate(username, password)
    if user is None:
        return _denied(INVALID_CREDENTIALS, "Invalid credentials")

    if not territory_allowed(user, territory_id):
        return _denied(
            TERRITORY_DENIED,
            f"User {user.username} may not sign in to territory {territory_id}",
            user=user,
        )

    user.last_login_at = utcnow()
    db.session.commit()

    payload, token = session_service.issue_session(user, territory_id)
    return LoginOutcome(authenticated=True, user=user, payload=payload, token=token)
