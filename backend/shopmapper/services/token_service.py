# Overview: Service-layer operations for the session token; signs and verifies session payloads.

"""
Session Token Codec

WHY: All session state lives client-side. The token must be tamper-evident
so a client cannot forge or elevate role, lorry binding or territory by
editing the cookie.

FORMAT: HS256 JSON Web Token signed with SECRET_KEY. Claims:
- user:        {id, username, role, lorryId}
- territoryId: active territory for every scoped query
- expires:     ISO-8601 UTC expiry (mirrors the cookie expiry)
- exp:         the same instant in epoch seconds, enforced by the JWT layer

decode_session() never raises on bad input. A bad signature, an expired
token, a malformed token or malformed claims all yield None, and callers
treat None exactly like a missing cookie.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from flask import current_app
from jose import jwt, JWTError

from ..permissions import is_valid_role
from ..time_utils import parse_iso_datetime, to_epoch_seconds, to_utc_z


ALGORITHM = "HS256"


@dataclass(frozen=True)
class SessionUser:
    id: int
    username: str
    role: str
    lorry_id: int | None


@dataclass(frozen=True)
class SessionPayload:
    """
    Decoded session. Immutable: a refresh produces a new payload.

    expires is a naive UTC datetime with whole-second precision.
    """
    user: SessionUser
    territory_id: int
    expires: datetime

    def with_expiry(self, expires: datetime) -> "SessionPayload":
        return replace(self, expires=expires)

    def to_claims(self) -> dict:
        return {
            "user": {
                "id": self.user.id,
                "username": self.user.username,
                "role": self.user.role,
                "lorryId": self.user.lorry_id,
            },
            "territoryId": self.territory_id,
            "expires": to_utc_z(self.expires),
            "exp": to_epoch_seconds(self.expires),
        }

    @classmethod
    def from_claims(cls, claims: dict) -> "SessionPayload":
        """Raises KeyError/TypeError/ValueError on malformed claims."""
        user = claims["user"]
        lorry_id = user.get("lorryId")
        role = str(user["role"])
        if not is_valid_role(role):
            raise ValueError(f"unknown role {role!r}")
        expires = parse_iso_datetime(claims["expires"])
        if expires is None:
            raise ValueError("expires missing")
        return cls(
            user=SessionUser(
                id=_strict_int(user["id"]),
                username=str(user["username"]),
                role=role,
                lorry_id=_strict_int(lorry_id) if lorry_id is not None else None,
            ),
            territory_id=_strict_int(claims["territoryId"]),
            expires=expires,
        )

    def to_dict(self) -> dict:
        return {
            "user": {
                "id": self.user.id,
                "username": self.user.username,
                "role": self.user.role,
                "lorry_id": self.user.lorry_id,
            },
            "territory_id": self.territory_id,
            "expires": to_utc_z(self.expires),
        }


def _strict_int(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected integer, got {type(value).__name__}")
    return value


def _secret(secret_key: str | None) -> str:
    if secret_key is not None:
        return secret_key
    return current_app.config["SECRET_KEY"]


def encode_session(payload: SessionPayload, secret_key: str | None = None) -> str:
    """Sign a payload. secret_key defaults to the app's SECRET_KEY."""
    return jwt.encode(payload.to_claims(), _secret(secret_key), algorithm=ALGORITHM)


def decode_session(token: str | None, secret_key: str | None = None) -> SessionPayload | None:
    """
    Verify and decode a token.

    Returns None ("Invalid") if the token is missing, malformed, carries a
    bad signature, has expired, or decodes to claims of the wrong shape.
    """
    if not token or not isinstance(token, str):
        return None

    try:
        claims = jwt.decode(
            token,
            _secret(secret_key),
            algorithms=[ALGORITHM],
            options={"require_exp": True},
        )
    except JWTError:
        return None

    try:
        return SessionPayload.from_claims(claims)
    except (KeyError, TypeError, ValueError, AttributeError):
        return None
