# Overview: Service-layer operations for the session cookie; issues, refreshes and clears sessions.

"""
Session Store Adapter

WHY: The signed token is the whole session. There is no server-side session
table, so this module only moves tokens between the codec and the cookie.

SLIDING EXPIRY: every request that passes the request gate re-issues the
token with expires = now + SESSION_DURATION_HOURS (24h by default). The
window is measured from the latest request, not from login.

LOGOUT: the cookie is deleted outright. There is no revocation list, so a
copied token stays valid until its own expiry.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from flask import current_app, g, has_request_context, request as flask_request

from ..extensions import db
from ..models import Lorry, Territory, User
from ..permissions import Role
from ..time_utils import utcnow
from .token_service import SessionPayload, SessionUser, decode_session, encode_session


def session_duration() -> timedelta:
    return timedelta(hours=current_app.config.get("SESSION_DURATION_HOURS", 24))


def cookie_name() -> str:
    return current_app.config.get("SHOP_SESSION_COOKIE", "session")


def new_expiry(now: datetime | None = None) -> datetime:
    """Absolute expiry one session duration from now, whole seconds."""
    now = now or utcnow()
    return now.replace(microsecond=0) + session_duration()


def issue_session(user: User, territory_id: int) -> tuple[SessionPayload, str]:
    """
    Create a session for a freshly authenticated user.

    Returns (payload, token). The caller decides whether login rules allow
    this territory; this function only packages it.
    """
    payload = SessionPayload(
        user=SessionUser(
            id=user.id,
            username=user.username,
            role=user.role,
            lorry_id=user.lorry_id,
        ),
        territory_id=territory_id,
        expires=new_expiry(),
    )
    return payload, encode_session(payload)


def update_session(payload: SessionPayload) -> tuple[SessionPayload, str]:
    """Slide the expiry forward and re-sign. Identity and territory are unchanged."""
    refreshed = payload.with_expiry(new_expiry())
    return refreshed, encode_session(refreshed)


def read_session(req=None) -> SessionPayload | None:
    """
    Decode the session cookie of a request (the active one by default).

    Returns None for a missing, invalid or expired token, and, when
    REVALIDATE_TERRITORY is on, for a session whose territory context no
    longer holds.
    """
    req = req if req is not None else flask_request
    payload = decode_session(req.cookies.get(cookie_name()))
    if payload is None:
        return None

    if current_app.config.get("REVALIDATE_TERRITORY") and not territory_context_holds(payload):
        return None

    return payload


def territory_context_holds(payload: SessionPayload) -> bool:
    """
    Check the session territory against current data.

    - the territory must still exist
    - the user must still exist with the role the token carries
    - a REP must still be bound to the lorry the token carries, and that
      lorry must still sit in the session territory
    """
    territory = db.session.get(Territory, payload.territory_id)
    if territory is None:
        return False

    user = db.session.get(User, payload.user.id)
    if user is None or user.role != payload.user.role:
        return False

    if payload.user.role != Role.REP:
        return True

    if user.lorry_id is None or user.lorry_id != payload.user.lorry_id:
        return False
    lorry = db.session.get(Lorry, user.lorry_id)
    return lorry is not None and lorry.territory_id == payload.territory_id


def _mark_cookie_written() -> None:
    # Tells the request gate not to refresh over a cookie set by the view
    if has_request_context():
        g.session_cookie_written = True


def cookie_written() -> bool:
    return bool(g.get("session_cookie_written"))


def set_session_cookie(response, token: str, expires: datetime):
    """Attach the session cookie: HTTP-only, expiring with the payload."""
    _mark_cookie_written()
    response.set_cookie(
        cookie_name(),
        token,
        expires=expires,
        httponly=True,
        secure=bool(current_app.config.get("SESSION_COOKIE_SECURE")),
        samesite="Lax",
        path="/",
    )
    return response


def clear_session_cookie(response):
    _mark_cookie_written()
    response.delete_cookie(
        cookie_name(),
        path="/",
        httponly=True,
        secure=bool(current_app.config.get("SESSION_COOKIE_SECURE")),
        samesite="Lax",
    )
    return response
