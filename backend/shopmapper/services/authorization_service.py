# Overview: Service-layer authorization guard; decides whether a session may perform an operation.

"""
Authorization Guard

WHY: Every mutating operation re-derives authorization from the decoded
session token. Nothing the client submits (role, user id, territory) is
trusted.

DESIGN PRINCIPLES:
- Fail closed: no session, unknown operation or unlisted role -> denied
- Pure: decisions depend only on the session and the policy table, so the
  guard is testable without a database or request
- Decisions are tagged values; require_* helpers turn a denial into
  PermissionDeniedError for service code that must stop before persisting
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..permissions import get_allowed_roles
from .token_service import SessionPayload


UNAUTHENTICATED = "UNAUTHENTICATED"
ROLE_NOT_ALLOWED = "ROLE_NOT_ALLOWED"
SELF_DELETE = "SELF_DELETE"


class PermissionDeniedError(Exception):
    """Raised when a session may not perform the requested operation."""

    def __init__(self, message: str, code: str = ROLE_NOT_ALLOWED):
        super().__init__(message)
        self.code = code

    @property
    def unauthenticated(self) -> bool:
        return self.code == UNAUTHENTICATED


@dataclass(frozen=True)
class AuthorizationDecision:
    allowed: bool
    code: str | None = None
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed

    def raise_if_denied(self) -> None:
        if not self.allowed:
            raise PermissionDeniedError(self.reason or "Unauthorized", code=self.code or ROLE_NOT_ALLOWED)


ALLOWED = AuthorizationDecision(allowed=True)


def _denied(code: str, reason: str) -> AuthorizationDecision:
    return AuthorizationDecision(allowed=False, code=code, reason=reason)


def authorize(session: SessionPayload | None, allowed_roles: Iterable[str]) -> AuthorizationDecision:
    """Allow iff a session exists and its role is one of allowed_roles."""
    if session is None:
        return _denied(UNAUTHENTICATED, "Authentication required")

    roles = tuple(allowed_roles)
    if session.user.role not in roles:
        return _denied(
            ROLE_NOT_ALLOWED,
            f"Role {session.user.role} may not perform this operation",
        )
    return ALLOWED


def authorize_operation(session: SessionPayload | None, operation_code: str) -> AuthorizationDecision:
    """Apply the policy table entry for operation_code."""
    return authorize(session, get_allowed_roles(operation_code))


def authorize_user_delete(session: SessionPayload | None, target_user_id: int) -> AuthorizationDecision:
    """
    Delete-user check: ADMIN only, and never the caller's own account.

    The self-delete rule holds regardless of role.
    """
    decision = authorize_operation(session, "DELETE_USER")
    if session is not None and session.user.id == target_user_id:
        return _denied(SELF_DELETE, "Cannot delete yourself")
    return decision


def require_operation(session: SessionPayload | None, operation_code: str) -> SessionPayload:
    """
    Raise PermissionDeniedError unless the session may perform operation_code.

    Returns the session so callers can keep a non-optional reference.
    """
    authorize_operation(session, operation_code).raise_if_denied()
    return session


def require_user_delete(session: SessionPayload | None, target_user_id: int) -> SessionPayload:
    authorize_user_delete(session, target_user_id).raise_if_denied()
    return session
