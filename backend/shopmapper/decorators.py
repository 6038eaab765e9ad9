# Overview: Request decorators applying the session and authorization guard to routes.

from functools import wraps
from flask import request, jsonify, g

from .services import session_service, authorization_service, security_service
from .permissions import validate_operation_code
from .services.authorization_service import PermissionDeniedError


def _session_territory():
    session = getattr(g, "current_session", None)
    return session.territory_id if session else None


def log_denial(exc: PermissionDeniedError, action: str | None = None) -> None:
    session = getattr(g, "current_session", None)
    event_type = "SELF_DELETE_DENIED" if exc.code == authorization_service.SELF_DELETE else "PERMISSION_DENIED"
    security_service.log_security_event(
        user_id=session.user.id if session else None,
        event_type=event_type,
        success=False,
        action=action or request.method,
        reason=str(exc),
        territory_id=_session_territory(),
    )


def denial_response(exc: PermissionDeniedError, action: str | None = None):
    """401 for a missing session, 403 (generic message) for everything else."""
    if exc.unauthenticated:
        return jsonify({"error": "Authentication required"}), 401
    log_denial(exc, action)
    return jsonify({"error": "Permission denied"}), 403


def require_session(f):
    """
    Require a valid session cookie.

    Decodes the cookie itself rather than trusting whatever the request gate
    stored, and sets:
    - g.current_session: the decoded SessionPayload

    Returns 401 if the cookie is missing, invalid or expired.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        session = session_service.read_session(request)
        if session is None:
            return jsonify({"error": "Authentication required"}), 401

        g.current_session = session
        return f(*args, **kwargs)

    return decorated_function


def require_operation(operation_code: str):
    """
    Require the session role to be allowed operation_code by the policy table.

    Apply after @require_session. Denials are logged as security events.
    Raises ValueError at import time for a code missing from the policy table.
    """
    if not validate_operation_code(operation_code):
        raise ValueError(f"Unknown operation code: {operation_code}")

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            session = getattr(g, "current_session", None)
            decision = authorization_service.authorize_operation(session, operation_code)
            if not decision:
                exc = PermissionDeniedError(decision.reason or "Unauthorized", code=decision.code)
                return denial_response(exc, action=operation_code)

            return f(*args, **kwargs)

        return decorated_function
    return decorator
