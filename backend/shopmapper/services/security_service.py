# Overview: Service-layer operations for security auditing; records denials and account events.

"""
Security Event Logging

WHY: Immutable audit trail of authorization decisions and account changes.
Denials are always logged; grants are not (noise). Sign-ins are logged both ways.

event_type values:
- LOGIN_SUCCEEDED
- LOGIN_DENIED
- PERMISSION_DENIED
- SELF_DELETE_DENIED
- SCOPE_DENIED
- USER_CREATED
- USER_DELETED
"""

from datetime import timedelta

from flask import has_request_context, request

from ..extensions import db
from ..models import SecurityEvent
from ..time_utils import utcnow


def log_security_event(
    user_id: int | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    territory_id: int | None = None,
) -> SecurityEvent:
    """
    Log security event to audit trail with territory context.

    Client context (path, ip, user agent) is filled from the active request
    when the caller does not pass it.

    Commits immediately: callers invoke this either before any mutation has
    started (denials) or after their own commit (account events).
    """
    if has_request_context():
        resource = resource if resource is not None else request.path
        ip_address = ip_address if ip_address is not None else request.remote_addr
        user_agent = user_agent if user_agent is not None else request.headers.get("User-Agent")

    event = SecurityEvent(
        user_id=user_id,
        territory_id=territory_id,
        event_type=event_type,
        resource=(resource or "")[:128] or None,
        action=action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=(user_agent or "")[:512] or None,
        occurred_at=utcnow(),
    )

    db.session.add(event)
    db.session.commit()

    return event


def list_security_events(
    *,
    event_type: str | None = None,
    user_id: int | None = None,
    limit: int = 100,
) -> list[SecurityEvent]:
    query = db.session.query(SecurityEvent)
    if event_type:
        query = query.filter(SecurityEvent.event_type == event_type)
    if user_id is not None:
        query = query.filter(SecurityEvent.user_id == user_id)
    return query.order_by(SecurityEvent.occurred_at.desc(), SecurityEvent.id.desc()).limit(limit).all()


def cleanup_security_events(retention_days: int = 90) -> int:
    """
    Delete security events older than the retention window.

    Returns count of events deleted.
    """
    cutoff = utcnow() - timedelta(days=retention_days)
    deleted = db.session.query(SecurityEvent).filter(
        SecurityEvent.occurred_at < cutoff
    ).delete(synchronize_session=False)
    db.session.commit()
    return deleted
