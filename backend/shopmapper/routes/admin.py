# Overview: Flask routes for the admin views; user, logistics and audit log data.

"""
Admin views (ADMIN only).

The request gate already redirects non-admins away from /admin/...; the
decorators re-check so the views stay safe if the gate is bypassed.
"""

from flask import Blueprint, jsonify, request

from ..decorators import require_session, require_operation
from ..services import logistics_service, security_service, user_service
from ..validation import ValidationError, optional_int
from .responses import error_response


admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


@admin_bp.get("/users")
@require_session
@require_operation("VIEW_ADMIN_PAGES")
def users_page():
    """All users with their lorry, plus the lorries a new rep can be bound to."""
    users = user_service.list_users()
    lorries = logistics_service.list_lorries()
    return jsonify({
        "users": [user.to_dict(include_lorry=True) for user in users],
        "lorries": [lorry.to_dict() for lorry in lorries],
    }), 200


@admin_bp.get("/logistics")
@require_session
@require_operation("VIEW_ADMIN_PAGES")
def logistics_page():
    territories = logistics_service.list_territories()
    lorries = logistics_service.list_lorries()
    routes = logistics_service.list_routes()

    lorry_rows = []
    for lorry in lorries:
        row = lorry.to_dict()
        row["territory"] = lorry.territory.to_dict() if lorry.territory else None
        row["route_count"] = len(lorry.routes)
        lorry_rows.append(row)

    route_rows = []
    for route in routes:
        row = route.to_dict()
        row["lorry"] = route.lorry.to_dict() if route.lorry else None
        route_rows.append(row)

    return jsonify({
        "territories": [t.to_dict() for t in territories],
        "lorries": lorry_rows,
        "routes": route_rows,
    }), 200


@admin_bp.get("/security-events")
@require_session
@require_operation("VIEW_ADMIN_PAGES")
def security_events_page():
    """
    Most recent audit events.

    Query params:
    - eventType: filter on event_type (e.g. PERMISSION_DENIED)
    - userId: filter on the acting user
    - limit: 1..500, default 100
    """
    try:
        user_id = optional_int(request.args, "userId")
        limit = optional_int(request.args, "limit")
    except ValidationError as exc:
        return error_response(exc)
    limit = min(max(limit or 100, 1), 500)

    events = security_service.list_security_events(
        event_type=(request.args.get("eventType") or "").strip().upper() or None,
        user_id=user_id,
        limit=limit,
    )
    return jsonify({"events": [event.to_dict() for event in events], "count": len(events)}), 200
