# Overview: Flask routes for scoped read paths; dashboard and own profile.

from flask import Blueprint, jsonify, g

from ..decorators import require_session, require_operation
from ..permissions import Role, get_role_operations
from ..services import logistics_service, scoping_service


dashboard_bp = Blueprint("dashboard", __name__)


@dashboard_bp.get("/")
@require_session
@require_operation("VIEW_DASHBOARD")
def dashboard():
    """
    Everything the map/list view needs, scoped to the session.

    Lorries are filtered to the session territory (and to the bound lorry
    for reps); shops and routes follow from the visible lorries.
    """
    session = g.current_session
    data = scoping_service.dashboard_data(session)
    territory = logistics_service.get_territory(session.territory_id)

    return jsonify({
        "user": session.to_dict()["user"],
        "territory": territory.to_dict() if territory else {"id": session.territory_id},
        "lorries": [lorry.to_dict(include_routes=True) for lorry in data["lorries"]],
        "routes": [route.to_dict() for route in data["routes"]],
        "shops": [shop.to_dict() for shop in data["shops"]],
        "is_admin": session.user.role == Role.ADMIN,
    }), 200


@dashboard_bp.get("/api/me")
@require_session
@require_operation("VIEW_PROFILE")
def me():
    session = g.current_session
    return jsonify({
        "session": session.to_dict(),
        "operations": get_role_operations(session.user.role),
    }), 200
