# Overview: Flask API routes for lorries and routes; parses form input and returns JSON responses.

from flask import Blueprint, current_app, g, jsonify

from ..decorators import denial_response, require_operation, require_session
from ..services import logistics_service
from ..services.authorization_service import PermissionDeniedError
from ..validation import ConflictError, NotFoundError, ValidationError
from .responses import error_response, submitted_fields


logistics_bp = Blueprint("logistics", __name__, url_prefix="/api")


def _run(operation_code: str, failure_message: str, func, *args):
    try:
        return func(g.current_session, *args), None
    except PermissionDeniedError as exc:
        return None, denial_response(exc, action=operation_code)
    except (ValidationError, NotFoundError, ConflictError) as exc:
        return None, error_response(exc)
    except Exception:
        current_app.logger.exception(failure_message)
        return None, (jsonify({"error": "Internal server error"}), 500)


@logistics_bp.get("/territories")
def list_territories():
    territories = logistics_service.list_territories()
    return jsonify({"territories": [t.to_dict() for t in territories]}), 200


# =============================================================================
# LORRIES
# =============================================================================

@logistics_bp.post("/lorries")
@require_session
@require_operation("CREATE_LORRY")
def create_lorry():
    """Form fields: name, territoryId."""
    lorry, error = _run("CREATE_LORRY", "Failed to create lorry",
                        logistics_service.create_lorry, submitted_fields())
    if error:
        return error
    return jsonify({"lorry": lorry.to_dict()}), 201


@logistics_bp.put("/lorries/<int:lorry_id>")
@require_session
@require_operation("UPDATE_LORRY")
def update_lorry(lorry_id: int):
    """Form fields: name, territoryId."""
    lorry, error = _run("UPDATE_LORRY", "Failed to update lorry",
                        logistics_service.update_lorry, lorry_id, submitted_fields())
    if error:
        return error
    return jsonify({"lorry": lorry.to_dict()}), 200


@logistics_bp.delete("/lorries/<int:lorry_id>")
@require_session
@require_operation("DELETE_LORRY")
def delete_lorry(lorry_id: int):
    """Unassigns the lorry's reps, then deletes it. 409 while routes remain."""
    _, error = _run("DELETE_LORRY", "Failed to delete lorry",
                    logistics_service.delete_lorry, lorry_id)
    if error:
        return error
    return jsonify({"message": "Lorry deleted"}), 200


# =============================================================================
# ROUTES
# =============================================================================

@logistics_bp.post("/routes")
@require_session
@require_operation("CREATE_ROUTE")
def create_route():
    """Form fields: name, lorryId."""
    route, error = _run("CREATE_ROUTE", "Failed to create route",
                        logistics_service.create_route, submitted_fields())
    if error:
        return error
    return jsonify({"route": route.to_dict()}), 201


@logistics_bp.put("/routes/<int:route_id>")
@require_session
@require_operation("UPDATE_ROUTE")
def update_route(route_id: int):
    """Form fields: name, lorryId."""
    route, error = _run("UPDATE_ROUTE", "Failed to update route",
                        logistics_service.update_route, route_id, submitted_fields())
    if error:
        return error
    return jsonify({"route": route.to_dict()}), 200


@logistics_bp.delete("/routes/<int:route_id>")
@require_session
@require_operation("DELETE_ROUTE")
def delete_route(route_id: int):
    """409 while shops remain on the route."""
    _, error = _run("DELETE_ROUTE", "Failed to delete route",
                    logistics_service.delete_route, route_id)
    if error:
        return error
    return jsonify({"message": "Route deleted"}), 200
