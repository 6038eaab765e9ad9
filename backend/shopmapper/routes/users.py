# Overview: Flask API routes for user accounts; parses form input and returns JSON responses.

from flask import Blueprint, current_app, g, jsonify

from ..decorators import denial_response, require_operation, require_session
from ..services import security_service, user_service
from ..services.authorization_service import PermissionDeniedError
from ..validation import ConflictError, NotFoundError, ValidationError
from .responses import error_response, submitted_fields


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.post("")
@require_session
@require_operation("CREATE_USER")
def create_user():
    """
    Create a user.

    Form fields:
    - username: str (required, unique)
    - password: str (required)
    - role: ADMIN | REP | VIEWER (required)
    - lorryId: int (optional, REP only)
    """
    try:
        user = user_service.create_user(g.current_session, submitted_fields())
    except PermissionDeniedError as exc:
        return denial_response(exc, action="CREATE_USER")
    except (ValidationError, NotFoundError, ConflictError) as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to create user")
        return jsonify({"error": "Internal server error"}), 500

    security_service.log_security_event(
        user_id=g.current_session.user.id,
        event_type="USER_CREATED",
        success=True,
        action="CREATE_USER",
        reason=f"Created user: {user.username}",
        territory_id=g.current_session.territory_id,
    )
    return jsonify({"user": user.to_dict(), "message": "User created successfully"}), 201


@users_bp.delete("/<int:user_id>")
@require_session
@require_operation("DELETE_USER")
def delete_user(user_id: int):
    """Delete a user. The caller's own account is always refused."""
    try:
        user_service.delete_user(g.current_session, user_id)
    except PermissionDeniedError as exc:
        return denial_response(exc, action="DELETE_USER")
    except (ValidationError, NotFoundError, ConflictError) as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to delete user")
        return jsonify({"error": "Internal server error"}), 500

    security_service.log_security_event(
        user_id=g.current_session.user.id,
        event_type="USER_DELETED",
        success=True,
        action="DELETE_USER",
        reason=f"Deleted user: {user_id}",
        territory_id=g.current_session.territory_id,
    )
    return jsonify({"message": "User deleted"}), 200
