# Overview: Flask routes for sign-in and sign-out; parses form input and returns JSON responses.

"""
Authentication routes

GET  /login   territories to choose from on the sign-in form
POST /login   username, password, territoryId -> session cookie
POST /logout  clear the session cookie

Self-registration does not exist; accounts are created by administrators.
"""

from flask import Blueprint, current_app, jsonify

from ..services import auth_service, logistics_service, security_service, session_service
from .responses import submitted_fields


auth_bp = Blueprint("auth", __name__)


@auth_bp.get("/login")
def login_page():
    territories = logistics_service.list_territories()
    return jsonify({"territories": [t.to_dict() for t in territories]}), 200


@auth_bp.post("/login")
def login_route():
    """
    Authenticate and issue a session for the chosen territory.

    Responses:
    - 200 with the session context; cookie "session" set (httpOnly)
    - 400 when a field is missing or territoryId is not numeric
    - 401 for bad credentials or a territory the user may not enter

    The 401 message does not say which check failed.
    """
    try:
        outcome = auth_service.login(submitted_fields())

        if not outcome.authenticated:
            security_service.log_security_event(
                user_id=outcome.user.id if outcome.user else None,
                event_type="LOGIN_DENIED",
                success=False,
                action=outcome.code,
                reason=outcome.reason,
            )
            if outcome.code == auth_service.INVALID_INPUT:
                return jsonify({"error": outcome.reason}), 400
            return jsonify({"error": "Invalid credentials or territory"}), 401

        security_service.log_security_event(
            user_id=outcome.user.id,
            event_type="LOGIN_SUCCEEDED",
            success=True,
            action="LOGIN",
            territory_id=outcome.payload.territory_id,
        )

        response = jsonify({
            "user": outcome.user.to_dict(),
            "session": outcome.payload.to_dict(),
            "redirect": "/",
            "message": "Login successful",
        })
        session_service.set_session_cookie(response, outcome.token, outcome.payload.expires)
        return response, 200

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
def logout_route():
    """
    Delete the session cookie.

    No server-side revocation: a copied token stays valid until it expires.
    """
    response = jsonify({"message": "Logout successful", "redirect": "/login"})
    session_service.clear_session_cookie(response)
    return response, 200
