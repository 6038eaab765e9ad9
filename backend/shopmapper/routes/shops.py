# Overview: Flask API routes for shops; scoped reads and multipart form mutations, JSON responses.

from flask import Blueprint, current_app, g, jsonify, request
from werkzeug.exceptions import RequestEntityTooLarge

from ..decorators import denial_response, require_operation, require_session
from ..services import scoping_service, security_service, shop_service
from ..services.authorization_service import PermissionDeniedError
from ..validation import ConflictError, NotFoundError, ValidationError
from .responses import error_response, submitted_fields


shops_bp = Blueprint("shops", __name__, url_prefix="/api/shops")


@shops_bp.get("")
@require_session
@require_operation("VIEW_DASHBOARD")
def list_shops():
    """Shops visible to the session (territory, and lorry for reps)."""
    shops = scoping_service.scope_shops(g.current_session).all()
    return jsonify({"shops": [shop.to_dict() for shop in shops], "count": len(shops)}), 200


@shops_bp.get("/<int:shop_id>")
@require_session
@require_operation("VIEW_DASHBOARD")
def get_shop(shop_id: int):
    session = g.current_session
    shop = scoping_service.get_visible_shop(session, shop_id)
    if not shop:
        if scoping_service.shop_exists(shop_id):
            security_service.log_security_event(
                user_id=session.user.id,
                event_type="SCOPE_DENIED",
                success=False,
                action="VIEW_SHOP",
                reason=f"Shop {shop_id} is outside the session scope",
                territory_id=session.territory_id,
            )
        # Out-of-scope shops look exactly like missing ones
        return jsonify({"error": "Shop not found"}), 404
    return jsonify({"shop": shop.to_dict()}), 200


@shops_bp.post("")
@require_session
@require_operation("CREATE_SHOP")
def create_shop():
    """
    Record a shop (ADMIN or REP).

    Multipart form fields: name, ownerName, contactNumber, paymentMethod,
    creditPeriod, paymentStatus, avgBillValue, routeId, latitude, longitude,
    image (file, optional).

    A failed image upload does not fail the request; the shop is saved
    with image_url null.
    """
    try:
        shop = shop_service.create_shop(
            g.current_session,
            submitted_fields(),
            image=request.files.get("image"),
        )
    except PermissionDeniedError as exc:
        return denial_response(exc, action="CREATE_SHOP")
    except (ValidationError, NotFoundError, ConflictError) as exc:
        return error_response(exc)
    except RequestEntityTooLarge:
        return jsonify({"error": "Upload too large"}), 413
    except Exception:
        current_app.logger.exception("Failed to create shop")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"shop": shop.to_dict()}), 201


@shops_bp.put("/<int:shop_id>")
@require_session
@require_operation("UPDATE_SHOP")
def update_shop(shop_id: int):
    """Same fields as create; image is only replaced when a new file uploads."""
    try:
        shop = shop_service.update_shop(
            g.current_session,
            shop_id,
            submitted_fields(),
            image=request.files.get("image"),
        )
    except PermissionDeniedError as exc:
        return denial_response(exc, action="UPDATE_SHOP")
    except (ValidationError, NotFoundError, ConflictError) as exc:
        return error_response(exc)
    except RequestEntityTooLarge:
        return jsonify({"error": "Upload too large"}), 413
    except Exception:
        current_app.logger.exception("Failed to update shop")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"shop": shop.to_dict()}), 200


@shops_bp.delete("/<int:shop_id>")
@require_session
@require_operation("DELETE_SHOP")
def delete_shop(shop_id: int):
    try:
        shop_service.delete_shop(g.current_session, shop_id)
    except PermissionDeniedError as exc:
        return denial_response(exc, action="DELETE_SHOP")
    except (ValidationError, NotFoundError, ConflictError) as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to delete shop")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"message": "Shop deleted"}), 200
