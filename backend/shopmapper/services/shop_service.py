# Overview: Service-layer operations for shops; create/update by ADMIN or REP, delete by ADMIN.

from __future__ import annotations

from typing import Any, Mapping

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import PAYMENT_METHODS, PAYMENT_STATUSES, Route, Shop
from ..validation import (
    ConflictError,
    NotFoundError,
    ValidationError,
    coerce_float,
    optional_float,
    optional_int,
    optional_text,
    require_choice,
    require_int,
    require_text,
)
from . import authorization_service, upload_service
from .concurrency import lock_for_update, run_with_retry
from .token_service import SessionPayload


def parse_shop_form(form: Mapping[str, Any]) -> dict:
    """
    Validate submitted shop fields and map them to Shop columns.

    - latitude/longitude must both parse ("Invalid Location" otherwise)
    - avgBillValue defaults to 0 when blank
    - paymentStatus defaults to ON_TIME when blank
    - creditPeriod is kept only for CREDIT; blank -> None
    """
    try:
        latitude = coerce_float(form.get("latitude"), "latitude")
        longitude = coerce_float(form.get("longitude"), "longitude")
    except ValidationError:
        raise ValidationError("Invalid Location")
    if not -90.0 <= latitude <= 90.0 or not -180.0 <= longitude <= 180.0:
        raise ValidationError("Invalid Location")

    payment_method = require_choice(
        form.get("paymentMethod") or "CASH", PAYMENT_METHODS, "paymentMethod"
    )
    payment_status = require_choice(
        form.get("paymentStatus") or "ON_TIME", PAYMENT_STATUSES, "paymentStatus"
    )

    credit_period = optional_int(form, "creditPeriod")
    if payment_method != "CREDIT":
        credit_period = None
    elif credit_period is not None and credit_period < 0:
        raise ValidationError("creditPeriod must not be negative")

    return {
        "name": require_text(form, "name", max_length=255),
        "owner_name": optional_text(form, "ownerName", max_length=255),
        "contact_number": optional_text(form, "contactNumber", max_length=32),
        "payment_method": payment_method,
        "credit_period": credit_period,
        "payment_status": payment_status,
        "avg_bill_value": optional_float(form, "avgBillValue", default=0.0),
        "route_id": require_int(form, "routeId"),
        "latitude": latitude,
        "longitude": longitude,
    }


def _require_route(route_id: int) -> Route:
    route = db.session.get(Route, route_id)
    if route is None:
        raise ValidationError("Route not found")
    return route


def create_shop(acting: SessionPayload | None, form: Mapping[str, Any], image=None) -> Shop:
    """
    Record a new shop. ADMIN or REP.

    The image (a werkzeug FileStorage) is uploaded only once the form and the
    route check out. An upload failure is logged and the shop is saved
    without an image.
    """
    authorization_service.require_operation(acting, "CREATE_SHOP")
    fields = parse_shop_form(form)
    _require_route(fields["route_id"])

    image_url = upload_service.upload_shop_image(image)

    def _op():
        _require_route(fields["route_id"])
        shop = Shop(image_url=image_url, **fields)
        db.session.add(shop)
        db.session.commit()
        return shop

    try:
        shop = run_with_retry(_op)
    except IntegrityError:
        current_app.logger.warning("Failed to create shop", exc_info=True)
        raise ConflictError("Failed to create shop")

    current_app.logger.info("Shop %s created on route %s by user %s", shop.id, shop.route_id, acting.user.id)
    return shop


def update_shop(acting: SessionPayload | None, shop_id: int, form: Mapping[str, Any], image=None) -> Shop:
    """
    Edit a shop. ADMIN or REP.

    The stored image is replaced only when a new file uploads successfully.
    """
    authorization_service.require_operation(acting, "UPDATE_SHOP")
    fields = parse_shop_form(form)
    if db.session.get(Shop, shop_id) is None:
        raise NotFoundError("Shop not found")
    _require_route(fields["route_id"])

    image_url = upload_service.upload_shop_image(image)

    def _op():
        shop = lock_for_update(db.session.query(Shop).filter_by(id=shop_id)).first()
        if shop is None:
            raise NotFoundError("Shop not found")
        _require_route(fields["route_id"])

        for key, value in fields.items():
            setattr(shop, key, value)
        if image_url is not None:
            shop.image_url = image_url

        db.session.commit()
        return shop

    try:
        shop = run_with_retry(_op)
    except IntegrityError:
        current_app.logger.warning("Failed to update shop %s", shop_id, exc_info=True)
        raise ConflictError("Failed to update shop")

    current_app.logger.info("Shop %s updated by user %s", shop.id, acting.user.id)
    return shop


def delete_shop(acting: SessionPayload | None, shop_id: int) -> None:
    authorization_service.require_operation(acting, "DELETE_SHOP")

    def _op():
        shop = db.session.get(Shop, shop_id)
        if shop is None:
            raise NotFoundError("Shop not found")
        db.session.delete(shop)
        db.session.commit()

    try:
        run_with_retry(_op)
    except IntegrityError:
        current_app.logger.warning("Failed to delete shop %s", shop_id, exc_info=True)
        raise ConflictError("Failed to delete shop")

    current_app.logger.info("Shop %s deleted", shop_id)
