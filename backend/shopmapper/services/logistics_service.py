# Overview: Service-layer operations for territories, lorries and routes; admin-only mutations.

"""
Logistics Service

Lorry and route mutations are ADMIN only and each runs as one transaction.

DELETE RULES (enforced by foreign keys, not by pre-checks):
- Deleting a lorry first unassigns its users, then deletes the lorry. If
  routes still reference it the whole operation is rolled back, so user
  assignments survive a failed delete.
- Deleting a route fails while shops still reference it.

Constraint failures surface as ConflictError with a generic message; the
underlying constraint detail only goes to the log.
"""

from __future__ import annotations

from typing import Any, Mapping

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Lorry, Route, Territory, User
from ..validation import ConflictError, NotFoundError, ValidationError, require_int, require_text
from . import authorization_service
from .concurrency import lock_for_update, run_with_retry
from .token_service import SessionPayload


# -- Reads --

def list_territories() -> list[Territory]:
    return db.session.query(Territory).order_by(Territory.name.asc()).all()


def get_territory(territory_id: int) -> Territory | None:
    return db.session.get(Territory, territory_id)


def list_lorries() -> list[Lorry]:
    return db.session.query(Lorry).order_by(Lorry.id.asc()).all()


def list_routes() -> list[Route]:
    return db.session.query(Route).order_by(Route.id.asc()).all()


def _commit_or_conflict(func, message: str):
    try:
        return run_with_retry(func)
    except IntegrityError:
        current_app.logger.warning(message, exc_info=True)
        raise ConflictError(message)


def _require_territory(territory_id: int) -> Territory:
    territory = db.session.get(Territory, territory_id)
    if territory is None:
        raise ValidationError("Territory not found")
    return territory


def _require_lorry(lorry_id: int) -> Lorry:
    lorry = db.session.get(Lorry, lorry_id)
    if lorry is None:
        raise ValidationError("Lorry not found")
    return lorry


# -- Lorries --

def create_lorry(acting: SessionPayload | None, form: Mapping[str, Any]) -> Lorry:
    authorization_service.require_operation(acting, "CREATE_LORRY")

    name = require_text(form, "name", max_length=120)
    territory_id = require_int(form, "territoryId")

    def _op():
        _require_territory(territory_id)
        lorry = Lorry(name=name, territory_id=territory_id)
        db.session.add(lorry)
        db.session.commit()
        return lorry

    lorry = _commit_or_conflict(_op, "Failed to create lorry")
    current_app.logger.info("Lorry %s created in territory %s", lorry.id, territory_id)
    return lorry


def update_lorry(acting: SessionPayload | None, lorry_id: int, form: Mapping[str, Any]) -> Lorry:
    authorization_service.require_operation(acting, "UPDATE_LORRY")

    name = require_text(form, "name", max_length=120)
    territory_id = require_int(form, "territoryId")

    def _op():
        lorry = lock_for_update(db.session.query(Lorry).filter_by(id=lorry_id)).first()
        if lorry is None:
            raise NotFoundError("Lorry not found")
        _require_territory(territory_id)

        lorry.name = name
        lorry.territory_id = territory_id
        db.session.commit()
        return lorry

    lorry = _commit_or_conflict(_op, "Failed to update lorry")
    current_app.logger.info("Lorry %s updated", lorry.id)
    return lorry


def delete_lorry(acting: SessionPayload | None, lorry_id: int) -> None:
    authorization_service.require_operation(acting, "DELETE_LORRY")

    def _op():
        lorry = db.session.get(Lorry, lorry_id)
        if lorry is None:
            raise NotFoundError("Lorry not found")

        # Unassign reps first; lorry binding on users is optional
        db.session.query(User).filter(User.lorry_id == lorry_id).update(
            {User.lorry_id: None}, synchronize_session=False
        )
        db.session.delete(lorry)
        db.session.commit()

    _commit_or_conflict(_op, "Failed to delete lorry (Ensure no routes are assigned)")
    current_app.logger.info("Lorry %s deleted", lorry_id)


# -- Routes --

def create_route(acting: SessionPayload | None, form: Mapping[str, Any]) -> Route:
    authorization_service.require_operation(acting, "CREATE_ROUTE")

    name = require_text(form, "name", max_length=120)
    lorry_id = require_int(form, "lorryId")

    def _op():
        _require_lorry(lorry_id)
        route = Route(name=name, lorry_id=lorry_id)
        db.session.add(route)
        db.session.commit()
        return route

    route = _commit_or_conflict(_op, "Failed to create route")
    current_app.logger.info("Route %s created on lorry %s", route.id, lorry_id)
    return route


def update_route(acting: SessionPayload | None, route_id: int, form: Mapping[str, Any]) -> Route:
    authorization_service.require_operation(acting, "UPDATE_ROUTE")

    name = require_text(form, "name", max_length=120)
    lorry_id = require_int(form, "lorryId")

    def _op():
        route = lock_for_update(db.session.query(Route).filter_by(id=route_id)).first()
        if route is None:
            raise NotFoundError("Route not found")
        _require_lorry(lorry_id)

        route.name = name
        route.lorry_id = lorry_id
        db.session.commit()
        return route

    route = _commit_or_conflict(_op, "Failed to update route")
    current_app.logger.info("Route %s updated", route.id)
    return route


def delete_route(acting: SessionPayload | None, route_id: int) -> None:
    authorization_service.require_operation(acting, "DELETE_ROUTE")

    def _op():
        route = db.session.get(Route, route_id)
        if route is None:
            raise NotFoundError("Route not found")
        db.session.delete(route)
        db.session.commit()

    _commit_or_conflict(_op, "Failed to delete route (Ensure no shops are assigned)")
    current_app.logger.info("Route %s deleted", route_id)
