# Overview: Territory/role scoping rules; every read path filters lorries and shops through here.

"""
Territory and Role Scoping

WHY: Visibility is a query-time filter derived from the session, never a
display-time filter, so a client cannot ask for unscoped data.

RULES:
1. Lorries are always filtered to the session territory.
2. A REP bound to a lorry sees only that lorry, even inside their territory.
3. ADMIN and VIEWER see every lorry in the session territory.
4. A shop is visible iff its route's lorry is in the scoped lorry set.
   There is no shop-level territory check; visibility is derived through
   Shop -> Route -> Lorry -> Territory.

LorryScope is computed from the session alone (no database), so the rules
can be tested without a live store.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..extensions import db
from ..models import Lorry, Route, Shop
from ..permissions import Role
from .token_service import SessionPayload


@dataclass(frozen=True)
class LorryScope:
    territory_id: int
    lorry_id: int | None = None

    @classmethod
    def for_session(cls, session: SessionPayload) -> "LorryScope":
        lorry_id = None
        if session.user.role == Role.REP and session.user.lorry_id:
            lorry_id = session.user.lorry_id
        return cls(territory_id=session.territory_id, lorry_id=lorry_id)

    def criteria(self) -> list:
        """SQLAlchemy filter expressions over Lorry."""
        clauses = [Lorry.territory_id == self.territory_id]
        if self.lorry_id is not None:
            clauses.append(Lorry.id == self.lorry_id)
        return clauses

    def allows_lorry(self, lorry_id: int, territory_id: int) -> bool:
        if territory_id != self.territory_id:
            return False
        return self.lorry_id is None or lorry_id == self.lorry_id


def scope_lorries(session: SessionPayload):
    """Query of the lorries visible to a session."""
    scope = LorryScope.for_session(session)
    return db.session.query(Lorry).filter(*scope.criteria()).order_by(Lorry.id.asc())


def scope_shops(session: SessionPayload, lorries: Iterable[Lorry] | None = None):
    """
    Query of the shops visible to a session.

    lorries is the already-scoped lorry set (saves a query on the dashboard);
    when omitted it is derived from the session.
    """
    if lorries is None:
        lorry_ids = [row.id for row in scope_lorries(session).with_entities(Lorry.id)]
    else:
        lorry_ids = [lorry.id for lorry in lorries]

    return (
        db.session.query(Shop)
        .join(Route, Shop.route_id == Route.id)
        .filter(Route.lorry_id.in_(lorry_ids))
        .order_by(Shop.id.asc())
    )


def get_visible_shop(session: SessionPayload, shop_id: int) -> Shop | None:
    return scope_shops(session).filter(Shop.id == shop_id).first()


def shop_exists(shop_id: int) -> bool:
    """Unscoped existence check, for audit logging only; never for responses."""
    return db.session.get(Shop, shop_id) is not None


def dashboard_data(session: SessionPayload) -> dict:
    """Lorries (with routes), the flattened routes and the shops for a session."""
    lorries = scope_lorries(session).all()
    shops = scope_shops(session, lorries).all()
    routes = [route for lorry in lorries for route in lorry.routes]
    return {
        "lorries": lorries,
        "routes": routes,
        "shops": shops,
    }
