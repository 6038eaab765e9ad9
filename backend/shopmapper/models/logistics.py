from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Territory(db.Model):
    """
    Territory: the geographic grouping every session is scoped to.

    Lorries belong to exactly one territory. Territories are static
    reference data (seeded), not edited through the API.
    """
    __tablename__ = "territories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False, unique=True)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Territory id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
        }


class Lorry(db.Model):
    """
    Lorry: a vehicle/crew unit working one territory.

    Routes reference their lorry with a restricting foreign key, so a lorry
    cannot be deleted while routes still point at it. Users (reps) reference
    it optionally; those references are cleared before a delete.
    """
    __tablename__ = "lorries"
    __table_args__ = (
        db.Index("ix_lorries_territory_id", "territory_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    territory_id = db.Column(db.Integer, db.ForeignKey("territories.id"), nullable=False)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )

    territory = db.relationship(
        "Territory",
        backref=db.backref("lorries", lazy=True, passive_deletes="all"),
    )

    def __repr__(self) -> str:
        return f"<Lorry id={self.id} name={self.name!r} territory_id={self.territory_id}>"

    def to_dict(self, include_routes: bool = False) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "territory_id": self.territory_id,
            "created_at": to_utc_z(self.created_at),
        }
        if include_routes:
            data["routes"] = [route.to_dict() for route in self.routes]
        return data


class Route(db.Model):
    """Route: a named run of shops served by one lorry."""
    __tablename__ = "routes"
    __table_args__ = (
        db.Index("ix_routes_lorry_id", "lorry_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    lorry_id = db.Column(db.Integer, db.ForeignKey("lorries.id"), nullable=False)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )

    lorry = db.relationship(
        "Lorry",
        backref=db.backref("routes", lazy=True, passive_deletes="all", order_by="Route.id"),
    )

    def __repr__(self) -> str:
        return f"<Route id={self.id} name={self.name!r} lorry_id={self.lorry_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "lorry_id": self.lorry_id,
            "created_at": to_utc_z(self.created_at),
        }
