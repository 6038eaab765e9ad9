from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


PAYMENT_METHODS = ("CASH", "CREDIT", "CHEQUE")
PAYMENT_STATUSES = ("ON_TIME", "DELAYED", "EXTREMELY_DELAYED")


class Shop(db.Model):
    """
    Point-of-sale location recorded by a rep.

    Visibility is never stored on the shop itself: a shop is visible to a
    session iff its route's lorry is inside the session scope.

    credit_period only carries meaning when payment_method is CREDIT.
    """
    __tablename__ = "shops"
    __table_args__ = (
        db.Index("ix_shops_route_id", "route_id"),
        db.CheckConstraint(
            "payment_method IN ('CASH', 'CREDIT', 'CHEQUE')",
            name="ck_shops_payment_method",
        ),
        db.CheckConstraint(
            "payment_status IN ('ON_TIME', 'DELAYED', 'EXTREMELY_DELAYED')",
            name="ck_shops_payment_status",
        ),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    owner_name = db.Column(db.String(255), nullable=True)
    contact_number = db.Column(db.String(32), nullable=True)

    payment_method = db.Column(db.String(16), nullable=False, default="CASH")
    credit_period = db.Column(db.Integer, nullable=True)  # days
    payment_status = db.Column(db.String(32), nullable=False, default="ON_TIME")
    avg_bill_value = db.Column(db.Float, nullable=False, default=0.0)

    latitude = db.Column(db.Float, nullable=False)
    longitude = db.Column(db.Float, nullable=False)
    image_url = db.Column(db.String(1024), nullable=True)

    route_id = db.Column(db.Integer, db.ForeignKey("routes.id"), nullable=False)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    route = db.relationship(
        "Route",
        backref=db.backref("shops", lazy=True, passive_deletes="all"),
    )

    def __repr__(self) -> str:
        return f"<Shop id={self.id} name={self.name!r} route_id={self.route_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "owner_name": self.owner_name,
            "contact_number": self.contact_number,
            "payment_method": self.payment_method,
            "credit_period": self.credit_period,
            "payment_status": self.payment_status,
            "avg_bill_value": self.avg_bill_value,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "image_url": self.image_url,
            "route_id": self.route_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
