from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class User(db.Model):
    """
    User accounts for authentication and attribution.

    role is one of ADMIN, REP, VIEWER. A REP is optionally bound to a single
    lorry, which pins the territory they may sign in to. ADMIN and VIEWER
    carry no lorry binding.

    WHY: Every shop record must be attributable to a sign-in. No shared logins.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.CheckConstraint("role IN ('ADMIN', 'REP', 'VIEWER')", name="ck_users_role"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), nullable=False, unique=True, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(16), nullable=False, default="VIEWER")
    lorry_id = db.Column(db.Integer, db.ForeignKey("lorries.id"), nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    lorry = db.relationship("Lorry", backref=db.backref("users", lazy=True, passive_deletes="all"))

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} role={self.role}>"

    def to_dict(self, include_lorry: bool = False) -> dict:
        data = {
            "id": self.id,
            "username": self.username,
            "role": self.role,
            "lorry_id": self.lorry_id,
            "created_at": to_utc_z(self.created_at),
            "last_login_at": to_utc_z(self.last_login_at) if self.last_login_at else None,
        }
        if include_lorry:
            data["lorry"] = self.lorry.to_dict() if self.lorry else None
        return data
