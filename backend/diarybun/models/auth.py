from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class User(db.Model):
    """
    Customer and staff accounts.

    WHY: Every cart, order and item is attributable to a user. The email is
    stored lowercased so uniqueness is case-insensitive.

    The password is only ever stored as a bcrypt hash. The reset token is
    likewise stored as a SHA-256 hash; the plaintext only travels by email.
    """
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    # Password reset (both set together, both cleared together)
    reset_token_hash = db.Column(db.String(64), nullable=True, index=True)
    reset_token_expiry = db.Column(db.DateTime(timezone=True), nullable=True)

    # Per-user checkout serialization point (see checkout_service)
    checkout_started_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    permission_rows = db.relationship(
        "UserPermission",
        backref=db.backref("user", lazy=True),
        order_by="UserPermission.id",
        cascade="all, delete-orphan",
        lazy=True,
    )

    @property
    def permissions(self) -> list[str]:
        return [row.permission for row in self.permission_rows]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "permissions": self.permissions,
            "created_at": to_utc_z(self.created_at),
        }


class UserPermission(db.Model):
    """
    User-Permission association.

    Permission codes are the static tokens in diarybun.permissions; rows are
    kept in insertion order so a user's permission list reads back stably.
    """
    __tablename__ = "user_permissions"
    __table_args__ = (
        db.UniqueConstraint("user_id", "permission", name="uq_user_permissions"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    permission = db.Column(db.String(64), nullable=False)

    granted_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "permission": self.permission,
            "granted_at": to_utc_z(self.granted_at),
        }
