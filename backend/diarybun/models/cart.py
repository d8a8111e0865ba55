from __future__ import annotations

from ..extensions import db


class CartItem(db.Model):
    """
    One line of a user's cart.

    At most one row per (user, item); adding the same item again bumps
    quantity. Quantity is always >= 1, removal deletes the row.
    """
    __tablename__ = "cart_items"
    __table_args__ = (
        db.UniqueConstraint("user_id", "item_id", name="uq_cart_items_user_item"),
        db.CheckConstraint("quantity >= 1", name="ck_cart_items_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    item_id = db.Column(db.Integer, db.ForeignKey("items.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)

    user = db.relationship("User", backref=db.backref("cart", lazy=True))
    item = db.relationship("Item", backref=db.backref("cart_items", lazy=True, cascade="all, delete-orphan"))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "item_id": self.item_id,
            "quantity": self.quantity,
            "item": self.item.to_dict() if self.item else None,
        }
