# Overview: Service-layer operations for carts; encapsulates business logic and database work.

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from ..errors import Forbidden, NotAuthenticated, NotFound, ValidationError
from ..extensions import db
from ..models import CartItem, Item
from ..validation import MAX_CART_QUANTITY


def load_cart(user_id: int) -> list[CartItem]:
    """Cart rows for a user with their items loaded, oldest first."""
    return (
        db.session.query(CartItem)
        .options(joinedload(CartItem.item))
        .filter(CartItem.user_id == user_id)
        .order_by(CartItem.id)
        .all()
    )


def cart_total(cart: list[CartItem]) -> int:
    """Sum of price x quantity over the rows, in minor units."""
    return sum(row.item.price * row.quantity for row in cart)


def get_cart(user_id: int | None) -> dict:
    if not user_id:
        raise NotAuthenticated("You Must Be Signed In!")

    cart = load_cart(user_id)
    return {
        "items": [row.to_dict() for row in cart],
        "count": sum(row.quantity for row in cart),
        "subtotal": cart_total(cart),
    }


def _increment(cart_item: CartItem) -> CartItem:
    # Single conditional UPDATE so concurrent adds never lose an increment
    # or push a row past the quantity cap
    bumped = db.session.query(CartItem).filter(
        CartItem.id == cart_item.id,
        CartItem.quantity < MAX_CART_QUANTITY,
    ).update(
        {CartItem.quantity: CartItem.quantity + 1},
        synchronize_session=False,
    )
    db.session.commit()
    if bumped != 1:
        raise ValidationError(f"You can't have more than {MAX_CART_QUANTITY} of one item in your cart")
    db.session.refresh(cart_item)
    return cart_item


def add_to_cart(user_id: int | None, item_id: int) -> CartItem:
    """
    Put one more of an item in the user's cart.

    Bumps quantity by exactly 1 when the item is already there; otherwise
    creates a row with quantity 1.
    """
    if not user_id:
        raise NotAuthenticated("You Must Be Signed In!")

    if not db.session.get(Item, item_id):
        raise NotFound("Item not found")

    existing = db.session.query(CartItem).filter_by(user_id=user_id, item_id=item_id).first()
    if existing:
        return _increment(existing)

    cart_item = CartItem(user_id=user_id, item_id=item_id, quantity=1)
    db.session.add(cart_item)
    try:
        db.session.commit()
    except IntegrityError:
        # A concurrent add created the row first; fall back to incrementing it
        db.session.rollback()
        existing = db.session.query(CartItem).filter_by(user_id=user_id, item_id=item_id).one()
        return _increment(existing)

    return cart_item


def remove_from_cart(cart_item_id: int, user_id: int | None) -> dict:
    """
    Delete a whole cart row. Only the owner may remove it.

    Returns the deleted row as it was just before deletion.
    """
    if not user_id:
        raise NotAuthenticated("You Must Be Signed In!")

    cart_item = db.session.get(CartItem, cart_item_id)
    if not cart_item:
        raise NotFound("No Cart Item Found!")

    if cart_item.user_id != user_id:
        raise Forbidden("You do not own this cart item")

    removed = cart_item.to_dict()
    db.session.delete(cart_item)
    db.session.commit()
    return removed
