# Overview: Service-layer checkout; turns a cart into a paid, immutable Order.

"""
Checkout

Pipeline, in order. Each step names what happens when it fails:

1. identity + payment token present       -> NotAuthenticated / ValidationError, nothing written
2. per-user checkout lock                 -> Conflict, nothing written
3. idempotent replay (same key)           -> previous Order returned, no charge
4. load cart                              -> EmptyCartError on an empty cart, no charge
5. compute total from stored prices       -> ValidationError above the charge limit, no charge
6. charge the gateway                     -> gateway error propagates, nothing written
7. create Order + OrderItem snapshots     -> logged with the charge id and re-raised
8. delete the captured cart rows          -> savepoint rolled back and logged; Order kept
9. release the lock                       -> always

The amount charged is derived from the database at step 5 and never from
client input: the client only supplies a payment source token.

Steps 7 and 8 share one transaction. Cart cleanup runs in a savepoint so a
cleanup failure cannot take the Order (and so the record of a completed
charge) down with it. Nothing after step 6 ever calls the gateway again.
"""

from __future__ import annotations

from uuid import uuid4

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..config import get_settings
from ..errors import EmptyCartError, NotAuthenticated, ValidationError
from ..extensions import db
from ..models import CartItem, Order, OrderItem, User
from ..validation import MAX_CHARGE_AMOUNT
from . import cart_service
from .concurrency import acquire_checkout_lock, release_checkout_lock
from .payment_gateway import Charge, get_gateway


MAX_IDEMPOTENCY_KEY_LENGTH = 255


def checkout(user_id: int | None, source_token: str, idempotency_key: str | None = None) -> Order:
    """
    Charge the user's cart and record it as an Order.

    Args:
        user_id: Signed-in user
        source_token: Payment source token from the client (card token)
        idempotency_key: Optional client key; retrying with the same key
            returns the Order already created instead of charging again

    Returns:
        The created (or replayed) Order

    Raises:
        NotAuthenticated, ValidationError, EmptyCartError, Conflict,
        PaymentDeclined, PaymentGatewayError
    """
    if not user_id:
        raise NotAuthenticated("You must be signed in to complete this order.")
    if not source_token or not isinstance(source_token, str):
        raise ValidationError("A payment token is required")
    if idempotency_key is not None:
        idempotency_key = idempotency_key.strip() or None
    if idempotency_key and len(idempotency_key) > MAX_IDEMPOTENCY_KEY_LENGTH:
        raise ValidationError(f"Idempotency key exceeds max length {MAX_IDEMPOTENCY_KEY_LENGTH}")

    if not db.session.get(User, user_id):
        raise NotAuthenticated("You must be signed in to complete this order.")

    acquire_checkout_lock(user_id, get_settings().checkout_lock_timeout)
    try:
        if idempotency_key:
            previous = _find_order(user_id, idempotency_key)
            if previous:
                current_app.logger.info(
                    "Replaying order %s for user %s (idempotency key reused)", previous.id, user_id
                )
                return previous

        cart = cart_service.load_cart(user_id)
        if not cart:
            raise EmptyCartError("Your cart is empty")

        amount = cart_service.cart_total(cart)
        if amount > MAX_CHARGE_AMOUNT:
            raise ValidationError(
                f"Order total exceeds the maximum single charge of {MAX_CHARGE_AMOUNT} cents"
            )
        charge = _charge(user_id, amount, source_token, idempotency_key)
        return _create_order(user_id, cart, charge, amount, idempotency_key)
    finally:
        release_checkout_lock(user_id)


def _find_order(user_id: int, idempotency_key: str) -> Order | None:
    return db.session.query(Order).filter_by(user_id=user_id, idempotency_key=idempotency_key).first()


def _charge(user_id: int, amount: int, source_token: str, idempotency_key: str | None) -> Charge:
    settings = get_settings()
    gateway_key = idempotency_key or f"checkout-{user_id}-{uuid4().hex}"

    charge = get_gateway().charge(
        amount=amount,
        currency=settings.currency,
        source=source_token,
        idempotency_key=gateway_key,
    )
    current_app.logger.info("Charged %s %s to user %s (charge %s)", charge.amount, settings.currency, user_id, charge.id)
    return charge


def _snapshot(cart_item: CartItem) -> OrderItem:
    """Copy the item's catalog fields; the snapshot keeps no link to the live Item."""
    item = cart_item.item
    return OrderItem(
        title=item.title,
        description=item.description,
        price=item.price,
        image=item.image,
        large_image=item.large_image,
        quantity=cart_item.quantity,
    )


def _delete_cart_rows(user_id: int, cart_item_ids: list[int]) -> int:
    return (
        db.session.query(CartItem)
        .filter(CartItem.user_id == user_id, CartItem.id.in_(cart_item_ids))
        .delete(synchronize_session=False)
    )


def _create_order(
    user_id: int,
    cart: list[CartItem],
    charge: Charge,
    expected_total: int,
    idempotency_key: str | None,
) -> Order:
    if charge.amount != expected_total:
        current_app.logger.error(
            "Charge %s amount %s differs from cart total %s for user %s",
            charge.id, charge.amount, expected_total, user_id,
        )

    order = Order(
        user_id=user_id,
        total=charge.amount,
        charge=charge.id,
        idempotency_key=idempotency_key,
    )
    order.items = [_snapshot(row) for row in cart]
    cart_item_ids = [row.id for row in cart]

    try:
        db.session.add(order)
        db.session.flush()

        try:
            with db.session.begin_nested():
                _delete_cart_rows(user_id, cart_item_ids)
        except SQLAlchemyError:
            current_app.logger.exception(
                "Cart cleanup failed after order %s for user %s; rows %s left in cart",
                order.id, user_id, cart_item_ids,
            )

        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(
            "Order persistence failed for user %s after successful charge %s (amount %s)",
            user_id, charge.id, charge.amount,
        )
        raise

    return order
