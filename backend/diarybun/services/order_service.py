# Overview: Service-layer order reads; owners see their orders, ADMIN sees any.

from __future__ import annotations

from ..errors import Forbidden, NotAuthenticated, NotFound
from ..extensions import db
from ..models import Order
from ..permissions import ORDER_VIEW_PERMISSIONS
from . import permission_service


def get_order(user_id: int | None, order_id: int) -> Order:
    if not user_id:
        raise NotAuthenticated("You arent logged in!")

    order = db.session.get(Order, order_id)
    if not order:
        raise NotFound("Order not found")

    if order.user_id != user_id and not permission_service.authorize(user_id, ORDER_VIEW_PERMISSIONS):
        raise Forbidden("You cant see this order")

    return order


def list_orders(user_id: int | None) -> list[Order]:
    """The caller's own orders, newest first."""
    if not user_id:
        raise NotAuthenticated("you must be signed in!")

    return (
        db.session.query(Order)
        .filter_by(user_id=user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
