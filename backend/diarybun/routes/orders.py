# Overview: Flask API routes for checkout and order history.

# backend/diarybun/routes/orders.py
"""
Order routes.

POST /api/orders runs checkout. The body carries only the payment source
token; the amount is always computed server-side from the stored cart.
An optional Idempotency-Key header makes retries safe.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import checkout_service, order_service
from ..errors import ApiError
from ..validation import json_object
from ..decorators import require_auth


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.post("")
@require_auth
def checkout_route():
    try:
        data = json_object(request.get_json(silent=True))
        order = checkout_service.checkout(
            g.user_id,
            data.get("token"),
            idempotency_key=request.headers.get("Idempotency-Key"),
        )
        return jsonify({"order": order.to_dict()}), 201

    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create order")
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.get("")
@require_auth
def list_orders_route():
    orders = order_service.list_orders(g.user_id)
    return jsonify({"orders": [order.to_dict() for order in orders]}), 200


@orders_bp.get("/<int:order_id>")
@require_auth
def get_order_route(order_id: int):
    """Owners see their own orders; ADMIN sees any."""
    try:
        order = order_service.get_order(g.user_id, order_id)
        return jsonify({"order": order.to_dict()}), 200
    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
