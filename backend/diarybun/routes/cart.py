# Overview: Flask API routes for the signed-in user's cart.

from flask import Blueprint, request, jsonify, current_app, g

from ..services import cart_service
from ..errors import ApiError, ValidationError
from ..validation import json_object
from ..decorators import require_auth


cart_bp = Blueprint("cart", __name__, url_prefix="/api/cart")


@cart_bp.get("")
@require_auth
def get_cart_route():
    try:
        return jsonify(cart_service.get_cart(g.user_id)), 200
    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code


@cart_bp.post("")
@require_auth
def add_to_cart_route():
    """Add one of an item; repeated adds bump the quantity."""
    try:
        data = json_object(request.get_json(silent=True))
        item_id = data.get("item_id")
        if not isinstance(item_id, int) or isinstance(item_id, bool):
            raise ValidationError("item_id required")

        cart_item = cart_service.add_to_cart(g.user_id, item_id)
        return jsonify({"cart_item": cart_item.to_dict()}), 200

    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to add to cart")
        return jsonify({"error": "Internal server error"}), 500


@cart_bp.delete("/<int:cart_item_id>")
@require_auth
def remove_from_cart_route(cart_item_id: int):
    try:
        removed = cart_service.remove_from_cart(cart_item_id, g.user_id)
        return jsonify({"cart_item": removed}), 200

    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to remove from cart")
        return jsonify({"error": "Internal server error"}), 500
