# Overview: Flask API routes for catalog items; parses input and returns JSON responses.

# backend/diarybun/routes/items.py
"""
Catalog routes.

Reads are public. Writes require a signed-in user; ownership and
permission rules live in catalog_service.
"""
from flask import Blueprint, request, jsonify, current_app, g

from ..services import catalog_service
from ..errors import ApiError
from ..decorators import require_auth


items_bp = Blueprint("items", __name__, url_prefix="/api/items")


@items_bp.get("")
def list_items_route():
    """
    Query params:
    - page: int (optional) - page number (1-indexed)
    - per_page: int (optional) - items per page (default 4, max 100)
    """
    page = request.args.get("page", type=int)
    per_page = request.args.get("per_page", type=int)
    return jsonify(catalog_service.list_items(page=page, per_page=per_page)), 200


@items_bp.get("/count")
def count_items_route():
    return jsonify({"count": catalog_service.count_items()}), 200


@items_bp.get("/<int:item_id>")
def get_item_route(item_id: int):
    try:
        return jsonify({"item": catalog_service.get_item(item_id).to_dict()}), 200
    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code


@items_bp.post("")
@require_auth
def create_item_route():
    try:
        item = catalog_service.create_item(g.user_id, request.get_json(silent=True))
        return jsonify({"item": item.to_dict()}), 201

    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create item")
        return jsonify({"error": "Internal server error"}), 500


@items_bp.patch("/<int:item_id>")
@require_auth
def update_item_route(item_id: int):
    try:
        item = catalog_service.update_item(g.user_id, item_id, request.get_json(silent=True))
        return jsonify({"item": item.to_dict()}), 200

    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update item")
        return jsonify({"error": "Internal server error"}), 500


@items_bp.delete("/<int:item_id>")
@require_auth
def delete_item_route(item_id: int):
    try:
        removed = catalog_service.delete_item(g.user_id, item_id)
        return jsonify({"item": removed}), 200

    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete item")
        return jsonify({"error": "Internal server error"}), 500
