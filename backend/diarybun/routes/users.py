# Overview: Flask API routes for user administration; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app, g

from ..services import permission_service
from ..errors import ApiError
from ..validation import json_object
from ..decorators import require_auth, require_any_permission
from ..permissions import ADMIN, PERMISSIONUPDATE, get_all_permission_codes, get_permission_definition


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_any_permission(ADMIN, PERMISSIONUPDATE)
def list_users_route():
    """
    List all users with their permissions.

    Requires: ADMIN or PERMISSIONUPDATE
    """
    users = permission_service.list_users(g.user_id)
    return jsonify({
        "users": [user.to_dict() for user in users],
        "permissions": [get_permission_definition(code) for code in get_all_permission_codes()],
    }), 200


@users_bp.put("/<int:user_id>/permissions")
@require_auth
def update_permissions_route(user_id: int):
    """
    Replace a user's permission set.

    Requires: ADMIN or PERMISSIONUPDATE (checked by the service against
    current permissions)
    """
    try:
        data = json_object(request.get_json(silent=True))
        user = permission_service.update_permissions(g.user_id, user_id, data.get("permissions"))
        return jsonify({"user": user.to_dict()}), 200

    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update permissions")
        return jsonify({"error": "Internal server error"}), 500
