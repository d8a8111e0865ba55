# Overview: Flask API routes for account operations; parses input and returns JSON responses.

# backend/diarybun/routes/auth.py
"""
Account API routes

Signup, signin and reset-password set the session cookie; signout clears
it. The cookie is httpOnly with a one-year lifetime.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..errors import ApiError
from ..validation import json_object
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _signed_in_response(user, token, status: int = 200):
    response = jsonify({"user": user.to_dict()})
    response.status_code = status
    return session_service.set_session_cookie(response, token)


@auth_bp.post("/signup")
def signup_route():
    """Create an account with the USER permission and sign it in."""
    try:
        data = json_object(request.get_json(silent=True))
        user, token = auth_service.signup(
            data.get("name"),
            data.get("email"),
            data.get("password"),
        )
        return _signed_in_response(user, token, 201)

    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to sign up user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/signin")
def signin_route():
    """
    Authenticate and set the session cookie.

    Unknown email and wrong password both answer 401 with the same message.
    """
    try:
        data = json_object(request.get_json(silent=True))
        user, token = auth_service.signin(
            data.get("email"),
            data.get("password"),
            ip_address=request.remote_addr,
            user_agent=request.headers.get("User-Agent"),
        )
        return _signed_in_response(user, token)

    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to sign in user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/signout")
def signout_route():
    response = jsonify({"message": "GoodBye!"})
    return session_service.clear_session_cookie(response)


@auth_bp.get("/me")
def me_route():
    """Current user, or null when the request is anonymous."""
    user = auth_service.get_current_user(g.user_id)
    return jsonify({"user": user.to_dict() if user else None}), 200


@auth_bp.patch("/me")
@require_auth
def update_me_route():
    try:
        user = auth_service.update_me(g.user_id, request.get_json(silent=True))
        return jsonify({"user": user.to_dict()}), 200

    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/request-reset")
def request_reset_route():
    try:
        data = json_object(request.get_json(silent=True))
        return jsonify(auth_service.request_reset(data.get("email"))), 200

    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to request password reset")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/reset-password")
def reset_password_route():
    try:
        data = json_object(request.get_json(silent=True))
        user, token = auth_service.reset_password(
            data.get("reset_token"),
            data.get("password"),
            data.get("confirm_password"),
        )
        return _signed_in_response(user, token)

    except ApiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to reset password")
        return jsonify({"error": "Internal server error"}), 500
