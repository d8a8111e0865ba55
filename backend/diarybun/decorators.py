# Overview: Request identity resolution and permission decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import session_service, permission_service
from .errors import ApiError


def _extract_token() -> str | None:
    """Session token from the cookie, falling back to a Bearer header."""
    token = request.cookies.get(session_service.SESSION_COOKIE_NAME)
    if token:
        return token

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1]
    return None


def load_identity() -> None:
    """
    before_request hook: resolve the session token into g.user_id.

    An invalid or expired token leaves g.user_id as None; routes that need
    a user reject the request themselves.
    """
    g.user_id = session_service.resolve_identity(_extract_token())


def require_auth(f):
    """Require a resolved identity (see load_identity)."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not getattr(g, "user_id", None):
            return jsonify({"error": "You Must Be Signed In!"}), 401
        return f(*args, **kwargs)

    return decorated_function


def require_any_permission(*permission_codes):
    """
    Require any of the specified permissions.

    Permissions are re-read for every request; denials are logged to the
    security event table.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                permission_service.require_any_permission(
                    getattr(g, "user_id", None),
                    permission_codes,
                    resource=request.path,
                    ip_address=request.remote_addr,
                    user_agent=request.headers.get("User-Agent"),
                )
            except ApiError as e:
                return jsonify({
                    **e.to_dict(),
                    "required_permissions": sorted(permission_codes),
                }), e.status_code

            return f(*args, **kwargs)

        return decorated_function
    return decorator
