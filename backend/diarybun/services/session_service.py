# Overview: Service-layer operations for session tokens; signs, verifies and transports them.

"""
Session Token Service

Sessions are stateless HS256 JWTs signed with APP_SECRET. The payload holds
only the user id, so every permission decision re-reads the user's current
permissions from the database; a token issued before a permission change
cannot carry stale privileges.

Tokens are valid for one year (AppSettings.session_ttl). That long-lived
session is inherited behaviour, kept for compatibility with existing
clients rather than recommended practice.

resolve_identity() never raises: a missing, tampered or expired token
yields None and the request proceeds as anonymous, which lets the
authorization layer answer with a distinct "not signed in" error.
"""

from __future__ import annotations

from datetime import timezone

import jwt
from flask import Response

from ..config import get_settings
from ..time_utils import utcnow


SESSION_COOKIE_NAME = "token"
JWT_ALGORITHM = "HS256"


def issue_token(user_id: int) -> str:
    """Sign a session token for user_id."""
    settings = get_settings()
    now = utcnow().replace(tzinfo=timezone.utc)
    payload = {
        "userId": user_id,
        "iat": now,
        "exp": now + settings.session_ttl,
    }
    return jwt.encode(payload, settings.app_secret, algorithm=JWT_ALGORITHM)


def resolve_identity(token: str | None) -> int | None:
    """
    Verify a session token and return its user id.

    Returns None if the token is missing, badly signed, expired, or does
    not carry an integer user id.
    """
    if not token:
        return None

    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.app_secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "userId"]},
        )
    except jwt.PyJWTError:
        return None

    user_id = payload.get("userId")
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        return None
    return user_id


def set_session_cookie(response: Response, token: str) -> Response:
    """Attach the session token as an httpOnly cookie."""
    settings = get_settings()
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=int(settings.session_ttl.total_seconds()),
        httponly=True,
        samesite="Lax",
    )
    return response


def clear_session_cookie(response: Response) -> Response:
    response.delete_cookie(SESSION_COOKIE_NAME, httponly=True, samesite="Lax")
    return response
