# Overview: Service-layer operations for permission; encapsulates business logic and database work.

"""
Permission Checking and Security Event Logging

WHY: Gate privileged operations and keep an audit trail of denials.

DESIGN PRINCIPLES:
- Fail closed: an absent identity is denied regardless of what is required
- Any-of semantics: holding one of the required permissions is enough
- No caching: permissions are re-read on every check, so changes take
  effect immediately even for sessions issued earlier
- Log denials only: grants are not logged

Permission checks are one gate; ownership checks done by the calling
service are a separate, independent gate.
"""

from __future__ import annotations

from typing import Iterable

from ..extensions import db
from ..errors import Forbidden, NotAuthenticated, NotFound, ValidationError
from ..models import SecurityEvent, User, UserPermission
from ..permissions import DEFAULT_PERMISSIONS, PERMISSION_ADMIN_PERMISSIONS, validate_permission_code
from ..time_utils import utcnow


def log_security_event(
    user_id: int | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> SecurityEvent:
    """
    Log security event to audit trail.

    event_type examples:
    - PERMISSION_DENIED
    - LOGIN_FAILED
    - PERMISSIONS_UPDATED
    - PASSWORD_RESET
    """
    event = SecurityEvent(
        user_id=user_id,
        event_type=event_type,
        resource=resource,
        action=action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
        occurred_at=utcnow(),
    )

    db.session.add(event)
    db.session.commit()

    return event


def get_user_permissions(user_id: int) -> list[str]:
    """Current permission codes for a user, in grant order."""
    rows = (
        db.session.query(UserPermission.permission)
        .filter_by(user_id=user_id)
        .order_by(UserPermission.id)
        .all()
    )
    return [row.permission for row in rows]


def authorize(user_id: int | None, required_any: Iterable[str]) -> bool:
    """
    True if the user currently holds at least one of required_any.

    Always False for an absent identity.
    """
    if not user_id:
        return False
    required = set(required_any)
    return any(code in required for code in get_user_permissions(user_id))


def require_any_permission(
    user_id: int | None,
    required_any: Iterable[str],
    resource: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> None:
    """
    Raise unless the user holds at least one of required_any.

    NotAuthenticated when there is no identity, Forbidden (logged) when the
    user lacks every required permission.
    """
    if not user_id:
        raise NotAuthenticated("You Must Be Logged In!")

    required = sorted(set(required_any))
    if authorize(user_id, required):
        return

    log_security_event(
        user_id=user_id,
        event_type="PERMISSION_DENIED",
        success=False,
        resource=resource,
        action=f"ANY_OF:{','.join(required)}",
        reason=f"Missing any of: {', '.join(required)}",
        ip_address=ip_address,
        user_agent=user_agent,
    )
    raise Forbidden(f"You do not have sufficient permissions: {', '.join(required)}")


def list_users(actor_id: int | None) -> list[User]:
    """All users; requires ADMIN or PERMISSIONUPDATE."""
    require_any_permission(actor_id, PERMISSION_ADMIN_PERMISSIONS, resource="users")
    return db.session.query(User).order_by(User.id).all()


def set_permissions(user: User, permissions: Iterable[str]) -> User:
    """
    Replace a user's permission set.

    Unknown codes are rejected. Duplicates collapse to one grant, the
    original order is kept, and the default USER grant is always retained.
    """
    requested: list[str] = []
    for code in permissions:
        if not isinstance(code, str) or not validate_permission_code(code):
            raise ValidationError(f"Unknown permission: {code}")
        if code not in requested:
            requested.append(code)

    for code in DEFAULT_PERMISSIONS:
        if code not in requested:
            requested.insert(0, code)

    existing = {row.permission: row for row in user.permission_rows}
    for code, row in existing.items():
        if code not in requested:
            user.permission_rows.remove(row)
    for code in requested:
        if code not in existing:
            user.permission_rows.append(UserPermission(permission=code))

    return user


def update_permissions(actor_id: int | None, target_user_id: int, permissions: Iterable[str]) -> User:
    """
    Change another user's permissions.

    Requires ADMIN or PERMISSIONUPDATE, checked against the actor's
    current permissions.
    """
    require_any_permission(actor_id, PERMISSION_ADMIN_PERMISSIONS, resource="permissions")

    if permissions is None or isinstance(permissions, str):
        raise ValidationError("permissions must be a list")

    target = db.session.get(User, target_user_id)
    if not target:
        raise NotFound("User not found")

    set_permissions(target, permissions)
    db.session.flush()

    log_security_event(
        user_id=actor_id,
        event_type="PERMISSIONS_UPDATED",
        success=True,
        resource=f"users/{target_user_id}",
        action="SET",
        reason=",".join(target.permissions),
    )
    return target
