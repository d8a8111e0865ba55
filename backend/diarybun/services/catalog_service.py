# backend/diarybun/services/catalog_service.py
"""
Catalog Service

Reads are direct store queries with pagination. Writes require a signed-in
user and an allow-listed payload; update and delete also combine an
ownership check with a permission check.

DELETE GATE: the existing rule blocks deletion only when the caller does
NOT own the item AND DOES hold ADMIN/ITEMDELETE. Non-owners without
elevated permissions are therefore allowed through, which reads as an
inverted condition. It is preserved as observed behaviour; setting
STRICT_ITEM_DELETE switches to "owner, or holder of ADMIN/ITEMDELETE".
"""
from __future__ import annotations

from ..config import get_settings
from ..errors import Forbidden, NotAuthenticated, NotFound
from ..extensions import db
from ..models import Item
from ..permissions import ITEM_DELETE_PERMISSIONS, ITEM_UPDATE_PERMISSIONS
from ..time_utils import utcnow
from ..validation import ModelValidationPolicy, enforce_rules_item, validate_payload
from . import permission_service


ITEM_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"title", "description", "price", "image", "large_image"}),
    required_on_create=frozenset({"title", "description", "price"}),
)

DEFAULT_PER_PAGE = 4
MAX_PER_PAGE = 100


def get_item(item_id: int) -> Item:
    item = db.session.get(Item, item_id)
    if not item:
        raise NotFound("Item not found")
    return item


def count_items() -> int:
    return db.session.query(Item).count()


def list_items(page: int | None = None, per_page: int | None = None) -> dict:
    """
    Items newest first, with pagination metadata.

    page is 1-indexed; per_page defaults to 4 and is capped at 100.
    """
    per_page = min(max(per_page or DEFAULT_PER_PAGE, 1), MAX_PER_PAGE)
    page = max(page or 1, 1)

    base_query = db.session.query(Item).order_by(Item.created_at.desc(), Item.id.desc())

    total = base_query.count()
    total_pages = (total + per_page - 1) // per_page if total > 0 else 1

    items = base_query.offset((page - 1) * per_page).limit(per_page).all()

    return {
        "items": [item.to_dict() for item in items],
        "count": len(items),
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


def create_item(user_id: int | None, payload: dict) -> Item:
    """Create an item owned by the caller."""
    if not user_id:
        raise NotAuthenticated("You Must Be Signed In!")

    patch = validate_payload(model=Item, payload=payload, policy=ITEM_POLICY, partial=False)
    enforce_rules_item(patch)

    item = Item(user_id=user_id, **patch)
    db.session.add(item)
    db.session.commit()
    return item


def update_item(user_id: int | None, item_id: int, payload: dict) -> Item:
    """Partial update; the owner or a holder of ADMIN/ITEMUPDATE may edit."""
    if not user_id:
        raise NotAuthenticated("You Must Be Signed In!")

    item = get_item(item_id)

    if item.user_id != user_id:
        permission_service.require_any_permission(
            user_id, ITEM_UPDATE_PERMISSIONS, resource=f"items/{item_id}"
        )

    patch = validate_payload(model=Item, payload=payload, policy=ITEM_POLICY, partial=True)
    enforce_rules_item(patch)

    for key, value in patch.items():
        setattr(item, key, value)
    item.updated_at = utcnow()
    db.session.commit()
    return item


def is_delete_blocked(owns_item: bool, has_elevated_permission: bool, strict: bool) -> bool:
    if strict:
        return not owns_item and not has_elevated_permission
    return not owns_item and has_elevated_permission


def delete_item(user_id: int | None, item_id: int) -> dict:
    """
    Delete an item, subject to the delete gate described above.

    Returns the deleted item as it was just before deletion.
    """
    if not user_id:
        raise NotAuthenticated("You Must Be Signed In!")

    item = get_item(item_id)

    owns_item = item.user_id == user_id
    has_elevated = permission_service.authorize(user_id, ITEM_DELETE_PERMISSIONS)
    if is_delete_blocked(owns_item, has_elevated, get_settings().strict_item_delete):
        permission_service.log_security_event(
            user_id=user_id,
            event_type="PERMISSION_DENIED",
            success=False,
            resource=f"items/{item_id}",
            action="DELETE",
            reason="Item delete gate",
        )
        raise Forbidden("You aren't allowed!")

    removed = item.to_dict()
    db.session.delete(item)
    db.session.commit()
    return removed
