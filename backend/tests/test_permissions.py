"""
Authorization tests.

Verifies:
- Unauthenticated requests to protected endpoints return 401
- Any-of permission checks, re-read on every call
- Denials are written to the security event log
- Permission updates validate codes and always keep USER
"""

import pytest

from diarybun.errors import Forbidden, NotAuthenticated, NotFound, ValidationError
from diarybun.extensions import db
from diarybun.models import SecurityEvent
from diarybun.permissions import (
    get_all_permission_codes,
    get_permission_definition,
    get_permissions_by_category,
    validate_permission_code,
)
from diarybun.services import permission_service


# =============================================================================
# UNAUTHENTICATED ACCESS (401)
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/users"),
            ("PUT", "/api/users/1/permissions"),
            ("PATCH", "/api/auth/me"),
            ("POST", "/api/items"),
            ("PATCH", "/api/items/1"),
            ("DELETE", "/api/items/1"),
            ("GET", "/api/cart"),
            ("POST", "/api/cart"),
            ("DELETE", "/api/cart/1"),
            ("GET", "/api/orders"),
            ("POST", "/api/orders"),
            ("GET", "/api/orders/1"),
        ],
    )
    def test_requires_auth(self, client, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"


# =============================================================================
# PERMISSION GUARD
# =============================================================================


class TestPermissionGuard:

    def test_absent_identity_never_authorized(self, app):
        assert permission_service.authorize(None, ["USER"]) is False
        with pytest.raises(NotAuthenticated):
            permission_service.require_any_permission(None, ["USER"])

    def test_any_of_semantics(self, app, make_user):
        editor = make_user(permissions=["ITEMUPDATE"])
        assert permission_service.authorize(editor.id, ["ADMIN", "ITEMUPDATE"])
        assert not permission_service.authorize(editor.id, ["ADMIN", "PERMISSIONUPDATE"])

    def test_denial_raises_and_logs(self, app, user):
        with pytest.raises(Forbidden):
            permission_service.require_any_permission(user.id, ["ADMIN"], resource="users")

        event = db.session.query(SecurityEvent).filter_by(event_type="PERMISSION_DENIED").one()
        assert event.user_id == user.id
        assert event.resource == "users"
        assert event.success is False

    def test_grant_is_not_logged(self, app, admin):
        permission_service.require_any_permission(admin.id, ["ADMIN"])
        assert db.session.query(SecurityEvent).count() == 0

    def test_changes_apply_to_existing_sessions(self, client, user, admin, headers_for):
        headers = headers_for(user)
        assert client.get('/api/users', headers=headers).status_code == 403

        resp = client.put(
            f'/api/users/{user.id}/permissions',
            json={'permissions': ['USER', 'PERMISSIONUPDATE']},
            headers=headers_for(admin),
        )
        assert resp.status_code == 200

        # Same token as before the grant
        assert client.get('/api/users', headers=headers).status_code == 200


# =============================================================================
# USER ADMINISTRATION
# =============================================================================


class TestUserAdministration:

    def test_admin_lists_users(self, client, admin, user, headers_for):
        resp = client.get('/api/users', headers=headers_for(admin))
        assert resp.status_code == 200
        emails = [u['email'] for u in resp.json['users']]
        assert sorted(emails) == ['admin@example.com', 'alice@example.com']
        assert {p['code'] for p in resp.json['permissions']} >= {'ADMIN', 'USER', 'ITEMDELETE'}

    def test_denied_listing_reports_required_permissions(self, client, user, headers_for):
        resp = client.get('/api/users', headers=headers_for(user))
        assert resp.status_code == 403
        assert resp.json['required_permissions'] == ['ADMIN', 'PERMISSIONUPDATE']

    def test_user_cannot_grant_themselves(self, client, user, headers_for):
        resp = client.put(
            f'/api/users/{user.id}/permissions',
            json={'permissions': ['ADMIN']},
            headers=headers_for(user),
        )
        assert resp.status_code == 403
        db.session.refresh(user)
        assert user.permissions == ['USER']

    def test_update_keeps_user_and_dedups(self, app, admin, user):
        updated = permission_service.update_permissions(
            admin.id, user.id, ['ITEMDELETE', 'ITEMDELETE', 'ITEMCREATE']
        )
        assert updated.permissions == ['USER', 'ITEMDELETE', 'ITEMCREATE']

        event = db.session.query(SecurityEvent).filter_by(event_type="PERMISSIONS_UPDATED").one()
        assert event.user_id == admin.id
        assert event.resource == f"users/{user.id}"

    def test_update_can_drop_permissions(self, app, admin, make_user):
        target = make_user(permissions=["ITEMCREATE", "ITEMDELETE"])
        updated = permission_service.update_permissions(admin.id, target.id, ["ITEMCREATE"])
        assert updated.permissions == ['USER', 'ITEMCREATE']

    def test_unknown_code_rejected(self, app, admin, user):
        with pytest.raises(ValidationError, match="Unknown permission"):
            permission_service.update_permissions(admin.id, user.id, ['SUPERUSER'])
        assert user.permissions == ['USER']

    def test_non_list_rejected(self, app, admin, user):
        with pytest.raises(ValidationError):
            permission_service.update_permissions(admin.id, user.id, 'ADMIN')

    def test_list_body_rejected(self, client, admin, user, headers_for):
        resp = client.put(f'/api/users/{user.id}/permissions', json=['ADMIN'], headers=headers_for(admin))
        assert resp.status_code == 400
        assert resp.json == {'error': 'Invalid JSON payload'}

    def test_unknown_target(self, app, admin):
        with pytest.raises(NotFound):
            permission_service.update_permissions(admin.id, 9999, ['USER'])


class TestPermissionDefinitions:

    def test_lookup(self):
        assert validate_permission_code("ITEMDELETE")
        assert not validate_permission_code("ROOT")
        assert get_permission_definition("ADMIN")["category"] == "SYSTEM"
        assert get_permission_definition("ROOT") is None
        assert not validate_permission_code(["ADMIN"])

    def test_category_lookup_ignores_case(self):
        codes = [perm[0] for perm in get_permissions_by_category("catalog")]
        assert codes == [perm[0] for perm in get_permissions_by_category("CATALOG")]
        assert "ITEMDELETE" in codes

    def test_listing_matches_definitions(self, client, admin, headers_for):
        resp = client.get('/api/users', headers=headers_for(admin))
        assert [p['code'] for p in resp.json['permissions']] == get_all_permission_codes()
        assert resp.json['permissions'][0] == get_permission_definition(get_all_permission_codes()[0])
