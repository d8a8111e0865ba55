"""
Session token tests.

Verifies:
- Issued tokens resolve back to their user id
- Missing, tampered, expired and malformed tokens resolve to None
- The cookie and Bearer header both identify the caller
"""

from datetime import datetime, timedelta, timezone

import jwt

from diarybun.services import session_service


def _encode(payload, secret="test-secret"):
    return jwt.encode(payload, secret, algorithm="HS256")


class TestResolveIdentity:

    def test_round_trip(self, app):
        token = session_service.issue_token(42)
        assert session_service.resolve_identity(token) == 42

    def test_token_lasts_a_year(self, app):
        payload = jwt.decode(session_service.issue_token(7), "test-secret", algorithms=["HS256"])
        assert payload["userId"] == 7
        assert payload["exp"] - payload["iat"] == int(timedelta(days=365).total_seconds())

    def test_missing_token(self, app):
        assert session_service.resolve_identity(None) is None
        assert session_service.resolve_identity("") is None

    def test_garbage_token(self, app):
        assert session_service.resolve_identity("not-a-jwt") is None

    def test_wrong_secret(self, app):
        now = datetime.now(timezone.utc)
        token = _encode({"userId": 1, "iat": now, "exp": now + timedelta(days=1)}, secret="other")
        assert session_service.resolve_identity(token) is None

    def test_expired(self, app):
        past = datetime.now(timezone.utc) - timedelta(days=2)
        token = _encode({"userId": 1, "iat": past, "exp": past + timedelta(days=1)})
        assert session_service.resolve_identity(token) is None

    def test_non_integer_user_id(self, app):
        now = datetime.now(timezone.utc)
        for bad in ("1", True, None, 1.5):
            token = _encode({"userId": bad, "iat": now, "exp": now + timedelta(days=1)})
            assert session_service.resolve_identity(token) is None

    def test_missing_expiry(self, app):
        token = _encode({"userId": 1})
        assert session_service.resolve_identity(token) is None


class TestRequestIdentity:

    def test_cookie_set_on_signin_identifies_caller(self, client, user):
        resp = client.post('/api/auth/signin', json={'email': 'alice@example.com', 'password': 'Password123!'})
        assert resp.status_code == 200
        cookie = resp.headers.get('Set-Cookie')
        assert cookie.startswith('token=')
        assert 'HttpOnly' in cookie
        assert 'SameSite=Lax' in cookie

        me = client.get('/api/auth/me')
        assert me.json['user']['email'] == 'alice@example.com'

    def test_bearer_header_identifies_caller(self, client, user, headers_for):
        me = client.get('/api/auth/me', headers=headers_for(user))
        assert me.json['user']['id'] == user.id

    def test_invalid_token_is_anonymous(self, client):
        me = client.get('/api/auth/me', headers={'Authorization': 'Bearer nope'})
        assert me.status_code == 200
        assert me.json['user'] is None

    def test_signout_clears_cookie(self, client, user):
        client.post('/api/auth/signin', json={'email': 'alice@example.com', 'password': 'Password123!'})
        resp = client.post('/api/auth/signout')
        assert resp.json == {'message': 'GoodBye!'}

        me = client.get('/api/auth/me')
        assert me.json['user'] is None
