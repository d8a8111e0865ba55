"""
Pytest fixtures for Diarybun backend tests.

Provides an app on a fresh in-memory database per test, the test client,
the fake payment gateway and in-memory mail outbox, and user/item factories.
"""

import pytest

from diarybun import create_app
from diarybun.extensions import db
from diarybun.models import Item
from diarybun.services import auth_service, permission_service, session_service
from diarybun.services.payment_gateway import FakeGateway, set_gateway
from diarybun.services.mail_service import OutboxMailer, set_mailer


TEST_PASSWORD = "Password123!"


@pytest.fixture(scope='function')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'APP_SECRET': 'test-secret',
        'PAYMENT_BACKEND': 'fake',
        'MAIL_BACKEND': 'outbox',
        'BCRYPT_ROUNDS': 4,
        'STRICT_ITEM_DELETE': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    return db.session


@pytest.fixture(scope='function')
def gateway(app):
    """Fresh fake gateway; succeeds unless reconfigured."""
    fake = FakeGateway()
    set_gateway(app, fake)
    return fake


@pytest.fixture(scope='function')
def outbox(app):
    """Messages sent during the test."""
    mailer = OutboxMailer()
    set_mailer(app, mailer)
    return mailer.outbox


@pytest.fixture(scope='function')
def make_user(db_session):
    """Factory: create a user with USER plus any extra permissions."""
    counter = {"n": 0}

    def _make_user(name=None, email=None, password=TEST_PASSWORD, permissions=()):
        counter["n"] += 1
        user, _token = auth_service.signup(
            name or f"User {counter['n']}",
            email or f"user{counter['n']}@example.com",
            password,
        )
        if permissions:
            permission_service.set_permissions(user, list(user.permissions) + list(permissions))
            db_session.commit()
        return user

    return _make_user


@pytest.fixture(scope='function')
def make_item(db_session):
    """Factory: create a catalog item."""
    def _make_item(owner=None, title="Dog Diary", price=500, description="A diary for dogs"):
        item = Item(
            title=title,
            description=description,
            price=price,
            image="dog.jpg",
            large_image="dog-large.jpg",
            user_id=owner.id if owner else None,
        )
        db_session.add(item)
        db_session.commit()
        return item

    return _make_item


@pytest.fixture(scope='function')
def user(make_user):
    return make_user(name="Alice", email="alice@example.com")


@pytest.fixture(scope='function')
def other_user(make_user):
    return make_user(name="Bobby", email="bob@example.com")


@pytest.fixture(scope='function')
def admin(make_user):
    return make_user(name="Admin", email="admin@example.com", permissions=["ADMIN"])


def auth_headers(user) -> dict:
    """Helper to create Authorization headers for a user."""
    return {'Authorization': f'Bearer {session_service.issue_token(user.id)}'}


@pytest.fixture(scope='function')
def headers_for(app):
    return auth_headers
