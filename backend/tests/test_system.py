"""
System endpoint and app wiring tests.
"""

import pytest

from diarybun import create_app
from diarybun.config import get_settings
from diarybun.services.mail_service import EmailMessage, OutboxMailer, SmtpMailer, get_mailer


def test_health(client):
    resp = client.get('/health')
    assert resp.status_code == 200
    assert resp.json['status'] == 'healthy'
    assert resp.json['database']['details'] == {'users': 0, 'items': 0, 'orders': 0}


def test_cors_allows_frontend_with_credentials(client):
    resp = client.get('/api/items/count', headers={'Origin': 'http://localhost:7777'})
    assert resp.headers['Access-Control-Allow-Origin'] == 'http://localhost:7777'
    assert resp.headers['Access-Control-Allow-Credentials'] == 'true'


def test_cors_ignores_other_origins(client):
    resp = client.get('/api/items/count', headers={'Origin': 'http://evil.example'})
    assert 'Access-Control-Allow-Origin' not in resp.headers


def test_settings_frozen_from_config(app):
    settings = get_settings()
    assert settings.currency == 'USD'
    assert settings.bcrypt_rounds == 4
    assert settings.checkout_lock_timeout.total_seconds() == 300


def test_unknown_payment_backend_rejected():
    with pytest.raises(ValueError, match="PAYMENT_BACKEND"):
        create_app({'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:', 'PAYMENT_BACKEND': 'paypal'})


def test_default_mailer_delivers_over_smtp():
    app = create_app({'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:'})
    with app.app_context():
        assert isinstance(get_mailer(), SmtpMailer)
        assert get_settings().mail_backend == 'smtp'


def test_testing_app_uses_outbox():
    app = create_app({'TESTING': True, 'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:'})
    with app.app_context():
        assert isinstance(get_mailer(), OutboxMailer)


def test_outbox_keeps_only_latest_messages(app):
    mailer = OutboxMailer(max_messages=3)
    for n in range(5):
        mailer.send(EmailMessage(to=f"u{n}@example.com", from_="x", subject="s", text="t", html="h"))

    assert len(mailer.outbox) == 3
    assert [m.to for m in mailer.outbox] == ['u2@example.com', 'u3@example.com', 'u4@example.com']
