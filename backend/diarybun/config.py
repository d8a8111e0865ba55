# backend/diarybun/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping

from flask import current_app


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Shared secret used to sign session tokens
    APP_SECRET = os.environ.get("APP_SECRET", os.environ.get("SECRET_KEY", "dev-secret-key-change-me"))
    SECRET_KEY = APP_SECRET

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",  # optional alternative location
        "sqlite:///diarybun.sqlite3",  # default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:7777")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # "fake" never leaves the process; "stripe" talks to the real processor
    PAYMENT_BACKEND = os.environ.get("PAYMENT_BACKEND", "fake")
    STRIPE_SECRET_KEY = os.environ.get("STRIPE_SECRET_KEY", "")

    # "smtp" delivers messages; "outbox" keeps them in memory and is only
    # the default under TESTING
    MAIL_BACKEND = os.environ.get("MAIL_BACKEND")
    MAIL_FROM = os.environ.get("MAIL_FROM", "Diarybun@diarybun.com")
    SMTP_HOST = os.environ.get("SMTP_HOST", "localhost")
    SMTP_PORT = int(os.environ.get("SMTP_PORT", "25"))

    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "10"))
    STRICT_ITEM_DELETE = _env_bool("STRICT_ITEM_DELETE")
    CHECKOUT_LOCK_TIMEOUT_SECONDS = int(os.environ.get("CHECKOUT_LOCK_TIMEOUT_SECONDS", "300"))


@dataclass(frozen=True)
class AppSettings:
    """
    Process-wide settings, frozen when the app is created.

    Services read these through get_settings() instead of touching
    os.environ or app.config directly.
    """

    app_secret: str
    frontend_url: str
    payment_backend: str
    stripe_secret_key: str
    mail_backend: str
    mail_from: str
    smtp_host: str
    smtp_port: int
    bcrypt_rounds: int
    strict_item_delete: bool
    checkout_lock_timeout: timedelta
    currency: str = "USD"
    session_ttl: timedelta = timedelta(days=365)
    reset_token_ttl: timedelta = timedelta(hours=1)

    @classmethod
    def from_mapping(cls, config: Mapping) -> "AppSettings":
        payment_backend = str(config["PAYMENT_BACKEND"]).strip().lower()
        if payment_backend not in {"fake", "stripe"}:
            raise ValueError(f"Unknown PAYMENT_BACKEND: {payment_backend}")
        mail_backend = config.get("MAIL_BACKEND") or ("outbox" if config.get("TESTING") else "smtp")
        mail_backend = str(mail_backend).strip().lower()
        if mail_backend not in {"outbox", "smtp"}:
            raise ValueError(f"Unknown MAIL_BACKEND: {mail_backend}")

        return cls(
            app_secret=config["APP_SECRET"],
            frontend_url=str(config["FRONTEND_URL"]).rstrip("/"),
            payment_backend=payment_backend,
            stripe_secret_key=config["STRIPE_SECRET_KEY"],
            mail_backend=mail_backend,
            mail_from=config["MAIL_FROM"],
            smtp_host=config["SMTP_HOST"],
            smtp_port=int(config["SMTP_PORT"]),
            bcrypt_rounds=int(config["BCRYPT_ROUNDS"]),
            strict_item_delete=bool(config["STRICT_ITEM_DELETE"]),
            checkout_lock_timeout=timedelta(seconds=int(config["CHECKOUT_LOCK_TIMEOUT_SECONDS"])),
        )


def get_settings() -> AppSettings:
    return current_app.extensions["diarybun.settings"]
