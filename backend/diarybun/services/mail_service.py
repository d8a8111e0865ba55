# Overview: Outbound email: message formatting and the configured delivery backend.

from __future__ import annotations

import smtplib
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from email.message import EmailMessage as MimeMessage
from urllib.parse import urlencode

from flask import Flask, current_app

from ..config import AppSettings, get_settings


EXTENSION_KEY = "diarybun.mailer"

# Only the most recent messages are kept; they carry plaintext reset links
OUTBOX_MAX_MESSAGES = 50


@dataclass(frozen=True)
class EmailMessage:
    to: str
    from_: str
    subject: str
    text: str
    html: str


class Mailer(ABC):
    @abstractmethod
    def send(self, message: EmailMessage) -> None:
        ...


class OutboxMailer(Mailer):
    """Keeps the latest sent messages in memory and logs them. Tests only."""

    def __init__(self, max_messages: int = OUTBOX_MAX_MESSAGES) -> None:
        self.outbox: deque[EmailMessage] = deque(maxlen=max_messages)

    def send(self, message: EmailMessage) -> None:
        self.outbox.append(message)
        current_app.logger.info("Queued email to %s: %s", message.to, message.subject)


class SmtpMailer(Mailer):
    def __init__(self, host: str, port: int) -> None:
        self.host = host
        self.port = port

    def send(self, message: EmailMessage) -> None:
        mime = MimeMessage()
        mime["To"] = message.to
        mime["From"] = message.from_
        mime["Subject"] = message.subject
        mime.set_content(message.text)
        mime.add_alternative(message.html, subtype="html")

        with smtplib.SMTP(self.host, self.port) as smtp:
            smtp.send_message(mime)


def build_mailer(settings: AppSettings) -> Mailer:
    if settings.mail_backend == "smtp":
        return SmtpMailer(settings.smtp_host, settings.smtp_port)
    return OutboxMailer()


def get_mailer() -> Mailer:
    return current_app.extensions[EXTENSION_KEY]


def set_mailer(app: Flask, mailer: Mailer) -> None:
    app.extensions[EXTENSION_KEY] = mailer


def make_a_nice_email(text: str) -> str:
    return f"""
  <div className="email" style="
    padding: 20px;
    border: 1px solid black;
    font-family: sans-serif;
    font-size: 20px;
    line-height: 2;
  ">
    <h2>Hello there,</h2>
    <p>{text}</p>

    <br />
    <p>Diarybun</p>
  </div>
"""


def send_password_reset(email: str, reset_token: str) -> None:
    """Email the reset link carrying the plaintext token."""
    settings = get_settings()
    link = f"{settings.frontend_url}/reset?{urlencode({'resetToken': reset_token})}"
    message = EmailMessage(
        to=email,
        from_=settings.mail_from,
        subject="Diarybun Password Reset Token",
        text=f"Your password reset token is here! {link}",
        html=make_a_nice_email(
            "Your Password Reset Token is Here!"
            "<br /><br />"
            f'<a href="{link}">Click here to reset!</a>'
        ),
    )
    get_mailer().send(message)
