# Overview: Payment gateway port with Stripe and fake adapters.

"""
Payment Gateway

The checkout pipeline only ever talks to PaymentGateway.charge(). Which
adapter serves it is decided once at startup from AppSettings:

- FakeGateway: in-process, configurable to succeed or decline; used for
  development and tests
- StripeGateway: the stripe-python SDK

Adapters raise PaymentDeclined for card/processor rejections and
PaymentGatewayError for every other processor failure. The message is the
processor's own, passed through unchanged.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from uuid import uuid4

import stripe
from flask import Flask, current_app

from ..config import AppSettings
from ..errors import PaymentDeclined, PaymentGatewayError


EXTENSION_KEY = "diarybun.payment_gateway"


@dataclass(frozen=True)
class Charge:
    """A successful charge: the processor's reference id and the amount taken."""
    id: str
    amount: int


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def charge(
        self,
        amount: int,
        currency: str,
        source: str,
        idempotency_key: str | None = None,
    ) -> Charge:
        """Charge amount (minor units) to the payment source token."""
        ...


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Your card was declined."
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Your card was declined.") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def charge(
        self,
        amount: int,
        currency: str,
        source: str,
        idempotency_key: str | None = None,
    ) -> Charge:
        self.calls.append({
            "amount": amount,
            "currency": currency,
            "source": source,
            "idempotency_key": idempotency_key,
        })

        if not self.should_succeed:
            raise PaymentDeclined(self.failure_reason)
        return Charge(id=f"fake_ch_{uuid4().hex[:12]}", amount=amount)


class StripeGateway(PaymentGateway):
    """Production Stripe gateway adapter."""

    def __init__(self, api_key: str) -> None:
        if not api_key:
            raise ValueError("STRIPE_SECRET_KEY is required for the stripe payment backend")
        self.api_key = api_key

    def charge(
        self,
        amount: int,
        currency: str,
        source: str,
        idempotency_key: str | None = None,
    ) -> Charge:
        try:
            result = stripe.Charge.create(
                amount=amount,
                currency=currency,
                source=source,
                api_key=self.api_key,
                idempotency_key=idempotency_key,
            )
        except stripe.CardError as exc:
            raise PaymentDeclined(exc.user_message or str(exc)) from exc
        except stripe.StripeError as exc:
            raise PaymentGatewayError(exc.user_message or str(exc)) from exc

        return Charge(id=result["id"], amount=int(result["amount"]))


def build_gateway(settings: AppSettings) -> PaymentGateway:
    if settings.payment_backend == "stripe":
        return StripeGateway(settings.stripe_secret_key)
    return FakeGateway()


def get_gateway() -> PaymentGateway:
    """Return the gateway configured for the current app."""
    return current_app.extensions[EXTENSION_KEY]


def set_gateway(app: Flask, gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    app.extensions[EXTENSION_KEY] = gateway
