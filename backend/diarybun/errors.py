# Overview: Error kinds surfaced to API callers, each mapped to an HTTP status.

"""
Every failure a caller can act on is an ApiError subclass carrying the
status code the routes answer with. Messages are user-displayable.

Token resolution is the only place where a failure is not raised: an
invalid or expired session degrades to an anonymous request.
"""


class ApiError(Exception):
    """Base class for caller-facing errors."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class NotAuthenticated(ApiError):
    """No session, or the session does not resolve to a user."""
    status_code = 401


class InvalidCredentials(ApiError):
    """
    Signin failure.

    One message for unknown email and wrong password alike, so the
    response never reveals which accounts exist.
    """
    status_code = 401

    def __init__(self, message: str = "Invalid email or password!"):
        super().__init__(message)


class Forbidden(ApiError):
    """Authenticated but lacking ownership or permission."""
    status_code = 403


class NotFound(ApiError):
    status_code = 404


class ValidationError(ApiError, ValueError):
    """400-level input problem."""
    status_code = 400


class EmptyCartError(ValidationError):
    """Checkout attempted with nothing in the cart."""


class Conflict(ApiError):
    """409-level business rule conflict (duplicate account, checkout in progress)."""
    status_code = 409


class PaymentDeclined(ApiError):
    """The processor rejected the charge (card declined, insufficient funds...)."""
    status_code = 402


class PaymentGatewayError(ApiError):
    """The processor failed for a reason other than a decline."""
    status_code = 502
