# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Account Service: signup, signin, profile updates and password reset.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from AppSettings.bcrypt_rounds)
- Emails are lowercased before every lookup and write
- Signin answers unknown-email and wrong-password with the same
  InvalidCredentials error so accounts cannot be enumerated through it
- Reset tokens are 20 random bytes, hex-encoded; only their SHA-256 hash
  is stored
- request_reset() does reveal whether an email is registered (NotFound).
  That asymmetry is inherited from the existing API contract.
"""

from __future__ import annotations

import hashlib
import secrets

import bcrypt
from sqlalchemy.exc import IntegrityError

from ..config import get_settings
from ..errors import Conflict, InvalidCredentials, NotAuthenticated, NotFound, ValidationError
from ..extensions import db
from ..models import User
from ..permissions import DEFAULT_PERMISSIONS
from ..time_utils import utcnow
from ..validation import ModelValidationPolicy, enforce_rules_user, validate_payload
from . import mail_service, permission_service, session_service


RESET_TOKEN_BYTES = 20

USER_SELF_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name"}),
)


def _text(value, message: str) -> str:
    """A client-supplied string field; None reads as empty, other types are rejected."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(message)
    return value


def normalize_email(email: str | None) -> str:
    return _text(email, "Enter a valid email.").strip().lower()


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=get_settings().bcrypt_rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    bcrypt.checkpw() compares in constant time. A malformed stored hash
    counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def hash_reset_token(token: str) -> str:
    """SHA-256 is enough here: reset tokens are high-entropy, unlike passwords."""
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def signup(name: str, email: str, password: str) -> tuple[User, str]:
    """
    Create an account with the default permission set and sign it in.

    Returns (user, session_token).

    Raises:
        ValidationError: name shorter than 3 characters, blank email or password
        Conflict: an account with that email already exists
    """
    name = _text(name, "Name must be at least 3 characters long.").strip()
    email = normalize_email(email)
    password = _text(password, "Enter a password.")

    enforce_rules_user({"name": name})
    if not email:
        raise ValidationError("Enter a valid email.")
    if not password:
        raise ValidationError("Enter a password.")

    if db.session.query(User).filter_by(email=email).first():
        raise Conflict("This user exists")

    user = User(name=name, email=email, password_hash=hash_password(password))
    permission_service.set_permissions(user, DEFAULT_PERMISSIONS)

    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same email
        db.session.rollback()
        raise Conflict("This user exists")

    return user, session_service.issue_token(user.id)


def signin(email: str, password: str, ip_address: str | None = None, user_agent: str | None = None) -> tuple[User, str]:
    """
    Check credentials and issue a session token.

    Raises InvalidCredentials for an unknown email and for a wrong password
    alike.
    """
    email = normalize_email(email)
    password = _text(password, "Enter a password.")
    user = db.session.query(User).filter_by(email=email).first() if email else None

    if not user or not password or not verify_password(password, user.password_hash):
        permission_service.log_security_event(
            user_id=user.id if user else None,
            event_type="LOGIN_FAILED",
            success=False,
            resource="signin",
            reason="Invalid credentials",
            ip_address=ip_address,
            user_agent=user_agent,
        )
        raise InvalidCredentials()

    return user, session_service.issue_token(user.id)


def get_current_user(user_id: int | None) -> User | None:
    """The signed-in user, or None for anonymous requests."""
    if not user_id:
        return None
    return db.session.get(User, user_id)


def update_me(user_id: int | None, payload: dict) -> User:
    """Self-service profile update; only allow-listed fields are accepted."""
    user = get_current_user(user_id)
    if not user:
        raise NotAuthenticated("You Must Be Logged In!")

    patch = validate_payload(model=User, payload=payload, policy=USER_SELF_UPDATE_POLICY, partial=True)
    enforce_rules_user(patch)

    for key, value in patch.items():
        setattr(user, key, value)
    db.session.commit()
    return user


def request_reset(email: str) -> dict:
    """
    Start a password reset: store a hashed one-hour token and email it.

    Raises NotFound when no account uses the email.
    """
    email = normalize_email(email)
    user = db.session.query(User).filter_by(email=email).first() if email else None
    if not user:
        raise NotFound("No such user found for the email!")

    reset_token = secrets.token_hex(RESET_TOKEN_BYTES)
    user.reset_token_hash = hash_reset_token(reset_token)
    user.reset_token_expiry = utcnow() + get_settings().reset_token_ttl
    db.session.commit()

    mail_service.send_password_reset(user.email, reset_token)

    return {"message": "Thanks"}


def reset_password(reset_token: str, password: str, confirm_password: str) -> tuple[User, str]:
    """
    Finish a password reset and sign the user in.

    The token must match and its expiry must not be older than one reset
    window before now. On success both reset fields are cleared, so a token
    works exactly once.
    """
    reset_token = _text(reset_token, "This token is either invalid or expired!")
    password = _text(password, "Enter a password.")
    confirm_password = _text(confirm_password, "Enter a password.")

    if password != confirm_password:
        raise ValidationError("Your Passwords don't match!")
    if not password:
        raise ValidationError("Enter a password.")
    if not reset_token:
        raise ValidationError("This token is either invalid or expired!")

    cutoff = utcnow() - get_settings().reset_token_ttl
    user = (
        db.session.query(User)
        .filter(
            User.reset_token_hash == hash_reset_token(reset_token),
            User.reset_token_expiry >= cutoff,
        )
        .first()
    )
    if not user:
        raise ValidationError("This token is either invalid or expired!")

    user.password_hash = hash_password(password)
    user.reset_token_hash = None
    user.reset_token_expiry = None
    db.session.commit()

    permission_service.log_security_event(
        user_id=user.id,
        event_type="PASSWORD_RESET",
        success=True,
        resource="reset-password",
    )

    return user, session_service.issue_token(user.id)
