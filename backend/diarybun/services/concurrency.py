# Overview: Concurrency helpers: retry on lock contention and the per-user checkout lock.

from __future__ import annotations

import time
from datetime import timedelta

from sqlalchemy import or_
from sqlalchemy.exc import OperationalError

from ..errors import Conflict
from ..extensions import db
from ..models import User
from ..time_utils import utcnow


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, "database is locked").
    """
    for attempt in range(attempts):
        try:
            return func()
        except OperationalError:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))


def acquire_checkout_lock(user_id: int, timeout: timedelta) -> None:
    """
    Mark a checkout as in progress for user_id, or raise Conflict.

    Compare-and-swap on users.checkout_started_at: the UPDATE only matches
    when no checkout is running, or when the running one is older than
    timeout (a crashed worker). Exactly one of several concurrent callers
    sees rowcount == 1.
    """
    def _op():
        now = utcnow()
        claimed = (
            db.session.query(User)
            .filter(
                User.id == user_id,
                or_(
                    User.checkout_started_at.is_(None),
                    User.checkout_started_at < now - timeout,
                ),
            )
            .update({User.checkout_started_at: now}, synchronize_session=False)
        )
        db.session.commit()
        return claimed

    if run_with_retry(_op) != 1:
        raise Conflict("A checkout is already in progress for this account")


def release_checkout_lock(user_id: int) -> None:
    def _op():
        db.session.query(User).filter(User.id == user_id).update(
            {User.checkout_started_at: None},
            synchronize_session=False,
        )
        db.session.commit()

    run_with_retry(_op)
