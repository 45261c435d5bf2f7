# Overview: Row locking and retry helpers shared by the invoice and payment services.

from __future__ import annotations

import logging
import time

from flask import current_app
from sqlalchemy.exc import OperationalError

from ..extensions import db

logger = logging.getLogger(__name__)


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    The lock lasts until the surrounding transaction commits or rolls back.
    populate_existing() refreshes an instance already in the session so the
    caller sees the row as it is once the lock is held.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update().populate_existing()


def run_with_retry(func, *, attempts: int | None = None, backoff_base: float | None = None):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (lock timeouts, deadlocks). Anything else,
    and the last OperationalError once attempts run out, propagates.
    """
    if attempts is None:
        attempts = current_app.config.get("PAYMENT_LOCK_RETRY_ATTEMPTS", 3)
    if backoff_base is None:
        backoff_base = current_app.config.get("PAYMENT_LOCK_RETRY_BACKOFF", 0.1)

    for attempt in range(attempts):
        try:
            return func()
        except OperationalError:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            logger.warning(
                "Retrying after database concurrency failure",
                extra={"attempt": attempt + 1, "attempts": attempts},
            )
            time.sleep(backoff_base * (2 ** attempt))
