"""
Bounded retry with backoff for lock contention in vote transactions.
"""

import functools
import logging
import time

from django.conf import settings
from django.db import OperationalError, connection

from core.exceptions import ConcurrencyConflictError

logger = logging.getLogger(__name__)

# Substrings of driver messages that mean "lock not acquired", not a broken database
LOCK_ERROR_MARKERS = (
    "lock timeout",
    "lock_timeout",
    "canceling statement due to lock timeout",
    "could not obtain lock",
    "deadlock detected",
    "could not serialize access",
    "database is locked",
    "database table is locked",
)


def is_lock_error(exc):
    """Return True if a database error was caused by lock contention."""
    message = str(exc).lower()
    return any(marker in message for marker in LOCK_ERROR_MARKERS)


def set_local_lock_timeout():
    """
    Bound how long the current transaction waits on row locks.

    Only PostgreSQL supports a per-transaction lock timeout; SQLite uses the
    connection-level ``timeout`` option from settings instead.
    """
    if connection.vendor != "postgresql":
        return
    timeout_ms = int(getattr(settings, "VOTE_LOCK_TIMEOUT_MS", 2000))
    with connection.cursor() as cursor:
        cursor.execute(f"SET LOCAL lock_timeout = {timeout_ms}")


def retry_on_conflict(func=None, *, max_retries=None, backoff=None):
    """
    Retry a transactional function when it fails with ConcurrencyConflictError.

    Lock-related ``OperationalError``s raised by the wrapped function are
    translated into ConcurrencyConflictError first. The wrapped function must
    open its own ``transaction.atomic()`` block so every attempt starts from a
    clean transaction. After ``max_retries`` retries the conflict is raised to
    the caller.
    """

    def decorator(inner):
        @functools.wraps(inner)
        def wrapper(*args, **kwargs):
            retries = max_retries if max_retries is not None else getattr(settings, "VOTE_CONFLICT_MAX_RETRIES", 3)
            delay = backoff if backoff is not None else getattr(settings, "VOTE_CONFLICT_BACKOFF_SECONDS", 0.05)
            attempt = 0
            while True:
                try:
                    try:
                        return inner(*args, **kwargs)
                    except OperationalError as e:
                        if not is_lock_error(e):
                            raise
                        raise ConcurrencyConflictError() from e
                except ConcurrencyConflictError:
                    if attempt >= retries:
                        logger.warning(f"{inner.__name__}: giving up after {attempt + 1} attempts due to lock contention")
                        raise
                    sleep_for = delay * (2 ** attempt)
                    attempt += 1
                    logger.info(f"{inner.__name__}: lock contention, retry {attempt}/{retries} in {sleep_for:.3f}s")
                    time.sleep(sleep_for)

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator
