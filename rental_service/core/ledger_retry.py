"""
Rental Service — Ledger transaction retry

A reservation attempt is one database transaction, and it can lose to a
concurrent reservation in two ways:
  - the conditional decrement touches fewer rows than the range has days
    (ConcurrencyConflictError from db/ledger_ops.py)
  - PostgreSQL aborts it as a deadlock victim (40P01) or a serialization
    failure (40001)
Either way the transaction has been rolled back by the time it reaches the
retry loop, so the whole attempt, availability check included, is run again
against the fresh ledger. Any other error propagates untouched.
"""
import asyncio
import functools
import logging
import random
from dataclasses import dataclass

from sqlalchemy.exc import DBAPIError

from rental_service.core.config import get_settings
from rental_service.core.exceptions import ConcurrencyConflictError

logger = logging.getLogger(__name__)

DEADLOCK_DETECTED = "40P01"
SERIALIZATION_FAILURE = "40001"
TRANSIENT_SQLSTATES = frozenset({DEADLOCK_DETECTED, SERIALIZATION_FAILURE})


def sqlstate_of(exc: DBAPIError) -> str | None:
    # asyncpg's adapted errors expose sqlstate, psycopg exposes pgcode
    orig = exc.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def is_transient_conflict(exc: BaseException) -> bool:
    return isinstance(exc, DBAPIError) and sqlstate_of(exc) in TRANSIENT_SQLSTATES


def as_ledger_conflict(exc: BaseException) -> ConcurrencyConflictError | None:
    """The ConcurrencyConflictError an error stands for, or None if it is not a lost race."""
    if isinstance(exc, ConcurrencyConflictError):
        return exc
    if is_transient_conflict(exc):
        return ConcurrencyConflictError(
            f"Ledger transaction aborted by the database (SQLSTATE {sqlstate_of(exc)})"
        )
    return None


@dataclass(frozen=True)
class RetryPolicy:
    attempts: int
    base_delay: float
    max_delay: float
    jitter: float

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        settings = get_settings()
        return cls(
            attempts=max(1, settings.CONFLICT_RETRY_MAX_ATTEMPTS),
            base_delay=settings.CONFLICT_RETRY_BASE_DELAY_MS / 1000.0,
            max_delay=settings.CONFLICT_RETRY_MAX_DELAY_MS / 1000.0,
            jitter=settings.CONFLICT_RETRY_JITTER_MS / 1000.0,
        )

    def backoff(self, failed_attempt: int) -> float:
        delay = min(self.base_delay * 2 ** (failed_attempt - 1), self.max_delay)
        return delay + random.uniform(0, self.jitter)


def retry_ledger_conflicts(policy: RetryPolicy | None = None):
    """
    Re-run a coroutine that performs one complete ledger transaction when it
    loses a race. After the last attempt the conflict surfaces as
    ConcurrencyConflictError, whatever form it was raised in.
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            active = policy or RetryPolicy.from_settings()
            failed = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except (ConcurrencyConflictError, DBAPIError) as exc:
                    conflict = as_ledger_conflict(exc)
                    if conflict is None:
                        raise
                    failed += 1
                    if failed >= active.attempts:
                        logger.error("%s gave up after %d attempt(s): %s", func.__qualname__, failed, conflict.message)
                        if conflict is exc:
                            raise
                        raise conflict from exc
                    delay = active.backoff(failed)
                    logger.warning(
                        "%s lost a ledger race (%s); attempt %d of %d in %.3fs",
                        func.__qualname__, conflict.message, failed + 1, active.attempts, delay,
                    )
                    await asyncio.sleep(delay)

        return wrapper

    return decorator
