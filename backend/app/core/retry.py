"""Retry utilities for datastore writes with exponential backoff."""
import logging
from typing import Callable, Optional, TypeVar

from sqlalchemy.exc import DBAPIError, OperationalError
from sqlmodel import Session
from tenacity import (
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    before_sleep_log,
)

from app.core.settings import get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MIN_WAIT_SECONDS = 0.1


def is_retryable_db_error(exception: BaseException) -> bool:
    """
    Determine if a datastore exception is transient.

    Retryable errors include:
    - Operational errors (connection lost, lock timeout, statement timeout)
    - DBAPI errors flagged as having invalidated the connection

    Integrity and programming errors are never retried.
    """
    if isinstance(exception, OperationalError):
        return True
    if isinstance(exception, DBAPIError) and exception.connection_invalidated:
        return True
    return False


def run_with_retry(
    session: Session,
    operation: Callable[[], T],
    max_attempts: Optional[int] = None,
    min_wait_seconds: float = DEFAULT_MIN_WAIT_SECONDS,
    max_wait_seconds: Optional[float] = None,
) -> T:
    """
    Run a read-modify-write operation, rolling back and retrying on transient errors.

    Args:
        session: Session used by the operation (rolled back after each failure)
        operation: Callable performing the work and its commit
        max_attempts: Maximum number of attempts (defaults to PERSISTENCE_RETRY_ATTEMPTS)
        max_wait_seconds: Back-off ceiling (defaults to PERSISTENCE_RETRY_MAX_WAIT_SECONDS)

    Returns:
        The operation's result. The last exception is re-raised once attempts are exhausted.
    """
    settings = get_settings()
    attempts = max_attempts or settings.PERSISTENCE_RETRY_ATTEMPTS
    max_wait = settings.PERSISTENCE_RETRY_MAX_WAIT_SECONDS if max_wait_seconds is None else max_wait_seconds
    retrying = Retrying(
        retry=retry_if_exception(is_retryable_db_error),
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(
            multiplier=min_wait_seconds,
            min=min_wait_seconds,
            max=max_wait,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    for attempt in retrying:
        with attempt:
            try:
                return operation()
            except Exception:
                session.rollback()
                raise
