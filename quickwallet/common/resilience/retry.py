"""
Retry helpers for operations that can fail transiently.
Uses tenacity to implement exponential backoff strategies.
"""
import logging

from sqlalchemy.exc import DisconnectionError, OperationalError, TimeoutError
from tenacity import (
    after_log,
    before_sleep_log,
    retry,
    retry_if_exception,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from quickwallet.common.exceptions import PersistenceFailure

logger = logging.getLogger(__name__)

# Database exceptions worth retrying
DB_RETRY_EXCEPTIONS = (
    OperationalError,
    DisconnectionError,
    TimeoutError,
    ConnectionError,
)


def is_transient_db_error(error: BaseException) -> bool:
    # session_scope wraps driver errors in PersistenceFailure
    if isinstance(error, PersistenceFailure):
        error = error.__cause__
    return isinstance(error, DB_RETRY_EXCEPTIONS)


def retry_db_operation(
    max_attempts: int = 3,
    initial_wait: float = 1.0,
    max_wait: float = 10.0,
    multiplier: float = 2.0,
):
    """
    Decorator retrying database operations that may fail transiently.

    Works on plain and ``async def`` callables alike.

    Args:
        max_attempts: Maximum number of attempts (default: 3)
        initial_wait: Initial wait in seconds (default: 1.0)
        max_wait: Maximum wait in seconds (default: 10.0)
        multiplier: Exponential backoff multiplier (default: 2.0)
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(
            multiplier=multiplier,
            min=initial_wait,
            max=max_wait,
        ),
        retry=retry_if_exception(is_transient_db_error),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        after=after_log(logger, logging.ERROR),
        reraise=True,
    )


def retry_with_backoff(
    max_attempts: int = 3,
    initial_wait: float = 1.0,
    max_wait: float = 10.0,
    multiplier: float = 2.0,
    retry_exceptions: tuple = (Exception,),
):
    """
    Generic retry decorator with exponential backoff.

    Args:
        max_attempts: Maximum number of attempts (default: 3)
        initial_wait: Initial wait in seconds (default: 1.0)
        max_wait: Maximum wait in seconds (default: 10.0)
        multiplier: Exponential backoff multiplier (default: 2.0)
        retry_exceptions: Exception types that trigger a retry
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(
            multiplier=multiplier,
            min=initial_wait,
            max=max_wait,
        ),
        retry=retry_if_exception_type(retry_exceptions),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        after=after_log(logger, logging.ERROR),
        reraise=True,
    )
