"""Retry utilities with a bounded attempt count and fixed delay."""

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_fixed,
)
import structlog

from comicsource.core.exceptions import HttpStatusFailure, NetworkFailure, TimeoutExceeded


logger = structlog.get_logger(__name__)

# Statuses worth another attempt; everything else in 4xx is a hard answer
RETRYABLE_STATUS_CODES = frozenset({408, 425, 429, 500, 502, 503, 504})


def is_transient(exc: BaseException) -> bool:
    """Decide whether a fetch failure might succeed on a later attempt.

    Bot walls and permanent HTTP errors are not retried: asking again only
    burns the source's patience.
    """
    if isinstance(exc, (NetworkFailure, TimeoutExceeded)):
        return True
    if isinstance(exc, HttpStatusFailure):
        return exc.http_status in RETRYABLE_STATUS_CODES
    return False


def _log_before_sleep(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "fetch_retry_scheduled",
        attempt=retry_state.attempt_number,
        error=str(exc) if exc else None,
    )


def fetch_retrying(attempts: int = 3, delay_seconds: float = 1.0) -> AsyncRetrying:
    """Build an async retry controller for fetch operations.

    Args:
        attempts: Total number of attempts (first try included)
        delay_seconds: Fixed pause between attempts

    Returns:
        Configured tenacity AsyncRetrying instance
    """
    return AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_fixed(delay_seconds),
        retry=retry_if_exception(is_transient),
        before_sleep=_log_before_sleep,
        reraise=True,
    )
