"""Reconnect policy for channel clients, exponential backoff via tenacity."""
import asyncio
import logging
from typing import Optional

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    stop_never,
    wait_exponential,
)
from websockets.exceptions import InvalidHandshake, InvalidURI

logger = logging.getLogger(__name__)

# Default backoff configuration
DEFAULT_MIN_WAIT_SECONDS = 0.5
DEFAULT_MAX_WAIT_SECONDS = 10.0


def is_reconnectable_error(exception: BaseException) -> bool:
    """
    Determine if a failed connection attempt is worth retrying.

    Retryable:
    - Refused/reset/unreachable sockets and DNS failures (OSError)
    - Timeouts
    - Handshakes rejected with a 5xx or 429 status

    Not retryable:
    - Malformed relay URL
    - Handshakes rejected with any other status (wrong path, forbidden)
    """
    if isinstance(exception, InvalidURI):
        return False

    if isinstance(exception, (OSError, asyncio.TimeoutError, TimeoutError)):
        return True

    if isinstance(exception, InvalidHandshake):
        error_str = str(exception)
        if "429" in error_str:
            return True
        if any(code in error_str for code in ["500", "502", "503", "504"]):
            return True
        return False

    return False


def _validate_backoff_params(
    min_wait_seconds: float,
    max_wait_seconds: float,
    max_attempts: Optional[int],
) -> None:
    """
    Validate backoff parameters.

    Raises:
        ValueError: If any parameter is invalid
    """
    if max_attempts is not None and max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1 or None, got {max_attempts}")
    if min_wait_seconds <= 0:
        raise ValueError(f"min_wait_seconds must be positive, got {min_wait_seconds}")
    if max_wait_seconds <= 0:
        raise ValueError(f"max_wait_seconds must be positive, got {max_wait_seconds}")
    if min_wait_seconds > max_wait_seconds:
        raise ValueError(
            f"min_wait_seconds ({min_wait_seconds}) cannot exceed "
            f"max_wait_seconds ({max_wait_seconds})"
        )


def create_reconnect_policy(
    min_wait_seconds: float = DEFAULT_MIN_WAIT_SECONDS,
    max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
    max_attempts: Optional[int] = None,
) -> AsyncRetrying:
    """
    Create a reconnect policy with exponential backoff.

    Args:
        min_wait_seconds: First wait between attempts
        max_wait_seconds: Cap on the wait between attempts
        max_attempts: Give up after this many attempts; None retries forever

    Returns:
        An AsyncRetrying that re-raises the last error once it gives up

    Raises:
        ValueError: If parameters are invalid
    """
    _validate_backoff_params(min_wait_seconds, max_wait_seconds, max_attempts)

    return AsyncRetrying(
        retry=retry_if_exception(is_reconnectable_error),
        stop=stop_never if max_attempts is None else stop_after_attempt(max_attempts),
        wait=wait_exponential(
            multiplier=min_wait_seconds,
            min=min_wait_seconds,
            max=max_wait_seconds,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
