"""
Retry and deadline helpers for outbound calls.
"""
import asyncio
from typing import Awaitable, Callable, TypeVar

from config import Config
from utils.errors import ErrorKind, ProviderError, classify_error
from utils.logger import get_logger

logger = get_logger("retry")

T = TypeVar("T")


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = Config.MAX_RETRIES,
    initial_delay: float = Config.RETRY_INITIAL_DELAY
) -> T:
    """
    Run an async operation, retrying transient failures with exponential backoff.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt
        max_retries: Total number of attempts
        initial_delay: Delay in seconds before the first retry; doubles each attempt

    Returns:
        The operation's result

    Raises:
        The last error once attempts are exhausted, or immediately for
        non-retryable error kinds
    """
    for attempt in range(max_retries):
        try:
            return await operation()
        except Exception as e:
            kind = classify_error(e)

            if not kind.retryable:
                logger.debug(f"Not retrying {kind.value} error: {e}")
                raise

            if attempt == max_retries - 1:
                logger.warning(f"Giving up after {max_retries} attempts: {e}")
                raise

            delay = initial_delay * (2 ** attempt)
            logger.warning(
                f"Attempt {attempt + 1}/{max_retries} failed ({kind.value}), retrying in {delay:.2f}s"
            )
            await asyncio.sleep(delay)

    raise ValueError("max_retries must be at least 1")


async def with_timeout(awaitable: Awaitable[T], seconds: float) -> T:
    """Await with a deadline, aborting the call when it expires."""
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError as e:
        raise ProviderError(f"Request timeout after {seconds:.0f}s", ErrorKind.TIMEOUT) from e
