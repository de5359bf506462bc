"""
Retry helper for transient delivery errors with exponential backoff.

Only the voice publisher retries; the conversation core never does.
"""
import asyncio
import random
from typing import Any, Callable, Optional, Tuple, Type

import aiohttp

from .utils.logging import get_logger

logger = get_logger(__name__)


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential_base: float = 2.0,
        jitter: bool = True,
        retryable_exceptions: Optional[Tuple[Type[BaseException], ...]] = None,
        retryable_status_codes: Optional[Tuple[int, ...]] = None,
    ):
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter
        self.retryable_exceptions = retryable_exceptions or (
            aiohttp.ClientConnectionError, asyncio.TimeoutError, ConnectionError
        )
        self.retryable_status_codes = retryable_status_codes or (429, 500, 502, 503, 504)


def is_retryable_error(error: BaseException, config: RetryConfig) -> bool:
    """HTTP errors are retried by status code; other errors by type."""
    if isinstance(error, aiohttp.ClientResponseError):
        return error.status in config.retryable_status_codes
    return isinstance(error, config.retryable_exceptions)


def calculate_delay(attempt: int, config: RetryConfig, retry_after: Optional[float] = None) -> float:
    """
    Exponential backoff with jitter for a 0-based attempt number.

    A server-provided Retry-After hint raises the delay, bounded by max_delay.
    """
    delay = min(config.base_delay * (config.exponential_base ** attempt), config.max_delay)
    if config.jitter:
        jitter_range = delay * 0.1
        delay += random.uniform(-jitter_range, jitter_range)
    if retry_after is not None and retry_after > 0:
        delay = max(delay, min(retry_after, config.max_delay))
    return max(0.0, delay)


async def retry_async(func: Callable, config: RetryConfig, *args, **kwargs) -> Any:
    """
    Execute an async function with retry logic.

    Raises:
        The last exception encountered if all retries fail, or the first
        non-retryable one.
    """
    name = getattr(func, "__name__", repr(func))
    for attempt in range(config.max_attempts):
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            if not is_retryable_error(e, config) or attempt == config.max_attempts - 1:
                if attempt > 0:
                    logger.error(f"✖ Giving up on {name} after {attempt + 1} attempts: {e}")
                raise

            delay = calculate_delay(attempt, config, getattr(e, "retry_after_seconds", None))
            logger.warning(
                f"⚠ Attempt {attempt + 1} failed for {name}: {e}. Retrying in {delay:.2f}s...",
                extra={"subsys": "retry", "event": "retry.scheduled"},
            )
            await asyncio.sleep(delay)
        else:
            if attempt > 0:
                logger.info(f"✔ {name} succeeded on attempt {attempt + 1}")
            return result
    raise RuntimeError("retry_async called with max_attempts < 1")


DELIVERY_RETRY_CONFIG = RetryConfig(
    max_attempts=2,
    base_delay=1.0,
    max_delay=8.0,
    exponential_base=1.5,
)
