#!/usr/bin/env python3
"""Retry with exponential backoff for Jira API calls.

Example:
    config = RetryConfig(max_attempts=3, initial_delay=0.5, backoff_factor=2.0)
    data = await retry_async(client.search_issues, request, config=config)

With the default config a call that fails twice and then succeeds waits
0.5s before the second attempt and 1.0s before the third.
"""
import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from .exceptions import IssueSyncInfraError, NetworkError, RateLimitError, ServerError

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ============================================
# Retry with Exponential Backoff
# ============================================

# Default exceptions that are considered retryable
DEFAULT_RETRYABLE_EXCEPTIONS = (
    NetworkError,
    RateLimitError,
    ServerError,
    asyncio.TimeoutError,
    ConnectionResetError,
)


@dataclass(frozen=True)
class RetryConfig:
    """Retry policy for a single remote call.

    Attributes:
        max_attempts: Total attempts, including the first one
        initial_delay: Seconds to wait before the second attempt
        backoff_factor: Multiplier applied to the delay after each retry
        max_delay: Upper bound for a single wait
        jitter: Randomize each wait between 50% and 150% of its nominal value
        retryable_exceptions: Exception types worth another attempt
    """
    max_attempts: int = 3
    initial_delay: float = 0.5
    backoff_factor: float = 2.0
    max_delay: float = 60.0
    jitter: bool = False
    retryable_exceptions: tuple = DEFAULT_RETRYABLE_EXCEPTIONS


def is_retryable(error: BaseException, config: RetryConfig) -> bool:
    """Check whether ``error`` should be retried under ``config``."""
    if not isinstance(error, config.retryable_exceptions):
        return False
    if isinstance(error, IssueSyncInfraError):
        return error.recoverable
    return True


async def retry_async(
    func: Callable[..., Awaitable[T]],
    *args,
    config: Optional[RetryConfig] = None,
    **kwargs,
) -> T:
    """Retry an async function call with exponential backoff.

    Non-retryable errors are raised on the spot. When every attempt fails
    the last error is raised unchanged.

    Args:
        func: Async function to call
        *args: Arguments to pass to func
        config: Retry policy (defaults to ``RetryConfig()``)
        **kwargs: Keyword arguments to pass to func

    Returns:
        Result from func
    """
    config = config or RetryConfig()
    delay = config.initial_delay

    for attempt in range(1, config.max_attempts + 1):
        try:
            return await func(*args, **kwargs)

        except Exception as e:
            if not is_retryable(e, config):
                raise

            if attempt >= config.max_attempts:
                logger.error(
                    f"All {config.max_attempts} attempts failed. Last error: {e}"
                )
                raise

            actual_delay = min(delay, config.max_delay)
            if config.jitter:
                actual_delay = actual_delay * (0.5 + random.random())

            logger.warning(
                f"Attempt {attempt}/{config.max_attempts} failed: {e}. "
                f"Retrying in {actual_delay:.1f}s"
            )
            await asyncio.sleep(actual_delay)
            delay = min(delay * config.backoff_factor, config.max_delay)

    raise RuntimeError("Retry logic error: max_attempts must be at least 1")
