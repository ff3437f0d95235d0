"""
Retry utilities with exponential backoff and jitter.
Used by the catalog client for transient transport and server failures.
"""

import asyncio
import functools
import inspect
import logging
import random
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from product_resolver.exceptions import ResolverError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 0.5,
        max_delay: float = 10.0,
        exponential_base: float = 2.0,
        jitter: bool = True,
        jitter_range: Tuple[float, float] = (0.5, 1.5),
        retryable_exceptions: Tuple[Type[Exception], ...] = (Exception,),
        non_retryable_exceptions: Tuple[Type[Exception], ...] = (),
    ):
        self.max_attempts = max(1, max_attempts)
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter
        self.jitter_range = jitter_range
        self.retryable_exceptions = retryable_exceptions
        self.non_retryable_exceptions = non_retryable_exceptions

    def calculate_delay(self, attempt: int) -> float:
        """Calculate delay for given attempt with exponential backoff and jitter."""
        delay = self.base_delay * (self.exponential_base ** attempt)
        delay = min(delay, self.max_delay)

        if self.jitter:
            jitter_factor = random.uniform(*self.jitter_range)
            delay *= jitter_factor

        return delay

    def is_retryable(self, exc: Exception) -> bool:
        """Whether ``exc`` may be retried under this configuration."""
        if isinstance(exc, self.non_retryable_exceptions):
            return False
        if isinstance(exc, ResolverError) and not exc.retryable:
            return False
        return isinstance(exc, self.retryable_exceptions)


def retry_with_backoff(
    config: Optional[RetryConfig] = None,
    max_attempts: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 10.0,
    retryable_exceptions: Tuple[Type[Exception], ...] = (Exception,),
    on_retry: Optional[Callable[[Exception, int], None]] = None,
):
    """
    Decorator for retrying functions with exponential backoff.

    Coroutine functions sleep with ``asyncio.sleep`` so other page loads keep
    running while one waits; cancellation is never retried.

    Args:
        config: RetryConfig instance (overrides other params if provided)
        max_attempts: Maximum number of attempts
        base_delay: Initial delay in seconds
        max_delay: Maximum delay in seconds
        retryable_exceptions: Tuple of exception types to retry
        on_retry: Callback function called on each retry

    Returns:
        Decorated function with retry logic

    Example:
        @retry_with_backoff(max_attempts=3, base_delay=0.5)
        async def get_json(client, url):
            response = await client.get(url)
            response.raise_for_status()
            return response.json()
    """
    if config is None:
        config = RetryConfig(
            max_attempts=max_attempts,
            base_delay=base_delay,
            max_delay=max_delay,
            retryable_exceptions=retryable_exceptions,
        )

    def _should_stop(func, exc: Exception, attempt: int) -> bool:
        if not config.is_retryable(exc):
            logger.warning(f"Non-retryable exception in {func.__name__}: {exc}")
            return True
        if attempt >= config.max_attempts - 1:
            logger.error(
                f"All {config.max_attempts} attempts failed for "
                f"{func.__name__}: {exc}"
            )
            return True
        return False

    def _next_delay(func, exc: Exception, attempt: int) -> float:
        delay = config.calculate_delay(attempt)
        logger.warning(
            f"Attempt {attempt + 1}/{config.max_attempts} failed for "
            f"{func.__name__}: {exc}. Retrying in {delay:.2f}s"
        )
        if on_retry:
            on_retry(exc, attempt + 1)
        return delay

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                for attempt in range(config.max_attempts):
                    try:
                        return await func(*args, **kwargs)
                    except Exception as e:
                        if _should_stop(func, e, attempt):
                            raise
                        await asyncio.sleep(_next_delay(func, e, attempt))
                raise RuntimeError("Retry loop completed without success or exception")
            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            for attempt in range(config.max_attempts):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if _should_stop(func, e, attempt):
                        raise
                    time.sleep(_next_delay(func, e, attempt))
            raise RuntimeError("Retry loop completed without success or exception")

        return wrapper
    return decorator
