"""Exponential backoff for calls to upstream services."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from ridehail.core.exceptions import RideHailError, TransientError

T = TypeVar("T")
logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    max_attempts: int = 3
    base_delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 30.0
    retryable_exceptions: tuple[type[Exception], ...] = field(
        default_factory=lambda: (TransientError,)
    )

    def delay_for(self, attempt: int, error: Exception | None = None) -> float:
        """Seconds to wait after the zero-based ``attempt`` failed.

        An upstream ``retry_after`` hint (seconds, in the error details)
        replaces the computed backoff; both are capped at ``max_delay``.
        """
        hint = error.details.get("retry_after") if isinstance(error, RideHailError) else None
        if isinstance(hint, int | float) and hint >= 0:
            return min(float(hint), self.max_delay)
        return min(self.base_delay * self.multiplier**attempt, self.max_delay)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    config: RetryConfig | None = None,
    operation_name: str = "operation",
    on_retry: Callable[[Exception, int], None] | None = None,
) -> T:
    """Await ``operation`` until it succeeds, retrying only retryable errors.

    The last error is re-raised once ``max_attempts`` is exhausted; any other
    exception propagates immediately.
    """
    config = config or RetryConfig()
    attempt = 0
    while True:
        try:
            return await operation()
        except config.retryable_exceptions as e:
            if attempt + 1 >= config.max_attempts:
                logger.error("%s failed after %d attempts: %s", operation_name, attempt + 1, e)
                raise

            delay = config.delay_for(attempt, e)
            logger.warning(
                "%s failed (attempt %d/%d), retrying in %.1fs: %s",
                operation_name,
                attempt + 1,
                config.max_attempts,
                delay,
                e,
            )
            if on_retry:
                on_retry(e, attempt)
            await asyncio.sleep(delay)
            attempt += 1
