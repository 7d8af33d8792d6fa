"""Timeout and retry policy for store calls."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from ..errors import StoreUnavailable


class StoreCallPolicy:
    """Bound every store call with a timeout and retry transient failures.

    Only ``StoreUnavailable`` is ever retried, and only when the caller marks
    the call as safe to repeat.
    """

    def __init__(
        self,
        timeout_seconds: float = 5.0,
        retry_attempts: int = 3,
        retry_backoff_seconds: float = 0.1,
        logger: Optional[logging.Logger] = None,
    ):
        self.timeout_seconds = timeout_seconds
        self.retry_attempts = max(1, retry_attempts)
        self.retry_backoff_seconds = retry_backoff_seconds
        self.logger = logger or logging.getLogger(__name__)

    async def call(
        self,
        operation: str,
        func: Callable[..., Awaitable[Any]],
        *args,
        retry: bool = False,
    ) -> Any:
        """Run ``func(*args)`` under the policy.

        Args:
            operation: Name used in log messages
            func: Store coroutine function
            retry: Whether a transient failure may be retried

        Raises:
            StoreUnavailable: On timeout or connection failure after all attempts
        """
        attempts = self.retry_attempts if retry else 1
        delay = self.retry_backoff_seconds

        for attempt in range(attempts):
            try:
                return await asyncio.wait_for(func(*args), timeout=self.timeout_seconds)
            except asyncio.TimeoutError:
                error = StoreUnavailable(f"{operation} timed out after {self.timeout_seconds}s")
            except StoreUnavailable as e:
                error = e

            if attempt < attempts - 1:
                self.logger.warning(
                    f"{operation} failed on attempt {attempt + 1}/{attempts}, retrying in {delay}s: {error}"
                )
                await asyncio.sleep(delay)
                delay *= 2  # Exponential backoff
                continue

            self.logger.error(f"{operation} failed after {attempts} attempt(s): {error}")
            raise error
