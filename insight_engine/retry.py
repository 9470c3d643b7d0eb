"""Bounded retries with linear backoff, reporting outcomes to a breaker."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from .breaker import CircuitBreaker
from .errors import FailureExhausted

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExecutor:
    """Run an async operation up to ``max_attempts`` times.

    Waits ``base_delay * k`` seconds after failed attempt ``k``. Exhaustion
    opens the breaker and raises :class:`FailureExhausted`; success closes it.
    """

    def __init__(
        self,
        breaker: CircuitBreaker,
        max_attempts: int = 3,
        base_delay: float = 2.0,
        retry_on: Tuple[Type[BaseException], ...] = (Exception,),
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.breaker = breaker
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.retry_on = retry_on
        self._sleep = sleep

    async def execute(self, operation: Callable[[], Awaitable[T]], label: str = "call") -> T:
        last_error: BaseException | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                result = await operation()
            except self.retry_on as exc:
                last_error = exc
                logger.warning("%s attempt %d/%d failed: %s", label, attempt, self.max_attempts, exc)
                if attempt < self.max_attempts:
                    await self._sleep(self.base_delay * attempt)
                continue
            self.breaker.record_success()
            return result

        logger.error("All %d %s attempts failed, opening circuit breaker", self.max_attempts, label)
        self.breaker.record_failure_exhausted()
        raise FailureExhausted(self.max_attempts, last_error) from last_error
