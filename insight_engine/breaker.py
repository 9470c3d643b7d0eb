"""Process-local circuit breaker guarding the inference service.

State is evaluated lazily: there is no timer, an open breaker simply lets the
next caller through once its cooldown has elapsed.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Literal

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN_SECONDS = 5 * 60


@dataclass(frozen=True)
class BreakerState:
    status: Literal["CLOSED", "OPEN"] = "CLOSED"
    reset_deadline: float = 0.0


class CircuitBreaker:
    """Stops calls to a failing dependency for a fixed cooldown."""

    def __init__(
        self,
        cooldown: float = DEFAULT_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        name: str = "inference",
    ):
        self.cooldown = cooldown
        self.name = name
        self._clock = clock
        self._lock = threading.Lock()
        self._state = BreakerState()

    @property
    def state(self) -> BreakerState:
        return self._state

    def allow_attempt(self) -> bool:
        """Return ``False`` while the breaker is open and still cooling down.

        After the deadline the call is let through (half-open) without changing
        state; the outcome decides what happens next.
        """
        with self._lock:
            state = self._state
            if state.status == "OPEN" and self._clock() < state.reset_deadline:
                return False
            if state.status == "OPEN":
                logger.info("Circuit breaker '%s' cooldown elapsed, allowing a trial call", self.name)
            return True

    def record_failure_exhausted(self) -> None:
        with self._lock:
            self._state = BreakerState("OPEN", self._clock() + self.cooldown)
        logger.error("Circuit breaker '%s' opened for %.0fs", self.name, self.cooldown)

    def record_success(self) -> None:
        with self._lock:
            if self._state.status == "OPEN":
                logger.info("Circuit breaker '%s' closed", self.name)
            self._state = BreakerState()
