import asyncio

import pytest

from insight_engine.breaker import CircuitBreaker
from insight_engine.errors import FailureExhausted
from insight_engine.retry import RetryExecutor

from helpers import FakeClock, SleepRecorder


class CountingBreaker(CircuitBreaker):
    def __init__(self):
        super().__init__(clock=FakeClock())
        self.successes = 0
        self.exhaustions = 0

    def record_success(self) -> None:
        self.successes += 1
        super().record_success()

    def record_failure_exhausted(self) -> None:
        self.exhaustions += 1
        super().record_failure_exhausted()


def flaky(failures: int, result: str = "ok"):
    calls = {"count": 0}

    async def operation():
        calls["count"] += 1
        if calls["count"] <= failures:
            raise ConnectionError(f"boom {calls['count']}")
        return result

    return operation, calls


@pytest.mark.parametrize("failures", [0, 1, 2])
def test_recovers_before_exhaustion(failures: int) -> None:
    breaker = CountingBreaker()
    sleep = SleepRecorder()
    executor = RetryExecutor(breaker, max_attempts=3, base_delay=2.0, sleep=sleep)
    operation, calls = flaky(failures)

    assert asyncio.run(executor.execute(operation)) == "ok"
    assert calls["count"] == failures + 1
    assert breaker.successes == 1
    assert breaker.exhaustions == 0
    assert sleep.delays == [2.0, 4.0][:failures]


def test_exhaustion_opens_breaker_and_raises() -> None:
    breaker = CountingBreaker()
    sleep = SleepRecorder()
    executor = RetryExecutor(breaker, max_attempts=3, base_delay=2.0, sleep=sleep)
    operation, calls = flaky(5)

    with pytest.raises(FailureExhausted) as info:
        asyncio.run(executor.execute(operation))

    assert calls["count"] == 3
    assert sleep.delays == [2.0, 4.0]
    assert breaker.exhaustions == 1
    assert breaker.successes == 0
    assert breaker.state.status == "OPEN"
    assert info.value.attempts == 3
    assert isinstance(info.value.last_error, ConnectionError)


def test_errors_outside_retry_on_propagate() -> None:
    breaker = CountingBreaker()
    executor = RetryExecutor(breaker, retry_on=(ConnectionError,), sleep=SleepRecorder())

    async def operation():
        raise KeyError("bug")

    with pytest.raises(KeyError):
        asyncio.run(executor.execute(operation))
    assert breaker.exhaustions == 0


def test_rejects_zero_attempts() -> None:
    with pytest.raises(ValueError):
        RetryExecutor(CountingBreaker(), max_attempts=0)
