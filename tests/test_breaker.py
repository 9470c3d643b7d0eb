from insight_engine.breaker import CircuitBreaker

from helpers import FakeClock


def test_new_breaker_is_closed_and_allows_attempts() -> None:
    breaker = CircuitBreaker()
    assert breaker.state.status == "CLOSED"
    assert breaker.allow_attempt()


def test_open_breaker_blocks_until_deadline() -> None:
    clock = FakeClock()
    breaker = CircuitBreaker(cooldown=300, clock=clock)

    breaker.record_failure_exhausted()
    assert breaker.state.status == "OPEN"
    assert breaker.state.reset_deadline == clock.now + 300
    assert not breaker.allow_attempt()

    clock.advance(299.9)
    assert not breaker.allow_attempt()


def test_breaker_allows_trial_at_deadline_without_reset() -> None:
    clock = FakeClock()
    breaker = CircuitBreaker(cooldown=300, clock=clock)
    breaker.record_failure_exhausted()

    clock.advance(300)
    assert breaker.allow_attempt()
    # Half-open is per call; state only changes on outcome.
    assert breaker.state.status == "OPEN"
    assert breaker.allow_attempt()


def test_success_closes_breaker() -> None:
    clock = FakeClock()
    breaker = CircuitBreaker(cooldown=60, clock=clock)
    breaker.record_failure_exhausted()

    breaker.record_success()
    assert breaker.state.status == "CLOSED"
    assert breaker.allow_attempt()


def test_failed_trial_reopens_with_fresh_cooldown() -> None:
    clock = FakeClock()
    breaker = CircuitBreaker(cooldown=60, clock=clock)
    breaker.record_failure_exhausted()
    clock.advance(61)
    assert breaker.allow_attempt()

    breaker.record_failure_exhausted()
    assert breaker.state.reset_deadline == clock.now + 60
    assert not breaker.allow_attempt()
