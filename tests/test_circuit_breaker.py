import pytest

from baselinegate.errors import CircuitOpenError, TransientIOError
from baselinegate.resilience.circuit_breaker import BreakerState, CircuitBreaker, CircuitBreakerRegistry
from baselinegate.resilience.wrapper import call_resilient


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def _fail():
    raise ConnectionResetError("reset")


def _breaker(clock, **options):
    options.setdefault("failure_threshold", 3)
    options.setdefault("recovery_timeout", 30.0)
    options.setdefault("monitoring_period", 60.0)
    return CircuitBreaker("dataset", clock=clock, **options)


def _trip(breaker, times):
    for _ in range(times):
        with pytest.raises(ConnectionResetError):
            breaker.call(_fail)


def test_opens_after_threshold_and_fails_fast():
    clock = FakeClock()
    breaker = _breaker(clock)
    calls = []

    _trip(breaker, 3)

    assert breaker.state == BreakerState.OPEN
    with pytest.raises(CircuitOpenError) as exc:
        breaker.call(lambda: calls.append(1))
    assert calls == []
    assert exc.value.code == "CIRCUIT_BREAKER_OPEN"


def test_recovers_after_successful_trial():
    clock = FakeClock()
    breaker = _breaker(clock)
    _trip(breaker, 3)

    clock.advance(30.0)

    assert breaker.call(lambda: "ok") == "ok"
    assert breaker.state == BreakerState.CLOSED
    assert breaker.failures == 0


def test_failed_trial_reopens():
    clock = FakeClock()
    breaker = _breaker(clock)
    _trip(breaker, 3)

    clock.advance(31.0)
    _trip(breaker, 1)

    assert breaker.state == BreakerState.OPEN
    clock.advance(10.0)
    with pytest.raises(CircuitOpenError):
        breaker.call(lambda: "ok")


def test_interrupted_trial_allows_another_trial():
    clock = FakeClock()
    breaker = _breaker(clock)
    _trip(breaker, 3)
    clock.advance(30.0)

    def interrupted():
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        breaker.call(interrupted)

    assert breaker.state == BreakerState.HALF_OPEN
    assert breaker.call(lambda: "ok") == "ok"
    assert breaker.state == BreakerState.CLOSED


def test_stays_open_before_recovery_timeout():
    clock = FakeClock()
    breaker = _breaker(clock)
    _trip(breaker, 3)

    clock.advance(29.0)

    with pytest.raises(CircuitOpenError):
        breaker.call(lambda: "ok")


def test_failures_outside_monitoring_period_are_forgotten():
    clock = FakeClock()
    breaker = _breaker(clock)
    _trip(breaker, 2)

    clock.advance(61.0)
    _trip(breaker, 1)

    assert breaker.state == BreakerState.CLOSED
    assert breaker.failures == 1


def test_breaker_counts_one_failure_per_exhausted_retry_loop():
    clock = FakeClock()
    breaker = _breaker(clock, failure_threshold=2)
    attempts = []

    def failing():
        attempts.append(1)
        raise ConnectionResetError()

    for _ in range(2):
        with pytest.raises(TransientIOError):
            call_resilient(failing, "dataset", breaker=breaker, max_retries=1, sleep=lambda _: None)

    assert len(attempts) == 4
    assert breaker.state == BreakerState.OPEN

    with pytest.raises(CircuitOpenError):
        call_resilient(failing, "dataset", breaker=breaker, max_retries=1, sleep=lambda _: None)
    assert len(attempts) == 4


def test_registry_hands_out_one_breaker_per_context():
    registry = CircuitBreakerRegistry(failure_threshold=1)

    first = registry.get("webstatus")

    assert registry.get("webstatus") is first
    assert registry.get("snapshot") is not first
    assert first.failure_threshold == 1

    with pytest.raises(ConnectionResetError):
        first.call(_fail)

    assert registry.states() == {"webstatus": "OPEN", "snapshot": "CLOSED"}
