import logging
import threading
import time
from enum import Enum
from typing import Callable, Dict, Optional, TypeVar

from baselinegate.errors import CircuitOpenError
from baselinegate.telemetry import emit_breaker_state

logger = logging.getLogger("baselinegate.resilience")

T = TypeVar("T")


class BreakerState(str, Enum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


class CircuitBreaker:
    """
    Per-context circuit breaker.

    CLOSED    -> OPEN       after `failure_threshold` failures inside one
                            monitoring period
    OPEN      -> HALF_OPEN  once `recovery_timeout` seconds have passed since
                            the last failure; one trial call is let through
    HALF_OPEN -> CLOSED     when the trial succeeds
    HALF_OPEN -> OPEN       when the trial fails

    While OPEN (or while a trial is in flight) calls fail fast with
    CircuitOpenError without running the operation.
    """

    def __init__(
        self,
        context: str,
        failure_threshold: int = 5,
        recovery_timeout: float = 30.0,
        monitoring_period: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.context = context
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.monitoring_period = monitoring_period
        self._clock = clock
        self._lock = threading.Lock()

        self._state = BreakerState.CLOSED
        self._failures = 0
        self._last_failure_time: Optional[float] = None
        self._window_start = clock()
        self._trial_in_flight = False

    @property
    def state(self) -> BreakerState:
        with self._lock:
            return self._state

    @property
    def failures(self) -> int:
        with self._lock:
            return self._failures

    def _transition(self, new_state: BreakerState):
        # caller holds the lock
        if new_state == self._state:
            return
        old_state, self._state = self._state, new_state
        if new_state == BreakerState.OPEN:
            logger.warning(f"Circuit breaker opened for {self.context} after {self._failures} failures")
        else:
            logger.info(f"Circuit breaker for {self.context}: {old_state.value} -> {new_state.value}")
        emit_breaker_state(self.context, new_state.value)

    def _before_call(self):
        with self._lock:
            now = self._clock()

            if self._state == BreakerState.CLOSED and now - self._window_start > self.monitoring_period:
                self._failures = 0
                self._window_start = now

            if self._state == BreakerState.OPEN:
                if now - self._last_failure_time >= self.recovery_timeout:
                    self._transition(BreakerState.HALF_OPEN)
                else:
                    raise CircuitOpenError(self.context)

            if self._state == BreakerState.HALF_OPEN:
                if self._trial_in_flight:
                    raise CircuitOpenError(self.context)
                self._trial_in_flight = True

    def _on_success(self):
        with self._lock:
            if self._state == BreakerState.HALF_OPEN:
                self._trial_in_flight = False
                self._failures = 0
                self._window_start = self._clock()
                self._transition(BreakerState.CLOSED)

    def _on_failure(self):
        with self._lock:
            self._failures += 1
            self._last_failure_time = self._clock()
            if self._state == BreakerState.HALF_OPEN:
                self._trial_in_flight = False
                self._transition(BreakerState.OPEN)
            elif self._failures >= self.failure_threshold:
                self._transition(BreakerState.OPEN)

    def _release_trial(self):
        # interrupted trial: neither a success nor a failure
        with self._lock:
            self._trial_in_flight = False

    def call(self, operation: Callable[[], T]) -> T:
        self._before_call()
        try:
            result = operation()
        except Exception:
            self._on_failure()
            raise
        except BaseException:
            self._release_trial()
            raise
        self._on_success()
        return result


class CircuitBreakerRegistry:
    """Hands out one breaker per context key, created on first use."""

    def __init__(self, **breaker_options):
        self._options = breaker_options
        self._lock = threading.Lock()
        self._breakers: Dict[str, CircuitBreaker] = {}

    def get(self, context: str) -> CircuitBreaker:
        with self._lock:
            breaker = self._breakers.get(context)
            if breaker is None:
                breaker = CircuitBreaker(context, **self._options)
                self._breakers[context] = breaker
            return breaker

    def states(self) -> Dict[str, str]:
        with self._lock:
            breakers = list(self._breakers.items())
        return {context: breaker.state.value for context, breaker in breakers}
