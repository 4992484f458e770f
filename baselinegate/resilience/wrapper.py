import functools
import time
from typing import Callable, Optional

from baselinegate.resilience.circuit_breaker import CircuitBreaker
from baselinegate.resilience.classify import is_transient_network_error
from baselinegate.resilience.error_log import ErrorLog
from baselinegate.resilience.retry import with_retry
from baselinegate.resilience.timeout import with_timeout


def call_resilient(
    operation: Callable,
    context: str,
    breaker: Optional[CircuitBreaker] = None,
    timeout: Optional[float] = None,
    max_retries: int = 3,
    retry_delay: float = 1.0,
    exponential_backoff: bool = True,
    is_retryable: Callable[[BaseException], bool] = is_transient_network_error,
    sleep: Callable[[float], None] = time.sleep,
    error_log: Optional[ErrorLog] = None,
):
    """
    Breaker around the retry loop, timeout around each attempt.
    Each layer is optional; with none configured this is a plain retry.
    """

    def attempt():
        if timeout is None:
            return operation()
        return with_timeout(operation, timeout, context)

    def retried():
        return with_retry(
            attempt,
            context=context,
            max_retries=max_retries,
            retry_delay=retry_delay,
            exponential_backoff=exponential_backoff,
            is_retryable=is_retryable,
            sleep=sleep,
            error_log=error_log,
        )

    if breaker is None:
        return retried()
    return breaker.call(retried)


def resilient(context: str, **options):
    """
    Decorator form of `call_resilient`.

        @resilient("dataset-fetch", timeout=10.0, breaker=registry.get("dataset-fetch"))
        def fetch(url): ...
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            return call_resilient(lambda: func(*args, **kwargs), context, **options)

        return wrapper

    return decorator
