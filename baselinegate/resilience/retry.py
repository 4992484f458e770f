import logging
import time
from typing import Callable, Optional, TypeVar

from baselinegate.errors import CircuitOpenError, TransientIOError
from baselinegate.resilience.classify import is_transient_network_error
from baselinegate.resilience.error_log import ErrorLog

logger = logging.getLogger("baselinegate.resilience")

T = TypeVar("T")


def backoff_delay(attempt: int, retry_delay: float, exponential_backoff: bool) -> float:
    """Delay before retry number `attempt` (1-based)."""
    if exponential_backoff:
        return retry_delay * (2 ** (attempt - 1))
    return retry_delay


def with_retry(
    operation: Callable[[], T],
    context: str = "operation",
    max_retries: int = 3,
    retry_delay: float = 1.0,
    exponential_backoff: bool = True,
    is_retryable: Callable[[BaseException], bool] = is_transient_network_error,
    sleep: Callable[[float], None] = time.sleep,
    error_log: Optional[ErrorLog] = None,
) -> T:
    """
    Call `operation` until it succeeds, at most `max_retries + 1` times.

    Only failures accepted by `is_retryable` are retried. Anything else,
    and CircuitOpenError always, is re-raised unchanged. When the budget
    runs out a TransientIOError is raised from the last failure.
    """
    attempts = max_retries + 1
    last_error: Optional[BaseException] = None

    for attempt in range(1, attempts + 1):
        try:
            result = operation()
        except CircuitOpenError:
            raise
        except Exception as e:
            if not is_retryable(e):
                raise
            last_error = e
            if attempt == attempts:
                break
            delay = backoff_delay(attempt, retry_delay, exponential_backoff)
            logger.warning(f"{context} failed (attempt {attempt}/{attempts}): {e}; retrying in {delay}s")
            sleep(delay)
            continue

        if attempt > 1:
            logger.info(f"{context} succeeded on attempt {attempt}")
        return result

    if error_log is not None:
        error_log.record(last_error, context=context, attempts=attempts)
    raise TransientIOError(context, attempts, last_error) from last_error
