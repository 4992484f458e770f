import concurrent.futures
from typing import Callable, TypeVar

from baselinegate.errors import OperationTimeoutError

T = TypeVar("T")


def with_timeout(operation: Callable[[], T], timeout: float, context: str = "operation") -> T:
    """
    Run `operation` on a worker thread and wait at most `timeout` seconds.

    On expiry OperationTimeoutError is raised and whatever the operation
    eventually returns or raises is discarded. The worker thread itself
    cannot be interrupted; it runs to completion in the background.
    """
    executor = concurrent.futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="baselinegate-timeout")
    future = executor.submit(operation)
    try:
        return future.result(timeout=timeout)
    except concurrent.futures.TimeoutError:
        raise OperationTimeoutError(context, timeout) from None
    finally:
        executor.shutdown(wait=False)
