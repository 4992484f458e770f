import errno
import socket
from typing import Optional

import requests

from baselinegate.errors import CircuitOpenError, OperationTimeoutError

NETWORK_ERROR_CODES = frozenset({"ECONNRESET", "ENOTFOUND", "ECONNREFUSED", "ETIMEDOUT", "EAI_AGAIN"})
# EWOULDBLOCK aliases EAGAIN on most platforms
FILESYSTEM_ERROR_CODES = frozenset({"EBUSY", "EAGAIN", "EWOULDBLOCK", "EMFILE", "ENFILE"})

RATE_LIMITED = 429


def error_code(exc: BaseException) -> Optional[str]:
    """Symbolic code for an exception: errno name, or a `code` attribute."""
    if isinstance(exc, OSError) and exc.errno:
        return errno.errorcode.get(exc.errno)
    code = getattr(exc, "code", None)
    return code if isinstance(code, str) else None


def is_retryable_status(status_code: int) -> bool:
    return status_code == RATE_LIMITED or status_code >= 500


def is_transient_network_error(exc: BaseException) -> bool:
    if isinstance(exc, CircuitOpenError):
        return False
    if isinstance(exc, OperationTimeoutError):
        return True
    if isinstance(exc, requests.HTTPError):
        response = exc.response
        return response is not None and is_retryable_status(response.status_code)
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(exc, (ConnectionError, TimeoutError, socket.gaierror)):
        return True
    return error_code(exc) in NETWORK_ERROR_CODES


def is_transient_fs_error(exc: BaseException) -> bool:
    return error_code(exc) in FILESYSTEM_ERROR_CODES
