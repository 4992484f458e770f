"""
Error taxonomy
--------------
ParseError        -> recovered per file / per rule, never propagates
PolicyConfigError -> fatal, raised before any file is scanned
TransientIOError  -> raised once the retry budget is exhausted
CircuitOpenError  -> raised immediately, never retried
OperationTimeoutError -> deadline elapsed before the operation finished

A mapping miss is not an error and has no class.
"""
from typing import Iterable, List, Optional


class BaselineGateError(Exception):
    code: Optional[str] = None


class ParseError(BaselineGateError):
    code = "PARSE_ERROR"

    def __init__(self, file: str, line: int, column: int, reason: str, parser: str = "unknown"):
        self.file = file
        self.line = line
        self.column = column
        self.reason = reason
        self.parser = parser
        super().__init__(f"{parser} parse error in {file}:{line}:{column}: {reason}")


class PolicyConfigError(BaselineGateError):
    code = "VALIDATION_ERROR"

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        body = "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(f"Policy configuration validation failed:\n{body}")


class TransientIOError(BaselineGateError):
    code = "TRANSIENT_IO"

    def __init__(self, context: str, attempts: int, last_error: Optional[BaseException] = None):
        self.context = context
        self.attempts = attempts
        self.last_error = last_error
        detail = f": {last_error}" if last_error else ""
        super().__init__(f"{context} failed after {attempts} attempts{detail}")


class CircuitOpenError(BaselineGateError):
    code = "CIRCUIT_BREAKER_OPEN"

    def __init__(self, context: str):
        self.context = context
        super().__init__(f"Circuit breaker is OPEN for {context}")


class OperationTimeoutError(BaselineGateError):
    code = "TIMEOUT"

    def __init__(self, context: str, timeout: float):
        self.context = context
        self.timeout = timeout
        super().__init__(f"{context} timed out after {timeout}s")
