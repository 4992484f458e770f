import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from baselinegate.errors import PolicyConfigError
from baselinegate.telemetry import emit_exception_telemetry

logger = logging.getLogger("baselinegate.runtime")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


@dataclass(frozen=True)
class SupervisedOutcome:
    ok: bool
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def exit_code(self) -> int:
        if self.ok:
            return EXIT_OK
        if isinstance(self.error, PolicyConfigError):
            return EXIT_CONFIG_ERROR
        if isinstance(self.error, KeyboardInterrupt):
            return EXIT_INTERRUPTED
        return EXIT_FAILURE


def run_supervised(fn: Callable[..., Any], *args, **kwargs) -> SupervisedOutcome:
    """
    Top-level supervisor for a batch entry point.

    Failures come back as a value instead of escaping to process-wide
    hooks; callers decide how to exit.
    """
    try:
        value = fn(*args, **kwargs)
    except PolicyConfigError as e:
        logger.error(f"Invalid policy configuration ({len(e.errors)} problems)")
        for problem in e.errors:
            logger.error(f"  - {problem}")
        return SupervisedOutcome(ok=False, error=e)
    except KeyboardInterrupt as e:
        logger.info("Interrupted; shutting down")
        return SupervisedOutcome(ok=False, error=e)
    except Exception as e:
        logger.error(f"Runtime failure: {type(e).__name__}")
        logger.debug("Runtime failure details", exc_info=True)
        emit_exception_telemetry(e)
        return SupervisedOutcome(ok=False, error=e)

    return SupervisedOutcome(ok=True, value=value)
