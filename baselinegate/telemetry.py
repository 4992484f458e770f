"""
Telemetry for scan batches.

Events carry counts, states and exception class names only. Never source
text, file contents or exception messages.
"""
import logging
import os

from azure.monitor.opentelemetry import configure_azure_monitor
from opentelemetry.trace import get_current_span

logger = logging.getLogger("baselinegate.telemetry")


def init_telemetry() -> bool:
    """
    Initialize Azure Application Insights via OpenTelemetry.
    Returns False (and does nothing) when no connection string is set.
    """
    connection_string = os.getenv("AZURE_APPINSIGHTS_CONNECTION_STRING")

    if not connection_string:
        return False  # Telemetry disabled (local / tests)

    configure_azure_monitor(connection_string=connection_string)
    logger.info("Azure Monitor telemetry configured")
    return True


def emit_scan_telemetry(files_scanned: int, violation_count: int, error_count: int, duration_ms: int, cancelled: bool):
    span = get_current_span()
    if not span:
        return

    span.add_event(
        name="baselinegate.scan",
        attributes={
            "files_scanned": files_scanned,
            "violation_count": violation_count,
            "error_count": error_count,
            "duration_ms": duration_ms,
            "cancelled": cancelled,
        }
    )


def emit_breaker_state(context: str, state: str):
    span = get_current_span()
    if not span:
        return

    span.add_event(
        name="baselinegate.breaker_state",
        attributes={
            "context": context,
            "state": state,
        }
    )


def scrub_exception_for_telemetry(exception: BaseException) -> str:
    """Log only the exception class name; messages may quote scanned source."""
    return type(exception).__name__


def emit_exception_telemetry(exception: BaseException):
    span = get_current_span()
    if not span:
        return

    span.add_event(
        name="baselinegate.exception",
        attributes={
            "exception_type": scrub_exception_for_telemetry(exception)
        }
    )
