"""
Reporter — the sink for info, warning and error events.

Components receive a Reporter instance explicitly instead of reaching for a
process-wide logger. The default implementation forwards to ``logging``.

Security Note:
    Never report plaintext, ciphertext or secret values. Only report key
    names, paths, counts and line numbers.
"""
import logging
from typing import Optional, Protocol


class Reporter(Protocol):
    """Anything able to record info/warning/error events."""

    def info(self, message: str) -> None:
        ...

    def warn(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class LoggingReporter:
    """Reporter backed by a standard library logger."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("envcrypt")

    def info(self, message: str) -> None:
        self.logger.info(message)

    def warn(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.logger.error(message)


def format_error(error: object, prefix: str = "") -> str:
    """Render an error of any type as a single log line."""
    if error is None:
        return f"{prefix}Received a null error."
    if isinstance(error, BaseException):
        return f"{prefix}{type(error).__name__}: {error}"
    return f"{prefix}Unknown error type encountered: {error!s}"


def report_failure(
    reporter: Reporter,
    error: object,
    method: str,
    context: Optional[str] = None,
) -> None:
    """Record a failure with the originating method name and some context."""
    prefix = f"{context}: " if context else ""
    report_event(reporter, "error", f"[Method: {method}] {format_error(error, prefix)}")


def report_event(reporter: Reporter, level: str, message: str) -> None:
    """Send ``message`` to ``reporter`` at ``level`` (info, warn or error).

    Reporting must never break the caller, so errors raised by the reporter
    itself are logged and dropped.
    """
    try:
        getattr(reporter, level)(message)
    except Exception:
        logging.getLogger("envcrypt").exception(
            "Reporter failed while recording a %s event", level
        )
