"""
Error taxonomy for the BOSH exporter.

Startup errors (configuration, authentication) are fatal and surface as a
process exit code. Scrape-time errors (fetch, collect, write) are isolated
per deployment or per collector and only degrade the metrics produced.

Exit Codes:
- 0: Success
- 10: Configuration error
- 11: Authentication error (director or UAA unreachable, grant rejected)
- 127: Unknown/internal error
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for the exporter process."""

    SUCCESS = 0
    CONFIG_ERROR = 10
    AUTH_ERROR = 11
    UNKNOWN_ERROR = 127


class BoshExporterError(Exception):
    """Base exception for exporter errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    show_traceback: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigError(BoshExporterError):
    """Raised for invalid configuration (filters, regexps, auth options)."""

    exit_code = ExitCode.CONFIG_ERROR


class AuthError(BoshExporterError):
    """Raised when the credential exchange with the director or UAA fails."""

    exit_code = ExitCode.AUTH_ERROR


class FetchError(BoshExporterError):
    """Raised when deployment data cannot be read from the director."""

    def __init__(
        self,
        message: str,
        deployment: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.deployment = deployment


class CollectError(BoshExporterError):
    """Raised when a sub-collector fails during a scrape."""

    def __init__(
        self,
        message: str,
        collector: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.collector = collector


class WriteError(BoshExporterError):
    """Raised when the service discovery file cannot be written."""

    def __init__(self, message: str, path: str, details: dict[str, Any] | None = None):
        super().__init__(message, details)
        self.path = path


# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Decorator for the exporter entry point that provides unified error handling.

    Catches exceptions raised during startup and converts them to exit codes
    with consistent error reporting.

    Args:
        show_traceback: If True, show full traceback for unexpected errors
        log_errors: If True, log errors to structlog

    Exit codes:
        - BoshExporterError subclasses: Uses the error's exit_code
        - KeyboardInterrupt: Returns 130 (standard for SIGINT)
        - Other exceptions: Returns 127 (unknown error)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except BoshExporterError as e:
                if log_errors:
                    logger.error(
                        "startup_error",
                        error_type=type(e).__name__,
                        message=e.message,
                        exit_code=int(e.exit_code),
                        **e.details,
                    )
                print(f"error: {format_error_message(e)}", file=sys.stderr)
                if e.show_traceback or show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return e.exit_code
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("exporter_interrupted")
                return 130  # Standard exit code for SIGINT
            except Exception as e:
                if log_errors:
                    logger.error(
                        "unexpected_error",
                        error_type=type(e).__name__,
                        message=str(e),
                        exit_code=int(ExitCode.UNKNOWN_ERROR),
                    )
                print(f"error: {e}", file=sys.stderr)
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def format_error_message(error: BoshExporterError) -> str:
    """Format an error message for display to operators."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg
