"""Error types and exit codes for the Cal.com CLI.

Every failure surfaces to the command boundary as a ``CLIError`` subclass
carrying a stable string code (used in JSON output) and a process exit code.
"""
from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional

from .output import print_error_payload


class ExitCode(IntEnum):
    """Standard CLI exit codes."""
    SUCCESS = 0
    ERROR = 1
    USAGE = 2
    CANCELED = 3
    AUTH_ERROR = 4
    API_ERROR = 5
    NOT_FOUND = 6
    INTERRUPTED = 130  # Standard for Ctrl+C


@dataclass
class CLIError(Exception):
    """CLI error with a string code, exit code and optional details."""
    message: str
    code: str = "CLI_ERROR"
    exit_code: ExitCode = ExitCode.ERROR
    details: Any = None
    hint: Optional[str] = None

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "details": self.details}


class ValidationError(CLIError):
    """Malformed user input, raised before any network call."""
    def __init__(self, message: str, details: Any = None):
        super().__init__(message, "VALIDATION_ERROR", ExitCode.USAGE, details)


class NoAuthError(CLIError):
    """No usable API key in the environment or the config file."""
    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message, "NO_AUTH", ExitCode.AUTH_ERROR, None, hint)


class NotFoundError(CLIError):
    """Referenced remote resource does not exist."""
    def __init__(self, message: str, details: Any = None):
        super().__init__(message, "NOT_FOUND", ExitCode.NOT_FOUND, details)


class MissingBookingUrlError(CLIError):
    """Event type exists but exposes no booking URL."""
    def __init__(self, message: str, details: Any = None):
        super().__init__(message, "MISSING_BOOKING_URL", ExitCode.NOT_FOUND, details)


class ApiError(CLIError):
    """Remote service answered with a non-success status."""
    def __init__(self, message: str, status: int, status_text: str = "", body: Any = None):
        details = {"status": status, "statusText": status_text, "body": body}
        super().__init__(message, "API_ERROR", ExitCode.API_ERROR, details)
        self.status = status
        self.status_text = status_text
        self.body = body


class CanceledError(CLIError):
    """User declined the confirmation prompt."""
    def __init__(self, message: str = "Operation canceled."):
        super().__init__(message, "CANCELED", ExitCode.CANCELED)


class UnexpectedError(CLIError):
    """Anything else, including transport failures."""
    def __init__(self, message: str, details: Any = None):
        super().__init__(message, "UNEXPECTED_ERROR", ExitCode.ERROR, details)


def normalize_error(error: BaseException) -> CLIError:
    """Coerce any exception into a ``CLIError``."""
    if isinstance(error, CLIError):
        return error
    message = str(error) or type(error).__name__
    return UnexpectedError(message)


def handle_error(error: BaseException, json_mode: bool = False, verbose: bool = False) -> int:
    """Render an exception and return the exit code to use.

    Args:
        error: The exception to handle.
        json_mode: Emit ``{"error": {...}}`` on stdout instead of a stderr line.
        verbose: If True, print stack trace for unexpected errors.

    Returns:
        Exit code to use.
    """
    if isinstance(error, KeyboardInterrupt):
        print("\nInterrupted.", file=sys.stderr)
        return ExitCode.INTERRUPTED

    cli_error = normalize_error(error)
    if json_mode:
        print_error_payload(cli_error.to_dict())
    else:
        print(f"Error: {cli_error.message}", file=sys.stderr)
        if cli_error.hint:
            print(f"Hint: {cli_error.hint}", file=sys.stderr)

    if verbose and not isinstance(error, CLIError):
        import traceback
        traceback.print_exception(type(error), error, error.__traceback__)
    return int(cli_error.exit_code)
