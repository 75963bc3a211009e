"""Error presentation utilities.

Centralized rendering and exit code mapping for every GitFlowError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from gitflow.core.errors import (
    ConfigurationError,
    ErrorCode,
    GitFlowError,
    PlatformError,
    RepositoryError,
    ValidationError,
)
from gitflow.output.console import Style

if TYPE_CHECKING:
    from gitflow.output.console import ConsoleProtocol

__all__ = ["error_exit_code", "print_error"]


def print_error(error: GitFlowError, console: ConsoleProtocol) -> None:
    """Print an error with an actionable hint when one is known."""
    match error:
        case ValidationError(message=message, hint=hint):
            console.error(message)
            if hint:
                console.print(f"hint: {hint}", Style.DIM)
        case RepositoryError(command=command, message=message, returncode=rc):
            console.error(f"git {command} failed (exit {rc})")
            if message:
                console.print(message, Style.DIM)
        case PlatformError(operation=operation, message=message, status=status):
            if status:
                console.error(f"{operation} failed (HTTP {status})")
            else:
                console.error(f"{operation} failed")
            console.print(message, Style.DIM)
            if status == 401:
                console.print("hint: check the access token (--token / GITFLOW_TOKEN)", Style.DIM)
        case ConfigurationError(message=message, path=path):
            console.error(message)
            if path is not None:
                console.print(str(path), Style.DIM)


def error_exit_code(error: GitFlowError) -> int:
    match error:
        case ValidationError():
            return int(ErrorCode.USER_ERROR)
        case RepositoryError():
            return int(ErrorCode.GIT_ERROR)
        case PlatformError():
            return int(ErrorCode.NETWORK_ERROR)
        case ConfigurationError():
            return int(ErrorCode.IO_ERROR)
    return int(ErrorCode.ENV_ERROR)
