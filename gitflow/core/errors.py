"""Error values and exit codes.

Errors are plain frozen dataclasses carried inside `Err`. They are never
raised. The four failure families are:

- ValidationError: a precondition of a phase does not hold
- RepositoryError: a local git primitive failed
- PlatformError: a hosting platform API call failed
- ConfigurationError: a local config file could not be read or written

RecoverableFailure is not an error: it is the warning produced by a
best-effort step whose failure must not abort the phase.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Literal

__all__ = [
    "ConfigurationError",
    "ErrorCode",
    "GitFlowError",
    "PlatformError",
    "RecoverableFailure",
    "RepositoryError",
    "ValidationError",
    "ValidationKind",
]


ValidationKind = Literal[
    "no_develop_branch",
    "conflicts_exist",
    "invalid_version",
    "not_a_repository",
    "invalid_input",
]


@dataclass(frozen=True, slots=True)
class ValidationError:
    """A phase precondition was violated.

    Attributes:
        kind: Machine-readable reason
        message: Human-readable description
        hint: Optional next step for the user
    """

    kind: ValidationKind
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class RepositoryError:
    """A git primitive exited non-zero.

    Attributes:
        command: The git primitive that failed (e.g. "merge --no-ff develop")
        message: Raw diagnostic text from git
        returncode: Process return code (-1 for timeouts / spawn failures)
    """

    command: str
    message: str
    returncode: int = 1

    def __str__(self) -> str:
        return f"git {self.command} failed: {self.message}"


@dataclass(frozen=True, slots=True)
class PlatformError:
    """A hosting platform API call failed.

    Attributes:
        operation: Logical operation (e.g. "create_release")
        message: Platform-specific message
        status: HTTP status, 0 when no response was received
    """

    operation: str
    message: str
    status: int = 0

    def __str__(self) -> str:
        if self.status:
            return f"{self.operation} failed (HTTP {self.status}): {self.message}"
        return f"{self.operation} failed: {self.message}"


@dataclass(frozen=True, slots=True)
class ConfigurationError:
    """A local config file could not be read or written."""

    key: str
    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class RecoverableFailure:
    """Warning from a best-effort step (the phase still completes)."""

    step: str
    message: str

    def __str__(self) -> str:
        return f"{self.step}: {self.message}"


type GitFlowError = ValidationError | RepositoryError | PlatformError | ConfigurationError


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable.
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    GIT_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
