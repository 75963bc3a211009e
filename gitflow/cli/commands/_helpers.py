"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from gitflow.core.errors import GitFlowError
from gitflow.core.result import Err, Result
from gitflow.output.errors import error_exit_code, print_error

if TYPE_CHECKING:
    from gitflow.output.console import ConsoleProtocol


def unwrap_or_exit[T](result: Result[T, GitFlowError], console: ConsoleProtocol) -> T:
    """Return the value, or render the error and exit with its code.

    Replaces the common pattern:
        match result:
            case Err(e):
                print_error(e, console)
                raise typer.Exit(code=error_exit_code(e))
            case Ok(value):
                ...
    """
    if isinstance(result, Err):
        print_error(result.error, console)
        raise typer.Exit(code=error_exit_code(result.error))
    return result.value
