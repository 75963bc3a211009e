"""Tests for output/console.py and output/errors.py."""

from __future__ import annotations

from pathlib import Path

from gitflow.core.errors import (
    ConfigurationError,
    ErrorCode,
    PlatformError,
    RepositoryError,
    ValidationError,
)
from gitflow.output.console import MockConsole, Style
from gitflow.output.errors import error_exit_code, print_error


class TestMockConsole:
    def test_records_styles(self) -> None:
        console = MockConsole()
        console.print("plain")
        console.success("done")
        console.warning("careful")
        console.error("broken")
        console.info("fyi")
        console.header("Phase")

        assert console.messages == [
            "plain",
            "OK done",
            "warning: careful",
            "error: broken",
            "info: fyi",
            "Phase",
        ]
        assert console.outputs[-1].style == Style.HEADER

    def test_helpers(self) -> None:
        console = MockConsole()
        console.warning("a")
        console.print("b", Style.DIM)

        assert console.warnings == ["warning: a"]
        assert console.has_warning()
        assert not console.has_error()
        assert len(console.find("b")) == 1
        assert console.text == "warning: a\nb"


class TestPrintError:
    def test_validation_error_with_hint(self) -> None:
        console = MockConsole()
        print_error(ValidationError("no_develop_branch", "no develop", hint="Run commit"), console)
        assert console.messages == ["error: no develop", "hint: Run commit"]

    def test_repository_error(self) -> None:
        console = MockConsole()
        print_error(RepositoryError("push origin main", "rejected", 1), console)
        assert console.messages[0] == "error: git push origin main failed (exit 1)"
        assert console.messages[1] == "rejected"

    def test_platform_error_unauthorized_hint(self) -> None:
        console = MockConsole()
        print_error(PlatformError("get_current_user", "Bad credentials", 401), console)
        assert console.messages[0] == "error: get_current_user failed (HTTP 401)"
        assert any("--token" in m for m in console.messages)

    def test_configuration_error_path(self) -> None:
        console = MockConsole()
        print_error(ConfigurationError("token", "unreadable", path=Path("/x/.git_token")), console)
        assert console.messages == ["error: unreadable", str(Path("/x/.git_token"))]


class TestExitCodes:
    def test_mapping(self) -> None:
        assert error_exit_code(ValidationError("invalid_input", "x")) == ErrorCode.USER_ERROR
        assert error_exit_code(RepositoryError("tag", "x")) == ErrorCode.GIT_ERROR
        assert error_exit_code(PlatformError("create_release", "x")) == ErrorCode.NETWORK_ERROR
        assert error_exit_code(ConfigurationError("login", "x")) == ErrorCode.IO_ERROR
