"""Tests for core/errors.py."""

from __future__ import annotations

from gitflow.core.errors import (
    ErrorCode,
    PlatformError,
    RecoverableFailure,
    RepositoryError,
    ValidationError,
)


class TestErrorValues:
    def test_validation_error_fields(self) -> None:
        err = ValidationError(kind="no_develop_branch", message="missing", hint="run commit")
        assert err.kind == "no_develop_branch"
        assert err.hint == "run commit"

    def test_repository_error_str(self) -> None:
        err = RepositoryError(command="merge --no-ff develop", message="CONFLICT", returncode=1)
        assert str(err) == "git merge --no-ff develop failed: CONFLICT"

    def test_platform_error_str_with_status(self) -> None:
        err = PlatformError(operation="create_release", message="Validation Failed", status=422)
        assert str(err) == "create_release failed (HTTP 422): Validation Failed"

    def test_platform_error_str_without_status(self) -> None:
        err = PlatformError(operation="get_current_user", message="timed out")
        assert str(err) == "get_current_user failed: timed out"

    def test_recoverable_failure_str(self) -> None:
        failure = RecoverableFailure(step="create release", message="HTTP 500")
        assert str(failure) == "create release: HTTP 500"


class TestErrorCode:
    def test_values_are_stable(self) -> None:
        assert ErrorCode.OK == 0
        assert ErrorCode.USER_ERROR == 1
        assert ErrorCode.ENV_ERROR == 2
        assert ErrorCode.GIT_ERROR == 3
        assert ErrorCode.NETWORK_ERROR == 4
        assert ErrorCode.IO_ERROR == 5

    def test_str(self) -> None:
        assert str(ErrorCode.NETWORK_ERROR) == "network error"

    def test_is_success(self) -> None:
        assert ErrorCode.OK.is_success
        assert not ErrorCode.GIT_ERROR.is_success
