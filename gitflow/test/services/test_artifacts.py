"""Tests for services/artifacts.py."""

from __future__ import annotations

from pathlib import Path

from gitflow.core.result import Err, Ok
from gitflow.services.artifacts import (
    GITIGNORE_TEMPLATE,
    RELEASE_CONFIG_PATH,
    RELEASE_CONFIG_TEMPLATE,
    write_if_absent,
)


def test_writes_missing_file_with_parents(tmp_path: Path) -> None:
    assert write_if_absent(tmp_path, RELEASE_CONFIG_PATH, RELEASE_CONFIG_TEMPLATE) == Ok(True)
    written = (tmp_path / ".github" / "release.yml").read_text(encoding="utf-8")
    assert written.startswith("changelog:")


def test_existing_file_is_untouched(tmp_path: Path) -> None:
    target = tmp_path / ".gitignore"
    target.write_text("custom\n", encoding="utf-8")

    assert write_if_absent(tmp_path, ".gitignore", GITIGNORE_TEMPLATE) == Ok(False)
    assert target.read_text(encoding="utf-8") == "custom\n"


def test_unwritable_location(tmp_path: Path) -> None:
    blocker = tmp_path / ".github"
    blocker.write_text("not a directory", encoding="utf-8")

    result = write_if_absent(tmp_path, RELEASE_CONFIG_PATH, RELEASE_CONFIG_TEMPLATE)
    assert isinstance(result, Err)
    assert result.error.key == RELEASE_CONFIG_PATH
