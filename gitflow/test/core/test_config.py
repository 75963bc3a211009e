"""Tests for core/config.py."""

from __future__ import annotations

import json
from pathlib import Path

from gitflow.core.config import (
    SETTINGS_FILE,
    GitFlowSettings,
    HomeConfigStore,
    MemoryConfigStore,
    load_settings,
    load_settings_or_default,
)
from gitflow.core.result import Err, Ok


class TestHomeConfigStore:
    def test_missing_file_reads_none(self, tmp_path: Path) -> None:
        store = HomeConfigStore(home=tmp_path)
        assert store.read("platform") == Ok(None)

    def test_write_then_read(self, tmp_path: Path) -> None:
        store = HomeConfigStore(home=tmp_path)
        assert isinstance(store.write("login", {"owner": "octo"}), Ok)

        path = tmp_path / ".git_login"
        assert path.is_file()
        assert store.read("login") == Ok({"owner": "octo"})

    def test_file_is_two_space_json(self, tmp_path: Path) -> None:
        store = HomeConfigStore(home=tmp_path)
        store.write("platform", {"platform": "gitee"})

        text = (tmp_path / ".git_platform").read_text(encoding="utf-8")
        assert text == json.dumps({"platform": "gitee"}, indent=2)

    def test_unknown_key(self, tmp_path: Path) -> None:
        store = HomeConfigStore(home=tmp_path)
        result = store.read("nope")
        assert isinstance(result, Err)
        assert result.error.key == "nope"

    def test_invalid_json(self, tmp_path: Path) -> None:
        (tmp_path / ".git_own").write_text("{not json", encoding="utf-8")
        result = HomeConfigStore(home=tmp_path).read("own")
        assert isinstance(result, Err)
        assert "Invalid JSON" in result.error.message
        assert result.error.path == tmp_path / ".git_own"

    def test_non_object_root(self, tmp_path: Path) -> None:
        (tmp_path / ".git_token").write_text("[1, 2]", encoding="utf-8")
        result = HomeConfigStore(home=tmp_path).read("token")
        assert isinstance(result, Err)


class TestMemoryConfigStore:
    def test_round_trip_copies(self) -> None:
        store = MemoryConfigStore({"own": {"type": "user"}})
        read = store.read("own")
        assert read == Ok({"type": "user"})

        # Mutating the returned document does not change the store.
        assert isinstance(read, Ok) and read.value is not None
        read.value["type"] = "org"
        assert store.data["own"] == {"type": "user"}


class TestSettings:
    def test_defaults(self) -> None:
        s = GitFlowSettings()
        assert s.main_branch == "main"
        assert s.develop_branch == "develop"
        assert s.remote == "origin"
        assert s.tag_prefix == "v"
        assert s.create_release is True
        assert s.release_skip_on_error is True
        assert s.notes.min_conventional == 1

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_settings_or_default(tmp_path) == Ok(GitFlowSettings())

    def test_load_overrides(self, tmp_path: Path) -> None:
        (tmp_path / SETTINGS_FILE).write_text(
            """
[branches]
main = "trunk"
develop = "dev"

[release]
tag_prefix = "release-"
skip_on_error = false

[notes]
min_conventional = 3
smart = false

[notes.keywords]
fixes = ["Patch", "hotfix"]
""",
            encoding="utf-8",
        )

        result = load_settings_or_default(tmp_path)
        assert isinstance(result, Ok)
        s = result.value
        assert s.main_branch == "trunk"
        assert s.develop_branch == "dev"
        assert s.remote == "origin"
        assert s.tag_prefix == "release-"
        assert s.create_release is True
        assert s.release_skip_on_error is False
        assert s.notes.min_conventional == 3
        assert s.notes.smart is False
        assert s.notes.keywords["fixes"] == ("patch", "hotfix")
        assert "add" in s.notes.keywords["features"]

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / SETTINGS_FILE
        path.write_text("[branches\nmain =", encoding="utf-8")

        result = load_settings(path)
        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message

    def test_negative_min_conventional_clamped(self) -> None:
        s = GitFlowSettings.from_dict({"notes": {"min_conventional": -4}})
        assert s.notes.min_conventional == 0

    def test_wrong_types_fall_back(self) -> None:
        s = GitFlowSettings.from_dict({"branches": {"main": 3}, "release": {"create": "yes"}})
        assert s.main_branch == "main"
        assert s.create_release is True
