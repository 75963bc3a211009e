"""Configuration: persisted selections and per-project settings.

Two kinds of configuration exist:

- ConfigStore: small key/value documents shared with the CLI layer
  (platform selection, owner kind, owner login, token). The production
  store keeps one JSON file per key in the user's home directory; tests use
  MemoryConfigStore.
- GitFlowSettings: branch naming, tag prefix and release policy, read from
  an optional `.gitflow.toml` in the working directory.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from .errors import ConfigurationError
from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_int, get_str, get_str_list, get_table

__all__ = [
    "CONFIG_FILES",
    "SETTINGS_FILE",
    "ConfigStore",
    "GitFlowSettings",
    "HomeConfigStore",
    "MemoryConfigStore",
    "NotesOptions",
    "load_settings",
    "load_settings_or_default",
]

# Key -> file name in the home directory.
CONFIG_FILES: dict[str, str] = {
    "platform": ".git_platform",
    "own": ".git_own",
    "login": ".git_login",
    "token": ".git_token",
}

SETTINGS_FILE = ".gitflow.toml"

_JSON_INDENT = 2


class ConfigStore(Protocol):
    """Key/value store for persisted selections."""

    def read(self, key: str) -> Result[StrDict | None, ConfigurationError]:
        """Return the stored document, or None if nothing was stored."""
        ...

    def write(self, key: str, value: Mapping[str, object]) -> Result[None, ConfigurationError]:
        ...


class HomeConfigStore:
    """One UTF-8 JSON file per key in the home directory (2-space indent)."""

    def __init__(self, home: Path | None = None) -> None:
        self._home = home if home is not None else Path.home()

    def path_for(self, key: str) -> Path | None:
        name = CONFIG_FILES.get(key)
        if name is None:
            return None
        return self._home / name

    def read(self, key: str) -> Result[StrDict | None, ConfigurationError]:
        path = self.path_for(key)
        if path is None:
            return Err(ConfigurationError(key, f"unknown config key: {key}"))

        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return Ok(None)
        except OSError as e:
            return Err(ConfigurationError(key, f"Error reading {path}: {e}", path=path))

        try:
            obj: object = json.loads(raw)
        except json.JSONDecodeError as e:
            return Err(ConfigurationError(key, f"Invalid JSON: {e}", path=path))

        data = as_str_dict(obj)
        if data is None:
            return Err(ConfigurationError(key, "Config root must be a JSON object", path=path))
        return Ok(data)

    def write(self, key: str, value: Mapping[str, object]) -> Result[None, ConfigurationError]:
        path = self.path_for(key)
        if path is None:
            return Err(ConfigurationError(key, f"unknown config key: {key}"))

        content = json.dumps(dict(value), indent=_JSON_INDENT, ensure_ascii=False)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            return Err(ConfigurationError(key, f"Could not write {path}: {e}", path=path))
        return Ok(None)


class MemoryConfigStore:
    """In-memory ConfigStore for tests."""

    def __init__(self, initial: Mapping[str, Mapping[str, object]] | None = None) -> None:
        self.data: dict[str, StrDict] = {k: dict(v) for k, v in (initial or {}).items()}

    def read(self, key: str) -> Result[StrDict | None, ConfigurationError]:
        value = self.data.get(key)
        return Ok(dict(value) if value is not None else None)

    def write(self, key: str, value: Mapping[str, object]) -> Result[None, ConfigurationError]:
        self.data[key] = dict(value)
        return Ok(None)


# -----------------------------------------------------------------------------
# Project settings
# -----------------------------------------------------------------------------


def _default_keywords() -> dict[str, tuple[str, ...]]:
    return {
        "breaking": ("breaking", "incompatible"),
        "features": ("add", "adds", "added", "implement", "introduce", "support", "new"),
        "fixes": ("fix", "fixed", "fixes", "bug", "resolve", "resolved", "correct", "repair"),
        "docs": ("doc", "docs", "readme", "documentation", "typo"),
        "chores": ("bump", "upgrade", "deps", "dependency", "dependencies", "refactor", "cleanup"),
    }


@dataclass(frozen=True, slots=True)
class NotesOptions:
    """Release-notes categorization policy.

    Attributes:
        min_conventional: Below this many conventionally recognised commits,
            notes are left empty so the platform generates its own.
        smart: Fall back to keyword matching for unprefixed commits.
        keywords: Category -> keywords used by smart matching.
    """

    min_conventional: int = 1
    smart: bool = True
    keywords: dict[str, tuple[str, ...]] = field(default_factory=_default_keywords)


@dataclass(frozen=True, slots=True)
class GitFlowSettings:
    """Branch naming and release policy for one working tree."""

    main_branch: str = "main"
    develop_branch: str = "develop"
    remote: str = "origin"
    tag_prefix: str = "v"
    create_release: bool = True
    release_skip_on_error: bool = True
    notes: NotesOptions = field(default_factory=NotesOptions)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> GitFlowSettings:
        """Create settings from a mapping (parsed TOML)."""
        branches: StrDict = get_table(data, "branches") or {}
        release: StrDict = get_table(data, "release") or {}
        notes: StrDict = get_table(data, "notes") or {}
        keywords_tbl: StrDict = get_table(notes, "keywords") or {}

        keywords = _default_keywords()
        for category in keywords:
            override = get_str_list(keywords_tbl, category)
            if override is not None:
                keywords[category] = tuple(k.lower() for k in override)

        min_conventional = get_int(notes, "min_conventional")
        create_release = get_bool(release, "create")
        skip_on_error = get_bool(release, "skip_on_error")
        smart = get_bool(notes, "smart")

        return cls(
            main_branch=get_str(branches, "main") or "main",
            develop_branch=get_str(branches, "develop") or "develop",
            remote=get_str(branches, "remote") or "origin",
            tag_prefix=get_str(release, "tag_prefix") or "v",
            create_release=True if create_release is None else create_release,
            release_skip_on_error=True if skip_on_error is None else skip_on_error,
            notes=NotesOptions(
                min_conventional=1 if min_conventional is None else max(0, min_conventional),
                smart=True if smart is None else smart,
                keywords=keywords,
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigurationError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigurationError("settings", f"Settings file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigurationError("settings", f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigurationError("settings", f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigurationError("settings", f"Error reading settings: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigurationError("settings", "Settings root must be a table", path=path))
    return Ok(data)


def load_settings(path: Path) -> Result[GitFlowSettings, ConfigurationError]:
    """Load settings from a `.gitflow.toml` file.

    Example file:

        [branches]
        main = "main"
        develop = "develop"

        [release]
        tag_prefix = "v"
        create = true
        skip_on_error = true

        [notes]
        min_conventional = 2
        smart = false
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result
    return Ok(GitFlowSettings.from_dict(result.value))


def load_settings_or_default(workdir: Path) -> Result[GitFlowSettings, ConfigurationError]:
    """Load `<workdir>/.gitflow.toml` if present, defaults otherwise.

    A missing file is not an error; a malformed one is.
    """
    path = workdir / SETTINGS_FILE
    if not path.is_file():
        return Ok(GitFlowSettings())
    return load_settings(path)
