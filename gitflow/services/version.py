from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Literal

from gitflow.core.errors import ValidationError
from gitflow.core.result import Err, Ok, Result

__all__ = [
    "SemVer",
    "VersionKind",
    "VersionManager",
    "VersionSuggestions",
    "parse_version",
]

VersionKind = Literal["major", "minor", "patch"]

_SEMVER_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


@dataclass(frozen=True, slots=True, order=True)
class SemVer:
    """Ordered by the numeric triple; suffixes are carried but never compared."""

    major: int
    minor: int
    patch: int
    prerelease: str = field(default="", compare=False)
    build: str = field(default="", compare=False)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.build:
            text += f"+{self.build}"
        return text

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def bump(self, kind: VersionKind) -> SemVer:
        # A pre-release bumps to the release it leads up to.
        match kind:
            case "major":
                if self.prerelease and self.minor == 0 and self.patch == 0:
                    return SemVer(self.major, 0, 0)
                return SemVer(self.major + 1, 0, 0)
            case "minor":
                if self.prerelease and self.patch == 0:
                    return SemVer(self.major, self.minor, 0)
                return SemVer(self.major, self.minor + 1, 0)
            case "patch":
                if self.prerelease:
                    return SemVer(self.major, self.minor, self.patch)
                return SemVer(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected version kind: {kind}")


ZERO = SemVer(0, 0, 0)


def parse_version(text: str) -> SemVer | None:
    """Parse `[v]MAJOR.MINOR.PATCH[-pre][+build]`.

    Pre-release and build suffixes are kept on the result so they survive
    formatting; ordering only looks at the numeric triple.
    """
    m = _SEMVER_RE.match(text.strip())
    if m is None:
        return None
    return SemVer(
        int(m.group(1)),
        int(m.group(2)),
        int(m.group(3)),
        prerelease=m.group(4) or "",
        build=m.group(5) or "",
    )


@dataclass(frozen=True, slots=True)
class VersionSuggestions:
    major: SemVer
    minor: SemVer
    patch: SemVer


class VersionManager:
    """Owns the current version. Values only move forward.

    Example:
        vm = VersionManager()
        vm.set_current("v1.2.0")
        vm.increment("minor")   # SemVer(1, 3, 0)
        vm.formatted            # "v1.3.0"
    """

    def __init__(self, prefix: str = "v", current: SemVer = ZERO) -> None:
        self._prefix = prefix
        self._current = current

    @property
    def current(self) -> SemVer:
        return self._current

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def formatted(self) -> str:
        return self.format(self._current)

    def set_current(self, version: str | SemVer) -> Result[SemVer, ValidationError]:
        parsed = version if isinstance(version, SemVer) else parse_version(version)
        if parsed is None:
            return Err(
                ValidationError(
                    kind="invalid_version",
                    message=f"not a semantic version: {version}",
                    hint="Use MAJOR.MINOR.PATCH, e.g. 1.4.0",
                )
            )
        if parsed < self._current:
            return Err(
                ValidationError(
                    kind="invalid_version",
                    message=f"version {parsed} is lower than current {self._current}",
                    hint="Versions only increase",
                )
            )
        self._current = parsed
        return Ok(parsed)

    def increment(self, kind: VersionKind = "patch") -> SemVer:
        self._current = self._current.bump(kind)
        return self._current

    @staticmethod
    def compare(a: str | SemVer, b: str | SemVer) -> int:
        """Return -1, 0 or 1.

        Raises:
            ValueError: If either side is not a valid version.
        """
        left = _require(a)
        right = _require(b)
        if left < right:
            return -1
        if left > right:
            return 1
        return 0

    @staticmethod
    def is_valid(version: str) -> bool:
        return parse_version(version) is not None

    def format(self, version: SemVer) -> str:
        return f"{self._prefix}{version}"

    def latest_from_tags(self, tags: Iterable[str]) -> SemVer | None:
        best: SemVer | None = None
        for tag in tags:
            v = self._parse_tag(tag)
            if v is not None and (best is None or _outranks(v, best)):
                best = v
        return best

    def latest_tag(self, tags: Iterable[str]) -> str | None:
        """The tag string holding the highest version, as written."""
        best: tuple[SemVer, str] | None = None
        for tag in tags:
            v = self._parse_tag(tag)
            if v is not None and (best is None or _outranks(v, best[0])):
                best = (v, tag)
        return best[1] if best is not None else None

    def suggest_next(self, tags: Iterable[str]) -> VersionSuggestions:
        latest = self.latest_from_tags(tags)
        if latest is not None and latest > self._current:
            self._current = latest
        base = self._current
        return VersionSuggestions(
            major=base.bump("major"),
            minor=base.bump("minor"),
            patch=base.bump("patch"),
        )

    def _parse_tag(self, tag: str) -> SemVer | None:
        text = tag.strip()
        if self._prefix and self._prefix != "v" and text.startswith(self._prefix):
            text = text[len(self._prefix) :]
        return parse_version(text)


def _outranks(candidate: SemVer, best: SemVer) -> bool:
    """Higher triple wins; on a tie the final release beats its pre-releases."""
    if candidate != best:
        return candidate > best
    return best.is_prerelease and not candidate.is_prerelease


def _require(version: str | SemVer) -> SemVer:
    if isinstance(version, SemVer):
        return version
    parsed = parse_version(version)
    if parsed is None:
        raise ValueError(f"invalid version: {version!r}")
    return parsed
