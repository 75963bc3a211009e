"""Release-note synthesis from commit history.

Classification is an ordered list of `(predicate, category)` rules, first
match wins:

1. "BREAKING CHANGE" in the body, or `type!:` in the subject -> breaking
2. Conventional prefix feat/fix/docs/chore (optional scope)   -> its category
3. Keyword matching on the subject (smart mode only)          -> first hit
4. Anything else                                              -> other

Rules 1-2 count as conventionally recognised. When fewer commits than
`NotesOptions.min_conventional` are recognised, rendering yields "" and the
caller lets the hosting platform generate notes instead.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Literal

from gitflow.core.config import NotesOptions
from gitflow.core.errors import RepositoryError
from gitflow.core.result import Err, Ok, Result
from gitflow.git.repository import CommitEntry, RepositoryClient

__all__ = [
    "CATEGORY_TITLES",
    "Category",
    "ReleaseNotesGenerator",
    "Rule",
    "build_rules",
    "classify",
    "is_conventional",
    "render_release_notes",
]

Category = Literal["breaking", "features", "fixes", "docs", "chores", "other"]

CATEGORY_TITLES: dict[Category, str] = {
    "breaking": "Breaking Changes",
    "features": "New Features",
    "fixes": "Bug Fixes",
    "docs": "Documentation",
    "chores": "Chores",
    "other": "Other Changes",
}

_CONVENTIONAL_RE = re.compile(
    r"^(?P<type>[A-Za-z]+)(?:\((?P<scope>[^()]*)\))?(?P<bang>!)?:\s*(?P<desc>\S.*)$"
)
_BREAKING_RE = re.compile(r"BREAKING[ -]CHANGE")

_KEYWORD_CATEGORIES: tuple[Category, ...] = ("breaking", "features", "fixes", "docs", "chores")

_TYPE_CATEGORIES: dict[str, Category] = {
    "feat": "features",
    "fix": "fixes",
    "docs": "docs",
    "chore": "chores",
}


@dataclass(frozen=True, slots=True)
class _Subject:
    type: str
    scope: str | None
    bang: bool
    description: str


def _parse_subject(subject: str) -> _Subject | None:
    m = _CONVENTIONAL_RE.match(subject.strip())
    if m is None:
        return None
    scope = (m.group("scope") or "").strip() or None
    return _Subject(
        type=m.group("type").lower(),
        scope=scope,
        bang=m.group("bang") is not None,
        description=m.group("desc").strip(),
    )


Predicate = Callable[[CommitEntry], bool]


@dataclass(frozen=True, slots=True)
class Rule:
    predicate: Predicate
    category: Category
    conventional: bool


def _is_breaking(commit: CommitEntry) -> bool:
    if _BREAKING_RE.search(commit.body):
        return True
    parsed = _parse_subject(commit.subject)
    return parsed is not None and parsed.bang


def _has_type(commit_type: str) -> Predicate:
    def predicate(commit: CommitEntry) -> bool:
        parsed = _parse_subject(commit.subject)
        return parsed is not None and parsed.type == commit_type

    return predicate


def _mentions(keywords: Sequence[str]) -> Predicate:
    patterns = [re.compile(rf"\b{re.escape(k.lower())}\b") for k in keywords if k.strip()]

    def predicate(commit: CommitEntry) -> bool:
        subject = commit.subject.lower()
        return any(p.search(subject) for p in patterns)

    return predicate


def build_rules(
    *, smart: bool = True, keywords: Mapping[str, Sequence[str]] | None = None
) -> list[Rule]:
    rules: list[Rule] = [Rule(_is_breaking, "breaking", conventional=True)]
    for commit_type, category in _TYPE_CATEGORIES.items():
        rules.append(Rule(_has_type(commit_type), category, conventional=True))

    if smart:
        table = keywords if keywords is not None else NotesOptions().keywords
        for category in _KEYWORD_CATEGORIES:
            words = table.get(category)
            if words:
                rules.append(Rule(_mentions(words), category, conventional=False))
    return rules


def _first_match(commit: CommitEntry, rules: Sequence[Rule]) -> Rule | None:
    for rule in rules:
        if rule.predicate(commit):
            return rule
    return None


def classify(
    commit: CommitEntry,
    *,
    smart: bool = True,
    keywords: Mapping[str, Sequence[str]] | None = None,
) -> Category:
    rule = _first_match(commit, build_rules(smart=smart, keywords=keywords))
    return rule.category if rule is not None else "other"


def is_conventional(commit: CommitEntry) -> bool:
    return _first_match(commit, build_rules(smart=False)) is not None


def _entry_text(commit: CommitEntry) -> str:
    parsed = _parse_subject(commit.subject)
    if parsed is None:
        return commit.subject.strip()
    if parsed.scope:
        return f"**{parsed.scope}**: {parsed.description}"
    return parsed.description


def render_release_notes(
    commits: Sequence[CommitEntry],
    *,
    options: NotesOptions | None = None,
    previous_tag: str | None = None,
    tag: str | None = None,
    repository_url: str | None = None,
) -> str:
    """Render categorized markdown, or "" to request platform-generated notes."""
    opts = options or NotesOptions()
    rules = build_rules(smart=opts.smart, keywords=opts.keywords)

    buckets: dict[Category, list[str]] = {c: [] for c in CATEGORY_TITLES}
    recognised = 0
    for commit in commits:
        rule = _first_match(commit, rules)
        if rule is not None and rule.conventional:
            recognised += 1
        category: Category = rule.category if rule is not None else "other"
        buckets[category].append(f"- {_entry_text(commit)} ({commit.short_sha})")

    if not commits or recognised < opts.min_conventional:
        return ""

    lines: list[str] = []
    for category, title in CATEGORY_TITLES.items():
        entries = buckets[category]
        if not entries:
            continue
        if lines:
            lines.append("")
        lines.append(f"## {title}")
        lines.append("")
        lines.extend(entries)

    if previous_tag and tag and repository_url:
        lines.append("")
        base = repository_url.rstrip("/").removesuffix(".git")
        lines.append(f"**Full Changelog**: {base}/compare/{previous_tag}...{tag}")

    return "\n".join(lines).rstrip() + "\n"


class ReleaseNotesGenerator:
    """Reads the commit range from the repository and renders it."""

    def __init__(self, repo: RepositoryClient, options: NotesOptions | None = None) -> None:
        self._repo = repo
        self._options = options or NotesOptions()

    def generate(
        self,
        *,
        previous_tag: str | None,
        tag: str,
        repository_url: str | None = None,
        to_ref: str = "HEAD",
    ) -> Result[str, RepositoryError]:
        commits = self._repo.log(previous_tag, to_ref)
        if isinstance(commits, Err):
            return commits
        return Ok(
            render_release_notes(
                commits.value,
                options=self._options,
                previous_tag=previous_tag,
                tag=tag,
                repository_url=repository_url,
            )
        )
