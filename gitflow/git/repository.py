"""Git repository client.

`Repository` wraps one local git primitive per method and returns Result
types. A non-zero exit becomes `Err(RepositoryError)` carrying the primitive
name and git's own diagnostic text. Nothing here is transactional: callers
re-derive state (`state()`) rather than assume a previous call succeeded.

Usage:
    repo = Repository(Path("/path/to/repo"))

    match repo.state():
        case Ok(state):
            print(f"Branch: {state.current_branch} dirty={state.dirty}")
        case Err(e):
            print(f"Error: {e.message}")

`RepositoryClient` is the structural interface the services depend on, so
tests can substitute an in-memory repository.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from gitflow.core.errors import RepositoryError
from gitflow.core.result import Err, Ok, Result
from gitflow.system.process import ProcessError
from gitflow.system.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push", "clone"})

# Porcelain XY codes for unmerged paths.
_CONFLICT_CODES = frozenset({"DD", "AU", "UD", "UA", "DU", "AA", "UU"})

_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"

__all__ = [
    "Branches",
    "CommitEntry",
    "GitStatus",
    "Repository",
    "RepositoryClient",
    "RepositoryState",
    "StatusEntry",
]


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry in `git status --porcelain`.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??", "UU")
        path: File path
    """

    xy: str
    path: str

    @property
    def is_untracked(self) -> bool:
        return self.xy == "??"

    @property
    def is_conflicted(self) -> bool:
        return self.xy in _CONFLICT_CODES


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Parsed working tree status."""

    branch: str
    upstream: str | None = None
    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        return len(self.entries) == 0

    @property
    def conflicted(self) -> list[StatusEntry]:
        return [e for e in self.entries if e.is_conflicted]


@dataclass(frozen=True, slots=True)
class Branches:
    """Branch names known to the repository.

    Attributes:
        local: Local branch names ("develop")
        remote: Remote-tracking names with the remote prefix ("origin/develop")
        all: local followed by remote
    """

    local: tuple[str, ...] = ()
    remote: tuple[str, ...] = ()

    @property
    def all(self) -> tuple[str, ...]:
        return self.local + self.remote


@dataclass(frozen=True, slots=True)
class CommitEntry:
    """One commit of a log range."""

    sha: str
    subject: str
    body: str = ""

    @property
    def short_sha(self) -> str:
        return self.sha[:7]


@dataclass(frozen=True, slots=True)
class RepositoryState:
    """Snapshot of the working tree, always re-derived, never persisted."""

    current_branch: str | None
    branches: Branches
    dirty: bool
    conflicted_count: int
    stash_count: int
    tags: tuple[str, ...]


class RepositoryClient(Protocol):
    """Local version-control primitives used by the gitflow services."""

    @property
    def path(self) -> Path: ...

    def is_repository(self) -> bool: ...

    def init(self, initial_branch: str) -> Result[None, RepositoryError]: ...

    def current_branch(self) -> Result[str | None, RepositoryError]: ...

    def list_branches(self) -> Result[Branches, RepositoryError]: ...

    def has_uncommitted_changes(self) -> Result[bool, RepositoryError]: ...

    def has_conflicts(self) -> Result[bool, RepositoryError]: ...

    def stash_count(self) -> Result[int, RepositoryError]: ...

    def tags(self) -> Result[list[str], RepositoryError]: ...

    def state(self) -> Result[RepositoryState, RepositoryError]: ...

    def checkout(self, name: str) -> Result[None, RepositoryError]: ...

    def checkout_new(self, name: str) -> Result[None, RepositoryError]: ...

    def checkout_tracking_remote(self, local: str, remote_ref: str) -> Result[None, RepositoryError]: ...

    def merge(
        self, branch: str, *, no_ff: bool = False, message: str | None = None
    ) -> Result[None, RepositoryError]: ...

    def merge_abort(self) -> Result[None, RepositoryError]: ...

    def add_all(self) -> Result[None, RepositoryError]: ...

    def commit(self, message: str) -> Result[None, RepositoryError]: ...

    def tag(self, name: str, message: str | None = None) -> Result[None, RepositoryError]: ...

    def push(
        self,
        remote: str,
        branch: str | None = None,
        *,
        set_upstream: bool = False,
        force: bool = False,
    ) -> Result[None, RepositoryError]: ...

    def push_tag(self, remote: str, tag: str) -> Result[None, RepositoryError]: ...

    def pull(self, remote: str, branch: str | None = None) -> Result[None, RepositoryError]: ...

    def fetch(self, remote: str) -> Result[None, RepositoryError]: ...

    def delete_local_branch(self, name: str, force: bool = False) -> Result[None, RepositoryError]: ...

    def delete_remote_branch(self, name: str, remote: str) -> Result[None, RepositoryError]: ...

    def log(
        self, from_ref: str | None = None, to_ref: str = "HEAD"
    ) -> Result[list[CommitEntry], RepositoryError]: ...

    def remotes(self) -> Result[dict[str, str], RepositoryError]: ...

    def has_remote(self, name: str) -> Result[bool, RepositoryError]: ...

    def remote_url(self, name: str) -> Result[str | None, RepositoryError]: ...

    def has_commits(self) -> Result[bool, RepositoryError]: ...

    def add_remote(self, name: str, url: str) -> Result[None, RepositoryError]: ...


class Repository:
    """Git repository backed by the `git` binary.

    Attributes:
        path: Path to the working tree root
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    # -- queries ---------------------------------------------------------------

    def is_repository(self) -> bool:
        """True if the working tree root holds a `.git` directory or file."""
        return (self._path / ".git").exists()

    def status(self) -> Result[GitStatus, RepositoryError]:
        """Run `git status --porcelain=v1 -b` and parse it."""
        result = self._git(["status", "--porcelain=v1", "-b"], command="status")
        if isinstance(result, Err):
            return result
        return Ok(self._parse_status(result.value))

    def current_branch(self) -> Result[str | None, RepositoryError]:
        """Current branch name, None when HEAD is detached.

        Uses `symbolic-ref` so that an unborn branch (fresh `git init`)
        still reports its name.
        """
        result = self._run(["symbolic-ref", "--short", "-q", "HEAD"])
        match result:
            case Ok(stdout):
                return Ok(stdout.strip() or None)
            case Err(e):
                if e.returncode == 1 and not e.stderr.strip():
                    return Ok(None)
                return Err(_to_repository_error("symbolic-ref HEAD", e))

    def list_branches(self) -> Result[Branches, RepositoryError]:
        result = self._git(
            ["for-each-ref", "--format=%(refname)", "refs/heads", "refs/remotes"],
            command="for-each-ref",
        )
        if isinstance(result, Err):
            return result

        local: list[str] = []
        remote: list[str] = []
        for line in result.value.splitlines():
            ref = line.strip()
            if ref.startswith("refs/heads/"):
                local.append(ref[len("refs/heads/") :])
            elif ref.startswith("refs/remotes/"):
                name = ref[len("refs/remotes/") :]
                if name.endswith("/HEAD"):
                    continue
                remote.append(name)
        return Ok(Branches(local=tuple(local), remote=tuple(remote)))

    def has_uncommitted_changes(self) -> Result[bool, RepositoryError]:
        result = self._git(["status", "--porcelain"], command="status")
        if isinstance(result, Err):
            return result
        return Ok(result.value.strip() != "")

    def has_conflicts(self) -> Result[bool, RepositoryError]:
        status = self.status()
        if isinstance(status, Err):
            return status
        return Ok(len(status.value.conflicted) > 0)

    def stash_count(self) -> Result[int, RepositoryError]:
        result = self._git(["stash", "list"], command="stash list")
        if isinstance(result, Err):
            return result
        return Ok(len([ln for ln in result.value.splitlines() if ln.strip()]))

    def tags(self) -> Result[list[str], RepositoryError]:
        result = self._git(["tag", "--list"], command="tag --list")
        if isinstance(result, Err):
            return result
        return Ok([ln.strip() for ln in result.value.splitlines() if ln.strip()])

    def state(self) -> Result[RepositoryState, RepositoryError]:
        """Derive a RepositoryState snapshot from the working tree."""
        branch = self.current_branch()
        if isinstance(branch, Err):
            return branch
        branches = self.list_branches()
        if isinstance(branches, Err):
            return branches
        status = self.status()
        if isinstance(status, Err):
            return status
        stashes = self.stash_count()
        if isinstance(stashes, Err):
            return stashes
        tags = self.tags()
        if isinstance(tags, Err):
            return tags

        return Ok(
            RepositoryState(
                current_branch=branch.value,
                branches=branches.value,
                dirty=not status.value.is_clean,
                conflicted_count=len(status.value.conflicted),
                stash_count=stashes.value,
                tags=tuple(tags.value),
            )
        )

    def log(
        self, from_ref: str | None = None, to_ref: str = "HEAD"
    ) -> Result[list[CommitEntry], RepositoryError]:
        """Non-merge commits in `from_ref..to_ref`, newest first."""
        rev_range = f"{from_ref}..{to_ref}" if from_ref else to_ref
        result = self._git(
            [
                "log",
                "--no-merges",
                f"--format=%H{_FIELD_SEP}%s{_FIELD_SEP}%b{_RECORD_SEP}",
                rev_range,
            ],
            command=f"log {rev_range}",
        )
        if isinstance(result, Err):
            return result
        return Ok(self._parse_log(result.value))

    def remotes(self) -> Result[dict[str, str], RepositoryError]:
        """Configured remotes as name -> fetch URL."""
        result = self._run(["config", "--get-regexp", r"^remote\..*\.url$"])
        match result:
            case Err(e):
                # Exit 1 means "no matching keys".
                if e.returncode == 1:
                    return Ok({})
                return Err(_to_repository_error("config remote.*.url", e))
            case Ok(stdout):
                out: dict[str, str] = {}
                for line in stdout.splitlines():
                    key, _, url = line.strip().partition(" ")
                    name = key[len("remote.") : -len(".url")]
                    if name and url:
                        out[name] = url.strip()
                return Ok(out)

    def has_remote(self, name: str) -> Result[bool, RepositoryError]:
        remotes = self.remotes()
        if isinstance(remotes, Err):
            return remotes
        return Ok(name in remotes.value)

    def remote_url(self, name: str) -> Result[str | None, RepositoryError]:
        remotes = self.remotes()
        if isinstance(remotes, Err):
            return remotes
        return Ok(remotes.value.get(name))

    def has_commits(self) -> Result[bool, RepositoryError]:
        """False on an unborn branch (fresh `git init`)."""
        result = self._run(["rev-parse", "--verify", "-q", "HEAD"])
        match result:
            case Ok(_):
                return Ok(True)
            case Err(e):
                if e.returncode == 1:
                    return Ok(False)
                return Err(_to_repository_error("rev-parse HEAD", e))

    # -- mutations -------------------------------------------------------------

    def init(self, initial_branch: str) -> Result[None, RepositoryError]:
        return self._git_unit(["init", f"--initial-branch={initial_branch}"], command="init")

    def checkout(self, name: str) -> Result[None, RepositoryError]:
        return self._git_unit(["checkout", name], command=f"checkout {name}")

    def checkout_new(self, name: str) -> Result[None, RepositoryError]:
        return self._git_unit(["checkout", "-b", name], command=f"checkout -b {name}")

    def checkout_tracking_remote(self, local: str, remote_ref: str) -> Result[None, RepositoryError]:
        return self._git_unit(
            ["checkout", "-b", local, "--track", remote_ref],
            command=f"checkout -b {local} --track {remote_ref}",
        )

    def merge(
        self, branch: str, *, no_ff: bool = False, message: str | None = None
    ) -> Result[None, RepositoryError]:
        args = ["merge", "--no-edit"]
        if no_ff:
            args.append("--no-ff")
        if message is not None:
            args.extend(["-m", message])
        args.append(branch)
        label = f"merge --no-ff {branch}" if no_ff else f"merge {branch}"
        return self._git_unit(args, command=label)

    def merge_abort(self) -> Result[None, RepositoryError]:
        return self._git_unit(["merge", "--abort"], command="merge --abort")

    def add_all(self) -> Result[None, RepositoryError]:
        return self._git_unit(["add", "-A"], command="add -A")

    def commit(self, message: str) -> Result[None, RepositoryError]:
        return self._git_unit(["commit", "-m", message], command="commit")

    def tag(self, name: str, message: str | None = None) -> Result[None, RepositoryError]:
        if message is not None:
            return self._git_unit(["tag", "-a", name, "-m", message], command=f"tag -a {name}")
        return self._git_unit(["tag", name], command=f"tag {name}")

    def push(
        self,
        remote: str,
        branch: str | None = None,
        *,
        set_upstream: bool = False,
        force: bool = False,
    ) -> Result[None, RepositoryError]:
        args = ["push"]
        if set_upstream:
            args.append("--set-upstream")
        if force:
            args.append("--force")
        args.append(remote)
        if branch is not None:
            args.append(branch)
        return self._git_unit(args, command=" ".join(args[1:]))

    def push_tag(self, remote: str, tag: str) -> Result[None, RepositoryError]:
        return self._git_unit(["push", remote, f"refs/tags/{tag}"], command=f"push {remote} {tag}")

    def pull(self, remote: str, branch: str | None = None) -> Result[None, RepositoryError]:
        args = ["pull", "--no-rebase", "--no-edit", remote]
        if branch is not None:
            args.append(branch)
        return self._git_unit(args, command=f"pull {remote} {branch or ''}".strip())

    def fetch(self, remote: str) -> Result[None, RepositoryError]:
        return self._git_unit(["fetch", "--prune", remote], command=f"fetch {remote}")

    def delete_local_branch(self, name: str, force: bool = False) -> Result[None, RepositoryError]:
        flag = "-D" if force else "-d"
        return self._git_unit(["branch", flag, name], command=f"branch {flag} {name}")

    def delete_remote_branch(self, name: str, remote: str) -> Result[None, RepositoryError]:
        return self._git_unit(
            ["push", remote, "--delete", name], command=f"push {remote} --delete {name}"
        )

    def add_remote(self, name: str, url: str) -> Result[None, RepositoryError]:
        return self._git_unit(["remote", "add", name, url], command=f"remote add {name}")

    # -- internals -------------------------------------------------------------

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS if command in _NETWORK_COMMANDS else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self._path), *args], cwd=self._path, timeout=timeout)

    def _git(self, args: list[str], *, command: str) -> Result[str, RepositoryError]:
        result = self._run(args)
        if isinstance(result, Err):
            return Err(_to_repository_error(command, result.error))
        return Ok(result.value)

    def _git_unit(self, args: list[str], *, command: str) -> Result[None, RepositoryError]:
        result = self._git(args, command=command)
        if isinstance(result, Err):
            return result
        return Ok(None)

    def _parse_status(self, output: str) -> GitStatus:
        lines = [ln for ln in output.splitlines() if ln.strip()]
        if not lines:
            return GitStatus(branch="")

        branch, upstream = self._parse_branch_line(lines[0])
        entries: list[StatusEntry] = []
        for line in lines[1:]:
            if len(line) < 4:
                continue
            entries.append(StatusEntry(xy=line[:2], path=line[3:]))
        return GitStatus(branch=branch, upstream=upstream, entries=tuple(entries))

    def _parse_branch_line(self, line: str) -> tuple[str, str | None]:
        """Parse `## branch...upstream [ahead N]`."""
        s = line.strip()
        if s.startswith("##"):
            s = s[2:].lstrip()
        s = s.split(" [", 1)[0].strip()
        if s.startswith("No commits yet on "):
            s = s[len("No commits yet on ") :]
        if "..." in s:
            left, right = s.split("...", 1)
            return (left.strip(), right.strip())
        return (s, None)

    def _parse_log(self, output: str) -> list[CommitEntry]:
        commits: list[CommitEntry] = []
        for record in output.split(_RECORD_SEP):
            record = record.strip("\n")
            if not record.strip():
                continue
            parts = record.split(_FIELD_SEP)
            if len(parts) < 2:
                continue
            sha = parts[0].strip()
            subject = parts[1].strip()
            body = parts[2].strip() if len(parts) > 2 else ""
            commits.append(CommitEntry(sha=sha, subject=subject, body=body))
        return commits


def _to_repository_error(command: str, error: ProcessError) -> RepositoryError:
    return RepositoryError(
        command=command,
        message=error.diagnostic or f"git {command} failed",
        returncode=error.returncode,
    )
