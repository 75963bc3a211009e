"""In-memory collaborators for service tests.

FakeRepository models just enough git behaviour (branches, remote-tracking
refs, tags, commits) for the workflow services; FakePlatform does the same
for a hosting platform. Both record every call so tests can assert on
ordering and on the absence of side effects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from gitflow.core.errors import PlatformError, RepositoryError
from gitflow.core.result import Err, Ok, Result
from gitflow.git.repository import Branches, CommitEntry, RepositoryState
from gitflow.hosting.base import (
    CreateReleaseOptions,
    CreateRepoOptions,
    Deadline,
    OrgInfo,
    PlatformKind,
    ReleaseRecord,
    RemoteRepository,
    UserInfo,
)

# Repository calls that change on-disk or remote state.
MUTATING_CALLS = frozenset(
    {
        "init",
        "checkout",
        "checkout_new",
        "checkout_tracking_remote",
        "merge",
        "merge_abort",
        "add_all",
        "commit",
        "tag",
        "push",
        "push_tag",
        "pull",
        "fetch",
        "delete_local_branch",
        "delete_remote_branch",
        "add_remote",
    }
)


class FakeRepository:
    """RepositoryClient backed by plain Python state."""

    def __init__(
        self,
        path: Path,
        *,
        initialized: bool = True,
        current: str | None = "main",
        local: list[str] | None = None,
        remote: list[str] | None = None,
        remotes: dict[str, str] | None = None,
        tags: list[str] | None = None,
        commits: list[CommitEntry] | None = None,
    ) -> None:
        self._path = path
        self.initialized = initialized
        self.current = current
        self.local: list[str] = list(local) if local is not None else ["main"]
        self.remote: list[str] = list(remote) if remote is not None else []
        self.remote_urls: dict[str, str] = dict(remotes) if remotes is not None else {}
        self.tag_list: list[str] = list(tags) if tags is not None else []
        self.commits: list[CommitEntry] = list(commits) if commits is not None else []
        self.dirty = False
        self.conflicted = False
        self.stashes = 0
        self.calls: list[tuple[str, ...]] = []
        self.failures: dict[str, RepositoryError] = {}

    # -- test helpers ----------------------------------------------------------

    def fail(self, method: str, message: str = "simulated failure") -> None:
        self.failures[method] = RepositoryError(command=method, message=message)

    def called(self, method: str) -> bool:
        return any(c[0] == method for c in self.calls)

    def calls_to(self, method: str) -> list[tuple[str, ...]]:
        return [c for c in self.calls if c[0] == method]

    @property
    def mutations(self) -> list[tuple[str, ...]]:
        return [c for c in self.calls if c[0] in MUTATING_CALLS]

    def _record(self, method: str, *args: str) -> RepositoryError | None:
        self.calls.append((method, *args))
        return self.failures.get(method)

    # -- queries ---------------------------------------------------------------

    @property
    def path(self) -> Path:
        return self._path

    def is_repository(self) -> bool:
        return self.initialized

    def current_branch(self) -> Result[str | None, RepositoryError]:
        return Ok(self.current)

    def list_branches(self) -> Result[Branches, RepositoryError]:
        return Ok(Branches(local=tuple(self.local), remote=tuple(self.remote)))

    def has_uncommitted_changes(self) -> Result[bool, RepositoryError]:
        return Ok(self.dirty or self.conflicted)

    def has_conflicts(self) -> Result[bool, RepositoryError]:
        return Ok(self.conflicted)

    def stash_count(self) -> Result[int, RepositoryError]:
        return Ok(self.stashes)

    def tags(self) -> Result[list[str], RepositoryError]:
        return Ok(list(self.tag_list))

    def state(self) -> Result[RepositoryState, RepositoryError]:
        return Ok(
            RepositoryState(
                current_branch=self.current,
                branches=Branches(local=tuple(self.local), remote=tuple(self.remote)),
                dirty=self.dirty,
                conflicted_count=1 if self.conflicted else 0,
                stash_count=self.stashes,
                tags=tuple(self.tag_list),
            )
        )

    def log(
        self, from_ref: str | None = None, to_ref: str = "HEAD"
    ) -> Result[list[CommitEntry], RepositoryError]:
        if (err := self._record("log", from_ref or "", to_ref)) is not None:
            return Err(err)
        return Ok(list(self.commits))

    def remotes(self) -> Result[dict[str, str], RepositoryError]:
        return Ok(dict(self.remote_urls))

    def has_remote(self, name: str) -> Result[bool, RepositoryError]:
        return Ok(name in self.remote_urls)

    def remote_url(self, name: str) -> Result[str | None, RepositoryError]:
        return Ok(self.remote_urls.get(name))

    def has_commits(self) -> Result[bool, RepositoryError]:
        return Ok(bool(self.commits))

    # -- mutations -------------------------------------------------------------

    def init(self, initial_branch: str) -> Result[None, RepositoryError]:
        if (err := self._record("init", initial_branch)) is not None:
            return Err(err)
        self.initialized = True
        self.current = initial_branch
        self.local = []
        return Ok(None)

    def checkout(self, name: str) -> Result[None, RepositoryError]:
        if (err := self._record("checkout", name)) is not None:
            return Err(err)
        if name not in self.local:
            return Err(
                RepositoryError(f"checkout {name}", f"pathspec '{name}' did not match", 1)
            )
        self.current = name
        return Ok(None)

    def checkout_new(self, name: str) -> Result[None, RepositoryError]:
        if (err := self._record("checkout_new", name)) is not None:
            return Err(err)
        if name in self.local:
            return Err(RepositoryError(f"checkout -b {name}", f"branch '{name}' already exists"))
        self.local.append(name)
        self.current = name
        return Ok(None)

    def checkout_tracking_remote(self, local: str, remote_ref: str) -> Result[None, RepositoryError]:
        if (err := self._record("checkout_tracking_remote", local, remote_ref)) is not None:
            return Err(err)
        if remote_ref not in self.remote:
            return Err(RepositoryError(f"checkout -b {local}", f"'{remote_ref}' is not a commit"))
        if local not in self.local:
            self.local.append(local)
        self.current = local
        return Ok(None)

    def merge(
        self, branch: str, *, no_ff: bool = False, message: str | None = None
    ) -> Result[None, RepositoryError]:
        if (err := self._record("merge", branch, "no-ff" if no_ff else "ff")) is not None:
            return Err(err)
        return Ok(None)

    def merge_abort(self) -> Result[None, RepositoryError]:
        if (err := self._record("merge_abort")) is not None:
            return Err(err)
        return Ok(None)

    def add_all(self) -> Result[None, RepositoryError]:
        if (err := self._record("add_all")) is not None:
            return Err(err)
        return Ok(None)

    def commit(self, message: str) -> Result[None, RepositoryError]:
        if (err := self._record("commit", message)) is not None:
            return Err(err)
        sha = f"{len(self.commits) + 1:040x}"
        self.commits.insert(0, CommitEntry(sha=sha, subject=message))
        self.dirty = False
        return Ok(None)

    def tag(self, name: str, message: str | None = None) -> Result[None, RepositoryError]:
        if (err := self._record("tag", name, message or "")) is not None:
            return Err(err)
        if name in self.tag_list:
            return Err(RepositoryError(f"tag -a {name}", f"tag '{name}' already exists", 128))
        self.tag_list.append(name)
        return Ok(None)

    def push(
        self,
        remote: str,
        branch: str | None = None,
        *,
        set_upstream: bool = False,
        force: bool = False,
    ) -> Result[None, RepositoryError]:
        flags = ("upstream" if set_upstream else "") + ("force" if force else "")
        if (err := self._record("push", remote, branch or "", flags)) is not None:
            return Err(err)
        if branch is not None and f"{remote}/{branch}" not in self.remote:
            self.remote.append(f"{remote}/{branch}")
        return Ok(None)

    def push_tag(self, remote: str, tag: str) -> Result[None, RepositoryError]:
        if (err := self._record("push_tag", remote, tag)) is not None:
            return Err(err)
        return Ok(None)

    def pull(self, remote: str, branch: str | None = None) -> Result[None, RepositoryError]:
        if (err := self._record("pull", remote, branch or "")) is not None:
            return Err(err)
        return Ok(None)

    def fetch(self, remote: str) -> Result[None, RepositoryError]:
        if (err := self._record("fetch", remote)) is not None:
            return Err(err)
        return Ok(None)

    def delete_local_branch(self, name: str, force: bool = False) -> Result[None, RepositoryError]:
        if (err := self._record("delete_local_branch", name)) is not None:
            return Err(err)
        if self.current == name:
            return Err(RepositoryError(f"branch -d {name}", f"cannot delete checked-out branch '{name}'"))
        self.local.remove(name)
        return Ok(None)

    def delete_remote_branch(self, name: str, remote: str) -> Result[None, RepositoryError]:
        if (err := self._record("delete_remote_branch", name, remote)) is not None:
            return Err(err)
        ref = f"{remote}/{name}"
        if ref not in self.remote:
            return Err(
                RepositoryError(f"push {remote} --delete {name}", f"remote ref does not exist: {name}")
            )
        self.remote.remove(ref)
        return Ok(None)

    def add_remote(self, name: str, url: str) -> Result[None, RepositoryError]:
        if (err := self._record("add_remote", name, url)) is not None:
            return Err(err)
        if name in self.remote_urls:
            return Err(RepositoryError(f"remote add {name}", f"remote {name} already exists", 3))
        self.remote_urls[name] = url
        return Ok(None)


def _empty_orgs() -> list[OrgInfo]:
    return []


@dataclass
class FakePlatform:
    """PlatformClient with in-memory repositories and releases."""

    kind: PlatformKind = "github"
    user: UserInfo = field(default_factory=lambda: UserInfo(login="octo", name="Octo"))
    organizations: list[OrgInfo] = field(default_factory=_empty_orgs)
    repositories: dict[str, RemoteRepository] = field(default_factory=dict)
    releases: dict[str, list[ReleaseRecord]] = field(default_factory=dict)
    default_branches: dict[str, str] = field(default_factory=dict)
    failures: dict[str, PlatformError] = field(default_factory=dict)
    calls: list[tuple[str, ...]] = field(default_factory=list)
    last_release_options: CreateReleaseOptions | None = None

    def fail(self, operation: str, status: int = 500, message: str = "simulated failure") -> None:
        self.failures[operation] = PlatformError(operation=operation, message=message, status=status)

    def called(self, operation: str) -> bool:
        return any(c[0] == operation for c in self.calls)

    def add_repository(self, owner: str, name: str, *, kind: str = "User") -> RemoteRepository:
        repo = _remote_repository(owner, name, owner_kind=kind)
        self.repositories[f"{owner}/{name}"] = repo
        return repo

    def _record(self, operation: str, *args: str) -> PlatformError | None:
        self.calls.append((operation, *args))
        return self.failures.get(operation)

    def get_current_user(self, *, deadline: Deadline | None = None) -> Result[UserInfo, PlatformError]:
        if (err := self._record("get_current_user")) is not None:
            return Err(err)
        return Ok(self.user)

    def get_user_organizations(
        self, *, deadline: Deadline | None = None
    ) -> Result[list[OrgInfo], PlatformError]:
        if (err := self._record("get_user_organizations")) is not None:
            return Err(err)
        return Ok(list(self.organizations))

    def repository_exists(
        self, owner: str, name: str, *, deadline: Deadline | None = None
    ) -> Result[bool, PlatformError]:
        if (err := self._record("repository_exists", owner, name)) is not None:
            return Err(err)
        return Ok(f"{owner}/{name}" in self.repositories)

    def create_user_repository(
        self, options: CreateRepoOptions, *, deadline: Deadline | None = None
    ) -> Result[RemoteRepository, PlatformError]:
        if (err := self._record("create_user_repository", options.name)) is not None:
            return Err(err)
        return Ok(self.add_repository(self.user.login, options.name))

    def create_organization_repository(
        self, org: str, options: CreateRepoOptions, *, deadline: Deadline | None = None
    ) -> Result[RemoteRepository, PlatformError]:
        if (err := self._record("create_organization_repository", org, options.name)) is not None:
            return Err(err)
        return Ok(self.add_repository(org, options.name, kind="Organization"))

    def get_repository(
        self, owner: str, name: str, *, deadline: Deadline | None = None
    ) -> Result[RemoteRepository, PlatformError]:
        if (err := self._record("get_repository", owner, name)) is not None:
            return Err(err)
        repo = self.repositories.get(f"{owner}/{name}")
        if repo is None:
            return Err(PlatformError("get_repository", "Not Found", 404))
        return Ok(repo)

    def delete_repository(
        self, owner: str, name: str, *, deadline: Deadline | None = None
    ) -> Result[None, PlatformError]:
        if (err := self._record("delete_repository", owner, name)) is not None:
            return Err(err)
        self.repositories.pop(f"{owner}/{name}", None)
        return Ok(None)

    def update_default_branch(
        self, owner: str, name: str, branch: str, *, deadline: Deadline | None = None
    ) -> Result[None, PlatformError]:
        if (err := self._record("update_default_branch", owner, name, branch)) is not None:
            return Err(err)
        self.default_branches[f"{owner}/{name}"] = branch
        return Ok(None)

    def create_release(
        self,
        owner: str,
        name: str,
        options: CreateReleaseOptions,
        *,
        deadline: Deadline | None = None,
    ) -> Result[ReleaseRecord, PlatformError]:
        if (err := self._record("create_release", owner, name, options.tag_name)) is not None:
            return Err(err)
        existing = self.releases.setdefault(f"{owner}/{name}", [])
        record = ReleaseRecord(
            id=len(existing) + 1,
            tag_name=options.tag_name,
            name=options.name,
            body=options.body,
            html_url=f"https://github.com/{owner}/{name}/releases/tag/{options.tag_name}",
            target_commitish=options.target_commitish,
            draft=options.draft,
            prerelease=options.prerelease,
        )
        existing.append(record)
        self.last_release_options = options
        return Ok(record)

    def get_latest_release(
        self, owner: str, name: str, *, deadline: Deadline | None = None
    ) -> Result[ReleaseRecord | None, PlatformError]:
        if (err := self._record("get_latest_release", owner, name)) is not None:
            return Err(err)
        records = self.releases.get(f"{owner}/{name}") or []
        return Ok(records[-1] if records else None)

    def release_exists(
        self, owner: str, name: str, tag: str, *, deadline: Deadline | None = None
    ) -> Result[bool, PlatformError]:
        if (err := self._record("release_exists", owner, name, tag)) is not None:
            return Err(err)
        records = self.releases.get(f"{owner}/{name}") or []
        return Ok(any(r.tag_name == tag for r in records))


def _remote_repository(owner: str, name: str, *, owner_kind: str = "User") -> RemoteRepository:
    return RemoteRepository(
        name=name,
        full_name=f"{owner}/{name}",
        private=False,
        html_url=f"https://github.com/{owner}/{name}",
        clone_url=f"https://github.com/{owner}/{name}.git",
        ssh_url=f"git@github.com:{owner}/{name}.git",
        default_branch="main",
        owner_login=owner,
        owner_kind="Organization" if owner_kind == "Organization" else "User",
    )
