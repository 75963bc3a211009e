"""Local/remote reconciliation.

`RemoteManager` is the only place where the working tree and the hosting
platform meet: it bootstraps the remote repository, wires `origin`, and
performs push/pull/tag operations against the configured remote.
"""

from __future__ import annotations

import re

from gitflow.core.errors import GitFlowError, PlatformError, RepositoryError
from gitflow.core.result import Err, Ok, Result
from gitflow.git.repository import RepositoryClient
from gitflow.hosting.base import (
    CreateRepoOptions,
    Deadline,
    PlatformClient,
    RemoteRepository,
    RepoOwnerType,
)
from gitflow.output.console import ConsoleProtocol
from gitflow.services.timeouts import PLATFORM_TIMEOUT_SECONDS

__all__ = ["RemoteManager", "parse_repo_slug", "repository_web_url"]

# https://host/owner/name(.git), ssh://git@host[:port]/owner/name(.git)
_URL_RE = re.compile(
    r"^(?P<scheme>[a-z][a-z0-9+.-]*)://(?:[^@/]+@)?(?P<host>[^/:]+)(?::\d+)?/(?P<path>.+?)/?$",
    re.IGNORECASE,
)
# git@host:owner/name(.git)
_SCP_RE = re.compile(r"^(?:[^@/]+@)?(?P<host>[^:/]+):(?P<path>[^/].*?)/?$")


def _split_url(url: str) -> tuple[str, str, str, str] | None:
    """Return (scheme, host, owner, name) for a clone URL."""
    s = url.strip()
    m = _URL_RE.match(s)
    scheme = m.group("scheme").lower() if m is not None else "ssh"
    if m is None:
        m = _SCP_RE.match(s)
    if m is None:
        return None
    parts = [p for p in m.group("path").split("/") if p]
    if len(parts) < 2:
        return None
    owner = "/".join(parts[:-1])
    name = parts[-1].removesuffix(".git")
    if not owner or not name:
        return None
    return (scheme, m.group("host"), owner, name)


def parse_repo_slug(url: str) -> tuple[str, str] | None:
    """Extract (owner, name) from a clone URL. Nested groups keep the last segment as name."""
    split = _split_url(url)
    if split is None:
        return None
    return (split[2], split[3])


def repository_web_url(url: str) -> str | None:
    """Browser URL of the repository behind a clone URL (credentials dropped)."""
    split = _split_url(url)
    if split is None:
        return None
    scheme, host, owner, name = split
    web_scheme = scheme if scheme in ("http", "https") else "https"
    return f"{web_scheme}://{host}/{owner}/{name}"


class RemoteManager:
    def __init__(
        self,
        repo: RepositoryClient,
        platform: PlatformClient,
        console: ConsoleProtocol,
        *,
        remote: str = "origin",
        main_branch: str = "main",
        platform_timeout: float = PLATFORM_TIMEOUT_SECONDS,
    ) -> None:
        self._repo = repo
        self._platform = platform
        self._console = console
        self._remote = remote
        self._main = main_branch
        self._platform_timeout = platform_timeout

    @property
    def remote(self) -> str:
        return self._remote

    @property
    def platform(self) -> PlatformClient:
        return self._platform

    def deadline(self) -> Deadline:
        return Deadline.after(self._platform_timeout)

    # -- bootstrap -------------------------------------------------------------

    def bootstrap(
        self,
        name: str,
        owner_kind: RepoOwnerType,
        owner: str,
        *,
        description: str | None = None,
        private: bool = False,
    ) -> Result[RemoteRepository, GitFlowError]:
        """Reuse or create the remote repository, then wire `origin` to it.

        Safe to re-run: an existing remote repository is fetched, not
        recreated, and an existing `origin` is never overwritten.
        """
        remote_repo = self._get_or_create(
            name, owner_kind, owner, description=description, private=private
        )
        if isinstance(remote_repo, Err):
            return remote_repo

        added = self.add_remote_if_missing(remote_repo.value.clone_url)
        if isinstance(added, Err):
            return added
        return Ok(remote_repo.value)

    def add_remote_if_missing(self, url: str) -> Result[bool, RepositoryError]:
        """Add the remote; returns False when it already existed."""
        existing = self._repo.remote_url(self._remote)
        if isinstance(existing, Err):
            return existing
        if existing.value is not None:
            if existing.value != url:
                self._console.warning(
                    f"remote '{self._remote}' already points at {existing.value}; leaving it unchanged"
                )
            return Ok(False)

        added = self._repo.add_remote(self._remote, url)
        if isinstance(added, Err):
            return added
        self._console.success(f"added remote {self._remote} -> {url}")
        return Ok(True)

    def remote_url(self) -> Result[str | None, RepositoryError]:
        return self._repo.remote_url(self._remote)

    def repository_slug(self) -> Result[tuple[str, str] | None, RepositoryError]:
        url = self.remote_url()
        if isinstance(url, Err):
            return url
        if url.value is None:
            return Ok(None)
        return Ok(parse_repo_slug(url.value))

    # -- sync ------------------------------------------------------------------

    def push(self, branch: str) -> Result[None, RepositoryError]:
        return self._repo.push(self._remote, branch)

    def pull(self, branch: str) -> Result[None, RepositoryError]:
        return self._repo.pull(self._remote, branch)

    def push_with_upstream(self, branch: str) -> Result[None, RepositoryError]:
        return self._repo.push(self._remote, branch, set_upstream=True)

    def force_push(self, branch: str) -> Result[None, RepositoryError]:
        self._console.warning(f"force-pushing {branch} to {self._remote}")
        return self._repo.push(self._remote, branch, force=True)

    def create_and_push_tag(self, name: str, message: str) -> Result[None, RepositoryError]:
        tagged = self._repo.tag(name, message)
        if isinstance(tagged, Err):
            return tagged
        return self._repo.push_tag(self._remote, name)

    def sync_main_branch(self, name: str | None = None) -> Result[None, RepositoryError]:
        """Check out main and pull it from the remote."""
        branch = name or self._main
        checkout = self._repo.checkout(branch)
        if isinstance(checkout, Err):
            return checkout
        return self.pull(branch)

    def delete_remote_branch(self, branch: str) -> Result[None, RepositoryError]:
        return self._repo.delete_remote_branch(branch, self._remote)

    # -- internals -------------------------------------------------------------

    def _get_or_create(
        self,
        name: str,
        owner_kind: RepoOwnerType,
        owner: str,
        *,
        description: str | None,
        private: bool,
    ) -> Result[RemoteRepository, PlatformError]:
        exists = self._platform.repository_exists(owner, name, deadline=self.deadline())
        if isinstance(exists, Err):
            return exists

        if exists.value:
            self._console.info(f"remote repository {owner}/{name} already exists, reusing it")
            return self._platform.get_repository(owner, name, deadline=self.deadline())

        options = CreateRepoOptions(name=name, description=description, private=private)
        match owner_kind:
            case "org":
                created = self._platform.create_organization_repository(
                    owner, options, deadline=self.deadline()
                )
            case "user":
                created = self._platform.create_user_repository(options, deadline=self.deadline())
        if isinstance(created, Ok):
            self._console.success(f"created remote repository {created.value.full_name}")
        return created
