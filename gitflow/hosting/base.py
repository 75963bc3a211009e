"""Hosting platform interface and shared models.

The orchestrator only ever holds a `PlatformClient`. Concrete adapters
(GitHub, Gitee) are selected once, by credential kind, in
`gitflow.hosting.factory`.

Error policy shared by all adapters: a 404 on an existence or "latest"
query is an absence value (False / None), never an error. Every other
failure is `Err(PlatformError)` with the HTTP status when one was received.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Literal, Protocol

from gitflow.core.errors import PlatformError
from gitflow.core.result import Result

__all__ = [
    "CreateReleaseOptions",
    "CreateRepoOptions",
    "Deadline",
    "OrgInfo",
    "OwnerKind",
    "PlatformClient",
    "PlatformCredential",
    "PlatformKind",
    "PlatformSnapshot",
    "ReleaseRecord",
    "RemoteRepository",
    "RepoOwnerType",
    "UserInfo",
]

PlatformKind = Literal["github", "gitee"]
# How the platform reports an owner.
OwnerKind = Literal["User", "Organization"]
# How the caller selects where a repository is created.
RepoOwnerType = Literal["user", "org"]


@dataclass(frozen=True, slots=True)
class PlatformCredential:
    """Credential supplied by the caller; never persisted by the core.

    Attributes:
        kind: Which platform the token belongs to
        token: Access token
        base_url: API root override for enterprise / self-hosted deployments
    """

    kind: PlatformKind
    token: str
    base_url: str | None = None

    def __repr__(self) -> str:
        return f"PlatformCredential(kind={self.kind!r}, token='***', base_url={self.base_url!r})"


@dataclass(frozen=True, slots=True)
class Deadline:
    """Absolute deadline for a platform call (monotonic clock)."""

    expires_at: float

    @classmethod
    def after(cls, seconds: float) -> Deadline:
        return cls(expires_at=time.monotonic() + seconds)

    def remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0.0


@dataclass(frozen=True, slots=True)
class UserInfo:
    login: str
    name: str
    email: str | None = None
    avatar: str | None = None


@dataclass(frozen=True, slots=True)
class OrgInfo:
    login: str
    name: str
    description: str | None = None
    avatar: str | None = None


@dataclass(frozen=True, slots=True)
class RemoteRepository:
    """A repository as described by the hosting platform.

    Attributes:
        name: Repository name
        full_name: "owner/name"
        private: Visibility flag
        html_url: Browser URL (also the base for compare links)
        clone_url: HTTPS clone URL
        ssh_url: SSH clone URL
        default_branch: Platform default branch
        owner_login: Owner account
        owner_kind: "User" or "Organization"
    """

    name: str
    full_name: str
    private: bool
    html_url: str
    clone_url: str
    ssh_url: str
    default_branch: str
    owner_login: str
    owner_kind: OwnerKind
    description: str | None = None


@dataclass(frozen=True, slots=True)
class CreateRepoOptions:
    name: str
    description: str | None = None
    private: bool = False
    auto_init: bool = False
    gitignore_template: str | None = None


@dataclass(frozen=True, slots=True)
class CreateReleaseOptions:
    """Release creation request.

    An empty `body` with `generate_release_notes` lets the platform write the
    notes itself where it supports that.
    """

    tag_name: str
    name: str
    body: str = ""
    target_commitish: str | None = None
    draft: bool = False
    prerelease: bool = False
    generate_release_notes: bool = False
    previous_tag_name: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseRecord:
    id: int
    tag_name: str
    name: str
    body: str
    html_url: str
    published_at: str | None = None
    target_commitish: str | None = None
    draft: bool = False
    prerelease: bool = False


class PlatformClient(Protocol):
    """Capability set every hosting adapter implements.

    Every call accepts an optional Deadline; an expired deadline fails the
    call before any request is sent.
    """

    @property
    def kind(self) -> PlatformKind: ...

    def get_current_user(self, *, deadline: Deadline | None = None) -> Result[UserInfo, PlatformError]: ...

    def get_user_organizations(
        self, *, deadline: Deadline | None = None
    ) -> Result[list[OrgInfo], PlatformError]: ...

    def repository_exists(
        self, owner: str, name: str, *, deadline: Deadline | None = None
    ) -> Result[bool, PlatformError]: ...

    def create_user_repository(
        self, options: CreateRepoOptions, *, deadline: Deadline | None = None
    ) -> Result[RemoteRepository, PlatformError]: ...

    def create_organization_repository(
        self, org: str, options: CreateRepoOptions, *, deadline: Deadline | None = None
    ) -> Result[RemoteRepository, PlatformError]: ...

    def get_repository(
        self, owner: str, name: str, *, deadline: Deadline | None = None
    ) -> Result[RemoteRepository, PlatformError]: ...

    def delete_repository(
        self, owner: str, name: str, *, deadline: Deadline | None = None
    ) -> Result[None, PlatformError]: ...

    def update_default_branch(
        self, owner: str, name: str, branch: str, *, deadline: Deadline | None = None
    ) -> Result[None, PlatformError]: ...

    def create_release(
        self,
        owner: str,
        name: str,
        options: CreateReleaseOptions,
        *,
        deadline: Deadline | None = None,
    ) -> Result[ReleaseRecord, PlatformError]: ...

    def get_latest_release(
        self, owner: str, name: str, *, deadline: Deadline | None = None
    ) -> Result[ReleaseRecord | None, PlatformError]: ...

    def release_exists(
        self, owner: str, name: str, tag: str, *, deadline: Deadline | None = None
    ) -> Result[bool, PlatformError]: ...


def _empty_orgs() -> list[OrgInfo]:
    return []


@dataclass
class PlatformSnapshot:
    """Identity summary used by the CLI to present owner choices."""

    user: UserInfo
    organizations: list[OrgInfo] = field(default_factory=_empty_orgs)

    @property
    def owners(self) -> list[tuple[RepoOwnerType, str]]:
        return [("user", self.user.login)] + [("org", o.login) for o in self.organizations]
