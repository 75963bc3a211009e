"""Hosting platform clients (GitHub, Gitee)."""

from gitflow.hosting.base import (
    CreateReleaseOptions,
    CreateRepoOptions,
    Deadline,
    OrgInfo,
    OwnerKind,
    PlatformClient,
    PlatformCredential,
    PlatformKind,
    PlatformSnapshot,
    ReleaseRecord,
    RemoteRepository,
    RepoOwnerType,
    UserInfo,
)
from gitflow.hosting.factory import create_platform_client
from gitflow.hosting.gitee import GiteeAdapter
from gitflow.hosting.github import GitHubAdapter

__all__ = [
    "CreateReleaseOptions",
    "CreateRepoOptions",
    "Deadline",
    "GiteeAdapter",
    "GitHubAdapter",
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
    "create_platform_client",
]
