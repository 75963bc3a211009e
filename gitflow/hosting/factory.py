"""Adapter selection by credential kind."""

from __future__ import annotations

from gitflow.hosting.base import PlatformClient, PlatformCredential
from gitflow.hosting.gitee import GiteeAdapter
from gitflow.hosting.github import GitHubAdapter
from gitflow.hosting.http import HttpClient

__all__ = ["create_platform_client"]


def create_platform_client(
    credential: PlatformCredential, http: HttpClient | None = None
) -> PlatformClient:
    """Build the adapter matching `credential.kind`."""
    match credential.kind:
        case "github":
            return GitHubAdapter(credential.token, base_url=credential.base_url, http=http)
        case "gitee":
            return GiteeAdapter(credential.token, base_url=credential.base_url, http=http)
