"""Gitee v5 API adapter.

Differences from GitHub that matter here:
- the token travels as the `access_token` query parameter
- repositories default to `master`
- owner kind is reported in lowercase (`organization`) or via `namespace.type`
- release payloads carry no browser URL and releases cannot be drafts
"""

from __future__ import annotations

from gitflow.core.structured import StrDict, get_bool, get_int, get_str, get_table
from gitflow.hosting.base import (
    CreateReleaseOptions,
    OwnerKind,
    PlatformKind,
    ReleaseRecord,
    RemoteRepository,
)
from gitflow.hosting.rest import RestPlatformClient, owner_of

__all__ = ["GITEE_API_URL", "GiteeAdapter"]

GITEE_API_URL = "https://gitee.com/api/v5"
GITEE_WEB_URL = "https://gitee.com"

_ORG_NAMESPACES = frozenset({"group", "enterprise"})


class GiteeAdapter(RestPlatformClient):
    """PlatformClient for gitee.com."""

    kind: PlatformKind = "gitee"
    default_base_url = GITEE_API_URL

    def _auth(self) -> tuple[dict[str, str], dict[str, str]]:
        return ({}, {"access_token": self._token})

    def _release_payload(self, options: CreateReleaseOptions) -> dict[str, object]:
        # Gitee rejects an empty body and requires a target.
        return {
            "tag_name": options.tag_name,
            "name": options.name,
            "body": options.body or options.name,
            "target_commitish": options.target_commitish or "master",
            "prerelease": options.prerelease,
        }

    def _map_repository(self, data: StrDict) -> RemoteRepository | None:
        name = get_str(data, "path") or get_str(data, "name")
        owner = owner_of(data)
        if name is None or owner is None:
            return None
        login, owner_type = owner
        web = f"{GITEE_WEB_URL}/{login}/{name}"
        # Gitee's html_url is the clone URL (ends in .git).
        clone_url = get_str(data, "html_url") or f"{web}.git"
        return RemoteRepository(
            name=name,
            full_name=get_str(data, "full_name") or f"{login}/{name}",
            private=get_bool(data, "private") or False,
            html_url=clone_url.removesuffix(".git"),
            clone_url=clone_url,
            ssh_url=get_str(data, "ssh_url") or f"git@gitee.com:{login}/{name}.git",
            default_branch=get_str(data, "default_branch") or "master",
            owner_login=login,
            owner_kind=_owner_kind(data, owner_type),
            description=get_str(data, "description"),
        )

    def _map_release(self, data: StrDict, owner: str, name: str) -> ReleaseRecord | None:
        release_id = get_int(data, "id")
        tag = get_str(data, "tag_name")
        if release_id is None or tag is None:
            return None
        return ReleaseRecord(
            id=release_id,
            tag_name=tag,
            name=get_str(data, "name") or tag,
            body=get_str(data, "body") or "",
            html_url=f"{GITEE_WEB_URL}/{owner}/{name}/releases/{tag}",
            published_at=get_str(data, "created_at"),
            target_commitish=get_str(data, "target_commitish"),
            draft=False,
            prerelease=get_bool(data, "prerelease") or False,
        )


def _owner_kind(data: StrDict, owner_type: str) -> OwnerKind:
    if owner_type.lower() == "organization":
        return "Organization"
    namespace = get_table(data, "namespace")
    if namespace is not None and (get_str(namespace, "type") or "") in _ORG_NAMESPACES:
        return "Organization"
    return "User"
