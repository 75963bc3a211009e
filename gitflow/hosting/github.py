"""GitHub REST v3 adapter.

Example:
    client = GitHubAdapter(token)
    match client.repository_exists("octo", "demo"):
        case Ok(True):
            ...
"""

from __future__ import annotations

from gitflow.core.structured import StrDict, get_bool, get_int, get_str
from gitflow.hosting.base import CreateReleaseOptions, PlatformKind, ReleaseRecord, RemoteRepository
from gitflow.hosting.rest import RestPlatformClient, owner_of

__all__ = ["GITHUB_API_URL", "GitHubAdapter"]

GITHUB_API_URL = "https://api.github.com"
_API_VERSION = "2022-11-28"


class GitHubAdapter(RestPlatformClient):
    """PlatformClient for github.com (or a GitHub Enterprise API root)."""

    kind: PlatformKind = "github"
    default_base_url = GITHUB_API_URL

    def _auth(self) -> tuple[dict[str, str], dict[str, str]]:
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": _API_VERSION,
        }
        return (headers, {})

    def _default_branch_payload(self, name: str, branch: str) -> dict[str, object]:
        return {"default_branch": branch}

    def _release_payload(self, options: CreateReleaseOptions) -> dict[str, object]:
        payload: dict[str, object] = {
            "tag_name": options.tag_name,
            "name": options.name,
            "body": options.body,
            "draft": options.draft,
            "prerelease": options.prerelease,
        }
        if options.target_commitish is not None:
            payload["target_commitish"] = options.target_commitish
        if options.generate_release_notes:
            payload["generate_release_notes"] = True
            if options.previous_tag_name is not None:
                payload["previous_tag_name"] = options.previous_tag_name
        return payload

    def _map_repository(self, data: StrDict) -> RemoteRepository | None:
        name = get_str(data, "name")
        owner = owner_of(data)
        if name is None or owner is None:
            return None
        login, owner_type = owner
        return RemoteRepository(
            name=name,
            full_name=get_str(data, "full_name") or f"{login}/{name}",
            private=get_bool(data, "private") or False,
            html_url=get_str(data, "html_url") or f"https://github.com/{login}/{name}",
            clone_url=get_str(data, "clone_url") or f"https://github.com/{login}/{name}.git",
            ssh_url=get_str(data, "ssh_url") or f"git@github.com:{login}/{name}.git",
            default_branch=get_str(data, "default_branch") or "main",
            owner_login=login,
            owner_kind="Organization" if owner_type == "Organization" else "User",
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
            html_url=get_str(data, "html_url")
            or f"https://github.com/{owner}/{name}/releases/tag/{tag}",
            published_at=get_str(data, "published_at"),
            target_commitish=get_str(data, "target_commitish"),
            draft=get_bool(data, "draft") or False,
            prerelease=get_bool(data, "prerelease") or False,
        )
