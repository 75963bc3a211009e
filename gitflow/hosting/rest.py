"""Shared REST plumbing for hosting adapters.

GitHub and Gitee expose the same logical operations with different wire
conventions. `RestPlatformClient` implements the operations once; the
subclasses supply authentication, endpoint payloads and response mapping.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping

from gitflow.core.errors import PlatformError
from gitflow.core.result import Err, Ok, Result
from gitflow.core.structured import StrDict, as_obj_list, as_str_dict, get_str, get_table
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
from gitflow.hosting.http import HttpClient, HttpError, RealHttpClient

__all__ = ["RestPlatformClient"]

_NOT_FOUND = 404


class RestPlatformClient(ABC):
    """Base class for REST hosting adapters.

    Subclasses must define:
    - kind: platform tag
    - default_base_url: API root
    - _auth(): headers and query params that carry the token
    - _map_repository() / _map_release(): payload -> model
    - _release_payload(): CreateReleaseOptions -> request body
    """

    kind: PlatformKind
    default_base_url: str
    default_timeout: float = 30.0

    def __init__(
        self,
        token: str,
        *,
        base_url: str | None = None,
        http: HttpClient | None = None,
    ) -> None:
        self._token = token
        self._base_url = (base_url or self.default_base_url).rstrip("/")
        self._http = http or RealHttpClient(timeout=self.default_timeout)

    @property
    def base_url(self) -> str:
        return self._base_url

    # -- subclass hooks --------------------------------------------------------

    @abstractmethod
    def _auth(self) -> tuple[dict[str, str], dict[str, str]]:
        """Return (headers, params) carrying the access token."""
        ...

    @abstractmethod
    def _map_repository(self, data: StrDict) -> RemoteRepository | None: ...

    @abstractmethod
    def _map_release(self, data: StrDict, owner: str, name: str) -> ReleaseRecord | None: ...

    @abstractmethod
    def _release_payload(self, options: CreateReleaseOptions) -> dict[str, object]: ...

    def _repo_payload(self, options: CreateRepoOptions) -> dict[str, object]:
        payload: dict[str, object] = {
            "name": options.name,
            "private": options.private,
            "auto_init": options.auto_init,
        }
        if options.description is not None:
            payload["description"] = options.description
        if options.gitignore_template is not None:
            payload["gitignore_template"] = options.gitignore_template
        return payload

    def _default_branch_payload(self, name: str, branch: str) -> dict[str, object]:
        return {"name": name, "default_branch": branch}

    # -- operations ------------------------------------------------------------

    def get_current_user(self, *, deadline: Deadline | None = None) -> Result[UserInfo, PlatformError]:
        result = self._call_object("get_current_user", "GET", "/user", deadline=deadline)
        if isinstance(result, Err):
            return result

        data = result.value
        login = get_str(data, "login")
        if login is None:
            return Err(PlatformError("get_current_user", "missing user.login"))
        return Ok(
            UserInfo(
                login=login,
                name=get_str(data, "name") or login,
                email=get_str(data, "email"),
                avatar=get_str(data, "avatar_url"),
            )
        )

    def get_user_organizations(
        self, *, deadline: Deadline | None = None
    ) -> Result[list[OrgInfo], PlatformError]:
        result = self._call("get_user_organizations", "GET", "/user/orgs", deadline=deadline)
        if isinstance(result, Err):
            return result

        raw = as_obj_list(result.value)
        if raw is None:
            return Err(PlatformError("get_user_organizations", "unexpected organizations payload"))

        orgs: list[OrgInfo] = []
        for item in raw:
            d = as_str_dict(item)
            if d is None:
                continue
            login = get_str(d, "login")
            if login is None:
                continue
            orgs.append(
                OrgInfo(
                    login=login,
                    name=get_str(d, "name") or login,
                    description=get_str(d, "description"),
                    avatar=get_str(d, "avatar_url"),
                )
            )
        return Ok(orgs)

    def repository_exists(
        self, owner: str, name: str, *, deadline: Deadline | None = None
    ) -> Result[bool, PlatformError]:
        result = self._call("repository_exists", "GET", f"/repos/{owner}/{name}", deadline=deadline)
        if isinstance(result, Err):
            if result.error.status == _NOT_FOUND:
                return Ok(False)
            return result
        return Ok(True)

    def create_user_repository(
        self, options: CreateRepoOptions, *, deadline: Deadline | None = None
    ) -> Result[RemoteRepository, PlatformError]:
        return self._create_repository(
            "create_user_repository", "/user/repos", options, deadline=deadline
        )

    def create_organization_repository(
        self, org: str, options: CreateRepoOptions, *, deadline: Deadline | None = None
    ) -> Result[RemoteRepository, PlatformError]:
        return self._create_repository(
            "create_organization_repository", f"/orgs/{org}/repos", options, deadline=deadline
        )

    def get_repository(
        self, owner: str, name: str, *, deadline: Deadline | None = None
    ) -> Result[RemoteRepository, PlatformError]:
        result = self._call_object(
            "get_repository", "GET", f"/repos/{owner}/{name}", deadline=deadline
        )
        if isinstance(result, Err):
            return result
        return self._repository_or_error("get_repository", result.value)

    def delete_repository(
        self, owner: str, name: str, *, deadline: Deadline | None = None
    ) -> Result[None, PlatformError]:
        result = self._call(
            "delete_repository", "DELETE", f"/repos/{owner}/{name}", deadline=deadline
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    def update_default_branch(
        self, owner: str, name: str, branch: str, *, deadline: Deadline | None = None
    ) -> Result[None, PlatformError]:
        result = self._call(
            "update_default_branch",
            "PATCH",
            f"/repos/{owner}/{name}",
            body=self._default_branch_payload(name, branch),
            deadline=deadline,
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    def create_release(
        self,
        owner: str,
        name: str,
        options: CreateReleaseOptions,
        *,
        deadline: Deadline | None = None,
    ) -> Result[ReleaseRecord, PlatformError]:
        result = self._call_object(
            "create_release",
            "POST",
            f"/repos/{owner}/{name}/releases",
            body=self._release_payload(options),
            deadline=deadline,
        )
        if isinstance(result, Err):
            return result
        return self._release_or_error("create_release", result.value, owner, name)

    def get_latest_release(
        self, owner: str, name: str, *, deadline: Deadline | None = None
    ) -> Result[ReleaseRecord | None, PlatformError]:
        result = self._call(
            "get_latest_release", "GET", f"/repos/{owner}/{name}/releases/latest", deadline=deadline
        )
        if isinstance(result, Err):
            if result.error.status == _NOT_FOUND:
                return Ok(None)
            return result

        data = as_str_dict(result.value)
        # Gitee answers 200 with an empty body when there is no release.
        if data is None or not data:
            return Ok(None)
        mapped = self._release_or_error("get_latest_release", data, owner, name)
        if isinstance(mapped, Err):
            return mapped
        return Ok(mapped.value)

    def release_exists(
        self, owner: str, name: str, tag: str, *, deadline: Deadline | None = None
    ) -> Result[bool, PlatformError]:
        result = self._call(
            "release_exists", "GET", f"/repos/{owner}/{name}/releases/tags/{tag}", deadline=deadline
        )
        if isinstance(result, Err):
            if result.error.status == _NOT_FOUND:
                return Ok(False)
            return result
        data = as_str_dict(result.value)
        return Ok(data is not None and bool(data))

    # -- plumbing --------------------------------------------------------------

    def _create_repository(
        self,
        operation: str,
        path: str,
        options: CreateRepoOptions,
        *,
        deadline: Deadline | None,
    ) -> Result[RemoteRepository, PlatformError]:
        result = self._call_object(
            operation, "POST", path, body=self._repo_payload(options), deadline=deadline
        )
        if isinstance(result, Err):
            return result
        return self._repository_or_error(operation, result.value)

    def _repository_or_error(
        self, operation: str, data: StrDict
    ) -> Result[RemoteRepository, PlatformError]:
        repo = self._map_repository(data)
        if repo is None:
            return Err(PlatformError(operation, "unexpected repository payload"))
        return Ok(repo)

    def _release_or_error(
        self, operation: str, data: StrDict, owner: str, name: str
    ) -> Result[ReleaseRecord, PlatformError]:
        release = self._map_release(data, owner, name)
        if release is None:
            return Err(PlatformError(operation, "unexpected release payload"))
        return Ok(release)

    def _call_object(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        body: Mapping[str, object] | None = None,
        deadline: Deadline | None = None,
    ) -> Result[StrDict, PlatformError]:
        result = self._call(operation, method, path, body=body, deadline=deadline)
        if isinstance(result, Err):
            return result
        data = as_str_dict(result.value)
        if data is None:
            return Err(PlatformError(operation, "expected a JSON object"))
        return Ok(data)

    def _call(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        body: Mapping[str, object] | None = None,
        deadline: Deadline | None = None,
    ) -> Result[object, PlatformError]:
        timeout: float | None = None
        if deadline is not None:
            if deadline.expired:
                return Err(PlatformError(operation, "deadline exceeded before request"))
            timeout = deadline.remaining()

        headers, params = self._auth()
        result = self._http.request(
            method,
            f"{self._base_url}{path}",
            headers=headers,
            params=params or None,
            json_body=dict(body) if body is not None else None,
            timeout=timeout,
        )
        if isinstance(result, Err):
            return Err(_platform_error(operation, result.error))

        try:
            return Ok(result.value.json())
        except ValueError as e:
            return Err(PlatformError(operation, f"invalid JSON response: {e}", result.value.status))


def _platform_error(operation: str, error: HttpError) -> PlatformError:
    """Prefer the platform's own `message` field over the reason phrase."""
    message = error.message
    if error.body:
        try:
            payload: object = json.loads(error.body)
        except ValueError:
            payload = None
        data = as_str_dict(payload)
        if data is not None:
            message = get_str(data, "message") or get_str(data, "error") or message
    return PlatformError(operation=operation, message=message, status=error.status)


def owner_of(data: StrDict) -> tuple[str, str] | None:
    """Return (login, raw type) of a repository payload's owner."""
    owner = get_table(data, "owner")
    if owner is None:
        return None
    login = get_str(owner, "login")
    if login is None:
        return None
    return (login, get_str(owner, "type") or "User")
