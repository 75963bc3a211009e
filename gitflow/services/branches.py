"""Branch naming policy and lifecycle operations.

Roles are derived from names, never stored:

    main / master          -> main
    develop, develop/<x>   -> develop
    feature/<slug>         -> feature
    bugfix/<slug>          -> bugfix
    hotfix/<x>             -> hotfix
    release/<x>            -> release
    anything else          -> other
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from gitflow.core.errors import RecoverableFailure, RepositoryError
from gitflow.core.result import Err, Ok, Result
from gitflow.git.repository import RepositoryClient
from gitflow.output.console import ConsoleProtocol

__all__ = [
    "BranchManager",
    "BranchRole",
    "BranchType",
    "DevelopLocation",
    "slugify",
]

BranchType = Literal["feature", "bugfix", "hotfix", "release"]
BranchRole = Literal["main", "develop", "feature", "bugfix", "hotfix", "release", "other"]

_MASTER = "master"
_PREFIXED_ROLES: tuple[BranchType, ...] = ("feature", "bugfix", "hotfix", "release")
_SLUG_RE = re.compile(r"[^a-z0-9-]")


def slugify(name: str) -> str:
    """Lower-case and replace every character outside [a-z0-9-] with '-'."""
    return _SLUG_RE.sub("-", name.lower())


@dataclass(frozen=True, slots=True)
class DevelopLocation:
    """Where a develop branch was found.

    Attributes:
        name: Local branch name
        source: "current", "local" or "remote"
        remote_ref: Remote-tracking ref when source is "remote" (e.g. "origin/develop")
    """

    name: str
    source: Literal["current", "local", "remote"]
    remote_ref: str | None = None


class BranchManager:
    def __init__(
        self,
        repo: RepositoryClient,
        console: ConsoleProtocol,
        *,
        main_branch: str = "main",
        develop_branch: str = "develop",
        remote: str = "origin",
    ) -> None:
        self._repo = repo
        self._console = console
        self._main = main_branch
        self._develop = develop_branch
        self._remote = remote

    @property
    def main_branch(self) -> str:
        return self._main

    @property
    def develop_branch(self) -> str:
        return self._develop

    # -- naming ----------------------------------------------------------------

    def generate_name(self, branch_type: BranchType, name: str, version: str | None = None) -> str:
        match branch_type:
            case "feature" | "bugfix":
                return f"{branch_type}/{slugify(name)}"
            case "hotfix" | "release":
                return f"{branch_type}/{version or slugify(name)}"

    def develop_name(self, name: str | None = None, version: str | None = None) -> str:
        suffix = version or name
        if not suffix or suffix == self._develop:
            return self._develop
        return f"{self._develop}/{suffix}"

    def role_of(self, name: str) -> BranchRole:
        branch = name.removeprefix(f"{self._remote}/")
        if branch in (self._main, _MASTER):
            return "main"
        if self.is_develop(branch):
            return "develop"
        for role in _PREFIXED_ROLES:
            if branch.startswith(f"{role}/"):
                return role
        return "other"

    def is_develop(self, name: str) -> bool:
        return name == self._develop or name.startswith(f"{self._develop}/")

    def current_role(self) -> Result[BranchRole, RepositoryError]:
        current = self._repo.current_branch()
        if isinstance(current, Err):
            return current
        if current.value is None:
            return Ok("other")
        return Ok(self.role_of(current.value))

    # -- queries ---------------------------------------------------------------

    def branch_exists(self, name: str) -> Result[bool, RepositoryError]:
        """True if `name` exists locally or on the configured remote."""
        branches = self._repo.list_branches()
        if isinstance(branches, Err):
            return branches
        b = branches.value
        return Ok(name in b.local or f"{self._remote}/{name}" in b.remote)

    def locate_develop_branch(self) -> Result[DevelopLocation | None, RepositoryError]:
        """Find the develop branch to publish.

        Order: the current branch if it is a develop branch, then the first
        local develop branch, then the first remote one.
        """
        current = self._repo.current_branch()
        if isinstance(current, Err):
            return current
        if current.value is not None and self.is_develop(current.value):
            return Ok(DevelopLocation(name=current.value, source="current"))

        branches = self._repo.list_branches()
        if isinstance(branches, Err):
            return branches

        for name in branches.value.local:
            if self.is_develop(name):
                return Ok(DevelopLocation(name=name, source="local"))

        prefix = f"{self._remote}/"
        for ref in branches.value.remote:
            if not ref.startswith(prefix):
                continue
            name = ref[len(prefix) :]
            if self.is_develop(name):
                return Ok(DevelopLocation(name=name, source="remote", remote_ref=ref))

        return Ok(None)

    # -- lifecycle -------------------------------------------------------------

    def create_develop_branch(
        self, name: str | None = None, version: str | None = None
    ) -> Result[str, RepositoryError]:
        """Check out the develop branch, creating it when it exists nowhere."""
        target = self.develop_name(name, version)
        return self._checkout_or_create(target)

    def create_branch(
        self, branch_type: BranchType, name: str, version: str | None = None
    ) -> Result[str, RepositoryError]:
        target = self.generate_name(branch_type, name, version)
        if branch_type == "hotfix":
            # Hotfixes start from the released line.
            exists = self.branch_exists(target)
            if isinstance(exists, Err):
                return exists
            if not exists.value:
                checkout = self.checkout_main()
                if isinstance(checkout, Err):
                    return checkout
        return self._checkout_or_create(target)

    def checkout_main(self) -> Result[None, RepositoryError]:
        return self._repo.checkout(self._main)

    def checkout_develop(self, version: str | None = None) -> Result[None, RepositoryError]:
        return self._repo.checkout(self.develop_name(version=version))

    def merge_to_main(self, branch: str, no_ff: bool = True) -> Result[None, RepositoryError]:
        checkout = self.checkout_main()
        if isinstance(checkout, Err):
            return checkout
        return self._repo.merge(
            branch, no_ff=no_ff, message=f"Merge branch '{branch}' into {self._main}"
        )

    def merge_from_main(self, no_ff: bool = True) -> Result[None, RepositoryError]:
        """Merge main into the current branch."""
        return self._repo.merge(self._main, no_ff=no_ff)

    def delete_branch(
        self,
        name: str,
        *,
        local: bool = True,
        remote: bool = True,
        force: bool = False,
    ) -> Result[RecoverableFailure | None, RepositoryError]:
        """Delete a branch locally and/or on the remote.

        A failed remote deletion (for instance the platform's default
        branch) is returned as a RecoverableFailure and printed as a warning.
        """
        if self.role_of(name) == "main":
            return Err(
                RepositoryError(
                    command=f"branch -d {name}",
                    message=f"refusing to delete main branch '{name}'",
                )
            )

        if local:
            deleted = self._delete_local(name, force=force)
            if isinstance(deleted, Err):
                return deleted

        if remote:
            result = self._repo.delete_remote_branch(name, self._remote)
            if isinstance(result, Err):
                failure = RecoverableFailure(
                    step="delete remote branch",
                    message=f"could not delete {self._remote}/{name}: {result.error.message}",
                )
                self._console.warning(failure.message)
                return Ok(failure)

        return Ok(None)

    # -- internals -------------------------------------------------------------

    def _checkout_or_create(self, target: str) -> Result[str, RepositoryError]:
        current = self._repo.current_branch()
        if isinstance(current, Err):
            return current
        if current.value == target:
            return Ok(target)

        branches = self._repo.list_branches()
        if isinstance(branches, Err):
            return branches

        remote_ref = f"{self._remote}/{target}"
        if target in branches.value.local:
            result = self._repo.checkout(target)
        elif remote_ref in branches.value.remote:
            result = self._repo.checkout_tracking_remote(target, remote_ref)
        else:
            result = self._repo.checkout_new(target)
        if isinstance(result, Err):
            return result
        return Ok(target)

    def _delete_local(self, name: str, *, force: bool) -> Result[None, RepositoryError]:
        branches = self._repo.list_branches()
        if isinstance(branches, Err):
            return branches
        if name not in branches.value.local:
            return Ok(None)

        current = self._repo.current_branch()
        if isinstance(current, Err):
            return current
        if current.value == name:
            checkout = self.checkout_main()
            if isinstance(checkout, Err):
                return checkout
        return self._repo.delete_local_branch(name, force=force)
