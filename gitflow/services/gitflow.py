"""GitFlow orchestrator: initialize, commit, publish.

State machine (derived, never persisted):

    UNINITIALIZED --init_repository--> REPOSITORY_READY
    REPOSITORY_READY | DEVELOP_ACTIVE --commit--> DEVELOP_ACTIVE
    DEVELOP_ACTIVE --publish--> PUBLISHED

Every phase is strictly sequential. Failures abort the phase and propagate
unchanged, except for three best-effort steps of publish (release creation,
default-branch update, remote develop deletion) which produce
RecoverableFailure warnings collected into the PublishReport. Nothing is
rolled back; phases are safe to re-run.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from time import sleep

from gitflow.core.config import ConfigStore, GitFlowSettings, HomeConfigStore, load_settings_or_default
from gitflow.core.errors import (
    ConfigurationError,
    GitFlowError,
    RecoverableFailure,
    RepositoryError,
    ValidationError,
)
from gitflow.core.result import Err, Ok, Result
from gitflow.core.structured import get_str
from gitflow.git.repository import Repository, RepositoryClient
from gitflow.hosting.base import (
    CreateReleaseOptions,
    PlatformClient,
    PlatformCredential,
    ReleaseRecord,
    RemoteRepository,
    RepoOwnerType,
)
from gitflow.hosting.factory import create_platform_client
from gitflow.hosting.http import HttpClient
from gitflow.output.console import ConsoleProtocol
from gitflow.services.artifacts import (
    GITIGNORE_PATH,
    GITIGNORE_TEMPLATE,
    RELEASE_CONFIG_PATH,
    RELEASE_CONFIG_TEMPLATE,
    write_if_absent,
)
from gitflow.services.branches import BranchManager, DevelopLocation
from gitflow.services.notes import ReleaseNotesGenerator
from gitflow.services.remote import RemoteManager, parse_repo_slug, repository_web_url
from gitflow.services.timeouts import DEFAULT_BRANCH_SETTLE_SECONDS
from gitflow.services.version import SemVer, VersionKind, VersionManager

__all__ = [
    "CommitOptions",
    "GitFlow",
    "GitFlowState",
    "PublishOptions",
    "PublishReport",
    "RepoInitOptions",
    "create_gitflow",
]

DEFAULT_COMMIT_MESSAGE = "chore: update"
INITIAL_COMMIT_MESSAGE = "chore: initial commit"
_MASTER = "master"


class GitFlowState(Enum):
    UNINITIALIZED = "uninitialized"
    REPOSITORY_READY = "repository_ready"
    DEVELOP_ACTIVE = "develop_active"
    PUBLISHED = "published"


@dataclass(frozen=True, slots=True)
class RepoInitOptions:
    name: str
    owner_kind: RepoOwnerType
    owner: str
    description: str | None = None
    private: bool = False


@dataclass(frozen=True, slots=True)
class CommitOptions:
    message: str | None = None


@dataclass(frozen=True, slots=True)
class PublishOptions:
    """Either an explicit version, or the part of the latest tag to bump."""

    version: str | None = None
    version_type: VersionKind = "patch"


@dataclass(frozen=True, slots=True)
class PublishReport:
    version: SemVer
    tag: str
    develop_branch: str
    release: ReleaseRecord | None = None
    warnings: tuple[RecoverableFailure, ...] = ()


class GitFlow:
    """Three-phase release workflow over one working tree.

    Holds only the PlatformClient interface; the concrete adapter is chosen
    by `create_gitflow` from the credential kind.
    """

    def __init__(
        self,
        repo: RepositoryClient,
        platform: PlatformClient,
        console: ConsoleProtocol,
        *,
        config: ConfigStore,
        settings: GitFlowSettings | None = None,
        settle_seconds: float = DEFAULT_BRANCH_SETTLE_SECONDS,
    ) -> None:
        self._repo = repo
        self._platform = platform
        self._console = console
        self._config = config
        self._settings = settings or GitFlowSettings()
        self._settle_seconds = settle_seconds

        s = self._settings
        self.versions = VersionManager(prefix=s.tag_prefix)
        self.branches = BranchManager(
            repo,
            console,
            main_branch=s.main_branch,
            develop_branch=s.develop_branch,
            remote=s.remote,
        )
        self.remote = RemoteManager(
            repo, platform, console, remote=s.remote, main_branch=s.main_branch
        )
        self.notes = ReleaseNotesGenerator(repo, s.notes)
        self._state = GitFlowState.UNINITIALIZED

    @property
    def state(self) -> GitFlowState:
        return self._state

    @property
    def settings(self) -> GitFlowSettings:
        return self._settings

    def detect_state(self) -> Result[GitFlowState, RepositoryError]:
        """Re-derive the state from the working tree."""
        if not self._repo.is_repository():
            self._state = GitFlowState.UNINITIALIZED
            return Ok(self._state)

        has_remote = self._repo.has_remote(self._settings.remote)
        if isinstance(has_remote, Err):
            return has_remote
        if not has_remote.value:
            self._state = GitFlowState.UNINITIALIZED
            return Ok(self._state)

        develop = self.branches.locate_develop_branch()
        if isinstance(develop, Err):
            return develop
        self._state = (
            GitFlowState.DEVELOP_ACTIVE if develop.value is not None else GitFlowState.REPOSITORY_READY
        )
        return Ok(self._state)

    # -------------------------------------------------------------------------
    # Phase 1: initialize
    # -------------------------------------------------------------------------

    def init_repository(self, opts: RepoInitOptions) -> Result[RemoteRepository, GitFlowError]:
        """Create or reuse the remote repository and wire the working tree to it."""
        s = self._settings
        self._console.header(f"Initializing {opts.owner}/{opts.name}")

        if self._repo.is_repository():
            remotes = self._repo.remotes()
            if isinstance(remotes, Err):
                return remotes
            if remotes.value:
                names = ", ".join(sorted(remotes.value))
                self._console.warning(
                    f"{self._repo.path} is already a git repository with remote(s) {names}; "
                    "existing configuration is kept"
                )

        persisted = self._persist_selection(opts)
        if isinstance(persisted, Err):
            return persisted

        if not self._repo.is_repository():
            init = self._repo.init(s.main_branch)
            if isinstance(init, Err):
                return init
            self._console.success(f"initialized git repository on {s.main_branch}")

        remote_repo = self.remote.bootstrap(
            opts.name,
            opts.owner_kind,
            opts.owner,
            description=opts.description,
            private=opts.private,
        )
        if isinstance(remote_repo, Err):
            return remote_repo

        for rel_path, content in (
            (GITIGNORE_PATH, GITIGNORE_TEMPLATE),
            (RELEASE_CONFIG_PATH, RELEASE_CONFIG_TEMPLATE),
        ):
            written = write_if_absent(self._repo.path, rel_path, content)
            if isinstance(written, Err):
                return written
            if written.value:
                self._console.success(f"wrote {rel_path}")

        self._state = GitFlowState.REPOSITORY_READY
        self._console.success(f"repository ready: {remote_repo.value.html_url}")
        return Ok(remote_repo.value)

    def init_local(self, repository: RemoteRepository) -> Result[str, GitFlowError]:
        """Align the working tree with the remote's main branch.

        When the remote already has a main (or master) branch it is checked
        out and pulled; otherwise the local content becomes the initial
        commit and main is pushed with upstream tracking.
        """
        s = self._settings
        if not self._repo.is_repository():
            init = self._repo.init(s.main_branch)
            if isinstance(init, Err):
                return init

        added = self.remote.add_remote_if_missing(repository.clone_url)
        if isinstance(added, Err):
            return added
        fetched = self._repo.fetch(s.remote)
        if isinstance(fetched, Err):
            return fetched

        branches = self._repo.list_branches()
        if isinstance(branches, Err):
            return branches

        for candidate in (s.main_branch, _MASTER):
            ref = f"{s.remote}/{candidate}"
            if ref not in branches.value.remote:
                continue
            if candidate in branches.value.local:
                synced = self.remote.sync_main_branch(candidate)
            else:
                synced = self._repo.checkout_tracking_remote(candidate, ref)
            if isinstance(synced, Err):
                return synced
            self._console.success(f"checked out {candidate} from {s.remote}")
            return Ok(candidate)

        changes = self._repo.has_uncommitted_changes()
        if isinstance(changes, Err):
            return changes
        if changes.value:
            staged = self._repo.add_all()
            if isinstance(staged, Err):
                return staged
            committed = self._repo.commit(INITIAL_COMMIT_MESSAGE)
            if isinstance(committed, Err):
                return committed

        has_commits = self._repo.has_commits()
        if isinstance(has_commits, Err):
            return has_commits
        if not has_commits.value:
            return Err(
                ValidationError(
                    kind="invalid_input",
                    message="nothing to push: the repository has no commits",
                    hint="Add files to the working tree, then re-run",
                )
            )

        pushed = self.remote.push_with_upstream(s.main_branch)
        if isinstance(pushed, Err):
            return pushed
        self._console.success(f"pushed {s.main_branch} to {s.remote}")
        return Ok(s.main_branch)

    # -------------------------------------------------------------------------
    # Phase 2: commit
    # -------------------------------------------------------------------------

    def commit(self, opts: CommitOptions | None = None) -> Result[str, GitFlowError]:
        """Commit pending work onto develop and push it. Returns the develop branch."""
        opts = opts or CommitOptions()

        if not self._repo.is_repository():
            return Err(_not_a_repository(self._repo.path))

        stashes = self._repo.stash_count()
        if isinstance(stashes, Err):
            return stashes
        if stashes.value > 0:
            self._console.warning(f"{stashes.value} stash entr{'y' if stashes.value == 1 else 'ies'} present")

        conflicts = self._repo.has_conflicts()
        if isinstance(conflicts, Err):
            return conflicts
        if conflicts.value:
            return Err(
                ValidationError(
                    kind="conflicts_exist",
                    message="the working tree has unresolved merge conflicts",
                    hint="Resolve the conflicts and stage the files, then re-run",
                )
            )

        changes = self._repo.has_uncommitted_changes()
        if isinstance(changes, Err):
            return changes
        if changes.value:
            staged = self._repo.add_all()
            if isinstance(staged, Err):
                return staged
            committed = self._repo.commit(opts.message or DEFAULT_COMMIT_MESSAGE)
            if isinstance(committed, Err):
                return committed
            self._console.success("committed working tree changes")
        else:
            self._console.info("nothing to commit")

        develop = self.branches.create_develop_branch()
        if isinstance(develop, Err):
            return develop

        synced = self._sync_develop(develop.value)
        if isinstance(synced, Err):
            return synced

        pushed = self.remote.push_with_upstream(develop.value)
        if isinstance(pushed, Err):
            return pushed

        self._state = GitFlowState.DEVELOP_ACTIVE
        self._console.success(f"pushed {develop.value} to {self._settings.remote}")
        return Ok(develop.value)

    def _sync_develop(self, develop: str) -> Result[RecoverableFailure | None, RepositoryError]:
        """Bring main into develop. Only returning to develop is fatal."""
        main = self._settings.main_branch
        pulled = self.remote.sync_main_branch(main)

        back = self._repo.checkout(develop)
        if isinstance(back, Err):
            return back

        if isinstance(pulled, Err):
            return Ok(self._warn("sync main", f"skipped syncing {main}: {pulled.error.message}"))

        merged = self.branches.merge_from_main(no_ff=True)
        if isinstance(merged, Err):
            aborted = self._repo.merge_abort()
            detail = merged.error.message
            if isinstance(aborted, Err):
                detail = f"{detail} (merge --abort: {aborted.error.message})"
            return Ok(self._warn("merge main", f"could not merge {main} into {develop}: {detail}"))
        return Ok(None)

    # -------------------------------------------------------------------------
    # Phase 3: publish
    # -------------------------------------------------------------------------

    def publish(self, opts: PublishOptions | None = None) -> Result[PublishReport, GitFlowError]:
        """Merge develop into main, tag, release and retire develop."""
        opts = opts or PublishOptions()
        s = self._settings

        if not self._repo.is_repository():
            return Err(_not_a_repository(self._repo.path))

        tags = self._repo.tags()
        if isinstance(tags, Err):
            return tags
        previous_tag = self.versions.latest_tag(tags.value)

        version = self._resolve_version(opts, tags.value)
        if isinstance(version, Err):
            return version
        tag = self.versions.format(version.value)

        located = self.branches.locate_develop_branch()
        if isinstance(located, Err):
            return located
        if located.value is None:
            return Err(
                ValidationError(
                    kind="no_develop_branch",
                    message=f"no local or remote '{s.develop_branch}' branch to publish",
                    hint="Run `gitflow commit` first",
                )
            )
        develop = located.value
        self._console.header(f"Publishing {develop.name} as {tag}")

        prepared = self._prepare_develop(develop)
        if isinstance(prepared, Err):
            return prepared

        merged = self.branches.merge_to_main(develop.name, no_ff=True)
        if isinstance(merged, Err):
            return merged

        tagged = self.remote.create_and_push_tag(tag, f"Release {tag}")
        if isinstance(tagged, Err):
            return tagged

        pushed = self.remote.push(s.main_branch)
        if isinstance(pushed, Err):
            return pushed
        self._console.success(f"merged {develop.name} into {s.main_branch} and pushed {tag}")

        warnings: list[RecoverableFailure] = []
        release: ReleaseRecord | None = None

        coordinates = self._platform_coordinates()
        if isinstance(coordinates, RecoverableFailure):
            warnings.append(coordinates)
        else:
            if s.create_release:
                created = self._create_release(
                    coordinates, tag, previous_tag, prerelease=version.value.is_prerelease
                )
                if isinstance(created, Err):
                    return created
                match created.value:
                    case RecoverableFailure() as failure:
                        warnings.append(failure)
                    case record:
                        release = record

            default_branch = self._update_default_branch(coordinates)
            if default_branch is not None:
                warnings.append(default_branch)

        deleted = self.branches.delete_branch(develop.name, local=True, remote=True)
        if isinstance(deleted, Err):
            return deleted
        if deleted.value is not None:
            warnings.append(deleted.value)

        self._state = GitFlowState.PUBLISHED
        self._console.success(f"published {tag}")
        return Ok(
            PublishReport(
                version=version.value,
                tag=tag,
                develop_branch=develop.name,
                release=release,
                warnings=tuple(warnings),
            )
        )

    def _resolve_version(
        self, opts: PublishOptions, tags: list[str]
    ) -> Result[SemVer, ValidationError]:
        latest = self.versions.latest_from_tags(tags)
        if latest is not None:
            moved = self.versions.set_current(latest)
            if isinstance(moved, Err):
                return moved

        if opts.version is not None:
            return self.versions.set_current(opts.version)
        return Ok(self.versions.increment(opts.version_type))

    def _prepare_develop(self, develop: DevelopLocation) -> Result[None, RepositoryError]:
        """Materialize a remote-only develop branch locally."""
        if develop.source != "remote" or develop.remote_ref is None:
            return Ok(None)
        return self._repo.checkout_tracking_remote(develop.name, develop.remote_ref)

    def _platform_coordinates(self) -> tuple[str, str, str | None] | RecoverableFailure:
        """(owner, name, web URL) of the hosted repository.

        Owner and name come from the origin URL; the persisted login and the
        working-tree directory name fill in when the URL cannot be parsed.
        """
        url = self.remote.remote_url()
        if isinstance(url, Err):
            return self._warn("resolve repository", url.error.message)

        owner: str | None = None
        name: str | None = None
        web_url: str | None = None
        if url.value is not None:
            slug = parse_repo_slug(url.value)
            if slug is not None:
                owner, name = slug
            web_url = repository_web_url(url.value)

        if owner is None:
            login = self._config.read("login")
            if isinstance(login, Err):
                return self._warn("resolve repository", login.error.message)
            if login.value is not None:
                owner = get_str(login.value, "owner")
        if name is None:
            name = self._repo.path.name

        if owner is None:
            return self._warn("resolve repository", "cannot determine repository owner")
        return (owner, name, web_url)

    def _create_release(
        self,
        coordinates: tuple[str, str, str | None],
        tag: str,
        previous_tag: str | None,
        *,
        prerelease: bool = False,
    ) -> Result[ReleaseRecord | RecoverableFailure, GitFlowError]:
        owner, name, web_url = coordinates

        notes = self.notes.generate(previous_tag=previous_tag, tag=tag, repository_url=web_url)
        if isinstance(notes, Err):
            self._console.warning(f"release notes unavailable: {notes.error.message}")
            body = ""
        else:
            body = notes.value

        options = CreateReleaseOptions(
            tag_name=tag,
            name=tag,
            body=body,
            target_commitish=self._settings.main_branch,
            prerelease=prerelease,
            generate_release_notes=not body,
            previous_tag_name=previous_tag,
        )
        created = self._platform.create_release(
            owner, name, options, deadline=self.remote.deadline()
        )
        if isinstance(created, Err):
            if not self._settings.release_skip_on_error:
                return created
            return Ok(self._warn("create release", str(created.error)))

        self._console.success(f"release created: {created.value.html_url}")
        return Ok(created.value)

    def _update_default_branch(
        self, coordinates: tuple[str, str, str | None]
    ) -> RecoverableFailure | None:
        owner, name, _ = coordinates
        main = self._settings.main_branch

        updated = self._platform.update_default_branch(
            owner, name, main, deadline=self.remote.deadline()
        )
        if isinstance(updated, Err):
            return self._warn("update default branch", str(updated.error))

        # Let the platform apply the change before develop is deleted.
        if self._settle_seconds > 0:
            sleep(self._settle_seconds)
        return None

    def _persist_selection(self, opts: RepoInitOptions) -> Result[None, ConfigurationError]:
        for key, value in (
            ("platform", {"platform": self._platform.kind}),
            ("own", {"type": opts.owner_kind}),
            ("login", {"owner": opts.owner}),
        ):
            written = self._config.write(key, value)
            if isinstance(written, Err):
                return written
        return Ok(None)

    def _warn(self, step: str, message: str) -> RecoverableFailure:
        self._console.warning(message)
        return RecoverableFailure(step=step, message=message)


def _not_a_repository(path: Path) -> ValidationError:
    return ValidationError(
        kind="not_a_repository",
        message=f"{path} is not a git repository",
        hint="Run `gitflow init` first",
    )


def create_gitflow(
    workdir: Path,
    credential: PlatformCredential,
    console: ConsoleProtocol,
    *,
    config: ConfigStore | None = None,
    settings: GitFlowSettings | None = None,
    http: HttpClient | None = None,
) -> Result[GitFlow, ConfigurationError]:
    """Wire a GitFlow for `workdir` with production collaborators."""
    if settings is None:
        loaded = load_settings_or_default(workdir)
        if isinstance(loaded, Err):
            return loaded
        settings = loaded.value

    return Ok(
        GitFlow(
            Repository(workdir),
            create_platform_client(credential, http=http),
            console,
            config=config or HomeConfigStore(),
            settings=settings,
        )
    )
