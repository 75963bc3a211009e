from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

import gitflow.cli.commands.info as info_mod
import gitflow.cli.context as context_mod
from gitflow import __version__
from gitflow.cli.app import app
from gitflow.core.config import ConfigStore, GitFlowSettings, MemoryConfigStore
from gitflow.core.errors import ConfigurationError, ErrorCode
from gitflow.core.result import Ok, Result
from gitflow.git.repository import CommitEntry
from gitflow.hosting.base import OrgInfo, PlatformCredential
from gitflow.hosting.http import HttpClient
from gitflow.output.console import ConsoleProtocol
from gitflow.services.gitflow import GitFlow
from gitflow.test.fakes import FakePlatform, FakeRepository

runner = CliRunner()

ORIGIN = "https://github.com/octo/demo.git"


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv(context_mod.TOKEN_ENV, raising=False)
    monkeypatch.delenv(context_mod.API_URL_ENV, raising=False)
    return home


def _install_flow(
    monkeypatch: pytest.MonkeyPatch, repo: FakeRepository, platform: FakePlatform
) -> list[PlatformCredential]:
    seen: list[PlatformCredential] = []

    def fake_create_gitflow(
        workdir: Path,
        credential: PlatformCredential,
        console: ConsoleProtocol,
        *,
        config: ConfigStore | None = None,
        settings: GitFlowSettings | None = None,
        http: HttpClient | None = None,
    ) -> Result[GitFlow, ConfigurationError]:
        seen.append(credential)
        return Ok(
            GitFlow(
                repo,
                platform,
                console,
                config=config or MemoryConfigStore(),
                settings=settings,
                settle_seconds=0,
            )
        )

    monkeypatch.setattr(context_mod, "create_gitflow", fake_create_gitflow)
    return seen


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_version_command_suggests_next(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    repo = FakeRepository(tmp_path, tags=["v1.2.0", "v1.1.9", "nightly"])
    monkeypatch.setattr(info_mod, "Repository", lambda _path: repo)

    result = runner.invoke(app, ["version", "-C", str(tmp_path)])

    assert result.exit_code == 0
    assert "latest: v1.2.0" in result.output
    assert "minor -> v1.3.0" in result.output
    assert "patch -> v1.2.1" in result.output


def test_commit_without_token(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    repo = FakeRepository(tmp_path, remote=["origin/main"], remotes={"origin": ORIGIN})
    repo.dirty = True
    platform = FakePlatform()
    seen = _install_flow(monkeypatch, repo, platform)

    result = runner.invoke(app, ["commit", "-C", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert seen[0].token == ""
    assert ("commit", "chore: update") in repo.calls
    assert platform.calls == []


def test_publish_without_token_fails(tmp_path: Path) -> None:
    result = runner.invoke(app, ["publish", "-C", str(tmp_path)])
    assert result.exit_code == int(ErrorCode.ENV_ERROR)
    assert "no access token" in result.output


def test_commit_pushes_develop(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    repo = FakeRepository(tmp_path, remote=["origin/main"], remotes={"origin": ORIGIN})
    repo.dirty = True
    seen = _install_flow(monkeypatch, repo, FakePlatform())
    monkeypatch.setenv(context_mod.TOKEN_ENV, "env-token")

    result = runner.invoke(app, ["commit", "-m", "feat: login", "-C", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "OK develop" in result.output
    assert ("commit", "feat: login") in repo.calls
    assert seen[0].token == "env-token"
    assert seen[0].kind == "github"


def test_platform_from_persisted_selection(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, isolated_home: Path
) -> None:
    (isolated_home / ".git_platform").write_text(json.dumps({"platform": "gitee"}), encoding="utf-8")
    (isolated_home / ".git_token").write_text(json.dumps({"token": "stored"}), encoding="utf-8")
    repo = FakeRepository(tmp_path, remote=["origin/main"], remotes={"origin": ORIGIN})
    seen = _install_flow(monkeypatch, repo, FakePlatform(kind="gitee"))

    result = runner.invoke(app, ["commit", "-C", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert seen[0].kind == "gitee"
    assert seen[0].token == "stored"


def test_publish_without_develop(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    repo = FakeRepository(tmp_path, remotes={"origin": ORIGIN}, tags=["v1.0.0"])
    _install_flow(monkeypatch, repo, FakePlatform())

    result = runner.invoke(app, ["publish", "--token", "t", "-C", str(tmp_path)])

    assert result.exit_code == int(ErrorCode.USER_ERROR)
    assert "no local or remote 'develop' branch" in result.output
    assert "gitflow commit" in result.output


def test_publish_reports_tag_and_warnings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    repo = FakeRepository(
        tmp_path,
        current="develop",
        local=["main", "develop"],
        remote=["origin/main", "origin/develop"],
        remotes={"origin": ORIGIN},
        tags=["v0.1.0"],
        commits=[CommitEntry(sha="b" * 40, subject="fix: crash")],
    )
    platform = FakePlatform()
    platform.fail("update_default_branch", status=403, message="Must have admin rights")
    _install_flow(monkeypatch, repo, platform)

    result = runner.invoke(
        app, ["publish", "--bump", "minor", "--token", "t", "-C", str(tmp_path)]
    )

    assert result.exit_code == 0, result.output
    assert "tag: v0.2.0" in result.output
    assert "release: https://github.com/octo/demo/releases/tag/v0.2.0" in result.output
    assert "1 warning(s)" in result.output


def test_publish_invalid_version(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _install_flow(monkeypatch, FakeRepository(tmp_path), FakePlatform())

    result = runner.invoke(
        app, ["publish", "--version", "banana", "--token", "t", "-C", str(tmp_path)]
    )

    assert result.exit_code == int(ErrorCode.USER_ERROR)
    assert "not a semantic version" in result.output


def test_init_org_requires_owner(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _install_flow(monkeypatch, FakeRepository(tmp_path), FakePlatform())

    result = runner.invoke(app, ["init", "demo", "--org", "--token", "t", "-C", str(tmp_path)])

    assert result.exit_code == int(ErrorCode.USER_ERROR)
    assert "--org requires --owner" in result.output


def test_init_creates_repository(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, isolated_home: Path
) -> None:
    work = tmp_path / "work"
    work.mkdir()
    repo = FakeRepository(work, initialized=False, current=None, local=[])
    platform = FakePlatform()
    _install_flow(monkeypatch, repo, platform)

    result = runner.invoke(
        app,
        ["init", "demo", "--skip-local", "--save-token", "--token", "secret", "-C", str(work)],
    )

    assert result.exit_code == 0, result.output
    assert "https://github.com/octo/demo" in result.output
    assert platform.called("get_current_user")
    assert repo.remote_urls == {"origin": ORIGIN}
    assert json.loads((isolated_home / ".git_token").read_text(encoding="utf-8")) == {
        "token": "secret"
    }
    assert json.loads((isolated_home / ".git_login").read_text(encoding="utf-8")) == {
        "owner": "octo"
    }


def test_owners_lists_user_and_orgs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    platform = FakePlatform(organizations=[OrgInfo(login="acme", name="Acme")])
    _install_flow(monkeypatch, FakeRepository(tmp_path), platform)
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["owners", "--token", "t"])

    assert result.exit_code == 0, result.output
    assert "user octo" in result.output
    assert "org  acme" in result.output
