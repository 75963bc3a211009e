from __future__ import annotations

import os
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

import typer

from gitflow.core.config import ConfigStore, GitFlowSettings, HomeConfigStore, load_settings_or_default
from gitflow.core.errors import ErrorCode
from gitflow.core.result import Err
from gitflow.core.structured import get_str
from gitflow.hosting.base import PlatformCredential, PlatformKind
from gitflow.output.console import ConsoleProtocol, RichConsole
from gitflow.output.errors import error_exit_code, print_error
from gitflow.services.gitflow import GitFlow, create_gitflow

TOKEN_ENV = "GITFLOW_TOKEN"
API_URL_ENV = "GITFLOW_API_URL"


class Platform(StrEnum):
    github = "github"
    gitee = "gitee"


@dataclass(frozen=True, slots=True)
class CLIContext:
    workdir: Path
    console: ConsoleProtocol
    config: ConfigStore
    settings: GitFlowSettings


def build_context(workdir: Path | None = None) -> CLIContext:
    """Resolve the working tree, settings and stores (no network)."""
    console = RichConsole()
    root = (workdir or Path.cwd()).expanduser().resolve()
    if not root.is_dir():
        console.error(f"not a directory: {root}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    settings = load_settings_or_default(root)
    if isinstance(settings, Err):
        print_error(settings.error, console)
        raise typer.Exit(code=error_exit_code(settings.error))

    return CLIContext(
        workdir=root,
        console=console,
        config=HomeConfigStore(),
        settings=settings.value,
    )


def resolve_platform(ctx: CLIContext, platform: Platform | None) -> PlatformKind:
    """--platform, then the persisted selection, then GitHub."""
    if platform is not None:
        return "gitee" if platform == Platform.gitee else "github"

    stored = ctx.config.read("platform")
    if isinstance(stored, Err):
        print_error(stored.error, ctx.console)
        raise typer.Exit(code=error_exit_code(stored.error))
    if stored.value is not None and get_str(stored.value, "platform") == "gitee":
        return "gitee"
    return "github"


def resolve_token(ctx: CLIContext, token: str | None, *, required: bool = True) -> str:
    """--token, then $GITFLOW_TOKEN, then the persisted token file.

    When `required` is False a missing token resolves to "" instead of exiting.
    """
    if token:
        return token
    env_token = os.environ.get(TOKEN_ENV, "").strip()
    if env_token:
        return env_token

    stored = ctx.config.read("token")
    if isinstance(stored, Err):
        print_error(stored.error, ctx.console)
        raise typer.Exit(code=error_exit_code(stored.error))
    if stored.value is not None:
        value = get_str(stored.value, "token")
        if value is not None:
            return value

    if not required:
        return ""
    ctx.console.error("no access token")
    ctx.console.print(f"hint: pass --token or set {TOKEN_ENV}")
    raise typer.Exit(code=int(ErrorCode.ENV_ERROR))


def build_credential(
    ctx: CLIContext,
    *,
    platform: Platform | None,
    token: str | None,
    api_url: str | None,
    require_token: bool = True,
) -> PlatformCredential:
    return PlatformCredential(
        kind=resolve_platform(ctx, platform),
        token=resolve_token(ctx, token, required=require_token),
        base_url=api_url or os.environ.get(API_URL_ENV) or None,
    )


def build_flow(ctx: CLIContext, credential: PlatformCredential) -> GitFlow:
    flow = create_gitflow(
        ctx.workdir,
        credential,
        ctx.console,
        config=ctx.config,
        settings=ctx.settings,
    )
    if isinstance(flow, Err):
        print_error(flow.error, ctx.console)
        raise typer.Exit(code=error_exit_code(flow.error))
    return flow.value
