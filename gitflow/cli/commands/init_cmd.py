"""Init command - create or reuse the remote repository and wire the working tree."""

from __future__ import annotations

from pathlib import Path

import typer

from gitflow.cli.commands._helpers import unwrap_or_exit
from gitflow.cli.context import Platform, build_context, build_credential, build_flow
from gitflow.core.errors import ErrorCode
from gitflow.hosting.base import RepoOwnerType
from gitflow.output.console import Style
from gitflow.services.gitflow import RepoInitOptions


def init(
    name: str | None = typer.Argument(
        None, help="Repository name (defaults to the directory name)", show_default=False
    ),
    owner: str | None = typer.Option(
        None, "--owner", help="Owner login (defaults to the token's user)", show_default=False
    ),
    org: bool = typer.Option(False, "--org", help="Create the repository under an organization"),
    description: str | None = typer.Option(None, "--description", "-d", show_default=False),
    private: bool = typer.Option(False, "--private", help="Create a private repository"),
    skip_local: bool = typer.Option(
        False, "--skip-local", help="Do not check out or push the main branch"
    ),
    save_token: bool = typer.Option(False, "--save-token", help="Persist the token in ~/.git_token"),
    platform: Platform | None = typer.Option(None, "--platform", show_default=False),
    token: str | None = typer.Option(None, "--token", help="Access token", show_default=False),
    api_url: str | None = typer.Option(None, "--api-url", help="API root override", show_default=False),
    workdir: Path | None = typer.Option(None, "--workdir", "-C", show_default=False),
) -> None:
    """Initialize the repository (remote, origin, .gitignore, release config)."""
    ctx = build_context(workdir)
    credential = build_credential(ctx, platform=platform, token=token, api_url=api_url)
    flow = build_flow(ctx, credential)

    if save_token:
        unwrap_or_exit(ctx.config.write("token", {"token": credential.token}), ctx.console)

    owner_kind: RepoOwnerType = "org" if org else "user"
    if owner is None:
        if org:
            ctx.console.error("--org requires --owner")
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        user = unwrap_or_exit(
            flow.remote.platform.get_current_user(deadline=flow.remote.deadline()), ctx.console
        )
        owner = user.login

    opts = RepoInitOptions(
        name=name or ctx.workdir.name,
        owner_kind=owner_kind,
        owner=owner,
        description=description,
        private=private,
    )
    repository = unwrap_or_exit(flow.init_repository(opts), ctx.console)

    if not skip_local:
        branch = unwrap_or_exit(flow.init_local(repository), ctx.console)
        ctx.console.print(f"on branch {branch}", Style.DIM)

    ctx.console.success(repository.html_url)
