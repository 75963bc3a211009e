"""Read-only commands: version suggestions and owner listing."""

from __future__ import annotations

from pathlib import Path

import typer

from gitflow.cli.commands._helpers import unwrap_or_exit
from gitflow.cli.context import Platform, build_context, build_credential, build_flow
from gitflow.git.repository import Repository
from gitflow.hosting.base import PlatformSnapshot
from gitflow.output.console import Style
from gitflow.services.version import VersionManager


def version(
    workdir: Path | None = typer.Option(None, "--workdir", "-C", show_default=False),
) -> None:
    """Show the latest release tag and the next candidate versions."""
    ctx = build_context(workdir)
    repo = Repository(ctx.workdir)

    tags = unwrap_or_exit(repo.tags(), ctx.console)
    vm = VersionManager(prefix=ctx.settings.tag_prefix)
    latest = vm.latest_tag(tags)
    suggestions = vm.suggest_next(tags)

    ctx.console.print(f"latest: {latest or '(none)'}", Style.INFO)
    ctx.console.print(f"  major -> {vm.format(suggestions.major)}")
    ctx.console.print(f"  minor -> {vm.format(suggestions.minor)}")
    ctx.console.print(f"  patch -> {vm.format(suggestions.patch)}")


def owners(
    platform: Platform | None = typer.Option(None, "--platform", show_default=False),
    token: str | None = typer.Option(None, "--token", help="Access token", show_default=False),
    api_url: str | None = typer.Option(None, "--api-url", help="API root override", show_default=False),
) -> None:
    """List the accounts a repository can be created under."""
    ctx = build_context()
    flow = build_flow(ctx, build_credential(ctx, platform=platform, token=token, api_url=api_url))
    client = flow.remote.platform

    user = unwrap_or_exit(client.get_current_user(deadline=flow.remote.deadline()), ctx.console)
    orgs = unwrap_or_exit(
        client.get_user_organizations(deadline=flow.remote.deadline()), ctx.console
    )
    snapshot = PlatformSnapshot(user=user, organizations=orgs)

    for kind, login in snapshot.owners:
        ctx.console.print(f"{kind:<4} {login}")
