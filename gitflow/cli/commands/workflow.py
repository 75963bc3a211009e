"""Commit and publish commands."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

import typer

from gitflow.cli.commands._helpers import unwrap_or_exit
from gitflow.cli.context import Platform, build_context, build_credential, build_flow
from gitflow.output.console import Style
from gitflow.services.gitflow import CommitOptions, PublishOptions
from gitflow.services.version import VersionKind


class Bump(StrEnum):
    major = "major"
    minor = "minor"
    patch = "patch"


_BUMP_KINDS: dict[Bump, VersionKind] = {
    Bump.major: "major",
    Bump.minor: "minor",
    Bump.patch: "patch",
}


def commit(
    message: str | None = typer.Option(
        None, "--message", "-m", help="Commit message (default: chore: update)", show_default=False
    ),
    platform: Platform | None = typer.Option(None, "--platform", show_default=False),
    token: str | None = typer.Option(None, "--token", help="Access token", show_default=False),
    api_url: str | None = typer.Option(None, "--api-url", help="API root override", show_default=False),
    workdir: Path | None = typer.Option(None, "--workdir", "-C", show_default=False),
) -> None:
    """Commit pending changes onto develop and push it."""
    ctx = build_context(workdir)
    # Committing only talks to git; the platform client is never called.
    credential = build_credential(
        ctx, platform=platform, token=token, api_url=api_url, require_token=False
    )
    flow = build_flow(ctx, credential)

    branch = unwrap_or_exit(flow.commit(CommitOptions(message=message)), ctx.console)
    ctx.console.success(branch)


def publish(
    version: str | None = typer.Option(
        None, "--version", help="Explicit version (e.g. 1.4.0)", show_default=False
    ),
    bump: Bump = typer.Option(Bump.patch, "--bump", help="major/minor/patch"),
    platform: Platform | None = typer.Option(None, "--platform", show_default=False),
    token: str | None = typer.Option(None, "--token", help="Access token", show_default=False),
    api_url: str | None = typer.Option(None, "--api-url", help="API root override", show_default=False),
    workdir: Path | None = typer.Option(None, "--workdir", "-C", show_default=False),
) -> None:
    """Merge develop into main, tag, release and delete develop."""
    ctx = build_context(workdir)
    flow = build_flow(ctx, build_credential(ctx, platform=platform, token=token, api_url=api_url))

    report = unwrap_or_exit(
        flow.publish(PublishOptions(version=version, version_type=_BUMP_KINDS[bump])),
        ctx.console,
    )

    ctx.console.newline()
    ctx.console.print(f"tag: {report.tag}", Style.INFO)
    if report.release is not None:
        ctx.console.print(f"release: {report.release.html_url}", Style.INFO)
    if report.warnings:
        ctx.console.print(f"{len(report.warnings)} warning(s):", Style.WARNING)
        for w in report.warnings:
            ctx.console.print(f"  - {w}", Style.DIM)
