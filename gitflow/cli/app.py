from __future__ import annotations

import typer

from gitflow import __version__
from gitflow.cli.commands.info import owners, version
from gitflow.cli.commands.init_cmd import init
from gitflow.cli.commands.workflow import commit, publish


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    invoke_without_command=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(init)
app.command()(commit)
app.command()(publish)
app.command()(version)
app.command()(owners)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    show_version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    if show_version:
        typer.echo(__version__)
        raise typer.Exit(code=0)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


def main() -> None:
    app()
