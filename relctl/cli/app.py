from __future__ import annotations

import os
from pathlib import Path

import typer

from relctl import __version__
from relctl.cli.commands.release_cmd import release
from relctl.cli.commands.secrets_cmd import secrets
from relctl.cli.context import ROOT_ENV
from relctl.core.errors import ErrorCode


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


app.command()(release)
app.command()(secrets)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_show_version,
        is_eager=True,
    ),
    root: Path | None = typer.Option(
        None,
        "--root",
        help="Repository to release (default: current directory).",
    ),
) -> None:
    del version
    if root is None:
        return

    try:
        resolved = root.expanduser().resolve()
    except OSError as e:
        typer.echo(f"error: invalid --root: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.USAGE_ERROR))

    if not (resolved / ".git").exists():
        typer.echo(f"error: --root '{resolved}' is not a git checkout", err=True)
        raise typer.Exit(code=int(ErrorCode.USAGE_ERROR))

    os.environ[ROOT_ENV] = str(resolved)


def main() -> None:
    app()
