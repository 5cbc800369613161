from __future__ import annotations

import shutil

import typer

from relctl.cli.context import build_context
from relctl.core.errors import ErrorCode
from relctl.core.result import Err
from relctl.output.console import Style
from relctl.output.prompt import ask_secret, confirm
from relctl.services.release.gh import GH_EXECUTABLE, GH_INSTALL_HINT, GhCli
from relctl.services.release.secrets import (
    SecretGroup,
    collect_secrets,
    store_secrets,
    tokens_are_well_formed,
)


def _ask(label: str, hidden: bool) -> str:
    return ask_secret(label, hidden=hidden)


def secrets(
    names: list[str] = typer.Argument(
        ...,
        help="Secret names. Join names that belong together with a comma (USER,PASSWORD).",
    ),
) -> None:
    """Prompt for credentials and store them as GitHub Actions secrets."""
    try:
        groups = [SecretGroup.parse(arg) for arg in names]
    except ValueError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.USAGE_ERROR))

    ctx = build_context()
    console = ctx.console

    collected = collect_secrets(
        groups,
        ask=_ask,
        confirm=confirm,
        console=console,
        validate=tokens_are_well_formed,
    )
    console.newline()
    if not collected:
        console.print("No credentials were configured. Nothing to do.")
        return

    console.print("Configured secrets:")
    for name in collected:
        console.print(f"  • {name}")
    console.newline()

    if shutil.which(GH_EXECUTABLE) is None:
        console.warning(f"'{GH_EXECUTABLE}' is not installed; skipping GitHub secrets setup.")
        console.print(GH_INSTALL_HINT, Style.DIM)
        console.print("Or set secrets manually: gh secret set SECRET_NAME", Style.DIM)
        return

    if not confirm("Store these as GitHub Actions secrets using 'gh secret set'?"):
        return

    stored = store_secrets(
        collected,
        store=GhCli(repo_root=ctx.repo_root, repo=ctx.config.repo),
        console=console,
    )
    if isinstance(stored, Err):
        console.error(f"{stored.error}")
        detail = stored.error.detail()
        if detail:
            console.print(f"hint: {detail}", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.RELEASE_FAILED))

    console.success("Secrets are stored in GitHub Actions.")
