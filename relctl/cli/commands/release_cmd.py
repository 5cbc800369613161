from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from relctl.cli.context import build_context
from relctl.core.errors import ErrorCode
from relctl.core.result import Err
from relctl.output.console import ConsoleProtocol
from relctl.output.errors import print_release_error, release_error_exit_code
from relctl.output.prompt import confirm, fixed_answer
from relctl.services.release.service import ReleaseSummary, build_pipeline


def _exit(err: str, *, code: ErrorCode) -> NoReturn:
    typer.echo(f"error: {err}", err=True)
    raise typer.Exit(code=int(code))


def _print_summary(summary: ReleaseSummary, console: ConsoleProtocol) -> None:
    tag = summary.request.tag
    console.newline()
    console.success(f"Done! Released {tag}")
    if summary.release_url is not None:
        console.print(f"  GitHub Release: {summary.release_url}")
    if summary.package_url is not None:
        console.print(f"  Package:        {summary.package_url}")
    if summary.publish == "failed":
        console.warning("registry publish failed; the release itself is complete")


def release(
    version: str | None = typer.Argument(
        None,
        help="Version to release, with or without a leading v (e.g. 1.2.0).",
        show_default=False,
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Path to relctl.toml (default: <repo>/relctl.toml if present).",
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Publish to the registry without asking."),
    no_publish: bool = typer.Option(False, "--no-publish", help="Never publish to the registry."),
) -> None:
    """Bump, build, tag and push a release, then wait for its CI workflow."""
    if yes and no_publish:
        _exit("--yes and --no-publish are mutually exclusive", code=ErrorCode.USAGE_ERROR)

    ctx = build_context(config_path=config)
    if yes:
        ask = fixed_answer(True)
    elif no_publish:
        ask = fixed_answer(False)
    else:
        ask = confirm

    pipeline = build_pipeline(
        repo_root=ctx.repo_root,
        config=ctx.config,
        console=ctx.console,
        confirm=ask,
    )
    result = pipeline.run(version)
    if isinstance(result, Err):
        print_release_error(result.error, ctx.console)
        raise typer.Exit(code=release_error_exit_code(result.error))

    _print_summary(result.value, ctx.console)
