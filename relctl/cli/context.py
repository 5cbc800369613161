from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from relctl.core.config import ReleaseConfig, load_config, load_config_or_default
from relctl.core.errors import ErrorCode
from relctl.core.result import Err
from relctl.output.console import ConsoleProtocol, RichConsole

ROOT_ENV = "RELCTL_ROOT"


@dataclass(frozen=True, slots=True)
class CLIContext:
    repo_root: Path
    config: ReleaseConfig
    console: ConsoleProtocol


def detect_repo_root() -> Path:
    env = os.environ.get(ROOT_ENV)
    if env:
        return Path(env)
    return Path.cwd().resolve()


def build_context(*, config_path: Path | None = None) -> CLIContext:
    root = detect_repo_root()
    result = load_config(config_path) if config_path is not None else load_config_or_default(root)
    if isinstance(result, Err):
        typer.echo(f"error: {result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.USAGE_ERROR))

    return CLIContext(repo_root=root, config=result.value, console=RichConsole())
