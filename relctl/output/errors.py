"""Release error presentation and exit code mapping."""

from __future__ import annotations

from typing import TYPE_CHECKING

from relctl.core.errors import ErrorCode
from relctl.output.console import Style
from relctl.services.release.errors import (
    MutationError,
    PreflightError,
    PublishError,
    ReleaseError,
    ReleaseWorkflowFailedError,
    RunNotFoundError,
    UsageError,
)

if TYPE_CHECKING:
    from relctl.output.console import ConsoleProtocol

__all__ = ["print_release_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print a release error with whatever the operator needs to act on it."""
    match error:
        case UsageError(message=message):
            console.error(message)
            console.print("Usage: relctl release <version>", Style.DIM)
            console.print("Example: relctl release 1.2.0", Style.DIM)
        case PreflightError(check=check, message=message, hint=hint):
            console.error(f"preflight [{check}]: {message}")
            _hint(console, hint)
        case MutationError(step=step, message=message, hint=hint):
            console.error(f"{step}: {message}")
            _hint(console, hint)
            console.print(
                "Local edits or commits made so far were left in place for inspection.",
                Style.DIM,
            )
        case PublishError(tag=tag, message=message, hint=hint):
            console.error(message)
            _hint(console, hint)
            console.print(
                f"Tag {tag} may already be published. Check the remote before retrying;"
                " do not release under a different tag name.",
                Style.DIM,
            )
        case RunNotFoundError(tag=tag, attempts=attempts, actions_url=url):
            console.error(
                f"could not find release workflow run for {tag} after {attempts} attempts"
            )
            where = url or "the repository's Actions page"
            console.print(f"The tag is pushed. Check {where} manually.", Style.DIM)
        case ReleaseWorkflowFailedError(run_id=run_id, conclusion=conclusion, run_url=url):
            console.error(f"release workflow failed with status: {conclusion}")
            console.print(f"Check {url or f'run {run_id}'}", Style.DIM)


def _hint(console: ConsoleProtocol, hint: str | None) -> None:
    if hint:
        console.print(f"hint: {hint}", Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    """Usage errors get their own code; every later failure exits 1."""
    match error:
        case UsageError():
            return int(ErrorCode.USAGE_ERROR)
        case _:
            return int(ErrorCode.RELEASE_FAILED)
