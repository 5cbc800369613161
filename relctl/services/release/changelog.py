from __future__ import annotations

from datetime import date
from pathlib import Path

from relctl.core.result import Err, Ok, Result
from relctl.platform.files import atomic_write_text
from relctl.services.release.errors import MutationError

UNRELEASED_MARKER = "## [Unreleased]"


def _marker_indexes(lines: list[str]) -> list[int]:
    return [i for i, line in enumerate(lines) if line.rstrip() == UNRELEASED_MARKER]


def has_unreleased_marker(text: str) -> bool:
    return bool(_marker_indexes(text.splitlines()))


def insert_release_section(
    text: str, *, version: str, today: date
) -> Result[str, MutationError]:
    """Add a ``## [version]`` section with its date right below the marker.

    The marker line stays in place so the next release can do the same.
    Line endings follow the marker line.
    """
    lines = text.splitlines(keepends=True)
    found = _marker_indexes(lines)
    if not found:
        return Err(
            MutationError(
                step="changelog",
                message=f"changelog is missing an {UNRELEASED_MARKER} section",
            )
        )
    if len(found) > 1:
        return Err(
            MutationError(
                step="changelog",
                message=f"changelog has {len(found)} {UNRELEASED_MARKER} sections",
                hint="Keep exactly one unreleased section, then retry.",
            )
        )

    idx = found[0]
    marker = lines[idx]
    body = marker.rstrip("\r\n")
    nl = marker[len(body) :] or "\n"
    section = [body + nl, nl, f"## [{version}]{nl}", nl, f"_{today.isoformat()}_{nl}"]
    return Ok("".join(lines[:idx] + section + lines[idx + 1 :]))


def update_changelog(path: Path, *, version: str, today: date) -> Result[None, MutationError]:
    try:
        with path.open(encoding="utf-8", newline="") as handle:
            text = handle.read()
    except OSError as e:
        return Err(
            MutationError(
                step="changelog",
                message=f"failed to read {path.name}: {e}",
                hint=str(path),
            )
        )

    updated = insert_release_section(text, version=version, today=today)
    if isinstance(updated, Err):
        return updated

    try:
        atomic_write_text(path, updated.value)
    except OSError as e:
        return Err(
            MutationError(
                step="changelog",
                message=f"failed to write {path.name}: {e}",
                hint=str(path),
            )
        )
    return Ok(None)
