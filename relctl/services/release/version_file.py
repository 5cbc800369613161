from __future__ import annotations

import re
from pathlib import Path

from relctl.core.result import Err, Ok, Result
from relctl.platform.files import atomic_write_text
from relctl.services.release.errors import MutationError


def _declaration_re(key: str) -> re.Pattern[str]:
    # Anchored to the start of a line so `foo = { version = "1" }` never matches.
    return re.compile(
        rf'^(?P<head>{re.escape(key)}[ \t]*=[ \t]*")(?P<value>[^"\r\n]*)"',
        re.MULTILINE,
    )


def replace_version(
    text: str, *, version: str, key: str = "version"
) -> Result[str, MutationError]:
    """Replace the value of the single ``key = "..."`` line.

    Zero or several matching lines is an error: guessing would either change
    nothing or rewrite an unrelated line.
    """
    matches = list(_declaration_re(key).finditer(text))
    if not matches:
        return Err(
            MutationError(
                step="version-file",
                message=f'no `{key} = "..."` line found',
            )
        )
    if len(matches) > 1:
        lines = ", ".join(str(text.count("\n", 0, m.start()) + 1) for m in matches)
        return Err(
            MutationError(
                step="version-file",
                message=f'{len(matches)} `{key} = "..."` lines found (lines {lines})',
                hint="Expected exactly one version declaration.",
            )
        )

    m = matches[0]
    return Ok(text[: m.start("value")] + version + text[m.end("value") :])


def bump_version_file(
    path: Path, *, version: str, key: str = "version"
) -> Result[None, MutationError]:
    try:
        # newline="" keeps \r\n intact so untouched lines stay byte-identical
        with path.open(encoding="utf-8", newline="") as handle:
            text = handle.read()
    except OSError as e:
        return Err(
            MutationError(
                step="version-file",
                message=f"failed to read {path.name}: {e}",
                hint=str(path),
            )
        )

    replaced = replace_version(text, version=version, key=key)
    if isinstance(replaced, Err):
        return Err(
            MutationError(
                step=replaced.error.step,
                message=f"{path.name}: {replaced.error.message}",
                hint=replaced.error.hint,
            )
        )

    try:
        atomic_write_text(path, replaced.value)
    except OSError as e:
        return Err(
            MutationError(
                step="version-file",
                message=f"failed to write {path.name}: {e}",
                hint=str(path),
            )
        )
    return Ok(None)
