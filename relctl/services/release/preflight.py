"""Read-only checks run before anything is modified.

Checks run in a fixed order and stop at the first failure. None of them
writes anything, so preflight can be repeated as often as needed.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from relctl.core.config import ReleaseConfig
from relctl.core.result import Err
from relctl.services.release.changelog import UNRELEASED_MARKER, has_unreleased_marker
from relctl.services.release.contracts import VersionControl
from relctl.services.release.errors import PreflightError
from relctl.services.release.gh import GH_EXECUTABLE, GH_INSTALL_HINT
from relctl.services.release.request import ReleaseRequest

Which = Callable[[str], str | None]


@dataclass(frozen=True, slots=True)
class PreflightCheck:
    """Result of a single preflight check.

    Attributes:
        name: Short identifier (e.g. "gh", "working-tree")
        ok: Whether the check passed
        message: Human-readable result
        hint: Optional fix command or URL
    """

    name: str
    ok: bool
    message: str
    hint: str | None = None

    @classmethod
    def passed(cls, name: str, message: str) -> PreflightCheck:
        return cls(name=name, ok=True, message=message)

    @classmethod
    def failed(cls, name: str, message: str, hint: str | None = None) -> PreflightCheck:
        return cls(name=name, ok=False, message=message, hint=hint)


@dataclass(frozen=True, slots=True)
class PreflightReport:
    checks: tuple[PreflightCheck, ...]

    @property
    def ok(self) -> bool:
        return all(c.ok for c in self.checks)

    def first_failure(self) -> PreflightCheck | None:
        return next((c for c in self.checks if not c.ok), None)

    def to_error(self) -> PreflightError | None:
        failed = self.first_failure()
        if failed is None:
            return None
        return PreflightError(check=failed.name, message=failed.message, hint=failed.hint)


def check_tool(name: str, *, hint: str, which: Which) -> PreflightCheck:
    path = which(name)
    if path is None:
        return PreflightCheck.failed(name, f"'{name}' is required but was not found", hint)
    return PreflightCheck.passed(name, path)


def check_clean_tree(vcs: VersionControl) -> PreflightCheck:
    status = vcs.status()
    if isinstance(status, Err):
        return PreflightCheck.failed("working-tree", f"git status failed: {status.error.message}")
    if not status.value.is_clean:
        dirty = ", ".join(status.value.paths[:5])
        return PreflightCheck.failed(
            "working-tree",
            f"working tree is dirty ({dirty})",
            "Commit or stash changes first.",
        )
    return PreflightCheck.passed("working-tree", "clean")


def check_tag_absent(vcs: VersionControl, tag: str) -> PreflightCheck:
    exists = vcs.tag_exists(tag)
    if isinstance(exists, Err):
        return PreflightCheck.failed("tag", f"cannot check tag {tag}: {exists.error.message}")
    if exists.value:
        return PreflightCheck.failed(
            "tag",
            f"tag {tag} already exists",
            "Pick a new version, or delete the tag if it was never released.",
        )
    return PreflightCheck.passed("tag", f"{tag} is free")


def check_changelog(path: Path) -> PreflightCheck:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return PreflightCheck.failed("changelog", f"cannot read {path.name}: {e}")
    if not has_unreleased_marker(text):
        return PreflightCheck.failed(
            "changelog",
            f"{path.name} is missing an {UNRELEASED_MARKER} section",
            f"Add a '{UNRELEASED_MARKER}' line above the latest release.",
        )
    return PreflightCheck.passed("changelog", f"{UNRELEASED_MARKER} found")


def run_preflight(
    *,
    request: ReleaseRequest,
    config: ReleaseConfig,
    repo_root: Path,
    vcs: VersionControl,
    which: Which = shutil.which,
) -> PreflightReport:
    """Run every check in order, stopping at the first failure."""
    checks: list[Callable[[], PreflightCheck]] = [
        lambda: check_tool(GH_EXECUTABLE, hint=GH_INSTALL_HINT, which=which),
        lambda: check_tool(
            config.build.tool,
            hint=f"Install {config.build.tool} and make sure it is on PATH.",
            which=which,
        ),
        lambda: check_clean_tree(vcs),
        lambda: check_tag_absent(vcs, request.tag),
        lambda: check_changelog(repo_root / config.changelog),
    ]

    results: list[PreflightCheck] = []
    for check in checks:
        result = check()
        results.append(result)
        if not result.ok:
            break
    return PreflightReport(checks=tuple(results))
