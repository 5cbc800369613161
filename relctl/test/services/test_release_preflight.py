from __future__ import annotations

from pathlib import Path

import pytest

from relctl.core.config import BuildConfig, ReleaseConfig
from relctl.core.result import Err, Result
from relctl.git.repository import GitError, GitStatus
from relctl.services.release.preflight import (
    PreflightCheck,
    PreflightReport,
    check_changelog,
    check_clean_tree,
    check_tag_absent,
    run_preflight,
)
from relctl.services.release.request import ReleaseRequest

from .fakes import FakeVcs, all_tools, write_repo

REQUEST = ReleaseRequest(raw="1.2.0", version="1.2.0")


def _without(*missing: str):
    def which(name: str) -> str | None:
        return None if name in missing else f"/usr/bin/{name}"

    return which


class BrokenStatusVcs(FakeVcs):
    def status(self) -> Result[GitStatus, GitError]:
        return Err(GitError(command="status", message="fatal: not a git repository"))


def test_all_checks_pass(tmp_path: Path) -> None:
    write_repo(tmp_path)
    vcs = FakeVcs()

    report = run_preflight(
        request=REQUEST, config=ReleaseConfig(), repo_root=tmp_path, vcs=vcs, which=all_tools
    )

    assert report.ok
    assert report.to_error() is None
    assert [c.name for c in report.checks] == ["gh", "cargo", "working-tree", "tag", "changelog"]
    assert vcs.mutations == []


@pytest.mark.parametrize(
    ("which", "vcs", "check"),
    [
        (_without("gh"), FakeVcs(), "gh"),
        (_without("cargo"), FakeVcs(), "cargo"),
        (all_tools, FakeVcs(dirty=("src/main.rs",)), "working-tree"),
        (all_tools, FakeVcs(existing_tags={"v1.2.0"}), "tag"),
    ],
)
def test_each_failure_stops_preflight(tmp_path: Path, which, vcs: FakeVcs, check: str) -> None:
    write_repo(tmp_path)
    before = {p.name: p.read_bytes() for p in tmp_path.iterdir()}

    report = run_preflight(
        request=REQUEST, config=ReleaseConfig(), repo_root=tmp_path, vcs=vcs, which=which
    )

    assert not report.ok
    assert report.checks[-1].name == check
    assert [c for c in report.checks if not c.ok] == [report.checks[-1]]
    error = report.to_error()
    assert error is not None and error.check == check
    assert vcs.mutations == []
    assert {p.name: p.read_bytes() for p in tmp_path.iterdir()} == before


def test_missing_changelog_marker(tmp_path: Path) -> None:
    write_repo(tmp_path, changelog="# Changelog\n\n## [1.1.0]\n")

    report = run_preflight(
        request=REQUEST, config=ReleaseConfig(), repo_root=tmp_path, vcs=FakeVcs(), which=all_tools
    )

    failure = report.first_failure()
    assert failure is not None
    assert failure.name == "changelog"
    assert failure.hint is not None and "## [Unreleased]" in failure.hint


def test_build_tool_comes_from_config(tmp_path: Path) -> None:
    write_repo(tmp_path)
    config = ReleaseConfig(build=BuildConfig(tool="npm"))

    report = run_preflight(
        request=REQUEST, config=config, repo_root=tmp_path, vcs=FakeVcs(), which=_without("npm")
    )

    failure = report.first_failure()
    assert failure is not None and failure.name == "npm"


def test_dirty_tree_lists_paths() -> None:
    check = check_clean_tree(FakeVcs(dirty=("Cargo.toml", "src/lib.rs")))

    assert not check.ok
    assert "Cargo.toml, src/lib.rs" in check.message


def test_git_status_failure_fails_check() -> None:
    check = check_clean_tree(BrokenStatusVcs())

    assert not check.ok
    assert "not a git repository" in check.message


def test_tag_check() -> None:
    assert check_tag_absent(FakeVcs(), "v1.2.0").ok
    taken = check_tag_absent(FakeVcs(existing_tags={"v1.2.0"}), "v1.2.0")
    assert not taken.ok
    assert taken.message == "tag v1.2.0 already exists"


def test_changelog_unreadable(tmp_path: Path) -> None:
    check = check_changelog(tmp_path / "CHANGELOG.md")

    assert not check.ok
    assert "cannot read CHANGELOG.md" in check.message


def test_report_helpers() -> None:
    report = PreflightReport(
        checks=(
            PreflightCheck.passed("gh", "/usr/bin/gh"),
            PreflightCheck.failed("cargo", "missing", "install it"),
        )
    )

    assert not report.ok
    error = report.to_error()
    assert error is not None
    assert (error.check, error.message, error.hint) == ("cargo", "missing", "install it")
    assert report.first_failure() is report.checks[1]
