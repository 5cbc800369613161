from __future__ import annotations

from datetime import date
from pathlib import Path

from relctl.core.result import Err, Ok
from relctl.services.release.changelog import (
    UNRELEASED_MARKER,
    has_unreleased_marker,
    insert_release_section,
    update_changelog,
)

from .fakes import CHANGELOG

TODAY = date(2026, 10, 17)


def test_marker_detection() -> None:
    assert has_unreleased_marker(CHANGELOG)
    assert has_unreleased_marker("## [Unreleased]   \n")
    assert not has_unreleased_marker("# Changelog\n\n## [1.1.0]\n")
    assert not has_unreleased_marker("Text mentioning ## [Unreleased] inline\n")


def test_section_is_inserted_below_marker() -> None:
    result = insert_release_section(CHANGELOG, version="1.2.0", today=TODAY)

    assert isinstance(result, Ok)
    assert result.value == (
        "# Changelog\n"
        "\n"
        "## [Unreleased]\n"
        "\n"
        "## [1.2.0]\n"
        "\n"
        "_2026-10-17_\n"
        "\n"
        "- Add thread support\n"
        "\n"
        "## [1.1.0]\n"
        "\n"
        "_2026-09-01_\n"
        "\n"
        "- First public release\n"
    )


def test_marker_is_kept_exactly_once() -> None:
    result = insert_release_section(CHANGELOG, version="1.2.0", today=TODAY)

    assert isinstance(result, Ok)
    lines = result.value.splitlines()
    assert lines.count(UNRELEASED_MARKER) == 1
    marker = lines.index(UNRELEASED_MARKER)
    assert lines[marker + 2] == "## [1.2.0]"
    assert lines[marker + 4] == "_2026-10-17_"


def test_two_releases_stack_newest_first() -> None:
    first = insert_release_section(CHANGELOG, version="1.2.0", today=TODAY)
    assert isinstance(first, Ok)
    second = insert_release_section(first.value, version="1.3.0", today=date(2026, 11, 2))
    assert isinstance(second, Ok)

    lines = second.value.splitlines()
    assert lines.count(UNRELEASED_MARKER) == 1
    assert lines.index("## [1.3.0]") < lines.index("## [1.2.0]") < lines.index("## [1.1.0]")


def test_crlf_line_endings_are_kept() -> None:
    text = CHANGELOG.replace("\n", "\r\n")

    result = insert_release_section(text, version="1.2.0", today=TODAY)

    assert isinstance(result, Ok)
    assert "\n" not in result.value.replace("\r\n", "")
    assert "## [Unreleased]\r\n\r\n## [1.2.0]\r\n\r\n_2026-10-17_\r\n" in result.value


def test_marker_on_last_line_without_newline() -> None:
    result = insert_release_section("# Changelog\n\n## [Unreleased]", version="0.1.0", today=TODAY)

    assert isinstance(result, Ok)
    assert result.value.endswith("## [Unreleased]\n\n## [0.1.0]\n\n_2026-10-17_\n")


def test_missing_marker() -> None:
    result = insert_release_section("# Changelog\n", version="1.2.0", today=TODAY)

    assert isinstance(result, Err)
    assert result.error.step == "changelog"


def test_duplicate_marker() -> None:
    text = CHANGELOG + "\n## [Unreleased]\n"

    result = insert_release_section(text, version="1.2.0", today=TODAY)

    assert isinstance(result, Err)
    assert "2" in result.error.message


def test_update_changelog_rewrites_file(tmp_path: Path) -> None:
    path = tmp_path / "CHANGELOG.md"
    path.write_text(CHANGELOG, encoding="utf-8")

    assert update_changelog(path, version="1.2.0", today=TODAY) == Ok(None)

    assert "## [1.2.0]\n\n_2026-10-17_\n" in path.read_text(encoding="utf-8")


def test_update_changelog_missing_file(tmp_path: Path) -> None:
    result = update_changelog(tmp_path / "CHANGELOG.md", version="1.2.0", today=TODAY)

    assert isinstance(result, Err)
    assert "failed to read" in result.error.message


def test_update_changelog_leaves_file_untouched_on_error(tmp_path: Path) -> None:
    path = tmp_path / "CHANGELOG.md"
    path.write_text("# Changelog\n", encoding="utf-8")

    assert isinstance(update_changelog(path, version="1.2.0", today=TODAY), Err)
    assert path.read_text(encoding="utf-8") == "# Changelog\n"
