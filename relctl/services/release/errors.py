"""Error taxonomy for the release pipeline.

Each stage fails with its own error type. All of them are terminal for the
process; they differ in how much state the release has already changed.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UsageError:
    """Bad or missing input. Nothing has been touched."""

    message: str


@dataclass(frozen=True, slots=True)
class PreflightError:
    """A read-only precondition failed. Nothing has been touched."""

    check: str
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class MutationError:
    """Local rewrite, build, commit or branch push failed.

    Edits or a local commit may be left behind for manual inspection.
    """

    step: str
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class PublishError:
    """Tag creation or tag push failed; the tag may already be released."""

    tag: str
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class RunNotFoundError:
    """The CI run for a pushed tag never showed up within the retry budget."""

    tag: str
    attempts: int
    actions_url: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseWorkflowFailedError:
    """The release workflow finished with a non-success conclusion."""

    run_id: int
    conclusion: str
    run_url: str | None = None


ReleaseError = (
    UsageError
    | PreflightError
    | MutationError
    | PublishError
    | RunNotFoundError
    | ReleaseWorkflowFailedError
)
