"""Collaborator contracts for the release pipeline.

The pipeline talks to git, the CI host and the build tool only through these
protocols. Production wires Repository, GhCli and CommandBuildTool; tests pass
fakes that record calls.
"""

from __future__ import annotations

from typing import Protocol

from relctl.core.result import Result
from relctl.git.repository import GitError, GitStatus
from relctl.platform.process import ProcessError


class VersionControl(Protocol):
    def status(self) -> Result[GitStatus, GitError]: ...

    def tag_exists(self, tag: str) -> Result[bool, GitError]: ...

    def add(self, paths: list[str]) -> Result[None, GitError]: ...

    def commit(self, message: str) -> Result[None, GitError]: ...

    def push(self, remote: str, ref: str, *, force: bool = False) -> Result[None, GitError]: ...

    def tag(
        self, name: str, target: str | None = None, *, force: bool = False
    ) -> Result[None, GitError]: ...


class CiHost(Protocol):
    def list_runs(self, *, workflow: str, branch: str) -> Result[str, ProcessError]:
        """Raw JSON list of runs with ``databaseId``, ``headBranch`` and ``url``."""
        ...

    def watch_run(self, run_id: int) -> Result[None, ProcessError]:
        """Block until the run reaches a terminal state."""
        ...

    def run_conclusion(self, run_id: int) -> Result[str, ProcessError]: ...


class BuildTool(Protocol):
    def build(self) -> Result[None, ProcessError]:
        """Build the package; regenerates the lockfile as a side effect."""
        ...

    def publish(self) -> Result[None, ProcessError]: ...


class SecretStore(Protocol):
    def set_secret(self, name: str, value: str) -> Result[None, ProcessError]: ...
