from __future__ import annotations

from pathlib import Path
from time import sleep

from relctl.core.result import Err, Ok, Result
from relctl.platform.process import ProcessError
from relctl.platform.process import run as run_process
from relctl.platform.process import run_streaming
from relctl.services.release.timeouts import (
    GH_READ_RETRY_ATTEMPTS,
    GH_READ_RETRY_DELAY_SECONDS,
    GH_TIMEOUT_SECONDS,
    GH_WATCH_TIMEOUT_SECONDS,
)

GH_EXECUTABLE = "gh"
GH_INSTALL_HINT = "Install GitHub CLI: https://cli.github.com/"


def _is_transient_gh_error(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    markers = (
        "timed out",
        "timeout",
        "connection reset",
        "connection refused",
        "temporarily unavailable",
        "service unavailable",
        "bad gateway",
        "gateway timeout",
        "network is unreachable",
        "http 429",
        "http 500",
        "http 502",
        "http 503",
        "http 504",
    )
    return any(marker in text for marker in markers)


class GhCli:
    """CI host backed by the GitHub CLI.

    Attributes:
        repo_root: Checkout the commands run in.
        repo: ``owner/name``; when None gh resolves the repo from the checkout.
    """

    def __init__(self, *, repo_root: Path, repo: str | None) -> None:
        self.repo_root = repo_root
        self.repo = repo

    def list_runs(self, *, workflow: str, branch: str) -> Result[str, ProcessError]:
        cmd = [
            GH_EXECUTABLE,
            "run",
            "list",
            *self._repo_args(),
            "--workflow",
            workflow,
            "--branch",
            branch,
            "--json",
            "databaseId,headBranch,url",
        ]
        return run_process(cmd, cwd=self.repo_root, timeout=GH_TIMEOUT_SECONDS)

    def watch_run(self, run_id: int) -> Result[None, ProcessError]:
        cmd = [GH_EXECUTABLE, "run", "watch", str(run_id), *self._repo_args()]
        return run_streaming(cmd, cwd=self.repo_root, timeout=GH_WATCH_TIMEOUT_SECONDS)

    def run_conclusion(self, run_id: int) -> Result[str, ProcessError]:
        cmd = [
            GH_EXECUTABLE,
            "run",
            "view",
            str(run_id),
            *self._repo_args(),
            "--json",
            "conclusion",
            "-q",
            ".conclusion",
        ]
        result = self._read(cmd)
        if isinstance(result, Err):
            return result
        return Ok(result.value.strip())

    def set_secret(self, name: str, value: str) -> Result[None, ProcessError]:
        # --body - reads the value from stdin so it never shows up in argv
        cmd = [GH_EXECUTABLE, "secret", "set", name, *self._repo_args(), "--body", "-"]
        result = run_process(cmd, cwd=self.repo_root, timeout=GH_TIMEOUT_SECONDS, stdin=value)
        if isinstance(result, Err):
            return result
        return Ok(None)

    def _repo_args(self) -> list[str]:
        if self.repo is None:
            return []
        return ["--repo", self.repo]

    def _read(self, cmd: list[str]) -> Result[str, ProcessError]:
        """Run an idempotent gh read, retrying transient network failures."""
        attempts = max(1, GH_READ_RETRY_ATTEMPTS)
        attempt = 0
        while True:
            result = run_process(cmd, cwd=self.repo_root, timeout=GH_TIMEOUT_SECONDS)
            attempt += 1
            if isinstance(result, Ok):
                return result
            if attempt >= attempts or not _is_transient_gh_error(result.error):
                return result
            sleep(GH_READ_RETRY_DELAY_SECONDS * attempt)
