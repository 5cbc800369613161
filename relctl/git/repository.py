"""Git repository abstraction.

The release pipeline only needs a handful of git operations: read the
porcelain status, check whether a tag exists, then add, commit, tag and push.
All operations return Result types.

Usage:
    repo = Repository(Path("/path/to/repo"))

    match repo.status():
        case Ok(status):
            if status.is_clean:
                print("Working tree clean")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from relctl.core.result import Err, Ok, Result
from relctl.platform.process import ProcessError
from relctl.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

__all__ = [
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single ``git status --porcelain`` entry.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Parsed porcelain status of the working tree."""

    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        """True if working tree has no changes (untracked files included)."""
        return len(self.entries) == 0

    @property
    def paths(self) -> list[str]:
        return [e.path for e in self.entries]


class Repository:
    """Git repository abstraction.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def status(self) -> Result[GitStatus, GitError]:
        """Run ``git status --porcelain`` and parse the output."""
        result = self._run(["status", "--porcelain"])
        match result:
            case Err(e):
                return Err(_git_error("status", e))
            case Ok(stdout):
                return Ok(self._parse_status(stdout))

    def tag_exists(self, tag: str) -> Result[bool, GitError]:
        """Check whether ``refs/tags/<tag>`` resolves locally.

        ``rev-parse --verify --quiet`` exits 1 without output when the ref is
        missing; any other failure (not a repository, ...) is an error.
        """
        result = self._run(["rev-parse", "--verify", "--quiet", f"refs/tags/{tag}"])
        match result:
            case Ok(_):
                return Ok(True)
            case Err(e) if e.returncode == 1 and not e.stderr.strip():
                return Ok(False)
            case Err(e):
                return Err(_git_error("rev-parse", e))

    def add(self, paths: list[str]) -> Result[None, GitError]:
        return self._unit("add", ["add", "--", *paths])

    def commit(self, message: str) -> Result[None, GitError]:
        return self._unit("commit", ["commit", "-m", message])

    def push(self, remote: str, ref: str, *, force: bool = False) -> Result[None, GitError]:
        """Push a branch or tag to remote."""
        args = ["push"]
        if force:
            args.append("-f")
        args.extend([remote, ref])
        return self._unit("push", args)

    def tag(
        self, name: str, target: str | None = None, *, force: bool = False
    ) -> Result[None, GitError]:
        """Create a lightweight tag, or move an existing one with force."""
        args = ["tag"]
        if force:
            args.append("-f")
        args.append(name)
        if target is not None:
            args.append(target)
        return self._unit("tag", args)

    def _unit(self, command: str, args: list[str]) -> Result[None, GitError]:
        result = self._run(args)
        if isinstance(result, Err):
            return Err(_git_error(command, result.error))
        return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "pull", "push"}
            else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)

    def _parse_status(self, output: str) -> GitStatus:
        entries: list[StatusEntry] = []
        for line in output.splitlines():
            if len(line) < 4:
                continue
            entries.append(StatusEntry(xy=line[:2], path=line[3:]))
        return GitStatus(entries=tuple(entries))


def _git_error(command: str, e: ProcessError) -> GitError:
    return GitError(
        command=command,
        message=e.stderr.strip() or e.stdout.strip() or f"git {command} failed",
        returncode=e.returncode,
    )
