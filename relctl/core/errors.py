"""Process exit codes for relctl commands.

Usage mistakes are the only failures the operator is expected to fix without
looking at remote state, so they get their own code, 2, the same code typer
uses for bad arguments. The shell release script this tool replaces exited 1
for those too. Everything that goes wrong once the release has started exits
with RELEASE_FAILED and is told apart by its printed message.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable.
    """

    OK = 0
    RELEASE_FAILED = 1
    USAGE_ERROR = 2

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
