from __future__ import annotations

from pathlib import Path

from relctl.core.result import Result
from relctl.platform.process import ProcessError, run_streaming
from relctl.services.release.timeouts import BUILD_TIMEOUT_SECONDS, PUBLISH_TIMEOUT_SECONDS


class CommandBuildTool:
    """Build tool driven by two configured commands (``cargo build``/``cargo publish``).

    Output is streamed so the operator sees compiler and upload progress.
    """

    def __init__(
        self,
        *,
        repo_root: Path,
        build_cmd: tuple[str, ...],
        publish_cmd: tuple[str, ...],
    ) -> None:
        self.repo_root = repo_root
        self.build_cmd = build_cmd
        self.publish_cmd = publish_cmd

    def build(self) -> Result[None, ProcessError]:
        return run_streaming(
            list(self.build_cmd), cwd=self.repo_root, timeout=BUILD_TIMEOUT_SECONDS
        )

    def publish(self) -> Result[None, ProcessError]:
        return run_streaming(
            list(self.publish_cmd), cwd=self.repo_root, timeout=PUBLISH_TIMEOUT_SECONDS
        )
