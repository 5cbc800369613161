"""The release pipeline.

Stages run strictly in order and never re-enter an earlier one:

1. normalize the version argument
2. preflight (read-only)
3. changelog + version bump, build, commit, push the branch
4. tag and push the tag (point of no return: this starts the CI workflow)
5. locate the CI run for the tag and wait for it
6. optional registry publish, then force-move the floating major tag

Any failure ends the run. Nothing is rolled back; whatever was done before
the failure is left for the operator to inspect.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from time import sleep as _sleep
from typing import Literal

from relctl.core.config import ReleaseConfig
from relctl.core.result import Err, Ok, Result
from relctl.git.repository import Repository
from relctl.output.console import ConsoleProtocol, Style
from relctl.output.prompt import ConfirmProtocol
from relctl.services.release.build_tool import CommandBuildTool
from relctl.services.release.changelog import update_changelog
from relctl.services.release.contracts import BuildTool, CiHost, VersionControl
from relctl.services.release.errors import MutationError, PublishError, ReleaseError
from relctl.services.release.gh import GhCli
from relctl.services.release.preflight import PreflightReport, Which, run_preflight
from relctl.services.release.request import ReleaseRequest, parse_release_request
from relctl.services.release.retry import Sleep
from relctl.services.release.version_file import bump_version_file
from relctl.services.release.workflow import RunHandle, locate_release_run, wait_for_conclusion

PublishOutcome = Literal["published", "skipped", "failed"]


def commit_message(version: str) -> str:
    return f"Prepare release {version}"


@dataclass(frozen=True, slots=True)
class ReleaseSummary:
    request: ReleaseRequest
    run: RunHandle
    publish: PublishOutcome
    release_url: str | None = None
    package_url: str | None = None


@dataclass(slots=True)
class ReleasePipeline:
    """Drives one release through every stage.

    Attributes:
        repo_root: Repository checkout being released.
        config: Release settings.
        vcs: Git collaborator.
        ci: CI host collaborator (gh).
        build_tool: Package build tool collaborator.
        console: Operator output.
        confirm: Yes/no prompt for the optional registry publish.
        which: Tool lookup used by preflight.
        sleep: Sleep used by the run locator.
        today: Date written into the changelog.
    """

    repo_root: Path
    config: ReleaseConfig
    vcs: VersionControl
    ci: CiHost
    build_tool: BuildTool
    console: ConsoleProtocol
    confirm: ConfirmProtocol
    which: Which = shutil.which
    sleep: Sleep = _sleep
    today: Callable[[], date] = field(default=date.today)

    def run(self, raw_version: str | None) -> Result[ReleaseSummary, ReleaseError]:
        parsed = parse_release_request(raw_version)
        if isinstance(parsed, Err):
            return parsed
        request = parsed.value

        self.console.header(f"Releasing {request.tag}")

        report = self.preflight(request)
        failure = report.to_error()
        if failure is not None:
            return Err(failure)

        prepared = self.prepare_commit(request)
        if isinstance(prepared, Err):
            return prepared

        tagged = self.push_tag(request)
        if isinstance(tagged, Err):
            return tagged

        run = self.confirm_workflow(request)
        if isinstance(run, Err):
            return run

        return self.finalize(request, run.value)

    def preflight(self, request: ReleaseRequest) -> PreflightReport:
        report = run_preflight(
            request=request,
            config=self.config,
            repo_root=self.repo_root,
            vcs=self.vcs,
            which=self.which,
        )
        for check in report.checks:
            if check.ok:
                self.console.print(f"preflight {check.name}: {check.message}", Style.DIM)
        return report

    def prepare_commit(self, request: ReleaseRequest) -> Result[None, MutationError]:
        """Rewrite changelog and version file, build, commit, push the branch."""
        cfg = self.config
        version = request.version

        self.console.step(f"Updating {cfg.changelog}")
        updated = update_changelog(
            self.repo_root / cfg.changelog, version=version, today=self.today()
        )
        if isinstance(updated, Err):
            return updated

        self.console.step(f"Bumping version to {version}")
        bumped = bump_version_file(
            self.repo_root / cfg.build.version_file,
            version=version,
            key=cfg.build.version_key,
        )
        if isinstance(bumped, Err):
            return bumped

        self.console.step("Building and regenerating lockfile")
        built = self.build_tool.build()
        if isinstance(built, Err):
            return Err(
                MutationError(
                    step="build",
                    message=str(built.error),
                    hint=built.error.detail() or "Fix the build; edits are left uncommitted.",
                )
            )

        self.console.step("Committing version bump")
        added = self.vcs.add([cfg.build.version_file, cfg.build.lockfile, cfg.changelog])
        if isinstance(added, Err):
            return Err(MutationError(step="commit", message=added.error.message))

        committed = self.vcs.commit(commit_message(version))
        if isinstance(committed, Err):
            return Err(
                MutationError(
                    step="commit",
                    message=committed.error.message,
                    hint="Configure git user.name/user.email, then retry.",
                )
            )

        pushed = self.vcs.push(cfg.remote, cfg.branch)
        if isinstance(pushed, Err):
            return Err(
                MutationError(
                    step="push",
                    message=f"git push {cfg.remote} {cfg.branch} failed: {pushed.error.message}",
                    hint="The release commit exists locally; no tag was created.",
                )
            )
        return Ok(None)

    def push_tag(self, request: ReleaseRequest) -> Result[None, PublishError]:
        tag = request.tag
        self.console.step(f"Tagging {tag}")

        created = self.vcs.tag(tag)
        if isinstance(created, Err):
            return Err(
                PublishError(tag=tag, message=f"git tag {tag} failed", hint=created.error.message)
            )

        pushed = self.vcs.push(self.config.remote, tag)
        if isinstance(pushed, Err):
            return Err(
                PublishError(
                    tag=tag,
                    message=f"git push {self.config.remote} {tag} failed",
                    hint=pushed.error.message,
                )
            )
        return Ok(None)

    def confirm_workflow(self, request: ReleaseRequest) -> Result[RunHandle, ReleaseError]:
        self.console.step("Waiting for release workflow to start...")
        located = locate_release_run(
            ci=self.ci,
            workflow=self.config.workflow,
            tag=request.tag,
            locator=self.config.locator,
            console=self.console,
            actions_url=self.config.actions_url,
            sleep=self.sleep,
        )
        if isinstance(located, Err):
            return located

        run = located.value
        if run.url is None and self.config.actions_url is not None:
            url = f"{self.config.actions_url}/runs/{run.id}"
            run = RunHandle(id=run.id, branch=run.branch, url=url)

        self.console.step(f"Watching release workflow (run {run.id})...")
        concluded = wait_for_conclusion(ci=self.ci, run=run, console=self.console)
        if isinstance(concluded, Err):
            return concluded

        self.console.success("Release workflow completed successfully")
        return Ok(run)

    def finalize(
        self, request: ReleaseRequest, run: RunHandle
    ) -> Result[ReleaseSummary, ReleaseError]:
        """Optional registry publish, then move the floating major tag.

        Only reached after the CI run concluded with success.
        """
        build = self.config.build
        outcome: PublishOutcome = "skipped"
        if self.confirm(f"Publish to {build.registry}?"):
            self.console.step(f"Publishing to {build.registry}")
            published = self.build_tool.publish()
            if isinstance(published, Err):
                # The release itself is complete; publishing can be redone by hand.
                self.console.warning(f"publish failed: {published.error}")
                self.console.print(f"Retry manually: {' '.join(build.publish)}", Style.DIM)
                outcome = "failed"
            else:
                outcome = "published"

        major = request.major_tag
        self.console.step(f"Updating {major} tag")
        moved = self.vcs.tag(major, request.tag, force=True)
        if isinstance(moved, Err):
            return Err(
                PublishError(
                    tag=major,
                    message=f"git tag -f {major} {request.tag} failed",
                    hint=moved.error.message,
                )
            )
        pushed = self.vcs.push(self.config.remote, major, force=True)
        if isinstance(pushed, Err):
            return Err(
                PublishError(
                    tag=major,
                    message=f"git push -f {self.config.remote} {major} failed",
                    hint=pushed.error.message,
                )
            )

        return Ok(
            ReleaseSummary(
                request=request,
                run=run,
                publish=outcome,
                release_url=self.config.release_url(request.tag),
                package_url=build.package_url(request.version) if outcome == "published" else None,
            )
        )


def build_pipeline(
    *,
    repo_root: Path,
    config: ReleaseConfig,
    console: ConsoleProtocol,
    confirm: ConfirmProtocol,
) -> ReleasePipeline:
    """Wire the pipeline to real git, gh and the configured build tool."""
    return ReleasePipeline(
        repo_root=repo_root,
        config=config,
        vcs=Repository(repo_root),
        ci=GhCli(repo_root=repo_root, repo=config.repo),
        build_tool=CommandBuildTool(
            repo_root=repo_root,
            build_cmd=config.build.build,
            publish_cmd=config.build.publish,
        ),
        console=console,
        confirm=confirm,
    )
