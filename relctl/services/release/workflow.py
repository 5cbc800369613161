"""Find the CI run started by a tag push, then wait for its conclusion.

The CI host indexes runs asynchronously, so right after ``git push <tag>``
the run list may not contain the new run yet. The locator polls with a fixed
budget; the watcher delegates the wait to ``gh run watch``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from time import sleep as _sleep

from relctl.core.config import LocatorConfig
from relctl.core.result import Err, Ok, Result
from relctl.core.structured import as_obj_list, as_str_dict, get_int, get_str
from relctl.output.console import ConsoleProtocol, Style
from relctl.services.release.contracts import CiHost
from relctl.services.release.errors import ReleaseWorkflowFailedError, RunNotFoundError
from relctl.services.release.retry import RetryOutcome, Sleep, retry_until

SUCCESS_CONCLUSION = "success"
UNKNOWN_CONCLUSION = "unknown"


@dataclass(frozen=True, slots=True)
class RunHandle:
    id: int
    branch: str
    url: str | None = None


def find_tag_run(payload: str, *, tag: str) -> RunHandle | None:
    """First run in a ``gh run list`` payload whose head branch is exactly ``tag``.

    The ``--branch`` filter is applied server-side as well; this check guards
    against approximate matching. Malformed payloads yield no match.
    """
    try:
        obj: object = json.loads(payload)
    except json.JSONDecodeError:
        return None

    raw = as_obj_list(obj)
    if raw is None:
        return None

    for item in raw:
        d = as_str_dict(item)
        if d is None:
            continue
        run_id = get_int(d, "databaseId")
        if run_id is None or get_str(d, "headBranch") != tag:
            continue
        return RunHandle(id=run_id, branch=tag, url=get_str(d, "url"))

    return None


def locate_release_run(
    *,
    ci: CiHost,
    workflow: str,
    tag: str,
    locator: LocatorConfig,
    console: ConsoleProtocol,
    actions_url: str | None = None,
    sleep: Sleep = _sleep,
) -> Result[RunHandle, RunNotFoundError]:
    """Poll the CI host until the run for ``tag`` appears.

    A failed ``gh run list`` counts as "not indexed yet" for that attempt.
    Exhausting the budget is final: the tag is already public, only the
    confirmation failed.
    """

    def attempt() -> RunHandle | None:
        listed = ci.list_runs(workflow=workflow, branch=tag)
        if isinstance(listed, Err):
            console.print(f"run lookup failed: {listed.error}", Style.DIM)
            return None
        return find_tag_run(listed.value, tag=tag)

    outcome: RetryOutcome[RunHandle | None] = retry_until(
        attempt,
        lambda run: run is not None,
        attempts=locator.attempts,
        delay=locator.delay_seconds,
        initial_delay=locator.initial_delay_seconds,
        sleep=sleep,
    )
    if outcome.value is None:
        return Err(RunNotFoundError(tag=tag, attempts=outcome.attempts, actions_url=actions_url))
    return Ok(outcome.value)


def wait_for_conclusion(
    *,
    ci: CiHost,
    run: RunHandle,
    console: ConsoleProtocol,
) -> Result[str, ReleaseWorkflowFailedError]:
    """Block until the run finishes and require a ``success`` conclusion."""
    watched = ci.watch_run(run.id)
    if isinstance(watched, Err):
        # The conclusion below is authoritative; a broken watch stream is not.
        console.warning(f"gh run watch ended abnormally: {watched.error}")

    viewed = ci.run_conclusion(run.id)
    if isinstance(viewed, Err):
        console.print(f"run view failed: {viewed.error}", Style.DIM)
        conclusion = UNKNOWN_CONCLUSION
    else:
        conclusion = viewed.value or UNKNOWN_CONCLUSION

    if conclusion != SUCCESS_CONCLUSION:
        return Err(
            ReleaseWorkflowFailedError(run_id=run.id, conclusion=conclusion, run_url=run.url)
        )
    return Ok(conclusion)
