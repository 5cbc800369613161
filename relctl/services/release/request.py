"""Release identifier normalization."""

from __future__ import annotations

import re
from dataclasses import dataclass

from relctl.core.result import Err, Ok, Result
from relctl.services.release.errors import UsageError

# Characters git refuses in a tag name, plus the quote that would break the
# version file's ``key = "..."`` line.
_UNSAFE_VERSION = re.compile(r'[\s"\\~^:?*\[\x00-\x1f\x7f]|\.\.|@\{')


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """A normalized release version.

    Attributes:
        raw: The version exactly as the operator typed it.
        version: ``raw`` without one leading ``v``/``V``; never empty.
    """

    raw: str
    version: str

    @property
    def tag(self) -> str:
        return f"v{self.version}"

    @property
    def major_tag(self) -> str:
        """Floating major tag: ``v`` plus everything before the first dot."""
        return f"v{self.version.split('.', 1)[0]}"


def normalize_version(raw: str) -> str:
    """Strip at most one leading ``v``/``V``."""
    if raw[:1] in ("v", "V"):
        return raw[1:]
    return raw


def parse_release_request(raw: str | None) -> Result[ReleaseRequest, UsageError]:
    if raw is None or not raw.strip():
        return Err(UsageError(message="missing version argument"))

    raw = raw.strip()
    version = normalize_version(raw)
    if not version:
        return Err(UsageError(message=f"invalid version: {raw!r}"))
    if _UNSAFE_VERSION.search(version) or version.endswith((".", ".lock")):
        return Err(UsageError(message=f"version cannot be used as a tag: {raw!r}"))

    return Ok(ReleaseRequest(raw=raw, version=version))
