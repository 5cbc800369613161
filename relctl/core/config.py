"""Typed release configuration.

Settings are read from an optional ``relctl.toml`` at the repository root.
Every key has a default matching a Rust CLI released through GitHub Actions
and crates.io, so a repository following that layout needs no config file.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeVar

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_int, get_str, get_str_list, get_table

__all__ = [
    "BuildConfig",
    "ConfigError",
    "CONFIG_FILE_NAME",
    "LocatorConfig",
    "ReleaseConfig",
    "load_config",
    "load_config_or_default",
]

T = TypeVar("T")

CONFIG_FILE_NAME = "relctl.toml"

# Locator defaults: give the CI host time to index the run, then poll.
DEFAULT_LOCATOR_ATTEMPTS = 10
DEFAULT_LOCATOR_DELAY_SECONDS = 3.0
DEFAULT_LOCATOR_INITIAL_DELAY_SECONDS = 5.0


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Package build tool and the files it owns."""

    tool: str = "cargo"
    build: tuple[str, ...] = ("cargo", "build")
    publish: tuple[str, ...] = ("cargo", "publish")
    version_file: str = "Cargo.toml"
    version_key: str = "version"
    lockfile: str = "Cargo.lock"
    registry: str = "crates.io"
    registry_url: str | None = None
    package: str | None = None

    def package_url(self, version: str) -> str | None:
        """Registry page for a published version, if configured."""
        if self.registry_url is None:
            return None
        return self.registry_url.format(package=self.package or "", version=version)


@dataclass(frozen=True, slots=True)
class LocatorConfig:
    """Retry budget for discovering the CI run started by a tag push."""

    attempts: int = DEFAULT_LOCATOR_ATTEMPTS
    delay_seconds: float = DEFAULT_LOCATOR_DELAY_SECONDS
    initial_delay_seconds: float = DEFAULT_LOCATOR_INITIAL_DELAY_SECONDS


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Main configuration container.

    Attributes:
        repo: GitHub ``owner/name``; None lets gh infer it from the checkout.
        remote: Git remote that receives the release commit and tags.
        branch: Integration branch the release commit is pushed to.
        workflow: Workflow file started by the tag push.
        changelog: Changelog path, relative to the repository root.
    """

    repo: str | None = None
    remote: str = "origin"
    branch: str = "main"
    workflow: str = "release.yml"
    changelog: str = "CHANGELOG.md"
    build: BuildConfig = field(default_factory=BuildConfig)
    locator: LocatorConfig = field(default_factory=LocatorConfig)

    @property
    def actions_url(self) -> str | None:
        if self.repo is None:
            return None
        return f"https://github.com/{self.repo}/actions"

    def release_url(self, tag: str) -> str | None:
        if self.repo is None:
            return None
        return f"https://github.com/{self.repo}/releases/tag/{tag}"

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Create ReleaseConfig from a mapping (parsed TOML).

        Missing keys take their defaults; a key that is present must have the
        right type.

        Raises:
            ValueError: If a value has the wrong type, or a command list or
                the locator budget is invalid.
        """
        build = _table(data, "build")
        locator = _table(data, "locator")
        defaults = BuildConfig()

        attempts = _typed(locator, "locator.attempts", get_int, "an integer")
        if attempts is not None and attempts < 1:
            raise ValueError("locator.attempts must be at least 1")
        delay = _typed(locator, "locator.delay_seconds", get_float, "a number")
        initial_delay = _typed(locator, "locator.initial_delay_seconds", get_float, "a number")
        if (delay is not None and delay < 0) or (initial_delay is not None and initial_delay < 0):
            raise ValueError("locator delays must not be negative")

        def text(table: Mapping[str, object], key: str, section: str = "") -> str | None:
            return _typed(table, f"{section}{key}", get_str, "a non-empty string")

        return cls(
            repo=text(data, "repo"),
            remote=text(data, "remote") or "origin",
            branch=text(data, "branch") or "main",
            workflow=text(data, "workflow") or "release.yml",
            changelog=text(data, "changelog") or "CHANGELOG.md",
            build=BuildConfig(
                tool=text(build, "tool", "build.") or defaults.tool,
                build=_command(build, "build", defaults.build),
                publish=_command(build, "publish", defaults.publish),
                version_file=text(build, "version_file", "build.") or defaults.version_file,
                version_key=text(build, "version_key", "build.") or defaults.version_key,
                lockfile=text(build, "lockfile", "build.") or defaults.lockfile,
                registry=text(build, "registry", "build.") or defaults.registry,
                registry_url=text(build, "registry_url", "build."),
                package=text(build, "package", "build."),
            ),
            locator=LocatorConfig(
                attempts=attempts if attempts is not None else DEFAULT_LOCATOR_ATTEMPTS,
                delay_seconds=delay if delay is not None else DEFAULT_LOCATOR_DELAY_SECONDS,
                initial_delay_seconds=(
                    initial_delay
                    if initial_delay is not None
                    else DEFAULT_LOCATOR_INITIAL_DELAY_SECONDS
                ),
            ),
        )


def _typed(
    table: Mapping[str, object],
    dotted: str,
    getter: Callable[[Mapping[str, object], str], T | None],
    expected: str,
) -> T | None:
    """Read ``table[key]`` with getter; None only when the key is absent."""
    key = dotted.rsplit(".", 1)[-1]
    if key not in table:
        return None
    value = getter(table, key)
    if value is None:
        raise ValueError(f"{dotted} must be {expected}")
    return value


def _table(data: Mapping[str, object], key: str) -> StrDict:
    if key not in data:
        return {}
    table = get_table(data, key)
    if table is None:
        raise ValueError(f"[{key}] must be a table")
    return table


def _command(table: Mapping[str, object], key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    if key not in table:
        return default
    cmd = get_str_list(table, key)
    if not cmd:
        raise ValueError(f"build.{key} must be a non-empty list of strings")
    return tuple(cmd)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to relctl.toml

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ReleaseConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(repo_root: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load ``relctl.toml`` from repo_root, or defaults if there is none.

    A config file that exists but is broken is still an error.
    """
    path = repo_root / CONFIG_FILE_NAME
    if not path.exists():
        return Ok(ReleaseConfig())
    return load_config(path)
