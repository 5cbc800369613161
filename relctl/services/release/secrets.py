"""Collect credentials and store them as GitHub Actions secrets.

Values are grouped (an account name and its password belong together). A
group is added to the collected mapping only once every value in it has been
read and, when a validator is given, accepted. Nothing is inserted
speculatively and removed later.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass

from relctl.core.result import Err, Ok, Result
from relctl.output.console import ConsoleProtocol, Style
from relctl.output.prompt import ConfirmProtocol
from relctl.platform.process import ProcessError
from relctl.services.release.contracts import SecretStore

_HIDDEN_MARKERS = ("TOKEN", "PASSWORD", "SECRET", "KEY")
_TOKEN_MARKERS = ("TOKEN", "KEY")

Ask = Callable[[str, bool], str]
Validate = Callable[[Mapping[str, str]], bool]


@dataclass(frozen=True, slots=True)
class SecretField:
    name: str
    hidden: bool

    @classmethod
    def named(cls, name: str) -> SecretField:
        """Hide input for names that look like credentials."""
        upper = name.upper()
        return cls(name=name, hidden=any(m in upper for m in _HIDDEN_MARKERS))


@dataclass(frozen=True, slots=True)
class SecretGroup:
    fields: tuple[SecretField, ...]

    @property
    def label(self) -> str:
        return ", ".join(f.name for f in self.fields)

    @classmethod
    def parse(cls, text: str) -> SecretGroup:
        """Parse ``NAME`` or ``NAME1,NAME2`` into a group.

        Raises:
            ValueError: If text contains an empty or duplicated name.
        """
        names = [n.strip() for n in text.split(",")]
        if any(not n for n in names):
            raise ValueError(f"empty secret name in {text!r}")
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate secret name in {text!r}")
        return cls(fields=tuple(SecretField.named(n) for n in names))


def tokens_are_well_formed(values: Mapping[str, str]) -> bool:
    """Tokens and keys must not contain whitespace."""
    for name, value in values.items():
        upper = name.upper()
        if any(m in upper for m in _TOKEN_MARKERS) and any(c.isspace() for c in value):
            return False
    return True


def collect_secrets(
    groups: list[SecretGroup],
    *,
    ask: Ask,
    confirm: ConfirmProtocol,
    console: ConsoleProtocol,
    validate: Validate | None = None,
) -> dict[str, str]:
    """Prompt for every group and return the accepted values in order.

    A blank first value skips the whole group. A blank later value drops the
    group as incomplete. A group the validator rejects is kept only if the
    operator says so.
    """
    collected: dict[str, str] = {}
    for group in groups:
        console.header(group.label)
        values: dict[str, str] = {}
        for index, secret in enumerate(group.fields):
            hint = " (blank to skip)" if index == 0 else ""
            value = ask(f"{secret.name}{hint}", secret.hidden)
            if not value:
                break
            values[secret.name] = value

        if len(values) != len(group.fields):
            console.print(f"Skipping {group.label}.", Style.DIM)
            continue

        if validate is not None:
            if validate(values):
                console.success(f"{group.label}: credentials are valid")
            else:
                console.warning(f"{group.label}: validation failed")
                if not confirm("Keep these values anyway?"):
                    continue

        collected.update(values)
    return collected


def store_secrets(
    secrets: Mapping[str, str],
    *,
    store: SecretStore,
    console: ConsoleProtocol,
) -> Result[list[str], ProcessError]:
    """Store each secret in order, stopping at the first failure."""
    stored: list[str] = []
    for name, value in secrets.items():
        result = store.set_secret(name, value)
        if isinstance(result, Err):
            return result
        console.success(f"Set {name}")
        stored.append(name)
    return Ok(stored)
