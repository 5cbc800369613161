from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

import pytest

from relctl.core.result import Err, Ok, Result
from relctl.output.console import MockConsole
from relctl.platform.process import ProcessError
from relctl.services.release.secrets import (
    SecretField,
    SecretGroup,
    collect_secrets,
    store_secrets,
    tokens_are_well_formed,
)

from .fakes import FakeConfirm


class ScriptedAnswers:
    def __init__(self, *answers: str) -> None:
        self.answers = list(answers)
        self.asked: list[tuple[str, bool]] = []

    def __call__(self, label: str, hidden: bool) -> str:
        self.asked.append((label, hidden))
        return self.answers.pop(0)


@dataclass
class FakeStore:
    fail_on: str | None = None
    stored: list[tuple[str, str]] = field(default_factory=list)

    def set_secret(self, name: str, value: str) -> Result[None, ProcessError]:
        if name == self.fail_on:
            return Err(ProcessError(("gh", "secret", "set"), 1, "", "HTTP 403"))
        self.stored.append((name, value))
        return Ok(None)


def _groups(*texts: str) -> list[SecretGroup]:
    return [SecretGroup.parse(t) for t in texts]


class TestSecretGroup:
    def test_parse_pair(self) -> None:
        group = SecretGroup.parse("REGISTRY_USER, REGISTRY_PASSWORD")

        assert group.fields == (
            SecretField(name="REGISTRY_USER", hidden=False),
            SecretField(name="REGISTRY_PASSWORD", hidden=True),
        )
        assert group.label == "REGISTRY_USER, REGISTRY_PASSWORD"

    @pytest.mark.parametrize("name", ["CARGO_TOKEN", "api_key", "CLIENT_SECRET"])
    def test_credential_names_are_hidden(self, name: str) -> None:
        assert SecretField.named(name).hidden

    @pytest.mark.parametrize("text", ["A,,B", ",", "A,A"])
    def test_parse_rejects_bad_input(self, text: str) -> None:
        with pytest.raises(ValueError):
            SecretGroup.parse(text)

    @pytest.mark.parametrize(
        ("values", "ok"),
        [
            ({"CARGO_TOKEN": "abc123"}, True),
            ({"CARGO_TOKEN": "abc 123"}, False),
            ({"API_KEY": "abc\n123"}, False),
            ({"USER": "Jane Doe", "PASSWORD": "two words"}, True),
        ],
    )
    def test_tokens_are_well_formed(self, values: dict[str, str], ok: bool) -> None:
        assert tokens_are_well_formed(values) is ok


class TestCollectSecrets:
    def test_collects_in_order(self) -> None:
        ask = ScriptedAnswers("alice", "pw", "tok")

        collected = collect_secrets(
            _groups("USER,PASSWORD", "CARGO_TOKEN"),
            ask=ask,
            confirm=FakeConfirm(),
            console=MockConsole(),
        )

        assert list(collected.items()) == [
            ("USER", "alice"),
            ("PASSWORD", "pw"),
            ("CARGO_TOKEN", "tok"),
        ]
        assert ask.asked[0] == ("USER (blank to skip)", False)
        assert ask.asked[1] == ("PASSWORD", True)

    def test_blank_first_value_skips_group(self) -> None:
        ask = ScriptedAnswers("", "tok")

        collected = collect_secrets(
            _groups("USER,PASSWORD", "CARGO_TOKEN"),
            ask=ask,
            confirm=FakeConfirm(),
            console=MockConsole(),
        )

        assert collected == {"CARGO_TOKEN": "tok"}
        assert len(ask.asked) == 2

    def test_incomplete_group_is_dropped(self) -> None:
        console = MockConsole()

        collected = collect_secrets(
            _groups("USER,PASSWORD"),
            ask=ScriptedAnswers("alice", ""),
            confirm=FakeConfirm(),
            console=console,
        )

        assert collected == {}
        assert console.find("Skipping USER, PASSWORD.")

    def test_rejected_group_kept_only_when_confirmed(self) -> None:
        def validate(values: Mapping[str, str]) -> bool:
            return values.get("PASSWORD") == "correct"

        confirm = FakeConfirm(answer=False)
        console = MockConsole()

        collected = collect_secrets(
            _groups("USER,PASSWORD", "USER2,PASSWORD2"),
            ask=ScriptedAnswers("alice", "wrong", "bob", "pw"),
            confirm=confirm,
            console=console,
            validate=validate,
        )

        assert collected == {}
        assert confirm.questions == ["Keep these values anyway?"] * 2
        assert console.has_warning()

    def test_rejected_group_kept_on_yes(self) -> None:
        collected = collect_secrets(
            _groups("CARGO_TOKEN"),
            ask=ScriptedAnswers("tok"),
            confirm=FakeConfirm(answer=True),
            console=MockConsole(),
            validate=lambda values: False,
        )

        assert collected == {"CARGO_TOKEN": "tok"}

    def test_accepted_group_skips_confirmation(self) -> None:
        confirm = FakeConfirm()
        console = MockConsole()

        collect_secrets(
            _groups("CARGO_TOKEN"),
            ask=ScriptedAnswers("tok"),
            confirm=confirm,
            console=console,
            validate=lambda values: True,
        )

        assert confirm.questions == []
        assert console.find("OK CARGO_TOKEN: credentials are valid")


class TestStoreSecrets:
    def test_stores_all(self) -> None:
        store = FakeStore()

        result = store_secrets({"A": "1", "B": "2"}, store=store, console=MockConsole())

        assert result == Ok(["A", "B"])
        assert store.stored == [("A", "1"), ("B", "2")]

    def test_stops_at_first_failure(self) -> None:
        store = FakeStore(fail_on="B")

        result = store_secrets({"A": "1", "B": "2", "C": "3"}, store=store, console=MockConsole())

        assert isinstance(result, Err)
        assert store.stored == [("A", "1")]
