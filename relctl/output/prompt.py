"""Yes/no confirmation prompts.

The release pipeline and the secrets setup flow both ask the operator
``[Y/n]`` questions: an empty answer means yes, and any answer starting with
``y``/``Y`` is accepted.
"""

from __future__ import annotations

from typing import Protocol

import typer

__all__ = ["ConfirmProtocol", "answer_is_yes", "ask_secret", "confirm", "fixed_answer"]


class ConfirmProtocol(Protocol):
    def __call__(self, question: str) -> bool: ...


def answer_is_yes(reply: str) -> bool:
    """Interpret a raw reply with default-yes semantics."""
    reply = reply.strip()
    return reply == "" or reply[0] in "yY"


def confirm(question: str) -> bool:
    """Ask the operator a ``[Y/n]`` question on the terminal."""
    reply = typer.prompt(f"{question} [Y/n]", default="", show_default=False)
    return answer_is_yes(reply)


def fixed_answer(answer: bool) -> ConfirmProtocol:
    """A confirm function that never prompts (``--yes`` / ``--no-publish``)."""

    def _answer(question: str) -> bool:
        del question
        return answer

    return _answer


def ask_secret(label: str, *, hidden: bool) -> str:
    """Read one value; blank input returns an empty string."""
    value = typer.prompt(label, default="", show_default=False, hide_input=hidden)
    return value.strip()
