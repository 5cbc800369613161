"""Bounded retry with a fixed delay.

The sleep function is a parameter so callers (and tests) control time.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from time import sleep as _sleep
from typing import Generic, TypeVar

T = TypeVar("T")

Sleep = Callable[[float], None]


@dataclass(frozen=True, slots=True)
class RetryOutcome(Generic[T]):
    """Result of a retry loop.

    Attributes:
        value: The last value produced by the attempt function.
        accepted: Whether ``value`` satisfied the predicate.
        attempts: How many attempts ran.
    """

    value: T
    accepted: bool
    attempts: int


def retry_until(
    attempt: Callable[[], T],
    accept: Callable[[T], bool],
    *,
    attempts: int,
    delay: float,
    initial_delay: float = 0.0,
    sleep: Sleep = _sleep,
) -> RetryOutcome[T]:
    """Call ``attempt`` until ``accept`` returns True or the budget runs out.

    Sleeps ``initial_delay`` once before the first attempt and ``delay``
    between attempts. There is no sleep after the last attempt.

    Raises:
        ValueError: If ``attempts`` is less than 1.
    """
    if attempts < 1:
        raise ValueError(f"attempts must be at least 1, got {attempts}")

    if initial_delay > 0:
        sleep(initial_delay)

    n = 0
    while True:
        n += 1
        value = attempt()
        if accept(value):
            return RetryOutcome(value=value, accepted=True, attempts=n)
        if n >= attempts:
            return RetryOutcome(value=value, accepted=False, attempts=n)
        sleep(delay)
