"""Tests for relctl.core.result module."""

from __future__ import annotations

import pytest

from relctl.core.result import Err, Ok, Result, is_err, is_ok


def _parse(raw: str) -> Result[int, str]:
    if not raw.isdigit():
        return Err(f"not a number: {raw}")
    return Ok(int(raw))


class TestOk:
    def test_accessors(self) -> None:
        result = Ok(42)
        assert result.is_ok()
        assert not result.is_err()
        assert result.unwrap() == 42
        assert result.unwrap_or(0) == 42

    def test_map(self) -> None:
        assert Ok(2).map(lambda x: x * 10) == Ok(20)

    def test_repr(self) -> None:
        assert repr(Ok("v1")) == "Ok('v1')"


class TestErr:
    def test_accessors(self) -> None:
        result: Err[str] = Err("boom")
        assert result.is_err()
        assert not result.is_ok()
        assert result.unwrap_or(7) == 7

    def test_unwrap_raises(self) -> None:
        with pytest.raises(ValueError, match="boom"):
            Err("boom").unwrap()

    def test_map_is_noop(self) -> None:
        err: Err[str] = Err("boom")
        assert err.map(lambda x: x) is err


class TestPatternMatching:
    def test_match_ok(self) -> None:
        match _parse("12"):
            case Ok(value):
                assert value == 12
            case Err(_):
                pytest.fail("expected Ok")

    def test_match_err(self) -> None:
        match _parse("x"):
            case Ok(_):
                pytest.fail("expected Err")
            case Err(error):
                assert error == "not a number: x"

    def test_type_guards(self) -> None:
        assert is_ok(_parse("1"))
        assert is_err(_parse("x"))
