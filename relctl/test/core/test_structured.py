from __future__ import annotations

from relctl.core.errors import ErrorCode
from relctl.core.structured import get_float, get_int, get_str, get_str_list, get_table


def test_get_str_strips_and_rejects_blank() -> None:
    table: dict[str, object] = {"a": "  main ", "b": "   ", "c": 3}
    assert get_str(table, "a") == "main"
    assert get_str(table, "b") is None
    assert get_str(table, "c") is None
    assert get_str(table, "missing") is None


def test_get_int_rejects_bool() -> None:
    assert get_int({"n": 10}, "n") == 10
    assert get_int({"n": True}, "n") is None
    assert get_int({"n": 1.5}, "n") is None


def test_get_float_accepts_int() -> None:
    assert get_float({"d": 3}, "d") == 3.0
    assert get_float({"d": 0.5}, "d") == 0.5
    assert get_float({"d": False}, "d") is None


def test_get_table() -> None:
    assert get_table({"build": {"tool": "npm"}}, "build") == {"tool": "npm"}
    assert get_table({"build": "npm"}, "build") is None


def test_get_str_list() -> None:
    assert get_str_list({"cmd": ["cargo", "build"]}, "cmd") == ["cargo", "build"]
    assert get_str_list({"cmd": ["cargo", 1]}, "cmd") is None
    assert get_str_list({"cmd": ["cargo", ""]}, "cmd") is None
    assert get_str_list({"cmd": "cargo build"}, "cmd") is None


def test_error_codes_are_stable() -> None:
    assert int(ErrorCode.OK) == 0
    assert int(ErrorCode.RELEASE_FAILED) == 1
    assert int(ErrorCode.USAGE_ERROR) == 2
    assert str(ErrorCode.USAGE_ERROR) == "usage error"
