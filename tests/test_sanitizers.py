"""Tests for the field sanitizers."""

import math

import pytest

from notebook_state.sanitizers import (
    coerce_bool,
    coerce_enum,
    coerce_number,
    is_number,
    is_valid_date,
    is_valid_id,
    sanitize_date,
    sanitize_metrics,
    sanitize_optional_date,
    sanitize_string,
    sanitize_tags,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (1, True),
        (10**400, True),
        (2.5, True),
        (True, False),
        (math.nan, False),
        ("1", False),
    ],
)
def test_is_number(value: object, expected: bool) -> None:  # noqa: FBT001
    assert is_number(value) is expected


def test_is_valid_id_bounds() -> None:
    assert is_valid_id("x")
    assert is_valid_id("x" * 99)
    assert not is_valid_id("x" * 100)
    assert not is_valid_id("")
    assert not is_valid_id(42)


def test_is_valid_date() -> None:
    assert is_valid_date("2024-03-01T10:00:00.000Z")
    assert is_valid_date("2024-03-01")
    assert is_valid_date("2024")
    assert is_valid_date(" 2024-03 ")
    assert not is_valid_date("2024-13")
    assert not is_valid_date("Jan 1 2024")
    assert not is_valid_date("yesterday")
    assert not is_valid_date("1700000000")
    assert not is_valid_date("")
    assert not is_valid_date(1700000000)


def test_sanitize_string_trims_caps_and_defaults() -> None:
    assert sanitize_string("  hello  ", 10) == "hello"
    assert sanitize_string("abcdef", 3) == "abc"
    assert sanitize_string("ab cd", 3) == "ab"
    assert sanitize_string(None, 10) == ""
    assert sanitize_string("   ", 10, "fallback") == "fallback"
    assert sanitize_string(12, 10, "fallback") == "fallback"


def test_coercions() -> None:
    assert coerce_number(3, None) == 3
    assert coerce_number("3", None) is None
    assert coerce_bool(True) is True
    assert coerce_bool("yes") is False
    assert coerce_enum("high", ("low", "high"), "low") == "high"
    assert coerce_enum("urgent", ("low", "high"), "low") == "low"


def test_dates_keep_original_string() -> None:
    now = "2025-01-01T00:00:00.000Z"
    assert sanitize_date("2024-02-02T01:02:03Z", now) == "2024-02-02T01:02:03Z"
    assert sanitize_date("garbage", now) == now
    assert sanitize_optional_date("") is None
    assert sanitize_optional_date("2024-02-02") == "2024-02-02"


def test_sanitize_tags() -> None:
    tags = sanitize_tags([" python ", "python", "", "x" * 50, 3, "async"])
    assert tags == ["python", "async"]
    assert sanitize_tags("python") == []


def test_sanitize_metrics() -> None:
    metrics = sanitize_metrics(
        {"focusDays": 3.7, "incidentsResolved": -2, "deepWorkDays": "4", "evil": 9}
    )
    assert metrics == {"focusDays": 3, "incidentsResolved": 0}
    assert sanitize_metrics(None) == {}
