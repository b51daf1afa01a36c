"""Pure, total field sanitizers used by the document validator.

Every function here accepts any value and returns a safe value of the
expected type; none of them raise.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .schema import MAX_ID_LENGTH, MAX_TAG_LENGTH, METRIC_KEYS

_DATE_ADAPTERS = (TypeAdapter(datetime), TypeAdapter(date))
# ISO-8601 reduced precision: "2024" and "2024-03".
_REDUCED_ISO_DATE = re.compile(r"\d{4}(-(0[1-9]|1[0-2]))?")


def is_number(value: Any) -> bool:  # noqa: ANN401
    """Return True for finite ints and floats (booleans excluded)."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return isinstance(value, int) or math.isfinite(value)


def is_valid_id(value: Any) -> bool:  # noqa: ANN401
    """Return True if ``value`` is a non-empty string under the id length cap."""
    return isinstance(value, str) and 0 < len(value) < MAX_ID_LENGTH


def is_valid_date(value: Any) -> bool:  # noqa: ANN401
    """Return True if ``value`` is an ISO-8601 date or datetime string.

    A bare year or year-month counts. Free-form dates such as
    ``"Jan 1 2024"`` do not.

    Args:
        value: Candidate value read from an untrusted document.

    Returns:
        Whether the value parses as a calendar date or timestamp string.

    """
    if not isinstance(value, str) or not value.strip():
        return False
    if _REDUCED_ISO_DATE.fullmatch(value.strip()):
        return True
    # pydantic accepts numeric strings as unix timestamps; those are not dates
    # in the persisted format.
    if value.strip().lstrip("+-").replace(".", "", 1).isdigit():
        return False
    for adapter in _DATE_ADAPTERS:
        try:
            adapter.validate_python(value)
        except ValidationError:
            continue
        return True
    return False


def sanitize_string(value: Any, max_length: int, default: str = "") -> str:  # noqa: ANN401
    """Trim ``value`` and cap it to ``max_length`` characters.

    Non-string values and strings that are empty once trimmed become
    ``default``.
    """
    if not isinstance(value, str):
        return default
    return value.strip()[:max_length].rstrip() or default


def coerce_number(value: Any, default: float | None) -> float | None:  # noqa: ANN401
    return value if is_number(value) else default


def coerce_bool(value: Any, *, default: bool = False) -> bool:  # noqa: ANN401
    return value if isinstance(value, bool) else default


def coerce_enum(value: Any, allowed: Iterable[str], default: str) -> str:  # noqa: ANN401
    """Return ``value`` if it belongs to ``allowed``, otherwise ``default``."""
    return value if isinstance(value, str) and value in allowed else default


def sanitize_date(value: Any, now: str) -> str:  # noqa: ANN401
    """Keep a parseable date string as-is, otherwise substitute ``now``."""
    return value if is_valid_date(value) else now


def sanitize_optional_date(value: Any) -> str | None:  # noqa: ANN401
    """Keep a parseable date string; anything else (including "") is None."""
    return value if is_valid_date(value) else None


def sanitize_reference(value: Any) -> str | None:  # noqa: ANN401
    """Return ``value`` if it looks like an id, otherwise None."""
    return value if is_valid_id(value) else None


def sanitize_tags(value: Any) -> list[str]:  # noqa: ANN401
    """Return trimmed, de-duplicated short tags, preserving first occurrence.

    Args:
        value: Raw ``tags`` field; anything but a list yields ``[]``.

    Returns:
        Tags between 1 and ``MAX_TAG_LENGTH - 1`` characters once trimmed.

    """
    if not isinstance(value, list):
        return []

    tags: list[str] = []
    for raw_tag in value:
        if not isinstance(raw_tag, str):
            continue
        tag = raw_tag.strip()
        if 0 < len(tag) < MAX_TAG_LENGTH and tag not in tags:
            tags.append(tag)
    return tags


def sanitize_metrics(value: Any) -> dict[str, int]:  # noqa: ANN401
    """Keep only allow-listed metric keys, floored to non-negative integers."""
    if not isinstance(value, Mapping):
        return {}

    return {
        key: max(0, math.floor(value[key]))
        for key in METRIC_KEYS
        if is_number(value.get(key))
    }
