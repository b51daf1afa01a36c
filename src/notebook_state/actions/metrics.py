"""Agenda counters, restricted to the allow-listed metric keys."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from ..sanitizers import is_number
from ..schema import METRIC_KEYS
from .base import agenda_transaction

if TYPE_CHECKING:
    from ..schema import Agenda
    from ..store import NotebookStore


def set_metric(store: NotebookStore, agenda_id: str, key: str, value: float) -> bool:
    """Set ``key`` to ``value`` floored and clamped at zero."""
    if key not in METRIC_KEYS or not is_number(value):
        return False

    def change(agenda: Agenda) -> bool:
        agenda["metrics"][key] = max(0, math.floor(value))
        return True

    return agenda_transaction(store, agenda_id, change)


def increment_metric(store: NotebookStore, agenda_id: str, key: str) -> bool:
    if key not in METRIC_KEYS:
        return False

    def change(agenda: Agenda) -> bool:
        agenda["metrics"][key] = agenda["metrics"].get(key, 0) + 1
        return True

    return agenda_transaction(store, agenda_id, change)
