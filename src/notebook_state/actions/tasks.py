"""Task recipes: Kanban placement and the active/finalized/deleted lifecycle.

A task id lives in exactly one of ``tasks``, ``finalizedTasks`` and
``deletedTasks``. While active it is listed in at most one column.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..sanitizers import (
    coerce_enum,
    sanitize_optional_date,
    sanitize_string,
)
from ..schema import (
    BACKLOG_COLUMN_TITLE,
    DEFAULT_COLUMN_ID,
    DEFAULT_PRIORITY,
    MAX_TASK_DESCRIPTION_LENGTH,
    MAX_TITLE_LENGTH,
    PRIORITIES,
    Task,
)
from ..utils import generate_id, now_iso, now_ms
from .base import agenda_transaction, find_by_id, index_of

if TYPE_CHECKING:
    from ..schema import Agenda, Column
    from ..store import NotebookStore


def _ensure_backlog(agenda: Agenda) -> Column:
    """Return the backlog column, inserting it first when missing."""
    backlog = find_by_id(agenda["columns"], DEFAULT_COLUMN_ID)
    if backlog is None:
        backlog = {
            "id": DEFAULT_COLUMN_ID,
            "title": BACKLOG_COLUMN_TITLE,
            "taskIds": [],
        }
        agenda["columns"].insert(0, backlog)
    return backlog


def _unplace(agenda: Agenda, task_id: str) -> None:
    for column in agenda["columns"]:
        if task_id in column["taskIds"]:
            column["taskIds"] = [i for i in column["taskIds"] if i != task_id]


def _pop_task(tasks: list[Task], task_id: str) -> Task | None:
    position = index_of(tasks, task_id)
    return tasks.pop(position) if position != -1 else None


def create_task(
    store: NotebookStore,
    agenda_id: str,
    title: str,
    description: str = "",
    priority: str = DEFAULT_PRIORITY,
    due_date: str | None = None,
) -> str | None:
    """Add a task to the backlog lane.

    Returns:
        The new task id, or None if ``title`` is blank or the agenda is not
        in the active workspace.

    """
    clean_title = sanitize_string(title, MAX_TITLE_LENGTH)
    if not clean_title:
        return None

    task: Task = {
        "id": generate_id(),
        "title": clean_title,
        "description": sanitize_string(description, MAX_TASK_DESCRIPTION_LENGTH),
        "priority": coerce_enum(  # type: ignore[typeddict-item]
            priority, PRIORITIES, DEFAULT_PRIORITY
        ),
        "dueDate": sanitize_optional_date(due_date),
        "columnId": DEFAULT_COLUMN_ID,
        "createdAt": now_iso(),
        "isFinalized": False,
        "isDeleted": False,
        "finalizedAt": None,
        "deletedAt": None,
    }

    def change(agenda: Agenda) -> bool:
        agenda["tasks"].append(task)
        _ensure_backlog(agenda)["taskIds"].append(task["id"])
        return True

    created = agenda_transaction(store, agenda_id, change)
    return task["id"] if created else None


def move_task(
    store: NotebookStore,
    agenda_id: str,
    task_id: str,
    target_column_id: str,
    index: int | None = None,
) -> bool:
    """Move an active task to ``target_column_id`` at ``index``.

    An index that is None or out of range appends to the column.
    """

    def change(agenda: Agenda) -> bool:
        task = find_by_id(agenda["tasks"], task_id)
        if target_column_id == DEFAULT_COLUMN_ID:
            _ensure_backlog(agenda)
        target = find_by_id(agenda["columns"], target_column_id)
        if task is None or target is None:
            return False

        _unplace(agenda, task_id)
        task_ids = target["taskIds"]
        position = len(task_ids)
        if index is not None and 0 <= index <= len(task_ids):
            position = index
        task_ids.insert(position, task_id)
        task["columnId"] = target_column_id
        return True

    return agenda_transaction(store, agenda_id, change)


def update_task(
    store: NotebookStore,
    agenda_id: str,
    task_id: str,
    updates: Mapping[str, Any],
) -> bool:
    """Edit ``title``, ``description``, ``priority`` or ``dueDate``.

    Other keys are ignored; placement changes go through :func:`move_task`.
    """

    def change(agenda: Agenda) -> bool:
        task = find_by_id(agenda["tasks"], task_id)
        if task is None:
            return False
        if "title" in updates:
            title = sanitize_string(updates["title"], MAX_TITLE_LENGTH)
            if title:
                task["title"] = title
        if "description" in updates:
            task["description"] = sanitize_string(
                updates["description"], MAX_TASK_DESCRIPTION_LENGTH
            )
        if "priority" in updates:
            task["priority"] = coerce_enum(  # type: ignore[typeddict-item]
                updates["priority"], PRIORITIES, task["priority"]
            )
        if "dueDate" in updates:
            task["dueDate"] = sanitize_optional_date(updates["dueDate"])
        return True

    return agenda_transaction(store, agenda_id, change)


def delete_task(store: NotebookStore, agenda_id: str, task_id: str) -> bool:
    """Remove an active task outright, without archiving it."""

    def change(agenda: Agenda) -> bool:
        if _pop_task(agenda["tasks"], task_id) is None:
            return False
        _unplace(agenda, task_id)
        return True

    return agenda_transaction(store, agenda_id, change)


def finalize_task(store: NotebookStore, agenda_id: str, task_id: str) -> bool:
    """Move an active task to ``finalizedTasks``."""

    def change(agenda: Agenda) -> bool:
        task = _pop_task(agenda["tasks"], task_id)
        if task is None:
            return False
        _unplace(agenda, task_id)
        task["isFinalized"] = True
        task["finalizedAt"] = now_ms()
        agenda["finalizedTasks"].append(task)
        return True

    return agenda_transaction(store, agenda_id, change)


def recycle_task(store: NotebookStore, agenda_id: str, task_id: str) -> bool:
    """Move an active or finalized task to ``deletedTasks``."""

    def change(agenda: Agenda) -> bool:
        task = _pop_task(agenda["tasks"], task_id)
        if task is not None:
            _unplace(agenda, task_id)
        else:
            task = _pop_task(agenda["finalizedTasks"], task_id)
        if task is None:
            return False
        task["isDeleted"] = True
        task["deletedAt"] = now_ms()
        agenda["deletedTasks"].append(task)
        return True

    return agenda_transaction(store, agenda_id, change)


def restore_task(store: NotebookStore, agenda_id: str, task_id: str) -> bool:
    """Bring a deleted task back to the end of the backlog lane."""

    def change(agenda: Agenda) -> bool:
        task = _pop_task(agenda["deletedTasks"], task_id)
        if task is None:
            return False
        task.update(
            columnId=DEFAULT_COLUMN_ID,
            isFinalized=False,
            isDeleted=False,
            finalizedAt=None,
            deletedAt=None,
        )
        agenda["tasks"].append(task)
        _ensure_backlog(agenda)["taskIds"].append(task_id)
        return True

    return agenda_transaction(store, agenda_id, change)


def permanent_delete_task(
    store: NotebookStore,
    agenda_id: str,
    task_id: str,
) -> bool:
    """Drop a task from ``deletedTasks`` for good."""

    def change(agenda: Agenda) -> bool:
        return _pop_task(agenda["deletedTasks"], task_id) is not None

    return agenda_transaction(store, agenda_id, change)
