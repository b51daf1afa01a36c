"""Agenda recipes, always scoped to the active workspace."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..sanitizers import sanitize_string
from ..schema import MAX_CONTAINER_NAME_LENGTH, Agenda
from ..store import NO_CHANGE
from ..utils import generate_id, now_iso
from .base import active_workspace, index_of, locate_agenda, touch

if TYPE_CHECKING:
    from ..schema import Column, Document
    from ..store import MutatorResult, NotebookStore

DEFAULT_COLUMNS: tuple[tuple[str, str], ...] = (
    ("todo", "To Do"),
    ("doing", "In Progress"),
    ("done", "Done"),
)


def new_agenda(name: str, agenda_id: str | None = None) -> Agenda:
    """Return an empty agenda with the default Kanban lanes."""
    columns: list[Column] = [
        {"id": column_id, "title": title, "taskIds": []}
        for column_id, title in DEFAULT_COLUMNS
    ]
    return {
        "id": agenda_id or generate_id(),
        "name": name,
        "createdAt": now_iso(),
        "notes": [],
        "tasks": [],
        "columns": columns,
        "journals": [],
        "snippets": [],
        "finalizedTasks": [],
        "deletedTasks": [],
        "metrics": {},
    }


def create_agenda(store: NotebookStore, name: str) -> str | None:
    """Add an agenda to the active workspace.

    Returns:
        The new agenda id, or None if ``name`` is blank or no workspace is
        active.

    """
    clean_name = sanitize_string(name, MAX_CONTAINER_NAME_LENGTH)
    if not clean_name:
        return None
    agenda = new_agenda(clean_name)
    created = False

    def mutate(draft: Document) -> MutatorResult:
        nonlocal created
        workspace = active_workspace(draft)
        if workspace is None:
            return NO_CHANGE
        workspace["agendas"].append(agenda)
        touch(workspace)
        created = True
        return draft

    store.update(mutate)
    return agenda["id"] if created else None


def rename_agenda(store: NotebookStore, agenda_id: str, name: str) -> bool:
    clean_name = sanitize_string(name, MAX_CONTAINER_NAME_LENGTH)
    if not clean_name:
        return False
    changed = False

    def mutate(draft: Document) -> MutatorResult:
        nonlocal changed
        located = locate_agenda(draft, agenda_id)
        if located is None:
            return NO_CHANGE
        workspace, agenda = located
        agenda["name"] = clean_name
        touch(workspace)
        changed = True
        return draft

    store.update(mutate)
    return changed


def delete_agenda(store: NotebookStore, agenda_id: str) -> bool:
    changed = False

    def mutate(draft: Document) -> MutatorResult:
        nonlocal changed
        workspace = active_workspace(draft)
        if workspace is None:
            return NO_CHANGE
        position = index_of(workspace["agendas"], agenda_id)
        if position == -1:
            return NO_CHANGE
        del workspace["agendas"][position]
        touch(workspace)
        if draft["activeAgendaId"] == agenda_id:
            draft["activeAgendaId"] = None
        changed = True
        return draft

    store.update(mutate)
    return changed


def select_agenda(store: NotebookStore, agenda_id: str | None) -> bool:
    """Make ``agenda_id`` of the active workspace active (None deselects)."""
    changed = False

    def mutate(draft: Document) -> MutatorResult:
        nonlocal changed
        if agenda_id is not None and locate_agenda(draft, agenda_id) is None:
            return NO_CHANGE
        changed = True
        return {"activeAgendaId": agenda_id}

    store.update(mutate)
    return changed
