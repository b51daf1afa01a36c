"""Workspace recipes: create, rename, delete and select."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..sanitizers import sanitize_string
from ..schema import MAX_CONTAINER_NAME_LENGTH, Workspace
from ..store import NO_CHANGE
from ..utils import generate_id, now_iso
from .base import find_by_id, index_of

if TYPE_CHECKING:
    from ..schema import Document
    from ..store import MutatorResult, NotebookStore


def create_workspace(store: NotebookStore, name: str) -> str | None:
    """Append a new empty workspace.

    The new workspace becomes active when no workspace is active yet.

    Returns:
        The new workspace id, or None if ``name`` is blank.

    """
    clean_name = sanitize_string(name, MAX_CONTAINER_NAME_LENGTH)
    if not clean_name:
        return None

    timestamp = now_iso()
    workspace: Workspace = {
        "id": generate_id(),
        "name": clean_name,
        "createdAt": timestamp,
        "modifiedAt": timestamp,
        "agendas": [],
    }

    def mutate(draft: Document) -> MutatorResult:
        draft["workspaces"].append(workspace)
        if draft["activeWorkspaceId"] is None:
            draft["activeWorkspaceId"] = workspace["id"]
        return draft

    store.update(mutate)
    return workspace["id"]


def rename_workspace(store: NotebookStore, workspace_id: str, name: str) -> bool:
    clean_name = sanitize_string(name, MAX_CONTAINER_NAME_LENGTH)
    if not clean_name:
        return False
    changed = False

    def mutate(draft: Document) -> MutatorResult:
        nonlocal changed
        workspace = find_by_id(draft["workspaces"], workspace_id)
        if workspace is None:
            return NO_CHANGE
        workspace["name"] = clean_name
        workspace["modifiedAt"] = now_iso()
        changed = True
        return draft

    store.update(mutate)
    return changed


def delete_workspace(store: NotebookStore, workspace_id: str) -> bool:
    """Remove a workspace; deleting the active one clears the selection."""
    changed = False

    def mutate(draft: Document) -> MutatorResult:
        nonlocal changed
        position = index_of(draft["workspaces"], workspace_id)
        if position == -1:
            return NO_CHANGE
        del draft["workspaces"][position]
        if draft["activeWorkspaceId"] == workspace_id:
            draft["activeWorkspaceId"] = None
            draft["activeAgendaId"] = None
        changed = True
        return draft

    store.update(mutate)
    return changed


def select_workspace(store: NotebookStore, workspace_id: str | None) -> bool:
    """Make ``workspace_id`` active (None deselects) and clear the agenda."""
    changed = False

    def mutate(draft: Document) -> MutatorResult:
        nonlocal changed
        if workspace_id is not None and find_by_id(
            draft["workspaces"], workspace_id
        ) is None:
            return NO_CHANGE
        changed = True
        return {"activeWorkspaceId": workspace_id, "activeAgendaId": None}

    store.update(mutate)
    return changed
