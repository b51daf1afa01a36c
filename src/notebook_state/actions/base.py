"""Lookup helpers shared by the mutation recipes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from ..store import NO_CHANGE
from ..utils import now_iso

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from ..schema import Agenda, Document, Workspace
    from ..store import MutatorResult, NotebookStore

T = TypeVar("T")


def find_by_id(items: Sequence[T], item_id: str | None) -> T | None:
    """Return the first item whose ``id`` equals ``item_id``."""
    for item in items:
        if item["id"] == item_id:  # type: ignore[index]
            return item
    return None


def index_of(items: Sequence[Any], item_id: str | None) -> int:
    """Return the position of ``item_id`` in ``items``, or -1."""
    for index, item in enumerate(items):
        if item["id"] == item_id:
            return index
    return -1


def active_workspace(draft: Document) -> Workspace | None:
    return find_by_id(draft["workspaces"], draft["activeWorkspaceId"])


def locate_agenda(
    draft: Document,
    agenda_id: str,
) -> tuple[Workspace, Agenda] | None:
    """Return the active workspace and its agenda ``agenda_id``, if both exist."""
    workspace = active_workspace(draft)
    if workspace is None:
        return None
    agenda = find_by_id(workspace["agendas"], agenda_id)
    if agenda is None:
        return None
    return workspace, agenda


def touch(workspace: Workspace) -> None:
    workspace["modifiedAt"] = now_iso()


def agenda_transaction(
    store: NotebookStore,
    agenda_id: str,
    change: Callable[[Agenda], bool],
) -> bool:
    """Run ``change`` on an agenda of the active workspace as one transaction.

    ``change`` edits the agenda of the draft in place and returns False to
    abort, in which case nothing is saved or published. The owning workspace
    is touched otherwise.

    Returns:
        Whether the change was applied.

    """
    applied = False

    def mutate(draft: Document) -> MutatorResult:
        nonlocal applied
        located = locate_agenda(draft, agenda_id)
        if located is None:
            return NO_CHANGE
        workspace, agenda = located
        if not change(agenda):
            return NO_CHANGE
        touch(workspace)
        applied = True
        return draft

    store.update(mutate)
    return applied
