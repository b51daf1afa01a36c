"""Note and folder recipes.

Notes form a forest through ``parentId``. Every recipe that sets a parent
checks that the parent is a folder of the same agenda, and
:func:`move_item` additionally refuses moves that would make an item its own
ancestor.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..sanitizers import sanitize_string
from ..schema import MAX_NOTE_CONTENT_LENGTH, MAX_TITLE_LENGTH, Note
from ..store import NO_CHANGE
from ..utils import generate_id, now_iso
from .base import find_by_id, locate_agenda, touch

if TYPE_CHECKING:
    from ..schema import Document
    from ..store import MutatorResult, NotebookStore

DEFAULT_NOTE_TITLE = "Untitled Note"
DEFAULT_FOLDER_TITLE = "New Folder"


def _is_folder(notes: list[Note], item_id: str | None) -> bool:
    item = find_by_id(notes, item_id)
    return item is not None and item["type"] == "folder"


def creates_cycle(
    notes: list[Note],
    item_id: str,
    new_parent_id: str | None,
) -> bool:
    """Return True if parenting ``item_id`` under ``new_parent_id`` loops.

    Walks the ancestor chain upward from the proposed parent; the walk is
    bounded by the number of notes so a corrupt chain cannot spin forever.
    """
    parents = {note["id"]: note["parentId"] for note in notes}
    current = new_parent_id
    for _ in range(len(notes) + 1):
        if current is None:
            return False
        if current == item_id:
            return True
        current = parents.get(current)
    return True


def _create_item(
    store: NotebookStore,
    agenda_id: str,
    item: Note,
) -> str | None:
    created = False

    def mutate(draft: Document) -> MutatorResult:
        nonlocal created
        located = locate_agenda(draft, agenda_id)
        if located is None:
            return NO_CHANGE
        workspace, agenda = located
        parent_id = item["parentId"]
        if parent_id is not None and not _is_folder(agenda["notes"], parent_id):
            return NO_CHANGE
        if find_by_id(agenda["notes"], item["id"]) is not None:
            return NO_CHANGE
        agenda["notes"].append(item)
        touch(workspace)
        created = True
        return draft

    store.update(mutate)
    return item["id"] if created else None


def create_note(
    store: NotebookStore,
    agenda_id: str,
    title: str = DEFAULT_NOTE_TITLE,
    content: str = "",
    *,
    note_id: str | None = None,
    parent_id: str | None = None,
) -> str | None:
    """Add a note to an agenda of the active workspace.

    Args:
        store: Store to update.
        agenda_id: Target agenda.
        title: Note title.
        content: Note body.
        note_id: Explicit id; a new one is generated when omitted.
        parent_id: Folder to place the note in, None for the root.

    Returns:
        The note id, or None if the agenda, parent or id was unusable.

    """
    timestamp = now_iso()
    note: Note = {
        "id": note_id or generate_id(),
        "type": "note",
        "title": sanitize_string(title, MAX_TITLE_LENGTH, DEFAULT_NOTE_TITLE),
        "content": sanitize_string(content, MAX_NOTE_CONTENT_LENGTH),
        "parentId": parent_id,
        "createdAt": timestamp,
        "modifiedAt": timestamp,
    }
    return _create_item(store, agenda_id, note)


def create_folder(
    store: NotebookStore,
    agenda_id: str,
    name: str,
    parent_id: str | None = None,
    *,
    folder_id: str | None = None,
) -> str | None:
    timestamp = now_iso()
    folder: Note = {
        "id": folder_id or generate_id(),
        "type": "folder",
        "title": sanitize_string(name, MAX_TITLE_LENGTH, DEFAULT_FOLDER_TITLE),
        "parentId": parent_id,
        "createdAt": timestamp,
        "modifiedAt": timestamp,
    }
    return _create_item(store, agenda_id, folder)


def update_note(
    store: NotebookStore,
    agenda_id: str,
    note_id: str,
    updates: Mapping[str, Any],
) -> bool:
    """Change the title and/or content of a note.

    Keys other than ``title`` and ``content`` are ignored, and folders ignore
    ``content``. Use :func:`move_item` to change the parent.
    """
    changed = False

    def mutate(draft: Document) -> MutatorResult:
        nonlocal changed
        located = locate_agenda(draft, agenda_id)
        if located is None:
            return NO_CHANGE
        workspace, agenda = located
        note = find_by_id(agenda["notes"], note_id)
        if note is None:
            return NO_CHANGE

        if "title" in updates:
            note["title"] = sanitize_string(updates["title"], MAX_TITLE_LENGTH)
        if "content" in updates and note["type"] == "note":
            note["content"] = sanitize_string(
                updates["content"], MAX_NOTE_CONTENT_LENGTH
            )
        note["modifiedAt"] = now_iso()
        touch(workspace)
        changed = True
        return draft

    store.update(mutate)
    return changed


def delete_item(store: NotebookStore, agenda_id: str, item_id: str) -> int:
    """Delete a note or folder together with all of its descendants.

    Returns:
        Number of removed notes and folders.

    """
    removed = 0

    def mutate(draft: Document) -> MutatorResult:
        nonlocal removed
        located = locate_agenda(draft, agenda_id)
        if located is None:
            return NO_CHANGE
        workspace, agenda = located
        if find_by_id(agenda["notes"], item_id) is None:
            return NO_CHANGE

        doomed = {item_id}
        grew = True
        while grew:
            grew = False
            for note in agenda["notes"]:
                if note["parentId"] in doomed and note["id"] not in doomed:
                    doomed.add(note["id"])
                    grew = True

        agenda["notes"] = [n for n in agenda["notes"] if n["id"] not in doomed]
        touch(workspace)
        removed = len(doomed)
        return draft

    store.update(mutate)
    return removed


def move_item(
    store: NotebookStore,
    agenda_id: str,
    item_id: str,
    new_parent_id: str | None,
) -> bool:
    """Re-parent a note or folder; None moves it to the root.

    The move is rejected, leaving the state untouched, when the target is not
    a folder or when it would make the item its own ancestor.
    """
    moved = False

    def mutate(draft: Document) -> MutatorResult:
        nonlocal moved
        located = locate_agenda(draft, agenda_id)
        if located is None:
            return NO_CHANGE
        workspace, agenda = located
        notes = agenda["notes"]
        item = find_by_id(notes, item_id)
        if item is None:
            return NO_CHANGE
        if new_parent_id is not None and not _is_folder(notes, new_parent_id):
            return NO_CHANGE
        if creates_cycle(notes, item_id, new_parent_id):
            return NO_CHANGE

        item["parentId"] = new_parent_id
        item["modifiedAt"] = now_iso()
        touch(workspace)
        moved = True
        return draft

    store.update(mutate)
    return moved
