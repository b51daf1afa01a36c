"""Journal recipes. Entries are kept newest first."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..sanitizers import sanitize_string
from ..schema import (
    DEFAULT_JOURNAL_NAME,
    LEGACY_JOURNAL_ID,
    LEGACY_JOURNAL_NAME,
    MAX_ENTRY_TEXT_LENGTH,
    MAX_JOURNAL_NAME_LENGTH,
    Journal,
    JournalEntry,
)
from ..utils import generate_id, now_iso
from .base import agenda_transaction, find_by_id, index_of

if TYPE_CHECKING:
    from ..schema import Agenda
    from ..store import NotebookStore


def _ensure_default_journal(agenda: Agenda) -> list[Journal]:
    """Give an agenda without journals its main journal."""
    if not agenda["journals"]:
        agenda["journals"].append(
            {"id": LEGACY_JOURNAL_ID, "name": LEGACY_JOURNAL_NAME, "entries": []}
        )
    return agenda["journals"]


def add_entry(
    store: NotebookStore,
    agenda_id: str,
    text: str,
    journal_id: str | None = None,
) -> str | None:
    """Prepend an entry to ``journal_id``, or to the first journal.

    Returns:
        The entry id, or None if ``text`` is blank or the agenda is unknown.

    """
    clean_text = sanitize_string(text, MAX_ENTRY_TEXT_LENGTH)
    if not clean_text:
        return None
    entry: JournalEntry = {
        "id": generate_id(),
        "text": clean_text,
        "createdAt": now_iso(),
    }

    def change(agenda: Agenda) -> bool:
        journals = _ensure_default_journal(agenda)
        journal = find_by_id(journals, journal_id) or journals[0]
        journal["entries"].insert(0, entry)
        return True

    return entry["id"] if agenda_transaction(store, agenda_id, change) else None


def delete_entry(
    store: NotebookStore,
    agenda_id: str,
    entry_id: str,
    journal_id: str | None = None,
) -> bool:
    """Remove an entry from ``journal_id``, or from whichever journal has it."""

    def change(agenda: Agenda) -> bool:
        found = False
        for journal in agenda["journals"]:
            if journal_id is not None and journal["id"] != journal_id:
                continue
            position = index_of(journal["entries"], entry_id)
            if position != -1:
                del journal["entries"][position]
                found = True
        return found

    return agenda_transaction(store, agenda_id, change)


def create_journal(store: NotebookStore, agenda_id: str, name: str) -> str | None:
    """Add a named journal after the main one."""
    journal: Journal = {
        "id": generate_id(),
        "name": sanitize_string(name, MAX_JOURNAL_NAME_LENGTH, DEFAULT_JOURNAL_NAME),
        "entries": [],
    }

    def change(agenda: Agenda) -> bool:
        _ensure_default_journal(agenda).append(journal)
        return True

    return journal["id"] if agenda_transaction(store, agenda_id, change) else None


def rename_journal(
    store: NotebookStore,
    agenda_id: str,
    journal_id: str,
    name: str,
) -> bool:
    clean_name = sanitize_string(name, MAX_JOURNAL_NAME_LENGTH)
    if not clean_name:
        return False

    def change(agenda: Agenda) -> bool:
        journal = find_by_id(agenda["journals"], journal_id)
        if journal is None:
            return False
        journal["name"] = clean_name
        return True

    return agenda_transaction(store, agenda_id, change)


def delete_journal(store: NotebookStore, agenda_id: str, journal_id: str) -> bool:
    def change(agenda: Agenda) -> bool:
        position = index_of(agenda["journals"], journal_id)
        if position == -1:
            return False
        del agenda["journals"][position]
        return True

    return agenda_transaction(store, agenda_id, change)
