"""Canonical document schema and invariants.

The persisted state is a plain JSON tree. These ``TypedDict`` declarations
describe the canonical shape produced by :mod:`notebook_state.validator`; they
carry no behavior.
"""

from __future__ import annotations

from typing import Literal, NotRequired, TypedDict

SCHEMA_VERSION = 1
STORAGE_KEY = "notebook_v1_state"

MAX_ID_LENGTH = 100

# Per-field length caps, in characters.
MAX_TITLE_LENGTH = 500
MAX_NOTE_CONTENT_LENGTH = 100_000
MAX_TASK_DESCRIPTION_LENGTH = 10_000
MAX_ENTRY_TEXT_LENGTH = 50_000
MAX_JOURNAL_NAME_LENGTH = 200
MAX_CONTAINER_NAME_LENGTH = 200
MAX_COLUMN_TITLE_LENGTH = 100
MAX_SNIPPET_CODE_LENGTH = 100_000
MAX_SNIPPET_LANGUAGE_LENGTH = 50
MAX_SNIPPET_DESCRIPTION_LENGTH = 2_000
MAX_TAG_LENGTH = 50

NOTE_TYPES = ("note", "folder")
DEFAULT_NOTE_TYPE = "note"

PRIORITIES = ("low", "medium", "high")
DEFAULT_PRIORITY = "medium"

TASK_COLUMN_IDS = ("backlog", "todo", "doing", "done")
DEFAULT_COLUMN_ID = "backlog"
REQUIRED_COLUMN_IDS = ("todo", "doing", "done")
BACKLOG_COLUMN_TITLE = "Backlog"

METRIC_KEYS = ("focusDays", "incidentsResolved", "deepWorkDays")

DEFAULT_WORKSPACE_NAME = "Untitled Workspace"
DEFAULT_AGENDA_NAME = "Untitled Agenda"
DEFAULT_JOURNAL_NAME = "Journal"
DEFAULT_SNIPPET_LANGUAGE = "text"

LEGACY_JOURNAL_ID = "default"
LEGACY_JOURNAL_NAME = "Main Journal"


class Note(TypedDict):
    """A note or folder; folders carry no ``content``."""

    id: str
    type: Literal["note", "folder"]
    title: str
    content: NotRequired[str]
    parentId: str | None
    createdAt: str
    modifiedAt: str


class Task(TypedDict):
    """A Kanban task, active or archived."""

    id: str
    title: str
    description: str
    priority: Literal["low", "medium", "high"]
    dueDate: str | None
    columnId: str
    createdAt: str
    isFinalized: bool
    isDeleted: bool
    finalizedAt: int | float | None
    deletedAt: int | float | None


class Column(TypedDict):
    """An ordered Kanban lane."""

    id: str
    title: str
    taskIds: list[str]


class JournalEntry(TypedDict):
    id: str
    text: str
    createdAt: str


class Journal(TypedDict):
    """A named log of entries, newest first by convention."""

    id: str
    name: str
    entries: list[JournalEntry]


class Snippet(TypedDict):
    id: str
    title: str
    code: str
    language: str
    description: str
    tags: list[str]
    createdAt: str


class Agenda(TypedDict):
    """A named collection of notes, tasks, journals and snippets."""

    id: str
    name: str
    createdAt: str
    notes: list[Note]
    tasks: list[Task]
    columns: list[Column]
    journals: list[Journal]
    snippets: list[Snippet]
    finalizedTasks: list[Task]
    deletedTasks: list[Task]
    metrics: dict[str, int]


class Workspace(TypedDict):
    id: str
    name: str
    createdAt: str
    modifiedAt: str
    agendas: list[Agenda]


class Document(TypedDict):
    """The entire persisted state tree."""

    schemaVersion: int
    workspaces: list[Workspace]
    activeWorkspaceId: str | None
    activeAgendaId: str | None


def initial_document() -> Document:
    """Return the empty document installed on first start."""
    return {
        "schemaVersion": SCHEMA_VERSION,
        "workspaces": [],
        "activeWorkspaceId": None,
        "activeAgendaId": None,
    }
