"""Deep validation, repair and migration of untrusted notebook documents.

The validator walks a raw JSON tree top-down, mirroring the data model in
:mod:`notebook_state.schema`, and rebuilds it in canonical form:

* field values are sanitized (trimmed, capped, coerced or defaulted);
* entities without a usable id are dropped, everything else is repaired;
* structural invariants are restored (unique ids, acyclic folder forest,
  disjoint task collections, columns that only reference active tasks,
  the default ``todo``/``doing``/``done`` lanes);
* the legacy per-agenda ``journal`` array is migrated to ``journals``.

Only three conditions reject a document outright: it is not an object, its
``schemaVersion`` is not the supported one, or ``workspaces`` is not a list.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

from .sanitizers import (
    coerce_bool,
    coerce_enum,
    coerce_number,
    is_number,
    is_valid_date,
    is_valid_id,
    sanitize_date,
    sanitize_metrics,
    sanitize_optional_date,
    sanitize_reference,
    sanitize_string,
    sanitize_tags,
)
from .schema import (
    DEFAULT_AGENDA_NAME,
    DEFAULT_COLUMN_ID,
    DEFAULT_JOURNAL_NAME,
    DEFAULT_NOTE_TYPE,
    DEFAULT_PRIORITY,
    DEFAULT_SNIPPET_LANGUAGE,
    DEFAULT_WORKSPACE_NAME,
    LEGACY_JOURNAL_ID,
    LEGACY_JOURNAL_NAME,
    MAX_COLUMN_TITLE_LENGTH,
    MAX_CONTAINER_NAME_LENGTH,
    MAX_ENTRY_TEXT_LENGTH,
    MAX_JOURNAL_NAME_LENGTH,
    MAX_NOTE_CONTENT_LENGTH,
    MAX_SNIPPET_CODE_LENGTH,
    MAX_SNIPPET_DESCRIPTION_LENGTH,
    MAX_SNIPPET_LANGUAGE_LENGTH,
    MAX_TASK_DESCRIPTION_LENGTH,
    MAX_TITLE_LENGTH,
    NOTE_TYPES,
    PRIORITIES,
    REQUIRED_COLUMN_IDS,
    SCHEMA_VERSION,
    TASK_COLUMN_IDS,
    Agenda,
    Column,
    Document,
    Journal,
    JournalEntry,
    Note,
    Snippet,
    Task,
    Workspace,
)
from .utils import now_iso

logger = logging.getLogger(__name__)

T = TypeVar("T")

TASK_COLLECTIONS = ("tasks", "finalizedTasks", "deletedTasks")


@dataclass
class ValidationResult:
    """Outcome of :func:`validate_document`.

    ``document`` is the repaired document when ``valid`` is True and None
    otherwise. ``diagnostics`` lists every rejection and repair in order.
    """

    valid: bool
    document: Document | None
    diagnostics: list[str] = field(default_factory=list)


@dataclass
class ValidationContext:
    """Mutable state shared by one validation run."""

    now: str = field(default_factory=now_iso)
    diagnostics: list[str] = field(default_factory=list)

    def report(self, path: str, message: str) -> None:
        self.diagnostics.append(f"{path}: {message}")

    def repaired(self, path: str, name: str, raw: Any) -> None:  # noqa: ANN401
        """Record a field repair, skipping fields that were simply absent."""
        if raw is not None:
            self.report(path, f"invalid {name} {raw!r} repaired")


EntityValidator = Callable[[Any, ValidationContext, str], T | None]


def _require_entity(
    raw: Any,  # noqa: ANN401
    ctx: ValidationContext,
    path: str,
    kind: str,
) -> Mapping[str, Any] | None:
    """Apply the hard rejection rule shared by every entity validator."""
    if not isinstance(raw, Mapping):
        ctx.report(path, f"{kind} is not an object, dropped")
        return None
    if not is_valid_id(raw.get("id")):
        ctx.report(path, f"{kind} missing valid id, dropped")
        return None
    return raw


def _checked_date(
    raw: Mapping[str, Any],
    name: str,
    ctx: ValidationContext,
    path: str,
) -> str:
    value = raw.get(name)
    if not is_valid_date(value):
        ctx.repaired(path, name, value)
    return sanitize_date(value, ctx.now)


def _checked_enum(
    raw: Mapping[str, Any],
    name: str,
    allowed: tuple[str, ...],
    default: str,
    ctx: ValidationContext,
    path: str,
) -> str:
    value = raw.get(name)
    if value not in allowed:
        ctx.repaired(path, name, value)
    return coerce_enum(value, allowed, default)


def validate_note(
    raw: Any,  # noqa: ANN401
    ctx: ValidationContext,
    path: str,
) -> Note | None:
    """Validate a note or folder.

    Folders never carry ``content``. ``parentId`` is only type-checked here;
    whether it points at a folder is checked by :func:`repair_note_forest`.
    """
    source = _require_entity(raw, ctx, path, "note")
    if source is None:
        return None

    note_type = _checked_enum(
        source, "type", NOTE_TYPES, DEFAULT_NOTE_TYPE, ctx, path
    )
    note: Note = {
        "id": source["id"],
        "type": note_type,  # type: ignore[typeddict-item]
        "title": sanitize_string(source.get("title"), MAX_TITLE_LENGTH),
        "parentId": sanitize_reference(source.get("parentId")),
        "createdAt": _checked_date(source, "createdAt", ctx, path),
        "modifiedAt": _checked_date(source, "modifiedAt", ctx, path),
    }
    if note_type != "folder":
        note["content"] = sanitize_string(
            source.get("content"), MAX_NOTE_CONTENT_LENGTH
        )
    return note


def validate_task(
    raw: Any,  # noqa: ANN401
    ctx: ValidationContext,
    path: str,
) -> Task | None:
    """Validate an active or archived task."""
    source = _require_entity(raw, ctx, path, "task")
    if source is None:
        return None

    due_date = source.get("dueDate")
    if due_date not in (None, "") and not is_valid_date(due_date):
        ctx.repaired(path, "dueDate", due_date)

    return {
        "id": source["id"],
        "title": sanitize_string(source.get("title"), MAX_TITLE_LENGTH),
        "description": sanitize_string(
            source.get("description"), MAX_TASK_DESCRIPTION_LENGTH
        ),
        "priority": _checked_enum(  # type: ignore[typeddict-item]
            source, "priority", PRIORITIES, DEFAULT_PRIORITY, ctx, path
        ),
        "dueDate": sanitize_optional_date(due_date),
        "columnId": _checked_enum(
            source, "columnId", TASK_COLUMN_IDS, DEFAULT_COLUMN_ID, ctx, path
        ),
        "createdAt": _checked_date(source, "createdAt", ctx, path),
        "isFinalized": coerce_bool(source.get("isFinalized")),
        "isDeleted": coerce_bool(source.get("isDeleted")),
        "finalizedAt": coerce_number(source.get("finalizedAt"), None),
        "deletedAt": coerce_number(source.get("deletedAt"), None),
    }


def validate_column(
    raw: Any,  # noqa: ANN401
    ctx: ValidationContext,
    path: str,
) -> Column | None:
    source = _require_entity(raw, ctx, path, "column")
    if source is None:
        return None

    task_ids = source.get("taskIds")
    return {
        "id": source["id"],
        "title": sanitize_string(source.get("title"), MAX_COLUMN_TITLE_LENGTH),
        "taskIds": [
            task_id for task_id in task_ids if is_valid_id(task_id)
        ]
        if isinstance(task_ids, list)
        else [],
    }


def validate_journal_entry(
    raw: Any,  # noqa: ANN401
    ctx: ValidationContext,
    path: str,
) -> JournalEntry | None:
    source = _require_entity(raw, ctx, path, "journal entry")
    if source is None:
        return None

    return {
        "id": source["id"],
        "text": sanitize_string(source.get("text"), MAX_ENTRY_TEXT_LENGTH),
        "createdAt": _checked_date(source, "createdAt", ctx, path),
    }


def validate_journal(
    raw: Any,  # noqa: ANN401
    ctx: ValidationContext,
    path: str,
) -> Journal | None:
    source = _require_entity(raw, ctx, path, "journal")
    if source is None:
        return None

    return {
        "id": source["id"],
        "name": sanitize_string(
            source.get("name"), MAX_JOURNAL_NAME_LENGTH, DEFAULT_JOURNAL_NAME
        ),
        "entries": validate_collection(
            source.get("entries"),
            validate_journal_entry,
            ctx,
            f"{path}.entries",
        ),
    }


def validate_snippet(
    raw: Any,  # noqa: ANN401
    ctx: ValidationContext,
    path: str,
) -> Snippet | None:
    """Validate a snippet; ``code`` is opaque and only length-capped."""
    source = _require_entity(raw, ctx, path, "snippet")
    if source is None:
        return None

    code = source.get("code")
    return {
        "id": source["id"],
        "title": sanitize_string(source.get("title"), MAX_TITLE_LENGTH),
        "code": code[:MAX_SNIPPET_CODE_LENGTH] if isinstance(code, str) else "",
        "language": sanitize_string(
            source.get("language"),
            MAX_SNIPPET_LANGUAGE_LENGTH,
            DEFAULT_SNIPPET_LANGUAGE,
        ),
        "description": sanitize_string(
            source.get("description"), MAX_SNIPPET_DESCRIPTION_LENGTH
        ),
        "tags": sanitize_tags(source.get("tags")),
        "createdAt": _checked_date(source, "createdAt", ctx, path),
    }


def validate_collection(
    raw_items: Any,  # noqa: ANN401
    validator: EntityValidator[T],
    ctx: ValidationContext,
    path: str,
    seen_ids: set[str] | None = None,
) -> list[T]:
    """Validate every element of an array field.

    Rejected elements are dropped, as is any element whose id was already
    accepted (``seen_ids`` lets several collections share one id space).
    Survivors keep their relative order.

    Args:
        raw_items: The raw array; any other value yields an empty list.
        validator: Per-entity validator returning None on rejection.
        ctx: Validation context collecting diagnostics.
        path: Location of the array, used in diagnostics.
        seen_ids: Ids already taken, updated in place.

    Returns:
        The list of validated entities.

    """
    if raw_items is None:
        return []
    if not isinstance(raw_items, list):
        ctx.report(path, "is not an array, reset to empty")
        return []

    taken = set() if seen_ids is None else seen_ids
    validated: list[T] = []
    for index, raw_item in enumerate(raw_items):
        item_path = f"{path}[{index}]"
        item = validator(raw_item, ctx, item_path)
        if item is None:
            continue
        item_id = item["id"]  # type: ignore[index]
        if item_id in taken:
            ctx.report(item_path, f"duplicate id {item_id!r}, dropped")
            continue
        taken.add(item_id)
        validated.append(item)
    return validated


def repair_note_forest(notes: list[Note], ctx: ValidationContext, path: str) -> None:
    """Make the ``parentId`` relation of an agenda's notes a forest.

    A parent must be a folder of the same agenda. Every cycle is broken by
    detaching the first note, in collection order, found to be its own
    ancestor.
    """
    folder_ids = {note["id"] for note in notes if note["type"] == "folder"}
    for index, note in enumerate(notes):
        parent_id = note["parentId"]
        if parent_id is not None and parent_id not in folder_ids:
            ctx.report(
                f"{path}[{index}]",
                f"parentId {parent_id!r} is not a folder, moved to root",
            )
            note["parentId"] = None

    parents = {note["id"]: note["parentId"] for note in notes}
    for index, note in enumerate(notes):
        visited = set()
        current = parents[note["id"]]
        while current is not None and current not in visited:
            if current == note["id"]:
                ctx.report(
                    f"{path}[{index}]",
                    "folder is its own ancestor, moved to root",
                )
                note["parentId"] = None
                parents[note["id"]] = None
                break
            visited.add(current)
            current = parents.get(current)


def repair_columns(
    columns: list[Column],
    tasks: list[Task],
    ctx: ValidationContext,
    path: str,
) -> None:
    """Keep column task ids consistent with the active tasks.

    Dangling ids are removed, a task id stays only in the first column that
    lists it, and the required lanes are appended when missing.
    """
    active_ids = {task["id"] for task in tasks}
    placed: set[str] = set()
    for index, column in enumerate(columns):
        kept = []
        for task_id in column["taskIds"]:
            if task_id not in active_ids:
                ctx.report(
                    f"{path}[{index}]",
                    f"task id {task_id!r} is not an active task, removed",
                )
            elif task_id in placed:
                ctx.report(
                    f"{path}[{index}]",
                    f"task id {task_id!r} already placed in a column, removed",
                )
            else:
                placed.add(task_id)
                kept.append(task_id)
        column["taskIds"] = kept

    present = {column["id"] for column in columns}
    for column_id in REQUIRED_COLUMN_IDS:
        if column_id not in present:
            ctx.report(path, f"missing default column {column_id!r}, added")
            columns.append(
                {"id": column_id, "title": column_id.upper(), "taskIds": []}
            )


def _validate_journals(
    source: Mapping[str, Any],
    ctx: ValidationContext,
    path: str,
) -> list[Journal]:
    """Validate ``journals``, migrating the legacy ``journal`` entry array."""
    raw_journals = source.get("journals")
    legacy = source.get("journal")

    if isinstance(raw_journals, list) and raw_journals:
        if legacy is not None:
            ctx.report(path, "legacy journal field ignored, journals present")
        return validate_collection(
            raw_journals, validate_journal, ctx, f"{path}.journals"
        )

    if isinstance(legacy, list):
        ctx.report(path, "legacy journal migrated to journals")
        return [
            {
                "id": LEGACY_JOURNAL_ID,
                "name": LEGACY_JOURNAL_NAME,
                "entries": validate_collection(
                    legacy, validate_journal_entry, ctx, f"{path}.journal"
                ),
            },
        ]

    return validate_collection(raw_journals, validate_journal, ctx, f"{path}.journals")


def validate_agenda(
    raw: Any,  # noqa: ANN401
    ctx: ValidationContext,
    path: str,
) -> Agenda | None:
    """Validate an agenda and restore its structural invariants."""
    source = _require_entity(raw, ctx, path, "agenda")
    if source is None:
        return None

    notes = validate_collection(
        source.get("notes"), validate_note, ctx, f"{path}.notes"
    )
    repair_note_forest(notes, ctx, f"{path}.notes")

    task_ids: set[str] = set()
    tasks, finalized, deleted = (
        validate_collection(
            source.get(name), validate_task, ctx, f"{path}.{name}", task_ids
        )
        for name in TASK_COLLECTIONS
    )

    columns = validate_collection(
        source.get("columns"), validate_column, ctx, f"{path}.columns"
    )
    repair_columns(columns, tasks, ctx, f"{path}.columns")

    return {
        "id": source["id"],
        "name": sanitize_string(
            source.get("name"), MAX_CONTAINER_NAME_LENGTH, DEFAULT_AGENDA_NAME
        ),
        "createdAt": _checked_date(source, "createdAt", ctx, path),
        "notes": notes,
        "tasks": tasks,
        "columns": columns,
        "journals": _validate_journals(source, ctx, path),
        "snippets": validate_collection(
            source.get("snippets"), validate_snippet, ctx, f"{path}.snippets"
        ),
        "finalizedTasks": finalized,
        "deletedTasks": deleted,
        "metrics": sanitize_metrics(source.get("metrics")),
    }


def validate_workspace(
    raw: Any,  # noqa: ANN401
    ctx: ValidationContext,
    path: str,
) -> Workspace | None:
    source = _require_entity(raw, ctx, path, "workspace")
    if source is None:
        return None

    return {
        "id": source["id"],
        "name": sanitize_string(
            source.get("name"), MAX_CONTAINER_NAME_LENGTH, DEFAULT_WORKSPACE_NAME
        ),
        "createdAt": _checked_date(source, "createdAt", ctx, path),
        "modifiedAt": _checked_date(source, "modifiedAt", ctx, path),
        "agendas": validate_collection(
            source.get("agendas"), validate_agenda, ctx, f"{path}.agendas"
        ),
    }


def _repair_selection(document: Document, ctx: ValidationContext) -> None:
    """Null out active ids that do not resolve to a surviving entity."""
    workspace_id = document["activeWorkspaceId"]
    agenda_id = document["activeAgendaId"]

    workspace = next(
        (ws for ws in document["workspaces"] if ws["id"] == workspace_id),
        None,
    )
    if workspace_id is not None and workspace is None:
        ctx.report(
            "activeWorkspaceId",
            f"references missing workspace {workspace_id!r}, reset",
        )
        document["activeWorkspaceId"] = None
        document["activeAgendaId"] = None
        return

    if agenda_id is None:
        return
    if workspace is None or not any(
        agenda["id"] == agenda_id for agenda in workspace["agendas"]
    ):
        ctx.report(
            "activeAgendaId",
            f"references missing agenda {agenda_id!r}, reset",
        )
        document["activeAgendaId"] = None


def _rejected(ctx: ValidationContext) -> ValidationResult:
    return ValidationResult(valid=False, document=None, diagnostics=ctx.diagnostics)


def validate_document(raw: Any) -> ValidationResult:  # noqa: ANN401
    """Validate, repair and migrate a raw document.

    Args:
        raw: A parsed JSON value of unknown shape.

    Returns:
        A ``ValidationResult``; invalid only when ``raw`` is not an object,
        has the wrong ``schemaVersion`` or has no ``workspaces`` list.

    """
    ctx = ValidationContext()

    if not isinstance(raw, Mapping):
        ctx.report("document", "is not an object")
        return _rejected(ctx)

    version = raw.get("schemaVersion")
    if not is_number(version) or version != SCHEMA_VERSION:
        ctx.report(
            "schemaVersion",
            f"mismatch, expected {SCHEMA_VERSION}, got {version!r}",
        )
        return _rejected(ctx)

    if not isinstance(raw.get("workspaces"), list):
        ctx.report("workspaces", "is not an array")
        return _rejected(ctx)

    document: Document = {
        "schemaVersion": SCHEMA_VERSION,
        "workspaces": validate_collection(
            raw["workspaces"], validate_workspace, ctx, "workspaces"
        ),
        "activeWorkspaceId": sanitize_reference(raw.get("activeWorkspaceId")),
        "activeAgendaId": sanitize_reference(raw.get("activeAgendaId")),
    }
    _repair_selection(document, ctx)

    if ctx.diagnostics:
        logger.warning(
            "Document validation reported %d issue(s): %s",
            len(ctx.diagnostics),
            "; ".join(ctx.diagnostics),
        )

    return ValidationResult(
        valid=True,
        document=document,
        diagnostics=ctx.diagnostics,
    )
