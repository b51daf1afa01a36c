"""Import and export of whole documents."""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .errors import ParseError, SchemaError
from .utils import fs_join, fs_makedirs, fs_write_text, get_fs_and_path
from .validator import validate_document

if TYPE_CHECKING:
    import fsspec

    from .schema import Document
    from .store import NotebookStore

logger = logging.getLogger(__name__)

BACKUP_FILENAME_PREFIX = "notebook-backup-"


def export_document(document: Document | dict[str, Any]) -> str:
    """Serialize ``document`` as pretty-printed JSON."""
    return json.dumps(document, indent=2, ensure_ascii=False)


def suggested_filename(today: date | None = None) -> str:
    """Return ``notebook-backup-<ISO date>.json`` for ``today``."""
    day = today or date.today()
    return f"{BACKUP_FILENAME_PREFIX}{day.isoformat()}.json"


def parse_import_data(text: str) -> Document:
    """Parse and validate an imported backup.

    Args:
        text: Raw file contents.

    Returns:
        The validated and repaired document.

    Raises:
        ParseError: If ``text`` is not valid JSON.
        SchemaError: If the validator rejects the document.

    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"The file is not valid JSON: {exc}"
        raise ParseError(msg) from exc

    result = validate_document(raw)
    if not result.valid or result.document is None:
        raise SchemaError(result.diagnostics)
    return result.document


def import_document(store: NotebookStore, text: str) -> Document:
    """Validate ``text`` and install it as the store's entire document.

    The replacement is a single transaction: persisted, then published.

    Raises:
        ParseError: If ``text`` is not valid JSON.
        SchemaError: If the validator rejects the document.

    """
    document = parse_import_data(text)
    logger.info(
        "Importing document with %d workspace(s)",
        len(document["workspaces"]),
    )
    return store.replace_document(document)


def export_to_path(
    document: Document,
    directory: str | Path,
    *,
    today: date | None = None,
    fs: fsspec.AbstractFileSystem | None = None,
) -> str:
    """Write a backup of ``document`` into ``directory``.

    An existing file with the same name is overwritten.

    Args:
        document: Document to export.
        directory: Local directory or fsspec URL.
        today: Date embedded in the file name, defaults to today.
        fs: Optional filesystem to use instead of resolving ``directory``.

    Returns:
        Path of the written file on its filesystem.

    """
    fs_obj, base = get_fs_and_path(directory, fs)
    fs_makedirs(fs_obj, base, exist_ok=True)
    target = fs_join(base, suggested_filename(today))
    fs_write_text(fs_obj, target, export_document(document))
    logger.info(
        "Exported backup to %s",
        target,
        extra={"context": {"workspaces": len(document["workspaces"])}},
    )
    return target
