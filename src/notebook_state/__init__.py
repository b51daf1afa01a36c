"""Versioned, validated persistence for a personal notebook workspace."""

from .backup import (
    export_document,
    export_to_path,
    import_document,
    parse_import_data,
    suggested_filename,
)
from .config import Settings, load_settings
from .errors import NotebookError, ParseError, SchemaError
from .schema import SCHEMA_VERSION, STORAGE_KEY, Document, initial_document
from .session import NotebookSession
from .storage import DocumentStorage, FsspecStorage
from .store import NO_CHANGE, NotebookStore, ObserverRegistry
from .validator import ValidationResult, validate_document

__all__ = [
    "NO_CHANGE",
    "SCHEMA_VERSION",
    "STORAGE_KEY",
    "Document",
    "DocumentStorage",
    "FsspecStorage",
    "NotebookError",
    "NotebookSession",
    "NotebookStore",
    "ObserverRegistry",
    "ParseError",
    "SchemaError",
    "Settings",
    "ValidationResult",
    "export_document",
    "export_to_path",
    "import_document",
    "initial_document",
    "load_settings",
    "parse_import_data",
    "suggested_filename",
    "validate_document",
]
