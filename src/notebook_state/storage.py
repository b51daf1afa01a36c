"""Durable storage for the serialized document, backed by fsspec.

The whole document lives under one key: a single JSON file named after the
storage key inside the storage root. There is no partitioning and no
incremental write.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from .schema import STORAGE_KEY
from .utils import (
    fs_exists,
    fs_join,
    fs_makedirs,
    fs_read_text,
    fs_write_text,
    get_fs_and_path,
)

if TYPE_CHECKING:
    import fsspec

logger = logging.getLogger(__name__)


class DocumentStorage(Protocol):
    """Key-value slot holding the serialized document."""

    def load(self) -> str | None:
        """Return the stored text, or None when nothing is stored."""
        ...

    def save(self, payload: str) -> None:
        """Replace the stored text with ``payload``."""
        ...


class FsspecStorage:
    """Store the document as ``<root>/<key>.json`` on any fsspec filesystem."""

    def __init__(
        self,
        root: str | Path,
        key: str = STORAGE_KEY,
        *,
        fs: fsspec.AbstractFileSystem | None = None,
    ) -> None:
        self.fs, self.root = get_fs_and_path(root, fs)
        self.key = key
        self.path = fs_join(self.root, f"{key}.json")

    def __repr__(self) -> str:
        return f"FsspecStorage(path={self.path!r})"

    def load(self) -> str | None:
        """Return the stored JSON text, or None if the slot is missing/empty.

        Raises:
            OSError: If the file exists but cannot be read.
            UnicodeDecodeError: If the file is not UTF-8 text.

        """
        if not fs_exists(self.fs, self.path):
            return None
        payload = fs_read_text(self.fs, self.path)
        return payload if payload.strip() else None

    def save(self, payload: str) -> None:
        """Atomically replace the stored JSON text.

        Raises:
            OSError: If the storage root cannot be created or written.

        """
        fs_makedirs(self.fs, self.root, exist_ok=True)
        fs_write_text(self.fs, self.path, payload)
        logger.debug("Saved %d characters to %s", len(payload), self.path)
