"""Session object owning the storage and the store for one application run."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Self

from .config import Settings, load_settings
from .storage import FsspecStorage
from .store import NotebookStore

if TYPE_CHECKING:
    from types import TracebackType

    import fsspec

logger = logging.getLogger(__name__)


class NotebookSession:
    """Builds the store once and hands it to whatever needs it.

    Entering the session initializes the store; leaving it drops all
    observers. The store itself is never a module-level global.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        fs: fsspec.AbstractFileSystem | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.storage = FsspecStorage(
            self.settings.root,
            self.settings.storage_key,
            fs=fs,
        )
        self.store = NotebookStore(self.storage)

    def __enter__(self) -> Self:
        logger.debug("Opening session on %r", self.storage)
        self.store.init()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.store.close()
