"""Transactional document store with synchronous change notification.

A :class:`NotebookStore` owns the live document. Every change goes through
:meth:`NotebookStore.update`, which runs a mutator against a deep copy of the
current state, persists the result and only then swaps it in and publishes it
to observers.
"""

from __future__ import annotations

import copy
import itertools
import json
import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Final

from .schema import Document, initial_document
from .validator import validate_document

if TYPE_CHECKING:
    from .storage import DocumentStorage

logger = logging.getLogger(__name__)


class _NoChange:
    """Type of the :data:`NO_CHANGE` sentinel."""

    _instance: _NoChange | None = None

    def __new__(cls) -> _NoChange:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_CHANGE"


NO_CHANGE: Final = _NoChange()
"""Returned by a mutator to abort its transaction: nothing is saved or sent."""

Observer = Callable[[Document], None]
MutatorResult = Mapping[str, Any] | _NoChange | None
Mutator = Callable[[Document], MutatorResult]


class ObserverRegistry:
    """Ordered set of observers addressed by integer tokens."""

    def __init__(self) -> None:
        self._observers: dict[int, Observer] = {}
        self._tokens = itertools.count(1)

    def __len__(self) -> int:
        return len(self._observers)

    def register(self, observer: Observer) -> int:
        token = next(self._tokens)
        self._observers[token] = observer
        return token

    def unregister(self, token: int) -> None:
        """Remove the observer behind ``token``; unknown tokens are ignored."""
        self._observers.pop(token, None)

    def publish(self, snapshot: Document) -> None:
        """Call every observer with ``snapshot`` in registration order.

        An observer that raises is logged and skipped; the remaining
        observers are still called.
        """
        for token, observer in list(self._observers.items()):
            try:
                observer(snapshot)
            except Exception:
                logger.exception("Observer %d failed while handling a change", token)

    def clear(self) -> None:
        self._observers.clear()


class NotebookStore:
    """Owns one live document and applies transactions to it.

    Args:
        storage: Durable slot the document is loaded from and saved to.

    """

    def __init__(self, storage: DocumentStorage) -> None:
        self.storage = storage
        self._state: Document = initial_document()
        self._observers = ObserverRegistry()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def init(self) -> None:
        """Load the persisted document, or install and save an empty one.

        Only the first call has an effect. Subscribers are notified once the
        state is in place.
        """
        if self._initialized:
            return

        loaded = self._load()
        if loaded is not None:
            self._state = loaded
            logger.info(
                "Loaded document with %d workspace(s)",
                len(loaded["workspaces"]),
            )
        else:
            self._state = initial_document()
            self._persist(self._state)
            logger.info("Initialized empty document")

        self._initialized = True
        self._observers.publish(self._state)

    def get_state(self) -> Document:
        """Return the current snapshot; callers must treat it as read-only."""
        return self._state

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register ``observer`` and call it immediately with the current state.

        Args:
            observer: Callable receiving each new snapshot.

        Returns:
            A function that unsubscribes ``observer`` when called.

        """
        token = self._observers.register(observer)
        observer(self._state)

        def unsubscribe() -> None:
            self._observers.unregister(token)

        return unsubscribe

    def update(self, mutator: Mutator) -> Document:
        """Run one transaction.

        ``mutator`` receives a deep copy of the current document. It may
        mutate that draft in place and return None, return a mapping that is
        shallow-merged over the draft (returned keys win), or return
        ``NO_CHANGE`` to abort.

        Args:
            mutator: Function describing the change.

        Returns:
            The snapshot in effect after the transaction.

        Raises:
            TypeError: If the mutator returns anything else.

        """
        draft = copy.deepcopy(self._state)
        result = mutator(draft)

        if result is NO_CHANGE:
            logger.debug("Transaction aborted by mutator, state unchanged")
            return self._state

        if result is None:
            next_state = draft
        elif isinstance(result, Mapping):
            next_state = {**draft, **result}
        else:
            msg = (
                "Mutator must return a mapping, None or NO_CHANGE, "
                f"got {type(result).__name__}"
            )
            raise TypeError(msg)

        self._persist(next_state)
        self._state = next_state  # type: ignore[assignment]
        self._observers.publish(self._state)
        return self._state

    def replace_document(self, document: Document) -> Document:
        """Replace the whole document in a single transaction."""
        replacement = copy.deepcopy(document)
        return self.update(lambda _draft: replacement)

    def close(self) -> None:
        """Drop every observer; the store keeps its last state."""
        self._observers.clear()

    def _load(self) -> Document | None:
        # UnicodeDecodeError is a ValueError.
        try:
            payload = self.storage.load()
        except (OSError, ValueError):
            logger.exception("Failed to read stored document, resetting")
            return None

        if payload is None:
            return None

        try:
            raw = json.loads(payload)
        except (ValueError, RecursionError) as exc:
            logger.warning("Stored document is not valid JSON, resetting: %s", exc)
            return None

        result = validate_document(raw)
        if not result.valid:
            logger.warning(
                "Stored document failed validation, resetting: %s",
                "; ".join(result.diagnostics),
                extra={"context": {"storage": repr(self.storage)}},
            )
            return None
        return result.document

    def _persist(self, document: Document) -> None:
        try:
            self.storage.save(json.dumps(document, ensure_ascii=False))
        except (OSError, TypeError, ValueError):
            logger.exception("Failed to persist document, keeping in-memory state")
