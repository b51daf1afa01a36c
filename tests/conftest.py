"""Test configuration for notebook-state."""

import uuid
from collections.abc import Iterator
from typing import Any

import fsspec
import pytest

from notebook_state.actions import agendas, workspaces
from notebook_state.storage import FsspecStorage
from notebook_state.store import NotebookStore


class MemoryStorage:
    """In-process storage slot that can be told to fail."""

    def __init__(self, payload: str | None = None) -> None:
        self.payload = payload
        self.saves: list[str] = []
        self.fail = False

    def load(self) -> str | None:
        return self.payload

    def save(self, payload: str) -> None:
        if self.fail:
            msg = "disk full"
            raise OSError(msg)
        self.saves.append(payload)
        self.payload = payload


@pytest.fixture
def memory_root() -> Iterator[str]:
    """Unique ``memory://`` root, removed after the test."""
    root = f"memory://notebook-{uuid.uuid4().hex}"
    yield root
    fs = fsspec.filesystem("memory")
    if fs.exists(root):
        fs.rm(root, recursive=True)


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def store(storage: MemoryStorage) -> NotebookStore:
    notebook = NotebookStore(storage)
    notebook.init()
    return notebook


@pytest.fixture
def fs_store(memory_root: str) -> NotebookStore:
    notebook = NotebookStore(FsspecStorage(memory_root))
    notebook.init()
    return notebook


@pytest.fixture
def agenda_id(store: NotebookStore) -> str:
    """Active workspace with one active agenda; returns the agenda id."""
    workspaces.create_workspace(store, "Work")
    created = agendas.create_agenda(store, "Sprint")
    assert created is not None
    agendas.select_agenda(store, created)
    return created


def current_agenda(store: NotebookStore) -> dict[str, Any]:
    state = store.get_state()
    workspace = next(
        ws for ws in state["workspaces"] if ws["id"] == state["activeWorkspaceId"]
    )
    return next(a for a in workspace["agendas"] if a["id"] == state["activeAgendaId"])


def make_document(**agenda_fields: Any) -> dict[str, Any]:  # noqa: ANN401
    """Build a raw document holding one workspace and one agenda."""
    agenda: dict[str, Any] = {
        "id": "a1",
        "name": "Agenda",
        "createdAt": "2024-01-01T00:00:00.000Z",
        **agenda_fields,
    }
    return {
        "schemaVersion": 1,
        "workspaces": [
            {
                "id": "w1",
                "name": "Workspace",
                "createdAt": "2024-01-01T00:00:00.000Z",
                "modifiedAt": "2024-01-01T00:00:00.000Z",
                "agendas": [agenda],
            },
        ],
        "activeWorkspaceId": "w1",
        "activeAgendaId": "a1",
    }
