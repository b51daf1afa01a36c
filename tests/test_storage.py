"""Tests for fsspec-backed document storage."""

import json
import sys
from pathlib import Path

import fsspec
import pytest

from notebook_state.storage import FsspecStorage
from notebook_state.store import NotebookStore


def test_load_missing_returns_none(memory_root: str) -> None:
    assert FsspecStorage(memory_root).load() is None


def test_save_and_load_memory(memory_root: str) -> None:
    storage = FsspecStorage(memory_root)
    storage.save('{"schemaVersion": 1}')

    assert storage.load() == '{"schemaVersion": 1}'
    assert storage.path.endswith("/notebook_v1_state.json")
    fs = fsspec.filesystem("memory")
    leftovers = [p for p in fs.ls(memory_root, detail=False) if p.endswith(".tmp")]
    assert leftovers == []


def test_blank_file_counts_as_empty(memory_root: str) -> None:
    storage = FsspecStorage(memory_root)
    storage.save("   ")

    assert storage.load() is None


def test_custom_key(memory_root: str) -> None:
    storage = FsspecStorage(memory_root, "other")
    storage.save("{}")

    assert storage.path.endswith("/other.json")


def test_local_storage_is_private(tmp_path: Path) -> None:
    root = tmp_path / "data"
    storage = FsspecStorage(root)
    storage.save("{}")

    target = root / "notebook_v1_state.json"
    assert target.read_text(encoding="utf-8") == "{}"
    if sys.platform != "win32":
        assert (target.stat().st_mode & 0o077) == 0
        assert (root.stat().st_mode & 0o077) == 0
    assert list(root.iterdir()) == [target]


def test_store_survives_restart(memory_root: str) -> None:
    first = NotebookStore(FsspecStorage(memory_root))
    first.init()

    def add_workspace(draft: dict) -> None:
        draft["workspaces"].append(
            {
                "id": "w1",
                "name": "Home",
                "createdAt": "2024-01-01T00:00:00.000Z",
                "modifiedAt": "2024-01-01T00:00:00.000Z",
                "agendas": [],
            },
        )

    first.update(add_workspace)

    second = NotebookStore(FsspecStorage(memory_root))
    second.init()

    assert second.get_state() == first.get_state()
    stored = json.loads(FsspecStorage(memory_root).load())
    assert stored["workspaces"][0]["name"] == "Home"



def test_failed_save_leaves_no_temp_file(tmp_path: Path) -> None:
    root = tmp_path / "data"
    storage = FsspecStorage(root)
    (root / "notebook_v1_state.json").mkdir(parents=True)

    with pytest.raises(OSError):
        storage.save("{}")

    assert list(root.glob("*.tmp")) == []


def test_store_keeps_running_without_temp_litter(tmp_path: Path) -> None:
    root = tmp_path / "data"
    store = NotebookStore(FsspecStorage(root))
    store.init()
    (root / "notebook_v1_state.json").unlink()
    (root / "notebook_v1_state.json").mkdir()

    for name in ("a", "b", "c"):
        store.update(lambda _draft, name=name: {"activeAgendaId": name})

    assert store.get_state()["activeAgendaId"] == "c"
    assert list(root.glob("*.tmp")) == []
