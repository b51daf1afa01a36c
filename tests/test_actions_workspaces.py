"""Tests for workspace and agenda recipes."""

import pytest
from conftest import MemoryStorage

from notebook_state.actions import agendas, workspaces
from notebook_state.store import NotebookStore


def test_create_workspace_selects_first(store: NotebookStore) -> None:
    first = workspaces.create_workspace(store, "  Home  ")
    second = workspaces.create_workspace(store, "Work")

    state = store.get_state()
    assert [w["name"] for w in state["workspaces"]] == ["Home", "Work"]
    assert state["activeWorkspaceId"] == first
    assert second != first


def test_blank_workspace_name_is_rejected(
    store: NotebookStore,
    storage: MemoryStorage,
) -> None:
    saves = len(storage.saves)

    assert workspaces.create_workspace(store, "   ") is None
    assert workspaces.rename_workspace(store, "w", "") is False
    assert len(storage.saves) == saves


def test_rename_workspace(store: NotebookStore) -> None:
    workspace_id = workspaces.create_workspace(store, "Home")

    assert workspaces.rename_workspace(store, workspace_id, "House")
    assert not workspaces.rename_workspace(store, "missing", "House")
    assert store.get_state()["workspaces"][0]["name"] == "House"


@pytest.mark.usefixtures("agenda_id")
def test_select_workspace_clears_agenda(store: NotebookStore) -> None:
    other = workspaces.create_workspace(store, "Other")

    assert workspaces.select_workspace(store, other)
    state = store.get_state()
    assert state["activeWorkspaceId"] == other
    assert state["activeAgendaId"] is None
    assert not workspaces.select_workspace(store, "ghost")


@pytest.mark.usefixtures("agenda_id")
def test_delete_active_workspace_clears_selection(store: NotebookStore) -> None:
    active = store.get_state()["activeWorkspaceId"]

    assert workspaces.delete_workspace(store, active)
    state = store.get_state()
    assert state["workspaces"] == []
    assert state["activeWorkspaceId"] is None
    assert state["activeAgendaId"] is None
    assert not workspaces.delete_workspace(store, active)


def test_create_agenda_requires_active_workspace(store: NotebookStore) -> None:
    assert agendas.create_agenda(store, "Sprint") is None

    workspaces.create_workspace(store, "Home")
    agenda_id = agendas.create_agenda(store, "Sprint")

    agenda = store.get_state()["workspaces"][0]["agendas"][0]
    assert agenda["id"] == agenda_id
    assert [c["id"] for c in agenda["columns"]] == ["todo", "doing", "done"]
    assert agenda["journals"] == []
    assert agenda["metrics"] == {}


def test_agenda_changes_touch_workspace(store: NotebookStore, agenda_id: str) -> None:
    store.update(
        lambda draft: draft["workspaces"][0].update(
            modifiedAt="2000-01-01T00:00:00.000Z"
        )
    )

    assert agendas.rename_agenda(store, agenda_id, "Renamed")

    workspace = store.get_state()["workspaces"][0]
    assert workspace["agendas"][0]["name"] == "Renamed"
    assert workspace["modifiedAt"] != "2000-01-01T00:00:00.000Z"


def test_select_and_delete_agenda(store: NotebookStore, agenda_id: str) -> None:
    assert store.get_state()["activeAgendaId"] == agenda_id
    assert not agendas.select_agenda(store, "ghost")

    assert agendas.delete_agenda(store, agenda_id)
    state = store.get_state()
    assert state["activeAgendaId"] is None
    assert state["workspaces"][0]["agendas"] == []
    assert not agendas.delete_agenda(store, agenda_id)
