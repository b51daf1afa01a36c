"""Tests for document validation, repair and migration."""

import copy

import pytest
from conftest import make_document

from notebook_state.schema import initial_document
from notebook_state.validator import validate_document


def _agenda(document: dict) -> dict:
    return document["workspaces"][0]["agendas"][0]


@pytest.mark.parametrize(
    "raw",
    [
        None,
        [],
        "document",
        {"workspaces": []},
        {"schemaVersion": 2, "workspaces": []},
        {"schemaVersion": "1", "workspaces": []},
        {"schemaVersion": True, "workspaces": []},
        {"schemaVersion": 1, "workspaces": {}},
        {"schemaVersion": 1},
    ],
)
def test_rejects_invalid_top_level(raw: object) -> None:
    result = validate_document(raw)
    assert result.valid is False
    assert result.document is None
    assert result.diagnostics


def test_initial_document_is_valid_without_diagnostics() -> None:
    result = validate_document(initial_document())
    assert result.valid
    assert result.document == initial_document()
    assert result.diagnostics == []


def test_unknown_column_id_resets_to_backlog() -> None:
    raw = {
        "schemaVersion": 1,
        "workspaces": [
            {
                "id": "w1",
                "agendas": [
                    {
                        "id": "ag1",
                        "tasks": [{"id": "t1", "title": "x", "columnId": "zzz"}],
                    },
                ],
            },
        ],
    }
    result = validate_document(raw)

    assert result.valid
    agenda = _agenda(result.document)
    assert agenda["tasks"][0]["columnId"] == "backlog"
    assert [c["id"] for c in agenda["columns"]] == ["todo", "doing", "done"]
    assert [c["title"] for c in agenda["columns"]] == ["TODO", "DOING", "DONE"]


def test_ghost_workspace_resets_selection() -> None:
    raw = make_document()
    raw["activeWorkspaceId"] = "ghost"

    result = validate_document(raw)

    assert result.document["activeWorkspaceId"] is None
    assert result.document["activeAgendaId"] is None
    assert any("ghost" in line for line in result.diagnostics)


def test_missing_agenda_resets_only_agenda_selection() -> None:
    raw = make_document()
    raw["activeAgendaId"] = "nope"

    document = validate_document(raw).document

    assert document["activeWorkspaceId"] == "w1"
    assert document["activeAgendaId"] is None


def test_entities_without_valid_id_are_dropped() -> None:
    raw = make_document(
        notes=[
            {"id": "n1", "title": "kept"},
            {"title": "no id"},
            {"id": "", "title": "empty id"},
            {"id": "x" * 100},
            "not an object",
        ],
    )
    result = validate_document(raw)

    notes = _agenda(result.document)["notes"]
    assert [n["id"] for n in notes] == ["n1"]
    assert notes[0]["type"] == "note"
    assert notes[0]["content"] == ""
    assert len(result.diagnostics) >= 4


def test_duplicate_ids_keep_first_occurrence() -> None:
    raw = make_document(
        snippets=[
            {"id": "s1", "title": "first"},
            {"id": "s1", "title": "second"},
        ],
        tasks=[{"id": "t1", "title": "active"}],
        finalizedTasks=[{"id": "t1", "title": "finalized twin"}],
    )
    agenda = _agenda(validate_document(raw).document)

    assert [s["title"] for s in agenda["snippets"]] == ["first"]
    assert [t["id"] for t in agenda["tasks"]] == ["t1"]
    assert agenda["finalizedTasks"] == []


def test_field_repairs() -> None:
    raw = make_document(
        tasks=[
            {
                "id": "t1",
                "title": "  trimmed  ",
                "priority": "urgent",
                "dueDate": "",
                "createdAt": "not a date",
                "isFinalized": "yes",
                "finalizedAt": "soon",
            },
        ],
        snippets=[
            {"id": "s1", "code": "  keep\n", "tags": ["a", "a", " b "], "language": ""},
        ],
        metrics={"focusDays": 2.9, "unknown": 5, "deepWorkDays": -1},
    )
    agenda = _agenda(validate_document(raw).document)

    task = agenda["tasks"][0]
    assert task["title"] == "trimmed"
    assert task["priority"] == "medium"
    assert task["dueDate"] is None
    assert task["createdAt"] != "not a date"
    assert task["isFinalized"] is False
    assert task["finalizedAt"] is None

    snippet = agenda["snippets"][0]
    assert snippet["code"] == "  keep\n"
    assert snippet["tags"] == ["a", "b"]
    assert snippet["language"] == "text"

    assert agenda["metrics"] == {"focusDays": 2, "deepWorkDays": 0}


def test_text_fields_are_capped() -> None:
    raw = make_document(
        notes=[{"id": "n1", "title": "t" * 600, "content": "c" * 100_001}],
    )
    note = _agenda(validate_document(raw).document)["notes"][0]

    assert len(note["title"]) == 500
    assert len(note["content"]) == 100_000


def test_folders_have_no_content() -> None:
    raw = make_document(notes=[{"id": "f1", "type": "folder", "content": "x"}])
    folder = _agenda(validate_document(raw).document)["notes"][0]

    assert "content" not in folder


def test_parent_must_be_existing_folder() -> None:
    raw = make_document(
        notes=[
            {"id": "n1", "type": "note"},
            {"id": "n2", "type": "note", "parentId": "n1"},
            {"id": "n3", "type": "note", "parentId": "missing"},
        ],
    )
    notes = _agenda(validate_document(raw).document)["notes"]

    assert all(note["parentId"] is None for note in notes)


def test_folder_cycles_are_broken() -> None:
    raw = make_document(
        notes=[
            {"id": "f1", "type": "folder", "parentId": "f2"},
            {"id": "f2", "type": "folder", "parentId": "f1"},
            {"id": "f3", "type": "folder", "parentId": "f3"},
            {"id": "n1", "type": "note", "parentId": "f2"},
        ],
    )
    notes = {n["id"]: n for n in _agenda(validate_document(raw).document)["notes"]}

    assert notes["f1"]["parentId"] is None
    assert notes["f2"]["parentId"] == "f1"
    assert notes["f3"]["parentId"] is None
    assert notes["n1"]["parentId"] == "f2"


def test_columns_reference_only_active_tasks_once() -> None:
    raw = make_document(
        tasks=[{"id": "t1"}, {"id": "t2"}],
        deletedTasks=[{"id": "t3"}],
        columns=[
            {"id": "todo", "title": "To Do", "taskIds": ["t1", "t3", "ghost"]},
            {"id": "doing", "title": "Doing", "taskIds": ["t1", "t2"]},
        ],
    )
    columns = _agenda(validate_document(raw).document)["columns"]

    assert columns[0]["taskIds"] == ["t1"]
    assert columns[1]["taskIds"] == ["t2"]
    assert [c["id"] for c in columns] == ["todo", "doing", "done"]


def test_legacy_journal_is_migrated() -> None:
    raw = make_document(
        journal=[{"id": "e1", "text": "old entry", "createdAt": "2023-05-01"}],
    )
    result = validate_document(raw)

    journals = _agenda(result.document)["journals"]
    assert journals == [
        {
            "id": "default",
            "name": "Main Journal",
            "entries": [{"id": "e1", "text": "old entry", "createdAt": "2023-05-01"}],
        },
    ]
    assert "journal" not in _agenda(result.document)


def test_journals_take_precedence_over_legacy_field() -> None:
    raw = make_document(
        journals=[{"id": "j1", "name": "Work", "entries": []}],
        journal=[{"id": "e1", "text": "old"}],
    )
    journals = _agenda(validate_document(raw).document)["journals"]

    assert [j["id"] for j in journals] == ["j1"]


def test_non_array_collection_resets_to_empty() -> None:
    raw = make_document(notes="nope", snippets={"id": "s1"})
    result = validate_document(raw)

    agenda = _agenda(result.document)
    assert agenda["notes"] == []
    assert agenda["snippets"] == []
    assert any("is not an array" in line for line in result.diagnostics)


def test_validation_is_idempotent() -> None:
    raw = make_document(
        notes=[
            {"id": "f1", "type": "folder", "parentId": "f1"},
            {"id": "n1", "title": " x ", "parentId": "f1"},
        ],
        tasks=[{"id": "t1", "columnId": "zzz", "priority": "urgent"}],
        journal=[{"id": "e1", "text": "legacy"}],
    )
    first = validate_document(raw).document
    second = validate_document(copy.deepcopy(first))

    assert second.valid
    assert second.document == first
    assert second.diagnostics == []


def test_input_is_not_mutated() -> None:
    raw = make_document(tasks=[{"id": "t1", "columnId": "zzz"}])
    before = copy.deepcopy(raw)

    validate_document(raw)

    assert raw == before
