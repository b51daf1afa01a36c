"""Snippet recipes. New snippets are listed first."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..sanitizers import sanitize_string, sanitize_tags
from ..schema import (
    DEFAULT_SNIPPET_LANGUAGE,
    MAX_SNIPPET_CODE_LENGTH,
    MAX_SNIPPET_DESCRIPTION_LENGTH,
    MAX_SNIPPET_LANGUAGE_LENGTH,
    MAX_TITLE_LENGTH,
    Snippet,
)
from ..utils import generate_id, now_iso
from .base import agenda_transaction, find_by_id, index_of

if TYPE_CHECKING:
    from ..schema import Agenda
    from ..store import NotebookStore

DEFAULT_SNIPPET_TITLE = "Untitled Snippet"


def _clean_code(code: Any) -> str:  # noqa: ANN401
    return code[:MAX_SNIPPET_CODE_LENGTH] if isinstance(code, str) else ""


def create_snippet(
    store: NotebookStore,
    agenda_id: str,
    title: str = DEFAULT_SNIPPET_TITLE,
    code: str = "",
    language: str = DEFAULT_SNIPPET_LANGUAGE,
    description: str = "",
    tags: list[str] | None = None,
) -> str | None:
    """Add a snippet at the top of the agenda's snippet list.

    ``code`` is stored verbatim apart from the length cap.
    """
    snippet: Snippet = {
        "id": generate_id(),
        "title": sanitize_string(title, MAX_TITLE_LENGTH, DEFAULT_SNIPPET_TITLE),
        "code": _clean_code(code),
        "language": sanitize_string(
            language, MAX_SNIPPET_LANGUAGE_LENGTH, DEFAULT_SNIPPET_LANGUAGE
        ),
        "description": sanitize_string(description, MAX_SNIPPET_DESCRIPTION_LENGTH),
        "tags": sanitize_tags(tags or []),
        "createdAt": now_iso(),
    }

    def change(agenda: Agenda) -> bool:
        agenda["snippets"].insert(0, snippet)
        return True

    return snippet["id"] if agenda_transaction(store, agenda_id, change) else None


def update_snippet(
    store: NotebookStore,
    agenda_id: str,
    snippet_id: str,
    updates: Mapping[str, Any],
) -> bool:
    def change(agenda: Agenda) -> bool:
        snippet = find_by_id(agenda["snippets"], snippet_id)
        if snippet is None:
            return False
        if "title" in updates:
            snippet["title"] = sanitize_string(updates["title"], MAX_TITLE_LENGTH)
        if "code" in updates:
            snippet["code"] = _clean_code(updates["code"])
        if "language" in updates:
            snippet["language"] = sanitize_string(
                updates["language"],
                MAX_SNIPPET_LANGUAGE_LENGTH,
                DEFAULT_SNIPPET_LANGUAGE,
            )
        if "description" in updates:
            snippet["description"] = sanitize_string(
                updates["description"], MAX_SNIPPET_DESCRIPTION_LENGTH
            )
        if "tags" in updates:
            snippet["tags"] = sanitize_tags(updates["tags"])
        return True

    return agenda_transaction(store, agenda_id, change)


def delete_snippet(store: NotebookStore, agenda_id: str, snippet_id: str) -> bool:
    def change(agenda: Agenda) -> bool:
        position = index_of(agenda["snippets"], snippet_id)
        if position == -1:
            return False
        del agenda["snippets"][position]
        return True

    return agenda_transaction(store, agenda_id, change)
