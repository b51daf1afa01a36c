"""CLI entry point using Typer."""

import json
from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError

from notebook_state.actions import agendas, journals, notes, snippets, tasks, workspaces
from notebook_state.backup import export_to_path, import_document
from notebook_state.config import load_settings
from notebook_state.errors import NotebookError
from notebook_state.logging_utils import setup_logging
from notebook_state.schema import TASK_COLUMN_IDS
from notebook_state.session import NotebookSession
from notebook_state.validator import validate_document

app = typer.Typer(help="Notebook CLI - Workspaces, agendas, notes and tasks")
workspace_app = typer.Typer(help="Workspace management commands")
agenda_app = typer.Typer(help="Agenda management commands")
note_app = typer.Typer(help="Note and folder commands")
task_app = typer.Typer(help="Kanban task commands")
journal_app = typer.Typer(help="Journal commands")
snippet_app = typer.Typer(help="Code snippet commands")

app.add_typer(workspace_app, name="workspace")
app.add_typer(agenda_app, name="agenda")
app.add_typer(note_app, name="note")
app.add_typer(task_app, name="task")
app.add_typer(journal_app, name="journal")
app.add_typer(snippet_app, name="snippet")

RootOption = Annotated[
    str | None,
    typer.Option("--root", help="Storage root (defaults to NOTEBOOK_ROOT)"),
]
AgendaOption = Annotated[
    str | None,
    typer.Option("--agenda", help="Agenda id (defaults to the active agenda)"),
]


def handle_cli_errors[R](func: Callable[..., R]) -> Callable[..., R]:
    """Handle common CLI errors."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> R:  # noqa: ANN401
        try:
            return func(*args, **kwargs)
        except (NotebookError, ValidationError) as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1) from e
        except Exception as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1) from e

    return wrapper


def open_session(root: str | None) -> NotebookSession:
    """Build a session from the configuration, honoring ``--root``."""
    settings = load_settings()
    if root is not None:
        settings = settings.model_copy(update={"root": root})
    setup_logging(settings.log_level)
    return NotebookSession(settings)


def require(value: Any, message: str) -> Any:  # noqa: ANN401
    """Return ``value`` or fail with ``message`` when it is falsy."""
    if not value:
        raise NotebookError(message)
    return value


def resolve_agenda(session: NotebookSession, agenda_id: str | None) -> str:
    if agenda_id:
        return agenda_id
    active = session.store.get_state()["activeAgendaId"]
    return require(active, "No agenda selected; pass --agenda or run 'agenda select'")


@app.command("init")
@handle_cli_errors
def cmd_init(root: RootOption = None) -> None:
    """Create the storage file if it does not exist yet."""
    with open_session(root) as session:
        typer.echo(f"Notebook ready at '{session.storage.path}'")


@app.command("show")
@handle_cli_errors
def cmd_show(root: RootOption = None) -> None:
    """Print the current document as JSON."""
    with open_session(root) as session:
        typer.echo(json.dumps(session.store.get_state(), indent=2, ensure_ascii=False))


@app.command("validate")
@handle_cli_errors
def cmd_validate(
    file: Annotated[Path, typer.Argument(help="JSON file to check")],
) -> None:
    """Validate a document file and list every repair that would be applied."""
    setup_logging("ERROR")
    try:
        raw = json.loads(file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        msg = f"The file is not valid JSON: {e}"
        raise NotebookError(msg) from e

    result = validate_document(raw)
    for line in result.diagnostics:
        typer.echo(line)
    if not result.valid:
        msg = "Document rejected"
        raise NotebookError(msg)
    typer.echo("Document is valid.")


@app.command("export")
@handle_cli_errors
def cmd_export(
    output: Annotated[
        str,
        typer.Option("--output", "-o", help="Directory or fsspec URL"),
    ] = ".",
    root: RootOption = None,
) -> None:
    """Write a dated backup of the current document."""
    with open_session(root) as session:
        target = export_to_path(session.store.get_state(), output)
    typer.echo(f"Exported to '{target}'")


@app.command("import")
@handle_cli_errors
def cmd_import(
    file: Annotated[Path, typer.Argument(help="Backup file to restore")],
    root: RootOption = None,
) -> None:
    """Replace the whole document with a validated backup."""
    text = file.read_text(encoding="utf-8")
    with open_session(root) as session:
        document = import_document(session.store, text)
    typer.echo(f"Imported {len(document['workspaces'])} workspace(s).")


@workspace_app.command("create")
@handle_cli_errors
def cmd_workspace_create(
    name: Annotated[str, typer.Argument(help="Workspace name")],
    root: RootOption = None,
) -> None:
    """Create a new workspace."""
    with open_session(root) as session:
        workspace_id = require(
            workspaces.create_workspace(session.store, name),
            "Workspace name must not be blank",
        )
    typer.echo(workspace_id)


@workspace_app.command("rename")
@handle_cli_errors
def cmd_workspace_rename(
    workspace_id: Annotated[str, typer.Argument(help="Workspace id")],
    name: Annotated[str, typer.Argument(help="New name")],
    root: RootOption = None,
) -> None:
    """Rename a workspace."""
    with open_session(root) as session:
        require(
            workspaces.rename_workspace(session.store, workspace_id, name),
            f"Cannot rename workspace '{workspace_id}'",
        )
    typer.echo(f"Workspace '{workspace_id}' renamed.")


@workspace_app.command("delete")
@handle_cli_errors
def cmd_workspace_delete(
    workspace_id: Annotated[str, typer.Argument(help="Workspace id")],
    root: RootOption = None,
) -> None:
    """Delete a workspace and everything in it."""
    with open_session(root) as session:
        require(
            workspaces.delete_workspace(session.store, workspace_id),
            f"Workspace '{workspace_id}' not found",
        )
    typer.echo(f"Workspace '{workspace_id}' deleted.")


@workspace_app.command("select")
@handle_cli_errors
def cmd_workspace_select(
    workspace_id: Annotated[str, typer.Argument(help="Workspace id")],
    root: RootOption = None,
) -> None:
    """Make a workspace active."""
    with open_session(root) as session:
        require(
            workspaces.select_workspace(session.store, workspace_id),
            f"Workspace '{workspace_id}' not found",
        )
    typer.echo(f"Workspace '{workspace_id}' selected.")


@workspace_app.command("list")
@handle_cli_errors
def cmd_workspace_list(root: RootOption = None) -> None:
    """List workspaces; the active one is starred."""
    with open_session(root) as session:
        state = session.store.get_state()
    if not state["workspaces"]:
        typer.echo("No workspaces found.")
        return
    for workspace in state["workspaces"]:
        marker = "*" if workspace["id"] == state["activeWorkspaceId"] else "-"
        typer.echo(
            f"{marker} {workspace['id']}: {workspace['name']} "
            f"({len(workspace['agendas'])} agenda(s))"
        )


@agenda_app.command("create")
@handle_cli_errors
def cmd_agenda_create(
    name: Annotated[str, typer.Argument(help="Agenda name")],
    root: RootOption = None,
) -> None:
    """Create an agenda in the active workspace."""
    with open_session(root) as session:
        agenda_id = require(
            agendas.create_agenda(session.store, name),
            "Cannot create agenda: blank name or no active workspace",
        )
    typer.echo(agenda_id)


@agenda_app.command("select")
@handle_cli_errors
def cmd_agenda_select(
    agenda_id: Annotated[str, typer.Argument(help="Agenda id")],
    root: RootOption = None,
) -> None:
    """Make an agenda of the active workspace active."""
    with open_session(root) as session:
        require(
            agendas.select_agenda(session.store, agenda_id),
            f"Agenda '{agenda_id}' not found in the active workspace",
        )
    typer.echo(f"Agenda '{agenda_id}' selected.")


@note_app.command("add")
@handle_cli_errors
def cmd_note_add(
    title: Annotated[str, typer.Argument(help="Note title")],
    content: Annotated[str, typer.Option(help="Note body")] = "",
    parent: Annotated[str | None, typer.Option(help="Parent folder id")] = None,
    agenda: AgendaOption = None,
    root: RootOption = None,
) -> None:
    """Add a note."""
    with open_session(root) as session:
        note_id = require(
            notes.create_note(
                session.store,
                resolve_agenda(session, agenda),
                title,
                content,
                parent_id=parent,
            ),
            "Cannot create note: unknown agenda or parent folder",
        )
    typer.echo(note_id)


@note_app.command("folder")
@handle_cli_errors
def cmd_note_folder(
    name: Annotated[str, typer.Argument(help="Folder name")],
    parent: Annotated[str | None, typer.Option(help="Parent folder id")] = None,
    agenda: AgendaOption = None,
    root: RootOption = None,
) -> None:
    """Add a folder."""
    with open_session(root) as session:
        folder_id = require(
            notes.create_folder(
                session.store, resolve_agenda(session, agenda), name, parent
            ),
            "Cannot create folder: unknown agenda or parent folder",
        )
    typer.echo(folder_id)


@note_app.command("move")
@handle_cli_errors
def cmd_note_move(
    item_id: Annotated[str, typer.Argument(help="Note or folder id")],
    parent: Annotated[
        str | None,
        typer.Option(help="Target folder id; omit to move to the root"),
    ] = None,
    agenda: AgendaOption = None,
    root: RootOption = None,
) -> None:
    """Move a note or folder into another folder."""
    with open_session(root) as session:
        require(
            notes.move_item(
                session.store, resolve_agenda(session, agenda), item_id, parent
            ),
            f"Cannot move '{item_id}': unknown item, not a folder or a cycle",
        )
    typer.echo(f"Moved '{item_id}'.")


@note_app.command("delete")
@handle_cli_errors
def cmd_note_delete(
    item_id: Annotated[str, typer.Argument(help="Note or folder id")],
    agenda: AgendaOption = None,
    root: RootOption = None,
) -> None:
    """Delete a note, or a folder with everything below it."""
    with open_session(root) as session:
        removed = require(
            notes.delete_item(session.store, resolve_agenda(session, agenda), item_id),
            f"Item '{item_id}' not found",
        )
    typer.echo(f"Deleted {removed} item(s).")


@task_app.command("add")
@handle_cli_errors
def cmd_task_add(
    title: Annotated[str, typer.Argument(help="Task title")],
    description: Annotated[str, typer.Option(help="Task description")] = "",
    priority: Annotated[str, typer.Option(help="low, medium or high")] = "medium",
    due: Annotated[str | None, typer.Option(help="Due date")] = None,
    agenda: AgendaOption = None,
    root: RootOption = None,
) -> None:
    """Add a task to the backlog."""
    with open_session(root) as session:
        task_id = require(
            tasks.create_task(
                session.store,
                resolve_agenda(session, agenda),
                title,
                description,
                priority,
                due,
            ),
            "Cannot create task: blank title or unknown agenda",
        )
    typer.echo(task_id)


@task_app.command("move")
@handle_cli_errors
def cmd_task_move(
    task_id: Annotated[str, typer.Argument(help="Task id")],
    column: Annotated[str, typer.Argument(help=f"One of {', '.join(TASK_COLUMN_IDS)}")],
    index: Annotated[int | None, typer.Option(help="Position in the column")] = None,
    agenda: AgendaOption = None,
    root: RootOption = None,
) -> None:
    """Move an active task to a column."""
    with open_session(root) as session:
        require(
            tasks.move_task(
                session.store, resolve_agenda(session, agenda), task_id, column, index
            ),
            f"Cannot move task '{task_id}' to '{column}'",
        )
    typer.echo(f"Task '{task_id}' moved to '{column}'.")


@task_app.command("finalize")
@handle_cli_errors
def cmd_task_finalize(
    task_id: Annotated[str, typer.Argument(help="Task id")],
    agenda: AgendaOption = None,
    root: RootOption = None,
) -> None:
    """Archive a task as finished."""
    with open_session(root) as session:
        require(
            tasks.finalize_task(
                session.store, resolve_agenda(session, agenda), task_id
            ),
            f"Active task '{task_id}' not found",
        )
    typer.echo(f"Task '{task_id}' finalized.")


@task_app.command("recycle")
@handle_cli_errors
def cmd_task_recycle(
    task_id: Annotated[str, typer.Argument(help="Task id")],
    agenda: AgendaOption = None,
    root: RootOption = None,
) -> None:
    """Move a task to the recycle bin."""
    with open_session(root) as session:
        require(
            tasks.recycle_task(session.store, resolve_agenda(session, agenda), task_id),
            f"Task '{task_id}' not found",
        )
    typer.echo(f"Task '{task_id}' recycled.")


@task_app.command("restore")
@handle_cli_errors
def cmd_task_restore(
    task_id: Annotated[str, typer.Argument(help="Task id")],
    agenda: AgendaOption = None,
    root: RootOption = None,
) -> None:
    """Bring a recycled task back to the backlog."""
    with open_session(root) as session:
        require(
            tasks.restore_task(session.store, resolve_agenda(session, agenda), task_id),
            f"Recycled task '{task_id}' not found",
        )
    typer.echo(f"Task '{task_id}' restored.")


@journal_app.command("add")
@handle_cli_errors
def cmd_journal_add(
    text: Annotated[str, typer.Argument(help="Entry text")],
    journal: Annotated[str | None, typer.Option(help="Journal id")] = None,
    agenda: AgendaOption = None,
    root: RootOption = None,
) -> None:
    """Add a journal entry."""
    with open_session(root) as session:
        entry_id = require(
            journals.add_entry(
                session.store, resolve_agenda(session, agenda), text, journal
            ),
            "Cannot add entry: blank text or unknown agenda",
        )
    typer.echo(entry_id)


@snippet_app.command("add")
@handle_cli_errors
def cmd_snippet_add(
    title: Annotated[str, typer.Argument(help="Snippet title")],
    code_file: Annotated[
        Path | None,
        typer.Option("--file", help="Read the code from this file"),
    ] = None,
    code: Annotated[str, typer.Option(help="Snippet code")] = "",
    language: Annotated[str, typer.Option(help="Language name")] = "text",
    description: Annotated[str, typer.Option(help="Short description")] = "",
    tag: Annotated[list[str] | None, typer.Option(help="Tag, repeatable")] = None,
    agenda: AgendaOption = None,
    root: RootOption = None,
) -> None:
    """Save a code snippet."""
    if code_file is not None:
        code = code_file.read_text(encoding="utf-8")
    with open_session(root) as session:
        snippet_id = require(
            snippets.create_snippet(
                session.store,
                resolve_agenda(session, agenda),
                title,
                code,
                language,
                description,
                tag,
            ),
            "Cannot add snippet: unknown agenda",
        )
    typer.echo(snippet_id)


def main() -> None:
    """Entry point for the notebook CLI."""
    app()


if __name__ == "__main__":
    main()
