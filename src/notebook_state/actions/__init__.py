"""Domain mutation recipes built on ``NotebookStore.update``."""

from . import agendas, journals, metrics, notes, snippets, tasks, workspaces

__all__ = [
    "agendas",
    "journals",
    "metrics",
    "notes",
    "snippets",
    "tasks",
    "workspaces",
]
