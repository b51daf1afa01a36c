"""Exceptions raised at the import boundary."""


class NotebookError(Exception):
    """Base class for notebook_state errors."""


class ParseError(NotebookError):
    """Raised when imported text is not syntactically valid JSON."""


class SchemaError(NotebookError):
    """Raised when a document is rejected wholesale by the validator.

    Attributes:
        diagnostics: The validator's diagnostics for the rejected document.

    """

    def __init__(self, diagnostics: list[str]) -> None:
        self.diagnostics = list(diagnostics)
        detail = ", ".join(self.diagnostics) or "unknown error"
        super().__init__(f"Invalid backup file: {detail}")
