import json
import logging
import sys
from typing import Any

CONTEXT_ATTR = "context"


class JSONFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        """Format ``record`` as a JSON string.

        A mapping passed as ``extra={"context": {...}}`` is emitted under the
        ``context`` key.

        Args:
            record: The log record to format.

        Returns:
            A JSON string representation of the log record.

        """
        log_record: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "funcName": record.funcName,
            "lineno": record.lineno,
        }
        context = getattr(record, CONTEXT_ATTR, None)
        if isinstance(context, dict):
            log_record[CONTEXT_ATTR] = context
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record, ensure_ascii=False, default=str)


def setup_logging(level: str | int = logging.INFO) -> None:
    """Send notebook logs to stdout as JSON at ``level``.

    The handler is installed once; later calls only change the level.
    """
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        root.addHandler(handler)
    root.setLevel(level)
