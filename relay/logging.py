"""
Logging setup for the relay.

Every record carries the correlation ID of the HTTP request or WebSocket
connection it was emitted from, plus any fields bound with
``set_log_context`` (client address, connection id). The console prints
either a compact human-readable line or one JSON object per record; errors
are also appended as JSON to ``LOG_FILE_PATH``.
"""

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any

from relay.constants import MAX_LOG_SIZE_BYTES
from relay.settings import app_settings
from relay.uvicorn_filters import ExcludePathsFilter

connection_log_context: ContextVar[dict[str, Any] | None] = ContextVar(
    "connection_log_context", default=None
)

# Attributes every LogRecord has; anything else came in through ``extra``
_STANDARD_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {
    "message",
    "asctime",
    "correlation_id",
}

TRUNCATION_MARKER = "... [TRUNCATED]"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_correlation_id() -> str:
    # Imported lazily: the middleware module logs through this one
    from relay.middlewares.correlation_id import get_correlation_id as current

    return current()


def set_log_context(**fields: Any) -> None:
    """
    Bind fields to every record logged from the current context.

    Example:
        >>> set_log_context(client="127.0.0.1:50312")
        >>> logger.info("Client connected")  # record includes ``client``
    """
    log_context = get_log_context()
    log_context.update(fields)
    connection_log_context.set(log_context)


def get_log_context() -> dict[str, Any]:
    """Return a copy of the fields bound in the current context."""
    return dict(connection_log_context.get() or {})


def clear_log_context() -> None:
    connection_log_context.set({})


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_RECORD_ATTRS
    }


class StructuredJSONFormatter(logging.Formatter):
    """
    Renders a record as a single JSON object.

    Output holds the timestamp, level, logger, message and call site, then
    the correlation ID (as ``request_id``), the bound log context, the
    environment, any traceback, and fields passed through ``extra``.
    Oversized messages are cut so the line stays below
    ``MAX_LOG_SIZE_BYTES``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        cid = get_correlation_id()
        if cid:
            entry["request_id"] = cid
        entry.update(get_log_context())
        entry["environment"] = app_settings.ENV.value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(_extra_fields(record))

        line = json.dumps(entry, default=str)
        if len(line) <= MAX_LOG_SIZE_BYTES:
            return line

        keep = MAX_LOG_SIZE_BYTES - 1000
        entry["message"] = entry["message"][:keep] + TRUNCATION_MARKER
        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    One-line console format.

    INFO records show only the message; every other level also shows the
    call site (``module.function:line``).
    """

    SHORT_FORMAT = "%(asctime)s - [%(correlation_id)s] %(levelname)s: %(message)s"
    LONG_FORMAT = (
        "%(asctime)s - [%(correlation_id)s] %(levelname)s: "
        "%(module)s.%(funcName)s:%(lineno)d - %(message)s"
    )

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._short = logging.Formatter(self.SHORT_FORMAT, datefmt=DATE_FORMAT)
        self._long = logging.Formatter(self.LONG_FORMAT, datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        record.correlation_id = get_correlation_id() or "-"

        if record.levelno == logging.INFO:
            return self._short.format(record)
        return self._long.format(record)


def _console_formatter() -> logging.Formatter:
    if app_settings.LOG_CONSOLE_FORMAT == "json":
        return StructuredJSONFormatter()
    return HumanReadableFormatter()


def setup_logging() -> logging.Logger:
    """
    Configure the root logger.

    Installs a console handler (format from ``LOG_CONSOLE_FORMAT``), a JSON
    error-file handler at ``LOG_FILE_PATH`` and, once, the uvicorn access
    log filter for ``LOG_EXCLUDED_PATHS``. Safe to call more than once.

    Returns:
        The root logger.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, app_settings.LOG_LEVEL.upper()))
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.DEBUG)
    console.setFormatter(_console_formatter())
    root.addHandler(console)

    try:
        error_file = logging.FileHandler(app_settings.LOG_FILE_PATH)
    except OSError as e:
        root.warning(f"Could not create file handler: {e}")
    else:
        error_file.setLevel(logging.ERROR)
        error_file.setFormatter(StructuredJSONFormatter())
        root.addHandler(error_file)

    access_logger = logging.getLogger("uvicorn.access")
    if not any(isinstance(f, ExcludePathsFilter) for f in access_logger.filters):
        access_logger.addFilter(ExcludePathsFilter(app_settings.LOG_EXCLUDED_PATHS))

    # Keep pytest output quiet
    if sys.argv[0].split("/")[-1] == "pytest":
        logging.disable(logging.ERROR)

    return root


logger = setup_logging()
