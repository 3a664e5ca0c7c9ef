"""
Formatters for console text and JSON log lines.

Both read the active run context and the structured fields that
log_with_context() stores on the record as record.fields.

Console:
    14:02:11 WARNING  montecarlo  Not enough returns (3) ... [phase=montecarlo seed=42] SIM_002

JSON (one object per line):
    {"time": "...", "level": "WARNING", "logger": "riskdesk.simulate.montecarlo",
     "message": "...", "context": {...}, "error": {"code": "SIM_002", ...},
     "fields": {...}}
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from ..data.sanitization import sanitize_for_json
from .context import CONTEXT_KEYS, current_context

# Keys log_with_context() reserves for the error code
ERROR_KEYS = ('error_code', 'error_category')


def _split_fields(record: logging.LogRecord):
    """(error fields, remaining fields) of a record."""
    fields = dict(getattr(record, 'fields', None) or {})
    error = {key.replace('error_', ''): fields.pop(key) for key in ERROR_KEYS if key in fields}
    return error, fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record; numpy values and NaN are made JSON-safe."""

    def format(self, record: logging.LogRecord) -> str:
        error, fields = _split_fields(record)
        payload: Dict[str, Any] = {
            'time': datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec='milliseconds'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        context = current_context()
        if context:
            payload['context'] = context
        if error:
            payload['error'] = error
        if fields:
            payload['fields'] = fields
        if record.exc_info and record.exc_info[0] is not None:
            payload['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': self.formatException(record.exc_info),
            }
        return json.dumps(sanitize_for_json(payload), default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Single-line text records: time, level, short logger name, message,
    then the run context in brackets and the error code if any.
    """

    WARNING_COLOR = '\033[33m'
    ERROR_COLOR = '\033[31m'
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = False):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        error, _ = _split_fields(record)
        clock = datetime.fromtimestamp(record.created).strftime('%H:%M:%S')
        parts = [clock, f"{record.levelname:<8}", record.name.rsplit('.', 1)[-1], record.getMessage()]

        context = current_context()
        shown = [f"{key}={context[key]}" for key in CONTEXT_KEYS if context.get(key) is not None]
        if shown:
            parts.append(f"[{' '.join(shown)}]")
        if 'code' in error:
            parts.append(error['code'])

        line = ' '.join(parts)
        if self.use_colors and record.levelno >= logging.WARNING:
            color = self.ERROR_COLOR if record.levelno >= logging.ERROR else self.WARNING_COLOR
            line = f"{color}{line}{self.RESET}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


__all__ = [
    "ConsoleFormatter",
    "StructuredFormatter",
]
