"""
Handler setup for the 'riskdesk' logger namespace.

Library modules only create loggers with logging.getLogger(__name__).
Handlers are installed by an entry point calling configure_logging() and
removed again by shutdown_logging(); both only touch handlers they own.
"""

import logging
import logging.handlers
import sys
from datetime import date
from pathlib import Path
from typing import Literal, Optional, Union

from .context import _bind
from .formatters import ConsoleFormatter, StructuredFormatter

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

ROOT_LOGGER_NAME = 'riskdesk'

# Names given to the handlers configure_logging() installs
CONSOLE_HANDLER = 'riskdesk.console'
FILE_HANDLER = 'riskdesk.file'

LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3


def parse_level(level: Union[int, str]) -> int:
    """
    Logging constant for a level name or number.

    Raises:
        ValueError: If level is not one of DEBUG, INFO, WARNING, ERROR, CRITICAL
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(
            f"Invalid log level '{level}'. Must be one of: CRITICAL, DEBUG, ERROR, INFO, WARNING"
        )
    return value


def _owned_handlers(logger: logging.Logger):
    return [h for h in logger.handlers if h.get_name() in (CONSOLE_HANDLER, FILE_HANDLER)]


def shutdown_logging() -> None:
    """Flush, close and detach the handlers installed by configure_logging()."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in _owned_handlers(root):
        root.removeHandler(handler)
        handler.close()


def configure_logging(
    level: Union[LogLevel, int] = "INFO",
    log_dir: Optional[Path] = None,
    console: bool = True,
    file: bool = False,
    structured: bool = True,
    run_id: Optional[str] = None,
) -> logging.Logger:
    """
    Install console and/or rotating file handlers on the 'riskdesk' logger.

    Calling it again replaces the handlers from the previous call.

    Args:
        level: Minimum level for the namespace and its handlers
        log_dir: Directory for riskdesk_YYYYMMDD.log (default: PROJECT_ROOT/logs)
        console: Human-readable records on stdout
        file: Records in a size-rotated log file
        structured: One JSON object per line in the file instead of console text
        run_id: Bound into the log context for every later record

    Returns:
        The 'riskdesk' logger

    Raises:
        ValueError: If level is not a valid log level
    """
    level_no = parse_level(level)
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level_no)
    shutdown_logging()

    handlers = []
    if console:
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.set_name(CONSOLE_HANDLER)
        stream_handler.setFormatter(ConsoleFormatter(use_colors=sys.stdout.isatty()))
        handlers.append(stream_handler)

    if file:
        if log_dir is None:
            from ..paths import get_logs_dir
            log_dir = get_logs_dir()
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / f"riskdesk_{date.today():%Y%m%d}.log",
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
            encoding='utf-8',
        )
        file_handler.set_name(FILE_HANDLER)
        file_handler.setFormatter(StructuredFormatter() if structured else ConsoleFormatter())
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(level_no)
        root.addHandler(handler)

    if run_id:
        _bind(run_id=run_id)
    return root


def get_logger(name: str) -> logging.Logger:
    """Logger under the riskdesk namespace, e.g. get_logger('journal') -> 'riskdesk.journal'."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + '.'):
        return logging.getLogger(name)
    return logging.getLogger(f'{ROOT_LOGGER_NAME}.{name}')


__all__ = [
    "LogLevel",
    "ROOT_LOGGER_NAME",
    "configure_logging",
    "get_logger",
    "parse_level",
    "shutdown_logging",
]
