"""
Helpers that log a message together with structured fields.

Fields end up on the record as record.fields, where the formatters pick
them up. An ErrorCode adds 'error_code' and 'error_category'.
"""

import logging
import sys
from typing import Any, Dict, Optional, Union

from .config import LogLevel, parse_level
from .error_codes import ErrorCode


def _fields(error_code: Optional[ErrorCode], fields: Dict[str, Any]) -> Dict[str, Any]:
    if error_code is not None:
        fields['error_code'] = error_code.code
        fields['error_category'] = error_code.category
    return fields


def log_with_context(
    logger: logging.Logger,
    level: Union[int, LogLevel],
    message: str,
    error_code: Optional[ErrorCode] = None,
    **fields: Any,
) -> None:
    """
    Log message with keyword fields attached.

    Example:
        log_with_context(logger, logging.WARNING, "Too few trades for VaR",
                         error_code=ErrorCode.TRADES_INSUFFICIENT, n_returns=3)

    Raises:
        ValueError: If level is a string that is not a log level name
    """
    logger.log(parse_level(level), message, extra={'fields': _fields(error_code, fields)}, stacklevel=2)


def log_exception(
    logger: logging.Logger,
    message: str,
    exc: Optional[BaseException] = None,
    error_code: Optional[ErrorCode] = None,
    level: int = logging.ERROR,
    **fields: Any,
) -> None:
    """
    Log message with an exception's type, text and traceback.

    exc defaults to the exception currently being handled.
    """
    if exc is None:
        exc = sys.exc_info()[1]
    exc_info = (type(exc), exc, exc.__traceback__) if exc is not None else None
    if exc is not None:
        fields['exception_type'] = type(exc).__name__
    logger.log(level, message, exc_info=exc_info,
               extra={'fields': _fields(error_code, fields)}, stacklevel=2)


__all__ = [
    "log_with_context",
    "log_exception",
]
