"""
Logging for riskdesk.

Library modules log through logging.getLogger(__name__) under the 'riskdesk'
namespace and never install handlers. Entry points call configure_logging()
for console text and/or JSON lines in a rotating file.

Usage:
    from riskdesk.logging import LogContext, configure_logging

    configure_logging(level="INFO", console=True, file=False)

    with LogContext(phase="montecarlo", seed=42, resampling="block"):
        run_monte_carlo(trades, seed=42)
"""

from .config import (
    LogLevel,
    ROOT_LOGGER_NAME,
    configure_logging,
    get_logger,
    parse_level,
    shutdown_logging,
)
from .context import LogContext, current_context, reset_context
from .error_codes import ErrorCode
from .formatters import ConsoleFormatter, StructuredFormatter
from .utils import log_exception, log_with_context


__all__ = [
    # Configuration
    "LogLevel",
    "ROOT_LOGGER_NAME",
    "configure_logging",
    "get_logger",
    "parse_level",
    "shutdown_logging",
    # Run context
    "LogContext",
    "current_context",
    "reset_context",
    # Formatters
    "ConsoleFormatter",
    "StructuredFormatter",
    # Error codes and helpers
    "ErrorCode",
    "log_exception",
    "log_with_context",
]
