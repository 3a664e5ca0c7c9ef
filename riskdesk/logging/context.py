"""
Run context attached to log records.

A single process-wide mapping holds the fields of the analysis currently
running (phase, journal strategy, run id, seed, resampling mode). Formatters
read it for every record. LogContext sets fields for the duration of a block
and restores the previous mapping on exit, so blocks nest.
"""

import threading
from typing import Any, Dict, Optional

_fields: Dict[str, Any] = {}
_lock = threading.RLock()

# Display order on the console
CONTEXT_KEYS = ('phase', 'strategy', 'run_id', 'seed', 'resampling')


def current_context() -> Dict[str, Any]:
    """Snapshot of the active context fields."""
    with _lock:
        return dict(_fields)


def reset_context() -> None:
    """Drop every context field."""
    with _lock:
        _fields.clear()


def _bind(**fields: Any) -> None:
    """Set fields outside any block, e.g. a run id for the whole process."""
    with _lock:
        _fields.update({key: value for key, value in fields.items() if value is not None})


class LogContext:
    """
    Attach run fields to every record logged inside a with-block.

    Only phase is mandatory; fields left as None keep their outer value.

    Usage:
        with LogContext(phase="montecarlo", seed=42, resampling="block"):
            run_monte_carlo(trades, seed=42)
    """

    def __init__(
        self,
        phase: str,
        strategy: Optional[str] = None,
        run_id: Optional[str] = None,
        seed: Optional[int] = None,
        resampling: Optional[str] = None,
    ):
        self.fields = {
            'phase': phase,
            'strategy': strategy,
            'run_id': run_id,
            'seed': seed,
            'resampling': resampling,
        }
        self._saved: Optional[Dict[str, Any]] = None

    def __enter__(self) -> 'LogContext':
        with _lock:
            self._saved = dict(_fields)
            _bind(**self.fields)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        with _lock:
            _fields.clear()
            _fields.update(self._saved or {})
        self._saved = None


__all__ = [
    "CONTEXT_KEYS",
    "LogContext",
    "current_context",
    "reset_context",
]
