"""
Tail-risk and benchmark-relative metrics.

VaR and CVaR are historical (empirical) estimates over per-trade percentage
returns and are reported as positive magnitudes. Alpha is the excess of the
strategy's total return over a benchmark return for the same calendar window;
the benchmark figure comes from the caller, either precomputed or through a
provider callable whose results can be memoized in a BenchmarkCache.
"""

# Standard library imports
import logging
import math
from typing import Callable, Dict, Optional, Sequence, Tuple, Union

# Third-party imports
import numpy as np
import pandas as pd

# Local imports
from ..data.sanitization import sanitize_value
from ..logging import ErrorCode, log_exception, log_with_context
from ..trades import Trade


logger = logging.getLogger(__name__)

MIN_VAR_TRADES = 2

BenchmarkProvider = Callable[[pd.Timestamp, pd.Timestamp], float]


def _validate_confidence(confidence: float) -> None:
    if not 0.0 < confidence < 1.0:
        raise ValueError(f"Confidence level must be between 0 and 1 (exclusive). Got: {confidence}")


def _tail_index(n: int, confidence: float) -> int:
    return int(math.floor(n * (1.0 - confidence)))


def _prepare_returns(returns: Sequence[float], confidence: float, label: str) -> Optional[np.ndarray]:
    _validate_confidence(confidence)
    ordered = np.sort(np.asarray(returns, dtype=float).ravel())
    if ordered.size < MIN_VAR_TRADES:
        log_with_context(
            logger,
            logging.WARNING,
            f"Not enough trades ({ordered.size}) for a reliable {label} estimate, "
            f"minimum {MIN_VAR_TRADES} required",
            error_code=ErrorCode.TRADES_INSUFFICIENT,
            confidence=confidence,
        )
        return None
    return ordered


def value_at_risk(returns: Sequence[float], confidence: float = 0.95) -> float:
    """
    Historical Value at Risk.

    Sorts a copy of the returns ascending and reads the return at index
    floor(n * (1 - confidence)), clamped to [0, n - 1].

    When no return is negative there is no loss tail; the smallest gain is
    reported instead, so the result is always >= 0.

    Args:
        returns: Per-trade percentage returns
        confidence: Confidence level in (0, 1), e.g. 0.95

    Returns:
        VaR as a positive percentage (0.0 with fewer than 2 returns)

    Raises:
        ValueError: If confidence is outside (0, 1)
    """
    ordered = _prepare_returns(returns, confidence, 'VaR')
    if ordered is None:
        return 0.0

    if ordered[0] >= 0:
        return max(0.0, float(ordered[0]))

    index = min(max(_tail_index(ordered.size, confidence), 0), ordered.size - 1)
    return sanitize_value(abs(ordered[index]))


def conditional_value_at_risk(returns: Sequence[float], confidence: float = 0.95) -> float:
    """
    Historical Conditional VaR (expected shortfall).

    Mean magnitude of the worst floor(n * (1 - confidence)) returns, with that
    count clamped to [1, n - 1].

    When no return is negative, the mean of the same number of smallest gains
    is used, capped at the smallest gain so the no-loss figure never exceeds
    the VaR.

    Returns:
        CVaR as a positive percentage (0.0 with fewer than 2 returns)

    Raises:
        ValueError: If confidence is outside (0, 1)
    """
    ordered = _prepare_returns(returns, confidence, 'CVaR')
    if ordered is None:
        return 0.0

    count = min(max(_tail_index(ordered.size, confidence), 1), ordered.size - 1)

    if ordered[0] >= 0:
        smallest_gains = ordered[:max(1, count)]
        return max(0.0, min(float(smallest_gains.mean()), float(ordered[0])))

    worst = ordered[:count]
    return sanitize_value(np.abs(worst).mean())


class BenchmarkCache:
    """
    Memoized benchmark returns keyed by (start_date, end_date) ISO dates.

    Owned by the caller and passed explicitly to calculate_alpha(); lives as
    long as the caller keeps it.

    Example:
        >>> cache = BenchmarkCache()
        >>> calculate_alpha(trades, 12.5, benchmark=fetch_sp500, cache=cache)
    """

    def __init__(self) -> None:
        self._entries: Dict[Tuple[str, str], float] = {}

    @staticmethod
    def make_key(start: pd.Timestamp, end: pd.Timestamp) -> Tuple[str, str]:
        return (start.date().isoformat(), end.date().isoformat())

    def get(self, start: pd.Timestamp, end: pd.Timestamp) -> Optional[float]:
        return self._entries.get(self.make_key(start, end))

    def set(self, start: pd.Timestamp, end: pd.Timestamp, value: float) -> None:
        self._entries[self.make_key(start, end)] = float(value)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Tuple[str, str]) -> bool:
        return key in self._entries


def _resolve_benchmark(
    benchmark: Union[float, BenchmarkProvider],
    start: pd.Timestamp,
    end: pd.Timestamp,
    cache: Optional[BenchmarkCache]
) -> float:
    if not callable(benchmark):
        return sanitize_value(float(benchmark))

    if cache is not None:
        cached = cache.get(start, end)
        if cached is not None:
            logger.debug(f"Using cached benchmark return for {start.date()} - {end.date()}")
            return cached

    try:
        value = sanitize_value(float(benchmark(start, end)))
    except Exception as e:
        log_exception(
            logger,
            f"Benchmark provider failed for {start.date()} - {end.date()}, using 0%",
            exc=e,
            error_code=ErrorCode.BENCHMARK_UNAVAILABLE,
            level=logging.WARNING,
        )
        return 0.0

    if cache is not None:
        cache.set(start, end, value)
    return value


def calculate_alpha(
    trades: Sequence[Trade],
    total_return: float,
    benchmark: Optional[Union[float, BenchmarkProvider]] = None,
    cache: Optional[BenchmarkCache] = None
) -> float:
    """
    Excess return over a benchmark for the trades' calendar window.

    The window runs from the earliest entry date to the latest exit date.

    Args:
        trades: Trade log
        total_return: Strategy total return in percent
        benchmark: Benchmark return in percent, or a callable
            (start, end) -> percent. A failing callable counts as 0%.
        cache: Optional BenchmarkCache for provider results

    Returns:
        total_return - benchmark_return, or 0.0 without trades or benchmark
    """
    if not trades or benchmark is None:
        return 0.0

    start = min(t.entry_date for t in trades)
    end = max(t.exit_date for t in trades)

    benchmark_return = _resolve_benchmark(benchmark, start, end, cache)
    return sanitize_value(total_return - benchmark_return)
