"""
Statistics primitives shared by the metrics calculator and the simulators.

All functions are pure, accept lists or numpy arrays, never modify their
input, and return plain floats (or new arrays) with NaN/Inf replaced by the
documented sentinels.

Conventions:
- Standard deviation is the population form (ddof=0).
- Percentiles use linear interpolation between the floor and ceil ranks.
- Drawdowns are percentages of the running peak; a non-positive peak has no
  drawdown.
- Ratios are per-period; annualization is left to the caller.
"""

# Standard library imports
import math
from typing import Dict, Sequence, Tuple, Union

# Third-party imports
import numpy as np

# Local imports
from ..data.sanitization import sanitize_value


ArrayLike = Union[Sequence[float], np.ndarray]

# Denominator floor for downside deviation
EPSILON = 1e-4

# Normal-distribution convention for degenerate samples
NORMAL_SKEWNESS = 0.0
NORMAL_KURTOSIS = 3.0

FINAL_VALUE_LEVELS = (1, 5, 10, 25, 50, 75, 90, 95, 99)
PATH_LEVELS = (5, 10, 25, 50, 75, 90, 95)


def _as_array(values: ArrayLike) -> np.ndarray:
    return np.asarray(values, dtype=float).ravel()


def level_key(level: float) -> str:
    """Dictionary key for a percentile level: 5 -> 'p5', 2.5 -> 'p2.5'."""
    if float(level).is_integer():
        return f"p{int(level)}"
    return f"p{level:g}"


def percentile(sorted_values: ArrayLike, p: float) -> float:
    """
    Linear-interpolation percentile of an ascending-sorted sequence.

    Args:
        sorted_values: Values sorted ascending
        p: Percentile in [0, 100]

    Returns:
        0.0 for an empty sequence, the single value for length 1, otherwise
        the value interpolated at rank p/100 * (n - 1).

    Raises:
        ValueError: If p is outside [0, 100]
    """
    if not 0.0 <= p <= 100.0:
        raise ValueError(f"Percentile must be between 0 and 100. Got: {p}")

    n = len(sorted_values)
    if n == 0:
        return 0.0
    if n == 1:
        return float(sorted_values[0])

    index = p / 100.0 * (n - 1)
    lower = int(math.floor(index))
    upper = int(math.ceil(index))
    if lower == upper:
        return float(sorted_values[lower])

    weight = index - lower
    return float(sorted_values[lower] * (1.0 - weight) + sorted_values[upper] * weight)


def percentile_table(values: ArrayLike, levels: Sequence[float] = FINAL_VALUE_LEVELS) -> Dict[str, float]:
    """
    Summarize a sample as {'min', 'p1', ..., 'max'}.

    Sorts a copy of the values; an empty sample gives all zeros.
    """
    ordered = np.sort(_as_array(values))
    table = {'min': float(ordered[0]) if ordered.size else 0.0}
    for level in levels:
        table[level_key(level)] = percentile(ordered, level)
    table['max'] = float(ordered[-1]) if ordered.size else 0.0
    return table


def path_percentiles(paths: np.ndarray, levels: Sequence[float] = PATH_LEVELS) -> Dict[str, np.ndarray]:
    """
    Per-step percentile envelope across a set of paths.

    Args:
        paths: Array of shape (n_paths, n_steps)
        levels: Percentile levels in [0, 100]

    Returns:
        Dictionary mapping 'pX' to an array of length n_steps
    """
    paths = np.asarray(paths, dtype=float)
    if paths.ndim != 2 or paths.shape[0] == 0:
        n_steps = paths.shape[1] if paths.ndim == 2 else 0
        return {level_key(level): np.zeros(n_steps) for level in levels}

    ordered = np.sort(paths, axis=0)
    n = ordered.shape[0]
    envelopes = {}
    for level in levels:
        if not 0.0 <= level <= 100.0:
            raise ValueError(f"Percentile must be between 0 and 100. Got: {level}")
        # Same rank rule as percentile(), applied to every column at once
        index = level / 100.0 * (n - 1)
        lower = int(math.floor(index))
        upper = int(math.ceil(index))
        weight = index - lower
        envelopes[level_key(level)] = ordered[lower] * (1.0 - weight) + ordered[upper] * weight
    return envelopes


def mean(values: ArrayLike) -> float:
    """Arithmetic mean, 0.0 for an empty sample."""
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    return sanitize_value(arr.mean())


def std(values: ArrayLike) -> float:
    """Population standard deviation, 0.0 for an empty sample."""
    arr = _as_array(values)
    if arr.size == 0:
        return 0.0
    return sanitize_value(arr.std(ddof=0))


def higher_moments(values: ArrayLike) -> Tuple[float, float]:
    """
    Standardized third and fourth moments.

    Returns:
        (skewness, kurtosis); kurtosis is not excess (normal == 3). Degenerate
        samples (n < 3 or zero variance) give (0.0, 3.0).
    """
    arr = _as_array(values)
    if arr.size < 3:
        return NORMAL_SKEWNESS, NORMAL_KURTOSIS

    sd = arr.std(ddof=0)
    if sd == 0 or not np.isfinite(sd):
        return NORMAL_SKEWNESS, NORMAL_KURTOSIS

    z = (arr - arr.mean()) / sd
    skew = sanitize_value(np.mean(z ** 3), NORMAL_SKEWNESS)
    kurt = sanitize_value(np.mean(z ** 4), NORMAL_KURTOSIS)
    return skew, kurt


def skewness(values: ArrayLike) -> float:
    return higher_moments(values)[0]


def kurtosis(values: ArrayLike) -> float:
    return higher_moments(values)[1]


def drawdown_series(curve: ArrayLike) -> np.ndarray:
    """
    Drawdown at each point of an equity curve, in percent of the running peak.

    Points whose running peak is <= 0 have zero drawdown.
    """
    arr = _as_array(curve)
    if arr.size == 0:
        return np.array([], dtype=float)

    peak = np.maximum.accumulate(arr)
    drawdowns = np.zeros_like(arr)
    positive = peak > 0
    drawdowns[positive] = (peak[positive] - arr[positive]) / peak[positive] * 100.0
    return drawdowns


def path_drawdowns(paths: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Running peaks and drawdown percentages for each row of a path matrix.

    Same convention as drawdown_series(): a non-positive peak has no drawdown.

    Returns:
        (peaks, drawdowns), both with the shape of paths
    """
    paths = np.asarray(paths, dtype=float)
    peaks = np.maximum.accumulate(paths, axis=-1)
    drawdowns = np.zeros_like(paths)
    np.divide((peaks - paths) * 100.0, peaks, out=drawdowns, where=peaks > 0)
    return peaks, drawdowns


def max_drawdown(curve: ArrayLike) -> float:
    """
    Maximum drawdown of an equity curve, in percent.

    Example:
        >>> max_drawdown([100, 120, 90, 150, 80])  # peak 150 -> trough 80
        46.666...
    """
    drawdowns = drawdown_series(curve)
    if drawdowns.size == 0:
        return 0.0
    return sanitize_value(drawdowns.max())


def max_drawdown_points(curve: ArrayLike) -> float:
    """Largest peak-to-trough decline in the curve's own units."""
    arr = _as_array(curve)
    if arr.size == 0:
        return 0.0
    return sanitize_value((np.maximum.accumulate(arr) - arr).max())


def sharpe_ratio(returns: ArrayLike, risk_free_rate: float = 0.0) -> float:
    """
    (mean - risk_free_rate) / std over a single periodicity.

    Returns 0.0 for an empty sample or zero standard deviation.
    """
    arr = _as_array(returns)
    if arr.size == 0:
        return 0.0

    sd = arr.std(ddof=0)
    if sd == 0:
        return 0.0
    return sanitize_value((arr.mean() - risk_free_rate) / sd)


def sortino_ratio(returns: ArrayLike, risk_free_rate: float = 0.0) -> float:
    """
    Sortino ratio over a single periodicity.

    The denominator is the root mean square deviation of the returns that lie
    below the mean, floored at EPSILON (which also covers samples with no
    below-mean returns).
    """
    arr = _as_array(returns)
    if arr.size == 0:
        return 0.0

    avg = arr.mean()
    below = arr[arr < avg]
    if below.size:
        downside = math.sqrt(np.mean((below - avg) ** 2))
    else:
        downside = 0.0
    downside = max(downside, EPSILON)
    return sanitize_value((avg - risk_free_rate) / downside)


def equity_curve(returns: ArrayLike, base: float = 0.0, compound: bool = False) -> np.ndarray:
    """
    Build an equity curve from percentage returns.

    Args:
        returns: Percentage returns in order
        base: Leading value of the curve
        compound: If False (default), returns are summed onto base (additive
            percentage model). If True, base is multiplied by (1 + r/100) per step.

    Returns:
        Array of length len(returns) + 1 starting at base
    """
    arr = _as_array(returns)
    if compound:
        tail = base * np.cumprod(1.0 + arr / 100.0)
    else:
        tail = base + np.cumsum(arr)
    return np.concatenate(([float(base)], tail))
