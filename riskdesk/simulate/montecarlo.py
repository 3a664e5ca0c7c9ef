"""
Monte Carlo resampling of historical trade returns.

Each simulation builds a synthetic sequence of n_trades returns by drawing,
with replacement, either single historical returns (i.i.d.) or contiguous
blocks of block_size returns (block resampling, which keeps short-range
autocorrelation). Equity is the running sum of the drawn percentage returns,
starting at 0.

Usage:
    from riskdesk.simulate import run_monte_carlo

    result = run_monte_carlo(trades, n_simulations=1000, n_trades=500, seed=42)
    print(result.profit_probability, result.percentiles.p5)
"""

import logging
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..logging import ErrorCode, log_with_context
from ..metrics import stats
from ..trades import Trade, extract_returns
from .errors import ParameterError
from .random import RandomSource, make_random_source
from .results import (
    DrawdownDistribution,
    MonteCarloResult,
    MonteCarloStatistics,
    PathPercentiles,
    PercentileTable,
)


logger = logging.getLogger(__name__)

# A path has a significant drawdown beyond this many percent of its peak
SIGNIFICANT_DRAWDOWN = 10.0
# ... and has recovered once equity is back to this fraction of the peak
RECOVERY_FRACTION = 0.9


def _validate_counts(n_simulations: int, n_trades: int, block_size: int, n_display_paths: int) -> None:
    problems = []
    if n_simulations < 1:
        problems.append(f"n_simulations must be >= 1. Got: {n_simulations}")
    if n_trades < 1:
        problems.append(f"n_trades must be >= 1. Got: {n_trades}")
    if block_size < 1:
        problems.append(f"block_size must be >= 1. Got: {block_size}")
    if n_display_paths < 0:
        problems.append(f"n_display_paths must be >= 0. Got: {n_display_paths}")
    if problems:
        message = "; ".join(problems)
        log_with_context(
            logger, logging.ERROR, f"Invalid Monte Carlo parameters: {message}",
            error_code=ErrorCode.SIMULATION_INVALID_PARAMS,
        )
        raise ParameterError(message)


def build_blocks(returns: np.ndarray, block_size: int) -> np.ndarray:
    """
    Every contiguous window of block_size returns.

    Returns:
        Array of shape (len(returns) - block_size + 1, block_size); empty when
        there are fewer returns than block_size
    """
    n_blocks = returns.size - block_size + 1
    if n_blocks < 1:
        return np.empty((0, block_size), dtype=float)
    starts = np.arange(n_blocks)[:, None] + np.arange(block_size)
    return returns[starts]


def _draw_sequences(
    returns: np.ndarray,
    n_simulations: int,
    n_trades: int,
    block_resampling: bool,
    block_size: int,
    source: RandomSource
) -> np.ndarray:
    """Synthetic return sequences, shape (n_simulations, n_trades)."""
    if not block_resampling:
        return returns[source.choice_indices(returns.size, (n_simulations, n_trades))]

    blocks = build_blocks(returns, block_size)
    blocks_per_path = -(-n_trades // block_size)
    picks = source.choice_indices(len(blocks), (n_simulations, blocks_per_path))
    # Concatenate the drawn blocks, then truncate the last one
    sequences = blocks[picks].reshape(n_simulations, blocks_per_path * block_size)
    return sequences[:, :n_trades]


def _recovery_rate(curves: np.ndarray, peaks: np.ndarray, drawdowns: np.ndarray) -> float:
    """
    Percent of paths that climbed back to RECOVERY_FRACTION of their running
    peak after their first drawdown beyond SIGNIFICANT_DRAWDOWN.

    Paths that never had a significant drawdown are left out. 0.0 when no path had one.
    """
    significant = drawdowns > SIGNIFICANT_DRAWDOWN
    had_drawdown = significant.any(axis=1)
    if not had_drawdown.any():
        return 0.0

    first = np.argmax(significant, axis=1)
    steps = np.arange(curves.shape[1])
    after_first = steps[None, :] > first[:, None]
    back_up = (curves >= RECOVERY_FRACTION * peaks) & after_first
    recovered = back_up.any(axis=1) & had_drawdown
    return float(recovered.sum() / had_drawdown.sum() * 100.0)


def select_representative_paths(curves: np.ndarray, final_values: np.ndarray, n_paths: int) -> np.ndarray:
    """
    Display subsample chosen by rank of final value.

    The worst and best paths come first, followed by n_paths - 2 paths at
    evenly spaced ranks between them. With no more paths than n_paths, all
    paths are returned in rank order.
    """
    order = np.argsort(final_values, kind='stable')
    n = order.size
    if n_paths <= 0 or n == 0:
        return np.empty((0, curves.shape[1]), dtype=float)
    if n <= n_paths:
        return curves[order].copy()
    if n_paths == 1:
        return curves[order[:1]].copy()

    selected = [order[0], order[-1]]
    if n_paths > 2:
        step = (n - 2) / (n_paths - 2)
        selected.extend(order[int(np.floor(i * step))] for i in range(1, n_paths - 1))
    return curves[selected].copy()


def run_monte_carlo(
    returns_or_trades: Union[Sequence[Trade], Sequence[float], np.ndarray, pd.Series],
    n_simulations: int = 1000,
    n_trades: int = 500,
    block_resampling: bool = True,
    block_size: int = 5,
    drawdown_threshold: float = 25.0,
    n_display_paths: int = 10,
    rng: Optional[Union[RandomSource, np.random.Generator]] = None,
    seed: Optional[int] = None
) -> MonteCarloResult:
    """
    Resample historical trade returns into many alternative equity paths.

    Args:
        returns_or_trades: Trade list (ordered chronologically) or a return
            series in percent
        n_simulations: Number of simulated paths
        n_trades: Returns per simulated path (independent of history length)
        block_resampling: Draw contiguous blocks instead of single returns
        block_size: Block length in block mode
        drawdown_threshold: Max drawdown (percent) counted as a large drawdown
        n_display_paths: Size of the display subsample
        rng: RandomSource or numpy Generator to draw from
        seed: Seed used when rng is not given

    Returns:
        MonteCarloResult; MonteCarloResult.empty() when there are no returns or,
        in block mode, fewer returns than block_size

    Raises:
        ParameterError: If a count is below 1
    """
    _validate_counts(n_simulations, n_trades, block_size, n_display_paths)

    returns = extract_returns(returns_or_trades)
    if returns.size == 0 or (block_resampling and returns.size < block_size):
        log_with_context(
            logger,
            logging.WARNING,
            f"Not enough returns ({returns.size}) for Monte Carlo simulation, returning empty result",
            error_code=ErrorCode.SIMULATION_DEGENERATE_INPUT,
            block_resampling=block_resampling,
            block_size=block_size,
        )
        return MonteCarloResult.empty()

    source = make_random_source(rng, seed)
    log_with_context(
        logger,
        logging.INFO,
        f"Running {n_simulations} Monte Carlo simulations of {n_trades} trades "
        f"({'block' if block_resampling else 'iid'} resampling, {returns.size} historical returns)",
        n_simulations=n_simulations,
        n_trades=n_trades,
        seed=seed,
    )

    sequences = _draw_sequences(returns, n_simulations, n_trades, block_resampling, block_size, source)
    curves = np.concatenate(
        [np.zeros((n_simulations, 1)), np.cumsum(sequences, axis=1)],
        axis=1,
    )

    peaks, drawdowns = stats.path_drawdowns(curves)
    final_values = curves[:, -1]
    max_drawdowns = drawdowns.max(axis=1)
    sorted_drawdowns = np.sort(max_drawdowns)

    skewness, kurtosis = stats.higher_moments(final_values)
    statistics = MonteCarloStatistics(
        mean_final_return=stats.mean(final_values),
        std_final_return=stats.std(final_values),
        skewness=skewness,
        kurtosis=kurtosis,
        max_drawdown_distribution=DrawdownDistribution(
            mean=stats.mean(max_drawdowns),
            median=stats.percentile(sorted_drawdowns, 50),
            p95=stats.percentile(sorted_drawdowns, 95),
        ),
        recovery_rate=_recovery_rate(curves, peaks, drawdowns),
    )

    result = MonteCarloResult(
        percentiles=PercentileTable.from_values(final_values),
        profit_probability=float(np.mean(final_values > 0) * 100.0),
        drawdown_risk=float(np.mean(max_drawdowns > drawdown_threshold) * 100.0),
        path_percentiles=PathPercentiles.from_paths(curves, stats.PATH_LEVELS),
        simulation_paths=select_representative_paths(curves, final_values, n_display_paths),
        statistics=statistics,
        n_simulations=n_simulations,
        n_trades=n_trades,
        block_resampling=block_resampling,
    )

    log_with_context(
        logger,
        logging.DEBUG,
        f"Monte Carlo complete: profit probability {result.profit_probability:.1f}%, "
        f"drawdown risk {result.drawdown_risk:.1f}%",
    )
    return result
