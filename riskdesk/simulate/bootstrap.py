"""
Bootstrap resampling of historical trade returns.

Two flavours:

- run_bootstrap_projection() resamples the full-length return series and
  compounds it onto an initial capital (multiplicative model) to project a
  distribution of equity curves.
- summarize_bootstrap() resamples the same way but sums the returns
  (additive model, like the Monte Carlo simulator) and summarizes per-sample
  Sharpe, Sortino, win rate and profit factor distributions.

Both draw i.i.d. with replacement; neither needs more than a return series.
"""

import logging
import math
from typing import Dict, Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..logging import ErrorCode, log_with_context
from ..metrics import stats
from ..trades import Trade, extract_returns
from .errors import ParameterError
from .random import RandomSource, make_random_source
from .results import (
    BootstrapResult,
    BootstrapStatistics,
    BootstrapSummary,
    DistributionSummary,
    PathPercentiles,
)


logger = logging.getLogger(__name__)

MIN_BOOTSTRAP_TRADES = 5

# Approximate Sharpe for the projector: 5% annual risk-free rate on monthly-like periods
PROJECTION_RISK_FREE_RATE = 0.05 / 12
PROJECTION_ANNUALIZATION = math.sqrt(12)

PROJECTION_CURVE_LEVELS = (5, 25, 50, 75, 95)
FINAL_RETURN_LEVELS = (5, 25, 50, 75, 95)
SPREAD_LEVELS = (25, 50, 75)

# Sentinels for degenerate samples in summarize_bootstrap()
SAMPLE_SHARPE_SENTINEL = 3.0
UNBOUNDED_PROFIT_FACTOR = 100.0
NEUTRAL_PROFIT_FACTOR = 1.0

ReturnsOrTrades = Union[Sequence[Trade], Sequence[float], np.ndarray, pd.Series]


def _check_positive(name: str, value: float, minimum: float = 1) -> None:
    if value < minimum:
        log_with_context(
            logger, logging.ERROR, f"Invalid bootstrap parameter {name}={value}",
            error_code=ErrorCode.SIMULATION_INVALID_PARAMS,
        )
        raise ParameterError(f"{name} must be >= {minimum}. Got: {value}")


def _resample(returns: np.ndarray, n_samples: int, source: RandomSource) -> np.ndarray:
    """n_samples full-length i.i.d. resamples, shape (n_samples, len(returns))."""
    return returns[source.choice_indices(returns.size, (n_samples, returns.size))]


def _projection_sharpe(samples: np.ndarray) -> np.ndarray:
    """Annualized-style Sharpe per sample row; 0 where the row has no dispersion."""
    means = samples.mean(axis=1)
    stds = samples.std(axis=1, ddof=0)
    sharpe = np.zeros_like(means)
    np.divide(means - PROJECTION_RISK_FREE_RATE, stds, out=sharpe, where=stds > 0)
    return sharpe * PROJECTION_ANNUALIZATION


def run_bootstrap_projection(
    returns_or_trades: ReturnsOrTrades,
    n_simulations: int = 1000,
    initial_capital: float = 100.0,
    n_display_curves: int = 10,
    rng: Optional[Union[RandomSource, np.random.Generator]] = None,
    seed: Optional[int] = None
) -> BootstrapResult:
    """
    Project equity curves by compounding bootstrap resamples of the history.

    Each simulation draws len(history) returns with replacement and compounds
    them onto initial_capital (equity *= 1 + r/100). Curves and statistics are
    reported as percent return relative to initial_capital.

    Args:
        returns_or_trades: Trade list or return series in percent
        n_simulations: Number of resampled curves
        initial_capital: Starting equity
        n_display_curves: How many of the simulated curves to keep for display
        rng: RandomSource or numpy Generator to draw from
        seed: Seed used when rng is not given

    Returns:
        BootstrapResult; an empty result with fewer than MIN_BOOTSTRAP_TRADES returns

    Raises:
        ParameterError: If n_simulations < 1, initial_capital <= 0 or
            n_display_curves < 0
    """
    _check_positive('n_simulations', n_simulations)
    _check_positive('n_display_curves', n_display_curves, minimum=0)
    if not initial_capital > 0:
        raise ParameterError(f"initial_capital must be positive. Got: {initial_capital}")

    returns = extract_returns(returns_or_trades)
    if returns.size < MIN_BOOTSTRAP_TRADES:
        log_with_context(
            logger,
            logging.WARNING,
            f"Bootstrap projection needs at least {MIN_BOOTSTRAP_TRADES} returns, got {returns.size}",
            error_code=ErrorCode.SIMULATION_DEGENERATE_INPUT,
        )
        return BootstrapResult()

    source = make_random_source(rng, seed)
    log_with_context(
        logger,
        logging.INFO,
        f"Running {n_simulations} bootstrap projections over {returns.size} returns",
        n_simulations=n_simulations,
        seed=seed,
    )

    samples = _resample(returns, n_simulations, source)
    growth = np.cumprod(1.0 + samples / 100.0, axis=1)
    equity = initial_capital * np.concatenate([np.ones((n_simulations, 1)), growth], axis=1)
    percent_curves = (equity - initial_capital) / initial_capital * 100.0

    _, drawdowns = stats.path_drawdowns(equity)
    final_returns = percent_curves[:, -1]

    statistics = BootstrapStatistics(
        final_returns=stats.percentile_table(final_returns, FINAL_RETURN_LEVELS),
        max_drawdowns=stats.percentile_table(drawdowns.max(axis=1), SPREAD_LEVELS),
        sharpe_ratios=stats.percentile_table(_projection_sharpe(samples), SPREAD_LEVELS),
    )

    return BootstrapResult(
        equity_curves=percent_curves[:n_display_curves].copy(),
        statistics=statistics,
        time_points=np.linspace(0.0, 100.0, returns.size + 1),
        percentile_curves=PathPercentiles.from_paths(percent_curves, PROJECTION_CURVE_LEVELS),
        n_simulations=n_simulations,
        initial_capital=float(initial_capital),
    )


def _sample_statistics(samples: np.ndarray) -> Dict[str, np.ndarray]:
    """Per-row final return, max drawdown, Sharpe, Sortino, win rate and profit factor."""
    n_samples, size = samples.shape
    curves = np.concatenate([np.zeros((n_samples, 1)), np.cumsum(samples, axis=1)], axis=1)
    _, drawdowns = stats.path_drawdowns(curves)

    means = samples.mean(axis=1)
    stds = samples.std(axis=1, ddof=0)
    sharpe = np.sign(means) * SAMPLE_SHARPE_SENTINEL
    np.divide(means, stds, out=sharpe, where=stds > 0)

    losses = np.where(samples < 0, samples, 0.0)
    n_losses = (samples < 0).sum(axis=1)
    downside = np.full(n_samples, stats.EPSILON)
    np.sqrt((losses ** 2).sum(axis=1) / np.maximum(n_losses, 1), out=downside, where=n_losses > 0)
    sortino = means / downside

    gross_profit = np.where(samples > 0, samples, 0.0).sum(axis=1)
    gross_loss = -losses.sum(axis=1)
    profit_factor = np.where(gross_profit > 0, UNBOUNDED_PROFIT_FACTOR, NEUTRAL_PROFIT_FACTOR)
    np.divide(gross_profit, gross_loss, out=profit_factor, where=gross_loss > 0)

    return {
        'curves': curves,
        'final_returns': curves[:, -1],
        'max_drawdowns': drawdowns.max(axis=1),
        'sharpe_ratios': sharpe,
        'sortino_ratios': sortino,
        'win_rates': (samples > 0).sum(axis=1) / size * 100.0,
        'profit_factors': profit_factor,
    }


def summarize_bootstrap(
    returns: ReturnsOrTrades,
    n_samples: int = 2000,
    n_display_curves: int = 20,
    rng: Optional[Union[RandomSource, np.random.Generator]] = None,
    seed: Optional[int] = None
) -> BootstrapSummary:
    """
    Distributions of per-sample performance statistics from bootstrap resamples.

    Each sample draws len(returns) returns with replacement; its equity curve is
    their running sum from 0. Per sample:

    - Sharpe: mean / std (+3 or -3 by the sign of the mean when std is 0)
    - Sortino: mean / RMS of the negative returns (EPSILON when there are none)
    - Profit factor: gross profit / gross loss, 100 with no losses, 1 with neither

    Args:
        returns: Return series in percent (or a Trade list)
        n_samples: Number of bootstrap samples
        n_display_curves: How many sample equity curves to keep
        rng: RandomSource or numpy Generator to draw from
        seed: Seed used when rng is not given

    Returns:
        BootstrapSummary (zeroed when returns is empty)

    Raises:
        ParameterError: If n_samples < 1 or n_display_curves < 0
    """
    _check_positive('n_samples', n_samples)
    _check_positive('n_display_curves', n_display_curves, minimum=0)

    values = extract_returns(returns)
    if values.size == 0:
        log_with_context(
            logger,
            logging.WARNING,
            "No returns supplied for bootstrap summary, returning zeroed summary",
            error_code=ErrorCode.SIMULATION_DEGENERATE_INPUT,
        )
        return BootstrapSummary()

    source = make_random_source(rng, seed)
    per_sample = _sample_statistics(_resample(values, n_samples, source))

    return BootstrapSummary(
        equity_curves=per_sample['curves'][:n_display_curves].copy(),
        final_returns=DistributionSummary.from_values(per_sample['final_returns']),
        max_drawdowns=DistributionSummary.from_values(per_sample['max_drawdowns']),
        sharpe_ratios=DistributionSummary.from_values(per_sample['sharpe_ratios']),
        sortino_ratios=DistributionSummary.from_values(per_sample['sortino_ratios']),
        win_rates=DistributionSummary.from_values(per_sample['win_rates']),
        profit_factors=DistributionSummary.from_values(per_sample['profit_factors']),
        n_samples=n_samples,
    )
