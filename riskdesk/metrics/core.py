"""
Performance metrics calculator for a historical trade log.

calculate_performance_metrics() is a pure function over a list of Trade
objects. All percentages are in percentage points; the equity curve is the
running sum of per-trade profit/loss starting at 0 (additive model).

No input ever raises: an empty log gives empty_metrics(), and degenerate
divisions are replaced by sentinels (0.0 or MAX_PROFIT_FACTOR).
"""

# Standard library imports
import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

# Third-party imports
import numpy as np

# Local imports
from ..data.sanitization import sanitize_for_json, sanitize_value
from ..logging import log_with_context
from ..trades import Trade, sort_trades
from . import stats
from .duration import (
    NO_DATA,
    duration_breakdown,
    duration_statistics,
    summarize_duration_correlation,
)
from .risk import (
    BenchmarkCache,
    BenchmarkProvider,
    calculate_alpha,
    conditional_value_at_risk,
    value_at_risk,
)
from .trade import (
    MAX_PROFIT_FACTOR,
    bounded_ratio,
    consecutive_streaks,
    cost_breakdown,
    partition_trades,
)


logger = logging.getLogger(__name__)

DEFAULT_RISK_FREE_RATE = 0.02
TRADING_DAYS_PER_YEAR = 252
DAYS_PER_MONTH = 30.44


@dataclass
class PerformanceMetrics:
    """Descriptive statistics of a trade log. Percent fields are in percentage points."""

    total_trades: int = 0
    strategy_duration_days: float = 0.0

    # Win-rate family
    global_win_rate: float = 0.0
    win_rate_excluding_breakeven: float = 0.0
    win_or_breakeven_rate: float = 0.0
    break_even_rate: float = 0.0
    loss_rate: float = 0.0

    # Profit / loss
    total_return: float = 0.0
    total_profit: float = 0.0
    total_loss: float = 0.0
    profit_factor: float = 0.0
    gain_loss_ratio: float = 0.0
    gross_expectancy: float = 0.0
    net_expectancy: float = 0.0
    average_win: float = 0.0
    average_loss: float = 0.0
    expectancy_score: float = 0.0

    # Costs
    total_fees: float = 0.0
    total_spread: float = 0.0
    total_commission: float = 0.0
    total_costs: float = 0.0
    potential_profit_without_costs: float = 0.0
    costs_percentage: float = 0.0

    # Equity and drawdown
    equity_curve: List[float] = field(default_factory=lambda: [0.0])
    max_drawdown: float = 0.0
    max_drawdown_points: float = 0.0
    calmar_ratio: float = 0.0

    # Risk-adjusted
    sharpe_ratio: float = 0.0
    sortino_ratio: float = 0.0
    return_volatility: float = 0.0
    risk_of_ruin: float = 0.0

    # Streaks
    max_consecutive_wins: int = 0
    max_consecutive_losses: int = 0

    # Time
    annualized_return: float = 0.0
    average_monthly_performance: float = 0.0

    # Holding periods
    average_trade_duration: float = 0.0
    min_trade_duration: float = 0.0
    max_trade_duration: float = 0.0
    short_duration_win_rate: float = 0.0
    medium_duration_win_rate: float = 0.0
    long_duration_win_rate: float = 0.0
    very_long_duration_win_rate: float = 0.0
    short_duration_break_even_rate: float = 0.0
    medium_duration_break_even_rate: float = 0.0
    long_duration_break_even_rate: float = 0.0
    very_long_duration_break_even_rate: float = 0.0
    duration_correlation: str = NO_DATA

    # Tail risk
    value_at_risk_95: float = 0.0
    value_at_risk_99: float = 0.0
    conditional_var_95: float = 0.0
    conditional_var_99: float = 0.0

    alpha: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe dictionary of all fields."""
        return sanitize_for_json(asdict(self))


def empty_metrics() -> PerformanceMetrics:
    """Metrics for an empty trade log: zeros and 'No data'."""
    return PerformanceMetrics()


def _rescale_return(total_return: float, exponent: float) -> float:
    """
    ((1 + total/100) ** exponent - 1) * 100.

    A total loss of 100% or more stays at -100. Growth that overflows a float
    is reported as 0.0, like any other non-finite result.
    """
    if total_return <= -100.0:
        return -100.0
    try:
        growth = math.exp(math.log1p(total_return / 100.0) * exponent)
    except OverflowError:
        return 0.0
    return sanitize_value((growth - 1.0) * 100.0)


def _per_trade_returns(curve: np.ndarray) -> np.ndarray:
    """
    Successive balance changes divided by the prior balance.

    Starts after the first trade (the leading 0 base has no prior balance); a
    zero prior balance gives a 0.0 return.
    """
    balances = curve[1:]
    if balances.size < 2:
        return np.array([], dtype=float)

    prior = balances[:-1]
    deltas = np.diff(balances)
    returns = np.zeros_like(deltas)
    nonzero = prior != 0
    returns[nonzero] = deltas[nonzero] / prior[nonzero]
    return returns


def calculate_performance_metrics(
    trades: Sequence[Trade],
    benchmark_return: Optional[Union[float, BenchmarkProvider]] = None,
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
    benchmark_cache: Optional[BenchmarkCache] = None
) -> PerformanceMetrics:
    """
    Calculate descriptive performance and risk metrics for a trade log.

    Args:
        trades: Closed trades, in any order (sorted internally by entry date;
            the caller's list is not modified)
        benchmark_return: Benchmark return in percent over the log's window, or
            a provider callable (start, end) -> percent. None gives alpha 0.
        risk_free_rate: Per-trade risk-free rate for Sharpe/Sortino
        benchmark_cache: Optional cache for provider results

    Returns:
        PerformanceMetrics (empty_metrics() for an empty log)
    """
    if not trades:
        log_with_context(logger, logging.DEBUG, "No trades supplied, returning empty metrics")
        return empty_metrics()

    ordered = sort_trades(trades)
    n = len(ordered)
    returns = [t.profit_loss for t in ordered]

    winners, losers, break_even = partition_trades(ordered)
    n_win, n_loss, n_be = len(winners), len(losers), len(break_even)

    global_win_rate = n_win / n * 100.0
    decided = n - n_be
    win_rate_excluding_breakeven = n_win / decided * 100.0 if decided else 0.0
    win_or_breakeven_rate = (n_win + n_be) / n * 100.0
    break_even_rate = n_be / n * 100.0
    loss_rate = n_loss / n * 100.0

    total_profit = sum(t.profit_loss for t in winners)
    total_loss = abs(sum(t.profit_loss for t in losers))
    net_profit_loss = sum(returns)
    average_win = total_profit / n_win if n_win else 0.0
    average_loss = total_loss / n_loss if n_loss else 0.0

    costs = cost_breakdown(ordered, net_profit_loss)

    curve = stats.equity_curve(returns, base=0.0)
    total_return = float(curve[-1])
    max_drawdown_points = stats.max_drawdown_points(curve)

    per_trade = _per_trade_returns(curve)
    max_wins, max_losses = consecutive_streaks(returns)

    first_entry = ordered[0].entry_date
    last_exit = max(t.exit_date for t in ordered)
    duration_days = (last_exit - first_entry).total_seconds() / 86400.0

    annualized_return = 0.0
    average_monthly_performance = 0.0
    if duration_days > 0:
        annualized_return = _rescale_return(total_return, 365.0 / duration_days)
        months = duration_days / DAYS_PER_MONTH
        if months < 1:
            average_monthly_performance = total_return
        else:
            average_monthly_performance = _rescale_return(total_return, 1.0 / months)

    return_volatility = 0.0
    if duration_days > 0 and per_trade.size:
        return_volatility = stats.std(per_trade) * math.sqrt(TRADING_DAYS_PER_YEAR) * 100.0

    breakdown = duration_breakdown(ordered)
    holding = duration_statistics(ordered)

    alpha = calculate_alpha(ordered, total_return, benchmark=benchmark_return, cache=benchmark_cache)

    metrics = PerformanceMetrics(
        total_trades=n,
        strategy_duration_days=duration_days,
        global_win_rate=global_win_rate,
        win_rate_excluding_breakeven=win_rate_excluding_breakeven,
        win_or_breakeven_rate=win_or_breakeven_rate,
        break_even_rate=break_even_rate,
        loss_rate=loss_rate,
        total_return=total_return,
        total_profit=total_profit,
        total_loss=total_loss,
        profit_factor=bounded_ratio(total_profit, total_loss),
        gain_loss_ratio=bounded_ratio(average_win, average_loss),
        gross_expectancy=net_profit_loss / n,
        net_expectancy=(total_profit - total_loss) / n,
        average_win=average_win,
        average_loss=average_loss,
        expectancy_score=global_win_rate * average_win - loss_rate * average_loss,
        equity_curve=[float(v) for v in curve],
        max_drawdown=stats.max_drawdown(curve),
        max_drawdown_points=max_drawdown_points,
        calmar_ratio=bounded_ratio(total_return, max_drawdown_points),
        sharpe_ratio=stats.sharpe_ratio(per_trade, risk_free_rate),
        sortino_ratio=stats.sortino_ratio(per_trade, risk_free_rate),
        return_volatility=sanitize_value(return_volatility),
        risk_of_ruin=(loss_rate / 100.0) ** 3,
        max_consecutive_wins=max_wins,
        max_consecutive_losses=max_losses,
        annualized_return=annualized_return,
        average_monthly_performance=average_monthly_performance,
        average_trade_duration=holding['average'],
        min_trade_duration=holding['min'],
        max_trade_duration=holding['max'],
        short_duration_win_rate=breakdown['short']['win_rate'],
        medium_duration_win_rate=breakdown['medium']['win_rate'],
        long_duration_win_rate=breakdown['long']['win_rate'],
        very_long_duration_win_rate=breakdown['very_long']['win_rate'],
        short_duration_break_even_rate=breakdown['short']['break_even_rate'],
        medium_duration_break_even_rate=breakdown['medium']['break_even_rate'],
        long_duration_break_even_rate=breakdown['long']['break_even_rate'],
        very_long_duration_break_even_rate=breakdown['very_long']['break_even_rate'],
        duration_correlation=summarize_duration_correlation(breakdown),
        value_at_risk_95=value_at_risk(returns, 0.95),
        value_at_risk_99=value_at_risk(returns, 0.99),
        conditional_var_95=conditional_value_at_risk(returns, 0.95),
        conditional_var_99=conditional_value_at_risk(returns, 0.99),
        alpha=alpha,
        **costs,
    )

    log_with_context(
        logger,
        logging.DEBUG,
        f"Calculated metrics for {n} trades",
        total_return=total_return,
        max_drawdown=metrics.max_drawdown,
    )
    return metrics
