"""
Trade-level aggregates: outcome partition, profit factor, streaks and costs.

Profit factor convention: profits with no losses is unbounded and reported as
MAX_PROFIT_FACTOR; no profits and no losses is 0.
"""

# Standard library imports
from typing import Dict, List, Sequence, Tuple

# Local imports
from ..trades import Trade


# Maximum profit factor when there are profits but no losses
MAX_PROFIT_FACTOR = 999.0


def partition_trades(trades: Sequence[Trade]) -> Tuple[List[Trade], List[Trade], List[Trade]]:
    """
    Split trades by outcome.

    Returns:
        (winners, losers, break_even) with profit_loss > 0, < 0 and == 0
    """
    winners = [t for t in trades if t.profit_loss > 0]
    losers = [t for t in trades if t.profit_loss < 0]
    break_even = [t for t in trades if t.profit_loss == 0]
    return winners, losers, break_even


def bounded_ratio(numerator: float, denominator: float) -> float:
    """
    numerator / denominator for non-negative magnitudes.

    A zero denominator gives MAX_PROFIT_FACTOR when the numerator is positive,
    0.0 otherwise.
    """
    if denominator == 0:
        return MAX_PROFIT_FACTOR if numerator > 0 else 0.0
    return numerator / denominator


def profit_factor(returns: Sequence[float]) -> float:
    """
    Gross profit / gross loss.

    Example:
        >>> profit_factor([10, 5, -3, -2])
        3.0
    """
    total_profit = sum(r for r in returns if r > 0)
    total_loss = abs(sum(r for r in returns if r < 0))
    return bounded_ratio(total_profit, total_loss)


def consecutive_streaks(returns: Sequence[float]) -> Tuple[int, int]:
    """
    Longest runs of winning and losing results, in order.

    A break-even result ends both kinds of run.

    Returns:
        (max_consecutive_wins, max_consecutive_losses)
    """
    max_wins = max_losses = 0
    wins = losses = 0
    for r in returns:
        if r > 0:
            wins += 1
            losses = 0
        elif r < 0:
            losses += 1
            wins = 0
        else:
            wins = losses = 0
        max_wins = max(max_wins, wins)
        max_losses = max(max_losses, losses)
    return max_wins, max_losses


def cost_breakdown(trades: Sequence[Trade], net_profit_loss: float) -> Dict[str, float]:
    """
    Attribute trading costs.

    Args:
        trades: Trades carrying optional fees, spread and commission
        net_profit_loss: Sum of profit_loss across the same trades

    Returns:
        Totals per cost kind, total_costs, potential_profit_without_costs and
        costs_percentage (costs relative to |net P/L|, 0 when net P/L is 0)
    """
    total_fees = sum(t.fees or 0.0 for t in trades)
    total_spread = sum(t.spread or 0.0 for t in trades)
    total_commission = sum(t.commission or 0.0 for t in trades)
    total_costs = total_fees + total_spread + total_commission

    if net_profit_loss != 0:
        costs_percentage = total_costs / abs(net_profit_loss) * 100.0
    else:
        costs_percentage = 0.0

    return {
        'total_fees': total_fees,
        'total_spread': total_spread,
        'total_commission': total_commission,
        'total_costs': total_costs,
        'potential_profit_without_costs': net_profit_loss + total_costs,
        'costs_percentage': costs_percentage,
    }
