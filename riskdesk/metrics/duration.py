"""
Holding-period analysis.

Trades are bucketed by duration in hours:

    short      < 2h
    medium     2h - 24h (both ends inclusive)
    long       > 24h - 48h
    very_long  > 48h

A bucket needs MIN_BUCKET_TRADES trades before its win rate is used in the
duration/performance summary.
"""

# Standard library imports
from typing import Dict, List, Sequence

# Local imports
from ..trades import Trade


MIN_BUCKET_TRADES = 3

DURATION_BUCKETS = ('short', 'medium', 'long', 'very_long')

BUCKET_LABELS = {
    'short': 'short (<2h)',
    'medium': 'medium (2-24h)',
    'long': 'long (24-48h)',
    'very_long': 'very long (>48h)',
}

NO_DATA = "No data"
NOT_ENOUGH_DATA = "Not enough data"


def classify_duration(hours: float) -> str:
    """
    Bucket name for a holding period.

    Example:
        >>> classify_duration(2.0)
        'medium'
    """
    if hours < 2:
        return 'short'
    if hours <= 24:
        return 'medium'
    if hours <= 48:
        return 'long'
    return 'very_long'


def duration_breakdown(trades: Sequence[Trade]) -> Dict[str, Dict[str, float]]:
    """
    Per-bucket trade count, win rate and break-even rate (percent).

    Every bucket is present; empty buckets report zeros.
    """
    grouped: Dict[str, List[Trade]] = {bucket: [] for bucket in DURATION_BUCKETS}
    for trade in trades:
        grouped[classify_duration(trade.duration_hours)].append(trade)

    breakdown = {}
    for bucket, members in grouped.items():
        count = len(members)
        if count:
            win_rate = sum(1 for t in members if t.profit_loss > 0) / count * 100.0
            break_even_rate = sum(1 for t in members if t.profit_loss == 0) / count * 100.0
        else:
            win_rate = break_even_rate = 0.0
        breakdown[bucket] = {
            'count': count,
            'win_rate': win_rate,
            'break_even_rate': break_even_rate,
        }
    return breakdown


def summarize_duration_correlation(breakdown: Dict[str, Dict[str, float]]) -> str:
    """
    One-line summary naming the holding period with the best win rate.

    Only buckets with at least MIN_BUCKET_TRADES trades are considered. Ties go
    to the shorter bucket.
    """
    significant = [
        bucket for bucket in DURATION_BUCKETS
        if breakdown.get(bucket, {}).get('count', 0) >= MIN_BUCKET_TRADES
    ]

    if len(significant) >= 2:
        best = significant[0]
        for bucket in significant[1:]:
            if breakdown[bucket]['win_rate'] > breakdown[best]['win_rate']:
                best = bucket
        return (
            f"{BUCKET_LABELS[best].capitalize()} trades have the best results "
            f"({breakdown[best]['win_rate']:.1f}%)"
        )

    if len(significant) == 1:
        only = significant[0]
        return (
            f"Only {BUCKET_LABELS[only]} trades have enough data "
            f"({breakdown[only]['win_rate']:.1f}%)"
        )

    return NOT_ENOUGH_DATA


def duration_statistics(trades: Sequence[Trade]) -> Dict[str, float]:
    """Average, minimum and maximum holding period in hours."""
    if not trades:
        return {'average': 0.0, 'min': 0.0, 'max': 0.0}
    hours = [t.duration_hours for t in trades]
    return {
        'average': sum(hours) / len(hours),
        'min': min(hours),
        'max': max(hours),
    }
