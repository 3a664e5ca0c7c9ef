"""
Metrics package for riskdesk.

Descriptive performance and risk statistics for a historical trade log, plus
the statistics primitives shared with the simulators.

Main exports:
- calculate_performance_metrics: All trade-log metrics as a PerformanceMetrics object
- value_at_risk / conditional_value_at_risk: Historical tail-risk estimates
- calculate_alpha: Excess return over a benchmark, with an explicit BenchmarkCache
- percentile, max_drawdown, sharpe_ratio, sortino_ratio, ...: Statistics primitives
"""

# Core metrics calculation
from .core import (
    PerformanceMetrics,
    calculate_performance_metrics,
    empty_metrics,
    DEFAULT_RISK_FREE_RATE,
)

# Statistics primitives
from .stats import (
    percentile,
    percentile_table,
    path_percentiles,
    level_key,
    mean,
    std,
    higher_moments,
    skewness,
    kurtosis,
    drawdown_series,
    max_drawdown,
    max_drawdown_points,
    path_drawdowns,
    sharpe_ratio,
    sortino_ratio,
    equity_curve,
    EPSILON,
)

# Trade-level aggregates
from .trade import (
    MAX_PROFIT_FACTOR,
    partition_trades,
    bounded_ratio,
    profit_factor,
    consecutive_streaks,
    cost_breakdown,
)

# Holding periods
from .duration import (
    classify_duration,
    duration_breakdown,
    duration_statistics,
    summarize_duration_correlation,
    MIN_BUCKET_TRADES,
)

# Tail risk and benchmark
from .risk import (
    value_at_risk,
    conditional_value_at_risk,
    calculate_alpha,
    BenchmarkCache,
    MIN_VAR_TRADES,
)

__all__ = [
    # Core
    'PerformanceMetrics',
    'calculate_performance_metrics',
    'empty_metrics',
    'DEFAULT_RISK_FREE_RATE',
    # Statistics primitives
    'percentile',
    'percentile_table',
    'path_percentiles',
    'level_key',
    'mean',
    'std',
    'higher_moments',
    'skewness',
    'kurtosis',
    'drawdown_series',
    'max_drawdown',
    'max_drawdown_points',
    'path_drawdowns',
    'sharpe_ratio',
    'sortino_ratio',
    'equity_curve',
    'EPSILON',
    # Trade-level
    'MAX_PROFIT_FACTOR',
    'partition_trades',
    'bounded_ratio',
    'profit_factor',
    'consecutive_streaks',
    'cost_breakdown',
    # Durations
    'classify_duration',
    'duration_breakdown',
    'duration_statistics',
    'summarize_duration_correlation',
    'MIN_BUCKET_TRADES',
    # Tail risk
    'value_at_risk',
    'conditional_value_at_risk',
    'calculate_alpha',
    'BenchmarkCache',
    'MIN_VAR_TRADES',
]
