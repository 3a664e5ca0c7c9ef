"""
riskdesk: performance and risk analytics for a trading journal.

Turns a historical trade log into descriptive performance statistics and
into simulated distributions of future equity paths.

Usage:
    from riskdesk import trades_from_records, calculate_performance_metrics, run_monte_carlo

    trades = trades_from_records(records)
    metrics = calculate_performance_metrics(trades)
    outlook = run_monte_carlo(trades, seed=42)
"""

__version__ = "0.1.0"

from .trades import (
    Direction,
    Trade,
    trades_from_records,
    trades_from_frame,
    trades_to_frame,
    sort_trades,
    to_return_series,
    extract_returns,
)

from .metrics import (
    PerformanceMetrics,
    calculate_performance_metrics,
    empty_metrics,
    value_at_risk,
    conditional_value_at_risk,
    calculate_alpha,
    BenchmarkCache,
    MAX_PROFIT_FACTOR,
)

from .simulate import (
    run_monte_carlo,
    run_bootstrap_projection,
    summarize_bootstrap,
    GBMParameters,
    simulate_gbm,
    simulate_multiple_gbm,
    RandomSource,
    ParameterError,
    MonteCarloResult,
    BootstrapResult,
    BootstrapSummary,
    GBMResult,
    MultiGBMResult,
)

__all__ = [
    '__version__',
    # Trades
    'Direction',
    'Trade',
    'trades_from_records',
    'trades_from_frame',
    'trades_to_frame',
    'sort_trades',
    'to_return_series',
    'extract_returns',
    # Metrics
    'PerformanceMetrics',
    'calculate_performance_metrics',
    'empty_metrics',
    'value_at_risk',
    'conditional_value_at_risk',
    'calculate_alpha',
    'BenchmarkCache',
    'MAX_PROFIT_FACTOR',
    # Simulation
    'run_monte_carlo',
    'run_bootstrap_projection',
    'summarize_bootstrap',
    'GBMParameters',
    'simulate_gbm',
    'simulate_multiple_gbm',
    'RandomSource',
    'ParameterError',
    'MonteCarloResult',
    'BootstrapResult',
    'BootstrapSummary',
    'GBMResult',
    'MultiGBMResult',
]
