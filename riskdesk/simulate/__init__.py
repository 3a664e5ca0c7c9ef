"""
Simulation package for riskdesk.

Forward-looking outcome distributions from a trade log (Monte Carlo and
bootstrap resampling) and parametric price paths (Geometric Brownian Motion).

Usage:
    from riskdesk.simulate import run_monte_carlo, run_bootstrap_projection
    from riskdesk.simulate import GBMParameters, simulate_gbm, simulate_multiple_gbm

Every simulator accepts rng= (a RandomSource or numpy Generator) or seed= for
reproducible draws.
"""

# Simulators
from .montecarlo import (
    run_monte_carlo,
    build_blocks,
    select_representative_paths,
)
from .bootstrap import (
    run_bootstrap_projection,
    summarize_bootstrap,
    MIN_BOOTSTRAP_TRADES,
)
from .gbm import (
    GBMParameters,
    simulate_gbm,
    simulate_multiple_gbm,
)

# Random source
from .random import (
    RandomSource,
    make_random_source,
)

# Result objects
from .results import (
    PercentileTable,
    PathPercentiles,
    DrawdownDistribution,
    MonteCarloStatistics,
    MonteCarloResult,
    DistributionSummary,
    BootstrapStatistics,
    BootstrapResult,
    BootstrapSummary,
    GBMStats,
    GBMResult,
    MultiGBMResult,
)

from .errors import ParameterError

__all__ = [
    # Simulators
    'run_monte_carlo',
    'build_blocks',
    'select_representative_paths',
    'run_bootstrap_projection',
    'summarize_bootstrap',
    'MIN_BOOTSTRAP_TRADES',
    'GBMParameters',
    'simulate_gbm',
    'simulate_multiple_gbm',
    # Random source
    'RandomSource',
    'make_random_source',
    # Results
    'PercentileTable',
    'PathPercentiles',
    'DrawdownDistribution',
    'MonteCarloStatistics',
    'MonteCarloResult',
    'DistributionSummary',
    'BootstrapStatistics',
    'BootstrapResult',
    'BootstrapSummary',
    'GBMStats',
    'GBMResult',
    'MultiGBMResult',
    # Errors
    'ParameterError',
]
