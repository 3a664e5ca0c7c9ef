"""
Geometric Brownian Motion price path simulator.

Discrete-time scheme, one step per delta_t:

    S' = S * exp(drift + sigma * sqrt(delta_t) * z)
    drift = (mu - sigma^2 / 2) * delta_t
            + mean_reversion_speed * ln(level / S) * delta_t   (if enabled)

z is a standard normal shock, optionally blended with a Student-t shock for
fat tails: z = (1 - f) * z + f * t with df = 10 / (f + 0.1).

Log moves are capped per step and log prices are held within float range,
so extreme drifts saturate instead of overflowing.

Usage:
    from riskdesk.simulate import GBMParameters, simulate_multiple_gbm

    params = GBMParameters(initial_price=100, mu=0.08, sigma=0.2,
                           delta_t=1 / 252, time_horizon=1.0)
    result = simulate_multiple_gbm(params, n_simulations=100, seed=7)
    result.percentiles['p50']
"""

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Union

import numpy as np

from ..data.sanitization import sanitize_value
from ..logging import ErrorCode, log_with_context
from ..metrics import stats
from .errors import ParameterError
from .random import RandomSource, make_random_source
from .results import GBMResult, GBMStats, MultiGBMResult, PathPercentiles


logger = logging.getLogger(__name__)

MULTI_PATH_LEVELS = (1, 5, 10, 25, 50, 75, 90, 95, 99)

# Sortino denominator when a path has no negative period return
MIN_DOWNSIDE = 0.001

# Log-price bounds and per-step log move; keeps every price a positive finite float
LOG_PRICE_CEILING = 709.0
LOG_PRICE_FLOOR = -708.0
MAX_LOG_STEP = 700.0


@dataclass
class GBMParameters:
    """
    GBM model parameters. Rates and volatility are annualized decimals.

    Attributes:
        initial_price: S0, must be positive
        mu: Drift
        sigma: Volatility, >= 0
        delta_t: Time step in years (1/252 for daily), > 0
        time_horizon: Total simulated time in years, > 0
        fat_tail_factor: 0 = normal shocks, 1 = Student-t shocks
        mean_reversion_speed: 0 disables mean reversion
        mean_reversion_level: Price level reverted to (defaults to initial_price)
    """
    initial_price: float
    mu: float
    sigma: float
    delta_t: float
    time_horizon: float
    fat_tail_factor: float = 0.0
    mean_reversion_speed: float = 0.0
    mean_reversion_level: Optional[float] = None

    def __post_init__(self) -> None:
        if self.mean_reversion_level is None:
            self.mean_reversion_level = self.initial_price

    @property
    def n_steps(self) -> int:
        # halves round up
        return int(math.floor(self.time_horizon / self.delta_t + 0.5))

    def validate(self) -> None:
        """
        Check parameter invariants.

        Raises:
            ParameterError: Listing every violated constraint
        """
        problems = []
        values = asdict(self)
        for name, value in values.items():
            if value is not None and not math.isfinite(value):
                problems.append(f"{name} must be finite. Got: {value}")
        if problems:
            self._reject(problems)

        if self.delta_t <= 0:
            problems.append(f"delta_t must be positive. Got: {self.delta_t}")
        if self.time_horizon <= 0:
            problems.append(f"time_horizon must be positive. Got: {self.time_horizon}")
        if self.sigma < 0:
            problems.append(f"sigma must be >= 0. Got: {self.sigma}")
        if not 0.0 <= self.fat_tail_factor <= 1.0:
            problems.append(f"fat_tail_factor must be between 0 and 1. Got: {self.fat_tail_factor}")
        if self.initial_price <= 0:
            problems.append(f"initial_price must be positive. Got: {self.initial_price}")
        if self.mean_reversion_speed < 0:
            problems.append(f"mean_reversion_speed must be >= 0. Got: {self.mean_reversion_speed}")
        if problems:
            self._reject(problems)

    def _reject(self, problems) -> None:
        message = "; ".join(problems)
        log_with_context(
            logger, logging.ERROR, f"Invalid GBM parameters: {message}",
            error_code=ErrorCode.SIMULATION_INVALID_PARAMS,
        )
        raise ParameterError(message)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'GBMParameters':
        """Build parameters from a mapping such as the 'gbm' settings section."""
        keys = ('initial_price', 'mu', 'sigma', 'delta_t', 'time_horizon',
                'fat_tail_factor', 'mean_reversion_speed', 'mean_reversion_level')
        return cls(**{key: values[key] for key in keys if key in values})


def _shock(source: RandomSource, fat_tail_factor: float) -> float:
    z = source.normal()
    if fat_tail_factor > 0:
        df = 10.0 / (fat_tail_factor + 0.1)
        t = source.student_t(df)
        z = (1.0 - fat_tail_factor) * z + fat_tail_factor * t
    return z


def _path_stats(params: GBMParameters, prices: np.ndarray, returns: np.ndarray, max_drawdown: float) -> GBMStats:
    final_price = float(prices[-1])
    total_return = (final_price - params.initial_price) / params.initial_price * 100.0

    annualization = math.sqrt(1.0 / params.delta_t)
    volatility = stats.std(returns) * annualization
    annual_return = total_return / params.time_horizon
    sharpe = annual_return / volatility if volatility > 0 else 0.0

    negative = returns[returns < 0]
    if negative.size:
        downside = math.sqrt(np.mean(negative ** 2)) * annualization
    else:
        downside = MIN_DOWNSIDE
    sortino = annual_return / downside if downside > 0 else 0.0

    skewness, kurtosis = stats.higher_moments(returns)
    return GBMStats(
        final_price=final_price,
        total_return=sanitize_value(total_return),
        max_drawdown=max_drawdown,
        volatility=sanitize_value(volatility),
        sharpe_ratio=sanitize_value(sharpe),
        sortino_ratio=sanitize_value(sortino),
        skewness=skewness,
        kurtosis=kurtosis,
    )


def _simulate_path(params: GBMParameters, source: RandomSource) -> GBMResult:
    n_steps = params.n_steps
    dt = params.delta_t
    sigma = params.sigma
    base_drift = (params.mu - 0.5 * sigma * sigma) * dt
    diffusion = sigma * math.sqrt(dt)
    reverting = params.mean_reversion_speed > 0 and params.mean_reversion_level > 0
    log_level = math.log(params.mean_reversion_level) if reverting else 0.0

    prices = np.empty(n_steps + 1)
    returns = np.empty(n_steps)
    prices[0] = price = params.initial_price
    log_price = math.log(price)
    peak = price
    max_drawdown = 0.0

    for i in range(n_steps):
        z = _shock(source, params.fat_tail_factor)
        drift = base_drift
        if reverting:
            drift += params.mean_reversion_speed * (log_level - log_price) * dt

        step = min(max(drift + diffusion * z, -MAX_LOG_STEP), MAX_LOG_STEP)
        log_price = min(max(log_price + step, LOG_PRICE_FLOOR), LOG_PRICE_CEILING)
        new_price = math.exp(log_price)
        returns[i] = (new_price - price) / price * 100.0
        prices[i + 1] = price = new_price

        if price > peak:
            peak = price
        else:
            max_drawdown = max(max_drawdown, (peak - price) / peak * 100.0)

    time_points = np.arange(n_steps + 1) * dt
    return GBMResult(
        time_points=time_points,
        price_path=prices,
        returns=returns,
        stats=_path_stats(params, prices, returns, max_drawdown),
    )


def simulate_gbm(
    params: GBMParameters,
    rng: Optional[Union[RandomSource, np.random.Generator]] = None,
    seed: Optional[int] = None
) -> GBMResult:
    """
    Simulate one GBM price path.

    With sigma = 0, no fat tails and no mean reversion the path is the pure
    exponential drift S_t = S0 * exp(mu * t).

    Args:
        params: Model parameters (validated here)
        rng: RandomSource or numpy Generator to draw from
        seed: Seed used when rng is not given

    Returns:
        GBMResult with time_horizon / delta_t steps, halves rounded up

    Raises:
        ParameterError: If params violate an invariant
    """
    params.validate()
    source = make_random_source(rng, seed)
    return _simulate_path(params, source)


def simulate_multiple_gbm(
    params: GBMParameters,
    n_simulations: int = 100,
    rng: Optional[Union[RandomSource, np.random.Generator]] = None,
    seed: Optional[int] = None
) -> MultiGBMResult:
    """
    Simulate independent GBM paths and their per-step price envelopes.

    All paths draw from one random source, one after another.

    Returns:
        MultiGBMResult with p1 ... p99 price envelopes

    Raises:
        ParameterError: If params are invalid or n_simulations < 1
    """
    params.validate()
    if n_simulations < 1:
        log_with_context(
            logger, logging.ERROR, f"Invalid GBM simulation count: {n_simulations}",
            error_code=ErrorCode.SIMULATION_INVALID_PARAMS,
        )
        raise ParameterError(f"n_simulations must be >= 1. Got: {n_simulations}")

    source = make_random_source(rng, seed)
    log_with_context(
        logger,
        logging.INFO,
        f"Simulating {n_simulations} GBM paths of {params.n_steps} steps",
        n_simulations=n_simulations,
        seed=seed,
    )

    simulations = [_simulate_path(params, source) for _ in range(n_simulations)]
    prices = np.vstack([sim.price_path for sim in simulations])

    return MultiGBMResult(
        simulations=simulations,
        percentiles=PathPercentiles.from_paths(prices, MULTI_PATH_LEVELS),
        time_points=simulations[0].time_points.copy(),
    )
