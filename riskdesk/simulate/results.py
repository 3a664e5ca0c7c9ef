"""
Result value objects returned by the simulators.

Every result is built fresh by one simulator call and never mutated
afterwards. to_dict() gives a JSON-safe dictionary (no NaN/Inf, arrays as
lists); results that carry paths also offer to_frame() for pandas users.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Sequence

import numpy as np
import pandas as pd

from ..data.sanitization import sanitize_for_json
from ..metrics import stats
from ..metrics.stats import NORMAL_KURTOSIS, NORMAL_SKEWNESS, level_key


# Levels reported for the percentile table of final outcomes
SUMMARY_LEVELS = (5, 10, 25, 50, 75, 90, 95)


def _empty_array() -> np.ndarray:
    return np.array([], dtype=float)


def _empty_paths() -> np.ndarray:
    return np.empty((0, 0), dtype=float)


@dataclass
class PercentileTable:
    """Percentile table of a sample of final outcomes."""
    min: float = 0.0
    p1: float = 0.0
    p5: float = 0.0
    p10: float = 0.0
    p25: float = 0.0
    p50: float = 0.0
    p75: float = 0.0
    p90: float = 0.0
    p95: float = 0.0
    p99: float = 0.0
    max: float = 0.0

    @classmethod
    def from_values(cls, values: Sequence[float]) -> 'PercentileTable':
        return cls(**stats.percentile_table(values, stats.FINAL_VALUE_LEVELS))

    def to_dict(self) -> Dict[str, float]:
        return sanitize_for_json(asdict(self))


@dataclass
class PathPercentiles:
    """
    Per-step percentile envelopes across a set of simulated paths.

    Keys are 'p5', 'p50', ...; each value has one entry per path step.
    """
    curves: Dict[str, np.ndarray] = field(default_factory=dict)

    @classmethod
    def from_paths(cls, paths: np.ndarray, levels: Sequence[float]) -> 'PathPercentiles':
        return cls(curves=stats.path_percentiles(paths, levels))

    @classmethod
    def empty(cls, levels: Sequence[float]) -> 'PathPercentiles':
        return cls(curves={level_key(level): _empty_array() for level in levels})

    def __getitem__(self, key: str) -> np.ndarray:
        return self.curves[key]

    def __contains__(self, key: str) -> bool:
        return key in self.curves

    @property
    def n_steps(self) -> int:
        return len(next(iter(self.curves.values()), []))

    def to_dict(self) -> Dict[str, List[float]]:
        return sanitize_for_json(self.curves)

    def to_frame(self) -> pd.DataFrame:
        """One column per percentile, one row per step."""
        return pd.DataFrame({key: np.asarray(curve) for key, curve in self.curves.items()})


def _paths_frame(paths: np.ndarray, prefix: str) -> pd.DataFrame:
    return pd.DataFrame({f"{prefix}_{i}": path for i, path in enumerate(paths)})


# --- Resampling (Monte Carlo) --------------------------------------------

@dataclass
class DrawdownDistribution:
    """Distribution of per-simulation maximum drawdowns (percent)."""
    mean: float = 0.0
    median: float = 0.0
    p95: float = 0.0


@dataclass
class MonteCarloStatistics:
    """Moments of the final outcomes plus drawdown and recovery figures."""
    mean_final_return: float = 0.0
    std_final_return: float = 0.0
    skewness: float = NORMAL_SKEWNESS
    kurtosis: float = NORMAL_KURTOSIS
    max_drawdown_distribution: DrawdownDistribution = field(default_factory=DrawdownDistribution)
    recovery_rate: float = 0.0


@dataclass
class MonteCarloResult:
    """
    Outcome distribution of a resampling simulation.

    Attributes:
        percentiles: Percentile table of final cumulative returns
        profit_probability: Percent of simulations ending above 0
        drawdown_risk: Percent of simulations whose max drawdown exceeded the threshold
        path_percentiles: Per-step envelopes (p5 ... p95) across all simulations
        simulation_paths: Display subsample, shape (k, n_trades + 1), picked by rank
        statistics: Moments, drawdown distribution and recovery rate
    """
    percentiles: PercentileTable = field(default_factory=PercentileTable)
    profit_probability: float = 0.0
    drawdown_risk: float = 0.0
    path_percentiles: PathPercentiles = field(
        default_factory=lambda: PathPercentiles.empty(stats.PATH_LEVELS)
    )
    simulation_paths: np.ndarray = field(default_factory=_empty_paths)
    statistics: MonteCarloStatistics = field(default_factory=MonteCarloStatistics)
    n_simulations: int = 0
    n_trades: int = 0
    block_resampling: bool = False

    @classmethod
    def empty(cls) -> 'MonteCarloResult':
        """Zeroed result for inputs too small to simulate."""
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.n_simulations == 0

    def to_dict(self) -> Dict[str, Any]:
        return sanitize_for_json({
            'percentiles': asdict(self.percentiles),
            'profit_probability': self.profit_probability,
            'drawdown_risk': self.drawdown_risk,
            'path_percentiles': self.path_percentiles.curves,
            'simulation_paths': self.simulation_paths,
            'statistics': asdict(self.statistics),
            'n_simulations': self.n_simulations,
            'n_trades': self.n_trades,
            'block_resampling': self.block_resampling,
        })

    def to_frame(self) -> pd.DataFrame:
        """Path percentiles and display paths, one row per step."""
        return pd.concat(
            [self.path_percentiles.to_frame(), _paths_frame(self.simulation_paths, 'path')],
            axis=1,
        )


# --- Bootstrap -------------------------------------------------------------

@dataclass
class DistributionSummary:
    """Percentiles, mean and population std of one per-sample statistic."""
    min: float = 0.0
    p5: float = 0.0
    p10: float = 0.0
    p25: float = 0.0
    p50: float = 0.0
    p75: float = 0.0
    p90: float = 0.0
    p95: float = 0.0
    max: float = 0.0
    mean: float = 0.0
    std: float = 0.0

    @classmethod
    def from_values(cls, values: Sequence[float]) -> 'DistributionSummary':
        table = stats.percentile_table(values, SUMMARY_LEVELS)
        return cls(mean=stats.mean(values), std=stats.std(values), **table)

    def to_dict(self) -> Dict[str, float]:
        return sanitize_for_json(asdict(self))


@dataclass
class BootstrapStatistics:
    """Percentile tables of final return %, max drawdown % and Sharpe ratio."""
    final_returns: Dict[str, float] = field(default_factory=dict)
    max_drawdowns: Dict[str, float] = field(default_factory=dict)
    sharpe_ratios: Dict[str, float] = field(default_factory=dict)


@dataclass
class BootstrapResult:
    """
    Equity-curve envelope from compounding bootstrap resamples.

    All curve values are percent returns relative to the initial capital.
    """
    equity_curves: np.ndarray = field(default_factory=_empty_paths)
    statistics: BootstrapStatistics = field(default_factory=BootstrapStatistics)
    time_points: np.ndarray = field(default_factory=_empty_array)
    percentile_curves: PathPercentiles = field(default_factory=PathPercentiles)
    n_simulations: int = 0
    initial_capital: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.n_simulations == 0

    def to_dict(self) -> Dict[str, Any]:
        return sanitize_for_json({
            'equity_curves': self.equity_curves,
            'statistics': asdict(self.statistics),
            'time_points': self.time_points,
            'percentile_curves': self.percentile_curves.curves,
            'n_simulations': self.n_simulations,
            'initial_capital': self.initial_capital,
        })

    def to_frame(self) -> pd.DataFrame:
        """Time points, percentile curves and display curves, one row per point."""
        frame = pd.concat(
            [self.percentile_curves.to_frame(), _paths_frame(self.equity_curves, 'curve')],
            axis=1,
        )
        frame.insert(0, 'time', self.time_points)
        return frame


@dataclass
class BootstrapSummary:
    """Per-sample statistic distributions from additive bootstrap resampling."""
    equity_curves: np.ndarray = field(default_factory=_empty_paths)
    final_returns: DistributionSummary = field(default_factory=DistributionSummary)
    max_drawdowns: DistributionSummary = field(default_factory=DistributionSummary)
    sharpe_ratios: DistributionSummary = field(default_factory=DistributionSummary)
    sortino_ratios: DistributionSummary = field(default_factory=DistributionSummary)
    win_rates: DistributionSummary = field(default_factory=DistributionSummary)
    profit_factors: DistributionSummary = field(default_factory=DistributionSummary)
    n_samples: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        for name, value in data.items():
            if isinstance(value, DistributionSummary):
                data[name] = asdict(value)
        return sanitize_for_json(data)


# --- Parametric paths (GBM) ------------------------------------------------

@dataclass
class GBMStats:
    """Post-hoc statistics of one simulated price path (percent units)."""
    final_price: float = 0.0
    total_return: float = 0.0
    max_drawdown: float = 0.0
    volatility: float = 0.0
    sharpe_ratio: float = 0.0
    sortino_ratio: float = 0.0
    skewness: float = NORMAL_SKEWNESS
    kurtosis: float = NORMAL_KURTOSIS


@dataclass
class GBMResult:
    """
    One simulated price path.

    time_points and price_path have steps + 1 entries; returns (period returns
    in percent) has steps entries.
    """
    time_points: np.ndarray = field(default_factory=_empty_array)
    price_path: np.ndarray = field(default_factory=_empty_array)
    returns: np.ndarray = field(default_factory=_empty_array)
    stats: GBMStats = field(default_factory=GBMStats)

    def to_dict(self) -> Dict[str, Any]:
        return sanitize_for_json(asdict(self))

    def to_frame(self) -> pd.DataFrame:
        """Columns time, price and return (NaN at the starting point)."""
        return pd.DataFrame({
            'time': self.time_points,
            'price': self.price_path,
            'return': np.concatenate(([np.nan], self.returns)),
        })


@dataclass
class MultiGBMResult:
    """Several independent GBM paths and their per-step price envelopes."""
    simulations: List[GBMResult] = field(default_factory=list)
    percentiles: PathPercentiles = field(default_factory=PathPercentiles)
    time_points: np.ndarray = field(default_factory=_empty_array)

    @property
    def price_paths(self) -> np.ndarray:
        """All price paths stacked, shape (n_simulations, steps + 1)."""
        if not self.simulations:
            return _empty_paths()
        return np.vstack([sim.price_path for sim in self.simulations])

    def to_dict(self) -> Dict[str, Any]:
        return sanitize_for_json({
            'simulations': [asdict(sim) for sim in self.simulations],
            'percentiles': self.percentiles.curves,
            'time_points': self.time_points,
        })

    def to_frame(self) -> pd.DataFrame:
        frame = self.percentiles.to_frame()
        frame.insert(0, 'time', self.time_points)
        return frame
