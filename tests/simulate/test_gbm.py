"""
Tests for the GBM price path simulator.
"""

# Standard library imports
import json
import math

# Third-party imports
import numpy as np
import pytest

# Local imports
from riskdesk.config import get_section_defaults
from riskdesk.simulate import (
    GBMParameters,
    ParameterError,
    simulate_gbm,
    simulate_multiple_gbm,
)


@pytest.fixture
def daily_params():
    return GBMParameters(initial_price=100.0, mu=0.08, sigma=0.2, delta_t=1 / 252, time_horizon=1.0)


class TestGBMParameters:
    """Tests for parameter defaults and validation."""

    @pytest.mark.unit
    def test_mean_reversion_level_defaults_to_initial_price(self, daily_params):
        assert daily_params.mean_reversion_level == 100.0

    @pytest.mark.unit
    def test_step_count(self, daily_params):
        assert daily_params.n_steps == 252

    @pytest.mark.unit
    @pytest.mark.parametrize('field, value', [
        ('initial_price', 0.0),
        ('sigma', -0.1),
        ('delta_t', 0.0),
        ('time_horizon', -1.0),
        ('fat_tail_factor', 1.5),
        ('mean_reversion_speed', -0.5),
        ('mu', float('nan')),
    ])
    def test_invalid_values(self, daily_params, field, value):
        setattr(daily_params, field, value)
        with pytest.raises(ParameterError, match=field):
            daily_params.validate()

    @pytest.mark.unit
    @pytest.mark.parametrize('time_horizon, delta_t, expected', [
        (2.5, 1.0, 3),
        (0.5, 1.0, 1),
        (1.5, 1.0, 2),
        (2.4, 1.0, 2),
    ])
    def test_step_count_rounds_halves_up(self, time_horizon, delta_t, expected):
        params = GBMParameters(initial_price=100.0, mu=0.0, sigma=0.1,
                               delta_t=delta_t, time_horizon=time_horizon)
        assert params.n_steps == expected

    @pytest.mark.unit
    def test_from_settings_section(self):
        params = GBMParameters.from_dict(get_section_defaults('gbm', settings={}))
        params.validate()
        assert params.n_steps == 252


class TestSimulateGBM:
    """Tests for simulate_gbm() and simulate_multiple_gbm()."""

    @pytest.mark.unit
    def test_zero_volatility_follows_drift(self):
        params = GBMParameters(initial_price=50.0, mu=0.1, sigma=0.0, delta_t=0.01, time_horizon=2.0)
        result = simulate_gbm(params, seed=1)
        expected = 50.0 * np.exp(0.1 * result.time_points)
        np.testing.assert_allclose(result.price_path, expected, rtol=1e-9)
        assert result.stats.max_drawdown == 0.0
        assert result.stats.total_return == pytest.approx((math.exp(0.2) - 1) * 100.0)

    @pytest.mark.unit
    def test_path_lengths(self, daily_params):
        result = simulate_gbm(daily_params, seed=3)
        assert result.time_points.shape == (253,)
        assert result.price_path.shape == (253,)
        assert result.returns.shape == (252,)
        assert result.price_path[0] == 100.0
        assert np.all(result.price_path > 0)

    @pytest.mark.unit
    def test_seeded_runs_repeat(self, daily_params):
        first = simulate_gbm(daily_params, seed=21)
        second = simulate_gbm(daily_params, seed=21)
        np.testing.assert_array_equal(first.price_path, second.price_path)

    @pytest.mark.unit
    def test_fat_tails_and_mean_reversion(self, daily_params):
        daily_params.fat_tail_factor = 0.5
        daily_params.mean_reversion_speed = 2.0
        daily_params.mean_reversion_level = 120.0
        result = simulate_gbm(daily_params, seed=4)
        assert np.all(np.isfinite(result.price_path))
        assert result.stats.max_drawdown >= 0.0

    @pytest.mark.unit
    def test_stats_are_finite(self, daily_params):
        stats = simulate_gbm(daily_params, seed=5).stats
        values = [stats.total_return, stats.volatility, stats.sharpe_ratio,
                  stats.sortino_ratio, stats.skewness, stats.kurtosis]
        assert all(math.isfinite(v) for v in values)
        assert stats.volatility > 0

    @pytest.mark.unit
    def test_multiple_paths(self, daily_params):
        result = simulate_multiple_gbm(daily_params, n_simulations=40, seed=6)
        assert len(result.simulations) == 40
        assert result.price_paths.shape == (40, 253)
        assert np.all(result.percentiles['p1'] <= result.percentiles['p50'])
        assert np.all(result.percentiles['p50'] <= result.percentiles['p99'])
        assert result.percentiles['p50'][0] == pytest.approx(100.0)

    @pytest.mark.unit
    def test_invalid_path_count(self, daily_params):
        with pytest.raises(ParameterError):
            simulate_multiple_gbm(daily_params, n_simulations=0)

    @pytest.mark.unit
    def test_serialization(self, daily_params):
        single = simulate_gbm(daily_params, seed=7)
        json.dumps(single.to_dict(), allow_nan=False)
        frame = single.to_frame()
        assert list(frame.columns) == ['time', 'price', 'return']
        assert math.isnan(frame['return'].iloc[0])

        multi = simulate_multiple_gbm(daily_params, n_simulations=3, seed=7)
        json.dumps(multi.to_dict(), allow_nan=False)
        assert 'time' in multi.to_frame().columns


class TestExtremeParameters:
    """Valid but extreme parameters saturate instead of raising."""

    @pytest.mark.unit
    def test_huge_drift_stays_finite(self):
        params = GBMParameters(initial_price=100.0, mu=1000.0, sigma=0.0, delta_t=1.0, time_horizon=1.0)
        result = simulate_gbm(params, seed=1)
        assert np.all(np.isfinite(result.price_path))
        assert result.price_path[-1] > result.price_path[0]
        stats = result.stats
        values = [stats.final_price, stats.total_return, stats.volatility,
                  stats.sharpe_ratio, stats.sortino_ratio, stats.skewness, stats.kurtosis]
        assert all(math.isfinite(v) for v in values)
        json.dumps(result.to_dict(), allow_nan=False)

    @pytest.mark.unit
    def test_fat_tailed_high_volatility_stays_positive(self):
        params = GBMParameters(initial_price=100.0, mu=0.0, sigma=60.0, delta_t=1.0,
                               time_horizon=30.0, fat_tail_factor=1.0)
        result = simulate_multiple_gbm(params, n_simulations=5, seed=2)
        prices = result.price_paths
        assert np.all(np.isfinite(prices))
        assert np.all(prices > 0)
        for sim in result.simulations:
            assert 0.0 <= sim.stats.max_drawdown <= 100.0
            assert math.isfinite(sim.stats.total_return)

    @pytest.mark.unit
    def test_mean_reversion_from_saturated_price(self):
        params = GBMParameters(initial_price=100.0, mu=-5000.0, sigma=0.0, delta_t=1.0,
                               time_horizon=3.0, mean_reversion_speed=0.5)
        result = simulate_gbm(params, seed=3)
        assert np.all(np.isfinite(result.price_path))
        assert np.all(result.price_path > 0)
