"""
Tests for the Monte Carlo resampling simulator.
"""

# Standard library imports
import itertools
import json
import logging

# Third-party imports
import numpy as np
import pytest

# Local imports
from riskdesk.simulate import (
    MonteCarloResult,
    ParameterError,
    RandomSource,
    build_blocks,
    run_monte_carlo,
    select_representative_paths,
)


class TestBuildBlocks:
    """Tests for build_blocks()."""

    @pytest.mark.unit
    def test_every_window(self):
        blocks = build_blocks(np.array([1.0, 2.0, 3.0, 4.0]), 2)
        np.testing.assert_array_equal(blocks, [[1, 2], [2, 3], [3, 4]])

    @pytest.mark.unit
    def test_too_short(self):
        assert build_blocks(np.array([1.0, 2.0]), 3).shape == (0, 3)


class TestSelectRepresentativePaths:
    """Tests for the display subsample."""

    @pytest.mark.unit
    def test_worst_and_best_first(self):
        finals = np.array([5.0, -3.0, 10.0, 0.0, 2.0, 7.0])
        curves = finals[:, None] * np.ones((6, 3))
        selected = select_representative_paths(curves, finals, 4)
        assert selected.shape == (4, 3)
        assert selected[0, -1] == -3.0
        assert selected[1, -1] == 10.0

    @pytest.mark.unit
    def test_fewer_paths_than_requested(self):
        finals = np.array([3.0, 1.0])
        curves = finals[:, None] * np.ones((2, 2))
        selected = select_representative_paths(curves, finals, 10)
        np.testing.assert_array_equal(selected[:, -1], [1.0, 3.0])


class TestRunMonteCarlo:
    """Tests for run_monte_carlo()."""

    @pytest.mark.unit
    def test_result_shapes(self, sample_returns):
        result = run_monte_carlo(sample_returns, n_simulations=200, n_trades=50,
                                 block_size=3, n_display_paths=5, seed=1)
        assert result.n_simulations == 200
        assert result.n_trades == 50
        assert result.simulation_paths.shape == (5, 51)
        assert result.path_percentiles.n_steps == 51
        assert np.all(result.simulation_paths[:, 0] == 0.0)
        assert 0.0 <= result.profit_probability <= 100.0
        assert 0.0 <= result.drawdown_risk <= 100.0

    @pytest.mark.unit
    def test_block_length_not_multiple_of_block_size(self, sample_returns):
        result = run_monte_carlo(sample_returns, n_simulations=20, n_trades=7,
                                 block_size=5, n_display_paths=20, seed=3)
        assert result.simulation_paths.shape == (20, 8)
        assert result.path_percentiles.n_steps == 8

        blocks = build_blocks(np.array(sample_returns), 5)
        for path in result.simulation_paths:
            steps = np.diff(path)
            # one full block, then the head of a second block
            assert np.any(np.all(np.isclose(blocks, steps[:5]), axis=1))
            assert np.any(np.all(np.isclose(blocks[:, :2], steps[5:]), axis=1))

    @pytest.mark.unit
    def test_percentiles_are_ordered(self, sample_returns):
        table = run_monte_carlo(sample_returns, n_simulations=300, n_trades=40, seed=2).percentiles
        ordered = [table.min, table.p1, table.p5, table.p10, table.p25, table.p50,
                   table.p75, table.p90, table.p95, table.p99, table.max]
        assert ordered == sorted(ordered)

    @pytest.mark.unit
    def test_single_simulation_is_consistent(self, sample_returns):
        result = run_monte_carlo(sample_returns, n_simulations=1, n_trades=30,
                                 block_resampling=False, seed=9)
        path = result.simulation_paths[0]
        final = path[-1]
        assert result.percentiles.min == pytest.approx(final)
        assert result.percentiles.p50 == pytest.approx(final)
        assert result.percentiles.max == pytest.approx(final)
        assert result.profit_probability in (0.0, 100.0)
        assert result.profit_probability == (100.0 if final > 0 else 0.0)
        assert result.statistics.std_final_return == 0.0

    @pytest.mark.unit
    def test_constant_returns(self):
        result = run_monte_carlo([1.0] * 10, n_simulations=50, n_trades=20, seed=0)
        assert result.percentiles.p5 == pytest.approx(20.0)
        assert result.profit_probability == 100.0
        assert result.drawdown_risk == 0.0
        assert result.statistics.skewness == 0.0
        assert result.statistics.kurtosis == 3.0

    @pytest.mark.unit
    def test_same_seed_same_result(self, sample_returns):
        first = run_monte_carlo(sample_returns, n_simulations=100, n_trades=25, seed=42)
        second = run_monte_carlo(sample_returns, n_simulations=100, n_trades=25, seed=42)
        np.testing.assert_array_equal(first.simulation_paths, second.simulation_paths)
        assert first.percentiles == second.percentiles

    @pytest.mark.unit
    def test_accepts_generator_and_trades(self, sample_trades):
        result = run_monte_carlo(sample_trades, n_simulations=10, n_trades=10,
                                 rng=np.random.default_rng(5))
        assert not result.is_empty
        result = run_monte_carlo(sample_trades, n_simulations=10, n_trades=10,
                                 rng=RandomSource(5))
        assert not result.is_empty

    @pytest.mark.unit
    def test_empty_input(self, caplog):
        with caplog.at_level(logging.WARNING, logger='riskdesk'):
            result = run_monte_carlo([], seed=1)
        assert result.is_empty
        assert result.simulation_paths.size == 0
        assert result.percentiles == MonteCarloResult.empty().percentiles
        assert caplog.records

    @pytest.mark.unit
    def test_fewer_returns_than_block_size(self):
        assert run_monte_carlo([1.0, -1.0, 2.0], block_size=5).is_empty
        assert not run_monte_carlo([1.0, -1.0, 2.0], block_resampling=False,
                                   n_simulations=10, n_trades=5, seed=1).is_empty

    @pytest.mark.unit
    @pytest.mark.parametrize('kwargs', [
        {'n_simulations': 0},
        {'n_trades': 0},
        {'block_size': 0},
        {'n_display_paths': -1},
    ])
    def test_invalid_parameters(self, sample_returns, kwargs):
        with pytest.raises(ParameterError):
            run_monte_carlo(sample_returns, **kwargs)

    @pytest.mark.unit
    def test_parameter_error_is_value_error(self, sample_returns):
        with pytest.raises(ValueError):
            run_monte_carlo(sample_returns, n_simulations=-5)

    @pytest.mark.unit
    def test_to_dict_and_frame(self, sample_returns):
        result = run_monte_carlo(sample_returns, n_simulations=30, n_trades=12,
                                 n_display_paths=3, seed=4)
        json.dumps(result.to_dict(), allow_nan=False)
        frame = result.to_frame()
        assert len(frame) == 13
        assert {'p5', 'p50', 'p95', 'path_0', 'path_2'} <= set(frame.columns)

    @pytest.mark.slow
    def test_profit_probability_converges(self):
        returns = [2.0, -1.0, -1.0]
        n_trades = 3
        sequences = list(itertools.product(returns, repeat=n_trades))
        expected = sum(sum(seq) > 0 for seq in sequences) / len(sequences) * 100.0

        result = run_monte_carlo(returns, n_simulations=20000, n_trades=n_trades,
                                 block_resampling=False, seed=11)
        assert expected == pytest.approx(7 / 27 * 100.0)
        assert result.profit_probability == pytest.approx(expected, abs=1.5)


class TestDrawdownStatistics:
    """
    Drawdown risk and recovery on single-block histories.

    With block_size equal to the history length every simulated path
    replays the history, so each statistic is either 0% or 100%.
    """

    @staticmethod
    def _replay(returns):
        return run_monte_carlo(returns, n_simulations=25, n_trades=len(returns),
                               block_size=len(returns), seed=0)

    @pytest.mark.unit
    def test_recovers_to_ninety_percent_of_peak(self):
        # 0 -> 10 -> 5 -> 9.5: 50% drawdown, back above 9.0
        result = self._replay([10.0, -5.0, 4.5])
        assert result.statistics.recovery_rate == 100.0
        assert result.drawdown_risk == 100.0

    @pytest.mark.unit
    def test_short_of_ninety_percent_is_not_recovered(self):
        # 0 -> 10 -> 5 -> 8.5
        result = self._replay([10.0, -5.0, 3.5])
        assert result.statistics.recovery_rate == 0.0

    @pytest.mark.unit
    def test_no_significant_drawdown(self):
        # 0 -> 10 -> 9.5: 5% drawdown is below the 10% cut-off
        result = self._replay([10.0, -0.5])
        assert result.statistics.recovery_rate == 0.0
        assert result.drawdown_risk == 0.0
        assert result.statistics.max_drawdown_distribution.median == pytest.approx(5.0)

    @pytest.mark.unit
    @pytest.mark.parametrize('returns, risk', [
        ([20.0, -5.0], 0.0),     # exactly 25% is not beyond the threshold
        ([20.0, -5.2], 100.0),   # 26%
        ([10.0, -2.0], 0.0),     # 20%
    ])
    def test_drawdown_risk_threshold(self, returns, risk):
        assert self._replay(returns).drawdown_risk == risk

    @pytest.mark.unit
    def test_custom_drawdown_threshold(self):
        result = run_monte_carlo([10.0, -2.0], n_simulations=5, n_trades=2, block_size=2,
                                 drawdown_threshold=15.0, seed=0)
        assert result.drawdown_risk == 100.0

    @pytest.mark.unit
    def test_mixed_recovery_matches_enumeration(self):
        # i.i.d. draws from {+10, -5} over 3 trades; each of the 8 sequences
        # has probability 1/8. Four have a >10% drawdown, one of which recovers.
        result = run_monte_carlo([10.0, -5.0], n_simulations=20000, n_trades=3,
                                 block_resampling=False, seed=5)
        assert result.statistics.recovery_rate == pytest.approx(25.0, abs=2.0)
        # 50% or 100% drawdowns: (+10,-5,x) and (-5,+10,-5); (+10,+10,-5) is 25%
        assert result.drawdown_risk == pytest.approx(3 / 8 * 100.0, abs=2.0)
