"""
End-to-end tests for the command line scripts.

Runs the click commands in-process against a small trade journal export.
"""

# Standard library imports
import json

# Third-party imports
import pandas as pd
import pytest
from click.testing import CliRunner

# Local imports
from riskdesk.logging import shutdown_logging
from scripts.analyze_trades import main as analyze_main
from scripts.simulate_gbm import main as gbm_main


@pytest.fixture(autouse=True)
def close_log_handlers():
    """Scripts install handlers on the runner's streams; drop them afterwards."""
    yield
    shutdown_logging()


@pytest.fixture
def trades_csv(tmp_path):
    """Journal export with camelCase columns, one trade per day."""
    rows = []
    for i, pl in enumerate([2.0, -1.0, 1.5, -0.5, 3.0, -2.0, 0.0, 1.0, 2.5, -1.5]):
        entry = pd.Timestamp('2024-01-01 09:00') + pd.Timedelta(days=i)
        rows.append({
            '_id': f'row{i}',
            'symbol': 'EURUSD',
            'direction': 'LONG' if i % 2 else 'SHORT',
            'quantity': 1,
            'entryPrice': 1.1,
            'exitPrice': 1.1,
            'entryDate': entry.isoformat(),
            'exitDate': (entry + pd.Timedelta(hours=3)).isoformat(),
            'profitLoss': pl,
            'fees': 0.05,
        })
    path = tmp_path / 'trades.csv'
    pd.DataFrame(rows).to_csv(path, index=False)
    return path


class TestAnalyzeTrades:
    """Tests for scripts/analyze_trades.py."""

    @pytest.mark.unit
    def test_text_report(self, trades_csv):
        result = CliRunner().invoke(analyze_main, [
            '--trades', str(trades_csv), '--simulations', '50',
            '--sequence-length', '20', '--seed', '1',
        ])
        assert result.exit_code == 0, result.output
        assert "✓ Loaded 10 trades" in result.output
        assert "PERFORMANCE" in result.output
        assert "MONTE CARLO" in result.output
        assert "BOOTSTRAP" in result.output

    @pytest.mark.unit
    def test_json_report(self, trades_csv):
        result = CliRunner().invoke(analyze_main, [
            '--trades', str(trades_csv), '--simulations', '30',
            '--sequence-length', '10', '--iid', '--seed', '2', '--json',
        ])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload['metrics']['total_trades'] == 10
        assert payload['monte_carlo']['block_resampling'] is False
        assert 'final_returns' in payload['bootstrap']

    @pytest.mark.unit
    def test_invalid_parameter_exits_non_zero(self, trades_csv):
        result = CliRunner().invoke(analyze_main, [
            '--trades', str(trades_csv), '--block-size', '-2',
        ])
        assert result.exit_code == 1

    @pytest.mark.unit
    @pytest.mark.parametrize('option', ['--simulations', '--sequence-length', '--block-size'])
    def test_zero_count_is_rejected(self, trades_csv, option):
        result = CliRunner().invoke(analyze_main, ['--trades', str(trades_csv), option, '0'])
        assert result.exit_code == 1
        assert "must be >= 1" in result.output


class TestSimulateGBM:
    """Tests for scripts/simulate_gbm.py."""

    @pytest.mark.unit
    def test_envelope_output(self, tmp_path):
        output = tmp_path / 'envelope.csv'
        result = CliRunner().invoke(gbm_main, [
            '--paths', '20', '--horizon', '0.5', '--seed', '3', '--output', str(output),
        ])
        assert result.exit_code == 0, result.output
        assert "FINAL PRICE ENVELOPE" in result.output
        frame = pd.read_csv(output)
        assert {'time', 'p1', 'p50', 'p99'} <= set(frame.columns)
        assert len(frame) == 127

    @pytest.mark.unit
    def test_invalid_sigma(self):
        result = CliRunner().invoke(gbm_main, ['--sigma', '-1', '--paths', '2'])
        assert result.exit_code == 1

    @pytest.mark.unit
    def test_zero_paths_is_rejected(self):
        result = CliRunner().invoke(gbm_main, ['--paths', '0'])
        assert result.exit_code == 1
        assert "n_simulations must be >= 1" in result.output
