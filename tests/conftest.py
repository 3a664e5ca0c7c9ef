"""
Pytest configuration and fixtures for the riskdesk tests.
"""

import sys
from itertools import count
from pathlib import Path

import pandas as pd
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from riskdesk.logging import reset_context
from riskdesk.trades import Trade


@pytest.fixture
def project_root_path():
    """Return the project root path."""
    return project_root


@pytest.fixture(autouse=True)
def clean_log_context():
    """Make sure no log context leaks between tests."""
    reset_context()
    yield
    reset_context()


@pytest.fixture
def make_trade():
    """
    Factory for Trade objects.

    Trades are spaced one day apart unless entry_date is given; duration_hours
    sets the holding period.
    """
    ids = count()
    start = pd.Timestamp('2024-01-01 09:00')

    def _make(profit_loss, duration_hours=4.0, entry_date=None, **overrides):
        i = next(ids)
        entry = pd.Timestamp(entry_date) if entry_date is not None else start + pd.Timedelta(days=i)
        values = {
            'id': f't{i}',
            'symbol': 'EURUSD',
            'direction': 'LONG',
            'quantity': 1.0,
            'entry_price': 1.10,
            'exit_price': 1.11,
            'entry_date': entry,
            'exit_date': entry + pd.Timedelta(hours=duration_hours),
            'profit_loss': profit_loss,
        }
        values.update(overrides)
        return Trade(**values)

    return _make


@pytest.fixture
def sample_returns():
    """A mixed return series in percent."""
    return [2.5, -1.0, 3.0, -2.0, 0.0, 1.5, -0.5, 4.0, -3.0, 2.0, 1.0, -1.5]


@pytest.fixture
def sample_trades(make_trade, sample_returns):
    """Trades built from sample_returns, one per day."""
    return [make_trade(r) for r in sample_returns]


@pytest.fixture
def journal_records():
    """Records shaped like the journal API export (camelCase keys)."""
    return [
        {
            '_id': 'a1',
            'user': 'u1',
            'symbol': 'AAPL',
            'direction': 'long',
            'quantity': 10,
            'entryPrice': 180.0,
            'exitPrice': 184.5,
            'entryDate': '2024-03-01T14:30:00Z',
            'exitDate': '2024-03-01T18:30:00Z',
            'profitLoss': 2.5,
            'strategy': 'breakout',
            'fees': 0.1,
            'createdAt': '2024-03-01T19:00:00Z',
        },
        {
            '_id': 'a2',
            'symbol': 'MSFT',
            'direction': 'SHORT',
            'quantity': 5,
            'entryPrice': 410.0,
            'exitPrice': 415.0,
            'entryDate': '2024-03-04T14:30:00Z',
            'exitDate': '2024-03-06T14:30:00Z',
            'profitLoss': -1.2,
            'commission': 0.05,
        },
    ]
