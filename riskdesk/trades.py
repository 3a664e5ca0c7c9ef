"""
Trade records consumed by the analytics engine.

A Trade is a read-only record produced by the journal's storage layer. The
engine itself only needs the signed profit/loss percentage and the entry/exit
timestamps; everything else is carried along for reporting.

Records coming from the JSON API use camelCase keys (entryDate, profitLoss,
...). Trade.from_record() accepts those as well as snake_case keys.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .data.sanitization import sanitize_returns
from .logging import ErrorCode, log_with_context
from .utils import to_timestamp


logger = logging.getLogger(__name__)


class Direction(str, Enum):
    """Trade direction."""
    LONG = 'LONG'
    SHORT = 'SHORT'


# camelCase keys used by the journal API -> Trade field names
_FIELD_ALIASES = {
    '_id': 'id',
    'entryPrice': 'entry_price',
    'exitPrice': 'exit_price',
    'entryDate': 'entry_date',
    'exitDate': 'exit_date',
    'profitLoss': 'profit_loss',
}

_REQUIRED_FIELDS = ('symbol', 'direction', 'entry_date', 'exit_date', 'profit_loss')
_OPTIONAL_COSTS = ('fees', 'spread', 'commission')


@dataclass(frozen=True)
class Trade:
    """
    Immutable closed-trade record.

    Attributes:
        id: Identifier assigned by the storage layer
        symbol: Traded instrument
        direction: LONG or SHORT
        quantity: Position size
        entry_price: Fill price on entry
        exit_price: Fill price on exit
        entry_date: Entry timestamp
        exit_date: Exit timestamp (never before entry_date)
        profit_loss: Signed result as a percentage of risk capital
        strategy: Strategy label
        risk: Percentage of capital risked
        fees, spread, commission: Optional costs, in the same units as profit_loss
    """
    id: str
    symbol: str
    direction: Direction
    quantity: float
    entry_price: float
    exit_price: float
    entry_date: pd.Timestamp
    exit_date: pd.Timestamp
    profit_loss: float
    strategy: str = ''
    risk: float = 0.0
    fees: Optional[float] = None
    spread: Optional[float] = None
    commission: Optional[float] = None
    notes: Optional[str] = None
    timeframe: Optional[str] = None

    def __post_init__(self) -> None:
        direction = self.direction
        if not isinstance(direction, Direction):
            try:
                direction = Direction(str(direction).upper())
            except ValueError:
                raise ValueError(
                    f"Trade {self.id!r}: direction must be LONG or SHORT, got {self.direction!r}"
                )
        object.__setattr__(self, 'direction', direction)

        entry_date = to_timestamp(self.entry_date)
        exit_date = to_timestamp(self.exit_date)
        if exit_date < entry_date:
            raise ValueError(
                f"Trade {self.id!r}: exit_date {exit_date} is before entry_date {entry_date}"
            )
        object.__setattr__(self, 'entry_date', entry_date)
        object.__setattr__(self, 'exit_date', exit_date)

        profit_loss = float(self.profit_loss)
        if not math.isfinite(profit_loss):
            raise ValueError(f"Trade {self.id!r}: profit_loss must be finite, got {self.profit_loss!r}")
        object.__setattr__(self, 'profit_loss', profit_loss)

    @property
    def duration_hours(self) -> float:
        """Holding period in hours."""
        return (self.exit_date - self.entry_date).total_seconds() / 3600.0

    @property
    def total_costs(self) -> float:
        """Sum of fees, spread and commission (missing costs count as 0)."""
        return sum(getattr(self, name) or 0.0 for name in _OPTIONAL_COSTS)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'Trade':
        """
        Build a Trade from a dict-like record.

        Unknown keys (user, createdAt, tradeType, ...) are ignored. NaN values,
        as produced by pandas for empty CSV cells, are treated as missing.

        Raises:
            ValueError: If a required field is missing or a value is invalid
        """
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in record.items():
            name = _FIELD_ALIASES.get(key, key)
            if name not in known:
                continue
            if isinstance(value, float) and math.isnan(value):
                value = None
            values[name] = value

        missing = [name for name in _REQUIRED_FIELDS if values.get(name) is None]
        if missing:
            raise ValueError(f"Trade record is missing required field(s): {', '.join(missing)}")

        values.setdefault('id', '')
        values['id'] = '' if values['id'] is None else str(values['id'])
        for name in ('quantity', 'entry_price', 'exit_price', 'risk'):
            values[name] = float(values.get(name) or 0.0)
        for name in _OPTIONAL_COSTS:
            if values.get(name) is not None:
                values[name] = float(values[name])
        values['strategy'] = values.get('strategy') or ''

        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly dictionary (dates as ISO strings)."""
        data = asdict(self)
        data['direction'] = self.direction.value
        data['entry_date'] = self.entry_date.isoformat()
        data['exit_date'] = self.exit_date.isoformat()
        return data


def trades_from_records(
    records: Iterable[Mapping[str, Any]],
    skip_invalid: bool = False
) -> List[Trade]:
    """
    Convert an iterable of dict records to Trade objects.

    Args:
        records: Records as returned by the journal API or a CSV reader
        skip_invalid: If True, log and skip invalid records instead of raising

    Returns:
        List of Trade objects in input order

    Raises:
        ValueError: On the first invalid record when skip_invalid is False
    """
    trades: List[Trade] = []
    for position, record in enumerate(records):
        try:
            trades.append(Trade.from_record(record))
        except (ValueError, TypeError) as e:
            if not skip_invalid:
                raise ValueError(f"Invalid trade record at position {position}: {e}") from e
            log_with_context(
                logger,
                logging.WARNING,
                f"Skipping invalid trade record at position {position}: {e}",
                error_code=ErrorCode.TRADE_RECORD_INVALID,
                position=position,
            )
    return trades


def trades_from_frame(df: pd.DataFrame, skip_invalid: bool = False) -> List[Trade]:
    """Convert a DataFrame (one row per trade) to Trade objects."""
    if df is None or len(df) == 0:
        return []
    return trades_from_records(df.to_dict(orient='records'), skip_invalid=skip_invalid)


def trades_to_frame(trades: Sequence[Trade]) -> pd.DataFrame:
    """
    Convert trades to a DataFrame with one row per trade.

    Adds a duration_hours column; dates stay as Timestamps.
    """
    columns = [f.name for f in fields(Trade)] + ['duration_hours']
    if not trades:
        return pd.DataFrame(columns=columns)

    rows = []
    for trade in trades:
        row = {f.name: getattr(trade, f.name) for f in fields(Trade)}
        row['direction'] = trade.direction.value
        row['duration_hours'] = trade.duration_hours
        rows.append(row)
    return pd.DataFrame(rows, columns=columns)


def sort_trades(trades: Iterable[Trade]) -> List[Trade]:
    """Return a new list sorted chronologically by entry date (stable)."""
    return sorted(trades, key=lambda t: t.entry_date)


def extract_returns(data: Union[Sequence[Trade], Sequence[float], np.ndarray, pd.Series]) -> np.ndarray:
    """
    Reduce a trade log or a return series to a float array of percentage returns.

    Trade lists are ordered chronologically first so that block resampling sees
    the real sequence of outcomes. Raw return series are used in the order given.

    Returns:
        New 1-D float array (NaN/Inf entries dropped)
    """
    if data is None:
        return np.array([], dtype=float)
    if isinstance(data, (pd.Series, np.ndarray)):
        return sanitize_returns(data)

    items = list(data)
    if not items:
        return np.array([], dtype=float)
    if isinstance(items[0], Trade):
        return sanitize_returns(t.profit_loss for t in sort_trades(items))
    return sanitize_returns(items)


def to_return_series(trades: Iterable[Trade]) -> List[float]:
    """Chronological list of trade profit/loss percentages."""
    return [t.profit_loss for t in sort_trades(trades)]
