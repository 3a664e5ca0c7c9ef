"""
Data sanitization utilities for handling NaN and Inf values.

Reported statistics must never carry NaN/Inf: a degenerate division is
replaced by a documented sentinel before it leaves the engine.
"""

import math
from typing import Any, Iterable

import numpy as np
import pandas as pd


def sanitize_value(value: float, default: float = 0.0) -> float:
    """
    Replace NaN/Inf with default value for single numeric values.

    Args:
        value: Numeric value to sanitize
        default: Default value to use if value is NaN/Inf (default: 0.0)

    Returns:
        Sanitized float value
    """
    if value is None or math.isnan(value) or math.isinf(value):
        return default
    return float(value)


def sanitize_returns(values: Iterable[float]) -> np.ndarray:
    """
    Convert a return sequence to a float array with NaN/Inf entries removed.

    Args:
        values: Iterable of numeric returns (list, ndarray or pandas Series)

    Returns:
        1-D float64 array (a new array, the input is never modified)
    """
    if isinstance(values, pd.Series):
        values = values.to_numpy()
    arr = np.array(list(values) if not isinstance(values, np.ndarray) else values,
                   dtype=float, copy=True).ravel()
    return arr[np.isfinite(arr)]


def sanitize_for_json(obj: Any) -> Any:
    """
    Recursively sanitize values for JSON serialization.

    Ensures no NaN/Inf values escape to JSON output, which would
    produce invalid strict JSON (Python's json.dump outputs 'NaN' literal).

    Args:
        obj: Any value to sanitize (dict, list, float, etc.)

    Returns:
        Sanitized value safe for JSON serialization
    """
    if isinstance(obj, dict):
        return {k: sanitize_for_json(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [sanitize_for_json(item) for item in obj]
    elif isinstance(obj, np.ndarray):
        return [sanitize_for_json(item) for item in obj.tolist()]
    elif isinstance(obj, bool):
        return obj
    elif isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            return 0.0
        return obj
    elif isinstance(obj, np.floating):
        if np.isnan(obj) or np.isinf(obj):
            return 0.0
        return float(obj)
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, pd.Timestamp):
        return obj.isoformat()
    return obj
