"""
Utility functions for riskdesk.

Provides YAML handling and date parsing helpers shared by the config loader
and the trade model.
"""

from datetime import datetime
from pathlib import Path
from typing import Union

import pandas as pd
import yaml


def load_yaml(path: Path) -> dict:
    """
    Safely load a YAML file.

    Args:
        path: Path to YAML file

    Returns:
        dict: Parsed YAML content

    Raises:
        FileNotFoundError: If file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    try:
        with open(path, 'r') as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Invalid YAML in {path}: {e}")


def to_timestamp(value: Union[pd.Timestamp, datetime, str]) -> pd.Timestamp:
    """
    Convert a date-like value to a timezone-naive UTC pandas Timestamp.

    Trade dates arrive as ISO strings from JSON exports or as datetimes from
    Python callers; normalising them lets durations be computed by plain
    subtraction.

    Raises:
        ValueError: If the value cannot be parsed as a date
    """
    if value is None:
        raise ValueError("Date value cannot be None")

    ts = pd.Timestamp(value)
    if pd.isna(ts):
        raise ValueError(f"Invalid date value: {value!r}")
    if ts.tz is not None:
        ts = ts.tz_convert('UTC').tz_localize(None)
    return ts
