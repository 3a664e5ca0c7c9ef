"""
Data handling utilities for riskdesk.

Provides NaN/Inf sanitization for return series and reported values.
"""

from .sanitization import (
    sanitize_value,
    sanitize_returns,
    sanitize_for_json,
)

__all__ = [
    'sanitize_value',
    'sanitize_returns',
    'sanitize_for_json',
]
