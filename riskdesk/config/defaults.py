"""
Section defaults for the analytics engine.

Built-in values mirror config/settings.yaml; a settings file only needs to
list the keys it overrides.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Optional

from .core import load_settings


logger = logging.getLogger(__name__)


BUILTIN_DEFAULTS: Dict[str, Dict[str, Any]] = {
    'metrics': {
        'risk_free_rate': 0.02,
        'var_confidence_levels': [0.95, 0.99],
    },
    'simulation': {
        'n_simulations': 1000,
        'n_trades': 500,
        'block_resampling': True,
        'block_size': 5,
        'drawdown_threshold': 25.0,
        'n_display_paths': 10,
    },
    'bootstrap': {
        'n_simulations': 1000,
        'initial_capital': 100.0,
        'n_display_curves': 10,
    },
    'gbm': {
        'initial_price': 100.0,
        'mu': 0.08,
        'sigma': 0.2,
        'delta_t': 1 / 252,
        'time_horizon': 1.0,
        'fat_tail_factor': 0.0,
        'mean_reversion_speed': 0.0,
        'n_simulations': 100,
    },
    'logging': {
        'level': 'INFO',
        'console': True,
        'file': False,
    },
}


def get_section_defaults(
    section: str,
    settings: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Get the effective defaults for one settings section.

    Built-in defaults are overlaid with the matching section of the settings
    file. A missing settings file is not an error here: the built-ins apply.

    Args:
        section: Section name ('metrics', 'simulation', 'bootstrap', 'gbm', 'logging')
        settings: Optional already-loaded settings dictionary

    Returns:
        dict: Merged section values

    Raises:
        KeyError: If the section name is unknown
    """
    if section not in BUILTIN_DEFAULTS:
        raise KeyError(
            f"Unknown settings section '{section}'. "
            f"Available: {sorted(BUILTIN_DEFAULTS)}"
        )

    merged = copy.deepcopy(BUILTIN_DEFAULTS[section])

    if settings is None:
        try:
            settings = load_settings()
        except FileNotFoundError:
            logger.debug("settings.yaml not found, using built-in defaults")
            settings = {}

    overrides = settings.get(section) or {}
    if not isinstance(overrides, dict):
        logger.warning(f"Settings section '{section}' is not a mapping, ignoring it")
        return merged

    merged.update(overrides)
    return merged
