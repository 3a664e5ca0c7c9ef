"""
Settings validation.

Checks each settings section for types and ranges and collects every problem
instead of stopping at the first one.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple

from ..logging import ErrorCode, log_with_context


logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_positive_int(section: Dict[str, Any], key: str, prefix: str, errors: List[str]) -> None:
    if key not in section:
        return
    value = section[key]
    if not isinstance(value, int) or isinstance(value, bool):
        errors.append(f"'{prefix}.{key}' must be an integer")
    elif value < 1:
        errors.append(f"'{prefix}.{key}' must be >= 1. Got: {value}")


def _validate_metrics_section(metrics: Any, errors: List[str]) -> None:
    if not isinstance(metrics, dict):
        errors.append(f"'metrics' section must be a dictionary, got {type(metrics).__name__}")
        return

    if 'risk_free_rate' in metrics and not _is_number(metrics['risk_free_rate']):
        errors.append("'metrics.risk_free_rate' must be a number")

    levels = metrics.get('var_confidence_levels')
    if levels is not None:
        if not isinstance(levels, list) or not levels:
            errors.append("'metrics.var_confidence_levels' must be a non-empty list")
        else:
            for level in levels:
                if not _is_number(level) or not (0.0 < level < 1.0):
                    errors.append(
                        f"'metrics.var_confidence_levels' entries must be in (0, 1). Got: {level}"
                    )


def _validate_simulation_section(simulation: Any, errors: List[str]) -> None:
    if not isinstance(simulation, dict):
        errors.append(f"'simulation' section must be a dictionary, got {type(simulation).__name__}")
        return

    for key in ('n_simulations', 'n_trades', 'block_size', 'n_display_paths'):
        _check_positive_int(simulation, key, 'simulation', errors)

    if 'block_resampling' in simulation and not isinstance(simulation['block_resampling'], bool):
        errors.append("'simulation.block_resampling' must be a boolean")

    if 'drawdown_threshold' in simulation:
        threshold = simulation['drawdown_threshold']
        if not _is_number(threshold):
            errors.append("'simulation.drawdown_threshold' must be a number")
        elif not (0.0 <= threshold <= 100.0):
            errors.append(
                f"'simulation.drawdown_threshold' must be between 0 and 100. Got: {threshold}"
            )


def _validate_bootstrap_section(bootstrap: Any, errors: List[str]) -> None:
    if not isinstance(bootstrap, dict):
        errors.append(f"'bootstrap' section must be a dictionary, got {type(bootstrap).__name__}")
        return

    for key in ('n_simulations', 'n_display_curves'):
        _check_positive_int(bootstrap, key, 'bootstrap', errors)

    if 'initial_capital' in bootstrap:
        capital = bootstrap['initial_capital']
        if not _is_number(capital):
            errors.append("'bootstrap.initial_capital' must be a number")
        elif capital <= 0:
            errors.append(f"'bootstrap.initial_capital' must be positive. Got: {capital}")


def _validate_gbm_section(gbm: Any, errors: List[str]) -> None:
    if not isinstance(gbm, dict):
        errors.append(f"'gbm' section must be a dictionary, got {type(gbm).__name__}")
        return

    for key in ('initial_price', 'mu', 'sigma', 'delta_t', 'time_horizon',
                'fat_tail_factor', 'mean_reversion_speed'):
        if key in gbm and not _is_number(gbm[key]):
            errors.append(f"'gbm.{key}' must be a number")

    if _is_number(gbm.get('delta_t')) and gbm['delta_t'] <= 0:
        errors.append(f"'gbm.delta_t' must be positive. Got: {gbm['delta_t']}")
    if _is_number(gbm.get('time_horizon')) and gbm['time_horizon'] <= 0:
        errors.append(f"'gbm.time_horizon' must be positive. Got: {gbm['time_horizon']}")
    if _is_number(gbm.get('sigma')) and gbm['sigma'] < 0:
        errors.append(f"'gbm.sigma' must be >= 0. Got: {gbm['sigma']}")
    if _is_number(gbm.get('fat_tail_factor')) and not (0.0 <= gbm['fat_tail_factor'] <= 1.0):
        errors.append(
            f"'gbm.fat_tail_factor' must be between 0 and 1. Got: {gbm['fat_tail_factor']}"
        )

    _check_positive_int(gbm, 'n_simulations', 'gbm', errors)


_SECTION_VALIDATORS = {
    'metrics': _validate_metrics_section,
    'simulation': _validate_simulation_section,
    'bootstrap': _validate_bootstrap_section,
    'gbm': _validate_gbm_section,
}


def validate_settings(settings: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """
    Validate a settings dictionary.

    Args:
        settings: Settings dictionary (as returned by load_settings)

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors: List[str] = []

    if not isinstance(settings, dict):
        return False, [f"Settings must be a dictionary, got {type(settings).__name__}"]

    for section, validator in _SECTION_VALIDATORS.items():
        if section in settings and settings[section] is not None:
            validator(settings[section], errors)

    if errors:
        log_with_context(
            logger, logging.WARNING, f"Settings validation failed with {len(errors)} error(s)",
            error_code=ErrorCode.SETTINGS_INVALID, errors=errors,
        )

    return len(errors) == 0, errors
