"""
Configuration loading and management for riskdesk.

Loads config/settings.yaml with caching and exposes merged per-section
defaults for the metrics calculator and the simulators.

Public API:
    - load_settings: Load global settings from settings.yaml
    - get_section_defaults: Built-in defaults overlaid with a settings section
    - validate_settings: Validate a settings dictionary
    - clear_config_cache: Clear the configuration cache
"""

from __future__ import annotations

from .core import (
    load_settings,
    clear_config_cache,
    get_config_cache,
    _get_config_path,
)

from .defaults import (
    BUILTIN_DEFAULTS,
    get_section_defaults,
)

from .validation import (
    validate_settings,
)


__all__ = [
    'load_settings',
    'clear_config_cache',
    'get_config_cache',
    'BUILTIN_DEFAULTS',
    'get_section_defaults',
    'validate_settings',
]
