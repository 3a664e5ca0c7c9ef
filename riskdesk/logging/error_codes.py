"""
Error codes carried by warning and error records.

The prefix of each code names its category: TRD (trade input), MET
(metrics), CFG (settings) and SIM (simulation).
"""

from enum import Enum


_CATEGORIES = {
    'TRD': 'trades',
    'MET': 'metrics',
    'CFG': 'config',
    'SIM': 'simulation',
}


class ErrorCode(str, Enum):
    """
    Stable identifiers for the conditions riskdesk reports through logging.

    Usage:
        log_with_context(logger, logging.WARNING, "History too short",
                         error_code=ErrorCode.TRADES_INSUFFICIENT)
    """

    TRADE_RECORD_INVALID = "TRD_001"
    TRADES_INSUFFICIENT = "TRD_002"
    BENCHMARK_UNAVAILABLE = "MET_001"
    SETTINGS_INVALID = "CFG_001"
    SIMULATION_INVALID_PARAMS = "SIM_001"
    SIMULATION_DEGENERATE_INPUT = "SIM_002"

    @property
    def code(self) -> str:
        return self.value

    @property
    def category(self) -> str:
        return _CATEGORIES[self.value.split('_', 1)[0]]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    def __str__(self) -> str:
        return f"{self.value}: {self.description}"


_DESCRIPTIONS = {
    ErrorCode.TRADE_RECORD_INVALID: "Trade record could not be parsed",
    ErrorCode.TRADES_INSUFFICIENT: "Too few trades for a meaningful estimate",
    ErrorCode.BENCHMARK_UNAVAILABLE: "Benchmark return could not be obtained",
    ErrorCode.SETTINGS_INVALID: "Settings failed validation",
    ErrorCode.SIMULATION_INVALID_PARAMS: "Simulation parameters out of range",
    ErrorCode.SIMULATION_DEGENERATE_INPUT: "Simulation input too small, empty result returned",
}


__all__ = [
    "ErrorCode",
]
