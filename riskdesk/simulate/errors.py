"""
Exceptions raised by the simulators.

Only caller contract violations raise; inputs that are merely too small to
simulate produce empty results instead.
"""


class ParameterError(ValueError):
    """Invalid simulation parameter (non-positive count, time step, ...)."""
    pass
