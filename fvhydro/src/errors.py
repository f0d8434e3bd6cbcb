"""
Exception types raised by the solver.

Numerical failures during a run are not raised: they are returned as tagged
results (see validation.Failure). Exceptions are reserved for invalid setup
and for callers that explicitly ask for one via
SimulationResult.raise_for_status().
"""


class HydroError(Exception):
    """Base class for all solver errors."""


class ConfigurationError(HydroError, ValueError):
    """Invalid configuration value or inconsistent setup."""


class SimulationFailed(HydroError):
    """A run stopped on a fatal numerical or physical failure."""

    def __init__(self, failure):
        super().__init__(str(failure))
        self.failure = failure
