"""
Exception hierarchy and parameter validation helpers.

Configuration problems are detected eagerly, before any path is simulated,
and raised as ``ConfigurationError`` subclasses. ``ConfigurationError``
derives from ``ValueError`` so callers can keep catching ``ValueError``.
"""

import math


class SDEError(Exception):
    """Base class for all errors raised by sde_mc."""


class ConfigurationError(SDEError, ValueError):
    """Invalid configuration detected before simulation starts."""


class ParameterError(ConfigurationError):
    """
    A model or engine parameter violates its domain constraint.

    Attributes
    ----------
    parameter : str
        Name of the offending parameter
    value : float
        Rejected value
    constraint : str
        Human-readable description of the constraint
    """

    def __init__(self, parameter: str, value: float, constraint: str):
        self.parameter = parameter
        self.value = value
        self.constraint = constraint
        super().__init__(f"Invalid parameter '{parameter}' = {value}: {constraint}")


class GridError(ConfigurationError):
    """Time grid is empty, does not start at zero, or is not strictly increasing."""


class IncompatibleSchemeError(ConfigurationError):
    """A discretization scheme cannot be used with the requested model."""


class NumericalInstabilityError(SDEError, ArithmeticError):
    """The aggregated estimate is not a finite number."""


def require_finite(name: str, value: float) -> None:
    if not math.isfinite(value):
        raise ParameterError(name, value, "must be finite (not NaN or infinite)")


def require_positive(name: str, value: float) -> None:
    require_finite(name, value)
    if value <= 0:
        raise ParameterError(name, value, "must be positive (> 0)")


def require_non_negative(name: str, value: float) -> None:
    require_finite(name, value)
    if value < 0:
        raise ParameterError(name, value, "must be non-negative (>= 0)")


def require_in_range(name: str, value: float, low: float, high: float) -> None:
    require_finite(name, value)
    if not low <= value <= high:
        raise ParameterError(name, value, f"must be in range [{low}, {high}]")


def require_correlation(name: str, value: float) -> None:
    require_in_range(name, value, -1.0, 1.0)
