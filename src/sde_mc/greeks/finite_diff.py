"""
Greeks computation via finite differences (bump and revalue).

Every revaluation re-runs the engine with the same configuration, hence the
same per-path seeds (common random numbers). Sample i of each run belongs to
the same base path, so the Greek is estimated from per-path differences and
its standard error reflects the variance of those differences.
"""

import dataclasses
import logging

import numpy as np

from sde_mc.config import DEFAULT_ABSOLUTE_BUMP, DEFAULT_RELATIVE_BUMP
from sde_mc.errors import ConfigurationError, ParameterError, require_positive
from sde_mc.greeks.types import GreekResult

logger = logging.getLogger(__name__)

_GREEK_PARAMETERS = {
    "delta": "spot_param",
    "gamma": "spot_param",
    "vega": "vol_param",
    "rho": "rate_param",
}


def default_bump(value: float) -> float:
    """h = 1% of |p|, or an absolute 1e-4 when p is zero."""
    if value == 0:
        return DEFAULT_ABSOLUTE_BUMP
    return DEFAULT_RELATIVE_BUMP * abs(value)


def resolve_parameter(model, greek: str, parameter: str | None = None) -> str:
    """
    Name of the model parameter a Greek differentiates with respect to.

    Raises
    ------
    ConfigurationError
        If the Greek is unknown or the model has no matching parameter
    """
    if parameter is not None:
        if parameter not in getattr(model, "__dataclass_fields__", {}):
            raise ConfigurationError(
                f"Model '{model.name}' has no parameter '{parameter}'"
            )
        return parameter

    if greek not in _GREEK_PARAMETERS:
        raise ConfigurationError(
            f"Unknown greek '{greek}'; expected one of {', '.join(_GREEK_PARAMETERS)} "
            "or an explicit parameter"
        )
    name = getattr(model, _GREEK_PARAMETERS[greek])
    if name is None:
        raise ConfigurationError(f"Model '{model.name}' has no parameter for {greek}")
    return name


def _revaluation_engines(engine, models: dict) -> dict:
    """
    One engine per bumped model, all built before any path is simulated.

    A fixed ``control_expectation`` is E[X] of the unbumped model only, so
    each leg re-derives its own from the analytic oracle instead.
    """
    config = engine.config
    fixed = config.control_expectation is not None
    if fixed:
        config = dataclasses.replace(config, control_expectation=None)
    engines = {}
    for leg, model in models.items():
        try:
            engines[leg] = engine.with_model(model, config=config)
        except ConfigurationError as exc:
            if not fixed:
                raise
            raise ConfigurationError(
                "finite differences cannot reuse the fixed control_expectation "
                f"on bumped models: {exc}"
            ) from exc
    return engines


def _revalue(engine) -> np.ndarray:
    _, samples = engine.price_with_details()
    return samples


def _try_bump(model, parameter: str, value: float):
    try:
        return model.bumped(**{parameter: value})
    except ParameterError:
        return None


def finite_difference_greek(
    engine,
    greek: str,
    bump: float | None = None,
    parameter: str | None = None
) -> GreekResult:
    """
    Estimate a Greek by bumping a model parameter.

    First-order Greeks use the central difference
    (V(p + h) - V(p - h)) / 2h. When p - h leaves the parameter's domain
    the forward difference (V(p + h) - V(p)) / h is used instead, and the
    backward difference when p + h does. Gamma (and any second-order
    request) uses (V(p + h) - 2 V(p) + V(p - h)) / h^2 and needs both bumps.

    Parameters
    ----------
    engine : MonteCarloEngine
        Engine to revalue
    greek : str
        'delta', 'gamma', 'vega', 'rho'; with ``parameter`` any label
        ('gamma' still selects the second difference)
    bump : float, optional
        Bump size h (> 0); default 1% of |p| or 1e-4 when p == 0
    parameter : str, optional
        Model parameter to bump instead of the Greek's default

    Returns
    -------
    GreekResult
        Estimate with standard error from per-path differences
    """
    model = engine.model
    name = resolve_parameter(model, greek, parameter)
    raw = getattr(model, name)
    if raw is None:
        raise ConfigurationError(
            f"Parameter '{name}' of model '{model.name}' is unset and cannot be bumped"
        )
    p = float(raw)
    h = default_bump(p) if bump is None else float(bump)
    require_positive("bump", h)

    up = _try_bump(model, name, p + h)
    down = _try_bump(model, name, p - h)

    if greek == "gamma":
        if up is None or down is None:
            raise ParameterError(
                name, p, f"gamma needs both {name} + h and {name} - h to be valid (h = {h})"
            )
        legs = _revaluation_engines(engine, {"up": up, "mid": model, "down": down})
        samples = (_revalue(legs["up"]) - 2.0 * _revalue(legs["mid"]) +
                   _revalue(legs["down"])) / (h * h)
        return GreekResult.from_samples(greek, samples, "finite_difference", bump=h)

    if up is not None and down is not None:
        legs = _revaluation_engines(engine, {"up": up, "down": down})
        samples = (_revalue(legs["up"]) - _revalue(legs["down"])) / (2.0 * h)
    elif up is not None:
        logger.debug("%s - h = %g is invalid; %s uses a forward difference", name, p - h, greek)
        legs = _revaluation_engines(engine, {"up": up, "mid": model})
        samples = (_revalue(legs["up"]) - _revalue(legs["mid"])) / h
    elif down is not None:
        logger.debug("%s + h = %g is invalid; %s uses a backward difference", name, p + h, greek)
        legs = _revaluation_engines(engine, {"mid": model, "down": down})
        samples = (_revalue(legs["mid"]) - _revalue(legs["down"])) / h
    else:
        raise ParameterError(name, p, f"no valid bump of size {h} in either direction")

    return GreekResult.from_samples(greek, np.asarray(samples), "finite_difference", bump=h)
