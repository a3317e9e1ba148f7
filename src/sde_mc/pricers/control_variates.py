"""
Control variates for the Monte Carlo engine.

A control is a per-path observable X with a known expectation E[X]. Given
payoff samples Y the engine forms

    Y_adj = Y - b (X - E[X]),   b = Cov(Y, X) / Var(X)

and reports the variance reduction factor Var(Y) / Var(Y_adj).
"""

from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from sde_mc.analytics.oracle import expected_discounted_terminal, reference_price
from sde_mc.errors import ConfigurationError
from sde_mc.models.base import SDEModel
from sde_mc.payoffs.plain_vanilla import EuropeanCallPayoff

# Below this sample variance the control carries no information
MIN_CONTROL_VARIANCE = 1e-14


@dataclass(frozen=True)
class ControlVariate:
    """
    Registered control variate.

    Attributes
    ----------
    name : str
        Registry id
    observable : Callable
        ``observable(terminal_values, discount, payoff) -> np.ndarray`` giving
        the discounted control per path
    expectation : Callable
        ``expectation(model, payoff, maturity) -> float`` giving E[X] from the
        analytic oracle
    """

    name: str
    observable: Callable[[np.ndarray, float, object], np.ndarray]
    expectation: Callable[[SDEModel, object, float], float]


def _terminal_asset_observable(terminal: np.ndarray, discount: float, payoff) -> np.ndarray:
    return discount * terminal


def _terminal_asset_expectation(model: SDEModel, payoff, maturity: float) -> float:
    return expected_discounted_terminal(model, maturity)


def _european_call_observable(terminal: np.ndarray, discount: float, payoff) -> np.ndarray:
    return discount * np.maximum(terminal - payoff.strike, 0.0)


def _european_call_expectation(model: SDEModel, payoff, maturity: float) -> float:
    if not hasattr(payoff, "strike"):
        raise ConfigurationError("european_call control needs a payoff with a strike")
    expected = reference_price(model, EuropeanCallPayoff(payoff.strike), maturity)
    if expected is None:
        raise ConfigurationError(
            f"No closed-form European call price for model '{model.name}'; "
            "pass control_expectation explicitly"
        )
    return expected


CONTROL_VARIATES: dict[str, ControlVariate] = {
    "terminal_asset": ControlVariate(
        "terminal_asset", _terminal_asset_observable, _terminal_asset_expectation
    ),
    "european_call": ControlVariate(
        "european_call", _european_call_observable, _european_call_expectation
    ),
}


def get_control_variate(name: str) -> ControlVariate:
    """Look up a control variate by id, raising ConfigurationError if unknown."""
    if name not in CONTROL_VARIATES:
        raise ConfigurationError(
            f"Unknown control variate '{name}'. "
            f"Available: {', '.join(CONTROL_VARIATES)}"
        )
    return CONTROL_VARIATES[name]


def resolve_expectation(
    control: ControlVariate,
    model: SDEModel,
    payoff,
    maturity: float,
    override: float | None = None
) -> float:
    """
    Known E[X] for a control: the explicit override if given, else the oracle.
    """
    if override is not None:
        return float(override)
    return float(control.expectation(model, payoff, maturity))


def apply_control_variate(
    y: np.ndarray,
    x: np.ndarray,
    expected_x: float
) -> tuple[np.ndarray, float, float]:
    """
    Adjust payoff samples with a control.

    Parameters
    ----------
    y : np.ndarray
        Discounted payoff samples
    x : np.ndarray
        Control samples, aligned with y
    expected_x : float
        Known E[X]

    Returns
    -------
    adjusted : np.ndarray
        Y_adj samples
    beta : float
        Estimated coefficient b (0 when X has no sample variance)
    vrf : float
        Var(Y) / Var(Y_adj); may be below 1 and is reported, not raised.
        Infinite when the adjusted samples are constant.
    """
    if len(y) < 2:
        return y, 0.0, 1.0

    var_x = np.var(x, ddof=1)
    if var_x <= MIN_CONTROL_VARIANCE:
        return y, 0.0, 1.0

    beta = float(np.cov(y, x, ddof=1)[0, 1] / var_x)
    adjusted = y - beta * (x - expected_x)

    var_y = float(np.var(y, ddof=1))
    var_adj = float(np.var(adjusted, ddof=1))
    if var_adj > 0.0:
        vrf = var_y / var_adj
    else:
        vrf = float("inf") if var_y > 0.0 else 1.0
    return adjusted, beta, vrf
