"""
Pathwise derivative estimators for Greeks.

Available for Geometric Brownian Motion with European payoffs, where
S_T depends smoothly on the parameters:

    dS_T/dS0    = S_T / S0                      (any scheme, linear in S0)
    dS_T/dsigma = S_T * (W_T - sigma * T)       (exact scheme)
    dS_T/dr     = S_T * T                       (exact scheme, drift = r)

The payoff derivative is taken almost everywhere (1{S_T > K} for a call).
Estimates use the plain discounted samples; control variates are not
applied to Greeks.
"""

import math

import numpy as np

from sde_mc.config import DEFAULT_RELATIVE_BUMP
from sde_mc.errors import ConfigurationError, require_positive
from sde_mc.greeks.types import GreekResult
from sde_mc.models.gbm import GeometricBrownianMotion
from sde_mc.solvers.exact import ExactSolver

PATHWISE_GREEKS = ("delta", "gamma", "vega", "rho")


def _check_supported(engine, greek: str) -> None:
    if greek not in PATHWISE_GREEKS:
        raise ConfigurationError(
            f"Pathwise method supports {', '.join(PATHWISE_GREEKS)}; got '{greek}'"
        )
    if not isinstance(engine.model, GeometricBrownianMotion):
        raise ConfigurationError(
            f"Pathwise Greeks require the gbm model, got '{engine.model.name}'"
        )
    payoff = engine.payoff
    if getattr(payoff, "option_type", None) not in ("call", "put") or \
            getattr(payoff, "path_dependent", False):
        raise ConfigurationError("Pathwise Greeks require a European call or put payoff")
    if greek in ("vega", "rho") and not isinstance(engine.solver, ExactSolver):
        raise ConfigurationError(f"Pathwise {greek} requires the exact scheme")
    if greek == "rho" and engine.model.mu is not None:
        raise ConfigurationError("Pathwise rho requires the drift to follow r (mu=None)")


def pathwise_samples(engine, greek: str, states: np.ndarray) -> np.ndarray:
    """
    Per-path derivative samples of the discounted payoff.

    Parameters
    ----------
    engine : MonteCarloEngine
        Engine that produced the states
    greek : str
        'delta', 'vega' or 'rho'
    states : np.ndarray
        Terminal states, shape (n, 1)

    Returns
    -------
    np.ndarray
        Sample derivative per path
    """
    model = engine.model
    payoff = engine.payoff
    T = engine.grid.maturity
    discount = engine.discount_factor

    S_T = model.observable(states)
    slope = payoff.derivative(S_T)

    if greek == "delta":
        return discount * slope * S_T / model.S0

    if greek == "vega":
        # Recover W_T from the exact lognormal solution
        W_T = (np.log(S_T / model.S0) - (model.drift_rate - 0.5 * model.sigma**2) * T) \
            / model.sigma
        return discount * slope * S_T * (W_T - model.sigma * T)

    if greek == "rho":
        return -T * discount * payoff(S_T) + discount * slope * S_T * T

    raise ConfigurationError(f"No pathwise sample formula for '{greek}'")


def _paired_samples(engine, greek: str) -> np.ndarray:
    terminal = engine.simulate_terminal()
    samples = pathwise_samples(engine, greek, terminal.base)
    if terminal.mirror is not None:
        samples = 0.5 * (samples + pathwise_samples(engine, greek, terminal.mirror))
    return samples


def pathwise_greek(engine, greek: str, bump: float | None = None) -> GreekResult:
    """
    Estimate a Greek with the pathwise method.

    Gamma has no pathwise form for kinked payoffs; it is estimated as the
    central difference of pathwise deltas at S0 +/- h under common random
    numbers.

    Parameters
    ----------
    engine : MonteCarloEngine
        Engine on a GBM model with a European payoff
    greek : str
        'delta', 'gamma', 'vega' or 'rho'
    bump : float, optional
        Spot bump for gamma (default 1% of S0)

    Returns
    -------
    GreekResult
        Estimate with standard error and confidence interval
    """
    _check_supported(engine, greek)

    if greek != "gamma":
        return GreekResult.from_samples(greek, _paired_samples(engine, greek), "pathwise")

    S0 = engine.model.S0
    h = DEFAULT_RELATIVE_BUMP * S0 if bump is None else bump
    require_positive("bump", h)
    if S0 - h <= 0 or not math.isfinite(S0 + h):
        raise ConfigurationError(f"Gamma bump {h} is too large for S0 = {S0}")

    up = engine.with_model(engine.model.bumped(S0=S0 + h))
    down = engine.with_model(engine.model.bumped(S0=S0 - h))
    samples = (_paired_samples(up, "delta") - _paired_samples(down, "delta")) / (2.0 * h)
    return GreekResult.from_samples("gamma", samples, "pathwise", bump=h)
