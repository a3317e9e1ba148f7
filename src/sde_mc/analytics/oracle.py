"""
Closed-form reference values for model/payoff pairs that have one.

Used to validate estimates in tests and to supply the known expectation of
control variates.
"""

import math

from sde_mc.analytics.black_scholes import bs_delta, bs_gamma, bs_price, bs_rho, bs_vega
from sde_mc.analytics.merton import merton_price
from sde_mc.errors import ConfigurationError
from sde_mc.models.base import SDEModel
from sde_mc.models.gbm import GeometricBrownianMotion
from sde_mc.models.merton import MertonJumpDiffusion
from sde_mc.models.sabr import SABRModel


def _is_risk_neutral_gbm(model: SDEModel) -> bool:
    return isinstance(model, GeometricBrownianMotion) and \
        (model.mu is None or model.mu == model.r)


def reference_price(model: SDEModel, payoff, maturity: float) -> float | None:
    """
    Closed-form price of a European payoff, or None when there is none.

    Covered cases:
    - risk-neutral GBM: Black-Scholes
    - Merton jump-diffusion: Poisson series of Black-Scholes prices
    - SABR with nu = 0: Black-76 on the forward, discounted at r

    Parameters
    ----------
    model : SDEModel
        Model instance
    payoff : EuropeanCallPayoff | EuropeanPutPayoff
        Payoff with ``strike`` and ``option_type``
    maturity : float
        Time to maturity T
    """
    option_type = getattr(payoff, "option_type", None)
    if option_type not in ("call", "put"):
        return None
    K = payoff.strike

    if _is_risk_neutral_gbm(model):
        return bs_price(model.S0, K, model.r, maturity, model.sigma, option_type)
    if isinstance(model, MertonJumpDiffusion):
        return merton_price(
            model.S0, K, model.r, maturity, model.sigma,
            model.lam, model.mu_j, model.sigma_j, option_type
        )
    if isinstance(model, SABRModel) and model.nu == 0:
        undiscounted = bs_price(model.F0, K, 0.0, maturity, model.alpha, option_type)
        return math.exp(-model.r * maturity) * undiscounted
    return None


def reference_greek(model: SDEModel, payoff, maturity: float, greek: str) -> float | None:
    """
    Black-Scholes Greek for risk-neutral GBM, None for any other model.

    Parameters
    ----------
    greek : str
        'delta', 'gamma', 'vega' or 'rho'
    """
    option_type = getattr(payoff, "option_type", None)
    if not _is_risk_neutral_gbm(model) or option_type not in ("call", "put"):
        return None

    args = (model.S0, payoff.strike, model.r, maturity, model.sigma)
    if greek == "delta":
        return bs_delta(*args, option_type)
    if greek == "gamma":
        return bs_gamma(*args)
    if greek == "vega":
        return bs_vega(*args)
    if greek == "rho":
        return bs_rho(*args, option_type)
    raise ConfigurationError(f"Unknown greek '{greek}'")


def expected_discounted_terminal(model: SDEModel, maturity: float) -> float:
    """
    E[exp(-rT) * observable(X_T)] in closed form.

    Raises
    ------
    ConfigurationError
        If the model has no closed-form first moment
    """
    try:
        expected = model.expected_terminal(maturity)
    except NotImplementedError as exc:
        raise ConfigurationError(str(exc)) from exc
    return math.exp(-model.risk_free_rate * maturity) * expected
