"""
Black-Scholes closed-form prices and Greeks for European options.

Reference values for GBM runs: checking estimates, supplying control
variate expectations and validating Greek estimators.

Calls and puts share one formula through the sign ``phi`` (+1 for a call,
-1 for a put), e.g. V = phi * (S0 N(phi d1) - K exp(-rT) N(phi d2)).
"""

import math

from sde_mc.errors import ConfigurationError
from sde_mc.mathutils import norm_cdf, norm_pdf

_SIGNS = {"call": 1.0, "put": -1.0}


def _check_inputs(S0: float, K: float, T: float, sigma: float) -> None:
    if S0 <= 0 or K <= 0:
        raise ConfigurationError("S0 and K must be positive")
    if T < 0 or sigma < 0:
        raise ConfigurationError("T and sigma must be non-negative")


def _sign(option_type: str) -> float:
    if option_type not in _SIGNS:
        raise ConfigurationError("option_type must be 'call' or 'put'")
    return _SIGNS[option_type]


def _d1_d2(S0: float, K: float, r: float, T: float, sigma: float) -> tuple[float, float]:
    vol_sqrt_t = sigma * math.sqrt(T)
    d1 = (math.log(S0 / K) + (r + 0.5 * sigma**2) * T) / vol_sqrt_t
    return d1, d1 - vol_sqrt_t


def _in_the_money_forward(S0: float, K: float, r: float, T: float, phi: float) -> bool:
    """Exercise decision when the terminal value is deterministic."""
    return phi * (S0 * math.exp(r * T) - K) > 0


def bs_price(S0: float, K: float, r: float, T: float, sigma: float, option_type: str) -> float:
    """
    European option price under Black-Scholes.

    Parameters
    ----------
    S0 : float
        Spot price (> 0)
    K : float
        Strike price (> 0)
    r : float
        Continuously compounded risk-free rate
    T : float
        Time to maturity in years (>= 0)
    sigma : float
        Volatility (>= 0)
    option_type : str
        'call' or 'put'

    Returns
    -------
    float
        Option price. With T == 0 or sigma == 0 the terminal value is
        deterministic and the price is the discounted intrinsic value of
        the forward.
    """
    _check_inputs(S0, K, T, sigma)
    phi = _sign(option_type)
    discount = math.exp(-r * T)

    if T == 0 or sigma == 0:
        return discount * max(phi * (S0 * math.exp(r * T) - K), 0.0)

    d1, d2 = _d1_d2(S0, K, r, T, sigma)
    return phi * (S0 * norm_cdf(phi * d1) - K * discount * norm_cdf(phi * d2))


def bs_delta(S0: float, K: float, r: float, T: float, sigma: float, option_type: str) -> float:
    """Delta = phi N(phi d1)."""
    _check_inputs(S0, K, T, sigma)
    phi = _sign(option_type)

    if T == 0 or sigma == 0:
        return phi if _in_the_money_forward(S0, K, r, T, phi) else 0.0

    d1, _ = _d1_d2(S0, K, r, T, sigma)
    return phi * norm_cdf(phi * d1)


def bs_gamma(S0: float, K: float, r: float, T: float, sigma: float) -> float:
    """Gamma = phi(d1) / (S0 sigma sqrt(T)); identical for calls and puts."""
    _check_inputs(S0, K, T, sigma)
    if T == 0 or sigma == 0:
        return 0.0
    d1, _ = _d1_d2(S0, K, r, T, sigma)
    return norm_pdf(d1) / (S0 * sigma * math.sqrt(T))


def bs_vega(S0: float, K: float, r: float, T: float, sigma: float) -> float:
    """Vega = S0 phi(d1) sqrt(T); identical for calls and puts."""
    _check_inputs(S0, K, T, sigma)
    if T == 0 or sigma == 0:
        return 0.0
    d1, _ = _d1_d2(S0, K, r, T, sigma)
    return S0 * norm_pdf(d1) * math.sqrt(T)


def bs_rho(S0: float, K: float, r: float, T: float, sigma: float, option_type: str) -> float:
    """Rho = phi K T exp(-rT) N(phi d2)."""
    _check_inputs(S0, K, T, sigma)
    phi = _sign(option_type)
    scale = K * T * math.exp(-r * T)

    if T == 0 or sigma == 0:
        return phi * scale if _in_the_money_forward(S0, K, r, T, phi) else 0.0

    _, d2 = _d1_d2(S0, K, r, T, sigma)
    return phi * scale * norm_cdf(phi * d2)
