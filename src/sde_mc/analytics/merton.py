"""
Merton (1976) jump-diffusion European option price as a Poisson-weighted
series of Black-Scholes prices.
"""

import math

from sde_mc.analytics.black_scholes import bs_price

# Terms are added until the Poisson tail mass drops below this
SERIES_TOLERANCE = 1e-14
MAX_SERIES_TERMS = 200


def merton_price(
    S0: float,
    K: float,
    r: float,
    T: float,
    sigma: float,
    lam: float,
    mu_j: float,
    sigma_j: float,
    option_type: str
) -> float:
    """
    Price a European option under Merton jump-diffusion.

    Conditional on n jumps the log price is Gaussian, so

        V = sum_n e^{-lam' T} (lam' T)^n / n! * BS(S0, K, r_n, T, sigma_n)

    with k = exp(mu_j + sigma_j^2 / 2) - 1, lam' = lam (1 + k),
    r_n = r - lam k + n log(1 + k) / T and sigma_n^2 = sigma^2 + n sigma_j^2 / T.
    Each BS term is discounted at r_n, so the series discounts at r overall.

    Parameters
    ----------
    S0, K, r, T, sigma : float
        Black-Scholes inputs for the diffusion part (T > 0)
    lam : float
        Jump intensity (>= 0)
    mu_j, sigma_j : float
        Mean and standard deviation of the log jump size
    option_type : str
        'call' or 'put'

    Returns
    -------
    float
        Option price
    """
    if T <= 0:
        return bs_price(S0, K, r, 0.0, sigma, option_type)

    k = math.exp(mu_j + 0.5 * sigma_j**2) - 1.0
    lam_prime = lam * (1.0 + k)
    mean_jumps = lam_prime * T
    log_one_plus_k = math.log1p(k)

    price = 0.0
    weight = math.exp(-mean_jumps)
    cumulative = 0.0
    for n in range(MAX_SERIES_TERMS):
        if n > 0:
            weight *= mean_jumps / n
        r_n = r - lam * k + n * log_one_plus_k / T
        sigma_n = math.sqrt(sigma**2 + n * sigma_j**2 / T)
        price += weight * bs_price(S0, K, r_n, T, sigma_n, option_type)
        cumulative += weight
        if 1.0 - cumulative < SERIES_TOLERANCE and n > mean_jumps:
            break
    return price
