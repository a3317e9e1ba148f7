"""
Math utilities shared by models, solvers and the analytic oracle.
"""

import math

import numpy as np


def standard_normal(rng: np.random.Generator, size: int | tuple[int, ...]) -> np.ndarray:
    """
    Draw standard normal variates from a random source.

    Parameters
    ----------
    rng : np.random.Generator
        Random source (owned by the caller)
    size : int or tuple of int
        Output shape

    Returns
    -------
    np.ndarray
        Array of N(0, 1) samples
    """
    return rng.standard_normal(size)


def correlated_pair(
    z1: np.ndarray,
    z_indep: np.ndarray,
    rho: float
) -> tuple[np.ndarray, np.ndarray]:
    """
    Build a correlated standard normal pair from two independent ones.

    Z2 = rho * Z1 + sqrt(1 - rho^2) * Z_indep

    Parameters
    ----------
    z1 : np.ndarray
        First independent standard normal sample
    z_indep : np.ndarray
        Second independent standard normal sample
    rho : float
        Target correlation in [-1, 1]

    Returns
    -------
    tuple[np.ndarray, np.ndarray]
        (Z1, Z2) with Corr(Z1, Z2) = rho
    """
    z2 = rho * z1 + math.sqrt(max(1.0 - rho * rho, 0.0)) * z_indep
    return z1, z2


def norm_pdf(x: float) -> float:
    """
    Probability density function for standard normal distribution.

    Parameters
    ----------
    x : float
        Input value

    Returns
    -------
    float
        PDF value at x: φ(x) = exp(-x²/2)/√(2π)
    """
    return math.exp(-0.5 * x * x) / math.sqrt(2.0 * math.pi)


def norm_cdf(x: float) -> float:
    """
    Cumulative distribution function for standard normal distribution.

    Uses the complementary error function, which keeps full relative
    precision in the lower tail where 1 + erf(x) cancels.

    Parameters
    ----------
    x : float
        Input value

    Returns
    -------
    float
        CDF value at x: P(Z <= x) where Z ~ N(0,1)
    """
    return 0.5 * math.erfc(-x / math.sqrt(2.0))


def norm_cdf_array(x: np.ndarray) -> np.ndarray:
    """
    Vectorized standard normal CDF.

    Abramowitz & Stegun 26.2.17, absolute error below 7.5e-8.

    Parameters
    ----------
    x : np.ndarray
        Input values

    Returns
    -------
    np.ndarray
        P(Z <= x) elementwise
    """
    x = np.asarray(x, dtype=float)
    t = 1.0 / (1.0 + 0.2316419 * np.abs(x))
    density = np.exp(-0.5 * x * x) / math.sqrt(2.0 * math.pi)
    tail = density * t * (
        0.319381530 + t * (
            -0.356563782 + t * (
                1.781477937 + t * (
                    -1.821255978 + t * 1.330274429
                )
            )
        )
    )
    return np.where(x >= 0.0, 1.0 - tail, tail)
