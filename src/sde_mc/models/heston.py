"""
Heston stochastic volatility model for asset price simulation.
"""

import logging
import math
from dataclasses import dataclass

import numpy as np

from sde_mc.errors import (
    ParameterError,
    require_correlation,
    require_finite,
    require_non_negative,
    require_positive,
)
from sde_mc.mathutils import correlated_pair, norm_cdf_array
from sde_mc.models.base import SDEModel

logger = logging.getLogger(__name__)

# Upper limits beyond which the discretised variance is numerically unreliable
_REALISM_CAPS = {
    "kappa": (100.0, "extremely high mean reversion speed (>100) may cause numerical issues"),
    "xi": (5.0, "extremely high vol-of-vol (>5) may cause numerical issues"),
    "theta": (1.0, "long-term variance >1 (100% vol) is unrealistic"),
}

# Andersen's switching level between the quadratic and exponential regimes
QE_PSI_CRITICAL = 1.5


def sample_variance_qe(
    v: np.ndarray,
    kappa: float,
    theta: float,
    xi: float,
    dt: float,
    z: np.ndarray,
    psi_c: float = QE_PSI_CRITICAL
) -> np.ndarray:
    """
    Sample the CIR variance with Andersen's Quadratic-Exponential scheme.

    The next variance is drawn from a distribution matching the exact
    conditional mean m and variance s^2 of

        dv_t = kappa * (theta - v_t) * dt + xi * sqrt(v_t) * dW_t

    The regime depends on psi = s^2 / m^2:

    - psi <= psi_c: v' = a * (b + z)^2, a squared shifted normal
    - psi > psi_c: v' = 0 with probability p, else exponential with rate beta

    Every draw is non-negative, whatever the Feller condition.

    Parameters
    ----------
    v : np.ndarray
        Current variance values (shape: (n_paths,), >= 0)
    kappa : float
        Mean reversion speed (must be > 0)
    theta : float
        Long-term variance level (must be > 0)
    xi : float
        Volatility of volatility (must be >= 0)
    dt : float
        Time step size (must be > 0)
    z : np.ndarray
        Standard normal variates (shape: (n_paths,))
    psi_c : float, optional
        Critical psi for regime switching (default: 1.5)

    Returns
    -------
    np.ndarray
        Next variance values (shape: (n_paths,))

    Notes
    -----
    Reference: Andersen, L. (2008). "Simple and efficient simulation of the
    Heston stochastic volatility model." Journal of Computational Finance.
    """
    decay = math.exp(-kappa * dt)
    m = theta + (v - theta) * decay

    # deterministic variance path
    if xi == 0:
        return m

    one_minus_decay = 1.0 - decay
    s2 = (
        v * xi**2 * decay * one_minus_decay / kappa
        + theta * xi**2 * one_minus_decay**2 / (2.0 * kappa)
    )
    psi = np.divide(s2, m**2, out=np.full_like(s2, 10.0), where=m > 1e-12)

    v_next = np.zeros_like(m)

    quadratic = psi <= psi_c
    if np.any(quadratic):
        two_over_psi = 2.0 / psi[quadratic]
        b_squared = two_over_psi - 1.0 + np.sqrt(two_over_psi) * np.sqrt(
            np.maximum(two_over_psi - 1.0, 0.0)
        )
        a = m[quadratic] / (1.0 + b_squared)
        v_next[quadratic] = a * (np.sqrt(b_squared) + z[quadratic]) ** 2

    exponential = ~quadratic
    if np.any(exponential):
        psi_exp = psi[exponential]
        p = (psi_exp - 1.0) / (psi_exp + 1.0)
        beta = (1.0 - p) / m[exponential]
        u = np.clip(norm_cdf_array(z[exponential]), 1e-10, 1.0 - 1e-10)
        # inverse of the mixture CDF: mass p at zero, exponential tail above
        tail = np.log((1.0 - p) / (1.0 - u)) / beta
        v_next[exponential] = np.where(u <= p, 0.0, np.maximum(tail, 0.0))

    return v_next


@dataclass(frozen=True)
class HestonModel(SDEModel):
    """
    Heston stochastic volatility model.

    The risk-neutral model follows:
        dS_t = r * S_t * dt + sqrt(v_t) * S_t * dW1_t
        dv_t = kappa * (theta - v_t) * dt + xi * sqrt(v_t) * dW2_t

    where:
        S_t: asset price at time t
        v_t: instantaneous variance at time t
        r: risk-free interest rate
        kappa: mean reversion speed
        theta: long-term variance level
        xi: volatility of volatility
        rho: correlation between W1 and W2

    The state is [S, v]. Negative variance is handled by full truncation,
    identically for every solver:

    - v+ = max(v, 0) is used wherever sqrt(v) or the drift of v is evaluated
    - v <- max(v, 0) after every step

    This is the designated policy when the Feller condition
    2 * kappa * theta >= xi^2 fails and the discretised variance can
    undershoot zero. The violation itself is allowed and only logged.

    The ``qe`` solver sidesteps truncation: ``qe_step`` samples the variance
    with Andersen's QE scheme (``sample_variance_qe``), which is
    non-negative by construction.

    Parameters
    ----------
    S0 : float
        Initial asset price (must be > 0)
    v0 : float
        Initial variance (must be >= 0)
    r : float
        Risk-free interest rate (annualized)
    kappa : float
        Mean reversion speed (must be > 0 and <= 100)
    theta : float
        Long-term variance level (must be > 0 and <= 1)
    xi : float
        Volatility of volatility (must be > 0 and <= 5)
    rho : float
        Correlation between asset and variance Brownian motions (in [-1, 1])
    """

    S0: float
    v0: float
    r: float
    kappa: float
    theta: float
    xi: float
    rho: float

    name = "heston"
    state_dim = 2
    n_factors = 2
    has_qe_step = True
    spot_param = "S0"

    def __post_init__(self) -> None:
        require_positive("S0", self.S0)
        require_non_negative("v0", self.v0)
        require_finite("r", self.r)
        require_positive("kappa", self.kappa)
        require_positive("theta", self.theta)
        require_positive("xi", self.xi)
        require_correlation("rho", self.rho)
        for name, (cap, constraint) in _REALISM_CAPS.items():
            if getattr(self, name) > cap:
                raise ParameterError(name, getattr(self, name), constraint)

        if not self.feller_satisfied:
            logger.warning(
                "Feller condition violated (2*kappa*theta = %.6g < xi^2 = %.6g); "
                "variance will be fully truncated at zero",
                2.0 * self.kappa * self.theta,
                self.xi**2,
            )

    @property
    def feller_satisfied(self) -> bool:
        return 2.0 * self.kappa * self.theta >= self.xi**2

    def initial_state(self, n_paths: int) -> np.ndarray:
        state = np.empty((n_paths, 2))
        state[:, 0] = self.S0
        state[:, 1] = self.v0
        return state

    def drift(self, state: np.ndarray, t: float) -> np.ndarray:
        v_plus = np.maximum(state[:, 1], 0.0)
        out = np.empty_like(state)
        out[:, 0] = self.r * state[:, 0]
        out[:, 1] = self.kappa * (self.theta - v_plus)
        return out

    def diffusion(self, state: np.ndarray, t: float) -> np.ndarray:
        sqrt_v = np.sqrt(np.maximum(state[:, 1], 0.0))
        out = np.zeros((state.shape[0], 2, 2))
        out[:, 0, 0] = sqrt_v * state[:, 0]
        out[:, 1, 1] = self.xi * sqrt_v
        return out

    def correlate(self, z: np.ndarray) -> np.ndarray:
        z1, z2 = correlated_pair(z[:, 0], z[:, 1], self.rho)
        return np.column_stack([z1, z2])

    def constrain(self, state: np.ndarray) -> np.ndarray:
        state[:, 1] = np.maximum(state[:, 1], 0.0)
        return state

    def qe_step(self, state: np.ndarray, t: float, dt: float, z: np.ndarray) -> np.ndarray:
        """
        Advance one step with QE variance and a log-Euler asset update.

        The variance takes ``z[:, 1]`` through ``sample_variance_qe``. The
        asset moves as S exp((r - v/2) dt + sqrt(v dt) z1) on the variance at
        the start of the step, which keeps E[S_t] = S0 exp(r t) exactly.
        """
        v = np.maximum(state[:, 1], 0.0)
        out = np.empty_like(state)
        out[:, 1] = sample_variance_qe(v, self.kappa, self.theta, self.xi, dt, z[:, 1])
        out[:, 0] = state[:, 0] * np.exp((self.r - 0.5 * v) * dt + np.sqrt(v * dt) * z[:, 0])
        return out

    def expected_terminal(self, t: float) -> float:
        return self.S0 * math.exp(self.r * t)
