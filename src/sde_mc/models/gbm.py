"""
Geometric Brownian Motion (GBM) model for asset price simulation.
"""

import math
from dataclasses import dataclass

import numpy as np

from sde_mc.errors import require_finite, require_positive
from sde_mc.models.base import SDEModel


@dataclass(frozen=True)
class GeometricBrownianMotion(SDEModel):
    """
    Geometric Brownian Motion model for simulating asset price paths.

    The model follows:
        dS_t = μ * S_t * dt + σ * S_t * dW_t

    where:
        S_t: asset price at time t
        μ: drift (risk-free rate under risk-neutral measure)
        σ: volatility
        W_t: Wiener process (Brownian motion)

    Parameters
    ----------
    S0 : float
        Initial asset price (must be > 0)
    r : float
        Risk-free interest rate (annualized), used for discounting
    sigma : float
        Volatility (annualized, must be > 0)
    mu : float, optional
        Drift. Defaults to r (risk-neutral dynamics); when left as None the
        drift follows r under parameter bumps.
    """

    S0: float
    r: float
    sigma: float
    mu: float | None = None

    name = "gbm"
    has_diffusion_derivative = True
    has_exact_step = True
    spot_param = "S0"
    vol_param = "sigma"

    def __post_init__(self) -> None:
        require_positive("S0", self.S0)
        require_finite("r", self.r)
        require_positive("sigma", self.sigma)
        if self.mu is not None:
            require_finite("mu", self.mu)

    @property
    def drift_rate(self) -> float:
        return self.r if self.mu is None else self.mu

    def initial_state(self, n_paths: int) -> np.ndarray:
        return np.full((n_paths, 1), float(self.S0))

    def drift(self, state: np.ndarray, t: float) -> np.ndarray:
        return self.drift_rate * state

    def diffusion(self, state: np.ndarray, t: float) -> np.ndarray:
        return (self.sigma * state)[:, :, np.newaxis]

    def diffusion_derivative(self, state: np.ndarray, t: float) -> np.ndarray:
        return np.full_like(state, self.sigma)

    def exact_step(self, state: np.ndarray, t: float, dt: float, z: np.ndarray) -> np.ndarray:
        # S_{t+dt} = S_t * exp((μ - σ²/2) dt + σ √dt Z)
        log_growth = (self.drift_rate - 0.5 * self.sigma**2) * dt + \
            self.sigma * math.sqrt(dt) * z
        return state * np.exp(log_growth)

    def expected_terminal(self, t: float) -> float:
        return self.S0 * math.exp(self.drift_rate * t)
