"""
Ornstein-Uhlenbeck mean-reverting process.
"""

import math
from dataclasses import dataclass

import numpy as np

from sde_mc.errors import require_finite, require_positive
from sde_mc.models.base import SDEModel


@dataclass(frozen=True)
class OrnsteinUhlenbeck(SDEModel):
    """
    Ornstein-Uhlenbeck process.

        dX_t = kappa * (mu - X_t) dt + sigma dW_t

    The diffusion is additive, so b' = 0 and Milstein coincides with
    Euler-Maruyama. The transition is Gaussian with known moments, which
    makes the process the reference case for solver convergence tests.

    Parameters
    ----------
    x0 : float
        Initial value
    kappa : float
        Mean reversion speed (must be > 0)
    mu : float
        Long-run mean
    sigma : float
        Volatility (must be > 0)
    r : float, optional
        Discount rate applied to payoffs (default 0, i.e. no discounting)
    """

    x0: float
    kappa: float
    mu: float
    sigma: float
    r: float = 0.0

    name = "ou"
    has_diffusion_derivative = True
    has_exact_step = True
    spot_param = "x0"
    vol_param = "sigma"

    def __post_init__(self) -> None:
        require_finite("x0", self.x0)
        require_positive("kappa", self.kappa)
        require_finite("mu", self.mu)
        require_positive("sigma", self.sigma)
        require_finite("r", self.r)

    def exact_mean(self, t: float) -> float:
        return self.mu + (self.x0 - self.mu) * math.exp(-self.kappa * t)

    def exact_variance(self, t: float) -> float:
        return self.sigma**2 / (2.0 * self.kappa) * (1.0 - math.exp(-2.0 * self.kappa * t))

    def initial_state(self, n_paths: int) -> np.ndarray:
        return np.full((n_paths, 1), float(self.x0))

    def drift(self, state: np.ndarray, t: float) -> np.ndarray:
        return self.kappa * (self.mu - state)

    def diffusion(self, state: np.ndarray, t: float) -> np.ndarray:
        return np.full((state.shape[0], 1, 1), float(self.sigma))

    def diffusion_derivative(self, state: np.ndarray, t: float) -> np.ndarray:
        return np.zeros_like(state)

    def exact_step(self, state: np.ndarray, t: float, dt: float, z: np.ndarray) -> np.ndarray:
        decay = math.exp(-self.kappa * dt)
        std = self.sigma * math.sqrt((1.0 - decay**2) / (2.0 * self.kappa))
        return self.mu + (state - self.mu) * decay + std * z

    def expected_terminal(self, t: float) -> float:
        return self.exact_mean(t)
