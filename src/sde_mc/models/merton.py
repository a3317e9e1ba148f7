"""
Merton jump-diffusion model.
"""

import math
from dataclasses import dataclass

import numpy as np

from sde_mc.errors import require_finite, require_non_negative, require_positive
from sde_mc.models.base import SDEModel


@dataclass(frozen=True)
class MertonJumpDiffusion(SDEModel):
    """
    Merton (1976) jump-diffusion under the risk-neutral measure.

        dS_t / S_{t-} = (r - lam * k) dt + sigma dW_t + (J - 1) dN_t

    with N a Poisson process of intensity lam, log J ~ N(mu_j, sigma_j^2)
    and k = E[J - 1] = exp(mu_j + sigma_j^2 / 2) - 1 the drift compensator.

    The continuous part is handled by the selected solver (or exactly); the
    jumps of each step are applied afterwards by ``jump_step``. N jumps in a
    step multiply the price by exp(N * mu_j + sqrt(N) * sigma_j * Z_J),
    which is the exact law of a sum of N lognormal jump sizes.

    Parameters
    ----------
    S0 : float
        Initial asset price (must be > 0)
    r : float
        Risk-free interest rate
    sigma : float
        Diffusion volatility (must be > 0)
    lam : float
        Jump intensity per year (must be >= 0)
    mu_j : float
        Mean of the log jump size
    sigma_j : float
        Standard deviation of the log jump size (must be >= 0)
    """

    S0: float
    r: float
    sigma: float
    lam: float
    mu_j: float
    sigma_j: float

    name = "merton"
    has_diffusion_derivative = True
    has_exact_step = True
    has_jumps = True
    spot_param = "S0"
    vol_param = "sigma"

    def __post_init__(self) -> None:
        require_positive("S0", self.S0)
        require_finite("r", self.r)
        require_positive("sigma", self.sigma)
        require_non_negative("lam", self.lam)
        require_finite("mu_j", self.mu_j)
        require_non_negative("sigma_j", self.sigma_j)

    @property
    def jump_compensator(self) -> float:
        return math.exp(self.mu_j + 0.5 * self.sigma_j**2) - 1.0

    @property
    def drift_rate(self) -> float:
        return self.r - self.lam * self.jump_compensator

    def initial_state(self, n_paths: int) -> np.ndarray:
        return np.full((n_paths, 1), float(self.S0))

    def drift(self, state: np.ndarray, t: float) -> np.ndarray:
        return self.drift_rate * state

    def diffusion(self, state: np.ndarray, t: float) -> np.ndarray:
        return (self.sigma * state)[:, :, np.newaxis]

    def diffusion_derivative(self, state: np.ndarray, t: float) -> np.ndarray:
        return np.full_like(state, self.sigma)

    def exact_step(self, state: np.ndarray, t: float, dt: float, z: np.ndarray) -> np.ndarray:
        log_growth = (self.drift_rate - 0.5 * self.sigma**2) * dt + \
            self.sigma * math.sqrt(dt) * z
        return state * np.exp(log_growth)

    def jump_intensity(self) -> float:
        return self.lam

    def jump_step(
        self,
        state: np.ndarray,
        dt: float,
        counts: np.ndarray,
        z_jump: np.ndarray
    ) -> np.ndarray:
        log_jump = counts * self.mu_j + np.sqrt(counts) * self.sigma_j * z_jump
        return state * np.exp(log_jump)[:, np.newaxis]

    def expected_terminal(self, t: float) -> float:
        return self.S0 * math.exp(self.r * t)
