"""
SABR stochastic volatility model, lognormal (beta = 1) case.
"""

from dataclasses import dataclass

import numpy as np

from sde_mc.errors import (
    ParameterError,
    require_correlation,
    require_finite,
    require_non_negative,
    require_positive,
)
from sde_mc.mathutils import correlated_pair
from sde_mc.models.base import SDEModel


@dataclass(frozen=True)
class SABRModel(SDEModel):
    """
    SABR model with beta = 1.

        dF_t = a_t * F_t * dW1_t
        da_t = nu * a_t * dW2_t,   d<W1, W2>_t = rho dt

    The state is [F, a]. Only beta = 1 is implemented; other values are
    rejected rather than approximated. The volatility follows the same
    full-truncation policy as the Heston variance: a+ = max(a, 0) inside the
    coefficients and a <- max(a, 0) after every step.

    Parameters
    ----------
    F0 : float
        Initial forward (must be > 0)
    alpha : float
        Initial volatility a_0 (must be > 0)
    nu : float
        Volatility of volatility (must be >= 0)
    rho : float
        Correlation in [-1, 1]
    r : float, optional
        Discount rate for payoffs on the forward (default 0)
    beta : float, optional
        CEV exponent, must equal 1.0
    """

    F0: float
    alpha: float
    nu: float
    rho: float
    r: float = 0.0
    beta: float = 1.0

    name = "sabr"
    state_dim = 2
    n_factors = 2
    spot_param = "F0"
    vol_param = "alpha"

    def __post_init__(self) -> None:
        if self.beta != 1.0:
            raise ParameterError(
                "beta", self.beta, "only the lognormal case beta = 1 is supported"
            )
        require_positive("F0", self.F0)
        require_positive("alpha", self.alpha)
        require_non_negative("nu", self.nu)
        require_correlation("rho", self.rho)
        require_finite("r", self.r)

    def initial_state(self, n_paths: int) -> np.ndarray:
        state = np.empty((n_paths, 2))
        state[:, 0] = self.F0
        state[:, 1] = self.alpha
        return state

    def drift(self, state: np.ndarray, t: float) -> np.ndarray:
        # Forward is a martingale; so is the lognormal volatility
        return np.zeros_like(state)

    def diffusion(self, state: np.ndarray, t: float) -> np.ndarray:
        vol = np.maximum(state[:, 1], 0.0)
        out = np.zeros((state.shape[0], 2, 2))
        out[:, 0, 0] = vol * state[:, 0]
        out[:, 1, 1] = self.nu * vol
        return out

    def correlate(self, z: np.ndarray) -> np.ndarray:
        z1, z2 = correlated_pair(z[:, 0], z[:, 1], self.rho)
        return np.column_stack([z1, z2])

    def constrain(self, state: np.ndarray) -> np.ndarray:
        state[:, 1] = np.maximum(state[:, 1], 0.0)
        return state

    def expected_terminal(self, t: float) -> float:
        return float(self.F0)
