"""
Milstein scheme for scalar diffusions (strong order 1).
"""

import math

import numpy as np

from sde_mc.errors import IncompatibleSchemeError
from sde_mc.models.base import SDEModel
from sde_mc.solvers.base import Solver


class Milstein(Solver):
    """
    Milstein scheme.

        X_{n+1} = X_n + a dt + b dW + 1/2 * b * b' * (dW^2 - dt)

    Only scalar models (one state variable, one Brownian factor) that
    expose b' = db/dX can use it. Anything else is rejected when the
    engine is configured, never downgraded to Euler at run time.
    """

    name = "milstein"
    requires_diffusion_derivative = True

    def check_compatible(self, model: SDEModel) -> None:
        if model.state_dim != 1 or model.n_factors != 1:
            raise IncompatibleSchemeError(
                f"milstein supports scalar diffusions only; model '{model.name}' "
                f"has state_dim={model.state_dim}, n_factors={model.n_factors}"
            )
        super().check_compatible(model)

    def step(
        self,
        model: SDEModel,
        state: np.ndarray,
        t: float,
        dt: float,
        z: np.ndarray
    ) -> np.ndarray:
        dw = math.sqrt(dt) * z
        b = model.diffusion(state, t)[:, :, 0]
        b_prime = model.diffusion_derivative(state, t)
        return (
            state
            + model.drift(state, t) * dt
            + b * dw
            + 0.5 * b * b_prime * (dw**2 - dt)
        )
