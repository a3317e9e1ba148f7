"""
Euler-Maruyama scheme (weak order 1, strong order 1/2).
"""

import math

import numpy as np

from sde_mc.models.base import SDEModel
from sde_mc.solvers.base import Solver, diffusion_increment


class EulerMaruyama(Solver):
    """
    X_{n+1} = X_n + a(X_n, t) dt + b(X_n, t) dW
    """

    name = "euler_maruyama"

    def step(
        self,
        model: SDEModel,
        state: np.ndarray,
        t: float,
        dt: float,
        z: np.ndarray
    ) -> np.ndarray:
        dw = math.sqrt(dt) * z
        return state + model.drift(state, t) * dt + \
            diffusion_increment(model.diffusion(state, t), dw)
