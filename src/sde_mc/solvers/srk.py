"""
Stochastic Runge-Kutta scheme of Heun type.
"""

import math

import numpy as np

from sde_mc.models.base import SDEModel
from sde_mc.solvers.base import Solver, diffusion_increment


class StochasticRungeKutta(Solver):
    """
    Order-1 derivative-free stochastic Runge-Kutta scheme.

    A trial Euler step X~ = X + a(X) dt + b(X) dW supplies a second drift
    evaluation, and the drift is averaged Heun-style:

        X_{n+1} = X + 1/2 (a(X, t) + a(X~, t + dt)) dt + b(X) dW + C

    The correction C replaces the Milstein term with finite differences of
    the diffusion at supporting values Y_j = X + a dt + b_j sqrt(dt):

        C = sum_j (b_j(Y_j) - b_j(X)) * (dW_j^2 - dt) / (2 sqrt(dt))

    where b_j is column j of the diffusion matrix. No b' is needed, so the
    scheme works for every model. For additive noise C vanishes and the
    drift averaging alone lowers the weak error to O(dt^2) on linear drifts.

    Only the drift is averaged. The diffusion stays at the left point b(X),
    since averaging b over the trial step would converge to the Stratonovich
    solution instead of the Ito one.
    """

    name = "srk"

    def step(
        self,
        model: SDEModel,
        state: np.ndarray,
        t: float,
        dt: float,
        z: np.ndarray
    ) -> np.ndarray:
        sqrt_dt = math.sqrt(dt)
        dw = sqrt_dt * z

        a0 = model.drift(state, t)
        b0 = model.diffusion(state, t)
        noise = diffusion_increment(b0, dw)

        trial = state + a0 * dt + noise
        a1 = model.drift(trial, t + dt)

        base = state + a0 * dt
        correction = np.zeros_like(state)
        for j in range(b0.shape[2]):
            support = base + b0[:, :, j] * sqrt_dt
            b_support = model.diffusion(support, t)[:, :, j]
            correction += (b_support - b0[:, :, j]) * \
                ((dw[:, j:j + 1] ** 2 - dt) / (2.0 * sqrt_dt))

        return state + 0.5 * (a0 + a1) * dt + noise + correction
