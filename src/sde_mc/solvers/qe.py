"""
Andersen's Quadratic-Exponential scheme for stochastic volatility models.
"""

import numpy as np

from sde_mc.errors import IncompatibleSchemeError
from sde_mc.models.base import SDEModel
from sde_mc.solvers.base import Solver


class QuadraticExponential(Solver):
    """
    Delegate each step to ``model.qe_step``.

    The variance factor is drawn by moment matching instead of a truncated
    Euler step, so it never goes negative even when the Feller condition
    fails. Only models with a CIR variance factor provide the step.
    """

    name = "qe"

    def check_compatible(self, model: SDEModel) -> None:
        if not model.has_qe_step:
            raise IncompatibleSchemeError(
                f"model '{model.name}' has no quadratic-exponential step; "
                "the qe scheme needs a CIR variance factor (heston)"
            )

    def step(
        self,
        model: SDEModel,
        state: np.ndarray,
        t: float,
        dt: float,
        z: np.ndarray
    ) -> np.ndarray:
        return model.qe_step(state, t, dt, z)
