"""
Exact transition sampling for models with a closed-form step.
"""

import numpy as np

from sde_mc.errors import IncompatibleSchemeError
from sde_mc.models.base import SDEModel
from sde_mc.solvers.base import Solver


class ExactSolver(Solver):
    """Delegate each step to ``model.exact_step`` (no discretization bias)."""

    name = "exact"

    def check_compatible(self, model: SDEModel) -> None:
        if not model.has_exact_step:
            raise IncompatibleSchemeError(
                f"model '{model.name}' has no exact transition; "
                "choose euler_maruyama, milstein or srk"
            )

    def step(
        self,
        model: SDEModel,
        state: np.ndarray,
        t: float,
        dt: float,
        z: np.ndarray
    ) -> np.ndarray:
        return model.exact_step(state, t, dt, z)
