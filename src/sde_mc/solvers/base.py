"""
Solver contract.

A solver advances a batch of model states by one time step. Solvers hold no
mutable state, so a single instance is shared by every worker.
"""

from abc import ABC, abstractmethod
from typing import ClassVar

import numpy as np

from sde_mc.errors import IncompatibleSchemeError
from sde_mc.models.base import SDEModel


def diffusion_increment(b: np.ndarray, dw: np.ndarray) -> np.ndarray:
    """Contract diffusion (n, d, m) with Brownian increments (n, m) to (n, d)."""
    return np.einsum("ndm,nm->nd", b, dw)


class Solver(ABC):
    """
    One-step discretization rule for dX = a(X, t) dt + b(X, t) dW.

    ``step`` receives standard normals already mapped through
    ``model.correlate``; the Brownian increment is ``sqrt(dt) * z``.
    """

    name: ClassVar[str] = "solver"
    requires_diffusion_derivative: ClassVar[bool] = False

    def check_compatible(self, model: SDEModel) -> None:
        """
        Reject models this scheme cannot step.

        Raises
        ------
        IncompatibleSchemeError
            If the model lacks a capability the scheme needs
        """
        if self.requires_diffusion_derivative and not model.has_diffusion_derivative:
            raise IncompatibleSchemeError(
                f"{self.name} requires a diffusion derivative, "
                f"which model '{model.name}' does not provide"
            )

    @abstractmethod
    def step(
        self,
        model: SDEModel,
        state: np.ndarray,
        t: float,
        dt: float,
        z: np.ndarray
    ) -> np.ndarray:
        """
        Advance states from t to t + dt.

        Parameters
        ----------
        model : SDEModel
            Model supplying drift and diffusion
        state : np.ndarray
            Current states, shape (n, d)
        t : float
            Current time
        dt : float
            Step size (> 0)
        z : np.ndarray
            Correlated standard normals, shape (n, m)

        Returns
        -------
        np.ndarray
            Next states, shape (n, d)
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
