"""
SDE model contract.

A model describes dX_t = a(X_t, t) dt + b(X_t, t) dW_t on a fixed-dimension
state. All methods are vectorised over a batch of states of shape
(n_paths, state_dim) so that one call advances every path of a block.
"""

import dataclasses
from abc import ABC, abstractmethod
from typing import ClassVar

import numpy as np


class SDEModel(ABC):
    """
    Base class for stochastic differential equation models.

    Subclasses are frozen dataclasses: parameters are validated once at
    construction and never change, so one instance can be shared read-only
    by every worker.

    Capability flags tell solvers which optional methods are available:

    - ``has_diffusion_derivative``: ``diffusion_derivative`` is implemented
      (required by Milstein)
    - ``has_exact_step``: ``exact_step`` samples the exact transition
    - ``has_qe_step``: ``qe_step`` applies the quadratic-exponential variance
      scheme (stochastic volatility models)
    - ``has_jumps``: ``jump_step`` must be applied after each continuous step
    """

    name: ClassVar[str] = "sde"
    state_dim: ClassVar[int] = 1
    n_factors: ClassVar[int] = 1

    has_diffusion_derivative: ClassVar[bool] = False
    has_exact_step: ClassVar[bool] = False
    has_qe_step: ClassVar[bool] = False
    has_jumps: ClassVar[bool] = False

    # Parameter names bumped for Delta/Gamma, Vega and Rho
    spot_param: ClassVar[str | None] = None
    vol_param: ClassVar[str | None] = None
    rate_param: ClassVar[str | None] = "r"

    r: float

    @property
    def risk_free_rate(self) -> float:
        """Continuously compounded rate used for discounting payoffs."""
        return self.r

    @property
    def spot(self) -> float:
        """Initial value of the traded observable."""
        return float(getattr(self, self.spot_param))

    @abstractmethod
    def initial_state(self, n_paths: int) -> np.ndarray:
        """Return the starting state replicated for n_paths, shape (n, d)."""

    @abstractmethod
    def drift(self, state: np.ndarray, t: float) -> np.ndarray:
        """Drift a(X, t), shape (n, d)."""

    @abstractmethod
    def diffusion(self, state: np.ndarray, t: float) -> np.ndarray:
        """Diffusion b(X, t), shape (n, d, m) with m = n_factors."""

    def diffusion_derivative(self, state: np.ndarray, t: float) -> np.ndarray:
        """Derivative b'(X, t) of a scalar diffusion, shape (n, 1)."""
        raise NotImplementedError(f"{self.name} does not provide a diffusion derivative")

    def exact_step(self, state: np.ndarray, t: float, dt: float, z: np.ndarray) -> np.ndarray:
        """Sample the exact transition over dt from standard normals z (n, m)."""
        raise NotImplementedError(f"{self.name} does not provide an exact step")

    def qe_step(self, state: np.ndarray, t: float, dt: float, z: np.ndarray) -> np.ndarray:
        """Advance with a quadratic-exponential variance draw from correlated normals z."""
        raise NotImplementedError(f"{self.name} does not provide a QE step")

    def jump_intensity(self) -> float:
        """Poisson jump intensity per unit time."""
        return 0.0

    def jump_step(
        self,
        state: np.ndarray,
        dt: float,
        counts: np.ndarray,
        z_jump: np.ndarray
    ) -> np.ndarray:
        """Apply the jumps that occurred during dt."""
        return state

    def correlate(self, z: np.ndarray) -> np.ndarray:
        """Map independent standard normals (n, m) to the model's Brownian factors."""
        return z

    def constrain(self, state: np.ndarray) -> np.ndarray:
        """Apply the model's state truncation policy after a step."""
        return state

    def observable(self, state: np.ndarray) -> np.ndarray:
        """Traded quantity seen by payoffs, shape (n,)."""
        return state[:, 0]

    def expected_terminal(self, t: float) -> float:
        """E[observable(X_t)] in closed form."""
        raise NotImplementedError(f"{self.name} has no closed-form first moment")

    def bumped(self, **changes: float) -> "SDEModel":
        """Return a validated copy with some parameters replaced."""
        return dataclasses.replace(self, **changes)
