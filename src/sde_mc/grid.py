"""
Simulation time grid.
"""

import math
import numbers
from dataclasses import dataclass

import numpy as np

from sde_mc.errors import GridError


@dataclass(frozen=True)
class TimeGrid:
    """
    Strictly increasing time points t_0 = 0 < t_1 < ... < t_N = T.

    Parameters
    ----------
    times : tuple[float, ...]
        Grid points, starting at 0
    """

    times: tuple[float, ...]

    def __post_init__(self) -> None:
        times = tuple(float(t) for t in self.times)
        object.__setattr__(self, "times", times)

        if len(times) < 2:
            raise GridError("Time grid needs at least two points")
        if not all(math.isfinite(t) for t in times):
            raise GridError("Time grid points must be finite")
        if times[0] != 0.0:
            raise GridError(f"Time grid must start at 0, got {times[0]}")
        for prev, curr in zip(times, times[1:]):
            if curr <= prev:
                raise GridError(
                    f"Time grid must be strictly increasing, got {prev} followed by {curr}"
                )

    @classmethod
    def uniform(cls, maturity: float, n_steps: int) -> "TimeGrid":
        """
        Build an equally spaced grid on [0, maturity].

        Parameters
        ----------
        maturity : float
            Final time T (must be > 0)
        n_steps : int
            Number of steps (must be >= 1)
        """
        if isinstance(n_steps, bool) or not isinstance(n_steps, numbers.Integral) or n_steps < 1:
            raise GridError(f"n_steps must be a positive integer, got {n_steps!r}")
        if not math.isfinite(maturity) or maturity <= 0:
            raise GridError(f"maturity must be positive, got {maturity}")
        return cls(tuple(np.linspace(0.0, maturity, int(n_steps) + 1)))

    @property
    def maturity(self) -> float:
        return self.times[-1]

    @property
    def n_steps(self) -> int:
        return len(self.times) - 1

    @property
    def dts(self) -> np.ndarray:
        return np.diff(np.asarray(self.times))

    def __len__(self) -> int:
        return len(self.times)
