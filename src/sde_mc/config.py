"""
Engine configuration.

Configuration objects are frozen dataclasses validated on construction, so a
config that exists is a config that can be run.
"""

import numbers
import os
from dataclasses import dataclass

from sde_mc.errors import ConfigurationError, ParameterError

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_SEED = 42

# Paths per work unit handed to a worker thread
DEFAULT_BLOCK_SIZE = 4096

# Upper bound on the default worker count
MAX_DEFAULT_WORKERS = 8

# Environment override for the worker count
WORKERS_ENV_VAR = "SDE_MC_WORKERS"

# z-value for the 95% confidence interval
DEFAULT_CONFIDENCE_Z = 1.96

# Finite-difference bump: h = DEFAULT_RELATIVE_BUMP * |p|, or
# DEFAULT_ABSOLUTE_BUMP when p == 0. Smaller bumps lower the O(h^2)
# truncation bias but raise the variance of the difference quotient,
# sharply so for Gamma on kinked payoffs.
DEFAULT_RELATIVE_BUMP = 0.01
DEFAULT_ABSOLUTE_BUMP = 1e-4


def default_workers() -> int:
    """
    Resolve the default number of worker threads.

    Priority:
    1. ``SDE_MC_WORKERS`` environment variable (if set)
    2. ``min(8, os.cpu_count())``

    Returns
    -------
    int
        Number of workers (>= 1)
    """
    env_value = os.environ.get(WORKERS_ENV_VAR)
    if env_value:
        try:
            workers = int(env_value)
        except ValueError:
            raise ConfigurationError(
                f"{WORKERS_ENV_VAR} must be an integer, got {env_value!r}"
            ) from None
        if workers < 1:
            raise ConfigurationError(f"{WORKERS_ENV_VAR} must be >= 1, got {workers}")
        return workers
    return min(MAX_DEFAULT_WORKERS, os.cpu_count() or 1)


def _is_integer(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


@dataclass(frozen=True)
class EngineConfig:
    """
    Immutable Monte Carlo engine configuration.

    Attributes
    ----------
    n_paths : int
        Total number of simulated paths M (mirrors included when antithetic)
    seed : int
        Seed base; path ``i`` is driven by the stream keyed ``seed + i``
    antithetic : bool
        Pair each base path with its mirror (negated draws). Requires even M.
    control_variate : str | None
        Id of the control variate to apply (e.g. ``"terminal_asset"``)
    control_expectation : float | None
        Known expectation of the control. When None it is taken from the
        analytic oracle.
    n_workers : int | None
        Worker threads; None resolves via ``default_workers()``
    block_size : int
        Number of base paths per work unit
    """

    n_paths: int
    seed: int = DEFAULT_SEED
    antithetic: bool = False
    control_variate: str | None = None
    control_expectation: float | None = None
    n_workers: int | None = None
    block_size: int = DEFAULT_BLOCK_SIZE

    def __post_init__(self) -> None:
        if not _is_integer(self.n_paths):
            raise ConfigurationError(f"n_paths must be an integer, got {self.n_paths!r}")
        if self.n_paths <= 0:
            raise ConfigurationError("n_paths must be positive")
        if self.antithetic and self.n_paths % 2 != 0:
            raise ConfigurationError("n_paths must be even when using antithetic variates")
        if not _is_integer(self.seed) or self.seed < 0:
            raise ParameterError("seed", self.seed, "must be a non-negative integer")
        # numpy integers are stored as plain ints
        object.__setattr__(self, "n_paths", int(self.n_paths))
        object.__setattr__(self, "seed", int(self.seed))
        if self.block_size <= 0:
            raise ParameterError("block_size", self.block_size, "must be positive (> 0)")
        if self.n_workers is not None and self.n_workers < 1:
            raise ParameterError("n_workers", self.n_workers, "must be >= 1")
        if self.control_expectation is not None and self.control_variate is None:
            raise ConfigurationError(
                "control_expectation given without a control_variate id"
            )

    @property
    def n_samples(self) -> int:
        """Effective number of independent samples (pairs count once)."""
        return self.n_paths // 2 if self.antithetic else self.n_paths

    @property
    def workers(self) -> int:
        return self.n_workers if self.n_workers is not None else default_workers()
