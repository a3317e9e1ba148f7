"""
Deterministic per-path random streams.

Every path owns its own generator, keyed by ``seed_base + path_index`` on a
counter-based Philox bit generator. Draws therefore depend only on the path
index, never on which worker simulates the path or in which order.
"""

from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np

from sde_mc.errors import ConfigurationError
from sde_mc.mathutils import standard_normal


def stream_for(seed_base: int, path_index: int) -> np.random.Generator:
    """
    Return the random source for one path.

    Parameters
    ----------
    seed_base : int
        Seed base shared by every path of a run (must be >= 0)
    path_index : int
        Index of the path in [0, M) (must be >= 0)

    Returns
    -------
    np.random.Generator
        Generator keyed with ``seed_base + path_index``. The same pair always
        yields the same sequence; distinct keys yield independent Philox
        streams.
    """
    if seed_base < 0:
        raise ConfigurationError(f"seed_base must be non-negative, got {seed_base}")
    if path_index < 0:
        raise ConfigurationError(f"path_index must be non-negative, got {path_index}")
    return np.random.Generator(np.random.Philox(key=int(seed_base) + int(path_index)))


@dataclass(frozen=True)
class PathDraws:
    """
    Random inputs for a contiguous block of paths.

    Attributes
    ----------
    normals : np.ndarray
        Independent standard normals, shape (n_paths, n_steps, n_factors)
    jump_counts : np.ndarray | None
        Poisson jump counts per step, shape (n_paths, n_steps)
    jump_normals : np.ndarray | None
        Standard normals driving jump sizes, shape (n_paths, n_steps)
    """

    normals: np.ndarray
    jump_counts: np.ndarray | None = None
    jump_normals: np.ndarray | None = None

    @property
    def n_paths(self) -> int:
        return self.normals.shape[0]

    def mirrored(self) -> "PathDraws":
        """Antithetic copy: every Gaussian draw negated, jump counts kept."""
        return PathDraws(
            normals=-self.normals,
            jump_counts=self.jump_counts,
            jump_normals=None if self.jump_normals is None else -self.jump_normals,
        )


def sample_block(
    seed_base: int,
    start: int,
    stop: int,
    n_steps: int,
    n_factors: int,
    jump_intensities: np.ndarray | None = None
) -> PathDraws:
    """
    Draw the random inputs for paths ``start`` to ``stop - 1``.

    Each row is filled from ``stream_for(seed_base, path_index)`` in a fixed
    order: diffusion normals, then jump counts, then jump normals.

    Parameters
    ----------
    seed_base : int
        Seed base of the run
    start, stop : int
        Half-open path index range
    n_steps : int
        Number of time steps
    n_factors : int
        Independent Brownian factors per step
    jump_intensities : np.ndarray, optional
        Poisson mean per step (lambda * dt_i); enables jump draws

    Returns
    -------
    PathDraws
        Random inputs for the block
    """
    n = stop - start
    normals = np.empty((n, n_steps, n_factors))
    jump_counts = None
    jump_normals = None
    if jump_intensities is not None:
        jump_counts = np.empty((n, n_steps))
        jump_normals = np.empty((n, n_steps))

    for row, path_index in enumerate(range(start, stop)):
        rng = stream_for(seed_base, path_index)
        normals[row] = standard_normal(rng, (n_steps, n_factors))
        if jump_intensities is not None:
            jump_counts[row] = rng.poisson(jump_intensities)
            jump_normals[row] = standard_normal(rng, n_steps)

    return PathDraws(normals=normals, jump_counts=jump_counts, jump_normals=jump_normals)


def iter_blocks(n: int, block_size: int) -> Iterator[tuple[int, int]]:
    """Yield half-open ``(start, stop)`` ranges covering [0, n)."""
    for start in range(0, n, block_size):
        yield start, min(start + block_size, n)
