"""
Deterministic random number streams for parallel Monte Carlo.
"""

from sde_mc.rng.streams import PathDraws, iter_blocks, sample_block, stream_for

__all__ = ["PathDraws", "iter_blocks", "sample_block", "stream_for"]
