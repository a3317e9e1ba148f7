"""
Pricers package initialization.
"""

from sde_mc.pricers.control_variates import CONTROL_VARIATES, apply_control_variate
from sde_mc.pricers.monte_carlo import (
    Estimate,
    MonteCarloEngine,
    TerminalSample,
    price_option,
    run,
)

__all__ = [
    "CONTROL_VARIATES",
    "Estimate",
    "MonteCarloEngine",
    "TerminalSample",
    "apply_control_variate",
    "price_option",
    "run",
]
