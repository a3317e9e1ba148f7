"""
Analytics module: closed-form prices and Greeks used as reference values.
"""

from sde_mc.analytics.black_scholes import bs_delta, bs_gamma, bs_price, bs_rho, bs_vega
from sde_mc.analytics.merton import merton_price
from sde_mc.analytics.oracle import (
    expected_discounted_terminal,
    reference_greek,
    reference_price,
)

__all__ = [
    "bs_delta",
    "bs_gamma",
    "bs_price",
    "bs_rho",
    "bs_vega",
    "merton_price",
    "expected_discounted_terminal",
    "reference_greek",
    "reference_price",
]
