"""
Payoffs package initialization.
"""

from sde_mc.payoffs.plain_vanilla import EuropeanCallPayoff, EuropeanPutPayoff, make_payoff

__all__ = [
    "EuropeanCallPayoff",
    "EuropeanPutPayoff",
    "make_payoff",
]
