"""
European call and put payoffs on the terminal model observable.

Payoffs are plain callables mapping an array of terminal observables to
undiscounted payoffs. They also expose the almost-everywhere derivative
with respect to the observable, which the pathwise Greeks need, and an
``option_type`` tag used to look up closed-form references.
"""

import numpy as np

from sde_mc.errors import ConfigurationError, require_positive


class _VanillaPayoff:
    """Strike validation and repr shared by the two vanilla payoffs."""

    option_type: str = ""
    path_dependent = False

    def __init__(self, strike: float):
        """
        Parameters
        ----------
        strike : float
            Strike price K (must be > 0)
        """
        require_positive("strike", strike)
        self.strike = float(strike)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(strike={self.strike})"


class EuropeanCallPayoff(_VanillaPayoff):
    """Call payoff max(S_T - K, 0)."""

    option_type = "call"

    def __call__(self, terminal: np.ndarray) -> np.ndarray:
        """
        Evaluate the payoff.

        Parameters
        ----------
        terminal : np.ndarray
            Terminal values of the model observable

        Returns
        -------
        np.ndarray
            Undiscounted payoffs, same shape as ``terminal``
        """
        return np.maximum(terminal - self.strike, 0.0)

    def derivative(self, terminal: np.ndarray) -> np.ndarray:
        """d payoff / d S_T = 1{S_T > K}, taken almost everywhere."""
        return (terminal > self.strike).astype(float)


class EuropeanPutPayoff(_VanillaPayoff):
    """Put payoff max(K - S_T, 0)."""

    option_type = "put"

    def __call__(self, terminal: np.ndarray) -> np.ndarray:
        return np.maximum(self.strike - terminal, 0.0)

    def derivative(self, terminal: np.ndarray) -> np.ndarray:
        """d payoff / d S_T = -1{S_T < K}."""
        return -(terminal < self.strike).astype(float)


_PAYOFFS = {
    "call": EuropeanCallPayoff,
    "put": EuropeanPutPayoff,
}


def make_payoff(kind: str, strike: float) -> _VanillaPayoff:
    """
    Build a payoff from a {kind, strike} description.

    Parameters
    ----------
    kind : str
        'call' or 'put' (case-insensitive)
    strike : float
        Strike price K (must be > 0)

    Raises
    ------
    ConfigurationError
        If the kind is not a vanilla payoff
    """
    key = kind.strip().lower()
    if key not in _PAYOFFS:
        raise ConfigurationError(f"Unknown payoff kind '{kind}'; expected 'call' or 'put'")
    return _PAYOFFS[key](strike)
