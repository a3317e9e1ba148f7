"""
Greeks package: pathwise and finite-difference sensitivity estimators.
"""

from collections.abc import Iterable

from sde_mc.errors import ConfigurationError
from sde_mc.greeks.finite_diff import finite_difference_greek
from sde_mc.greeks.pathwise import pathwise_greek
from sde_mc.greeks.types import GreekResult, GreeksResult

_METHODS = {
    "pathwise": "pathwise",
    "pw": "pathwise",
    "finite_difference": "finite_difference",
    "fd": "finite_difference",
}


def _resolve_method(method: str) -> str:
    key = method.strip().lower()
    if key not in _METHODS:
        raise ConfigurationError(
            f"Unknown Greek method '{method}'; expected 'pathwise' or 'finite_difference'"
        )
    return _METHODS[key]


def compute_greek(
    engine,
    greek: str,
    method: str = "finite_difference",
    bump: float | None = None,
    parameter: str | None = None
) -> GreekResult:
    """
    Estimate one sensitivity of an engine's price.

    Parameters
    ----------
    engine : MonteCarloEngine
        Configured engine; its seed drives every revaluation
    greek : str
        'delta', 'gamma', 'vega' or 'rho'
    method : str, optional
        'pathwise' ('pw') or 'finite_difference' ('fd')
    bump : float, optional
        Bump size for finite differences and pathwise gamma
    parameter : str, optional
        Model parameter to differentiate (finite differences only)

    Returns
    -------
    GreekResult
        Estimate with standard error and confidence interval
    """
    resolved = _resolve_method(method)
    if resolved == "pathwise":
        if parameter is not None:
            raise ConfigurationError("parameter= is only supported by finite differences")
        return pathwise_greek(engine, greek.lower(), bump=bump)
    return finite_difference_greek(engine, greek.lower(), bump=bump, parameter=parameter)


def compute_greeks(
    engine,
    greeks: Iterable[str] = ("delta", "gamma", "vega", "rho"),
    method: str = "finite_difference"
) -> GreeksResult:
    """Estimate several Greeks with one method, in request order."""
    resolved = _resolve_method(method)
    result = GreeksResult(method=resolved)
    for name in greeks:
        result.greeks[name] = compute_greek(engine, name, method=resolved)
    return result


__all__ = [
    "GreekResult",
    "GreeksResult",
    "compute_greek",
    "compute_greeks",
    "finite_difference_greek",
    "pathwise_greek",
]
