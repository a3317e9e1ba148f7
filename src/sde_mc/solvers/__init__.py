"""
Solvers package: discretization schemes and scheme selection by name.
"""

from sde_mc.errors import ConfigurationError
from sde_mc.models.base import SDEModel
from sde_mc.solvers.base import Solver
from sde_mc.solvers.euler_maruyama import EulerMaruyama
from sde_mc.solvers.exact import ExactSolver
from sde_mc.solvers.milstein import Milstein
from sde_mc.solvers.qe import QuadraticExponential
from sde_mc.solvers.srk import StochasticRungeKutta

_SOLVERS: dict[str, type[Solver]] = {
    "euler_maruyama": EulerMaruyama,
    "milstein": Milstein,
    "srk": StochasticRungeKutta,
    "exact": ExactSolver,
    "qe": QuadraticExponential,
}

_ALIASES = {
    "euler": "euler_maruyama",
    "em": "euler_maruyama",
    "euler-maruyama": "euler_maruyama",
    "heun": "srk",
    "andersen_qe": "qe",
    "quadratic_exponential": "qe",
}


def available_solvers() -> list[str]:
    """Canonical names accepted by ``get_solver``."""
    return list(_SOLVERS)


def get_solver(name: str, model: SDEModel | None = None) -> Solver:
    """
    Build a solver by scheme name.

    Parameters
    ----------
    name : str
        Scheme name or alias ('euler', 'em', 'euler_maruyama', 'milstein',
        'srk', 'exact', 'qe'), case-insensitive
    model : SDEModel, optional
        When given, the pairing is checked immediately

    Returns
    -------
    Solver
        Stateless solver instance

    Raises
    ------
    ConfigurationError
        If the name is unknown
    IncompatibleSchemeError
        If the scheme cannot step the given model
    """
    key = name.strip().lower()
    key = _ALIASES.get(key, key)
    if key not in _SOLVERS:
        raise ConfigurationError(
            f"Unknown scheme '{name}'. Available: {', '.join(available_solvers())}"
        )
    solver = _SOLVERS[key]()
    if model is not None:
        solver.check_compatible(model)
    return solver


__all__ = [
    "Solver",
    "EulerMaruyama",
    "Milstein",
    "StochasticRungeKutta",
    "ExactSolver",
    "QuadraticExponential",
    "available_solvers",
    "get_solver",
]
