"""
SDE Monte Carlo Engine

Monte Carlo estimation of option prices and Greeks under stochastic
differential equation models, with pluggable discretization schemes,
deterministic parallel path simulation and variance reduction.
"""

from sde_mc._version import __version__

# Configuration and errors
from sde_mc.config import EngineConfig
from sde_mc.errors import (
    ConfigurationError,
    GridError,
    IncompatibleSchemeError,
    NumericalInstabilityError,
    ParameterError,
    SDEError,
)
from sde_mc.grid import TimeGrid

# Models and solvers
from sde_mc.models import (
    GeometricBrownianMotion,
    HestonModel,
    MertonJumpDiffusion,
    OrnsteinUhlenbeck,
    SABRModel,
    SDEModel,
    create_model,
)
from sde_mc.solvers import (
    EulerMaruyama,
    ExactSolver,
    Milstein,
    QuadraticExponential,
    StochasticRungeKutta,
    available_solvers,
    get_solver,
)

# Payoffs and pricers
from sde_mc.payoffs import EuropeanCallPayoff, EuropeanPutPayoff, make_payoff
from sde_mc.pricers import Estimate, MonteCarloEngine, price_option, run

# Greeks
from sde_mc.greeks import GreekResult, GreeksResult, compute_greek, compute_greeks

# Analytics
from sde_mc.analytics import (
    bs_delta,
    bs_gamma,
    bs_price,
    bs_rho,
    bs_vega,
    merton_price,
    reference_greek,
    reference_price,
)

__all__ = [
    # Version
    "__version__",
    # Configuration
    "EngineConfig",
    "TimeGrid",
    # Errors
    "SDEError",
    "ConfigurationError",
    "ParameterError",
    "GridError",
    "IncompatibleSchemeError",
    "NumericalInstabilityError",
    # Models
    "SDEModel",
    "GeometricBrownianMotion",
    "HestonModel",
    "SABRModel",
    "MertonJumpDiffusion",
    "OrnsteinUhlenbeck",
    "create_model",
    # Solvers
    "EulerMaruyama",
    "Milstein",
    "StochasticRungeKutta",
    "ExactSolver",
    "QuadraticExponential",
    "available_solvers",
    "get_solver",
    # Payoffs
    "EuropeanCallPayoff",
    "EuropeanPutPayoff",
    "make_payoff",
    # Pricers
    "Estimate",
    "MonteCarloEngine",
    "price_option",
    "run",
    # Greeks
    "GreekResult",
    "GreeksResult",
    "compute_greek",
    "compute_greeks",
    # Analytics
    "bs_price",
    "bs_delta",
    "bs_gamma",
    "bs_vega",
    "bs_rho",
    "merton_price",
    "reference_price",
    "reference_greek",
]
