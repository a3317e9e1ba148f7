"""
Monte Carlo engine for SDE models.

Paths are simulated in blocks of consecutive base path indices. Every path
draws from its own stream keyed by ``seed + index``, and blocks are
re-assembled in index order, so an estimate depends only on the
configuration and never on the number of worker threads.
"""

import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np

from sde_mc.config import DEFAULT_CONFIDENCE_Z, DEFAULT_SEED, EngineConfig
from sde_mc.errors import ConfigurationError, NumericalInstabilityError
from sde_mc.grid import TimeGrid
from sde_mc.models.base import SDEModel
from sde_mc.payoffs.plain_vanilla import make_payoff
from sde_mc.pricers.control_variates import (
    apply_control_variate,
    get_control_variate,
    resolve_expectation,
)
from sde_mc.rng.streams import PathDraws, iter_blocks, sample_block
from sde_mc.solvers import get_solver
from sde_mc.solvers.base import Solver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Estimate:
    """
    Container for Monte Carlo estimation results.

    Attributes
    ----------
    mean : float
        Estimated expectation (control-variate adjusted when enabled)
    standard_error : float
        Standard error of the estimate; NaN with a single sample
    ci_lower : float
        Lower bound of 95% confidence interval
    ci_upper : float
        Upper bound of 95% confidence interval
    n_paths : int
        Number of simulated paths M, mirrors included
    n_samples : int
        Number of independent samples (M / 2 with antithetic pairing)
    naive_mean : float
        Estimate before control-variate adjustment
    naive_standard_error : float
        Standard error before control-variate adjustment
    control_variate_beta : float | None
        Coefficient b = Cov(Y, X) / Var(X) (None if not used)
    variance_reduction_factor : float | None
        Var(Y) / Var(Y_adj) (None if no control variate is used)
    """

    mean: float
    standard_error: float
    ci_lower: float
    ci_upper: float
    n_paths: int
    n_samples: int
    naive_mean: float
    naive_standard_error: float
    control_variate_beta: float | None = None
    variance_reduction_factor: float | None = None

    @property
    def price(self) -> float:
        return self.mean

    def __repr__(self) -> str:
        base = (
            f"Estimate(\n"
            f"  mean={self.mean:.6f},\n"
            f"  stderr={self.standard_error:.6f},\n"
            f"  CI95=[{self.ci_lower:.6f}, {self.ci_upper:.6f}],\n"
            f"  n_paths={self.n_paths},\n"
            f"  n_samples={self.n_samples}"
        )
        if self.control_variate_beta is not None:
            base += (
                f",\n  naive_mean={self.naive_mean:.6f}"
                f",\n  naive_stderr={self.naive_standard_error:.6f}"
                f",\n  control_variate_beta={self.control_variate_beta:.6f}"
                f",\n  variance_reduction_factor={self.variance_reduction_factor:.4f}"
            )
        base += "\n)"
        return base


@dataclass(frozen=True)
class TerminalSample:
    """
    Terminal states of a run.

    Attributes
    ----------
    base : np.ndarray
        Terminal states of the base paths, shape (n_base, state_dim)
    mirror : np.ndarray | None
        Terminal states of the antithetic mirrors (None without antithetic)
    """

    base: np.ndarray
    mirror: np.ndarray | None = None


def _standard_error(samples: np.ndarray) -> float:
    n = len(samples)
    if n < 2:
        return float("nan")
    return float(np.std(samples, ddof=1) / np.sqrt(n))


class MonteCarloEngine:
    """
    Monte Carlo engine combining a model, a solver, a grid and a payoff.

    All configuration is validated in the constructor: once an engine
    exists it can be run, and no configuration error can surface after
    simulation has started.
    """

    def __init__(
        self,
        model: SDEModel,
        solver: Solver,
        grid: TimeGrid,
        payoff,
        config: EngineConfig
    ):
        """
        Initialize Monte Carlo engine.

        Parameters
        ----------
        model : SDEModel
            Model to simulate (shared read-only by all workers)
        solver : Solver
            Discretization scheme; ``ExactSolver`` for exact transitions
        grid : TimeGrid
            Simulation time grid
        payoff : Callable
            Maps terminal observables (or observable paths when
            ``payoff.path_dependent``) to payoffs
        config : EngineConfig
            Path count, seed, variance reduction and parallelism

        Raises
        ------
        ConfigurationError
            On any invalid component or combination
        """
        if not isinstance(model, SDEModel):
            raise ConfigurationError(f"model must be an SDEModel, got {type(model).__name__}")
        if not isinstance(solver, Solver):
            raise ConfigurationError(f"solver must be a Solver, got {type(solver).__name__}")
        if not isinstance(grid, TimeGrid):
            raise ConfigurationError(f"grid must be a TimeGrid, got {type(grid).__name__}")
        if not callable(payoff):
            raise ConfigurationError("payoff must be callable")
        if not isinstance(config, EngineConfig):
            raise ConfigurationError(
                f"config must be an EngineConfig, got {type(config).__name__}"
            )

        solver.check_compatible(model)

        self.model = model
        self.solver = solver
        self.grid = grid
        self.payoff = payoff
        self.config = config

        self._control = None
        self._control_expectation = None
        if config.control_variate is not None:
            self._control = get_control_variate(config.control_variate)
            self._control_expectation = resolve_expectation(
                self._control, model, payoff, grid.maturity, config.control_expectation
            )

        self._dts = grid.dts
        self._jump_intensities = None
        if model.has_jumps:
            self._jump_intensities = model.jump_intensity() * self._dts

    @property
    def n_base_paths(self) -> int:
        """Number of independently drawn paths (mirrors excluded)."""
        return self.config.n_samples

    @property
    def discount_factor(self) -> float:
        return math.exp(-self.model.risk_free_rate * self.grid.maturity)

    # ------------------------------------------------------------------
    # Path simulation
    # ------------------------------------------------------------------

    def _propagate(self, draws: PathDraws, record_paths: bool = False) -> np.ndarray:
        """Step a block of paths through the grid."""
        model = self.model
        state = model.initial_state(draws.n_paths)
        history = [state.copy()] if record_paths else None

        for i, (t, dt) in enumerate(zip(self.grid.times[:-1], self._dts)):
            z = model.correlate(draws.normals[:, i, :])
            state = self.solver.step(model, state, t, dt, z)
            if model.has_jumps:
                state = model.jump_step(
                    state, dt, draws.jump_counts[:, i], draws.jump_normals[:, i]
                )
            state = model.constrain(state)
            if record_paths:
                history.append(state.copy())

        if record_paths:
            return np.stack(history, axis=1)
        return state

    def _simulate_block(
        self,
        bounds: tuple[int, int],
        record_paths: bool = False
    ) -> tuple[np.ndarray, np.ndarray | None]:
        start, stop = bounds
        draws = sample_block(
            self.config.seed,
            start,
            stop,
            self.grid.n_steps,
            self.model.n_factors,
            self._jump_intensities,
        )
        base = self._propagate(draws, record_paths)
        mirror = None
        if self.config.antithetic:
            mirror = self._propagate(draws.mirrored(), record_paths)
        return base, mirror

    def _simulate(self, record_paths: bool = False) -> tuple[np.ndarray, np.ndarray | None]:
        blocks = list(iter_blocks(self.n_base_paths, self.config.block_size))
        workers = min(self.config.workers, len(blocks))

        logger.debug(
            "Simulating %d paths (%d base) of %s with %s over %d steps, "
            "%d blocks on %d workers",
            self.config.n_paths, self.n_base_paths, self.model.name,
            self.solver.name, self.grid.n_steps, len(blocks), workers,
        )
        started = time.perf_counter()

        if workers <= 1:
            results = [self._simulate_block(b, record_paths) for b in blocks]
        else:
            # map() yields in submission order, keeping path-index order
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = list(
                    pool.map(lambda b: self._simulate_block(b, record_paths), blocks)
                )

        base = np.concatenate([r[0] for r in results])
        mirror = None
        if self.config.antithetic:
            mirror = np.concatenate([r[1] for r in results])

        logger.debug("Simulation finished in %.3fs", time.perf_counter() - started)
        return base, mirror

    def simulate_terminal(self) -> TerminalSample:
        """
        Simulate every path and return the terminal states.

        Returns
        -------
        TerminalSample
            Terminal states of base paths and, with antithetic, their mirrors
        """
        base, mirror = self._simulate()
        return TerminalSample(base=base, mirror=mirror)

    def simulate_paths(self) -> tuple[np.ndarray, np.ndarray | None]:
        """
        Simulate every path and return full state histories.

        Returns
        -------
        base : np.ndarray
            States of base paths, shape (n_base, n_steps + 1, state_dim)
        mirror : np.ndarray | None
            Mirror histories with the same shape (None without antithetic)
        """
        return self._simulate(record_paths=True)

    # ------------------------------------------------------------------
    # Estimation
    # ------------------------------------------------------------------

    def _observable_paths(self, history: np.ndarray) -> np.ndarray:
        n, n_times, dim = history.shape
        return self.model.observable(history.reshape(n * n_times, dim)).reshape(n, n_times)

    def _samples(self, outcome: np.ndarray) -> tuple[np.ndarray, np.ndarray | None]:
        """Discounted payoffs and control observables for one set of paths."""
        discount = self.discount_factor
        if getattr(self.payoff, "path_dependent", False):
            observed = self._observable_paths(outcome)
            terminal = observed[:, -1]
            payoffs = self.payoff(observed)
        else:
            terminal = self.model.observable(outcome)
            payoffs = self.payoff(terminal)

        controls = None
        if self._control is not None:
            controls = self._control.observable(terminal, discount, self.payoff)
        return discount * payoffs, controls

    def _estimate(
        self,
        base: np.ndarray,
        mirror: np.ndarray | None
    ) -> tuple[Estimate, np.ndarray]:
        y, x = self._samples(base)
        if mirror is not None:
            y_mirror, x_mirror = self._samples(mirror)
            y = 0.5 * (y + y_mirror)
            if x is not None:
                x = 0.5 * (x + x_mirror)

        naive_mean = float(np.mean(y))
        naive_se = _standard_error(y)

        beta = None
        vrf = None
        samples = y
        if self._control is not None:
            samples, beta, vrf = apply_control_variate(y, x, self._control_expectation)

        mean = float(np.mean(samples))
        if not math.isfinite(mean):
            raise NumericalInstabilityError(
                f"Monte Carlo estimate is not finite ({mean}); "
                f"check the parameters of model '{self.model.name}'"
            )
        stderr = _standard_error(samples)

        z_critical = DEFAULT_CONFIDENCE_Z
        result = Estimate(
            mean=mean,
            standard_error=stderr,
            ci_lower=mean - z_critical * stderr,
            ci_upper=mean + z_critical * stderr,
            n_paths=self.config.n_paths,
            n_samples=len(samples),
            naive_mean=naive_mean,
            naive_standard_error=naive_se,
            control_variate_beta=beta,
            variance_reduction_factor=vrf,
        )
        return result, samples

    def price(self) -> Estimate:
        """
        Compute the expected discounted payoff via Monte Carlo simulation.

        Returns
        -------
        Estimate
            Mean, standard error, confidence interval and variance
            reduction diagnostics
        """
        result, _ = self.price_with_details()
        return result

    def price_with_details(self) -> tuple[Estimate, np.ndarray]:
        """
        Compute the estimate and return the per-sample values behind it.

        Returns
        -------
        result : Estimate
            Pricing results
        samples : np.ndarray
            Discounted payoff per sample, pair-averaged with antithetic and
            control-adjusted when a control variate is used. Sample i always
            belongs to base path i, so runs with the same seed line up.
        """
        if getattr(self.payoff, "path_dependent", False):
            base, mirror = self._simulate(record_paths=True)
        else:
            base, mirror = self._simulate()
        return self._estimate(base, mirror)

    def greek(
        self,
        greek: str,
        method: str = "finite_difference",
        bump: float | None = None,
        parameter: str | None = None
    ):
        """Estimate a sensitivity of this engine's price; see ``compute_greek``."""
        from sde_mc.greeks import compute_greek

        return compute_greek(self, greek, method=method, bump=bump, parameter=parameter)

    def with_model(
        self,
        model: SDEModel,
        config: EngineConfig | None = None
    ) -> "MonteCarloEngine":
        """
        Same solver, grid and payoff on another model.

        The config (hence the seeds) is shared unless a replacement is given.
        """
        return MonteCarloEngine(
            model, self.solver, self.grid, self.payoff, config or self.config
        )

    def __repr__(self) -> str:
        return (
            f"MonteCarloEngine(model={self.model!r}, solver={self.solver.name}, "
            f"n_steps={self.grid.n_steps}, payoff={self.payoff!r}, "
            f"n_paths={self.config.n_paths})"
        )


def run(
    model: SDEModel,
    solver: Solver,
    grid: TimeGrid,
    payoff,
    config: EngineConfig
) -> Estimate:
    """Build an engine and return its estimate."""
    return MonteCarloEngine(model, solver, grid, payoff, config).price()


def price_option(
    model: SDEModel,
    *,
    strike: float,
    maturity: float,
    n_paths: int,
    scheme: str = "exact",
    n_steps: int = 1,
    payoff: str = "call",
    seed: int = DEFAULT_SEED,
    antithetic: bool = False,
    control_variate: str | None = None,
    n_workers: int | None = None
) -> Estimate:
    """
    Price a European option from plain inputs.

    Parameters
    ----------
    model : SDEModel
        Model instance
    strike : float
        Strike price K
    maturity : float
        Time to maturity T
    n_paths : int
        Number of Monte Carlo paths
    scheme : str, optional
        Scheme name passed to ``get_solver`` (default 'exact')
    n_steps : int, optional
        Number of uniform time steps (default 1)
    payoff : str, optional
        'call' or 'put'
    seed : int, optional
        Seed base
    antithetic : bool, optional
        Use antithetic variates
    control_variate : str, optional
        Control variate id, e.g. 'terminal_asset'
    n_workers : int, optional
        Worker threads

    Returns
    -------
    Estimate
        Pricing results
    """
    config = EngineConfig(
        n_paths=n_paths,
        seed=seed,
        antithetic=antithetic,
        control_variate=control_variate,
        n_workers=n_workers,
    )
    grid = TimeGrid.uniform(maturity, n_steps)
    solver = get_solver(scheme, model)
    return run(model, solver, grid, make_payoff(payoff, strike), config)
