"""
Tests for Greeks computation (pathwise and finite differences).
"""

import logging
import math

import pytest

from sde_mc.config import EngineConfig
from sde_mc.errors import ConfigurationError, ParameterError
from sde_mc.greeks import GreekResult, compute_greek, compute_greeks
from sde_mc.greeks.finite_diff import default_bump
from sde_mc.grid import TimeGrid
from sde_mc.models import GeometricBrownianMotion, HestonModel, OrnsteinUhlenbeck
from sde_mc.payoffs import EuropeanCallPayoff, EuropeanPutPayoff
from sde_mc.pricers.monte_carlo import MonteCarloEngine
from sde_mc.solvers import EulerMaruyama, get_solver
from tests.utils.black_scholes import (
    black_scholes_delta_call,
    black_scholes_delta_put,
    black_scholes_gamma,
    black_scholes_rho_call,
    black_scholes_vega,
)

S0, K, R, SIGMA, T = 100.0, 100.0, 0.05, 0.2, 1.0


def gbm_engine(payoff=None, scheme="exact", n_steps=1, n_paths=100000, mu=None, **config):
    model = GeometricBrownianMotion(S0=S0, r=R, sigma=SIGMA, mu=mu)
    return MonteCarloEngine(
        model=model,
        solver=get_solver(scheme),
        grid=TimeGrid.uniform(T, n_steps),
        payoff=payoff or EuropeanCallPayoff(strike=K),
        config=EngineConfig(n_paths=n_paths, **config),
    )


def assert_close(result, expected, slack):
    error = abs(result.value - expected)
    tolerance = 4 * result.standard_error + slack
    assert error < tolerance, (
        f"{result.greek} mismatch: MC={result.value:.6f}, BS={expected:.6f}, "
        f"error={error:.6f}, tolerance={tolerance:.6f}"
    )


class TestPathwiseGreeks:
    """Tests for pathwise Greeks estimators."""

    def test_delta_call(self):
        """Test pathwise delta against N(d1)."""
        engine = gbm_engine(antithetic=True)
        result = compute_greek(engine, "delta", method="pathwise")

        assert result.method == "pathwise"
        assert result.n_samples == 50000
        assert_close(result, black_scholes_delta_call(S0, K, R, SIGMA, T), 1e-3)

    def test_delta_relative_accuracy(self):
        """Test pathwise delta within 1% of N(d1) at 100k paths, seed 42."""
        engine = gbm_engine(n_paths=100000, seed=42)
        result = compute_greek(engine, "delta", method="pathwise")

        expected = black_scholes_delta_call(S0, K, R, SIGMA, T)
        assert abs(result.value - expected) / expected < 0.01

    def test_delta_put(self):
        """Test pathwise delta for a put."""
        engine = gbm_engine(payoff=EuropeanPutPayoff(K), n_paths=50000)
        result = compute_greek(engine, "delta", method="pw")
        assert_close(result, black_scholes_delta_put(S0, K, R, SIGMA, T), 1e-3)

    def test_delta_with_discretized_scheme(self):
        """Test that pathwise delta works for any scheme on GBM."""
        engine = gbm_engine(scheme="euler", n_steps=20, n_paths=50000)
        result = compute_greek(engine, "delta", method="pathwise")
        assert_close(result, black_scholes_delta_call(S0, K, R, SIGMA, T), 5e-3)

    def test_vega(self):
        """Test pathwise vega."""
        engine = gbm_engine()
        result = compute_greek(engine, "vega", method="pathwise")
        assert_close(result, black_scholes_vega(S0, K, R, SIGMA, T), 0.2)

    def test_rho(self):
        """Test pathwise rho with drift tied to r."""
        engine = gbm_engine()
        result = compute_greek(engine, "rho", method="pathwise")
        assert_close(result, black_scholes_rho_call(S0, K, R, SIGMA, T), 0.2)

    def test_gamma(self):
        """Test gamma as a difference of pathwise deltas."""
        engine = gbm_engine(n_paths=50000)
        result = compute_greek(engine, "gamma", method="pathwise")

        assert result.bump == pytest.approx(1.0)
        assert_close(result, black_scholes_gamma(S0, K, R, SIGMA, T), 2e-3)

    def test_vega_requires_exact_scheme(self):
        """Test that pathwise vega is rejected for discretized paths."""
        engine = gbm_engine(scheme="euler", n_steps=10, n_paths=100)
        with pytest.raises(ConfigurationError, match="exact scheme"):
            compute_greek(engine, "vega", method="pathwise")

    def test_rho_requires_risk_neutral_drift(self):
        """Test that pathwise rho needs the drift to follow r."""
        engine = gbm_engine(n_paths=100, mu=0.1)
        with pytest.raises(ConfigurationError, match="mu"):
            compute_greek(engine, "rho", method="pathwise")

    def test_requires_gbm(self):
        """Test that other models are rejected."""
        heston = HestonModel(S0=100, v0=0.04, r=0.0, kappa=2.0, theta=0.04, xi=0.3, rho=0.0)
        engine = MonteCarloEngine(
            heston, EulerMaruyama(), TimeGrid.uniform(1.0, 10),
            EuropeanCallPayoff(100), EngineConfig(n_paths=100)
        )
        with pytest.raises(ConfigurationError, match="gbm"):
            compute_greek(engine, "delta", method="pathwise")


class TestFiniteDifferenceGreeks:
    """Tests for bump-and-revalue Greeks with common random numbers."""

    def test_delta(self):
        """Test central-difference delta."""
        result = compute_greek(gbm_engine(n_paths=50000), "delta", method="fd")

        assert result.method == "finite_difference"
        assert result.bump == pytest.approx(1.0)
        assert_close(result, black_scholes_delta_call(S0, K, R, SIGMA, T), 5e-3)

    def test_gamma(self):
        """Test second-difference gamma."""
        result = compute_greek(gbm_engine(n_paths=50000), "gamma")
        assert_close(result, black_scholes_gamma(S0, K, R, SIGMA, T), 2e-3)

    def test_vega(self):
        """Test central-difference vega."""
        result = compute_greek(gbm_engine(n_paths=50000), "vega")

        assert result.bump == pytest.approx(0.002)
        assert_close(result, black_scholes_vega(S0, K, R, SIGMA, T), 0.5)

    def test_rho(self):
        """Test central-difference rho."""
        result = compute_greek(gbm_engine(n_paths=50000), "rho")
        assert_close(result, black_scholes_rho_call(S0, K, R, SIGMA, T), 0.5)

    def test_common_random_numbers(self):
        """Test that a linear sensitivity is recovered path by path."""
        ou = OrnsteinUhlenbeck(x0=1.0, kappa=0.5, mu=0.2, sigma=0.3)
        engine = MonteCarloEngine(
            ou, get_solver("exact"), TimeGrid.uniform(1.0, 4), lambda x: x,
            EngineConfig(n_paths=1000)
        )

        result = compute_greek(engine, "delta")

        assert abs(result.value - math.exp(-0.5)) < 1e-8
        assert result.standard_error < 1e-8

    def test_forward_difference_fallback(self, caplog):
        """Test the forward difference when the down bump is invalid."""
        heston = HestonModel(S0=100, v0=0.0, r=0.0, kappa=2.0, theta=0.04, xi=0.3, rho=-0.5)
        engine = MonteCarloEngine(
            heston, EulerMaruyama(), TimeGrid.uniform(1.0, 10),
            EuropeanCallPayoff(100), EngineConfig(n_paths=2000)
        )

        with caplog.at_level(logging.DEBUG, logger="sde_mc.greeks.finite_diff"):
            result = compute_greek(engine, "v0", parameter="v0")

        assert "forward difference" in caplog.text
        assert result.bump == default_bump(0.0)
        assert math.isfinite(result.value)
        assert result.value > 0

    def test_gamma_needs_both_bumps(self):
        """Test that gamma does not fall back to one-sided differences."""
        heston = HestonModel(S0=100, v0=0.0, r=0.0, kappa=2.0, theta=0.04, xi=0.3, rho=-0.5)
        engine = MonteCarloEngine(
            heston, EulerMaruyama(), TimeGrid.uniform(1.0, 10),
            EuropeanCallPayoff(100), EngineConfig(n_paths=100)
        )
        with pytest.raises(ParameterError, match="v0"):
            compute_greek(engine, "gamma", parameter="v0")

    def test_heston_delta(self):
        """Test finite-difference delta on a model without pathwise support."""
        heston = HestonModel(S0=100, v0=0.04, r=0.02, kappa=2.0, theta=0.04, xi=0.3, rho=-0.5)
        engine = MonteCarloEngine(
            heston, EulerMaruyama(), TimeGrid.uniform(1.0, 20),
            EuropeanCallPayoff(100), EngineConfig(n_paths=5000)
        )

        result = engine.greek("delta")

        assert 0.0 < result.value < 1.0

    def test_missing_parameter(self):
        """Test Greeks the model has no parameter for."""
        heston = HestonModel(S0=100, v0=0.04, r=0.02, kappa=2.0, theta=0.04, xi=0.3, rho=-0.5)
        engine = MonteCarloEngine(
            heston, EulerMaruyama(), TimeGrid.uniform(1.0, 5),
            EuropeanCallPayoff(100), EngineConfig(n_paths=100)
        )
        with pytest.raises(ConfigurationError, match="vega"):
            compute_greek(engine, "vega")
        with pytest.raises(ConfigurationError, match="lam"):
            compute_greek(engine, "delta", parameter="lam")

    def test_explicit_bump(self):
        """Test explicit and invalid bump sizes."""
        engine = gbm_engine(n_paths=1000)

        assert compute_greek(engine, "delta", bump=0.5).bump == 0.5
        with pytest.raises(ParameterError, match="bump"):
            compute_greek(engine, "delta", bump=-1.0)

    def test_fixed_control_expectation_follows_bump(self):
        """Test that a fixed control expectation is re-derived on bumped models."""
        oracle = compute_greek(
            gbm_engine(n_paths=50000, control_variate="terminal_asset"), "delta"
        )
        fixed = compute_greek(
            gbm_engine(n_paths=50000, control_variate="terminal_asset",
                       control_expectation=100.0),
            "delta",
        )

        assert fixed.value == oracle.value
        assert fixed.standard_error == oracle.standard_error
        assert_close(fixed, black_scholes_delta_call(S0, K, R, SIGMA, T), 5e-3)

    def test_fixed_control_expectation_without_oracle(self, monkeypatch):
        """Test that legs without a closed-form control fail before simulating."""
        heston = HestonModel(S0=100, v0=0.04, r=0.0, kappa=2.0, theta=0.04, xi=0.3, rho=-0.5)
        engine = MonteCarloEngine(
            heston, EulerMaruyama(), TimeGrid.uniform(1.0, 5), EuropeanCallPayoff(100),
            EngineConfig(n_paths=100, control_variate="european_call", control_expectation=8.0)
        )

        def fail(*args, **kwargs):
            raise AssertionError("paths were simulated")

        monkeypatch.setattr("sde_mc.pricers.monte_carlo.sample_block", fail)
        with pytest.raises(ConfigurationError, match="control_expectation"):
            compute_greek(engine, "delta")

    def test_unset_parameter(self):
        """Test that optional parameters left at None cannot be bumped."""
        with pytest.raises(ConfigurationError, match="'mu'"):
            compute_greek(gbm_engine(n_paths=10), "drift", parameter="mu")

    def test_default_bump(self):
        """Test the relative and absolute default bumps."""
        assert default_bump(100.0) == pytest.approx(1.0)
        assert default_bump(-0.05) == pytest.approx(5e-4)
        assert default_bump(0.0) == 1e-4


class TestGreeksInterface:
    """Tests for the Greek dispatch helpers and result types."""

    def test_engine_delegation(self):
        """Test that engine.greek matches compute_greek."""
        engine = gbm_engine(n_paths=2000)
        assert engine.greek("delta", method="pathwise") == \
            compute_greek(engine, "delta", method="pathwise")

    def test_compute_greeks(self):
        """Test computing several Greeks at once."""
        greeks = compute_greeks(gbm_engine(n_paths=20000), method="pathwise")

        assert list(greeks.greeks) == ["delta", "gamma", "vega", "rho"]
        assert "vega" in greeks
        assert greeks["delta"].value > 0
        assert "Delta" in repr(greeks)

    def test_unknown_method(self):
        """Test that unknown methods are rejected."""
        with pytest.raises(ConfigurationError, match="method"):
            compute_greek(gbm_engine(n_paths=10), "delta", method="likelihood_ratio")

    def test_pathwise_rejects_parameter(self):
        """Test that custom parameters need finite differences."""
        with pytest.raises(ConfigurationError, match="finite differences"):
            compute_greek(gbm_engine(n_paths=10), "delta", method="pathwise", parameter="S0")

    def test_from_samples(self):
        """Test summarizing per-path samples."""
        result = GreekResult.from_samples("delta", [0.5, 0.5, 0.5], "pathwise")

        assert result.value == 0.5
        assert result.standard_error == 0.0
        assert result.ci_lower == result.ci_upper == 0.5
        assert result.n_samples == 3
        assert "GreekResult" in repr(result)
