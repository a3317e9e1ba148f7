"""
Tests for engine configuration.
"""

import dataclasses

import numpy as np
import pytest

from sde_mc.config import WORKERS_ENV_VAR, EngineConfig, default_workers
from sde_mc.errors import ConfigurationError, ParameterError


class TestEngineConfig:
    """Tests for EngineConfig validation."""

    def test_defaults(self):
        """Test default values."""
        config = EngineConfig(n_paths=1000)

        assert config.seed == 42
        assert config.antithetic is False
        assert config.control_variate is None
        assert config.n_samples == 1000

    def test_invalid_n_paths(self):
        """Test that non-positive n_paths raises ValueError."""
        with pytest.raises(ValueError, match="n_paths must be positive"):
            EngineConfig(n_paths=0)

        with pytest.raises(ValueError, match="n_paths must be positive"):
            EngineConfig(n_paths=-1000)

    def test_non_integer_n_paths(self):
        """Test that fractional path counts are rejected."""
        with pytest.raises(ConfigurationError, match="integer"):
            EngineConfig(n_paths=100.5)
        with pytest.raises(ConfigurationError, match="integer"):
            EngineConfig(n_paths=True)

    def test_numpy_integers(self):
        """Test that numpy integer path counts and seeds are accepted."""
        config = EngineConfig(n_paths=np.int64(100), seed=np.int32(7), antithetic=True)

        assert config.n_paths == 100
        assert config.seed == 7
        assert type(config.n_paths) is int
        assert config.n_samples == 50

    def test_odd_antithetic_paths(self):
        """Test that antithetic pairing needs an even path count."""
        with pytest.raises(ConfigurationError, match="even"):
            EngineConfig(n_paths=1001, antithetic=True)

    def test_antithetic_sample_count(self):
        """Test that pairs count once."""
        assert EngineConfig(n_paths=1000, antithetic=True).n_samples == 500

    def test_negative_seed(self):
        """Test that negative seeds are rejected."""
        with pytest.raises(ParameterError, match="seed"):
            EngineConfig(n_paths=10, seed=-1)

    def test_expectation_without_control(self):
        """Test that a control expectation needs a control variate id."""
        with pytest.raises(ConfigurationError, match="control_variate"):
            EngineConfig(n_paths=10, control_expectation=100.0)

    def test_invalid_workers_and_block_size(self):
        """Test worker and block size validation."""
        with pytest.raises(ParameterError, match="n_workers"):
            EngineConfig(n_paths=10, n_workers=0)
        with pytest.raises(ParameterError, match="block_size"):
            EngineConfig(n_paths=10, block_size=0)

    def test_frozen(self):
        """Test that configs are immutable."""
        config = EngineConfig(n_paths=10)
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.n_paths = 20


class TestDefaultWorkers:
    """Tests for worker count resolution."""

    def test_env_override(self, monkeypatch):
        """Test that the environment variable wins."""
        monkeypatch.setenv(WORKERS_ENV_VAR, "3")
        assert default_workers() == 3
        assert EngineConfig(n_paths=10).workers == 3

    def test_explicit_workers_win(self, monkeypatch):
        """Test that an explicit n_workers ignores the environment."""
        monkeypatch.setenv(WORKERS_ENV_VAR, "3")
        assert EngineConfig(n_paths=10, n_workers=2).workers == 2

    def test_invalid_env(self, monkeypatch):
        """Test that malformed environment values raise ConfigurationError."""
        monkeypatch.setenv(WORKERS_ENV_VAR, "many")
        with pytest.raises(ConfigurationError, match=WORKERS_ENV_VAR):
            default_workers()

        monkeypatch.setenv(WORKERS_ENV_VAR, "0")
        with pytest.raises(ConfigurationError, match=WORKERS_ENV_VAR):
            default_workers()

    def test_fallback_is_bounded(self, monkeypatch):
        """Test the CPU-based default."""
        monkeypatch.delenv(WORKERS_ENV_VAR, raising=False)
        assert 1 <= default_workers() <= 8
