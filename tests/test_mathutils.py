"""
Tests for shared math utilities.
"""

import math

import numpy as np

from sde_mc.mathutils import (
    correlated_pair,
    norm_cdf,
    norm_cdf_array,
    norm_pdf,
    standard_normal,
)


class TestNormal:
    """Tests for normal distribution helpers."""

    def test_cdf_values(self):
        """Test known CDF values and symmetry."""
        assert norm_cdf(0.0) == 0.5
        assert abs(norm_cdf(1.96) - 0.9750021) < 1e-6
        for x in (0.3, 1.0, 2.5):
            assert abs(norm_cdf(x) + norm_cdf(-x) - 1.0) < 1e-15

    def test_cdf_lower_tail_precision(self):
        """Test that the lower tail keeps relative precision."""
        # P(Z <= -10) = 7.6198530241605e-24
        assert abs(norm_cdf(-10.0) / 7.6198530241605e-24 - 1.0) < 1e-10

    def test_pdf(self):
        """Test the density at zero."""
        assert abs(norm_pdf(0.0) - 1.0 / math.sqrt(2.0 * math.pi)) < 1e-15

    def test_cdf_array_matches_scalar(self):
        """Test the vectorized CDF against the erfc form."""
        x = np.linspace(-6.0, 6.0, 49)

        result = norm_cdf_array(x)

        assert result.shape == x.shape
        np.testing.assert_allclose(result, [norm_cdf(v) for v in x], atol=1e-7)
        assert np.all((result >= 0.0) & (result <= 1.0))


class TestCorrelatedPair:
    """Tests for correlated normal construction."""

    def test_empirical_correlation(self):
        """Test that the pair has the requested correlation."""
        rng = np.random.default_rng(0)
        z1 = standard_normal(rng, 200000)
        z_indep = standard_normal(rng, 200000)

        _, z2 = correlated_pair(z1, z_indep, -0.7)

        assert abs(np.corrcoef(z1, z2)[0, 1] + 0.7) < 0.01
        assert abs(np.std(z2) - 1.0) < 0.01

    def test_perfect_correlation(self):
        """Test that rho = 1 reproduces the first factor exactly."""
        z1 = np.array([0.5, -1.0, 2.0])
        _, z2 = correlated_pair(z1, np.array([9.0, 9.0, 9.0]), 1.0)
        np.testing.assert_array_equal(z2, z1)
