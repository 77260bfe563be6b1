# Copyright (C) 2025 Gil Benezer
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""
Unit Tests for Helper Functions

Tests cover:
- Binomial coefficients (nchoosek)
- Angle wrapping into (-π, π]
- Resonant <-> cutoff frequency conversion
- Error handling for invalid arguments

Test Structure:
- TestNchoosek: Binomial coefficient values and symmetry
- TestWrapToPi: Scalar and vector wrapping
- TestFrequencyConversion: Second-order cutoff relations
- TestErrorHandling: Invalid argument rejection
"""

import math
import unittest

import numpy as np
from numpy.testing import assert_allclose

from linsys.exceptions import InvalidParameterError
from linsys.utils.helper_functions import (
    cutoff_to_resonant,
    nchoosek,
    resonant_to_cutoff,
    wrap_to_pi,
    wrap_to_pi_vector,
)

# ============================================================================
# Test Fixtures and Utilities
# ============================================================================


class HelperTestCase(unittest.TestCase):
    """Base class with common tolerances."""

    def setUp(self):
        self.rtol = 1e-12
        self.atol = 1e-12

    def second_order_gain(self, w: float, wn: float, damping: float) -> float:
        """|H(jw)| for H(s) = wn² / (s² + 2ζ wn s + wn²)."""
        s = 1j * w
        return abs(wn**2 / (s**2 + 2 * damping * wn * s + wn**2))


# ============================================================================
# nchoosek
# ============================================================================


class TestNchoosek(HelperTestCase):
    def test_small_values(self):
        """Pascal's triangle entries."""
        self.assertEqual(nchoosek(0, 0), 1)
        self.assertEqual(nchoosek(1, 0), 1)
        self.assertEqual(nchoosek(1, 1), 1)
        self.assertEqual(nchoosek(4, 2), 6)
        self.assertEqual(nchoosek(5, 2), 10)
        self.assertEqual(nchoosek(6, 3), 20)

    def test_matches_math_comb(self):
        """Agrees with math.comb for the degrees used in discretization."""
        for n in range(0, 31):
            for k in range(0, n + 1):
                self.assertEqual(nchoosek(n, k), math.comb(n, k), f"C({n}, {k})")

    def test_rounds_instead_of_truncating(self):
        """The float product for C(11, 5) lands just below 462."""
        self.assertEqual(nchoosek(11, 5), 462)

    def test_symmetry(self):
        for n in range(0, 15):
            for k in range(0, n + 1):
                self.assertEqual(nchoosek(n, k), nchoosek(n, n - k))

    def test_k_greater_than_n_is_zero(self):
        self.assertEqual(nchoosek(3, 4), 0)
        self.assertEqual(nchoosek(0, 2), 0)

    def test_returns_int(self):
        self.assertIsInstance(nchoosek(7, 3), int)


# ============================================================================
# Angle Wrapping
# ============================================================================


class TestWrapToPi(HelperTestCase):
    def test_in_range_unchanged(self):
        for angle in [0.0, 0.5, -0.5, 3.0, -3.0]:
            self.assertAlmostEqual(wrap_to_pi(angle), angle, places=14)

    def test_pi_boundaries(self):
        """Both ±π map to +π."""
        self.assertEqual(wrap_to_pi(math.pi), math.pi)
        self.assertEqual(wrap_to_pi(-math.pi), math.pi)

    def test_three_half_pi(self):
        self.assertAlmostEqual(wrap_to_pi(3 * math.pi / 2), -math.pi / 2, places=14)
        self.assertAlmostEqual(wrap_to_pi(-3 * math.pi / 2), math.pi / 2, places=14)

    def test_multiple_turns(self):
        self.assertAlmostEqual(wrap_to_pi(0.3 + 10 * math.pi), 0.3, places=12)
        self.assertAlmostEqual(wrap_to_pi(0.3 - 10 * math.pi), 0.3, places=12)

    def test_result_in_half_open_interval(self):
        for angle in np.linspace(-20.0, 20.0, 401):
            wrapped = wrap_to_pi(angle)
            self.assertGreater(wrapped, -math.pi)
            self.assertLessEqual(wrapped, math.pi)
            self.assertAlmostEqual(math.cos(wrapped), math.cos(angle), places=10)
            self.assertAlmostEqual(math.sin(wrapped), math.sin(angle), places=10)

    def test_vector_matches_scalar(self):
        angles = np.array([0.0, math.pi, -math.pi, 4.0, -7.5])
        wrapped = wrap_to_pi_vector(angles)
        assert_allclose(wrapped, [wrap_to_pi(a) for a in angles], rtol=0, atol=0)

    def test_vector_does_not_modify_input(self):
        angles = np.array([4.0, -4.0])
        original = angles.copy()
        wrap_to_pi_vector(angles)
        assert_allclose(angles, original, rtol=0, atol=0)

    def test_vector_preserves_shape(self):
        angles = np.full((2, 3), 5.0)
        self.assertEqual(wrap_to_pi_vector(angles).shape, (2, 3))

    def test_vector_accepts_list(self):
        wrapped = wrap_to_pi_vector([2 * math.pi, 5.0])
        assert_allclose(wrapped, [0.0, 5.0 - 2 * math.pi], atol=1e-12)


# ============================================================================
# Frequency Conversion
# ============================================================================


class TestFrequencyConversion(HelperTestCase):
    def test_butterworth_cutoff_equals_natural_frequency(self):
        """ζ = 1/√2 places the -3 dB point at wn."""
        for w in [0.1, 1.0, 2 * math.pi, 100.0]:
            assert_allclose(resonant_to_cutoff(w, 1 / math.sqrt(2)), w, rtol=1e-12)
            assert_allclose(cutoff_to_resonant(w, 1 / math.sqrt(2)), w, rtol=1e-12)

    def test_cutoff_is_half_power_point(self):
        """|H(j wc)|² = 1/2 for the computed cutoff."""
        for wn, damping in [(1.0, 0.1), (5.0, 0.3), (2.0, 0.7), (3.0, 1.0), (1.5, 2.0)]:
            wc = resonant_to_cutoff(wn, damping)
            assert_allclose(self.second_order_gain(wc, wn, damping) ** 2, 0.5, rtol=1e-10)

    def test_round_trip(self):
        for w, damping in [(1.0, 0.05), (10.0, 0.5), (0.3, 1.2)]:
            assert_allclose(cutoff_to_resonant(resonant_to_cutoff(w, damping), damping), w, rtol=1e-10)
            assert_allclose(resonant_to_cutoff(cutoff_to_resonant(w, damping), damping), w, rtol=1e-10)

    def test_zero_frequency(self):
        self.assertEqual(resonant_to_cutoff(0.0, 0.5), 0.0)
        self.assertEqual(cutoff_to_resonant(0.0, 0.5), 0.0)

    def test_undamped_cutoff(self):
        """ζ = 0: wc = wn·sqrt(1 + √2)."""
        assert_allclose(resonant_to_cutoff(1.0, 0.0), math.sqrt(1 + math.sqrt(2)), rtol=1e-12)

    def test_cutoff_decreases_with_damping(self):
        cutoffs = [resonant_to_cutoff(1.0, z) for z in [0.1, 0.5, 1.0, 2.0]]
        self.assertTrue(all(a > b for a, b in zip(cutoffs, cutoffs[1:])))


# ============================================================================
# Error Handling
# ============================================================================


class TestErrorHandling(HelperTestCase):
    def test_nchoosek_negative(self):
        with self.assertRaises(InvalidParameterError):
            nchoosek(-1, 0)
        with self.assertRaises(InvalidParameterError):
            nchoosek(3, -1)

    def test_negative_frequency(self):
        with self.assertRaises(InvalidParameterError):
            resonant_to_cutoff(-1.0, 0.5)
        with self.assertRaises(InvalidParameterError):
            cutoff_to_resonant(-1.0, 0.5)

    def test_negative_damping(self):
        with self.assertRaises(InvalidParameterError):
            resonant_to_cutoff(1.0, -0.1)

    def test_non_finite(self):
        with self.assertRaises(InvalidParameterError):
            resonant_to_cutoff(float("inf"), 0.5)
        with self.assertRaises(InvalidParameterError):
            cutoff_to_resonant(1.0, float("nan"))

    def test_invalid_parameter_is_value_error(self):
        with self.assertRaises(ValueError):
            nchoosek(-2, 1)


if __name__ == "__main__":
    unittest.main()
