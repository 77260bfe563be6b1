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
Unit Tests for Initial-Condition Synthesis

Tests cover:
- Output history from output derivatives (backward differences)
- Inverse mapping back to derivatives
- Input history construction from scalars, vectors and matrices
- Shape and finiteness validation
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from linsys.exceptions import InvalidParameterError
from linsys.filters.initial_conditions import (
    check_derivative_matrix,
    derivatives_from_output_history,
    input_history_from_values,
    output_history_from_derivatives,
)


class TestOutputHistoryFromDerivatives:
    def test_first_order(self):
        """Order 1: the history is the output itself."""
        history = output_history_from_derivatives([[0.7], [-2.0]], 0.1)
        assert_allclose(history, [[0.7], [-2.0]])

    def test_second_order(self):
        history = output_history_from_derivatives([[1.0, 2.0]], 0.1)
        assert_allclose(history, [[1.0, 0.8]], rtol=1e-14)

    def test_third_order(self):
        """y[-2] = y - 2Ts y' + Ts² y''."""
        history = output_history_from_derivatives([[1.0, 2.0, 3.0]], 0.1)
        assert_allclose(history, [[1.0, 0.8, 0.63]], rtol=1e-14)

    def test_ramp_is_sampled_exactly(self):
        """A linear output has exact past samples."""
        ts, y0, slope = 0.05, 2.0, -4.0
        history = output_history_from_derivatives([[y0, slope, 0.0, 0.0]], ts)
        expected = [y0 - m * ts * slope for m in range(4)]
        assert_allclose(history, [expected], rtol=1e-13)

    def test_channels_are_independent(self):
        d = np.array([[0.0, 0.0], [0.5, 0.0], [1.0, -1.0]])
        history = output_history_from_derivatives(d, 0.1)
        assert_allclose(history, [[0.0, 0.0], [0.5, 0.5], [1.0, 1.1]], rtol=1e-14)

    def test_zero_order(self):
        history = output_history_from_derivatives(np.zeros((2, 0)), 0.1)
        assert history.shape == (2, 0)


class TestDerivativesFromOutputHistory:
    def test_inverse(self):
        rng = np.random.default_rng(42)
        d = rng.normal(size=(3, 4))
        ts = 0.1
        recovered = derivatives_from_output_history(output_history_from_derivatives(d, ts), ts)
        assert_allclose(recovered, d, rtol=1e-8, atol=1e-9)

    def test_backward_differences(self):
        derivatives = derivatives_from_output_history([[1.0, 0.8, 0.63]], 0.1)
        assert_allclose(derivatives, [[1.0, 2.0, 3.0]], rtol=1e-10)


class TestCheckDerivativeMatrix:
    def test_full_matrix(self):
        d = check_derivative_matrix(np.ones((2, 3)), n_filters=2, order=3)
        assert d.shape == (2, 3)

    def test_single_channel_vector(self):
        d = check_derivative_matrix([1.0, 2.0], n_filters=1, order=2)
        assert d.shape == (1, 2)

    def test_first_order_vector(self):
        d = check_derivative_matrix([1.0, 2.0, 3.0], n_filters=3, order=1)
        assert_allclose(d, [[1.0], [2.0], [3.0]])

    def test_returns_copy(self):
        src = np.ones((1, 2))
        d = check_derivative_matrix(src, n_filters=1, order=2)
        d[0, 0] = 5.0
        assert src[0, 0] == 1.0

    @pytest.mark.parametrize("shape", [(2, 2), (3, 3), (1, 3)])
    def test_wrong_shape(self, shape):
        with pytest.raises(InvalidParameterError, match="shape"):
            check_derivative_matrix(np.zeros(shape), n_filters=3, order=2)

    def test_non_finite(self):
        with pytest.raises(InvalidParameterError, match="finite"):
            check_derivative_matrix([[np.nan, 0.0]], n_filters=1, order=2)


class TestInputHistoryFromValues:
    def test_scalar(self):
        history = input_history_from_values(2.5, n_filters=2, order=3)
        assert_allclose(history, np.full((2, 3), 2.5))

    def test_channel_vector_held_constant(self):
        history = input_history_from_values([1.0, 2.0], n_filters=2, order=3)
        assert_allclose(history, [[1.0, 1.0, 1.0], [2.0, 2.0, 2.0]])

    def test_full_matrix(self):
        m = np.arange(6.0).reshape(2, 3)
        assert_allclose(input_history_from_values(m, n_filters=2, order=3), m)

    def test_single_channel_row(self):
        """One channel: a vector of length order is the history itself."""
        history = input_history_from_values([3.0, 2.0, 1.0], n_filters=1, order=3)
        assert_allclose(history, [[3.0, 2.0, 1.0]])

    def test_wrong_shape(self):
        with pytest.raises(InvalidParameterError):
            input_history_from_values(np.zeros((3, 2)), n_filters=2, order=3)

    def test_non_finite(self):
        with pytest.raises(InvalidParameterError):
            input_history_from_values(np.inf, n_filters=1, order=2)
        with pytest.raises(InvalidParameterError):
            input_history_from_values([1.0, np.nan], n_filters=2, order=3)
