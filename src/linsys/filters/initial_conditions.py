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
Initial Conditions - Output Derivatives to Discrete History

The recursion needs the last `order` outputs of every channel, while callers
naturally describe the initial state as the output and its time derivatives
at t0. The two are related through backward differences:

    ∇^j y[0] = Σ_{i=0..j} (-1)^i C(j, i) y[-i]  ≈  Ts^j · y^(j)(t0)

Treating the approximation as an equality and inverting it (Newton's
backward-difference formula) gives the history

    y[-m] = Σ_{j=0..m} C(m, j) (-Ts)^j y^(j)(t0),    m = 0 .. order-1

whose scaled backward differences reproduce the requested derivatives
exactly. The derivative values themselves are only matched to O(Ts), which
is accepted as a boundary condition.

History layout is (n_filters, order) with column 0 the most recent sample.

Examples
--------
>>> output_history_from_derivatives([[1.0, 2.0]], sampling_period=0.1)
array([[1. , 0.8]])
>>> derivatives_from_output_history([[1.0, 0.8]], sampling_period=0.1)
array([[1., 2.]])
"""

import numpy as np

from linsys.exceptions import InvalidParameterError
from linsys.types.core import ArrayLike, DerivativeMatrix, HistoryMatrix
from linsys.utils.helper_functions import nchoosek


def _as_channel_matrix(values: ArrayLike, n_filters: int, order: int, name: str) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.ndim == 1:
        if n_filters == 1 and arr.size == order:
            arr = arr.reshape(1, order)
        elif order == 1 and arr.size == n_filters:
            arr = arr.reshape(n_filters, 1)
    if arr.shape != (n_filters, order):
        raise InvalidParameterError(
            f"{name} must have shape (n_filters, order) = ({n_filters}, {order}), got {arr.shape}"
        )
    if not np.all(np.isfinite(arr)):
        raise InvalidParameterError(f"{name} must be finite")
    return arr.copy()


def check_derivative_matrix(derivatives: ArrayLike, n_filters: int, order: int) -> DerivativeMatrix:
    """Validate initial output derivatives against the bank dimensions."""
    return _as_channel_matrix(derivatives, n_filters, order, "Initial output derivatives")


def output_history_from_derivatives(derivatives: ArrayLike, sampling_period: float) -> HistoryMatrix:
    """
    Synthesize past outputs from output derivatives at t0.

    Parameters
    ----------
    derivatives : ArrayLike
        (n_filters, order); column j is the j-th derivative of the output
    sampling_period : float
        Ts in seconds

    Returns
    -------
    HistoryMatrix
        (n_filters, order); column m is y(t0 - m·Ts)
    """
    d = np.atleast_2d(np.asarray(derivatives, dtype=float))
    n_filters, order = d.shape
    history = np.zeros((n_filters, order))
    for m in range(order):
        for j in range(m + 1):
            history[:, m] += nchoosek(m, j) * (-sampling_period) ** j * d[:, j]
    return history


def derivatives_from_output_history(history: ArrayLike, sampling_period: float) -> DerivativeMatrix:
    """
    Scaled backward differences of an output history.

    Inverse of output_history_from_derivatives: column j of the result is
    ∇^j y[0] / Ts^j.
    """
    h = np.atleast_2d(np.asarray(history, dtype=float))
    n_filters, order = h.shape
    derivatives = np.zeros((n_filters, order))
    for j in range(order):
        diff = np.zeros(n_filters)
        for i in range(j + 1):
            diff += (-1) ** i * nchoosek(j, i) * h[:, i]
        derivatives[:, j] = diff / sampling_period**j
    return derivatives


def input_history_from_values(values: ArrayLike, n_filters: int, order: int) -> HistoryMatrix:
    """
    Build an input history.

    Accepts a full (n_filters, order) matrix, an (n_filters,) vector that is
    held constant over the whole history, or a scalar used for every entry.
    """
    arr = np.asarray(values, dtype=float)
    if arr.ndim == 0:
        if not np.isfinite(arr):
            raise InvalidParameterError("Initial input must be finite")
        return np.full((n_filters, order), float(arr))
    single_row = n_filters == 1 and arr.size == order
    if arr.ndim == 1 and arr.size == n_filters and not single_row:
        if not np.all(np.isfinite(arr)):
            raise InvalidParameterError("Initial inputs must be finite")
        return np.repeat(arr.reshape(n_filters, 1), order, axis=1)
    return _as_channel_matrix(arr, n_filters, order, "Initial input history")
