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
Core Types - Fundamental Building Blocks

Semantic aliases used throughout linsys:
- Polynomials (continuous s-domain and discrete z-domain)
- Per-channel vectors and channel-by-order matrices
- Integer microsecond time

Shape conventions
-----------------
- Polynomial: (order + 1,), highest power first
- ChannelVector: (n_filters,)
- HistoryMatrix: (n_filters, order), column 0 = most recent sample
- DerivativeMatrix: (n_filters, order), column j = j-th derivative

Usage
-----
>>> from linsys.types.core import Polynomial, ChannelVector, Time
>>>
>>> def dc_gain(num: Polynomial, den: Polynomial) -> float:
...     return num[-1] / den[-1]
"""

from typing import Sequence, Union

import numpy as np

# ============================================================================
# Basic Array Types
# ============================================================================

ArrayLike = Union[np.ndarray, Sequence[float], Sequence[Sequence[float]]]
"""
Anything numpy can turn into a float array.

Inputs are converted with ``np.asarray(x, dtype=float)`` at the API boundary;
everything stored inside the engine is a plain float64 ndarray.
"""

ScalarLike = Union[float, int, np.floating, np.integer]
"""Real scalar."""

# ============================================================================
# Polynomials
# ============================================================================

Polynomial = np.ndarray
"""
Real polynomial coefficients, highest degree first.

Examples
--------
>>> den: Polynomial = np.array([1.0, 2.0, 1.0])  # s² + 2s + 1
"""

ContinuousPolynomial = Polynomial
"""Polynomial in the Laplace variable s."""

DiscretePolynomial = Polynomial
"""Polynomial in z; for a discrete denominator a[0] == 1."""

# ============================================================================
# Channel Arrays
# ============================================================================

ChannelVector = np.ndarray
"""One scalar per channel, shape (n_filters,)."""

HistoryMatrix = np.ndarray
"""
Past samples per channel, shape (n_filters, order).

Column 0 holds the most recent sample, column order-1 the oldest.
"""

DerivativeMatrix = np.ndarray
"""
Output value and successive time derivatives at t0, shape (n_filters, order).

Column 0 is y(t0), column 1 is dy/dt(t0), and so on.
"""

# ============================================================================
# Time
# ============================================================================

Time = int
"""
Integer count of microseconds since an arbitrary epoch chosen by the caller.

All elapsed-time arithmetic is done on this integer representation so no
floating drift accumulates.
"""
