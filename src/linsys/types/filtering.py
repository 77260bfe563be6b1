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
Filtering Types

Result and record types for discretization and the filter bank:
- DiscreteTransferFunction: output of discretize_transfer_function()
- FilterBankSnapshot: copy of an engine's state at one instant
- ReferenceRecord: one reference test vector (see linsys.reference)

These are plain dictionaries typed with TypedDict, so they print, compare
and serialize like any dict.

Usage
-----
>>> from linsys.discretization import discretize_transfer_function
>>> result: DiscreteTransferFunction = discretize_transfer_function(
...     [1.0], [1.0, 1.0], sampling_period=0.1, method="tustin"
... )
>>> b, a = result["numerator"], result["denominator"]
"""

from typing import Optional

import numpy as np
from typing_extensions import TypedDict

from .core import (
    ChannelVector,
    DerivativeMatrix,
    DiscretePolynomial,
    HistoryMatrix,
    Polynomial,
    Time,
)

# ============================================================================
# Discretization
# ============================================================================


class DiscreteTransferFunction(TypedDict):
    """
    Discretization result dictionary.

    The recursion defined by the coefficients is

        y[k] = Σ_{i=0..n} b[i]·u[k-i] − Σ_{j=1..n} a[j]·y[k-j]

    Fields
    ------
    numerator : DiscretePolynomial
        b, shape (order + 1,)
    denominator : DiscretePolynomial
        a, shape (order + 1,), a[0] == 1
    order : int
        Filter order (degree of the continuous denominator)
    method : str
        Value of the DiscretizationMethod used
    sampling_period : float
        Ts in seconds
    prewarp_frequency : Optional[float]
        Requested prewarp frequency (rad/s), None if not set
    prewarp_applied : bool
        True only for Tustin with a prewarp frequency
    bilinear_gain : Optional[float]
        k in s = k(z-1)/(z+1); None for the Euler methods
    """

    numerator: DiscretePolynomial
    denominator: DiscretePolynomial
    order: int
    method: str
    sampling_period: float
    prewarp_frequency: Optional[float]
    prewarp_applied: bool
    bilinear_gain: Optional[float]


# ============================================================================
# Filter Bank
# ============================================================================


class FilterBankSnapshot(TypedDict):
    """
    Independent copy of a LinearSystem's runtime state.

    Fields
    ------
    state : str
        FilterState value ('unconfigured', 'configured', ...)
    n_filters : int
    order : int
    output : ChannelVector
    input_history : HistoryMatrix
    output_history : HistoryMatrix
    last_update_time : Time
    last_sample_time : Time
    stale_update_count : int
    """

    state: str
    n_filters: int
    order: int
    output: ChannelVector
    input_history: HistoryMatrix
    output_history: HistoryMatrix
    last_update_time: Time
    last_sample_time: Time
    stale_update_count: int


# ============================================================================
# Reference Test Vectors
# ============================================================================


class ReferenceRecord(TypedDict):
    """
    One reference test vector.

    Scalars describe the system and the run; arrays hold the input sequence
    and the expected outputs of each discretization method.

    Fields
    ------
    n : int
        Number of samples
    order : int
        Filter order
    Ts : float
        Sampling period (s)
    omega : float
        Tustin prewarp frequency (rad/s), 0 for none
    u : np.ndarray
        Input sequence (n,)
    y_tustin, y_fwd, y_bwd : np.ndarray
        Expected output sequences (n,)
    num, den : Polynomial
        Continuous transfer function, (order + 1,)
    ydy0 : DerivativeMatrix
        Initial output derivatives, (1, order)
    """

    n: int
    order: int
    Ts: float
    omega: float
    u: np.ndarray
    y_tustin: np.ndarray
    y_fwd: np.ndarray
    y_bwd: np.ndarray
    num: Polynomial
    den: Polynomial
    ydy0: DerivativeMatrix
