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
Helper Functions

Pure stateless numeric helpers:

**Combinatorics:**
- nchoosek - binomial coefficient by falling product

**Angles:**
- wrap_to_pi - scalar angle into (-π, π]
- wrap_to_pi_vector - elementwise version

**Second-order systems:**
- resonant_to_cutoff - natural frequency -> -3 dB cutoff
- cutoff_to_resonant - -3 dB cutoff -> natural frequency

Mathematical Background
-----------------------
For H(s) = wn² / (s² + 2ζ·wn·s + wn²) the -3 dB frequency wc satisfies

    wc⁴ + b·wc² - wn⁴ = 0,    b = 2wn²(2ζ² - 1)

whose positive root is wc² = -b/2 + sqrt(b²/4 + wn⁴). Swapping the roles of
wn and wc gives the inverse with b = 2wc²(1 - 2ζ²).

Usage
-----
>>> from linsys.utils.helper_functions import nchoosek, resonant_to_cutoff
>>> nchoosek(4, 2)
6
>>> np.isclose(resonant_to_cutoff(10.0, 1 / np.sqrt(2)), 10.0)  # Butterworth: wc == wn
True
"""

import math
from typing import Sequence, Union

import numpy as np

from linsys.exceptions import InvalidParameterError


def nchoosek(n: int, k: int) -> int:
    """
    Binomial coefficient C(n, k).

    Computed as the falling product Π_{i=1..k} (n + 1 - i) / i with float
    accumulation, which stays far from overflow for the polynomial degrees
    used in discretization. The float is rounded to the nearest integer
    rather than truncated: the accumulated product can land just below a
    whole number (C(11, 5) accumulates to 461.99999999999994), and truncation
    would return one less than the exact value.

    Parameters
    ----------
    n : int
        Set size, n >= 0
    k : int
        Subset size, k >= 0

    Returns
    -------
    int
        C(n, k); 0 when k > n

    Raises
    ------
    InvalidParameterError
        If n or k is negative
    """
    if n < 0 or k < 0:
        raise InvalidParameterError(f"nchoosek requires n >= 0 and k >= 0, got n={n}, k={k}")

    ret = 1.0
    for i in range(1, k + 1):
        ret *= (n + 1 - i) / float(i)
    return int(round(ret))


# ============================================================================
# Angle Wrapping
# ============================================================================


def wrap_to_pi(angle: float) -> float:
    """
    Map a real angle into (-π, π].

    Examples
    --------
    >>> wrap_to_pi(3 * np.pi / 2)
    -1.5707963267948966
    >>> wrap_to_pi(-np.pi)
    3.141592653589793
    """
    ang = math.fmod(float(angle), 2 * math.pi)
    if ang > math.pi:
        ang -= 2 * math.pi
    elif ang <= -math.pi:
        ang += 2 * math.pi
    return ang


def wrap_to_pi_vector(angles: Union[Sequence[float], np.ndarray]) -> np.ndarray:
    """Apply wrap_to_pi elementwise; returns a new float array of the same shape."""
    arr = np.asarray(angles, dtype=float)
    out = np.empty_like(arr)
    for idx, ang in np.ndenumerate(arr):
        out[idx] = wrap_to_pi(ang)
    return out


# ============================================================================
# Resonant / Cutoff Conversion
# ============================================================================


def _check_frequency_arguments(w: float, damping: float) -> None:
    if not np.isfinite(w) or w < 0:
        raise InvalidParameterError(f"Frequency must be finite and non-negative, got {w}")
    if not np.isfinite(damping) or damping < 0:
        raise InvalidParameterError(f"Damping ratio must be finite and non-negative, got {damping}")


def resonant_to_cutoff(w: float, damping: float) -> float:
    """
    Convert a second-order system's natural frequency to its -3 dB cutoff.

    Parameters
    ----------
    w : float
        Undamped natural frequency (rad/s), w >= 0
    damping : float
        Damping ratio ζ >= 0

    Returns
    -------
    float
        Cutoff frequency (rad/s)

    Raises
    ------
    InvalidParameterError
        If w or damping is negative or not finite
    """
    _check_frequency_arguments(w, damping)
    w2 = w * w
    b = 2 * w2 * (2 * damping * damping - 1)
    return math.sqrt(-b / 2 + math.sqrt(b * b / 4 + w2 * w2))


def cutoff_to_resonant(w: float, damping: float) -> float:
    """
    Convert a -3 dB cutoff frequency to the natural frequency of a
    second-order system with the given damping ratio.

    Inverse of resonant_to_cutoff:

    >>> wc = resonant_to_cutoff(5.0, 0.3)
    >>> np.isclose(cutoff_to_resonant(wc, 0.3), 5.0)
    True
    """
    _check_frequency_arguments(w, damping)
    w2 = w * w
    b = 2 * w2 * (1 - 2 * damping * damping)
    return math.sqrt(-b / 2 + math.sqrt(b * b / 4 + w2 * w2))
