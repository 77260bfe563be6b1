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
Transfer Function Discretizer - Continuous H(s) to Discrete H(z)

Pure stateless functions converting a rational transfer function in the
Laplace variable into the coefficients of a recursive difference equation.

Mathematical Form
-----------------
Continuous:  H(s) = (c_0 s^n + ... + c_n) / (d_0 s^n + ... + d_n)
Discrete:    y[k] = Σ_{i=0..n} b_i u[k-i] - Σ_{j=1..n} a_j y[k-j]

Every supported rule is a real rational map s = P(z)/Q(z) with P and Q of
degree at most one:

    TUSTIN          P = k(z - 1),  Q = z + 1,   k = 2/Ts  or  ω/tan(ωTs/2)
    FORWARD_EULER   P = z - 1,     Q = Ts
    BACKWARD_EULER  P = z - 1,     Q = Ts·z

Multiplying numerator and denominator by Q(z)^n gives

    Σ_i c_i P(z)^(n-i) Q(z)^i

for both polynomials. Powers of the linear factors are expanded with the
binomial theorem and multiplied with numpy.convolve. Both results are then
divided by the leading denominator coefficient so that a_0 = 1.

Examples
--------
>>> # First-order low-pass 1/(s + 1) at Ts = 0.1
>>> result = discretize_transfer_function([1.0], [1.0, 1.0], 0.1, "backward_euler")
>>> result["numerator"], result["denominator"]
(array([0.09090909, 0.        ]), array([ 1.        , -0.90909091]))
>>>
>>> # Tustin prewarped at the resonance of a second-order system
>>> wn, zeta = 2 * np.pi * 5, 0.1
>>> result = discretize_transfer_function(
...     [wn**2], [1.0, 2 * zeta * wn, wn**2], 0.01, "tustin", prewarp_frequency=wn
... )
"""

import logging
import math
from typing import Optional, Tuple

import numpy as np

from linsys.discretization.methods import DiscretizationMethod, MethodLike, as_method
from linsys.exceptions import InvalidParameterError, NumericalDegeneracyError
from linsys.types.core import ArrayLike, Polynomial
from linsys.types.filtering import DiscreteTransferFunction
from linsys.utils.helper_functions import nchoosek
from linsys.utils.timing import get_time_from_seconds

logger = logging.getLogger(__name__)


# ============================================================================
# Validation
# ============================================================================


def _as_polynomial(coeffs: ArrayLike, name: str) -> Polynomial:
    arr = np.asarray(coeffs, dtype=float)
    if arr.ndim == 2 and 1 in arr.shape:
        arr = arr.ravel()
    if arr.ndim != 1:
        raise InvalidParameterError(f"{name} must be a 1-D coefficient sequence, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise InvalidParameterError(f"{name} coefficients must be finite, got {arr}")
    return arr


def normalize_transfer_function(num: ArrayLike, den: ArrayLike) -> Tuple[Polynomial, Polynomial]:
    """
    Validate a continuous transfer function and bring it to canonical form.

    Leading zeros are stripped from both polynomials and the numerator is
    left-padded with zeros to the length of the denominator.

    Parameters
    ----------
    num : ArrayLike
        Numerator coefficients, highest power of s first
    den : ArrayLike
        Denominator coefficients, highest power of s first

    Returns
    -------
    num, den : Tuple[Polynomial, Polynomial]
        Both of length order + 1, den[0] != 0

    Raises
    ------
    InvalidParameterError
        Empty or all-zero denominator, non-finite coefficients, or a
        numerator of higher degree than the denominator (improper system)

    Examples
    --------
    >>> normalize_transfer_function([0, 0, 1], [1, 2, 1])
    (array([0., 0., 1.]), array([1., 2., 1.]))
    >>> normalize_transfer_function([1], [0, 1, 1])
    (array([0., 1.]), array([1., 1.]))
    """
    num_arr = _as_polynomial(num, "Numerator")
    den_arr = _as_polynomial(den, "Denominator")

    den_arr = np.trim_zeros(den_arr, "f")
    if den_arr.size == 0:
        raise InvalidParameterError("Denominator must have a non-zero coefficient")

    num_arr = np.trim_zeros(num_arr, "f")
    if num_arr.size == 0:
        num_arr = np.zeros(1)

    if num_arr.size > den_arr.size:
        raise InvalidParameterError(
            f"Transfer function must be proper: numerator degree {num_arr.size - 1} "
            f"exceeds denominator degree {den_arr.size - 1}"
        )

    padded = np.zeros(den_arr.size)
    padded[den_arr.size - num_arr.size :] = num_arr
    return padded, den_arr.copy()


def check_sampling_period(sampling_period: float) -> float:
    """
    Validate Ts: finite, positive and at least one clock tick (1 µs).

    Raises
    ------
    InvalidParameterError
        If Ts is not a valid sampling period
    """
    try:
        ts = float(sampling_period)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"Sampling period must be a real number, got {sampling_period!r}")
    if not np.isfinite(ts) or ts <= 0:
        raise InvalidParameterError(f"Sampling period must be positive, got {sampling_period}")
    if get_time_from_seconds(ts) < 1:
        raise InvalidParameterError(f"Sampling period must be at least 1 microsecond, got {sampling_period}")
    return ts


def check_prewarp_frequency(prewarp_frequency: Optional[float]) -> Optional[float]:
    """
    Validate a prewarp frequency. None and 0 both mean "no prewarp" (None).
    """
    if prewarp_frequency is None:
        return None
    try:
        omega = float(prewarp_frequency)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"Prewarp frequency must be a real number, got {prewarp_frequency!r}")
    if not np.isfinite(omega) or omega < 0:
        raise InvalidParameterError(f"Prewarp frequency must be non-negative, got {prewarp_frequency}")
    if omega == 0:
        return None
    return omega


# ============================================================================
# Substitution
# ============================================================================


def bilinear_gain(sampling_period: float, prewarp_frequency: Optional[float] = None) -> float:
    """
    Gain k of the bilinear substitution s = k(z-1)/(z+1).

    k = 2/Ts without prewarp. With a prewarp frequency ω the discrete
    frequency response matches the continuous one exactly at ω:

        k = ω / tan(ωTs/2)

    Raises
    ------
    NumericalDegeneracyError
        If ωTs/2 >= π/2 (ω at or above the Nyquist frequency), where the
        tangent is undefined or changes sign
    """
    ts = check_sampling_period(sampling_period)
    omega = check_prewarp_frequency(prewarp_frequency)
    if omega is None:
        return 2.0 / ts

    half_angle = omega * ts / 2.0
    if half_angle >= math.pi / 2:
        raise NumericalDegeneracyError(
            f"Prewarp frequency {omega} rad/s is at or above the Nyquist frequency "
            f"{math.pi / ts} rad/s for Ts={ts}"
        )
    tangent = math.tan(half_angle)
    if not np.isfinite(tangent) or tangent <= 0:
        raise NumericalDegeneracyError(f"tan(ωTs/2) = {tangent} is not usable for ω={omega}, Ts={ts}")
    return omega / tangent


def _linear_factor_power(lead: float, const: float, power: int) -> Polynomial:
    """Coefficients of (lead·z + const)^power, highest power first."""
    return np.array(
        [nchoosek(power, j) * lead ** (power - j) * const**j for j in range(power + 1)],
        dtype=float,
    )


def _substitution_factors(
    method: DiscretizationMethod, sampling_period: float, gain: Optional[float]
) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    """(P, Q) as (lead, const) pairs such that s = P(z)/Q(z)."""
    if method is DiscretizationMethod.TUSTIN:
        return (gain, -gain), (1.0, 1.0)
    if method is DiscretizationMethod.FORWARD_EULER:
        return (1.0, -1.0), (0.0, sampling_period)
    if method is DiscretizationMethod.BACKWARD_EULER:
        return (1.0, -1.0), (sampling_period, 0.0)
    raise InvalidParameterError(f"Unsupported discretization method {method!r}")


def substitute_polynomial(
    coeffs: Polynomial,
    p: Tuple[float, float],
    q: Tuple[float, float],
    order: int,
) -> Polynomial:
    """
    Apply s = P(z)/Q(z) to a polynomial of degree <= order and clear the
    denominators by multiplying with Q(z)^order.

    Parameters
    ----------
    coeffs : Polynomial
        Coefficients of length order + 1, highest power of s first
    p, q : Tuple[float, float]
        (lead, const) of the linear factors P(z) = lead·z + const, Q likewise
    order : int
        n, the common degree

    Returns
    -------
    Polynomial
        Σ_i coeffs[i] · P(z)^(n-i) · Q(z)^i, length order + 1
    """
    result = np.zeros(order + 1)
    for i, c in enumerate(coeffs):
        if c == 0:
            continue
        term = np.convolve(
            _linear_factor_power(p[0], p[1], order - i),
            _linear_factor_power(q[0], q[1], i),
        )
        result += c * term
    return result


# ============================================================================
# Public API
# ============================================================================


def discretize_transfer_function(
    num: ArrayLike,
    den: ArrayLike,
    sampling_period: float,
    method: MethodLike = DiscretizationMethod.TUSTIN,
    prewarp_frequency: Optional[float] = None,
) -> DiscreteTransferFunction:
    """
    Discretize a continuous transfer function.

    Parameters
    ----------
    num : ArrayLike
        Continuous numerator, highest power of s first
    den : ArrayLike
        Continuous denominator, highest power of s first
    sampling_period : float
        Ts in seconds
    method : Union[DiscretizationMethod, str]
        'tustin' (default), 'forward_euler' or 'backward_euler'
    prewarp_frequency : Optional[float]
        Tustin prewarp frequency in rad/s. None/0 for the plain bilinear
        transform. Ignored by the Euler methods (prewarp_applied=False).

    Returns
    -------
    DiscreteTransferFunction
        Dictionary with 'numerator', 'denominator' (a[0] == 1), 'order',
        'method', 'sampling_period', 'prewarp_frequency', 'prewarp_applied'
        and 'bilinear_gain'

    Raises
    ------
    InvalidParameterError
        Invalid polynomials, sampling period, prewarp frequency or method
    NumericalDegeneracyError
        The substitution produces a zero leading denominator coefficient
        (e.g. k is a root of the continuous denominator) or non-finite
        coefficients

    Notes
    -----
    The function is deterministic: repeated calls with the same arguments
    return bit-identical coefficients.

    A zero leading coefficient happens for TUSTIN when D(k) = 0 and for
    BACKWARD_EULER when D(1/Ts) = 0, i.e. a continuous pole sits exactly on
    the point the substitution maps to z = ∞.
    """
    method = as_method(method)
    ts = check_sampling_period(sampling_period)
    omega = check_prewarp_frequency(prewarp_frequency)
    num_c, den_c = normalize_transfer_function(num, den)
    order = den_c.size - 1

    gain = None
    if method is DiscretizationMethod.TUSTIN:
        gain = bilinear_gain(ts, omega)

    p, q = _substitution_factors(method, ts, gain)
    num_z = substitute_polynomial(num_c, p, q, order)
    den_z = substitute_polynomial(den_c, p, q, order)

    lead = den_z[0]
    scale = np.max(np.abs(den_z))
    if not np.isfinite(lead) or abs(lead) <= np.finfo(float).eps * scale:
        raise NumericalDegeneracyError(
            f"Discrete denominator has a vanishing leading coefficient ({lead}) "
            f"for method={method.value}, Ts={ts}; the substitution maps a "
            f"continuous pole to z = infinity"
        )

    b = num_z / lead
    a = den_z / lead
    a[0] = 1.0
    if not (np.all(np.isfinite(b)) and np.all(np.isfinite(a))):
        raise NumericalDegeneracyError(f"Discretization produced non-finite coefficients: b={b}, a={a}")

    logger.debug(
        "Discretized order-%d system with %s (Ts=%g, k=%s): b=%s a=%s",
        order,
        method.value,
        ts,
        gain,
        b,
        a,
    )

    return DiscreteTransferFunction(
        numerator=b,
        denominator=a,
        order=order,
        method=method.value,
        sampling_period=ts,
        prewarp_frequency=omega,
        prewarp_applied=method is DiscretizationMethod.TUSTIN and omega is not None,
        bilinear_gain=gain,
    )
