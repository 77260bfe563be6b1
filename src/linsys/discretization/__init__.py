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
Discretization of continuous transfer functions.

>>> from linsys.discretization import DiscretizationMethod, discretize_transfer_function
>>> result = discretize_transfer_function([1.0], [1.0, 1.0], 0.1, DiscretizationMethod.TUSTIN)
"""

from .methods import DiscretizationMethod, MethodLike, as_method
from .transfer_function_discretizer import (
    bilinear_gain,
    check_prewarp_frequency,
    check_sampling_period,
    discretize_transfer_function,
    normalize_transfer_function,
    substitute_polynomial,
)

__all__ = [
    "DiscretizationMethod",
    "MethodLike",
    "as_method",
    "bilinear_gain",
    "check_prewarp_frequency",
    "check_sampling_period",
    "discretize_transfer_function",
    "normalize_transfer_function",
    "substitute_polynomial",
]
