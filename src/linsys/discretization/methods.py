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
Discretization methods (s -> z substitution rules).
"""

from enum import Enum
from typing import Union

from linsys.exceptions import InvalidParameterError


class DiscretizationMethod(Enum):
    """
    Substitution rule applied to the continuous polynomials.

    Attributes
    ----------
    TUSTIN : str
        s = k(z-1)/(z+1), k = 2/Ts or ω/tan(ωTs/2) with prewarp.
        Preserves stability; second-order accurate.

    FORWARD_EULER : str
        s = (z-1)/Ts. First-order accurate, may destabilize fast poles.

    BACKWARD_EULER : str
        s = (z-1)/(Ts·z). First-order accurate, always stable for stable s-poles.
    """

    TUSTIN = "tustin"
    FORWARD_EULER = "forward_euler"
    BACKWARD_EULER = "backward_euler"


MethodLike = Union[DiscretizationMethod, str]


def as_method(method: MethodLike) -> DiscretizationMethod:
    """Coerce a DiscretizationMethod or its (case-insensitive) value string."""
    if isinstance(method, DiscretizationMethod):
        return method
    if isinstance(method, str):
        try:
            return DiscretizationMethod(method.lower())
        except ValueError:
            pass
    valid = [m.value for m in DiscretizationMethod]
    raise InvalidParameterError(f"Unknown discretization method {method!r}. Valid: {valid}")
