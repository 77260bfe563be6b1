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
linsys - Continuous Transfer Functions as Discrete Filter Banks

Discretizes a continuous LTI transfer function H(s) = num(s)/den(s) with
Tustin (optionally prewarped), forward Euler or backward Euler, and runs
the resulting IIR recursion over N parallel channels driven by absolute
microsecond timestamps.

Quick Start
-----------
>>> import numpy as np
>>> from linsys import LinearSystem, DiscretizationMethod
>>>
>>> lp = LinearSystem([1.0], [0.1, 1.0], sampling_period=0.01)
>>> lp.set_integration_method(DiscretizationMethod.TUSTIN)
>>> lp.discretize_system()
>>> lp.set_initial_time(0)
>>> y = lp.update(np.array([1.0]), LinearSystem.get_time_from_seconds(0.01))

Subpackages
-----------
- discretization : s -> z substitution and coefficient derivation
- filters        : LinearSystem engine and initial-condition synthesis
- utils          : nchoosek, angle wrapping, frequency conversion, clock
- reference      : reference test vectors (YAML)
- types          : type aliases and TypedDict results
"""

from .exceptions import (
    ConfigurationError,
    InvalidParameterError,
    LinearSystemError,
    NumericalDegeneracyError,
    StaleUpdateWarning,
)
from .utils import (
    MICROSECONDS_PER_SECOND,
    cutoff_to_resonant,
    get_seconds_from_time,
    get_time_from_seconds,
    nchoosek,
    resonant_to_cutoff,
    wrap_to_pi,
    wrap_to_pi_vector,
)
from .discretization import DiscretizationMethod, discretize_transfer_function
from .config import (
    DEFAULT_MAX_CATCH_UP_STEPS,
    DEFAULT_METHOD,
    DEFAULT_N_FILTERS,
    DEFAULT_SAMPLING_PERIOD,
    LinearSystemConfig,
)
from .filters import FilterState, LinearSystem

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DEFAULT_MAX_CATCH_UP_STEPS",
    "DEFAULT_METHOD",
    "DEFAULT_N_FILTERS",
    "DEFAULT_SAMPLING_PERIOD",
    "DiscretizationMethod",
    "FilterState",
    "InvalidParameterError",
    "LinearSystem",
    "LinearSystemConfig",
    "LinearSystemError",
    "MICROSECONDS_PER_SECOND",
    "NumericalDegeneracyError",
    "StaleUpdateWarning",
    "cutoff_to_resonant",
    "discretize_transfer_function",
    "get_seconds_from_time",
    "get_time_from_seconds",
    "nchoosek",
    "resonant_to_cutoff",
    "wrap_to_pi",
    "wrap_to_pi_vector",
]
