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
Configuration and Defaults

Module-level defaults for a freshly constructed LinearSystem, and the
LinearSystemConfig dictionary accepted by LinearSystem.from_config().

Defaults
--------
- DEFAULT_SAMPLING_PERIOD : float (s)
    Ts used when none is given. 1.0 so that a system built without an
    explicit sampling period steps once per second.
- DEFAULT_METHOD : DiscretizationMethod
    TUSTIN.
- DEFAULT_N_FILTERS : int
    Number of parallel channels, 1.
- DEFAULT_MAX_CATCH_UP_STEPS : int
    Largest number of recursion steps a single update may run, 10 000.
    Longer catch-ups are treated as stale updates.

Usage
-----
>>> from linsys import LinearSystem
>>> config: LinearSystemConfig = {
...     "numerator": [1.0],
...     "denominator": [1.0, 1.0],
...     "sampling_period": 0.01,
...     "method": "backward_euler",
...     "n_filters": 4,
...     "max_time_between_updates": 0.05,
... }
>>> system = LinearSystem.from_config(config)
"""

from typing import Optional, Sequence, Union

from typing_extensions import TypedDict

from linsys.discretization.methods import DiscretizationMethod

DEFAULT_SAMPLING_PERIOD = 1.0
DEFAULT_METHOD = DiscretizationMethod.TUSTIN
DEFAULT_N_FILTERS = 1
DEFAULT_MAX_CATCH_UP_STEPS = 10_000


class LinearSystemConfig(TypedDict, total=False):
    """
    Full configuration of a LinearSystem.

    Fields
    ------
    numerator : Sequence[float]
        Continuous numerator, highest power first
    denominator : Sequence[float]
        Continuous denominator, highest power first
    sampling_period : float
        Ts in seconds
    method : Union[DiscretizationMethod, str]
        'tustin', 'forward_euler' or 'backward_euler'
    prewarp_frequency : Optional[float]
        Tustin prewarp frequency (rad/s)
    n_filters : int
        Number of parallel channels
    max_time_between_updates : Optional[float]
        Maximum gap between updates in seconds, None for no limit
    max_catch_up_steps : int
        Largest number of recursion steps one update may run
    initial_time : int
        Initial clock value in microseconds
    initial_output_derivatives : Sequence[Sequence[float]]
        (n_filters, order) output value and derivatives at t0
    initial_inputs : Sequence
        (n_filters, order) or (n_filters,) input history
    discretize : bool
        Run discretize_system() after configuring (default True)
    """

    numerator: Sequence[float]
    denominator: Sequence[float]
    sampling_period: float
    method: Union[DiscretizationMethod, str]
    prewarp_frequency: Optional[float]
    n_filters: int
    max_time_between_updates: Optional[float]
    max_catch_up_steps: int
    initial_time: int
    initial_output_derivatives: Sequence[Sequence[float]]
    initial_inputs: Sequence
    discretize: bool
