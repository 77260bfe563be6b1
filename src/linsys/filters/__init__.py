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
Filter bank engine and initial-condition synthesis.
"""

from .initial_conditions import (
    check_derivative_matrix,
    derivatives_from_output_history,
    input_history_from_values,
    output_history_from_derivatives,
)
from .linear_system import FilterState, LinearSystem

__all__ = [
    "FilterState",
    "LinearSystem",
    "check_derivative_matrix",
    "derivatives_from_output_history",
    "input_history_from_values",
    "output_history_from_derivatives",
]
