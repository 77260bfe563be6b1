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
Utilities: stateless math helpers and the integer microsecond clock.
"""

from .helper_functions import (
    cutoff_to_resonant,
    nchoosek,
    resonant_to_cutoff,
    wrap_to_pi,
    wrap_to_pi_vector,
)
from .timing import (
    MICROSECONDS_PER_SECOND,
    as_time,
    get_seconds_from_time,
    get_time_from_seconds,
)

__all__ = [
    "MICROSECONDS_PER_SECOND",
    "as_time",
    "cutoff_to_resonant",
    "get_seconds_from_time",
    "get_time_from_seconds",
    "nchoosek",
    "resonant_to_cutoff",
    "wrap_to_pi",
    "wrap_to_pi_vector",
]
