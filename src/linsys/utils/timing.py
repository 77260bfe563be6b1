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
Time representation: integer microseconds since a caller-chosen epoch.
"""

import numpy as np

from linsys.exceptions import InvalidParameterError
from linsys.types.core import Time

MICROSECONDS_PER_SECOND = 1_000_000


def get_time_from_seconds(seconds: float) -> Time:
    """
    Convert fractional seconds to integer microseconds, rounding to nearest.

    >>> get_time_from_seconds(0.003)
    3000
    """
    if not np.isfinite(seconds):
        raise InvalidParameterError(f"Time in seconds must be finite, got {seconds}")
    return int(round(seconds * MICROSECONDS_PER_SECOND))


def get_seconds_from_time(time: Time) -> float:
    """Convert integer microseconds back to seconds."""
    return time / MICROSECONDS_PER_SECOND


def as_time(value) -> Time:
    """Validate a timestamp and return it as a Python int."""
    if isinstance(value, (bool, np.bool_)):
        raise InvalidParameterError(f"Timestamp must be an integer number of microseconds, got {value!r}")
    if isinstance(value, (int, np.integer)):
        return int(value)
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return int(value)
    raise InvalidParameterError(
        f"Timestamp must be an integer number of microseconds, got {value!r}. "
        f"Use get_time_from_seconds() to convert from seconds."
    )
