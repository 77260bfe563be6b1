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
Exceptions and Warnings

Error hierarchy for the discrete LTI filter engine:

    LinearSystemError
    ├── InvalidParameterError      (also a ValueError)
    └── ConfigurationError         (also a RuntimeError)
        └── NumericalDegeneracyError

StaleUpdateWarning is a RuntimeWarning emitted through ``warnings.warn`` when
an update arrives later than the configured maximum gap. It never aborts the
caller's loop unless the caller escalates it with a warnings filter:

>>> import warnings
>>> with warnings.catch_warnings():
...     warnings.simplefilter("error", StaleUpdateWarning)
...     system.update(u, t)  # now raises
"""


class LinearSystemError(Exception):
    """Base class for all errors raised by linsys."""


class InvalidParameterError(LinearSystemError, ValueError):
    """A parameter value or shape is invalid (bad Ts, wrong dimensions, ...)."""


class ConfigurationError(LinearSystemError, RuntimeError):
    """The engine is not configured for the requested operation."""


class NumericalDegeneracyError(ConfigurationError):
    """
    Discretization would produce zero-leading, infinite or NaN coefficients.

    Raised at discretization time, e.g. when the bilinear gain is a pole of
    the continuous denominator or the prewarp frequency is at/above Nyquist.
    """


class StaleUpdateWarning(RuntimeWarning):
    """An update arrived too late (or out of order); state was frozen."""
