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
LinearSystem - Discrete LTI Filter Bank on a Real Clock

Runs a continuous transfer function H(s), discretized once, as a recursive
filter over N independent channels that share the coefficients but not the
state. Updates carry absolute integer-microsecond timestamps; the engine
advances the recursion by the number of whole sampling periods that have
elapsed and freezes (with a warning) when an update arrives too late.

Lifecycle
---------
    UNCONFIGURED --set_filter--> CONFIGURED --discretize_system--> DISCRETIZED
    DISCRETIZED --update--> RUNNING

Changing the transfer function, method, sampling period or prewarp
frequency drops the engine back to CONFIGURED until discretize_system() is
called again.

Examples
--------
>>> import numpy as np
>>> from linsys import LinearSystem, DiscretizationMethod
>>>
>>> sys = LinearSystem([1.0], [1.0, 2.0, 1.0], sampling_period=0.1)
>>> sys.use_n_filters(2)
>>> sys.set_integration_method(DiscretizationMethod.BACKWARD_EULER)
>>> sys.set_maximum_time_between_updates(1.0)
>>> sys.set_initial_output_derivatives(np.array([[0.0, 0.0], [0.5, 0.0]]))
>>> sys.discretize_system()
>>> sys.set_initial_time(0)
>>>
>>> t = LinearSystem.get_time_from_seconds(0.1)
>>> y = sys.update(np.array([1.0, 1.5]), t).copy()
"""

import copy
import logging
import warnings
from enum import Enum
from typing import Optional

import numpy as np

from linsys.config import (
    DEFAULT_MAX_CATCH_UP_STEPS,
    DEFAULT_METHOD,
    DEFAULT_N_FILTERS,
    DEFAULT_SAMPLING_PERIOD,
    LinearSystemConfig,
)
from linsys.discretization.methods import DiscretizationMethod, MethodLike, as_method
from linsys.discretization.transfer_function_discretizer import (
    check_prewarp_frequency,
    check_sampling_period,
    discretize_transfer_function,
    normalize_transfer_function,
)
from linsys.exceptions import ConfigurationError, InvalidParameterError, StaleUpdateWarning
from linsys.filters.initial_conditions import (
    check_derivative_matrix,
    input_history_from_values,
    output_history_from_derivatives,
)
from linsys.types.core import (
    ArrayLike,
    ChannelVector,
    DerivativeMatrix,
    DiscretePolynomial,
    HistoryMatrix,
    Polynomial,
    Time,
)
from linsys.types.filtering import DiscreteTransferFunction, FilterBankSnapshot
from linsys.utils.timing import (
    as_time,
    get_seconds_from_time,
    get_time_from_seconds,
)

logger = logging.getLogger(__name__)


class FilterState(Enum):
    """Engine lifecycle state."""

    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    DISCRETIZED = "discretized"
    RUNNING = "running"


class LinearSystem:
    """
    Bank of N discrete filters derived from one continuous transfer function.

    Attributes
    ----------
    sampling_period : float
        Ts in seconds
    method : DiscretizationMethod
        Active s -> z substitution
    prewarp_frequency : Optional[float]
        Tustin prewarp frequency (rad/s), None if not set
    n_filters : int
        Number of parallel channels
    order : int
        Denominator degree; length of each channel's input/output history
    state : FilterState
        Lifecycle state

    Notes
    -----
    The object has value semantics: copy(), copy.copy() and copy.deepcopy()
    all duplicate configuration, coefficients and state, and the copies
    evolve independently.

    Not thread-safe. Call every method from the thread that runs the
    control loop.
    """

    get_time_from_seconds = staticmethod(get_time_from_seconds)
    get_seconds_from_time = staticmethod(get_seconds_from_time)

    def __init__(
        self,
        num: Optional[ArrayLike] = None,
        den: Optional[ArrayLike] = None,
        sampling_period: float = DEFAULT_SAMPLING_PERIOD,
        method: MethodLike = DEFAULT_METHOD,
        n_filters: int = DEFAULT_N_FILTERS,
        prewarp_frequency: Optional[float] = None,
    ):
        """
        Initialize the engine.

        Parameters
        ----------
        num, den : Optional[ArrayLike]
            Continuous transfer function, highest power of s first. Both or
            neither must be given.
        sampling_period : float
            Ts in seconds, default 1.0
        method : Union[DiscretizationMethod, str]
            Default TUSTIN
        n_filters : int
            Number of parallel channels, default 1
        prewarp_frequency : Optional[float]
            Tustin prewarp frequency (rad/s)

        Raises
        ------
        InvalidParameterError
            If any argument is invalid
        """
        if (num is None) != (den is None):
            raise InvalidParameterError("num and den must be given together")

        self._sampling_period = check_sampling_period(sampling_period)
        self._sampling_time = get_time_from_seconds(self._sampling_period)
        self._method = as_method(method)
        self._prewarp_frequency: Optional[float] = None
        self._n_filters = self._check_n_filters(n_filters)

        self._num: Optional[Polynomial] = None
        self._den: Optional[Polynomial] = None
        self._order = 0
        self._discretization: Optional[DiscreteTransferFunction] = None

        self._derivatives: Optional[DerivativeMatrix] = None
        self._input_history: HistoryMatrix = np.zeros((self._n_filters, 0))
        self._output_history: HistoryMatrix = np.zeros((self._n_filters, 0))
        self._output: ChannelVector = np.zeros(self._n_filters)

        self._max_gap: Optional[Time] = None
        self._max_catch_up_steps = DEFAULT_MAX_CATCH_UP_STEPS
        self._clock_set = False
        self._last_update_time: Time = 0
        self._last_sample_time: Time = 0
        self._stale_update_count = 0
        self._last_update_stale = False

        self._state = FilterState.UNCONFIGURED

        if prewarp_frequency is not None:
            self.set_prewarp_frequency(prewarp_frequency)
        if num is not None:
            self.set_filter(num, den)

    # ========================================================================
    # Construction helpers
    # ========================================================================

    @classmethod
    def from_config(cls, config: LinearSystemConfig) -> "LinearSystem":
        """
        Build a configured engine from a LinearSystemConfig dictionary.

        The system is discretized unless config['discretize'] is False or no
        transfer function is given. Initial inputs are applied last.
        """
        system = cls(
            num=config.get("numerator"),
            den=config.get("denominator"),
            sampling_period=config.get("sampling_period", DEFAULT_SAMPLING_PERIOD),
            method=config.get("method", DEFAULT_METHOD),
            n_filters=config.get("n_filters", DEFAULT_N_FILTERS),
            prewarp_frequency=config.get("prewarp_frequency"),
        )
        if config.get("max_time_between_updates") is not None:
            system.set_maximum_time_between_updates(config["max_time_between_updates"])
        if config.get("max_catch_up_steps") is not None:
            system.set_maximum_catch_up_steps(config["max_catch_up_steps"])
        if config.get("initial_output_derivatives") is not None:
            system.set_initial_output_derivatives(config["initial_output_derivatives"])
        if config.get("initial_time") is not None:
            system.set_initial_time(config["initial_time"])
        if config.get("discretize", True) and system._num is not None:
            system.discretize_system()
        if config.get("initial_inputs") is not None:
            system.set_initial_state(config["initial_inputs"])
        return system

    def to_config(self) -> LinearSystemConfig:
        """Current configuration as a LinearSystemConfig (plain lists, no state)."""
        config = LinearSystemConfig(
            sampling_period=self._sampling_period,
            method=self._method.value,
            prewarp_frequency=self._prewarp_frequency,
            n_filters=self._n_filters,
            max_time_between_updates=self.maximum_time_between_updates,
            max_catch_up_steps=self._max_catch_up_steps,
        )
        if self._num is not None:
            config["numerator"] = self._num.tolist()
            config["denominator"] = self._den.tolist()
        if self._derivatives is not None:
            config["initial_output_derivatives"] = self._derivatives.tolist()
        return config

    def copy(self) -> "LinearSystem":
        """Independent duplicate of configuration, coefficients and state."""
        return copy.deepcopy(self)

    def __copy__(self) -> "LinearSystem":
        return self.copy()

    # ========================================================================
    # Configuration
    # ========================================================================

    @staticmethod
    def _check_n_filters(n_filters: int) -> int:
        if isinstance(n_filters, bool) or not isinstance(n_filters, (int, np.integer)):
            raise InvalidParameterError(f"Number of filters must be an integer, got {n_filters!r}")
        if n_filters < 1:
            raise InvalidParameterError(f"Number of filters must be at least 1, got {n_filters}")
        return int(n_filters)

    def _allocate_bank(self) -> None:
        self._input_history = np.zeros((self._n_filters, self._order))
        self._output_history = np.zeros((self._n_filters, self._order))
        self._output = np.zeros(self._n_filters)
        self._derivatives = None
        logger.debug("Allocated filter bank: %d channels, order %d", self._n_filters, self._order)

    def _invalidate(self) -> None:
        if self._num is not None:
            self._state = FilterState.CONFIGURED
        self._discretization = None

    def set_filter(self, num: ArrayLike, den: ArrayLike) -> None:
        """
        Set the continuous transfer function num(s)/den(s).

        Leading zeros are stripped and the numerator is padded to the
        denominator length. If the order changes the state bank is
        reallocated (zeroed) and stored initial derivatives are dropped.

        Raises
        ------
        InvalidParameterError
            Improper, empty or non-finite polynomials
        """
        num_c, den_c = normalize_transfer_function(num, den)
        order = den_c.size - 1

        self._num, self._den = num_c, den_c
        if order != self._order:
            self._order = order
            self._allocate_bank()
        self._invalidate()

    def set_sampling(self, sampling_period: float) -> None:
        """
        Set the sampling period Ts (seconds).

        Output history synthesized from stored initial derivatives is
        rebuilt for the new Ts unless the engine is already running.

        Raises
        ------
        InvalidParameterError
            If Ts is not positive, not finite or below one microsecond
        """
        ts = check_sampling_period(sampling_period)
        self._sampling_period = ts
        self._sampling_time = get_time_from_seconds(ts)
        if self._derivatives is not None and self._state is not FilterState.RUNNING:
            self._apply_derivatives(self._derivatives)
        self._invalidate()

    def get_sampling(self) -> float:
        """Sampling period Ts in seconds."""
        return self._sampling_period

    def set_integration_method(self, method: MethodLike) -> None:
        """Select TUSTIN, FORWARD_EULER or BACKWARD_EULER."""
        self._method = as_method(method)
        self._invalidate()

    def set_prewarp_frequency(self, prewarp_frequency: Optional[float]) -> None:
        """
        Set the Tustin prewarp frequency in rad/s; None or 0 disables it.

        The value is stored for every method but only used by TUSTIN; a
        UserWarning is emitted when it is set while another method is active.
        """
        omega = check_prewarp_frequency(prewarp_frequency)
        if omega is not None and self._method is not DiscretizationMethod.TUSTIN:
            warnings.warn(
                f"Prewarp frequency only applies to Tustin; it is ignored by {self._method.value}",
                UserWarning,
                stacklevel=2,
            )
        self._prewarp_frequency = omega
        self._invalidate()

    def use_n_filters(self, n_filters: int) -> None:
        """
        Set the number of parallel channels.

        Reallocates and zeroes the whole state bank, discarding history,
        current outputs and stored initial derivatives.
        """
        self._n_filters = self._check_n_filters(n_filters)
        self._allocate_bank()
        if self._state is FilterState.RUNNING:
            self._state = FilterState.DISCRETIZED

    def _require_filter(self, operation: str) -> None:
        if self._num is None:
            raise ConfigurationError(f"Cannot {operation} before a transfer function is set")

    def _apply_derivatives(self, derivatives: DerivativeMatrix) -> None:
        history = output_history_from_derivatives(derivatives, self._sampling_period)
        self._output_history = history
        if self._order > 0:
            self._output[:] = history[:, 0]
        else:
            self._output[:] = 0.0

    def set_initial_output_derivatives(self, derivatives: ArrayLike) -> None:
        """
        Set the output and its derivatives at t0 for every channel.

        Parameters
        ----------
        derivatives : ArrayLike
            (n_filters, order); column j holds the j-th time derivative.
            A 1-D array is accepted when it is unambiguous (one channel, or
            order one).

        Raises
        ------
        ConfigurationError
            If no transfer function is set
        InvalidParameterError
            If the shape does not match (n_filters, order)
        """
        self._require_filter("set initial output derivatives")
        validated = check_derivative_matrix(derivatives, self._n_filters, self._order)
        self._derivatives = validated
        self._apply_derivatives(validated)

    def set_initial_state(self, inputs: ArrayLike) -> None:
        """
        Set the input history.

        Parameters
        ----------
        inputs : ArrayLike
            (n_filters, order) with column 0 the most recent input, or an
            (n_filters,) vector held constant over the history, or a scalar
        """
        self._require_filter("set the initial input history")
        self._input_history = input_history_from_values(inputs, self._n_filters, self._order)

    def set_initial_time(self, time: Time) -> None:
        """
        Set the clock (integer microseconds) the first update is measured from.

        Must be called before the first update.
        """
        t = as_time(time)
        self._last_update_time = t
        self._last_sample_time = t
        self._clock_set = True
        self._last_update_stale = False

    def set_maximum_time_between_updates(self, seconds: Optional[float]) -> None:
        """
        Set the largest accepted gap between updates, in seconds.

        None removes the limit.
        """
        if seconds is None:
            self._max_gap = None
            return
        try:
            value = float(seconds)
        except (TypeError, ValueError):
            raise InvalidParameterError(f"Maximum time between updates must be a number, got {seconds!r}")
        if not np.isfinite(value) or value <= 0:
            raise InvalidParameterError(f"Maximum time between updates must be positive, got {seconds}")
        self._max_gap = get_time_from_seconds(value)

    def set_maximum_catch_up_steps(self, steps: int) -> None:
        """
        Set the largest number of recursion steps a single update may run.

        An update that would need more steps is treated as stale: the output
        is held and both clocks move to its timestamp.
        """
        if isinstance(steps, bool) or not isinstance(steps, (int, np.integer)):
            raise InvalidParameterError(f"Maximum catch-up steps must be an integer, got {steps!r}")
        if steps < 1:
            raise InvalidParameterError(f"Maximum catch-up steps must be at least 1, got {steps}")
        self._max_catch_up_steps = int(steps)

    # ========================================================================
    # Discretization
    # ========================================================================

    def discretize_system(self) -> DiscreteTransferFunction:
        """
        Derive the discrete coefficients with the configured method.

        Returns
        -------
        DiscreteTransferFunction
            Copy of the discretization result

        Raises
        ------
        ConfigurationError
            If no transfer function is set
        NumericalDegeneracyError
            If the substitution degenerates; the system stays CONFIGURED
            and its history is kept
        """
        self._require_filter("discretize")
        result = discretize_transfer_function(
            self._num,
            self._den,
            self._sampling_period,
            self._method,
            self._prewarp_frequency,
        )
        self._discretization = result
        if self._state is not FilterState.RUNNING:
            self._state = FilterState.DISCRETIZED
        return self.get_discretization()

    def get_discretization(self) -> DiscreteTransferFunction:
        """Copy of the current discretization result."""
        if self._discretization is None:
            raise ConfigurationError("System is not discretized; call discretize_system()")
        return copy.deepcopy(self._discretization)

    # ========================================================================
    # Timed Update
    # ========================================================================

    def _step(self, u: ChannelVector) -> None:
        b = self._discretization["numerator"]
        a = self._discretization["denominator"]
        if self._order == 0:
            self._output[:] = b[0] * u
            return

        y = (
            b[0] * u
            + np.sum(self._input_history * b[1:], axis=1)
            - np.sum(self._output_history * a[1:], axis=1)
        )
        self._input_history[:, 1:] = self._input_history[:, :-1]
        self._input_history[:, 0] = u
        self._output_history[:, 1:] = self._output_history[:, :-1]
        self._output_history[:, 0] = y
        self._output[:] = y

    def _flag_stale(self, message: str) -> None:
        self._stale_update_count += 1
        self._last_update_stale = True
        logger.debug(message)
        warnings.warn(message, StaleUpdateWarning, stacklevel=3)

    def update(self, u: ArrayLike, timestamp: Time) -> ChannelVector:
        """
        Feed one input per channel at an absolute time and return the outputs.

        The recursion advances once for every whole sampling period elapsed
        since the last discrete sample, holding u over those steps; an update
        exactly Ts after the previous sample advances exactly one step.

        If the time since the previous update exceeds the maximum gap, the
        state is frozen, a StaleUpdateWarning is emitted and both clocks jump
        to `timestamp`. A timestamp earlier than the previous update is
        handled the same way except that the clocks are left unchanged.
        An update that would run more than the maximum number of catch-up
        steps is also stale, with both clocks moved to `timestamp`.

        Parameters
        ----------
        u : ArrayLike
            Inputs, shape (n_filters,)
        timestamp : Time
            Absolute time in integer microseconds

        Returns
        -------
        ChannelVector
            Read-only view of the engine's output vector. It changes on the
            next update; copy it to keep the values.

        Raises
        ------
        ConfigurationError
            If the system has not been discretized, or set_initial_time()
            was never called
        InvalidParameterError
            If u does not hold n_filters finite values or timestamp is not
            an integer
        """
        if self._state not in (FilterState.DISCRETIZED, FilterState.RUNNING):
            raise ConfigurationError(
                f"update() requires a discretized system (state is {self._state.value}); "
                f"call discretize_system() first"
            )
        if not self._clock_set:
            raise ConfigurationError("update() requires a start time; call set_initial_time() first")

        u_arr = np.asarray(u, dtype=float)
        if u_arr.size != self._n_filters or u_arr.ndim > 2:
            raise InvalidParameterError(f"Input must have {self._n_filters} entries, got shape {u_arr.shape}")
        u_arr = u_arr.reshape(self._n_filters)
        if not np.all(np.isfinite(u_arr)):
            raise InvalidParameterError(f"Input must be finite, got {u_arr}")
        t = as_time(timestamp)

        elapsed = t - self._last_update_time
        if elapsed < 0:
            self._flag_stale(
                f"Update timestamp {t} us is earlier than the previous update "
                f"({self._last_update_time} us); output held"
            )
            return self.get_output()

        if self._max_gap is not None and elapsed > self._max_gap:
            self._flag_stale(
                f"Update took too long: {get_seconds_from_time(elapsed):.6f} s since the previous "
                f"update exceeds the maximum of {get_seconds_from_time(self._max_gap):.6f} s; output held"
            )
            self._last_update_time = t
            self._last_sample_time = t
            return self.get_output()

        steps = (t - self._last_sample_time) // self._sampling_time
        if steps > self._max_catch_up_steps:
            self._flag_stale(
                f"Update needs {steps} steps to catch up, more than the maximum of "
                f"{self._max_catch_up_steps}; output held"
            )
            self._last_update_time = t
            self._last_sample_time = t
            return self.get_output()

        for _ in range(steps):
            self._step(u_arr)
        self._last_sample_time += steps * self._sampling_time
        self._last_update_time = t
        self._last_update_stale = False
        self._state = FilterState.RUNNING
        return self.get_output()

    def get_output(self) -> ChannelVector:
        """Last computed output vector (read-only view), without advancing."""
        view = self._output.view()
        view.flags.writeable = False
        return view

    # ========================================================================
    # Read-side accessors
    # ========================================================================

    @property
    def state(self) -> FilterState:
        return self._state

    @property
    def sampling_period(self) -> float:
        return self._sampling_period

    @property
    def method(self) -> DiscretizationMethod:
        return self._method

    @property
    def prewarp_frequency(self) -> Optional[float]:
        return self._prewarp_frequency

    @property
    def n_filters(self) -> int:
        return self._n_filters

    @property
    def order(self) -> int:
        return self._order

    @property
    def numerator(self) -> Optional[Polynomial]:
        return None if self._num is None else self._num.copy()

    @property
    def denominator(self) -> Optional[Polynomial]:
        return None if self._den is None else self._den.copy()

    @property
    def discrete_numerator(self) -> DiscretePolynomial:
        return self.get_discretization()["numerator"]

    @property
    def discrete_denominator(self) -> DiscretePolynomial:
        return self.get_discretization()["denominator"]

    @property
    def input_history(self) -> HistoryMatrix:
        return self._input_history.copy()

    @property
    def output_history(self) -> HistoryMatrix:
        return self._output_history.copy()

    @property
    def initial_output_derivatives(self) -> Optional[DerivativeMatrix]:
        return None if self._derivatives is None else self._derivatives.copy()

    @property
    def last_update_time(self) -> Time:
        return self._last_update_time

    @property
    def last_sample_time(self) -> Time:
        return self._last_sample_time

    @property
    def maximum_time_between_updates(self) -> Optional[float]:
        """Maximum gap in seconds, None if unlimited."""
        return None if self._max_gap is None else get_seconds_from_time(self._max_gap)

    @property
    def maximum_catch_up_steps(self) -> int:
        return self._max_catch_up_steps

    @property
    def stale_update_count(self) -> int:
        return self._stale_update_count

    @property
    def last_update_stale(self) -> bool:
        """True if the most recent update was rejected as stale."""
        return self._last_update_stale

    def snapshot(self) -> FilterBankSnapshot:
        """Independent copy of the runtime state."""
        return FilterBankSnapshot(
            state=self._state.value,
            n_filters=self._n_filters,
            order=self._order,
            output=self._output.copy(),
            input_history=self._input_history.copy(),
            output_history=self._output_history.copy(),
            last_update_time=self._last_update_time,
            last_sample_time=self._last_sample_time,
            stale_update_count=self._stale_update_count,
        )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(order={self._order}, n_filters={self._n_filters}, "
            f"Ts={self._sampling_period}, method={self._method.value}, state={self._state.value})"
        )
