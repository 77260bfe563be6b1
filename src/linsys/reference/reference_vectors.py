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
Reference Test Vectors

Reads, writes, generates and replays reference records used to validate the
three discretization methods end to end.

File Format
-----------
A YAML document holding a list of records:

    - n: 200              # number of samples
      order: 2            # filter order
      Ts: 0.01            # sampling period (s)
      omega: 0.0          # Tustin prewarp frequency (rad/s), 0 = none
      u: [...]            # input sequence, length n
      y_tustin: [...]     # expected outputs, length n
      y_fwd: [...]
      y_bwd: [...]
      num: [...]          # continuous numerator, length order + 1
      den: [...]          # continuous denominator, length order + 1
      ydy0: [...]         # initial output derivatives, one row of length order

Multi-dimensional arrays are stored column by column.

Replay Protocol
---------------
replay_reference_record() drives a LinearSystem the way the reference data
was produced: initial time 0, initial output derivatives from `ydy0`, input
history held at u[0], then one update per sample at t = k·Ts, k = 1..n.

generate_reference_record() computes the expected outputs independently of
the engine's recursion, with scipy.signal (bilinear / cont2discrete for the
coefficients and lfiltic / lfilter for the run).

Examples
--------
>>> u = np.sin(np.linspace(0, 10, 500))
>>> record = generate_reference_record([1.0], [1.0, 0.4, 1.0], 0.02, u, omega=1.0)
>>> dump_reference_records([record], "vectors.yml")
>>> for rec in load_reference_records("vectors.yml"):
...     print(max_replay_error(rec))
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import numpy as np
import yaml
from scipy import signal

from linsys.discretization.methods import DiscretizationMethod, MethodLike, as_method
from linsys.discretization.transfer_function_discretizer import (
    bilinear_gain,
    check_prewarp_frequency,
    check_sampling_period,
    normalize_transfer_function,
)
from linsys.exceptions import InvalidParameterError
from linsys.filters.initial_conditions import output_history_from_derivatives
from linsys.filters.linear_system import LinearSystem
from linsys.types.core import ArrayLike
from linsys.types.filtering import ReferenceRecord
from linsys.utils.timing import get_time_from_seconds

logger = logging.getLogger(__name__)

OUTPUT_KEYS = {
    DiscretizationMethod.TUSTIN: "y_tustin",
    DiscretizationMethod.FORWARD_EULER: "y_fwd",
    DiscretizationMethod.BACKWARD_EULER: "y_bwd",
}

_SCALAR_KEYS = ("n", "order", "Ts", "omega")
_ARRAY_KEYS = ("u", "y_tustin", "y_fwd", "y_bwd", "num", "den", "ydy0")


# ============================================================================
# YAML I/O
# ============================================================================


def _column_major(values: Any, shape: tuple, key: str) -> np.ndarray:
    arr = np.asarray(values, dtype=float).ravel()
    expected = int(np.prod(shape))
    if arr.size != expected:
        raise InvalidParameterError(f"Field '{key}' must have {expected} values, got {arr.size}")
    return arr.reshape(shape, order="F")


def record_from_mapping(node: Mapping[str, Any]) -> ReferenceRecord:
    """
    Convert one parsed YAML mapping into a ReferenceRecord.

    Raises
    ------
    InvalidParameterError
        If a field is missing or an array has the wrong length
    """
    missing = [key for key in _SCALAR_KEYS + _ARRAY_KEYS if key not in node]
    if missing:
        raise InvalidParameterError(f"Reference record is missing fields: {missing}")

    n = int(node["n"])
    order = int(node["order"])
    return ReferenceRecord(
        n=n,
        order=order,
        Ts=float(node["Ts"]),
        omega=float(node["omega"]),
        u=_column_major(node["u"], (n,), "u"),
        y_tustin=_column_major(node["y_tustin"], (n,), "y_tustin"),
        y_fwd=_column_major(node["y_fwd"], (n,), "y_fwd"),
        y_bwd=_column_major(node["y_bwd"], (n,), "y_bwd"),
        num=_column_major(node["num"], (order + 1,), "num"),
        den=_column_major(node["den"], (order + 1,), "den"),
        ydy0=_column_major(node["ydy0"], (1, order), "ydy0"),
    )


def record_to_mapping(record: ReferenceRecord) -> Dict[str, Any]:
    """Plain-Python mapping of a record, arrays flattened column by column."""
    mapping: Dict[str, Any] = {
        "n": int(record["n"]),
        "order": int(record["order"]),
        "Ts": float(record["Ts"]),
        "omega": float(record["omega"]),
    }
    for key in _ARRAY_KEYS:
        mapping[key] = np.asarray(record[key], dtype=float).ravel(order="F").tolist()
    return mapping


def load_reference_records(path: Union[str, Path]) -> List[ReferenceRecord]:
    """
    Load every record of a reference YAML file.

    A file holding a single mapping is read as a one-record list; an empty
    file gives an empty list.
    """
    with open(path, "r", encoding="utf-8") as f:
        doc = yaml.safe_load(f)
    if doc is None:
        return []
    if isinstance(doc, Mapping):
        doc = [doc]
    records = [record_from_mapping(node) for node in doc]
    logger.debug("Loaded %d reference records from %s", len(records), path)
    return records


def dump_reference_records(records: Sequence[ReferenceRecord], path: Union[str, Path]) -> None:
    """Write records to a YAML file in the reference format."""
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(
            [record_to_mapping(record) for record in records],
            f,
            default_flow_style=None,
            sort_keys=False,
        )


# ============================================================================
# Generation (scipy.signal oracle)
# ============================================================================


def scipy_discrete_coefficients(
    num: ArrayLike,
    den: ArrayLike,
    sampling_period: float,
    method: MethodLike,
    prewarp_frequency: Optional[float] = None,
) -> tuple:
    """
    Discrete (b, a) computed with scipy.signal, normalized so a[0] == 1.

    TUSTIN uses signal.bilinear with fs = k/2 (k the bilinear gain, which
    includes prewarping); the Euler methods use signal.cont2discrete with
    'euler' and 'backward_diff'.
    """
    method = as_method(method)
    ts = check_sampling_period(sampling_period)
    num_c, den_c = normalize_transfer_function(num, den)
    order = den_c.size - 1

    if method is DiscretizationMethod.TUSTIN:
        fs = bilinear_gain(ts, prewarp_frequency) / 2.0
        b, a = signal.bilinear(num_c, den_c, fs=fs)
    else:
        scipy_method = "euler" if method is DiscretizationMethod.FORWARD_EULER else "backward_diff"
        trimmed = np.trim_zeros(num_c, "f")
        if trimmed.size == 0:
            trimmed = np.zeros(1)
        b, a, _ = signal.cont2discrete((trimmed, den_c), ts, method=scipy_method)

    b = np.atleast_1d(np.squeeze(np.asarray(b, dtype=float)))
    a = np.atleast_1d(np.squeeze(np.asarray(a, dtype=float)))
    b_full = np.zeros(order + 1)
    b_full[order + 1 - b.size :] = b
    return b_full / a[0], a / a[0]


def simulate_reference(
    num: ArrayLike,
    den: ArrayLike,
    sampling_period: float,
    u: ArrayLike,
    method: MethodLike,
    omega: float = 0.0,
    ydy0: Optional[ArrayLike] = None,
) -> np.ndarray:
    """
    Expected output sequence for one method under the replay protocol.

    The initial filter state is built with signal.lfiltic from the output
    history implied by `ydy0` and an input history held at u[0].
    """
    ts = check_sampling_period(sampling_period)
    u_arr = np.asarray(u, dtype=float).ravel()
    b, a = scipy_discrete_coefficients(num, den, ts, method, check_prewarp_frequency(omega))
    order = a.size - 1
    if order == 0:
        return b[0] * u_arr

    derivatives = np.zeros((1, order)) if ydy0 is None else np.asarray(ydy0, dtype=float).reshape(1, order)
    y_hist = output_history_from_derivatives(derivatives, ts)[0]
    u_hist = np.full(order, u_arr[0])
    zi = signal.lfiltic(b, a, y_hist, u_hist)
    y, _ = signal.lfilter(b, a, u_arr, zi=zi)
    return y


def generate_reference_record(
    num: ArrayLike,
    den: ArrayLike,
    sampling_period: float,
    u: ArrayLike,
    omega: float = 0.0,
    ydy0: Optional[ArrayLike] = None,
) -> ReferenceRecord:
    """Build a complete reference record for all three methods."""
    num_c, den_c = normalize_transfer_function(num, den)
    order = den_c.size - 1
    u_arr = np.asarray(u, dtype=float).ravel()
    derivatives = np.zeros((1, order)) if ydy0 is None else np.asarray(ydy0, dtype=float).reshape(1, order)

    outputs = {
        key: simulate_reference(num_c, den_c, sampling_period, u_arr, method, omega, derivatives)
        for method, key in OUTPUT_KEYS.items()
    }
    return ReferenceRecord(
        n=u_arr.size,
        order=order,
        Ts=float(sampling_period),
        omega=float(omega),
        u=u_arr,
        y_tustin=outputs["y_tustin"],
        y_fwd=outputs["y_fwd"],
        y_bwd=outputs["y_bwd"],
        num=num_c,
        den=den_c,
        ydy0=derivatives,
    )


# ============================================================================
# Replay
# ============================================================================


def replay_reference_record(record: ReferenceRecord, method: MethodLike) -> np.ndarray:
    """Run a single-channel LinearSystem over the record's input sequence."""
    method = as_method(method)
    order = int(record["order"])
    u = np.asarray(record["u"], dtype=float)

    system = LinearSystem(record["num"], record["den"], sampling_period=record["Ts"])
    system.set_prewarp_frequency(record["omega"])
    system.set_integration_method(method)
    system.set_initial_output_derivatives(np.asarray(record["ydy0"]).reshape(1, order))
    system.set_initial_time(0)
    system.discretize_system()
    system.set_initial_state(np.full((1, order), u[0]))

    step = get_time_from_seconds(record["Ts"])
    time = step
    y = np.zeros(u.size)
    for k in range(u.size):
        y[k] = system.update(u[k : k + 1], time)[0]
        time += step
    return y


def max_replay_error(record: ReferenceRecord) -> Dict[str, float]:
    """Largest absolute deviation between replayed and expected outputs, per method."""
    errors = {}
    for method, key in OUTPUT_KEYS.items():
        expected = np.asarray(record[key], dtype=float)
        errors[key] = float(np.max(np.abs(replay_reference_record(record, method) - expected)))
    return errors


__all__ = [
    "OUTPUT_KEYS",
    "dump_reference_records",
    "generate_reference_record",
    "load_reference_records",
    "max_replay_error",
    "record_from_mapping",
    "record_to_mapping",
    "replay_reference_record",
    "scipy_discrete_coefficients",
    "simulate_reference",
]
