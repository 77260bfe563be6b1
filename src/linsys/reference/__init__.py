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
Reference test vectors: YAML I/O, scipy-based generation and engine replay.
"""

from .reference_vectors import (
    OUTPUT_KEYS,
    dump_reference_records,
    generate_reference_record,
    load_reference_records,
    max_replay_error,
    record_from_mapping,
    record_to_mapping,
    replay_reference_record,
    scipy_discrete_coefficients,
    simulate_reference,
)

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
