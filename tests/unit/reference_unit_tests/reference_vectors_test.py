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
Unit Tests for Reference Test Vectors

Tests cover:
- Generating records with scipy.signal
- Replaying records through LinearSystem for all three methods
- YAML round trip, column-major arrays and single-record files
- Malformed records
"""

import numpy as np
import pytest
import yaml
from numpy.testing import assert_allclose, assert_array_equal

from linsys.discretization import DiscretizationMethod, discretize_transfer_function
from linsys.exceptions import InvalidParameterError
from linsys.reference import (
    OUTPUT_KEYS,
    dump_reference_records,
    generate_reference_record,
    load_reference_records,
    max_replay_error,
    record_from_mapping,
    record_to_mapping,
    replay_reference_record,
    scipy_discrete_coefficients,
)

REPLAY_TOLERANCE = 1e-5


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def second_order_record():
    """Lightly damped second order, prewarped, with nonzero initial derivatives."""
    t = np.arange(200) * 0.02
    u = np.sin(1.3 * t) + 0.5
    return generate_reference_record(
        [1.0], [1.0, 0.4, 1.0], 0.02, u, omega=1.0, ydy0=[[0.2, -0.1]]
    )


@pytest.fixture
def first_order_record():
    rng = np.random.default_rng(7)
    u = rng.uniform(-1.0, 1.0, size=50)
    return generate_reference_record([2.0, 1.0], [1.0, 3.0], 0.05, u)


# ============================================================================
# Generation and Replay
# ============================================================================


class TestGeneration:
    def test_record_fields(self, second_order_record):
        rec = second_order_record
        assert rec["n"] == 200
        assert rec["order"] == 2
        assert rec["Ts"] == 0.02
        assert rec["omega"] == 1.0
        assert rec["ydy0"].shape == (1, 2)
        for key in OUTPUT_KEYS.values():
            assert rec[key].shape == (200,)

    def test_methods_differ(self, second_order_record):
        assert not np.allclose(second_order_record["y_fwd"], second_order_record["y_bwd"])

    @pytest.mark.parametrize("method", list(DiscretizationMethod))
    def test_scipy_coefficients_match_discretizer(self, method):
        num, den = [1.0, 0.5, 2.0], [1.0, 1.5, 0.7, 0.2]
        b, a = scipy_discrete_coefficients(num, den, 0.01, method, 3.0)
        ours = discretize_transfer_function(num, den, 0.01, method, 3.0)
        assert_allclose(b, ours["numerator"], rtol=1e-8, atol=1e-12)
        assert_allclose(a, ours["denominator"], rtol=1e-8, atol=1e-12)

    def test_default_initial_conditions(self, first_order_record):
        assert_array_equal(first_order_record["ydy0"], [[0.0]])
        assert first_order_record["omega"] == 0.0


class TestReplay:
    @pytest.mark.parametrize("method", list(DiscretizationMethod))
    def test_replay_matches_record(self, second_order_record, method):
        y = replay_reference_record(second_order_record, method)
        expected = second_order_record[OUTPUT_KEYS[method]]
        assert np.max(np.abs(y - expected)) <= REPLAY_TOLERANCE

    def test_max_replay_error(self, second_order_record, first_order_record):
        for record in (second_order_record, first_order_record):
            errors = max_replay_error(record)
            assert set(errors) == {"y_tustin", "y_fwd", "y_bwd"}
            assert all(err <= 1e-9 for err in errors.values())

    def test_replay_detects_wrong_expectation(self, first_order_record):
        first_order_record["y_bwd"] = first_order_record["y_bwd"] + 1e-3
        errors = max_replay_error(first_order_record)
        assert errors["y_bwd"] == pytest.approx(1e-3, rel=1e-3)


# ============================================================================
# YAML I/O
# ============================================================================


class TestYamlIO:
    def test_round_trip(self, tmp_path, second_order_record, first_order_record):
        path = tmp_path / "vectors.yml"
        dump_reference_records([second_order_record, first_order_record], path)
        loaded = load_reference_records(path)

        assert len(loaded) == 2
        for original, rec in zip([second_order_record, first_order_record], loaded):
            assert rec["n"] == original["n"]
            assert rec["order"] == original["order"]
            for key in ("u", "y_tustin", "y_fwd", "y_bwd", "num", "den", "ydy0"):
                assert_array_equal(rec[key], original[key])

    def test_loaded_records_replay(self, tmp_path, second_order_record):
        path = tmp_path / "vectors.yml"
        dump_reference_records([second_order_record], path)
        (rec,) = load_reference_records(path)
        assert max(max_replay_error(rec).values()) <= REPLAY_TOLERANCE

    def test_single_mapping_file(self, tmp_path, first_order_record):
        path = tmp_path / "single.yml"
        path.write_text(yaml.safe_dump(record_to_mapping(first_order_record)), encoding="utf-8")
        records = load_reference_records(path)
        assert len(records) == 1
        assert records[0]["order"] == 1

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("", encoding="utf-8")
        assert load_reference_records(path) == []

    def test_column_major_matrix(self):
        node = {
            "n": 1,
            "order": 2,
            "Ts": 0.1,
            "omega": 0,
            "u": [1.0],
            "y_tustin": [0.0],
            "y_fwd": [0.0],
            "y_bwd": [0.0],
            "num": [0, 0, 1],
            "den": [1, 2, 1],
            "ydy0": [0.5, -0.25],
        }
        rec = record_from_mapping(node)
        assert_array_equal(rec["ydy0"], [[0.5, -0.25]])
        assert rec["omega"] == 0.0
        assert rec["num"].dtype == np.float64

    def test_mapping_is_plain_python(self, first_order_record):
        mapping = record_to_mapping(first_order_record)
        assert isinstance(mapping["u"], list)
        assert isinstance(mapping["n"], int)
        assert isinstance(mapping["Ts"], float)

    def test_missing_field(self, first_order_record):
        mapping = record_to_mapping(first_order_record)
        del mapping["y_fwd"]
        with pytest.raises(InvalidParameterError, match="y_fwd"):
            record_from_mapping(mapping)

    def test_wrong_length(self, first_order_record):
        mapping = record_to_mapping(first_order_record)
        mapping["u"] = mapping["u"][:-1]
        with pytest.raises(InvalidParameterError, match="'u'"):
            record_from_mapping(mapping)
