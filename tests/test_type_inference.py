"""Unit tests for CSV column type inference."""

from __future__ import annotations

import pytest

from analysis.dto import FieldType
from analysis.type_inference import (
    SAMPLE_SIZE,
    coerce_cell,
    detect_column_type,
    detect_types,
    is_boolean,
    is_date,
    is_numeric,
    is_rfc3339,
    parse_float,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize("value", ["true", "FALSE", " Yes ", "no", "1", "0", "Y", "n"])
def test_is_boolean_accepts_literals_case_insensitively(value: str) -> None:
    assert is_boolean(value)


@pytest.mark.parametrize("value", ["maybe", "2", "on", ""])
def test_is_boolean_rejects_other_text(value: str) -> None:
    assert not is_boolean(value)


def test_parse_float_uses_strict_grammar() -> None:
    assert parse_float("1e3") == 1000.0
    assert parse_float("-.5") == -0.5
    assert parse_float("1_000") is None
    assert parse_float("12abc") is None
    assert is_numeric(" 42 ")


def test_date_detection_covers_patterns_and_rfc3339() -> None:
    assert is_date("2024-01-31")
    assert is_date("01/31/2024")
    assert is_date("2024-01-31 10:00:00")
    assert is_date("2024-01-31T10:00:00Z")
    assert not is_date("January 31")
    assert is_rfc3339("2024-01-31T10:00:00+02:00")
    assert not is_rfc3339("2024-01-31T10:00:00")


def test_boolean_wins_priority_over_numeric() -> None:
    """A column of 0/1 values matches both rules; Boolean is checked first."""

    assert detect_column_type(["1", "0", "1", "0"]) == FieldType.BOOLEAN


def test_threshold_is_ninety_percent_of_present_values() -> None:
    nine_numbers = [str(n) for n in range(2, 11)]
    assert detect_column_type(nine_numbers + ["x"]) == FieldType.NUMERIC
    assert detect_column_type(nine_numbers[:8] + ["x", "y"]) == FieldType.TEXT


def test_null_synonyms_do_not_count() -> None:
    assert detect_column_type(["2.5", "", "N/A", "null", "na", "3.5"]) == FieldType.NUMERIC
    assert detect_column_type(["", "NULL"]) == FieldType.TEXT


def test_detect_types_samples_only_first_rows() -> None:
    rows = [["5"]] * SAMPLE_SIZE + [["text"]] * 50
    result = detect_types(["value"], rows)

    assert result.ok
    assert result.columns == (("value", FieldType.NUMERIC),)


def test_detect_types_pads_short_rows_and_rejects_no_headers() -> None:
    result = detect_types(["a", "b"], [["2024-01-01"], ["2024-02-01", "x"]])
    assert result.columns == (("a", FieldType.DATE), ("b", FieldType.TEXT))

    assert detect_types([], []).error == "No headers found"


def test_coerce_cell_order_is_number_boolean_string() -> None:
    assert coerce_cell("1") == 1.0
    assert coerce_cell("true") is True
    assert coerce_cell("false") is False
    assert coerce_cell("Yes") == "Yes"
    assert coerce_cell("nan") == 0.0
    assert coerce_cell("") == ""
