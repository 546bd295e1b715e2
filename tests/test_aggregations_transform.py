"""Golden tests for aggregation helpers and the grouped tabular transform."""

from __future__ import annotations

import pytest

from analysis.aggregations import AggregationFunction, aggregate_data, apply_aggregation
from analysis.dto import DataMapping, Dataset, Field, FieldType
from analysis.transform import (
    compare_x_values,
    dataset_to_echarts_format,
    find_field_index,
    find_field_indexes,
)

pytestmark = pytest.mark.unit

ROWS = [[1.0, "a"], [3.0, True], [2.0, None], [6.0, "7"]]


@pytest.mark.parametrize(
    ("function", "expected"),
    [
        (AggregationFunction.SUM, 12.0),
        (AggregationFunction.AVG, 3.0),
        (AggregationFunction.COUNT, 4.0),
        (AggregationFunction.MIN, 1.0),
        (AggregationFunction.MAX, 6.0),
        (AggregationFunction.MEDIAN, 2.5),
        (AggregationFunction.NONE, 1.0),
    ],
)
def test_aggregate_data_per_function(function: AggregationFunction, expected: float) -> None:
    assert aggregate_data(ROWS, [0], function) == [expected]


def test_aggregate_data_skips_non_numeric_cells() -> None:
    """Strings, booleans and nulls never count, so the column is empty."""

    assert aggregate_data(ROWS, [0, 1], AggregationFunction.COUNT) == [4.0, 0.0]
    assert aggregate_data(ROWS, [1], AggregationFunction.SUM) == [0.0]


def test_aggregate_data_empty_inputs() -> None:
    assert aggregate_data([], [0]) == []
    assert aggregate_data(ROWS, []) == []


def test_median_of_odd_count() -> None:
    assert apply_aggregation([5.0, 1.0, 3.0], AggregationFunction.MEDIAN) == 3.0


def test_display_name_is_upper_case() -> None:
    assert AggregationFunction.AVG.display_name == "AVG"
    assert AggregationFunction.default() == AggregationFunction.SUM


def test_find_field_index_errors() -> None:
    fields = [Field("a", FieldType.TEXT), Field("b", FieldType.NUMERIC)]

    assert find_field_index(fields, "b").index == 1
    assert find_field_index(fields, None).error.message == "Field not found: No field specified"
    assert find_field_index(fields, "zzz").error.message == "Field not found: zzz"
    assert find_field_indexes(fields, ["b", "a"]).indices == (1, 0)
    assert find_field_indexes(fields, ["b", "x"]).error.detail == "x"


def test_compare_x_values_treats_mixed_kinds_as_equal() -> None:
    assert compare_x_values("a", "b") == -1
    assert compare_x_values(2.0, 1.0) == 1
    assert compare_x_values("a", 1.0) == 0
    assert compare_x_values(None, "a") == 0


@pytest.mark.golden
def test_month_sales_groups_and_sorts(sales_dataset: Dataset, sales_mapping: DataMapping) -> None:
    result = dataset_to_echarts_format(sales_dataset, sales_mapping)

    assert result.ok
    assert result.rows == (["Month", "Sales"], ["Feb", 250.0], ["Jan", 125.0])


@pytest.mark.golden
def test_multiple_measures_with_average(sales_dataset: Dataset) -> None:
    mapping = DataMapping(x_axis="Region", y_axis=["Sales", "Units"])
    result = dataset_to_echarts_format(sales_dataset, mapping, AggregationFunction.AVG)

    assert result.rows == (["Region", "Sales", "Units"], ["East", 150.0, 3.0], ["West", 37.5, 2.0])


def test_mixed_x_values_keep_first_seen_order() -> None:
    dataset = Dataset(
        id="ds_mixed",
        name="mixed",
        fields=[Field("x", FieldType.TEXT), Field("v", FieldType.NUMERIC)],
        data=[["b", 1.0], [2.0, 1.0], ["a", 1.0], [1.0, 1.0], ["1", 5.0]],
    )
    result = dataset_to_echarts_format(dataset, DataMapping(x_axis="x", y_axis=["v"]))

    assert result.rows[0] == ["x", "v"]
    xs = [row[0] for row in result.rows[1:]]
    # "1" and 1.0 are distinct groups.
    assert len(xs) == 5
    assert sorted(xs, key=repr) == sorted(["b", 2.0, "a", 1.0, "1"], key=repr)
    assert dict((repr(row[0]), row[1]) for row in result.rows[1:])["'1'"] == 5.0


def test_transform_errors(sales_dataset: Dataset) -> None:
    no_y = dataset_to_echarts_format(sales_dataset, DataMapping(x_axis="Month"))
    assert no_y.error.kind == "field_not_found"
    assert no_y.error.message == "Field not found: No Y-axis fields specified"

    bad_x = dataset_to_echarts_format(sales_dataset, DataMapping(x_axis="Nope", y_axis=["Sales"]))
    assert bad_x.error.kind == "field_not_found"

    no_x = dataset_to_echarts_format(sales_dataset, DataMapping(y_axis=["Sales"]))
    assert no_x.error.detail == "No field specified"
