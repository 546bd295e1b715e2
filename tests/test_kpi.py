"""Unit tests for KPI aggregation and number formatting."""

from __future__ import annotations

import pytest

from analysis.dto import Dataset, Field, FieldType
from analysis.kpi import (
    KpiAggregation,
    analyze_dataset_for_kpis,
    calculate_kpi,
    format_kpi_value,
    format_large_number,
    suggest_aggregations,
)

pytestmark = pytest.mark.unit

NUMERIC = Field("Revenue", FieldType.NUMERIC)


def test_calculate_kpi_sum_and_average(sales_dataset: Dataset) -> None:
    total = calculate_kpi(sales_dataset, "Sales", KpiAggregation.SUM)
    assert total is not None
    assert total.value == 375.0
    assert total.formatted == "375"

    average = calculate_kpi(sales_dataset, "Sales", KpiAggregation.AVERAGE)
    assert average.formatted == "93.75"


def test_calculate_kpi_first_last_and_count(sales_dataset: Dataset) -> None:
    assert calculate_kpi(sales_dataset, "Sales", KpiAggregation.FIRST).value == 200.0
    assert calculate_kpi(sales_dataset, "Sales", KpiAggregation.LAST).value == 25.0
    assert calculate_kpi(sales_dataset, "Units", KpiAggregation.COUNT).formatted == "4"


def test_calculate_kpi_parses_numeric_text() -> None:
    dataset = Dataset(id="ds", name="t", fields=[Field("v", FieldType.TEXT)], data=[["3"], ["x"], [4.0]])
    result = calculate_kpi(dataset, "v", KpiAggregation.MAX)

    assert result is not None
    assert result.value == 4.0


def test_calculate_kpi_returns_none_without_values(sales_dataset: Dataset) -> None:
    assert calculate_kpi(sales_dataset, "Month", KpiAggregation.SUM) is None
    assert calculate_kpi(sales_dataset, "Missing", KpiAggregation.SUM) is None


@pytest.mark.parametrize(
    ("value", "formatted"),
    [(1234.0, "1,234"), (999_999.0, "999,999"), (12.345, "12.35"), (2_500_000.0, "2.5M"), (3e9, "3.0B")],
)
def test_format_kpi_value_numeric(value: float, formatted: str) -> None:
    assert format_kpi_value(value, NUMERIC) == formatted


def test_format_kpi_value_other_types() -> None:
    assert format_kpi_value(5.0, Field("d", FieldType.DATE)) == "Date"
    assert format_kpi_value(5.4, Field("t", FieldType.TEXT)) == "5"


def test_format_large_number_suffixes() -> None:
    assert format_large_number(1500.0) == "1.5K"
    assert format_large_number(-2_000_000.0) == "-2.0M"
    assert format_large_number(999.0) == "999"


def test_suggestions_by_field_type(sales_dataset: Dataset) -> None:
    assert [agg for agg, _ in suggest_aggregations(NUMERIC)] == [
        KpiAggregation.SUM,
        KpiAggregation.AVERAGE,
        KpiAggregation.MIN,
        KpiAggregation.MAX,
    ]
    assert suggest_aggregations(Field("Name", FieldType.TEXT)) == [(KpiAggregation.COUNT, "Count of Name")]
    assert suggest_aggregations(Field("Flag", FieldType.BOOLEAN)) == []

    analysis = analyze_dataset_for_kpis(sales_dataset)
    assert [name for name, _ in analysis] == ["Month", "Region", "Sales", "Units"]
