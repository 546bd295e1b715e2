"""Unit tests for the x/y chart builders (line, bar, area, pie, radar)."""

from __future__ import annotations

import json

import pytest

from analysis.aggregations import AggregationFunction
from analysis.dto import DataMapping, Dataset, Field, FieldType
from core.charting.builders import area, bar, line, pie, radar
from core.charting.schema import MultipleFields, SingleField
from core.charting.styles import (
    AreaStyleOptions,
    BarStyleOptions,
    LineStyleOptions,
    PieStyleOptions,
    RadarStyleOptions,
)
from core.charting.theme import DEFAULT_THEME

pytestmark = pytest.mark.unit


def _options(result) -> dict:
    assert result.error is None, result.error
    return json.loads(result.options)


@pytest.mark.golden
def test_line_chart_document(sales_dataset: Dataset, sales_mapping: DataMapping) -> None:
    options = _options(line.BUILDER.build_options(sales_dataset, sales_mapping, LineStyleOptions()))

    assert options["dataset"]["source"] == [["Month", "Sales"], ["Feb", 250.0], ["Jan", 125.0]]
    assert options["xAxis"]["type"] == "category"
    assert options["xAxis"]["boundaryGap"] is False
    assert options["yAxis"]["type"] == "value"
    [series] = options["series"]
    assert series["type"] == "line"
    assert series["encode"] == {"x": "Month", "y": "Sales"}
    assert series["smooth"] is True
    assert series["lineStyle"] == {"width": 3, "color": DEFAULT_THEME.primary}
    assert series["emphasis"]["lineStyle"]["width"] == 5
    assert series["animationEasing"] == "cubicOut"
    assert "areaStyle" not in series
    assert "title" not in options
    assert options["legend"]["top"] == "0%"


def test_line_area_fill_applies_to_first_series_only(sales_dataset: Dataset) -> None:
    mapping = DataMapping(x_axis="Month", y_axis=["Sales", "Units"])
    style = LineStyleOptions(area_fill=True, title="Revenue", x_axis_title="Month")
    options = _options(line.BUILDER.build_options(sales_dataset, mapping, style))

    first, second = options["series"]
    assert first["areaStyle"]["color"]["type"] == "linear"
    assert "areaStyle" not in second
    assert second["lineStyle"]["color"] == DEFAULT_THEME.info
    assert options["title"]["text"] == "Revenue"
    assert options["legend"]["top"] == "8%"
    assert options["xAxis"]["name"] == "Month"
    assert options["grid"]["bottom"] == "15%"


def test_line_validation_messages(sales_dataset: Dataset) -> None:
    no_x = line.BUILDER.build_options(sales_dataset, DataMapping(y_axis=["Sales"]), LineStyleOptions())
    assert no_x.error.kind == "missing_field"
    assert no_x.error.message == "Required field missing: X-axis field is required for line charts"

    no_y = line.BUILDER.build_options(sales_dataset, DataMapping(x_axis="Month"), LineStyleOptions())
    assert no_y.error.detail == "At least one Y-axis field is required for line charts"


def test_unknown_field_is_a_data_transformation_error(sales_dataset: Dataset) -> None:
    result = line.BUILDER.build_options(
        sales_dataset, DataMapping(x_axis="Month", y_axis=["Profit"]), LineStyleOptions()
    )
    assert result.error.kind == "data_transformation_error"
    assert result.error.message == "Data transformation error: Field not found: Profit"


def test_style_of_wrong_type_is_rejected(sales_dataset: Dataset, sales_mapping: DataMapping) -> None:
    result = line.BUILDER.build_options(sales_dataset, sales_mapping, BarStyleOptions())
    assert result.error.kind == "invalid_value"


def test_required_fields_and_default_style() -> None:
    x_role, y_role = line.required_fields()
    assert isinstance(x_role, SingleField)
    assert isinstance(y_role, MultipleFields)
    assert y_role.max_count == 3
    assert area.required_fields()[1].max_count == 5
    assert line.BUILDER.default_style() == LineStyleOptions()


def test_bar_vertical_and_stacked(sales_dataset: Dataset) -> None:
    mapping = DataMapping(x_axis="Month", y_axis=["Sales", "Units"])
    options = _options(bar.BUILDER.build_options(sales_dataset, mapping, BarStyleOptions(stacked=True)))

    assert options["xAxis"]["type"] == "category"
    assert [s["stack"] for s in options["series"]] == ["total", "total"]
    assert options["series"][0]["barMaxWidth"] == 60
    assert options["series"][0]["itemStyle"]["borderRadius"] == [0, 0, 4, 4]


def test_bar_horizontal_swaps_axes(sales_dataset: Dataset, sales_mapping: DataMapping) -> None:
    style = BarStyleOptions(horizontal=True, show_labels=True, enable_patterns=True)
    options = _options(bar.BUILDER.build_options(sales_dataset, sales_mapping, style))

    assert options["xAxis"]["type"] == "value"
    assert options["yAxis"]["type"] == "category"
    [series] = options["series"]
    assert series["encode"] == {"x": "Sales", "y": "Month"}
    assert series["label"]["position"] == "right"
    assert series["itemStyle"]["decal"]["symbol"].startswith("path://")
    assert "stack" not in series


def test_bar_uses_requested_aggregation(sales_dataset: Dataset, sales_mapping: DataMapping) -> None:
    options = _options(
        bar.BUILDER.build_options(sales_dataset, sales_mapping, BarStyleOptions(), aggregation=AggregationFunction.MAX)
    )
    assert options["dataset"]["source"][1:] == [["Feb", 200.0], ["Jan", 100.0]]


def test_area_opacity_percentage(sales_dataset: Dataset, sales_mapping: DataMapping) -> None:
    options = _options(area.BUILDER.build_options(sales_dataset, sales_mapping, AreaStyleOptions(opacity=50)))

    [series] = options["series"]
    stops = series["areaStyle"]["color"]["colorStops"]
    assert stops[0]["color"] == "rgba(37, 99, 235, 0.5)"
    assert stops[1]["color"] == "rgba(37, 99, 235, 0.1)"
    assert series["symbol"] == "none"
    assert series["lineStyle"]["width"] == 2


@pytest.mark.golden
def test_pie_slices_follow_grouped_measure(sales_dataset: Dataset, sales_mapping: DataMapping) -> None:
    options = _options(pie.BUILDER.build_options(sales_dataset, sales_mapping, PieStyleOptions(inner_radius="40%")))

    [series] = options["series"]
    assert series["data"] == [{"name": "Feb", "value": 250.0}, {"name": "Jan", "value": 125.0}]
    assert series["radius"] == ["40%", "100%"]
    assert series["roseType"] is False
    assert options["tooltip"]["trigger"] == "item"
    assert options["legend"]["type"] == "scroll"
    assert "xAxis" not in options


def test_pie_requires_a_measure(sales_dataset: Dataset) -> None:
    result = pie.BUILDER.build_options(sales_dataset, DataMapping(x_axis="Month"), PieStyleOptions())
    assert result.error.kind == "missing_field"


RADAR_DATASET = Dataset(
    id="ds_radar",
    name="skills",
    fields=[Field(name, FieldType.NUMERIC) for name in ("Speed", "Power", "Range", "Armor")],
    data=[[1.0, 2.0, "n/a", 4.0], [9.0, 9.0, 9.0, 9.0]],
)


def test_radar_reads_first_row_only() -> None:
    mapping = DataMapping(y_axis=["Speed", "Power", "Range"])
    options = _options(radar.BUILDER.build_options(RADAR_DATASET, mapping, RadarStyleOptions()))

    assert options["radar"]["indicator"] == [{"name": "Speed"}, {"name": "Power"}, {"name": "Range"}]
    assert options["radar"]["shape"] == "polygon"
    [point] = options["series"][0]["data"]
    assert point["value"] == [1.0, 2.0, 0.0]
    assert point["areaStyle"]["color"] == "rgba(37, 99, 235, 0.5)"


def test_radar_indicator_bounds() -> None:
    too_few = radar.BUILDER.build_options(RADAR_DATASET, DataMapping(y_axis=["Speed", "Power"]), RadarStyleOptions())
    assert too_few.error.kind == "missing_field"

    too_many = radar.validate_config(DataMapping(y_axis=[f"f{i}" for i in range(9)]))
    assert too_many is not None
    assert too_many.kind == "invalid_value"


def test_non_finite_values_fail_serialization() -> None:
    dataset = Dataset(
        id="ds_inf",
        name="inf",
        fields=[Field(name, FieldType.NUMERIC) for name in ("a", "b", "c")],
        data=[[float("inf"), 1.0, 2.0]],
    )
    result = radar.BUILDER.build_options(dataset, DataMapping(y_axis=["a", "b", "c"]), RadarStyleOptions())

    assert result.error is not None
    assert result.error.kind == "serialization_error"
