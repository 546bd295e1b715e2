"""Unit tests for scatter, candlestick, heatmap, treemap and display payloads."""

from __future__ import annotations

import json

import pytest

from analysis.aggregations import AggregationFunction
from analysis.dto import DataMapping, Dataset, Field, FieldType
from core.charting.builders import BUILDERS, build_widget_options, get_builder
from core.charting.builders import candlestick, heatmap, scatter, treemap
from core.charting.builders.display import build_kpi_payload, build_table_payload, format_table_cell
from core.charting.schema import WidgetType
from core.charting.styles import (
    BarStyleOptions,
    CandlestickStyleOptions,
    HeatmapStyleOptions,
    KpiStyleOptions,
    KpiValueFormat,
    ScatterStyleOptions,
    TableStyleOptions,
    TreemapStyleOptions,
)

pytestmark = pytest.mark.unit


def _options(result) -> dict:
    assert result.error is None, result.error
    return json.loads(result.options)


def test_scatter_points_and_bubble_sizes(sales_dataset: Dataset) -> None:
    mapping = DataMapping(x_axis="Units", y_axis=["Sales"], size="Units", color="Region")
    options = _options(scatter.BUILDER.build_options(sales_dataset, mapping, ScatterStyleOptions()))

    [series] = options["series"]
    assert series["data"] == [
        [4.0, 200.0, 4.0, "East"],
        [2.0, 100.0, 2.0, "East"],
        [1.0, 50.0, 1.0, "West"],
        [3.0, 25.0, 3.0, "West"],
    ]
    assert options["visualMap"]["min"] == 1.0
    assert options["visualMap"]["max"] == 4.0
    assert options["visualMap"]["inRange"]["symbolSize"] == [6, 30]
    assert options["xAxis"]["type"] == "value"


def test_scatter_skips_non_numeric_rows(sales_dataset: Dataset) -> None:
    mapping = DataMapping(x_axis="Month", y_axis=["Sales"])
    options = _options(scatter.BUILDER.build_options(sales_dataset, mapping, ScatterStyleOptions()))

    assert options["series"][0]["data"] == []
    assert options["series"][0]["symbolSize"] == 6
    assert "visualMap" not in options


def test_scatter_unknown_optional_field(sales_dataset: Dataset) -> None:
    mapping = DataMapping(x_axis="Units", y_axis=["Sales"], size="Weight")
    result = scatter.BUILDER.build_options(sales_dataset, mapping, ScatterStyleOptions())
    assert result.error.kind == "data_transformation_error"


OHLC = Dataset(
    id="ds_ohlc",
    name="prices",
    fields=[
        Field("Date", FieldType.DATE),
        Field("O", FieldType.NUMERIC),
        Field("H", FieldType.NUMERIC),
        Field("L", FieldType.NUMERIC),
        Field("C", FieldType.NUMERIC),
    ],
    data=[["2024-01-01", 10.0, 12.0, 9.0, 11.0], ["2024-01-02", 11.0, 13.0, "x", 12.5]],
)
OHLC_MAPPING = DataMapping(x_axis="Date", open="O", high="H", low="L", close="C")


@pytest.mark.golden
def test_candlestick_reorders_prices() -> None:
    options = _options(candlestick.BUILDER.build_options(OHLC, OHLC_MAPPING, CandlestickStyleOptions()))

    assert options["dataset"]["source"] == [
        ["Date", "Open", "Close", "Low", "High"],
        ["2024-01-01", 10.0, 11.0, 9.0, 12.0],
        ["2024-01-02", 11.0, 12.5, None, 13.0],
    ]
    item_style = options["series"][0]["itemStyle"]
    assert item_style["color"] == "#00da3c"
    assert item_style["color0"] == "#ec0000"
    assert item_style["borderColor"] == "#00da3c"
    assert options["yAxis"]["scale"] is True


def test_candlestick_custom_border_colors() -> None:
    style = CandlestickStyleOptions(custom_border_colors=True, border_fall_color="#000000")
    options = _options(candlestick.BUILDER.build_options(OHLC, OHLC_MAPPING, style))

    item_style = options["series"][0]["itemStyle"]
    assert item_style["borderColor"] == "#00da3c"
    assert item_style["borderColor0"] == "#000000"


def test_candlestick_missing_roles() -> None:
    partial = DataMapping(x_axis="Date", open="O", high="H", close="C")
    result = candlestick.BUILDER.build_options(OHLC, partial, CandlestickStyleOptions())
    assert result.error.detail == "Low field is required for candlestick charts"

    unknown = DataMapping(x_axis="Date", open="O", high="H", low="Low", close="C")
    result = candlestick.BUILDER.build_options(OHLC, unknown, CandlestickStyleOptions())
    assert result.error.kind == "data_transformation_error"
    assert result.error.detail == "Low field not found: Low"


@pytest.mark.golden
def test_heatmap_grid_cells(sales_dataset: Dataset) -> None:
    mapping = DataMapping(x_axis="Month", category="Region", y_axis=["Sales"])
    options = _options(heatmap.BUILDER.build_options(sales_dataset, mapping, HeatmapStyleOptions()))

    assert options["xAxis"]["data"] == ["Feb", "Jan"]
    assert options["yAxis"]["data"] == ["East", "West"]
    assert options["series"][0]["data"] == [[0, 0, 200.0], [1, 0, 100.0], [0, 1, 50.0], [1, 1, 25.0]]
    assert options["visualMap"]["min"] == 25.0
    assert options["visualMap"]["max"] == 200.0
    assert options["visualMap"]["inRange"]["color"] == ["#313695", "#a50026"]


def test_heatmap_aggregates_duplicate_cells(sales_dataset: Dataset) -> None:
    mapping = DataMapping(x_axis="Region", category="Region", y_axis=["Sales"])
    options = _options(
        heatmap.BUILDER.build_options(
            sales_dataset, mapping, HeatmapStyleOptions(), aggregation=AggregationFunction.AVG
        )
    )
    assert options["series"][0]["data"] == [[0, 0, 150.0], [1, 1, 37.5]]


def test_heatmap_requires_category(sales_dataset: Dataset) -> None:
    result = heatmap.BUILDER.build_options(
        sales_dataset, DataMapping(x_axis="Month", y_axis=["Sales"]), HeatmapStyleOptions()
    )
    assert result.error.detail == "Category field is required for Y-axis grouping"


def test_heatmap_empty_dataset_uses_default_range() -> None:
    empty = Dataset(id="ds", name="e", fields=[Field("x"), Field("y"), Field("v", FieldType.NUMERIC)])
    mapping = DataMapping(x_axis="x", category="y", y_axis=["v"])
    options = _options(heatmap.BUILDER.build_options(empty, mapping, HeatmapStyleOptions()))
    assert (options["visualMap"]["min"], options["visualMap"]["max"]) == (0.0, 10.0)


@pytest.mark.golden
def test_treemap_nests_and_sums(sales_dataset: Dataset) -> None:
    mapping = DataMapping(hierarchy=["Region", "Month"], y_axis=["Sales"])
    options = _options(treemap.BUILDER.build_options(sales_dataset, mapping, TreemapStyleOptions()))

    assert options["series"][0]["data"] == [
        {"name": "East", "children": [{"name": "Feb", "value": 200.0}, {"name": "Jan", "value": 100.0}]},
        {"name": "West", "children": [{"name": "Feb", "value": 50.0}, {"name": "Jan", "value": 25.0}]},
    ]


def test_treemap_counts_rows_without_value_field(sales_dataset: Dataset) -> None:
    tree = treemap.build_tree(sales_dataset, (1,), None)
    assert tree == [{"name": "East", "value": 2.0}, {"name": "West", "value": 2.0}]


def test_treemap_level_bounds(sales_dataset: Dataset) -> None:
    result = treemap.BUILDER.build_options(sales_dataset, DataMapping(hierarchy=["Region"]), TreemapStyleOptions())
    assert result.error.kind == "missing_field"
    assert treemap.validate_config(DataMapping(hierarchy=["a", "b", "c", "d", "e"])).kind == "invalid_value"


def test_kpi_payload_formats(sales_dataset: Dataset) -> None:
    mapping = DataMapping(kpi_field="Sales", kpi_aggregation="Sum")
    payload = build_kpi_payload(sales_dataset, mapping, KpiStyleOptions(value_format=KpiValueFormat.CURRENCY))
    assert payload["display"] == "$375"
    assert payload["value"] == 375.0
    assert payload["aggregation"] == "Sum"

    percent = build_kpi_payload(
        sales_dataset, DataMapping(y_axis=["Units"], kpi_aggregation="Average"), KpiStyleOptions(
            value_format=KpiValueFormat.PERCENTAGE
        )
    )
    assert percent["field"] == "Units"
    assert percent["display"] == "2.50%"


def test_kpi_payload_without_data(sales_dataset: Dataset) -> None:
    payload = build_kpi_payload(sales_dataset, DataMapping(kpi_field="Month"), KpiStyleOptions())
    assert payload["display"] == "No data"
    assert payload["value"] is None

    unmapped = build_kpi_payload(sales_dataset, DataMapping(kpi_aggregation="Bogus"), KpiStyleOptions())
    assert unmapped["field"] is None
    assert unmapped["aggregation"] == "Sum"


def test_table_payload_projects_and_paginates(sales_dataset: Dataset) -> None:
    mapping = DataMapping(columns=["Sales", "Nope", "Month"])
    payload = build_table_payload(sales_dataset, mapping, TableStyleOptions(show_pagination=True, page_size=2))

    assert payload["columns"] == ["Sales", "Month"]
    assert payload["rows"] == [["200", "Feb"], ["100", "Jan"]]
    assert payload["total_rows"] == 4
    assert payload["page_size"] == 2

    everything = build_table_payload(sales_dataset, DataMapping(), TableStyleOptions())
    assert everything["columns"] == ["Month", "Region", "Sales", "Units"]
    assert len(everything["rows"]) == 4


def test_format_table_cell() -> None:
    assert format_table_cell(None) == "—"
    assert format_table_cell(True) == "true"
    assert format_table_cell(2.5) == "2.5"
    assert format_table_cell("x") == "x"


def test_registry_covers_chart_types_only() -> None:
    assert set(BUILDERS) == {t for t in WidgetType if t.is_echarts}
    assert get_builder(WidgetType.KPI) is None
    for widget_type, builder in BUILDERS.items():
        assert builder.widget_type == widget_type


def test_build_widget_options_dispatch(sales_dataset: Dataset, sales_mapping: DataMapping) -> None:
    bar_doc = _options(build_widget_options(WidgetType.BAR, sales_dataset, sales_mapping, BarStyleOptions()))
    assert bar_doc["series"][0]["type"] == "bar"

    table_doc = _options(build_widget_options(WidgetType.TABLE, sales_dataset, DataMapping(), TableStyleOptions()))
    assert table_doc["total_rows"] == 4

    mismatch = build_widget_options(WidgetType.KPI, sales_dataset, sales_mapping, BarStyleOptions())
    assert mismatch.error.kind == "invalid_value"
