"""Pure data pipeline for the dashboard studio.

This package contains deterministic, testable computations that operate on
in-memory datasets and return DTOs. It must not import Django or perform any
database I/O.
"""

from .aggregations import AggregationFunction, aggregate_data
from .transform import dataset_to_echarts_format
from .type_inference import detect_column_type, detect_types

__all__ = [
    "AggregationFunction",
    "aggregate_data",
    "dataset_to_echarts_format",
    "detect_column_type",
    "detect_types",
]
