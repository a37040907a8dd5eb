"""Telemetry row helpers: flattening of dimensions values into detail fields."""

from .details import (
    DIMENSIONS_COLUMN,
    MAX_FIELDS_PER_ROW,
    PARSE_WARNING_KEY,
    RAW_KEY,
    build_details,
    dimension_fields,
    find_column_index,
)

__all__ = [
    "DIMENSIONS_COLUMN",
    "MAX_FIELDS_PER_ROW",
    "PARSE_WARNING_KEY",
    "RAW_KEY",
    "build_details",
    "dimension_fields",
    "find_column_index",
]
