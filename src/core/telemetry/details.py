"""Flatten a telemetry row's customDimensions value into ordered detail fields."""
from __future__ import annotations

import json
from typing import Any, Dict, List, Sequence

from common.models import Column, DetailField, FieldGroup, RowDetails

DIMENSIONS_COLUMN = "customDimensions"
PARSE_WARNING_KEY = "(parse_warning)"
PARSE_WARNING_TEXT = "customDimensions is not valid JSON; showing raw string"
RAW_KEY = "raw"

MAX_DEPTH = 2
MAX_FIELDS_PER_ROW = 1000


def find_column_index(columns: Sequence[Column], name: str) -> int:
    """Return the index of the column named ``name`` (case-insensitive), or -1."""

    target = name.lower()
    for idx, column in enumerate(columns):
        if column.name.strip().lower() == target:
            return idx
    return -1


def build_details(columns: Sequence[Column], row: Sequence[Any]) -> RowDetails:
    """Extract timestamp, message and flattened dimension fields from one row.

    Timestamp and message are stringified with ``str()``; failures there are
    left to propagate to the caller.
    """

    idx_timestamp = find_column_index(columns, "timestamp")
    if idx_timestamp < 0:
        idx_timestamp = find_column_index(columns, "timeGenerated")
    idx_message = find_column_index(columns, "message")

    return RowDetails(
        timestamp=_cell_text(row, idx_timestamp),
        message=_cell_text(row, idx_message),
        fields=dimension_fields(dimensions_value(columns, row)),
    )


def dimensions_value(columns: Sequence[Column], row: Sequence[Any]) -> Any:
    idx = find_column_index(columns, DIMENSIONS_COLUMN)
    if idx < 0 or idx >= len(row):
        return None
    return row[idx]


def dimension_fields(raw: Any, *, max_fields: int = MAX_FIELDS_PER_ROW) -> List[DetailField]:
    """Flatten a dimensions value into fields sorted case-insensitively by key.

    Mappings and lists are walked with dot/bracket paths; strings are parsed as
    JSON first. Anything unparsable yields a parse warning followed by ``raw``.
    """

    if raw is None:
        return []

    flattened: Dict[str, str] = {}
    parse_warning = False
    root: Any = None
    if isinstance(raw, (dict, list, tuple)):
        root = raw
    elif isinstance(raw, str):
        try:
            root = json.loads(raw)
        except ValueError:
            parse_warning = True
            flattened[RAW_KEY] = raw
    else:
        parse_warning = True
        flattened[RAW_KEY] = str(raw)

    if isinstance(root, (dict, list, tuple)):
        _flatten_into(flattened, root, "", 0)
    elif root is not None:
        flattened[RAW_KEY] = scalar_text(root)

    fields: List[DetailField] = []
    if parse_warning:
        fields.append(
            DetailField(key=PARSE_WARNING_KEY, value=PARSE_WARNING_TEXT, group=FieldGroup.CUSTOM, priority=0)
        )
    for key in sorted(flattened, key=lambda k: (k.lower(), k)):
        fields.append(DetailField(key=key, value=flattened[key]))
    return fields[:max_fields]


def _cell_text(row: Sequence[Any], idx: int) -> str:
    if idx < 0 or idx >= len(row) or row[idx] is None:
        return ""
    return str(row[idx])


def _flatten_into(out: Dict[str, str], value: Any, prefix: str, depth: int) -> None:
    if value is None:
        out[prefix] = ""
        return
    if isinstance(value, dict):
        if depth > MAX_DEPTH:
            out[prefix] = _json_compact(value)
        elif not value:
            if prefix:
                out[prefix] = "{}"
        else:
            for key in sorted(value, key=str):
                child = f"{prefix}.{key}" if prefix else str(key)
                _flatten_into(out, value[key], child, depth + 1)
        return
    if isinstance(value, (list, tuple)):
        if depth > MAX_DEPTH:
            out[prefix] = _json_compact(value)
        elif not value:
            if prefix:
                out[prefix] = "[]"
        else:
            for idx, element in enumerate(value):
                _flatten_into(out, element, f"{prefix}[{idx}]", depth + 1)
        return
    out[prefix] = scalar_text(value)


def scalar_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    if isinstance(value, (int, float)):
        return repr(value)
    return _json_compact(value)


def _json_compact(value: Any) -> str:
    try:
        return json.dumps(value, separators=(",", ":"), sort_keys=True, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)
