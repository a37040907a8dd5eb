"""Discovery of canonical dimension keys across a full result set."""
from __future__ import annotations

from typing import Any, Dict, List, Sequence

from common.models import Column
from common.text import fold_key
from core.telemetry.details import DIMENSIONS_COLUMN, dimension_fields, find_column_index


def discover_canonical_keys(columns: Sequence[Column], rows: Sequence[Sequence[Any]]) -> List[str]:
    """Return every dimension key seen in ``rows``, deduplicated case-insensitively.

    Keys keep the casing of their first occurrence and are listed in first-seen
    order. Only the dimensions column is read, so timestamp and message values
    are never stringified here.
    """

    idx = find_column_index(columns, DIMENSIONS_COLUMN)
    if idx < 0:
        return []
    seen: Dict[str, str] = {}
    for row in rows:
        if idx >= len(row):
            continue
        for detail in dimension_fields(row[idx]):
            folded = fold_key(detail.key)
            if folded and folded not in seen:
                seen[folded] = detail.key.strip()
    return list(seen.values())
