"""Single-pass accumulation of per-key statistics over sampled rows."""
from __future__ import annotations

from typing import Any, Dict, Sequence

from common.models import Column, KeyStatistics
from common.text import fold_key
from core.telemetry.details import build_details

# Scratch mapping is recreated instead of cleared once a row pushed it past this size.
SCRATCH_RESET_THRESHOLD = 512

_BOOLEAN_TEXT = frozenset({"true", "false"})


def init_key_stats(keys: Sequence[str]) -> Dict[str, KeyStatistics]:
    return {key: KeyStatistics(key=key) for key in keys}


def accumulate_stats(
    stats: Dict[str, KeyStatistics],
    keys: Sequence[str],
    columns: Sequence[Column],
    sample: Sequence[Sequence[Any]],
    distinct_cap: int,
) -> None:
    """Update ``stats`` in place with one observation per key per sampled row.

    Every key's ``occurrences`` ends up equal to ``len(sample)``; the distinct
    set stops growing at ``distinct_cap``.
    """

    folded_keys = [(fold_key(key), stats[key]) for key in keys]
    scratch: Dict[str, str] = {}
    for row in sample:
        if len(scratch) > SCRATCH_RESET_THRESHOLD:
            scratch = {}
        else:
            scratch.clear()
        for detail in build_details(columns, row).fields:
            folded = fold_key(detail.key)
            if folded:
                scratch[folded] = detail.value  # last value wins
        for folded, entry in folded_keys:
            entry.occurrences += 1
            value = scratch.get(folded)
            if not value:
                continue
            entry.non_empty += 1
            if len(entry.distinct_values) < distinct_cap:
                entry.distinct_values.add(value)
            entry.total_length += len(value)
            if not entry.boolean_like and value in _BOOLEAN_TEXT:
                entry.boolean_like = True
