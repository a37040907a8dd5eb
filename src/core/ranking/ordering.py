"""Deterministic ordering of scored keys into display headers."""
from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from common.models import EVENT_ID_HEADER, PRIMARY_HEADERS, KeyStatistics
from common.text import fold_key, split_list

_EVENT_ID = EVENT_ID_HEADER.lower()


def parse_pinned_list(spec: str) -> List[str]:
    """Split a comma-separated pinned spec; the first case-insensitive duplicate wins."""

    return split_list(spec, ",")


def build_pinned_map(spec: str) -> Dict[str, int]:
    return {fold_key(name): idx for idx, name in enumerate(parse_pinned_list(spec))}


def sort_stats(stats: Iterable[KeyStatistics], pinned_map: Dict[str, int]) -> List[KeyStatistics]:
    """Order keys: pinned first in spec order, then by score and the tie-break cascade.

    The last levels compare keys themselves, so the order is total and does not
    depend on the iteration order of ``stats``.
    """

    def sort_key(entry: KeyStatistics) -> Tuple:
        folded = fold_key(entry.key)
        pinned_idx = pinned_map.get(folded)
        return (
            pinned_idx is None,
            pinned_idx if pinned_idx is not None else 0,
            -entry.score,
            -entry.keyword_matches,
            -entry.presence_rate,
            -entry.variability,
            entry.avg_length,
            folded,
            entry.key,
        )

    return sorted(stats, key=sort_key)


def assemble_headers(ordered: Iterable[KeyStatistics]) -> List[str]:
    """Prefix the ordered keys with the primaries, promoting ``eventId`` when present."""

    primaries = list(PRIMARY_HEADERS)
    reserved = set(primaries)
    keys: List[str] = []
    has_event_id = False
    for entry in ordered:
        folded = fold_key(entry.key)
        if folded == _EVENT_ID:
            has_event_id = True
            continue
        if folded in reserved:
            continue
        keys.append(entry.key)
    if has_event_id:
        primaries.append(EVENT_ID_HEADER)
    return primaries + keys
