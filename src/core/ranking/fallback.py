"""Score-free header ordering used when ranking is disabled or fails."""
from __future__ import annotations

import logging
from typing import Any, List, Sequence

from common.models import EVENT_ID_HEADER, PRIMARY_HEADERS, Column
from common.text import fold_key
from core.ranking.discovery import discover_canonical_keys
from core.ranking.ordering import parse_pinned_list

logger = logging.getLogger(__name__)


def build_fallback_headers(
    columns: Sequence[Column],
    rows: Sequence[Sequence[Any]],
    pinned: str = "",
) -> List[str]:
    """Primaries, promoted ``eventId``, discovered pinned keys, then the rest alphabetically."""

    headers = list(PRIMARY_HEADERS)
    try:
        keys = discover_canonical_keys(columns, rows)
    except Exception:
        logger.error("Key discovery failed; showing primary columns only", exc_info=True)
        return headers

    by_folded = {fold_key(key): key for key in keys}
    used = {fold_key(header) for header in headers}
    if EVENT_ID_HEADER.lower() in by_folded:
        headers.append(EVENT_ID_HEADER)
        used.add(EVENT_ID_HEADER.lower())

    for name in parse_pinned_list(pinned):
        folded = fold_key(name)
        if folded in used or folded not in by_folded:
            continue
        headers.append(by_folded[folded])
        used.add(folded)

    remaining = [key for key in keys if fold_key(key) not in used]
    headers.extend(sorted(remaining, key=lambda key: (key.lower(), key)))
    return headers
