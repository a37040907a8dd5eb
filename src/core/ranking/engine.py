"""Orchestration of column ranking behind a fallback failure boundary."""
from __future__ import annotations

import logging
import time
from typing import Any, List, Optional, Sequence

from common.models import PRIMARY_HEADERS, Column, KeyStatistics, RankingConfiguration, RankingResult
from core.ranking.discovery import discover_canonical_keys
from core.ranking.fallback import build_fallback_headers
from core.ranking.ordering import assemble_headers, build_pinned_map, sort_stats
from core.ranking.rules import build_rules
from core.ranking.sampler import select_sample
from core.ranking.scoring import score_stats
from core.ranking.stats import accumulate_stats, init_key_stats

logger = logging.getLogger(__name__)

DIAGNOSTIC_TOP_KEYS = 10


def compute_ranked_headers(
    columns: Sequence[Column],
    rows: Sequence[Sequence[Any]],
    config: Optional[RankingConfiguration] = None,
) -> List[str]:
    """Return the display headers for one query result.

    The result always starts with ``timestamp`` and ``message``. Any failure
    while ranking is logged and the whole result is replaced by the fallback
    ordering; a partially ranked list is never returned.
    """

    config = config or RankingConfiguration()
    if not config.enabled:
        return build_fallback_headers(columns, rows, config.pinned)

    start = time.perf_counter()
    try:
        result = rank_headers(columns, rows, config)
    except Exception:
        logger.error("Ranking failed; falling back to structural ordering", exc_info=True)
        return build_fallback_headers(columns, rows, config.pinned)
    logger.debug("Ranking executed in %.1f ms", (time.perf_counter() - start) * 1000)
    return result.headers


def rank_headers(
    columns: Sequence[Column],
    rows: Sequence[Sequence[Any]],
    config: RankingConfiguration,
) -> RankingResult:
    """Run discovery, sampling, accumulation, scoring and ordering without a safety net."""

    if not rows:
        return RankingResult(headers=list(PRIMARY_HEADERS))
    keys = discover_canonical_keys(columns, rows)
    if not keys:
        return RankingResult(headers=list(PRIMARY_HEADERS))

    sample, sample_size = select_sample(rows, config.effective_sample_size())
    distinct_cap, length_cap = config.effective_caps()
    rules, al_min_presence = build_rules(config)
    pinned_map = build_pinned_map(config.pinned)

    stats = init_key_stats(keys)
    accumulate_stats(stats, keys, columns, sample, distinct_cap)
    score_stats(stats, rules, config, distinct_cap, length_cap, al_min_presence, pinned_map)
    ordered = sort_stats(stats.values(), pinned_map)

    log_diagnostics(ordered, sample_size, len(keys))
    return RankingResult(
        headers=assemble_headers(ordered),
        ordered=ordered,
        sample_size=sample_size,
        total_keys=len(keys),
    )


def log_diagnostics(ordered: Sequence[KeyStatistics], sample_size: int, total_keys: int) -> None:
    if not logger.isEnabledFor(logging.INFO):
        return
    top = ";".join(
        f"{entry.key}(pr={entry.presence_rate:.2f},var={entry.variability:.2f},"
        f"len={entry.avg_length:.1f},k={entry.keyword_matches},score={entry.score:.2f})"
        for entry in ordered[:DIAGNOSTIC_TOP_KEYS]
    )
    logger.info(
        "Ranking complete: sample_size=%d total_keys=%d top_keys=%s",
        sample_size,
        total_keys,
        top,
    )
