"""Conversion of raw key counters into ranking scores."""
from __future__ import annotations

from typing import Dict, Iterable, Mapping

from common.models import KeyStatistics, RankingConfiguration, RankRule
from common.text import fold_key

SHORT_VALUE_MAX_LEN = 12
LONG_VALUE_MIN_LEN = 120
LOW_CARDINALITY_MAX = 5
TYPE_BIAS_STEP = 0.2


def compute_base_metrics(entry: KeyStatistics, distinct_cap: int, length_cap: int) -> None:
    entry.presence_rate = entry.non_empty / entry.occurrences
    entry.variability = min(1.0, entry.distinct_count / distinct_cap)
    entry.avg_length = entry.total_length / entry.non_empty if entry.non_empty else 0.0
    entry.length_ratio = min(1.0, entry.avg_length / length_cap)


def apply_type_biases(entry: KeyStatistics) -> None:
    """Accumulate type bias; the adjustments stack rather than exclude each other."""

    if entry.boolean_like:
        entry.type_bias += TYPE_BIAS_STEP
    if 1 <= entry.distinct_count <= LOW_CARDINALITY_MAX and entry.avg_length <= SHORT_VALUE_MAX_LEN:
        entry.type_bias += TYPE_BIAS_STEP
    if entry.avg_length >= LONG_VALUE_MIN_LEN:
        entry.type_bias -= TYPE_BIAS_STEP


def apply_rule_boosts(entry: KeyStatistics, rules: Iterable[RankRule], al_min_presence: float) -> None:
    """Add presence-scaled boosts for every rule matching the key.

    A rare key keeps only a fraction of its boost, so a keyword match cannot
    lift it above a broadly populated key. Presence-gated rules contribute
    nothing below ``al_min_presence``.
    """

    for rule in rules:
        if not rule.matches(entry.key):
            continue
        if rule.presence_gated and entry.presence_rate < al_min_presence:
            continue
        contribution = rule.boost * entry.presence_rate
        if contribution != 0:
            entry.keyword_boost += contribution
            entry.keyword_matches += 1


def score_stats(
    stats: Mapping[str, KeyStatistics],
    rules: Iterable[RankRule],
    config: RankingConfiguration,
    distinct_cap: int,
    length_cap: int,
    al_min_presence: float,
    pinned_map: Dict[str, int],
) -> None:
    rules = list(rules)
    for entry in stats.values():
        if entry.occurrences == 0:
            continue
        compute_base_metrics(entry, distinct_cap, length_cap)
        apply_type_biases(entry)
        apply_rule_boosts(entry, rules, al_min_presence)
        entry.score = (
            config.weight_presence * entry.presence_rate
            + config.weight_variability * (entry.variability * entry.presence_rate)
            + entry.keyword_boost
            + config.weight_length_penalty * entry.length_ratio
            + config.weight_type * entry.type_bias
        )
        entry.pinned = fold_key(entry.key) in pinned_map
