from __future__ import annotations

import re

import pytest

from common.models import Column, KeyStatistics, RankingConfiguration, RankRule
from core.ranking.scoring import apply_rule_boosts, apply_type_biases, compute_base_metrics, score_stats
from core.ranking.stats import SCRATCH_RESET_THRESHOLD, accumulate_stats, init_key_stats


def _cols() -> list[Column]:
    return [Column("timestamp"), Column("message"), Column("customDimensions")]


def _row(dims) -> list:
    return ["2025-01-01T00:00:00Z", "m", dims]


def test_accumulate_counts_every_sampled_row() -> None:
    keys = ["Flag", "name", "missing"]
    stats = init_key_stats(keys)
    sample = [
        _row({"flag": True, "name": "a"}),
        _row({"Flag": False, "name": ""}),
        _row({"name": "a"}),
    ]
    accumulate_stats(stats, keys, _cols(), sample, distinct_cap=50)

    assert all(entry.occurrences == 3 for entry in stats.values())
    assert stats["Flag"].non_empty == 2
    assert stats["Flag"].boolean_like is True
    assert stats["Flag"].distinct_values == {"true", "false"}
    assert stats["name"].non_empty == 2
    assert stats["name"].distinct_values == {"a"}
    assert stats["name"].total_length == 2
    assert stats["missing"].non_empty == 0


def test_distinct_values_respect_cap() -> None:
    keys = ["counter"]
    stats = init_key_stats(keys)
    sample = [_row({"counter": i}) for i in range(30)]
    accumulate_stats(stats, keys, _cols(), sample, distinct_cap=7)
    assert stats["counter"].distinct_count == 7
    assert stats["counter"].non_empty == 30


def test_scratch_values_do_not_leak_between_rows() -> None:
    keys = ["target"]
    stats = init_key_stats(keys)
    wide = {f"z{i}": i for i in range(SCRATCH_RESET_THRESHOLD + 10)}
    wide["target"] = "x"
    sample = [_row(wide), _row({"other": 1})]
    accumulate_stats(stats, keys, _cols(), sample, distinct_cap=50)
    assert stats["target"].non_empty == 1


def test_scratch_recreated_past_threshold_keeps_counts(monkeypatch) -> None:
    monkeypatch.setattr("core.ranking.stats.SCRATCH_RESET_THRESHOLD", 1)
    keys = ["target", "zWide"]
    stats = init_key_stats(keys)
    sample = [
        _row({"target": "a", "zWide": "w", "zExtra": 1}),
        _row({}),
        _row({"target": "bb"}),
        _row({"other": 1}),
    ]
    accumulate_stats(stats, keys, _cols(), sample, distinct_cap=50)
    assert stats["target"].occurrences == 4
    assert stats["target"].non_empty == 2
    assert stats["target"].distinct_values == {"a", "bb"}
    assert stats["target"].total_length == 3
    assert stats["zWide"].non_empty == 1


def test_base_metrics_are_bounded() -> None:
    entry = KeyStatistics(key="k", occurrences=10, non_empty=5, total_length=5000)
    entry.distinct_values.update(str(i) for i in range(80))
    compute_base_metrics(entry, distinct_cap=50, length_cap=200)
    assert entry.presence_rate == 0.5
    assert entry.variability == 1.0
    assert entry.avg_length == 1000.0
    assert entry.length_ratio == 1.0


def test_base_metrics_without_values() -> None:
    entry = KeyStatistics(key="k", occurrences=4)
    compute_base_metrics(entry, distinct_cap=50, length_cap=200)
    assert entry.presence_rate == 0.0
    assert entry.avg_length == 0.0
    assert entry.length_ratio == 0.0


def test_type_biases_stack() -> None:
    short_bool = KeyStatistics(key="b", boolean_like=True, avg_length=4.5, distinct_values={"true", "false"})
    apply_type_biases(short_bool)
    assert short_bool.type_bias == pytest.approx(0.4)

    long_text = KeyStatistics(key="t", avg_length=150.0, distinct_values={"x"})
    apply_type_biases(long_text)
    assert long_text.type_bias == pytest.approx(-0.2)


def test_rule_boost_scales_with_presence() -> None:
    rule = RankRule(pattern=re.compile("(?i)error"), boost=3.0)
    entry = KeyStatistics(key="errorCount", presence_rate=0.25)
    apply_rule_boosts(entry, [rule], al_min_presence=0.5)
    assert entry.keyword_boost == pytest.approx(0.75)
    assert entry.keyword_matches == 1


def test_presence_gated_rule_zeroed_below_threshold() -> None:
    rule = RankRule(pattern=re.compile("(?i)^al.*"), boost=3.0, presence_gated=True)
    rare = KeyStatistics(key="alRare", presence_rate=0.4)
    apply_rule_boosts(rare, [rule], al_min_presence=0.5)
    assert rare.keyword_boost == 0.0
    assert rare.keyword_matches == 0

    exact = KeyStatistics(key="alHalf", presence_rate=0.5)
    apply_rule_boosts(exact, [rule], al_min_presence=0.5)
    assert exact.keyword_boost == pytest.approx(1.5)


def test_score_combines_weighted_terms() -> None:
    config = RankingConfiguration(
        weight_presence=2.0,
        weight_variability=1.0,
        weight_length_penalty=-1.0,
        weight_type=0.5,
    )
    entry = KeyStatistics(key="plain", occurrences=4, non_empty=2, total_length=20)
    entry.distinct_values.update({"aaaaaaaaaa", "bbbbbbbbbb"})
    stats = {"plain": entry}
    score_stats(stats, [], config, 10, 100, 0.5, {"plain": 0})

    # presence 0.5, variability 0.2, length ratio 0.1, type bias 0.2
    assert entry.score == pytest.approx(2.0 * 0.5 + 1.0 * 0.2 * 0.5 - 0.1 + 0.5 * 0.2)
    assert entry.pinned is True
