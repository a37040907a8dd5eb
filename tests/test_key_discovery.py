from __future__ import annotations

from common.models import Column
from core.ranking import discover_canonical_keys, select_sample


def _cols() -> list[Column]:
    return [Column("timestamp"), Column("message"), Column("customDimensions")]


def test_discovery_keeps_first_seen_casing_and_order() -> None:
    rows = [
        ["t", "m", {"Zeta": 1, "alpha": 2}],
        ["t", "m", {"ALPHA": 3, "beta": 4}],
        ["t", "m", '{"zeta": 5, "gamma": 6}'],
    ]
    assert discover_canonical_keys(_cols(), rows) == ["alpha", "Zeta", "beta", "gamma"]


def test_discovery_without_dimensions_column() -> None:
    cols = [Column("timestamp"), Column("message")]
    assert discover_canonical_keys(cols, [["t", "m"]]) == []


def test_discovery_never_stringifies_primary_columns() -> None:
    class Exploding:
        def __str__(self) -> str:
            raise RuntimeError("boom")

    rows = [[Exploding(), Exploding(), {"key": 1}]]
    assert discover_canonical_keys(_cols(), rows) == ["key"]


def test_discovery_includes_parse_warning_fields() -> None:
    rows = [["t", "m", "{broken"]]
    assert discover_canonical_keys(_cols(), rows) == ["(parse_warning)", "raw"]


def test_sample_is_a_prefix() -> None:
    rows = [[i] for i in range(10)]
    sample, used = select_sample(rows, 3)
    assert used == 3
    assert sample == [[0], [1], [2]]


def test_sample_defaults_when_size_not_positive() -> None:
    rows = [[i] for i in range(250)]
    sample, used = select_sample(rows, 0)
    assert used == 200
    assert sample[-1] == [199]
    _, used = select_sample(rows[:5], -1)
    assert used == 5
