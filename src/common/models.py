"""Data models shared across the telemetry flattener, ranking engine, and CLI."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Set, Tuple

PRIMARY_HEADERS: Tuple[str, str] = ("timestamp", "message")
EVENT_ID_HEADER = "eventId"

DEFAULT_SAMPLE_SIZE = 200
DEFAULT_DISTINCT_CAP = 50
DEFAULT_LENGTH_CAP = 200
DEFAULT_AL_PREFIX_BOOST = 3.0


@dataclass(slots=True)
class Column:
    """Column descriptor as returned by the query transport."""

    name: str
    type: str = ""


class FieldGroup(IntEnum):
    STANDARD = 0
    CUSTOM = 1


@dataclass(slots=True)
class DetailField:
    """Normalized key/value pair flattened out of a dimensions value."""

    key: str
    value: str
    group: FieldGroup = FieldGroup.CUSTOM
    priority: int = 10  # lower renders first


@dataclass(slots=True)
class RowDetails:
    """Timestamp, message and ordered dimension fields extracted from one row."""

    timestamp: str = ""
    message: str = ""
    fields: List[DetailField] = field(default_factory=list)


@dataclass(slots=True)
class KeyStatistics:
    """Per-key counters collected over the sampled rows plus derived ranking metrics.

    Counters are mutated once per sampled row by the accumulator; the derived
    fields are filled once by the scorer and only read afterwards.
    """

    key: str
    occurrences: int = 0
    non_empty: int = 0
    distinct_values: Set[str] = field(default_factory=set)
    total_length: int = 0
    boolean_like: bool = False
    presence_rate: float = 0.0
    variability: float = 0.0
    avg_length: float = 0.0
    length_ratio: float = 0.0
    type_bias: float = 0.0
    keyword_boost: float = 0.0
    keyword_matches: int = 0
    score: float = 0.0
    pinned: bool = False

    @property
    def distinct_count(self) -> int:
        return len(self.distinct_values)


@dataclass(frozen=True, slots=True)
class RankRule:
    """Compiled keyword pattern adding a boost to matching keys."""

    pattern: re.Pattern
    boost: float
    presence_gated: bool = False
    source: str = "default"

    def matches(self, key: str) -> bool:
        return self.pattern.search(key) is not None


@dataclass(frozen=True, slots=True)
class RankingConfiguration:
    """Immutable per-call snapshot of the ranking settings."""

    enabled: bool = True
    sample_size: int = DEFAULT_SAMPLE_SIZE
    distinct_cap: int = DEFAULT_DISTINCT_CAP
    length_cap: int = DEFAULT_LENGTH_CAP
    weight_presence: float = 3.0
    weight_variability: float = 2.0
    weight_length_penalty: float = -1.0  # negative: long values rank later
    weight_type: float = 1.0
    al_prefix_boost: float = DEFAULT_AL_PREFIX_BOOST
    al_min_presence: float = 0.5
    rule_spec: str = ""
    pinned: str = ""

    def effective_sample_size(self) -> int:
        return self.sample_size if self.sample_size > 0 else DEFAULT_SAMPLE_SIZE

    def effective_caps(self) -> Tuple[int, int]:
        distinct_cap = self.distinct_cap if self.distinct_cap > 0 else DEFAULT_DISTINCT_CAP
        length_cap = self.length_cap if self.length_cap > 0 else DEFAULT_LENGTH_CAP
        return distinct_cap, length_cap

    def effective_al_boost(self) -> float:
        return self.al_prefix_boost if self.al_prefix_boost > 0 else DEFAULT_AL_PREFIX_BOOST

    def effective_al_min_presence(self) -> float:
        return min(1.0, max(0.0, self.al_min_presence))


@dataclass(slots=True)
class RankingResult:
    """Outcome of one scored ranking pass."""

    headers: List[str]
    ordered: List[KeyStatistics] = field(default_factory=list)
    sample_size: int = 0
    total_keys: int = 0
