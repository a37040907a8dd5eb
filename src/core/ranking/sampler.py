"""Deterministic prefix sampling of query rows."""
from __future__ import annotations

from typing import Any, List, Sequence, Tuple

from common.models import DEFAULT_SAMPLE_SIZE


def select_sample(rows: Sequence[Sequence[Any]], sample_size: int) -> Tuple[List[Sequence[Any]], int]:
    """Return the first ``sample_size`` rows and how many were taken.

    This is a prefix sample, not a random one: the same rows are inspected on
    every call.
    """

    desired = sample_size if sample_size > 0 else DEFAULT_SAMPLE_SIZE
    desired = min(desired, len(rows))
    return list(rows[:desired]), desired
