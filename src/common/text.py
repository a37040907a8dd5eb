"""Lightweight text helpers shared across modules."""
from __future__ import annotations

from typing import List


def fold_key(value: str) -> str:
    """Return the case-insensitive identity of a dimension key."""

    return value.strip().lower()


def split_list(spec: str, separator: str = ",") -> List[str]:
    """Split a delimited spec into trimmed, non-empty parts, keeping the first of case-insensitive duplicates."""

    if not spec or not spec.strip():
        return []
    out: List[str] = []
    seen = set()
    for part in spec.split(separator):
        value = part.strip()
        if not value:
            continue
        folded = value.lower()
        if folded in seen:
            continue
        seen.add(folded)
        out.append(value)
    return out
