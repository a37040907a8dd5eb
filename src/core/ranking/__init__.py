"""Dimension key discovery, scoring and header ordering."""

from .discovery import discover_canonical_keys
from .engine import compute_ranked_headers, rank_headers
from .fallback import build_fallback_headers
from .ordering import assemble_headers, build_pinned_map, parse_pinned_list, sort_stats
from .rules import RuleSpecIssue, build_rules, default_rank_rules, parse_rank_rule_spec
from .sampler import select_sample

__all__ = [
    "RuleSpecIssue",
    "assemble_headers",
    "build_fallback_headers",
    "build_pinned_map",
    "build_rules",
    "compute_ranked_headers",
    "default_rank_rules",
    "discover_canonical_keys",
    "parse_pinned_list",
    "parse_rank_rule_spec",
    "rank_headers",
    "select_sample",
    "sort_stats",
]
