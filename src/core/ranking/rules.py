"""Keyword boost rules: built-in defaults plus operator-supplied overrides.

Operator specs come in two shapes:

* JSON object: ``{"(?i)^start": 4, "(?i)ok$": 1}``
* semicolon fragments: ``(?i)^foo=5;(?i)end$=2``

A bad entry is skipped with a warning; it never invalidates the rest of the
spec. Malformed JSON is re-read leniently as fragments separated by commas or
semicolons.
"""
from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from common.models import RankingConfiguration, RankRule

logger = logging.getLogger(__name__)

AL_PREFIX_PATTERN = "(?i)^al.*"

_DEFAULT_PATTERNS: Sequence[Tuple[str, float]] = (
    (r"(?i)^(request|operation|correlation|trace|span).*", 3.0),
    (r"(?i).*(status|result|outcome).*", 2.0),
    (r"(?i).*(error|exception|severity).*", 3.0),
    (r"(?i).*(duration|latency|elapsed).*", 2.0),
    (r"(?i).*(user|session|tenant|company|environment).*", 2.0),
    (r"(?i).*(id)$", 2.0),
)
_LENIENT_SPLIT = re.compile(r"[;,]")
_QUOTES = "\"'"


@dataclass(frozen=True, slots=True)
class RuleSpecIssue:
    """A rule spec entry that was skipped, and why."""

    fragment: str
    reason: str


def default_rank_rules() -> List[RankRule]:
    return [RankRule(pattern=re.compile(p), boost=boost) for p, boost in _DEFAULT_PATTERNS]


def build_rules(config: RankingConfiguration) -> Tuple[List[RankRule], float]:
    """Return the active rule set and the clamped AL minimum presence."""

    rules = default_rank_rules()
    spec = config.rule_spec.strip()
    if spec:
        rules.extend(parse_rank_rule_spec(spec))

    al_min_presence = config.effective_al_min_presence()
    if not any(_is_al_prefix_rule(rule) for rule in rules):
        rules.append(
            RankRule(
                pattern=re.compile(AL_PREFIX_PATTERN),
                boost=config.effective_al_boost(),
                presence_gated=True,
                source="al-prefix",
            )
        )
    return rules, al_min_presence


def parse_rank_rule_spec(spec: str) -> List[RankRule]:
    """Parse an operator rule spec, logging every skipped entry."""

    rules, issues = parse_rank_rule_spec_with_issues(spec)
    for issue in issues:
        logger.warning("Skipping rank rule %r: %s", issue.fragment, issue.reason)
    return rules


def parse_rank_rule_spec_with_issues(spec: str) -> Tuple[List[RankRule], List[RuleSpecIssue]]:
    spec = spec.strip()
    rules: List[RankRule] = []
    issues: List[RuleSpecIssue] = []
    if not spec:
        return rules, issues

    if spec.startswith("{"):
        try:
            payload = json.loads(spec)
        except ValueError as exc:
            issues.append(RuleSpecIssue(fragment=spec, reason=f"invalid JSON ({exc.msg}); reading leniently"))
            payload = None
        if isinstance(payload, dict):
            for pattern, boost in payload.items():
                _collect(rules, issues, f"{pattern}={boost}", pattern, boost)
            return rules, issues
        if payload is not None:
            issues.append(RuleSpecIssue(fragment=spec, reason="JSON spec must be an object; reading leniently"))
        inner = spec[1:]
        if inner.endswith("}"):
            inner = inner[:-1]
        for fragment in _LENIENT_SPLIT.split(inner):
            _parse_fragment(rules, issues, fragment, lenient=True)
        return rules, issues

    for fragment in spec.split(";"):
        _parse_fragment(rules, issues, fragment, lenient=False)
    return rules, issues


def _parse_fragment(rules: List[RankRule], issues: List[RuleSpecIssue], fragment: str, *, lenient: bool) -> None:
    part = fragment.strip()
    if not part:
        return
    if "=" in part:
        pattern, boost_text = part.split("=", 1)
    elif lenient and ":" in part:
        pattern, boost_text = part.rsplit(":", 1)
    else:
        issues.append(RuleSpecIssue(fragment=part, reason="expected pattern=boost"))
        return
    pattern = pattern.strip()
    if lenient:
        pattern = pattern.strip(_QUOTES).strip()
    _collect(rules, issues, part, pattern, boost_text.strip())


def _collect(
    rules: List[RankRule],
    issues: List[RuleSpecIssue],
    fragment: str,
    pattern: str,
    boost_value: object,
) -> None:
    if not pattern:
        issues.append(RuleSpecIssue(fragment=fragment, reason="empty pattern"))
        return
    boost = _parse_boost(boost_value)
    if boost is None:
        issues.append(RuleSpecIssue(fragment=fragment, reason=f"boost {boost_value!r} is not a number"))
        return
    try:
        compiled = re.compile(pattern)
    except re.error as exc:
        issues.append(RuleSpecIssue(fragment=fragment, reason=f"invalid pattern: {exc}"))
        return
    rules.append(RankRule(pattern=compiled, boost=boost, source="custom"))


def _parse_boost(value: object) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        if not value:
            return None
    elif not isinstance(value, (int, float)):
        return None
    try:
        boost = float(value)
    except ValueError:
        return None
    return boost if math.isfinite(boost) else None


def _is_al_prefix_rule(rule: RankRule) -> bool:
    if not rule.pattern.flags & re.IGNORECASE:
        return False
    text = rule.pattern.pattern
    if text.startswith("(?i)"):
        text = text[4:]
    if text.endswith(".*"):
        text = text[:-2]
    return text.lower() == "^al"
