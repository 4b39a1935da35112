#!/usr/bin/env python3
# SPDX-License-Identifier: BUSL-1.1
"""
detection_rules.py - Quiz scam detection rules

A rule set is two lists of predicates:
- selector rules run against transaction call data; any hit makes the
  called contract a candidate
- source rules run against verified source text; all must hold for the
  candidate to be recorded

Both are plain callables so new scam templates can be added without
touching the scanning loop.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Sequence

SelectorRule = Callable[[str], bool]
SourceRule = Callable[[str], bool]

# 4-byte selectors of the quiz contract template entry points
QUIZ_SCAM_SELECTORS = ("0xc76de3e9", "0x5f3d328e", "0x054f1b6a")

# Literal fragments of the template's verified source
QUIZ_SCAM_FINGERPRINTS = (
    "responseHash",
    "function Try(string",
    "function Start(",
    "isAdmin",
)


def selector_prefix(selector: str) -> SelectorRule:
    """Match call data starting with the given 4-byte selector (case-insensitive)."""
    prefix = selector.lower()

    def rule(call_data: str) -> bool:
        return (call_data or "").lower().startswith(prefix)

    rule.__name__ = f"selector_{prefix}"
    return rule


def source_contains(fragment: str) -> SourceRule:
    """Match source text containing the literal fragment (case-sensitive)."""

    def rule(source_code: str) -> bool:
        return fragment in source_code

    rule.__name__ = f"contains_{fragment!r}"
    return rule


@dataclass
class DetectionRules:
    name: str
    selector_rules: List[SelectorRule] = field(default_factory=list)
    source_rules: List[SourceRule] = field(default_factory=list)

    def matches_call_data(self, call_data: str) -> bool:
        return any(rule(call_data) for rule in self.selector_rules)

    def matches_source(self, source_code: str) -> bool:
        if not source_code or not self.source_rules:
            return False
        return all(rule(source_code) for rule in self.source_rules)


def build_rules(
    name: str, selectors: Sequence[str], fingerprints: Sequence[str]
) -> DetectionRules:
    return DetectionRules(
        name=name,
        selector_rules=[selector_prefix(s) for s in selectors],
        source_rules=[source_contains(f) for f in fingerprints],
    )


def quiz_scam_rules() -> DetectionRules:
    """Default rule set for the quiz honeypot template"""
    return build_rules("quiz_scam", QUIZ_SCAM_SELECTORS, QUIZ_SCAM_FINGERPRINTS)
