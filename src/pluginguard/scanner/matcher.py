"""Lexical matching of catalog rules against a single file's text."""

from __future__ import annotations

from collections.abc import Iterable
from typing import NamedTuple

from pluginguard.rules.models import Confidence, Rule, Severity

# Pattern fragments that mean the rule looks for interpolated or concatenated input
_INTERPOLATION_TOKENS = (r"\$\{", r"\+")


class RawMatch(NamedTuple):
    rule: Rule
    offset: int
    text: str


def match(text: str, rules: Iterable[Rule]) -> list[RawMatch]:
    """Every non-overlapping occurrence of every rule, grouped by rule in catalog order."""
    matches: list[RawMatch] = []
    for rule in rules:
        for m in rule.regex.finditer(text):
            matches.append(RawMatch(rule, m.start(), m.group(0)))
    return matches


def locate(text: str, offset: int) -> tuple[int, int]:
    """1-based (line, column) of ``offset`` within ``text``."""
    line = text.count("\n", 0, offset) + 1
    # rfind gives -1 on the first line, which keeps the column 1-based
    column = offset - text.rfind("\n", 0, offset)
    return line, column


def line_at(text: str, offset: int) -> str:
    """The full source line containing ``offset``, without its line break."""
    start = text.rfind("\n", 0, offset) + 1
    end = text.find("\n", offset)
    if end == -1:
        end = len(text)
    return text[start:end].rstrip("\r")


def derive_confidence(rule: Rule) -> Confidence:
    if rule.severity == Severity.CRITICAL:
        return Confidence.HIGH
    if any(token in rule.pattern for token in _INTERPOLATION_TOKENS):
        return Confidence.HIGH
    if rule.severity == Severity.HIGH:
        return Confidence.MEDIUM
    return Confidence.LOW
