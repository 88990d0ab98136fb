"""Remediation guidance for findings."""

from pluginguard.fixes.suggester import FixSuggester, Recommendation, priority_for

__all__ = ["FixSuggester", "Recommendation", "priority_for"]
