"""Detection rules and the catalog that holds them."""

from pluginguard.rules.catalog import RuleCatalog, load_rules_file
from pluginguard.rules.models import Confidence, Rule, Severity

__all__ = ["Confidence", "Rule", "RuleCatalog", "Severity", "load_rules_file"]
