"""Built-in rule table and the immutable catalog built from it."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

import yaml

from pluginguard.errors import RuleLoadError
from pluginguard.rules.models import Rule, Severity

logger = logging.getLogger(__name__)

_INJECTION = "A03:2021 – Injection"
_ACCESS_CONTROL = "A01:2021 – Broken Access Control"
_CRYPTO = "A02:2021 – Cryptographic Failures"
_AUTH = "A07:2021 – Identification and Authentication Failures"
_INTEGRITY = "A08:2021 – Software and Data Integrity Failures"
_COMPONENTS = "A06:2021 – Vulnerable and Outdated Components"
_LOGGING = "A09:2021 – Security Logging and Monitoring Failures"

# Order matters: it breaks ties when several rules hit the same location.
BUILTIN_RULES: list[dict[str, Any]] = [
    # Systemic patterns, valid in every supported language
    {
        "id": "eval-usage",
        "pattern": r"\beval\s*\(",
        "severity": "critical",
        "category": "Code Injection",
        "title": "Dangerous eval() Usage",
        "description": "Use of eval() can lead to code injection and arbitrary code execution",
        "cwe": "CWE-95",
        "owasp": _INJECTION,
        "suggested_fix": "Replace eval() with a parser for the expected data format",
    },
    # Script-language (JavaScript / TypeScript) injection
    {
        "id": "js-sql-injection",
        "pattern": (
            r"""(?:query|execute|exec)\s*\(\s*"""
            r"""(?:[`"'].*?\$\{.*?\}.*?[`"']|[`"'][^`"'\n]*[`"']\s*\+)"""
        ),
        "severity": "critical",
        "category": "SQL Injection",
        "title": "Potential SQL Injection",
        "description": "Dynamic SQL query construction detected",
        "cwe": "CWE-89",
        "owasp": _INJECTION,
        "suggested_fix": (
            "Use parameterized queries or prepared statements instead of "
            "string concatenation"
        ),
    },
    {
        "id": "js-command-injection",
        "pattern": r"""(?:exec|spawn|execSync|spawnSync)\s*\(\s*[`"'].*?\$\{.*?\}.*?[`"']""",
        "severity": "critical",
        "category": "Command Injection",
        "title": "Command Injection Risk",
        "description": "Dynamic command execution with user input detected",
        "cwe": "CWE-78",
        "owasp": _INJECTION,
        "suggested_fix": (
            "Validate and sanitize input, use execFile() with argument arrays "
            "instead of shell commands"
        ),
    },
    {
        "id": "js-path-traversal",
        "pattern": r"(?:readFile|writeFile|unlink|rmdir|mkdir)\s*\([^)]*\.\./",
        "severity": "high",
        "category": "Path Traversal",
        "title": "Path Traversal Vulnerability",
        "description": "Potential directory traversal attack detected",
        "cwe": "CWE-22",
        "owasp": _ACCESS_CONTROL,
        "suggested_fix": (
            "Validate file paths and use path.resolve() to prevent directory traversal"
        ),
    },
    {
        "id": "js-xss-innerhtml",
        "pattern": r"\.innerHTML\s*=\s*[^;]+(?:\+|`|\$\{)",
        "severity": "high",
        "category": "Cross-Site Scripting (XSS)",
        "title": "XSS via innerHTML",
        "description": "Dynamic content assignment to innerHTML can lead to XSS",
        "cwe": "CWE-79",
        "owasp": _INJECTION,
        "suggested_fix": "Use textContent instead of innerHTML or sanitize HTML content",
    },
    {
        "id": "js-weak-crypto",
        "pattern": r"\b(?:md5|sha1|des|rc4)\s*\(",
        "severity": "medium",
        "category": "Weak Cryptography",
        "title": "Weak Cryptographic Algorithm",
        "description": "Use of weak or deprecated cryptographic algorithms",
        "cwe": "CWE-327",
        "owasp": _CRYPTO,
        "suggested_fix": "Use stronger algorithms like SHA-256, SHA-3, or AES for encryption",
    },
    {
        "id": "js-hardcoded-secrets",
        "pattern": r"""(?:password|secret|key|token|api_key)\s*[:=]\s*[`"'][^`"'\s]{8,}[`"']""",
        "severity": "high",
        "category": "Information Disclosure",
        "title": "Hardcoded Secrets",
        "description": "Potential hardcoded credentials or secrets detected",
        "cwe": "CWE-798",
        "owasp": _AUTH,
        "suggested_fix": "Use environment variables or secure key management systems",
    },
    {
        "id": "js-insecure-random",
        "pattern": r"Math\.random\(\)",
        "severity": "low",
        "category": "Weak Randomness",
        "title": "Insecure Random Number Generation",
        "description": "Math.random() is not cryptographically secure",
        "cwe": "CWE-338",
        "owasp": _CRYPTO,
        "suggested_fix": (
            "Use crypto.randomBytes() or crypto.getRandomValues() for "
            "security-sensitive operations"
        ),
    },
    {
        "id": "js-prototype-pollution",
        "pattern": r"\[.*?__proto__.*?\]|\.__proto__",
        "severity": "high",
        "category": "Prototype Pollution",
        "title": "Prototype Pollution Risk",
        "description": "Direct manipulation of __proto__ detected",
        "cwe": "CWE-1321",
        "owasp": _INTEGRITY,
        "suggested_fix": (
            "Avoid direct prototype manipulation, use Object.create() or Map "
            "for dynamic properties"
        ),
    },
    {
        "id": "js-regex-dos",
        "pattern": r"new RegExp\([^)]*\*.*?\*|new RegExp\([^)]*\+.*?\+",
        "severity": "medium",
        "category": "Regular Expression DoS",
        "title": "ReDoS Vulnerability",
        "description": "Regular expression with potential catastrophic backtracking",
        "cwe": "CWE-1333",
        "owasp": _COMPONENTS,
        "suggested_fix": "Optimize regex patterns to avoid excessive backtracking",
    },
    # Template-language (PHP) injection
    {
        "id": "php-sql-injection",
        "pattern": r"(?:mysql_query|mysqli_query|query)\s*\([^)]*\$_(?:GET|POST|REQUEST)",
        "severity": "critical",
        "category": "SQL Injection",
        "title": "SQL Injection Vulnerability",
        "description": "Direct use of user input in SQL queries",
        "cwe": "CWE-89",
        "owasp": _INJECTION,
    },
    {
        "id": "php-file-inclusion",
        "pattern": (
            r"(?:include|require|include_once|require_once)\s*\([^)]*"
            r"\$_(?:GET|POST|REQUEST)"
        ),
        "severity": "critical",
        "category": "File Inclusion",
        "title": "File Inclusion Vulnerability",
        "description": "Dynamic file inclusion with user input",
        "cwe": "CWE-98",
        "owasp": _INJECTION,
    },
    # Python
    {
        "id": "python-sql-injection",
        "pattern": r"(?:execute|executemany)\s*\([^)]*%s[^)]*%",
        "severity": "critical",
        "category": "SQL Injection",
        "title": "SQL Injection via String Formatting",
        "description": "String formatting in SQL queries can lead to injection",
        "cwe": "CWE-89",
        "owasp": _INJECTION,
    },
    {
        "id": "python-command-injection",
        "pattern": r"(?:os\.system|subprocess\.call|subprocess\.run)\s*\([^)]*input\(",
        "severity": "critical",
        "category": "Command Injection",
        "title": "Command Injection Risk",
        "description": "Direct use of user input in system commands",
        "cwe": "CWE-78",
        "owasp": _INJECTION,
    },
    # Generic
    {
        "id": "generic-debug-info",
        "pattern": (
            r"(?:console\.log|print|echo|var_dump|debug)\s*\([^)]*"
            r"(?:password|secret|token|key)"
        ),
        "severity": "medium",
        "category": "Information Disclosure",
        "title": "Sensitive Information in Debug Output",
        "description": "Sensitive data might be exposed in debug output",
        "cwe": "CWE-200",
        "owasp": _LOGGING,
    },
    {
        "id": "generic-http-urls",
        "pattern": r"http://(?!localhost|127\.0\.0\.1|0\.0\.0\.0)",
        "severity": "low",
        "category": "Insecure Communication",
        "title": "Insecure HTTP URL",
        "description": "HTTP URLs can be intercepted and modified",
        "cwe": "CWE-319",
        "owasp": _CRYPTO,
    },
]

_REQUIRED_FIELDS = ("id", "pattern", "severity", "category", "title", "description")


def build_rule(data: dict[str, Any]) -> Rule:
    """Turn one rule mapping into a compiled Rule."""
    missing = [name for name in _REQUIRED_FIELDS if not data.get(name)]
    rule_id = data.get("id")
    if missing:
        raise RuleLoadError(
            f"Rule {rule_id or '<unnamed>'} is missing: {', '.join(missing)}",
            rule_id=rule_id,
        )

    try:
        severity = Severity(str(data["severity"]).lower())
    except ValueError:
        raise RuleLoadError(
            f"Rule {rule_id} has unknown severity {data['severity']!r}",
            rule_id=rule_id,
        ) from None

    references = data.get("references") or ()
    if isinstance(references, str):
        references = (references,)

    try:
        return Rule(
            id=str(rule_id),
            pattern=str(data["pattern"]),
            severity=severity,
            category=str(data["category"]),
            title=str(data["title"]),
            description=str(data["description"]),
            cwe=data.get("cwe"),
            owasp=data.get("owasp"),
            suggested_fix=data.get("suggested_fix"),
            references=tuple(str(r) for r in references),
        )
    except re.error as e:
        raise RuleLoadError(
            f"Rule {rule_id} has an invalid pattern: {e}", rule_id=rule_id
        ) from e


def load_rules_file(path: str | Path) -> list[Rule]:
    """Load extra rules from a YAML file with a top-level ``rules`` list."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise RuleLoadError(f"Cannot read rule file {path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise RuleLoadError(f"Rule file {path} is not valid YAML: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("rules"), list):
        raise RuleLoadError(f"Rule file {path} must be a mapping with a 'rules' list")

    rules: list[Rule] = []
    for entry in data["rules"]:
        if not isinstance(entry, dict):
            raise RuleLoadError(f"Rule file {path} contains a non-mapping rule entry")
        rules.append(build_rule(entry))
    logger.debug("Loaded %d rules from %s", len(rules), path)
    return rules


class RuleCatalog:
    """Ordered, immutable set of detection rules."""

    def __init__(self, rules: Iterable[Rule]) -> None:
        self._rules = tuple(rules)
        self._index: dict[str, int] = {}
        for position, rule in enumerate(self._rules):
            if rule.id in self._index:
                raise RuleLoadError(f"Duplicate rule id: {rule.id}", rule_id=rule.id)
            self._index[rule.id] = position

    @classmethod
    def default(cls, extra_files: Iterable[str | Path] = ()) -> RuleCatalog:
        """The built-in rules followed by rules from any extra YAML files."""
        rules = [build_rule(data) for data in BUILTIN_RULES]
        for path in extra_files:
            rules.extend(load_rules_file(path))
        return cls(rules)

    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def get(self, rule_id: str) -> Rule | None:
        position = self._index.get(rule_id)
        return self._rules[position] if position is not None else None

    def index_of(self, rule_id: str) -> int:
        """Catalog position of a rule; unknown ids sort after every known rule."""
        return self._index.get(rule_id, len(self._rules))

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._index
