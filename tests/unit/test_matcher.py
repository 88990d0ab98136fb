"""Tests for rule matching, location and confidence."""

from __future__ import annotations

import pytest

from pluginguard.rules.catalog import RuleCatalog, build_rule
from pluginguard.rules.models import Confidence
from pluginguard.scanner.matcher import derive_confidence, line_at, locate, match

# One line per built-in rule that the rule matches exactly once
RULE_SAMPLES = {
    "eval-usage": "run(eval(code));",
    "js-sql-injection": "db.query(`SELECT * FROM u WHERE id=${id}`);",
    "js-command-injection": "exec(`ls ${dir}`);",
    "js-path-traversal": 'fs.readFile("../" + name);',
    "js-xss-innerhtml": 'el.innerHTML = "<b>" + name;',
    "js-weak-crypto": "const h = md5(data);",
    "js-hardcoded-secrets": 'const password = "hunter2hunter2";',
    "js-insecure-random": "const n = Math.random();",
    "js-prototype-pollution": "obj.__proto__.isAdmin = true;",
    "js-regex-dos": 'const re = new RegExp("(a*)*b");',
    "php-sql-injection": "mysqli_query($conn, \"SELECT * FROM u WHERE id=\" . $_GET['id']);",
    "php-file-inclusion": "include($_GET['page']);",
    "python-sql-injection": 'cursor.execute("SELECT * FROM t WHERE id = %s" % uid)',
    "python-command-injection": 'os.system("ls " + input("dir"))',
    "generic-debug-info": 'console.log("password", pw);',
    "generic-http-urls": 'fetch("http://example.com/api");',
}

FILLER = "const ok = 1;"


@pytest.fixture(scope="module")
def catalog() -> RuleCatalog:
    return RuleCatalog.default()


def test_every_builtin_rule_has_a_sample(catalog):
    assert set(RULE_SAMPLES) == {r.id for r in catalog}


@pytest.mark.parametrize("rule_id", sorted(RULE_SAMPLES))
@pytest.mark.parametrize("k", [0, 1, 3])
def test_k_occurrences_give_k_matches(catalog, rule_id, k):
    rule = catalog.get(rule_id)
    sample = RULE_SAMPLES[rule_id]
    text = "\n".join([FILLER] + [sample, FILLER] * k) + "\n"

    hits = [m for m in match(text, catalog.rules()) if m.rule.id == rule_id]

    assert len(hits) == k
    expected_column = rule.regex.search(sample).start() + 1
    for i, hit in enumerate(hits):
        assert locate(text, hit.offset) == (2 + 2 * i, expected_column)
        assert line_at(text, hit.offset) == sample


class TestMatch:
    def test_clean_text(self, catalog):
        assert match("function add(a, b) {\n  return a + b;\n}\n", catalog.rules()) == []

    def test_grouped_by_rule_in_catalog_order(self, catalog):
        text = "fetch('http://x.org');\neval(a);\n"
        ids = [m.rule.id for m in match(text, catalog.rules())]
        assert ids == ["eval-usage", "generic-http-urls"]

    def test_several_on_one_line(self, catalog):
        text = "a = 1\nx = eval(a)\n  eval (b); eval(c)\n"
        hits = [m for m in match(text, catalog.rules()) if m.rule.id == "eval-usage"]
        assert [locate(text, m.offset) for m in hits] == [(2, 5), (3, 3), (3, 13)]

    def test_case_insensitive(self, catalog):
        hits = match("EVAL(x)", catalog.rules())
        assert [m.rule.id for m in hits] == ["eval-usage"]

    def test_word_boundary(self, catalog):
        assert match("retrieval(x); medieval (y);", catalog.rules()) == []


class TestLocate:
    def test_first_character(self):
        assert locate("eval(x)", 0) == (1, 1)

    def test_after_line_break(self):
        text = "one\ntwo\nthree"
        assert locate(text, text.index("three")) == (3, 1)
        assert locate(text, text.index("wo")) == (2, 2)

    def test_line_at_strips_carriage_return(self):
        text = "first\r\nsecond\r\n"
        assert line_at(text, text.index("second")) == "second"
        assert line_at(text, 2) == "first"


class TestDeriveConfidence:
    def _rule(self, severity, pattern=r"foo\("):
        return build_rule(
            {
                "id": "r",
                "pattern": pattern,
                "severity": severity,
                "category": "c",
                "title": "t",
                "description": "d",
            }
        )

    def test_critical_is_high(self):
        assert derive_confidence(self._rule("critical")) == Confidence.HIGH

    def test_interpolation_is_high(self):
        assert derive_confidence(self._rule("low", r"x\$\{y")) == Confidence.HIGH
        assert derive_confidence(self._rule("medium", r"a\s*\+")) == Confidence.HIGH

    def test_high_is_medium(self):
        assert derive_confidence(self._rule("high")) == Confidence.MEDIUM

    def test_otherwise_low(self):
        assert derive_confidence(self._rule("medium")) == Confidence.LOW
        assert derive_confidence(self._rule("info")) == Confidence.LOW
