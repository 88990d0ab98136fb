"""Shared test fixtures."""

from __future__ import annotations

import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

# The three-file corpus used throughout: one eval, one SQL concatenation, one clean file
SAMPLE_CORPUS = {
    "a.js": "const result = eval(userInput);\n",
    "b.js": 'db.query("SELECT * FROM t WHERE id=" + id);\n',
    "c.js": "function add(a, b) {\n  return a + b;\n}\n",
}


def write_tree(root: Path, files: dict[str, str | bytes]) -> Path:
    """Write ``{relative_path: content}`` under ``root`` and return ``root``."""
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def extra_rules_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "extra_rules.yaml"


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[..., Path]:
    def _make(files: dict[str, str | bytes], name: str = "corpus") -> Path:
        return write_tree(tmp_path / name, files)

    return _make


@pytest.fixture
def sample_corpus(make_tree) -> Path:
    return make_tree(SAMPLE_CORPUS)


@pytest.fixture
def make_zip(tmp_path: Path) -> Callable[..., Path]:
    def _make(files: dict[str, str | bytes], name: str = "plugin.zip") -> Path:
        path = tmp_path / name
        with zipfile.ZipFile(path, "w") as zf:
            for member, content in files.items():
                zf.writestr(member, content)
        return path

    return _make
