"""Best-effort project metadata from common manifest files."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from pluginguard.sources.base import SubjectMetadata

logger = logging.getLogger(__name__)

_SETUP_NAME = re.compile(r"""name\s*=\s*['"]([^'"]+)['"]""")
_SETUP_VERSION = re.compile(r"""version\s*=\s*['"]([^'"]+)['"]""")


def extract_metadata(root: str | Path) -> SubjectMetadata:
    """Merge package.json, composer.json and setup.py; first file to set a field wins."""
    root = Path(root)
    fields: dict[str, str | None] = dict.fromkeys(
        ("name", "version", "description", "author", "license")
    )

    package = _read_json(root / "package.json")
    if package:
        _fill(fields, "name", package.get("name"))
        _fill(fields, "version", package.get("version"))
        _fill(fields, "description", package.get("description"))
        _fill(fields, "author", _author(package.get("author")))
        _fill(fields, "license", package.get("license"))

    composer = _read_json(root / "composer.json")
    if composer:
        _fill(fields, "name", composer.get("name"))
        _fill(fields, "version", composer.get("version"))
        _fill(fields, "description", composer.get("description"))
        authors = composer.get("authors")
        if isinstance(authors, list) and authors:
            _fill(fields, "author", _author(authors[0]))
        _fill(fields, "license", composer.get("license"))

    setup_py = root / "setup.py"
    if setup_py.is_file():
        try:
            content = setup_py.read_text(encoding="utf-8")
        except (OSError, ValueError) as e:
            logger.debug("Cannot read %s: %s", setup_py, e)
        else:
            name = _SETUP_NAME.search(content)
            version = _SETUP_VERSION.search(content)
            _fill(fields, "name", name.group(1) if name else None)
            _fill(fields, "version", version.group(1) if version else None)

    return SubjectMetadata(**fields)


def _read_json(path: Path) -> dict[str, Any] | None:
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug("Ignoring unreadable manifest %s: %s", path, e)
        return None
    return data if isinstance(data, dict) else None


def _author(value: Any) -> str | None:
    if isinstance(value, dict):
        value = value.get("name")
    return value if isinstance(value, str) else None


def _fill(fields: dict[str, str | None], key: str, value: Any) -> None:
    if fields[key] is None and value is not None and not isinstance(value, (dict, list)):
        fields[key] = str(value)
