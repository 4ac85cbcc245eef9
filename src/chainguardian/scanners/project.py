"""Project identity detection: the SBOM's project name and version.

Looks at the manifests the scanners understand, in the same priority order,
and falls back to the directory name with version ``0.0.0``. Unreadable or
malformed manifests are skipped here; the scanner reports them.
"""

from __future__ import annotations

import json
import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_VERSION: str = "0.0.0"

_PYPROJECT_NAME_RE = re.compile(r'^\s*name\s*=\s*["\']([^"\']+)["\']', re.MULTILINE)
_PYPROJECT_VERSION_RE = re.compile(r'^\s*version\s*=\s*["\']([^"\']+)["\']', re.MULTILINE)


def _from_package_json(path: Path) -> tuple[str, str] | None:
    manifest = path / "package.json"
    if not manifest.is_file():
        return None
    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return None
    if not isinstance(data, dict) or not data.get("name"):
        return None
    return str(data["name"]), str(data.get("version") or DEFAULT_VERSION)


def _from_pyproject(path: Path) -> tuple[str, str] | None:
    manifest = path / "pyproject.toml"
    if not manifest.is_file():
        return None
    try:
        text = manifest.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    # Only the [project] table; other tables also use "name =".
    _, found, section = text.partition("[project]")
    if not found:
        return None
    section = section.split("\n[", 1)[0]
    name = _PYPROJECT_NAME_RE.search(section)
    if name is None:
        return None
    version = _PYPROJECT_VERSION_RE.search(section)
    return name.group(1), version.group(1) if version else DEFAULT_VERSION


def _from_pom(path: Path) -> tuple[str, str] | None:
    manifest = path / "pom.xml"
    if not manifest.is_file():
        return None
    try:
        root = ET.fromstring(manifest.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ET.ParseError):
        return None
    values = {child.tag.rsplit("}", 1)[-1]: (child.text or "").strip() for child in root}
    if not values.get("artifactId"):
        return None
    return values["artifactId"], values.get("version") or DEFAULT_VERSION


def detect_project_metadata(path: Path) -> tuple[str, str]:
    """Return ``(project_name, project_version)`` for a project directory."""
    for probe in (_from_package_json, _from_pyproject, _from_pom):
        found = probe(path)
        if found is not None:
            logger.debug("Project identity from %s: %s@%s", probe.__name__, *found)
            return found
    return path.resolve().name or "project", DEFAULT_VERSION
