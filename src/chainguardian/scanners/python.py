"""Python dependency scanner for pinned ``requirements.txt`` files.

Only exact pins (``name==version``) are emitted; ranges cannot be mapped to
a single version without resolution. Supported per-line options:

- ``--hash=sha256:<hex>`` -- the first hash becomes the package hash.
- Environment markers (``; python_version < "3.9"``) and extras
  (``name[extra]==1.0``) are accepted and ignored.
- A global ``--index-url`` / ``-i`` line changes the source prefix for all
  subsequent packages.

Line continuations (``\\``) are joined before parsing.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from chainguardian.core.inventory.models import Package
from chainguardian.scanners.base import DependencyScanner

logger = logging.getLogger(__name__)

PYPI_SIMPLE: str = "https://pypi.org/simple"

_PIN_RE = re.compile(
    r"^\s*(?P<name>[A-Za-z0-9][A-Za-z0-9._-]*)\s*(?:\[[^\]]*\])?\s*"
    r"===?\s*(?P<version>[A-Za-z0-9_.*+!-]+)"
)
_HASH_RE = re.compile(r"--hash[=\s]+(?P<hash>[A-Za-z0-9]+:[A-Fa-f0-9]+)")
_INDEX_RE = re.compile(r"^\s*(?:--index-url|-i)[=\s]+(?P<url>\S+)")


def _logical_lines(text: str) -> list[str]:
    lines: list[str] = []
    buffer = ""
    for raw in text.splitlines():
        stripped = raw.rstrip()
        if stripped.endswith("\\"):
            buffer += stripped[:-1] + " "
            continue
        lines.append(buffer + stripped)
        buffer = ""
    if buffer:
        lines.append(buffer)
    return lines


class PythonScanner(DependencyScanner):
    """Scanner for Python projects pinned in ``requirements.txt``."""

    @property
    def ecosystem(self) -> str:
        return "python"

    @property
    def markers(self) -> tuple[str, ...]:
        return ("requirements.txt",)

    def scan(self, path: Path) -> list[Package]:
        text = self._read_text(path / "requirements.txt")
        index = PYPI_SIMPLE
        out: list[Package] = []
        for line in _logical_lines(text):
            content = line.split(" #", 1)[0].strip()
            if not content or content.startswith("#"):
                continue
            index_match = _INDEX_RE.match(content)
            if index_match:
                index = index_match.group("url").rstrip("/")
                continue
            if content.startswith("-"):
                continue
            match = _PIN_RE.match(content)
            if match is None:
                logger.debug("Skipping unpinned requirement: %s", content)
                continue
            name = match.group("name").lower()
            hash_match = _HASH_RE.search(content)
            out.append(Package(
                name=name,
                version=match.group("version"),
                source=f"{index}/{name}",
                hash=hash_match.group("hash") if hash_match else "",
                ecosystem=self.ecosystem,
            ))
        return out
