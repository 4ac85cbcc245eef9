"""Base interface for ecosystem dependency scanners.

Every scanner implements the ``DependencyScanner`` abstract base class,
which provides two methods:

- ``detect(path)`` -- Probe a project directory for this ecosystem's
  manifest markers. Must be cheap: file existence checks only.
- ``scan(path)`` -- Convert the manifest/lock state into a flat, ordered
  list of ``Package`` records.

Scanners read files only. They never invoke package-manager tooling and
never download anything; resolution is assumed to have happened already
(lockfiles) or versions are taken as declared (manifests).
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from chainguardian.core.inventory.models import Package
from chainguardian.exceptions import ScanFailure

logger = logging.getLogger(__name__)


class DependencyScanner(ABC):
    """Abstract base class for ecosystem dependency scanners."""

    @property
    @abstractmethod
    def ecosystem(self) -> str:
        """Ecosystem identifier stamped on every emitted package (e.g. ``"npm"``)."""

    @property
    @abstractmethod
    def markers(self) -> tuple[str, ...]:
        """Manifest filenames whose presence marks this ecosystem."""

    def detect(self, path: Path) -> bool:
        """Return True if any marker file exists directly under ``path``."""
        return any((path / marker).is_file() for marker in self.markers)

    @abstractmethod
    def scan(self, path: Path) -> list[Package]:
        """Extract dependencies in manifest order.

        Raises:
            ScanFailure: If a manifest is unreadable or malformed.
        """

    # -- Shared helpers for subclasses --------------------------------------

    def _read_text(self, file_path: Path) -> str:
        try:
            return file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ScanFailure(f"Cannot read {file_path.name}: {exc}", self.ecosystem) from exc

    def _read_json(self, file_path: Path) -> dict[str, Any]:
        text = self._read_text(file_path)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ScanFailure(
                f"Malformed JSON in {file_path.name}: {exc}", self.ecosystem
            ) from exc
        if not isinstance(data, dict):
            raise ScanFailure(f"{file_path.name} is not a JSON object", self.ecosystem)
        return data
