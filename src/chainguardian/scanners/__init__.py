"""Ecosystem dependency scanners.

Scanners turn a project's manifest/lock state into a normalized ``Package``
sequence. The core only consumes their output, so new ecosystems plug in by
subclassing ``DependencyScanner`` and registering with a ``ScannerRegistry``.

Public API::

    from chainguardian.scanners import DependencyScanner, ScannerRegistry, default_registry
"""

from __future__ import annotations

from chainguardian.scanners.base import DependencyScanner
from chainguardian.scanners.maven import MavenScanner
from chainguardian.scanners.npm import NpmScanner
from chainguardian.scanners.project import detect_project_metadata
from chainguardian.scanners.python import PythonScanner
from chainguardian.scanners.registry import ScannerRegistry, default_registry

__all__ = [
    "DependencyScanner",
    "MavenScanner",
    "NpmScanner",
    "PythonScanner",
    "ScannerRegistry",
    "default_registry",
    "detect_project_metadata",
]
