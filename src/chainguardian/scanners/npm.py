"""npm dependency scanner.

Reads ``package-lock.json`` when present:

- Lockfile v2/v3: the ``packages`` map, keyed by install path
  (``node_modules/a/node_modules/b``). The root entry (``""``) and linked
  workspace entries without a version are skipped.
- Lockfile v1: the nested ``dependencies`` tree, walked depth-first.

Each entry's ``resolved`` URL becomes the package source and its
``integrity`` (SRI digest) becomes the package hash. Without a lockfile,
``package.json`` declared ranges are emitted as-is with the public registry
as source and no hash.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from chainguardian.core.inventory.models import Package
from chainguardian.exceptions import ScanFailure
from chainguardian.scanners.base import DependencyScanner

NPM_REGISTRY: str = "https://registry.npmjs.org"

_MANIFEST_SECTIONS = ("dependencies", "devDependencies", "optionalDependencies")


class NpmScanner(DependencyScanner):
    """Scanner for npm projects (``package-lock.json`` / ``package.json``)."""

    @property
    def ecosystem(self) -> str:
        return "npm"

    @property
    def markers(self) -> tuple[str, ...]:
        return ("package-lock.json", "package.json")

    def scan(self, path: Path) -> list[Package]:
        lock_path = path / "package-lock.json"
        if lock_path.is_file():
            return self._scan_lockfile(self._read_json(lock_path))
        return self._scan_manifest(self._read_json(path / "package.json"))

    # -- Lockfile -----------------------------------------------------------

    def _scan_lockfile(self, data: dict[str, Any]) -> list[Package]:
        packages_map = data.get("packages")
        if isinstance(packages_map, dict):
            return self._scan_packages_map(packages_map)
        deps = data.get("dependencies")
        if isinstance(deps, dict):
            out: list[Package] = []
            self._walk_v1(deps, out)
            return out
        if "packages" in data or "dependencies" in data:
            raise ScanFailure("package-lock.json has an unexpected layout", self.ecosystem)
        return []

    def _scan_packages_map(self, packages_map: dict[str, Any]) -> list[Package]:
        out: list[Package] = []
        for install_path, entry in packages_map.items():
            if not install_path or not isinstance(entry, dict):
                continue
            version = entry.get("version")
            if not version or entry.get("link"):
                continue
            name = entry.get("name") or install_path.rsplit("node_modules/", 1)[-1]
            out.append(self._package(str(name), str(version), entry))
        return out

    def _walk_v1(self, deps: dict[str, Any], out: list[Package]) -> None:
        for name, entry in deps.items():
            if not isinstance(entry, dict) or not entry.get("version"):
                continue
            out.append(self._package(name, str(entry["version"]), entry))
            nested = entry.get("dependencies")
            if isinstance(nested, dict):
                self._walk_v1(nested, out)

    def _package(self, name: str, version: str, entry: dict[str, Any]) -> Package:
        return Package(
            name=name,
            version=version,
            source=str(entry.get("resolved") or f"{NPM_REGISTRY}/{name}"),
            hash=str(entry.get("integrity") or ""),
            ecosystem=self.ecosystem,
        )

    # -- Manifest fallback --------------------------------------------------

    def _scan_manifest(self, data: dict[str, Any]) -> list[Package]:
        out: list[Package] = []
        for section in _MANIFEST_SECTIONS:
            deps = data.get(section) or {}
            if not isinstance(deps, dict):
                raise ScanFailure(f"package.json {section} must be an object", self.ecosystem)
            for name, spec in deps.items():
                out.append(Package(
                    name=name,
                    version=str(spec),
                    source=f"{NPM_REGISTRY}/{name}",
                    ecosystem=self.ecosystem,
                ))
        return out
