"""Maven dependency scanner for ``pom.xml``.

Emits the direct ``<dependencies>`` of the project POM as
``groupId:artifactId`` packages. ``${property}`` references are substituted
from ``<properties>`` plus ``project.version`` / ``project.groupId``.
Dependencies whose version is inherited (no ``<version>``) or references an
unknown property are skipped, since no concrete version can be assigned
without resolving the parent POM.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path

from chainguardian.core.inventory.models import Package
from chainguardian.exceptions import ScanFailure
from chainguardian.scanners.base import DependencyScanner

logger = logging.getLogger(__name__)

MAVEN_CENTRAL: str = "https://repo1.maven.org/maven2"

_PROPERTY_RE = re.compile(r"\$\{([^}]+)\}")


def _local(tag: str) -> str:
    """Strip the ``{namespace}`` prefix ElementTree puts on tags."""
    return tag.rsplit("}", 1)[-1]


def _child_text(element: ET.Element, name: str) -> str:
    for child in element:
        if _local(child.tag) == name:
            return (child.text or "").strip()
    return ""


def _child(element: ET.Element, name: str) -> ET.Element | None:
    for child in element:
        if _local(child.tag) == name:
            return child
    return None


class MavenScanner(DependencyScanner):
    """Scanner for Maven projects (``pom.xml``)."""

    @property
    def ecosystem(self) -> str:
        return "maven"

    @property
    def markers(self) -> tuple[str, ...]:
        return ("pom.xml",)

    def scan(self, path: Path) -> list[Package]:
        text = self._read_text(path / "pom.xml")
        try:
            root = ET.fromstring(text)
        except ET.ParseError as exc:
            raise ScanFailure(f"Malformed pom.xml: {exc}", self.ecosystem) from exc
        if _local(root.tag) != "project":
            raise ScanFailure("pom.xml root element is not <project>", self.ecosystem)

        properties = self._properties(root)
        deps = _child(root, "dependencies")
        if deps is None:
            return []

        out: list[Package] = []
        for dep in deps:
            if _local(dep.tag) != "dependency":
                continue
            group = self._substitute(_child_text(dep, "groupId"), properties)
            artifact = self._substitute(_child_text(dep, "artifactId"), properties)
            version = self._substitute(_child_text(dep, "version"), properties)
            if not group or not artifact:
                raise ScanFailure("<dependency> without groupId/artifactId", self.ecosystem)
            if not version or "${" in version:
                logger.debug("Skipping %s:%s with unresolved version", group, artifact)
                continue
            out.append(Package(
                name=f"{group}:{artifact}",
                version=version,
                source=f"{MAVEN_CENTRAL}/{group.replace('.', '/')}/{artifact}/{version}",
                ecosystem=self.ecosystem,
            ))
        return out

    @staticmethod
    def _properties(root: ET.Element) -> dict[str, str]:
        props: dict[str, str] = {}
        block = _child(root, "properties")
        if block is not None:
            for prop in block:
                props[_local(prop.tag)] = (prop.text or "").strip()
        version = _child_text(root, "version")
        group = _child_text(root, "groupId")
        if version:
            props["project.version"] = version
        if group:
            props["project.groupId"] = group
        return props

    @staticmethod
    def _substitute(value: str, properties: dict[str, str]) -> str:
        return _PROPERTY_RE.sub(lambda m: properties.get(m.group(1), m.group(0)), value)
