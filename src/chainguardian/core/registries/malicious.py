"""Known-malicious content hash registry."""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Mapping

_HEX_RE = re.compile(r"[0-9a-fA-F]+")

# md5, sha1, sha256, sha384, sha512 hex lengths.
_BARE_HEX_LENGTHS = frozenset({32, 40, 64, 96, 128})


def normalize_hash(value: str) -> str:
    """Normalize a content digest for lookup.

    Only hex digests are case-folded: ``algo:hex`` forms, and bare hex
    strings of a known digest length. Everything else, including SRI
    digests (``sha512-<base64>``), is only trimmed because base64 is
    case-sensitive.
    """
    value = value.strip()
    algo, sep, digest = value.partition(":")
    if sep and algo.isalnum() and _HEX_RE.fullmatch(digest):
        return f"{algo.lower()}:{digest.lower()}"
    if len(value) in _BARE_HEX_LENGTHS and _HEX_RE.fullmatch(value):
        return value.lower()
    return value


class MaliciousHashRegistry:
    """Immutable mapping of content hash to a human-readable reason.

    Args:
        entries: ``hash -> reason`` pairs.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, str] | None = None) -> None:
        normalized = {
            normalize_hash(h): str(reason)
            for h, reason in (entries or {}).items()
            if h and h.strip()
        }
        self._entries: Mapping[str, str] = MappingProxyType(normalized)

    def reason_for(self, content_hash: str) -> str | None:
        """Return why ``content_hash`` is malicious, or ``None`` if not registered."""
        if not content_hash:
            return None
        return self._entries.get(normalize_hash(content_hash))

    def __contains__(self, content_hash: object) -> bool:
        return isinstance(content_hash, str) and self.reason_for(content_hash) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def items(self) -> list[tuple[str, str]]:
        return sorted(self._entries.items())
