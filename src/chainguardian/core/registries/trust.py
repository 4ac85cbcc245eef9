"""Trusted-source allowlist."""

from __future__ import annotations

from typing import Iterable

DEFAULT_TRUSTED_SOURCES: tuple[str, ...] = (
    "https://registry.npmjs.org",
    "https://pypi.org",
    "https://files.pythonhosted.org",
    "https://repo1.maven.org",
)


class TrustRegistry:
    """Immutable set of trusted source prefixes.

    A source is trusted iff it starts with at least one configured prefix.
    Matching is a plain case-sensitive prefix test, so
    ``https://registry.npmjs.org.evil.example`` still matches the npm prefix;
    configure prefixes with a trailing ``/`` where that matters.

    Args:
        prefixes: Trusted prefixes. Blank entries are ignored; order and
            duplicates do not affect results.
    """

    __slots__ = ("_prefixes",)

    def __init__(self, prefixes: Iterable[str] = DEFAULT_TRUSTED_SOURCES) -> None:
        cleaned = {p.strip() for p in prefixes if p and p.strip()}
        # str.startswith accepts a tuple; sorting keeps repr stable.
        self._prefixes: tuple[str, ...] = tuple(sorted(cleaned))

    @property
    def prefixes(self) -> tuple[str, ...]:
        return self._prefixes

    def is_trusted(self, source: str) -> bool:
        if not self._prefixes or not source:
            return False
        return source.startswith(self._prefixes)

    def __len__(self) -> int:
        return len(self._prefixes)

    def __repr__(self) -> str:
        return f"TrustRegistry({list(self._prefixes)!r})"
