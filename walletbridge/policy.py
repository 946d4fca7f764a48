"""Method allow-list policy."""

from __future__ import annotations

import fnmatch
from collections.abc import Iterable

import msgspec

from .config.const import ALLOWED_METHOD_WILDCARD


def normalise_allowed_methods(methods: Iterable[str]) -> tuple[str, ...]:
    """Return a deduplicated allow-list preserving order; ``*`` wins outright."""
    seen: set[str] = set()
    normalised: list[str] = []
    for item in methods:
        candidate = item.strip()
        if not candidate:
            continue
        if candidate == ALLOWED_METHOD_WILDCARD:
            return (ALLOWED_METHOD_WILDCARD,)
        if candidate in seen:
            continue
        seen.add(candidate)
        normalised.append(candidate)
    return tuple(normalised)


class AllowedMethodPolicy(msgspec.Struct, frozen=True):
    """Normalised allow-list of method name patterns."""

    entries: tuple[str, ...]

    @property
    def allow_all(self) -> bool:
        return ALLOWED_METHOD_WILDCARD in self.entries

    def is_allowed(self, method: str) -> bool:
        if self.allow_all:
            return True
        return any(fnmatch.fnmatchcase(method, pattern) for pattern in self.entries)

    @classmethod
    def from_iterable(cls, entries: Iterable[str]) -> AllowedMethodPolicy:
        return cls(entries=normalise_allowed_methods(entries))


__all__ = ["AllowedMethodPolicy", "normalise_allowed_methods"]
