"""Derivation path codec.

Paths arrive either as ``"m/44'/43'/0'/0'/0'"`` strings or as sequences of
unsigned 32-bit integers and always leave as a list of integers.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Final

from .errors import InvalidParameter

HD_HARDENED: Final[int] = 0x80000000
UINT32_MAX: Final[int] = 0xFFFFFFFF
_HARDENED_MARKERS: Final[tuple[str, ...]] = ("'", "h")


def harden(component: int) -> int:
    return (component | HD_HARDENED) & UINT32_MAX


def unharden(component: int) -> int:
    return component & ~HD_HARDENED & UINT32_MAX


def is_hardened(component: int) -> bool:
    return bool(component & HD_HARDENED)


def _parse_string(path: str) -> list[int]:
    parts = path.strip().lower().split("/")
    if parts[0] != "m":
        raise InvalidParameter("Not a valid path")

    components: list[int] = []
    for part in parts[1:]:
        if not part:
            continue
        hardened = part.endswith(_HARDENED_MARKERS)
        digits = part[:-1] if hardened else part
        if not (digits.isascii() and digits.isdigit()):
            if digits.startswith("-") and digits[1:].isascii() and digits[1:].isdigit():
                raise InvalidParameter("Path cannot contain negative values")
            raise InvalidParameter("Not a valid path")
        value = int(digits)
        if hardened:
            if value >= HD_HARDENED:
                raise InvalidParameter("Not a valid path")
            value = harden(value)
        components.append(value)
    return components


def _parse_sequence(path: Sequence[Any]) -> list[int]:
    components: list[int] = []
    for part in path:
        if isinstance(part, bool) or not isinstance(part, int):
            raise InvalidParameter("Not a valid path")
        components.append(part)
    return components


def decode_path(
    path: Any,
    required_length: int | None = None,
    *,
    min_length: int | None = None,
    hardened_prefix: int = 0,
) -> list[int]:
    """Decode and validate a derivation path.

    ``required_length`` demands an exact component count, ``min_length`` a
    lower bound. The first ``hardened_prefix`` components must be hardened.
    """
    if isinstance(path, str):
        components = _parse_string(path)
    elif isinstance(path, Sequence) and not isinstance(path, (bytes, bytearray)):
        components = _parse_sequence(path)
    else:
        raise InvalidParameter("Not a valid path")

    if not components:
        raise InvalidParameter("Not a valid path")
    for component in components:
        if component < 0:
            raise InvalidParameter("Path cannot contain negative values")
        if component > UINT32_MAX:
            raise InvalidParameter("Not a valid path")

    if required_length is not None and len(components) != required_length:
        raise InvalidParameter(
            f"Not a valid path: expected {required_length} components, got {len(components)}"
        )
    if min_length is not None and len(components) < min_length:
        raise InvalidParameter(
            f"Not a valid path: expected at least {min_length} components, got {len(components)}"
        )
    for index in range(min(hardened_prefix, len(components))):
        if not is_hardened(components[index]):
            raise InvalidParameter(f"Not a valid path: component {index} must be hardened")
    return components


def serialize_path(path: Sequence[int]) -> str:
    """Render ``[0x8000002C, 0x8000002B, 0]`` as ``"m/44'/43'/0"``."""
    rendered = [f"{unharden(component)}'" if is_hardened(component) else str(component) for component in path]
    return "/".join(["m", *rendered])


__all__ = [
    "HD_HARDENED",
    "UINT32_MAX",
    "decode_path",
    "harden",
    "is_hardened",
    "serialize_path",
    "unharden",
]
