"""Field readers shared by the transaction builders.

Each reader takes the descriptor mapping and a camelCase field name and
either returns the wire-ready value or raises ``InvalidParameter``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..errors import InvalidParameter
from ..params import ParamRule, parse_amount, validate_params
from ..protocol.protocol import MAX_STRING_LENGTH, MAX_TEXT_LENGTH


def require(tx: Mapping[str, Any], *rules: tuple[str, str | None]) -> None:
    """Validate required ``(name, type)`` pairs in order."""
    validate_params(tx, [ParamRule(name=name, type=kind, required=True) for name, kind in rules])


def uint(tx: Mapping[str, Any], name: str, bits: int) -> int:
    value = tx.get(name)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameter(f'Parameter "{name}" has invalid type. "uint" expected.')
    if value < 0 or value >= 1 << bits:
        raise InvalidParameter(f'Parameter "{name}" is out of range')
    return value


def sint(tx: Mapping[str, Any], name: str, bits: int) -> int:
    value = tx.get(name)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameter(f'Parameter "{name}" has invalid type. "number" expected.')
    bound = 1 << (bits - 1)
    if not -bound <= value < bound:
        raise InvalidParameter(f'Parameter "{name}" is out of range')
    return value


def amount(tx: Mapping[str, Any], name: str) -> int:
    return parse_amount(
        tx.get(name),
        error=InvalidParameter(f'Parameter "{name}" has invalid type. "amount" expected.'),
    )


def text(tx: Mapping[str, Any], name: str, *, limit: int = MAX_STRING_LENGTH) -> str:
    value = tx.get(name)
    if not isinstance(value, str):
        raise InvalidParameter(f'Parameter "{name}" has invalid type. "string" expected.')
    if len(value.encode("utf-8")) > limit:
        raise InvalidParameter(f'Parameter "{name}" is too long')
    return value


def long_text(tx: Mapping[str, Any], name: str) -> str:
    return text(tx, name, limit=MAX_TEXT_LENGTH)


def hex_bytes(tx: Mapping[str, Any], name: str, *, size: int | None = None) -> bytes:
    value = tx.get(name)
    if not isinstance(value, str):
        raise InvalidParameter(f'Parameter "{name}" has invalid type. "string" expected.')
    try:
        data = bytes.fromhex(value)
    except ValueError as exc:
        raise InvalidParameter(f'Parameter "{name}" is not a valid hex string') from exc
    if size is not None and len(data) != size:
        raise InvalidParameter(f'Parameter "{name}" must be {size} bytes')
    if len(data) > MAX_TEXT_LENGTH:
        raise InvalidParameter(f'Parameter "{name}" is too long')
    return data


def nested(tx: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = tx.get(name)
    if not isinstance(value, Mapping):
        raise InvalidParameter(f'Parameter "{name}" has invalid type. "object" expected.')
    return value


def items(tx: Mapping[str, Any], name: str, *, limit: int = MAX_STRING_LENGTH) -> list[Mapping[str, Any]]:
    value = tx.get(name)
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidParameter(f'Parameter "{name}" has invalid type. "array" expected.')
    if len(value) > limit:
        raise InvalidParameter(f'Parameter "{name}" has too many entries')
    for entry in value:
        if not isinstance(entry, Mapping):
            raise InvalidParameter(f'Parameter "{name}" must contain objects')
    return value


__all__ = [
    "amount",
    "hex_bytes",
    "items",
    "long_text",
    "nested",
    "require",
    "sint",
    "text",
    "uint",
]
