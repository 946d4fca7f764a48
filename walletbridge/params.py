"""Declarative parameter validation.

Rules are turned into a marshmallow schema once and cached; the first rule
violated (in rule order) is raised as :class:`~walletbridge.errors.ValidationError`.
"""

from __future__ import annotations

import functools
from collections.abc import Iterable, Mapping
from typing import Any, Final

import msgspec
from marshmallow import INCLUDE, Schema, fields

from .errors import ValidationError

UINT64_MAX: Final[int] = 0xFFFFFFFFFFFFFFFF


class ParamRule(msgspec.Struct, frozen=True):
    """One entry of a validation rule list."""

    name: str
    type: str | None = None
    required: bool = False


class _Number(fields.Field):
    default_error_messages = {"invalid": "Not a valid number."}

    def _deserialize(self, value: Any, attr: str | None, data: Any, **kwargs: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise self.make_error("invalid")
        return value


class _UInt(fields.Field):
    default_error_messages = {"invalid": "Not a valid unsigned integer."}

    def _deserialize(self, value: Any, attr: str | None, data: Any, **kwargs: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise self.make_error("invalid")
        return value


class _Boolean(fields.Field):
    default_error_messages = {"invalid": "Not a valid boolean."}

    def _deserialize(self, value: Any, attr: str | None, data: Any, **kwargs: Any) -> Any:
        if not isinstance(value, bool):
            raise self.make_error("invalid")
        return value


class _Amount(fields.Field):
    """uint64 given as an integer or a decimal digit string."""

    default_error_messages = {"invalid": "Not a valid amount."}

    def _deserialize(self, value: Any, attr: str | None, data: Any, **kwargs: Any) -> Any:
        return parse_amount(value, error=self.make_error("invalid"))


def parse_amount(value: Any, *, error: Exception | None = None) -> int:
    """Return ``value`` as an int in the uint64 range or raise ``error``."""
    failure = error or ValueError(f"Not a valid amount: {value!r}")
    if isinstance(value, bool):
        raise failure
    if isinstance(value, str):
        if not (value.isascii() and value.isdigit()):
            raise failure
        value = int(value)
    if not isinstance(value, int) or value < 0 or value > UINT64_MAX:
        raise failure
    return value


_FIELD_TYPES: Final[dict[str | None, Any]] = {
    None: lambda **kw: fields.Raw(**kw),
    "string": lambda **kw: fields.String(**kw),
    "number": lambda **kw: _Number(**kw),
    "uint": lambda **kw: _UInt(**kw),
    "boolean": lambda **kw: _Boolean(**kw),
    "amount": lambda **kw: _Amount(**kw),
    "array": lambda **kw: fields.List(fields.Raw(), **kw),
    "object": lambda **kw: fields.Dict(**kw),
}


def _build_field(rule: ParamRule) -> fields.Field:
    try:
        factory = _FIELD_TYPES[rule.type]
    except KeyError as exc:
        raise ValueError(f"Unsupported parameter type '{rule.type}'") from exc

    missing = f'Parameter "{rule.name}" is missing.'
    return factory(
        required=rule.required,
        allow_none=not rule.required,
        error_messages={
            "required": missing,
            "null": missing,
            "invalid": f'Parameter "{rule.name}" has invalid type. "{rule.type}" expected.',
        },
    )


@functools.lru_cache(maxsize=128)
def _schema_for(rules: tuple[ParamRule, ...]) -> Schema:
    schema_cls = Schema.from_dict(
        {rule.name: _build_field(rule) for rule in rules},
        name="ParamSchema",
    )
    return schema_cls(unknown=INCLUDE)


def validate_params(params: Any, rules: Iterable[ParamRule]) -> None:
    """Check ``params`` against ``rules``; raise on the first violation."""
    rule_list = tuple(rules)
    if not isinstance(params, Mapping):
        raise ValidationError("Parameters must be an object")

    errors = _schema_for(rule_list).validate(dict(params))
    if not errors:
        return
    for rule in rule_list:
        messages = errors.get(rule.name)
        if messages:
            raise ValidationError(messages[0] if isinstance(messages, list) else str(messages))
    raise ValidationError(str(errors))


__all__ = ["ParamRule", "UINT64_MAX", "parse_amount", "validate_params"]
