"""Marshmallow schema for RuntimeConfig validation."""

from __future__ import annotations

from typing import Any

from marshmallow import Schema, ValidationError, fields, post_load, validate, validates_schema

from ..protocol import nem, nem2
from ..protocol.protocol import DEVICE_MODELS
from .const import (
    DEFAULT_ALLOWED_METHODS,
    DEFAULT_DEBUG_LOGGING,
    DEFAULT_NEM2_GENERATION_HASHES,
    DEFAULT_NEM_NETWORK,
    GENERATION_HASH_HEX_LENGTH,
)
from .model import RuntimeConfig, parse_version


class RuntimeConfigSchema(Schema):
    """Declarative validation schema for WalletBridge configuration."""

    debug_logging = fields.Bool(load_default=DEFAULT_DEBUG_LOGGING)
    allowed_methods = fields.List(fields.Str(validate=validate.Length(min=1)), load_default=DEFAULT_ALLOWED_METHODS)
    nem2_generation_hashes = fields.Dict(
        keys=fields.Str(validate=validate.OneOf(tuple(nem2.NETWORKS))),
        values=fields.Str(
            validate=[
                validate.Length(equal=GENERATION_HASH_HEX_LENGTH),
                validate.Regexp(r"^[0-9A-Fa-f]+$", error="Not a valid hex string."),
            ]
        ),
        load_default=lambda: dict(DEFAULT_NEM2_GENERATION_HASHES),
    )
    nem_default_network = fields.Int(load_default=DEFAULT_NEM_NETWORK, validate=validate.OneOf(nem.NETWORKS))
    firmware_model = fields.Str(load_default=None, allow_none=True, validate=validate.OneOf(DEVICE_MODELS))
    firmware_version = fields.Str(load_default=None, allow_none=True)

    @validates_schema
    def validate_firmware(self, data: dict[str, Any], **kwargs: Any) -> None:
        version = data.get("firmware_version")
        if version is None:
            return
        try:
            parse_version(version)
        except ValueError as exc:
            raise ValidationError(str(exc), field_name="firmware_version") from exc

    @post_load
    def make_config(self, data: dict[str, Any], **kwargs: Any) -> RuntimeConfig:
        data["allowed_methods"] = tuple(data["allowed_methods"])
        return RuntimeConfig(**data)


__all__ = ["RuntimeConfigSchema"]
