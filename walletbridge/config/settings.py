"""Settings loader for WalletBridge.

Configuration is a JSON object read from ``WALLETBRIDGE_CONFIG`` (or
``/etc/walletbridge/config.json``); a missing file means all defaults.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import msgspec
from marshmallow import ValidationError

from .const import CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH
from .model import RuntimeConfig
from .schema import RuntimeConfigSchema

logger = logging.getLogger("walletbridge.config")


def _flatten_errors(messages: Any, prefix: str = "") -> list[str]:
    if isinstance(messages, Mapping):
        flattened: list[str] = []
        for key, value in messages.items():
            flattened.extend(_flatten_errors(value, f"{prefix}{key}." if prefix else f"{key}."))
        return flattened
    if isinstance(messages, list):
        return [f"{prefix.rstrip('.')}: {message}" for message in messages]
    return [f"{prefix.rstrip('.')}: {messages}"]


def build_runtime_config(raw: Mapping[str, Any]) -> RuntimeConfig:
    """Validate a raw mapping and build the typed config."""
    try:
        return RuntimeConfigSchema().load(dict(raw))
    except ValidationError as exc:
        raise ValueError("; ".join(_flatten_errors(exc.messages))) from exc


def _load_raw_config(path: Path) -> dict[str, Any]:
    try:
        content = path.read_bytes()
    except FileNotFoundError:
        logger.info("No configuration at %s; using defaults.", path)
        return {}

    try:
        raw = msgspec.json.decode(content)
    except msgspec.DecodeError as exc:
        raise ValueError(f"{path}: invalid JSON ({exc})") from exc
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: configuration must be a JSON object")
    return raw


def load_runtime_config(path: str | os.PathLike[str] | None = None) -> RuntimeConfig:
    """Load configuration from ``path``, the environment or defaults."""

    candidate = Path(path or os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)
    config = build_runtime_config(_load_raw_config(candidate))
    logger.debug("Loaded configuration: allowed_methods=%s", ",".join(config.allowed_methods))
    return config


__all__ = ["RuntimeConfig", "build_runtime_config", "load_runtime_config"]
