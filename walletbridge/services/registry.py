"""Method lookup: request envelope -> Command."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import msgspec

from ..config.model import RuntimeConfig
from ..errors import MalformedRequest, MethodNotAllowed, MethodNotFound
from .command import Command
from .methods import METHODS, MethodDescriptor

logger = logging.getLogger("walletbridge.registry")


class Request(msgspec.Struct, frozen=True):
    method: str
    payload: dict[str, Any]


def parse_request(request: Any) -> Request:
    """Validate the ``{method, payload}`` envelope (mapping or JSON bytes)."""
    try:
        if isinstance(request, (bytes, bytearray, memoryview, str)):
            parsed = msgspec.json.decode(request, type=Request)
        elif isinstance(request, Mapping):
            parsed = msgspec.convert(dict(request), Request)
        else:
            raise MalformedRequest("Request must be an object")
    except (msgspec.ValidationError, msgspec.DecodeError) as exc:
        raise MalformedRequest(f"Malformed request: {exc}") from exc

    if not parsed.method:
        raise MalformedRequest("Request method must be a non-empty string")
    return parsed


class MethodRegistry:
    """Static name -> descriptor table filtered by the configured allow-list."""

    def __init__(
        self,
        methods: Mapping[str, MethodDescriptor] | None = None,
        *,
        config: RuntimeConfig | None = None,
    ) -> None:
        self._methods = dict(METHODS if methods is None else methods)
        self._config = config or RuntimeConfig()

    def __contains__(self, name: object) -> bool:
        return name in self._methods

    def names(self) -> tuple[str, ...]:
        return tuple(self._methods)

    def find(self, request: Any) -> Command:
        parsed = parse_request(request)
        descriptor = self._methods.get(parsed.method)
        if descriptor is None:
            raise MethodNotFound(f"Method not found: {parsed.method}")
        if not self._config.is_method_allowed(parsed.method):
            logger.info("Rejected %s: not in allowed_methods", parsed.method)
            raise MethodNotAllowed(f"Method not allowed: {parsed.method}")
        return Command(descriptor, parsed.payload, config=self._config)


def find(request: Any, config: RuntimeConfig | None = None) -> Command:
    """Look up ``request["method"]`` in the default table and build its Command."""
    return MethodRegistry(config=config).find(request)


__all__ = ["MethodRegistry", "Request", "find", "parse_request"]
