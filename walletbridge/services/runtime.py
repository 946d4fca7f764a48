"""Host glue: request envelope in, response envelope out."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any

import msgspec

from ..config.model import RuntimeConfig
from ..errors import ActionDenied, BridgeError, FirmwareNotSupported, MalformedRequest, error_response
from ..protocol.structures import UiResponse
from .base import DeviceCommands, UiTransport
from .command import Command
from .registry import MethodRegistry

logger = logging.getLogger("walletbridge.service")


class DeviceSession:
    """Single device channel; one in-flight ``run()`` at a time."""

    def __init__(self, device: DeviceCommands) -> None:
        self.device = device
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @asynccontextmanager
    async def exclusive(self) -> AsyncIterator[DeviceCommands]:
        async with self._lock:
            yield self.device


class BridgeRuntime:
    """Runs requests end to end against one device session."""

    def __init__(self, config: RuntimeConfig, session: DeviceSession, ui: UiTransport) -> None:
        self.config = config
        self._session = session
        self._ui = ui
        self._registry = MethodRegistry(config=config)
        self._popup_lock = asyncio.Lock()
        self._confirming: Command | None = None

    async def call(self, request: Any) -> dict[str, Any]:
        """Execute ``request`` and return ``{"success", "payload"}``."""
        try:
            result = await self._execute(request)
        except ActionDenied as exc:
            logger.info("Request denied: %s", exc.message)
            return {"success": False, "payload": exc.to_response()}
        except BridgeError as exc:
            logger.warning("Request failed (%s): %s", exc.kind, exc.message)
            return {"success": False, "payload": exc.to_response()}
        except Exception as exc:
            logger.exception("Unexpected failure while handling request")
            return {"success": False, "payload": error_response(exc)}
        return {"success": True, "payload": msgspec.to_builtins(result)}

    async def _execute(self, request: Any) -> Any:
        command = self._registry.find(request)
        self._check_firmware(command)

        if command.requires_confirmation:
            async with self._popup_lock:
                self._confirming = command
                try:
                    granted = await command.confirm(self._ui)
                finally:
                    self._confirming = None
            if not granted:
                raise ActionDenied("Action cancelled by user")

        async with self._session.exclusive() as device:
            return await command.run(device, self._ui)

    def _check_firmware(self, command: Command) -> None:
        firmware = self.config.firmware
        if firmware is None:
            return
        model, version = firmware
        if not command.descriptor.supports_firmware(model, version):
            raise FirmwareNotSupported(
                f"Method {command.name} is not supported by model {model} firmware {self.config.firmware_version}"
            )

    def handle_ui_response(self, response: UiResponse | Mapping[str, Any]) -> bool:
        """Forward an inbound UI message to the Command awaiting it."""
        if not isinstance(response, UiResponse):
            try:
                response = msgspec.convert(response, UiResponse)
            except msgspec.ValidationError as exc:
                raise MalformedRequest(f"Malformed UI response: {exc}") from exc

        command = self._confirming
        if command is not None and command.handle_ui_response(response):
            return True
        logger.debug("No command awaiting %s", response.type)
        return False


__all__ = ["BridgeRuntime", "DeviceSession"]
