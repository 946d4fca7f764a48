"""Interfaces of the collaborators a Command talks to."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from ..protocol.structures import SignTxMessage, UiMessage

DeviceResult = Mapping[str, Any]


class DeviceCommands(Protocol):
    """Device operations; one coroutine per (protocol, operation) pair.

    Implementations raise on transport problems. Nothing here retries.
    """

    async def get_public_key(self, path: Sequence[int], show_on_device: bool) -> DeviceResult: ...

    async def nem2_get_public_key(self, path: Sequence[int], show_on_device: bool) -> DeviceResult: ...

    async def nem2_sign_tx(self, path: Sequence[int], message: SignTxMessage) -> DeviceResult: ...

    async def nem_get_address(self, path: Sequence[int], network: int, show_on_device: bool) -> DeviceResult: ...

    async def nem_sign_tx(self, path: Sequence[int], message: SignTxMessage) -> DeviceResult: ...


class UiTransport(Protocol):
    """Popup surface plus the outbound notification channel."""

    async def wait_for_popup(self) -> None:
        """Resolve once the popup is ready; raise if it cannot be opened."""
        ...

    async def post_message(self, message: UiMessage) -> None: ...


__all__ = ["DeviceCommands", "DeviceResult", "UiTransport"]
