"""Sequential batch execution with progress reporting."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

import msgspec

from ..errors import BridgeError, DeviceCommunicationError
from ..protocol.protocol import UiEvent
from ..protocol.structures import UiMessage
from .base import DeviceCommands, UiTransport

if TYPE_CHECKING:
    from .command import Batch
    from .methods import MethodDescriptor

logger = logging.getLogger("walletbridge.bundle")


class BundleExecutor:
    """Drive one device call per batch, strictly in order.

    The first failure aborts the run; records gathered so far are dropped and
    progress already posted stands.
    """

    def __init__(
        self,
        descriptor: MethodDescriptor,
        batches: Sequence[Batch],
        *,
        is_bundle: bool,
        ui: UiTransport | None = None,
    ) -> None:
        self._descriptor = descriptor
        self._batches = batches
        self._is_bundle = is_bundle
        self._ui = ui

    async def execute(self, device: DeviceCommands) -> msgspec.Struct | list[msgspec.Struct]:
        results: list[msgspec.Struct] = []
        for index, batch in enumerate(self._batches):
            response = await self._invoke(device, index, batch)
            results.append(self._descriptor.result(batch, self._validate(index, response)))

            if self._is_bundle and self._ui is not None:
                await self._report_progress(self._ui, index, response)
            logger.debug("%s batch %d/%d done", self._descriptor.name, index + 1, len(self._batches))

        return results if self._is_bundle else results[0]

    async def _invoke(self, device: DeviceCommands, index: int, batch: Batch) -> Any:
        try:
            return await self._descriptor.invoke(device, batch)
        except BridgeError as exc:
            logger.warning("%s batch %d failed: %s", self._descriptor.name, index, exc.message)
            raise exc.at_batch(index)
        except Exception as exc:
            logger.warning("%s batch %d: device call failed: %s", self._descriptor.name, index, exc)
            raise DeviceCommunicationError(str(exc) or type(exc).__name__, batch_index=index) from exc

    async def _report_progress(self, ui: UiTransport, index: int, response: Any) -> None:
        message = UiMessage(type=UiEvent.BUNDLE_PROGRESS, payload={"progress": index, "response": _plain(response)})
        try:
            await ui.post_message(message)
        except BridgeError as exc:
            raise exc.at_batch(index)
        except Exception as exc:
            logger.warning("%s batch %d: progress report failed: %s", self._descriptor.name, index, exc)
            raise BridgeError(f"Progress report failed: {exc}", batch_index=index) from exc

    def _validate(self, index: int, response: Any) -> Any:
        try:
            return msgspec.convert(response, self._descriptor.response, from_attributes=True)
        except msgspec.ValidationError as exc:
            raise DeviceCommunicationError(f"Unexpected device response: {exc}", batch_index=index) from exc


def _plain(response: Any) -> Any:
    if isinstance(response, Mapping):
        return dict(response)
    if isinstance(response, msgspec.Struct):
        return msgspec.to_builtins(response)
    return response


__all__ = ["BundleExecutor"]
