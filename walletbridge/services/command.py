"""Command lifecycle: construction, confirmation and execution.

A :class:`Command` is built from one request payload and a
:class:`~walletbridge.services.methods.MethodDescriptor`. Construction
validates (and, for signing methods, encodes) every batch before anything
touches the device; ``confirm()`` runs the popup round trip through a small
state machine; ``run()`` hands the batches to the bundle executor.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import msgspec
from transitions import Machine

from ..config.model import RuntimeConfig
from ..errors import ActionDenied, BridgeError, ValidationError
from ..params import ParamRule, validate_params
from ..protocol.protocol import UiEvent
from ..protocol.structures import SignTxMessage, UiMessage, UiResponse
from .base import DeviceCommands, UiTransport
from .bundle import BundleExecutor
from .methods import FirmwareRange, MethodDescriptor

logger = logging.getLogger("walletbridge.command")

_BATCH_RULES: tuple[ParamRule, ...] = (
    ParamRule(name="path", required=True),
    ParamRule(name="showOnTrezor", type="boolean"),
    ParamRule(name="showOnDevice", type="boolean"),
)


class ConfirmationState(StrEnum):
    UNKNOWN = "unknown"
    GRANTED = "granted"
    DENIED = "denied"


@dataclass(frozen=True, slots=True)
class Batch:
    """One validated unit of device work."""

    path: tuple[int, ...]
    show_on_device: bool = False
    network: int | None = None
    message: SignTxMessage | None = None


class Command:
    """One request's lifecycle."""

    if TYPE_CHECKING:
        # FSM generated methods and attributes for static analysis
        fsm_state: str
        open_popup: Callable[[], None]
        request_decision: Callable[[], None]
        grant: Callable[[], None]
        deny: Callable[[], None]
        abort: Callable[[], None]

    # FSM States
    STATE_UNCONFIRMED = "unconfirmed"
    STATE_AWAITING_POPUP = "awaiting_popup"
    STATE_AWAITING_DECISION = "awaiting_decision"
    STATE_GRANTED = "granted"
    STATE_DENIED = "denied"

    def __init__(
        self,
        descriptor: MethodDescriptor,
        payload: Any,
        *,
        config: RuntimeConfig | None = None,
    ) -> None:
        self.descriptor = descriptor
        self._config = config or RuntimeConfig()

        self.is_bundle, raw_batches = self._normalise(payload)
        batches: list[Batch] = []
        for index, raw in enumerate(raw_batches):
            try:
                batches.append(self._parse_batch(raw))
            except BridgeError as exc:
                raise exc.at_batch(index)
        self.batches: tuple[Batch, ...] = tuple(batches)

        self._confirm_lock = asyncio.Lock()
        self._decision: asyncio.Future[bool] | None = None

        self.state_machine = Machine(
            model=self,
            states=[
                self.STATE_UNCONFIRMED,
                self.STATE_AWAITING_POPUP,
                self.STATE_AWAITING_DECISION,
                self.STATE_GRANTED,
                self.STATE_DENIED,
            ],
            initial=self.STATE_UNCONFIRMED,
            auto_transitions=False,
            ignore_invalid_triggers=True,
            model_attribute="fsm_state",
        )
        self.state_machine.add_transition(
            trigger="open_popup", source=self.STATE_UNCONFIRMED, dest=self.STATE_AWAITING_POPUP
        )
        self.state_machine.add_transition(
            trigger="request_decision", source=self.STATE_AWAITING_POPUP, dest=self.STATE_AWAITING_DECISION
        )
        self.state_machine.add_transition(
            trigger="grant", source=self.STATE_AWAITING_DECISION, dest=self.STATE_GRANTED
        )
        self.state_machine.add_transition(
            trigger="deny", source=self.STATE_AWAITING_DECISION, dest=self.STATE_DENIED
        )
        self.state_machine.add_transition(
            trigger="abort",
            source=[self.STATE_AWAITING_POPUP, self.STATE_AWAITING_DECISION],
            dest=self.STATE_UNCONFIRMED,
        )

        logger.debug("Built %s with %d batch(es), bundle=%s", self.name, len(self.batches), self.is_bundle)

    # --- Construction ---

    @staticmethod
    def _normalise(payload: Any) -> tuple[bool, list[Any]]:
        validate_params(payload, [ParamRule(name="bundle", type="array")])
        if "bundle" not in payload:
            return False, [payload]

        bundle = payload["bundle"]
        if not isinstance(bundle, list):
            raise ValidationError('Parameter "bundle" has invalid type. "array" expected.')
        if not bundle:
            raise ValidationError('Parameter "bundle" must not be empty.')
        return True, bundle

    def _parse_batch(self, raw: Any) -> Batch:
        validate_params(raw, _BATCH_RULES + self.descriptor.params)
        path = tuple(self.descriptor.path.decode(raw["path"]))
        show_on_device = bool(raw.get("showOnTrezor") or raw.get("showOnDevice"))
        extra: Mapping[str, Any] = {}
        if self.descriptor.prepare is not None:
            extra = self.descriptor.prepare(raw, path, self._config)
        return Batch(path=path, show_on_device=show_on_device, **extra)

    # --- Descriptor passthrough ---

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def info(self) -> str:
        return self.descriptor.info

    @property
    def required_permissions(self) -> tuple[str, ...]:
        return self.descriptor.permissions

    @property
    def firmware_range(self) -> Mapping[str, FirmwareRange]:
        return self.descriptor.firmware

    @property
    def requires_confirmation(self) -> bool:
        return self.descriptor.confirmation is not None

    # --- Confirmation ---

    @property
    def confirmed(self) -> ConfirmationState:
        if self.fsm_state == self.STATE_GRANTED:
            return ConfirmationState.GRANTED
        if self.fsm_state == self.STATE_DENIED:
            return ConfirmationState.DENIED
        return ConfirmationState.UNKNOWN

    @property
    def label(self) -> str | None:
        rule = self.descriptor.confirmation
        if rule is None:
            return None
        if len(self.batches) > 1:
            return rule.plural_label
        return rule.label(self.batches[0])

    async def confirm(self, ui: UiTransport) -> bool:
        """Ask the user once; later calls return the stored decision."""
        rule = self.descriptor.confirmation
        if rule is None:
            return True

        async with self._confirm_lock:
            if self.confirmed is not ConfirmationState.UNKNOWN:
                return self.confirmed is ConfirmationState.GRANTED

            self.open_popup()
            try:
                await ui.wait_for_popup()
                self._decision = asyncio.get_running_loop().create_future()
                self.request_decision()
                await ui.post_message(
                    UiMessage(
                        type=UiEvent.REQUEST_CONFIRMATION,
                        payload={"view": rule.view, "label": self.label},
                    )
                )
                granted = await self._decision
            except BaseException:
                self.abort()
                raise
            finally:
                self._decision = None

            if granted:
                self.grant()
            else:
                self.deny()
            logger.info("%s confirmation %s", self.name, self.confirmed)
            return granted

    def handle_ui_response(self, response: UiResponse) -> bool:
        """Resolve a pending decision; returns False when nothing was waiting."""
        decision = self._decision
        if decision is None or decision.done():
            return False
        if response.type == UiEvent.RECEIVE_CONFIRMATION:
            decision.set_result(response.payload is True)
            return True
        if response.type == UiEvent.POPUP_CLOSED:
            decision.set_result(False)
            return True
        logger.debug("Ignoring %s while awaiting confirmation", response.type)
        return False

    # --- Execution ---

    async def run(self, device: DeviceCommands, ui: UiTransport | None = None) -> msgspec.Struct | list[msgspec.Struct]:
        if self.requires_confirmation and self.confirmed is not ConfirmationState.GRANTED:
            if self.confirmed is ConfirmationState.DENIED:
                raise ActionDenied("Action cancelled by user")
            raise ActionDenied("Action not confirmed")

        logger.info("Running %s (%d batch(es))", self.name, len(self.batches))
        executor = BundleExecutor(self.descriptor, self.batches, is_bundle=self.is_bundle, ui=ui)
        return await executor.execute(device)


__all__ = ["Batch", "Command", "ConfirmationState"]
