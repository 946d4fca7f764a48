"""Method descriptors.

A method is data: permissions, firmware range, path rule, extra parameter
rules, an optional confirmation step and the device operation it drives.
:class:`~walletbridge.services.command.Command` interprets the descriptor.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final

import msgspec

from ..config.model import RuntimeConfig, parse_version
from ..encoding import NEM2_ENCODER, NEM_ENCODER, EncodeContext
from ..encoding import fields as tx_fields
from ..errors import InvalidParameter
from ..params import ParamRule
from ..paths import decode_path, serialize_path, unharden
from ..protocol import nem
from ..protocol.protocol import (
    FIRMWARE_UNBOUNDED,
    FIRMWARE_UNSUPPORTED,
    PERMISSION_READ,
    PERMISSION_WRITE,
    ConfirmationView,
)
from ..protocol.structures import (
    GENERATION_HASH_SIZE,
    DeviceNem2SignedTx,
    DeviceNemAddress,
    DeviceNemSignedTx,
    DevicePublicKey,
    Nem2SignedTxResult,
    NemAddressResult,
    NemSignedTxResult,
    PublicKeyResult,
)
from .base import DeviceCommands, DeviceResult

if TYPE_CHECKING:
    from .command import Batch

Prepare = Callable[[Mapping[str, Any], tuple[int, ...], RuntimeConfig], Mapping[str, Any]]
Invoke = Callable[[DeviceCommands, "Batch"], Awaitable[DeviceResult]]
Result = Callable[["Batch", Any], msgspec.Struct]


@dataclass(frozen=True, slots=True)
class FirmwareRange:
    """Supported firmware window for one device model."""

    min: str
    max: str = FIRMWARE_UNBOUNDED

    def supports(self, version: tuple[int, ...]) -> bool:
        if self.min == FIRMWARE_UNSUPPORTED:
            return False
        if version < parse_version(self.min):
            return False
        return self.max == FIRMWARE_UNBOUNDED or version <= parse_version(self.max)


@dataclass(frozen=True, slots=True)
class PathRule:
    length: int | None = None
    min_length: int | None = None
    hardened_prefix: int = 0

    def decode(self, value: Any) -> list[int]:
        return decode_path(value, self.length, min_length=self.min_length, hardened_prefix=self.hardened_prefix)


@dataclass(frozen=True, slots=True)
class ConfirmationRule:
    view: ConfirmationView
    label: Callable[["Batch"], str]
    plural_label: str


@dataclass(frozen=True, slots=True)
class MethodDescriptor:
    name: str
    info: str
    permissions: tuple[str, ...]
    firmware: Mapping[str, FirmwareRange]
    path: PathRule
    invoke: Invoke
    response: type[msgspec.Struct]
    result: Result
    params: tuple[ParamRule, ...] = ()
    prepare: Prepare | None = None
    confirmation: ConfirmationRule | None = None

    def supports_firmware(self, model: str, version: tuple[int, ...]) -> bool:
        window = self.firmware.get(model)
        return window is not None and window.supports(version)


# --- Labels ---


def _account_label(prefix: str) -> Callable[["Batch"], str]:
    def label(batch: Batch) -> str:
        if len(batch.path) < 3:
            return prefix
        return f"{prefix} for account #{unharden(batch.path[2]) + 1}"

    return label


# --- Batch preparation ---


def _prepare_nem2_sign(raw: Mapping[str, Any], path: tuple[int, ...], config: RuntimeConfig) -> Mapping[str, Any]:
    transaction = raw["transaction"]
    if raw.get("generationHash") is not None:
        generation_hash = tx_fields.hex_bytes(raw, "generationHash", size=GENERATION_HASH_SIZE)
    else:
        network_type = transaction.get("networkType") if isinstance(transaction, Mapping) else None
        generation_hash = None
        if isinstance(network_type, int) and not isinstance(network_type, bool):
            generation_hash = config.generation_hash_for(network_type)
    message = NEM2_ENCODER.encode(transaction, EncodeContext(address_n=path, generation_hash=generation_hash))
    return {"message": message}


def _prepare_nem_sign(raw: Mapping[str, Any], path: tuple[int, ...], config: RuntimeConfig) -> Mapping[str, Any]:
    return {"message": NEM_ENCODER.encode(raw["transaction"], EncodeContext(address_n=path))}


def _prepare_nem_address(raw: Mapping[str, Any], path: tuple[int, ...], config: RuntimeConfig) -> Mapping[str, Any]:
    network = raw.get("network")
    if network is None:
        network = config.nem_default_network
    if network not in nem.NETWORKS:
        raise InvalidParameter(f"Invalid NEM network: {network}")
    return {"network": network}


# --- Result records ---


def _public_key_result(batch: Batch, response: DevicePublicKey) -> PublicKeyResult:
    return PublicKeyResult(
        path=list(batch.path),
        serialized_path=serialize_path(batch.path),
        public_key=response.public_key,
        xpub=response.xpub,
    )


def _nem2_signed_result(batch: Batch, response: DeviceNem2SignedTx) -> Nem2SignedTxResult:
    return Nem2SignedTxResult(
        path=list(batch.path),
        serialized_path=serialize_path(batch.path),
        payload=response.payload,
        hash=response.hash,
        signature=response.signature,
    )


def _nem_address_result(batch: Batch, response: DeviceNemAddress) -> NemAddressResult:
    return NemAddressResult(path=list(batch.path), serialized_path=serialize_path(batch.path), address=response.address)


def _nem_signed_result(batch: Batch, response: DeviceNemSignedTx) -> NemSignedTxResult:
    return NemSignedTxResult(
        path=list(batch.path),
        serialized_path=serialize_path(batch.path),
        data=response.data,
        signature=response.signature,
    )


_ALL_MODELS: Final[dict[str, FirmwareRange]] = {"1": FirmwareRange("1.0.0"), "2": FirmwareRange("2.0.0")}
_NEM_FIRMWARE: Final[dict[str, FirmwareRange]] = {"1": FirmwareRange("1.6.2"), "2": FirmwareRange("2.0.7")}
_NEM2_FIRMWARE: Final[dict[str, FirmwareRange]] = {
    "1": FirmwareRange(FIRMWARE_UNSUPPORTED),
    "2": FirmwareRange("2.1.0"),
}

_NEM2_PATH = PathRule(length=5, hardened_prefix=3)
_NEM_PATH = PathRule(min_length=3)

METHODS: Final[dict[str, MethodDescriptor]] = {
    descriptor.name: descriptor
    for descriptor in (
        MethodDescriptor(
            name="getPublicKey",
            info="Export public key",
            permissions=(PERMISSION_READ,),
            firmware=_ALL_MODELS,
            path=PathRule(min_length=1),
            invoke=lambda device, batch: device.get_public_key(list(batch.path), batch.show_on_device),
            response=DevicePublicKey,
            result=_public_key_result,
            confirmation=ConfirmationRule(
                view=ConfirmationView.EXPORT_XPUB,
                label=_account_label("Export public key"),
                plural_label="Export multiple public keys",
            ),
        ),
        MethodDescriptor(
            name="nem2GetPublicKey",
            info="Export NEM2 public key",
            permissions=(PERMISSION_READ,),
            firmware=_NEM2_FIRMWARE,
            path=_NEM2_PATH,
            invoke=lambda device, batch: device.nem2_get_public_key(list(batch.path), batch.show_on_device),
            response=DevicePublicKey,
            result=_public_key_result,
            confirmation=ConfirmationRule(
                view=ConfirmationView.EXPORT_XPUB,
                label=_account_label("Export NEM2 public key"),
                plural_label="Export multiple NEM2 public keys",
            ),
        ),
        MethodDescriptor(
            name="nem2SignTransaction",
            info="Sign NEM2 transaction",
            permissions=(PERMISSION_READ, PERMISSION_WRITE),
            firmware=_NEM2_FIRMWARE,
            path=_NEM2_PATH,
            invoke=lambda device, batch: device.nem2_sign_tx(list(batch.path), batch.message),
            response=DeviceNem2SignedTx,
            result=_nem2_signed_result,
            params=(
                ParamRule(name="transaction", type="object", required=True),
                ParamRule(name="generationHash", type="string"),
            ),
            prepare=_prepare_nem2_sign,
        ),
        MethodDescriptor(
            name="nemGetAddress",
            info="Export NEM address",
            permissions=(PERMISSION_READ,),
            firmware=_NEM_FIRMWARE,
            path=_NEM_PATH,
            invoke=lambda device, batch: device.nem_get_address(
                list(batch.path), batch.network, batch.show_on_device
            ),
            response=DeviceNemAddress,
            result=_nem_address_result,
            params=(ParamRule(name="network", type="uint"),),
            prepare=_prepare_nem_address,
        ),
        MethodDescriptor(
            name="nemSignTransaction",
            info="Sign NEM transaction",
            permissions=(PERMISSION_READ, PERMISSION_WRITE),
            firmware=_NEM_FIRMWARE,
            path=_NEM_PATH,
            invoke=lambda device, batch: device.nem_sign_tx(list(batch.path), batch.message),
            response=DeviceNemSignedTx,
            result=_nem_signed_result,
            params=(ParamRule(name="transaction", type="object", required=True),),
            prepare=_prepare_nem_sign,
        ),
    )
}


__all__ = [
    "ConfirmationRule",
    "FirmwareRange",
    "METHODS",
    "MethodDescriptor",
    "PathRule",
]
