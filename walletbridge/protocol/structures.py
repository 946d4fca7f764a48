"""WalletBridge data structures and schemas.

Wire sub-messages pair a frozen msgspec struct with a construct schema so the
same class validates, encodes and re-reads the bytes handed to the device.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar, Self

import msgspec
from construct import (  # type: ignore
    Adapter,
    Bytes,
    Const,
    Construct,
    Flag,
    GreedyBytes,
    If,
    Int8ub,
    Int16ub,
    Int32ub,
    PascalString,
    Prefixed,
    PrefixedArray,
    Struct as BinStruct,
    this,
)

from . import protocol

GENERATION_HASH_SIZE = 32


def _strip(value: Any) -> Any:
    """Drop construct bookkeeping (``_io``, ``_flagbuildnone``...) recursively."""
    if isinstance(value, Mapping):
        return {k: _strip(v) for k, v in value.items() if not str(k).startswith("_")}
    if isinstance(value, list):
        return [_strip(item) for item in value]
    return value


class BaseStruct(msgspec.Struct, frozen=True):
    """Base class for hybrid Msgspec/Construct structures."""

    # Subclasses must define this schema
    _SCHEMA: ClassVar[Construct]

    @classmethod
    def decode(cls, data: bytes | bytearray | memoryview) -> Self:
        """Decode binary data into a typed Msgspec struct."""
        if not data:
            raise ValueError("Empty payload")

        container: Any = cls._SCHEMA.parse(bytes(data))
        return msgspec.convert(_strip(container), cls)

    def encode(self) -> bytes:
        """Encode the typed Msgspec struct into binary data."""
        return self._SCHEMA.build(msgspec.to_builtins(self, builtin_types=(bytes, bytearray)))


class Maybe(Adapter):
    """Presence flag followed by the value when set."""

    def __init__(self, subcon: Construct[Any]) -> None:
        super().__init__(BinStruct("present" / Flag, "value" / If(this.present, subcon)))

    def _decode(self, obj: Any, context: Any, path: Any) -> Any:
        return obj.value if obj.present else None

    def _encode(self, obj: Any, context: Any, path: Any) -> Any:
        return {"present": obj is not None, "value": obj}


# Shared field codecs
Text = PascalString(Int16ub, "utf-8")
ShortText = PascalString(Int8ub, "utf-8")
Blob = Prefixed(Int16ub, GreedyBytes)


# --- Sign request envelope ---

SIGN_TX_ENVELOPE = BinStruct(
    "version" / Const(protocol.PROTOCOL_VERSION, Int8ub),
    "type" / Int16ub,
    "address_n" / PrefixedArray(Int8ub, Int32ub),
    "generation_hash" / Maybe(Bytes(GENERATION_HASH_SIZE)),
    "transaction" / Prefixed(Int16ub, GreedyBytes),
    "body" / Prefixed(Int16ub, GreedyBytes),
)


class SignTxMessage(msgspec.Struct, frozen=True):
    """Canonical sign request: common sub-message plus exactly one variant body."""

    type: int
    address_n: tuple[int, ...]
    transaction: BaseStruct
    kind: str
    body: BaseStruct
    generation_hash: bytes | None = None

    def encode(self) -> bytes:
        return SIGN_TX_ENVELOPE.build(
            {
                "type": self.type,
                "address_n": list(self.address_n),
                "generation_hash": self.generation_hash,
                "transaction": self.transaction.encode(),
                "body": self.body.encode(),
            }
        )

    def as_dict(self) -> dict[str, Any]:
        """Protobuf-style mapping; bytes are rendered as upper-case hex."""
        message: dict[str, Any] = {"address_n": list(self.address_n)}
        if self.generation_hash is not None:
            message["generation_hash"] = self.generation_hash.hex().upper()
        message["transaction"] = _hexify(msgspec.to_builtins(self.transaction, builtin_types=(bytes,)))
        message[self.kind] = _hexify(msgspec.to_builtins(self.body, builtin_types=(bytes,)))
        return message


def _hexify(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.hex().upper()
    if isinstance(value, dict):
        return {k: _hexify(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_hexify(item) for item in value]
    return value


# --- UI channel ---


class UiMessage(msgspec.Struct, frozen=True):
    """Outbound notification posted to the UI surface."""

    type: str
    payload: dict[str, Any] = msgspec.field(default_factory=dict)


class UiResponse(msgspec.Struct, frozen=True):
    """Inbound message from the UI surface."""

    type: str
    payload: Any = None


# --- Device responses (validated on receipt) ---


class DevicePublicKey(msgspec.Struct, frozen=True):
    public_key: str
    xpub: str | None = None


class DeviceNem2SignedTx(msgspec.Struct, frozen=True):
    payload: str
    hash: str
    signature: str


class DeviceNemAddress(msgspec.Struct, frozen=True):
    address: str


class DeviceNemSignedTx(msgspec.Struct, frozen=True):
    data: str
    signature: str


# --- Result records ---


class PublicKeyResult(msgspec.Struct, frozen=True, rename="camel", omit_defaults=True):
    path: list[int]
    serialized_path: str
    public_key: str
    xpub: str | None = None


class Nem2SignedTxResult(msgspec.Struct, frozen=True, rename="camel"):
    path: list[int]
    serialized_path: str
    payload: str
    hash: str
    signature: str


class NemAddressResult(msgspec.Struct, frozen=True, rename="camel"):
    path: list[int]
    serialized_path: str
    address: str


class NemSignedTxResult(msgspec.Struct, frozen=True, rename="camel"):
    path: list[int]
    serialized_path: str
    data: str
    signature: str


__all__ = [
    "BaseStruct",
    "Blob",
    "DeviceNem2SignedTx",
    "DeviceNemAddress",
    "DeviceNemSignedTx",
    "DevicePublicKey",
    "GENERATION_HASH_SIZE",
    "Nem2SignedTxResult",
    "NemAddressResult",
    "NemSignedTxResult",
    "Maybe",
    "PublicKeyResult",
    "SIGN_TX_ENVELOPE",
    "ShortText",
    "SignTxMessage",
    "Text",
    "UiMessage",
    "UiResponse",
]
