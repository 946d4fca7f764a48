"""NEM (NIS1) wire sub-messages."""

from __future__ import annotations

from typing import Final

from construct import (  # type: ignore
    Int8sb,
    Int8ub,
    Int32ub,
    Int64ub,
    PrefixedArray,
    Struct as BinStruct,
)

from .structures import BaseStruct, Blob, Maybe, ShortText

NETWORK_MAINNET: Final[int] = 0x68
NETWORK_TESTNET: Final[int] = 0x98
NETWORK_MIJIN: Final[int] = 0x60
NETWORKS: Final[tuple[int, ...]] = (NETWORK_MAINNET, NETWORK_TESTNET, NETWORK_MIJIN)

TX_TRANSFER: Final[int] = 0x0101
TX_IMPORTANCE_TRANSFER: Final[int] = 0x0801
TX_AGGREGATE_MODIFICATION: Final[int] = 0x1001
TX_PROVISION_NAMESPACE: Final[int] = 0x2001
TX_SUPPLY_CHANGE: Final[int] = 0x4002

MESSAGE_PLAIN: Final[int] = 0x01
MESSAGE_ENCRYPTED: Final[int] = 0x02

_MOSAIC = BinStruct("namespace" / ShortText, "mosaic" / ShortText, "quantity" / Int64ub)
_MODIFICATION = BinStruct("type" / Int8ub, "public_key" / Blob)


class NemCommon(BaseStruct, frozen=True):
    network: int
    timestamp: int
    fee: int
    deadline: int

    _SCHEMA = BinStruct(
        "network" / Int8ub,
        "timestamp" / Int32ub,
        "fee" / Int64ub,
        "deadline" / Int32ub,
    )


class NemMosaic(BaseStruct, frozen=True):
    namespace: str
    mosaic: str
    quantity: int

    _SCHEMA = _MOSAIC


class NemTransfer(BaseStruct, frozen=True):
    recipient: str
    amount: int
    mosaics: list[NemMosaic] = []
    payload: bytes | None = None
    public_key: bytes | None = None

    _SCHEMA = BinStruct(
        "recipient" / ShortText,
        "amount" / Int64ub,
        "mosaics" / PrefixedArray(Int8ub, _MOSAIC),
        "payload" / Maybe(Blob),
        "public_key" / Maybe(Blob),
    )


class NemImportanceTransfer(BaseStruct, frozen=True):
    mode: int
    public_key: bytes

    _SCHEMA = BinStruct("mode" / Int8ub, "public_key" / Blob)


class NemCosignatoryModification(BaseStruct, frozen=True):
    type: int
    public_key: bytes

    _SCHEMA = _MODIFICATION


class NemAggregateModification(BaseStruct, frozen=True):
    modifications: list[NemCosignatoryModification]
    relative_change: int | None = None

    _SCHEMA = BinStruct(
        "modifications" / PrefixedArray(Int8ub, _MODIFICATION),
        "relative_change" / Maybe(Int8sb),
    )


class NemProvisionNamespace(BaseStruct, frozen=True):
    namespace: str
    sink: str
    fee: int
    parent: str | None = None

    _SCHEMA = BinStruct(
        "namespace" / ShortText,
        "sink" / ShortText,
        "fee" / Int64ub,
        "parent" / Maybe(ShortText),
    )


class NemSupplyChange(BaseStruct, frozen=True):
    namespace: str
    mosaic: str
    type: int
    delta: int

    _SCHEMA = BinStruct(
        "namespace" / ShortText,
        "mosaic" / ShortText,
        "type" / Int8ub,
        "delta" / Int64ub,
    )
