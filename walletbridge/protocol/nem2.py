"""NEM2 wire sub-messages."""

from __future__ import annotations

from typing import Final

from construct import (  # type: ignore
    Int8ub,
    Int16sb,
    Int16ub,
    Int32ub,
    Int64ub,
    PrefixedArray,
    Struct as BinStruct,
)

from .structures import BaseStruct, Blob, Maybe, ShortText, Text

NETWORK_MAINNET: Final[int] = 0x68
NETWORK_TESTNET: Final[int] = 0x98
NETWORK_MIJIN: Final[int] = 0x60
NETWORK_MIJIN_TEST: Final[int] = 0x90

NETWORKS: Final[dict[str, int]] = {
    "mainnet": NETWORK_MAINNET,
    "testnet": NETWORK_TESTNET,
    "mijin": NETWORK_MIJIN,
    "mijin_test": NETWORK_MIJIN_TEST,
}

TX_TRANSFER: Final[int] = 0x4154
TX_MOSAIC_DEFINITION: Final[int] = 0x414D
TX_MOSAIC_SUPPLY: Final[int] = 0x424D
TX_NAMESPACE_REGISTRATION: Final[int] = 0x414E
TX_ADDRESS_ALIAS: Final[int] = 0x424E
TX_MOSAIC_ALIAS: Final[int] = 0x434E
TX_ACCOUNT_METADATA: Final[int] = 0x4144
TX_MOSAIC_METADATA: Final[int] = 0x4244
TX_NAMESPACE_METADATA: Final[int] = 0x4344
TX_SECRET_LOCK: Final[int] = 0x4152
TX_SECRET_PROOF: Final[int] = 0x4252
TX_HASH_LOCK: Final[int] = 0x4148

REGISTRATION_ROOT: Final[int] = 0
REGISTRATION_CHILD: Final[int] = 1

_ADDRESS = BinStruct("address" / ShortText, "network_type" / Int8ub)
_MOSAIC = BinStruct("id" / ShortText, "amount" / Int64ub)
_MESSAGE = BinStruct("type" / Int8ub, "payload" / Text)


class Nem2Common(BaseStruct, frozen=True):
    type: int
    network_type: int
    version: int
    max_fee: int
    deadline: int

    _SCHEMA = BinStruct(
        "type" / Int16ub,
        "network_type" / Int8ub,
        "version" / Int8ub,
        "max_fee" / Int64ub,
        "deadline" / Int64ub,
    )


class Nem2Address(BaseStruct, frozen=True):
    address: str
    network_type: int

    _SCHEMA = _ADDRESS


class Nem2Mosaic(BaseStruct, frozen=True):
    id: str
    amount: int

    _SCHEMA = _MOSAIC


class Nem2Message(BaseStruct, frozen=True):
    payload: str
    type: int = 0

    _SCHEMA = _MESSAGE


class Nem2Transfer(BaseStruct, frozen=True):
    recipient_address: Nem2Address
    mosaics: list[Nem2Mosaic] = []
    message: Nem2Message | None = None

    _SCHEMA = BinStruct(
        "recipient_address" / _ADDRESS,
        "mosaics" / PrefixedArray(Int8ub, _MOSAIC),
        "message" / Maybe(_MESSAGE),
    )


class Nem2MosaicDefinition(BaseStruct, frozen=True):
    nonce: int
    mosaic_id: str
    flags: int
    divisibility: int
    duration: int

    _SCHEMA = BinStruct(
        "nonce" / Int32ub,
        "mosaic_id" / ShortText,
        "flags" / Int8ub,
        "divisibility" / Int8ub,
        "duration" / Int64ub,
    )


class Nem2MosaicSupply(BaseStruct, frozen=True):
    mosaic_id: str
    action: int
    delta: int

    _SCHEMA = BinStruct("mosaic_id" / ShortText, "action" / Int8ub, "delta" / Int64ub)


class Nem2NamespaceRegistration(BaseStruct, frozen=True):
    id: str
    namespace_name: str
    registration_type: int
    duration: int | None = None
    parent_id: str | None = None

    _SCHEMA = BinStruct(
        "id" / ShortText,
        "namespace_name" / ShortText,
        "registration_type" / Int8ub,
        "duration" / Maybe(Int64ub),
        "parent_id" / Maybe(ShortText),
    )


class Nem2AddressAlias(BaseStruct, frozen=True):
    namespace_id: str
    alias_action: int
    address: Nem2Address

    _SCHEMA = BinStruct("namespace_id" / ShortText, "alias_action" / Int8ub, "address" / _ADDRESS)


class Nem2MosaicAlias(BaseStruct, frozen=True):
    namespace_id: str
    mosaic_id: str
    alias_action: int

    _SCHEMA = BinStruct("namespace_id" / ShortText, "mosaic_id" / ShortText, "alias_action" / Int8ub)


class Nem2AccountMetadata(BaseStruct, frozen=True):
    target_public_key: bytes
    scoped_metadata_key: str
    value_size_delta: int
    value_size: int
    value: str

    _SCHEMA = BinStruct(
        "target_public_key" / Blob,
        "scoped_metadata_key" / ShortText,
        "value_size_delta" / Int16sb,
        "value_size" / Int16ub,
        "value" / Text,
    )


class Nem2MosaicMetadata(BaseStruct, frozen=True):
    target_public_key: bytes
    scoped_metadata_key: str
    target_mosaic_id: str
    value_size_delta: int
    value_size: int
    value: str

    _SCHEMA = BinStruct(
        "target_public_key" / Blob,
        "scoped_metadata_key" / ShortText,
        "target_mosaic_id" / ShortText,
        "value_size_delta" / Int16sb,
        "value_size" / Int16ub,
        "value" / Text,
    )


class Nem2NamespaceMetadata(BaseStruct, frozen=True):
    target_public_key: bytes
    scoped_metadata_key: str
    target_namespace_id: str
    value_size_delta: int
    value_size: int
    value: str

    _SCHEMA = BinStruct(
        "target_public_key" / Blob,
        "scoped_metadata_key" / ShortText,
        "target_namespace_id" / ShortText,
        "value_size_delta" / Int16sb,
        "value_size" / Int16ub,
        "value" / Text,
    )


class Nem2SecretLock(BaseStruct, frozen=True):
    mosaic: Nem2Mosaic
    duration: int
    hash_algorithm: int
    secret: bytes
    recipient_address: Nem2Address

    _SCHEMA = BinStruct(
        "mosaic" / _MOSAIC,
        "duration" / Int64ub,
        "hash_algorithm" / Int8ub,
        "secret" / Blob,
        "recipient_address" / _ADDRESS,
    )


class Nem2SecretProof(BaseStruct, frozen=True):
    hash_algorithm: int
    secret: bytes
    proof: bytes
    recipient_address: Nem2Address

    _SCHEMA = BinStruct(
        "hash_algorithm" / Int8ub,
        "secret" / Blob,
        "proof" / Blob,
        "recipient_address" / _ADDRESS,
    )


class Nem2HashLock(BaseStruct, frozen=True):
    mosaic: Nem2Mosaic
    duration: int
    hash: bytes

    _SCHEMA = BinStruct("mosaic" / _MOSAIC, "duration" / Int64ub, "hash" / Blob)
