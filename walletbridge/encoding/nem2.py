"""NEM2 transaction builders."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..errors import InvalidParameter
from ..protocol import nem2
from . import fields
from .registry import TransactionEncoder

PUBLIC_KEY_SIZE = 32


def _network(tx: Mapping[str, Any], name: str) -> int:
    value = fields.uint(tx, name, 8)
    if value not in nem2.NETWORKS.values():
        raise InvalidParameter(f'Parameter "{name}" is not a known network: 0x{value:02X}')
    return value


def _common(tx: Mapping[str, Any]) -> nem2.Nem2Common:
    fields.require(
        tx,
        ("type", "uint"),
        ("networkType", "uint"),
        ("version", "uint"),
        ("maxFee", "amount"),
        ("deadline", "amount"),
    )
    return nem2.Nem2Common(
        type=fields.uint(tx, "type", 16),
        network_type=_network(tx, "networkType"),
        version=fields.uint(tx, "version", 8),
        max_fee=fields.amount(tx, "maxFee"),
        deadline=fields.amount(tx, "deadline"),
    )


def _address(tx: Mapping[str, Any], name: str) -> nem2.Nem2Address:
    value = fields.nested(tx, name)
    fields.require(value, ("address", "string"), ("networkType", "uint"))
    return nem2.Nem2Address(address=fields.text(value, "address"), network_type=_network(value, "networkType"))


def _mosaic(value: Mapping[str, Any]) -> nem2.Nem2Mosaic:
    fields.require(value, ("id", "string"), ("amount", "amount"))
    return nem2.Nem2Mosaic(id=fields.text(value, "id"), amount=fields.amount(value, "amount"))


NEM2_ENCODER = TransactionEncoder("nem2", _common, nem2.Nem2Common, requires_generation_hash=True)


@NEM2_ENCODER.register(nem2.TX_TRANSFER, "transfer", nem2.Nem2Transfer)
def _transfer(tx: Mapping[str, Any]) -> nem2.Nem2Transfer:
    fields.require(tx, ("recipientAddress", "object"))
    message = None
    if tx.get("message") is not None:
        raw = fields.nested(tx, "message")
        fields.require(raw, ("payload", "string"))
        message = nem2.Nem2Message(
            payload=fields.long_text(raw, "payload"),
            type=fields.uint(raw, "type", 8) if raw.get("type") is not None else 0,
        )
    return nem2.Nem2Transfer(
        recipient_address=_address(tx, "recipientAddress"),
        mosaics=[_mosaic(entry) for entry in fields.items(tx, "mosaics")],
        message=message,
    )


@NEM2_ENCODER.register(nem2.TX_MOSAIC_DEFINITION, "mosaic_definition", nem2.Nem2MosaicDefinition)
def _mosaic_definition(tx: Mapping[str, Any]) -> nem2.Nem2MosaicDefinition:
    fields.require(
        tx,
        ("nonce", "uint"),
        ("mosaicId", "string"),
        ("flags", "uint"),
        ("divisibility", "uint"),
        ("duration", "amount"),
    )
    return nem2.Nem2MosaicDefinition(
        nonce=fields.uint(tx, "nonce", 32),
        mosaic_id=fields.text(tx, "mosaicId"),
        flags=fields.uint(tx, "flags", 8),
        divisibility=fields.uint(tx, "divisibility", 8),
        duration=fields.amount(tx, "duration"),
    )


@NEM2_ENCODER.register(nem2.TX_MOSAIC_SUPPLY, "mosaic_supply", nem2.Nem2MosaicSupply)
def _mosaic_supply(tx: Mapping[str, Any]) -> nem2.Nem2MosaicSupply:
    fields.require(tx, ("mosaicId", "string"), ("action", "uint"), ("delta", "amount"))
    return nem2.Nem2MosaicSupply(
        mosaic_id=fields.text(tx, "mosaicId"),
        action=fields.uint(tx, "action", 8),
        delta=fields.amount(tx, "delta"),
    )


@NEM2_ENCODER.register(nem2.TX_NAMESPACE_REGISTRATION, "namespace_registration", nem2.Nem2NamespaceRegistration)
def _namespace_registration(tx: Mapping[str, Any]) -> nem2.Nem2NamespaceRegistration:
    fields.require(tx, ("namespaceName", "string"), ("registrationType", "number"), ("id", "string"))
    registration_type = fields.uint(tx, "registrationType", 8)
    common = {
        "id": fields.text(tx, "id"),
        "namespace_name": fields.text(tx, "namespaceName"),
        "registration_type": registration_type,
    }

    if registration_type == nem2.REGISTRATION_ROOT:
        fields.require(tx, ("duration", "amount"))
        return nem2.Nem2NamespaceRegistration(**common, duration=fields.amount(tx, "duration"))

    if registration_type == nem2.REGISTRATION_CHILD:
        fields.require(tx, ("parentId", "string"))
        return nem2.Nem2NamespaceRegistration(**common, parent_id=fields.text(tx, "parentId"))

    raise InvalidParameter("Invalid Registration Type")


@NEM2_ENCODER.register(nem2.TX_ADDRESS_ALIAS, "address_alias", nem2.Nem2AddressAlias)
def _address_alias(tx: Mapping[str, Any]) -> nem2.Nem2AddressAlias:
    fields.require(tx, ("namespaceId", "string"), ("aliasAction", "uint"), ("address", "object"))
    return nem2.Nem2AddressAlias(
        namespace_id=fields.text(tx, "namespaceId"),
        alias_action=fields.uint(tx, "aliasAction", 8),
        address=_address(tx, "address"),
    )


@NEM2_ENCODER.register(nem2.TX_MOSAIC_ALIAS, "mosaic_alias", nem2.Nem2MosaicAlias)
def _mosaic_alias(tx: Mapping[str, Any]) -> nem2.Nem2MosaicAlias:
    fields.require(tx, ("namespaceId", "string"), ("mosaicId", "string"), ("aliasAction", "uint"))
    return nem2.Nem2MosaicAlias(
        namespace_id=fields.text(tx, "namespaceId"),
        mosaic_id=fields.text(tx, "mosaicId"),
        alias_action=fields.uint(tx, "aliasAction", 8),
    )


def _metadata(tx: Mapping[str, Any], *extra: str) -> dict[str, Any]:
    fields.require(
        tx,
        ("targetPublicKey", "string"),
        ("scopedMetadataKey", "string"),
        *((name, "string") for name in extra),
        ("valueSizeDelta", "number"),
        ("valueSize", "uint"),
        ("value", "string"),
    )
    return {
        "target_public_key": fields.hex_bytes(tx, "targetPublicKey", size=PUBLIC_KEY_SIZE),
        "scoped_metadata_key": fields.text(tx, "scopedMetadataKey"),
        "value_size_delta": fields.sint(tx, "valueSizeDelta", 16),
        "value_size": fields.uint(tx, "valueSize", 16),
        "value": fields.long_text(tx, "value"),
    }


@NEM2_ENCODER.register(nem2.TX_ACCOUNT_METADATA, "account_metadata", nem2.Nem2AccountMetadata)
def _account_metadata(tx: Mapping[str, Any]) -> nem2.Nem2AccountMetadata:
    return nem2.Nem2AccountMetadata(**_metadata(tx))


@NEM2_ENCODER.register(nem2.TX_MOSAIC_METADATA, "mosaic_metadata", nem2.Nem2MosaicMetadata)
def _mosaic_metadata(tx: Mapping[str, Any]) -> nem2.Nem2MosaicMetadata:
    return nem2.Nem2MosaicMetadata(
        **_metadata(tx, "targetMosaicId"),
        target_mosaic_id=fields.text(tx, "targetMosaicId"),
    )


@NEM2_ENCODER.register(nem2.TX_NAMESPACE_METADATA, "namespace_metadata", nem2.Nem2NamespaceMetadata)
def _namespace_metadata(tx: Mapping[str, Any]) -> nem2.Nem2NamespaceMetadata:
    return nem2.Nem2NamespaceMetadata(
        **_metadata(tx, "targetNamespaceId"),
        target_namespace_id=fields.text(tx, "targetNamespaceId"),
    )


@NEM2_ENCODER.register(nem2.TX_SECRET_LOCK, "secret_lock", nem2.Nem2SecretLock)
def _secret_lock(tx: Mapping[str, Any]) -> nem2.Nem2SecretLock:
    fields.require(
        tx,
        ("mosaic", "object"),
        ("duration", "amount"),
        ("hashAlgorithm", "uint"),
        ("secret", "string"),
        ("recipientAddress", "object"),
    )
    return nem2.Nem2SecretLock(
        mosaic=_mosaic(fields.nested(tx, "mosaic")),
        duration=fields.amount(tx, "duration"),
        hash_algorithm=fields.uint(tx, "hashAlgorithm", 8),
        secret=fields.hex_bytes(tx, "secret"),
        recipient_address=_address(tx, "recipientAddress"),
    )


@NEM2_ENCODER.register(nem2.TX_SECRET_PROOF, "secret_proof", nem2.Nem2SecretProof)
def _secret_proof(tx: Mapping[str, Any]) -> nem2.Nem2SecretProof:
    fields.require(
        tx,
        ("hashAlgorithm", "uint"),
        ("secret", "string"),
        ("proof", "string"),
        ("recipientAddress", "object"),
    )
    return nem2.Nem2SecretProof(
        hash_algorithm=fields.uint(tx, "hashAlgorithm", 8),
        secret=fields.hex_bytes(tx, "secret"),
        proof=fields.hex_bytes(tx, "proof"),
        recipient_address=_address(tx, "recipientAddress"),
    )


@NEM2_ENCODER.register(nem2.TX_HASH_LOCK, "hash_lock", nem2.Nem2HashLock)
def _hash_lock(tx: Mapping[str, Any]) -> nem2.Nem2HashLock:
    fields.require(tx, ("mosaic", "object"), ("duration", "amount"), ("hash", "string"))
    return nem2.Nem2HashLock(
        mosaic=_mosaic(fields.nested(tx, "mosaic")),
        duration=fields.amount(tx, "duration"),
        hash=fields.hex_bytes(tx, "hash"),
    )


__all__ = ["NEM2_ENCODER"]
