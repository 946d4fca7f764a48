"""NEM (NIS1) transaction builders."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..errors import InvalidParameter
from ..protocol import nem
from . import fields
from .registry import TransactionEncoder

PUBLIC_KEY_SIZE = 32


def _common(tx: Mapping[str, Any]) -> nem.NemCommon:
    fields.require(
        tx,
        ("type", "uint"),
        ("version", "uint"),
        ("timeStamp", "uint"),
        ("fee", "amount"),
        ("deadline", "uint"),
    )
    network = fields.uint(tx, "version", 32) >> 24
    if network not in nem.NETWORKS:
        raise InvalidParameter(f"Unknown NEM network: 0x{network:02X}")
    return nem.NemCommon(
        network=network,
        timestamp=fields.uint(tx, "timeStamp", 32),
        fee=fields.amount(tx, "fee"),
        deadline=fields.uint(tx, "deadline", 32),
    )


def _mosaic_id(tx: Mapping[str, Any], name: str) -> tuple[str, str]:
    value = fields.nested(tx, name)
    fields.require(value, ("namespaceId", "string"), ("name", "string"))
    return fields.text(value, "namespaceId"), fields.text(value, "name")


NEM_ENCODER = TransactionEncoder("nem", _common, nem.NemCommon)


@NEM_ENCODER.register(nem.TX_TRANSFER, "transfer", nem.NemTransfer)
def _transfer(tx: Mapping[str, Any]) -> nem.NemTransfer:
    fields.require(tx, ("recipient", "string"), ("amount", "amount"))
    payload = public_key = None
    if tx.get("message") is not None:
        message = fields.nested(tx, "message")
        if message.get("payload"):
            payload = fields.hex_bytes(message, "payload")
        if message.get("type") == nem.MESSAGE_ENCRYPTED:
            fields.require(message, ("publicKey", "string"))
            public_key = fields.hex_bytes(message, "publicKey", size=PUBLIC_KEY_SIZE)
        elif message.get("publicKey") is not None:
            raise InvalidParameter('Parameter "publicKey" is only allowed on encrypted messages')

    mosaics = []
    for entry in fields.items(tx, "mosaics"):
        fields.require(entry, ("mosaicId", "object"), ("quantity", "amount"))
        namespace, mosaic = _mosaic_id(entry, "mosaicId")
        mosaics.append(nem.NemMosaic(namespace=namespace, mosaic=mosaic, quantity=fields.amount(entry, "quantity")))

    return nem.NemTransfer(
        recipient=fields.text(tx, "recipient"),
        amount=fields.amount(tx, "amount"),
        mosaics=mosaics,
        payload=payload,
        public_key=public_key,
    )


@NEM_ENCODER.register(nem.TX_IMPORTANCE_TRANSFER, "importance_transfer", nem.NemImportanceTransfer)
def _importance_transfer(tx: Mapping[str, Any]) -> nem.NemImportanceTransfer:
    fields.require(tx, ("importanceTransfer", "object"))
    transfer = fields.nested(tx, "importanceTransfer")
    fields.require(transfer, ("mode", "uint"), ("publicKey", "string"))
    return nem.NemImportanceTransfer(
        mode=fields.uint(transfer, "mode", 8),
        public_key=fields.hex_bytes(transfer, "publicKey", size=PUBLIC_KEY_SIZE),
    )


@NEM_ENCODER.register(nem.TX_AGGREGATE_MODIFICATION, "aggregate_modification", nem.NemAggregateModification)
def _aggregate_modification(tx: Mapping[str, Any]) -> nem.NemAggregateModification:
    fields.require(tx, ("modifications", "array"))
    modifications = []
    for entry in fields.items(tx, "modifications"):
        fields.require(entry, ("modificationType", "uint"), ("cosignatoryAccount", "string"))
        modifications.append(
            nem.NemCosignatoryModification(
                type=fields.uint(entry, "modificationType", 8),
                public_key=fields.hex_bytes(entry, "cosignatoryAccount", size=PUBLIC_KEY_SIZE),
            )
        )

    relative_change = None
    if tx.get("minCosignatories") is not None:
        change = fields.nested(tx, "minCosignatories")
        fields.require(change, ("relativeChange", "number"))
        relative_change = fields.sint(change, "relativeChange", 8)
    return nem.NemAggregateModification(modifications=modifications, relative_change=relative_change)


@NEM_ENCODER.register(nem.TX_PROVISION_NAMESPACE, "provision_namespace", nem.NemProvisionNamespace)
def _provision_namespace(tx: Mapping[str, Any]) -> nem.NemProvisionNamespace:
    fields.require(tx, ("newPart", "string"), ("rentalFeeSink", "string"), ("rentalFee", "amount"))
    return nem.NemProvisionNamespace(
        namespace=fields.text(tx, "newPart"),
        sink=fields.text(tx, "rentalFeeSink"),
        fee=fields.amount(tx, "rentalFee"),
        parent=fields.text(tx, "parent") if tx.get("parent") else None,
    )


@NEM_ENCODER.register(nem.TX_SUPPLY_CHANGE, "supply_change", nem.NemSupplyChange)
def _supply_change(tx: Mapping[str, Any]) -> nem.NemSupplyChange:
    fields.require(tx, ("mosaicId", "object"), ("supplyType", "uint"), ("delta", "amount"))
    namespace, mosaic = _mosaic_id(tx, "mosaicId")
    return nem.NemSupplyChange(
        namespace=namespace,
        mosaic=mosaic,
        type=fields.uint(tx, "supplyType", 8),
        delta=fields.amount(tx, "delta"),
    )


__all__ = ["NEM_ENCODER"]
