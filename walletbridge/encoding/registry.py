"""Table-driven transaction encoder.

Every protocol owns one :class:`TransactionEncoder`. Variant builders are
registered against an exact type code; dispatch never falls back to a
default encoding.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

import msgspec
from construct import ConstructError  # type: ignore

from ..errors import InvalidParameter, UnknownTransactionType
from ..protocol.structures import GENERATION_HASH_SIZE, SIGN_TX_ENVELOPE, BaseStruct, SignTxMessage

logger = logging.getLogger("walletbridge.encoding")

Descriptor = Mapping[str, Any]
Builder = Callable[[Descriptor], BaseStruct]
B = TypeVar("B", bound=Builder)


class EncodeContext(msgspec.Struct, frozen=True):
    """Cross-cutting fields that are not part of the descriptor."""

    address_n: tuple[int, ...]
    generation_hash: bytes | None = None


class Variant(msgspec.Struct, frozen=True):
    tx_type: int
    field: str
    struct: type[BaseStruct]
    builder: Builder


class TransactionEncoder:
    """Registry of ``type -> builder`` for one protocol."""

    def __init__(
        self,
        protocol: str,
        common: Builder,
        common_struct: type[BaseStruct],
        *,
        requires_generation_hash: bool = False,
    ) -> None:
        self.protocol = protocol
        self._common = common
        self._common_struct = common_struct
        self._requires_generation_hash = requires_generation_hash
        self._variants: dict[int, Variant] = {}

    def register(self, tx_type: int, field: str, struct: type[BaseStruct]) -> Callable[[B], B]:
        """Decorator registering the builder for ``tx_type``."""

        def decorator(builder: B) -> B:
            if tx_type in self._variants:
                raise ValueError(f"{self.protocol}: type 0x{tx_type:04X} already registered")
            self._variants[tx_type] = Variant(tx_type=tx_type, field=field, struct=struct, builder=builder)
            return builder

        return decorator

    def supports(self, tx_type: Any) -> bool:
        return self._lookup(tx_type) is not None

    @property
    def variants(self) -> Iterable[Variant]:
        return self._variants.values()

    def _lookup(self, tx_type: Any) -> Variant | None:
        if isinstance(tx_type, bool) or not isinstance(tx_type, int):
            return None
        return self._variants.get(tx_type)

    def encode(self, descriptor: Any, context: EncodeContext) -> SignTxMessage:
        """Build the canonical sign request for ``descriptor``."""
        if not isinstance(descriptor, Mapping):
            raise InvalidParameter('Parameter "transaction" has invalid type. "object" expected.')

        tx_type = descriptor.get("type")
        variant = self._lookup(tx_type)
        if variant is None and isinstance(tx_type, int) and not isinstance(tx_type, bool):
            raise UnknownTransactionType(tx_type)
        common = self._common(descriptor)
        if variant is None:
            raise UnknownTransactionType(tx_type)
        body = variant.builder(descriptor)

        if self._requires_generation_hash:
            if context.generation_hash is None:
                raise InvalidParameter("Generation hash is required")
            if len(context.generation_hash) != GENERATION_HASH_SIZE:
                raise InvalidParameter(f"Generation hash must be {GENERATION_HASH_SIZE} bytes")

        message = SignTxMessage(
            type=variant.tx_type,
            address_n=tuple(context.address_n),
            transaction=common,
            kind=variant.field,
            body=body,
            generation_hash=context.generation_hash if self._requires_generation_hash else None,
        )
        try:
            message.encode()
        except ConstructError as exc:
            raise InvalidParameter(f"Transaction cannot be encoded: {exc}") from exc
        logger.debug("Encoded %s %s (0x%04X)", self.protocol, variant.field, variant.tx_type)
        return message

    def decode(self, data: bytes | bytearray | memoryview) -> SignTxMessage:
        """Re-read an encoded sign request through the same type table."""
        try:
            envelope: Any = SIGN_TX_ENVELOPE.parse(bytes(data))
        except ConstructError as exc:
            raise InvalidParameter(f"Malformed {self.protocol} sign request: {exc}") from exc

        variant = self._lookup(envelope.type)
        if variant is None:
            raise UnknownTransactionType(envelope.type)
        try:
            common = self._common_struct.decode(envelope.transaction)
            body = variant.struct.decode(envelope.body)
        except (ConstructError, msgspec.ValidationError, ValueError) as exc:
            raise InvalidParameter(f"Malformed {self.protocol} {variant.field}: {exc}") from exc

        return SignTxMessage(
            type=envelope.type,
            address_n=tuple(envelope.address_n),
            transaction=common,
            kind=variant.field,
            body=body,
            generation_hash=envelope.generation_hash,
        )


__all__ = ["Builder", "EncodeContext", "TransactionEncoder", "Variant"]
