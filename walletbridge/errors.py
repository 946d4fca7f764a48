"""Error taxonomy for WalletBridge commands.

Every failure a caller can observe is a :class:`BridgeError` subclass with a
stable ``kind`` string. ``to_response()`` yields the boundary error envelope.
"""

from __future__ import annotations

from typing import Any


class BridgeError(Exception):
    """Base class for all command failures."""

    kind = "BridgeError"

    def __init__(self, message: str, *, batch_index: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.batch_index = batch_index

    def at_batch(self, index: int) -> BridgeError:
        """Record the batch that failed, keeping the first index seen."""
        if self.batch_index is None:
            self.batch_index = index
        return self

    def to_response(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.batch_index is not None:
            payload["batchIndex"] = self.batch_index
        return payload


class MalformedRequest(BridgeError):
    """Request envelope is missing fields or has the wrong shape."""

    kind = "MalformedRequest"


class MethodNotFound(BridgeError):
    kind = "MethodNotFound"


class MethodNotAllowed(MethodNotFound):
    """Method exists but is excluded by the configured allow-list."""

    kind = "MethodNotAllowed"


class InvalidParameter(BridgeError):
    kind = "InvalidParameter"


class ValidationError(InvalidParameter):
    """Raised by the parameter validator on the first violated rule."""

    kind = "ValidationError"


class UnknownTransactionType(InvalidParameter):
    kind = "UnknownTransactionType"

    def __init__(self, tx_type: Any, *, batch_index: int | None = None) -> None:
        if isinstance(tx_type, int) and not isinstance(tx_type, bool):
            label = f"0x{tx_type:04X}"
        else:
            label = repr(tx_type)
        super().__init__(f"Unknown transaction type: {label}", batch_index=batch_index)
        self.tx_type = tx_type


class ActionDenied(BridgeError):
    """User declined (or never granted) the confirmation step."""

    kind = "ActionDenied"


class DeviceCommunicationError(BridgeError):
    kind = "DeviceCommunicationError"


class FirmwareNotSupported(BridgeError):
    kind = "FirmwareNotSupported"


def error_response(exc: BaseException) -> dict[str, Any]:
    """Convert any exception into the ``{kind, message}`` envelope."""
    if isinstance(exc, BridgeError):
        return exc.to_response()
    return {"kind": "UnexpectedError", "message": str(exc) or type(exc).__name__}


__all__ = [
    "ActionDenied",
    "BridgeError",
    "DeviceCommunicationError",
    "FirmwareNotSupported",
    "InvalidParameter",
    "MalformedRequest",
    "MethodNotAllowed",
    "MethodNotFound",
    "UnknownTransactionType",
    "ValidationError",
    "error_response",
]
