"""Shared protocol constants for WalletBridge."""

from __future__ import annotations

from enum import StrEnum
from typing import Final

PROTOCOL_VERSION: Final[int] = 1

PERMISSION_READ: Final[str] = "read"
PERMISSION_WRITE: Final[str] = "write"

# Firmware bounds are "major.minor.patch"; "0" as min disables the model,
# "0" as max means no upper bound.
FIRMWARE_UNSUPPORTED: Final[str] = "0"
FIRMWARE_UNBOUNDED: Final[str] = "0"
DEVICE_MODELS: Final[tuple[str, ...]] = ("1", "2")

MAX_STRING_LENGTH: Final[int] = 255
MAX_TEXT_LENGTH: Final[int] = 1024


class UiEvent(StrEnum):
    """Notification types exchanged with the UI surface."""

    REQUEST_CONFIRMATION = "ui-request_confirmation"
    RECEIVE_CONFIRMATION = "ui-receive_confirmation"
    BUNDLE_PROGRESS = "ui-bundle_progress"
    POPUP_CLOSED = "popup-closed"


class ConfirmationView(StrEnum):
    EXPORT_XPUB = "export-xpub"


__all__ = [
    "ConfirmationView",
    "DEVICE_MODELS",
    "FIRMWARE_UNBOUNDED",
    "FIRMWARE_UNSUPPORTED",
    "MAX_STRING_LENGTH",
    "MAX_TEXT_LENGTH",
    "PERMISSION_READ",
    "PERMISSION_WRITE",
    "PROTOCOL_VERSION",
    "UiEvent",
]
