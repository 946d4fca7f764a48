"""Command execution services for WalletBridge."""

from .base import DeviceCommands, UiTransport
from .bundle import BundleExecutor
from .command import Batch, Command, ConfirmationState
from .methods import METHODS, FirmwareRange, MethodDescriptor
from .registry import MethodRegistry, find
from .runtime import BridgeRuntime, DeviceSession

__all__ = [
    "Batch",
    "BridgeRuntime",
    "BundleExecutor",
    "Command",
    "ConfirmationState",
    "DeviceCommands",
    "DeviceSession",
    "FirmwareRange",
    "METHODS",
    "MethodDescriptor",
    "MethodRegistry",
    "UiTransport",
    "find",
]
