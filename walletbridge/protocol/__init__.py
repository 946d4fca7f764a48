"""Wire protocol definitions for WalletBridge."""

from . import nem, nem2, protocol, structures

__all__ = [
    "nem",
    "nem2",
    "protocol",
    "structures",
]
