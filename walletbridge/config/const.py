"""Configuration defaults for WalletBridge."""

from __future__ import annotations

from typing import Final

DEFAULT_CONFIG_PATH: Final[str] = "/etc/walletbridge/config.json"
CONFIG_PATH_ENV: Final[str] = "WALLETBRIDGE_CONFIG"
LOG_STREAM_ENV: Final[str] = "WALLETBRIDGE_LOG_STREAM"
SYSLOG_SOCKET: Final[str] = "/dev/log"

DEFAULT_DEBUG_LOGGING: Final[bool] = False

ALLOWED_METHOD_WILDCARD: Final[str] = "*"
DEFAULT_ALLOWED_METHODS: Final[tuple[str, ...]] = (ALLOWED_METHOD_WILDCARD,)

DEFAULT_NEM_NETWORK: Final[int] = 0x68

GENERATION_HASH_HEX_LENGTH: Final[int] = 64
DEFAULT_NEM2_GENERATION_HASHES: Final[dict[str, str]] = {
    "mainnet": "57F7DA205008026C776CB6AED843393F04CD458E0AA2D9F1D5F31A402072B2D6",
    "testnet": "3B5E1FA6445653C971A50687E75E6D09FB30481055E3990C84B25E9222DC1155",
}

__all__ = [
    "ALLOWED_METHOD_WILDCARD",
    "CONFIG_PATH_ENV",
    "DEFAULT_ALLOWED_METHODS",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_DEBUG_LOGGING",
    "DEFAULT_NEM2_GENERATION_HASHES",
    "DEFAULT_NEM_NETWORK",
    "GENERATION_HASH_HEX_LENGTH",
    "LOG_STREAM_ENV",
    "SYSLOG_SOCKET",
]
