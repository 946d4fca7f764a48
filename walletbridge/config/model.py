"""Data model for WalletBridge configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..policy import AllowedMethodPolicy
from ..protocol import nem, nem2
from ..protocol.protocol import DEVICE_MODELS
from .const import (
    DEFAULT_ALLOWED_METHODS,
    DEFAULT_DEBUG_LOGGING,
    DEFAULT_NEM2_GENERATION_HASHES,
    DEFAULT_NEM_NETWORK,
    GENERATION_HASH_HEX_LENGTH,
)

logger = logging.getLogger("walletbridge.config")


def parse_version(value: str) -> tuple[int, ...]:
    """``"2.1.0"`` -> ``(2, 1, 0)``; raises ``ValueError`` on anything else."""
    parts = value.strip().split(".")
    if not parts or not all(part.isascii() and part.isdigit() for part in parts):
        raise ValueError(f"Invalid firmware version '{value}'")
    return tuple(int(part) for part in parts)


@dataclass(slots=True)
class RuntimeConfig:
    """Strongly typed configuration for the bridge."""

    debug_logging: bool = DEFAULT_DEBUG_LOGGING
    allowed_methods: tuple[str, ...] = DEFAULT_ALLOWED_METHODS
    nem2_generation_hashes: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_NEM2_GENERATION_HASHES)
    )
    nem_default_network: int = DEFAULT_NEM_NETWORK
    firmware_model: str | None = None
    firmware_version: str | None = None
    allowed_policy: AllowedMethodPolicy = field(init=False)

    def __post_init__(self) -> None:
        self.allowed_methods = tuple(self.allowed_methods)
        self.allowed_policy = AllowedMethodPolicy.from_iterable(self.allowed_methods)
        if not self.allowed_policy.entries:
            logger.warning("allowed_methods is empty; every request will be rejected.")

        hashes: dict[str, str] = {}
        for name, value in self.nem2_generation_hashes.items():
            if name not in nem2.NETWORKS:
                raise ValueError(f"nem2_generation_hashes: unknown network '{name}'")
            hashes[name] = self._require_hash(name, value)
        self.nem2_generation_hashes = hashes

        if self.nem_default_network not in nem.NETWORKS:
            raise ValueError(f"nem_default_network 0x{self.nem_default_network:02X} is not a NEM network")

        if self.firmware_model is not None and self.firmware_model not in DEVICE_MODELS:
            raise ValueError(f"Unknown firmware model '{self.firmware_model}'")
        if self.firmware_version is not None:
            parse_version(self.firmware_version)

    @staticmethod
    def _require_hash(name: str, value: str) -> str:
        candidate = value.strip().upper()
        if len(candidate) != GENERATION_HASH_HEX_LENGTH:
            raise ValueError(
                f"nem2_generation_hashes[{name}] must be {GENERATION_HASH_HEX_LENGTH} hex characters"
            )
        try:
            bytes.fromhex(candidate)
        except ValueError as exc:
            raise ValueError(f"nem2_generation_hashes[{name}] is not valid hex") from exc
        return candidate

    def generation_hash_for(self, network_type: int) -> bytes | None:
        """Configured generation hash for a NEM2 ``networkType`` code."""
        for name, code in nem2.NETWORKS.items():
            if code == network_type and name in self.nem2_generation_hashes:
                return bytes.fromhex(self.nem2_generation_hashes[name])
        return None

    def is_method_allowed(self, method: str) -> bool:
        return self.allowed_policy.is_allowed(method)

    @property
    def firmware(self) -> tuple[str, tuple[int, ...]] | None:
        """``(model, version)`` when both are configured."""
        if self.firmware_model is None or self.firmware_version is None:
            return None
        return self.firmware_model, parse_version(self.firmware_version)


__all__ = ["RuntimeConfig", "parse_version"]
