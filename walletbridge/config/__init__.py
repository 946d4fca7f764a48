"""Configuration helpers for WalletBridge."""

from .const import *  # noqa: F401, F403
