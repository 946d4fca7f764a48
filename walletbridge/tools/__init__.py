"""Developer tools for WalletBridge."""
