"""VaultAlloc command line interface."""
