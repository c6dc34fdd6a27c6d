"""
VaultAlloc - Multi-market vault allocation

Public API for splitting a vault's collateral and assets across registered
perpetual markets.
"""

from importlib.metadata import version

try:
    __version__ = version("vaultalloc")
except Exception:
    __version__ = "0.0.0.dev"  # Fallback for development


__all__ = [
    "__version__",
]
