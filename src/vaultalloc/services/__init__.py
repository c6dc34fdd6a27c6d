"""VaultAlloc services package.

This package contains service implementations following the lego architecture
pattern. Each service is independently testable and communicates via Protocol
interfaces using dependency injection.
"""

from vaultalloc.services.allocation import AllocationService, allocate
from vaultalloc.services.market import IMarketView, InMemoryMarket

__all__: list[str] = [
    "AllocationService",
    "IMarketView",
    "InMemoryMarket",
    "allocate",
]
