"""Market view service.

Read-only access to one market's configuration, bookkeeping and position
snapshots, as consumed by the allocator.
"""

from vaultalloc.services.market.errors import CollaboratorReadError
from vaultalloc.services.market.interface import IMarketView
from vaultalloc.services.market.memory import InMemoryMarket
from vaultalloc.services.market.models import Global, Local, MarketParameter, Position, RiskParameter

__all__ = [
    "CollaboratorReadError",
    "Global",
    "IMarketView",
    "InMemoryMarket",
    "Local",
    "MarketParameter",
    "Position",
    "RiskParameter",
]
