"""Allocation service.

Computes, for every market a vault is registered in, the collateral to move
and the maker position to target.
"""

from vaultalloc.services.allocation.errors import (
    AllocationError,
    ArithmeticOverflowError,
    CollaboratorReadError,
    StorageRangeError,
)
from vaultalloc.services.allocation.models import (
    AllocationBreakdown,
    AllocationTotals,
    MarketContext,
    MarketTarget,
    Registration,
)
from vaultalloc.services.allocation.aggregate import aggregate
from vaultalloc.services.allocation.context import load_context
from vaultalloc.services.allocation.service import AllocationService, allocate
from vaultalloc.services.allocation.storage import (
    RECORD_SIZE,
    StoredRegistration,
    decode_registration,
    decode_registrations,
    encode_registration,
    encode_registrations,
)
from vaultalloc.services.allocation.scenario import Scenario, load_scenario, parse_scenario

__all__ = [
    "AllocationBreakdown",
    "AllocationError",
    "AllocationService",
    "AllocationTotals",
    "ArithmeticOverflowError",
    "CollaboratorReadError",
    "MarketContext",
    "MarketTarget",
    "RECORD_SIZE",
    "Registration",
    "Scenario",
    "StorageRangeError",
    "StoredRegistration",
    "aggregate",
    "allocate",
    "decode_registration",
    "decode_registrations",
    "encode_registration",
    "encode_registrations",
    "load_context",
    "load_scenario",
    "parse_scenario",
]
