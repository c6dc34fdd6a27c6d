"""Allocation error taxonomy.

- ArithmeticOverflowError: fixed-point range violation (fatal)
- CollaboratorReadError: a market read failed or returned inconsistent data (fatal)
- StorageRangeError: a registration record field does not fit its width

Guarded divisions by zero are not errors; they yield zero.
"""

from vaultalloc.libraries.numeric.errors import AllocationError, ArithmeticOverflowError
from vaultalloc.services.market.errors import CollaboratorReadError


class StorageRangeError(AllocationError):
    """Registration record field out of its encodable range."""

    pass


__all__ = [
    "AllocationError",
    "ArithmeticOverflowError",
    "CollaboratorReadError",
    "StorageRangeError",
]
