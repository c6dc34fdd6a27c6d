"""Market read errors."""

from vaultalloc.libraries.numeric.errors import AllocationError


class CollaboratorReadError(AllocationError):
    """Market read failed or returned inconsistent data."""

    def __init__(self, market: str, operation: str, reason: str) -> None:
        self.market = market
        self.operation = operation
        self.reason = reason
        super().__init__(f"Market '{market}' read '{operation}' failed: {reason}")
