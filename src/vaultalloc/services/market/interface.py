"""Market view interface (Protocol).

Defines the read surface the allocator consumes from each market it trades.
Enables dependency injection: on-chain readers, RPC clients and in-memory
snapshots all satisfy the same contract.
"""

from typing import Protocol

from vaultalloc.services.market.models import Global, Local, MarketParameter, Position, RiskParameter


class IMarketView(Protocol):
    """Read-only view of one market.

    Core responsibilities:
    - Expose market configuration and risk parameters
    - Expose the vault's local bookkeeping and position snapshots
    - Expose market-wide settled and pending positions

    NOT responsible for:
    - Computing margins or allocations (the allocation service does this)
    - Mutating market state (every method is a pure read)

    Implementations raise any exception on a failed read; the allocator
    wraps it in CollaboratorReadError and aborts the whole call.

    Example:
        >>> market: IMarketView = InMemoryMarket(name="eth", ...)
        >>> local = market.locals(vault_account)
        >>> pending = market.pending_positions(vault_account, local.current_id)
    """

    name: str

    def parameter(self) -> MarketParameter:
        """Market configuration including closed flag and maker limit."""
        ...

    def risk_parameter(self) -> RiskParameter:
        """Risk configuration including min margin and maintenance."""
        ...

    def locals(self, account: str) -> Local:
        """Local bookkeeping of ``account``: latest id, current id, collateral."""
        ...

    def global_(self) -> Global:
        """Market-wide state: latest price and current pending id."""
        ...

    def positions(self, account: str) -> Position:
        """Latest settled position of ``account``."""
        ...

    def pending_positions(self, account: str, id: int) -> Position:
        """Pending position of ``account`` at ``id``."""
        ...

    def position(self) -> Position:
        """Market-wide latest settled position."""
        ...

    def pending_position(self, id: int) -> Position:
        """Market-wide pending position at ``id``."""
        ...
