"""In-memory market view.

Concrete IMarketView holding a frozen snapshot of one market's state for a
single vault account. Used by the CLI scenario runner and by tests; other
deployment targets (RPC readers, indexers) implement the same Protocol.
"""

from types import MappingProxyType
from typing import Mapping, Optional

from vaultalloc.services.market.errors import CollaboratorReadError
from vaultalloc.services.market.models import Global, Local, MarketParameter, Position, RiskParameter


class InMemoryMarket:
    """Snapshot-backed market view.

    Reads for accounts other than ``account`` return empty records, the
    same way unset storage reads back as zero.

    Attributes:
        name: Market identifier used in logs and error messages
        account: Vault account the snapshot describes

    Example:
        >>> market = InMemoryMarket(
        ...     name="eth",
        ...     account="vault",
        ...     parameter=MarketParameter(maker_limit="1000"),
        ...     risk_parameter=RiskParameter(margin="0.3", maintenance="0.3"),
        ...     global_state=Global(latest_price="2000"),
        ... )
        >>> market.locals("vault").collateral
        Fixed6('0.000000')
    """

    def __init__(
        self,
        *,
        name: str,
        account: str,
        parameter: MarketParameter,
        risk_parameter: RiskParameter,
        global_state: Global,
        local: Optional[Local] = None,
        latest_account_position: Optional[Position] = None,
        pending_account_positions: Optional[Mapping[int, Position]] = None,
        latest_position: Optional[Position] = None,
        pending_positions: Optional[Mapping[int, Position]] = None,
    ) -> None:
        if not name:
            raise ValueError("name cannot be empty")
        if not account:
            raise ValueError("account cannot be empty")

        self.name = name
        self.account = account
        self._parameter = parameter
        self._risk_parameter = risk_parameter
        self._global = global_state
        self._local = local if local is not None else Local()
        self._latest_account_position = latest_account_position if latest_account_position is not None else Position()
        self._pending_account_positions = MappingProxyType(dict(pending_account_positions or {}))
        self._latest_position = latest_position if latest_position is not None else Position()
        self._pending_positions = MappingProxyType(dict(pending_positions or {}))

    def parameter(self) -> MarketParameter:
        return self._parameter

    def risk_parameter(self) -> RiskParameter:
        return self._risk_parameter

    def locals(self, account: str) -> Local:
        if account != self.account:
            return Local()
        return self._local

    def global_(self) -> Global:
        return self._global

    def positions(self, account: str) -> Position:
        if account != self.account:
            return Position()
        return self._latest_account_position

    def pending_positions(self, account: str, id: int) -> Position:
        if account != self.account:
            return Position(id=id)
        return self._lookup(self._pending_account_positions, self._latest_account_position, id, "pending_positions")

    def position(self) -> Position:
        return self._latest_position

    def pending_position(self, id: int) -> Position:
        return self._lookup(self._pending_positions, self._latest_position, id, "pending_position")

    def _lookup(self, pending: Mapping[int, Position], latest: Position, id: int, operation: str) -> Position:
        """Find a pending snapshot; ids at or before the settled one read back as the settled snapshot."""
        if id in pending:
            return pending[id]
        if id <= latest.id:
            return latest
        raise CollaboratorReadError(self.name, operation, f"no snapshot recorded for id {id}")

    def __repr__(self) -> str:
        return f"InMemoryMarket(name={self.name!r}, account={self.account!r})"
