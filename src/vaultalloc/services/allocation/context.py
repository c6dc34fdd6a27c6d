"""Market context loading.

Reads one market's state through its IMarketView and derives the per-market
quantities the allocator needs: the margin requirement (a running maximum
across the vault's settled and pending snapshots), the latest price, and the
closable maker amount.

Snapshot walk (chronological, starting at the latest settled snapshot):
1. Reconcile the snapshot against the latest settled one
2. Keep the running maximum of its margin requirement
3. Subtract any decrease in maker size from closable (increases never add back)
"""

from typing import Any, Callable, TypeVar

from vaultalloc.services.allocation.errors import CollaboratorReadError
from vaultalloc.services.allocation.models import MarketContext, Registration
from vaultalloc.system import LoggerFactory

logger = LoggerFactory.get_logger()

T = TypeVar("T")


def _read(market_name: str, operation: str, read: Callable[..., T], *args: Any) -> T:
    """Run one market read, wrapping any failure in CollaboratorReadError."""
    try:
        return read(*args)
    except CollaboratorReadError:
        raise
    except Exception as e:
        raise CollaboratorReadError(market_name, operation, str(e) or type(e).__name__) from e


def load_context(registration: Registration, account: str) -> MarketContext:
    """Derive the MarketContext for one registered market.

    Args:
        registration: Market registration to load
        account: Vault account whose bookkeeping and positions are read

    Returns:
        Fresh MarketContext

    Raises:
        CollaboratorReadError: If any read fails; there is no partial context
    """
    market = registration.market
    name = registration.name

    market_parameter = _read(name, "parameter", market.parameter)
    risk_parameter = _read(name, "risk_parameter", market.risk_parameter)
    local = _read(name, "locals", market.locals, account)
    global_state = _read(name, "global", market.global_)
    latest_price = global_state.latest_price

    settled = _read(name, "positions", market.positions, account)
    latest_account_position = settled.reconcile(settled)

    previous = latest_account_position
    margin = previous.margin(latest_price, risk_parameter)
    closable = previous.maker_size

    for position_id in range(local.latest_id + 1, local.current_id + 1):
        pending = _read(name, "pending_positions", market.pending_positions, account, position_id)
        snapshot = pending.reconcile(latest_account_position)

        margin = margin.max(snapshot.margin(latest_price, risk_parameter))

        decrease = previous.maker_size - snapshot.maker_size.min(previous.maker_size)
        closable = closable - decrease.min(closable)

        previous = snapshot

    current_account_position = previous

    latest_position = _read(name, "position", market.position)
    pending_position = _read(name, "pending_position", market.pending_position, global_state.current_id)
    current_position = pending_position.reconcile(latest_position)

    logger.debug(
        "allocation.market.context_loaded",
        market=name,
        pending_snapshots=local.current_id - local.latest_id,
        margin=str(margin),
        closable=str(closable),
        latest_price=str(latest_price),
        account_maker=str(current_account_position.maker_size),
        market_maker=str(current_position.maker_size),
    )

    return MarketContext(
        market_parameter=market_parameter,
        risk_parameter=risk_parameter,
        local=local,
        current_account_position=current_account_position,
        latest_account_position=latest_account_position,
        current_position=current_position,
        latest_price=latest_price,
        margin=margin,
        closable=closable,
    )
