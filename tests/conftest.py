"""Root conftest for all tests - setup sys.path and shared market builders."""

import sys
from pathlib import Path
from typing import Optional

import pytest

# Add src/ to sys.path so tests run without an editable install
src_root = Path(__file__).parent.parent / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from vaultalloc.libraries.numeric.fixed import UFixed6  # noqa: E402
from vaultalloc.services.allocation.models import Registration  # noqa: E402
from vaultalloc.services.market.memory import InMemoryMarket  # noqa: E402
from vaultalloc.services.market.models import (  # noqa: E402
    Global,
    Local,
    MarketParameter,
    Position,
    RiskParameter,
)
from vaultalloc.system import LoggerFactory  # noqa: E402

VAULT = "vault"

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def build_market(
    name: str = "eth",
    *,
    price: str = "10",
    closed: bool = False,
    maker_limit: str = "1000000",
    margin: str = "0.3",
    maintenance: str = "0.3",
    min_margin: str = "10",
    collateral: str = "0",
    latest_id: int = 1,
    current_id: int = 1,
    account_maker: str = "0",
    pending_account_makers: Optional[dict[int, str]] = None,
    market_maker: str = "0",
    market_long: str = "0",
    market_short: str = "0",
) -> InMemoryMarket:
    """Build an InMemoryMarket for the ``vault`` account.

    The vault's settled snapshot carries ``account_maker`` at ``latest_id``;
    ``pending_account_makers`` maps later ids to their maker size. The
    market-wide position is settled at id 1 and has no pending snapshot.
    """
    pending = {
        position_id: Position(id=position_id, maker=maker)
        for position_id, maker in (pending_account_makers or {}).items()
    }
    return InMemoryMarket(
        name=name,
        account=VAULT,
        parameter=MarketParameter(closed=closed, maker_limit=maker_limit),
        risk_parameter=RiskParameter(
            margin=margin,
            maintenance=maintenance,
            min_margin=min_margin,
            min_maintenance=min_margin,
        ),
        global_state=Global(latest_price=price, current_id=1, latest_id=1),
        local=Local(latest_id=latest_id, current_id=current_id, collateral=collateral),
        latest_account_position=Position(id=latest_id, maker=account_maker, long="0", short="0"),
        pending_account_positions=pending,
        latest_position=Position(id=1, maker=market_maker, long=market_long, short=market_short),
    )


def register(market: InMemoryMarket, weight: int = 1, leverage: str = "1") -> Registration:
    return Registration(market=market, weight=weight, leverage=UFixed6.from_str(leverage))


@pytest.fixture
def market_builder():
    """Factory fixture returning build_market."""
    return build_market


@pytest.fixture
def registration_builder():
    """Factory fixture returning register."""
    return register


@pytest.fixture
def reset_logging():
    """Reset logging configuration before and after a test."""
    LoggerFactory.reset()
    yield
    LoggerFactory.reset()
