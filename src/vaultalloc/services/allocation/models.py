"""Data models for the allocation service.

Defines the entities flowing through a single allocation call:
- Registration: A market the vault trades, with its weight and leverage (input)
- MarketContext: Per-market state derived from the market's reads (transient)
- AllocationTotals: Weight and margin aggregates across markets (transient)
- MarketTarget: Collateral delta and target position for a market (output)
- AllocationBreakdown: A target together with its intermediates (diagnostics)

Design Principles:
- Immutable (frozen dataclasses)
- Built fresh inside each allocation call, never persisted
"""

from dataclasses import dataclass
from typing import Optional

from vaultalloc.libraries.numeric.fixed import Fixed6, UFixed6
from vaultalloc.libraries.risk.tools.limits import PositionLimits
from vaultalloc.services.market.interface import IMarketView
from vaultalloc.services.market.models import Local, MarketParameter, Position, RiskParameter


@dataclass(frozen=True)
class Registration:
    """A market registered with the vault.

    Attributes:
        market: Market view to read state from
        weight: Relative allocation weight (only ratios between weights matter)
        leverage: Multiplier from deployed assets to notional position

    Example:
        >>> registration = Registration(market=eth_market, weight=1, leverage=UFixed6.ONE)
    """

    market: IMarketView
    weight: int
    leverage: UFixed6

    def __post_init__(self) -> None:
        """Validate registration fields."""
        if isinstance(self.weight, bool) or not isinstance(self.weight, int):
            raise ValueError(f"weight must be an int, got {type(self.weight).__name__}")

        if self.weight < 0:
            raise ValueError(f"weight must be non-negative, got {self.weight}")

        if not isinstance(self.leverage, UFixed6):
            raise ValueError(f"leverage must be UFixed6, got {type(self.leverage).__name__}")

    @property
    def name(self) -> str:
        return getattr(self.market, "name", repr(self.market))


@dataclass(frozen=True)
class MarketContext:
    """Per-market state derived for one allocation call.

    Attributes:
        market_parameter: Market configuration
        risk_parameter: Risk configuration
        local: Vault bookkeeping in the market
        current_account_position: Vault position at its newest pending snapshot
        latest_account_position: Vault position at its latest settled snapshot
        current_position: Market-wide position at the newest pending snapshot
        latest_price: Price at latest settlement
        margin: Largest margin requirement across the vault's snapshots
        closable: Vault maker amount reducible without breaking pending commitments
    """

    market_parameter: MarketParameter
    risk_parameter: RiskParameter
    local: Local
    current_account_position: Position
    latest_account_position: Position
    current_position: Position
    latest_price: Fixed6
    margin: UFixed6
    closable: UFixed6


@dataclass(frozen=True)
class AllocationTotals:
    """Aggregates shared by every market's weighted split.

    Attributes:
        total_weight: Sum of registration weights
        total_margin: Sum of per-market margin requirements
    """

    total_weight: int
    total_margin: UFixed6


@dataclass(frozen=True)
class MarketTarget:
    """Rebalancing instruction for one market.

    Attributes:
        collateral: Signed collateral delta (positive = deposit, negative = withdraw)
        position: Target maker position size
    """

    collateral: Fixed6
    position: UFixed6

    def to_dict(self) -> dict[str, str]:
        return {
            "collateral": str(self.collateral),
            "position": str(self.position),
        }


@dataclass(frozen=True)
class AllocationBreakdown:
    """A market's target with the intermediates that produced it.

    Attributes:
        market: Market name
        weight: Registration weight
        market_collateral: Collateral target before subtracting the held collateral
        market_assets: Asset budget after the viability cutoff
        min_assets: Viability threshold for the asset budget
        limits: Position floor and ceiling
        skipped_reason: "closed", "below_min_assets" or "zero_total_weight" when the budget was zeroed
        target: Resulting instruction
    """

    market: str
    weight: int
    market_collateral: Fixed6
    market_assets: UFixed6
    min_assets: UFixed6
    limits: PositionLimits
    skipped_reason: Optional[str]
    target: MarketTarget

    def to_dict(self) -> dict[str, object]:
        """Serialize to plain types (fixed-point values as Decimal strings)."""
        return {
            "market": self.market,
            "weight": self.weight,
            "market_collateral": str(self.market_collateral),
            "market_assets": str(self.market_assets),
            "min_assets": str(self.min_assets),
            "min_position": str(self.limits.min_position),
            "max_position": str(self.limits.max_position),
            "skipped_reason": self.skipped_reason,
            **self.target.to_dict(),
        }
