"""Data models for the market collaborator.

Defines the read-only records a market exposes to the allocator:
- MarketParameter: Market configuration (closed flag, maker limit)
- RiskParameter: Margin/maintenance ratios and their minimums
- Local: The vault's own account bookkeeping in a market
- Global: Market-wide state (latest price, current pending id)
- Position: A position snapshot, settled or pending
"""

from typing import Annotated, Any, Callable, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, PlainValidator, model_validator

from vaultalloc.libraries.numeric.fixed import Fixed6, UFixed6

T = TypeVar("T")


def _field_validator(coerce: Callable[[Any], T]) -> Callable[[Any], T]:
    """Adapt a fixed-point coercion so range errors surface as validation errors."""

    def validate(value: Any) -> T:
        try:
            return coerce(value)
        except ArithmeticError as e:
            raise ValueError(str(e)) from e

    return validate


UFixed6Field = Annotated[UFixed6, PlainValidator(_field_validator(UFixed6.coerce)), PlainSerializer(str, return_type=str)]
Fixed6Field = Annotated[Fixed6, PlainValidator(_field_validator(Fixed6.coerce)), PlainSerializer(str, return_type=str)]


class _MarketRecord(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True, populate_by_name=True)


class MarketParameter(_MarketRecord):
    """
    Market configuration.

    Attributes:
        closed: Market accepts no new exposure; vault positions are wound down
        maker_limit: Maximum aggregate maker position the market accepts
        settle: Market is in settle-only mode (informational)
        maker_fee: Maker trading fee ratio (informational)
        taker_fee: Taker trading fee ratio (informational)
    """

    closed: bool = False
    maker_limit: UFixed6Field = UFixed6.ZERO
    settle: bool = False
    maker_fee: UFixed6Field = UFixed6.ZERO
    taker_fee: UFixed6Field = UFixed6.ZERO


class RiskParameter(_MarketRecord):
    """
    Risk configuration.

    Attributes:
        margin: Initial margin ratio applied to position notional
        maintenance: Maintenance ratio applied to position notional
        min_margin: Floor on the margin requirement of any non-empty position
        min_maintenance: Floor on the maintenance requirement of any non-empty position
    """

    margin: UFixed6Field = UFixed6.ZERO
    maintenance: UFixed6Field = UFixed6.ZERO
    min_margin: UFixed6Field = UFixed6.ZERO
    min_maintenance: UFixed6Field = UFixed6.ZERO


class Local(_MarketRecord):
    """
    Account bookkeeping of the vault inside one market.

    Attributes:
        latest_id: Id of the latest settled position
        current_id: Id of the newest pending position
        collateral: Settled collateral held in the market
    """

    latest_id: int = Field(default=0, ge=0)
    current_id: int = Field(default=0, ge=0)
    collateral: Fixed6Field = Fixed6.ZERO

    @model_validator(mode="after")
    def validate_ids(self) -> "Local":
        """Validate the pending id never trails the settled one."""
        if self.current_id < self.latest_id:
            raise ValueError(f"current_id ({self.current_id}) must be >= latest_id ({self.latest_id})")
        return self


class Global(_MarketRecord):
    """
    Market-wide state.

    Attributes:
        latest_price: Price at the latest settlement
        current_id: Id of the newest market-wide pending position
        latest_id: Id of the latest settled market-wide position
    """

    latest_price: Fixed6Field = Fixed6.ZERO
    current_id: int = Field(default=0, ge=0)
    latest_id: int = Field(default=0, ge=0)


class Position(_MarketRecord):
    """
    Position snapshot.

    Pending snapshots may leave sides unset; reconcile() fills them from the
    latest settled snapshot so comparisons between snapshots are well-formed.

    Attributes:
        id: Snapshot id (settled or pending)
        maker: Maker (liquidity-providing) size
        long: Long taker size
        short: Short taker size

    Example:
        >>> latest = Position(id=3, maker="100", long="0", short="0")
        >>> pending = Position(id=4, maker="80")
        >>> pending.reconcile(latest).short
        UFixed6('0.000000')
    """

    id: int = Field(default=0, ge=0)
    maker: Optional[UFixed6Field] = None
    long: Optional[UFixed6Field] = None
    short: Optional[UFixed6Field] = None

    def reconcile(self, latest: "Position") -> "Position":
        """Fill unset sides from the latest settled snapshot.

        Sides still unset on both snapshots resolve to zero.
        """
        return Position(
            id=self.id,
            maker=self._side(self.maker, latest.maker),
            long=self._side(self.long, latest.long),
            short=self._side(self.short, latest.short),
        )

    @staticmethod
    def _side(value: Optional[UFixed6], fallback: Optional[UFixed6]) -> UFixed6:
        if value is not None:
            return value
        if fallback is not None:
            return fallback
        return UFixed6.ZERO

    @property
    def maker_size(self) -> UFixed6:
        return self.maker if self.maker is not None else UFixed6.ZERO

    @property
    def long_size(self) -> UFixed6:
        return self.long if self.long is not None else UFixed6.ZERO

    @property
    def short_size(self) -> UFixed6:
        return self.short if self.short is not None else UFixed6.ZERO

    def magnitude(self) -> UFixed6:
        """Largest side of the position."""
        return self.maker_size.max(self.long_size).max(self.short_size)

    def net(self) -> UFixed6:
        """Absolute taker imbalance |long - short|."""
        return (Fixed6.from_ufixed(self.long_size) - Fixed6.from_ufixed(self.short_size)).abs()

    def margin(self, price: Fixed6, risk_parameter: RiskParameter) -> UFixed6:
        """Margin requirement at ``price``: zero when empty, else floored at min_margin."""
        return self._requirement(price, risk_parameter.margin, risk_parameter.min_margin)

    def maintenance(self, price: Fixed6, risk_parameter: RiskParameter) -> UFixed6:
        """Maintenance requirement at ``price``: zero when empty, else floored at min_maintenance."""
        return self._requirement(price, risk_parameter.maintenance, risk_parameter.min_maintenance)

    def _requirement(self, price: Fixed6, ratio: UFixed6, minimum: UFixed6) -> UFixed6:
        magnitude = self.magnitude()
        if magnitude.is_zero():
            return UFixed6.ZERO
        return (magnitude * price.abs() * ratio).max(minimum)
