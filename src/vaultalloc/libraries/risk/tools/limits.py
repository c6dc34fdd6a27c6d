"""Position limit tools.

Pure functions bounding the maker position a vault may hold in one market
after rebalancing. All functions are stateless and thread-safe.

Supported Limits:
- Floor: the vault may not shrink its maker position below what the market's
  net taker exposure still needs, nor by more than what is closable
- Ceiling: the vault may grow its maker position only by the unused headroom
  under the market's maker limit

Both bounds are non-negative by construction: every subtraction is preceded
by a min() bounding the subtrahend.
"""

from dataclasses import dataclass

from vaultalloc.libraries.numeric.fixed import UFixed6


@dataclass(frozen=True)
class PositionLimits:
    """Feasible maker position range for one market.

    Attributes:
        min_position: Smallest maker position the vault may hold
        max_position: Largest maker position the vault may hold
    """

    min_position: UFixed6
    max_position: UFixed6

    def clamp(self, position: UFixed6) -> UFixed6:
        """Clamp ``position`` into the range (floor applied first, then ceiling)."""
        return position.max(self.min_position).min(self.max_position)

    def contains(self, position: UFixed6) -> bool:
        return self.min_position <= position <= self.max_position


def calculate_min_position(
    *,
    account_maker: UFixed6,
    market_maker: UFixed6,
    market_net: UFixed6,
    closable: UFixed6,
) -> UFixed6:
    """Smallest maker position before crossing the market's net exposure.

    Formula:
        spare_maker = market_maker - min(market_net, market_maker)
        reducible = min(spare_maker, account_maker, closable)
        min_position = account_maker - reducible

    Args:
        account_maker: Vault's maker position at its newest pending snapshot
        market_maker: Market-wide maker position at the newest pending snapshot
        market_net: Market-wide net taker exposure |long - short|
        closable: Vault maker amount reducible without breaking pending commitments

    Returns:
        Minimum maker position (always <= account_maker)

    Example:
        >>> calculate_min_position(
        ...     account_maker=UFixed6.from_int(300),
        ...     market_maker=UFixed6.from_int(1000),
        ...     market_net=UFixed6.from_int(900),
        ...     closable=UFixed6.from_int(300),
        ... )
        UFixed6('200.000000')
    """
    spare_maker = market_maker - market_net.min(market_maker)
    reducible = spare_maker.min(account_maker).min(closable)
    return account_maker - reducible


def calculate_max_position(
    *,
    account_maker: UFixed6,
    market_maker: UFixed6,
    maker_limit: UFixed6,
) -> UFixed6:
    """Largest maker position before crossing the market's maker limit.

    Formula:
        max_position = account_maker + (maker_limit - min(market_maker, maker_limit))

    Example:
        >>> calculate_max_position(
        ...     account_maker=UFixed6.from_int(300),
        ...     market_maker=UFixed6.from_int(1000),
        ...     maker_limit=UFixed6.from_int(1200),
        ... )
        UFixed6('500.000000')
    """
    return account_maker + (maker_limit - market_maker.min(maker_limit))


def calculate_position_limits(
    *,
    account_maker: UFixed6,
    market_maker: UFixed6,
    market_net: UFixed6,
    closable: UFixed6,
    maker_limit: UFixed6,
) -> PositionLimits:
    """Compute both position bounds for a market.

    Returns:
        PositionLimits with min_position <= account_maker <= max_position
    """
    return PositionLimits(
        min_position=calculate_min_position(
            account_maker=account_maker,
            market_maker=market_maker,
            market_net=market_net,
            closable=closable,
        ),
        max_position=calculate_max_position(
            account_maker=account_maker,
            market_maker=market_maker,
            maker_limit=maker_limit,
        ),
    )
