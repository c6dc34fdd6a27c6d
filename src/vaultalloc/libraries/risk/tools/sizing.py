"""Allocation sizing tools.

Pure functions turning a vault's collateral and assets into per-market
collateral targets, asset budgets and position targets.
All functions are stateless and thread-safe.

Design Principles:
- Pure functions (no side effects, no global state)
- Fixed-point arithmetic only; every ratio truncates toward zero
- Zero denominators (total weight, leverage, maintenance, price) collapse
  the affected quantity to zero instead of failing

Pipeline (per market):
    1. market_collateral = margin + (collateral - total_margin) * weight / total_weight
    2. market_assets     = min(assets * weight / total_weight, market_collateral * LEVERAGE_BUFFER)
    3. min_assets        = min_margin / (leverage * maintenance)
       market_assets     = 0 if closed or market_assets < min_assets
    4. position          = clamp(market_assets * leverage / |price|, min_position, max_position)
"""

from decimal import Decimal

from vaultalloc.libraries.numeric.fixed import Fixed6, UFixed6
from vaultalloc.libraries.risk.tools.limits import PositionLimits

LEVERAGE_BUFFER = UFixed6.from_decimal(Decimal("1.2"))


def calculate_market_collateral(
    *,
    margin: UFixed6,
    collateral: UFixed6,
    total_margin: UFixed6,
    weight: int,
    total_weight: int,
) -> Fixed6:
    """Collateral target for one market: margin first, remainder by weight.

    The remainder ``collateral - total_margin`` is signed: an under-margined
    vault produces a negative proportional adjustment.

    Args:
        margin: This market's margin requirement
        collateral: Vault's total collateral
        total_margin: Sum of margin requirements across all markets
        weight: This market's weight
        total_weight: Sum of weights across all markets (0 yields no remainder share)

    Returns:
        Signed collateral target

    Example:
        >>> calculate_market_collateral(
        ...     margin=UFixed6.ZERO,
        ...     collateral=UFixed6.from_int(1000),
        ...     total_margin=UFixed6.ZERO,
        ...     weight=1,
        ...     total_weight=2,
        ... )
        Fixed6('500.000000')
    """
    remainder = Fixed6.from_ufixed(collateral) - Fixed6.from_ufixed(total_margin)
    return Fixed6.from_ufixed(margin) + remainder.unsafe_muldiv(weight, total_weight)


def calculate_market_assets(
    *,
    assets: UFixed6,
    weight: int,
    total_weight: int,
    market_collateral: Fixed6,
) -> Fixed6:
    """Deployable asset budget for one market, capped by the leverage buffer.

    Formula:
        min(assets * weight / total_weight, market_collateral * LEVERAGE_BUFFER)

    Returns:
        Signed budget (negative only when market_collateral is negative)

    Example:
        >>> calculate_market_assets(
        ...     assets=UFixed6.from_int(800),
        ...     weight=1,
        ...     total_weight=2,
        ...     market_collateral=Fixed6.from_int(500),
        ... )
        Fixed6('400.000000')
    """
    weighted_assets = Fixed6.from_ufixed(assets.unsafe_muldiv(weight, total_weight))
    buffered_collateral = market_collateral * Fixed6.from_ufixed(LEVERAGE_BUFFER)
    return weighted_assets.min(buffered_collateral)


def calculate_min_assets(*, min_margin: UFixed6, leverage: UFixed6, maintenance: UFixed6) -> UFixed6:
    """Smallest asset budget able to carry a maintainable position.

    Formula:
        min_margin / (leverage * maintenance), zero when the divisor is zero
    """
    return min_margin.unsafe_div(leverage * maintenance)


def apply_viability_cutoff(*, market_assets: Fixed6, min_assets: UFixed6, closed: bool) -> UFixed6:
    """Zero the budget of closed markets and of budgets below ``min_assets``.

    Negative budgets always fall below the (non-negative) threshold.

    Example:
        >>> apply_viability_cutoff(
        ...     market_assets=Fixed6.from_int(40),
        ...     min_assets=UFixed6.from_int(50),
        ...     closed=False,
        ... )
        UFixed6('0.000000')
    """
    if closed or market_assets < Fixed6.from_ufixed(min_assets):
        return UFixed6.ZERO
    return UFixed6.from_signed(market_assets)


def calculate_target_position(
    *,
    market_assets: UFixed6,
    leverage: UFixed6,
    price: Fixed6,
    limits: PositionLimits,
) -> UFixed6:
    """Convert an asset budget to a position and clamp it into ``limits``.

    The leverage/price conversion happens before clamping, so the limits are
    the final bound whatever the conversion requests. A zero price converts
    to a zero position before clamping.

    Example:
        >>> calculate_target_position(
        ...     market_assets=UFixed6.from_int(400),
        ...     leverage=UFixed6.ONE,
        ...     price=Fixed6.from_int(-2),
        ...     limits=PositionLimits(UFixed6.ZERO, UFixed6.from_int(1000)),
        ... )
        UFixed6('200.000000')
    """
    position = market_assets.unsafe_muldiv(leverage, price.abs())
    return limits.clamp(position)
