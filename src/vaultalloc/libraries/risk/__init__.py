"""
Risk Library.

Pure function-based tools for sizing per-market allocations and bounding
the resulting positions. All tools are stateless, composable, and easy to test.

Architecture:
- tools/sizing.py: Collateral targets, asset budgets, viability cutoff, position targets
- tools/limits.py: Position floor/ceiling from net exposure and maker limit

Usage:
    >>> from vaultalloc.libraries.risk.tools import limits, sizing
    >>>
    >>> bounds = limits.calculate_position_limits(
    ...     account_maker=UFixed6.from_int(300),
    ...     market_maker=UFixed6.from_int(1000),
    ...     market_net=UFixed6.ZERO,
    ...     closable=UFixed6.from_int(300),
    ...     maker_limit=UFixed6.from_int(1200),
    ... )
    >>> sizing.calculate_target_position(
    ...     market_assets=UFixed6.from_int(400),
    ...     leverage=UFixed6.ONE,
    ...     price=Fixed6.from_int(2),
    ...     limits=bounds,
    ... )
    UFixed6('200.000000')
"""

from vaultalloc.libraries.risk.tools.limits import PositionLimits, calculate_position_limits
from vaultalloc.libraries.risk.tools.sizing import LEVERAGE_BUFFER

__all__ = [
    "PositionLimits",
    "calculate_position_limits",
    "LEVERAGE_BUFFER",
]
