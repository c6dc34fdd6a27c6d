"""Allocation service implementation.

Splits a vault's collateral and assets across its registered markets in a
single deterministic pass:

1. Load one MarketContext per registration (reads only, optionally concurrent)
2. Aggregate total weight and total margin
3. Per market: fund margin first, share the remainder by weight, cap the
   asset budget with the leverage buffer, zero budgets below the viability
   threshold, convert to a position and clamp it into the market's limits

Every call is a pure function of its inputs and the market state read during
the call. Any read failure or arithmetic overflow aborts the whole call.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

from vaultalloc.libraries.numeric.errors import AllocationError
from vaultalloc.libraries.numeric.fixed import Fixed6, UFixed6
from vaultalloc.libraries.risk.tools.limits import PositionLimits, calculate_position_limits
from vaultalloc.libraries.risk.tools.sizing import (
    apply_viability_cutoff,
    calculate_market_assets,
    calculate_market_collateral,
    calculate_min_assets,
    calculate_target_position,
)
from vaultalloc.services.allocation.aggregate import aggregate
from vaultalloc.services.allocation.context import load_context
from vaultalloc.services.allocation.models import (
    AllocationBreakdown,
    AllocationTotals,
    MarketContext,
    MarketTarget,
    Registration,
)
from vaultalloc.system import LoggerFactory
from vaultalloc.system.config import AllocationConfig

logger = LoggerFactory.get_logger()


class AllocationService:
    """Allocator for one vault account.

    Holds only configuration; no state survives between calls.

    Attributes:
        account: Vault account whose bookkeeping is read from each market
        config: Allocation configuration (read concurrency)

    Example:
        >>> service = AllocationService(account="vault")
        >>> targets = service.allocate(
        ...     registrations=[
        ...         Registration(market=eth, weight=1, leverage=UFixed6.ONE),
        ...         Registration(market=btc, weight=1, leverage=UFixed6.ONE),
        ...     ],
        ...     collateral=UFixed6.from_int(1000),
        ...     assets=UFixed6.from_int(800),
        ... )
        >>> [str(t.collateral) for t in targets]
        ['500.000000', '500.000000']
    """

    def __init__(self, account: str, config: Optional[AllocationConfig] = None) -> None:
        if not account:
            raise ValueError("account cannot be empty")

        self.account = account
        self.config = config if config is not None else AllocationConfig()

    def load_contexts(self, registrations: Sequence[Registration]) -> list[MarketContext]:
        """Load every market's context, index-aligned with ``registrations``.

        Reads fan out over a thread pool when config.max_workers > 1. The
        first failure propagates and no contexts are returned.

        Raises:
            CollaboratorReadError: If any market read fails
        """
        if self.config.max_workers <= 1 or len(registrations) <= 1:
            return [load_context(registration, self.account) for registration in registrations]

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = [executor.submit(load_context, registration, self.account) for registration in registrations]
            return [future.result() for future in futures]

    def allocate(
        self,
        registrations: Sequence[Registration],
        collateral: UFixed6,
        assets: UFixed6,
    ) -> list[MarketTarget]:
        """Compute one target per registration.

        Args:
            registrations: Registered markets
            collateral: Vault's total collateral
            assets: Portion of collateral deployable into positions

        Returns:
            MarketTargets index-aligned with registrations

        Raises:
            ValueError: If collateral or assets is not a UFixed6
            CollaboratorReadError: If any market read fails
            ArithmeticOverflowError: If any step leaves the fixed-point range
        """
        return [breakdown.target for breakdown in self.allocate_with_breakdown(registrations, collateral, assets)]

    def allocate_with_breakdown(
        self,
        registrations: Sequence[Registration],
        collateral: UFixed6,
        assets: UFixed6,
    ) -> list[AllocationBreakdown]:
        """Compute targets together with their per-market intermediates.

        Same contract as allocate().
        """
        if not isinstance(collateral, UFixed6):
            raise ValueError(f"collateral must be UFixed6, got {type(collateral).__name__}")
        if not isinstance(assets, UFixed6):
            raise ValueError(f"assets must be UFixed6, got {type(assets).__name__}")

        try:
            contexts = self.load_contexts(registrations)
            totals = aggregate(registrations, contexts)
            breakdowns = [
                self._allocate_market(registration, context, totals, collateral, assets)
                for registration, context in zip(registrations, contexts)
            ]
        except AllocationError as e:
            logger.error(
                "allocation.failed",
                account=self.account,
                markets=len(registrations),
                error_type=type(e).__name__,
                error=str(e),
            )
            raise

        logger.info(
            "allocation.completed",
            account=self.account,
            markets=len(breakdowns),
            total_weight=totals.total_weight,
            total_margin=str(totals.total_margin),
            collateral=str(collateral),
            assets=str(assets),
            skipped=sum(1 for b in breakdowns if b.skipped_reason is not None),
        )

        return breakdowns

    def _allocate_market(
        self,
        registration: Registration,
        context: MarketContext,
        totals: AllocationTotals,
        collateral: UFixed6,
        assets: UFixed6,
    ) -> AllocationBreakdown:
        """Compute one market's target from its context and the shared totals."""
        limits = calculate_position_limits(
            account_maker=context.current_account_position.maker_size,
            market_maker=context.current_position.maker_size,
            market_net=context.current_position.net(),
            closable=context.closable,
            maker_limit=context.market_parameter.maker_limit,
        )

        if totals.total_weight == 0:
            return self._unweighted_market(registration, context, limits)

        market_collateral = calculate_market_collateral(
            margin=context.margin,
            collateral=collateral,
            total_margin=totals.total_margin,
            weight=registration.weight,
            total_weight=totals.total_weight,
        )

        budget = calculate_market_assets(
            assets=assets,
            weight=registration.weight,
            total_weight=totals.total_weight,
            market_collateral=market_collateral,
        )

        min_assets = calculate_min_assets(
            min_margin=context.risk_parameter.min_margin,
            leverage=registration.leverage,
            maintenance=context.risk_parameter.maintenance,
        )

        closed = context.market_parameter.closed
        market_assets = apply_viability_cutoff(market_assets=budget, min_assets=min_assets, closed=closed)

        skipped_reason: Optional[str] = None
        if closed:
            skipped_reason = "closed"
        elif budget < Fixed6.from_ufixed(min_assets):
            skipped_reason = "below_min_assets"

        position = calculate_target_position(
            market_assets=market_assets,
            leverage=registration.leverage,
            price=context.latest_price,
            limits=limits,
        )

        target = MarketTarget(
            collateral=market_collateral - context.local.collateral,
            position=position,
        )

        if skipped_reason is not None:
            logger.warning(
                "allocation.market.skipped",
                market=registration.name,
                reason=skipped_reason,
                budget=str(budget),
                min_assets=str(min_assets),
            )

        logger.debug(
            "allocation.market.allocated",
            market=registration.name,
            weight=registration.weight,
            market_collateral=str(market_collateral),
            market_assets=str(market_assets),
            min_position=str(limits.min_position),
            max_position=str(limits.max_position),
            collateral_delta=str(target.collateral),
            position=str(target.position),
        )

        return AllocationBreakdown(
            market=registration.name,
            weight=registration.weight,
            market_collateral=market_collateral,
            market_assets=market_assets,
            min_assets=min_assets,
            limits=limits,
            skipped_reason=skipped_reason,
            target=target,
        )

    def _unweighted_market(
        self,
        registration: Registration,
        context: MarketContext,
        limits: PositionLimits,
    ) -> AllocationBreakdown:
        """Zero target for a market when no registration carries weight.

        Nothing moves: the collateral delta and the position are both zero,
        even where the position floor is above zero.
        """
        logger.warning(
            "allocation.market.skipped",
            market=registration.name,
            reason="zero_total_weight",
        )

        return AllocationBreakdown(
            market=registration.name,
            weight=registration.weight,
            market_collateral=context.local.collateral,
            market_assets=UFixed6.ZERO,
            min_assets=UFixed6.ZERO,
            limits=limits,
            skipped_reason="zero_total_weight",
            target=MarketTarget(collateral=Fixed6.ZERO, position=UFixed6.ZERO),
        )


def allocate(
    registrations: Sequence[Registration],
    collateral: UFixed6,
    assets: UFixed6,
    *,
    account: str,
    config: Optional[AllocationConfig] = None,
) -> list[MarketTarget]:
    """Allocate collateral and assets across registered markets.

    Pure-function entry point; see AllocationService.allocate().
    """
    return AllocationService(account=account, config=config).allocate(registrations, collateral, assets)
