"""Allocation aggregates.

Reduces registrations and their contexts to the shared denominators of the
weighted split. Margins sum across distinct markets, unlike the per-market
running maximum taken while loading a context.
"""

from typing import Sequence

from vaultalloc.libraries.numeric.fixed import UFixed6
from vaultalloc.services.allocation.models import AllocationTotals, MarketContext, Registration


def aggregate(registrations: Sequence[Registration], contexts: Sequence[MarketContext]) -> AllocationTotals:
    """Sum weights and margin requirements across all markets.

    Args:
        registrations: Registered markets
        contexts: Contexts index-aligned with registrations

    Returns:
        AllocationTotals (total_weight is 0 for an empty or all-zero-weight set)

    Raises:
        ValueError: If registrations and contexts differ in length
    """
    if len(registrations) != len(contexts):
        raise ValueError(
            f"registrations and contexts must be index-aligned, got {len(registrations)} and {len(contexts)}"
        )

    total_weight = sum(registration.weight for registration in registrations)

    total_margin = UFixed6.ZERO
    for context in contexts:
        total_margin = total_margin + context.margin

    return AllocationTotals(total_weight=total_weight, total_margin=total_margin)
