"""Unit tests for allocation sizing tools.

Tests pure functions in libraries/risk/tools/sizing.py following pytest best practices.

Coverage focus:
- calculate_market_collateral: margin-first split, signed remainder, zero weights
- calculate_market_assets: weighted budget capped by the leverage buffer
- calculate_min_assets / apply_viability_cutoff: viability threshold
- calculate_target_position: leverage/price conversion then clamping
"""

from decimal import Decimal

import pytest

from vaultalloc.libraries.numeric.fixed import Fixed6, UFixed6
from vaultalloc.libraries.risk.tools.limits import PositionLimits
from vaultalloc.libraries.risk.tools.sizing import (
    LEVERAGE_BUFFER,
    apply_viability_cutoff,
    calculate_market_assets,
    calculate_market_collateral,
    calculate_min_assets,
    calculate_target_position,
)


def u(value: str) -> UFixed6:
    return UFixed6.from_str(value)


def s(value: str) -> Fixed6:
    return Fixed6.from_str(value)


WIDE_LIMITS = PositionLimits(min_position=UFixed6.ZERO, max_position=u("1000000"))


class TestCalculateMarketCollateral:
    """Test suite for calculate_market_collateral function."""

    def test_equal_weights_split_evenly(self):
        """Test two equal-weight markets with no margin each get half."""
        # Arrange
        collateral = u("1000")

        # Act
        result = calculate_market_collateral(
            margin=UFixed6.ZERO,
            collateral=collateral,
            total_margin=UFixed6.ZERO,
            weight=1,
            total_weight=2,
        )

        # Assert
        assert result == s("500")
        assert isinstance(result, Fixed6)

    def test_margin_funded_before_weighted_split(self):
        """Test margin is added on top of the weighted remainder."""
        result = calculate_market_collateral(
            margin=u("100"),
            collateral=u("1000"),
            total_margin=u("150"),
            weight=1,
            total_weight=2,
        )
        # 100 + (1000 - 150) / 2 = 525
        assert result == s("525")

    def test_under_margined_vault_gets_negative_adjustment(self):
        """Test collateral below total margin reduces each market's share."""
        result = calculate_market_collateral(
            margin=u("100"),
            collateral=u("200"),
            total_margin=u("300"),
            weight=1,
            total_weight=2,
        )
        # 100 + (200 - 300) / 2 = 50
        assert result == s("50")

    def test_deep_deficit_produces_negative_target(self):
        """Test the target itself can go negative."""
        result = calculate_market_collateral(
            margin=UFixed6.ZERO,
            collateral=u("100"),
            total_margin=u("300"),
            weight=1,
            total_weight=2,
        )
        assert result == s("-100")

    def test_zero_total_weight_yields_margin_only(self):
        """Test a zero total weight gives no remainder share instead of failing."""
        result = calculate_market_collateral(
            margin=u("100"),
            collateral=u("1000"),
            total_margin=u("100"),
            weight=0,
            total_weight=0,
        )
        assert result == s("100")

    def test_share_truncates_toward_zero(self):
        """Test one third of 1000 truncates at the sixth decimal."""
        result = calculate_market_collateral(
            margin=UFixed6.ZERO,
            collateral=u("1000"),
            total_margin=UFixed6.ZERO,
            weight=1,
            total_weight=3,
        )
        assert result == s("333.333333")


class TestCalculateMarketAssets:
    """Test suite for calculate_market_assets function."""

    def test_weighted_assets_bind(self):
        """Test min(400, 500 * 1.2) = 400."""
        result = calculate_market_assets(
            assets=u("800"),
            weight=1,
            total_weight=2,
            market_collateral=s("500"),
        )
        assert result == s("400")

    def test_leverage_buffer_binds(self):
        """Test min(800, 500 * 1.2) = 600."""
        result = calculate_market_assets(
            assets=u("800"),
            weight=1,
            total_weight=1,
            market_collateral=s("500"),
        )
        assert result == s("600")

    def test_budget_never_exceeds_buffered_collateral(self):
        """Test assets far above collateral are capped at 1.2x collateral."""
        result = calculate_market_assets(
            assets=u("1000"),
            weight=1,
            total_weight=1,
            market_collateral=s("100"),
        )
        assert result == s("120")

    def test_buffer_cannot_be_overridden(self):
        """Test the leverage buffer is not a keyword argument."""
        with pytest.raises(TypeError):
            calculate_market_assets(
                assets=u("800"),
                weight=1,
                total_weight=1,
                market_collateral=s("500"),
                leverage_buffer=UFixed6.ONE,
            )
    def test_negative_collateral_gives_negative_budget(self):
        """Test a negative collateral target propagates into the budget."""
        result = calculate_market_assets(
            assets=u("800"),
            weight=1,
            total_weight=2,
            market_collateral=s("-100"),
        )
        assert result == s("-120")

    def test_zero_total_weight_gives_zero_budget(self):
        """Test guarded division on an empty weight set."""
        result = calculate_market_assets(
            assets=u("800"),
            weight=0,
            total_weight=0,
            market_collateral=Fixed6.ZERO,
        )
        assert result == Fixed6.ZERO

    def test_default_buffer_is_one_point_two(self):
        """Test the default leverage buffer constant."""
        assert LEVERAGE_BUFFER.to_decimal() == Decimal("1.2")


class TestViability:
    """Test suite for calculate_min_assets and apply_viability_cutoff."""

    def test_min_assets(self):
        """Test 15 / (1 * 0.3) = 50."""
        result = calculate_min_assets(min_margin=u("15"), leverage=UFixed6.ONE, maintenance=u("0.3"))
        assert result == u("50")

    @pytest.mark.parametrize("leverage,maintenance", [("0", "0.3"), ("1", "0")])
    def test_min_assets_zero_divisor_is_zero(self, leverage, maintenance):
        """Test zero leverage or maintenance disables the threshold."""
        result = calculate_min_assets(min_margin=u("15"), leverage=u(leverage), maintenance=u(maintenance))
        assert result == UFixed6.ZERO

    def test_budget_below_threshold_is_zeroed(self):
        """Test a 40 budget against a 50 threshold."""
        result = apply_viability_cutoff(market_assets=s("40"), min_assets=u("50"), closed=False)
        assert result == UFixed6.ZERO

    def test_budget_at_threshold_is_kept(self):
        """Test the threshold itself is viable."""
        result = apply_viability_cutoff(market_assets=s("50"), min_assets=u("50"), closed=False)
        assert result == u("50")

    def test_closed_market_is_zeroed(self):
        """Test closed markets get no budget regardless of size."""
        result = apply_viability_cutoff(market_assets=s("5000"), min_assets=UFixed6.ZERO, closed=True)
        assert result == UFixed6.ZERO

    def test_negative_budget_is_zeroed(self):
        """Test a negative budget never reaches the position conversion."""
        result = apply_viability_cutoff(market_assets=s("-120"), min_assets=UFixed6.ZERO, closed=False)
        assert result == UFixed6.ZERO


class TestCalculateTargetPosition:
    """Test suite for calculate_target_position function."""

    def test_budget_over_price(self):
        """Test 400 / 10 at 1x leverage."""
        result = calculate_target_position(
            market_assets=u("400"), leverage=UFixed6.ONE, price=s("10"), limits=WIDE_LIMITS
        )
        assert result == u("40")

    def test_leverage_multiplies_position(self):
        """Test 400 * 2 / 10."""
        result = calculate_target_position(
            market_assets=u("400"), leverage=u("2"), price=s("10"), limits=WIDE_LIMITS
        )
        assert result == u("80")

    def test_negative_price_uses_magnitude(self):
        """Test price sign does not affect size."""
        result = calculate_target_position(
            market_assets=u("400"), leverage=UFixed6.ONE, price=s("-2"), limits=WIDE_LIMITS
        )
        assert result == u("200")

    def test_zero_price_clamps_from_zero(self):
        """Test a zero price converts to zero and then meets the floor."""
        limits = PositionLimits(min_position=u("5"), max_position=u("100"))
        result = calculate_target_position(
            market_assets=u("400"), leverage=UFixed6.ONE, price=Fixed6.ZERO, limits=limits
        )
        assert result == u("5")

    def test_ceiling_binds(self):
        """Test the maker limit headroom caps the position."""
        limits = PositionLimits(min_position=UFixed6.ZERO, max_position=u("25"))
        result = calculate_target_position(
            market_assets=u("400"), leverage=UFixed6.ONE, price=s("10"), limits=limits
        )
        assert result == u("25")
