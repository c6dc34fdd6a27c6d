"""Unit tests for fixed-point decimal types.

Tests libraries/numeric/fixed.py.

Coverage focus:
- Construction from raw, int, Decimal, str and loosely typed input
- Truncation toward zero for products and quotients
- Range enforcement (ArithmeticOverflowError)
- Guarded divisions (unsafe_div, unsafe_muldiv)
- Signed/unsigned conversions
"""

import pickle
from decimal import Decimal

import pytest

from vaultalloc.libraries.numeric import AllocationError, ArithmeticOverflowError
from vaultalloc.libraries.numeric.fixed import (
    BASE,
    FIXED6_MAX_RAW,
    FIXED6_MIN_RAW,
    UFIXED6_MAX_RAW,
    Fixed6,
    UFixed6,
)


class TestConstruction:
    """Test fixed-point constructors."""

    def test_from_str_scales_by_six_decimals(self):
        """Test decimal strings map to value * 10**6."""
        assert UFixed6.from_str("1.2").raw == 1_200_000
        assert Fixed6.from_str("-0.5").raw == -500_000

    def test_from_str_truncates_extra_digits_toward_zero(self):
        """Test digits past the sixth place are dropped, not rounded."""
        assert UFixed6.from_str("1.2345679").raw == 1_234_567
        assert Fixed6.from_str("-1.2345679").raw == -1_234_567

    def test_from_str_rejects_garbage(self):
        """Test non-numeric strings raise ValueError."""
        with pytest.raises(ValueError):
            UFixed6.from_str("twelve")

    def test_from_str_rejects_non_finite(self):
        """Test NaN and infinity are rejected."""
        with pytest.raises(ValueError):
            UFixed6.from_str("NaN")
        with pytest.raises(ValueError):
            Fixed6.from_str("-Infinity")

    def test_from_int(self):
        """Test whole numbers."""
        assert UFixed6.from_int(5) == UFixed6.from_str("5")
        assert UFixed6.from_int(5).raw == 5 * BASE

    def test_from_decimal_handles_values_wider_than_context_precision(self):
        """Test exact conversion of a 40-digit Decimal."""
        value = Decimal("1234567890123456789012345678901234.567890")
        assert UFixed6.from_decimal(value).raw == 1234567890123456789012345678901234567890

    def test_unsigned_rejects_negative(self):
        """Test UFixed6 cannot hold a negative value."""
        with pytest.raises(ArithmeticOverflowError):
            UFixed6.from_str("-1")

    def test_raw_must_be_int(self):
        """Test raw constructor rejects floats and bools."""
        with pytest.raises(TypeError):
            UFixed6.from_raw(1.5)  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            UFixed6.from_raw(True)

    def test_range_bounds(self):
        """Test the 256-bit range is enforced at both ends."""
        assert UFixed6.from_raw(UFIXED6_MAX_RAW).raw == UFIXED6_MAX_RAW
        assert Fixed6.from_raw(FIXED6_MIN_RAW).raw == FIXED6_MIN_RAW

        with pytest.raises(ArithmeticOverflowError):
            UFixed6.from_raw(UFIXED6_MAX_RAW + 1)
        with pytest.raises(ArithmeticOverflowError):
            Fixed6.from_raw(FIXED6_MAX_RAW + 1)
        with pytest.raises(ArithmeticOverflowError):
            Fixed6.from_raw(FIXED6_MIN_RAW - 1)


class TestCoerce:
    """Test loosely typed conversion used by models and loaders."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2.5", 2_500_000),
            (3, 3_000_000),
            (Decimal("0.000001"), 1),
            (0.1, 100_000),
        ],
    )
    def test_coerce_accepts_common_inputs(self, value, expected):
        """Test str, int, Decimal and float inputs."""
        assert UFixed6.coerce(value).raw == expected

    def test_coerce_returns_same_instance_for_same_type(self):
        """Test no copy is made for an existing value."""
        value = UFixed6.from_int(7)
        assert UFixed6.coerce(value) is value

    def test_coerce_converts_between_signedness(self):
        """Test a non-negative Fixed6 converts to UFixed6."""
        assert UFixed6.coerce(Fixed6.from_int(4)) == UFixed6.from_int(4)

    def test_coerce_rejects_bool_and_unknown_types(self):
        """Test bool and arbitrary objects raise ValueError."""
        with pytest.raises(ValueError):
            UFixed6.coerce(True)
        with pytest.raises(ValueError):
            UFixed6.coerce([1])


class TestArithmetic:
    """Test operators and truncation."""

    def test_add_and_subtract(self):
        """Test same-type addition and subtraction."""
        a = UFixed6.from_str("1.5")
        b = UFixed6.from_str("0.25")
        assert a + b == UFixed6.from_str("1.75")
        assert a - b == UFixed6.from_str("1.25")

    def test_unsigned_subtraction_below_zero_overflows(self):
        """Test UFixed6 underflow raises."""
        with pytest.raises(ArithmeticOverflowError):
            UFixed6.ZERO - UFixed6.ONE

    def test_addition_past_max_overflows(self):
        """Test UFixed6 overflow raises."""
        with pytest.raises(ArithmeticOverflowError):
            UFixed6.from_raw(UFIXED6_MAX_RAW) + UFixed6.from_raw(1)

    def test_multiply(self):
        """Test product keeps six decimals."""
        assert UFixed6.from_str("1.5") * UFixed6.from_str("1.5") == UFixed6.from_str("2.25")

    def test_multiply_truncates_toward_zero(self):
        """Test sub-unit products truncate toward zero for both signs."""
        tiny = Fixed6.from_raw(1)
        half = Fixed6.from_str("0.5")
        assert (tiny * half).raw == 0
        # Floor division would give -1 here
        assert (-tiny * half).raw == 0

    def test_divide_truncates_toward_zero(self):
        """Test 1/3 and -1/3."""
        three = Fixed6.from_int(3)
        assert Fixed6.ONE / three == Fixed6.from_str("0.333333")
        assert -Fixed6.ONE / three == Fixed6.from_str("-0.333333")

    def test_divide_by_zero_raises(self):
        """Test plain division by zero is an arithmetic error."""
        with pytest.raises(ArithmeticOverflowError):
            UFixed6.ONE / UFixed6.ZERO

    def test_unsafe_div_by_zero_returns_zero(self):
        """Test guarded division yields zero."""
        assert UFixed6.from_int(40).unsafe_div(UFixed6.ZERO) == UFixed6.ZERO

    def test_unsafe_div_nonzero_matches_div(self):
        """Test guarded division behaves normally otherwise."""
        assert UFixed6.from_int(10).unsafe_div(UFixed6.from_str("0.3")) == UFixed6.from_str("33.333333")

    def test_muldiv_with_integer_weights(self):
        """Test weights as plain ints."""
        assert UFixed6.from_int(1000).muldiv(1, 3) == UFixed6.from_str("333.333333")

    def test_muldiv_with_fixed_operands_cancels_scale(self):
        """Test fixed-point numerator and denominator."""
        assets = UFixed6.from_int(400)
        result = assets.muldiv(UFixed6.from_int(2), UFixed6.from_int(10))
        assert result == UFixed6.from_int(80)

    def test_muldiv_has_no_intermediate_overflow(self):
        """Test a product beyond the range is fine when the quotient fits."""
        big = UFixed6.from_raw(UFIXED6_MAX_RAW)
        assert big.muldiv(UFIXED6_MAX_RAW, UFIXED6_MAX_RAW) == big

    def test_muldiv_by_zero_raises(self):
        """Test unguarded muldiv by zero raises."""
        with pytest.raises(ArithmeticOverflowError):
            UFixed6.ONE.muldiv(1, 0)

    def test_unsafe_muldiv_by_zero_returns_zero(self):
        """Test guarded muldiv by zero yields zero."""
        assert UFixed6.from_int(800).unsafe_muldiv(1, 0) == UFixed6.ZERO
        assert Fixed6.from_int(-800).unsafe_muldiv(1, UFixed6.ZERO) == Fixed6.ZERO

    def test_mixed_types_are_rejected(self):
        """Test UFixed6 and Fixed6 do not mix implicitly."""
        with pytest.raises(TypeError):
            UFixed6.ONE + Fixed6.ONE  # type: ignore[operator]

    def test_min_max(self):
        """Test min and max."""
        a = UFixed6.from_int(1)
        b = UFixed6.from_int(2)
        assert a.min(b) == a
        assert a.max(b) == b


class TestSigned:
    """Test Fixed6-specific behaviour and conversions."""

    def test_abs_returns_unsigned(self):
        """Test magnitude of a negative price."""
        result = Fixed6.from_str("-2000").abs()
        assert isinstance(result, UFixed6)
        assert result == UFixed6.from_int(2000)

    def test_sign(self):
        """Test sign of negative, zero and positive values."""
        assert Fixed6.from_int(-3).sign() == -1
        assert Fixed6.ZERO.sign() == 0
        assert Fixed6.from_int(3).sign() == 1

    def test_from_signed_rejects_negative(self):
        """Test strict signed to unsigned conversion."""
        with pytest.raises(ArithmeticOverflowError):
            UFixed6.from_signed(Fixed6.from_int(-1))

    def test_from_signed_clamped_floors_at_zero(self):
        """Test clamped conversion."""
        assert UFixed6.from_signed_clamped(Fixed6.from_int(-1)) == UFixed6.ZERO
        assert UFixed6.from_signed_clamped(Fixed6.from_int(4)) == UFixed6.from_int(4)


class TestValueSemantics:
    """Test display, equality and immutability."""

    def test_str_and_repr(self):
        """Test six-decimal rendering."""
        value = UFixed6.from_str("1.2")
        assert str(value) == "1.200000"
        assert repr(value) == "UFixed6('1.200000')"
        assert str(Fixed6.from_str("-0.000001")) == "-0.000001"

    def test_to_decimal_is_exact(self):
        """Test Decimal conversion."""
        assert Fixed6.from_str("-12.5").to_decimal() == Decimal("-12.500000")

    def test_equality_is_type_sensitive(self):
        """Test equal raw values of different types are not equal."""
        assert UFixed6.ONE != Fixed6.ONE
        assert UFixed6.from_int(1) == UFixed6.ONE

    def test_hashable(self):
        """Test equal values hash equally."""
        assert len({UFixed6.from_int(1), UFixed6.ONE}) == 1

    def test_immutable(self):
        """Test attributes cannot be reassigned."""
        with pytest.raises(AttributeError):
            UFixed6.ONE._raw = 5  # type: ignore[misc]

    def test_pickle_preserves_value(self):
        """Test values survive pickling (used by process pools)."""
        value = Fixed6.from_str("-3.25")
        assert pickle.loads(pickle.dumps(value)) == value

    def test_overflow_error_hierarchy(self):
        """Test overflow errors are allocation and arithmetic errors."""
        assert issubclass(ArithmeticOverflowError, AllocationError)
        assert issubclass(ArithmeticOverflowError, ArithmeticError)
