"""Fixed-point decimal types with 6 implied fractional digits.

Two immutable value types backed by a Python int holding ``value * 10**6``:

- UFixed6: unsigned (collateral, positions, prices magnitudes, ratios)
- Fixed6: signed (prices, collateral deltas)

Design Principles:
- Exact integer arithmetic, no float anywhere in the computation path
- Range mirrors a 256-bit word; leaving it raises ArithmeticOverflowError
- Truncation toward zero for every product and quotient, so proportional
  splits land slightly below the ideal share and are reproducible
- Guarded divisions (unsafe_div, unsafe_muldiv) yield zero on a zero divisor

Thread Safety:
- Instances are immutable and thread-safe

Example:
    >>> collateral = UFixed6.from_str("1000")
    >>> collateral.muldiv(1, 3)
    UFixed6('333.333333')
    >>> UFixed6.from_str("40").unsafe_div(UFixed6.ZERO)
    UFixed6('0.000000')
"""

from decimal import Decimal
from typing import Any, TypeVar, Union

from vaultalloc.libraries.numeric.errors import ArithmeticOverflowError

DECIMALS = 6
BASE = 10**DECIMALS

UFIXED6_MAX_RAW = 2**256 - 1
FIXED6_MIN_RAW = -(2**255)
FIXED6_MAX_RAW = 2**255 - 1

F = TypeVar("F", bound="_FixedPoint")

Operand = Union[int, "_FixedPoint"]


def _div_toward_zero(numerator: int, denominator: int) -> int:
    """Integer division truncating toward zero (Python's // floors)."""
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient


def _raw_of(value: Operand) -> int:
    """Raw integer for a muldiv operand (plain ints are used as-is)."""
    if isinstance(value, bool):
        raise TypeError("bool is not a valid fixed-point operand")
    if isinstance(value, int):
        return value
    if isinstance(value, _FixedPoint):
        return value.raw
    raise TypeError(f"Unsupported operand type: {type(value).__name__}")


def _decimal_to_raw(value: Decimal) -> int:
    """Convert a Decimal to a raw scaled int, truncating extra digits toward zero.

    Works on the digit tuple so values wider than the decimal context
    precision convert exactly.
    """
    if not value.is_finite():
        raise ValueError(f"Cannot convert non-finite value to fixed-point: {value}")

    sign, digits, exponent = value.as_tuple()
    assert isinstance(exponent, int)
    magnitude = int("".join(str(d) for d in digits)) if digits else 0

    shift = exponent + DECIMALS
    if shift >= 0:
        raw = magnitude * 10**shift
    else:
        raw = magnitude // 10 ** (-shift)

    return -raw if sign else raw


class _FixedPoint:
    """Shared behaviour for UFixed6 and Fixed6."""

    __slots__ = ("_raw",)

    _MIN_RAW: int = 0
    _MAX_RAW: int = 0

    ZERO: Any
    ONE: Any

    def __init__(self, raw: int) -> None:
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise TypeError(f"{type(self).__name__} raw value must be int, got {type(raw).__name__}")
        if raw < self._MIN_RAW or raw > self._MAX_RAW:
            raise ArithmeticOverflowError(f"{type(self).__name__} out of range: raw={raw}")
        object.__setattr__(self, "_raw", raw)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    # Construction

    @classmethod
    def from_raw(cls: type[F], raw: int) -> F:
        """Build from an already-scaled integer."""
        return cls(raw)

    @classmethod
    def from_int(cls: type[F], value: int) -> F:
        """Build from a whole number (``5`` -> ``5.000000``)."""
        return cls(value * BASE)

    @classmethod
    def from_decimal(cls: type[F], value: Decimal) -> F:
        """Build from a Decimal, dropping digits past the 6th place toward zero."""
        return cls(_decimal_to_raw(value))

    @classmethod
    def from_str(cls: type[F], value: str) -> F:
        """Build from a decimal string such as ``"1.2"``."""
        try:
            parsed = Decimal(value.strip())
        except ArithmeticError as e:
            raise ValueError(f"Invalid decimal string for {cls.__name__}: {value!r}") from e
        return cls.from_decimal(parsed)

    @classmethod
    def coerce(cls: type[F], value: Any) -> F:
        """Convert loosely typed input (str, int, Decimal, float, fixed-point) to this type.

        Used as the pydantic validator for fixed-point model fields and by
        the YAML loaders.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, _FixedPoint):
            return cls(value.raw)
        if isinstance(value, bool):
            raise ValueError(f"Cannot convert bool to {cls.__name__}")
        if isinstance(value, int):
            return cls.from_int(value)
        if isinstance(value, Decimal):
            return cls.from_decimal(value)
        if isinstance(value, float):
            return cls.from_decimal(Decimal(str(value)))
        if isinstance(value, str):
            return cls.from_str(value)
        raise ValueError(f"Cannot convert {type(value).__name__} to {cls.__name__}")

    # Accessors

    @property
    def raw(self) -> int:
        """Underlying scaled integer."""
        return self._raw

    def to_decimal(self) -> Decimal:
        """Exact Decimal value with 6 fractional digits."""
        magnitude = Decimal(abs(self._raw)).as_tuple().digits
        return Decimal((1 if self._raw < 0 else 0, magnitude, -DECIMALS))

    def is_zero(self) -> bool:
        return self._raw == 0

    # Arithmetic

    def _same_type(self, other: Any) -> bool:
        return type(other) is type(self)

    def __add__(self: F, other: F) -> F:
        if not self._same_type(other):
            return NotImplemented
        return type(self)(self._raw + other._raw)

    def __sub__(self: F, other: F) -> F:
        if not self._same_type(other):
            return NotImplemented
        return type(self)(self._raw - other._raw)

    def __mul__(self: F, other: F) -> F:
        if not self._same_type(other):
            return NotImplemented
        return type(self)(_div_toward_zero(self._raw * other._raw, BASE))

    def __truediv__(self: F, other: F) -> F:
        if not self._same_type(other):
            return NotImplemented
        if other._raw == 0:
            raise ArithmeticOverflowError(f"{type(self).__name__} division by zero")
        return type(self)(_div_toward_zero(self._raw * BASE, other._raw))

    def unsafe_div(self: F, other: F) -> F:
        """Divide, yielding zero instead of failing when ``other`` is zero."""
        if other.is_zero():
            return type(self).ZERO
        return self / other

    def muldiv(self: F, numerator: Operand, denominator: Operand) -> F:
        """Compute ``self * numerator / denominator`` with one truncation.

        Operands may be plain ints (weights) or fixed-point values, in which
        case their raw integers are used so the scale cancels out. Python ints
        serve as the wide intermediate, so nothing overflows before the final
        range check.

        Raises:
            ArithmeticOverflowError: If denominator is zero or the result is out of range
        """
        den = _raw_of(denominator)
        if den == 0:
            raise ArithmeticOverflowError(f"{type(self).__name__} muldiv by zero")
        return type(self)(_div_toward_zero(self._raw * _raw_of(numerator), den))

    def unsafe_muldiv(self: F, numerator: Operand, denominator: Operand) -> F:
        """muldiv that yields zero when the denominator is zero."""
        if _raw_of(denominator) == 0:
            return type(self).ZERO
        return self.muldiv(numerator, denominator)

    def min(self: F, other: F) -> F:
        return self if self <= other else other

    def max(self: F, other: F) -> F:
        return self if self >= other else other

    # Comparison

    def __eq__(self, other: object) -> bool:
        if not self._same_type(other):
            return NotImplemented
        return self._raw == other._raw  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._raw))

    def __lt__(self: F, other: F) -> bool:
        if not self._same_type(other):
            return NotImplemented
        return self._raw < other._raw

    def __le__(self: F, other: F) -> bool:
        if not self._same_type(other):
            return NotImplemented
        return self._raw <= other._raw

    def __gt__(self: F, other: F) -> bool:
        if not self._same_type(other):
            return NotImplemented
        return self._raw > other._raw

    def __ge__(self: F, other: F) -> bool:
        if not self._same_type(other):
            return NotImplemented
        return self._raw >= other._raw

    def __bool__(self) -> bool:
        return self._raw != 0

    # Display

    def __str__(self) -> str:
        return str(self.to_decimal())

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self.to_decimal()}')"

    def __reduce__(self) -> tuple[Any, tuple[int]]:
        return (type(self), (self._raw,))


class UFixed6(_FixedPoint):
    """Unsigned fixed-point number with 6 decimals."""

    __slots__ = ()

    _MIN_RAW = 0
    _MAX_RAW = UFIXED6_MAX_RAW

    @classmethod
    def from_signed(cls, value: "Fixed6") -> "UFixed6":
        """Convert a non-negative Fixed6.

        Raises:
            ArithmeticOverflowError: If value is negative
        """
        if value.raw < 0:
            raise ArithmeticOverflowError(f"Cannot convert negative {value!r} to UFixed6")
        return cls(value.raw)

    @classmethod
    def from_signed_clamped(cls, value: "Fixed6") -> "UFixed6":
        """Convert a Fixed6, flooring negative values at zero."""
        return cls(max(value.raw, 0))


class Fixed6(_FixedPoint):
    """Signed fixed-point number with 6 decimals."""

    __slots__ = ()

    _MIN_RAW = FIXED6_MIN_RAW
    _MAX_RAW = FIXED6_MAX_RAW

    @classmethod
    def from_ufixed(cls, value: UFixed6) -> "Fixed6":
        return cls(value.raw)

    def __neg__(self) -> "Fixed6":
        return Fixed6(-self._raw)

    def __abs__(self) -> UFixed6:
        return UFixed6(abs(self._raw))

    def abs(self) -> UFixed6:
        """Magnitude as an unsigned value."""
        return abs(self)

    def sign(self) -> int:
        """-1, 0 or 1."""
        return (self._raw > 0) - (self._raw < 0)


UFixed6.ZERO = UFixed6(0)
UFixed6.ONE = UFixed6(BASE)
Fixed6.ZERO = Fixed6(0)
Fixed6.ONE = Fixed6(BASE)
