"""
Fixed-point numeric kernel.

Unsigned (UFixed6) and signed (Fixed6) decimal types with 6 implied
fractional digits, backed by Python ints.

Usage:
    >>> from vaultalloc.libraries.numeric import UFixed6
    >>> UFixed6.from_str("1000").muldiv(1, 3)
    UFixed6('333.333333')
"""

from vaultalloc.libraries.numeric.errors import AllocationError, ArithmeticOverflowError
from vaultalloc.libraries.numeric.fixed import BASE, DECIMALS, Fixed6, UFixed6

__all__ = [
    "BASE",
    "DECIMALS",
    "UFixed6",
    "Fixed6",
    "AllocationError",
    "ArithmeticOverflowError",
]
