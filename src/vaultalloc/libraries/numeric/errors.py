"""Exceptions shared by the numeric kernel and the allocation services."""


class AllocationError(Exception):
    """Base exception for allocation errors."""

    pass


class ArithmeticOverflowError(AllocationError, ArithmeticError):
    """Fixed-point result outside the representable range."""

    pass
