"""Fixed-point arithmetic errors.

Every checked operation in the fixed-point library raises one of these on
overflow, zero division or loss of precision. They map to the revert reasons
of Balancer's FixedPoint/SignedFixedPoint and LogExpMath libraries.
"""


class FixedPointError(ArithmeticError):
    """Base error for fixed-point arithmetic."""

    pass


class AddOverflow(FixedPointError):
    """Addition left the 256-bit range."""

    pass


class SubOverflow(FixedPointError):
    """Subtraction underflowed (unsigned) or left the signed range."""

    pass


class MulOverflow(FixedPointError):
    """Multiplication left the 256-bit range."""

    pass


class ZeroDivision(FixedPointError, ZeroDivisionError):
    """Division by zero."""

    pass


class DivInternal(FixedPointError):
    """Scaled dividend cannot represent the input exactly."""

    pass


class InvalidExponent(FixedPointError):
    """Exponent out of range, or square root tolerance violated."""

    pass


class XOutOfBounds(FixedPointError):
    """Error 006: base or balance is out of valid range."""

    pass


class YOutOfBounds(FixedPointError):
    """Error 007: exponent exceeds MILD_EXPONENT_BOUND."""

    pass


class ProductOutOfBounds(FixedPointError):
    """Error 008: result is outside the representable range."""

    pass


__all__ = [
    "FixedPointError",
    "AddOverflow",
    "SubOverflow",
    "MulOverflow",
    "ZeroDivision",
    "DivInternal",
    "InvalidExponent",
    "XOutOfBounds",
    "YOutOfBounds",
    "ProductOutOfBounds",
]
