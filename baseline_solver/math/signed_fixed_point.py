"""Signed fixed-point arithmetic on plain Python ints.

Port of Gyroscope's SignedFixedPoint library, used by the E-CLP pool. Values
are int256 scaled by 10^18 (normal precision) or 10^38 (extended precision,
"xp"). Checked functions raise on leaving the int256 range; the `_u`
variants skip overflow detection but keep the rounding direction.

"Down" rounds toward zero in magnitude, "up" away from zero. Integer
division here is floor division unless noted: Python's `//` is used
deliberately so that negative intermediates round the same way as the
reference implementation.
"""

from __future__ import annotations

from .errors import AddOverflow, MulOverflow, SubOverflow, ZeroDivision

ONE = 10**18
ONE_XP = 10**38

INT256_MAX = 2**255 - 1
INT256_MIN = -(2**255)

_HALF_XP = 10**19


def _int256(value: int, error: type[Exception]) -> int:
    if value < INT256_MIN or value > INT256_MAX:
        raise error(f"value {value} outside int256")
    return value


def _trunc_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b > 0) else -quotient


def add(a: int, b: int) -> int:
    return _int256(a + b, AddOverflow)


def sub(a: int, b: int) -> int:
    return _int256(a - b, SubOverflow)


def mul_down_mag(a: int, b: int) -> int:
    """Multiply and floor to 18 decimals."""
    return _int256(a * b, MulOverflow) // ONE


def mul_down_mag_u(a: int, b: int) -> int:
    product = a * b
    quotient = abs(product) // ONE
    return quotient if product >= 0 else -quotient


def mul_up_mag(a: int, b: int) -> int:
    """Multiply, rounding the magnitude up."""
    _int256(a * b, MulOverflow)
    return mul_up_mag_u(a, b)


def mul_up_mag_u(a: int, b: int) -> int:
    product = a * b
    if product > 0:
        return (product - 1) // ONE + 1
    if product < 0:
        return (product + 1) // ONE - 1
    return 0


def div_down_mag(a: int, b: int) -> int:
    """Divide and floor to 18 decimals."""
    if b == 0:
        raise ZeroDivision("signed division by zero")
    if a == 0:
        return 0
    return _int256(a * ONE, MulOverflow) // b


def div_down_mag_u(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivision("signed division by zero")
    return _trunc_div(a * ONE, b)


def div_up_mag(a: int, b: int) -> int:
    """Divide, rounding the magnitude up."""
    if b == 0:
        raise ZeroDivision("signed division by zero")
    _int256(a * ONE, MulOverflow)
    return div_up_mag_u(a, b)


def div_up_mag_u(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivision("signed division by zero")
    if a == 0:
        return 0
    if b < 0:
        a, b = -a, -b
    if a > 0:
        return (a * ONE - 1) // b + 1
    return (a * ONE + 1) // b - 1


def mul_xp(a: int, b: int) -> int:
    """Multiply two 38-decimal values (floor)."""
    return _int256(a * b, MulOverflow) // ONE_XP


def mul_xp_u(a: int, b: int) -> int:
    return (a * b) // ONE_XP


def div_xp(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivision("signed xp division by zero")
    return _int256(a * ONE_XP, MulOverflow) // b


def div_xp_u(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivision("signed xp division by zero")
    return (a * ONE_XP) // b


def _split(b: int) -> tuple[int, int]:
    # Quotient floors, remainder keeps the sign of b
    high = b // _HALF_XP
    low = abs(b) % _HALF_XP
    return high, low if b >= 0 else -low


def mul_down_xp_to_np(a: int, b: int) -> int:
    """Multiply a normal-precision `a` by an extended-precision `b`, rounding down."""
    b1, b2 = _split(b)
    prod1 = _int256(a * b1, MulOverflow)
    prod2 = _int256(a * b2, MulOverflow)
    return _xp_to_np_down(prod1, prod2)


def mul_down_xp_to_np_u(a: int, b: int) -> int:
    b1, b2 = _split(b)
    return _xp_to_np_down(a * b1, a * b2)


def _xp_to_np_down(prod1: int, prod2: int) -> int:
    if prod1 >= 0 and prod2 >= 0:
        return (prod1 + prod2 // _HALF_XP) // _HALF_XP
    return (prod1 + prod2 // _HALF_XP + 1) // _HALF_XP - 1


def mul_up_xp_to_np(a: int, b: int) -> int:
    """Multiply a normal-precision `a` by an extended-precision `b`, rounding up."""
    b1, b2 = _split(b)
    prod1 = _int256(a * b1, MulOverflow)
    prod2 = _int256(a * b2, MulOverflow)
    if prod1 <= 0 and prod2 <= 0:
        return (prod1 + prod2 // _HALF_XP) // _HALF_XP
    return (prod1 + prod2 // _HALF_XP - 1) // _HALF_XP + 1


def mul_up_xp_to_np_u(a: int, b: int) -> int:
    b1, b2 = _split(b)
    return _xp_to_np_up(a * b1, a * b2)


def _xp_to_np_up(prod1: int, prod2: int) -> int:
    if prod1 <= 0 and prod2 <= 0:
        return _trunc_div(prod1 + _trunc_div(prod2, _HALF_XP), _HALF_XP)
    return _trunc_div(prod1 + _trunc_div(prod2, _HALF_XP) - 1, _HALF_XP) + 1


def complement(x: int) -> int:
    """Return 1 - x clamped to [0, 1]."""
    if x >= ONE or x <= 0:
        return 0
    return ONE - x


__all__ = [
    "ONE",
    "ONE_XP",
    "INT256_MAX",
    "INT256_MIN",
    "add",
    "sub",
    "mul_down_mag",
    "mul_down_mag_u",
    "mul_up_mag",
    "mul_up_mag_u",
    "div_down_mag",
    "div_down_mag_u",
    "div_up_mag",
    "div_up_mag_u",
    "mul_xp",
    "mul_xp_u",
    "div_xp",
    "div_xp_u",
    "mul_down_xp_to_np",
    "mul_down_xp_to_np_u",
    "mul_up_xp_to_np",
    "mul_up_xp_to_np_u",
    "complement",
]
