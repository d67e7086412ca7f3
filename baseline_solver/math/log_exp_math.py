"""Port of Balancer's LogExpMath library.

Natural exponentiation and logarithm on 18-decimal fixed point numbers,
used by the weighted pool power function. Matches LogExpMath.sol:
https://github.com/balancer-labs/balancer-v2-monorepo/blob/master/pkg/solidity-utils/contracts/math/LogExpMath.sol

Solidity divides signed integers by truncating toward zero; the places where
an operand can be negative go through `_tdiv`.
"""

from __future__ import annotations

from .errors import InvalidExponent, ProductOutOfBounds, XOutOfBounds, YOutOfBounds

__all__ = ["pow_raw", "exp", "ln", "ONE_18", "ONE_20", "ONE_36"]

ONE_18 = 10**18
ONE_20 = 10**20
ONE_36 = 10**36

MAX_NATURAL_EXPONENT = 130 * ONE_18
MIN_NATURAL_EXPONENT = -41 * ONE_18

# Inputs in (0.9, 1.1) use the 36-decimal logarithm
LN_36_LOWER_BOUND = ONE_18 - 10**17
LN_36_UPPER_BOUND = ONE_18 + 10**17

MILD_EXPONENT_BOUND = 2**254 // ONE_20

# (x_n, e^x_n) with 18 decimals, x_n in units of ONE_18
_LARGE_TERMS = (
    (128 * ONE_18, 38877084059945950922200000000000000000000000000000000000),
    (64 * ONE_18, 6235149080811616882910000000),
)

# (x_n, e^x_n) with 20 decimals, x_n in units of ONE_20 from 2^5 down to 2^-4
_SMALL_TERMS = (
    (32 * ONE_20, 7896296018268069516100000000000000),
    (16 * ONE_20, 888611052050787263676000000),
    (8 * ONE_20, 298095798704172827474000),
    (4 * ONE_20, 5459815003314423907810),
    (2 * ONE_20, 738905609893065022723),
    (ONE_20, 271828182845904523536),
    (ONE_20 // 2, 164872127070012814685),
    (ONE_20 // 4, 128402541668774148407),
    (ONE_20 // 8, 113314845306682631683),
    (ONE_20 // 16, 106449445891785942956),
)


def _tdiv(a: int, b: int) -> int:
    """Signed division truncating toward zero, as Solidity's int256 `/`."""
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b > 0) else -quotient


def exp(x: int) -> int:
    """Return e^x for an 18-decimal exponent.

    Raises:
        InvalidExponent: If x is outside [-41, 130]
    """
    if not MIN_NATURAL_EXPONENT <= x <= MAX_NATURAL_EXPONENT:
        raise InvalidExponent(f"exponent {x} outside [{MIN_NATURAL_EXPONENT}, {MAX_NATURAL_EXPONENT}]")

    if x < 0:
        return (ONE_18 * ONE_18) // exp(-x)

    first_an = 1
    for x_n, a_n in _LARGE_TERMS:
        if x >= x_n:
            x -= x_n
            first_an = a_n
            break

    x *= 100

    product = ONE_20
    # Only the first eight 20-decimal terms are extracted; the rest is covered
    # by the Taylor series.
    for x_n, a_n in _SMALL_TERMS[:8]:
        if x >= x_n:
            x -= x_n
            product = (product * a_n) // ONE_20

    series_sum = ONE_20 + x
    term = x
    for i in range(2, 13):
        term = ((term * x) // ONE_20) // i
        series_sum += term

    return (((product * series_sum) // ONE_20) * first_an) // 100


def ln(a: int) -> int:
    """Return the natural logarithm of a positive 18-decimal number."""
    if a < ONE_18:
        return -ln((ONE_18 * ONE_18) // a)

    total = 0
    for x_n, a_n in _LARGE_TERMS:
        if a >= a_n * ONE_18:
            a //= a_n
            total += x_n

    total *= 100
    a *= 100

    for x_n, a_n in _SMALL_TERMS:
        if a >= a_n:
            a = (a * ONE_20) // a_n
            total += x_n

    # ln(a) = 2 * arctanh(z), z = (a - 1) / (a + 1)
    z = ((a - ONE_20) * ONE_20) // (a + ONE_20)
    z_squared = (z * z) // ONE_20
    num = z
    series_sum = num
    for i in (3, 5, 7, 9, 11):
        num = (num * z_squared) // ONE_20
        series_sum += num // i

    return (total + series_sum * 2) // 100


def _ln_36(x: int) -> int:
    """Natural logarithm with 36 decimals for inputs close to one."""
    x *= ONE_18

    z = _tdiv((x - ONE_36) * ONE_36, x + ONE_36)
    z_squared = _tdiv(z * z, ONE_36)
    num = z
    series_sum = num
    for i in (3, 5, 7, 9, 11, 13, 15):
        num = _tdiv(num * z_squared, ONE_36)
        series_sum += _tdiv(num, i)

    return series_sum * 2


def pow_raw(x: int, y: int) -> int:
    """Return x^y for non-negative 18-decimal operands, without error margin.

    Raises:
        XOutOfBounds: If x does not fit a signed 256-bit integer
        YOutOfBounds: If y is not below MILD_EXPONENT_BOUND
        ProductOutOfBounds: If y * ln(x) is outside the exp domain
    """
    if y == 0:
        return ONE_18
    if x == 0:
        return 0
    if x >> 255 != 0:
        raise XOutOfBounds(f"base {x} does not fit int256")
    if y >= MILD_EXPONENT_BOUND:
        raise YOutOfBounds(f"exponent {y} exceeds {MILD_EXPONENT_BOUND}")

    if LN_36_LOWER_BOUND < x < LN_36_UPPER_BOUND:
        ln_36_x = _ln_36(x)
        whole = _tdiv(ln_36_x, ONE_18)
        remainder = ln_36_x - whole * ONE_18
        logx_times_y = whole * y + _tdiv(remainder * y, ONE_18)
    else:
        logx_times_y = ln(x) * y
    logx_times_y = _tdiv(logx_times_y, ONE_18)

    if not MIN_NATURAL_EXPONENT <= logx_times_y <= MAX_NATURAL_EXPONENT:
        raise ProductOutOfBounds(f"y * ln(x) = {logx_times_y} outside exp domain")

    return exp(logx_times_y)
