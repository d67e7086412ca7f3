"""Fixed-point square root used by the Gyroscope pools (GyroPoolMath._sqrt).

Newton iteration on an 18-decimal operand, seeded with a power of two for
operands >= 1 and from a table of precomputed roots below that. The result
is checked against a caller-provided tolerance instead of iterating to
exactness, which is what the pool contracts do.
"""

from __future__ import annotations

from . import signed_fixed_point as sfp
from .errors import InvalidExponent

ONE = 10**18

NEWTON_ITERATIONS = 7

# (upper bound of x, sqrt seed) for x < 1e18; seeds are sqrt(10^k) in 18 decimals
_SMALL_SEEDS = (
    (10, 3162277660),
    (10**2, 10**10),
    (10**3, 31622776601),
    (10**4, 10**11),
    (10**5, 316227766016),
    (10**6, 10**12),
    (10**7, 3162277660168),
    (10**8, 10**13),
    (10**9, 31622776601683),
    (10**10, 10**14),
    (10**11, 316227766016837),
    (10**12, 10**15),
    (10**13, 3162277660168379),
    (10**14, 10**16),
    (10**15, 31622776601683793),
    (10**16, 10**17),
    (10**17, 316227766016837933),
)


def int_log2_halved(x: int) -> int:
    """Return floor(log2(x)) / 2 rounded up, by binary search on bit shifts."""
    n = 0
    for shift, increment in ((128, 64), (64, 32), (32, 16), (16, 8), (8, 4), (4, 2), (2, 1)):
        if x >= 1 << shift:
            x >>= shift
            n += increment
    # One odd bit left over
    if x >= 2:
        n += 1
    return n


def make_initial_guess(x: int) -> int:
    if x >= ONE:
        return (1 << int_log2_halved(x // ONE)) * ONE
    for bound, seed in _SMALL_SEEDS:
        if x <= bound:
            return seed
    return x


def gyro_pool_math_sqrt(x: int, tolerance: int) -> int:
    """Square root of an 18-decimal value.

    Args:
        x: Non-negative operand, 18 decimals
        tolerance: Allowed error in wei, checked as |x - r^2| <= r * tolerance

    Returns:
        The root r, 18 decimals

    Raises:
        InvalidExponent: If the iteration result misses the tolerance
    """
    if x == 0:
        return 0

    guess = make_initial_guess(x)
    for _ in range(NEWTON_ITERATIONS):
        guess = (guess + x * ONE // guess) // 2

    guess_squared = sfp.mul_down_mag(guess, guess)
    margin = sfp.mul_up_mag(guess, tolerance)
    if not sfp.sub(x, margin) <= guess_squared <= sfp.add(x, margin):
        raise InvalidExponent(f"sqrt({x}) = {guess} outside tolerance {tolerance}")
    return guess


__all__ = ["gyro_pool_math_sqrt", "make_initial_guess", "int_log2_halved"]
