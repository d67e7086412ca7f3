"""Gyroscope 2-CLP math.

A 2-CLP is a constant product pool on virtual reserves: the real balances
are shifted by offsets derived from the invariant so that the price stays
within [alpha, beta]:

    (x + L / sqrt(beta)) * (y + L * sqrt(alpha)) = L^2

The invariant L is the positive root of a*L^2 - b*L - c = 0 with
a = 1 - sqrt(alpha)/sqrt(beta), b = y/sqrt(beta) + x*sqrt(alpha), c = x*y.
Balances are 18-decimal values after scaling; token 0 is the token with
the lower address.
"""

from __future__ import annotations

from dataclasses import dataclass

from baseline_solver.math.fixed_point import ONE_18, Bfp
from baseline_solver.math.sqrt import gyro_pool_math_sqrt

from .errors import GyroError, MaxOutRatioError

SQRT_TOLERANCE = 5

# Safety margins on the virtual balances: input side over-estimated by
# 2 wei per unit, output side under-estimated by 1 wei per unit
_IN_MARGIN = Bfp(ONE_18 + 2)
_OUT_MARGIN = Bfp(ONE_18 - 1)


@dataclass(frozen=True)
class QuadraticTerms:
    """Terms of a*L^2 - b*L - c = 0, stored as a, -b, b^2 and -c."""

    a: Bfp
    mb: Bfp
    b_square: Bfp
    mc: Bfp


def calculate_quadratic_terms(balances: list[Bfp], sqrt_alpha: Bfp, sqrt_beta: Bfp) -> QuadraticTerms:
    """Quadratic terms, every product rounded down."""
    if len(balances) != 2:
        raise GyroError(f"2-CLP needs 2 balances, got {len(balances)}")
    x, y = balances

    a = Bfp(ONE_18).sub(sqrt_alpha.div_down(sqrt_beta))
    mb = y.div_down(sqrt_beta).add(x.mul_down(sqrt_alpha))
    mc = x.mul_down(y)

    # b^2 computed term by term for precision
    b_square = x.mul_down(x).mul_down(sqrt_alpha).mul_down(sqrt_alpha)
    b_square = b_square.add(
        Bfp(2 * x.mul_down(y).mul_down(sqrt_alpha).value).div_down(sqrt_beta)
    )
    b_square = b_square.add(y.mul_down(y).div_down(sqrt_beta.mul_up(sqrt_beta)))

    return QuadraticTerms(a=a, mb=mb, b_square=b_square, mc=mc)


def calculate_quadratic(terms: QuadraticTerms) -> Bfp:
    """Positive root (-b + sqrt(b^2 + 4ac)) / 2a, with the signs folded in."""
    denominator = terms.a.mul_up(Bfp(2 * ONE_18))
    # The minus signs in the radicand and the numerator cancel out
    radicand = terms.b_square.add(terms.mc.mul_down(Bfp(4 * ONE_18)).mul_down(terms.a))
    root = Bfp(gyro_pool_math_sqrt(radicand.value, SQRT_TOLERANCE))
    return terms.mb.add(root).div_down(denominator)


def calculate_invariant(balances: list[Bfp], sqrt_alpha: Bfp, sqrt_beta: Bfp) -> Bfp:
    """Invariant L of a 2-CLP, rounded down.

    Raises:
        GyroError: If balances does not hold exactly two values
        InvalidExponent: If the square root misses its tolerance
    """
    return calculate_quadratic(calculate_quadratic_terms(balances, sqrt_alpha, sqrt_beta))


def virtual_offset0(invariant: Bfp, sqrt_beta: Bfp) -> Bfp:
    """Offset added to the token 0 balance: L / sqrt(beta)."""
    return invariant.div_down(sqrt_beta)


def virtual_offset1(invariant: Bfp, sqrt_alpha: Bfp) -> Bfp:
    """Offset added to the token 1 balance: L * sqrt(alpha)."""
    return invariant.mul_down(sqrt_alpha)


def calc_out_given_in(
    balance_in: Bfp,
    balance_out: Bfp,
    amount_in: Bfp,
    virtual_offset_in: Bfp,
    virtual_offset_out: Bfp,
) -> Bfp:
    """Output on the virtual constant product curve.

    Raises:
        MaxOutRatioError: If the output would exceed balance_out
    """
    virt_in = balance_in.add(virtual_offset_in.mul_up(_IN_MARGIN))
    virt_out = balance_out.add(virtual_offset_out.mul_down(_OUT_MARGIN))

    amount_out = virt_out.mul_down(amount_in).div_down(virt_in.add(amount_in))
    if amount_out > balance_out:
        raise MaxOutRatioError(f"Output {amount_out.value} exceeds balance {balance_out.value}")
    return amount_out


def calc_in_given_out(
    balance_in: Bfp,
    balance_out: Bfp,
    amount_out: Bfp,
    virtual_offset_in: Bfp,
    virtual_offset_out: Bfp,
) -> Bfp:
    """Input needed on the virtual constant product curve.

    Raises:
        MaxOutRatioError: If amount_out exceeds balance_out
    """
    if amount_out > balance_out:
        raise MaxOutRatioError(f"Output {amount_out.value} exceeds balance {balance_out.value}")

    virt_in = balance_in.add(virtual_offset_in.mul_up(_IN_MARGIN))
    virt_out = balance_out.add(virtual_offset_out.mul_down(_OUT_MARGIN))

    return virt_in.mul_up(amount_out).div_up(virt_out.sub(amount_out))
