"""Gyroscope 3-CLP math.

Three tokens on virtual reserves shifted by L * cbrt(alpha) each. The
invariant L solves the cubic

    (1 - alpha) L^3 - (x+y+z) alpha^(2/3) L^2 - (xy+yz+zx) alpha^(1/3) L - xyz = 0

by Newton's method started safely to the right of the largest root, so
the iteration only ever moves left.
"""

from __future__ import annotations

from dataclasses import dataclass

from baseline_solver.math.errors import ProductOutOfBounds, SubOverflow
from baseline_solver.math.fixed_point import ONE_18, Bfp
from baseline_solver.math.sqrt import gyro_pool_math_sqrt

from .errors import GyroError, MaxOutRatioError, StableInvariantDidNotConverge

MAX_BALANCES = 10**29
L_THRESHOLD_SIMPLE_NUMERICS = 2 * 10**31
L_MAX = 10**34
L_VS_LPLUS_MIN = Bfp(13 * 10**17)
INVARIANT_SHRINKING_FACTOR_PER_STEP = 8
INVARIANT_MIN_ITERATIONS = 5
MAX_ITERATIONS = 255
SQRT_TOLERANCE = 5

_IN_MARGIN = Bfp(ONE_18 + 2)
_OUT_MARGIN = Bfp(ONE_18 - 1)


@dataclass(frozen=True)
class CubicTerms:
    """Terms of a*L^3 - b*L^2 - c*L - d = 0, stored as a, -b, -c, -d."""

    a: Bfp
    mb: Bfp
    mc: Bfp
    md: Bfp


def calculate_cubic_terms(balances: list[Bfp], root3_alpha: Bfp) -> CubicTerms:
    if len(balances) != 3:
        raise GyroError(f"3-CLP needs 3 balances, got {len(balances)}")
    x, y, z = balances
    for balance in balances:
        if balance.value > MAX_BALANCES:
            raise ProductOutOfBounds(f"Balance {balance.value} above {MAX_BALANCES}")

    alpha23 = root3_alpha.mul_down(root3_alpha)
    alpha = alpha23.mul_down(root3_alpha)

    a = Bfp(ONE_18).sub(alpha)
    mb = x.add(y).add(z).mul_down(alpha23)
    mc = x.mul_down(y).add(y.mul_down(z)).add(z.mul_down(x)).mul_down(root3_alpha)
    md = x.mul_down(y.mul_down(z))
    return CubicTerms(a=a, mb=mb, mc=mc, md=md)


def _starting_point(terms: CubicTerms) -> tuple[Bfp, Bfp]:
    """Initial guess and lower bound for the Newton iteration.

    l_plus is the larger root of the derivative; the cubic's largest root
    lies to its right.
    """
    radic = terms.mb.mul_up(terms.mb).add(terms.a.mul_up(Bfp(3 * terms.mc.value)))
    l_plus = terms.mb.add(Bfp(gyro_pool_math_sqrt(radic.value, SQRT_TOLERANCE))).div_up(
        Bfp(3 * terms.a.value)
    )

    alpha = Bfp(ONE_18).sub(terms.a)
    factor = Bfp(3 * ONE_18 // 2) if alpha.value >= ONE_18 // 2 else Bfp(2 * ONE_18)
    l0 = l_plus.mul_up(factor)
    l_lower = l_plus.mul_up(L_VS_LPLUS_MIN)
    return l0, l_lower


def _newton_step(terms: CubicTerms, alpha: Bfp, root: Bfp, l_lower: Bfp) -> tuple[int, bool]:
    """Magnitude of the next Newton step and whether it points right."""
    if root.value > L_MAX:
        raise ProductOutOfBounds(f"Invariant {root.value} above {L_MAX}")
    if root < l_lower:
        raise SubOverflow(f"Invariant {root.value} below lower bound {l_lower.value}")

    root_sq = root.mul_down(root)
    root_cube = root_sq.mul_down(root)

    df = Bfp(3 * root.value).mul_down(root)
    df = df.sub(df.mul_down(alpha))
    df = df.sub(Bfp(2 * root.mul_down(terms.mb).value)).sub(terms.mc)

    if root.value <= L_THRESHOLD_SIMPLE_NUMERICS:
        delta_minus = root_cube.sub(root_cube.mul_down(alpha)).div_down(df)
    else:
        # Large invariants skip the alpha correction on the cubic term
        delta_minus = root_cube.div_down(df)
    delta_plus = root_sq.mul_down(terms.mb).add(root.mul_down(terms.mc)).div_down(df)
    delta_plus = delta_plus.add(terms.md.div_down(df))

    if delta_plus >= delta_minus:
        return delta_plus.value - delta_minus.value, True
    return delta_minus.value - delta_plus.value, False


def _solve_cubic_newton(terms: CubicTerms, l0: Bfp, l_lower: Bfp) -> Bfp:
    alpha = Bfp(ONE_18).sub(terms.a)
    root = l0
    prev_delta = 2**256 - 1

    for iteration in range(MAX_ITERATIONS):
        delta, positive = _newton_step(terms, alpha, root, l_lower)

        if delta <= 1:
            return root
        if iteration >= INVARIANT_MIN_ITERATIONS:
            if positive:
                # Rounding noise: the true root is within reach
                return root
            if delta >= prev_delta // INVARIANT_SHRINKING_FACTOR_PER_STEP:
                return root

        if positive:
            root = Bfp(root.value + delta)
        else:
            if root.value < delta:
                raise StableInvariantDidNotConverge("Newton step undershot zero")
            candidate = root.value - delta
            if candidate < l_lower.value:
                max_allowed = root.value - l_lower.value
                if max_allowed <= 1:
                    raise StableInvariantDidNotConverge("Newton step stuck at lower bound")
                candidate = root.value - max_allowed // 2
            root = Bfp(candidate)
        prev_delta = delta

    raise StableInvariantDidNotConverge(
        f"3-CLP invariant did not converge after {MAX_ITERATIONS} iterations"
    )


def calculate_invariant(balances: list[Bfp], root3_alpha: Bfp) -> Bfp:
    """Invariant L of a 3-CLP.

    Raises:
        ProductOutOfBounds: If a balance or the invariant leaves the safe range
        StableInvariantDidNotConverge: If Newton's method stalls
        GyroError: If balances does not hold exactly three values
    """
    terms = calculate_cubic_terms(balances, root3_alpha)
    l0, l_lower = _starting_point(terms)
    root = _solve_cubic_newton(terms, l0, l_lower)
    if root.value > L_MAX:
        raise ProductOutOfBounds(f"Invariant {root.value} above {L_MAX}")
    return root


def virtual_offset(invariant: Bfp, root3_alpha: Bfp) -> Bfp:
    """Offset added to every balance."""
    return invariant.mul_down(root3_alpha)


def calc_out_given_in(
    balance_in: Bfp, balance_out: Bfp, amount_in: Bfp, virtual_offset: Bfp
) -> Bfp:
    """Output on the virtual constant product between two of the three tokens.

    Raises:
        MaxOutRatioError: If the output would exceed balance_out
    """
    virt_in = balance_in.add(virtual_offset.mul_up(_IN_MARGIN))
    virt_out = balance_out.add(virtual_offset.mul_down(_OUT_MARGIN))

    amount_out = virt_out.mul_down(amount_in).div_down(virt_in.add(amount_in))
    if amount_out > balance_out:
        raise MaxOutRatioError(f"Output {amount_out.value} exceeds balance {balance_out.value}")
    return amount_out


def calc_in_given_out(
    balance_in: Bfp, balance_out: Bfp, amount_out: Bfp, virtual_offset: Bfp
) -> Bfp:
    if amount_out > balance_out:
        raise MaxOutRatioError(f"Output {amount_out.value} exceeds balance {balance_out.value}")

    virt_in = balance_in.add(virtual_offset.mul_up(_IN_MARGIN))
    virt_out = balance_out.add(virtual_offset.mul_down(_OUT_MARGIN))
    return virt_in.mul_up(amount_out).div_up(virt_out.sub(amount_out))
