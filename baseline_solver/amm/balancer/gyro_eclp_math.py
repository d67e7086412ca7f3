"""Gyroscope E-CLP math.

The E-CLP trades along an ellipse: the balances are mapped by a rotation
(c, s) and a stretch lambda onto a circle, clipped to the price range
[alpha, beta]. All values are signed ints; plain parameters and balances
use 18 decimals, derived parameters (tau, u, v, w, z, d_sq) 38 decimals.

Every term below rounds so that the pool never gives away more than the
exact curve would, mirroring GyroECLPMath. The invariant is carried as a
pair (upper estimate, estimate) so that offsets can be biased in the
pool's favour.
"""

from __future__ import annotations

from typing import NamedTuple

from baseline_solver.math import signed_fixed_point as sfp
from baseline_solver.math.errors import InvalidExponent, XOutOfBounds
from baseline_solver.math.fixed_point import ONE_18, Bfp, Bfp38, mul_xp
from baseline_solver.math.sqrt import gyro_pool_math_sqrt

from .errors import GyroError, StableInvariantDidNotConverge
from .pools import EclpDerivedParams, EclpParams

ONE_XP = sfp.ONE_XP

MAX_BALANCES = 10**34
MAX_INVARIANT = 3 * 10**37
SQRT_TOLERANCE = 5

# Parameter limits enforced when a pool is created
ROTATION_VECTOR_NORM_ACCURACY = 10**3
MAX_STRETCH_FACTOR = 10**26
DERIVED_TAU_NORM_ACCURACY_XP = 10**23
DERIVED_DSQ_NORM_ACCURACY_XP = 10**23


class Vector2(NamedTuple):
    x: int
    y: int


def scalar_prod(t1: Vector2, t2: Vector2) -> int:
    return sfp.add(sfp.mul_down_mag(t1.x, t2.x), sfp.mul_down_mag(t1.y, t2.y))


def scalar_prod_xp(t1: Vector2, t2: Vector2) -> int:
    return sfp.add(sfp.mul_xp(t1.x, t2.x), sfp.mul_xp(t1.y, t2.y))


def _norm_sq_xp(x: int, y: int) -> Bfp38:
    # Squares are sign-free, so the unsigned tier applies
    return mul_xp(Bfp38(abs(x)), Bfp38(abs(x))).add(mul_xp(Bfp38(abs(y)), Bfp38(abs(y))))


def validate_params(params: EclpParams, derived: EclpDerivedParams) -> None:
    """Check the limits GyroECLPMath enforces on pool creation.

    Raises:
        GyroError: If a parameter is out of range or a unit vector is not
            normalized to within the contract's accuracy
    """
    if not 0 <= params.c <= ONE_18 or not 0 <= params.s <= ONE_18:
        raise GyroError("rotation (c, s) must be in [0, 1]")
    c, s = Bfp(params.c), Bfp(params.s)
    norm = c.mul_down(c).add(s.mul_down(s)).value
    if abs(norm - ONE_18) > ROTATION_VECTOR_NORM_ACCURACY:
        raise GyroError(f"rotation vector not normalized: |(c, s)|^2 = {norm}")
    if not ONE_18 <= params.lam <= MAX_STRETCH_FACTOR:
        raise GyroError(f"stretch factor {params.lam} outside [1, 1e8]")

    for name, tau in (("tau_alpha", derived.tau_alpha), ("tau_beta", derived.tau_beta)):
        norm_xp = _norm_sq_xp(*tau).value
        if abs(norm_xp - ONE_XP) > DERIVED_TAU_NORM_ACCURACY_XP:
            raise GyroError(f"{name} not normalized: |{name}|^2 = {norm_xp}")
    for name in ("u", "v", "w", "z"):
        if getattr(derived, name) > ONE_XP:
            raise GyroError(f"derived {name} above 1")
    if abs(derived.d_sq - ONE_XP) > DERIVED_DSQ_NORM_ACCURACY_XP:
        raise GyroError(f"d_sq {derived.d_sq} not normalized")


def mul_a(params: EclpParams, tp: Vector2) -> Vector2:
    """Apply the ellipse transform A to a point."""
    x = sfp.div_down_mag_u(
        sfp.sub(sfp.mul_down_mag_u(params.c, tp.x), sfp.mul_down_mag_u(params.s, tp.y)),
        params.lam,
    )
    y = sfp.add(sfp.mul_down_mag_u(params.s, tp.x), sfp.mul_down_mag_u(params.c, tp.y))
    return Vector2(x, y)


def _tau(point: tuple[int, int]) -> Vector2:
    return Vector2(point[0], point[1])


def virtual_offset0(params: EclpParams, derived: EclpDerivedParams, r: Vector2) -> int:
    """Offset of token 0, rounded up."""
    tau_beta = _tau(derived.tau_beta)
    term_xp = sfp.div_xp_u(tau_beta.x, derived.d_sq)
    if tau_beta.x > 0:
        inner = sfp.mul_up_mag_u(sfp.mul_up_mag_u(r.x, params.lam), params.c)
    else:
        inner = sfp.mul_down_mag_u(sfp.mul_down_mag_u(r.y, params.lam), params.c)
    a = sfp.mul_up_xp_to_np_u(inner, term_xp)

    term_xp2 = sfp.div_xp_u(tau_beta.y, derived.d_sq)
    b = sfp.mul_up_xp_to_np_u(sfp.mul_up_mag_u(r.x, params.s), term_xp2)
    return sfp.add(a, b)


def virtual_offset1(params: EclpParams, derived: EclpDerivedParams, r: Vector2) -> int:
    """Offset of token 1, rounded up."""
    tau_alpha = _tau(derived.tau_alpha)
    term_xp = sfp.div_xp_u(tau_alpha.x, derived.d_sq)
    if tau_alpha.x < 0:
        inner = sfp.mul_up_mag_u(sfp.mul_up_mag_u(r.x, params.lam), params.s)
        b = sfp.mul_up_xp_to_np_u(inner, -term_xp)
    else:
        inner = sfp.mul_down_mag_u(sfp.mul_down_mag_u(-r.y, params.lam), params.s)
        b = sfp.mul_up_xp_to_np_u(inner, term_xp)

    term_xp2 = sfp.div_xp_u(tau_alpha.y, derived.d_sq)
    c = sfp.mul_up_xp_to_np_u(sfp.mul_up_mag_u(r.x, params.c), term_xp2)
    return sfp.add(b, c)


def max_balances0(params: EclpParams, derived: EclpDerivedParams, r: Vector2) -> int:
    """Largest token 0 balance reachable on the curve."""
    tau_alpha, tau_beta = _tau(derived.tau_alpha), _tau(derived.tau_beta)
    term_xp1 = sfp.div_xp_u(sfp.sub(tau_beta.x, tau_alpha.x), derived.d_sq)
    term_xp2 = sfp.div_xp_u(sfp.sub(tau_beta.y, tau_alpha.y), derived.d_sq)

    xp = sfp.mul_down_xp_to_np_u(
        sfp.mul_down_mag_u(sfp.mul_down_mag_u(r.y, params.lam), params.c), term_xp1
    )
    if term_xp2 > 0:
        term2 = sfp.mul_down_mag_u(r.y, params.s)
    else:
        term2 = sfp.mul_up_mag_u(r.x, params.s)
    return sfp.add(xp, sfp.mul_down_xp_to_np_u(term2, term_xp2))


def max_balances1(params: EclpParams, derived: EclpDerivedParams, r: Vector2) -> int:
    """Largest token 1 balance reachable on the curve."""
    tau_alpha, tau_beta = _tau(derived.tau_alpha), _tau(derived.tau_beta)
    term_xp1 = sfp.div_xp_u(sfp.sub(tau_beta.x, tau_alpha.x), derived.d_sq)
    term_xp2 = sfp.div_xp_u(sfp.sub(tau_alpha.y, tau_beta.y), derived.d_sq)

    yp = sfp.mul_down_xp_to_np_u(
        sfp.mul_down_mag_u(sfp.mul_down_mag_u(r.y, params.lam), params.s), term_xp1
    )
    if term_xp2 > 0:
        term2 = sfp.mul_down_mag_u(r.y, params.c)
    else:
        term2 = sfp.mul_up_mag_u(r.x, params.c)
    return sfp.add(yp, sfp.mul_down_xp_to_np_u(term2, term_xp2))


def calc_at_a_chi(x: int, y: int, params: EclpParams, derived: EclpDerivedParams) -> int:
    """The A t . A chi term of the invariant."""
    d_sq2 = sfp.mul_xp_u(derived.d_sq, derived.d_sq)

    term_xp = sfp.div_xp_u(
        sfp.div_down_mag_u(
            sfp.add(sfp.div_down_mag_u(derived.w, params.lam), derived.z), params.lam
        ),
        d_sq2,
    )
    val = sfp.mul_down_xp_to_np_u(
        sfp.sub(sfp.mul_down_mag_u(x, params.c), sfp.mul_down_mag_u(y, params.s)), term_xp
    )

    # (x lambda s + y lambda c) * u, u > 0
    term_np = sfp.add(
        sfp.mul_down_mag_u(sfp.mul_down_mag_u(x, params.lam), params.s),
        sfp.mul_down_mag_u(sfp.mul_down_mag_u(y, params.lam), params.c),
    )
    val = sfp.add(val, sfp.mul_down_xp_to_np_u(term_np, sfp.div_xp_u(derived.u, d_sq2)))

    # (s x + c y) * v, v > 0
    term_np = sfp.add(sfp.mul_down_mag_u(x, params.s), sfp.mul_down_mag_u(y, params.c))
    return sfp.add(val, sfp.mul_down_xp_to_np_u(term_np, sfp.div_xp_u(derived.v, d_sq2)))


def calc_a_chi_a_chi_in_xp(params: EclpParams, derived: EclpDerivedParams) -> int:
    """A chi . A chi in 38 decimals, rounded up; always above one."""
    d_sq3 = sfp.mul_xp_u(sfp.mul_xp_u(derived.d_sq, derived.d_sq), derived.d_sq)

    val = sfp.mul_up_mag_u(
        params.lam, sfp.div_xp_u(sfp.mul_xp_u(2 * derived.u, derived.v), d_sq3)
    )
    u_plus = sfp.add(derived.u, 1)
    val = sfp.add(
        val,
        sfp.mul_up_mag_u(
            sfp.mul_up_mag_u(sfp.div_xp_u(sfp.mul_xp_u(u_plus, u_plus), d_sq3), params.lam),
            params.lam,
        ),
    )
    val = sfp.add(val, sfp.div_xp_u(sfp.mul_xp_u(derived.v, derived.v), d_sq3))

    term_xp = sfp.add(sfp.div_up_mag_u(derived.w, params.lam), derived.z)
    return sfp.add(val, sfp.div_xp_u(sfp.mul_xp_u(term_xp, term_xp), d_sq3))


def _d_sq4(derived: EclpDerivedParams) -> int:
    d_sq2 = sfp.mul_xp_u(derived.d_sq, derived.d_sq)
    return sfp.mul_xp_u(d_sq2, d_sq2)


def calc_min_atx_a_chiy_sq_plus_atx_sq(
    x: int, y: int, params: EclpParams, derived: EclpDerivedParams
) -> int:
    x_sq = sfp.mul_up_mag_u(x, x)
    y_sq = sfp.mul_up_mag_u(y, y)
    xy = sfp.mul_down_mag_u(x, y)

    term_np = sfp.add(
        sfp.mul_up_mag_u(sfp.mul_up_mag_u(x_sq, params.c), params.c),
        sfp.mul_up_mag_u(sfp.mul_up_mag_u(y_sq, params.s), params.s),
    )
    term_np = sfp.sub(
        term_np, sfp.mul_down_mag_u(sfp.mul_down_mag_u(xy, 2 * params.c), params.s)
    )

    term_xp = sfp.add(
        sfp.add(
            sfp.mul_xp_u(derived.u, derived.u),
            sfp.div_down_mag_u(sfp.mul_xp_u(2 * derived.u, derived.v), params.lam),
        ),
        sfp.div_down_mag_u(
            sfp.div_down_mag_u(sfp.mul_xp_u(derived.v, derived.v), params.lam), params.lam
        ),
    )
    term_xp = sfp.div_xp_u(term_xp, _d_sq4(derived))

    val = sfp.mul_down_xp_to_np_u(-term_np, term_xp)
    return sfp.add(
        val,
        sfp.mul_down_xp_to_np_u(
            sfp.div_down_mag_u(
                sfp.div_down_mag_u(sfp.sub(term_np, 9), params.lam), params.lam
            ),
            sfp.div_xp_u(ONE_XP, derived.d_sq),
        ),
    )


def calc_2_atx_aty_a_chix_a_chiy(
    x: int, y: int, params: EclpParams, derived: EclpDerivedParams
) -> int:
    x_sq = sfp.mul_down_mag_u(x, x)
    y_sq = sfp.mul_up_mag_u(y, y)
    xy = sfp.mul_down_mag_u(y, 2 * x)

    term_np = sfp.mul_down_mag_u(
        sfp.mul_down_mag_u(sfp.sub(x_sq, y_sq), 2 * params.c), params.s
    )
    term_np = sfp.add(
        term_np,
        sfp.sub(
            sfp.mul_down_mag_u(sfp.mul_down_mag_u(xy, params.c), params.c),
            sfp.mul_down_mag_u(sfp.mul_down_mag_u(xy, params.s), params.s),
        ),
    )

    term_xp = sfp.add(
        sfp.mul_xp_u(derived.z, derived.u),
        sfp.div_down_mag_u(
            sfp.div_down_mag_u(sfp.mul_xp_u(derived.w, derived.v), params.lam), params.lam
        ),
    )
    term_xp = sfp.add(
        term_xp,
        sfp.div_down_mag_u(
            sfp.add(sfp.mul_xp_u(derived.w, derived.u), sfp.mul_xp_u(derived.z, derived.v)),
            params.lam,
        ),
    )
    term_xp = sfp.div_xp_u(term_xp, _d_sq4(derived))
    return sfp.mul_down_xp_to_np_u(term_np, term_xp)


def calc_min_aty_a_chix_sq_plus_aty_sq(
    x: int, y: int, params: EclpParams, derived: EclpDerivedParams
) -> int:
    term_np = sfp.add(
        sfp.mul_up_mag_u(sfp.mul_up_mag_u(sfp.mul_up_mag_u(x, x), params.s), params.s),
        sfp.mul_up_mag_u(sfp.mul_up_mag_u(sfp.mul_up_mag_u(y, y), params.c), params.c),
    )
    term_np = sfp.add(
        term_np,
        sfp.mul_up_mag_u(sfp.mul_up_mag_u(sfp.mul_up_mag_u(x, y), 2 * params.s), params.c),
    )

    term_xp = sfp.add(
        sfp.mul_xp_u(derived.z, derived.z),
        sfp.div_down_mag_u(
            sfp.div_down_mag_u(sfp.mul_xp_u(derived.w, derived.w), params.lam), params.lam
        ),
    )
    term_xp = sfp.add(
        term_xp, sfp.div_down_mag_u(sfp.mul_xp_u(2 * derived.z, derived.w), params.lam)
    )
    term_xp = sfp.div_xp_u(term_xp, _d_sq4(derived))

    val = sfp.mul_down_xp_to_np_u(-term_np, term_xp)
    return sfp.add(
        val,
        sfp.mul_down_xp_to_np_u(sfp.sub(term_np, 9), sfp.div_xp_u(ONE_XP, derived.d_sq)),
    )


def calc_invariant_sqrt(
    x: int, y: int, params: EclpParams, derived: EclpDerivedParams
) -> tuple[int, int]:
    """Square root term of the invariant and its error bound."""
    val = sfp.add(
        sfp.add(
            calc_min_atx_a_chiy_sq_plus_atx_sq(x, y, params, derived),
            calc_2_atx_aty_a_chix_a_chiy(x, y, params, derived),
        ),
        calc_min_aty_a_chix_sq_plus_aty_sq(x, y, params, derived),
    )
    err = sfp.div_down_mag_u(sfp.add(sfp.mul_up_mag_u(x, x), sfp.mul_up_mag_u(y, y)), ONE_XP)
    root = gyro_pool_math_sqrt(val, SQRT_TOLERANCE) if val > 0 else 0
    return root, err


def calculate_invariant_with_error(
    balances: list[int], params: EclpParams, derived: EclpDerivedParams
) -> tuple[int, int]:
    """Invariant of an E-CLP and an upper bound on its error.

    Raises:
        GyroError: If balances does not hold exactly two values
        XOutOfBounds: If the balances sum above 1e34
        StableInvariantDidNotConverge: If invariant plus error exceeds 3e37
    """
    if len(balances) != 2:
        raise GyroError(f"E-CLP needs 2 balances, got {len(balances)}")
    x, y = balances

    sum_balances = sfp.add(x, y)
    if sum_balances > MAX_BALANCES:
        raise XOutOfBounds(f"Balances sum {sum_balances} above {MAX_BALANCES}")

    at_a_chi = calc_at_a_chi(x, y, params, derived)
    root, err = calc_invariant_sqrt(x, y, params, derived)

    if root > 0:
        # err + 1 covers the ignored O(eps_np) term
        err = sfp.div_up_mag_u(sfp.add(err, 1), 2 * root)
    else:
        err = gyro_pool_math_sqrt(err, SQRT_TOLERANCE) if err > 0 else 10**9

    # Scaled by 20 to cover every possible error term
    err = (sfp.mul_up_mag_u(params.lam, sum_balances) // ONE_XP + err + 1) * 20

    achi_achi = calc_a_chi_a_chi_in_xp(params, derived)
    mul_denominator = sfp.div_xp_u(ONE_XP, sfp.sub(achi_achi, ONE_XP))

    invariant = sfp.mul_down_xp_to_np_u(sfp.sub(sfp.add(at_a_chi, root), err), mul_denominator)
    err = sfp.mul_up_xp_to_np_u(err, mul_denominator)

    lam_sq = (params.lam * params.lam) // 10**36
    err = (
        err
        + sfp.div_down_mag_u(sfp.mul_up_xp_to_np_u(invariant, mul_denominator) * lam_sq * 40, ONE_XP)
        + 1
    )

    if sfp.add(invariant, err) > MAX_INVARIANT:
        raise StableInvariantDidNotConverge(f"E-CLP invariant {invariant} above {MAX_INVARIANT}")
    return invariant, err


def invariant_vector(invariant: int, err: int) -> Vector2:
    """Pair (overestimate, estimate) used by the swap functions."""
    return Vector2(invariant + 2 * err, invariant)


def calc_xp_xp_div_lambda_lambda(
    x: int,
    r: Vector2,
    lam: int,
    s: int,
    c: int,
    tau_beta: Vector2,
    d_sq: int,
) -> int:
    """(x')^2 / lambda^2 in the rotated frame, rounded up."""
    d_sq2 = sfp.mul_xp_u(d_sq, d_sq)
    r_x_sq = sfp.mul_up_mag_u(r.x, r.x)

    term_xp = sfp.div_xp_u(sfp.mul_xp_u(tau_beta.x, tau_beta.y), d_sq2)
    if term_xp > 0:
        q_a = sfp.mul_up_mag_u(r_x_sq, 2 * s)
        q_a = sfp.mul_up_xp_to_np_u(sfp.mul_up_mag_u(q_a, c), sfp.add(term_xp, 7))
    else:
        q_a = sfp.mul_down_mag_u(sfp.mul_down_mag_u(r.y, r.y), 2 * s)
        q_a = sfp.mul_up_xp_to_np_u(sfp.mul_down_mag_u(q_a, c), term_xp)

    if tau_beta.x < 0:
        q_b = sfp.mul_up_xp_to_np_u(
            sfp.mul_up_mag_u(sfp.mul_up_mag_u(r.x, x), 2 * c),
            sfp.add(-sfp.div_xp_u(tau_beta.x, d_sq), 3),
        )
    else:
        q_b = sfp.mul_up_xp_to_np_u(
            sfp.mul_down_mag_u(sfp.mul_down_mag_u(-r.y, x), 2 * c),
            sfp.div_xp_u(tau_beta.x, d_sq),
        )
    q_a = sfp.add(q_a, q_b)

    term_xp2 = sfp.add(sfp.div_xp_u(sfp.mul_xp_u(tau_beta.y, tau_beta.y), d_sq2), 7)
    q_b2 = sfp.mul_up_xp_to_np_u(sfp.mul_up_mag_u(sfp.mul_up_mag_u(r_x_sq, s), s), term_xp2)
    q_c = sfp.mul_up_xp_to_np_u(
        sfp.mul_down_mag_u(sfp.mul_down_mag_u(-r.y, x), 2 * s),
        sfp.div_xp_u(tau_beta.y, d_sq),
    )
    q_b2 = sfp.add(sfp.add(q_b2, q_c), sfp.mul_up_mag_u(x, x))
    q_b2 = sfp.div_up_mag_u(q_b2, lam) if q_b2 > 0 else sfp.div_down_mag_u(q_b2, lam)

    q_a = sfp.add(q_a, q_b2)
    q_a = sfp.div_up_mag_u(q_a, lam) if q_a > 0 else sfp.div_down_mag_u(q_a, lam)

    term_xp3 = sfp.add(sfp.div_xp_u(sfp.mul_xp_u(tau_beta.x, tau_beta.x), d_sq2), 7)
    val = sfp.mul_up_mag_u(sfp.mul_up_mag_u(r_x_sq, c), c)
    return sfp.add(sfp.mul_up_xp_to_np_u(val, term_xp3), q_a)


def solve_quadratic_swap(
    lam: int,
    x: int,
    s: int,
    c: int,
    r: Vector2,
    ab: Vector2,
    tau_beta: Vector2,
    d_sq: int,
) -> int:
    """Solve the curve for the other coordinate given `x`."""
    lam_bar = Vector2(
        sfp.sub(ONE_XP, sfp.div_down_mag_u(sfp.div_down_mag_u(ONE_XP, lam), lam)),
        sfp.sub(ONE_XP, sfp.div_up_mag_u(sfp.div_up_mag_u(ONE_XP, lam), lam)),
    )

    xp = sfp.sub(x, ab.x)
    if xp > 0:
        q_b = sfp.mul_up_xp_to_np_u(
            sfp.mul_down_mag_u(sfp.mul_down_mag_u(-xp, s), c), sfp.div_xp_u(lam_bar.y, d_sq)
        )
    else:
        q_b = sfp.mul_up_xp_to_np_u(
            sfp.mul_up_mag_u(sfp.mul_up_mag_u(-xp, s), c),
            sfp.add(sfp.div_xp_u(lam_bar.x, d_sq), 1),
        )

    s_term = Vector2(
        sfp.sub(ONE_XP, sfp.div_xp_u(sfp.mul_down_mag_u(sfp.mul_down_mag_u(lam_bar.y, s), s), d_sq)),
        sfp.sub(
            ONE_XP,
            sfp.add(
                sfp.div_xp_u(
                    sfp.mul_up_mag_u(sfp.mul_up_mag_u(lam_bar.x, s), s), sfp.add(d_sq, 1)
                ),
                1,
            ),
        ),
    )

    q_c = -calc_xp_xp_div_lambda_lambda(x, r, lam, s, c, tau_beta, d_sq)
    q_c = sfp.add(q_c, sfp.mul_down_xp_to_np_u(sfp.mul_down_mag_u(r.y, r.y), s_term.y))
    q_c = gyro_pool_math_sqrt(q_c, SQRT_TOLERANCE) if q_c > 0 else 0

    diff = sfp.sub(q_b, q_c)
    if diff > 0:
        q_a = sfp.mul_up_xp_to_np_u(diff, sfp.add(sfp.div_xp_u(ONE_XP, s_term.y), 1))
    else:
        q_a = sfp.mul_up_xp_to_np_u(diff, sfp.div_xp_u(ONE_XP, s_term.x))
    return sfp.add(q_a, ab.y)


def calc_y_given_x(x: int, params: EclpParams, derived: EclpDerivedParams, r: Vector2) -> int:
    ab = Vector2(virtual_offset0(params, derived, r), virtual_offset1(params, derived, r))
    return solve_quadratic_swap(
        params.lam, x, params.s, params.c, r, ab, _tau(derived.tau_beta), derived.d_sq
    )


def calc_x_given_y(y: int, params: EclpParams, derived: EclpDerivedParams, r: Vector2) -> int:
    # Same quadratic with the axes swapped
    ba = Vector2(virtual_offset1(params, derived, r), virtual_offset0(params, derived, r))
    tau_alpha = _tau(derived.tau_alpha)
    return solve_quadratic_swap(
        params.lam,
        y,
        params.c,
        params.s,
        r,
        ba,
        Vector2(-tau_alpha.x, tau_alpha.y),
        derived.d_sq,
    )


def check_asset_bounds(
    params: EclpParams, derived: EclpDerivedParams, r: Vector2, balance: int, token_index: int
) -> None:
    """Reject a new balance that leaves the curve's reachable range.

    Raises:
        InvalidExponent: If balance is negative
        XOutOfBounds: If balance exceeds 1e34 or the curve's maximum
    """
    if balance < 0:
        raise InvalidExponent(f"Negative balance {balance}")
    if balance > MAX_BALANCES:
        raise XOutOfBounds(f"Balance {balance} above {MAX_BALANCES}")

    if token_index == 0:
        limit = max_balances0(params, derived, r)
    else:
        limit = max_balances1(params, derived, r)
    if balance > limit:
        raise XOutOfBounds(f"Balance {balance} above curve maximum {limit}")


def _indices(balances: list[int], token_in_is_token0: bool) -> tuple[int, int]:
    if len(balances) != 2:
        raise GyroError(f"E-CLP needs 2 balances, got {len(balances)}")
    return (0, 1) if token_in_is_token0 else (1, 0)


def calc_out_given_in(
    balances: list[int],
    amount_in: int,
    token_in_is_token0: bool,
    params: EclpParams,
    derived: EclpDerivedParams,
    r: Vector2,
) -> int:
    """Output for an exact (fee-adjusted, scaled) input.

    Raises:
        GyroError: If amount_in is negative or the curve yields a negative output
        XOutOfBounds: If the new input balance leaves the curve
    """
    ix_in, ix_out = _indices(balances, token_in_is_token0)
    if amount_in < 0:
        raise GyroError(f"Negative amount_in {amount_in}")

    bal_in_new = sfp.add(balances[ix_in], amount_in)
    check_asset_bounds(params, derived, r, bal_in_new, ix_in)

    if token_in_is_token0:
        bal_out_new = calc_y_given_x(bal_in_new, params, derived, r)
    else:
        bal_out_new = calc_x_given_y(bal_in_new, params, derived, r)

    amount_out = sfp.sub(balances[ix_out], bal_out_new)
    if amount_out < 0:
        raise GyroError(f"Negative amount_out {amount_out}")
    return amount_out


def calc_in_given_out(
    balances: list[int],
    amount_out: int,
    token_in_is_token0: bool,
    params: EclpParams,
    derived: EclpDerivedParams,
    r: Vector2,
) -> int:
    """Input (before fee) needed for an exact scaled output.

    Raises:
        GyroError: If amount_out is negative or exceeds the output balance
        XOutOfBounds: If the new input balance leaves the curve
    """
    ix_in, ix_out = _indices(balances, token_in_is_token0)
    if amount_out < 0:
        raise GyroError(f"Negative amount_out {amount_out}")
    if amount_out > balances[ix_out]:
        raise GyroError(f"Output {amount_out} exceeds balance {balances[ix_out]}")

    bal_out_new = sfp.sub(balances[ix_out], amount_out)
    if token_in_is_token0:
        bal_in_new = calc_x_given_y(bal_out_new, params, derived, r)
    else:
        bal_in_new = calc_y_given_x(bal_out_new, params, derived, r)

    check_asset_bounds(params, derived, r, bal_in_new, ix_in)

    amount_in = sfp.sub(bal_in_new, balances[ix_in])
    if amount_in < 0:
        raise GyroError(f"Negative amount_in {amount_in}")
    return amount_in
