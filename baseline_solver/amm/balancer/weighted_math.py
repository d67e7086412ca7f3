"""Weighted product pool math (Balancer WeightedMath).

    amount_out = b_out * (1 - (b_in / (b_in + a_in)) ^ (w_in / w_out))
    amount_in  = b_in * ((b_out / (b_out - a_out)) ^ (w_out / w_in) - 1)

Every intermediate rounds against the trader. Fees are handled by the
caller: subtracted from the input before `calc_out_given_in`, added to the
result of `calc_in_given_out`.
"""

from typing import Literal

from baseline_solver.math.fixed_point import MAX_IN_RATIO, MAX_OUT_RATIO, ONE_18, Bfp

from .errors import MaxInRatioError, MaxOutRatioError, ZeroBalanceError, ZeroWeightError

WeightedVersion = Literal["v0", "v3Plus"]


def _power(base: Bfp, exponent: Bfp, version: WeightedVersion) -> Bfp:
    # V3Plus pools short-circuit exponents 1, 2 and 4
    if version == "v3Plus":
        return base.pow_up_v3(exponent)
    return base.pow_up(exponent)


def _check_inputs(balance_in: Bfp, weight_in: Bfp, balance_out: Bfp, weight_out: Bfp) -> None:
    if weight_in.value <= 0 or weight_out.value <= 0:
        raise ZeroWeightError("weights must be positive")
    if balance_in.value <= 0 or balance_out.value <= 0:
        raise ZeroBalanceError("balances must be positive")


def calc_out_given_in(
    balance_in: Bfp,
    weight_in: Bfp,
    balance_out: Bfp,
    weight_out: Bfp,
    amount_in: Bfp,
    *,
    version: WeightedVersion = "v0",
) -> Bfp:
    """Output amount for an exact input (fee already deducted).

    Raises:
        MaxInRatioError: If amount_in exceeds 30% of balance_in
        ZeroWeightError: If a weight is zero
        ZeroBalanceError: If a balance is zero
    """
    _check_inputs(balance_in, weight_in, balance_out, weight_out)

    if amount_in > balance_in.mul_down(MAX_IN_RATIO):
        raise MaxInRatioError(f"Input {amount_in.value} exceeds 30% of balance {balance_in.value}")

    base = balance_in.div_up(balance_in.add(amount_in))
    exponent = weight_in.div_down(weight_out)
    power = _power(base, exponent, version)

    return balance_out.mul_down(power.complement())


def calc_in_given_out(
    balance_in: Bfp,
    weight_in: Bfp,
    balance_out: Bfp,
    weight_out: Bfp,
    amount_out: Bfp,
    *,
    version: WeightedVersion = "v0",
) -> Bfp:
    """Input amount for an exact output, before the swap fee is added.

    Raises:
        MaxOutRatioError: If amount_out exceeds 30% of balance_out
        ZeroWeightError: If a weight is zero
        ZeroBalanceError: If a balance is zero
    """
    _check_inputs(balance_in, weight_in, balance_out, weight_out)

    if amount_out > balance_out.mul_down(MAX_OUT_RATIO):
        raise MaxOutRatioError(
            f"Output {amount_out.value} exceeds 30% of balance {balance_out.value}"
        )

    base = balance_out.div_up(balance_out.sub(amount_out))
    # Rounded up here, unlike calc_out_given_in
    exponent = weight_out.div_up(weight_in)
    power = _power(base, exponent, version)

    return balance_in.mul_up(power.sub(Bfp(ONE_18)))
