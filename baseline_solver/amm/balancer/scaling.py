"""Balancer scaling and fee helpers.

Functions for scaling token amounts between native decimals and 18-decimal
fixed-point, and for applying swap fees.

Pools with a rate provider (Balancer V3 boosted and Gyroscope pools) fold
the token rate into the scaling: upscaling multiplies by the rate rounding
down, downscaling divides by `scaling_factor * rate` rounding up the
divisor. A rate of exactly 1e18 reduces both to plain decimal scaling.
"""

from decimal import Decimal

from baseline_solver.math.fixed_point import ONE_18, Bfp

from .errors import InvalidFeeError, InvalidScalingFactorError


def _check_scaling(scaling_factor: int, rate: int) -> None:
    if scaling_factor <= 0:
        raise InvalidScalingFactorError(f"Scaling factor must be positive, got {scaling_factor}")
    if rate <= 0:
        raise InvalidScalingFactorError(f"Token rate must be positive, got {rate}")


def scale_up(amount: int, scaling_factor: int, rate: int = ONE_18) -> Bfp:
    """Scale token amount to 18 decimals for internal math.

    Args:
        amount: Amount in token's native decimals
        scaling_factor: Factor to scale by (e.g., 10^12 for 6-decimal tokens)
        rate: Token rate from the pool's rate provider, 18 decimals

    Returns:
        Amount as Bfp (18-decimal fixed-point)

    Raises:
        InvalidScalingFactorError: If scaling_factor or rate is not positive
    """
    _check_scaling(scaling_factor, rate)
    scaled = Bfp.from_wei(amount * scaling_factor)
    if rate == ONE_18:
        return scaled
    return scaled.mul_down(Bfp.from_wei(rate))


def _divisor(scaling_factor: int, rate: int) -> Bfp:
    return Bfp.from_int(scaling_factor).mul_up(Bfp.from_wei(rate))


def scale_down_down(bfp: Bfp, scaling_factor: int, rate: int = ONE_18) -> int:
    """Scale 18-decimal result back to token decimals, rounding down.

    Raises:
        InvalidScalingFactorError: If scaling_factor or rate is not positive
    """
    _check_scaling(scaling_factor, rate)
    if rate == ONE_18:
        return bfp.value // scaling_factor
    return bfp.div_down(_divisor(scaling_factor, rate)).value


def scale_down_up(bfp: Bfp, scaling_factor: int, rate: int = ONE_18) -> int:
    """Scale 18-decimal result back to token decimals, rounding up.

    Raises:
        InvalidScalingFactorError: If scaling_factor or rate is not positive
    """
    _check_scaling(scaling_factor, rate)
    if rate == ONE_18:
        if bfp.value == 0:
            return 0
        return (bfp.value - 1) // scaling_factor + 1
    return bfp.div_up(_divisor(scaling_factor, rate)).value


def fee_to_bfp(swap_fee: Decimal) -> Bfp:
    """Convert a decimal fee to Bfp, checking it lies in [0, 1).

    Raises:
        InvalidFeeError: If swap_fee is not in range [0, 1)
    """
    if swap_fee < 0 or swap_fee >= 1:
        raise InvalidFeeError(f"Swap fee must be in range [0, 1), got {swap_fee}")
    return Bfp.from_decimal(swap_fee)


def subtract_swap_fee_amount(amount: int, swap_fee: Decimal) -> int:
    """Subtract swap fee from input amount.

    Used for sell orders (exact input): the fee is deducted from the raw
    token amount before upscaling, rounding the fee up.

    Args:
        amount: Input amount before fee
        swap_fee: Fee as decimal (e.g., 0.003 for 0.3%), must be in [0, 1)

    Returns:
        Amount after fee deduction

    Raises:
        InvalidFeeError: If swap_fee is not in range [0, 1)
    """
    fee_bfp = fee_to_bfp(swap_fee)
    amount_bfp = Bfp.from_wei(amount)
    return amount_bfp.sub(amount_bfp.mul_up(fee_bfp)).value


def add_swap_fee_amount(amount: int, swap_fee: Decimal) -> int:
    """Add swap fee to the calculated input amount.

    Used for buy orders (exact output): after calculating the raw input
    needed via calc_in_given_out and downscaling it, the fee goes on top.

    Formula: amount_with_fee = amount / (1 - fee), rounded up

    Raises:
        InvalidFeeError: If swap_fee is not in range [0, 1)
    """
    fee_bfp = fee_to_bfp(swap_fee)
    return Bfp.from_wei(amount).div_up(fee_bfp.complement()).value
