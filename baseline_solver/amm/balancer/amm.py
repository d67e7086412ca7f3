"""Balancer AMM classes.

High-level AMM classes for swap simulation through Balancer and Gyroscope
pools. Each class turns raw token amounts into scaled kernel inputs, calls
the pool math and scales the result back; kernel failures are logged and
reported as None.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any

import structlog

from baseline_solver.amm.base import SwapResult
from baseline_solver.math.errors import FixedPointError
from baseline_solver.math.fixed_point import AMP_PRECISION, Bfp
from baseline_solver.math.uint import UINT256_MAX
from baseline_solver.models.types import normalize_address

from . import gyro_2clp_math, gyro_3clp_math, gyro_eclp_math
from .errors import BalancerError
from .pools import (
    BalancerStablePool,
    BalancerWeightedPool,
    Gyro2CLPPool,
    Gyro3CLPPool,
    GyroECLPPool,
    StableSurgePool,
)
from .scaling import (
    add_swap_fee_amount,
    fee_to_bfp,
    scale_down_down,
    scale_down_up,
    scale_up,
    subtract_swap_fee_amount,
)
from .stable_math import filter_bpt_token, stable_calc_in_given_out, stable_calc_out_given_in
from .stable_surge_math import calc_in_given_out_with_surge, calc_out_given_in_with_surge
from .weighted_math import calc_in_given_out, calc_out_given_in

if TYPE_CHECKING:
    from collections.abc import Callable

logger = structlog.get_logger()

_CONVERGE_ATTEMPTS = 6


# =============================================================================
# Forward Verification
# =============================================================================


def converge_in_amount(
    in_amount: int,
    exact_out_amount: int,
    get_amount_out: Callable[[int], int | None],
) -> tuple[int, int] | None:
    """Bump an input amount until forward simulation yields enough output.

    Balancer pools are "unstable": computing an input large enough to buy X
    tokens, then selling that input in the same pool state, may yield X-δ
    tokens. The deficit is converted to input at the current trading price
    and multiplied by 10 on every retry.

    Args:
        in_amount: Initial input amount (fee included, token decimals)
        exact_out_amount: Required output amount
        get_amount_out: Simulates selling an input, returns output or None

    Returns:
        Tuple of (converged_input, actual_output), or None if convergence fails.
        The actual_output may exceed exact_out_amount due to rounding.
    """
    out_amount = get_amount_out(in_amount)
    if out_amount is None:
        return None
    if out_amount >= exact_out_amount:
        return (in_amount, out_amount)

    # bump = ceil((exact_out - out) * in_amount / max(out, 1))
    deficit = exact_out_amount - out_amount
    divisor = max(out_amount, 1)
    bump = max(1, (deficit * in_amount + divisor - 1) // divisor)

    for _ in range(_CONVERGE_ATTEMPTS):
        bumped_in_amount = in_amount + bump
        if bumped_in_amount > UINT256_MAX:
            logger.debug(
                "converge_in_amount_overflow",
                in_amount=in_amount,
                bump=bump,
            )
            return None
        out_amount = get_amount_out(bumped_in_amount)
        if out_amount is None:
            return None
        if out_amount >= exact_out_amount:
            return (bumped_in_amount, out_amount)
        if bump > UINT256_MAX // 10:
            logger.debug("converge_in_amount_bump_overflow", bump=bump)
            return None
        bump *= 10

    return None


# =============================================================================
# Reserve helpers
# =============================================================================


def _get_reserves(
    pool: Any,
    token_in: str,
    token_out: str,
    kind: str,
) -> tuple[Any, int, Any, int] | None:
    """Get reserves and indices for a token pair.

    Args:
        pool: Any Balancer-family pool
        token_in: Input token address
        token_out: Output token address
        kind: Pool kind used in log events

    Returns:
        Tuple of (reserve_in, index_in, reserve_out, index_out), or None if a
        token is missing, both tokens are the same or a balance is zero
    """
    token_in_norm = normalize_address(token_in)
    token_out_norm = normalize_address(token_out)

    if token_in_norm == token_out_norm:
        logger.debug("balancer_amm_self_swap", kind=kind, pool_id=pool.id, token=token_in)
        return None

    index_in = None
    index_out = None
    for i, reserve in enumerate(pool.reserves):
        token_norm = normalize_address(reserve.token)
        if token_norm == token_in_norm:
            index_in = i
        elif token_norm == token_out_norm:
            index_out = i

    for index, token, role in ((index_in, token_in, "input"), (index_out, token_out, "output")):
        if index is None:
            logger.debug(
                "balancer_amm_token_not_found",
                kind=kind,
                pool_id=pool.id,
                token=token,
                role=role,
            )
            return None
        # Zero balances would divide by zero in every family's math
        if pool.reserves[index].balance == 0:
            logger.debug(
                "balancer_amm_zero_balance",
                kind=kind,
                pool_id=pool.id,
                token=token,
                role=role,
            )
            return None

    assert index_in is not None and index_out is not None
    return pool.reserves[index_in], index_in, pool.reserves[index_out], index_out


def _scaled_balances(pool: Any) -> list[Bfp]:
    return [scale_up(r.balance, r.scaling_factor, r.rate) for r in pool.reserves]


def _amp(amplification_parameter: Decimal) -> int:
    # Snapshots carry the raw A value; the math expects A * AMP_PRECISION
    return int(
        (amplification_parameter * AMP_PRECISION).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    )


def _token0_first(pool: Any, index_in: int, index_out: int) -> bool:
    """Whether the input token is token 0, the one with the lower address."""
    tokens = pool.tokens
    return tokens[index_in] < tokens[index_out]


# =============================================================================
# AMM Classes
# =============================================================================


class _BalancerAMM:
    """Shared scaling, fee and error handling for Balancer-family pools.

    Subclasses implement the two kernel hooks on scaled 18-decimal values.
    Pools that charge the static swap fee have it deducted from the raw input
    (exact input) or added to the downscaled input (exact output).
    """

    kind = "balancer"
    charges_static_fee = True
    # Weighted and stable quotes are re-verified by forward simulation
    converges_exact_output = False

    def _prepare(self, pool: Any) -> Any:
        return pool

    def _out_given_in(
        self, pool: Any, balances: list[Bfp], index_in: int, index_out: int, amount_in: Bfp
    ) -> Bfp:
        raise NotImplementedError

    def _in_given_out(
        self, pool: Any, balances: list[Bfp], index_in: int, index_out: int, amount_out: Bfp
    ) -> Bfp:
        raise NotImplementedError

    def simulate_swap(
        self,
        pool: Any,
        token_in: str,
        token_out: str,
        amount_in: int,
    ) -> SwapResult | None:
        """Simulate a swap (exact input).

        Args:
            pool: The pool
            token_in: Input token address
            token_out: Output token address
            amount_in: Amount of input token

        Returns:
            SwapResult with amounts and pool info, or None if the swap fails
        """
        pool = self._prepare(pool)
        reserves = _get_reserves(pool, token_in, token_out, self.kind)
        if reserves is None:
            return None
        reserve_in, index_in, reserve_out, index_out = reserves

        try:
            balances = _scaled_balances(pool)
            net_in = amount_in
            if self.charges_static_fee:
                net_in = subtract_swap_fee_amount(amount_in, pool.fee)
            amount_in_scaled = scale_up(net_in, reserve_in.scaling_factor, reserve_in.rate)

            amount_out_scaled = self._out_given_in(
                pool, balances, index_in, index_out, amount_in_scaled
            )
            amount_out = scale_down_down(
                amount_out_scaled, reserve_out.scaling_factor, reserve_out.rate
            )
        except (BalancerError, FixedPointError) as e:
            logger.debug(
                f"{self.kind}_amm_swap_failed",
                pool_id=pool.id,
                token_in=token_in,
                token_out=token_out,
                amount_in=amount_in,
                error=str(e),
            )
            return None

        return SwapResult(
            amount_in=amount_in,
            amount_out=amount_out,
            pool_id=pool.id,
            token_in=normalize_address(token_in),
            token_out=normalize_address(token_out),
            gas_estimate=pool.gas_estimate,
        )

    def simulate_swap_exact_output(
        self,
        pool: Any,
        token_in: str,
        token_out: str,
        amount_out: int,
    ) -> SwapResult | None:
        """Simulate a swap to get an exact output amount.

        For weighted and stable pools the computed input is verified by
        forward simulation and bumped until it buys at least amount_out.
        The other families return the in-given-out amount directly.

        Returns:
            SwapResult with the input and output amounts, or None if the
            swap fails
        """
        pool = self._prepare(pool)
        reserves = _get_reserves(pool, token_in, token_out, self.kind)
        if reserves is None:
            return None
        reserve_in, index_in, reserve_out, index_out = reserves

        try:
            balances = _scaled_balances(pool)
            amount_out_scaled = scale_up(amount_out, reserve_out.scaling_factor, reserve_out.rate)

            amount_in_scaled = self._in_given_out(
                pool, balances, index_in, index_out, amount_out_scaled
            )
            # Downscale first, then add the fee
            in_amount = scale_down_up(amount_in_scaled, reserve_in.scaling_factor, reserve_in.rate)
            if self.charges_static_fee:
                in_amount = add_swap_fee_amount(in_amount, pool.fee)
        except (BalancerError, FixedPointError) as e:
            logger.debug(
                f"{self.kind}_amm_exact_output_failed",
                pool_id=pool.id,
                token_in=token_in,
                token_out=token_out,
                amount_out=amount_out,
                error=str(e),
            )
            return None

        if not self.converges_exact_output:
            return SwapResult(
                amount_in=in_amount,
                amount_out=amount_out,
                pool_id=pool.id,
                token_in=normalize_address(token_in),
                token_out=normalize_address(token_out),
                gas_estimate=pool.gas_estimate,
            )

        def get_amount_out(amt_in: int) -> int | None:
            sim_result = self.simulate_swap(pool, token_in, token_out, amt_in)
            if sim_result is None:
                return None
            return sim_result.amount_out

        converged = converge_in_amount(in_amount, amount_out, get_amount_out)
        if converged is None:
            return None

        converged_input, actual_output = converged
        return SwapResult(
            amount_in=converged_input,
            amount_out=actual_output,
            pool_id=pool.id,
            token_in=normalize_address(token_in),
            token_out=normalize_address(token_out),
            gas_estimate=pool.gas_estimate,
        )


class BalancerWeightedAMM(_BalancerAMM):
    """Weighted product pools (V0 and V3Plus)."""

    kind = "weighted"
    converges_exact_output = True

    def _out_given_in(
        self,
        pool: BalancerWeightedPool,
        balances: list[Bfp],
        index_in: int,
        index_out: int,
        amount_in: Bfp,
    ) -> Bfp:
        return calc_out_given_in(
            balance_in=balances[index_in],
            weight_in=Bfp.from_decimal(pool.reserves[index_in].weight),
            balance_out=balances[index_out],
            weight_out=Bfp.from_decimal(pool.reserves[index_out].weight),
            amount_in=amount_in,
            version=pool.version,
        )

    def _in_given_out(
        self,
        pool: BalancerWeightedPool,
        balances: list[Bfp],
        index_in: int,
        index_out: int,
        amount_out: Bfp,
    ) -> Bfp:
        return calc_in_given_out(
            balance_in=balances[index_in],
            weight_in=Bfp.from_decimal(pool.reserves[index_in].weight),
            balance_out=balances[index_out],
            weight_out=Bfp.from_decimal(pool.reserves[index_out].weight),
            amount_out=amount_out,
            version=pool.version,
        )


class BalancerStableAMM(_BalancerAMM):
    """Stable pools, including composable stable pools holding their own BPT."""

    kind = "stable"
    converges_exact_output = True

    def _prepare(self, pool: BalancerStablePool) -> BalancerStablePool:
        return filter_bpt_token(pool)

    def _out_given_in(
        self,
        pool: BalancerStablePool,
        balances: list[Bfp],
        index_in: int,
        index_out: int,
        amount_in: Bfp,
    ) -> Bfp:
        return stable_calc_out_given_in(
            amp=_amp(pool.amplification_parameter),
            balances=balances,
            token_index_in=index_in,
            token_index_out=index_out,
            amount_in=amount_in,
        )

    def _in_given_out(
        self,
        pool: BalancerStablePool,
        balances: list[Bfp],
        index_in: int,
        index_out: int,
        amount_out: Bfp,
    ) -> Bfp:
        return stable_calc_in_given_out(
            amp=_amp(pool.amplification_parameter),
            balances=balances,
            token_index_in=index_in,
            token_index_out=index_out,
            amount_out=amount_out,
        )


class StableSurgeAMM(_BalancerAMM):
    """Stable pools with the StableSurge dynamic fee hook.

    The hook computes the whole fee, so the static fee is not charged
    separately.
    """

    kind = "stable_surge"
    charges_static_fee = False

    def _out_given_in(
        self,
        pool: StableSurgePool,
        balances: list[Bfp],
        index_in: int,
        index_out: int,
        amount_in: Bfp,
    ) -> Bfp:
        result = calc_out_given_in_with_surge(
            _amp(pool.amplification_parameter),
            balances,
            index_in,
            index_out,
            amount_in,
            static_fee=fee_to_bfp(pool.fee),
            surge_threshold=Bfp.from_decimal(pool.surge_threshold),
            max_surge_fee=fee_to_bfp(pool.max_surge_fee),
        )
        return result.amount

    def _in_given_out(
        self,
        pool: StableSurgePool,
        balances: list[Bfp],
        index_in: int,
        index_out: int,
        amount_out: Bfp,
    ) -> Bfp:
        result = calc_in_given_out_with_surge(
            _amp(pool.amplification_parameter),
            balances,
            index_in,
            index_out,
            amount_out,
            static_fee=fee_to_bfp(pool.fee),
            surge_threshold=Bfp.from_decimal(pool.surge_threshold),
            max_surge_fee=fee_to_bfp(pool.max_surge_fee),
        )
        return result.amount


class Gyro2CLPAMM(_BalancerAMM):
    """Gyroscope 2-CLP pools."""

    kind = "gyro_2clp"

    def _offsets(
        self, pool: Gyro2CLPPool, balances: list[Bfp], index_in: int, index_out: int
    ) -> tuple[Bfp, Bfp]:
        sqrt_alpha = Bfp(pool.sqrt_alpha)
        sqrt_beta = Bfp(pool.sqrt_beta)
        token_in_is_token0 = _token0_first(pool, index_in, index_out)
        if token_in_is_token0:
            ordered = [balances[index_in], balances[index_out]]
        else:
            ordered = [balances[index_out], balances[index_in]]

        invariant = gyro_2clp_math.calculate_invariant(ordered, sqrt_alpha, sqrt_beta)
        offset0 = gyro_2clp_math.virtual_offset0(invariant, sqrt_beta)
        offset1 = gyro_2clp_math.virtual_offset1(invariant, sqrt_alpha)
        if token_in_is_token0:
            return offset0, offset1
        return offset1, offset0

    def _out_given_in(
        self,
        pool: Gyro2CLPPool,
        balances: list[Bfp],
        index_in: int,
        index_out: int,
        amount_in: Bfp,
    ) -> Bfp:
        offset_in, offset_out = self._offsets(pool, balances, index_in, index_out)
        return gyro_2clp_math.calc_out_given_in(
            balances[index_in], balances[index_out], amount_in, offset_in, offset_out
        )

    def _in_given_out(
        self,
        pool: Gyro2CLPPool,
        balances: list[Bfp],
        index_in: int,
        index_out: int,
        amount_out: Bfp,
    ) -> Bfp:
        offset_in, offset_out = self._offsets(pool, balances, index_in, index_out)
        return gyro_2clp_math.calc_in_given_out(
            balances[index_in], balances[index_out], amount_out, offset_in, offset_out
        )


class Gyro3CLPAMM(_BalancerAMM):
    """Gyroscope 3-CLP pools."""

    kind = "gyro_3clp"

    def _offset(self, pool: Gyro3CLPPool, balances: list[Bfp]) -> Bfp:
        root3_alpha = Bfp(pool.root3_alpha)
        invariant = gyro_3clp_math.calculate_invariant(balances, root3_alpha)
        return gyro_3clp_math.virtual_offset(invariant, root3_alpha)

    def _out_given_in(
        self,
        pool: Gyro3CLPPool,
        balances: list[Bfp],
        index_in: int,
        index_out: int,
        amount_in: Bfp,
    ) -> Bfp:
        return gyro_3clp_math.calc_out_given_in(
            balances[index_in], balances[index_out], amount_in, self._offset(pool, balances)
        )

    def _in_given_out(
        self,
        pool: Gyro3CLPPool,
        balances: list[Bfp],
        index_in: int,
        index_out: int,
        amount_out: Bfp,
    ) -> Bfp:
        return gyro_3clp_math.calc_in_given_out(
            balances[index_in], balances[index_out], amount_out, self._offset(pool, balances)
        )


class GyroECLPAMM(_BalancerAMM):
    """Gyroscope E-CLP pools."""

    kind = "gyro_eclp"

    def _curve(
        self, pool: GyroECLPPool, balances: list[Bfp], index_in: int, index_out: int
    ) -> tuple[list[int], bool, gyro_eclp_math.Vector2]:
        token_in_is_token0 = _token0_first(pool, index_in, index_out)
        if token_in_is_token0:
            ordered = [balances[index_in].value, balances[index_out].value]
        else:
            ordered = [balances[index_out].value, balances[index_in].value]

        invariant, err = gyro_eclp_math.calculate_invariant_with_error(
            ordered, pool.params, pool.derived
        )
        return ordered, token_in_is_token0, gyro_eclp_math.invariant_vector(invariant, err)

    def _out_given_in(
        self,
        pool: GyroECLPPool,
        balances: list[Bfp],
        index_in: int,
        index_out: int,
        amount_in: Bfp,
    ) -> Bfp:
        ordered, token_in_is_token0, r = self._curve(pool, balances, index_in, index_out)
        amount_out = gyro_eclp_math.calc_out_given_in(
            ordered, amount_in.value, token_in_is_token0, pool.params, pool.derived, r
        )
        return Bfp(amount_out)

    def _in_given_out(
        self,
        pool: GyroECLPPool,
        balances: list[Bfp],
        index_in: int,
        index_out: int,
        amount_out: Bfp,
    ) -> Bfp:
        ordered, token_in_is_token0, r = self._curve(pool, balances, index_in, index_out)
        amount_in = gyro_eclp_math.calc_in_given_out(
            ordered, amount_out.value, token_in_is_token0, pool.params, pool.derived, r
        )
        return Bfp(amount_in)


__all__ = [
    "converge_in_amount",
    "BalancerWeightedAMM",
    "BalancerStableAMM",
    "StableSurgeAMM",
    "Gyro2CLPAMM",
    "Gyro3CLPAMM",
    "GyroECLPAMM",
]
