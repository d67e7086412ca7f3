"""Constant-product (UniswapV2-style) AMM implementation.

Constant-product pools keep x * y = k with the fee taken from the input:

    amount_out = in * (1 - f) * y / (x + in * (1 - f))
    amount_in  = x * out / ((y - out) * (1 - f)), rounded up
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

import structlog

from baseline_solver.amm.base import SwapResult
from baseline_solver.constants import CONSTANT_PRODUCT_GAS
from baseline_solver.math import uint
from baseline_solver.math.errors import FixedPointError
from baseline_solver.math.fixed_point import ONE_18, Bfp
from baseline_solver.models.types import normalize_address

logger = structlog.get_logger()


@dataclass(frozen=True)
class ConstantProductPool:
    """A constant-product liquidity pool.

    Attributes:
        id: Pool identifier in the snapshot
        address: Pool contract address
        token0: Token with the lower address
        token1: Token with the higher address
        reserve0: Balance of token0
        reserve1: Balance of token1
        fee: Swap fee as decimal (0.003 for 0.3%)
        gas_estimate: Gas cost estimate for one swap
    """

    id: str
    address: str
    token0: str
    token1: str
    reserve0: int
    reserve1: int
    fee: Decimal = Decimal("0.003")
    gas_estimate: int = CONSTANT_PRODUCT_GAS

    @classmethod
    def from_reserves(
        cls,
        id: str,
        address: str,
        reserves: dict[str, int],
        fee: Decimal = Decimal("0.003"),
        gas_estimate: int = CONSTANT_PRODUCT_GAS,
    ) -> ConstantProductPool:
        """Build a pool from a {token: balance} mapping, sorting the tokens.

        Raises:
            ValueError: If the mapping does not hold exactly two tokens
        """
        if len(reserves) != 2:
            raise ValueError(f"Constant-product pool needs 2 tokens, got {len(reserves)}")
        (token_a, balance_a), (token_b, balance_b) = sorted(
            (normalize_address(token), balance) for token, balance in reserves.items()
        )
        return cls(
            id=id,
            address=normalize_address(address),
            token0=token_a,
            token1=token_b,
            reserve0=balance_a,
            reserve1=balance_b,
            fee=fee,
            gas_estimate=gas_estimate,
        )

    @property
    def tokens(self) -> tuple[str, ...]:
        return (normalize_address(self.token0), normalize_address(self.token1))

    def get_reserves(self, token_in: str) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        token_in_norm = normalize_address(token_in)
        if token_in_norm == normalize_address(self.token0):
            return self.reserve0, self.reserve1
        elif token_in_norm == normalize_address(self.token1):
            return self.reserve1, self.reserve0
        else:
            raise ValueError(f"Token {token_in} not in pool")

    def get_token_out(self, token_in: str) -> str:
        """Get the output token for a given input token."""
        token_in_norm = normalize_address(token_in)
        if token_in_norm == normalize_address(self.token0):
            return normalize_address(self.token1)
        elif token_in_norm == normalize_address(self.token1):
            return normalize_address(self.token0)
        else:
            raise ValueError(f"Token {token_in} not in pool")


def _fee_complement(fee: Decimal) -> int:
    """1 - fee as an 18-decimal integer."""
    return Bfp.from_decimal(fee).complement().value


def get_amount_out(amount_in: int, reserve_in: int, reserve_out: int, fee: Decimal) -> int:
    """Output amount for an exact input, rounded down.

    Raises:
        MulOverflow: If an intermediate leaves uint256
    """
    if amount_in <= 0 or reserve_in <= 0 or reserve_out <= 0:
        return 0

    amount_in_with_fee = uint.mul(amount_in, _fee_complement(fee))
    numerator = uint.mul(amount_in_with_fee, reserve_out)
    denominator = uint.add(uint.mul(reserve_in, ONE_18), amount_in_with_fee)
    return uint.div_down(numerator, denominator)


def get_amount_in(amount_out: int, reserve_in: int, reserve_out: int, fee: Decimal) -> int | None:
    """Input amount for an exact output, rounded up.

    Returns:
        Required input, or None if amount_out drains the output reserve

    Raises:
        MulOverflow: If an intermediate leaves uint256
    """
    if amount_out <= 0:
        return 0
    if reserve_in <= 0 or amount_out >= reserve_out:
        return None

    numerator = uint.mul(uint.mul(reserve_in, amount_out), ONE_18)
    denominator = uint.mul(reserve_out - amount_out, _fee_complement(fee))
    return uint.div_up(numerator, denominator)


class ConstantProductAMM:
    """Swap simulation through constant-product pools."""

    def simulate_swap(
        self,
        pool: ConstantProductPool,
        token_in: str,
        token_out: str,
        amount_in: int,
    ) -> SwapResult | None:
        """Simulate a swap through a pool (exact input).

        Returns:
            SwapResult with amounts and pool info, or None if the tokens do
            not match the pool or the math overflows
        """
        try:
            reserve_in, reserve_out = pool.get_reserves(token_in)
            if pool.get_token_out(token_in) != normalize_address(token_out):
                return None
            amount_out = get_amount_out(amount_in, reserve_in, reserve_out, pool.fee)
        except (ValueError, FixedPointError) as e:
            logger.debug(
                "constant_product_amm_swap_failed",
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
        pool: ConstantProductPool,
        token_in: str,
        token_out: str,
        amount_out: int,
    ) -> SwapResult | None:
        """Simulate a swap to get an exact output amount.

        Returns:
            SwapResult with required input and the forward-simulated output,
            which may exceed amount_out due to rounding
        """
        try:
            reserve_in, reserve_out = pool.get_reserves(token_in)
            if pool.get_token_out(token_in) != normalize_address(token_out):
                return None
            amount_in = get_amount_in(amount_out, reserve_in, reserve_out, pool.fee)
            if amount_in is None:
                logger.debug(
                    "constant_product_amm_insufficient_reserve",
                    pool_id=pool.id,
                    token_out=token_out,
                    amount_out=amount_out,
                    reserve_out=reserve_out,
                )
                return None
            # Forward verification
            actual_output = get_amount_out(amount_in, reserve_in, reserve_out, pool.fee)
        except (ValueError, FixedPointError) as e:
            logger.debug(
                "constant_product_amm_exact_output_failed",
                pool_id=pool.id,
                token_in=token_in,
                token_out=token_out,
                amount_out=amount_out,
                error=str(e),
            )
            return None

        return SwapResult(
            amount_in=amount_in,
            amount_out=actual_output,
            pool_id=pool.id,
            token_in=normalize_address(token_in),
            token_out=normalize_address(token_out),
            gas_estimate=pool.gas_estimate,
        )


# Singleton instance
constant_product_amm = ConstantProductAMM()


__all__ = [
    "ConstantProductPool",
    "ConstantProductAMM",
    "constant_product_amm",
    "get_amount_out",
    "get_amount_in",
]
