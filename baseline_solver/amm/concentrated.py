"""Concentrated liquidity (UniswapV3-style) pools priced by an external quoter.

The pool snapshot carries the full tick state for completeness, but swap
amounts come from the quoter, which is treated as authoritative. Quotes
may differ from a local tick walk by a few wei around tick boundaries.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import structlog

from baseline_solver.adapters import AdapterError, ConcentratedQuoter
from baseline_solver.amm.base import SwapResult
from baseline_solver.constants import CONCENTRATED_GAS
from baseline_solver.models.types import normalize_address

logger = structlog.get_logger()

# Fee tier -> tick spacing for the canonical deployments
TICK_SPACING = {
    100: 1,
    500: 10,
    3000: 60,
    10000: 200,
}


@dataclass(frozen=True)
class ConcentratedPool:
    """A concentrated liquidity pool snapshot.

    Attributes:
        id: Pool identifier in the snapshot
        address: Pool contract address, passed to the quoter
        token0: Token with the lower address
        token1: Token with the higher address
        fee: Fee in millionths (3000 for 0.3%)
        sqrt_price: Current sqrt(price) * 2^96
        liquidity: Active liquidity at the current tick
        tick: Current tick index
        liquidity_net: Net liquidity change at each initialized tick
        gas_estimate: Gas cost estimate for one swap
    """

    id: str
    address: str
    token0: str
    token1: str
    fee: int
    sqrt_price: int
    liquidity: int
    tick: int
    liquidity_net: dict[int, int] = field(default_factory=dict, hash=False, compare=False)
    gas_estimate: int = CONCENTRATED_GAS

    @property
    def tokens(self) -> tuple[str, ...]:
        return (normalize_address(self.token0), normalize_address(self.token1))

    @property
    def fee_decimal(self) -> float:
        """Fee as decimal (0.003 for 0.3%)."""
        return self.fee / 1_000_000

    @property
    def tick_spacing(self) -> int:
        return TICK_SPACING.get(self.fee, 60)

    def get_token_out(self, token_in: str) -> str:
        """Get the output token for a given input token."""
        token_in_norm = normalize_address(token_in)
        if token_in_norm == normalize_address(self.token0):
            return normalize_address(self.token1)
        elif token_in_norm == normalize_address(self.token1):
            return normalize_address(self.token0)
        else:
            raise ValueError(f"Token {token_in} not in pool")


class ConcentratedAMM:
    """Concentrated liquidity swaps through a quoter.

    Unlike the local-math families, both simulate methods are coroutines.
    Every quoter call is bounded by `timeout` seconds; a timeout or an
    adapter failure makes the swap infeasible.
    """

    def __init__(self, quoter: ConcentratedQuoter | None = None, timeout: float = 2.0):
        """Initialize the AMM.

        Args:
            quoter: Quoter implementation. If None, every simulation
                returns None (concentrated pools disabled).
            timeout: Seconds allowed for each quoter call
        """
        self.quoter = quoter
        self.timeout = timeout

    async def _call(self, pool: ConcentratedPool, coro, **context) -> int | None:
        try:
            return await asyncio.wait_for(coro, self.timeout)
        except asyncio.TimeoutError:
            logger.debug("concentrated_amm_quote_timeout", pool_id=pool.id, **context)
            return None
        except (AdapterError, OSError) as e:
            logger.debug(
                "concentrated_amm_quote_error", pool_id=pool.id, error=str(e), **context
            )
            return None

    async def simulate_swap(
        self,
        pool: ConcentratedPool,
        token_in: str,
        token_out: str,
        amount_in: int,
    ) -> SwapResult | None:
        """Simulate a swap through a concentrated pool (exact input).

        Returns:
            SwapResult with amounts and pool info, or None if the quote fails
        """
        if self.quoter is None:
            logger.debug("concentrated_amm_no_quoter", pool_id=pool.id)
            return None
        try:
            if pool.get_token_out(token_in) != normalize_address(token_out):
                return None
        except ValueError:
            return None

        amount_out = await self._call(
            pool,
            self.quoter.quote(pool.address, token_in, amount_in, token_out),
            token_in=token_in,
            amount_in=amount_in,
        )
        if amount_out is None:
            logger.debug(
                "concentrated_amm_quote_failed",
                pool_id=pool.id,
                token_in=token_in,
                amount_in=amount_in,
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

    async def simulate_swap_exact_output(
        self,
        pool: ConcentratedPool,
        token_in: str,
        token_out: str,
        amount_out: int,
    ) -> SwapResult | None:
        """Simulate a swap to get an exact output amount.

        Returns:
            SwapResult with required input and the forward-quoted output,
            or None if the quote fails
        """
        if self.quoter is None:
            logger.debug("concentrated_amm_no_quoter", pool_id=pool.id)
            return None
        try:
            if pool.get_token_out(token_in) != normalize_address(token_out):
                return None
        except ValueError:
            return None

        amount_in = await self._call(
            pool,
            self.quoter.quote_exact_output(pool.address, token_in, amount_out, token_out),
            token_in=token_in,
            amount_out=amount_out,
        )
        if amount_in is None:
            logger.debug(
                "concentrated_amm_quote_exact_output_failed",
                pool_id=pool.id,
                token_in=token_in,
                amount_out=amount_out,
            )
            return None

        # Forward verification; fall back to the requested output if the
        # re-quote fails
        actual_output = await self._call(
            pool,
            self.quoter.quote(pool.address, token_in, amount_in, token_out),
            token_in=token_in,
            amount_in=amount_in,
        )
        if actual_output is None:
            actual_output = amount_out

        return SwapResult(
            amount_in=amount_in,
            amount_out=actual_output,
            pool_id=pool.id,
            token_in=normalize_address(token_in),
            token_out=normalize_address(token_out),
            gas_estimate=pool.gas_estimate,
        )


__all__ = ["ConcentratedPool", "ConcentratedAMM", "TICK_SPACING"]
