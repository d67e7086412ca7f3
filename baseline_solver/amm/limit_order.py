"""Taker-side limit orders used as liquidity.

A resting limit order is a one-shot edge with a fixed exchange rate (no
slippage curve). From the router's perspective:

- takerToken is the input token (what we sell into the order)
- makerToken is the output token (what we receive from the order)

The taker-token fee is charged pro rata on the input, so a fill of
taker_amount costs taker_amount + taker_token_fee_amount. The order is not
decremented locally; partial-fill accounting belongs to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass

from baseline_solver.amm.base import SwapResult
from baseline_solver.constants import LIMIT_ORDER_GAS
from baseline_solver.models.types import normalize_address


@dataclass(frozen=True)
class LimitOrderPool:
    """A foreign limit order exposed as a unidirectional pool.

    Attributes:
        id: Liquidity ID from the snapshot
        address: Settlement or exchange contract address
        maker_token: Token the maker provides (output)
        taker_token: Token the maker wants (input)
        maker_amount: Maximum output available from this order
        taker_amount: Maximum input (net of fee) accepted by this order
        taker_token_fee_amount: Fee in taker token for a full fill
        gas_estimate: Estimated gas cost
    """

    id: str
    address: str
    maker_token: str
    taker_token: str
    maker_amount: int
    taker_amount: int
    taker_token_fee_amount: int = 0
    gas_estimate: int = LIMIT_ORDER_GAS

    def __post_init__(self) -> None:
        """Validate amounts are positive."""
        if self.taker_amount <= 0:
            raise ValueError(f"taker_amount must be positive, got {self.taker_amount}")
        if self.maker_amount <= 0:
            raise ValueError(f"maker_amount must be positive, got {self.maker_amount}")
        if self.taker_token_fee_amount < 0:
            raise ValueError(
                f"taker_token_fee_amount cannot be negative, got {self.taker_token_fee_amount}"
            )

    @property
    def tokens(self) -> tuple[str, ...]:
        return (normalize_address(self.taker_token), normalize_address(self.maker_token))

    def supports_pair(self, token_in: str, token_out: str) -> bool:
        """Check if this order can route the given direction.

        Limit orders are unidirectional: taker_token -> maker_token only.
        """
        return normalize_address(token_in) == normalize_address(
            self.taker_token
        ) and normalize_address(token_out) == normalize_address(self.maker_token)


class LimitOrderAMM:
    """Swap calculator for limit orders.

    Linear pricing after the fee share is removed from the input:
    - Sell: amount_out = min(in - fee_share, taker_amount) * maker / taker
    - Buy: amount_in = ceil(ceil(out * taker / maker) * (taker + fee) / taker)
    """

    def simulate_swap(
        self,
        pool: LimitOrderPool,
        token_in: str,
        token_out: str,
        amount_in: int,
    ) -> SwapResult | None:
        """Simulate a swap through a limit order (exact input).

        Returns:
            SwapResult if valid, None if the direction doesn't match the order
        """
        if not pool.supports_pair(token_in, token_out):
            return None

        fee = pool.taker_token_fee_amount
        fee_share = amount_in * fee // (pool.taker_amount + fee)
        filled = min(amount_in - fee_share, pool.taker_amount)
        amount_out = filled * pool.maker_amount // pool.taker_amount

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
        pool: LimitOrderPool,
        token_in: str,
        token_out: str,
        amount_out: int,
    ) -> SwapResult | None:
        """Simulate a swap to get exact output (buy order).

        Returns:
            SwapResult if valid, None if the direction doesn't match or
            amount_out exceeds the order's maker amount
        """
        if not pool.supports_pair(token_in, token_out):
            return None
        if amount_out > pool.maker_amount:
            return None

        taker = pool.taker_amount
        # Round up both steps so the fill covers amount_out
        taker_part = (amount_out * taker + pool.maker_amount - 1) // pool.maker_amount
        gross = taker + pool.taker_token_fee_amount
        amount_in = (taker_part * gross + taker - 1) // taker

        return SwapResult(
            amount_in=amount_in,
            amount_out=amount_out,
            pool_id=pool.id,
            token_in=normalize_address(token_in),
            token_out=normalize_address(token_out),
            gas_estimate=pool.gas_estimate,
        )


# Singleton instance for convenience
limit_order_amm = LimitOrderAMM()

__all__ = ["LimitOrderPool", "LimitOrderAMM", "limit_order_amm"]
