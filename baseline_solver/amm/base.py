"""Shared result type and calculator protocol for AMM implementations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class SwapResult:
    """Result of simulating a swap through one pool."""

    amount_in: int
    amount_out: int
    pool_id: str
    token_in: str
    token_out: str
    gas_estimate: int


@runtime_checkable
class SwapCalculator(Protocol):
    """Protocol for synchronous AMM swap calculators.

    All pool families except the adapter-backed ones (concentrated
    liquidity, ERC-4626) price locally and implement this interface. The
    adapter-backed calculators expose the same two methods as coroutines.
    """

    def simulate_swap(
        self,
        pool: Any,
        token_in: str,
        token_out: str,
        amount_in: int,
    ) -> SwapResult | None:
        """Simulate a swap through a pool (exact input).

        Args:
            pool: The liquidity pool
            token_in: Input token address
            token_out: Output token address
            amount_in: Amount of input token

        Returns:
            SwapResult with amounts and pool info, or None if the swap fails
        """
        ...

    def simulate_swap_exact_output(
        self,
        pool: Any,
        token_in: str,
        token_out: str,
        amount_out: int,
    ) -> SwapResult | None:
        """Simulate a swap to get an exact output amount.

        Args:
            pool: The liquidity pool
            token_in: Input token address
            token_out: Output token address
            amount_out: Desired output amount

        Returns:
            SwapResult with required input and the output actually received
            (never less than amount_out), or None if the swap fails
        """
        ...
