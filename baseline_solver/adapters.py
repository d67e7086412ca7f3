"""Interfaces to the collaborators the router depends on.

Implementations live outside this package (RPC clients, subgraph readers,
test doubles). All calls are coroutines; the router bounds each of them
with its configured quote timeout.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from baseline_solver.pools.types import AnyPool


class AdapterError(Exception):
    """Raised by adapter implementations when a call cannot be answered.

    The router treats it like a failed quote: the candidate path that
    needed it is dropped.
    """

    pass


@runtime_checkable
class LiquiditySource(Protocol):
    """Source of pool snapshots."""

    async def fetch(
        self,
        token_pairs: Iterable[tuple[str, str]],
        block: int | None,
    ) -> Mapping[str, AnyPool]:
        """Return the pools trading any of the pairs, keyed by pool id.

        Args:
            token_pairs: Canonical (min, max) token pairs of interest
            block: Block the snapshot must be valid at, None for latest

        Returns:
            Mapping of pool id to pool state
        """
        ...


@runtime_checkable
class ConcentratedQuoter(Protocol):
    """Quoter for concentrated liquidity pools.

    Quotes must be side-effect free and idempotent for a given block,
    pool and arguments.
    """

    async def quote(
        self,
        pool_address: str,
        token_in: str,
        amount_in: int,
        token_out: str,
    ) -> int | None:
        """Output amount for an exact input, or None if the pool cannot fill it."""
        ...

    async def quote_exact_output(
        self,
        pool_address: str,
        token_in: str,
        amount_out: int,
        token_out: str,
    ) -> int | None:
        """Input amount for an exact output, or None if the pool cannot fill it."""
        ...


@runtime_checkable
class Erc4626Reader(Protocol):
    """Reader for ERC-4626 vault conversions at the auction block."""

    async def convert_to_shares(self, vault: str, assets: int) -> int:
        """Shares minted for depositing `assets`."""
        ...

    async def convert_to_assets(self, vault: str, shares: int) -> int:
        """Assets returned for redeeming `shares`."""
        ...


__all__ = ["AdapterError", "LiquiditySource", "ConcentratedQuoter", "Erc4626Reader"]
