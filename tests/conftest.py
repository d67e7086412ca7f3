"""Pytest configuration, fixtures and adapter fakes."""

import asyncio
from collections.abc import Iterable, Mapping

import pytest

from baseline_solver.adapters import AdapterError
from baseline_solver.models.types import canonical_pair, normalize_address
from baseline_solver.pools import AnyPool

# =============================================================================
# Fake adapters for dependency injection
# =============================================================================


class FakeQuoter:
    """Concentrated-pool quoter with fixed linear rates.

    Usage:
        # 1 token_a buys 2 token_b
        quoter = FakeQuoter({(TOKEN_A, TOKEN_B): (2, 1)})

        # Every call fails or hangs
        quoter = FakeQuoter(error=AdapterError("rpc down"))
        quoter = FakeQuoter(delay=10.0)
    """

    def __init__(
        self,
        rates: Mapping[tuple[str, str], tuple[int, int]] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.rates = {
            (normalize_address(a), normalize_address(b)): rate
            for (a, b), rate in (rates or {}).items()
        }
        self.error = error
        self.delay = delay
        self.calls: list[tuple] = []  # Track calls for assertions

    async def _respond(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error

    async def quote(
        self, pool_address: str, token_in: str, amount_in: int, token_out: str
    ) -> int | None:
        self.calls.append(("quote", pool_address, token_in, amount_in, token_out))
        await self._respond()
        rate = self.rates.get((normalize_address(token_in), normalize_address(token_out)))
        if rate is None:
            return None
        num, den = rate
        return amount_in * num // den

    async def quote_exact_output(
        self, pool_address: str, token_in: str, amount_out: int, token_out: str
    ) -> int | None:
        self.calls.append(("quote_exact_output", pool_address, token_in, amount_out, token_out))
        await self._respond()
        rate = self.rates.get((normalize_address(token_in), normalize_address(token_out)))
        if rate is None:
            return None
        num, den = rate
        return (amount_out * den + num - 1) // num


class FakeVaultReader:
    """ERC-4626 reader with a fixed share price.

    `shares_per_asset` = (num, den): convert_to_shares(a) = a * num // den and
    convert_to_assets(s) = s * den // num, both rounding down like the
    vault contracts.
    """

    def __init__(
        self,
        shares_per_asset: tuple[int, int] = (9, 10),
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.shares_per_asset = shares_per_asset
        self.error = error
        self.delay = delay
        self.calls: list[tuple] = []

    async def _respond(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error

    async def convert_to_shares(self, vault: str, assets: int) -> int:
        self.calls.append(("convert_to_shares", vault, assets))
        await self._respond()
        num, den = self.shares_per_asset
        return assets * num // den

    async def convert_to_assets(self, vault: str, shares: int) -> int:
        self.calls.append(("convert_to_assets", vault, shares))
        await self._respond()
        num, den = self.shares_per_asset
        return shares * den // num


class FakeLiquiditySource:
    """Liquidity source serving a fixed set of pools.

    fetch() returns the pools whose token set covers at least one requested
    pair, and records the requested pairs and block.
    """

    def __init__(self, pools: Iterable[AnyPool] = ()) -> None:
        self.pools = {pool.id: pool for pool in pools}
        self.calls: list[tuple[list[tuple[str, str]], int | None]] = []

    async def fetch(
        self, token_pairs: Iterable[tuple[str, str]], block: int | None
    ) -> dict[str, AnyPool]:
        pairs = [canonical_pair(a, b) for a, b in token_pairs]
        self.calls.append((pairs, block))
        wanted = set(pairs)
        result = {}
        for pool_id, pool in self.pools.items():
            tokens = pool.tokens
            if any(
                canonical_pair(a, b) in wanted
                for i, a in enumerate(tokens)
                for b in tokens[i + 1 :]
            ):
                result[pool_id] = pool
        return result


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def failing_quoter() -> FakeQuoter:
    """Quoter whose every call raises an adapter error."""
    return FakeQuoter(error=AdapterError("quoter unreachable"))


@pytest.fixture
def vault_reader() -> FakeVaultReader:
    """Vault reader at 0.9 shares per asset."""
    return FakeVaultReader()
