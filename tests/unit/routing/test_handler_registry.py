"""Tests for the per-pool-type simulator registry."""

import asyncio

from baseline_solver.amm.base import SwapResult
from baseline_solver.amm.concentrated import ConcentratedPool
from baseline_solver.amm.constant_product import ConstantProductPool
from baseline_solver.amm.erc4626 import Erc4626Edge
from baseline_solver.amm.limit_order import LimitOrderPool
from baseline_solver.config import RouterConfig
from baseline_solver.routing import HandlerRegistry, build_default_registry
from tests.conftest import FakeQuoter, FakeVaultReader
from tests.helpers import ONE, TOKEN_A, TOKEN_B, make_cp_pool


def _result(pool_id: str, amount_in: int, amount_out: int) -> SwapResult:
    return SwapResult(
        amount_in=amount_in,
        amount_out=amount_out,
        pool_id=pool_id,
        token_in=TOKEN_A,
        token_out=TOKEN_B,
        gas_estimate=1,
    )


class TestHandlerRegistry:
    """Tests for registration and dispatch."""

    def test_sync_simulator(self) -> None:
        registry = HandlerRegistry()
        registry.register(
            ConstantProductPool,
            simulator=lambda pool, tin, tout, amount: _result(pool.id, amount, amount * 2),
            type_name="constant_product",
        )
        pool = make_cp_pool("cp", TOKEN_A, TOKEN_B, ONE, ONE)

        result = asyncio.run(registry.simulate_swap(pool, TOKEN_A, TOKEN_B, 5))

        assert result is not None
        assert result.amount_out == 10
        assert registry.get_type_name(pool) == "constant_product"

    def test_async_simulator_awaited(self) -> None:
        async def simulate(pool, token_in, token_out, amount_out):
            return _result(pool.id, amount_out + 1, amount_out)

        registry = HandlerRegistry()
        registry.register(
            ConstantProductPool,
            simulator=simulate,
            exact_output_simulator=simulate,
        )
        pool = make_cp_pool("cp", TOKEN_A, TOKEN_B, ONE, ONE)

        result = asyncio.run(registry.simulate_swap_exact_output(pool, TOKEN_A, TOKEN_B, 5))

        assert result is not None
        assert result.amount_in == 6

    def test_unregistered_type(self) -> None:
        registry = HandlerRegistry()
        pool = make_cp_pool("cp", TOKEN_A, TOKEN_B, ONE, ONE)
        assert asyncio.run(registry.simulate_swap(pool, TOKEN_A, TOKEN_B, 5)) is None
        assert asyncio.run(registry.simulate_swap_exact_output(pool, TOKEN_A, TOKEN_B, 5)) is None
        assert registry.get_type_name(pool) == "unknown"
        assert not registry.is_registered(pool)

    def test_missing_exact_output_simulator(self) -> None:
        registry = HandlerRegistry()
        registry.register(ConstantProductPool, simulator=lambda *args: None)
        pool = make_cp_pool("cp", TOKEN_A, TOKEN_B, ONE, ONE)
        assert registry.is_registered(pool)
        assert asyncio.run(registry.simulate_swap_exact_output(pool, TOKEN_A, TOKEN_B, 5)) is None

    def test_unregister(self) -> None:
        registry = HandlerRegistry()
        registry.register(ConstantProductPool, simulator=lambda *args: None)
        registry.unregister(ConstantProductPool)
        assert not registry.is_type_registered(ConstantProductPool)


class TestBuildDefaultRegistry:
    """Tests for the default family wiring."""

    def test_local_families_always_registered(self) -> None:
        registry = build_default_registry(RouterConfig())
        assert registry.is_type_registered(ConstantProductPool)
        assert registry.is_type_registered(LimitOrderPool)
        assert not registry.is_type_registered(ConcentratedPool)
        assert not registry.is_type_registered(Erc4626Edge)

    def test_adapters_enable_their_families(self) -> None:
        config = RouterConfig().with_adapters(
            concentrated_quoter=FakeQuoter(), erc4626_reader=FakeVaultReader()
        )
        registry = build_default_registry(config)
        assert registry.is_type_registered(ConcentratedPool)
        assert registry.is_type_registered(Erc4626Edge)

    def test_default_simulator_prices_pool(self) -> None:
        registry = build_default_registry(RouterConfig())
        pool = make_cp_pool("cp", TOKEN_A, TOKEN_B, 1000 * ONE, 1000 * ONE)
        result = asyncio.run(registry.simulate_swap(pool, TOKEN_A, TOKEN_B, ONE))
        assert result is not None
        assert result.amount_out == 996006981039903216
