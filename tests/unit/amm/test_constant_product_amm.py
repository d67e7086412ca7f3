"""Tests for constant-product pool math and the ConstantProductAMM."""

from decimal import Decimal

import pytest

from baseline_solver.amm.constant_product import (
    ConstantProductPool,
    constant_product_amm,
    get_amount_in,
    get_amount_out,
)
from baseline_solver.constants import CONSTANT_PRODUCT_GAS
from tests.helpers import ONE, TOKEN_A, TOKEN_B, TOKEN_C, make_cp_pool

FEE = Decimal("0.003")


class TestGetAmountOut:
    """Tests for the exact-input formula."""

    def test_reference_value(self) -> None:
        """1 token into a 1000/1000 pool at 0.3% fee."""
        assert get_amount_out(ONE, 1000 * ONE, 1000 * ONE, FEE) == 996006981039903216

    def test_zero_fee_matches_plain_product(self) -> None:
        out = get_amount_out(ONE, 1000 * ONE, 1000 * ONE, Decimal("0"))
        assert out == 1000 * ONE * ONE // (1001 * ONE)

    @pytest.mark.parametrize(
        "amount_in, reserve_in, reserve_out",
        [(0, 1000, 1000), (10, 0, 1000), (10, 1000, 0)],
    )
    def test_degenerate_inputs_give_zero(
        self, amount_in: int, reserve_in: int, reserve_out: int
    ) -> None:
        assert get_amount_out(amount_in, reserve_in, reserve_out, FEE) == 0

    def test_output_never_reaches_reserve(self) -> None:
        assert get_amount_out(10**30, ONE, ONE, FEE) < ONE


class TestGetAmountIn:
    """Tests for the exact-output formula."""

    def test_draining_reserve_is_infeasible(self) -> None:
        assert get_amount_in(1000 * ONE, 1000 * ONE, 1000 * ONE, FEE) is None

    def test_zero_output_costs_nothing(self) -> None:
        assert get_amount_in(0, 1000 * ONE, 1000 * ONE, FEE) == 0

    def test_input_buys_requested_output(self) -> None:
        amount_in = get_amount_in(ONE, 1000 * ONE, 1000 * ONE, FEE)
        assert amount_in is not None
        assert get_amount_out(amount_in, 1000 * ONE, 1000 * ONE, FEE) >= ONE

    @pytest.mark.parametrize("amount", [1, 999, 10**15, ONE, 37 * ONE])
    def test_round_trip_loses_at_most_two_wei(self, amount: int) -> None:
        """amount_in(amount_out(x)) stays within two wei below x."""
        reserve = 1000 * ONE
        out = get_amount_out(amount, reserve, reserve, FEE)
        if out == 0:
            return
        back = get_amount_in(out, reserve, reserve, FEE)
        assert back is not None
        assert amount - 2 <= back <= amount


class TestConstantProductPool:
    """Tests for the pool dataclass."""

    def test_from_reserves_sorts_tokens(self) -> None:
        pool = ConstantProductPool.from_reserves(
            id="cp",
            address="0x" + "1" * 40,
            reserves={TOKEN_B.upper().replace("0X", "0x"): 2, TOKEN_A: 1},
        )
        assert pool.token0 == TOKEN_A
        assert pool.token1 == TOKEN_B
        assert (pool.reserve0, pool.reserve1) == (1, 2)

    def test_from_reserves_needs_two_tokens(self) -> None:
        with pytest.raises(ValueError):
            ConstantProductPool.from_reserves(id="cp", address="0x" + "1" * 40, reserves={TOKEN_A: 1})

    def test_get_reserves_orders_by_input(self) -> None:
        pool = make_cp_pool("cp", TOKEN_A, TOKEN_B, 10, 20)
        assert pool.get_reserves(TOKEN_A) == (10, 20)
        assert pool.get_reserves(TOKEN_B) == (20, 10)
        with pytest.raises(ValueError):
            pool.get_reserves(TOKEN_C)


class TestConstantProductAMM:
    """Tests for ConstantProductAMM.simulate_swap and simulate_swap_exact_output."""

    def _pool(self) -> ConstantProductPool:
        return make_cp_pool("cp-1", TOKEN_A, TOKEN_B, 1000 * ONE, 1000 * ONE)

    def test_simulate_swap(self) -> None:
        result = constant_product_amm.simulate_swap(self._pool(), TOKEN_A, TOKEN_B, ONE)
        assert result is not None
        assert result.amount_out == 996006981039903216
        assert result.pool_id == "cp-1"
        assert result.token_in == TOKEN_A
        assert result.token_out == TOKEN_B
        assert result.gas_estimate == CONSTANT_PRODUCT_GAS

    def test_simulate_swap_accepts_checksummed_tokens(self) -> None:
        result = constant_product_amm.simulate_swap(
            self._pool(), TOKEN_A.replace("a", "A"), TOKEN_B, ONE
        )
        assert result is not None
        assert result.token_in == TOKEN_A

    def test_foreign_token_returns_none(self) -> None:
        assert constant_product_amm.simulate_swap(self._pool(), TOKEN_C, TOKEN_B, ONE) is None
        assert constant_product_amm.simulate_swap(self._pool(), TOKEN_A, TOKEN_C, ONE) is None

    def test_exact_output(self) -> None:
        result = constant_product_amm.simulate_swap_exact_output(
            self._pool(), TOKEN_A, TOKEN_B, ONE
        )
        assert result is not None
        assert result.amount_out >= ONE
        assert result.amount_in > ONE

    def test_exact_output_drain_returns_none(self) -> None:
        result = constant_product_amm.simulate_swap_exact_output(
            self._pool(), TOKEN_A, TOKEN_B, 1000 * ONE
        )
        assert result is None

    def test_overflow_returns_none(self) -> None:
        """Math overflow surfaces as an infeasible swap, not an exception."""
        pool = make_cp_pool("cp-big", TOKEN_A, TOKEN_B, 2**111, 2**111)
        assert constant_product_amm.simulate_swap(pool, TOKEN_A, TOKEN_B, 2**250) is None
