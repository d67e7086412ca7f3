"""Tests for limit orders used as liquidity."""

import pytest

from baseline_solver.amm.limit_order import LimitOrderPool, limit_order_amm
from baseline_solver.constants import LIMIT_ORDER_GAS
from tests.helpers import TOKEN_A, TOKEN_B, TOKEN_C, make_limit_order


class TestLimitOrderPool:
    """Tests for LimitOrderPool construction."""

    @pytest.mark.parametrize(
        "taker_amount, maker_amount, fee",
        [(0, 100, 0), (100, 0, 0), (100, 100, -1)],
    )
    def test_invalid_amounts_rejected(self, taker_amount: int, maker_amount: int, fee: int) -> None:
        with pytest.raises(ValueError):
            LimitOrderPool(
                id="lo",
                address="0x" + "1" * 40,
                maker_token=TOKEN_B,
                taker_token=TOKEN_A,
                maker_amount=maker_amount,
                taker_amount=taker_amount,
                taker_token_fee_amount=fee,
            )

    def test_only_taker_to_maker_direction(self) -> None:
        order = make_limit_order("lo", TOKEN_A, TOKEN_B, 100, 200)
        assert order.supports_pair(TOKEN_A, TOKEN_B)
        assert not order.supports_pair(TOKEN_B, TOKEN_A)
        assert order.gas_estimate == LIMIT_ORDER_GAS


class TestLimitOrderAMM:
    """Tests for LimitOrderAMM swap simulation."""

    def test_sell_linear_price(self) -> None:
        order = make_limit_order("lo", TOKEN_A, TOKEN_B, 100, 200)
        result = limit_order_amm.simulate_swap(order, TOKEN_A, TOKEN_B, 50)
        assert result is not None
        assert result.amount_out == 100

    def test_sell_capped_at_taker_amount(self) -> None:
        order = make_limit_order("lo", TOKEN_A, TOKEN_B, 100, 200)
        result = limit_order_amm.simulate_swap(order, TOKEN_A, TOKEN_B, 1_000)
        assert result is not None
        assert result.amount_out == 200

    def test_sell_deducts_fee_share(self) -> None:
        """A full fill costs taker_amount plus the taker-token fee."""
        order = make_limit_order("lo", TOKEN_A, TOKEN_B, 100, 200, fee=10)
        result = limit_order_amm.simulate_swap(order, TOKEN_A, TOKEN_B, 110)
        assert result is not None
        assert result.amount_out == 200

        partial = limit_order_amm.simulate_swap(order, TOKEN_A, TOKEN_B, 55)
        assert partial is not None
        assert partial.amount_out == 100

    def test_buy_includes_fee(self) -> None:
        order = make_limit_order("lo", TOKEN_A, TOKEN_B, 100, 200, fee=10)
        result = limit_order_amm.simulate_swap_exact_output(order, TOKEN_A, TOKEN_B, 200)
        assert result is not None
        assert result.amount_in == 110
        assert result.amount_out == 200

    def test_buy_rounds_input_up(self) -> None:
        order = make_limit_order("lo", TOKEN_A, TOKEN_B, 3, 7)
        result = limit_order_amm.simulate_swap_exact_output(order, TOKEN_A, TOKEN_B, 1)
        assert result is not None
        assert result.amount_in == 1

    def test_buy_beyond_maker_amount_is_infeasible(self) -> None:
        order = make_limit_order("lo", TOKEN_A, TOKEN_B, 100, 200)
        assert limit_order_amm.simulate_swap_exact_output(order, TOKEN_A, TOKEN_B, 201) is None

    @pytest.mark.parametrize("token_in, token_out", [(TOKEN_B, TOKEN_A), (TOKEN_A, TOKEN_C)])
    def test_wrong_direction_returns_none(self, token_in: str, token_out: str) -> None:
        order = make_limit_order("lo", TOKEN_A, TOKEN_B, 100, 200)
        assert limit_order_amm.simulate_swap(order, token_in, token_out, 10) is None
        assert limit_order_amm.simulate_swap_exact_output(order, token_in, token_out, 10) is None
