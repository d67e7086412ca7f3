"""Tests for StableSurge hook math and StableSurgeAMM."""

from decimal import Decimal

import pytest

from baseline_solver.amm.balancer import StableSurgeAMM, StableSurgePool, TokenReserve
from baseline_solver.amm.balancer.stable_surge_math import (
    calculate_imbalance,
    find_median,
    get_surge_fee,
)
from baseline_solver.math.fixed_point import Bfp
from tests.helpers import ONE, TOKEN_A, TOKEN_B


def _surge_pool(balance0: int, balance1: int) -> StableSurgePool:
    return StableSurgePool(
        id="surge",
        address="0x" + "5" * 40,
        reserves=(TokenReserve(TOKEN_A, balance0), TokenReserve(TOKEN_B, balance1)),
        amplification_parameter=Decimal("1000"),
        fee=Decimal("0.01"),
        surge_threshold=Decimal("0.3"),
        max_surge_fee=Decimal("0.95"),
    )


class TestSurgeFee:
    """Tests for the imbalance measure and the dynamic fee."""

    STATIC = Bfp.from_str("0.01")
    THRESHOLD = Bfp.from_str("0.3")
    MAX = Bfp.from_str("0.95")

    def test_find_median(self) -> None:
        assert find_median([Bfp(3), Bfp(1), Bfp(2)]) == Bfp(2)
        assert find_median([Bfp(4), Bfp(1), Bfp(2), Bfp(3)]) == Bfp(2)

    def test_balanced_pool_has_no_imbalance(self) -> None:
        assert calculate_imbalance([Bfp.from_int(5), Bfp.from_int(5)]) == Bfp(0)

    def test_imbalance_value(self) -> None:
        """(1, 3): median 2, distance 2 out of 4."""
        assert calculate_imbalance([Bfp.from_int(1), Bfp.from_int(3)]) == Bfp.from_str("0.5")

    def test_static_fee_below_threshold(self) -> None:
        before = [Bfp.from_int(100), Bfp.from_int(100)]
        after = [Bfp.from_int(110), Bfp.from_int(90)]
        fee = get_surge_fee(before, after, self.STATIC, self.THRESHOLD, self.MAX)
        assert fee == self.STATIC

    def test_static_fee_when_rebalancing(self) -> None:
        """Swaps that reduce the imbalance never surge."""
        before = [Bfp.from_int(10), Bfp.from_int(190)]
        after = [Bfp.from_int(20), Bfp.from_int(180)]
        fee = get_surge_fee(before, after, self.STATIC, self.THRESHOLD, self.MAX)
        assert fee == self.STATIC

    def test_surge_interpolates(self) -> None:
        """Imbalance 0.65 sits halfway between threshold and one."""
        before = [Bfp.from_int(100), Bfp.from_int(100)]
        after = [Bfp.from_int(35), Bfp.from_int(165)]
        fee = get_surge_fee(before, after, self.STATIC, self.THRESHOLD, self.MAX)
        assert fee == Bfp.from_str("0.48")

    @pytest.mark.parametrize("low", [1, 10, 30, 50, 70, 99])
    def test_fee_bounds(self, low: int) -> None:
        """The effective fee stays within [static, max] for any imbalance."""
        before = [Bfp.from_int(100), Bfp.from_int(100)]
        after = [Bfp.from_int(low), Bfp.from_int(200 - low)]
        fee = get_surge_fee(before, after, self.STATIC, self.THRESHOLD, self.MAX)
        assert self.STATIC <= fee <= self.MAX


class TestStableSurgeAMM:
    """Tests for StableSurgeAMM against reference swaps."""

    amm = StableSurgeAMM()

    def test_surging_swap_reference_value(self) -> None:
        """8 token1 into a heavily imbalanced pool pays close to the max surge fee."""
        pool = _surge_pool(10**16, 10 * ONE)
        result = self.amm.simulate_swap(pool, TOKEN_B, TOKEN_A, 8 * ONE)
        assert result is not None
        assert result.amount_out == pytest.approx(3252130027531260, rel=1e-5)

    def test_rebalancing_swap_pays_static_fee(self) -> None:
        """Adding the scarce token lowers the imbalance, so only the static fee applies."""
        pool = _surge_pool(10**16, 10 * ONE)
        result = self.amm.simulate_swap(pool, TOKEN_A, TOKEN_B, 10**16)
        assert result is not None
        assert result.amount_out > 10**16

    def test_balanced_pool_small_swap(self) -> None:
        pool = _surge_pool(1000 * ONE, 1000 * ONE)
        result = self.amm.simulate_swap(pool, TOKEN_A, TOKEN_B, ONE)
        assert result is not None
        # Static 1% fee, no surge
        assert 98 * ONE // 100 < result.amount_out < 99 * ONE // 100

    def test_exact_output_covers_request(self) -> None:
        pool = _surge_pool(1000 * ONE, 1000 * ONE)
        result = self.amm.simulate_swap_exact_output(pool, TOKEN_A, TOKEN_B, ONE)
        assert result is not None
        assert result.amount_out >= ONE
        assert result.amount_in > ONE
