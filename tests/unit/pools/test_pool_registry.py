"""Tests for pool validation and the PoolRegistry pair index."""

from dataclasses import replace
from decimal import Decimal
from types import SimpleNamespace

import pytest

from baseline_solver.amm.balancer import (
    BalancerStablePool,
    Gyro3CLPPool,
    TokenReserve,
)
from baseline_solver.amm.constant_product import ConstantProductPool
from baseline_solver.pools import (
    InvalidPoolError,
    PairEntry,
    PoolRegistry,
    UnsupportedPoolError,
    validate_pool,
)
from tests.helpers import (
    DAI,
    ECLP_DERIVED,
    ECLP_PARAMS,
    ONE,
    POOL_ADDRESS,
    SDAI,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    TOKEN_D,
    make_concentrated_pool,
    make_cp_pool,
    make_eclp_pool,
    make_erc4626_edge,
    make_limit_order,
    make_stable_pool,
    make_weighted_pool,
)


class TestValidatePool:
    """Tests for structural pool validation."""

    def test_valid_pools_pass(self) -> None:
        validate_pool(make_cp_pool("cp", TOKEN_A, TOKEN_B, ONE, ONE))
        validate_pool(make_weighted_pool("w", {TOKEN_A: ONE, TOKEN_B: ONE, TOKEN_C: ONE}))
        validate_pool(make_stable_pool("s", {TOKEN_A: ONE, TOKEN_B: ONE}))
        validate_pool(make_concentrated_pool("uni", TOKEN_A, TOKEN_B))
        validate_pool(make_erc4626_edge())
        validate_pool(make_limit_order("lo", TOKEN_A, TOKEN_B, 100, 200))

    @pytest.mark.parametrize("pool_id", ["", "x" * 67])
    def test_bad_pool_id(self, pool_id: str) -> None:
        with pytest.raises(InvalidPoolError):
            validate_pool(make_cp_pool(pool_id, TOKEN_A, TOKEN_B, ONE, ONE))

    def test_longest_pool_id_accepted(self) -> None:
        validate_pool(make_cp_pool("0x" + "f" * 64, TOKEN_A, TOKEN_B, ONE, ONE))

    def test_duplicate_tokens(self) -> None:
        pool = ConstantProductPool(
            id="cp",
            address=POOL_ADDRESS,
            token0=TOKEN_A,
            token1=TOKEN_A.upper().replace("0X", "0x"),
            reserve0=ONE,
            reserve1=ONE,
        )
        with pytest.raises(InvalidPoolError, match="duplicate tokens"):
            validate_pool(pool)

    def test_balance_above_112_bits(self) -> None:
        with pytest.raises(InvalidPoolError, match="112 bits"):
            validate_pool(make_cp_pool("cp", TOKEN_A, TOKEN_B, 2**112, ONE))

    def test_fee_must_be_below_one(self) -> None:
        with pytest.raises(InvalidPoolError, match="fee"):
            validate_pool(make_cp_pool("cp", TOKEN_A, TOKEN_B, ONE, ONE, fee=Decimal("1")))

    def test_weights_must_sum_to_one(self) -> None:
        pool = make_weighted_pool(
            "w",
            {TOKEN_A: ONE, TOKEN_B: ONE},
            weights={TOKEN_A: Decimal("0.5"), TOKEN_B: Decimal("0.6")},
        )
        with pytest.raises(InvalidPoolError, match="weights sum"):
            validate_pool(pool)

    def test_zero_weight(self) -> None:
        pool = make_weighted_pool(
            "w",
            {TOKEN_A: ONE, TOKEN_B: ONE},
            weights={TOKEN_A: Decimal("0"), TOKEN_B: Decimal("1")},
        )
        with pytest.raises(InvalidPoolError, match="weight"):
            validate_pool(pool)

    @pytest.mark.parametrize("scaling_factor", [0, 3, 10**19])
    def test_bad_scaling_factor(self, scaling_factor: int) -> None:
        pool = make_stable_pool(
            "s", {TOKEN_A: ONE, TOKEN_B: ONE}, scaling_factors={TOKEN_B: scaling_factor}
        )
        with pytest.raises(InvalidPoolError, match="scaling factor"):
            validate_pool(pool)

    def test_three_clp_needs_three_tokens(self) -> None:
        pool = Gyro3CLPPool(
            id="3clp",
            address=POOL_ADDRESS,
            reserves=(TokenReserve(TOKEN_A, ONE), TokenReserve(TOKEN_B, ONE)),
            fee=Decimal("0"),
            root3_alpha=9 * ONE // 10,
        )
        with pytest.raises(InvalidPoolError, match="exactly 3"):
            validate_pool(pool)

    def test_eclp_deployed_params_pass(self) -> None:
        validate_pool(make_eclp_pool())

    @pytest.mark.parametrize(
        "params, derived, reason",
        [
            ({"c": ONE // 2, "s": ONE // 2}, {}, "rotation vector"),
            ({"c": -1}, {}, "rotation"),
            ({"lam": 10**27}, {}, "stretch factor"),
            ({}, {"tau_alpha": (10**37, 9 * 10**37)}, "tau_alpha"),
            ({}, {"u": 2 * 10**38}, "derived u"),
            ({}, {"d_sq": 99 * 10**36}, "d_sq"),
        ],
    )
    def test_eclp_params_out_of_limits(self, params: dict, derived: dict, reason: str) -> None:
        pool = make_eclp_pool(
            params=replace(ECLP_PARAMS, **params), derived=replace(ECLP_DERIVED, **derived)
        )
        with pytest.raises(InvalidPoolError, match=reason):
            validate_pool(pool)

    def test_unsupported_type(self) -> None:
        with pytest.raises(UnsupportedPoolError):
            validate_pool(object())


class TestPoolRegistry:
    """Tests for registry construction and the pair index."""

    def test_symmetric_pool_entries(self) -> None:
        """An n-token pool yields n(n-1)/2 pair entries."""
        pool = make_weighted_pool(
            "w4",
            {TOKEN_A: ONE, TOKEN_B: ONE, TOKEN_C: ONE, TOKEN_D: ONE},
        )
        registry = PoolRegistry([pool])
        assert len(registry.token_pairs()) == 6
        assert registry.pools_for_pair(TOKEN_A, TOKEN_D) == [PairEntry("w4", "weighted")]
        assert registry.pools_for_pair(TOKEN_D, TOKEN_A) == [PairEntry("w4", "weighted")]

    def test_limit_order_is_directed(self) -> None:
        registry = PoolRegistry([make_limit_order("lo", TOKEN_A, TOKEN_B, 100, 200)])
        assert registry.pools_for_pair(TOKEN_A, TOKEN_B) == [PairEntry("lo", "limit_order")]
        assert registry.pools_for_pair(TOKEN_B, TOKEN_A) == []
        assert registry.pair_entry_count(TOKEN_A, TOKEN_B) == 1

    def test_erc4626_has_both_directions(self) -> None:
        registry = PoolRegistry([make_erc4626_edge()])
        assert registry.pools_for_pair(DAI, SDAI) == [PairEntry("sdai", "erc4626")]
        assert registry.pools_for_pair(SDAI, DAI) == [PairEntry("sdai", "erc4626")]
        assert registry.pair_entry_count(DAI, SDAI) == 2

    def test_same_token_has_no_pools(self) -> None:
        registry = PoolRegistry([make_cp_pool("cp", TOKEN_A, TOKEN_B, ONE, ONE)])
        assert registry.pools_for_pair(TOKEN_A, TOKEN_A) == []

    def test_lookup_is_case_insensitive(self) -> None:
        registry = PoolRegistry([make_cp_pool("cp", TOKEN_A, TOKEN_B, ONE, ONE)])
        entries = registry.pools_for_pair(TOKEN_A.replace("a", "A"), TOKEN_B)
        assert entries == [PairEntry("cp", "constant_product")]

    def test_composable_stable_bpt_not_indexed(self) -> None:
        bpt = TOKEN_C
        pool = BalancerStablePool(
            id="cs",
            address=bpt,
            reserves=(
                TokenReserve(TOKEN_A, ONE),
                TokenReserve(bpt, ONE),
                TokenReserve(TOKEN_B, ONE),
            ),
            amplification_parameter=Decimal("200"),
            fee=Decimal("0.0001"),
        )
        registry = PoolRegistry([pool])
        assert registry.pair_entry_count(TOKEN_A, TOKEN_B) == 1
        assert registry.pools_for_pair(TOKEN_A, bpt) == []

    def test_invalid_pool_rejected_and_recorded(self, capsys) -> None:
        registry = PoolRegistry(
            [
                make_cp_pool("good", TOKEN_A, TOKEN_B, ONE, ONE),
                make_cp_pool("bad", TOKEN_A, TOKEN_B, 2**112, ONE),
            ]
        )
        assert "good" in registry
        assert "bad" not in registry
        assert "112 bits" in registry.rejected["bad"]
        assert "pool_rejected" in capsys.readouterr().out

    def test_duplicate_id_rejected(self) -> None:
        registry = PoolRegistry()
        assert registry.add_pool(make_cp_pool("cp", TOKEN_A, TOKEN_B, ONE, ONE))
        assert not registry.add_pool(make_cp_pool("cp", TOKEN_C, TOKEN_D, ONE, ONE))
        assert registry.rejected == {"cp": "duplicate pool id"}
        assert registry["cp"].token0 == TOKEN_A
        assert registry.pools_for_pair(TOKEN_C, TOKEN_D) == []

    def test_unsupported_pool_raises(self) -> None:
        with pytest.raises(UnsupportedPoolError):
            PoolRegistry([object()])  # type: ignore[list-item]

    def test_unknown_kind_raises_even_if_validation_passes(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("baseline_solver.pools.registry.validate_pool", lambda pool: None)
        registry = PoolRegistry()
        with pytest.raises(UnsupportedPoolError, match="SimpleNamespace"):
            registry.add_pool(SimpleNamespace(id="mystery"))  # type: ignore[arg-type]
        assert "mystery" not in registry

    def test_from_pools_mapping_sorted_by_id(self) -> None:
        pools = {
            "z-pool": make_cp_pool("z-pool", TOKEN_A, TOKEN_B, ONE, ONE),
            "a-pool": make_cp_pool("a-pool", TOKEN_A, TOKEN_B, 2 * ONE, ONE),
        }
        registry = PoolRegistry.from_pools(pools)
        ids = [entry.pool_id for entry in registry.pools_for_pair(TOKEN_A, TOKEN_B)]
        assert ids == ["a-pool", "z-pool"]
        assert [pool.id for pool in registry] == ["a-pool", "z-pool"]

    def test_from_pools_iterable_keeps_order(self) -> None:
        pools = [
            make_cp_pool("z-pool", TOKEN_A, TOKEN_B, ONE, ONE),
            make_cp_pool("a-pool", TOKEN_A, TOKEN_B, 2 * ONE, ONE),
        ]
        registry = PoolRegistry.from_pools(pools)
        ids = [entry.pool_id for entry in registry.pools_for_pair(TOKEN_A, TOKEN_B)]
        assert ids == ["z-pool", "a-pool"]

    def test_accessors(self) -> None:
        pool = make_cp_pool("cp", TOKEN_A, TOKEN_B, ONE, ONE)
        registry = PoolRegistry([pool])
        assert len(registry) == 1
        assert registry.get("cp") is pool
        assert registry.get("missing") is None
        with pytest.raises(KeyError):
            registry["missing"]
