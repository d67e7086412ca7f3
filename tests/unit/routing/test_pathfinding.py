"""Tests for candidate path enumeration."""

from baseline_solver.pools import PoolRegistry
from baseline_solver.routing import CandidatePath, PathFinder
from tests.helpers import (
    ONE,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    TOKEN_D,
    make_concentrated_pool,
    make_cp_pool,
    make_weighted_pool,
)


def _cp(pool_id: str, token_a: str, token_b: str):
    return make_cp_pool(pool_id, token_a, token_b, 1000 * ONE, 1000 * ONE)


class TestFindTokenPaths:
    """Tests for token-level path enumeration."""

    def test_direct_only_without_base_tokens(self) -> None:
        registry = PoolRegistry([_cp("ab", TOKEN_A, TOKEN_B), _cp("bc", TOKEN_B, TOKEN_C)])
        finder = PathFinder(registry)
        assert finder.find_token_paths(TOKEN_A, TOKEN_C, max_hops=3) == []
        assert finder.find_token_paths(TOKEN_A, TOKEN_B, max_hops=3) == [(TOKEN_A, TOKEN_B)]

    def test_two_hop_through_base_token(self) -> None:
        registry = PoolRegistry([_cp("ab", TOKEN_A, TOKEN_B), _cp("bc", TOKEN_B, TOKEN_C)])
        finder = PathFinder(registry, base_tokens=[TOKEN_B])
        assert finder.find_token_paths(TOKEN_A, TOKEN_C, max_hops=2) == [(TOKEN_A, TOKEN_B, TOKEN_C)]
        assert finder.find_token_paths(TOKEN_A, TOKEN_C, max_hops=1) == []

    def test_shortest_first_then_base_order(self) -> None:
        registry = PoolRegistry(
            [
                _cp("ac", TOKEN_A, TOKEN_C),
                _cp("ab", TOKEN_A, TOKEN_B),
                _cp("bc", TOKEN_B, TOKEN_C),
                _cp("ad", TOKEN_A, TOKEN_D),
                _cp("dc", TOKEN_D, TOKEN_C),
            ]
        )
        finder = PathFinder(registry, base_tokens=[TOKEN_D, TOKEN_B])
        assert finder.find_token_paths(TOKEN_A, TOKEN_C, max_hops=2) == [
            (TOKEN_A, TOKEN_C),
            (TOKEN_A, TOKEN_D, TOKEN_C),
            (TOKEN_A, TOKEN_B, TOKEN_C),
        ]

    def test_same_token(self) -> None:
        finder = PathFinder(PoolRegistry([_cp("ab", TOKEN_A, TOKEN_B)]), base_tokens=[TOKEN_B])
        assert finder.find_token_paths(TOKEN_A, TOKEN_A, max_hops=2) == []

    def test_endpoints_never_intermediate(self) -> None:
        registry = PoolRegistry([_cp("ab", TOKEN_A, TOKEN_B)])
        finder = PathFinder(registry, base_tokens=[TOKEN_A, TOKEN_B])
        assert finder.find_token_paths(TOKEN_A, TOKEN_B, max_hops=3) == [(TOKEN_A, TOKEN_B)]


class TestFindCandidates:
    """Tests for pool-level expansion and the path budget."""

    def test_one_candidate_per_pool(self) -> None:
        registry = PoolRegistry([_cp("ab-1", TOKEN_A, TOKEN_B), _cp("ab-2", TOKEN_A, TOKEN_B)])
        candidates = PathFinder(registry).find_candidates(TOKEN_A, TOKEN_B, max_hops=1, budget=10)
        assert [c.pool_ids for c in candidates.paths] == [("ab-1",), ("ab-2",)]
        assert not candidates.truncated

    def test_cartesian_product_of_hops(self) -> None:
        registry = PoolRegistry(
            [
                _cp("ab-1", TOKEN_A, TOKEN_B),
                _cp("ab-2", TOKEN_A, TOKEN_B),
                _cp("bc-1", TOKEN_B, TOKEN_C),
                _cp("bc-2", TOKEN_B, TOKEN_C),
            ]
        )
        finder = PathFinder(registry, base_tokens=[TOKEN_B])
        candidates = finder.find_candidates(TOKEN_A, TOKEN_C, max_hops=2, budget=10)
        assert [c.pool_ids for c in candidates.paths] == [
            ("ab-1", "bc-1"),
            ("ab-1", "bc-2"),
            ("ab-2", "bc-1"),
            ("ab-2", "bc-2"),
        ]

    def test_budget_truncates_deterministically(self) -> None:
        registry = PoolRegistry([_cp(f"ab-{i}", TOKEN_A, TOKEN_B) for i in range(5)])
        finder = PathFinder(registry)

        first = finder.find_candidates(TOKEN_A, TOKEN_B, max_hops=1, budget=2)
        second = finder.find_candidates(TOKEN_A, TOKEN_B, max_hops=1, budget=2)

        assert first.truncated
        assert [c.pool_ids for c in first.paths] == [("ab-0",), ("ab-1",)]
        assert first.paths == second.paths

    def test_budget_exactly_met_is_not_truncated(self) -> None:
        registry = PoolRegistry([_cp(f"ab-{i}", TOKEN_A, TOKEN_B) for i in range(2)])
        candidates = PathFinder(registry).find_candidates(TOKEN_A, TOKEN_B, max_hops=1, budget=2)
        assert len(candidates.paths) == 2
        assert not candidates.truncated

    def test_pool_not_reused_within_path(self) -> None:
        """A 3-token pool cannot serve both hops of A -> B -> C."""
        pool = make_weighted_pool("w", {TOKEN_A: ONE, TOKEN_B: ONE, TOKEN_C: ONE})
        finder = PathFinder(PoolRegistry([pool]), base_tokens=[TOKEN_B])
        candidates = finder.find_candidates(TOKEN_A, TOKEN_C, max_hops=2, budget=10)
        assert candidates.paths == [CandidatePath(tokens=(TOKEN_A, TOKEN_C), pool_ids=("w",))]

    def test_skipped_kind_marks_adapter_blocked(self) -> None:
        registry = PoolRegistry([make_concentrated_pool("uni", TOKEN_A, TOKEN_B)])
        finder = PathFinder(registry, skip_kinds={"concentrated"})
        candidates = finder.find_candidates(TOKEN_A, TOKEN_B, max_hops=1, budget=10)
        assert candidates.paths == []
        assert candidates.adapter_blocked

    def test_skipped_kind_leaves_other_pools(self) -> None:
        registry = PoolRegistry(
            [make_concentrated_pool("uni", TOKEN_A, TOKEN_B), _cp("ab", TOKEN_A, TOKEN_B)]
        )
        finder = PathFinder(registry, skip_kinds={"concentrated"})
        candidates = finder.find_candidates(TOKEN_A, TOKEN_B, max_hops=1, budget=10)
        assert [c.pool_ids for c in candidates.paths] == [("ab",)]
        assert not candidates.adapter_blocked


class TestCandidatePath:
    """Tests for CandidatePath helpers."""

    def test_edges(self) -> None:
        path = CandidatePath(tokens=(TOKEN_A, TOKEN_B, TOKEN_C), pool_ids=("ab", "bc"))
        assert path.hops == 2
        assert list(path.edges()) == [("ab", TOKEN_A, TOKEN_B), ("bc", TOKEN_B, TOKEN_C)]
