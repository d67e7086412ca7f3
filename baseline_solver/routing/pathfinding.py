"""Candidate path enumeration for the baseline router.

Token paths run from the sell token to the buy token through at most
`max_hops - 1` intermediates, each drawn from the configured base tokens.
Every hop of a token path expands into one candidate edge per pool the
pair index lists for it, so a token path yields the cartesian product of
its hops' pools.

Enumeration is deterministic: shorter token paths first, intermediates in
base-token order, pools in pair-index insertion order. Truncation at the
path budget therefore always keeps the same prefix.
"""

from __future__ import annotations

import itertools
from collections.abc import Collection, Iterable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from baseline_solver.models.types import normalize_address

if TYPE_CHECKING:
    from baseline_solver.pools.registry import PairEntry, PoolRegistry


@dataclass(frozen=True)
class CandidatePath:
    """A token path with one concrete pool per hop."""

    tokens: tuple[str, ...]
    pool_ids: tuple[str, ...]

    @property
    def hops(self) -> int:
        return len(self.pool_ids)

    def edges(self) -> Iterator[tuple[str, str, str]]:
        """(pool_id, token_in, token_out) per hop, in swap order."""
        for i, pool_id in enumerate(self.pool_ids):
            yield pool_id, self.tokens[i], self.tokens[i + 1]


@dataclass
class CandidateSet:
    """Result of enumeration.

    Attributes:
        paths: Deduplicated candidates, at most the path budget
        truncated: Whether more candidates existed beyond the budget
        adapter_blocked: Whether some token path was only reachable through
            pools whose adapter is not configured
    """

    paths: list[CandidatePath] = field(default_factory=list)
    truncated: bool = False
    adapter_blocked: bool = False


def _dedupe(tokens: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    ordered = []
    for token in tokens:
        token = normalize_address(token)
        if token not in seen:
            seen.add(token)
            ordered.append(token)
    return ordered


class PathFinder:
    """Enumerates candidate paths through a pool registry.

    Usage:
        finder = PathFinder(registry, base_tokens=[WETH, USDC])
        candidates = finder.find_candidates(sell_token, buy_token, max_hops=2, budget=256)
    """

    def __init__(
        self,
        registry: PoolRegistry,
        base_tokens: Iterable[str] = (),
        skip_kinds: Collection[str] = (),
    ) -> None:
        """Initialize a PathFinder.

        Args:
            registry: Pool registry with its token-pair index
            base_tokens: Tokens allowed as intermediate hops, in priority order
            skip_kinds: Pool families to leave out, such as adapter-backed
                families with no adapter configured
        """
        self._registry = registry
        self._base_tokens = _dedupe(base_tokens)
        self._skip_kinds = frozenset(skip_kinds)

    def find_token_paths(self, sell_token: str, buy_token: str, max_hops: int) -> list[tuple[str, ...]]:
        """Simple token paths of 1..max_hops hops, shortest first.

        Only token paths whose every hop is listed in the pair index are
        returned.
        """
        sell = normalize_address(sell_token)
        buy = normalize_address(buy_token)
        if sell == buy or max_hops < 1:
            return []

        intermediates = [t for t in self._base_tokens if t not in (sell, buy)]
        paths: list[tuple[str, ...]] = []
        for hops in range(1, max_hops + 1):
            for middle in itertools.permutations(intermediates, hops - 1):
                path = (sell, *middle, buy)
                if all(
                    self._registry.pools_for_pair(a, b) for a, b in zip(path, path[1:])
                ):
                    paths.append(path)
        return paths

    def _usable(self, entries: list[PairEntry]) -> list[PairEntry]:
        if not self._skip_kinds:
            return entries
        return [entry for entry in entries if entry.kind not in self._skip_kinds]

    def find_candidates(
        self,
        sell_token: str,
        buy_token: str,
        max_hops: int,
        budget: int,
    ) -> CandidateSet:
        """Expand token paths into pool-level candidates, capped at budget.

        Args:
            sell_token: Token sold
            buy_token: Token bought
            max_hops: Maximum number of swaps per path
            budget: Maximum number of candidates returned

        Returns:
            CandidateSet with the candidates and truncation flags
        """
        result = CandidateSet()
        seen: set[tuple[str, ...]] = set()

        for path in self.find_token_paths(sell_token, buy_token, max_hops):
            hop_entries = [
                self._usable(self._registry.pools_for_pair(a, b))
                for a, b in zip(path, path[1:])
            ]
            if not all(hop_entries):
                result.adapter_blocked = True
                continue

            for combo in itertools.product(*hop_entries):
                pool_ids = tuple(entry.pool_id for entry in combo)
                # A pool can only be used once per path
                if len(set(pool_ids)) != len(pool_ids) or pool_ids in seen:
                    continue
                if len(result.paths) >= budget:
                    result.truncated = True
                    return result
                seen.add(pool_ids)
                result.paths.append(CandidatePath(tokens=path, pool_ids=pool_ids))

        return result


__all__ = ["CandidatePath", "CandidateSet", "PathFinder"]
