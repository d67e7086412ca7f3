"""Pool registry and token-pair index.

The registry owns every pool state of an auction, keyed by pool id, and
derives the token-pair index the router enumerates:

- Symmetric pools contribute one entry per unordered token pair, so an
  n-token pool yields n(n-1)/2 entries.
- ERC-4626 edges and limit orders contribute directed entries that only
  match their own swap direction.

The registry is built once per auction and only read during routing.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import NamedTuple

import structlog

from baseline_solver.amm.balancer import BalancerStablePool
from baseline_solver.amm.erc4626 import Erc4626Edge
from baseline_solver.amm.limit_order import LimitOrderPool
from baseline_solver.models.types import canonical_pair, normalize_address

from .types import AnyPool, pool_kind
from .validation import InvalidPoolError, UnsupportedPoolError, validate_pool

logger = structlog.get_logger()


class PairEntry(NamedTuple):
    """One pool serving a token pair."""

    pool_id: str
    kind: str


def _directions(pool: AnyPool) -> list[tuple[str, str]] | None:
    """Allowed (token_in, token_out) directions, or None if all are allowed."""
    if isinstance(pool, LimitOrderPool):
        return [(normalize_address(pool.taker_token), normalize_address(pool.maker_token))]
    if isinstance(pool, Erc4626Edge):
        asset, vault = pool.tokens
        return [(asset, vault), (vault, asset)]
    return None


def _index_tokens(pool: AnyPool) -> tuple[str, ...]:
    tokens = pool.tokens
    if isinstance(pool, BalancerStablePool):
        # Composable stable pools list their own BPT, which is not swappable here
        bpt = normalize_address(pool.address)
        tokens = tuple(t for t in tokens if t != bpt)
    return tokens


class PoolRegistry:
    """Arena of pool states plus the token-pair index over them.

    Invalid pools are refused with a warning and recorded in `rejected`.
    Unsupported pool types raise, since they point at a wiring error rather
    than bad data.
    """

    def __init__(self, pools: Iterable[AnyPool] | None = None) -> None:
        """Initialize the registry with optional pools.

        Args:
            pools: Initial pools of any supported type

        Raises:
            UnsupportedPoolError: If a pool type is not supported
        """
        self._pools: dict[str, AnyPool] = {}
        # canonical pair -> [(entry, direction or None)] in insertion order
        self._pair_index: dict[tuple[str, str], list[tuple[PairEntry, tuple[str, str] | None]]] = {}
        self._rejected: dict[str, str] = {}

        if pools:
            for pool in pools:
                self.add_pool(pool)

    @classmethod
    def from_pools(cls, pools: Mapping[str, AnyPool] | Iterable[AnyPool]) -> PoolRegistry:
        """Build a registry from a snapshot.

        Args:
            pools: Either a {pool_id: pool} mapping (as returned by a
                liquidity source) or an iterable of pools. Mappings are
                added in sorted id order.

        Returns:
            Populated registry
        """
        if isinstance(pools, Mapping):
            ordered = [pools[pool_id] for pool_id in sorted(pools)]
        else:
            ordered = list(pools)
        registry = cls(ordered)
        logger.debug(
            "registry_built",
            pool_count=len(registry),
            pair_count=len(registry._pair_index),
            rejected=len(registry._rejected),
        )
        return registry

    def add_pool(self, pool: AnyPool) -> bool:
        """Validate and add a pool.

        Args:
            pool: Pool to add

        Returns:
            True if the pool was added, False if it was rejected

        Raises:
            UnsupportedPoolError: If the pool type is not supported
        """
        try:
            validate_pool(pool)
            if pool.id in self._pools:
                raise InvalidPoolError(pool.id, "duplicate pool id")
        except InvalidPoolError as e:
            logger.warning("pool_rejected", pool_id=e.pool_id, reason=e.reason)
            self._rejected[e.pool_id] = e.reason
            return False

        kind = pool_kind(pool)
        if kind is None:
            raise UnsupportedPoolError(f"Unsupported pool type: {type(pool).__name__}")
        self._pools[pool.id] = pool
        entry = PairEntry(pool.id, kind)

        directions = _directions(pool)
        if directions is not None:
            for direction in directions:
                key = canonical_pair(*direction)
                self._pair_index.setdefault(key, []).append((entry, direction))
            return True

        tokens = _index_tokens(pool)
        for i, t1 in enumerate(tokens):
            for t2 in tokens[i + 1 :]:
                key = canonical_pair(t1, t2)
                self._pair_index.setdefault(key, []).append((entry, None))
        return True

    def get(self, pool_id: str) -> AnyPool | None:
        """Pool state by id."""
        return self._pools.get(pool_id)

    def __getitem__(self, pool_id: str) -> AnyPool:
        return self._pools[pool_id]

    def __contains__(self, pool_id: object) -> bool:
        return pool_id in self._pools

    def __len__(self) -> int:
        return len(self._pools)

    def __iter__(self) -> Iterator[AnyPool]:
        return iter(self._pools.values())

    @property
    def rejected(self) -> Mapping[str, str]:
        """Pool id -> reason for every pool refused during construction."""
        return MappingProxyType(self._rejected)

    def pools_for_pair(self, token_in: str, token_out: str) -> list[PairEntry]:
        """Pools that can swap token_in for token_out, in insertion order.

        Directed entries are returned only when their direction matches.

        Args:
            token_in: Input token address (any case)
            token_out: Output token address (any case)

        Returns:
            Index entries for this direction (may be empty)
        """
        token_in = normalize_address(token_in)
        token_out = normalize_address(token_out)
        if token_in == token_out:
            return []
        entries = self._pair_index.get(canonical_pair(token_in, token_out), [])
        return [
            entry
            for entry, direction in entries
            if direction is None or direction == (token_in, token_out)
        ]

    def token_pairs(self) -> set[tuple[str, str]]:
        """Every canonical token pair with at least one index entry."""
        return set(self._pair_index)

    def pair_entry_count(self, token_a: str, token_b: str) -> int:
        """Number of index entries stored for an unordered pair."""
        return len(self._pair_index.get(canonical_pair(token_a, token_b), []))


__all__ = ["PairEntry", "PoolRegistry"]
