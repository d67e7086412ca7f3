"""Pool management package.

Provides PoolRegistry, the arena of pool states and the token-pair index
the router walks.
"""

from .registry import PairEntry, PoolRegistry
from .types import ADAPTER_KINDS, DIRECTED_KINDS, POOL_KINDS, AnyPool, pool_kind
from .validation import InvalidPoolError, PoolError, UnsupportedPoolError, validate_pool

__all__ = [
    "PoolRegistry",
    "PairEntry",
    "AnyPool",
    "POOL_KINDS",
    "DIRECTED_KINDS",
    "ADAPTER_KINDS",
    "pool_kind",
    "PoolError",
    "InvalidPoolError",
    "UnsupportedPoolError",
    "validate_pool",
]
