"""Pool type definitions.

Provides the AnyPool union and the family tag used by the pair index and
the handler registry.
"""

from typing import TypeAlias

from baseline_solver.amm.balancer import (
    BalancerStablePool,
    BalancerWeightedPool,
    Gyro2CLPPool,
    Gyro3CLPPool,
    GyroECLPPool,
    StableSurgePool,
)
from baseline_solver.amm.concentrated import ConcentratedPool
from baseline_solver.amm.constant_product import ConstantProductPool
from baseline_solver.amm.erc4626 import Erc4626Edge
from baseline_solver.amm.limit_order import LimitOrderPool

# Union type for all pool types
AnyPool: TypeAlias = (
    ConstantProductPool
    | BalancerWeightedPool
    | BalancerStablePool
    | StableSurgePool
    | Gyro2CLPPool
    | Gyro3CLPPool
    | GyroECLPPool
    | ConcentratedPool
    | Erc4626Edge
    | LimitOrderPool
)

# Family tag per pool dataclass
POOL_KINDS: dict[type, str] = {
    ConstantProductPool: "constant_product",
    BalancerWeightedPool: "weighted",
    BalancerStablePool: "stable",
    StableSurgePool: "stable_surge",
    Gyro2CLPPool: "gyro_2clp",
    Gyro3CLPPool: "gyro_3clp",
    GyroECLPPool: "gyro_eclp",
    ConcentratedPool: "concentrated",
    Erc4626Edge: "erc4626",
    LimitOrderPool: "limit_order",
}

# Families whose edges only exist in the listed direction(s)
DIRECTED_KINDS = frozenset({"erc4626", "limit_order"})

# Families priced through an async adapter
ADAPTER_KINDS = frozenset({"concentrated", "erc4626"})


def pool_kind(pool: object) -> str | None:
    """Family tag of a pool, or None for unsupported types."""
    return POOL_KINDS.get(type(pool))


__all__ = [
    "AnyPool",
    "POOL_KINDS",
    "DIRECTED_KINDS",
    "ADAPTER_KINDS",
    "pool_kind",
    "ConstantProductPool",
    "BalancerWeightedPool",
    "BalancerStablePool",
    "StableSurgePool",
    "Gyro2CLPPool",
    "Gyro3CLPPool",
    "GyroECLPPool",
    "ConcentratedPool",
    "Erc4626Edge",
    "LimitOrderPool",
]
