"""AMM (Automated Market Maker) implementations."""

from baseline_solver.amm.balancer import (
    BalancerStableAMM,
    BalancerWeightedAMM,
    Gyro2CLPAMM,
    Gyro3CLPAMM,
    GyroECLPAMM,
    StableSurgeAMM,
)
from baseline_solver.amm.base import SwapCalculator, SwapResult
from baseline_solver.amm.concentrated import ConcentratedAMM, ConcentratedPool
from baseline_solver.amm.constant_product import (
    ConstantProductAMM,
    ConstantProductPool,
    constant_product_amm,
)
from baseline_solver.amm.erc4626 import Erc4626AMM, Erc4626Edge
from baseline_solver.amm.limit_order import LimitOrderAMM, LimitOrderPool, limit_order_amm

__all__ = [
    # Base
    "SwapCalculator",
    "SwapResult",
    # Constant product
    "ConstantProductAMM",
    "ConstantProductPool",
    "constant_product_amm",
    # Balancer family
    "BalancerWeightedAMM",
    "BalancerStableAMM",
    "StableSurgeAMM",
    "Gyro2CLPAMM",
    "Gyro3CLPAMM",
    "GyroECLPAMM",
    # Adapter-backed
    "ConcentratedAMM",
    "ConcentratedPool",
    "Erc4626AMM",
    "Erc4626Edge",
    # Limit orders
    "LimitOrderAMM",
    "LimitOrderPool",
    "limit_order_amm",
]
