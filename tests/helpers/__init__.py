"""Test helpers module for shared test utilities.

- constants: Token addresses and common amounts
- factories: Order and pool factory functions
"""

from tests.helpers.constants import (
    DAI,
    GNO,
    ONE,
    POOL_ADDRESS,
    SDAI,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    TOKEN_D,
    USDC,
    USDT,
    WBTC,
    WETH,
)
from tests.helpers.factories import (
    ECLP_DERIVED,
    ECLP_PARAMS,
    make_concentrated_pool,
    make_cp_pool,
    make_eclp_pool,
    make_erc4626_edge,
    make_limit_order,
    make_order,
    make_stable_pool,
    make_weighted_pool,
)

__all__ = [
    # Constants
    "WETH",
    "USDC",
    "DAI",
    "USDT",
    "WBTC",
    "GNO",
    "SDAI",
    "TOKEN_A",
    "TOKEN_B",
    "TOKEN_C",
    "TOKEN_D",
    "POOL_ADDRESS",
    "ONE",
    "ECLP_PARAMS",
    "ECLP_DERIVED",
    # Factories
    "make_order",
    "make_cp_pool",
    "make_weighted_pool",
    "make_stable_pool",
    "make_limit_order",
    "make_concentrated_pool",
    "make_erc4626_edge",
    "make_eclp_pool",
]
