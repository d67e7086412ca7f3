"""Protocol constants for the baseline solver.

Gas estimates are per-swap costs used when a pool snapshot carries no
estimate of its own, and as the gas component of route tie-breaking.
"""

# Per-swap gas for UniswapV2-style constant-product pools
CONSTANT_PRODUCT_GAS = 60_000

# Balancer V2 vault swaps
WEIGHTED_GAS = 88_892
STABLE_GAS = 183_520

# Gyroscope pools (2-CLP, 3-CLP, E-CLP)
GYRO_GAS = 100_000

# Uniswap V3 style concentrated liquidity (single tick crossing)
CONCENTRATED_GAS = 108_000

# ERC-4626 deposit / redeem through the vault
ERC4626_GAS = 90_000

# Filling a foreign limit order through the settlement contract
LIMIT_ORDER_GAS = 66_358

# Balancer V2 vault pools keep balances in 112 bits
V2_MAX_BALANCE = 2**112 - 1

# Pool ids longer than this are refused by the registry
MAX_POOL_ID_LENGTH = 66
