"""Balancer and Gyroscope pool implementations.

This package provides exact swap calculations for Balancer vault pools,
rounding the way the on-chain contracts do.

Pool types supported:
- Weighted Product (V0 and V3Plus)
- Stable pools (StableSwap / Curve-style), composable stable included
- Stable pools with the StableSurge hook
- Gyroscope 2-CLP, 3-CLP and E-CLP
"""

# AMM classes
from .amm import (
    BalancerStableAMM,
    BalancerWeightedAMM,
    Gyro2CLPAMM,
    Gyro3CLPAMM,
    GyroECLPAMM,
    StableSurgeAMM,
    converge_in_amount,
)

# Errors
from .errors import (
    BalancerError,
    GyroError,
    InvalidFeeError,
    InvalidScalingFactorError,
    MaxInRatioError,
    MaxOutRatioError,
    StableGetBalanceDidNotConverge,
    StableInvariantDidNotConverge,
    ZeroBalanceError,
    ZeroWeightError,
)

# Pool dataclasses
from .pools import (
    BalancerPool,
    BalancerStablePool,
    BalancerWeightedPool,
    EclpDerivedParams,
    EclpParams,
    Gyro2CLPPool,
    Gyro3CLPPool,
    GyroECLPPool,
    StableSurgePool,
    TokenReserve,
    WeightedTokenReserve,
)

# Scaling helpers
from .scaling import (
    add_swap_fee_amount,
    scale_down_down,
    scale_down_up,
    scale_up,
    subtract_swap_fee_amount,
)

# Stable math
from .stable_math import (
    calculate_invariant,
    filter_bpt_token,
    get_token_balance_given_invariant_and_all_other_balances,
    stable_calc_in_given_out,
    stable_calc_out_given_in,
)

# Weighted math
from .weighted_math import calc_in_given_out, calc_out_given_in

__all__ = [
    # Pool dataclasses
    "TokenReserve",
    "WeightedTokenReserve",
    "BalancerWeightedPool",
    "BalancerStablePool",
    "StableSurgePool",
    "Gyro2CLPPool",
    "Gyro3CLPPool",
    "GyroECLPPool",
    "EclpParams",
    "EclpDerivedParams",
    "BalancerPool",
    # AMM classes
    "BalancerWeightedAMM",
    "BalancerStableAMM",
    "StableSurgeAMM",
    "Gyro2CLPAMM",
    "Gyro3CLPAMM",
    "GyroECLPAMM",
    "converge_in_amount",
    # Weighted pool math functions
    "calc_out_given_in",
    "calc_in_given_out",
    # Stable pool math functions
    "calculate_invariant",
    "get_token_balance_given_invariant_and_all_other_balances",
    "stable_calc_out_given_in",
    "stable_calc_in_given_out",
    "filter_bpt_token",
    # Scaling helpers
    "scale_up",
    "scale_down_down",
    "scale_down_up",
    # Fee helpers
    "subtract_swap_fee_amount",
    "add_swap_fee_amount",
    # Errors
    "BalancerError",
    "MaxInRatioError",
    "MaxOutRatioError",
    "InvalidFeeError",
    "InvalidScalingFactorError",
    "ZeroWeightError",
    "ZeroBalanceError",
    "StableInvariantDidNotConverge",
    "StableGetBalanceDidNotConverge",
    "GyroError",
]
