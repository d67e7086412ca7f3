"""Structural validation of pool snapshots.

Pool dataclasses are plain data; the registry runs these checks once when
it is built and refuses pools that fail them.
"""

from __future__ import annotations

from decimal import Decimal

from baseline_solver.amm.balancer import (
    BalancerStablePool,
    BalancerWeightedPool,
    Gyro2CLPPool,
    Gyro3CLPPool,
    GyroECLPPool,
    GyroError,
    StableSurgePool,
    gyro_eclp_math,
)
from baseline_solver.amm.concentrated import ConcentratedPool
from baseline_solver.amm.constant_product import ConstantProductPool
from baseline_solver.amm.erc4626 import Erc4626Edge
from baseline_solver.amm.limit_order import LimitOrderPool
from baseline_solver.constants import MAX_POOL_ID_LENGTH, V2_MAX_BALANCE
from baseline_solver.math.fixed_point import ONE_18, Bfp
from baseline_solver.math.uint import UINT256_MAX
from baseline_solver.models.types import normalize_address

from .types import pool_kind


class PoolError(Exception):
    """Base error for pool registry failures."""

    pass


class InvalidPoolError(PoolError):
    """Pool snapshot violates a structural invariant."""

    def __init__(self, pool_id: str, reason: str):
        self.pool_id = pool_id
        self.reason = reason
        super().__init__(f"Invalid pool {pool_id!r}: {reason}")


class UnsupportedPoolError(PoolError):
    """Pool type has no pricing implementation."""

    pass


# Largest power of ten accepted as a scaling factor (a 0-decimal token)
_MAX_SCALING_FACTOR = 10**18


def _is_power_of_ten(value: int) -> bool:
    if value < 1:
        return False
    while value % 10 == 0:
        value //= 10
    return value == 1


def _check_id(pool_id: str) -> None:
    if not pool_id:
        raise InvalidPoolError(pool_id, "empty pool id")
    if len(pool_id) > MAX_POOL_ID_LENGTH:
        raise InvalidPoolError(
            pool_id, f"pool id longer than {MAX_POOL_ID_LENGTH} characters"
        )


def _check_tokens(pool_id: str, tokens: tuple[str, ...], expected: int | None = None) -> None:
    if len(tokens) < 2:
        raise InvalidPoolError(pool_id, f"needs at least 2 tokens, got {len(tokens)}")
    if expected is not None and len(tokens) != expected:
        raise InvalidPoolError(pool_id, f"needs exactly {expected} tokens, got {len(tokens)}")
    if len(set(tokens)) != len(tokens):
        raise InvalidPoolError(pool_id, "duplicate tokens")


def _check_balance(pool_id: str, token: str, balance: int, limit: int) -> None:
    if balance < 0:
        raise InvalidPoolError(pool_id, f"negative balance for {token}")
    if balance > limit:
        raise InvalidPoolError(pool_id, f"balance for {token} exceeds {limit.bit_length()} bits")


def _check_fee(pool_id: str, fee: Decimal) -> None:
    if not Decimal(0) <= fee < Decimal(1):
        raise InvalidPoolError(pool_id, f"fee must be in [0, 1), got {fee}")


def _check_reserves(pool: object, balance_limit: int) -> None:
    pool_id = pool.id  # type: ignore[attr-defined]
    for reserve in pool.reserves:  # type: ignore[attr-defined]
        _check_balance(pool_id, reserve.token, reserve.balance, balance_limit)
        sf = reserve.scaling_factor
        if not _is_power_of_ten(sf) or sf > _MAX_SCALING_FACTOR:
            raise InvalidPoolError(
                pool_id, f"scaling factor {sf} for {reserve.token} is not a power of ten in [1, 1e18]"
            )
        if reserve.rate <= 0:
            raise InvalidPoolError(pool_id, f"non-positive rate for {reserve.token}")


def _check_weights(pool: BalancerWeightedPool) -> None:
    total = 0
    for reserve in pool.reserves:
        if reserve.weight <= 0:
            raise InvalidPoolError(pool.id, f"non-positive weight for {reserve.token}")
        total += Bfp.from_decimal(reserve.weight).value
    if abs(total - ONE_18) > 1:
        raise InvalidPoolError(pool.id, f"weights sum to {Decimal(total) / ONE_18}, expected 1")


def validate_pool(pool: object) -> None:
    """Check a pool's structural invariants.

    Args:
        pool: Pool snapshot of any supported family

    Raises:
        UnsupportedPoolError: If the pool type is unknown
        InvalidPoolError: If the pool violates an invariant
    """
    kind = pool_kind(pool)
    if kind is None:
        raise UnsupportedPoolError(f"Unsupported pool type: {type(pool).__name__}")

    _check_id(pool.id)  # type: ignore[attr-defined]

    if isinstance(pool, ConstantProductPool):
        _check_tokens(pool.id, pool.tokens, expected=2)
        _check_balance(pool.id, pool.token0, pool.reserve0, V2_MAX_BALANCE)
        _check_balance(pool.id, pool.token1, pool.reserve1, V2_MAX_BALANCE)
        _check_fee(pool.id, pool.fee)

    elif isinstance(pool, BalancerWeightedPool):
        _check_tokens(pool.id, pool.tokens)
        _check_reserves(pool, V2_MAX_BALANCE)
        _check_fee(pool.id, pool.fee)
        _check_weights(pool)

    elif isinstance(pool, BalancerStablePool):
        _check_tokens(pool.id, pool.tokens)
        _check_reserves(pool, V2_MAX_BALANCE)
        _check_fee(pool.id, pool.fee)
        if pool.amplification_parameter <= 0:
            raise InvalidPoolError(pool.id, "amplification parameter must be positive")

    elif isinstance(pool, StableSurgePool):
        _check_tokens(pool.id, pool.tokens)
        _check_reserves(pool, UINT256_MAX)
        _check_fee(pool.id, pool.fee)
        if pool.amplification_parameter <= 0:
            raise InvalidPoolError(pool.id, "amplification parameter must be positive")
        if not Decimal(0) <= pool.surge_threshold <= Decimal(1):
            raise InvalidPoolError(pool.id, "surge threshold must be in [0, 1]")
        if not pool.fee <= pool.max_surge_fee <= Decimal(1):
            raise InvalidPoolError(pool.id, "max surge fee must be in [fee, 1]")

    elif isinstance(pool, Gyro2CLPPool):
        _check_tokens(pool.id, pool.tokens, expected=2)
        _check_reserves(pool, UINT256_MAX)
        _check_fee(pool.id, pool.fee)
        if not 0 < pool.sqrt_alpha < pool.sqrt_beta:
            raise InvalidPoolError(pool.id, "requires 0 < sqrt_alpha < sqrt_beta")

    elif isinstance(pool, Gyro3CLPPool):
        _check_tokens(pool.id, pool.tokens, expected=3)
        _check_reserves(pool, UINT256_MAX)
        _check_fee(pool.id, pool.fee)
        if not 0 < pool.root3_alpha < ONE_18:
            raise InvalidPoolError(pool.id, "requires 0 < root3_alpha < 1")

    elif isinstance(pool, GyroECLPPool):
        _check_tokens(pool.id, pool.tokens, expected=2)
        _check_reserves(pool, UINT256_MAX)
        _check_fee(pool.id, pool.fee)
        params = pool.params
        if not 0 < params.alpha < params.beta:
            raise InvalidPoolError(pool.id, "requires 0 < alpha < beta")
        try:
            gyro_eclp_math.validate_params(params, pool.derived)
        except GyroError as e:
            raise InvalidPoolError(pool.id, str(e)) from e

    elif isinstance(pool, ConcentratedPool):
        _check_tokens(pool.id, pool.tokens, expected=2)
        if not 0 <= pool.fee < 1_000_000:
            raise InvalidPoolError(pool.id, f"fee must be in [0, 1e6), got {pool.fee}")
        if pool.liquidity < 0:
            raise InvalidPoolError(pool.id, "negative liquidity")
        if pool.sqrt_price <= 0:
            raise InvalidPoolError(pool.id, "sqrt price must be positive")

    elif isinstance(pool, Erc4626Edge):
        _check_tokens(pool.id, pool.tokens, expected=2)

    elif isinstance(pool, LimitOrderPool):
        # Amounts are checked on construction
        _check_tokens(pool.id, pool.tokens, expected=2)

    if normalize_address(getattr(pool, "address", "")) == "0x":
        raise InvalidPoolError(pool.id, "missing pool address")  # type: ignore[attr-defined]


__all__ = [
    "PoolError",
    "InvalidPoolError",
    "UnsupportedPoolError",
    "validate_pool",
]
