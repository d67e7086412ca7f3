"""Balancer pool dataclasses.

Data structures for weighted, stable, StableSurge and Gyroscope pools.
Reserves keep the order given by the snapshot; the AMM classes resolve
tokens by address and sort where the pool math depends on token order.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Literal

from baseline_solver.constants import GYRO_GAS, STABLE_GAS, WEIGHTED_GAS
from baseline_solver.math.fixed_point import ONE_18
from baseline_solver.math.parsing import parse_fixed
from baseline_solver.models.types import normalize_address


@dataclass(frozen=True)
class TokenReserve:
    """Reserve information for a token in a Balancer pool.

    Attributes:
        token: Token address (case-insensitive comparison supported)
        balance: Raw balance (in token's native decimals)
        scaling_factor: 10^(18 - decimals), e.g. 10^12 for USDC
        rate: Rate provider value in 18 decimals (1e18 when the pool has none)
    """

    token: str
    balance: int
    scaling_factor: int = 1
    rate: int = ONE_18


@dataclass(frozen=True)
class WeightedTokenReserve:
    """Reserve information for a token in a weighted pool.

    Attributes:
        token: Token address (case-insensitive comparison supported)
        balance: Raw balance (in token's native decimals)
        weight: Normalized weight (sum of all weights in pool = 1.0)
        scaling_factor: 10^(18 - decimals)
        rate: Rate provider value in 18 decimals
    """

    token: str
    balance: int
    weight: Decimal
    scaling_factor: int = 1
    rate: int = ONE_18


class _ReserveLookup:
    """Token lookup shared by the pool dataclasses."""

    id: str
    address: str
    reserves: tuple

    def get_reserve(self, token: str):  # type: ignore[no-untyped-def]
        """Get reserve for a specific token."""
        token_lower = normalize_address(token)
        for reserve in self.reserves:
            if normalize_address(reserve.token) == token_lower:
                return reserve
        return None

    @property
    def tokens(self) -> tuple[str, ...]:
        """Normalized token addresses in reserve order."""
        return tuple(normalize_address(r.token) for r in self.reserves)


@dataclass(frozen=True)
class BalancerWeightedPool(_ReserveLookup):
    """Balancer weighted product pool.

    Attributes:
        id: Pool identifier in the snapshot
        address: Pool contract address
        reserves: Token reserves
        fee: Swap fee as decimal (e.g., 0.003 for 0.3%)
        version: Pool version - affects power function rounding
        gas_estimate: Gas cost estimate for one swap
    """

    id: str
    address: str
    reserves: tuple[WeightedTokenReserve, ...]
    fee: Decimal
    version: Literal["v0", "v3Plus"] = "v0"
    gas_estimate: int = WEIGHTED_GAS


@dataclass(frozen=True)
class BalancerStablePool(_ReserveLookup):
    """Balancer stable pool (StableSwap / Curve-style).

    Attributes:
        id: Pool identifier in the snapshot
        address: Pool contract address (also the BPT token of composable pools)
        reserves: Token reserves
        amplification_parameter: Unscaled A (e.g., 5000). The AMM multiplies
            by AMP_PRECISION (1000) before calling the stable math.
        fee: Swap fee as decimal (e.g., 0.0001 for 0.01%)
        gas_estimate: Gas cost estimate for one swap
    """

    id: str
    address: str
    reserves: tuple[TokenReserve, ...]
    amplification_parameter: Decimal
    fee: Decimal
    gas_estimate: int = STABLE_GAS


@dataclass(frozen=True)
class StableSurgePool(_ReserveLookup):
    """Balancer V3 stable pool with the StableSurge hook.

    Attributes:
        surge_threshold: Imbalance above which the dynamic fee kicks in
        max_surge_fee: Fee charged at full imbalance
    """

    id: str
    address: str
    reserves: tuple[TokenReserve, ...]
    amplification_parameter: Decimal
    fee: Decimal
    surge_threshold: Decimal
    max_surge_fee: Decimal
    gas_estimate: int = STABLE_GAS


@dataclass(frozen=True)
class Gyro2CLPPool(_ReserveLookup):
    """Gyroscope 2-CLP: constant product on a price range [alpha, beta].

    Attributes:
        sqrt_alpha: sqrt of the lower price bound, 18 decimals
        sqrt_beta: sqrt of the upper price bound, 18 decimals
    """

    id: str
    address: str
    reserves: tuple[TokenReserve, ...]
    fee: Decimal
    sqrt_alpha: int
    sqrt_beta: int
    gas_estimate: int = GYRO_GAS


@dataclass(frozen=True)
class Gyro3CLPPool(_ReserveLookup):
    """Gyroscope 3-CLP: three tokens with a symmetric price range.

    Attributes:
        root3_alpha: Cube root of the lower price bound, 18 decimals
    """

    id: str
    address: str
    reserves: tuple[TokenReserve, ...]
    fee: Decimal
    root3_alpha: int
    gas_estimate: int = GYRO_GAS


@dataclass(frozen=True)
class EclpParams:
    """E-CLP curve parameters, signed 18 decimals.

    alpha/beta bound the price range, (c, s) is the rotation (a unit
    vector) and lam the stretch of the ellipse.
    """

    alpha: int
    beta: int
    c: int
    s: int
    lam: int

    @classmethod
    def from_strings(cls, alpha: str, beta: str, c: str, s: str, lam: str) -> EclpParams:
        """Parse decimal strings such as "0.998502246630054917"."""
        return cls(
            alpha=parse_fixed(alpha, 18, signed=True),
            beta=parse_fixed(beta, 18, signed=True),
            c=parse_fixed(c, 18, signed=True),
            s=parse_fixed(s, 18, signed=True),
            lam=parse_fixed(lam, 18, signed=True),
        )


@dataclass(frozen=True)
class EclpDerivedParams:
    """Precomputed E-CLP quantities, signed 38 decimals.

    tau_alpha and tau_beta are (x, y) points on the unit circle; u, v, w, z
    and d_sq are the auxiliary terms the contract stores alongside them.
    """

    tau_alpha: tuple[int, int]
    tau_beta: tuple[int, int]
    u: int
    v: int
    w: int
    z: int
    d_sq: int

    @classmethod
    def from_strings(
        cls,
        tau_alpha: tuple[str, str],
        tau_beta: tuple[str, str],
        u: str,
        v: str,
        w: str,
        z: str,
        d_sq: str,
    ) -> EclpDerivedParams:
        """Parse 38-decimal strings, signs allowed."""

        def xp(text: str) -> int:
            return parse_fixed(text, 38, signed=True)

        return cls(
            tau_alpha=(xp(tau_alpha[0]), xp(tau_alpha[1])),
            tau_beta=(xp(tau_beta[0]), xp(tau_beta[1])),
            u=xp(u),
            v=xp(v),
            w=xp(w),
            z=xp(z),
            d_sq=xp(d_sq),
        )


@dataclass(frozen=True)
class GyroECLPPool(_ReserveLookup):
    """Gyroscope elliptic CLP (two tokens)."""

    id: str
    address: str
    reserves: tuple[TokenReserve, ...]
    fee: Decimal
    params: EclpParams
    derived: EclpDerivedParams
    gas_estimate: int = GYRO_GAS


BalancerPool = (
    BalancerWeightedPool
    | BalancerStablePool
    | StableSurgePool
    | Gyro2CLPPool
    | Gyro3CLPPool
    | GyroECLPPool
)
