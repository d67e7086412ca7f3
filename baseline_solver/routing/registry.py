"""Centralized registry for pool simulators.

Maps each pool dataclass to the calculator that prices it, so the router
dispatches on the pool's type instead of chaining isinstance checks.
Local-math calculators return results directly; adapter-backed ones
(concentrated liquidity, ERC-4626) return coroutines. The registry's own
simulate methods are coroutines and await whichever they get.

Type Safety Note:
    Simulators are typed for their specific pool class but stored under
    `AnyPool`. Lookups are keyed by `type(pool)`, so each simulator only
    ever sees pools of the class it was registered for.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Protocol

from baseline_solver.amm.balancer import (
    BalancerStableAMM,
    BalancerStablePool,
    BalancerWeightedAMM,
    BalancerWeightedPool,
    Gyro2CLPAMM,
    Gyro2CLPPool,
    Gyro3CLPAMM,
    Gyro3CLPPool,
    GyroECLPAMM,
    GyroECLPPool,
    StableSurgeAMM,
    StableSurgePool,
)
from baseline_solver.amm.concentrated import ConcentratedAMM, ConcentratedPool
from baseline_solver.amm.constant_product import ConstantProductPool, constant_product_amm
from baseline_solver.amm.erc4626 import Erc4626AMM, Erc4626Edge
from baseline_solver.amm.limit_order import LimitOrderPool, limit_order_amm
from baseline_solver.pools import AnyPool

if TYPE_CHECKING:
    from baseline_solver.amm.base import SwapResult
    from baseline_solver.config import RouterConfig


class SwapSimulator(Protocol):
    """Protocol for swap simulation functions (exact input)."""

    def __call__(
        self,
        pool: AnyPool,
        token_in: str,
        token_out: str,
        amount_in: int,
    ) -> SwapResult | None | Awaitable[SwapResult | None]:
        """Simulate a swap with exact input amount."""
        ...


class ExactOutputSimulator(Protocol):
    """Protocol for swap simulation functions (exact output)."""

    def __call__(
        self,
        pool: AnyPool,
        token_in: str,
        token_out: str,
        amount_out: int,
    ) -> SwapResult | None | Awaitable[SwapResult | None]:
        """Simulate a swap to get exact output amount."""
        ...


class HandlerRegistry:
    """Registry of per-pool-type simulators.

    Usage:
        registry = HandlerRegistry()
        registry.register(
            ConstantProductPool,
            simulator=constant_product_amm.simulate_swap,
            exact_output_simulator=constant_product_amm.simulate_swap_exact_output,
            type_name="constant_product",
        )

        # Later in routing code:
        result = await registry.simulate_swap(pool, token_in, token_out, amount_in)
    """

    def __init__(self) -> None:
        """Initialize an empty handler registry."""
        self._simulators: dict[type, SwapSimulator] = {}
        self._exact_output_simulators: dict[type, ExactOutputSimulator] = {}
        self._type_names: dict[type, str] = {}

    def register(
        self,
        pool_type: type,
        simulator: SwapSimulator,
        exact_output_simulator: ExactOutputSimulator | None = None,
        type_name: str = "unknown",
    ) -> None:
        """Register simulators for a pool type.

        Args:
            pool_type: The pool class to register (e.g., ConstantProductPool)
            simulator: Function to simulate a swap (exact input)
            exact_output_simulator: Function to simulate a swap (exact output)
            type_name: Human-readable name for logging
        """
        self._simulators[pool_type] = simulator
        if exact_output_simulator is not None:
            self._exact_output_simulators[pool_type] = exact_output_simulator
        self._type_names[pool_type] = type_name

    def unregister(self, pool_type: type) -> None:
        """Drop a pool type; its pools are then skipped by the router."""
        self._simulators.pop(pool_type, None)
        self._exact_output_simulators.pop(pool_type, None)
        self._type_names.pop(pool_type, None)

    async def simulate_swap(
        self,
        pool: AnyPool,
        token_in: str,
        token_out: str,
        amount_in: int,
    ) -> SwapResult | None:
        """Simulate a swap using the registered simulator.

        Returns:
            SwapResult if successful, None if no simulator is registered or
            the simulation fails
        """
        simulator = self._simulators.get(type(pool))
        if simulator is None:
            return None
        result = simulator(pool, token_in, token_out, amount_in)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def simulate_swap_exact_output(
        self,
        pool: AnyPool,
        token_in: str,
        token_out: str,
        amount_out: int,
    ) -> SwapResult | None:
        """Simulate a swap for exact output using the registered simulator.

        Returns:
            SwapResult if successful, None if no simulator is registered or
            the simulation fails
        """
        simulator = self._exact_output_simulators.get(type(pool))
        if simulator is None:
            return None
        result = simulator(pool, token_in, token_out, amount_out)
        if inspect.isawaitable(result):
            result = await result
        return result

    def get_type_name(self, pool: AnyPool) -> str:
        """Human-readable pool type name, "unknown" if unregistered."""
        return self._type_names.get(type(pool), "unknown")

    def is_registered(self, pool: AnyPool) -> bool:
        return type(pool) in self._simulators

    def is_type_registered(self, pool_type: type) -> bool:
        return pool_type in self._simulators


def build_default_registry(config: RouterConfig) -> HandlerRegistry:
    """Register every supported pool family.

    Concentrated pools and ERC-4626 edges are registered only when the
    config carries a quoter or reader for them.

    Args:
        config: Router configuration (adapters and quote timeout)

    Returns:
        Populated HandlerRegistry
    """
    registry = HandlerRegistry()

    registry.register(
        ConstantProductPool,
        simulator=constant_product_amm.simulate_swap,
        exact_output_simulator=constant_product_amm.simulate_swap_exact_output,
        type_name="constant_product",
    )
    balancer_amms = [
        (BalancerWeightedPool, BalancerWeightedAMM()),
        (BalancerStablePool, BalancerStableAMM()),
        (StableSurgePool, StableSurgeAMM()),
        (Gyro2CLPPool, Gyro2CLPAMM()),
        (Gyro3CLPPool, Gyro3CLPAMM()),
        (GyroECLPPool, GyroECLPAMM()),
    ]
    for pool_type, amm in balancer_amms:
        registry.register(
            pool_type,
            simulator=amm.simulate_swap,
            exact_output_simulator=amm.simulate_swap_exact_output,
            type_name=amm.kind,
        )
    registry.register(
        LimitOrderPool,
        simulator=limit_order_amm.simulate_swap,
        exact_output_simulator=limit_order_amm.simulate_swap_exact_output,
        type_name="limit_order",
    )

    if config.concentrated_quoter is not None:
        concentrated = ConcentratedAMM(config.concentrated_quoter, timeout=config.quote_timeout)
        registry.register(
            ConcentratedPool,
            simulator=concentrated.simulate_swap,
            exact_output_simulator=concentrated.simulate_swap_exact_output,
            type_name="concentrated",
        )
    if config.erc4626_reader is not None:
        erc4626 = Erc4626AMM(config.erc4626_reader, timeout=config.quote_timeout)
        registry.register(
            Erc4626Edge,
            simulator=erc4626.simulate_swap,
            exact_output_simulator=erc4626.simulate_swap_exact_output,
            type_name="erc4626",
        )

    return registry


__all__ = ["HandlerRegistry", "SwapSimulator", "ExactOutputSimulator", "build_default_registry"]
