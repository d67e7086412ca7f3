"""ERC-4626 vault wrap / unwrap edges.

A vault connects its underlying asset and its share token with two directed
edges:

- wrap (asset -> vault): deposit, shares out = convert_to_shares(assets)
- unwrap (vault -> asset): redeem, assets out = convert_to_assets(shares)

Conversions are read through an async reader at the auction block.
Exact-output amounts use the inverse conversion padded by a small epsilon
and are then verified forward.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from baseline_solver.adapters import AdapterError, Erc4626Reader
from baseline_solver.amm.base import SwapResult
from baseline_solver.constants import ERC4626_GAS
from baseline_solver.models.types import normalize_address

logger = structlog.get_logger()

# Padding on inverse conversions, in basis points
DEFAULT_EPSILON_BPS = 5

_BPS = 10_000


@dataclass(frozen=True)
class Erc4626Edge:
    """An ERC-4626 vault seen as a pair of directed edges.

    Attributes:
        id: Liquidity ID from the snapshot
        vault: Vault (share token) address
        asset: Underlying asset address
        gas_estimate: Gas cost of a deposit or redeem
    """

    id: str
    vault: str
    asset: str
    gas_estimate: int = ERC4626_GAS

    @property
    def address(self) -> str:
        return normalize_address(self.vault)

    @property
    def tokens(self) -> tuple[str, ...]:
        return (normalize_address(self.asset), normalize_address(self.vault))

    def is_wrap(self, token_in: str, token_out: str) -> bool | None:
        """Direction of a swap: True for wrap, False for unwrap, None if unrelated."""
        token_in = normalize_address(token_in)
        token_out = normalize_address(token_out)
        asset = normalize_address(self.asset)
        vault = normalize_address(self.vault)
        if token_in == asset and token_out == vault:
            return True
        if token_in == vault and token_out == asset:
            return False
        return None


def apply_epsilon_ceiled(amount: int, epsilon_bps: int = DEFAULT_EPSILON_BPS) -> int:
    """ceil(amount * (1 + epsilon_bps / 10000))."""
    numerator = amount * (_BPS + epsilon_bps)
    return (numerator + _BPS - 1) // _BPS


class Erc4626AMM:
    """Wrap and unwrap simulation through an ERC-4626 reader.

    Both simulate methods are coroutines. Every reader call is bounded by
    `timeout` seconds.
    """

    def __init__(
        self,
        reader: Erc4626Reader | None = None,
        timeout: float = 2.0,
        epsilon_bps: int = DEFAULT_EPSILON_BPS,
    ):
        """Initialize the AMM.

        Args:
            reader: Vault reader. If None, every simulation returns None
                (ERC-4626 edges disabled).
            timeout: Seconds allowed for each reader call
            epsilon_bps: Padding applied to exact-output inputs
        """
        self.reader = reader
        self.timeout = timeout
        self.epsilon_bps = epsilon_bps

    async def _convert(self, edge: Erc4626Edge, wrap: bool, amount: int) -> int | None:
        """Forward conversion for the direction: shares for a wrap, assets for an unwrap."""
        if wrap:
            call = self.reader.convert_to_shares(edge.address, amount)
        else:
            call = self.reader.convert_to_assets(edge.address, amount)
        return await self._bounded(edge, call, wrap=wrap, amount=amount)

    async def _convert_inverse(self, edge: Erc4626Edge, wrap: bool, amount: int) -> int | None:
        """Inverse conversion: assets needed for `amount` shares, or shares for assets."""
        if wrap:
            call = self.reader.convert_to_assets(edge.address, amount)
        else:
            call = self.reader.convert_to_shares(edge.address, amount)
        return await self._bounded(edge, call, wrap=wrap, amount=amount)

    async def _bounded(self, edge: Erc4626Edge, call, **context) -> int | None:
        try:
            return await asyncio.wait_for(call, self.timeout)
        except asyncio.TimeoutError:
            logger.debug("erc4626_amm_read_timeout", pool_id=edge.id, **context)
            return None
        except (AdapterError, OSError) as e:
            logger.debug("erc4626_amm_read_error", pool_id=edge.id, error=str(e), **context)
            return None

    async def simulate_swap(
        self,
        pool: Erc4626Edge,
        token_in: str,
        token_out: str,
        amount_in: int,
    ) -> SwapResult | None:
        """Simulate a deposit or redeem (exact input).

        Returns:
            SwapResult, or None if the tokens do not match the vault or the
            read fails
        """
        wrap = pool.is_wrap(token_in, token_out)
        if wrap is None:
            return None
        if self.reader is None:
            logger.debug("erc4626_amm_no_reader", pool_id=pool.id)
            return None

        if amount_in == 0:
            amount_out = 0
        else:
            amount_out = await self._convert(pool, wrap, amount_in)
            if amount_out is None:
                return None

        return SwapResult(
            amount_in=amount_in,
            amount_out=amount_out,
            pool_id=pool.id,
            token_in=normalize_address(token_in),
            token_out=normalize_address(token_out),
            gas_estimate=pool.gas_estimate,
        )

    async def simulate_swap_exact_output(
        self,
        pool: Erc4626Edge,
        token_in: str,
        token_out: str,
        amount_out: int,
    ) -> SwapResult | None:
        """Simulate a mint or withdraw for an exact output.

        The input is the inverse conversion of amount_out padded by
        epsilon_bps and rounded up. It is then converted forward; if the
        result still falls short of amount_out the swap is rejected.

        Returns:
            SwapResult with the padded input and the forward-converted output
        """
        wrap = pool.is_wrap(token_in, token_out)
        if wrap is None:
            return None
        if self.reader is None:
            logger.debug("erc4626_amm_no_reader", pool_id=pool.id)
            return None

        if amount_out == 0:
            return SwapResult(
                amount_in=0,
                amount_out=0,
                pool_id=pool.id,
                token_in=normalize_address(token_in),
                token_out=normalize_address(token_out),
                gas_estimate=pool.gas_estimate,
            )

        preview = await self._convert_inverse(pool, wrap, amount_out)
        if preview is None:
            return None
        amount_in = apply_epsilon_ceiled(preview, self.epsilon_bps)

        actual_output = await self._convert(pool, wrap, amount_in)
        if actual_output is None:
            return None
        if actual_output < amount_out:
            logger.debug(
                "erc4626_amm_exact_output_shortfall",
                pool_id=pool.id,
                wrap=wrap,
                amount_in=amount_in,
                amount_out=amount_out,
                actual_output=actual_output,
            )
            return None

        return SwapResult(
            amount_in=amount_in,
            amount_out=actual_output,
            pool_id=pool.id,
            token_in=normalize_address(token_in),
            token_out=normalize_address(token_out),
            gas_estimate=pool.gas_estimate,
        )


__all__ = ["Erc4626Edge", "Erc4626AMM", "apply_epsilon_ceiled", "DEFAULT_EPSILON_BPS"]
