"""Baseline router: best single-order route across the pool registry.

For one request the router:

1. Enumerates candidate paths (PathFinder), capped at the path budget.
2. Evaluates every candidate concurrently with a single asyncio.gather.
   - Sell: propagates sell.amount forward through exact-input swaps.
   - Buy: propagates buy.amount backward through exact-output swaps,
     then re-simulates forward from the computed input and discards the
     path if the forward output falls short of buy.amount.
3. Keeps candidates satisfying the request's limit and picks the best:
   maximum buy amount on Sell, minimum sell amount on Buy. Ties break by
   fewer hops, then lower total gas, then the lexicographic pool-id
   sequence, so the choice never depends on completion order.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from baseline_solver.config import DEFAULT_ROUTER_CONFIG, RouterConfig
from baseline_solver.pools import ADAPTER_KINDS, POOL_KINDS, PoolRegistry
from baseline_solver.routing.pathfinding import CandidatePath, PathFinder
from baseline_solver.routing.registry import HandlerRegistry, build_default_registry
from baseline_solver.routing.types import (
    Asset,
    FailureReason,
    Request,
    Route,
    RouteFailure,
    Segment,
    Side,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class _Evaluation:
    """A feasible-looking candidate with its forward-simulated segments."""

    candidate: CandidatePath
    segments: tuple[Segment, ...]

    @property
    def sell_amount(self) -> int:
        return self.segments[0].input.amount

    @property
    def buy_amount(self) -> int:
        return self.segments[-1].output.amount

    @property
    def gas(self) -> int:
        return sum(segment.gas for segment in self.segments)


def _selection_key(evaluation: _Evaluation, side: Side) -> tuple:
    """Total order over evaluations; the smallest key wins."""
    objective = -evaluation.buy_amount if side == Side.SELL else evaluation.sell_amount
    return (
        objective,
        evaluation.candidate.hops,
        evaluation.gas,
        evaluation.candidate.pool_ids,
    )


class BaselineRouter:
    """Routes single requests through the pool registry.

    Pools of adapter-backed families (concentrated liquidity, ERC-4626)
    are skipped when the config carries no adapter for them; a warning is
    logged once at construction if such pools are present.
    """

    def __init__(
        self,
        registry: PoolRegistry,
        config: RouterConfig = DEFAULT_ROUTER_CONFIG,
        handlers: HandlerRegistry | None = None,
    ) -> None:
        """Initialize the router.

        Args:
            registry: Pool registry for this auction
            config: Router configuration
            handlers: Simulator registry. Defaults to every supported family,
                with adapter-backed families enabled per config.
        """
        self.registry = registry
        self.config = config
        self.handlers = handlers if handlers is not None else build_default_registry(config)

        skip_kinds = {
            kind for pool_type, kind in POOL_KINDS.items()
            if not self.handlers.is_type_registered(pool_type)
        }
        self._warn_missing_adapters(skip_kinds & ADAPTER_KINDS)
        self._pathfinder = PathFinder(registry, config.base_tokens, skip_kinds=skip_kinds)

    def _warn_missing_adapters(self, missing: set[str]) -> None:
        if not missing:
            return
        affected = {kind: 0 for kind in missing}
        for pool in self.registry:
            kind = POOL_KINDS.get(type(pool))
            if kind in affected:
                affected[kind] += 1
        for kind, count in sorted(affected.items()):
            if count:
                logger.warning("router_adapter_missing", kind=kind, skipped_pools=count)

    async def route(self, request: Request, max_hops: int | None = None) -> Route | RouteFailure:
        """Find the best route for a request.

        Args:
            request: The swap request
            max_hops: Override for the configured maximum hops

        Returns:
            The best Route, or RouteFailure with the reason no route was found
        """
        hops = self.config.max_hops if max_hops is None else max_hops
        if hops < 1:
            raise ValueError(f"max_hops must be at least 1, got {hops}")

        candidates = self._pathfinder.find_candidates(
            request.sell.token, request.buy.token, hops, self.config.path_budget
        )
        logger.debug(
            "router_candidates",
            sell_token=request.sell.token,
            buy_token=request.buy.token,
            side=request.side.value,
            candidates=len(candidates.paths),
            truncated=candidates.truncated,
        )
        if candidates.truncated:
            logger.info(
                "router_budget_truncated",
                sell_token=request.sell.token,
                buy_token=request.buy.token,
                budget=self.config.path_budget,
            )

        evaluations = await asyncio.gather(
            *(self._evaluate(request, candidate) for candidate in candidates.paths)
        )
        feasible = [e for e in evaluations if e is not None and self._within_limit(request, e)]

        if not feasible:
            if candidates.truncated:
                reason = FailureReason.BUDGET_EXHAUSTED
            elif not candidates.paths and candidates.adapter_blocked:
                reason = FailureReason.QUOTER_UNAVAILABLE
            else:
                reason = FailureReason.NO_ROUTE
            logger.info(
                "router_no_route",
                sell_token=request.sell.token,
                buy_token=request.buy.token,
                side=request.side.value,
                reason=reason.value,
                candidates=len(candidates.paths),
            )
            return RouteFailure(reason=reason)

        best = min(feasible, key=lambda e: _selection_key(e, request.side))
        route = Route(segments=best.segments)
        logger.debug(
            "router_route_found",
            pool_ids=list(route.pool_ids),
            sell_amount=route.sell.amount,
            buy_amount=route.buy.amount,
            gas=route.gas,
        )
        return route

    @staticmethod
    def _within_limit(request: Request, evaluation: _Evaluation) -> bool:
        if request.side == Side.SELL:
            return evaluation.buy_amount >= request.buy.amount
        return evaluation.sell_amount <= request.sell.amount

    async def _evaluate(self, request: Request, candidate: CandidatePath) -> _Evaluation | None:
        if request.side == Side.SELL:
            segments = await self._forward(candidate, request.sell.amount)
            if segments is None:
                return None
            return _Evaluation(candidate, segments)

        amount_in = await self._backward(candidate, request.buy.amount)
        if amount_in is None:
            return None
        segments = await self._forward(candidate, amount_in)
        if segments is None:
            return None
        if segments[-1].output.amount < request.buy.amount:
            logger.warning(
                "router_forward_shortfall",
                pool_ids=list(candidate.pool_ids),
                amount_in=amount_in,
                expected=request.buy.amount,
                actual=segments[-1].output.amount,
            )
            return None
        return _Evaluation(candidate, segments)

    async def _forward(self, candidate: CandidatePath, amount_in: int) -> tuple[Segment, ...] | None:
        """Exact-input simulation hop by hop; None if any hop fails."""
        segments = []
        amount = amount_in
        for pool_id, token_in, token_out in candidate.edges():
            pool = self.registry[pool_id]
            result = await self.handlers.simulate_swap(pool, token_in, token_out, amount)
            if result is None or result.amount_out <= 0:
                return None
            segments.append(
                Segment(
                    pool_id=pool_id,
                    input=Asset(token_in, amount),
                    output=Asset(token_out, result.amount_out),
                    gas=result.gas_estimate,
                )
            )
            amount = result.amount_out
        return tuple(segments)

    async def _backward(self, candidate: CandidatePath, amount_out: int) -> int | None:
        """Exact-output simulation from the last hop back; the input required."""
        amount = amount_out
        for pool_id, token_in, token_out in reversed(list(candidate.edges())):
            pool = self.registry[pool_id]
            result = await self.handlers.simulate_swap_exact_output(
                pool, token_in, token_out, amount
            )
            if result is None or result.amount_in <= 0:
                return None
            amount = result.amount_in
        return amount


__all__ = ["BaselineRouter"]
