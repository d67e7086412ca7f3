"""Auction driver: routes every order of an auction independently.

Orders are routed concurrently against one shared, read-only registry; no
state is carried from one order to the next.
"""

from __future__ import annotations

import asyncio
import itertools

import structlog

from baseline_solver.adapters import LiquiditySource
from baseline_solver.config import DEFAULT_ROUTER_CONFIG, RouterConfig
from baseline_solver.models.auction import Auction, Order, OrderKind
from baseline_solver.models.types import canonical_pair
from baseline_solver.pools import PoolRegistry
from baseline_solver.routing import (
    Asset,
    BaselineRouter,
    HandlerRegistry,
    Request,
    Route,
    RouteFailure,
    Side,
)

logger = structlog.get_logger()


def order_request(order: Order) -> Request:
    """Translate an order into a router request."""
    side = Side.SELL if order.kind == OrderKind.SELL else Side.BUY
    return Request(
        sell=Asset(order.sell_token, order.sell_amount_int),
        buy=Asset(order.buy_token, order.buy_amount_int),
        side=side,
    )


def snapshot_pairs(auction: Auction, base_tokens: tuple[str, ...]) -> set[tuple[str, str]]:
    """Token pairs whose pools can appear on a route for some order.

    Includes each order's own pair plus every pair between the order's
    tokens and the base tokens, and between base tokens.
    """
    pairs: set[tuple[str, str]] = set()
    for order in auction.orders:
        tokens = {*canonical_pair(order.sell_token, order.buy_token), *base_tokens}
        for a, b in itertools.combinations(sorted(tokens), 2):
            pairs.add(canonical_pair(a, b))
    return pairs


class AuctionDriver:
    """Routes each order of an auction through a BaselineRouter."""

    def __init__(
        self,
        registry: PoolRegistry,
        config: RouterConfig = DEFAULT_ROUTER_CONFIG,
        handlers: HandlerRegistry | None = None,
    ) -> None:
        """Initialize the driver.

        Args:
            registry: Pool registry for the auction
            config: Router configuration
            handlers: Optional simulator registry passed to the router
        """
        self.config = config
        self.router = BaselineRouter(registry, config, handlers)

    async def route_order(self, order: Order) -> Route | RouteFailure:
        """Route a single order with the configured max hops."""
        result = await self.router.route(order_request(order), self.config.max_hops)
        if isinstance(result, Route):
            logger.debug(
                "driver_order_routed",
                uid=order.uid,
                hops=result.hops,
                sell_amount=result.sell.amount,
                buy_amount=result.buy.amount,
            )
        else:
            logger.debug("driver_order_failed", uid=order.uid, reason=result.reason.value)
        return result

    async def route_auction(self, auction: Auction) -> dict[str, Route | RouteFailure]:
        """Route every order concurrently.

        Returns:
            Mapping of order uid to its Route or RouteFailure
        """
        results = await asyncio.gather(*(self.route_order(order) for order in auction.orders))
        routed = sum(isinstance(r, Route) for r in results)
        logger.info(
            "driver_auction_routed",
            auction_id=auction.id,
            orders=auction.order_count,
            routed=routed,
        )
        return {order.uid: result for order, result in zip(auction.orders, results)}

    @classmethod
    async def solve(
        cls,
        auction: Auction,
        source: LiquiditySource,
        config: RouterConfig = DEFAULT_ROUTER_CONFIG,
    ) -> dict[str, Route | RouteFailure]:
        """Fetch the liquidity snapshot for an auction and route its orders.

        Args:
            auction: Orders to route, with the snapshot block
            source: Liquidity source queried at auction.block
            config: Router configuration

        Returns:
            Mapping of order uid to its Route or RouteFailure
        """
        pairs = snapshot_pairs(auction, config.base_tokens)
        pools = await source.fetch(sorted(pairs), auction.block)
        logger.debug(
            "driver_snapshot_fetched",
            auction_id=auction.id,
            block=auction.block,
            pairs=len(pairs),
            pools=len(pools),
        )
        registry = PoolRegistry.from_pools(pools)
        return await cls(registry, config).route_auction(auction)


__all__ = ["AuctionDriver", "order_request", "snapshot_pairs"]
