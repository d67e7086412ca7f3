"""Balancer-family pricing engine and baseline router."""

from baseline_solver.config import DEFAULT_ROUTER_CONFIG, RouterConfig
from baseline_solver.driver import AuctionDriver
from baseline_solver.pools import PoolRegistry
from baseline_solver.routing import BaselineRouter, Request, Route, RouteFailure, Side

__version__ = "0.1.0"
__all__ = [
    "AuctionDriver",
    "BaselineRouter",
    "DEFAULT_ROUTER_CONFIG",
    "PoolRegistry",
    "Request",
    "Route",
    "RouteFailure",
    "RouterConfig",
    "Side",
    "__version__",
]
