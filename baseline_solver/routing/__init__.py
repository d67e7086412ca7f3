"""Order routing logic.

Module structure:
- types.py: Request, Segment, Route and RouteFailure
- pathfinding.py: PathFinder for candidate path enumeration
- registry.py: HandlerRegistry for per-pool-type dispatch
- router.py: BaselineRouter, concurrent evaluation and best-route selection
"""

from baseline_solver.routing.pathfinding import CandidatePath, CandidateSet, PathFinder
from baseline_solver.routing.registry import HandlerRegistry, build_default_registry
from baseline_solver.routing.router import BaselineRouter
from baseline_solver.routing.types import (
    Asset,
    FailureReason,
    Request,
    Route,
    RouteContinuityError,
    RouteFailure,
    RoutingError,
    Segment,
    Side,
)

__all__ = [
    "Asset",
    "BaselineRouter",
    "CandidatePath",
    "CandidateSet",
    "FailureReason",
    "HandlerRegistry",
    "PathFinder",
    "Request",
    "Route",
    "RouteContinuityError",
    "RouteFailure",
    "RoutingError",
    "Segment",
    "Side",
    "build_default_registry",
]
