"""Type definitions for the routing module."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from baseline_solver.models.types import normalize_address


class Side(str, Enum):
    """Which leg of a request is exact."""

    SELL = "sell"  # sell amount exact, buy amount is the minimum
    BUY = "buy"  # buy amount exact, sell amount is the maximum


class FailureReason(str, Enum):
    """Why a request produced no route."""

    NO_ROUTE = "no_route"
    BUDGET_EXHAUSTED = "budget_exhausted"
    QUOTER_UNAVAILABLE = "quoter_unavailable"


class RoutingError(Exception):
    """Base error for routing failures."""

    pass


class RouteContinuityError(RoutingError):
    """Adjacent segments do not hand over the same token and amount."""

    pass


@dataclass(frozen=True)
class Asset:
    """A token amount."""

    token: str
    amount: int

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(f"Asset amount cannot be negative, got {self.amount}")
        object.__setattr__(self, "token", normalize_address(self.token))


@dataclass(frozen=True)
class Request:
    """A single swap request.

    On Sell, sell.amount is exact and buy.amount the minimum acceptable
    output. On Buy, buy.amount is exact and sell.amount the maximum
    acceptable input.
    """

    sell: Asset
    buy: Asset
    side: Side

    @property
    def exact_amount(self) -> int:
        return self.sell.amount if self.side == Side.SELL else self.buy.amount

    @property
    def limit_amount(self) -> int:
        return self.buy.amount if self.side == Side.SELL else self.sell.amount


@dataclass(frozen=True)
class Segment:
    """One hop of a route. Holds the pool id, never the pool."""

    pool_id: str
    input: Asset
    output: Asset
    gas: int


@dataclass(frozen=True)
class Route:
    """A non-empty chain of segments from the sell token to the buy token."""

    segments: tuple[Segment, ...]

    def __post_init__(self) -> None:
        if not self.segments:
            raise RouteContinuityError("Route must contain at least one segment")
        for prev, nxt in zip(self.segments, self.segments[1:]):
            if prev.output.token != nxt.input.token:
                raise RouteContinuityError(
                    f"Token mismatch between {prev.pool_id} and {nxt.pool_id}: "
                    f"{prev.output.token} != {nxt.input.token}"
                )
            if prev.output.amount != nxt.input.amount:
                raise RouteContinuityError(
                    f"Amount mismatch between {prev.pool_id} and {nxt.pool_id}: "
                    f"{prev.output.amount} != {nxt.input.amount}"
                )

    @property
    def sell(self) -> Asset:
        return self.segments[0].input

    @property
    def buy(self) -> Asset:
        return self.segments[-1].output

    @property
    def gas(self) -> int:
        return sum(segment.gas for segment in self.segments)

    @property
    def hops(self) -> int:
        return len(self.segments)

    @property
    def pool_ids(self) -> tuple[str, ...]:
        return tuple(segment.pool_id for segment in self.segments)


@dataclass(frozen=True)
class RouteFailure:
    """A request that produced no route, and why."""

    reason: FailureReason
    detail: str | None = None


__all__ = [
    "Side",
    "FailureReason",
    "RoutingError",
    "RouteContinuityError",
    "Asset",
    "Request",
    "Segment",
    "Route",
    "RouteFailure",
]
