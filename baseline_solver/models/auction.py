"""Pydantic models for the auction input the driver routes.

Only the fields the router needs are modelled; any transport-level DTO
fields are ignored on parse.
"""

from enum import Enum

from pydantic import BaseModel, Field
from typing_extensions import TypedDict

from baseline_solver.models.types import Address, OrderUid, Uint256, canonical_pair


class TokenInfo(TypedDict, total=False):
    """Token metadata carried by the auction."""

    decimals: int | None
    symbol: str | None


class OrderKind(str, Enum):
    """Whether the order is a sell or buy order."""

    SELL = "sell"
    BUY = "buy"


class OrderClass(str, Enum):
    """Classification of the order."""

    MARKET = "market"
    LIMIT = "limit"
    LIQUIDITY = "liquidity"


class Order(BaseModel):
    """An order in the auction batch."""

    uid: OrderUid = Field(description="Unique identifier for the order.")
    sell_token: Address = Field(alias="sellToken")
    buy_token: Address = Field(alias="buyToken")
    sell_amount: Uint256 = Field(alias="sellAmount")
    buy_amount: Uint256 = Field(alias="buyAmount")
    kind: OrderKind
    partially_fillable: bool = Field(default=False, alias="partiallyFillable")
    class_: OrderClass = Field(default=OrderClass.MARKET, alias="class")

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @property
    def sell_amount_int(self) -> int:
        """Sell amount as integer for calculations."""
        return int(self.sell_amount)

    @property
    def buy_amount_int(self) -> int:
        """Buy amount as integer for calculations."""
        return int(self.buy_amount)

    @property
    def is_sell_order(self) -> bool:
        return self.kind == OrderKind.SELL

    @property
    def is_buy_order(self) -> bool:
        return self.kind == OrderKind.BUY


class Auction(BaseModel):
    """A batch of orders routed against one liquidity snapshot."""

    id: str | None = Field(
        default=None,
        description="Auction ID. Null for quote requests.",
    )
    tokens: dict[Address, TokenInfo] = Field(
        default_factory=dict,
        description="Token metadata keyed by address.",
    )
    orders: list[Order] = Field(
        default_factory=list,
        description="Orders to be routed in this auction.",
    )
    block: int | None = Field(
        default=None,
        ge=0,
        description="Block the liquidity snapshot is taken at. Null for latest.",
    )

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @property
    def order_count(self) -> int:
        """Return the number of orders in this auction."""
        return len(self.orders)

    @property
    def token_pairs(self) -> set[tuple[str, str]]:
        """Return the set of canonical (min, max) token pairs being traded."""
        return {canonical_pair(order.sell_token, order.buy_token) for order in self.orders}


__all__ = ["TokenInfo", "OrderKind", "OrderClass", "Order", "Auction"]
