"""Data models for auction input."""

from baseline_solver.models.auction import Auction, Order, OrderClass, OrderKind, TokenInfo
from baseline_solver.models.types import (
    Address,
    OrderUid,
    Uint256,
    canonical_pair,
    is_valid_address,
    normalize_address,
)

__all__ = [
    "Auction",
    "Order",
    "OrderClass",
    "OrderKind",
    "TokenInfo",
    "Address",
    "OrderUid",
    "Uint256",
    "canonical_pair",
    "is_valid_address",
    "normalize_address",
]
