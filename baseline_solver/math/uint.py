"""Checked unsigned integer helpers (Balancer's Math library).

Plain-int arithmetic for the places where pool math works on raw amounts
rather than fixed-point values: stable pool Newton steps, constant-product
reserves, scaling factors. Results are kept inside the uint256 range.
"""

from __future__ import annotations

from .errors import AddOverflow, MulOverflow, SubOverflow, ZeroDivision

UINT256_MAX = 2**256 - 1


def add(a: int, b: int) -> int:
    c = a + b
    if c > UINT256_MAX:
        raise AddOverflow(f"{a} + {b} overflows uint256")
    return c


def sub(a: int, b: int) -> int:
    if b > a:
        raise SubOverflow(f"{a} - {b} underflows")
    return a - b


def mul(a: int, b: int) -> int:
    c = a * b
    if c > UINT256_MAX:
        raise MulOverflow(f"{a} * {b} overflows uint256")
    return c


def div_down(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivision("integer division by zero")
    return a // b


def div_up(a: int, b: int) -> int:
    """Integer division rounding up; 0 stays 0."""
    if b == 0:
        raise ZeroDivision("integer division by zero")
    if a == 0:
        return 0
    return 1 + (a - 1) // b


__all__ = ["UINT256_MAX", "add", "sub", "mul", "div_down", "div_up"]
