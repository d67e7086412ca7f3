"""Shared type definitions for auction models and pool snapshots.

Addresses are compared lowercase everywhere; `normalize_address` is the
one place that lowercasing happens.
"""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from baseline_solver.math.fixed_point import UINT256_MAX


def validate_uint256(value: Any) -> str:
    """Coerce an int or decimal string to a uint256 decimal string.

    Raises:
        ValueError: If value is a bool, not an integer, negative, or above
            2^256 - 1
    """
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if isinstance(value, str):
        try:
            number = int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    else:
        number = value

    if number < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if number > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")
    return str(number) if isinstance(value, int) else value


# 20-byte address, any case
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# Token amount carried as a decimal string on the wire
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]

# 56-byte order uid
OrderUid = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{112}$")]


def is_valid_address(address: str) -> bool:
    """True for a 0x-prefixed, 40-hex-digit string."""
    if not isinstance(address, str) or len(address) != 42 or not address.startswith("0x"):
        return False
    try:
        int(address[2:], 16)
    except ValueError:
        return False
    return True


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Lowercase an address and make sure it carries the 0x prefix.

    Args:
        address: Token or pool address, any case, prefix optional
        validate: Also check the result is a well-formed address

    Raises:
        ValueError: If validate is set and the address is malformed
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr
    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")
    return addr


def canonical_pair(token_a: str, token_b: str) -> tuple[str, str]:
    """Unordered pair key: both addresses normalized, smaller first."""
    a = normalize_address(token_a)
    b = normalize_address(token_b)
    return (a, b) if a < b else (b, a)


__all__ = [
    "Address",
    "OrderUid",
    "Uint256",
    "validate_uint256",
    "is_valid_address",
    "normalize_address",
    "canonical_pair",
]
