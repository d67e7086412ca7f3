"""Decimal string parsing at a fixed precision.

Pool parameters arrive from snapshots as decimal strings. Gyroscope E-CLP
derived parameters (tau, u, v, w, z, d_sq) carry up to 38 significant
fractional digits, more than a float or a default-context Decimal keeps, so
they are parsed digit by digit into scaled integers.
"""

from __future__ import annotations

import re

__all__ = ["InvalidDecimalError", "parse_fixed", "format_fixed"]

_DECIMAL_RE = re.compile(r"^([+-])?(\d*)(?:\.(\d*))?$")

SUPPORTED_PRECISIONS = (18, 38)


class InvalidDecimalError(ValueError):
    """Decimal string cannot be represented exactly at the requested precision."""

    pass


def parse_fixed(text: str, decimals: int = 18, *, signed: bool = False) -> int:
    """Parse a decimal string into an integer scaled by 10**decimals.

    Args:
        text: Decimal string such as "0.998502246630054917" or "-94.86"
        decimals: Target precision, 18 or 38
        signed: Whether a leading minus sign is allowed

    Returns:
        The scaled integer value

    Raises:
        InvalidDecimalError: If the string is malformed, negative while
            unsigned, or has more fractional digits than the precision
        ValueError: If the precision is not supported
    """
    if decimals not in SUPPORTED_PRECISIONS:
        raise ValueError(f"Unsupported precision {decimals}, expected one of {SUPPORTED_PRECISIONS}")

    match = _DECIMAL_RE.match(text.strip())
    if match is None:
        raise InvalidDecimalError(f"Malformed decimal string: {text!r}")

    sign, whole, fraction = match.group(1), match.group(2), match.group(3) or ""
    if not whole and not fraction:
        raise InvalidDecimalError(f"Malformed decimal string: {text!r}")
    if sign == "-" and not signed:
        raise InvalidDecimalError(f"Negative value not allowed: {text!r}")

    # Trailing zeros never lose precision
    fraction = fraction.rstrip("0")
    if len(fraction) > decimals:
        raise InvalidDecimalError(
            f"{text!r} has {len(fraction)} fractional digits, precision is {decimals}"
        )

    value = int(whole or "0") * 10**decimals + int(fraction.ljust(decimals, "0") or "0")
    return -value if sign == "-" else value


def format_fixed(value: int, decimals: int = 18) -> str:
    """Format a scaled integer back into a canonical decimal string."""
    sign = "-" if value < 0 else ""
    whole, fraction = divmod(abs(value), 10**decimals)
    fraction_str = str(fraction).rjust(decimals, "0").rstrip("0")
    if not fraction_str:
        return f"{sign}{whole}"
    return f"{sign}{whole}.{fraction_str}"
