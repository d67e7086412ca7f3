"""Unsigned fixed-point numbers at 18 and 38 decimals.

`Bfp` mirrors Balancer's FixedPoint library (18 decimals). `Bfp38` is the
extended-precision tier used by the Gyroscope pools. The two are distinct
classes and refuse to mix: cross-precision products only go through
`mul_down_xp_to_np` / `mul_up_xp_to_np`.

Values are stored as integers scaled by 10^decimals and checked against the
uint256 range; every operation rounds in a fixed direction.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import ClassVar, TypeVar

from .errors import AddOverflow, DivInternal, MulOverflow, SubOverflow, ZeroDivision
from .log_exp_math import pow_raw
from .parsing import parse_fixed

__all__ = [
    "Bfp",
    "Bfp38",
    "mul_xp",
    "mul_down_xp_to_np",
    "mul_up_xp_to_np",
    "ONE_18",
    "ONE_38",
    "UINT256_MAX",
    "MAX_IN_RATIO",
    "MAX_OUT_RATIO",
    "AMP_PRECISION",
]

ONE_18 = 10**18
ONE_38 = 10**38
UINT256_MAX = 2**256 - 1

_T = TypeVar("_T", bound="_FixedPoint")


def _checked(value: int, error: type[Exception], op: str) -> int:
    if value < 0 or value > UINT256_MAX:
        raise error(f"{op} result {value} outside uint256")
    return value


class _FixedPoint:
    """Shared arithmetic for the unsigned fixed-point tiers."""

    ONE: ClassVar[int]
    DECIMALS: ClassVar[int]

    __slots__ = ("value",)
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, value: int) -> None:
        self.value = value

    @classmethod
    def from_wei(cls: type[_T], wei: int) -> _T:
        """Create from a raw, already scaled value."""
        return cls(wei)

    @classmethod
    def from_int(cls: type[_T], i: int) -> _T:
        return cls(i * cls.ONE)

    @classmethod
    def from_str(cls: type[_T], text: str) -> _T:
        """Parse a decimal string exactly; excess fractional digits are rejected."""
        return cls(parse_fixed(text, cls.DECIMALS))

    @classmethod
    def from_decimal(cls: type[_T], d: Decimal) -> _T:
        """Create from a Decimal, rounding half up at the last digit."""
        if d < 0:
            raise ValueError(f"{cls.__name__}.from_decimal requires non-negative input, got {d}")
        scaled = (d * cls.ONE).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return cls(int(scaled))

    def to_decimal(self) -> Decimal:
        return Decimal(self.value) / Decimal(self.ONE)

    def _same(self: _T, other: object) -> _T:
        if type(other) is not type(self):
            raise TypeError(
                f"cannot combine {type(self).__name__} with {type(other).__name__}; "
                "use the explicit cross-precision helpers"
            )
        return other  # type: ignore[return-value]

    def add(self: _T, other: _T) -> _T:
        other = self._same(other)
        return type(self)(_checked(self.value + other.value, AddOverflow, "add"))

    def sub(self: _T, other: _T) -> _T:
        other = self._same(other)
        return type(self)(_checked(self.value - other.value, SubOverflow, "sub"))

    def mul_down(self: _T, other: _T) -> _T:
        other = self._same(other)
        product = _checked(self.value * other.value, MulOverflow, "mul")
        return type(self)(product // self.ONE)

    def mul_up(self: _T, other: _T) -> _T:
        other = self._same(other)
        product = _checked(self.value * other.value, MulOverflow, "mul")
        if product == 0:
            return type(self)(0)
        return type(self)((product - 1) // self.ONE + 1)

    def div_down(self: _T, other: _T) -> _T:
        other = self._same(other)
        if other.value == 0:
            raise ZeroDivision(f"{type(self).__name__} division by zero")
        inflated = _checked(self.value * self.ONE, DivInternal, "div")
        return type(self)(inflated // other.value)

    def div_up(self: _T, other: _T) -> _T:
        other = self._same(other)
        if other.value == 0:
            raise ZeroDivision(f"{type(self).__name__} division by zero")
        if self.value == 0:
            return type(self)(0)
        inflated = _checked(self.value * self.ONE, DivInternal, "div")
        return type(self)((inflated - 1) // other.value + 1)

    def complement(self: _T) -> _T:
        """Return 1 - self, or 0 when self >= 1."""
        return type(self)(self.ONE - self.value if self.value < self.ONE else 0)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.value == other.value  # type: ignore[attr-defined]

    def __lt__(self: _T, other: _T) -> bool:
        return self.value < self._same(other).value

    def __le__(self: _T, other: _T) -> bool:
        return self.value <= self._same(other).value

    def __gt__(self: _T, other: _T) -> bool:
        return self.value > self._same(other).value

    def __ge__(self: _T, other: _T) -> bool:
        return self.value >= self._same(other).value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value})"

    def __str__(self) -> str:
        return str(self.to_decimal())


class Bfp(_FixedPoint):
    """18-decimal unsigned fixed point (Balancer FixedPoint).

    Example: 1.5 is stored as 1_500_000_000_000_000_000.
    """

    ONE: ClassVar[int] = ONE_18
    DECIMALS: ClassVar[int] = 18
    MAX_POW_RELATIVE_ERROR: ClassVar[int] = 10000  # 10^-14

    __slots__ = ()

    def _pow_error(self, raw: int) -> int:
        # mul_up(raw, MAX_POW_RELATIVE_ERROR) + 1
        product = raw * self.MAX_POW_RELATIVE_ERROR
        return ((product - 1) // self.ONE + 1 if product > 0 else 0) + 1

    def pow_down(self, exponent: Bfp) -> Bfp:
        """Compute self^exponent, rounded down by the maximum relative error."""
        raw = pow_raw(self.value, exponent.value)
        max_error = self._pow_error(raw)
        return Bfp(raw - max_error if raw >= max_error else 0)

    def pow_up(self, exponent: Bfp) -> Bfp:
        """Compute self^exponent, rounded up by the maximum relative error."""
        raw = pow_raw(self.value, exponent.value)
        return Bfp(raw + self._pow_error(raw))

    def pow_up_v3(self, exponent: Bfp) -> Bfp:
        """Upward power with the exact shortcuts of V3Plus weighted pools.

        Exponents 1, 2 and 4 are computed by repeated `mul_up` instead of the
        ln/exp round trip; everything else falls back to `pow_up`.
        """
        if exponent.value == ONE_18:
            return self
        if exponent.value == 2 * ONE_18:
            return self.mul_up(self)
        if exponent.value == 4 * ONE_18:
            square = self.mul_up(self)
            return square.mul_up(square)
        return self.pow_up(exponent)

    def to_xp(self) -> Bfp38:
        """Widen to 38 decimals (exact)."""
        return Bfp38(self.value * 10**20)


class Bfp38(_FixedPoint):
    """38-decimal unsigned fixed point used for extended-precision terms."""

    ONE: ClassVar[int] = ONE_38
    DECIMALS: ClassVar[int] = 38

    __slots__ = ()


def mul_xp(a: Bfp38, b: Bfp38) -> Bfp38:
    """Multiply two extended-precision values keeping 38 decimals (rounded down)."""
    return a.mul_down(b)


def _split_xp(a: Bfp, b: Bfp38) -> tuple[int, int]:
    if not isinstance(a, Bfp) or not isinstance(b, Bfp38):
        raise TypeError("expected (Bfp, Bfp38) operands")
    b1, b2 = divmod(b.value, 10**19)
    prod1 = _checked(a.value * b1, MulOverflow, "mul_xp_to_np")
    prod2 = _checked(a.value * b2, MulOverflow, "mul_xp_to_np")
    return prod1, prod2


def mul_down_xp_to_np(a: Bfp, b: Bfp38) -> Bfp:
    """Multiply an 18-decimal value by a 38-decimal one into 18 decimals, rounded down."""
    prod1, prod2 = _split_xp(a, b)
    return Bfp((prod1 + prod2 // 10**19) // 10**19)


def mul_up_xp_to_np(a: Bfp, b: Bfp38) -> Bfp:
    """Multiply an 18-decimal value by a 38-decimal one into 18 decimals, rounded up.

    b is split at 10^19 and the low partial product is floored before the
    final ceiling, so a product made only of low digits can round to 0.
    """
    prod1, prod2 = _split_xp(a, b)
    if prod1 == 0 and prod2 == 0:
        return Bfp(0)
    return Bfp((prod1 + prod2 // 10**19 - 1) // 10**19 + 1)


MAX_IN_RATIO = Bfp.from_wei(3 * 10**17)
MAX_OUT_RATIO = Bfp.from_wei(3 * 10**17)
AMP_PRECISION = 1000
