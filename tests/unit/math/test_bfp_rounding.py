"""Tests for the unsigned fixed-point tiers (Bfp, Bfp38)."""

from decimal import Decimal

import pytest

from baseline_solver.math.errors import (
    AddOverflow,
    DivInternal,
    MulOverflow,
    SubOverflow,
    ZeroDivision,
)
from baseline_solver.math.fixed_point import (
    ONE_18,
    UINT256_MAX,
    Bfp,
    Bfp38,
    mul_down_xp_to_np,
    mul_up_xp_to_np,
)
from baseline_solver.math.parsing import InvalidDecimalError


class TestRoundingDirection:
    """Every operation rounds in its named direction."""

    def test_mul_down_truncates_dust(self) -> None:
        """1 wei * 1 wei rounds down to zero."""
        assert Bfp(1).mul_down(Bfp(1)) == Bfp(0)

    def test_mul_up_rounds_dust_up(self) -> None:
        """1 wei * 1 wei rounds up to one wei."""
        assert Bfp(1).mul_up(Bfp(1)) == Bfp(1)

    def test_mul_up_zero_stays_zero(self) -> None:
        assert Bfp(0).mul_up(Bfp.from_int(5)) == Bfp(0)

    def test_div_down_and_up_bracket_exact_result(self) -> None:
        """1 / 3 rounds to 0.333...3 down and 0.333...4 up."""
        one = Bfp.from_int(1)
        three = Bfp.from_int(3)
        assert one.div_down(three).value == 333333333333333333
        assert one.div_up(three).value == 333333333333333334

    def test_div_up_zero_numerator(self) -> None:
        assert Bfp(0).div_up(Bfp.from_int(7)) == Bfp(0)

    def test_exact_operations_agree(self) -> None:
        """Exact products and quotients give the same result in both directions."""
        a = Bfp.from_str("1.5")
        b = Bfp.from_int(2)
        assert a.mul_down(b) == a.mul_up(b) == Bfp.from_int(3)
        assert Bfp.from_int(3).div_down(b) == Bfp.from_int(3).div_up(b) == a


class TestCheckedArithmetic:
    """Overflow, underflow and division by zero raise typed errors."""

    def test_add_overflow(self) -> None:
        with pytest.raises(AddOverflow):
            Bfp(UINT256_MAX).add(Bfp(1))

    def test_sub_underflow(self) -> None:
        """Subtraction never clamps at zero."""
        with pytest.raises(SubOverflow):
            Bfp(1).sub(Bfp(2))

    def test_mul_overflow(self) -> None:
        with pytest.raises(MulOverflow):
            Bfp(2**200).mul_down(Bfp(2**100))

    def test_div_internal_overflow(self) -> None:
        """Scaling the dividend by 1e18 must stay in uint256."""
        with pytest.raises(DivInternal):
            Bfp(2**250).div_down(Bfp(1))

    @pytest.mark.parametrize("method", ["div_down", "div_up"])
    def test_division_by_zero(self, method: str) -> None:
        with pytest.raises(ZeroDivision):
            getattr(Bfp.from_int(1), method)(Bfp(0))

    def test_zero_division_is_a_zero_division_error(self) -> None:
        with pytest.raises(ZeroDivisionError):
            Bfp.from_int(1).div_down(Bfp(0))


class TestComplement:
    """Tests for complement (1 - x)."""

    def test_complement_below_one(self) -> None:
        assert Bfp.from_str("0.3").complement() == Bfp.from_str("0.7")

    @pytest.mark.parametrize("value", ["1", "1.2", "1000"])
    def test_complement_clamps_at_zero(self, value: str) -> None:
        assert Bfp.from_str(value).complement() == Bfp(0)


class TestConstruction:
    """Tests for constructors from strings and decimals."""

    def test_from_str_exact(self) -> None:
        assert Bfp.from_str("1.5").value == 15 * 10**17
        assert Bfp38.from_str("1").value == 10**38

    def test_from_str_rejects_excess_digits(self) -> None:
        with pytest.raises(InvalidDecimalError):
            Bfp.from_str("0.0000000000000000001")

    def test_from_decimal_rounds_half_up(self) -> None:
        assert Bfp.from_decimal(Decimal("0.003")).value == 3 * 10**15
        assert Bfp.from_decimal(Decimal("0.0000000000000000005")).value == 1

    def test_from_decimal_rejects_negative(self) -> None:
        with pytest.raises(ValueError):
            Bfp.from_decimal(Decimal("-0.1"))

    def test_to_xp_is_exact(self) -> None:
        assert Bfp.from_str("0.25").to_xp() == Bfp38.from_str("0.25")


class TestPrecisionTiers:
    """Bfp and Bfp38 do not mix implicitly."""

    def test_mixing_tiers_raises(self) -> None:
        with pytest.raises(TypeError):
            Bfp.from_int(1).add(Bfp38.from_int(1))  # type: ignore[arg-type]

    def test_comparison_across_tiers_raises(self) -> None:
        with pytest.raises(TypeError):
            Bfp.from_int(1) < Bfp38.from_int(1)  # type: ignore[operator]

    def test_cross_precision_product(self) -> None:
        """2 * 0.5 in mixed precision is exactly 1 in both directions."""
        a = Bfp.from_int(2)
        b = Bfp38.from_str("0.5")
        assert mul_down_xp_to_np(a, b) == Bfp(ONE_18)
        assert mul_up_xp_to_np(a, b) == Bfp(ONE_18)

    def test_cross_precision_rounding(self) -> None:
        """The low 19 digits of b are floored before the final rounding.

        1 wei times 1e-38 is 0 in both directions. Once b reaches the high
        half (1e-19 and above) the up-rounded product is 1 wei.
        """
        assert mul_down_xp_to_np(Bfp(1), Bfp38(1)) == Bfp(0)
        assert mul_up_xp_to_np(Bfp(1), Bfp38(1)) == Bfp(0)
        assert mul_down_xp_to_np(Bfp(1), Bfp38(10**19 + 1)) == Bfp(0)
        assert mul_up_xp_to_np(Bfp(1), Bfp38(10**19 + 1)) == Bfp(1)


class TestPow:
    """Tests for the power functions."""

    def test_pow_bounds_bracket_exact(self) -> None:
        """pow_down <= x^y <= pow_up with a relative error of about 1e-14."""
        base = Bfp.from_int(2)
        exponent = Bfp.from_int(2)
        down = base.pow_down(exponent)
        up = base.pow_up(exponent)
        exact = 4 * ONE_18
        assert down.value <= exact <= up.value
        assert up.value - down.value < ONE_18 // 10**12

    def test_pow_up_v3_exact_shortcuts(self) -> None:
        """Exponents 1, 2 and 4 avoid the ln/exp error margin."""
        base = Bfp.from_str("1.5")
        assert base.pow_up_v3(Bfp.from_int(1)) == base
        assert base.pow_up_v3(Bfp.from_int(2)) == Bfp.from_str("2.25")
        assert base.pow_up_v3(Bfp.from_int(4)) == Bfp.from_str("5.0625")

    def test_pow_up_v3_falls_back(self) -> None:
        base = Bfp.from_int(2)
        exponent = Bfp.from_str("0.5")
        assert base.pow_up_v3(exponent) == base.pow_up(exponent)

    def test_zero_exponent(self) -> None:
        assert Bfp.from_int(7).pow_down(Bfp(0)).value <= ONE_18
        assert Bfp.from_int(7).pow_up(Bfp(0)).value >= ONE_18
