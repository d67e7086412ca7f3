"""Mathematical primitives for pool pricing.

- Bfp / Bfp38: unsigned fixed point at 18 and 38 decimals
- signed_fixed_point: int256 fixed point for the Gyroscope E-CLP
- log_exp_math: ln/exp/pow backing the weighted pool
- sqrt: Gyroscope fixed-point square root
"""

from baseline_solver.math.errors import FixedPointError
from baseline_solver.math.fixed_point import Bfp, Bfp38
from baseline_solver.math.parsing import InvalidDecimalError, format_fixed, parse_fixed
from baseline_solver.math.sqrt import gyro_pool_math_sqrt

__all__ = [
    "Bfp",
    "Bfp38",
    "FixedPointError",
    "InvalidDecimalError",
    "format_fixed",
    "gyro_pool_math_sqrt",
    "parse_fixed",
]
