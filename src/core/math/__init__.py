"""
Core math modules для CLMSR vault core

Целочисленная арифметика с фиксированной точкой (WAD) и ограниченные
трансцендентные функции.
"""

# Fixed-Point Arithmetic
from src.core.math.fixed_point import (
    # Constants
    FIXED_POINT,
    HALF_WAD,
    MAX_EXP_INPUT_WAD,
    MAX_UINT256,
    SCALE_DIFF,
    TRANSCENDENTAL_REL_TOLERANCE,
    WAD,
    FixedPointConstants,
    # Exceptions
    FixedPointDivisionByZero,
    FixedPointDomainError,
    FixedPointError,
    FixedPointOverflow,
    # Conversion
    from_wad,
    from_wad_nearest,
    from_wad_nearest_min1,
    from_wad_round_up,
    to_wad,
    # Multiply / divide
    w_div,
    w_div_nearest,
    w_div_up,
    w_mul,
    w_mul_nearest,
    w_mul_up,
    # Transcendental
    clmsr_cost,
    w_exp,
    w_ln,
    w_ln_up,
)

__all__ = [
    # Fixed-Point — Constants
    "FIXED_POINT",
    "FixedPointConstants",
    "WAD",
    "HALF_WAD",
    "SCALE_DIFF",
    "MAX_EXP_INPUT_WAD",
    "MAX_UINT256",
    "TRANSCENDENTAL_REL_TOLERANCE",
    # Fixed-Point — Exceptions
    "FixedPointError",
    "FixedPointDivisionByZero",
    "FixedPointOverflow",
    "FixedPointDomainError",
    # Fixed-Point — Conversion
    "to_wad",
    "from_wad",
    "from_wad_round_up",
    "from_wad_nearest",
    "from_wad_nearest_min1",
    # Fixed-Point — Multiply / divide
    "w_mul",
    "w_mul_up",
    "w_mul_nearest",
    "w_div",
    "w_div_up",
    "w_div_nearest",
    # Fixed-Point — Transcendental
    "w_exp",
    "w_ln",
    "w_ln_up",
    "clmsr_cost",
]
