"""
Core math modules для corrnet

Математические примитивы с гарантией численной стабильности.
"""

from src.core.math.numerical_safeguards import (
    # Epsilon constants
    CORRELATION_MAX,
    CORRELATION_MIN,
    EPS_FLOAT_COMPARE_ABS,
    EPS_FLOAT_COMPARE_REL,
    # NaN/Inf checks
    is_valid_float,
    # Epsilon comparisons
    is_close,
    # Utilities
    clamp,
    round_half_away_from_zero,
    # Validation
    validate_correlation,
    validate_in_range,
)

__all__ = [
    # Numerical Safeguards — Constants
    "CORRELATION_MAX",
    "CORRELATION_MIN",
    "EPS_FLOAT_COMPARE_ABS",
    "EPS_FLOAT_COMPARE_REL",
    # Numerical Safeguards — NaN/Inf checks
    "is_valid_float",
    # Numerical Safeguards — Epsilon comparisons
    "is_close",
    # Numerical Safeguards — Utilities
    "clamp",
    "round_half_away_from_zero",
    # Numerical Safeguards — Validation
    "validate_correlation",
    "validate_in_range",
]
