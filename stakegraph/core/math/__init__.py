"""
Core math modules для stakegraph

Точная арифметика по shares: произвольная точность, без float.
"""

from stakegraph.core.math.shares import (
    ZERO_RATIO,
    ZERO_SHARES,
    has_stake,
    opposition_ratio,
    parse_shares,
    ratio_to_percent,
)

__all__ = [
    # Constants
    "ZERO_RATIO",
    "ZERO_SHARES",
    # Functions
    "has_stake",
    "opposition_ratio",
    "parse_shares",
    "ratio_to_percent",
]
