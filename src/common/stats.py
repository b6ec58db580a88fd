# ABOUTME: Small numeric helpers shared by the analytics modules.
# ABOUTME: Provides half-up rounding, fixed-point formatting, and zero-guarded averages.

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up, matching dashboard display rounding."""
    return int(math.floor(value + 0.5))


def safe_mean(values: Iterable[float]) -> Optional[float]:
    items = [float(v) for v in values]
    if not items:
        return None
    return sum(items) / len(items)


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def format_fixed(value: float, digits: int = 1) -> str:
    """Fixed-point string rounding the exact binary value half-up (1.25 -> "1.3")."""
    quantum = Decimal(1).scaleb(-digits)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))
