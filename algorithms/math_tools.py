import math
from typing import Iterable

import numpy as np


class MathTools:
    """Provides essential mathematical utilities for progression calculations."""

    EPLEY_DIVISOR: float = 30.0

    @staticmethod
    def clamp(value: float, min_value: float, max_value: float) -> float:
        """Clamp ``value`` to the inclusive range [min_value, max_value]."""
        if min_value > max_value:
            raise ValueError("min_value must not exceed max_value")
        return max(min_value, min(value, max_value))

    @staticmethod
    def median(values: Iterable[float]) -> float:
        """Return the median of ``values`` or 0 when empty."""
        data = list(values)
        if not data:
            return 0
        return float(np.median(np.array(data, dtype=float)))

    @staticmethod
    def average(values: Iterable[float]) -> float:
        """Return the arithmetic mean of ``values`` or 0 when empty."""
        data = list(values)
        if not data:
            return 0
        return float(np.mean(np.array(data, dtype=float)))

    @classmethod
    def estimate_one_rep_max(cls, reps: int, load_kg: float) -> float:
        """Return the estimated one-rep max using the Epley formula."""
        return load_kg * (1 + reps / cls.EPLEY_DIVISOR)

    @staticmethod
    def round_half_up(value: float) -> int:
        """Round to the nearest integer with halves rounded up."""
        return int(math.floor(value + 0.5))
