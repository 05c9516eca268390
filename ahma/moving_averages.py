"""
Weighted and Hull Moving Averages

Both averages work on sequences that may contain absent values (None).
Absent values mark warm-up gaps and propagate: any window touching a gap
yields None, so "no data yet" is never confused with a computed zero.

HULL MOVING AVERAGE (Alan Hull, 2005)
    HMA(n) = WMA( 2 * WMA(n/2) - WMA(n), sqrt(n) )

    The half-length average leads the full-length one; doubling it and
    subtracting the full average cancels most of the lag, and the final
    sqrt(n) pass smooths the result.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ahma.config import normalize_period

logger = logging.getLogger(__name__)

OptionalSeries = List[Optional[float]]


# =============================================================================
# WEIGHTED MOVING AVERAGE
# =============================================================================

def weighted_moving_average(
    values: Sequence[Optional[float]],
    period: int,
    index: int
) -> Optional[float]:
    """
    Linearly weighted moving average of the window ending at index.

    The newest sample gets weight `period`, the oldest weight 1, and the
    weighted sum is divided by period * (period + 1) / 2.

    Parameters
    ----------
    values : Sequence[Optional[float]]
        Input series, None for absent values
    period : int
        Window length; period <= 1 returns values[index] unchanged
    index : int
        Position of the newest sample

    Returns
    -------
    Optional[float]
        None if fewer than `period` samples exist or any sample is absent
    """
    if period <= 1:
        return values[index] if 0 <= index < len(values) else None

    if index + 1 < period:
        return None

    window = values[index - period + 1:index + 1]
    if any(v is None for v in window):
        return None

    weights = np.arange(1, period + 1, dtype=float)
    denominator = period * (period + 1) / 2
    return float(np.dot(np.asarray(window, dtype=float), weights) / denominator)


def wma_series(values: Sequence[Optional[float]], period: int) -> OptionalSeries:
    """Pointwise WMA over the whole series (same length as values)."""
    return [weighted_moving_average(values, period, i) for i in range(len(values))]


# =============================================================================
# HULL MOVING AVERAGE
# =============================================================================

class HullSmoother:
    """
    Three-pass Hull moving average.

    Pass lengths are derived once from the requested period:
        period      = round(period), minimum 2
        half_period = round(period / 2), minimum 2
        sqrt_period = round(sqrt(period)), minimum 2
    """

    def __init__(self, period: float):
        self.period = normalize_period(period)
        self.half_period = normalize_period(self.period / 2)
        self.sqrt_period = normalize_period(math.sqrt(self.period))

    @property
    def pass_lengths(self) -> Tuple[int, int, int]:
        """(half_period, period, sqrt_period)"""
        return self.half_period, self.period, self.sqrt_period

    @property
    def warmup(self) -> int:
        """
        Number of leading absent values for a gap-free input.

        The raw Hull series first exists at index period - 1 (the longer of
        the two WMAs), and the final pass needs sqrt_period of those.
        """
        return self.period + self.sqrt_period - 2

    def raw_hull(self, values: Sequence[Optional[float]]) -> OptionalSeries:
        """2 * WMA(half) - WMA(full), None where either is absent."""
        wma_half = wma_series(values, self.half_period)
        wma_full = wma_series(values, self.period)

        diff = []
        for half, full in zip(wma_half, wma_full):
            if half is None or full is None:
                diff.append(None)
            else:
                diff.append(2 * half - full)
        return diff

    def smooth(self, values: Sequence[Optional[float]]) -> OptionalSeries:
        """
        Compute the Hull moving average.

        Parameters
        ----------
        values : Sequence[Optional[float]]
            Input series

        Returns
        -------
        List[Optional[float]]
            HMA values, same length as input
        """
        diff = self.raw_hull(values)
        hma = wma_series(diff, self.sqrt_period)
        logger.debug(
            f"HMA({self.period}) passes={self.pass_lengths} warmup={self.warmup}"
        )
        return hma


def hull_moving_average(values: Sequence[Optional[float]], period: float) -> OptionalSeries:
    """Functional form of HullSmoother(period).smooth(values)."""
    return HullSmoother(period).smooth(values)
