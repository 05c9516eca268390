"""
Trend Analysis: Summary Metrics and Bias Zones

Works on the finished per-point AHMA dataset.

METRICS
    Current bias     Bias of the last point (NEUTRAL if it has no AHMA)
    Slope strength   Percent change of AHMA across the last 8 points
    Pullback z-score Standardized close-to-AHMA gap of the last point
                     relative to the last 20 points

    Each metric looks only at a bounded trailing window and reports None
    (unavailable) when too few points carry an AHMA value.

ZONES
    Run-length encoding of the bias over the points that carry an AHMA
    value. Adjacent zones do not share points; single-point zones have
    nothing to shade and are dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
from scipy import stats

from ahma.config import Config, MetricTone, TrendBias
from ahma.volatility import standard_deviation

logger = logging.getLogger(__name__)


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class IndicatorPoint:
    """
    One row of the AHMA dataset.

    `ahma` and `bias` are None inside the warm-up window.
    """
    index: int
    timestamp: pd.Timestamp
    label: str
    close: float
    ahma: Optional[float] = None
    bias: Optional[TrendBias] = None

    @property
    def has_ahma(self) -> bool:
        return self.ahma is not None

    @property
    def distance(self) -> Optional[float]:
        """close - ahma"""
        if self.ahma is None:
            return None
        return self.close - self.ahma


@dataclass(frozen=True)
class TrendZone:
    """Maximal run of consecutive points sharing one bias."""
    start_label: str
    end_label: str
    bias: TrendBias
    start_index: int
    end_index: int

    @property
    def length(self) -> int:
        """Number of points covered."""
        return self.end_index - self.start_index + 1


@dataclass
class TrendMetrics:
    """
    Summary readings over the trailing end of the dataset.

    None means unavailable, which is distinct from a computed 0.0.
    """
    bias: TrendBias
    slope_percent: Optional[float]
    pullback_zscore: Optional[float]
    slope_points: int = 0
    pullback_points: int = 0
    notes: List[str] = field(default_factory=list)

    @property
    def slope_tone(self) -> MetricTone:
        if self.slope_percent is None:
            return MetricTone.NEUTRAL
        return MetricTone.BULLISH if self.slope_percent >= 0 else MetricTone.BEARISH

    @property
    def pullback_tone(self) -> MetricTone:
        # Stretched below the line reads as a pullback, not a reversal
        if self.pullback_zscore is None or self.pullback_zscore < 0:
            return MetricTone.NEUTRAL
        return MetricTone.BULLISH

    def format_bias(self) -> str:
        return self.bias.value.capitalize()

    def format_slope(self) -> str:
        if self.slope_percent is None:
            return "n/a"
        sign = "+" if self.slope_percent >= 0 else ""
        return f"{sign}{self.slope_percent:.2f}%"

    def format_pullback(self) -> str:
        if self.pullback_zscore is None:
            return "n/a"
        return f"{self.pullback_zscore:.2f}"


# =============================================================================
# BIAS CLASSIFICATION
# =============================================================================

def classify_bias(close: float, ahma: Optional[float]) -> Optional[TrendBias]:
    """BULLISH if close > ahma, BEARISH otherwise, None without an AHMA value."""
    if ahma is None:
        return None
    return TrendBias.BULLISH if close > ahma else TrendBias.BEARISH


# =============================================================================
# METRICS
# =============================================================================

class MetricsDeriver:
    """
    Stateless summary metrics over an IndicatorPoint sequence.

    Windows are taken over the last N calendar points first and then
    filtered to points carrying an AHMA value.
    """

    def __init__(
        self,
        slope_window: int = Config.SLOPE_WINDOW,
        pullback_window: int = Config.PULLBACK_WINDOW,
        pullback_min_points: int = Config.PULLBACK_MIN_POINTS
    ):
        self.slope_window = slope_window
        self.pullback_window = pullback_window
        self.pullback_min_points = pullback_min_points

    @staticmethod
    def _trailing(points: Sequence[IndicatorPoint], window: int) -> List[IndicatorPoint]:
        return [p for p in points[-window:] if p.has_ahma]

    @staticmethod
    def current_bias(points: Sequence[IndicatorPoint]) -> TrendBias:
        """Bias of the newest point."""
        if not points or points[-1].bias is None:
            return TrendBias.NEUTRAL
        return points[-1].bias

    def slope_strength(self, points: Sequence[IndicatorPoint]) -> Optional[float]:
        """
        Percent change of AHMA between the first and last qualifying point.

        Returns None with fewer than 2 qualifying points, or when the
        first AHMA value is 0.
        """
        window = self._trailing(points, self.slope_window)
        if len(window) < Config.SLOPE_MIN_POINTS:
            return None

        first = window[0].ahma
        last = window[-1].ahma
        if first == 0:
            return None
        return (last - first) / first * 100

    def pullback_zscore(self, points: Sequence[IndicatorPoint]) -> Optional[float]:
        """
        Z-score of the newest close-to-AHMA distance.

        Returns None with fewer than `pullback_min_points` qualifying
        points, and exactly 0.0 when the distances do not vary.
        """
        window = self._trailing(points, self.pullback_window)
        if len(window) < self.pullback_min_points:
            return None

        distances = np.array([p.distance for p in window], dtype=float)
        if standard_deviation(distances) == 0:
            return 0.0
        return float(stats.zscore(distances, ddof=0)[-1])

    def derive(self, points: Sequence[IndicatorPoint]) -> TrendMetrics:
        """
        Compute all three metrics.

        Parameters
        ----------
        points : Sequence[IndicatorPoint]
            Finished dataset, oldest first

        Returns
        -------
        TrendMetrics
        """
        slope = self.slope_strength(points)
        zscore = self.pullback_zscore(points)

        notes = []
        if slope is None:
            notes.append("Slope strength unavailable: not enough AHMA points")
        if zscore is None:
            notes.append("Pullback z-score unavailable: not enough AHMA points")

        return TrendMetrics(
            bias=self.current_bias(points),
            slope_percent=slope,
            pullback_zscore=zscore,
            slope_points=len(self._trailing(points, self.slope_window)),
            pullback_points=len(self._trailing(points, self.pullback_window)),
            notes=notes
        )


# =============================================================================
# ZONES
# =============================================================================

class ZoneSegmenter:
    """Single left-to-right pass grouping points into bias zones."""

    def __init__(self, drop_degenerate: bool = True):
        self.drop_degenerate = drop_degenerate

    def segment(self, points: Sequence[IndicatorPoint]) -> List[TrendZone]:
        """
        Build trend zones.

        Parameters
        ----------
        points : Sequence[IndicatorPoint]
            Finished dataset, oldest first

        Returns
        -------
        List[TrendZone]
            Ordered by start, non-overlapping
        """
        zones = []
        start: Optional[IndicatorPoint] = None
        last: Optional[IndicatorPoint] = None

        for point in points:
            if not point.has_ahma:
                continue

            if start is None:
                start = point
            elif point.bias != start.bias:
                zones.append(self._zone(start, last))
                start = point
            last = point

        if start is not None:
            zones.append(self._zone(start, last))

        if self.drop_degenerate:
            zones = [z for z in zones if z.start_index != z.end_index]

        logger.debug(f"Segmented {len(zones)} trend zones")
        return zones

    @staticmethod
    def _zone(start: IndicatorPoint, end: IndicatorPoint) -> TrendZone:
        return TrendZone(
            start_label=start.label,
            end_label=end.label,
            bias=start.bias,
            start_index=start.index,
            end_index=end.index
        )
