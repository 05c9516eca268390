"""
Adaptive Hull Moving Average Engine

Composes the AHMA pipeline end to end:

    SeriesGenerator -> HullSmoother  -+
                    -> Volatility    -+-> AdaptiveBlender -> bias per point
                                                         -> MetricsDeriver
                                                         -> ZoneSegmenter

The free functions `compute_ahma_dataset`, `compute_trend_zones` and
`compute_metrics` are pure: the same inputs always give the same output and
nothing is cached. `AHMAEngine` is the caller-side wrapper for interactive
use; it owns one generated series and memoizes full results per parameter
tuple, so moving a control back to a previous value costs nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ahma.adaptive_blender import AdaptiveBlender
from ahma.config import (
    VERSION,
    Config,
    IndicatorParameters,
    NormalizationMode,
)
from ahma.data_generator import PricePoint, generate_price_series
from ahma.moving_averages import HullSmoother
from ahma.trend_analysis import (
    IndicatorPoint,
    MetricsDeriver,
    TrendMetrics,
    TrendZone,
    ZoneSegmenter,
    classify_bias,
)
from ahma.volatility import GlobalMaxNormalizer, VolatilityEstimator, VolatilityNormalizer

logger = logging.getLogger(__name__)


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass
class AHMAOutput:
    """
    Complete output of one AHMA computation.

    Contains the per-point dataset, the derived zones and metrics, and the
    intermediate series for inspection.
    """
    points: List[IndicatorPoint]
    zones: List[TrendZone]
    metrics: TrendMetrics

    parameters: IndicatorParameters
    normalization: NormalizationMode

    hma: List[Optional[float]] = field(repr=False)
    volatility: np.ndarray = field(repr=False)
    adaptive_factors: np.ndarray = field(repr=False)

    first_ahma_index: Optional[int] = None
    max_volatility: float = 0.0
    generated_at: str = ""
    version: str = VERSION

    @property
    def ahma(self) -> List[Optional[float]]:
        return [p.ahma for p in self.points]

    @property
    def period(self) -> Tuple[str, str]:
        """(first label, last label)"""
        if not self.points:
            return "", ""
        return self.points[0].label, self.points[-1].label

    def to_frame(self) -> pd.DataFrame:
        """
        Dataset as a DataFrame indexed by timestamp.

        The `ahma` column uses the nullable Float64 dtype so warm-up rows
        hold <NA> instead of NaN.
        """
        df = pd.DataFrame(
            {
                'label': [p.label for p in self.points],
                'close': [p.close for p in self.points],
                'ahma': pd.array([p.ahma for p in self.points], dtype="Float64"),
                'bias': [p.bias.value if p.bias is not None else None for p in self.points],
                'volatility': self.volatility,
                'adaptive_factor': self.adaptive_factors,
            },
            index=pd.DatetimeIndex([p.timestamp for p in self.points], name='Date')
        )
        return df


# =============================================================================
# PIPELINE STAGES
# =============================================================================

def first_present_index(values: Sequence[Optional[float]]) -> Optional[int]:
    """Index of the first non-None value, None if all are absent."""
    for i, v in enumerate(values):
        if v is not None:
            return i
    return None


def build_indicator_points(
    series: Sequence[PricePoint],
    ahma: Sequence[Optional[float]]
) -> List[IndicatorPoint]:
    """Attach AHMA values and bias to every price point."""
    return [
        IndicatorPoint(
            index=i,
            timestamp=price.timestamp,
            label=price.label,
            close=price.close,
            ahma=value,
            bias=classify_bias(price.close, value)
        )
        for i, (price, value) in enumerate(zip(series, ahma))
    ]


def run_pipeline(
    series: Sequence[PricePoint],
    parameters: IndicatorParameters,
    normalizer: Optional[VolatilityNormalizer] = None
) -> AHMAOutput:
    """
    Run every stage on a price series.

    Parameters
    ----------
    series : Sequence[PricePoint]
        Input closes, oldest first
    parameters : IndicatorParameters
        Already normalized parameters
    normalizer : VolatilityNormalizer, optional
        Volatility scaling strategy (default: GlobalMaxNormalizer)

    Returns
    -------
    AHMAOutput
    """
    if not series:
        raise ValueError("Price series is empty")

    normalizer = normalizer if normalizer is not None else GlobalMaxNormalizer()
    closes = [p.close for p in series]

    # 1. Hull moving average
    smoother = HullSmoother(parameters.base_period)
    hma = smoother.smooth(closes)

    # 2. Rolling volatility
    volatility = VolatilityEstimator(parameters.vol_period).series(closes)

    # 3. Adaptive blend
    blender = AdaptiveBlender(parameters.sensitivity, normalizer)
    factors = blender.factors(volatility)
    ahma = blender.blend(hma, volatility)

    # 4. Bias, zones, metrics
    points = build_indicator_points(series, ahma)
    zones = ZoneSegmenter().segment(points)
    metrics = MetricsDeriver().derive(points)

    first_index = first_present_index(ahma)
    logger.debug(
        f"AHMA warm-up ends at index {first_index} "
        f"(HMA passes {smoother.pass_lengths}, vol period {parameters.vol_period})"
    )

    return AHMAOutput(
        points=points,
        zones=zones,
        metrics=metrics,
        parameters=parameters,
        normalization=normalizer.mode,
        hma=hma,
        volatility=volatility,
        adaptive_factors=factors,
        first_ahma_index=first_index,
        max_volatility=float(volatility.max()),
        generated_at=datetime.now().isoformat(),
    )


# =============================================================================
# PUBLIC API
# =============================================================================

def compute_ahma_dataset(
    base_period: float = Config.DEFAULT_BASE_PERIOD,
    sensitivity: float = Config.DEFAULT_SENSITIVITY,
    series: Optional[Sequence[PricePoint]] = None,
    normalizer: Optional[VolatilityNormalizer] = None
) -> List[IndicatorPoint]:
    """
    Compute the per-point AHMA dataset.

    Parameters
    ----------
    base_period : float
        Hull period, rounded and clamped to [14, 120]
    sensitivity : float
        Adaptive sensitivity, clamped to [0.10, 0.85]
    series : Sequence[PricePoint], optional
        Input series (default: the standard 220-point series, seed 35)
    normalizer : VolatilityNormalizer, optional
        Volatility scaling strategy (default: GlobalMaxNormalizer)

    Returns
    -------
    List[IndicatorPoint]
        One point per input point
    """
    if series is None:
        series = generate_price_series()
    parameters = IndicatorParameters.from_raw(base_period, sensitivity)
    return run_pipeline(series, parameters, normalizer).points


def compute_trend_zones(points: Sequence[IndicatorPoint]) -> List[TrendZone]:
    """Bias zones of a finished dataset."""
    return ZoneSegmenter().segment(points)


def compute_metrics(points: Sequence[IndicatorPoint]) -> TrendMetrics:
    """Current bias, slope strength and pullback z-score of a finished dataset."""
    return MetricsDeriver().derive(points)


# =============================================================================
# ENGINE
# =============================================================================

class AHMAEngine:
    """
    Memoizing orchestrator around one price series.

    Usage
    -----
    >>> engine = AHMAEngine(seed=35)
    >>> output = engine.process(base_period=55, sensitivity=0.35)
    >>> print(output.metrics.format_slope())
    """

    def __init__(
        self,
        series: Optional[Sequence[PricePoint]] = None,
        length: int = Config.DATA_LENGTH,
        seed: float = Config.DEFAULT_SEED,
        normalizer: Optional[VolatilityNormalizer] = None
    ):
        """
        Initialize the engine.

        Parameters
        ----------
        series : Sequence[PricePoint], optional
            Price series to analyze; generated from (length, seed) if omitted
        length : int
            Number of points to generate
        seed : float
            Generator seed
        normalizer : VolatilityNormalizer, optional
            Volatility scaling strategy (default: GlobalMaxNormalizer)
        """
        if series is None:
            if length <= 0:
                raise ValueError(f"length must be positive, got {length}")
            series = generate_price_series(length=length, seed=seed)

        self.series: List[PricePoint] = list(series)
        self.normalizer = normalizer if normalizer is not None else GlobalMaxNormalizer()
        self._cache: Dict[IndicatorParameters, AHMAOutput] = {}

        logger.info(
            f"AHMAEngine initialized with {len(self.series)} points, "
            f"{self.normalizer.mode.value} normalization"
        )

    def process(
        self,
        base_period: float = Config.DEFAULT_BASE_PERIOD,
        sensitivity: float = Config.DEFAULT_SENSITIVITY
    ) -> AHMAOutput:
        """
        Compute (or return the cached) output for a parameter pair.

        Parameters
        ----------
        base_period : float
            Hull period
        sensitivity : float
            Adaptive sensitivity

        Returns
        -------
        AHMAOutput
        """
        parameters = IndicatorParameters.from_raw(base_period, sensitivity)

        cached = self._cache.get(parameters)
        if cached is not None:
            logger.debug(f"Cache hit for {parameters.as_tuple()}")
            return cached

        logger.info(
            f"Computing AHMA period={parameters.base_period} "
            f"sensitivity={parameters.sensitivity:.2f}"
        )
        output = run_pipeline(self.series, parameters, self.normalizer)
        self._cache[parameters] = output
        return output

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def clear_cache(self) -> None:
        self._cache.clear()
