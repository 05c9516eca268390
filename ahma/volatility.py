"""
Volatility Estimation and Normalization

Rolling population standard deviation of closing prices, plus the
strategies that scale it into the [0, 1] ratio that drives the adaptive
blend.

NORMALIZATION
    GlobalMaxNormalizer    volatility / max(volatility over the whole series)
    TrailingMaxNormalizer  volatility / max(volatility over a trailing window)

    The global variant looks ahead: an early ratio depends on the largest
    volatility seen anywhere in the series. It suits a fixed historical
    window replayed for display. The trailing variant only uses data up to
    each index and is the one to use for streaming input.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
import pandas as pd

from ahma.config import NormalizationMode

logger = logging.getLogger(__name__)


# =============================================================================
# STANDARD DEVIATION
# =============================================================================

def standard_deviation(values: Sequence[float]) -> float:
    """
    Population standard deviation sqrt(mean((x - mean(x))^2)).

    Returns exactly 0.0 for an empty window or a window of identical
    values, never NaN.
    """
    arr = np.asarray(values, dtype=float)
    if arr.size == 0 or np.all(arr == arr[0]):
        return 0.0
    return float(np.std(arr, ddof=0))


# =============================================================================
# VOLATILITY ESTIMATOR
# =============================================================================

class VolatilityEstimator:
    """
    Rolling population standard deviation of closes.

    Indices without a full window report 0.0 rather than an absent value:
    volatility is always a usable number.
    """

    def __init__(self, period: int):
        if period < 1:
            raise ValueError(f"volatility period must be >= 1, got {period}")
        self.period = int(period)

    def at(self, closes: Sequence[float], index: int) -> float:
        """Volatility of the window ending at index."""
        if index + 1 < self.period:
            return 0.0
        return standard_deviation(closes[index - self.period + 1:index + 1])

    def series(self, closes: Sequence[float]) -> np.ndarray:
        """
        Volatility for every index.

        Parameters
        ----------
        closes : Sequence[float]
            Closing prices

        Returns
        -------
        np.ndarray
            Same length as closes, 0.0 inside the warm-up window
        """
        close = pd.Series(closes, dtype=float)
        vol = close.rolling(window=self.period, min_periods=self.period).std(ddof=0)
        # Rolling moments can leave residue around 1e-15 on flat windows
        flat = close.rolling(window=self.period, min_periods=self.period).apply(
            np.ptp, raw=True
        ) == 0
        vol[flat] = 0.0
        return vol.fillna(0.0).to_numpy()


def rolling_volatility(closes: Sequence[float], period: int) -> np.ndarray:
    """Functional form of VolatilityEstimator(period).series(closes)."""
    return VolatilityEstimator(period).series(closes)


# =============================================================================
# NORMALIZATION STRATEGIES
# =============================================================================

class VolatilityNormalizer:
    """Maps a volatility series to ratios in [0, 1]."""

    mode: NormalizationMode

    def reference(self, volatility: np.ndarray) -> np.ndarray:
        """Per-index maximum each volatility value is divided by."""
        raise NotImplementedError

    def normalize(self, volatility: Sequence[float]) -> np.ndarray:
        vol = np.asarray(volatility, dtype=float)
        if vol.size == 0:
            return vol
        ref = self.reference(vol)
        ratios = np.zeros_like(vol)
        np.divide(vol, ref, out=ratios, where=ref > 0)
        return ratios


class GlobalMaxNormalizer(VolatilityNormalizer):
    """Divide by the single largest volatility of the whole series."""

    mode = NormalizationMode.GLOBAL_MAX

    def reference(self, volatility: np.ndarray) -> np.ndarray:
        max_vol = max(0.0, float(volatility.max()))
        logger.debug(f"Global max volatility: {max_vol:.4f}")
        return np.full_like(volatility, max_vol)

    def __repr__(self) -> str:
        return "GlobalMaxNormalizer()"


class TrailingMaxNormalizer(VolatilityNormalizer):
    """Divide by the largest volatility of the trailing `window` values."""

    mode = NormalizationMode.TRAILING_MAX

    def __init__(self, window: int):
        if window < 1:
            raise ValueError(f"trailing window must be >= 1, got {window}")
        self.window = int(window)

    def reference(self, volatility: np.ndarray) -> np.ndarray:
        return (
            pd.Series(volatility)
            .rolling(window=self.window, min_periods=1)
            .max()
            .clip(lower=0.0)
            .to_numpy()
        )

    def __repr__(self) -> str:
        return f"TrailingMaxNormalizer(window={self.window})"
