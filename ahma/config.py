"""
Configuration Module for the Adaptive Hull Moving Average Engine

This module centralizes all configuration constants, enumerations and
parameter normalization used throughout the AHMA pipeline.

All "magic numbers" are defined here to ensure:
1. Single source of truth for the synthetic series and indicator constants
2. Easy modification without touching analysis code
3. Transparency in the clamps applied to user supplied parameters
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


# =============================================================================
# SECTION 1: CONFIGURATION
# =============================================================================

class Config:
    """
    Centralized configuration for series generation and indicator parameters.
    """

    # -------------------------------------------------------------------------
    # Synthetic Price Series
    # -------------------------------------------------------------------------
    DATA_LENGTH: int = 220            # One point per simulated day
    DEFAULT_SEED: int = 35
    BASE_PRICE: float = 102.0
    PRICE_FLOOR: float = 35.0         # Price never drops below this
    PRICE_DECIMALS: int = 2

    NOISE_SCALE: float = 1.8          # (rand - 0.5) * NOISE_SCALE
    TREND_FAST_PERIOD: float = 16.0   # sin(i / 16)
    TREND_FAST_AMPLITUDE: float = 0.7
    TREND_SLOW_PERIOD: float = 34.0   # cos(i / 34)
    TREND_SLOW_AMPLITUDE: float = 0.4
    TREND_SCALE: float = 0.6

    MOMENTUM_START: int = 70          # Trending phase is strictly inside
    MOMENTUM_END: int = 130           # (MOMENTUM_START, MOMENTUM_END)
    MOMENTUM_TRENDING: float = 1.05
    MOMENTUM_BASE: float = 0.45
    MOMENTUM_SCALE: float = 0.2

    LABEL_FORMAT: str = "%b %d"       # e.g. "Mar 04"

    # -------------------------------------------------------------------------
    # Indicator Parameters
    # -------------------------------------------------------------------------
    DEFAULT_BASE_PERIOD: int = 55
    MIN_BASE_PERIOD: int = 14
    MAX_BASE_PERIOD: int = 120
    MIN_HULL_PERIOD: int = 2          # Hard floor of every Hull pass

    DEFAULT_SENSITIVITY: float = 0.35
    MIN_SENSITIVITY: float = 0.10
    MAX_SENSITIVITY: float = 0.85
    SENSITIVITY_STEP: float = 0.05

    MAX_ADAPTIVE_FACTOR: float = 0.85  # Blend weight never exceeds this
    MIN_VOL_PERIOD: int = 5

    # -------------------------------------------------------------------------
    # Derived Metrics
    # -------------------------------------------------------------------------
    SLOPE_WINDOW: int = 8
    SLOPE_MIN_POINTS: int = 2
    PULLBACK_WINDOW: int = 20
    PULLBACK_MIN_POINTS: int = 5


# =============================================================================
# SECTION 2: ENUMERATIONS
# =============================================================================

class TrendBias(Enum):
    """Price position relative to the AHMA line."""
    BULLISH = "bullish"     # Close above AHMA
    BEARISH = "bearish"     # Close at or below AHMA
    NEUTRAL = "neutral"     # No AHMA value yet


class MetricTone(Enum):
    """Display tone attached to a summary metric."""
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class NormalizationMode(Enum):
    """How volatility is scaled before it drives the adaptive factor."""
    GLOBAL_MAX = "global_max"       # Whole-series maximum (lookahead)
    TRAILING_MAX = "trailing_max"   # Maximum over a trailing window


# =============================================================================
# SECTION 3: PARAMETERS
# =============================================================================

def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value into [lower, upper]."""
    return max(lower, min(upper, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (27.5 -> 28, 6.5 -> 7)."""
    return int(math.floor(value + 0.5))


def normalize_period(period: float, minimum: int = Config.MIN_HULL_PERIOD) -> int:
    """Round a moving-average length to the nearest integer, at least minimum."""
    return max(minimum, round_half_up(period))


@dataclass(frozen=True)
class IndicatorParameters:
    """
    Validated parameter tuple controlling one AHMA computation.

    Instances are hashable and are used directly as memoization keys.
    """
    base_period: int = Config.DEFAULT_BASE_PERIOD
    sensitivity: float = Config.DEFAULT_SENSITIVITY

    @classmethod
    def from_raw(cls, base_period: float, sensitivity: float) -> 'IndicatorParameters':
        """
        Build parameters from unchecked input, clamping instead of failing.

        Parameters
        ----------
        base_period : float
            Requested Hull period, rounded and clamped to
            [MIN_BASE_PERIOD, MAX_BASE_PERIOD]
        sensitivity : float
            Requested adaptive sensitivity, clamped to
            [MIN_SENSITIVITY, MAX_SENSITIVITY]

        Returns
        -------
        IndicatorParameters
        """
        period = int(clamp(
            normalize_period(base_period),
            Config.MIN_BASE_PERIOD,
            Config.MAX_BASE_PERIOD
        ))
        sens = float(clamp(sensitivity, Config.MIN_SENSITIVITY, Config.MAX_SENSITIVITY))

        if period != base_period:
            logger.warning(f"base_period {base_period} adjusted to {period}")
        if sens != sensitivity:
            logger.warning(f"sensitivity {sensitivity} adjusted to {sens}")

        return cls(base_period=period, sensitivity=sens)

    @property
    def vol_period(self) -> int:
        """Rolling volatility window: max(5, round(base_period / 2))."""
        return volatility_period(self.base_period)

    def as_tuple(self) -> Tuple[int, float]:
        return self.base_period, self.sensitivity


def volatility_period(base_period: float) -> int:
    """Window length of the volatility estimator for a given base period."""
    return max(Config.MIN_VOL_PERIOD, round_half_up(base_period / 2))


DEFAULT_PARAMETERS = IndicatorParameters()
