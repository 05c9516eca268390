"""
Synthetic Price Series Generator

Produces a deterministic, reproducible daily closing-price path for the
AHMA engine. No market data is fetched: the same (length, seed) pair always
yields the same closes.

PRICE PATH
    price[i] = max(PRICE_FLOOR, price[i-1] + 0.6 * trend + noise + 0.2 * momentum)

    trend    = 0.7 * sin(i / 16) + 0.4 * cos(i / 34)
    noise    = (rand() - 0.5) * 1.8
    momentum = 1.05 inside the trending phase (70, 130), 0.45 elsewhere

    Each close is rounded to 2 decimals; the unrounded price carries forward.

RANDOM STREAM
    A trigonometric hash: x = sin(state) * 10000, emit frac(x), state += 1.
    It is not a statistical RNG, only a reproducible source of noise.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, List, Optional, Union

import pandas as pd

from ahma.config import Config

logger = logging.getLogger(__name__)


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class PricePoint:
    """One simulated daily close."""
    timestamp: pd.Timestamp
    close: float

    @property
    def label(self) -> str:
        """Short axis label, e.g. 'Mar 04'."""
        return self.timestamp.strftime(Config.LABEL_FORMAT)


# =============================================================================
# RANDOM STREAM
# =============================================================================

def seeded_random_stream(seed: float) -> Iterator[float]:
    """
    Infinite stream of pseudo-random values in [0, 1).

    Parameters
    ----------
    seed : float
        Initial hash state

    Yields
    ------
    float
        Fractional part of sin(state) * 10000
    """
    state = seed
    while True:
        x = math.sin(state) * 10000
        state += 1
        yield x - math.floor(x)


# =============================================================================
# SERIES GENERATOR
# =============================================================================

class SeriesGenerator:
    """
    Deterministic synthetic price path with a mid-series trending phase.

    Usage
    -----
    >>> generator = SeriesGenerator(seed=35)
    >>> series = generator.generate(220)
    """

    def __init__(
        self,
        seed: float = Config.DEFAULT_SEED,
        base_price: float = Config.BASE_PRICE,
        price_floor: float = Config.PRICE_FLOOR
    ):
        self.seed = seed
        self.base_price = base_price
        self.price_floor = price_floor

    @staticmethod
    def trend_component(index: int) -> float:
        """Deterministic oscillation from two waves of different periods."""
        return (
            math.sin(index / Config.TREND_FAST_PERIOD) * Config.TREND_FAST_AMPLITUDE
            + math.cos(index / Config.TREND_SLOW_PERIOD) * Config.TREND_SLOW_AMPLITUDE
        )

    @staticmethod
    def momentum_component(index: int) -> float:
        """Regime bonus, larger during the trending phase."""
        if Config.MOMENTUM_START < index < Config.MOMENTUM_END:
            return Config.MOMENTUM_TRENDING
        return Config.MOMENTUM_BASE

    def closes(self, length: int) -> List[float]:
        """
        Generate rounded closing prices.

        Parameters
        ----------
        length : int
            Number of points

        Returns
        -------
        List[float]
            Closes ordered oldest to newest
        """
        if length < 0:
            raise ValueError(f"length must be non-negative, got {length}")

        rand = seeded_random_stream(self.seed)
        price = self.base_price
        closes = []

        for index in range(length):
            noise = (next(rand) - 0.5) * Config.NOISE_SCALE
            trend = self.trend_component(index)
            momentum = self.momentum_component(index)
            price = max(
                self.price_floor,
                price + trend * Config.TREND_SCALE + noise + momentum * Config.MOMENTUM_SCALE
            )
            closes.append(round(price, Config.PRICE_DECIMALS))

        return closes

    def generate(
        self,
        length: int = Config.DATA_LENGTH,
        end: Optional[Union[str, datetime, pd.Timestamp]] = None
    ) -> List[PricePoint]:
        """
        Generate the full (timestamp, close) series.

        Parameters
        ----------
        length : int
            Number of daily points
        end : str, datetime or Timestamp, optional
            Timestamp of the newest point (default: today at midnight).
            Earlier points step back one day each.

        Returns
        -------
        List[PricePoint]
        """
        closes = self.closes(length)
        end_ts = pd.Timestamp(end) if end is not None else pd.Timestamp.today().normalize()
        timestamps = pd.date_range(end=end_ts, periods=length, freq="D")

        series = [
            PricePoint(timestamp=ts, close=close)
            for ts, close in zip(timestamps, closes)
        ]

        if series:
            logger.debug(
                f"Generated {length} points (seed={self.seed}) "
                f"from {series[0].label} to {series[-1].label}"
            )
        return series


def generate_price_series(
    length: int = Config.DATA_LENGTH,
    seed: float = Config.DEFAULT_SEED,
    end: Optional[Union[str, datetime, pd.Timestamp]] = None
) -> List[PricePoint]:
    """Convenience wrapper around SeriesGenerator(seed).generate(length, end)."""
    return SeriesGenerator(seed=seed).generate(length, end=end)


def price_series_to_frame(series: List[PricePoint]) -> pd.DataFrame:
    """Price series as a DataFrame with a DatetimeIndex and a 'Close' column."""
    df = pd.DataFrame(
        {'Close': [p.close for p in series]},
        index=pd.DatetimeIndex([p.timestamp for p in series], name='Date')
    )
    return df
