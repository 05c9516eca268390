"""Shared fixtures for the AHMA test suite."""

from typing import List, Optional, Sequence

import pandas as pd
import pytest

from ahma.data_generator import PricePoint, generate_price_series
from ahma.trend_analysis import IndicatorPoint, classify_bias

FIXED_END = "2024-06-30"


def make_points(
    closes: Sequence[float],
    ahmas: Sequence[Optional[float]]
) -> List[IndicatorPoint]:
    """IndicatorPoints from parallel close/AHMA lists, one day apart."""
    timestamps = pd.date_range(end=FIXED_END, periods=len(closes), freq="D")
    return [
        IndicatorPoint(
            index=i,
            timestamp=ts,
            label=ts.strftime("%b %d"),
            close=close,
            ahma=ahma,
            bias=classify_bias(close, ahma)
        )
        for i, (ts, close, ahma) in enumerate(zip(timestamps, closes, ahmas))
    ]


def make_series(closes: Sequence[float]) -> List[PricePoint]:
    timestamps = pd.date_range(end=FIXED_END, periods=len(closes), freq="D")
    return [PricePoint(timestamp=ts, close=c) for ts, c in zip(timestamps, closes)]


@pytest.fixture(scope="session")
def series() -> List[PricePoint]:
    """Default 220-point series (seed 35) with a fixed end date."""
    return generate_price_series(length=220, seed=35, end=FIXED_END)
