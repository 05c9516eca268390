import math
from itertools import islice

import pandas as pd
import pytest

from ahma.config import Config
from ahma.data_generator import (
    SeriesGenerator,
    generate_price_series,
    price_series_to_frame,
    seeded_random_stream,
)

from conftest import FIXED_END


def test_random_stream_matches_sine_hash():
    values = list(islice(seeded_random_stream(35), 3))
    for offset, value in enumerate(values):
        x = math.sin(35 + offset) * 10000
        assert value == x - math.floor(x)
        assert 0.0 <= value < 1.0


def test_generation_is_deterministic():
    first = generate_price_series(220, 35, end=FIXED_END)
    second = generate_price_series(220, 35, end=FIXED_END)
    assert first == second


def test_different_seed_changes_path():
    a = SeriesGenerator(seed=35).closes(50)
    b = SeriesGenerator(seed=36).closes(50)
    assert a != b


@pytest.mark.parametrize("length", [0, 1, 10, 220])
def test_exact_length(length):
    assert len(generate_price_series(length, 35, end=FIXED_END)) == length


def test_timestamps_step_one_day_to_end(series):
    timestamps = [p.timestamp for p in series]
    assert timestamps[-1] == pd.Timestamp(FIXED_END)
    deltas = {b - a for a, b in zip(timestamps, timestamps[1:])}
    assert deltas == {pd.Timedelta(days=1)}


def test_closes_are_rounded_and_above_floor(series):
    for point in series:
        assert round(point.close, 2) == point.close
        assert point.close >= Config.PRICE_FLOOR


def test_price_floor_is_applied():
    closes = SeriesGenerator(seed=35, base_price=102.0, price_floor=1000.0).closes(20)
    assert closes == [1000.0] * 20


def test_first_close_follows_price_path():
    rand = next(seeded_random_stream(35))
    expected = max(
        35.0,
        102.0 + SeriesGenerator.trend_component(0) * 0.6 + (rand - 0.5) * 1.8 + 0.45 * 0.2
    )
    assert SeriesGenerator(seed=35).closes(1)[0] == round(expected, 2)


@pytest.mark.parametrize("index, expected", [(0, 0.45), (70, 0.45), (71, 1.05), (129, 1.05), (130, 0.45)])
def test_momentum_phase_bounds(index, expected):
    assert SeriesGenerator.momentum_component(index) == expected


def test_negative_length_rejected():
    with pytest.raises(ValueError):
        SeriesGenerator().closes(-1)


def test_labels_use_short_month_format():
    series = generate_price_series(3, 35, end="2024-03-04")
    assert [p.label for p in series] == ["Mar 02", "Mar 03", "Mar 04"]


def test_frame_conversion(series):
    df = price_series_to_frame(series)
    assert list(df.columns) == ["Close"]
    assert isinstance(df.index, pd.DatetimeIndex)
    assert len(df) == len(series)
    assert df["Close"].iloc[-1] == series[-1].close
