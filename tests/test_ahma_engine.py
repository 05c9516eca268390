import numpy as np
import pandas as pd
import pytest

from ahma.ahma_engine import (
    AHMAEngine,
    compute_ahma_dataset,
    compute_metrics,
    compute_trend_zones,
    first_present_index,
    run_pipeline,
)
from ahma.config import IndicatorParameters, NormalizationMode, TrendBias
from ahma.trend_analysis import ZoneSegmenter
from ahma.volatility import TrailingMaxNormalizer

from conftest import make_series

PERIODS = [14, 21, 34, 55, 89, 120]
SENSITIVITIES = [0.10, 0.25, 0.35, 0.5, 0.7, 0.85]


@pytest.mark.parametrize("base_period", PERIODS)
def test_dataset_length_matches_series(series, base_period):
    points = compute_ahma_dataset(base_period, 0.35, series=series)
    assert len(points) == len(series)
    assert [p.close for p in points] == [p.close for p in series]


@pytest.mark.parametrize("base_period", PERIODS)
def test_absent_ahma_is_a_strict_prefix(series, base_period):
    points = compute_ahma_dataset(base_period, 0.35, series=series)
    first = first_present_index([p.ahma for p in points])
    assert first is not None
    assert all(p.ahma is None and p.bias is None for p in points[:first])
    assert all(p.ahma is not None and p.bias is not None for p in points[first:])


def test_default_scenario(series):
    points = compute_ahma_dataset(55, 0.35, series=series)
    first = first_present_index([p.ahma for p in points])
    assert first <= 60
    assert {p.bias for p in points[first:]} <= {TrendBias.BULLISH, TrendBias.BEARISH}
    for p in points[first:]:
        expected = TrendBias.BULLISH if p.close > p.ahma else TrendBias.BEARISH
        assert p.bias is expected


def test_short_period_warms_up_first(series):
    fast = compute_ahma_dataset(14, 0.35, series=series)
    slow = compute_ahma_dataset(120, 0.35, series=series)
    assert first_present_index([p.ahma for p in fast]) < first_present_index([p.ahma for p in slow])


@pytest.mark.parametrize("sensitivity", SENSITIVITIES)
def test_adaptive_factor_bounds(series, sensitivity):
    output = run_pipeline(series, IndicatorParameters.from_raw(55, sensitivity))
    assert output.adaptive_factors.min() >= 0.0
    assert output.adaptive_factors.max() <= 0.85


def test_higher_sensitivity_smooths_more(series):
    def diff_variance(sensitivity):
        points = compute_ahma_dataset(55, sensitivity, series=series)
        values = np.array([p.ahma for p in points if p.ahma is not None])
        return np.var(np.diff(values))

    assert diff_variance(0.85) < diff_variance(0.10)


def test_idempotent(series):
    first = compute_ahma_dataset(55, 0.35, series=series)
    second = compute_ahma_dataset(55, 0.35, series=series)
    assert first == second


def test_out_of_range_parameters_are_clamped(series):
    assert compute_ahma_dataset(5, 2.0, series=series) == compute_ahma_dataset(14, 0.85, series=series)


@pytest.mark.parametrize("base_period", PERIODS)
def test_zones_partition_present_range(series, base_period):
    points = compute_ahma_dataset(base_period, 0.35, series=series)
    present = [p.index for p in points if p.ahma is not None]

    zones = ZoneSegmenter(drop_degenerate=False).segment(points)
    covered = [i for z in zones for i in range(z.start_index, z.end_index + 1)]
    assert covered == present

    for zone in zones:
        biases = {points[i].bias for i in range(zone.start_index, zone.end_index + 1)}
        assert biases == {zone.bias}


def test_public_zones_are_ordered_and_disjoint(series):
    zones = compute_trend_zones(compute_ahma_dataset(55, 0.35, series=series))
    assert zones
    for zone in zones:
        assert zone.start_index < zone.end_index
        assert zone.start_label != zone.end_label
    for prev, nxt in zip(zones, zones[1:]):
        assert prev.end_index < nxt.start_index


def test_metrics_on_default_dataset(series):
    points = compute_ahma_dataset(55, 0.35, series=series)
    metrics = compute_metrics(points)
    assert metrics.bias is points[-1].bias
    assert metrics.slope_percent is not None
    assert metrics.pullback_zscore is not None
    assert np.isfinite(metrics.pullback_zscore)


def test_flat_series_degenerates_to_hull():
    flat = make_series([100.0] * 80)
    output = run_pipeline(flat, IndicatorParameters.from_raw(14, 0.85))
    assert output.max_volatility == 0.0
    assert output.ahma == output.hma
    assert output.metrics.slope_percent == 0.0
    assert output.metrics.pullback_zscore == 0.0
    assert output.metrics.bias is TrendBias.BEARISH


def test_trailing_normalizer_keeps_warmup(series):
    params = IndicatorParameters.from_raw(55, 0.5)
    global_out = run_pipeline(series, params)
    trailing_out = run_pipeline(series, params, TrailingMaxNormalizer(window=30))
    assert trailing_out.normalization is NormalizationMode.TRAILING_MAX
    assert trailing_out.first_ahma_index == global_out.first_ahma_index
    assert trailing_out.ahma != global_out.ahma


def test_empty_series_rejected():
    with pytest.raises(ValueError):
        run_pipeline([], IndicatorParameters())


class TestAHMAOutput:

    def test_frame_keeps_absent_values(self, series):
        df = run_pipeline(series, IndicatorParameters()).to_frame()
        assert len(df) == len(series)
        assert str(df["ahma"].dtype) == "Float64"
        assert df["ahma"].isna().sum() == 60
        assert pd.isna(df["ahma"].iloc[0])
        assert pd.isna(df["bias"].iloc[0])
        assert set(df["bias"].iloc[60:]) <= {"bullish", "bearish"}

    def test_period_labels(self, series):
        output = run_pipeline(series, IndicatorParameters())
        assert output.period == (series[0].label, series[-1].label)


class TestAHMAEngine:

    def test_memoizes_by_parameters(self, series):
        engine = AHMAEngine(series=series)
        first = engine.process(55, 0.35)
        assert engine.process(55, 0.35) is first
        assert engine.process(55.2, 0.35) is first
        assert engine.cache_size == 1

        engine.process(30, 0.35)
        assert engine.cache_size == 2

        engine.clear_cache()
        assert engine.cache_size == 0
        assert engine.process(55, 0.35) is not first

    def test_generates_its_own_series(self):
        engine = AHMAEngine(length=120, seed=35)
        assert len(engine.series) == 120
        assert len(engine.process(14, 0.35).points) == 120

    def test_invalid_length(self):
        with pytest.raises(ValueError):
            AHMAEngine(length=0)

    def test_matches_functional_api(self, series):
        engine = AHMAEngine(series=series)
        assert engine.process(34, 0.6).points == compute_ahma_dataset(34, 0.6, series=series)
