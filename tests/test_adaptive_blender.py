import numpy as np
import pytest

from ahma.adaptive_blender import (
    AdaptiveBlender,
    adaptive_factor,
    adaptive_hull_moving_average,
    blend_step,
)
from ahma.volatility import TrailingMaxNormalizer


class TestBlendStep:

    def test_absent_value_keeps_state(self):
        assert blend_step(None, None, 0.5) == (None, None)
        assert blend_step(12.0, None, 0.5) == (12.0, None)

    def test_first_value_seeds_state(self):
        assert blend_step(None, 10.0, 0.85) == (10.0, 10.0)

    def test_blend(self):
        state, out = blend_step(10.0, 20.0, 0.25)
        assert out == pytest.approx(17.5)
        assert state == out


class TestAdaptiveFactor:

    @pytest.mark.parametrize("sensitivity", [0.10, 0.35, 0.6, 0.85])
    @pytest.mark.parametrize("ratio", [0.0, 0.3, 1.0])
    def test_bounds(self, sensitivity, ratio):
        assert 0.0 <= adaptive_factor(sensitivity, ratio) <= 0.85

    def test_cap(self):
        assert adaptive_factor(5.0, 1.0) == 0.85


class TestAdaptiveBlender:

    def test_hand_calculated(self):
        # ratios 0, 0.5, 1 -> factors 0, 0.25, 0.5
        out = adaptive_hull_moving_average([None, 10.0, 20.0], [0.0, 1.0, 2.0], 0.5)
        assert out[0] is None
        assert out[1] == 10.0
        assert out[2] == pytest.approx(15.0)

    def test_recursion_uses_previous_output(self):
        out = adaptive_hull_moving_average([10.0, 20.0, 30.0], [1.0, 1.0, 1.0], 0.5)
        assert out[1] == pytest.approx(15.0)
        assert out[2] == pytest.approx(22.5)

    def test_zero_volatility_returns_raw_hull(self):
        hma = [None, None, 10.0, 11.0, 12.5]
        assert adaptive_hull_moving_average(hma, [0.0] * 5, 0.85) == hma

    def test_factors_are_clamped(self):
        blender = AdaptiveBlender(sensitivity=5.0)
        factors = blender.factors([1.0, 2.0, 4.0])
        assert factors.max() == pytest.approx(0.85)
        assert (factors >= 0).all()

    def test_length_mismatch_rejected(self):
        with pytest.raises(ValueError):
            AdaptiveBlender(0.35).blend([1.0, 2.0], [0.0])

    def test_normalizer_is_pluggable(self):
        hma = [10.0, 20.0, 30.0]
        vol = [1.0, 1.0, 10.0]
        global_out = AdaptiveBlender(0.5).blend(hma, vol)
        trailing_out = AdaptiveBlender(0.5, TrailingMaxNormalizer(window=2)).blend(hma, vol)
        # Global: index 1 factor 0.05; trailing: index 1 factor 0.5
        assert global_out[1] == pytest.approx(19.5)
        assert trailing_out[1] == pytest.approx(15.0)

    def test_output_length_and_gaps(self):
        hma = [None] * 5 + list(np.linspace(100, 110, 15))
        vol = list(np.linspace(0, 3, 20))
        out = AdaptiveBlender(0.35).blend(hma, vol)
        assert len(out) == 20
        assert out[:5] == [None] * 5
        assert all(v is not None for v in out[5:])
