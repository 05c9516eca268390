"""
Adaptive Blender

Turns a Hull moving average into the Adaptive Hull Moving Average (AHMA)
by blending each Hull value with the previous AHMA output:

    factor = min(0.85, sensitivity * normalized_volatility)
    ahma   = hull * (1 - factor) + previous * factor

Higher relative volatility raises the weight on the previous output, so
the line holds steadier when price whipsaws. The 0.85 cap keeps the line
from freezing on its previous value.

The recursion is an explicit fold: `blend_step(previous, hull, factor)`
returns the new accumulator together with the emitted value, and the only
state carried across the sequence is that accumulator.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ahma.config import Config, clamp
from ahma.volatility import GlobalMaxNormalizer, VolatilityNormalizer

logger = logging.getLogger(__name__)


def adaptive_factor(
    sensitivity: float,
    normalized_volatility: float,
    cap: float = Config.MAX_ADAPTIVE_FACTOR
) -> float:
    """Blend weight on the previous output, always inside [0, cap]."""
    return clamp(sensitivity * normalized_volatility, 0.0, cap)


def blend_step(
    previous: Optional[float],
    value: Optional[float],
    factor: float
) -> Tuple[Optional[float], Optional[float]]:
    """
    One fold step.

    Parameters
    ----------
    previous : Optional[float]
        Accumulator (last emitted AHMA), None before the first Hull value
    value : Optional[float]
        Hull value at this index
    factor : float
        Adaptive factor at this index

    Returns
    -------
    Tuple[Optional[float], Optional[float]]
        (new accumulator, emitted value)
    """
    if value is None:
        return previous, None
    if previous is None:
        return value, value
    blended = value * (1 - factor) + previous * factor
    return blended, blended


class AdaptiveBlender:
    """
    Volatility-adaptive smoother over a Hull series.

    Usage
    -----
    >>> blender = AdaptiveBlender(sensitivity=0.35)
    >>> ahma = blender.blend(hma, volatility)
    """

    def __init__(
        self,
        sensitivity: float = Config.DEFAULT_SENSITIVITY,
        normalizer: Optional[VolatilityNormalizer] = None,
        max_factor: float = Config.MAX_ADAPTIVE_FACTOR
    ):
        self.sensitivity = sensitivity
        self.normalizer = normalizer if normalizer is not None else GlobalMaxNormalizer()
        self.max_factor = max_factor

    def factors(self, volatility: Sequence[float]) -> np.ndarray:
        """Adaptive factor for every index."""
        ratios = self.normalizer.normalize(volatility)
        return np.clip(self.sensitivity * ratios, 0.0, self.max_factor)

    def blend(
        self,
        hma: Sequence[Optional[float]],
        volatility: Sequence[float]
    ) -> List[Optional[float]]:
        """
        Compute the AHMA series.

        Parameters
        ----------
        hma : Sequence[Optional[float]]
            Hull moving average, None inside its warm-up window
        volatility : Sequence[float]
            Volatility per index, same length as hma

        Returns
        -------
        List[Optional[float]]
            AHMA values, None wherever hma is None
        """
        if len(hma) != len(volatility):
            raise ValueError(
                f"hma and volatility lengths differ: {len(hma)} != {len(volatility)}"
            )

        factors = self.factors(volatility)
        previous: Optional[float] = None
        output = []

        for value, factor in zip(hma, factors):
            previous, emitted = blend_step(previous, value, float(factor))
            output.append(emitted)

        logger.debug(
            f"Blended {len(output)} points with sensitivity={self.sensitivity:.2f} "
            f"({self.normalizer!r})"
        )
        return output


def adaptive_hull_moving_average(
    hma: Sequence[Optional[float]],
    volatility: Sequence[float],
    sensitivity: float,
    normalizer: Optional[VolatilityNormalizer] = None
) -> List[Optional[float]]:
    """Functional form of AdaptiveBlender(sensitivity, normalizer).blend(hma, volatility)."""
    return AdaptiveBlender(sensitivity, normalizer).blend(hma, volatility)
