"""
Return Normalization
====================

Min-max scaling of returns into [0, 1] for downstream learning, and the
inverse map for turning scaled forecasts back into returns.

BINDING RULE:
    A NormalizationParams instance belongs to the return series it was fit
    on. Every forecast derived from a prepared dataset MUST be denormalized
    with that dataset's params. Refitting on different data silently
    invalidates all downstream denormalized predictions.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)

# Used when no finite return exists
FALLBACK_MIN = -0.1
FALLBACK_MAX = 0.1

# Degenerate ranges are widened by this much on each side
DEGENERATE_RANGE = 1e-10
RANGE_WIDENING = 0.01

# Sanity bound on a single denormalized daily return
DENORMALIZED_CLIP = 0.1


@dataclass(frozen=True)
class NormalizationParams:
    """Affine min-max map parameters. Invariant: max > min."""
    min: float
    max: float

    def __post_init__(self):
        if not self.max > self.min:
            raise ValueError(
                f"NormalizationParams requires max > min, got min={self.min}, max={self.max}"
            )

    @property
    def range(self) -> float:
        return self.max - self.min


def fit_normalization(returns: Sequence[float]) -> NormalizationParams:
    """
    Fit min/max over the finite values of returns.

    Falls back to [-0.1, 0.1] when nothing is finite, and widens a
    (near-)constant series by 0.01 on each side.
    """
    values = np.asarray(returns, dtype=float)
    finite = values[np.isfinite(values)]

    if len(finite) == 0:
        logger.warning(
            f"No finite returns to fit; using fallback range "
            f"[{FALLBACK_MIN}, {FALLBACK_MAX}]"
        )
        return NormalizationParams(min=FALLBACK_MIN, max=FALLBACK_MAX)

    lo, hi = float(np.min(finite)), float(np.max(finite))
    if hi - lo < DEGENERATE_RANGE:
        logger.warning(
            f"Degenerate return range ({lo:.6g} to {hi:.6g}); "
            f"widening by {RANGE_WIDENING} on each side"
        )
        lo, hi = lo - RANGE_WIDENING, hi + RANGE_WIDENING

    params = NormalizationParams(min=lo, max=hi)
    logger.info(f"Normalization fitted: min={params.min:.6f}, max={params.max:.6f}")
    return params


def normalize(returns: Sequence[float], params: NormalizationParams) -> np.ndarray:
    """
    Scale returns into [0, 1] with params.

    Out-of-range values are clamped to the nearest bound. Non-finite inputs
    stay non-finite so windowing can discard the samples that contain them.
    """
    values = np.asarray(returns, dtype=float)
    scaled = (values - params.min) / params.range
    return np.clip(scaled, 0.0, 1.0)


def denormalize(value: float, params: NormalizationParams) -> float:
    """Inverse of normalize for one value, clamped to [-0.1, 0.1]."""
    restored = value * params.range + params.min
    return float(np.clip(restored, -DENORMALIZED_CLIP, DENORMALIZED_CLIP))


def denormalize_many(
    values: Sequence[float],
    params: NormalizationParams,
) -> np.ndarray:
    """Vectorized denormalize."""
    restored = np.asarray(values, dtype=float) * params.range + params.min
    return np.clip(restored, -DENORMALIZED_CLIP, DENORMALIZED_CLIP)
