"""
Daily Returns
=============

Day-over-day fractional returns with outlier clamping.

CONVENTION:
    returns[i] = (price[i+1] - price[i]) / price[i], clamped to [-0.5, 0.5]

The clamp bounds the influence of feed glitches (e.g. an unadjusted split)
without dropping the observation, so len(returns) == len(prices) - 1 always.
Fewer than two prices yields an EMPTY array: "insufficient history" is a
recoverable condition for callers, not an error.
"""

import logging
from typing import Sequence, Union

import numpy as np

from pricecast.data.record_parser import Observation

logger = logging.getLogger(__name__)

RETURN_CLAMP = 0.5


def _as_prices(series: Sequence[Union[Observation, float]]) -> np.ndarray:
    if len(series) > 0 and isinstance(series[0], Observation):
        return np.array([obs.price for obs in series], dtype=float)
    return np.asarray(series, dtype=float)


def compute_returns(
    series: Sequence[Union[Observation, float]],
    clamp: float = RETURN_CLAMP,
) -> np.ndarray:
    """
    Compute clamped daily returns.

    Args:
        series: Ascending Observations, or raw prices
        clamp: Symmetric bound applied to every return

    Returns:
        Array of length len(series) - 1 (empty if fewer than 2 points)
    """
    prices = _as_prices(series)
    if len(prices) < 2:
        return np.array([], dtype=float)

    raw = np.diff(prices) / prices[:-1]
    returns = np.clip(raw, -clamp, clamp)

    n_clamped = int(np.sum(np.abs(raw) > clamp))
    if n_clamped > 0:
        logger.warning(
            f"Clamped {n_clamped} of {len(raw)} returns to +/-{clamp:.2f} "
            f"(largest raw move {np.max(np.abs(raw)):.2%})"
        )

    return returns
