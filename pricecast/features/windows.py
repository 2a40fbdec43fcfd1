"""
Windowed Samples & Chronological Split
======================================

Slices a normalized return series into supervised samples:

    input  = normalized[i : i + window_size]
    target = normalized[i + window_size : i + window_size + horizon]

and partitions them into train/test BY TIME.

CRITICAL (anti-leakage):
- Samples are never shuffled across the split boundary
- Every train sample index is strictly below every test sample index
- Shuffling WITHIN train during learning is the learner's business

SAMPLE FLOOR:
    Producible samples = len - window_size - horizon + 1 must exceed 10,
    otherwise InsufficientDataError (recoverable: fetch more history).
"""

import logging
import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class InsufficientDataError(ValueError):
    """Raised when a series is too short to produce usable samples."""
    pass


# Producible samples must be strictly greater than this
MIN_SAMPLES = 10

DEFAULT_TEST_FRACTION = 0.2


@dataclass(frozen=True, eq=False)
class WindowedSample:
    """
    One supervised sample.

    Attributes:
        index: Start position of the input window in the source series
        input: window_size normalized returns
        target: horizon normalized returns immediately after the input
    """
    index: int
    input: np.ndarray
    target: np.ndarray


@dataclass(frozen=True, eq=False)
class WindowSplit:
    """
    Chronologically partitioned samples.

    Attributes:
        train: Samples before the split boundary (ascending index)
        test: Samples at or after the boundary (ascending index)
        split_index: Position of the boundary in the list of kept samples
        total_samples: Producible samples before discarding
        discarded: Samples dropped for non-finite values
    """
    train: Tuple[WindowedSample, ...]
    test: Tuple[WindowedSample, ...]
    window_size: int
    horizon: int
    split_index: int
    total_samples: int
    discarded: int = 0

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """Dense (train_X, train_y, test_X, test_y) for an external learner."""
        train_x, train_y = to_arrays(self.train, self.window_size, self.horizon)
        test_x, test_y = to_arrays(self.test, self.window_size, self.horizon)
        return train_x, train_y, test_x, test_y

    @property
    def train_end(self) -> int:
        """Exclusive end position of the data covered by training samples."""
        if not self.train:
            return 0
        return self.train[-1].index + self.window_size + self.horizon


def to_arrays(
    samples: Sequence[WindowedSample],
    window_size: int,
    horizon: int,
    dtype=np.float32,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Stack samples into inputs [N, window_size, 1] and targets [N, horizon].

    Shapes are kept for N == 0 so callers can rely on ndim.
    """
    if not samples:
        return (
            np.zeros((0, window_size, 1), dtype=dtype),
            np.zeros((0, horizon), dtype=dtype),
        )
    inputs = np.stack([s.input for s in samples]).astype(dtype)[:, :, np.newaxis]
    targets = np.stack([s.target for s in samples]).astype(dtype)
    return inputs, targets


def _validate_arguments(window_size: int, horizon: int, test_fraction: float):
    if window_size < 1:
        raise ValueError(f"window_size must be >= 1, got {window_size}")
    if horizon < 1:
        raise ValueError(f"horizon must be >= 1, got {horizon}")
    if not 0.0 <= test_fraction < 1.0:
        raise ValueError(f"test_fraction must be in [0, 1), got {test_fraction}")


def build_windows(
    normalized: Sequence[float],
    window_size: int = 60,
    horizon: int = 5,
    test_fraction: float = DEFAULT_TEST_FRACTION,
    min_samples: int = MIN_SAMPLES,
) -> WindowSplit:
    """
    Build sliding-window samples and split them chronologically.

    Args:
        normalized: Normalized return series
        window_size: Input length
        horizon: Target length
        test_fraction: Share of (kept) samples assigned to test
        min_samples: Producible samples must exceed this

    Returns:
        WindowSplit

    Raises:
        InsufficientDataError if producible samples <= min_samples, or if
            every sample contains a non-finite value
        ValueError on invalid arguments
    """
    _validate_arguments(window_size, horizon, test_fraction)
    values = np.asarray(normalized, dtype=float)

    total = len(values) - window_size - horizon + 1
    if total <= min_samples:
        raise InsufficientDataError(
            f"Insufficient samples: {total} "
            f"({len(values)} points, window={window_size}, horizon={horizon}); "
            f"need more than {min_samples}"
        )

    finite = np.isfinite(values)
    samples = []
    for i in range(total):
        end = i + window_size + horizon
        if not finite[i:end].all():
            logger.debug(f"Discarding sample {i}: non-finite value in window/target")
            continue
        samples.append(WindowedSample(
            index=i,
            input=values[i:i + window_size].copy(),
            target=values[i + window_size:end].copy(),
        ))

    discarded = total - len(samples)
    if not samples:
        raise InsufficientDataError(
            f"All {total} samples contain non-finite values"
        )
    if discarded > 0:
        logger.warning(f"Discarded {discarded} of {total} samples with non-finite values")

    split_index = max(1, math.floor(len(samples) * (1 - test_fraction)))

    split = WindowSplit(
        train=tuple(samples[:split_index]),
        test=tuple(samples[split_index:]),
        window_size=window_size,
        horizon=horizon,
        split_index=split_index,
        total_samples=total,
        discarded=discarded,
    )

    logger.info(
        f"Built {len(samples)} samples (window={window_size}, horizon={horizon}): "
        f"{len(split.train)} train / {len(split.test)} test"
    )
    return split


def latest_window(
    normalized: Sequence[float],
    window_size: int,
    dtype=np.float32,
) -> np.ndarray:
    """
    The most recent input window, shaped [1, window_size, 1] for forecasting.

    Raises:
        InsufficientDataError if the series is shorter than window_size
    """
    values = np.asarray(normalized, dtype=float)
    if window_size < 1:
        raise ValueError(f"window_size must be >= 1, got {window_size}")
    if len(values) < window_size:
        raise InsufficientDataError(
            f"Need {window_size} points for a forecast window, have {len(values)}"
        )
    return values[-window_size:].astype(dtype).reshape(1, window_size, 1)
