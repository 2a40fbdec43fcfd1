"""
Random Walk Baseline
====================

The null-hypothesis forecaster every learned model is benchmarked against.

Model:
    Each future daily return is drawn independently, either
    (a) uniformly resampled from the recent returns supplied, or
    (b) from N(mean, std) via Box-Muller when no history is supplied.
    Every draw is clamped to [-0.05, 0.05].

Autocorrelation is deliberately NOT modeled: if a learned model cannot
beat i.i.d. draws from history, it has learned nothing.

States:
    UNTRAINED -> TRAINED (one-way). Retraining swaps the parameter record
    in a single assignment. Training never fails: no usable data leaves the
    default parameters (mean 0.0, std 0.01) in place.

Determinism:
    Stochastic by design. Inject a seeded random source for reproducible
    runs; tests should assert bounds and distributions, not exact draws.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

import numpy as np

from pricecast.config import BaselineConfig
from pricecast.interfaces import RandomSource

logger = logging.getLogger(__name__)

DEFAULT_MEAN = 0.0
DEFAULT_STD = 0.01

# Returns at or beyond +/-100% are treated as corrupt and ignored in training
TRAINING_RETURN_LIMIT = 1.0
VARIANCE_FLOOR = 1e-6


class ModelState(Enum):
    UNTRAINED = "untrained"
    TRAINED = "trained"


@dataclass(frozen=True)
class RandomWalkParams:
    """Fitted moments of the daily return distribution."""
    mean: float = DEFAULT_MEAN
    std: float = DEFAULT_STD
    n_samples: int = 0


class RandomWalkForecaster:
    """
    I.i.d. random walk over daily returns.

    Example:
        rw = RandomWalkForecaster(rng=np.random.default_rng(42))
        rw.train(train_returns)
        path = rw.predict(recent_returns, horizon=5)
    """

    def __init__(
        self,
        config: Optional[BaselineConfig] = None,
        rng: Optional[RandomSource] = None,
    ):
        self.config = config or BaselineConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self.params = RandomWalkParams()
        self.state = ModelState.UNTRAINED

    @property
    def is_trained(self) -> bool:
        return self.state is ModelState.TRAINED

    @property
    def mean(self) -> float:
        return self.params.mean

    @property
    def std(self) -> float:
        return self.params.std

    def train(self, returns: Sequence[float]) -> RandomWalkParams:
        """
        Fit mean and population std over finite returns with |r| < 1.

        Args:
            returns: Daily return series

        Returns:
            The fitted parameters (defaults if nothing usable)
        """
        values = np.asarray(returns, dtype=float)
        usable = values[np.isfinite(values) & (np.abs(values) < TRAINING_RETURN_LIMIT)]

        if len(usable) == 0:
            logger.warning(
                f"No usable returns for random walk training "
                f"({len(values)} supplied); keeping defaults "
                f"mean={DEFAULT_MEAN}, std={DEFAULT_STD}"
            )
            params = RandomWalkParams()
        else:
            mean = float(np.mean(usable))
            variance = float(np.mean((usable - mean) ** 2))
            params = RandomWalkParams(
                mean=mean,
                std=math.sqrt(max(variance, VARIANCE_FLOOR)),
                n_samples=len(usable),
            )

        self.params = params
        self.state = ModelState.TRAINED
        logger.info(
            f"Random walk trained on {params.n_samples} returns: "
            f"mean={params.mean:.6f}, std={params.std:.6f}"
        )
        return params

    def predict(
        self,
        recent_returns: Optional[Sequence[float]] = None,
        horizon: int = 5,
    ) -> np.ndarray:
        """
        Draw horizon independent daily returns.

        Args:
            recent_returns: Pool to resample from; None, empty or all
                non-finite falls back to Gaussian draws
            horizon: Number of forecasts

        Returns:
            Array of horizon returns, each in [-clip, clip]
        """
        if horizon < 0:
            raise ValueError(f"horizon must be >= 0, got {horizon}")

        if not self.is_trained:
            logger.warning("Random walk used before training; predicting with default parameters")

        pool = np.array([], dtype=float)
        if recent_returns is not None:
            pool = np.asarray(recent_returns, dtype=float)
            pool = pool[np.isfinite(pool)]

        if len(pool) > 0:
            draws = [self._resample(pool) for _ in range(horizon)]
        else:
            draws = [self._gaussian() for _ in range(horizon)]

        clip = self.config.prediction_clip
        return np.clip(np.array(draws, dtype=float), -clip, clip)

    def _resample(self, pool: np.ndarray) -> float:
        index = min(int(self.rng.random() * len(pool)), len(pool) - 1)
        return float(pool[index])

    def _gaussian(self) -> float:
        """Box-Muller draw from N(mean, std)."""
        u1 = 1.0 - self.rng.random()  # (0, 1], keeps log finite
        u2 = self.rng.random()
        z = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        return self.params.mean + self.params.std * z
