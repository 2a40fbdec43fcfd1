"""
Backtests

Scores forecasters against realized returns without lookahead:

1. holdout_backtest: random walk trained on everything except the trailing
   test_size returns, then scored on those returns.
2. evaluate_on_samples: any Forecaster scored on windowed test samples.
3. baseline_on_samples: random walk scored on the SAME test samples, so the
   two reports are directly comparable.

CRITICAL: All scoring happens in RETURN units. Forecaster outputs are
normalized and must be denormalized with the params of the dataset the
samples were built from. Ground truth is always taken from the raw return
series, never from denormalized targets.
"""

from typing import List, Sequence, Tuple
import numpy as np
import logging

from pricecast.features.normalization import NormalizationParams, denormalize_many
from pricecast.features.windows import InsufficientDataError, WindowedSample
from pricecast.interfaces import Forecaster
from pricecast.models.random_walk import RandomWalkForecaster
from .metrics import BenchmarkReport, LengthMismatchError, evaluate

logger = logging.getLogger(__name__)


DEFAULT_TEST_SIZE = 50


def holdout_backtest(
    forecaster: RandomWalkForecaster,
    returns: Sequence[float],
    test_size: int = DEFAULT_TEST_SIZE,
) -> BenchmarkReport:
    """
    Train on returns[:-test_size] and score test_size forecasts.

    Forecasts resample from the TRAINING returns only; the test period is
    never visible to the model.

    Raises:
        InsufficientDataError if fewer than test_size + 1 returns
        ValueError if test_size < 1
    """
    if test_size < 1:
        raise ValueError(f"test_size must be >= 1, got {test_size}")

    returns = np.asarray(returns, dtype=float)
    if len(returns) < test_size + 1:
        raise InsufficientDataError(
            f"Holdout backtest needs at least {test_size + 1} returns, have {len(returns)}"
        )

    train, test = returns[:-test_size], returns[-test_size:]
    forecaster.train(train)
    predictions = forecaster.predict(train, horizon=test_size)

    report = evaluate(test, predictions)
    logger.info(
        f"Holdout backtest ({len(train)} train / {test_size} test): "
        f"RMSE={report.rmse:.6f}, MAE={report.mae:.6f}, "
        f"accuracy={report.direction_accuracy:.1f}%"
    )
    return report


def _actual_for(sample: WindowedSample, returns: np.ndarray) -> np.ndarray:
    start = sample.index + len(sample.input)
    end = start + len(sample.target)
    if end > len(returns):
        raise ValueError(
            f"Sample {sample.index} extends to {end}, beyond {len(returns)} returns"
        )
    return returns[start:end]


def evaluate_on_samples(
    forecaster: Forecaster,
    samples: Sequence[WindowedSample],
    returns: Sequence[float],
    params: NormalizationParams,
) -> Tuple[BenchmarkReport, np.ndarray]:
    """
    Score a forecaster on windowed samples in return units.

    Args:
        forecaster: Anything implementing Forecaster
        samples: Samples built from normalize(returns, params)
        returns: Raw return series the samples were built from
        params: The params used to normalize returns

    Returns:
        (report, predictions) where predictions is [len(samples), horizon]

    Raises:
        LengthMismatchError if the forecaster returns the wrong number of values
    """
    returns = np.asarray(returns, dtype=float)
    actual: List[np.ndarray] = []
    predicted: List[np.ndarray] = []

    for sample in samples:
        window = np.asarray(sample.input, dtype=np.float32).reshape(1, -1, 1)
        output = np.asarray(forecaster.predict(window), dtype=float).ravel()
        if len(output) != len(sample.target):
            raise LengthMismatchError(
                f"Forecaster returned {len(output)} values for sample {sample.index}, "
                f"expected {len(sample.target)}"
            )
        predicted.append(denormalize_many(output, params))
        actual.append(_actual_for(sample, returns))

    if not samples:
        logger.warning("No samples to evaluate")
        return evaluate([], []), np.zeros((0, 0))

    predictions = np.stack(predicted)
    report = evaluate(np.concatenate(actual), predictions.ravel())
    logger.info(f"Evaluated forecaster on {len(samples)} samples ({report.sample_size} pairs)")
    return report, predictions


def baseline_on_samples(
    baseline: RandomWalkForecaster,
    samples: Sequence[WindowedSample],
    returns: Sequence[float],
) -> Tuple[BenchmarkReport, np.ndarray]:
    """
    Score the random walk on windowed samples.

    Each sample's forecast resamples from that sample's own input window,
    taken from the raw returns.

    Returns:
        (report, predictions) where predictions is [len(samples), horizon]
    """
    returns = np.asarray(returns, dtype=float)
    actual: List[np.ndarray] = []
    predicted: List[np.ndarray] = []

    for sample in samples:
        pool = returns[sample.index:sample.index + len(sample.input)]
        predicted.append(baseline.predict(pool, horizon=len(sample.target)))
        actual.append(_actual_for(sample, returns))

    if not samples:
        logger.warning("No samples to evaluate")
        return evaluate([], []), np.zeros((0, 0))

    predictions = np.stack(predicted)
    report = evaluate(np.concatenate(actual), predictions.ravel())
    logger.info(f"Evaluated random walk on {len(samples)} samples ({report.sample_size} pairs)")
    return report, predictions
