"""
Pipeline Session
================

Orchestrates one dataset from raw text to benchmarked forecasts.

Stages (each logs at INFO):
1. load_session: parse records, scan for split discontinuities,
   compute returns and the statistics report
2. prepare_session: fit normalization, normalize, build windowed samples
3. train_baseline: fit the random walk on training-covered returns only
4. forecast_next: next-horizon forecast from the latest window
5. benchmark_session: candidate vs random walk on the test samples

Failure policy:
- "No data" (FormatError from parsing) propagates and halts
- "Weak data" (InsufficientDataError from windowing) is logged; the session
  keeps its statistics and split stays None

All state lives on the PipelineSession passed between stages. There are no
module-level singletons.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union
import logging

import numpy as np

from ..config import Config, get_config
from ..data.record_parser import Observation, ParseResult, parse_records
from ..evaluation.backtest import (
    baseline_on_samples,
    evaluate_on_samples,
    holdout_backtest,
)
from ..evaluation.metrics import BenchmarkReport, ComparisonReport, compare
from ..features.normalization import (
    NormalizationParams,
    denormalize_many,
    fit_normalization,
    normalize,
)
from ..features.returns import compute_returns
from ..features.statistics import StatisticsReport, build_statistics_report
from ..features.windows import InsufficientDataError, WindowSplit, build_windows, latest_window
from ..interfaces import Forecaster, RandomSource, project_prices
from ..models.random_walk import RandomWalkForecaster
from ..utils.price_validation import SplitDiscontinuity, validate_price_series_consistency

logger = logging.getLogger(__name__)


@dataclass
class PipelineSession:
    """
    Everything derived from one raw dataset.

    Fields after load_session are always set. Preparation fields are None
    until prepare_session succeeds.
    """
    config: Config
    parse_result: ParseResult
    returns: np.ndarray
    statistics: StatisticsReport
    discontinuities: List[SplitDiscontinuity] = field(default_factory=list)

    # Preparation
    params: Optional[NormalizationParams] = None
    normalized: Optional[np.ndarray] = None
    split: Optional[WindowSplit] = None

    # Models and results
    baseline: Optional[RandomWalkForecaster] = None
    holdout_report: Optional[BenchmarkReport] = None
    comparison: Optional[ComparisonReport] = None
    forecast: Optional[np.ndarray] = None
    projected_prices: Optional[List[float]] = None

    @property
    def observations(self) -> tuple:
        return self.parse_result.observations

    @property
    def last_observation(self) -> Observation:
        return self.parse_result.observations[-1]

    @property
    def is_prepared(self) -> bool:
        return self.split is not None

    def summary(self) -> str:
        stats = self.statistics
        lines = [
            f"Session: {stats.total_days} observations "
            f"({stats.start_date} to {stats.end_date})",
            f"  Returns: {len(self.returns)}",
            f"  Parse warnings: {len(self.parse_result.warnings)}",
            f"  Split discontinuities: {len(self.discontinuities)}",
        ]
        if self.split is not None:
            lines.append(
                f"  Samples: {len(self.split.train)} train / {len(self.split.test)} test "
                f"(window={self.split.window_size}, horizon={self.split.horizon})"
            )
        else:
            lines.append("  Samples: N/A (insufficient data)")
        if self.holdout_report is not None:
            lines.append(
                f"  Holdout: RMSE={self.holdout_report.rmse:.6f}, "
                f"accuracy={self.holdout_report.direction_accuracy:.1f}%"
            )
        if self.comparison is not None:
            lines.append(
                f"  vs baseline: RMSE {self.comparison.improvement.rmse_improvement_pct:+.2f}%"
            )
        if self.projected_prices:
            lines.append(
                f"  Forecast: {len(self.projected_prices)} days, "
                f"projected price ${self.projected_prices[-1]:,.2f}"
            )
        return "\n".join(lines)


# ============================================================================
# STAGES
# ============================================================================

def load_session(
    raw: Union[str, bytes],
    config: Optional[Config] = None,
) -> PipelineSession:
    """
    Parse raw records and compute returns and statistics.

    Raises:
        FormatError if no valid rows survive parsing
    """
    if config is None:
        config = get_config()

    result = parse_records(raw, config.parser)
    _, discontinuities = validate_price_series_consistency(
        result.observations, raise_on_error=False
    )
    returns = compute_returns(result.observations)
    statistics = build_statistics_report(result.observations, returns, config.statistics)

    logger.info(
        f"Session loaded: {len(result)} observations, {len(returns)} returns, "
        f"{len(discontinuities)} suspected splits"
    )
    return PipelineSession(
        config=config,
        parse_result=result,
        returns=returns,
        statistics=statistics,
        discontinuities=discontinuities,
    )


def prepare_session(session: PipelineSession) -> PipelineSession:
    """
    Normalize returns and build the chronological sample split.

    InsufficientDataError is logged, not raised: the session keeps its
    statistics and split remains None.
    """
    prep = session.config.preparation
    session.params = fit_normalization(session.returns)
    session.normalized = normalize(session.returns, session.params)

    try:
        session.split = build_windows(
            session.normalized,
            window_size=prep.window_size,
            horizon=prep.horizon,
            test_fraction=prep.test_fraction,
            min_samples=prep.min_samples,
        )
    except InsufficientDataError as e:
        logger.warning(f"Session not prepared for forecasting: {e}")
        session.split = None

    return session


def train_baseline(
    session: PipelineSession,
    rng: Optional[RandomSource] = None,
) -> RandomWalkForecaster:
    """
    Train the random walk on the returns covered by training samples.

    Without a split there is no test period to protect, so every return
    is used.
    """
    baseline = RandomWalkForecaster(session.config.baseline, rng=rng)
    if session.split is not None:
        baseline.train(session.returns[:session.split.train_end])
    else:
        logger.warning("No sample split; training random walk on all returns")
        baseline.train(session.returns)
    session.baseline = baseline
    return baseline


def forecast_next(
    session: PipelineSession,
    forecaster: Optional[Forecaster] = None,
) -> np.ndarray:
    """
    Forecast the next horizon of daily returns.

    With a forecaster, its normalized output for the latest window is
    denormalized with the session's params. Without one, the session's
    random walk resamples the latest window of returns. The forecast is
    also compounded from the last observed price into projected_prices.

    Raises:
        ValueError if the session has not been prepared
        InsufficientDataError if fewer returns than window_size
    """
    if session.normalized is None or session.params is None:
        raise ValueError("Session has no normalized returns; call prepare_session first")

    prep = session.config.preparation
    if forecaster is not None:
        window = latest_window(session.normalized, prep.window_size)
        output = np.asarray(forecaster.predict(window), dtype=float).ravel()
        forecast = denormalize_many(output, session.params)
    else:
        if session.baseline is None:
            train_baseline(session)
        recent = session.returns[-prep.window_size:]
        if len(recent) < prep.window_size:
            raise InsufficientDataError(
                f"Need {prep.window_size} returns for a forecast window, have {len(recent)}"
            )
        forecast = session.baseline.predict(recent, horizon=prep.horizon)

    last = session.last_observation
    session.forecast = forecast
    session.projected_prices = project_prices(last.price, forecast)
    logger.info(
        f"Forecast next {len(forecast)} days from {last.date}: "
        f"cumulative {float(np.prod(1 + forecast) - 1):+.2%}"
    )
    return forecast


def benchmark_session(
    session: PipelineSession,
    forecaster: Forecaster,
    name: str = "model",
) -> ComparisonReport:
    """
    Compare a forecaster with the random walk on the session's test samples.

    Raises:
        InsufficientDataError if the session has no sample split
    """
    if session.split is None:
        raise InsufficientDataError("Session has no sample split to benchmark on")
    if session.baseline is None:
        train_baseline(session)

    test = session.split.test
    candidate, _ = evaluate_on_samples(forecaster, test, session.returns, session.params)
    baseline, _ = baseline_on_samples(session.baseline, test, session.returns)

    comparison = ComparisonReport(
        candidate=candidate,
        baseline=baseline,
        improvement=compare(candidate, baseline),
        candidate_name=name,
        baseline_name="random_walk",
    )
    session.comparison = comparison
    logger.info(f"Benchmark on {len(test)} test samples:\n{comparison.summary()}")
    return comparison


def run_pipeline(
    raw: Union[str, bytes],
    forecaster: Optional[Forecaster] = None,
    config: Optional[Config] = None,
    rng: Optional[RandomSource] = None,
) -> PipelineSession:
    """
    Run every stage on one raw dataset.

    Without a forecaster the random walk is only holdout-backtested.

    Raises:
        FormatError if the raw input has no valid rows
    """
    session = load_session(raw, config)
    prepare_session(session)
    train_baseline(session, rng=rng)

    holdout_size = session.config.baseline.holdout_size
    try:
        session.holdout_report = holdout_backtest(
            RandomWalkForecaster(session.config.baseline, rng=session.baseline.rng),
            session.returns,
            test_size=holdout_size,
        )
    except InsufficientDataError as e:
        logger.warning(f"Skipping holdout backtest: {e}")

    if forecaster is not None and session.split is not None:
        benchmark_session(session, forecaster)

    logger.info(f"Pipeline complete\n{session.summary()}")
    return session
