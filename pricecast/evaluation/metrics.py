"""
Forecast Benchmark Metrics

Point-forecast metrics with locked definitions:
- RMSE = sqrt(mean((actual - predicted)^2))
- MAE = mean(|actual - predicted|)
- Directional accuracy = 100 * share of pairs whose signs agree,
  where zero counts as non-negative

And a head-to-head comparison of two reports:
- Error metrics (lower is better): (B - A) / B * 100
- Accuracy (higher is better): A - B, in percentage points

CRITICAL: actual and predicted must be aligned one-to-one. Unequal
lengths are a programming error (LengthMismatchError), not bad data.
"""

from dataclasses import dataclass
from typing import Dict, Sequence
import numpy as np
import logging

logger = logging.getLogger(__name__)


class LengthMismatchError(ValueError):
    """Raised when actual and predicted series differ in length."""
    pass


# ============================================================================
# REPORTS
# ============================================================================

@dataclass(frozen=True)
class BenchmarkReport:
    """
    Metrics for one forecaster on one set of aligned pairs.

    Attributes:
        rmse: Root mean squared error (return units)
        mae: Mean absolute error (return units)
        direction_accuracy: Percentage in [0, 100]
        sample_size: Number of finite pairs scored
    """
    rmse: float
    mae: float
    direction_accuracy: float
    sample_size: int

    @property
    def mse(self) -> float:
        return self.rmse ** 2

    def to_dict(self) -> Dict[str, float]:
        return {
            "rmse": self.rmse,
            "mse": self.mse,
            "mae": self.mae,
            "direction_accuracy": self.direction_accuracy,
            "sample_size": self.sample_size,
        }


@dataclass(frozen=True)
class ImprovementReport:
    """
    A's improvement over B.

    Positive values mean A is better on every field.
    """
    rmse_improvement_pct: float
    mae_improvement_pct: float
    accuracy_improvement_pct: float


@dataclass(frozen=True)
class ComparisonReport:
    """Candidate and baseline reports side by side."""
    candidate: BenchmarkReport
    baseline: BenchmarkReport
    improvement: ImprovementReport
    candidate_name: str = "model"
    baseline_name: str = "random_walk"

    def summary(self) -> str:
        c, b, imp = self.candidate, self.baseline, self.improvement
        lines = [
            f"{'metric':<20}{self.candidate_name:>14}{self.baseline_name:>14}{'improvement':>14}",
            f"{'rmse':<20}{c.rmse:>14.6f}{b.rmse:>14.6f}{imp.rmse_improvement_pct:>13.2f}%",
            f"{'mae':<20}{c.mae:>14.6f}{b.mae:>14.6f}{imp.mae_improvement_pct:>13.2f}%",
            f"{'direction_accuracy':<20}{c.direction_accuracy:>13.2f}%"
            f"{b.direction_accuracy:>13.2f}%{imp.accuracy_improvement_pct:>12.2f}pp",
            f"{'samples':<20}{c.sample_size:>14d}{b.sample_size:>14d}",
        ]
        return "\n".join(lines)


# ============================================================================
# EVALUATION
# ============================================================================

def evaluate(
    actual: Sequence[float],
    predicted: Sequence[float],
) -> BenchmarkReport:
    """
    Score predicted against actual.

    Pairs where either side is non-finite are dropped (logged). With no
    surviving pairs every metric is 0.0 and sample_size is 0.

    Args:
        actual: Realized returns
        predicted: Forecast returns, aligned with actual

    Returns:
        BenchmarkReport

    Raises:
        LengthMismatchError if lengths differ
    """
    actual = np.asarray(actual, dtype=float).ravel()
    predicted = np.asarray(predicted, dtype=float).ravel()

    if len(actual) != len(predicted):
        raise LengthMismatchError(
            f"actual has {len(actual)} values, predicted has {len(predicted)}"
        )

    mask = np.isfinite(actual) & np.isfinite(predicted)
    n_dropped = int(len(actual) - mask.sum())
    if n_dropped > 0:
        logger.warning(f"Dropped {n_dropped} of {len(actual)} pairs with non-finite values")

    actual, predicted = actual[mask], predicted[mask]
    n = len(actual)
    if n == 0:
        logger.warning("No finite pairs to evaluate; returning zero metrics")
        return BenchmarkReport(rmse=0.0, mae=0.0, direction_accuracy=0.0, sample_size=0)

    errors = actual - predicted
    same_direction = (actual >= 0) == (predicted >= 0)

    return BenchmarkReport(
        rmse=float(np.sqrt(np.mean(errors ** 2))),
        mae=float(np.mean(np.abs(errors))),
        direction_accuracy=float(100.0 * np.sum(same_direction) / n),
        sample_size=n,
    )


def _error_improvement(candidate: float, baseline: float) -> float:
    if baseline == 0:
        return 0.0
    return (baseline - candidate) / baseline * 100.0


def compare(report_a: BenchmarkReport, report_b: BenchmarkReport) -> ImprovementReport:
    """
    Express A's improvement over B.

    A zero baseline error yields 0.0 improvement for that metric.
    """
    return ImprovementReport(
        rmse_improvement_pct=_error_improvement(report_a.rmse, report_b.rmse),
        mae_improvement_pct=_error_improvement(report_a.mae, report_b.mae),
        accuracy_improvement_pct=report_a.direction_accuracy - report_b.direction_accuracy,
    )


def compare_forecasts(
    actual: Sequence[float],
    predicted_a: Sequence[float],
    predicted_b: Sequence[float],
    name_a: str = "model",
    name_b: str = "random_walk",
) -> ComparisonReport:
    """Evaluate two forecasts of the same actuals and compare them."""
    report_a = evaluate(actual, predicted_a)
    report_b = evaluate(actual, predicted_b)
    improvement = compare(report_a, report_b)

    logger.info(
        f"{name_a} vs {name_b}: RMSE {improvement.rmse_improvement_pct:+.2f}%, "
        f"MAE {improvement.mae_improvement_pct:+.2f}%, "
        f"accuracy {improvement.accuracy_improvement_pct:+.2f}pp"
    )
    return ComparisonReport(
        candidate=report_a,
        baseline=report_b,
        improvement=improvement,
        candidate_name=name_a,
        baseline_name=name_b,
    )
