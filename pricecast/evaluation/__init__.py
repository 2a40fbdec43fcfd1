"""
Evaluation Module

Locked point-forecast metrics and leakage-free backtests:
- metrics: RMSE, MAE, directional accuracy, head-to-head comparison
- backtest: holdout backtest and per-sample scoring in return units
"""

from .metrics import (
    LengthMismatchError,
    BenchmarkReport,
    ImprovementReport,
    ComparisonReport,
    evaluate,
    compare,
    compare_forecasts,
)

from .backtest import (
    holdout_backtest,
    evaluate_on_samples,
    baseline_on_samples,
)

__all__ = [
    # Metrics
    "LengthMismatchError",
    "BenchmarkReport",
    "ImprovementReport",
    "ComparisonReport",
    "evaluate",
    "compare",
    "compare_forecasts",
    # Backtests
    "holdout_backtest",
    "evaluate_on_samples",
    "baseline_on_samples",
]
