"""
Feature Engineering Module
==========================

Turns an ordered price series into model-ready inputs.

Submodules:
- returns: Clamped day-over-day returns
- statistics: Drawdown, volatility, SMA trend, StatisticsReport
- normalization: Min-max scaling of returns into [0, 1]
- windows: Sliding-window samples with a chronological train/test split

CRITICAL ANTI-LEAKAGE RULES:
1. Train samples always precede test samples in time
2. Denormalize only with the params the data was normalized with
"""

from .returns import compute_returns, RETURN_CLAMP
from .statistics import (
    Trend,
    StatisticsReport,
    build_statistics_report,
    empty_statistics_report,
    total_return,
    max_drawdown,
    sma,
    trend,
    mean_return,
    std_return,
    annualized_volatility,
    sharpe_ratio,
    positive_day_ratio,
    rolling_volatility,
)
from .normalization import (
    NormalizationParams,
    fit_normalization,
    normalize,
    denormalize,
    denormalize_many,
)
from .windows import (
    InsufficientDataError,
    WindowedSample,
    WindowSplit,
    build_windows,
    latest_window,
    to_arrays,
)

__all__ = [
    # Returns
    "compute_returns",
    "RETURN_CLAMP",
    # Statistics
    "Trend",
    "StatisticsReport",
    "build_statistics_report",
    "empty_statistics_report",
    "total_return",
    "max_drawdown",
    "sma",
    "trend",
    "mean_return",
    "std_return",
    "annualized_volatility",
    "sharpe_ratio",
    "positive_day_ratio",
    "rolling_volatility",
    # Normalization
    "NormalizationParams",
    "fit_normalization",
    "normalize",
    "denormalize",
    "denormalize_many",
    # Windows
    "InsufficientDataError",
    "WindowedSample",
    "WindowSplit",
    "build_windows",
    "latest_window",
    "to_arrays",
]
