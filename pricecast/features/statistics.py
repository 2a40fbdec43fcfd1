"""
Return Statistics
=================

Pure functions over price and return series, plus the typed
StatisticsReport that bundles them for display.

CONVENTION:
- All returns and ratios are decimal (0.10 = 10%)
- Volatility is annualized with sqrt(252)
- Windows are in trading days
- Standard deviations are POPULATION (ddof=0)

DEGENERACY POLICY:
Statistical degeneracies are never errors. Every function resolves to a
defined fallback (documented per function) so a report can always be built.
Nothing is cached or updated incrementally: every call recomputes from the
series it is given.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Optional, Sequence

import numpy as np
import pandas as pd

from pricecast.config import StatisticsConfig
from pricecast.data.record_parser import Observation

logger = logging.getLogger(__name__)

# Trading days per year (for annualization)
TRADING_DAYS_PER_YEAR = 252

# Floors
VARIANCE_FLOOR = 1e-6
EMPTY_VARIANCE = 1e-4
SHARPE_STD_FLOOR = 1e-4


class Trend(Enum):
    """Trend classification from the fast/slow SMA crossover."""
    BULLISH = "Bullish"
    BEARISH = "Bearish"
    NEUTRAL = "Neutral"  # Either SMA undefined (insufficient history)


# ============================================================================
# PRICE STATISTICS
# ============================================================================

def total_return(prices: Sequence[float]) -> float:
    """(last - first) / first; 0.0 with fewer than 2 prices."""
    prices = np.asarray(prices, dtype=float)
    if len(prices) < 2:
        return 0.0
    return float((prices[-1] - prices[0]) / prices[0])


def max_drawdown(prices: Sequence[float]) -> float:
    """
    Largest peak-to-trough decline over the full history, as a positive fraction.

    The running peak only moves forward in time, so a trough is always
    measured against a peak that precedes it.
    """
    prices = np.asarray(prices, dtype=float)
    if len(prices) < 2:
        return 0.0
    peaks = np.maximum.accumulate(prices)
    drawdowns = (peaks - prices) / peaks
    return float(np.max(drawdowns))


def sma(prices: Sequence[float], period: int) -> np.ndarray:
    """
    Trailing simple moving average.

    Returns:
        Array of len(prices) - period + 1 points (empty if too short)
    """
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}")
    prices = np.asarray(prices, dtype=float)
    if len(prices) < period:
        return np.array([], dtype=float)
    return pd.Series(prices).rolling(window=period).mean().to_numpy()[period - 1:]


def trend(
    prices: Sequence[float],
    fast: int = 50,
    slow: int = 200,
) -> Trend:
    """
    Bullish if the latest fast SMA is above the latest slow SMA, else Bearish.

    NEUTRAL when either SMA series is empty; callers must handle all three.
    """
    fast_sma = sma(prices, fast)
    slow_sma = sma(prices, slow)
    if len(fast_sma) == 0 or len(slow_sma) == 0:
        return Trend.NEUTRAL
    return Trend.BULLISH if fast_sma[-1] > slow_sma[-1] else Trend.BEARISH


# ============================================================================
# RETURN STATISTICS
# ============================================================================

def _finite(returns: Sequence[float]) -> np.ndarray:
    values = np.asarray(returns, dtype=float)
    return values[np.isfinite(values)]


def mean_return(returns: Sequence[float]) -> float:
    """Mean daily return over finite values; 0.0 if none."""
    returns = _finite(returns)
    if len(returns) == 0:
        return 0.0
    return float(np.mean(returns))


def std_return(returns: Sequence[float]) -> float:
    """
    Population std of the finite daily returns.

    Variance is floored at 1e-6 before the square root so constant series
    give 0.001 instead of 0. An empty series (or one with no finite values)
    uses variance 1e-4 (std 0.01).
    """
    returns = _finite(returns)
    if len(returns) == 0:
        variance = EMPTY_VARIANCE
    else:
        variance = float(np.var(returns))
    return float(np.sqrt(max(variance, VARIANCE_FLOOR)))


def annualized_volatility(
    returns: Sequence[float],
    trading_days: int = TRADING_DAYS_PER_YEAR,
) -> float:
    return float(std_return(returns) * np.sqrt(trading_days))


def sharpe_ratio(
    returns: Sequence[float],
    trading_days: int = TRADING_DAYS_PER_YEAR,
) -> float:
    """Annualized Sharpe (zero risk-free rate), std floored at 1e-4."""
    std = max(std_return(returns), SHARPE_STD_FLOOR)
    return float(mean_return(returns) / std * np.sqrt(trading_days))


def positive_day_ratio(returns: Sequence[float]) -> float:
    """Fraction of strictly positive returns; 0.0 for an empty series."""
    returns = np.asarray(returns, dtype=float)
    if len(returns) == 0:
        return 0.0
    return float(np.sum(returns > 0) / len(returns))


def rolling_volatility(
    returns: Sequence[float],
    window: int = 20,
    trading_days: int = TRADING_DAYS_PER_YEAR,
) -> np.ndarray:
    """
    Annualized population std over each trailing window.

    Point k covers returns[k : k + window], for k in [0, len - window].

    Returns:
        Array of max(0, len(returns) - window + 1) points
    """
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")
    returns = np.asarray(returns, dtype=float)
    if len(returns) < window:
        return np.array([], dtype=float)

    windows = np.lib.stride_tricks.sliding_window_view(returns, window)
    stds = windows.std(axis=1)
    return stds * np.sqrt(trading_days)


# ============================================================================
# STATISTICS REPORT
# ============================================================================

def _read_only(series: np.ndarray) -> np.ndarray:
    series.setflags(write=False)
    return series


def _empty_series() -> np.ndarray:
    return _read_only(np.array([], dtype=float))


@dataclass(frozen=True, eq=False)
class StatisticsReport:
    """
    Typed summary of a loaded dataset.

    Scalars that are undefined for short histories are None (never a
    placeholder string). Use format_summary() for display strings.
    """
    total_days: int
    start_date: Optional[date]
    end_date: Optional[date]
    first_price: Optional[float]
    last_price: Optional[float]

    total_return: Optional[float]
    max_drawdown: Optional[float]

    mean_return: Optional[float]
    std_return: Optional[float]
    annualized_volatility: Optional[float]
    sharpe_ratio: Optional[float]
    positive_day_ratio: Optional[float]

    trend: Trend
    sma_fast: Optional[float]
    sma_slow: Optional[float]
    above_sma_slow: Optional[bool]

    current_rolling_volatility: Optional[float]
    average_rolling_volatility: Optional[float]

    rolling_volatility_series: np.ndarray = field(
        default_factory=_empty_series, repr=False
    )
    sma_fast_series: np.ndarray = field(
        default_factory=_empty_series, repr=False
    )
    sma_slow_series: np.ndarray = field(
        default_factory=_empty_series, repr=False
    )

    @property
    def has_data(self) -> bool:
        return self.total_days > 0

    def format_summary(self) -> Dict[str, str]:
        """Display strings; undefined values render as 'N/A'."""
        def pct(value: Optional[float], digits: int = 2) -> str:
            return "N/A" if value is None else f"{value * 100:.{digits}f}%"

        def money(value: Optional[float]) -> str:
            return "N/A" if value is None else f"${value:,.2f}"

        if self.above_sma_slow is None:
            above = "N/A"
        else:
            above = "Yes" if self.above_sma_slow else "No"

        return {
            "total_days": str(self.total_days),
            "date_range": (
                f"{self.start_date} - {self.end_date}" if self.has_data else "N/A"
            ),
            "first_price": money(self.first_price),
            "last_price": money(self.last_price),
            "total_return": pct(self.total_return),
            "max_drawdown": pct(self.max_drawdown),
            "mean_daily_return": pct(self.mean_return, 4),
            "std_daily_return": pct(self.std_return, 4),
            "annualized_volatility": pct(self.annualized_volatility),
            "sharpe_ratio": "N/A" if self.sharpe_ratio is None else f"{self.sharpe_ratio:.2f}",
            "positive_days": pct(self.positive_day_ratio, 1),
            "trend": self.trend.value if self.has_data else "N/A",
            "sma_fast": money(self.sma_fast),
            "sma_slow": money(self.sma_slow),
            "above_sma_slow": above,
            "current_rolling_volatility": pct(self.current_rolling_volatility),
            "average_rolling_volatility": pct(self.average_rolling_volatility),
        }


def empty_statistics_report() -> StatisticsReport:
    """Report for a dataset with no observations."""
    return StatisticsReport(
        total_days=0,
        start_date=None,
        end_date=None,
        first_price=None,
        last_price=None,
        total_return=None,
        max_drawdown=None,
        mean_return=None,
        std_return=None,
        annualized_volatility=None,
        sharpe_ratio=None,
        positive_day_ratio=None,
        trend=Trend.NEUTRAL,
        sma_fast=None,
        sma_slow=None,
        above_sma_slow=None,
        current_rolling_volatility=None,
        average_rolling_volatility=None,
    )


def _last_or_none(series: np.ndarray) -> Optional[float]:
    return float(series[-1]) if len(series) > 0 else None


def build_statistics_report(
    observations: Sequence[Observation],
    returns: Sequence[float],
    config: Optional[StatisticsConfig] = None,
) -> StatisticsReport:
    """
    Compute every statistic from scratch for one dataset.

    Args:
        observations: Ascending observations
        returns: Return series derived from observations
        config: Windows and annualization (default: StatisticsConfig())

    Returns:
        StatisticsReport (empty_statistics_report() if no observations)
    """
    if config is None:
        config = StatisticsConfig()

    if len(observations) == 0:
        logger.warning("No observations; returning empty statistics report")
        return empty_statistics_report()

    days = config.trading_days_per_year
    prices = np.array([obs.price for obs in observations], dtype=float)
    returns = np.asarray(returns, dtype=float)

    # Series stored on the report are read-only
    rolling = _read_only(rolling_volatility(returns, config.rolling_window, days))
    fast = _read_only(sma(prices, config.sma_fast))
    slow = _read_only(sma(prices, config.sma_slow))

    slow_latest = _last_or_none(slow)
    above = None if slow_latest is None else bool(prices[-1] > slow_latest)

    report = StatisticsReport(
        total_days=len(observations),
        start_date=observations[0].date,
        end_date=observations[-1].date,
        first_price=float(prices[0]),
        last_price=float(prices[-1]),
        total_return=total_return(prices),
        max_drawdown=max_drawdown(prices),
        mean_return=mean_return(returns),
        std_return=std_return(returns),
        annualized_volatility=annualized_volatility(returns, days),
        sharpe_ratio=sharpe_ratio(returns, days),
        positive_day_ratio=positive_day_ratio(returns),
        trend=trend(prices, config.sma_fast, config.sma_slow),
        sma_fast=_last_or_none(fast),
        sma_slow=slow_latest,
        above_sma_slow=above,
        current_rolling_volatility=_last_or_none(rolling),
        average_rolling_volatility=float(np.mean(rolling)) if len(rolling) > 0 else None,
        rolling_volatility_series=rolling,
        sma_fast_series=fast,
        sma_slow_series=slow,
    )

    logger.info(
        f"Statistics: {report.total_days} days, total return {report.total_return:.2%}, "
        f"max drawdown {report.max_drawdown:.2%}, trend {report.trend.value}"
    )
    return report
