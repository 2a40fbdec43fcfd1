"""
Configuration Management
========================

Centralized configuration for pricecast.
Loads environment variables and defines pipeline-wide settings.

Every PRICECAST_* variable is optional; unset variables keep the defaults
below. Values are read when get_config() is called, not at import time.
"""

from dataclasses import dataclass, field
from typing import Optional

from pricecast.utils.env import (
    load_repo_dotenv,
    get_env_int,
    get_env_float,
    get_env_optional_int,
)


@dataclass
class ParserConfig:
    """Price record parsing bounds (exclusive on both ends)."""
    min_price: float = 0.0
    max_price: float = 100_000.0


@dataclass
class StatisticsConfig:
    """Return statistics settings."""
    trading_days_per_year: int = 252

    # Windows are in trading days
    rolling_window: int = 20
    sma_fast: int = 50
    sma_slow: int = 200


@dataclass
class PreparationConfig:
    """Normalization and windowing settings."""
    window_size: int = 60
    horizon: int = 5
    test_fraction: float = 0.2

    # Producible samples must exceed this floor
    min_samples: int = 10

    def __post_init__(self):
        if self.window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {self.window_size}")
        if self.horizon < 1:
            raise ValueError(f"horizon must be >= 1, got {self.horizon}")
        if not 0.0 <= self.test_fraction < 1.0:
            raise ValueError(
                f"test_fraction must be in [0, 1), got {self.test_fraction}"
            )


@dataclass
class BaselineConfig:
    """Random walk baseline settings."""
    # Single-day forecast bound
    prediction_clip: float = 0.05

    # None = unseeded random source
    seed: Optional[int] = None

    # Trailing returns held out by the standalone baseline backtest
    holdout_size: int = 50


@dataclass
class Config:
    """Master configuration aggregating all settings."""
    parser: ParserConfig = field(default_factory=ParserConfig)
    statistics: StatisticsConfig = field(default_factory=StatisticsConfig)
    preparation: PreparationConfig = field(default_factory=PreparationConfig)
    baseline: BaselineConfig = field(default_factory=BaselineConfig)


def get_config(load_dotenv: bool = True) -> Config:
    """
    Build a Config from defaults plus PRICECAST_* environment overrides.

    Args:
        load_dotenv: If True, load .env from the repo root first

    Raises:
        ValueError if an override is malformed or out of range
    """
    if load_dotenv:
        load_repo_dotenv()

    return Config(
        statistics=StatisticsConfig(
            rolling_window=get_env_int("PRICECAST_ROLLING_WINDOW", 20),
        ),
        preparation=PreparationConfig(
            window_size=get_env_int("PRICECAST_WINDOW_SIZE", 60),
            horizon=get_env_int("PRICECAST_HORIZON", 5),
            test_fraction=get_env_float("PRICECAST_TEST_FRACTION", 0.2),
        ),
        baseline=BaselineConfig(
            seed=get_env_optional_int("PRICECAST_SEED"),
            holdout_size=get_env_int("PRICECAST_HOLDOUT_SIZE", 50),
        ),
    )
