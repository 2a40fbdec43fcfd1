"""
pricecast
=========

Daily price series in, benchmarked short-horizon return forecasts out:
- Parse heterogeneous delimited price records
- Derive clamped returns and a typed statistics report
- Normalize and window returns with a leakage-free chronological split
- Benchmark any forecaster against a random-walk baseline

Core Question: does a learned forecaster beat i.i.d. draws from history?
"""

__version__ = "0.1.0"
__author__ = "pricecast developers"

from pricecast.config import Config, get_config
from pricecast.data.record_parser import (
    FormatError,
    Observation,
    ParseResult,
    parse,
    parse_records,
)
from pricecast.utils.price_validation import SplitDiscontinuityError
from pricecast.features.returns import compute_returns
from pricecast.features.statistics import StatisticsReport, Trend, build_statistics_report
from pricecast.features.normalization import (
    NormalizationParams,
    fit_normalization,
    normalize,
    denormalize,
)
from pricecast.features.windows import InsufficientDataError, WindowSplit, build_windows
from pricecast.models.random_walk import RandomWalkForecaster
from pricecast.evaluation.metrics import (
    LengthMismatchError,
    BenchmarkReport,
    ComparisonReport,
    evaluate,
    compare,
)
from pricecast.pipelines.session import PipelineSession, run_pipeline

__all__ = [
    # Errors
    "FormatError",
    "InsufficientDataError",
    "LengthMismatchError",
    "SplitDiscontinuityError",
    # Configuration
    "Config",
    "get_config",
    # Parsing
    "Observation",
    "ParseResult",
    "parse",
    "parse_records",
    # Features
    "compute_returns",
    "StatisticsReport",
    "Trend",
    "build_statistics_report",
    "NormalizationParams",
    "fit_normalization",
    "normalize",
    "denormalize",
    "WindowSplit",
    "build_windows",
    # Models and evaluation
    "RandomWalkForecaster",
    "BenchmarkReport",
    "ComparisonReport",
    "evaluate",
    "compare",
    # Pipeline
    "PipelineSession",
    "run_pipeline",
]
