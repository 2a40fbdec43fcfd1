"""
Pipelines Module
================

Functions orchestrating the stages of one forecasting session.
Each stage takes and returns the explicit PipelineSession.

Stages:
- load_session: Parse, validate, returns, statistics
- prepare_session: Normalize and window
- train_baseline: Fit the random walk on training-covered returns
- forecast_next: Next-horizon forecast
- benchmark_session: Forecaster vs random walk on test samples
- run_pipeline: All of the above
"""

from .session import (
    PipelineSession,
    load_session,
    prepare_session,
    train_baseline,
    forecast_next,
    benchmark_session,
    run_pipeline,
)

__all__ = [
    "PipelineSession",
    "load_session",
    "prepare_session",
    "train_baseline",
    "forecast_next",
    "benchmark_session",
    "run_pipeline",
]
