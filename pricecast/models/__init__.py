"""
Models Module
=============

In-process forecasters. Learned models live outside this package and plug
in through pricecast.interfaces.Forecaster.

- random_walk: i.i.d. resampling / Gaussian baseline
"""

from .random_walk import (
    ModelState,
    RandomWalkParams,
    RandomWalkForecaster,
)

__all__ = [
    "ModelState",
    "RandomWalkParams",
    "RandomWalkForecaster",
]
