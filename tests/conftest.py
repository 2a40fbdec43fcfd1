"""Shared fixtures for pricecast tests."""

from datetime import date, timedelta

import numpy as np
import pytest

from pricecast.config import Config, PreparationConfig
from pricecast.data.record_parser import Observation


def make_csv(prices, start=date(2023, 1, 2), delimiter=",", header="Date,Close"):
    """Render prices as delimited text with consecutive ISO dates."""
    lines = [header] if header else []
    for i, price in enumerate(prices):
        lines.append(f"{(start + timedelta(days=i)).isoformat()}{delimiter}{price}")
    return "\n".join(lines)


def make_observations(prices, start=date(2023, 1, 2)):
    return tuple(
        Observation(date=start + timedelta(days=i), price=float(p))
        for i, p in enumerate(prices)
    )


@pytest.fixture
def scenario_prices():
    return [100.0, 102.0, 101.0, 105.0, 103.0]


@pytest.fixture
def random_walk_prices():
    """300 days of a seeded geometric random walk starting at 100."""
    rng = np.random.default_rng(7)
    returns = rng.normal(0.0005, 0.015, size=299)
    return list(100.0 * np.cumprod(np.concatenate([[1.0], 1.0 + returns])))


@pytest.fixture
def small_config():
    """Short windows so tests need only a few hundred rows."""
    return Config(preparation=PreparationConfig(window_size=10, horizon=3, test_fraction=0.2))


@pytest.fixture
def seeded_rng():
    return np.random.default_rng(1234)
