"""
Interfaces (Protocols)
======================

Abstract interfaces that pipelines depend on, allowing for:
- Testability with stubs
- Swappable forecasters (external neural model, in-process baseline)
- A fixed tensor shape contract between preparation and learning

These are Python Protocols (structural subtyping) - implementations
don't need to explicitly inherit, just implement the methods.
"""

from abc import abstractmethod
from typing import Protocol, List, Sequence, runtime_checkable

import numpy as np


# =============================================================================
# Forecaster Interface
# =============================================================================

@runtime_checkable
class Forecaster(Protocol):
    """
    Interface for a trained window-to-horizon forecaster.

    Implementations:
    - External trainable model (neural net), fit on WindowSplit.to_arrays()
    - Stubs in tests

    The learning algorithm is not owned here; only the shapes are.
    """

    @abstractmethod
    def predict(self, window: np.ndarray) -> Sequence[float]:
        """
        Forecast the next horizon from one input window.

        Args:
            window: Float array of shape [1, window_size, 1], normalized

        Returns:
            horizon values in NORMALIZED units (callers denormalize)
        """
        ...


# =============================================================================
# Random Source Interface
# =============================================================================

@runtime_checkable
class RandomSource(Protocol):
    """
    Anything exposing a uniform float in [0, 1).

    numpy.random.Generator (the default source) and random.Random both
    qualify.
    """

    @abstractmethod
    def random(self) -> float:
        ...


# =============================================================================
# Price projection
# =============================================================================

def project_prices(last_price: float, returns: Sequence[float]) -> List[float]:
    """
    Compound a return forecast into a price path.

    Day k's price is last_price * prod(1 + returns[:k+1]).

    Args:
        last_price: Most recent observed price
        returns: Forecast returns, one per future day

    Returns:
        One projected price per forecast return
    """
    if last_price <= 0:
        raise ValueError(f"last_price must be positive, got {last_price}")
    growth = np.cumprod(1.0 + np.asarray(returns, dtype=float))
    return [float(p) for p in last_price * growth]
