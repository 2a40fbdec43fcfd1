"""
Tests for the Random Walk Baseline (pricecast/models/random_walk.py)

Tests:
1. Training and the degenerate default state
2. Prediction bounds and modes
3. Seeded determinism
"""

import numpy as np
import pytest

from pricecast.config import BaselineConfig
from pricecast.models.random_walk import (
    DEFAULT_MEAN,
    DEFAULT_STD,
    ModelState,
    RandomWalkForecaster,
)


class SequenceSource:
    """Random source replaying fixed uniforms."""

    def __init__(self, values):
        self.values = list(values)
        self.i = 0

    def random(self):
        value = self.values[self.i % len(self.values)]
        self.i += 1
        return value


class TestTraining:
    """Tests for train()."""

    def test_starts_untrained(self):
        rw = RandomWalkForecaster()
        assert rw.state is ModelState.UNTRAINED
        assert rw.is_trained is False

    def test_fits_population_moments(self):
        """Test that std uses the population (ddof=0) formula."""
        returns = [0.01, -0.01, 0.03, -0.03]
        rw = RandomWalkForecaster()

        params = rw.train(returns)

        assert rw.is_trained
        assert params.mean == pytest.approx(0.0)
        assert params.std == pytest.approx(np.std(returns))
        assert params.n_samples == 4

    def test_filters_corrupt_returns(self):
        """Test that non-finite returns and |r| >= 1 are ignored in training."""
        rw = RandomWalkForecaster()
        rw.train([0.01, np.nan, 1.5, -2.0, np.inf, 0.03])

        assert rw.params.n_samples == 2
        assert rw.mean == pytest.approx(0.02)

    def test_no_usable_data_keeps_defaults(self):
        """Test that training with nothing usable keeps mean 0.0, std 0.01."""
        rw = RandomWalkForecaster()
        params = rw.train([np.nan, 5.0])

        assert rw.state is ModelState.TRAINED
        assert params.mean == DEFAULT_MEAN
        assert params.std == DEFAULT_STD

    def test_empty_training_does_not_raise(self):
        rw = RandomWalkForecaster()
        rw.train([])
        assert rw.is_trained

    def test_variance_floor(self):
        """Test that constant returns get std 0.001 from the variance floor."""
        rw = RandomWalkForecaster()
        rw.train([0.002] * 30)
        assert rw.std == pytest.approx(0.001)

    def test_retraining_replaces_params(self):
        """Test that retraining swaps in a new params record."""
        rw = RandomWalkForecaster()
        rw.train([0.01, 0.03])
        first = rw.params
        rw.train([-0.01, -0.03])

        assert rw.params is not first
        assert rw.mean == pytest.approx(-0.02)
        assert first.mean == pytest.approx(0.02)


class TestPrediction:
    """Tests for predict()."""

    def test_length_and_bounds_resampling(self, seeded_rng):
        """Test that resampled draws are clipped to +/-0.05."""
        rw = RandomWalkForecaster(rng=seeded_rng)
        rw.train([0.2, -0.2, 0.01])

        predictions = rw.predict([0.2, -0.2, 0.01], horizon=50)

        assert len(predictions) == 50
        assert np.all(np.abs(predictions) <= 0.05)

    def test_resamples_from_pool(self, seeded_rng):
        """Test that resampled values come from the supplied pool."""
        pool = [0.01, -0.02, 0.03]
        rw = RandomWalkForecaster(rng=seeded_rng)
        rw.train(pool)

        predictions = rw.predict(pool, horizon=100)

        assert set(np.round(predictions, 10)) <= set(np.round(pool, 10))

    def test_resample_index_selection(self):
        """Test that uniform u picks pool index floor(u * len)."""
        rw = RandomWalkForecaster(rng=SequenceSource([0.0, 0.5, 0.99]))
        rw.train([0.01])

        predictions = rw.predict([0.01, 0.02, 0.03], horizon=3)

        np.testing.assert_allclose(predictions, [0.01, 0.02, 0.03])

    def test_gaussian_without_history(self, seeded_rng):
        """Test that Gaussian draws match the trained moments."""
        rw = RandomWalkForecaster(rng=seeded_rng)
        rw.train(np.random.default_rng(0).normal(0.001, 0.01, size=500))

        predictions = rw.predict(None, horizon=2000)

        assert np.all(np.abs(predictions) <= 0.05)
        assert np.mean(predictions) == pytest.approx(rw.mean, abs=0.002)
        assert np.std(predictions) == pytest.approx(rw.std, rel=0.15)

    def test_gaussian_box_muller_value(self):
        # u1 = 1 - 0.0 = 1 gives z = 0, so the draw is the mean
        rw = RandomWalkForecaster(rng=SequenceSource([0.0, 0.25]))
        rw.train([0.01, 0.03])

        assert rw.predict([], horizon=1)[0] == pytest.approx(0.02)

    def test_non_finite_pool_falls_back_to_gaussian(self):
        """Test that a pool with no finite values uses Gaussian draws."""
        rw = RandomWalkForecaster(rng=SequenceSource([0.0, 0.25]))
        rw.train([0.01, 0.03])

        assert rw.predict([np.nan, np.inf], horizon=1)[0] == pytest.approx(0.02)

    def test_zero_horizon(self, seeded_rng):
        rw = RandomWalkForecaster(rng=seeded_rng)
        assert len(rw.predict([0.01], horizon=0)) == 0

    def test_negative_horizon_raises(self):
        with pytest.raises(ValueError, match="horizon"):
            RandomWalkForecaster().predict([0.01], horizon=-1)

    def test_untrained_predicts_with_defaults(self):
        """Test that an untrained model predicts with default parameters."""
        rw = RandomWalkForecaster(rng=SequenceSource([0.0, 0.25]))

        prediction = rw.predict(None, horizon=1)

        assert prediction[0] == pytest.approx(DEFAULT_MEAN)
        assert rw.state is ModelState.UNTRAINED

    def test_custom_clip(self, seeded_rng):
        """Test that prediction_clip from config bounds every draw."""
        rw = RandomWalkForecaster(BaselineConfig(prediction_clip=0.01), rng=seeded_rng)
        predictions = rw.predict([0.2, -0.2], horizon=20)
        assert set(np.round(predictions, 10)) <= {0.01, -0.01}


class TestDeterminism:
    """Tests for seeded reproducibility."""

    def test_same_seed_same_path(self):
        """Test that identically seeded sources give identical paths."""
        pool = [0.01, -0.02, 0.005, 0.03]
        a = RandomWalkForecaster(rng=np.random.default_rng(99)).predict(pool, horizon=20)
        b = RandomWalkForecaster(rng=np.random.default_rng(99)).predict(pool, horizon=20)
        np.testing.assert_array_equal(a, b)

    def test_default_source_is_numpy_generator(self):
        """Test that the default source is a numpy Generator seeded from config."""
        rw = RandomWalkForecaster(BaselineConfig(seed=1))

        assert isinstance(rw.rng, np.random.Generator)
        assert rw.rng.random() == np.random.default_rng(1).random()

    def test_seed_from_config(self):
        """Test that BaselineConfig.seed makes default sources reproducible."""
        config = BaselineConfig(seed=5)
        a = RandomWalkForecaster(config).predict(None, horizon=10)
        b = RandomWalkForecaster(config).predict(None, horizon=10)
        np.testing.assert_array_equal(a, b)

    def test_numpy_generator_is_a_valid_source(self):
        """Test injecting an explicit numpy Generator."""
        rw = RandomWalkForecaster(rng=np.random.default_rng(1))
        predictions = rw.predict([0.01, 0.02], horizon=10)
        assert len(predictions) == 10
