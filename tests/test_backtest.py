"""
Tests for Backtests (pricecast/evaluation/backtest.py)

Tests:
1. Holdout backtest never sees the test period
2. Forecaster scoring in return units
3. Random walk scoring on the same samples
"""

import numpy as np
import pytest

from pricecast.evaluation.backtest import (
    baseline_on_samples,
    evaluate_on_samples,
    holdout_backtest,
)
from pricecast.evaluation.metrics import LengthMismatchError
from pricecast.features.normalization import fit_normalization, normalize
from pricecast.features.windows import InsufficientDataError, build_windows
from pricecast.models.random_walk import RandomWalkForecaster


class TargetOracle:
    """Forecaster that returns the normalized future it was built from."""

    def __init__(self, normalized, window_size, horizon):
        self.normalized = np.asarray(normalized)
        self.window_size = window_size
        self.horizon = horizon

    def predict(self, window):
        flat = window[0, :, 0]
        for i in range(len(self.normalized) - self.window_size - self.horizon + 1):
            if np.allclose(self.normalized[i:i + self.window_size], flat, atol=1e-6):
                start = i + self.window_size
                return self.normalized[start:start + self.horizon]
        raise AssertionError("window not found")


class ConstantForecaster:
    def __init__(self, value, horizon):
        self.value = value
        self.horizon = horizon

    def predict(self, window):
        return [self.value] * self.horizon


@pytest.fixture
def returns():
    return np.random.default_rng(21).normal(0.0, 0.01, size=120)


class TestHoldoutBacktest:
    """Tests for holdout_backtest()."""

    def test_trains_on_prefix_only(self, returns):
        """Test that only returns before the holdout window are used for training."""
        rw = RandomWalkForecaster(rng=np.random.default_rng(0))
        holdout_backtest(rw, returns, test_size=20)

        assert rw.params.n_samples == 100
        assert rw.mean == pytest.approx(np.mean(returns[:100]))

    def test_forecasts_only_training_values(self):
        """Test that forecasts are drawn from training returns, never the test period."""
        # Test period values are unique and never appear in training
        train = [0.01, -0.01] * 20
        test = [0.031, 0.032, 0.033, 0.034, 0.035]
        rw = RandomWalkForecaster(rng=np.random.default_rng(0))

        report = holdout_backtest(rw, train + test, test_size=5)

        assert report.sample_size == 5
        # Every forecast is +/-0.01, so each error is at least 0.021
        assert report.mae >= 0.021 - 1e-12

    def test_insufficient_returns(self, returns):
        """Test that test_size + 1 returns are required."""
        with pytest.raises(InsufficientDataError):
            holdout_backtest(RandomWalkForecaster(), returns[:50], test_size=50)

    def test_invalid_test_size(self, returns):
        with pytest.raises(ValueError):
            holdout_backtest(RandomWalkForecaster(), returns, test_size=0)


class TestEvaluateOnSamples:
    """Tests for evaluate_on_samples()."""

    def test_oracle_scores_perfectly(self, returns):
        """Test that a forecaster returning the true targets scores zero error."""
        params = fit_normalization(returns)
        normalized = normalize(returns, params)
        split = build_windows(normalized, window_size=10, horizon=3)
        oracle = TargetOracle(normalized, 10, 3)

        report, predictions = evaluate_on_samples(oracle, split.test, returns, params)

        assert predictions.shape == (len(split.test), 3)
        assert report.sample_size == len(split.test) * 3
        assert report.rmse == pytest.approx(0.0, abs=1e-12)
        assert report.direction_accuracy == 100.0

    def test_predictions_are_denormalized(self, returns):
        """Test that normalized 0.0 maps back to the fitted minimum return."""
        params = fit_normalization(returns)
        split = build_windows(normalize(returns, params), window_size=10, horizon=3)

        _, predictions = evaluate_on_samples(
            ConstantForecaster(0.0, 3), split.test, returns, params
        )

        np.testing.assert_allclose(predictions, params.min)

    def test_wrong_output_length(self, returns):
        """Test that a forecaster returning fewer than horizon values is rejected."""
        params = fit_normalization(returns)
        split = build_windows(normalize(returns, params), window_size=10, horizon=3)

        with pytest.raises(LengthMismatchError):
            evaluate_on_samples(ConstantForecaster(0.5, 2), split.test, returns, params)

    def test_no_samples(self, returns):
        report, _ = evaluate_on_samples(
            ConstantForecaster(0.5, 3), (), returns, fit_normalization(returns)
        )
        assert report.sample_size == 0


class TestBaselineOnSamples:
    """Tests for baseline_on_samples()."""

    def test_resamples_each_input_window(self, returns):
        """Test that each baseline row only contains returns from its own input window."""
        params = fit_normalization(returns)
        split = build_windows(normalize(returns, params), window_size=10, horizon=3)
        rw = RandomWalkForecaster(rng=np.random.default_rng(3))
        rw.train(returns[:split.train_end])

        report, predictions = baseline_on_samples(rw, split.test, returns)

        assert predictions.shape == (len(split.test), 3)
        assert report.sample_size == len(split.test) * 3
        for sample, row in zip(split.test, predictions):
            pool = np.round(returns[sample.index:sample.index + 10], 12)
            assert set(np.round(row, 12)) <= set(pool)
