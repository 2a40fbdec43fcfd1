"""
Tests for Windowed Samples (pricecast/features/windows.py)

Tests:
1. Sample construction and the sample floor
2. Chronological split (anti-leakage)
3. Non-finite sample discarding
4. Dense tensor layout
"""

import numpy as np
import pytest

from pricecast.features.windows import (
    InsufficientDataError,
    build_windows,
    latest_window,
)


@pytest.fixture
def series():
    return np.linspace(0.0, 1.0, 100)


class TestSampleFloor:
    """Tests for InsufficientDataError."""

    def test_nine_returns_window_five_horizon_five(self):
        """Test that 9 returns with window 5 and horizon 5 produce no samples."""
        with pytest.raises(InsufficientDataError):
            build_windows(np.full(9, 0.5), window_size=5, horizon=5)

    def test_exactly_ten_samples_is_insufficient(self):
        """Test that the sample count must exceed the floor of 10."""
        # 19 - 5 - 5 + 1 = 10, which does not exceed the floor
        with pytest.raises(InsufficientDataError, match="10"):
            build_windows(np.full(19, 0.5), window_size=5, horizon=5)

    def test_eleven_samples_is_enough(self):
        split = build_windows(np.full(20, 0.5), window_size=5, horizon=5)
        assert split.total_samples == 11

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            build_windows([], window_size=5, horizon=5)


class TestBuildWindows:
    """Tests for sample content and the split."""

    def test_sample_content(self, series):
        """Test that a sample's input and target are adjacent slices."""
        split = build_windows(series, window_size=10, horizon=3)
        sample = split.train[4]

        assert sample.index == 4
        np.testing.assert_array_equal(sample.input, series[4:14])
        np.testing.assert_array_equal(sample.target, series[14:17])

    def test_sample_count_and_split(self, series):
        """Test sample count and the 80/20 chronological split."""
        split = build_windows(series, window_size=10, horizon=3, test_fraction=0.2)

        assert split.total_samples == 88
        assert split.split_index == 70
        assert len(split.train) == 70
        assert len(split.test) == 18

    def test_train_precedes_test(self, series):
        """Test that every train sample starts before every test sample."""
        split = build_windows(series, window_size=7, horizon=4, test_fraction=0.35)

        train_indices = [s.index for s in split.train]
        test_indices = [s.index for s in split.test]

        assert train_indices == sorted(train_indices)
        assert test_indices == sorted(test_indices)
        assert max(train_indices) < min(test_indices)

    def test_zero_test_fraction(self, series):
        split = build_windows(series, window_size=10, horizon=3, test_fraction=0.0)
        assert len(split.test) == 0
        assert len(split.train) == split.total_samples

    def test_train_never_empty(self):
        """Test that the split index is floored to 1."""
        split = build_windows(np.full(20, 0.5), window_size=5, horizon=5, test_fraction=0.99)
        assert len(split.train) == 1

    def test_train_end(self, series):
        """Test that train_end is one past the last target of the last train sample."""
        split = build_windows(series, window_size=10, horizon=3)
        assert split.train_end == split.train[-1].index + 13

    @pytest.mark.parametrize("kwargs", [
        {"window_size": 0},
        {"horizon": 0},
        {"test_fraction": 1.0},
        {"test_fraction": -0.1},
    ])
    def test_invalid_arguments(self, series, kwargs):
        with pytest.raises(ValueError):
            build_windows(series, **kwargs)


class TestNonFiniteSamples:
    """Tests for discarding samples that touch NaN."""

    def test_samples_touching_nan_are_discarded(self, series):
        """Test that samples whose input or target touches NaN are dropped."""
        values = series.copy()
        values[50] = np.nan

        split = build_windows(values, window_size=10, horizon=3)

        # Samples starting at 38..50 cover position 50
        assert split.discarded == 13
        kept = [s.index for s in split.train + split.test]
        assert not any(38 <= i <= 50 for i in kept)
        for sample in split.train + split.test:
            assert np.all(np.isfinite(sample.input))
            assert np.all(np.isfinite(sample.target))

    def test_split_is_over_kept_samples(self, series):
        """Test that the split index is computed over surviving samples."""
        values = series.copy()
        values[50] = np.nan

        split = build_windows(values, window_size=10, horizon=3, test_fraction=0.2)

        kept = split.total_samples - split.discarded
        assert split.split_index == int(kept * 0.8)

    def test_all_nan_raises(self):
        with pytest.raises(InsufficientDataError, match="non-finite"):
            build_windows(np.full(50, np.nan), window_size=5, horizon=5)


class TestTensorLayout:
    """Tests for the dense arrays handed to an external learner."""

    def test_to_arrays_shapes(self, series):
        """Test the [n, window, 1] and [n, horizon] float32 layouts."""
        split = build_windows(series, window_size=10, horizon=3)
        train_x, train_y, test_x, test_y = split.to_arrays()

        assert train_x.shape == (70, 10, 1)
        assert train_y.shape == (70, 3)
        assert test_x.shape == (18, 10, 1)
        assert test_y.shape == (18, 3)
        assert train_x.dtype == np.float32

    def test_empty_test_keeps_shape(self, series):
        """Test that an empty test set keeps its trailing dimensions."""
        split = build_windows(series, window_size=10, horizon=3, test_fraction=0.0)
        _, _, test_x, test_y = split.to_arrays()

        assert test_x.shape == (0, 10, 1)
        assert test_y.shape == (0, 3)

    def test_latest_window(self, series):
        """Test that the latest window holds the last window_size values."""
        window = latest_window(series, 10)

        assert window.shape == (1, 10, 1)
        np.testing.assert_allclose(window[0, :, 0], series[-10:], rtol=1e-6)

    def test_latest_window_too_short(self):
        with pytest.raises(InsufficientDataError):
            latest_window([0.1, 0.2], 5)
