"""Tests for sample batches and sample generators."""

import numpy as np
import pytest

from polyoptics.errors import EmptyInputError
from polyoptics.samples import (
    SampleBatch,
    gauss_legendre_samples,
    sobol_samples,
    uniform_samples,
)


def sum_of_coordinates(x: np.ndarray) -> np.ndarray:
    return x.sum(axis=1)


class TestSampleBatch:
    """Tests for SampleBatch validation and construction."""

    def test_default_weights_are_one(self):
        batch = SampleBatch(np.zeros((3, 4)), np.arange(3.0))
        np.testing.assert_array_equal(batch.weights, np.ones(3))
        assert len(batch) == 3

    def test_explicit_weights(self):
        batch = SampleBatch(np.zeros((2, 4)), [1.0, 2.0], weights=[0.5, 2.0])
        np.testing.assert_array_equal(batch.weights, [0.5, 2.0])

    def test_from_tuples(self):
        batch = SampleBatch.from_tuples([
            (0.1, 0.2, 0.3, 0.4, 5.0),
            (-0.1, -0.2, -0.3, -0.4, 6.0),
        ])
        assert batch.points.shape == (2, 4)
        np.testing.assert_array_equal(batch.values, [5.0, 6.0])
        np.testing.assert_array_equal(batch.weights, [1.0, 1.0])

    def test_from_array_with_weight_column(self):
        data = np.array([[0.0, 0.0, 0.0, 0.0, 1.0, 3.0]])
        batch = SampleBatch.from_array(data)
        np.testing.assert_array_equal(batch.weights, [3.0])
        np.testing.assert_array_equal(batch.values, [1.0])

    def test_empty_raises(self):
        with pytest.raises(EmptyInputError):
            SampleBatch(np.empty((0, 4)), np.empty(0))
        with pytest.raises(EmptyInputError):
            SampleBatch.from_tuples([])
        with pytest.raises(EmptyInputError):
            SampleBatch.from_array(np.empty((0, 5)))

    def test_wrong_point_dimension_raises(self):
        with pytest.raises(ValueError):
            SampleBatch(np.zeros((3, 3)), np.zeros(3))

    def test_value_length_mismatch_raises(self):
        with pytest.raises(ValueError):
            SampleBatch(np.zeros((3, 4)), np.zeros(2))

    def test_weight_length_mismatch_raises(self):
        with pytest.raises(ValueError):
            SampleBatch(np.zeros((3, 4)), np.zeros(3), weights=np.ones(4))

    def test_non_finite_raises(self):
        points = np.zeros((2, 4))
        points[1, 2] = np.nan
        with pytest.raises(ValueError, match="finite"):
            SampleBatch(points, np.zeros(2))
        with pytest.raises(ValueError, match="finite"):
            SampleBatch(np.zeros((2, 4)), [1.0, np.inf])

    def test_bad_array_shape_raises(self):
        with pytest.raises(ValueError):
            SampleBatch.from_array(np.zeros((4, 7)))

    def test_chunks_cover_all_samples(self):
        rng = np.random.default_rng(0)
        batch = SampleBatch(rng.uniform(-1, 1, (10, 4)), rng.normal(size=10))
        chunks = list(batch.chunks(4))
        assert [len(c) for c in chunks] == [4, 4, 2]
        np.testing.assert_array_equal(np.concatenate([c.values for c in chunks]), batch.values)

    def test_chunks_reject_zero_size(self):
        batch = SampleBatch(np.zeros((2, 4)), np.zeros(2))
        with pytest.raises(ValueError):
            list(batch.chunks(0))


class TestUniformSamples:
    def test_shape_and_range(self):
        batch = uniform_samples(sum_of_coordinates, 500, seed=1)
        assert batch.points.shape == (500, 4)
        assert np.all(batch.points >= -1) and np.all(batch.points <= 1)
        np.testing.assert_allclose(batch.values, batch.points.sum(axis=1))

    def test_seed_is_reproducible(self):
        a = uniform_samples(sum_of_coordinates, 50, seed=7)
        b = uniform_samples(sum_of_coordinates, 50, seed=7)
        np.testing.assert_array_equal(a.points, b.points)

    def test_zero_samples_raises(self):
        with pytest.raises(EmptyInputError):
            uniform_samples(sum_of_coordinates, 0)

    def test_bad_function_output_raises(self):
        with pytest.raises(ValueError):
            uniform_samples(lambda x: x, 10, seed=0)


class TestSobolSamples:
    def test_count_and_range(self):
        batch = sobol_samples(sum_of_coordinates, m=8, seed=3)
        assert len(batch) == 256
        assert np.all(batch.points >= -1) and np.all(batch.points <= 1)


class TestGaussLegendreSamples:
    def test_grid_size(self):
        batch = gauss_legendre_samples(sum_of_coordinates, order=3)
        assert len(batch) == 3 ** 4

    def test_weights_sum_to_sample_count(self):
        """Σ Π g_d = 2^4 = 16, so the rescaled weights sum to N."""
        batch = gauss_legendre_samples(sum_of_coordinates, order=4)
        assert batch.weights.sum() == pytest.approx(len(batch))

    def test_integrates_polynomial_exactly(self):
        """(16 / N) Σ w f reproduces ∫ x0^2 x1^2 dx = (2/3)^2 * 4."""
        batch = gauss_legendre_samples(lambda x: x[:, 0] ** 2 * x[:, 1] ** 2, order=2)
        integral = 16.0 / len(batch) * np.sum(batch.weights * batch.values)
        assert integral == pytest.approx(4.0 * (2.0 / 3.0) ** 2, rel=1e-12)

    def test_zero_order_raises(self):
        with pytest.raises(EmptyInputError):
            gauss_legendre_samples(sum_of_coordinates, order=0)
