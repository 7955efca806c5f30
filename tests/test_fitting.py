"""Tests for quadrature-based coefficient estimation."""

import math

import numpy as np
import pytest

from polyoptics.basis import LegendreBasis
from polyoptics.fitting import (
    MAX_DEFAULT_WORKERS,
    MAX_TABLE_ENTRIES,
    auto_chunk_size,
    basis_products,
    resolve_workers,
    fit_coefficients,
    squared_norms,
)
from polyoptics.multi_index import MultiIndexSpace
from polyoptics.samples import SampleBatch, gauss_legendre_samples, uniform_samples


def make(degree: int) -> tuple[LegendreBasis, MultiIndexSpace]:
    return LegendreBasis(degree), MultiIndexSpace(degree)


class TestBasisProducts:
    """Tests for the tensor-product table."""

    def test_shape(self):
        basis, space = make(2)
        points = np.random.default_rng(0).uniform(-1, 1, (7, 4))
        table = basis_products(basis, space.array, points)
        assert table.shape == (7, len(space))

    def test_matches_direct_product(self):
        """Each entry should be the product of four 1D polynomials."""
        basis, space = make(3)
        points = np.random.default_rng(1).uniform(-1, 1, (5, 4))
        table = basis_products(basis, space.array, points)
        for s, x in enumerate(points):
            for m, (i, j, k, l) in enumerate(space):
                expected = basis[i](x[0]) * basis[j](x[1]) * basis[k](x[2]) * basis[l](x[3])
                assert table[s, m] == pytest.approx(expected, rel=1e-12, abs=1e-14)

    def test_constant_term(self):
        """The (0,0,0,0) term is (1/sqrt(2))^4 = 1/4 everywhere."""
        basis, space = make(1)
        points = np.random.default_rng(2).uniform(-1, 1, (4, 4))
        table = basis_products(basis, space.array, points)
        np.testing.assert_allclose(table[:, 0], 0.25)


class TestFitCoefficients:
    """Tests for coefficient estimation."""

    def test_constant_function_degree_zero(self):
        """100 samples of 5 at degree 0 give a single coefficient 16 * 5 / 4."""
        basis, space = make(0)
        samples = uniform_samples(lambda x: np.full(len(x), 5.0), 100, seed=3)
        coeffs = fit_coefficients(basis, space, samples)
        assert coeffs.shape == (1,)
        assert coeffs[0] == pytest.approx(20.0, rel=1e-12)

    def test_linear_function_recovered_exactly(self):
        """f = x0 projects onto the (1,0,0,0) term only."""
        basis, space = make(2)
        samples = gauss_legendre_samples(lambda x: x[:, 0], order=3)
        coeffs = fit_coefficients(basis, space, samples)

        target = space.index_of((1, 0, 0, 0))
        # ∫ x p_1(x) dx = sqrt(2/3); each ∫ p_0 dx = sqrt(2)
        expected = math.sqrt(2.0 / 3.0) * math.sqrt(2.0) ** 3
        assert coeffs[target] == pytest.approx(expected, rel=1e-12)
        others = np.delete(coeffs, target)
        np.testing.assert_allclose(others, 0.0, atol=1e-12)

    def test_output_length_matches_space(self):
        basis, space = make(4)
        samples = uniform_samples(lambda x: x[:, 1] * x[:, 2], 200, seed=0)
        assert fit_coefficients(basis, space, samples).shape == (len(space),)

    def test_threaded_chunks_match_sequential(self):
        """Chunking and worker count change rounding only."""
        basis, space = make(3)
        samples = uniform_samples(lambda x: np.sin(x.sum(axis=1)), 5_000, seed=4)
        sequential = fit_coefficients(basis, space, samples, workers=1, chunk_size=10_000)
        threaded = fit_coefficients(basis, space, samples, workers=4, chunk_size=700)
        np.testing.assert_allclose(threaded, sequential, rtol=1e-10, atol=1e-12)

    def test_weights_scale_coefficients(self):
        basis, space = make(2)
        base = uniform_samples(lambda x: x[:, 0] + x[:, 3], 300, seed=5)
        weighted = SampleBatch(base.points, base.values, weights=np.full(300, 2.5))
        np.testing.assert_allclose(
            fit_coefficients(basis, space, weighted),
            2.5 * fit_coefficients(basis, space, base),
            rtol=1e-12,
        )

    def test_zero_weight_sample_is_ignored_in_sum(self):
        basis, space = make(1)
        points = np.array([[0.2, 0.1, -0.3, 0.5], [0.9, 0.9, 0.9, 0.9]])
        with_outlier = SampleBatch(points, [1.0, 1000.0], weights=[1.0, 0.0])
        alone = SampleBatch(points[:1], [1.0])
        # The zero-weight sample still counts in N
        np.testing.assert_allclose(
            fit_coefficients(basis, space, with_outlier),
            0.5 * fit_coefficients(basis, space, alone),
        )

    def test_rejects_non_batch(self):
        basis, space = make(1)
        with pytest.raises(TypeError):
            fit_coefficients(basis, space, np.zeros((3, 5)))


class TestSquaredNorms:
    """Tests for the squared basis-product diagnostic."""

    def test_exact_quadrature_gives_unit_norms(self):
        basis, space = make(3)
        samples = gauss_legendre_samples(lambda x: np.zeros(len(x)), order=4)
        norms = squared_norms(basis, space, samples)
        np.testing.assert_allclose(norms, 1.0, rtol=1e-10)

    def test_monte_carlo_norms_near_one(self):
        basis, space = make(2)
        samples = uniform_samples(lambda x: np.zeros(len(x)), 100_000, seed=6)
        norms = squared_norms(basis, space, samples)
        np.testing.assert_allclose(norms, 1.0, atol=0.1)

    def test_values_do_not_matter(self):
        basis, space = make(2)
        a = uniform_samples(lambda x: np.zeros(len(x)), 500, seed=8)
        b = SampleBatch(a.points, np.full(500, 42.0))
        np.testing.assert_allclose(
            squared_norms(basis, space, a), squared_norms(basis, space, b)
        )


class TestAutoChunkSize:
    def test_bounds(self):
        assert auto_chunk_size(1) >= 1
        assert auto_chunk_size(10**9) == 1
        assert auto_chunk_size(210) * 210 <= 1 << 22

    def test_budget_shared_across_workers(self):
        """Concurrent tables together stay within the entry budget."""
        for workers in (1, 4, 64):
            chunk = auto_chunk_size(210, workers)
            assert chunk * 210 * workers <= MAX_TABLE_ENTRIES
        assert auto_chunk_size(210, 8) < auto_chunk_size(210, 1)


class TestResolveWorkers:
    def test_default_is_capped(self, monkeypatch):
        monkeypatch.setattr("polyoptics.fitting.os.cpu_count", lambda: 64)
        assert resolve_workers(None) == MAX_DEFAULT_WORKERS

    def test_default_small_machine(self, monkeypatch):
        monkeypatch.setattr("polyoptics.fitting.os.cpu_count", lambda: 2)
        assert resolve_workers(None) == 2

    def test_unknown_cpu_count(self, monkeypatch):
        monkeypatch.setattr("polyoptics.fitting.os.cpu_count", lambda: None)
        assert resolve_workers(None) == 1

    def test_explicit_count_not_capped(self):
        assert resolve_workers(32) == 32
        assert resolve_workers(0) == 1
