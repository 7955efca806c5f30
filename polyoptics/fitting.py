"""
Quadrature-based coefficient estimation for the 4D Legendre expansion.

For an orthonormal tensor-product basis, the coefficient of term (i, j, k, l)
is the projection

    c_ijkl = ∫_{[-1,1]^4} f(x) p_i(x0) p_j(x1) p_k(x2) p_l(x3) dx

which is estimated from N samples as

    c_ijkl ≈ (16 / N) Σ_s w_s f(x_s) p_i(x0_s) p_j(x1_s) p_k(x2_s) p_l(x3_s)

16 being the volume of the domain. The estimate is unbiased for uniformly
drawn samples.

All coefficients are computed at once as a matrix product against the table
of basis products (one column per multi-index). Samples are split into
chunks whose partial sums are computed independently, optionally on a
thread pool, and added up afterwards.
"""

from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

import numpy as np

from polyoptics.basis import LegendreBasis
from polyoptics.errors import EmptyInputError
from polyoptics.multi_index import MultiIndexSpace
from polyoptics.samples import DOMAIN_VOLUME, SampleBatch

logger = logging.getLogger(__name__)

# Upper bound on basis-product table entries alive at once, summed over workers
MAX_TABLE_ENTRIES = 1 << 22

# Default thread count ceiling when workers is None
MAX_DEFAULT_WORKERS = 8


def basis_products(
    basis: LegendreBasis,
    multi_indices: np.ndarray,
    points: np.ndarray,
) -> np.ndarray:
    """
    Evaluate tensor-product basis terms at a batch of points.

    Args:
        basis: 1D basis shared by every dimension
        multi_indices: Integer array of shape (M, dim)
        points: Array of shape (N, dim)

    Returns:
        Array of shape (N, M) with entry [s, m] equal to
        Π_d basis[multi_indices[m, d]](points[s, d])
    """
    vals = basis.evaluate(points)  # (N, dim, degree + 1)
    result = np.ones((points.shape[0], multi_indices.shape[0]))
    for d in range(multi_indices.shape[1]):
        result *= vals[:, d, multi_indices[:, d]]
    return result


def resolve_workers(workers: Optional[int]) -> int:
    """Thread count to use; None means the CPU count, capped at MAX_DEFAULT_WORKERS."""
    if workers is None:
        return min(os.cpu_count() or 1, MAX_DEFAULT_WORKERS)
    return max(1, workers)


def auto_chunk_size(num_terms: int, workers: int = 1) -> int:
    """
    Largest chunk for which ``workers`` concurrent basis-product tables stay
    under MAX_TABLE_ENTRIES in total.
    """
    budget = MAX_TABLE_ENTRIES // max(1, workers)
    return max(1, budget // max(1, num_terms))


def _reduce_chunks(
    task: Callable[[SampleBatch], np.ndarray],
    samples: SampleBatch,
    chunk_size: int,
    workers: int,
) -> np.ndarray:
    """Map ``task`` over sample chunks and sum the partial results."""
    chunks = list(samples.chunks(chunk_size))
    workers = max(1, min(workers, len(chunks)))

    if workers == 1:
        partials = [task(chunk) for chunk in chunks]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            partials = list(executor.map(task, chunks))

    return np.sum(partials, axis=0)


def _check_samples(samples: SampleBatch) -> None:
    if not isinstance(samples, SampleBatch):
        raise TypeError(f"Expected SampleBatch, got {type(samples).__name__}")
    if len(samples) == 0:
        raise EmptyInputError("cannot fit an expansion to zero samples")


def fit_coefficients(
    basis: LegendreBasis,
    space: MultiIndexSpace,
    samples: SampleBatch,
    workers: Optional[int] = None,
    chunk_size: Optional[int] = None,
) -> np.ndarray:
    """
    Estimate one coefficient per multi-index by Monte Carlo quadrature.

    Args:
        basis: 1D orthonormal basis of degree >= space.degree
        space: Multi-index space defining the coefficient layout
        samples: Weighted function samples on [-1, 1]^4
        workers: Thread count for chunk reduction (None = CPU count, capped
            at MAX_DEFAULT_WORKERS)
        chunk_size: Samples per chunk (None = sized from the term and worker
            counts)

    Returns:
        Array of shape (len(space),) in canonical multi-index order

    Raises:
        EmptyInputError: If samples is empty
    """
    _check_samples(samples)
    workers = resolve_workers(workers)
    if chunk_size is None:
        chunk_size = auto_chunk_size(len(space), workers)
    indices = space.array

    def task(chunk: SampleBatch) -> np.ndarray:
        table = basis_products(basis, indices, chunk.points)
        return (chunk.weights * chunk.values) @ table

    start = time.perf_counter()
    total = _reduce_chunks(task, samples, chunk_size, workers)
    coeffs = DOMAIN_VOLUME / len(samples) * total

    logger.debug(
        "Fitted %d coefficients from %d samples in %.3fs",
        len(coeffs),
        len(samples),
        time.perf_counter() - start,
    )
    return coeffs


def squared_norms(
    basis: LegendreBasis,
    space: MultiIndexSpace,
    samples: SampleBatch,
    workers: Optional[int] = None,
    chunk_size: Optional[int] = None,
) -> np.ndarray:
    """
    Quadrature estimate of ∫ φ_m(x)^2 dx for every multi-index m.

    Same estimator as ``fit_coefficients`` with the sample value replaced by
    the basis product itself. For an orthonormal basis and a good sample set
    every entry should be close to 1; large deviations point at too few or
    badly distributed samples.

    Returns:
        Array of shape (len(space),)
    """
    _check_samples(samples)
    workers = resolve_workers(workers)
    if chunk_size is None:
        chunk_size = auto_chunk_size(len(space), workers)
    indices = space.array

    def task(chunk: SampleBatch) -> np.ndarray:
        table = basis_products(basis, indices, chunk.points)
        return chunk.weights @ (table * table)

    total = _reduce_chunks(task, samples, chunk_size, workers)
    return DOMAIN_VOLUME / len(samples) * total


__all__ = [
    "MAX_TABLE_ENTRIES",
    "basis_products",
    "MAX_DEFAULT_WORKERS",
    "resolve_workers",
    "auto_chunk_size",
    "fit_coefficients",
    "squared_norms",
]
