"""
Sample batches consumed by the fitter, and generators for them.

A sample is a point (x0, x1, x2, x3) nominally in [-1, 1]^4, the function
value at that point, and a weight (default 1). Ray tracing code produces
these in practice; the generators here cover testing and offline fitting
of analytic functions:

- ``uniform_samples``: i.i.d. uniform points (plain Monte Carlo)
- ``sobol_samples``: scrambled Sobol points (quasi-Monte Carlo)
- ``gauss_legendre_samples``: tensor Gauss-Legendre grid with weights
  chosen so the fitter reproduces the Gauss rule exactly
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

import numpy as np
from numpy.polynomial import legendre as leg
from scipy.stats import qmc

from polyoptics.errors import EmptyInputError
from polyoptics.multi_index import DIM

# Volume of [-1, 1]^4
DOMAIN_VOLUME = 16.0

SampleFunction = Callable[[np.ndarray], np.ndarray]


@dataclass
class SampleBatch:
    """
    Batch of weighted function samples on [-1, 1]^4.

    Attributes:
        points: Array of shape (N, 4)
        values: Array of shape (N,)
        weights: Array of shape (N,); all ones when not given
    """
    points: np.ndarray
    values: np.ndarray
    weights: Optional[np.ndarray] = field(default=None)

    def __post_init__(self):
        points = np.asarray(self.points, dtype=float)
        values = np.asarray(self.values, dtype=float)

        if points.size == 0:
            raise EmptyInputError("sample batch contains no samples")
        if points.ndim != 2 or points.shape[1] != DIM:
            raise ValueError(f"points must have shape (N, {DIM}), got {points.shape}")
        if values.shape != (points.shape[0],):
            raise ValueError(
                f"values must have shape ({points.shape[0]},), got {values.shape}"
            )

        if self.weights is None:
            weights = np.ones(points.shape[0])
        else:
            weights = np.asarray(self.weights, dtype=float)
            if weights.shape != values.shape:
                raise ValueError(
                    f"weights must have shape {values.shape}, got {weights.shape}"
                )

        if not (
            np.all(np.isfinite(points))
            and np.all(np.isfinite(values))
            and np.all(np.isfinite(weights))
        ):
            raise ValueError("samples must be finite")

        self.points = points
        self.values = values
        self.weights = weights

    def __len__(self) -> int:
        return self.points.shape[0]

    @classmethod
    def from_array(cls, data: np.ndarray) -> SampleBatch:
        """
        Build from an (N, 5) or (N, 6) array.

        Columns are x0, x1, x2, x3, value and optionally weight.
        """
        data = np.asarray(data, dtype=float)
        if data.size == 0:
            raise EmptyInputError("sample array contains no samples")
        if data.ndim != 2 or data.shape[1] not in (DIM + 1, DIM + 2):
            raise ValueError(
                f"sample array must have shape (N, {DIM + 1}) or (N, {DIM + 2}), "
                f"got {data.shape}"
            )
        weights = data[:, DIM + 1] if data.shape[1] == DIM + 2 else None
        return cls(points=data[:, :DIM], values=data[:, DIM], weights=weights)

    @classmethod
    def from_tuples(cls, samples: Iterable[tuple]) -> SampleBatch:
        """Build from an iterable of (x0, x1, x2, x3, value[, weight]) tuples."""
        rows = list(samples)
        if not rows:
            raise EmptyInputError("no samples given")
        return cls.from_array(np.array(rows, dtype=float))

    def chunks(self, chunk_size: int) -> Iterable[SampleBatch]:
        """Split into consecutive batches of at most ``chunk_size`` samples."""
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        for start in range(0, len(self), chunk_size):
            stop = start + chunk_size
            yield SampleBatch(
                self.points[start:stop],
                self.values[start:stop],
                self.weights[start:stop],
            )


def _evaluate(func: SampleFunction, points: np.ndarray) -> np.ndarray:
    values = np.asarray(func(points), dtype=float)
    if values.shape != (points.shape[0],):
        raise ValueError(
            f"function must return shape ({points.shape[0]},), got {values.shape}"
        )
    return values


def uniform_samples(
    func: SampleFunction,
    n_samples: int,
    seed: Optional[int] = None,
) -> SampleBatch:
    """
    Sample ``func`` at i.i.d. uniform points in [-1, 1]^4.

    Args:
        func: Vectorized function taking (N, 4) points and returning (N,)
        n_samples: Number of samples
        seed: Random seed

    Returns:
        SampleBatch with unit weights
    """
    if n_samples < 1:
        raise EmptyInputError(f"n_samples must be >= 1, got {n_samples}")
    rng = np.random.default_rng(seed)
    points = rng.uniform(-1.0, 1.0, size=(n_samples, DIM))
    return SampleBatch(points, _evaluate(func, points))


def sobol_samples(
    func: SampleFunction,
    m: int,
    seed: Optional[int] = None,
) -> SampleBatch:
    """
    Sample ``func`` at 2**m scrambled Sobol points in [-1, 1]^4.

    Low-discrepancy points converge faster than i.i.d. ones for the same
    estimator, with no change needed in the fitter.
    """
    sampler = qmc.Sobol(d=DIM, scramble=True, seed=seed)
    unit = sampler.random_base2(m=m)
    points = qmc.scale(unit, -1.0, 1.0)
    return SampleBatch(points, _evaluate(func, points))


def gauss_legendre_samples(func: SampleFunction, order: int) -> SampleBatch:
    """
    Sample ``func`` on an ``order``^4 tensor Gauss-Legendre grid.

    The fitter estimates each coefficient as (16 / N) Σ w v φ. Setting
    w = N Π_d g_d / 16, where g_d are the 1D Gauss weights, turns that sum
    into the Gauss rule Σ Π g_d v φ, which integrates polynomials of degree
    up to 2 * order - 1 per variable exactly.

    Args:
        func: Vectorized function taking (N, 4) points and returning (N,)
        order: Number of Gauss nodes per dimension

    Returns:
        SampleBatch of order**4 weighted samples
    """
    if order < 1:
        raise EmptyInputError(f"order must be >= 1, got {order}")
    nodes, gauss_weights = leg.leggauss(order)

    grids = np.meshgrid(*([nodes] * DIM), indexing="ij")
    points = np.stack([g.ravel() for g in grids], axis=1)
    weight_grids = np.meshgrid(*([gauss_weights] * DIM), indexing="ij")
    product_weights = np.prod(np.stack([g.ravel() for g in weight_grids], axis=1), axis=1)

    n_samples = points.shape[0]
    weights = product_weights * n_samples / DOMAIN_VOLUME
    return SampleBatch(points, _evaluate(func, points), weights)


__all__ = [
    "DOMAIN_VOLUME",
    "SampleBatch",
    "uniform_samples",
    "sobol_samples",
    "gauss_legendre_samples",
]
