"""
Tensor-product Legendre surrogate of a 4-input scalar function.

This module implements the Legendre4d class that:
- Represents f(x0, x1, x2, x3) on [-1, 1]^4 as a total-degree expansion
  in the orthonormal Legendre basis
- Learns coefficients from weighted samples via quadrature projection
- Evaluates the surrogate at arbitrary points (extrapolation included)
- Compresses itself by zeroing small coefficients
- Exports per-polynomial lookup tables for table-driven evaluation

In the optics use case, the four inputs are a ray's position and direction
on the entrance plane of a lens system and the value is one component of
the outgoing ray, so a fitted expansion replaces tracing through the lens.
"""

from __future__ import annotations

import logging
from typing import Iterator, Optional, Union

import numpy as np

from polyoptics.basis import LegendreBasis
from polyoptics.config import ExpansionConfig
from polyoptics.fitting import (
    auto_chunk_size,
    basis_products,
    fit_coefficients,
    squared_norms,
)
from polyoptics.multi_index import DIM, MultiIndexSpace
from polyoptics.samples import SampleBatch
from polyoptics.sparsify import SparsifyReport, sparsify_coefficients

logger = logging.getLogger(__name__)

SampleInput = Union[SampleBatch, np.ndarray, list]


class Legendre4d:
    """
    4D Legendre polynomial expansion with a total-degree bound.

    The surrogate is represented as:
        f(x) ≈ Σ_{i+j+k+l ≤ degree} c_ijkl p_i(x0) p_j(x1) p_k(x2) p_l(x3)

    where p_n are orthonormal Legendre polynomials on [-1, 1]. Coefficients
    are stored in canonical multi-index order (see ``MultiIndexSpace``).

    Coefficients start at 1.0 and are replaced wholesale by ``fit``;
    ``sparsify`` prunes them in place.

    Attributes:
        degree: Maximum total degree
        basis: LegendreBasis shared by all four inputs
        space: MultiIndexSpace mapping linear index <-> (i, j, k, l)
        coeffs: Coefficient array of shape (len(space),)

    Example:
        >>> from polyoptics import Legendre4d, uniform_samples
        >>> samples = uniform_samples(lambda x: x[:, 0], 20_000, seed=0)
        >>> expansion = Legendre4d(degree=2).fit(samples)
        >>> expansion.evaluate(np.array([0.3, 0.0, 0.0, 0.0]))  # ≈ 0.3
    """

    def __init__(
        self,
        degree: int,
        workers: Optional[int] = None,
        chunk_size: Optional[int] = None,
        lut_resolution: int = 256,
    ):
        """
        Initialize an unfitted expansion.

        Args:
            degree: Maximum total degree (0 <= degree <= MAX_DEGREE)
            workers: Threads used when fitting (None = CPU count, at most 8)
            chunk_size: Samples per fitting chunk (None = automatic)
            lut_resolution: Default lookup table size

        Raises:
            InvalidDegreeError: If degree is out of range
        """
        self.space = MultiIndexSpace(degree)
        self.degree = self.space.degree
        self.basis = LegendreBasis(self.degree)
        self.workers = workers
        self.chunk_size = chunk_size
        self.lut_resolution = lut_resolution
        self.coeffs: np.ndarray = np.ones(len(self.space))
        self._is_fitted = False

    @classmethod
    def from_config(cls, config: ExpansionConfig) -> Legendre4d:
        """Create an unfitted expansion from an ExpansionConfig."""
        config.validate()
        return cls(
            degree=config.degree,
            workers=config.workers,
            chunk_size=config.chunk_size,
            lut_resolution=config.lut_resolution,
        )

    @property
    def num_terms(self) -> int:
        return len(self.space)

    @property
    def is_fitted(self) -> bool:
        return self._is_fitted

    @property
    def nonzero_count(self) -> int:
        return int(np.count_nonzero(self.coeffs))

    def __len__(self) -> int:
        return self.num_terms

    @staticmethod
    def _as_batch(
        samples: SampleInput,
        values: Optional[np.ndarray] = None,
        weights: Optional[np.ndarray] = None,
    ) -> SampleBatch:
        if isinstance(samples, SampleBatch):
            if values is not None or weights is not None:
                raise ValueError("values/weights must not be given with a SampleBatch")
            return samples
        if values is None:
            return SampleBatch.from_array(np.asarray(samples, dtype=float))
        return SampleBatch(samples, values, weights)

    def fit(
        self,
        samples: SampleInput,
        values: Optional[np.ndarray] = None,
        weights: Optional[np.ndarray] = None,
    ) -> Legendre4d:
        """
        Fit coefficients to samples by quadrature projection.

        Each coefficient is estimated as
            c_m = (16 / N) Σ_s w_s v_s φ_m(x_s)

        which is unbiased when the sample points are uniform on [-1, 1]^4.
        The whole coefficient vector is replaced.

        Args:
            samples: One of
                - a SampleBatch
                - an (N, 5) or (N, 6) array of (x0, x1, x2, x3, value[, weight])
                - an (N, 4) array of points, with ``values`` given
            values: Function values of shape (N,) when samples are bare points
            weights: Optional per-sample weights of shape (N,)

        Returns:
            self, for method chaining

        Raises:
            EmptyInputError: If there are no samples
            ValueError: If the samples have the wrong shape or are not finite
        """
        batch = self._as_batch(samples, values, weights)
        self.coeffs = fit_coefficients(
            self.basis,
            self.space,
            batch,
            workers=self.workers,
            chunk_size=self.chunk_size,
        )
        self._is_fitted = True
        return self

    def squared_norms(self, samples: SampleInput) -> np.ndarray:
        """
        Quadrature estimate of ∫ φ_m^2 for each term, using the sample points.

        Values far from 1 mean the sample set integrates that term poorly.
        """
        batch = self._as_batch(samples)
        return squared_norms(
            self.basis,
            self.space,
            batch,
            workers=self.workers,
            chunk_size=self.chunk_size,
        )

    def evaluate(self, x: np.ndarray) -> Union[np.ndarray, float]:
        """
        Evaluate the expansion at given point(s).

        Terms with a zero coefficient are skipped. Points outside [-1, 1]^4
        are evaluated as-is; accuracy degrades quickly out there.

        Args:
            x: Point of shape (4,) or batch of shape (N, 4)

        Returns:
            Float for a single point, array of shape (N,) for a batch
        """
        x = np.asarray(x, dtype=float)
        single_point = (x.ndim == 1)
        if single_point:
            x = x.reshape(1, -1)
        if x.ndim != 2 or x.shape[1] != DIM:
            raise ValueError(f"Expected points of shape (N, {DIM}), got {x.shape}")

        active = np.flatnonzero(self.coeffs)
        result = np.zeros(x.shape[0])
        if active.size > 0:
            indices = self.space.array[active]
            coeffs = self.coeffs[active]
            step = auto_chunk_size(active.size)
            for start in range(0, x.shape[0], step):
                stop = start + step
                result[start:stop] = basis_products(self.basis, indices, x[start:stop]) @ coeffs

        if single_point:
            return float(result[0])
        return result

    def __call__(self, x: np.ndarray) -> Union[np.ndarray, float]:
        return self.evaluate(x)

    def sparsify(self, keep_count: int, exact: bool = False) -> SparsifyReport:
        """
        Zero small coefficients in place so at most ``keep_count`` survive.

        The default threshold cut may leave fewer than ``keep_count`` nonzero
        coefficients when magnitudes tie at the cutoff; pass ``exact=True``
        for exact top-k selection.

        Returns:
            SparsifyReport with the threshold and sorted magnitudes
        """
        self.coeffs, report = sparsify_coefficients(self.coeffs, keep_count, exact=exact)
        return report

    def lookup_tables(self, resolution: Optional[int] = None) -> np.ndarray:
        """
        Discretized basis polynomials for table-driven evaluation.

        Args:
            resolution: Entries per table (default: ``lut_resolution``)

        Returns:
            Array of shape (degree + 1, resolution) sampling p_0 .. p_degree
            evenly over [-1, 1]
        """
        if resolution is None:
            resolution = self.lut_resolution
        return self.basis.lookup_tables(resolution)

    def get_coefficients(self) -> np.ndarray:
        """Return copy of the coefficients."""
        return self.coeffs.copy()

    def set_coefficients(self, coeffs: np.ndarray) -> Legendre4d:
        """
        Set coefficients directly.

        Args:
            coeffs: Coefficient array of shape (num_terms,)

        Returns:
            self, for method chaining
        """
        coeffs = np.asarray(coeffs, dtype=float)
        if coeffs.shape != (self.num_terms,):
            raise ValueError(
                f"coeffs must have shape ({self.num_terms},), got {coeffs.shape}"
            )
        self.coeffs = coeffs.copy()
        self._is_fitted = True
        return self

    def terms(self, skip_zero: bool = False) -> Iterator[tuple[tuple[int, ...], float]]:
        """Yield (multi_index, coefficient) pairs in canonical order."""
        for multi_idx, c in zip(self.space, self.coeffs):
            if skip_zero and c == 0.0:
                continue
            yield multi_idx, float(c)

    def describe(self, skip_zero: bool = False) -> str:
        """
        Human-readable dump of the expansion.

        Each term is rendered as ``c*(p_i)*(p_j)*(p_k)*(p_l)`` with the basis
        polynomials written out in monomial form. Meant for debugging, not
        for parsing.
        """
        parts = []
        for (i, j, k, l), c in self.terms(skip_zero=skip_zero):
            b = self.basis
            parts.append(f"{c!r}*({b[i]})*({b[j]})*({b[k]})*({b[l]})")
        return " + ".join(parts)

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        fitted = "fitted" if self._is_fitted else "not fitted"
        return (
            f"Legendre4d(degree={self.degree}, "
            f"num_terms={self.num_terms}, "
            f"nonzero={self.nonzero_count}, "
            f"status={fitted})"
        )


def build_expansion(samples: SampleInput, config: Optional[ExpansionConfig] = None) -> Legendre4d:
    """
    Fit an expansion and apply the configured sparsification budget.

    Args:
        samples: Anything accepted by ``Legendre4d.fit``
        config: Settings (default ExpansionConfig())

    Returns:
        Fitted (and possibly sparsified) Legendre4d
    """
    config = (config or ExpansionConfig()).validate()
    expansion = Legendre4d.from_config(config).fit(samples)
    if config.keep_count is not None:
        report = expansion.sparsify(config.keep_count, exact=config.exact_sparsify)
        logger.info(
            "Built degree-%d expansion with %d of %d terms kept",
            config.degree,
            report.surviving,
            expansion.num_terms,
        )
    return expansion


__all__ = ["Legendre4d", "build_expansion"]
