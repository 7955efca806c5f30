"""
Orthonormal Legendre basis on [-1, 1].

This module provides:
- The closed-form monomial coefficients of the normalized Legendre polynomials
- ``LegendreBasis``: the ordered family p_0 .. p_degree, each an explicit
  ``UnivariatePolynomial``
- Discretized lookup tables for consumers that sample tables instead of
  evaluating polynomials (e.g. a shader reading a texture)
- Orthonormality diagnostics via scipy quadrature or Monte Carlo

The basis is normalized for the uniform measure on [-1, 1]:
    ∫_{-1}^{1} p_n(x) p_m(x) dx = δ_{nm}

which is the standard Legendre P_n scaled by sqrt((2n+1)/2).
"""

from __future__ import annotations

import logging
import math
from typing import Iterator

import numpy as np
from numpy.polynomial import polynomial as P
from scipy import integrate

from polyoptics.multi_index import validate_degree
from polyoptics.polynomial import Monomial, UnivariatePolynomial

logger = logging.getLogger(__name__)


def generalized_binomial(a: float, m: int) -> float:
    """
    Generalized binomial coefficient for a real upper argument.

        GBC(a, m) = ∏_{t=0}^{m-1} (a - t) / (m - t)

    with GBC(a, 0) = 1. For integer ``a >= m`` this is the ordinary C(a, m);
    for integer ``0 <= a < m`` one of the factors is zero.
    """
    if m < 0:
        raise ValueError(f"m must be nonnegative, got {m}")
    result = 1.0
    for t in range(m):
        result *= (a - t) / (m - t)
    return result


def legendre_coefficient(n: int, k: int) -> float:
    """
    Coefficient of x**k in the normalized Legendre polynomial p_n.

    Uses the explicit sum form of Legendre's polynomials:
        P_n(x) = 2^n Σ_k C(n, k) GBC((n+k-1)/2, n) x^k

    scaled by sqrt((2n+1)/2) so that p_n has unit norm on [-1, 1].
    Integer parts (2^n and C(n, k)) are computed exactly.
    """
    if not 0 <= k <= n:
        raise ValueError(f"need 0 <= k <= n, got n={n}, k={k}")
    norm = math.sqrt((2 * n + 1) / 2)
    return norm * float(2 ** n * math.comb(n, k)) * generalized_binomial((n + k - 1) / 2, n)


def legendre_polynomial(n: int) -> UnivariatePolynomial:
    """Normalized Legendre polynomial p_n with monomials x^0 .. x^n."""
    return UnivariatePolynomial(
        Monomial(legendre_coefficient(n, k), k) for k in range(n + 1)
    )


class LegendreBasis:
    """
    Ordered orthonormal Legendre basis p_0 .. p_degree on [-1, 1].

    Built once from ``degree`` and immutable afterwards; safe to share
    between threads.

    Attributes:
        degree: Highest polynomial degree (inclusive)
        polynomials: Tuple of ``degree + 1`` UnivariatePolynomial objects

    Example:
        >>> basis = LegendreBasis(2)
        >>> len(basis)
        3
        >>> round(basis[0](0.3), 6)  # p_0 = 1/sqrt(2)
        0.707107
    """

    def __init__(self, degree: int):
        self.degree = validate_degree(degree)
        self.polynomials: tuple[UnivariatePolynomial, ...] = tuple(
            legendre_polynomial(n) for n in range(self.degree + 1)
        )

        # Row n holds the dense monomial coefficients of p_n
        matrix = np.zeros((self.degree + 1, self.degree + 1))
        for n, poly in enumerate(self.polynomials):
            matrix[n, : poly.degree + 1] = poly.coefficients
        matrix.setflags(write=False)
        self._coefficient_matrix = matrix

        logger.debug(
            "Built Legendre basis of degree %d (max |coefficient| = %.6g)",
            self.degree,
            float(np.max(np.abs(matrix))),
        )

    @property
    def coefficient_matrix(self) -> np.ndarray:
        """Read-only (degree+1, degree+1) matrix of monomial coefficients."""
        return self._coefficient_matrix

    def __len__(self) -> int:
        return len(self.polynomials)

    def __getitem__(self, n: int) -> UnivariatePolynomial:
        return self.polynomials[n]

    def __iter__(self) -> Iterator[UnivariatePolynomial]:
        return iter(self.polynomials)

    def evaluate(self, x) -> np.ndarray:
        """
        Evaluate every basis polynomial at the given points.

        Args:
            x: Scalar or array of any shape

        Returns:
            Array of shape ``x.shape + (degree + 1,)`` where the last axis
            indexes the basis polynomial.
        """
        x = np.asarray(x, dtype=float)
        vander = P.polyvander(x, self.degree)
        return vander @ self._coefficient_matrix.T

    def lookup_tables(
        self,
        resolution: int,
        start: float = -1.0,
        stop: float = 1.0,
    ) -> np.ndarray:
        """
        Discretize every basis polynomial into a lookup table.

        Args:
            resolution: Number of evenly spaced samples per table (>= 1)
            start: First sample position
            stop: Last sample position

        Returns:
            Array of shape (degree + 1, resolution); row n is p_n sampled
            over [start, stop] with both endpoints included.
        """
        return np.stack(
            [poly.lookup_table(start, stop, resolution) for poly in self.polynomials]
        )

    def gram_matrix(
        self,
        method: str = "quad",
        n_samples: int = 100_000,
        seed: int = 42,
    ) -> np.ndarray:
        """
        Estimate G_nm = ∫_{-1}^{1} p_n(x) p_m(x) dx.

        Args:
            method: "quad" for adaptive quadrature (scipy.integrate.quad),
                    "monte_carlo" for a uniform Monte Carlo estimate
            n_samples: Number of Monte Carlo samples
            seed: Random seed for Monte Carlo

        Returns:
            Symmetric array of shape (degree + 1, degree + 1)
        """
        size = len(self)
        if method == "quad":
            gram = np.zeros((size, size))
            for n in range(size):
                for m in range(n, size):
                    p, q = self.polynomials[n], self.polynomials[m]
                    value, _ = integrate.quad(lambda x: p(x) * q(x), -1.0, 1.0)
                    gram[n, m] = gram[m, n] = value
            return gram
        elif method == "monte_carlo":
            rng = np.random.default_rng(seed)
            x = rng.uniform(-1.0, 1.0, n_samples)
            vals = self.evaluate(x)  # (N, size)
            # Interval length 2 converts the sample mean into the integral
            return 2.0 * (vals.T @ vals) / n_samples
        else:
            raise ValueError(f"Unknown integration method: {method}")

    def __str__(self) -> str:
        return "[" + "".join(f"{p}, \n" for p in self.polynomials) + "]"

    def __repr__(self) -> str:
        return f"LegendreBasis(degree={self.degree})"


def build_legendre_basis(degree: int) -> LegendreBasis:
    """Build the orthonormal Legendre basis p_0 .. p_degree."""
    return LegendreBasis(degree)


def verify_orthonormality(
    basis: LegendreBasis,
    method: str = "quad",
    n_samples: int = 100_000,
    tol: float = 1e-8,
) -> tuple[bool, np.ndarray]:
    """
    Check that the Gram matrix of ``basis`` is close to the identity.

    Args:
        basis: LegendreBasis to verify
        method: Integration method passed to ``LegendreBasis.gram_matrix``
        n_samples: Number of Monte Carlo samples (ignored for "quad")
        tol: Tolerance for max deviation from identity. Use something like
             0.05 for Monte Carlo.

    Returns:
        Tuple of (is_orthonormal, gram_matrix)
    """
    gram = basis.gram_matrix(method=method, n_samples=n_samples)
    max_error = float(np.max(np.abs(gram - np.eye(len(basis)))))
    logger.debug("Orthonormality check (%s): max error %.3g", method, max_error)
    return max_error < tol, gram


__all__ = [
    "generalized_binomial",
    "legendre_coefficient",
    "legendre_polynomial",
    "LegendreBasis",
    "build_legendre_basis",
    "verify_orthonormality",
]
