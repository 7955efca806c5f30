"""
Univariate polynomials built from explicit monomial terms.

The Legendre basis is assembled term by term from a closed-form coefficient
formula, so polynomials here keep their monomials rather than wrapping
``numpy.polynomial`` objects directly. Evaluation still goes through
``numpy.polynomial.polynomial.polyval`` on a dense coefficient array.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

import numpy as np
from numpy.polynomial import polynomial as P


@dataclass(frozen=True)
class Monomial:
    """A single term ``coefficient * x**exponent``."""
    coefficient: float
    exponent: int

    def __post_init__(self):
        if self.exponent < 0:
            raise ValueError(f"exponent must be nonnegative, got {self.exponent}")

    def __call__(self, x):
        return self.coefficient * np.asarray(x, dtype=float) ** self.exponent

    def __str__(self) -> str:
        if self.exponent == 0:
            return f"{self.coefficient}"
        if self.exponent == 1:
            return f"{self.coefficient}*x"
        return f"{self.coefficient}*x^{self.exponent}"


class UnivariatePolynomial:
    """
    Polynomial in one variable stored as an ordered sequence of monomials.

    Terms are kept in the order given. Terms sharing an exponent are summed
    when the dense coefficient array used for evaluation is built.

    Example:
        >>> p = UnivariatePolynomial([Monomial(1.0, 0), Monomial(2.0, 2)])
        >>> p(3.0)
        19.0
        >>> p.degree
        2
    """

    def __init__(self, terms: Iterable[Monomial]):
        self._terms: tuple[Monomial, ...] = tuple(terms)
        degree = max((t.exponent for t in self._terms), default=0)
        dense = np.zeros(degree + 1)
        for term in self._terms:
            dense[term.exponent] += term.coefficient
        dense.setflags(write=False)
        self._dense = dense

    @classmethod
    def from_coefficients(cls, coeffs: Sequence[float]) -> UnivariatePolynomial:
        """Build from a dense array where ``coeffs[k]`` multiplies ``x**k``."""
        return cls(Monomial(float(c), k) for k, c in enumerate(coeffs))

    @property
    def terms(self) -> tuple[Monomial, ...]:
        return self._terms

    @property
    def degree(self) -> int:
        return len(self._dense) - 1

    @property
    def coefficients(self) -> np.ndarray:
        """Dense, read-only coefficient array in ascending exponent order."""
        return self._dense

    def __len__(self) -> int:
        return len(self._terms)

    def __iter__(self) -> Iterator[Monomial]:
        return iter(self._terms)

    def __call__(self, x):
        """Evaluate at a scalar (returns float) or an array (same shape)."""
        x = np.asarray(x, dtype=float)
        result = P.polyval(x, self._dense)
        if result.ndim == 0:
            return float(result)
        return result

    def lookup_table(
        self,
        start: float = -1.0,
        stop: float = 1.0,
        samples: int = 256,
    ) -> np.ndarray:
        """
        Evaluate at ``samples`` evenly spaced points over ``[start, stop]``.

        Both endpoints are included, so entry ``t`` corresponds to
        ``start + t * (stop - start) / (samples - 1)``.

        Args:
            start: First sample position
            stop: Last sample position
            samples: Number of table entries (must be >= 1)

        Returns:
            Array of shape (samples,)
        """
        if samples < 1:
            raise ValueError(f"samples must be >= 1, got {samples}")
        x = np.linspace(start, stop, samples)
        return P.polyval(x, self._dense)

    def __str__(self) -> str:
        if not self._terms:
            return "0"
        return " + ".join(str(t) for t in self._terms)

    def __repr__(self) -> str:
        return f"UnivariatePolynomial(degree={self.degree}, terms={len(self._terms)})"


__all__ = ["Monomial", "UnivariatePolynomial"]
