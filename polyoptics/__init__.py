"""
polyoptics: Legendre polynomial surrogates for 4D ray-transfer functions

Compresses a scalar function of four inputs on [-1, 1]^4 (e.g. one output
component of a ray traced through a lens system, as a function of the
incoming ray's position and direction) into a total-degree tensor-product
Legendre expansion.

Features:
- Orthonormal Legendre basis built from closed-form monomial coefficients
- Canonical total-degree multi-index space with O(1) counting and
  combinatorial rank/unrank
- Quadrature fitting from weighted samples, reduced over sample chunks
  on a thread pool
- Threshold-cut (or exact top-k) sparsification
- Lookup tables for table-driven evaluation
- Save/load utilities and an optional PyTorch inference wrapper
"""

from polyoptics.errors import (
    PolyopticsError,
    InvalidDegreeError,
    EmptyInputError,
    IndexOutOfRangeError,
)
from polyoptics.polynomial import Monomial, UnivariatePolynomial
from polyoptics.multi_index import (
    DIM,
    MAX_DEGREE,
    MultiIndexSpace,
    count_multi_indices,
    iter_multi_indices,
    index_to_tuple,
    tuple_to_index,
)
from polyoptics.basis import (
    LegendreBasis,
    build_legendre_basis,
    legendre_coefficient,
    generalized_binomial,
    verify_orthonormality,
)
from polyoptics.samples import (
    DOMAIN_VOLUME,
    SampleBatch,
    uniform_samples,
    sobol_samples,
    gauss_legendre_samples,
)
from polyoptics.fitting import fit_coefficients, squared_norms
from polyoptics.sparsify import SparsifyReport, sparsify_coefficients
from polyoptics.config import ExpansionConfig
from polyoptics.expansion import Legendre4d, build_expansion
from polyoptics.io import save_expansion, load_expansion

# Classes are always importable but raise at instantiation if torch is missing
from polyoptics.torch_integration import ExpansionModule, TORCH_AVAILABLE

__version__ = "0.1.0"
__all__ = [
    # Errors
    "PolyopticsError",
    "InvalidDegreeError",
    "EmptyInputError",
    "IndexOutOfRangeError",
    # Polynomials and basis
    "Monomial",
    "UnivariatePolynomial",
    "LegendreBasis",
    "build_legendre_basis",
    "legendre_coefficient",
    "generalized_binomial",
    "verify_orthonormality",
    # Multi-indices
    "DIM",
    "MAX_DEGREE",
    "MultiIndexSpace",
    "count_multi_indices",
    "iter_multi_indices",
    "index_to_tuple",
    "tuple_to_index",
    # Samples
    "DOMAIN_VOLUME",
    "SampleBatch",
    "uniform_samples",
    "sobol_samples",
    "gauss_legendre_samples",
    # Fitting and compression
    "fit_coefficients",
    "squared_norms",
    "SparsifyReport",
    "sparsify_coefficients",
    # Expansion
    "ExpansionConfig",
    "Legendre4d",
    "build_expansion",
    # I/O utilities
    "save_expansion",
    "load_expansion",
    # PyTorch integration
    "ExpansionModule",
    "TORCH_AVAILABLE",
]
