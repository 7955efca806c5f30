"""
Total-degree multi-index space.

A multi-index (k_1, ..., k_d) selects one tensor-product basis term
p_{k_1}(x_1) × ... × p_{k_d}(x_d). Only indices with k_1 + ... + k_d ≤ degree
are kept, giving C(degree + d, d) terms instead of (degree + 1)^d.

Canonical order is lexicographic, i.e. the order produced by nested loops
    for i in 0..=d, for j in 0..=d-i, for k in 0..=d-i-j, for l in 0..=d-i-j-k

Linear index <-> multi-index conversion is done combinatorially, so neither
direction needs to enumerate the space.
"""

from __future__ import annotations

import math
import operator
from typing import Iterator, Sequence

import numpy as np

from polyoptics.errors import IndexOutOfRangeError, InvalidDegreeError

# Input dimensions of the ray-transfer function
DIM = 4

# Beyond this the 4D term count (C(24, 4) = 10626) and monomial coefficient
# magnitudes stop being reasonable
MAX_DEGREE = 20


def validate_degree(degree: int, max_degree: int = MAX_DEGREE) -> int:
    """
    Check that ``degree`` is an integer in [0, max_degree].

    Returns:
        degree as a plain int

    Raises:
        InvalidDegreeError: If degree is not an integer or out of range
    """
    if isinstance(degree, bool) or not isinstance(degree, (int, np.integer)):
        raise InvalidDegreeError(f"degree must be an integer, got {degree!r}")
    degree = int(degree)
    if degree < 0:
        raise InvalidDegreeError(f"degree must be nonnegative, got {degree}")
    if degree > max_degree:
        raise InvalidDegreeError(
            f"degree {degree} exceeds maximum supported degree {max_degree}"
        )
    return degree


def count_multi_indices(degree: int, dim: int = DIM) -> int:
    """
    Number of multi-indices of length ``dim`` with sum ≤ ``degree``.

    Closed form C(degree + dim, dim); no enumeration.

    Example:
        >>> count_multi_indices(2)
        15
        >>> count_multi_indices(6)
        210
    """
    if degree < 0:
        return 0
    return math.comb(degree + dim, dim)


def iter_multi_indices(degree: int, dim: int = DIM) -> Iterator[tuple[int, ...]]:
    """
    Lazily yield every multi-index with sum ≤ ``degree`` in canonical order.

    Each call returns a fresh generator, so the sequence can be restarted.

    Example:
        >>> list(iter_multi_indices(1, dim=2))
        [(0, 0), (0, 1), (1, 0)]
    """
    if dim == 0:
        yield ()
        return
    for head in range(degree + 1):
        for tail in iter_multi_indices(degree - head, dim - 1):
            yield (head,) + tail


def _as_index(value) -> int:
    """Convert ``value`` to int without truncation; bools and floats are rejected."""
    if isinstance(value, (bool, np.bool_)):
        raise IndexOutOfRangeError(f"expected an integer, got {value!r}")
    try:
        return operator.index(value)
    except TypeError:
        raise IndexOutOfRangeError(f"expected an integer, got {value!r}") from None


def tuple_to_index(multi_idx: Sequence[int], degree: int, dim: int = DIM) -> int:
    """
    Convert a multi-index to its position in canonical order.

    For each position, every smaller leading value v accounts for a block of
    C(remaining - v + rest, rest) indices that come before it.

    Raises:
        IndexOutOfRangeError: If the tuple has the wrong length, a negative
            component, a non-integer component, or a component sum above
            ``degree``
    """
    multi_idx = tuple(_as_index(k) for k in multi_idx)
    if len(multi_idx) != dim:
        raise IndexOutOfRangeError(
            f"multi-index must have {dim} components, got {len(multi_idx)}"
        )
    if any(k < 0 for k in multi_idx):
        raise IndexOutOfRangeError(f"multi-index {multi_idx} has a negative component")
    if sum(multi_idx) > degree:
        raise IndexOutOfRangeError(
            f"sum({multi_idx}) = {sum(multi_idx)} > degree = {degree}"
        )

    index = 0
    remaining = degree
    for position, value in enumerate(multi_idx):
        rest = dim - position - 1
        for v in range(value):
            index += count_multi_indices(remaining - v, rest)
        remaining -= value
    return index


def index_to_tuple(index: int, degree: int, dim: int = DIM) -> tuple[int, ...]:
    """
    Convert a linear index back to its multi-index.

    Raises:
        IndexOutOfRangeError: If index is not an integer or is
            outside [0, C(degree + dim, dim))
    """
    index = _as_index(index)
    total = count_multi_indices(degree, dim)
    if not 0 <= index < total:
        raise IndexOutOfRangeError(f"index {index} out of range [0, {total})")

    result = []
    remaining = degree
    for position in range(dim):
        rest = dim - position - 1
        value = 0
        while True:
            block = count_multi_indices(remaining - value, rest)
            if index < block:
                break
            index -= block
            value += 1
        result.append(value)
        remaining -= value
    return tuple(result)


class MultiIndexSpace:
    """
    Immutable canonical enumeration of total-degree multi-indices.

    Attributes:
        degree: Maximum total degree
        dim: Number of components per multi-index
        count: Number of multi-indices, C(degree + dim, dim)

    Example:
        >>> space = MultiIndexSpace(2)
        >>> len(space)
        15
        >>> space[1]
        (0, 0, 0, 1)
        >>> space.index_of((2, 0, 0, 0))
        14
    """

    def __init__(self, degree: int, dim: int = DIM):
        self.degree = validate_degree(degree)
        self.dim = dim
        self.count = count_multi_indices(self.degree, dim)

        array = np.array(list(iter_multi_indices(self.degree, dim)), dtype=np.intp)
        array = array.reshape(self.count, dim)
        array.setflags(write=False)
        self._array = array

    @property
    def array(self) -> np.ndarray:
        """Read-only (count, dim) integer array of all multi-indices."""
        return self._array

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[tuple[int, ...]]:
        return iter_multi_indices(self.degree, self.dim)

    def __getitem__(self, index: int) -> tuple[int, ...]:
        return index_to_tuple(index, self.degree, self.dim)

    def __contains__(self, multi_idx) -> bool:
        try:
            self.index_of(multi_idx)
        except (IndexOutOfRangeError, TypeError):
            return False
        return True

    def index_of(self, multi_idx: Sequence[int]) -> int:
        return tuple_to_index(multi_idx, self.degree, self.dim)

    def total_degree_of(self, index: int) -> int:
        """Sum of the components of the multi-index at ``index``."""
        return sum(self[index])

    def __repr__(self) -> str:
        return f"MultiIndexSpace(degree={self.degree}, dim={self.dim}, count={self.count})"


__all__ = [
    "DIM",
    "MAX_DEGREE",
    "validate_degree",
    "count_multi_indices",
    "iter_multi_indices",
    "tuple_to_index",
    "index_to_tuple",
    "MultiIndexSpace",
]
