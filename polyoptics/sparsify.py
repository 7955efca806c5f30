"""
Magnitude-based pruning of expansion coefficients.

Two policies are available:

- Threshold cut (default). With magnitudes sorted ascending, the threshold is
  the magnitude at position ``len - 1 - keep_count`` and every coefficient
  whose magnitude is at or below it is zeroed. When several coefficients tie
  at the threshold they are all zeroed, so fewer than ``keep_count`` may
  survive.
- Exact top-k (``exact=True``). Keeps exactly the ``keep_count`` largest
  magnitudes, breaking ties in favour of the lower linear index.

In both cases ``keep_count`` at or above the current nonzero count leaves the
coefficients untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SparsifyReport:
    """
    Outcome of a sparsification pass.

    Attributes:
        keep_count: Requested number of surviving coefficients
        exact: Whether exact top-k selection was used
        threshold: Magnitude at or below which coefficients were zeroed
                   (None for a no-op or an exact selection)
        sorted_magnitudes: Ascending absolute values before pruning
        zeroed: Number of coefficients newly set to zero
        surviving: Number of nonzero coefficients after pruning
    """
    keep_count: int
    exact: bool
    threshold: float | None
    sorted_magnitudes: np.ndarray
    zeroed: int
    surviving: int

    @property
    def changed(self) -> bool:
        return self.zeroed > 0


def sparsify_coefficients(
    coeffs: np.ndarray,
    keep_count: int,
    exact: bool = False,
) -> tuple[np.ndarray, SparsifyReport]:
    """
    Zero the smallest-magnitude coefficients.

    Args:
        coeffs: 1D coefficient array (not modified)
        keep_count: Target number of nonzero coefficients (>= 0)
        exact: Use exact top-k instead of the threshold cut

    Returns:
        Tuple of (pruned copy of coeffs, SparsifyReport)

    Raises:
        ValueError: If keep_count is negative or coeffs is not 1D

    Example:
        >>> pruned, report = sparsify_coefficients(np.array([0.1, -3.0, 2.0]), 2)
        >>> pruned
        array([ 0., -3.,  2.])
    """
    coeffs = np.asarray(coeffs, dtype=float)
    if coeffs.ndim != 1:
        raise ValueError(f"coeffs must be 1D, got shape {coeffs.shape}")
    if keep_count < 0:
        raise ValueError(f"keep_count must be nonnegative, got {keep_count}")

    magnitudes = np.abs(coeffs)
    sorted_magnitudes = np.sort(magnitudes)
    nonzero_before = int(np.count_nonzero(coeffs))
    result = coeffs.copy()

    if keep_count >= nonzero_before:
        report = SparsifyReport(
            keep_count=keep_count,
            exact=exact,
            threshold=None,
            sorted_magnitudes=sorted_magnitudes,
            zeroed=0,
            surviving=nonzero_before,
        )
        logger.debug("Sparsify to %d is a no-op (%d nonzero)", keep_count, nonzero_before)
        return result, report

    threshold = None
    if exact:
        # Stable sort on -|c| puts larger magnitudes first and keeps index order
        # among equal magnitudes
        order = np.argsort(-magnitudes, kind="stable")
        keep = np.zeros(len(coeffs), dtype=bool)
        keep[order[:keep_count]] = True
        result[~keep] = 0.0
    else:
        threshold = float(sorted_magnitudes[len(sorted_magnitudes) - 1 - keep_count])
        result[magnitudes <= threshold] = 0.0

    surviving = int(np.count_nonzero(result))
    report = SparsifyReport(
        keep_count=keep_count,
        exact=exact,
        threshold=threshold,
        sorted_magnitudes=sorted_magnitudes,
        zeroed=nonzero_before - surviving,
        surviving=surviving,
    )
    logger.debug(
        "Sparsified %d -> %d nonzero coefficients (threshold=%s)",
        nonzero_before,
        surviving,
        threshold,
    )
    return result, report


__all__ = ["SparsifyReport", "sparsify_coefficients"]
