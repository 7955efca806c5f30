"""Configuration for building and compressing a 4D Legendre expansion."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from polyoptics.multi_index import validate_degree


@dataclass
class ExpansionConfig:
    """Settings for fitting and exporting a Legendre4d expansion.

    Attributes:
        degree: Maximum total degree of the expansion
        lut_resolution: Entries per basis lookup table
        keep_count: Sparsification budget applied after fitting (None = keep all)
        exact_sparsify: Use exact top-k instead of the threshold cut
        workers: Threads for the fitting reduction (None = CPU count, at most 8)
        chunk_size: Samples per fitting chunk (None = sized from term count)
    """
    degree: int = 6
    lut_resolution: int = 256
    keep_count: Optional[int] = None
    exact_sparsify: bool = False
    workers: Optional[int] = None
    chunk_size: Optional[int] = None

    def validate(self) -> "ExpansionConfig":
        """Raise InvalidDegreeError or ValueError on bad settings; return self."""
        validate_degree(self.degree)
        if self.lut_resolution < 1:
            raise ValueError(f"lut_resolution must be >= 1, got {self.lut_resolution}")
        if self.keep_count is not None and self.keep_count < 0:
            raise ValueError(f"keep_count must be nonnegative, got {self.keep_count}")
        if self.workers is not None and self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if self.chunk_size is not None and self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")
        return self


__all__ = ["ExpansionConfig"]
