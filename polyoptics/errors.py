"""Exception types raised by polyoptics."""

from __future__ import annotations


class PolyopticsError(Exception):
    """Base class for all polyoptics errors."""


class InvalidDegreeError(PolyopticsError, ValueError):
    """Degree is negative, not an integer, or too large to build safely."""


class EmptyInputError(PolyopticsError, ValueError):
    """A fit was requested with no samples."""


class IndexOutOfRangeError(PolyopticsError, IndexError):
    """A linear index or multi-index lies outside the valid set for a degree."""


__all__ = [
    "PolyopticsError",
    "InvalidDegreeError",
    "EmptyInputError",
    "IndexOutOfRangeError",
]
