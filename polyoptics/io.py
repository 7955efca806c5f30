"""
Saving and loading fitted expansions.

The basis and multi-index space are rebuilt from the degree on load, so only
the degree, the coefficients and a few settings are stored.

Usage:
    from polyoptics import save_expansion, load_expansion

    save_expansion(expansion, "lens.pkl")
    expansion2 = load_expansion("lens.pkl")

Note:
    Uses pickle for serialization. Files should only be loaded from trusted
    sources.
"""

from __future__ import annotations

import pickle
from pathlib import Path
from typing import Any, Dict, Union

from polyoptics.expansion import Legendre4d

PathLike = Union[str, Path]

FORMAT_VERSION = 1


def _expansion_to_state(expansion: Legendre4d) -> Dict[str, Any]:
    """Extract serializable state from Legendre4d."""
    return {
        "format_version": FORMAT_VERSION,
        "degree": expansion.degree,
        "coeffs": expansion.coeffs.copy(),
        "lut_resolution": expansion.lut_resolution,
        "_is_fitted": expansion.is_fitted,
    }


def _state_to_expansion(state: Dict[str, Any]) -> Legendre4d:
    """Reconstruct Legendre4d from serialized state."""
    expansion = Legendre4d(
        degree=state["degree"],
        lut_resolution=state.get("lut_resolution", 256),
    )
    expansion.set_coefficients(state["coeffs"])
    expansion._is_fitted = state.get("_is_fitted", True)
    return expansion


def save_expansion(expansion: Legendre4d, path: PathLike) -> None:
    """
    Save a Legendre4d to a file.

    Args:
        expansion: Legendre4d instance to save
        path: File path (will be created/overwritten)

    Raises:
        TypeError: If expansion is not a Legendre4d instance
    """
    if not isinstance(expansion, Legendre4d):
        raise TypeError(
            f"Expected Legendre4d instance, got {type(expansion).__name__}"
        )

    state = _expansion_to_state(expansion)

    path = Path(path)
    with open(path, 'wb') as f:
        pickle.dump(state, f, protocol=pickle.HIGHEST_PROTOCOL)


def load_expansion(path: PathLike) -> Legendre4d:
    """
    Load a Legendre4d from a file.

    Args:
        path: Path to the saved expansion file

    Returns:
        Loaded Legendre4d instance

    Raises:
        TypeError: If the file does not hold a valid expansion state
        FileNotFoundError: If path does not exist
    """
    path = Path(path)
    with open(path, 'rb') as f:
        state = pickle.load(f)

    if not isinstance(state, dict) or "degree" not in state or "coeffs" not in state:
        raise TypeError("Invalid expansion file format")

    return _state_to_expansion(state)


__all__ = ["save_expansion", "load_expansion"]
