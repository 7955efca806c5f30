"""
PyTorch integration wrapper for fitted expansions.

Provides a torch.nn.Module that evaluates a Legendre4d on tensors, so a
fitted lens surrogate can sit inside a PyTorch pipeline. This is an
inference-only wrapper: evaluation goes through numpy and no gradients are
tracked.

Usage:
    from polyoptics import Legendre4d
    from polyoptics.torch_integration import ExpansionModule

    expansion = Legendre4d(degree=6).fit(samples)
    module = ExpansionModule(expansion)
    y = module(x_tensor)  # x_tensor has shape (N, 4)

Note:
    Requires PyTorch to be installed: pip install torch
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import numpy as np

# Lazy import of torch
try:
    import torch
    import torch.nn as nn
    TORCH_AVAILABLE = True
except ImportError:  # pragma: no cover
    torch = None
    nn = None
    TORCH_AVAILABLE = False

if TYPE_CHECKING:
    from polyoptics.expansion import Legendre4d


def _check_torch_available() -> None:
    """Raise ImportError if torch is not available."""
    if not TORCH_AVAILABLE:
        raise ImportError(
            "PyTorch is required for torch integration. "
            "Please install it with: pip install torch"
        )


class ExpansionModule(nn.Module if TORCH_AVAILABLE else object):
    """
    PyTorch Module wrapper for a fitted Legendre4d.

    Args:
        expansion: A fitted Legendre4d instance
        device: Target device for output tensors (default: same as input)
        dtype: Target dtype for output tensors (default: same as input)

    Example:
        >>> module = ExpansionModule(expansion)
        >>> y = module(torch.rand(10, 4) * 2 - 1)  # shape (10,)
    """

    def __init__(
        self,
        expansion: Legendre4d,
        device: Optional[str] = None,
        dtype: Optional[torch.dtype] = None,
    ):
        _check_torch_available()
        super().__init__()

        from polyoptics.expansion import Legendre4d as L4
        if not isinstance(expansion, L4):
            raise TypeError(
                f"Expected Legendre4d instance, got {type(expansion).__name__}"
            )
        if not expansion.is_fitted:
            raise ValueError("Legendre4d must be fitted before wrapping")

        self._expansion = expansion
        self._device = device
        self._dtype = dtype

    @property
    def expansion(self) -> Legendre4d:
        """Access the underlying Legendre4d."""
        return self._expansion

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        """
        Evaluate the expansion at input points.

        Args:
            x: Input tensor of shape (N, 4)

        Returns:
            Tensor of shape (N,)
        """
        input_device = x.device
        input_dtype = x.dtype

        x_np = x.detach().cpu().numpy().astype(np.float64)
        y_np = self._expansion.evaluate(x_np)
        y = torch.from_numpy(np.asarray(y_np, dtype=np.float64))

        target_device = self._device if self._device is not None else input_device
        target_dtype = self._dtype if self._dtype is not None else input_dtype

        return y.to(device=target_device, dtype=target_dtype)

    def lookup_tables(self, resolution: Optional[int] = None) -> torch.Tensor:
        """Basis lookup tables as a float32 tensor of shape (degree + 1, resolution)."""
        tables = self._expansion.lookup_tables(resolution)
        return torch.from_numpy(tables.astype(np.float32))

    def extra_repr(self) -> str:
        """Extra representation for print."""
        return (
            f"degree={self._expansion.degree}, "
            f"nonzero={self._expansion.nonzero_count}/{self._expansion.num_terms}"
        )


__all__ = ["ExpansionModule", "TORCH_AVAILABLE"]
