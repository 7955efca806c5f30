#!/usr/bin/env python3
"""
Demo: Polynomial surrogate of a lens ray-transfer function

This script demonstrates:
1. Fitting a degree-6 Legendre expansion to a toy 4D ray-transfer function
   (position and direction on the entrance plane -> x position on the sensor)
2. Checking fit quality with the squared-norm diagnostic
3. Trading accuracy for size by sparsifying to smaller term budgets
4. Exporting the basis lookup tables a renderer would upload as a texture

The toy lens is a thick lens with a spherical-aberration term, evaluated
in closed form instead of by ray tracing.
"""

from __future__ import annotations

import matplotlib
matplotlib.use('Agg')

import copy
import logging
import numpy as np
import matplotlib.pyplot as plt
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from polyoptics import Legendre4d, sobol_samples, uniform_samples


def sensor_x(rays: np.ndarray) -> np.ndarray:
    """
    Sensor-plane x coordinate of rays leaving a toy thick lens.

    Columns are entrance position (px, py) and direction (dx, dy), all
    normalized to [-1, 1].
    """
    px, py, dx, dy = rays.T
    focal = 2.5
    distance = 1.8
    r2 = px ** 2 + py ** 2
    # Paraxial bend plus third-order spherical aberration
    bent = dx - px / focal * (1.0 + 0.15 * r2)
    return px + distance * np.tan(0.6 * bent) / 0.6 + 0.05 * dy * px


def main():
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    print("=" * 70)
    print("Lens surrogate demo")
    print("=" * 70)

    degree = 6
    samples = sobol_samples(sensor_x, m=16, seed=0)
    expansion = Legendre4d(degree=degree).fit(samples)
    print(f"\nFitted {expansion!r} from {len(samples)} Sobol samples")

    norms = expansion.squared_norms(samples)
    print(f"Squared-norm diagnostic: min {norms.min():.4f}, max {norms.max():.4f}")

    test = uniform_samples(sensor_x, 20_000, seed=1)
    full_error = np.sqrt(np.mean((expansion.evaluate(test.points) - test.values) ** 2))
    print(f"RMS error with all {expansion.num_terms} terms: {full_error:.5f}")

    # Error as a function of the term budget
    budgets = [5, 10, 20, 40, 80, 120, expansion.num_terms]
    errors = []
    survivors = []
    for keep in budgets:
        pruned = copy.deepcopy(expansion)
        report = pruned.sparsify(keep)
        rms = np.sqrt(np.mean((pruned.evaluate(test.points) - test.values) ** 2))
        errors.append(rms)
        survivors.append(report.surviving)
        print(f"  keep {keep:4d} -> {report.surviving:4d} terms, RMS error {rms:.5f}")

    tables = expansion.lookup_tables(128)

    fig, axes = plt.subplots(1, 2, figsize=(12, 4.5))

    axes[0].semilogy(survivors, errors, "o-")
    axes[0].set_xlabel("nonzero terms")
    axes[0].set_ylabel("RMS error")
    axes[0].set_title("Sparsification trade-off")
    axes[0].grid(True, alpha=0.3)

    x = np.linspace(-1, 1, tables.shape[1])
    for n, row in enumerate(tables):
        axes[1].plot(x, row, label=f"p_{n}")
    axes[1].set_xlabel("x")
    axes[1].set_title("Basis lookup tables")
    axes[1].legend(fontsize=8, ncol=2)
    axes[1].grid(True, alpha=0.3)

    fig.tight_layout()
    output_path = Path(__file__).parent / "lens_surrogate.png"
    fig.savefig(output_path, dpi=120)
    print(f"\nSaved visualization to: {output_path}")
    plt.close(fig)

    print("=" * 70)
    print("Demo complete!")
    print("=" * 70)


if __name__ == "__main__":
    main()
