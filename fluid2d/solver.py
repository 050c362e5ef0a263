"""
solver.py — Pressure Projection
================================
The pressure projection step pushes the flow toward INCOMPRESSIBILITY:
  div(v) ≈ 0

After diffusion and advection the velocity field is generally NOT
divergence-free (fluid "piles up" in some cells). We fix this by:
  1. Computing divergence of the current velocity field
  2. Solving the Poisson equation for a scalar potential p: ∇²p = div(v)
  3. Subtracting the gradient of p from velocity: v = v - ∇p

What is left after step 3 is (roughly) the swirling part of the flow: the
jets from the emitters curl into vortices instead of piling smoke into
the cells in front of them.

The Poisson solve reuses the diffusion relaxation (a = 1, c = 4) with the
same fixed sweep count, so it is approximate by construction.
"""

import numpy as np
import time
from .grid import FluidGrid
from .diffuse import linear_solve, RELAX_ITERATIONS


def project(grid: FluidGrid, iterations: int = RELAX_ITERATIONS) -> dict:
    """
    Pressure projection on grid.px / grid.py (in place, interior only).

    Args:
        grid       : The FluidGrid to modify in-place
        iterations : Relaxation sweeps for the Poisson solve

    Returns:
        dict with timing and divergence metrics (for benchmarking)
    """
    t_start = time.perf_counter()
    w, h = grid.width, grid.height

    # Step 1: divergence (same operator as grid.compute_divergence)
    divergence = grid.compute_divergence()

    # Step 2: Poisson solve, starting from p = 0 (boundaries stay 0)
    p = np.zeros(w * h, dtype=np.float32)
    linear_solve(p, divergence.reshape(-1), 1.0, 4.0, w, h, iterations=iterations)

    # Step 3: subtract the gradient
    _subtract_gradient(grid, grid.view(p))

    t_end = time.perf_counter()

    div_after = grid.compute_divergence()

    return {
        "time_ms"               : (t_end - t_start) * 1000,
        "iterations"            : iterations,
        "divergence_before_sum" : float(np.abs(divergence).sum()),
        "divergence_after_sum"  : float(np.abs(div_after).sum()),
        "divergence_after_max"  : float(np.abs(div_after).max()),
    }


def _subtract_gradient(grid: FluidGrid, p: np.ndarray):
    """
    v_new = v_old - ∇p, central differences on interior cells.

    The X part is scaled by width, the Y part by height.
    """
    u = grid.view(grid.px)
    v = grid.view(grid.py)

    u[1:-1, 1:-1] -= 0.5 * (p[1:-1, 2:] - p[1:-1, :-2]) * grid.width
    v[1:-1, 1:-1] -= 0.5 * (p[2:, 1:-1] - p[:-2, 1:-1]) * grid.height
