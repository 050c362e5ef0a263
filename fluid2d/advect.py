"""
advect.py — Semi-Lagrangian Advection
======================================
This is what makes fluid look like it's *actually flowing*.

The algorithm (per interior cell):
  1. Look at the current cell center position (i, j).
  2. Trace BACKWARD along the velocity field by one timestep.
     → "Where did the stuff in this cell come FROM?"
  3. Sample the field at that back-traced position using bilinear
     interpolation (it'll land between grid cells).
  4. That sampled value becomes the new value for this cell.

Unconditionally stable, at the price of some numerical smoothing.

Note: the trace distance is dt * velocity in CELLS — the simulation
timestep is used directly, with no grid-size scaling. Changing that
changes how the fluid looks, so it stays.

Key reference: Jos Stam, "Stable Fluids" (SIGGRAPH 1999)
"""

import numpy as np


def _bilinear_interpolate(field: np.ndarray, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """
    Bilinear interpolation of a (height, width) field at fractional positions.

    Callers must keep x ∈ [0, width-1) and y ∈ [0, height-1) so the
    four neighbors (i0..i0+1, j0..j0+1) stay inside the array.

    NaN positions (from a blown-up velocity field) sample at cell 0 for
    indexing only; the weights still come from the raw positions, so the
    NaN shows up in the result instead of an out-of-range index.
    """
    i0 = np.floor(np.nan_to_num(x, nan=0.0)).astype(np.int32)
    j0 = np.floor(np.nan_to_num(y, nan=0.0)).astype(np.int32)
    i1 = i0 + 1
    j1 = j0 + 1

    s1 = x - i0
    s0 = 1.0 - s1
    t1 = y - j0
    t0 = 1.0 - t1

    return (
        s0 * (t0 * field[j0, i0] + t1 * field[j1, i0]) +
        s1 * (t0 * field[j0, i1] + t1 * field[j1, i1])
    )


def advect(d: np.ndarray, d0: np.ndarray, vx: np.ndarray, vy: np.ndarray,
           dt: float, width: int, height: int) -> np.ndarray:
    """
    Move the flat field d0 along (vx, vy) and write the result into d.

    Only interior cells of d are written; its outer ring is left as is.
    d must not share memory with d0, vx or vy.

    Modifies: d (in place)
    """
    src = d0.reshape(height, width)
    u = vx.reshape(height, width)[1:-1, 1:-1]
    v = vy.reshape(height, width)[1:-1, 1:-1]

    j, i = np.meshgrid(
        np.arange(1, height - 1, dtype=np.float32),
        np.arange(1, width - 1, dtype=np.float32),
        indexing='ij'
    )

    # Back-trace, then clamp so all four interpolation neighbors are in bounds
    x_back = np.clip(i - dt * u, 0.5, width - 1 - 0.5)
    y_back = np.clip(j - dt * v, 0.5, height - 1 - 0.5)

    d.reshape(height, width)[1:-1, 1:-1] = _bilinear_interpolate(src, x_back, y_back)
    return d
