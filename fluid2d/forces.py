"""
forces.py — User Impulses
==========================
Pointer interaction: clicking in the window shoves the fluid outward from
the click point, hardest right next to it and falling off with the squared
distance.
"""

import numpy as np
from .grid import FluidGrid


def push_velocity(grid: FluidGrid, x: int, y: int, strength: float, radius: int):
    """
    Apply a radial impulse around cell (x, y).

    Every in-bounds cell with 0 < d² <= radius² gets
      (px, py) += strength * (dx, dy) / |d| / d²
    The center cell has no outward direction and is skipped.

    Args:
        x, y     : Center of the impulse (cell indices)
        strength : Impulse magnitude at distance 1
        radius   : Influence radius in cells

    Modifies: grid.px, grid.py (in place)
    """
    x0, x1 = max(0, x - radius), min(grid.width, x + radius + 1)
    y0, y1 = max(0, y - radius), min(grid.height, y + radius + 1)
    if x0 >= x1 or y0 >= y1:
        return

    yy, xx = np.meshgrid(np.arange(y0, y1), np.arange(x0, x1), indexing='ij')
    dx = (xx - x).astype(np.float32)
    dy = (yy - y).astype(np.float32)
    dist2 = dx * dx + dy * dy

    mask = (dist2 > 0) & (dist2 <= radius * radius)
    scale = np.zeros_like(dist2)
    scale[mask] = strength / (np.sqrt(dist2[mask]) * dist2[mask])

    grid.view(grid.px)[y0:y1, x0:x1] += dx * scale
    grid.view(grid.py)[y0:y1, x0:x1] += dy * scale
