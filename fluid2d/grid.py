"""
grid.py — Collocated 2D Grid
=============================
The foundation of the entire simulation.

Every field lives at CELL CENTERS and is stored as a flat array of length
width*height, addressed with idx(x, y) = x + y*width:

  - density_r / density_g / density_b  → colored smoke, one array per channel
  - px / py                            → velocity components

The flat arrays are the public surface (the renderer reads them directly).
Solver code works on (height, width) views of the same memory, so
view(field)[y, x] and field[idx(x, y)] are the same number.

Boundary cells (x ∈ {0, width-1} or y ∈ {0, height-1}) are never written by
the solver — only emitters and user impulses touch them. This is an
"open boundary" approximation: no walls, no mirroring.
"""

import numpy as np


class FluidGrid:
    """
    Per-cell state of the 2D fluid.
    All five arrays are allocated once and only ever updated in place.
    """

    def __init__(self, width: int = 100, height: int = 75):
        """
        Args:
            width  : Number of cells along X (>= 3)
            height : Number of cells along Y (>= 3)
        """
        if width < 3 or height < 3:
            raise ValueError(
                f"Grid must be at least 3x3 to have an interior, got {width}x{height}"
            )

        self.width = width
        self.height = height
        size = width * height

        # ── Density channels (colored smoke) ───────────────────────────────
        self.density_r = np.zeros(size, dtype=np.float32)
        self.density_g = np.zeros(size, dtype=np.float32)
        self.density_b = np.zeros(size, dtype=np.float32)

        # ── Velocity ───────────────────────────────────────────────────────
        self.px = np.zeros(size, dtype=np.float32)
        self.py = np.zeros(size, dtype=np.float32)

    @property
    def size(self) -> int:
        return self.width * self.height

    @property
    def densities(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """The three density channels in (r, g, b) order."""
        return self.density_r, self.density_g, self.density_b

    def idx(self, x: int, y: int) -> int:
        return x + y * self.width

    def view(self, field: np.ndarray) -> np.ndarray:
        """
        Non-owning (height, width) view of a flat field.
        Writes through the view land in the flat array.
        """
        return field.reshape(self.height, self.width)

    def compute_divergence(self) -> np.ndarray:
        """
        Discrete divergence of (px, py), using the same operator as the
        projection step. Boundary cells are reported as zero.

        Returns: (height, width) array.
        """
        u = self.view(self.px)
        v = self.view(self.py)
        div = np.zeros((self.height, self.width), dtype=np.float32)
        div[1:-1, 1:-1] = -0.5 * (
            (u[1:-1, 2:] - u[1:-1, :-2]) +
            (v[2:, 1:-1] - v[:-2, 1:-1])
        ) / self.width
        return div

    def total_density(self) -> float:
        return float(self.density_r.sum() + self.density_g.sum() + self.density_b.sum())

    def density_image(self) -> np.ndarray:
        """
        RGB image of the smoke for display.
        Returns a (height, width, 3) float array clipped to [0, 1].
        """
        rgb = np.stack([self.view(d) for d in self.densities], axis=-1)
        return np.clip(rgb, 0.0, 1.0)

    def reset(self):
        """Zero out all fields (in place, so held references stay valid)."""
        for arr in [self.density_r, self.density_g, self.density_b, self.px, self.py]:
            arr[:] = 0.0

    def __repr__(self):
        max_div = np.abs(self.compute_divergence()).max()
        max_vel = np.sqrt(self.px ** 2 + self.py ** 2).max()
        return (
            f"FluidGrid({self.width}x{self.height})\n"
            f"  density  : max={max(d.max() for d in self.densities):.4f}, "
            f"sum={self.total_density():.2f}\n"
            f"  velocity : max_magnitude={max_vel:.4f}\n"
            f"  divergence: max={max_div:.6f}"
        )
