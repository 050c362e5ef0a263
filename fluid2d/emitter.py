"""
emitter.py — Rotating Smoke Emitters
=====================================
An emitter is a point source that, every frame, pours colored smoke into
a small square around itself and pushes the fluid in the direction it is
facing. The facing direction can spin (rotation_speed), which is what
turns a straight jet into a swirling plume.

Each cell in the footprint gets its own small random tilt (± JITTER rad)
so the jet spreads out a little instead of being a perfectly straight line.
The random source is passed in by the caller — seed it and the whole
simulation becomes reproducible.
"""

import math
import numpy as np
from .grid import FluidGrid


TAU = 2.0 * math.pi

# Max random tilt of the injected velocity per cell (radians)
JITTER = 0.25


class Emitter:
    """
    Usage:
        e = Emitter(30, 37, strength=2.0, color=(255, 100, 100))
        e.rotation_speed = 0.5      # spin half a radian per unit time
        e.update(dt)
        e.inject(grid, rng)
    """

    def __init__(self, x: int, y: int, strength: float = 1.0, radius: int = 1,
                 angle: float = 0.0, rotation_speed: float = 0.0,
                 color: tuple = (255, 255, 255)):
        """
        Args:
            x, y           : Position (cell indices). The UI drags these around.
            strength       : Injection scale for both smoke and velocity
            radius         : Half-size of the square footprint in cells
            angle          : Emission direction in radians
            rotation_speed : Radians per unit simulated time (can be negative)
            color          : (r, g, b), each 0–255
        """
        if radius < 0:
            raise ValueError(f"Emitter radius must be >= 0, got {radius}")

        self.x = x
        self.y = y
        self.strength = strength
        self.radius = radius
        self.angle = angle
        self.rotation_speed = rotation_speed
        self.color = color

    def update(self, dt: float):
        """Spin the emitter and keep the angle in [0, 2π)."""
        self.angle += self.rotation_speed * dt

        if self.angle >= TAU or self.angle < 0.0:
            self.angle %= TAU
            # x % TAU rounds up to TAU for tiny negative x
            if self.angle >= TAU:
                self.angle = 0.0

    def inject(self, grid: FluidGrid, rng: np.random.Generator):
        """
        Add smoke and velocity to every in-bounds cell of the footprint.

        Mutates grid.density_* and grid.px / grid.py in place.
        The emitter itself is left untouched.
        """
        x, y, r = int(self.x), int(self.y), int(self.radius)

        # Clip the footprint to the grid
        x0, x1 = max(0, x - r), min(grid.width, x + r + 1)
        y0, y1 = max(0, y - r), min(grid.height, y + r + 1)
        if x0 >= x1 or y0 >= y1:
            return  # dragged fully off-grid

        # ── Smoke ──────────────────────────────────────────────────────────
        for density, channel in zip(grid.densities, self.color):
            grid.view(density)[y0:y1, x0:x1] += channel / 255.0 * self.strength

        # ── Velocity (one independent tilt per cell) ───────────────────────
        spread = rng.uniform(-JITTER, JITTER, size=(y1 - y0, x1 - x0))
        angle = self.angle + spread
        grid.view(grid.px)[y0:y1, x0:x1] += (np.cos(angle) * self.strength).astype(np.float32)
        grid.view(grid.py)[y0:y1, x0:x1] += (np.sin(angle) * self.strength).astype(np.float32)

    def distance_to(self, x: float, y: float) -> float:
        return math.hypot(self.x - x, self.y - y)

    def __repr__(self):
        return (
            f"Emitter(x={self.x}, y={self.y}, strength={self.strength}, "
            f"radius={self.radius}, angle={self.angle:.3f}, "
            f"rotation_speed={self.rotation_speed}, color={self.color})"
        )
