"""
simulation.py — Master Physics Loop
====================================
One call to `step()` advances the fluid by one frame.

Physics pipeline per frame:
  1. Spin every emitter (update)
  2. Inject smoke + velocity from every emitter
  3. Diffuse velocity (viscosity)
  4. Project velocity (push toward incompressibility)
  5. Advect velocity (self-advection)
  6. Project again (clean up after advection)
  7. Advect the three density channels
  8. Fade density (dissipation)

Nothing is cleared between frames — smoke and velocity pile up and only
diffusion, projection and dissipation bring them back down.

The rendering shell owns the knobs: it may change time, viscosity,
diffusion, dissipation and any emitter attribute between steps. Nothing
is validated here; silly values give silly pictures, not crashes.
"""

import math
import time
from collections import deque
from typing import Optional

import numpy as np
from .grid import FluidGrid
from .emitter import Emitter
from .advect import advect
from .diffuse import diffuse
from .forces import push_velocity
from .solver import project


# ── Defaults ──────────────────────────────────────────────────────────────────
DEFAULT_WIDTH       = 100
DEFAULT_HEIGHT      = 75
DEFAULT_DISSIPATION = 0.995
PERF_LOG_LENGTH     = 1000   # most recent frames kept in perf_log


def default_emitters(width: int, height: int) -> list[Emitter]:
    """Two facing jets: red on the left pointing right, blue on the right pointing left."""
    return [
        Emitter(width // 3, height // 2, color=(255, 100, 100), angle=0.0),
        Emitter(2 * width // 3, height // 2, color=(100, 100, 255), angle=math.radians(180.0)),
    ]


class FluidSimulation:
    """
    The complete 2D colored-smoke simulation.

    Usage:
        sim = FluidSimulation(timestep=0.5, diffusion=0.0, viscosity=0.0)
        sim.emitters[0].rotation_speed = 0.3
        for frame in range(100):
            sim.step()
            image = sim.grid.density_image()   # Hand to visualizer
    """

    def __init__(self, timestep: float, diffusion: float, viscosity: float,
                 width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT,
                 dissipation: float = DEFAULT_DISSIPATION,
                 emitters: Optional[list[Emitter]] = None,
                 seed: Optional[int] = None,
                 rng: Optional[np.random.Generator] = None):
        """
        Args:
            timestep    : Timestep. Also the back-trace distance in advection.
            diffusion   : Smoke spreading rate (exposed to the UI, density is not diffused)
            viscosity   : Fluid thickness (velocity diffusion rate)
            width       : Grid cells along X
            height      : Grid cells along Y
            dissipation : Per-frame density multiplier, (0, 1]
            emitters    : Emitter list. None = the two default jets.
            seed        : Seed for the injection jitter
            rng         : Random generator to use instead of seeding one
        """
        self.grid = FluidGrid(width=width, height=height)
        self.time = timestep
        self.diffusion = diffusion
        self.viscosity = viscosity
        self.dissipation = dissipation

        self.emitters = default_emitters(width, height) if emitters is None else list(emitters)
        self.rng = rng if rng is not None else np.random.default_rng(seed)

        self.frame = 0
        self.perf_log = deque(maxlen=PERF_LOG_LENGTH)   # timing data per frame

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    # ── Emitters ──────────────────────────────────────────────────────────────

    def add_emitter(self, emitter: Emitter) -> int:
        """Append an emitter. Returns its index, which is its identity from now on."""
        self.emitters.append(emitter)
        return len(self.emitters) - 1

    def nearest_emitter(self, x: float, y: float,
                        max_distance: Optional[float] = None) -> Optional[int]:
        """
        Index of the emitter closest to (x, y), or None if there are no
        emitters or the closest one is farther than max_distance.
        Used by the UI to pick which emitter a drag grabs.
        """
        if not self.emitters:
            return None
        distances = [e.distance_to(x, y) for e in self.emitters]
        best = int(np.argmin(distances))
        if max_distance is not None and distances[best] > max_distance:
            return None
        return best

    def push_velocity(self, x: int, y: int, strength: float, radius: int):
        """Radial shove around (x, y) — pointer clicks end up here."""
        push_velocity(self.grid, int(x), int(y), strength, int(radius))

    # ── Stepping ──────────────────────────────────────────────────────────────

    def _inject(self):
        for emitter in self.emitters:
            emitter.inject(self.grid, self.rng)

    def step(self):
        """
        Advance simulation by one frame.

        Timing for each stage is appended to perf_log.
        """
        t_total_start = time.perf_counter()
        g = self.grid
        w, h = g.width, g.height
        dt = self.time

        # ── Step 1–2: Emitters ─────────────────────────────────────────────
        t0 = time.perf_counter()
        for emitter in self.emitters:
            emitter.update(dt)
        self._inject()
        t_inject = (time.perf_counter() - t0) * 1000

        # ── Step 3: Diffuse velocity (viscosity) ───────────────────────────
        # Current velocity is both the right-hand side and the initial guess
        t0 = time.perf_counter()
        for field in (g.px, g.py):
            tmp = field.copy()
            diffuse(tmp, field, self.viscosity, dt, w, h)
            np.copyto(field, tmp)
        t_diffuse_vel = (time.perf_counter() - t0) * 1000

        # ── Step 4: Project velocity ───────────────────────────────────────
        t0 = time.perf_counter()
        project(g)
        t_project1 = (time.perf_counter() - t0) * 1000

        # ── Step 5: Advect velocity (self-advection) ───────────────────────
        # Both components trace through the same pre-advection snapshot
        t0 = time.perf_counter()
        vx0 = g.px.copy()
        vy0 = g.py.copy()
        advect(g.px, vx0, vx0, vy0, dt, w, h)
        advect(g.py, vy0, vx0, vy0, dt, w, h)
        t_advect_vel = (time.perf_counter() - t0) * 1000

        # ── Step 6: Project again (clean up post-advection divergence) ─────
        t0 = time.perf_counter()
        proj_metrics = project(g)
        t_project2 = (time.perf_counter() - t0) * 1000

        # ── Step 7: Advect density ─────────────────────────────────────────
        t0 = time.perf_counter()
        for density in g.densities:
            advect(density, density.copy(), g.px, g.py, dt, w, h)
        t_advect_den = (time.perf_counter() - t0) * 1000

        # ── Step 8: Fade ───────────────────────────────────────────────────
        for density in g.densities:
            density *= self.dissipation

        # ── Frame bookkeeping ──────────────────────────────────────────────
        self.frame += 1
        t_total = (time.perf_counter() - t_total_start) * 1000

        self.perf_log.append({
            "frame"            : self.frame,
            "total_ms"         : t_total,
            "fps"              : 1000.0 / t_total if t_total > 0 else 0,
            "inject_ms"        : t_inject,
            "diffuse_vel_ms"   : t_diffuse_vel,
            "project1_ms"      : t_project1,
            "advect_vel_ms"    : t_advect_vel,
            "project2_ms"      : t_project2,
            "advect_den_ms"    : t_advect_den,
            "divergence_max"   : proj_metrics["divergence_after_max"],
            "divergence_sum"   : proj_metrics["divergence_after_sum"],
            "density_total"    : g.total_density(),
        })

    def print_status(self):
        """Pretty-print current simulation state."""
        g = self.grid
        div = g.compute_divergence()
        speed = np.sqrt(g.px ** 2 + g.py ** 2)
        print(f"\n{'='*50}")
        print(f"  Frame: {self.frame}  |  Grid: {g.width}x{g.height}  |  Emitters: {len(self.emitters)}")
        print(f"  Density   : max={max(d.max() for d in g.densities):.4f}, total={g.total_density():.2f}")
        print(f"  Velocity  : max={speed.max():.4f}, mean={speed.mean():.4f}")
        print(f"  Divergence: max={np.abs(div).max():.6f}, mean={np.abs(div).mean():.8f}")
        if self.perf_log:
            last = self.perf_log[-1]
            print(f"  Perf      : {last['total_ms']:.1f}ms/frame ({last['fps']:.1f} FPS)")
        print(f"{'='*50}")
