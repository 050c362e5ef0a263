"""
visualizer.py — Live Smoke Viewer
==================================
Paints the three density channels as one RGB image and lets you play with
the simulation while it runs:

  - Sliders       → timestep, viscosity, diffusion, injection strength,
                    injection radius, dissipation
  - Left drag     → move the emitter nearest to the cursor
  - Right click   → shove the fluid outward from the click point

Uses matplotlib FuncAnimation for real-time updates. The simulation is
only touched between frames, never while step() is running.
"""

import matplotlib.pyplot as plt
import matplotlib.animation as animation
from matplotlib.widgets import Slider


# Pointer impulse used on right click
PUSH_STRENGTH = 50.0
PUSH_RADIUS   = 20

# How close (in cells) a click must be to grab an emitter
GRAB_DISTANCE = 10.0


class FluidVisualizer:
    """
    Real-time viewer of the fluid simulation.

    Usage (standalone):
        from fluid2d import FluidSimulation
        from fluid2d.visualizer import FluidVisualizer

        sim = FluidSimulation(timestep=0.5, diffusion=0.0, viscosity=0.0)
        viz = FluidVisualizer(sim)
        viz.run()  # Opens live window
    """

    def __init__(self, simulation):
        """
        Args:
            simulation : FluidSimulation instance
        """
        self.sim = simulation
        self.dragging = None   # index of the emitter being dragged

        self._setup_figure()
        self._setup_sliders()
        self._connect_mouse()

    def _setup_figure(self):
        """Initialize the figure: image on top, slider strip below."""
        self.fig = plt.figure(figsize=(10, 9))
        self.fig.patch.set_facecolor('#0a0a0a')

        self.ax = self.fig.add_axes([0.05, 0.35, 0.9, 0.6])
        self.ax.set_facecolor('#0a0a0a')
        self.ax.set_xticks([])
        self.ax.set_yticks([])
        for spine in self.ax.spines.values():
            spine.set_edgecolor('#333333')

        # Row 0 at the top, like the grid's y axis
        self.img = self.ax.imshow(
            self.sim.grid.density_image(),
            interpolation='bilinear',
            origin='upper',
            aspect='equal'
        )

        self.title_text = self.ax.set_title(
            "Fluid Sim — Frame 0 | 0.0 FPS",
            color='#cccccc', fontsize=10, fontfamily='monospace'
        )

    def _setup_sliders(self):
        """One slider per knob the simulation exposes."""
        sim = self.sim
        first = sim.emitters[0] if sim.emitters else None
        specs = [
            ("Timestep",           0.01, 2.0,  sim.time,        self._set_time),
            ("Viscosity",          0.0,  0.01, sim.viscosity,   self._set_viscosity),
            ("Diffusion",          0.0,  0.01, sim.diffusion,   self._set_diffusion),
            ("Injection Strength", 0.0,  10.0, first.strength if first else 1.0, self._set_strength),
            ("Injection Radius",   1,    10,   first.radius if first else 1,     self._set_radius),
            ("Dissipation",        0.90, 1.0,  sim.dissipation, self._set_dissipation),
        ]

        self.sliders = []
        for row, (label, lo, hi, init, callback) in enumerate(specs):
            ax = self.fig.add_axes([0.25, 0.27 - row * 0.04, 0.6, 0.025])
            step = 1 if label == "Injection Radius" else None
            slider = Slider(ax, label, lo, hi, valinit=init, valstep=step)
            slider.label.set_color('#aaaaaa')
            slider.valtext.set_color('#aaaaaa')
            slider.on_changed(callback)
            self.sliders.append(slider)

    # ── Slider callbacks ──────────────────────────────────────────────────────

    def _set_time(self, val):
        self.sim.time = val

    def _set_viscosity(self, val):
        self.sim.viscosity = val

    def _set_diffusion(self, val):
        self.sim.diffusion = val

    def _set_strength(self, val):
        for e in self.sim.emitters:
            e.strength = val

    def _set_radius(self, val):
        for e in self.sim.emitters:
            e.radius = int(val)

    def _set_dissipation(self, val):
        self.sim.dissipation = val

    # ── Mouse ─────────────────────────────────────────────────────────────────

    def _connect_mouse(self):
        self.fig.canvas.mpl_connect('button_press_event', self._on_press)
        self.fig.canvas.mpl_connect('motion_notify_event', self._on_motion)
        self.fig.canvas.mpl_connect('button_release_event', self._on_release)

    def _cell(self, event):
        """Grid cell under the cursor, or None outside the image."""
        if event.inaxes is not self.ax or event.xdata is None:
            return None
        # imshow puts cell centers on integer coordinates
        x = int(round(event.xdata))
        y = int(round(event.ydata))
        if 0 <= x < self.sim.width and 0 <= y < self.sim.height:
            return x, y
        return None

    def _on_press(self, event):
        cell = self._cell(event)
        if cell is None:
            return
        if event.button == 1:
            self.dragging = self.sim.nearest_emitter(*cell, max_distance=GRAB_DISTANCE)
        elif event.button == 3:
            self.sim.push_velocity(cell[0], cell[1], PUSH_STRENGTH, PUSH_RADIUS)

    def _on_motion(self, event):
        if self.dragging is None:
            return
        cell = self._cell(event)
        if cell is None:
            return
        emitter = self.sim.emitters[self.dragging]
        emitter.x, emitter.y = cell

    def _on_release(self, event):
        self.dragging = None

    # ── Animation ─────────────────────────────────────────────────────────────

    def update(self, frame_num):
        """Called by FuncAnimation each frame. Steps sim and updates the image."""
        self.sim.step()

        self.img.set_data(self.sim.grid.density_image())

        last = self.sim.perf_log[-1]
        self.title_text.set_text(
            f"Fluid Sim — Frame {last['frame']} | {last['fps']:.1f} FPS | "
            f"div_max={last['divergence_max']:.5f}"
        )

        return [self.img, self.title_text]

    def run(self, fps: int = 30, frames: int = None):
        """
        Start the live animation window.

        Args:
            fps    : Target animation frame rate
            frames : Total frames to render (None = infinite)
        """
        interval_ms = 1000 // fps
        self.anim = animation.FuncAnimation(
            self.fig,
            self.update,
            frames=frames,
            interval=interval_ms,
            blit=False,
            cache_frame_data=False
        )
        plt.show()
