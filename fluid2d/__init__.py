"""
fluid2d/ — 2D Colored-Smoke Physics Package
============================================
Exports the main interfaces the rendering shell uses.

Visualizer imports: FluidSimulation → step(), grid.density_image()
Mouse handling uses: FluidSimulation → nearest_emitter(), push_velocity()
"""

from .grid import FluidGrid
from .emitter import Emitter
from .simulation import FluidSimulation

__all__ = ["FluidGrid", "Emitter", "FluidSimulation"]
