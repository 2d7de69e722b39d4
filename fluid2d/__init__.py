"""
fluid2d/ — 2D Smoke on a Staggered Grid
========================================
Exports the main interfaces drivers and renderers use.

main.py imports:       FluidSolver, save_frame
visualizer.py imports: FluidSolver → density_image()
"""

from .grid import StaggeredField
from .render import density_to_rgba, save_frame
from .simulation import FluidSolver, add_inflow, create, read_density, step
from .solver import RELAX_GAUSS_SEIDEL, RELAX_JACOBI, PressureSolveResult

__all__ = [
    "StaggeredField",
    "FluidSolver",
    "PressureSolveResult",
    "RELAX_JACOBI",
    "RELAX_GAUSS_SEIDEL",
    "create",
    "add_inflow",
    "step",
    "read_density",
    "density_to_rgba",
    "save_frame",
]
