"""
simulation.py — The Fluid Solver (One Step = One Frame of Physics)
===================================================================
Ties the three staggered fields and the pressure solve together.
One call to `step()` advances the fluid by `timestep` seconds.

Physics pipeline per step:
  1. Divergence of the current velocity field
  2. Pressure solve (Jacobi or Gauss-Seidel, bounded budget)
  3. Subtract the pressure gradient, zero the wall faces
  4. Advect density, u and v through the PROJECTED velocity
  5. Flip all three fields, zero the wall faces again

Step 4 reads u.src / v.src while writing the dst buffers, and step 5 only
runs once all three advections are done. Flipping u before v has advected
would make v trace through the new u.

Usage:
    solver = FluidSolver(128, 128, fluid_density=0.1)
    for frame in range(100):
        solver.add_inflow(0.45, 0.2, 0.15, 0.03, 1.0, 0.0, 3.0)
        solver.step(0.005)
        density = solver.density_image()     # Hand to renderer
"""

import logging
import time

import numpy as np

from .grid import StaggeredField
from .relaxation import checkerboard, interior_neighbor_counts
from .solver import (
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_TOLERANCE,
    RELAX_JACOBI,
    RELAXATIONS,
    PressureSolveResult,
    apply_pressure,
    build_rhs,
    set_boundary,
    solve_pressure,
)

logger = logging.getLogger(__name__)


class FluidSolver:
    """
    2D incompressible smoke on a width × height MAC grid inside a closed box.
    """

    def __init__(self, width: int, height: int, fluid_density: float, *,
                 relaxation: str = RELAX_JACOBI,
                 max_iterations: int = DEFAULT_MAX_ITERATIONS,
                 tolerance: float = DEFAULT_TOLERANCE,
                 relaxation_weight: float | None = None):
        """
        Args:
            width, height     : Grid resolution in cells
            fluid_density     : Mass density of the fluid (rho)
            relaxation        : "JACOBI" (deterministic) or "GAUSS_SEIDEL" (faster)
            max_iterations    : Sweep budget of the pressure solve
            tolerance         : Stop once a sweep changes no cell by more than this
            relaxation_weight : Relaxation factor, None = strategy default
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        if fluid_density <= 0.0:
            raise ValueError(f"Fluid density must be positive, got {fluid_density}")
        if relaxation not in RELAXATIONS:
            raise ValueError(f"Unknown relaxation: {relaxation}. Use one of {sorted(RELAXATIONS)}.")
        if max_iterations <= 0:
            raise ValueError(f"max_iterations must be positive, got {max_iterations}")
        if tolerance <= 0.0:
            raise ValueError(f"tolerance must be positive, got {tolerance}")

        self.width = width
        self.height = height
        self.fluid_density = fluid_density
        self.hx = 1.0 / min(width, height)

        self.relaxation = relaxation
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self.relaxation_weight = relaxation_weight

        # ── Staggered fields ───────────────────────────────────────────────
        self.d = StaggeredField(width,     height,     0.5, 0.5, self.hx)
        self.u = StaggeredField(width + 1, height,     0.0, 0.5, self.hx)
        self.v = StaggeredField(width,     height + 1, 0.5, 0.0, self.hx)

        # ── Pressure solve scratch (cell-centered) ─────────────────────────
        self.rhs = np.zeros((width, height), dtype=np.float64)
        self.pressure = np.zeros((width, height), dtype=np.float64)
        self.pressure_scratch = np.zeros((width, height), dtype=np.float64)
        self.neighbor_counts = interior_neighbor_counts(width, height)
        self.colors = checkerboard(width, height)

        self.frame = 0
        self.last_solve: PressureSolveResult | None = None
        self.perf_log = []   # stores timing data per step

    # ── Pipeline ──────────────────────────────────────────────────────────────

    def project(self, timestep: float) -> PressureSolveResult:
        """
        Make the velocity field (approximately) divergence-free.

        Returns the pressure solve result. Exhausting the sweep budget is
        logged as a warning; the best pressure found is still applied.
        """
        _check_timestep(timestep)

        build_rhs(self.u.src, self.v.src, self.hx, out=self.rhs)
        result = solve_pressure(
            self.pressure, self.pressure_scratch, self.rhs, self.neighbor_counts,
            timestep, self.fluid_density, self.hx,
            relaxation=self.relaxation,
            max_iterations=self.max_iterations,
            tolerance=self.tolerance,
            weight=self.relaxation_weight,
            colors=self.colors,
        )
        apply_pressure(self.u.src, self.v.src, self.pressure, timestep, self.fluid_density, self.hx)

        if result.converged:
            logger.debug("Pressure solve converged after %d iterations, maximum change is %g",
                         result.iterations, result.residual)
        else:
            logger.warning("Pressure solve exceeded budget of %d iterations, maximum change was %g",
                           result.iterations, result.residual)

        self.last_solve = result
        return result

    def advect(self, timestep: float):
        """Advect all three fields through the current velocity, then commit."""
        _check_timestep(timestep)

        self.d.advect(timestep, self.u, self.v)
        self.u.advect(timestep, self.u, self.v)
        self.v.advect(timestep, self.u, self.v)

        # Only now may any field commit
        self.d.flip()
        self.u.flip()
        self.v.flip()

        set_boundary(self.u.src, self.v.src)

    def step(self, timestep: float):
        """
        Advance the simulation by one timestep.

        The pressure result is kept in `last_solve`; timing and convergence
        data are appended to `perf_log`.
        """
        t_total_start = time.perf_counter()

        result = self.project(timestep)

        t0 = time.perf_counter()
        self.advect(timestep)
        t_advect = (time.perf_counter() - t0) * 1000

        self.frame += 1
        self.perf_log.append({
            "frame"       : self.frame,
            "total_ms"    : (time.perf_counter() - t_total_start) * 1000,
            "pressure_ms" : result.time_ms,
            "advect_ms"   : t_advect,
            "iterations"  : result.iterations,
            "residual"    : result.residual,
            "converged"   : result.converged,
        })

    # ── Sources ───────────────────────────────────────────────────────────────

    def add_inflow(self, x: float, y: float, w: float, h: float,
                   d: float, u: float, v: float):
        """
        Inject density `d` and velocity (u, v) into the rectangle with lower
        corner (x, y) and size (w, h), in domain units.
        """
        self.d.add_inflow(x, y, x + w, y + h, d)
        self.u.add_inflow(x, y, x + w, y + h, u)
        self.v.add_inflow(x, y, x + w, y + h, v)

    # ── Read-out ──────────────────────────────────────────────────────────────

    def read_density(self) -> np.ndarray:
        """Flat copy of the density, row-major with x varying fastest."""
        return self.d.src.T.flatten()

    def density_image(self) -> np.ndarray:
        """Density as a (height, width) array, row = y."""
        return self.d.src.T.copy()

    def divergence(self) -> np.ndarray:
        """
        Per-cell divergence of the current velocity field, shape (W, H).
        ~0 everywhere right after projection.
        """
        u, v = self.u.src, self.v.src
        return (u[1:, :] - u[:-1, :] + v[:, 1:] - v[:, :-1]) / self.hx

    def reset(self):
        """Zero out all fields and solver state."""
        for field in (self.d, self.u, self.v):
            field.reset()
        for arr in (self.rhs, self.pressure, self.pressure_scratch):
            arr[:] = 0.0
        self.frame = 0
        self.last_solve = None
        self.perf_log.clear()

    def __repr__(self):
        max_div = np.abs(self.divergence()).max()
        max_vel = max(np.abs(self.u.src).max(), np.abs(self.v.src).max())
        return (
            f"FluidSolver({self.width}x{self.height}, rho={self.fluid_density}, "
            f"relaxation={self.relaxation})\n"
            f"  density   : max={self.d.src.max():.4f}, sum={self.d.src.sum():.2f}\n"
            f"  velocity  : max_component={max_vel:.4f}\n"
            f"  divergence: max={max_div:.6f}"
        )


def _check_timestep(timestep: float):
    if timestep <= 0.0:
        raise ValueError(f"Timestep must be positive, got {timestep}")


# ── Functional interface for drivers ──────────────────────────────────────────

def create(width: int, height: int, fluid_density: float, **config) -> FluidSolver:
    return FluidSolver(width, height, fluid_density, **config)


def add_inflow(solver: FluidSolver, x: float, y: float, w: float, h: float,
               d: float, u: float, v: float):
    solver.add_inflow(x, y, w, h, d, u, v)


def step(solver: FluidSolver, timestep: float):
    solver.step(timestep)


def read_density(solver: FluidSolver) -> np.ndarray:
    return solver.read_density()
