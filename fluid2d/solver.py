"""
solver.py — Pressure Projection
================================
The pressure projection step enforces INCOMPRESSIBILITY:
  div(v) = 0 everywhere

Velocity coming out of the previous step (plus whatever the sources pushed
in) is generally NOT divergence-free: fluid "piles up" in some cells. We
fix this by:
  1. Computing the divergence of the current velocity field   → build_rhs()
  2. Solving a Poisson equation for pressure                  → solve_pressure()
  3. Subtracting the pressure gradient from velocity          → apply_pressure()

The solve is iterative and has a fixed budget. Running out of budget is
not an error: we return the best pressure we have together with a
PressureSolveResult, and the caller decides whether to log it.

The relaxation switch lives here: "JACOBI" (double-buffered, deterministic)
or "GAUSS_SEIDEL" (in-place red-black, faster).
"""

import time
from dataclasses import dataclass

import numpy as np

from .relaxation import gauss_seidel_sweep, jacobi_sweep


# ── Relaxation switch ─────────────────────────────────────────────────────────
RELAX_JACOBI       = "JACOBI"
RELAX_GAUSS_SEIDEL = "GAUSS_SEIDEL"

RELAXATIONS = {
    RELAX_JACOBI: jacobi_sweep,
    RELAX_GAUSS_SEIDEL: gauss_seidel_sweep,
}

# ── Solver defaults ───────────────────────────────────────────────────────────
DEFAULT_MAX_ITERATIONS = 600
DEFAULT_TOLERANCE      = 1e-5
DEFAULT_WEIGHTS = {
    RELAX_JACOBI: 2.0 / 3.0,
    RELAX_GAUSS_SEIDEL: 1.0,
}


@dataclass
class PressureSolveResult:
    iterations: int
    residual: float
    converged: bool
    relaxation: str
    time_ms: float = 0.0


def build_rhs(u: np.ndarray, v: np.ndarray, hx: float, out: np.ndarray) -> np.ndarray:
    """
    Negative divergence of the staggered velocity field, scaled by 1/hx.

    Net outflow of cell (i, j) = u[i+1, j] - u[i, j] + v[i, j+1] - v[i, j]

    Args:
        u   : (W+1, H) x-velocity on vertical faces
        v   : (W, H+1) y-velocity on horizontal faces
        hx  : Cell size
        out : (W, H) buffer to fill

    Returns: `out`
    """
    out[:] = -(u[1:, :] - u[:-1, :] + v[:, 1:] - v[:, :-1]) / hx
    return out


def solve_pressure(pressure: np.ndarray, scratch: np.ndarray, rhs: np.ndarray,
                   counts: np.ndarray, timestep: float, fluid_density: float, hx: float,
                   relaxation: str = RELAX_JACOBI,
                   max_iterations: int = DEFAULT_MAX_ITERATIONS,
                   tolerance: float = DEFAULT_TOLERANCE,
                   weight: float | None = None,
                   colors: tuple[np.ndarray, np.ndarray] | None = None) -> PressureSolveResult:
    """
    Iteratively relax `pressure` (in-place) towards A·p = rhs.

    `pressure` is used as the initial guess, so passing in last step's
    solution warm-starts the solve.

    Stops after the first sweep whose largest change is below `tolerance`,
    or after `max_iterations` sweeps, whichever comes first.

    `colors` are the red/black masks for Gauss-Seidel; callers solving the
    same grid repeatedly pass them in so they are built only once.
    """
    if relaxation not in RELAXATIONS:
        raise ValueError(f"Unknown relaxation: {relaxation}. Use one of {sorted(RELAXATIONS)}.")
    if weight is None:
        weight = DEFAULT_WEIGHTS[relaxation]

    sweep = RELAXATIONS[relaxation]
    extra = {"colors": colors} if relaxation == RELAX_GAUSS_SEIDEL else {}
    scale = timestep / (fluid_density * hx * hx)

    t_start = time.perf_counter()
    max_delta = 0.0
    for iteration in range(max_iterations):
        max_delta = sweep(pressure, scratch, rhs, scale, counts, weight=weight, **extra)
        if max_delta < tolerance:
            return PressureSolveResult(
                iterations=iteration + 1,
                residual=max_delta,
                converged=True,
                relaxation=relaxation,
                time_ms=(time.perf_counter() - t_start) * 1000,
            )

    return PressureSolveResult(
        iterations=max_iterations,
        residual=max_delta,
        converged=False,
        relaxation=relaxation,
        time_ms=(time.perf_counter() - t_start) * 1000,
    )


def apply_pressure(u: np.ndarray, v: np.ndarray, pressure: np.ndarray,
                   timestep: float, fluid_density: float, hx: float):
    """
    Subtract the pressure gradient from velocity.

    Each cell's pressure pushes outwards through its four faces: it is
    subtracted on the low face and added on the high face, so every interior
    face ends up with  -scale · (p[high] - p[low]).

    Wall faces are then forced to zero (solid, non-porous walls), whatever
    the gradient said.
    """
    scale = timestep / (fluid_density * hx)

    u[:-1, :] -= scale * pressure
    u[1:, :]  += scale * pressure
    v[:, :-1] -= scale * pressure
    v[:, 1:]  += scale * pressure

    set_boundary(u, v)


def set_boundary(u: np.ndarray, v: np.ndarray):
    """Zero normal velocity on all four walls."""
    u[0, :]  = 0.0
    u[-1, :] = 0.0
    v[:, 0]  = 0.0
    v[:, -1] = 0.0
