"""
relaxation.py — Pressure Relaxation Sweeps (Jacobi / Gauss-Seidel)
===================================================================
One sweep = one pass of updates over every pressure cell for the system

  scale · (n·p[i,j] - Σ p[neighbors]) = rhs[i,j]

where n is the number of INTERIOR neighbors of the cell (4 inside the
domain, 3 on an edge, 2 in a corner). Leaving the wall neighbors out of the
stencil is what encodes the zero-flux (Neumann) wall condition; no ghost
cells or special cases are needed.

Solving a cell's own row for p gives the relaxation update:

  p[i,j] ← (rhs[i,j] + scale · Σ p[neighbors]) / (scale · n)

Two ways to run it:

  JACOBI        — every cell reads the PREVIOUS sweep's values. Updates go
                  into a second buffer which is copied back afterwards.
                  Order independent, deterministic, trivially vectorized.
                  The 5-point stencil is bipartite, so the plain update
                  bounces the checkerboard error mode back and forth forever;
                  an under-relaxation weight (2/3) damps it.

  GAUSS_SEIDEL  — cells read the most recent values, including ones updated
                  earlier in the SAME sweep. We use red-black ordering: all
                  red cells first, then all black cells from the fresh reds.
                  Converges about twice as fast. A weight > 1 gives SOR.

Every sweep returns the largest absolute change it made, which is what the
solver's stopping rule looks at.
"""

import numpy as np


def interior_neighbor_counts(width: int, height: int) -> np.ndarray:
    """Number of interior neighbors of each cell, shape (W, H)."""
    counts = np.zeros((width, height), dtype=np.float64)
    counts[1:, :] += 1.0    # x-1 neighbor
    counts[:-1, :] += 1.0   # x+1 neighbor
    counts[:, 1:] += 1.0    # y-1 neighbor
    counts[:, :-1] += 1.0   # y+1 neighbor
    return counts


def checkerboard(width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
    """(red, black) boolean masks for red-black ordering."""
    i, j = np.meshgrid(np.arange(width), np.arange(height), indexing='ij')
    red = (i + j) % 2 == 0
    return red, ~red


def _neighbor_sum(p: np.ndarray) -> np.ndarray:
    """Sum of the interior 4-neighbors of every cell (walls contribute nothing)."""
    total = np.zeros_like(p)
    total[1:, :] += p[:-1, :]
    total[:-1, :] += p[1:, :]
    total[:, 1:] += p[:, :-1]
    total[:, :-1] += p[:, 1:]
    return total


def _relaxed_values(p: np.ndarray, rhs: np.ndarray, scale: float, counts: np.ndarray,
                    out: np.ndarray) -> np.ndarray:
    """
    Fill `out` with the unweighted relaxation update of every cell.
    Cells with no neighbors (a 1×1 grid) are pinned to 0.
    """
    out[:] = 0.0
    np.divide(rhs + scale * _neighbor_sum(p), scale * counts, out=out, where=counts > 0)
    return out


def jacobi_sweep(pressure: np.ndarray, scratch: np.ndarray, rhs: np.ndarray,
                 scale: float, counts: np.ndarray, weight: float = 1.0) -> float:
    """
    Double-buffered sweep: compute into `scratch` from `pressure`, copy back.

    Returns: maximum absolute change over all cells
    """
    _relaxed_values(pressure, rhs, scale, counts, out=scratch)
    if weight != 1.0:
        scratch[:] = pressure + weight * (scratch - pressure)

    max_delta = float(np.abs(scratch - pressure).max())
    np.copyto(pressure, scratch)
    return max_delta


def gauss_seidel_sweep(pressure: np.ndarray, scratch: np.ndarray, rhs: np.ndarray,
                       scale: float, counts: np.ndarray, weight: float = 1.0,
                       colors: tuple[np.ndarray, np.ndarray] | None = None) -> float:
    """
    In-place red-black sweep. The black pass sees this sweep's red values.

    Returns: maximum absolute change over all cells
    """
    if colors is None:
        colors = checkerboard(*pressure.shape)

    max_delta = 0.0
    for color in colors:
        if not color.any():
            continue
        _relaxed_values(pressure, rhs, scale, counts, out=scratch)
        delta = weight * (scratch[color] - pressure[color])
        pressure[color] += delta
        max_delta = max(max_delta, float(np.abs(delta).max()))
    return max_delta
