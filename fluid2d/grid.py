"""
grid.py — Staggered Scalar Field (MAC Grid Building Block)
===========================================================
The foundation of the entire simulation.

Every quantity on the MAC grid is one StaggeredField; they only differ in
where their samples sit inside a cell:

  - Density `d` lives at CELL CENTERS        → offset (0.5, 0.5), shape (W,   H)
  - Velocity `u` lives on VERTICAL faces     → offset (0.0, 0.5), shape (W+1, H)
  - Velocity `v` lives on HORIZONTAL faces   → offset (0.5, 0.0), shape (W,   H+1)

Why staggered? It prevents the "checkerboard" pressure instability
that appears on collocated grids.

Each field is double-buffered:
  - `src` holds the authoritative values ("this frame")
  - `dst` is scratch that `advect()` writes into ("next frame")
`flip()` commits dst → src. The solver flips all three fields only after all
three have advected, so every advection reads the same velocity snapshot.
"""

import numpy as np

from .advect import runge_kutta3, sample_cubic, sample_linear
from .forces import add_inflow


class StaggeredField:
    """
    A 2D scalar field sampled at (i + offset_x, j + offset_y) in cell units.
    """

    def __init__(self, width: int, height: int, offset_x: float, offset_y: float, hx: float):
        """
        Args:
            width, height      : Number of samples along X and Y
            offset_x, offset_y : Sub-cell offset of sample [0, 0], in cells
            hx                 : Cell size in domain units
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Field dimensions must be positive, got {width}x{height}")

        self.width = width
        self.height = height
        self.offset_x = offset_x
        self.offset_y = offset_y
        self.hx = hx

        self.src = np.zeros((width, height), dtype=np.float64)
        self.dst = np.zeros((width, height), dtype=np.float64)

    @property
    def shape(self) -> tuple[int, int]:
        return self.src.shape

    def positions(self) -> tuple[np.ndarray, np.ndarray]:
        """Sample positions in cell units, each of shape (W, H)."""
        return np.meshgrid(
            np.arange(self.width, dtype=np.float64) + self.offset_x,
            np.arange(self.height, dtype=np.float64) + self.offset_y,
            indexing='ij'
        )

    def sample_linear(self, x, y):
        return sample_linear(self.src, x, y, self.offset_x, self.offset_y)

    def sample_cubic(self, x, y):
        return sample_cubic(self.src, x, y, self.offset_x, self.offset_y)

    def advect(self, timestep: float, u: "StaggeredField", v: "StaggeredField"):
        """
        Semi-Lagrangian advection of this field through (u, v).

        Reads `self.src`, `u.src` and `v.src`; writes `self.dst` only.
        Safe to call with `u` or `v` being this very field.
        """
        x, y = self.positions()
        x_back, y_back = runge_kutta3(x, y, timestep, u, v, self.hx)
        self.dst[:] = self.sample_cubic(x_back, y_back)

    def flip(self):
        """Commit the advected values: swap src and dst."""
        self.src, self.dst = self.dst, self.src

    def add_inflow(self, x0: float, y0: float, x1: float, y1: float, value: float):
        """Max-blend a smooth pulse of `value` into [x0, x1] × [y0, y1] (domain units)."""
        add_inflow(self.src, x0, y0, x1, y1, value, self.offset_x, self.offset_y, self.hx)

    def reset(self):
        self.src[:] = 0.0
        self.dst[:] = 0.0

    def __repr__(self):
        return (
            f"StaggeredField({self.width}x{self.height}, "
            f"offset=({self.offset_x}, {self.offset_y}), "
            f"min={self.src.min():.4f}, max={self.src.max():.4f})"
        )
