"""
forces.py — Sources (Smoke + Velocity Inflow)
==============================================
Injects density and velocity into a rectangular region of the domain.

A hard-edged rectangle would create a sharp step in the field, and the
advection step would ring around it. Instead the injected value falls off
smoothly from the rectangle center with a cubic pulse:

  f(d) = 1 - d²(3 - 2d)    for |d| ≤ 1
  f(d) = 0                 otherwise

where d is the distance from the center, normalized per axis by the
rectangle's half-extents (so the rectangle maps onto the unit square).

The pulse is MAX-BLENDED into the field, not added: a sample only takes the
injected value if that value is larger in magnitude than what is there.
Repeated injection every frame therefore saturates instead of piling up,
and the result does not depend on the order sources are applied.
"""

import numpy as np


def cubic_pulse(x):
    """
    Smooth bump: 1 at x=0, 0 for |x| ≥ 1, cubic blend in between.
    """
    x = np.minimum(np.abs(x), 1.0)
    return 1.0 - x * x * (3.0 - 2.0 * x)


def add_inflow(field: np.ndarray, x0: float, y0: float, x1: float, y1: float, value: float,
               offset_x: float, offset_y: float, hx: float):
    """
    Max-blend a smooth pulse of `value` into `field` inside [x0, x1] × [y0, y1].

    Args:
        field              : (W, H) array, modified in-place
        x0, y0, x1, y1     : Rectangle corners in domain units
        value              : Peak value at the rectangle center (may be negative)
        offset_x, offset_y : Staggered offset of the field's samples
        hx                 : Cell size
    """
    if x1 <= x0 or y1 <= y0:
        return

    width, height = field.shape

    # Only samples inside the rectangle (clamped to the grid) can receive inflow
    i0 = max(int(np.ceil(x0 / hx - offset_x)), 0)
    j0 = max(int(np.ceil(y0 / hx - offset_y)), 0)
    i1 = min(int(np.floor(x1 / hx - offset_x)) + 1, width)
    j1 = min(int(np.floor(y1 / hx - offset_y)) + 1, height)
    if i0 >= i1 or j0 >= j1:
        return

    px, py = np.meshgrid(
        (np.arange(i0, i1) + offset_x) * hx,
        (np.arange(j0, j1) + offset_y) * hx,
        indexing='ij'
    )

    dist = np.hypot(
        (2.0 * px - (x0 + x1)) / (x1 - x0),
        (2.0 * py - (y0 + y1)) / (y1 - y0),
    )
    injected = cubic_pulse(dist) * value

    region = field[i0:i1, j0:j1]
    stronger = np.abs(region) < np.abs(injected)
    region[stronger] = injected[stronger]
