"""
render.py — Density → Pixels → PNG
===================================
Turns the density field into an RGBA image: white background, smoke drawn
in shades of gray (density 1 → black). One PNG per frame.

Image row 0 is y = 0, i.e. the image is the (height, width) density array
as-is, no flipping.
"""

from pathlib import Path

import matplotlib.image as mpimg
import numpy as np


def density_to_rgba(density: np.ndarray) -> np.ndarray:
    """
    Args:
        density : (height, width) array, values nominally in [0, 1]

    Returns:
        (height, width, 4) uint8 RGBA, opaque
    """
    shade = np.clip(np.round((1.0 - density) * 255.0), 0, 255).astype(np.uint8)

    rgba = np.empty(density.shape + (4,), dtype=np.uint8)
    rgba[..., 0] = shade
    rgba[..., 1] = shade
    rgba[..., 2] = shade
    rgba[..., 3] = 0xFF
    return rgba


def frame_path(directory, index: int) -> Path:
    return Path(directory) / f"Frame{index:05d}.png"


def save_frame(path, solver) -> Path:
    """Write the solver's current density as a PNG. Returns the path written."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    mpimg.imsave(path, density_to_rgba(solver.density_image()))
    return path
