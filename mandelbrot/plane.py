"""Mapping between the pixel grid and the complex plane."""

from __future__ import annotations

import numpy as np


def pixel_to_point(
    bounds: tuple[int, int],
    pixel: tuple[int, int],
    upper_left: complex,
    lower_right: complex,
) -> complex:
    """Return the point of the complex plane sampled by ``pixel``.

    ``bounds`` is ``(width, height)`` and ``pixel`` is ``(col, row)``. Column 0
    lands on the left edge of the region and row 0 on its top edge; the last
    column and row stop one step short of the right and bottom edges.
    """

    plane_width = lower_right.real - upper_left.real
    plane_height = upper_left.imag - lower_right.imag
    return complex(
        upper_left.real + pixel[0] * plane_width / bounds[0],
        upper_left.imag - pixel[1] * plane_height / bounds[1],
    )


def sample_grid(
    bounds: tuple[int, int],
    upper_left: complex,
    lower_right: complex,
) -> tuple[np.ndarray, np.ndarray]:
    """Map every pixel at once, returning real and imaginary planes of shape ``(height, width)``."""

    width, height = bounds
    plane_width = np.float64(lower_right.real) - np.float64(upper_left.real)
    plane_height = np.float64(upper_left.imag) - np.float64(lower_right.imag)

    cols = np.arange(width, dtype=np.float64)
    rows = np.arange(height, dtype=np.float64)
    re = np.float64(upper_left.real) + cols * plane_width / np.float64(width)
    im = np.float64(upper_left.imag) - rows * plane_height / np.float64(height)

    re_grid, im_grid = np.meshgrid(re, im)
    return re_grid, im_grid
