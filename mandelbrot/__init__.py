"""Public API for grayscale Mandelbrot rendering."""

from .escape import BREAKOUT, MAX_ITERATIONS, escape_time, shade, shade_array
from .plane import pixel_to_point, sample_grid
from .renderer import RenderParameters, RenderResult, render, render_frame

__all__ = [
    "BREAKOUT",
    "MAX_ITERATIONS",
    "RenderParameters",
    "RenderResult",
    "escape_time",
    "pixel_to_point",
    "render",
    "render_frame",
    "sample_grid",
    "shade",
    "shade_array",
]
