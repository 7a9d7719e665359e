"""Escape-time evaluation of the Mandelbrot recurrence."""

from __future__ import annotations

from typing import Optional

import numpy as np

# Squared escape radius: |z| > 2 guarantees divergence.
BREAKOUT = 4.0
MAX_ITERATIONS = 256


def escape_time(c: complex) -> Optional[int]:
    """Return the 0-based iteration at which ``z <- z*z + c`` leaves the radius, or ``None``."""

    c_re = c.real
    c_im = c.imag
    re = 0.0
    im = 0.0
    for i in range(MAX_ITERATIONS):
        re, im = re * re - im * im + c_re, re * im + im * re + c_im
        if re * re + im * im > BREAKOUT:
            return i
    return None


def shade(count: Optional[int]) -> int:
    """Gray level for an escape result: bright near the boundary, black inside."""

    if count is None:
        return 0
    return (255 - count) % 256


def shade_array(iterations: np.ndarray) -> np.ndarray:
    """Vectorized :func:`shade`; ``iterations`` holds ``-1`` for points that never escaped."""

    counts = np.asarray(iterations, dtype=np.int32)
    levels = np.where(counts >= 0, np.int32(255) - counts, np.int32(0))
    return np.mod(levels, 256).astype(np.uint8)
