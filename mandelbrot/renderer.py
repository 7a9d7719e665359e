"""Rendering primitives for grayscale Mandelbrot images."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
import tensorflow as tf

from .escape import BREAKOUT, MAX_ITERATIONS, escape_time, shade, shade_array
from .plane import pixel_to_point, sample_grid


@dataclass(frozen=True)
class RenderParameters:
    """Parameters that describe a single render of the Mandelbrot set."""

    width: int
    height: int
    upper_left: complex
    lower_right: complex

    @property
    def bounds(self) -> tuple[int, int]:
        return self.width, self.height

    def is_inverted(self) -> bool:
        """True when the region has no positive extent along either axis."""
        return (
            self.lower_right.real <= self.upper_left.real
            or self.upper_left.imag <= self.lower_right.imag
        )


@dataclass(frozen=True)
class RenderResult:
    """Container for the numerical results of a vectorized render."""

    pixels: np.ndarray
    iterations: np.ndarray

    def tobytes(self) -> bytes:
        return self.pixels.tobytes(order="C")


def render(bounds: tuple[int, int], upper_left: complex, lower_right: complex) -> bytes:
    """Render the region pixel by pixel into a row-major grayscale buffer."""

    width, height = bounds
    pixels = bytearray()
    for row in range(height):
        for col in range(width):
            point = pixel_to_point(bounds, (col, row), upper_left, lower_right)
            pixels.append(shade(escape_time(point)))
    return bytes(pixels)


@tf.function
def _escape_step(
    i: tf.Tensor,
    zr: tf.Tensor,
    zi: tf.Tensor,
    cr: tf.Tensor,
    ci: tf.Tensor,
    counts: tf.Tensor,
    active: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Advance every point that has not escaped yet by one iteration."""

    zr_new = zr * zr - zi * zi + cr
    zi_new = zr * zi + zi * zr + ci
    zr = tf.where(active, zr_new, zr)
    zi = tf.where(active, zi_new, zi)
    breakout = tf.constant(BREAKOUT, dtype=zr.dtype)
    escaped = tf.logical_and(active, zr * zr + zi * zi > breakout)
    counts = tf.where(escaped, tf.fill(tf.shape(counts), i), counts)
    active = tf.logical_and(active, tf.logical_not(escaped))
    return zr, zi, counts, active


@tf.function
def _escape_run(cr: tf.Tensor, ci: tf.Tensor) -> tf.Tensor:
    """Iterate the whole grid with a TensorFlow while loop and return escape iterations."""

    max_iterations = tf.constant(MAX_ITERATIONS, dtype=tf.int32)
    i = tf.constant(0, dtype=tf.int32)
    zr = tf.zeros_like(cr)
    zi = tf.zeros_like(ci)
    counts = tf.fill(tf.shape(cr), tf.constant(-1, dtype=tf.int32))
    active = tf.ones_like(cr, dtype=tf.bool)

    def cond(i, zr, zi, counts, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, zr, zi, counts, active):
        zr, zi, counts, active = _escape_step(i, zr, zi, cr, ci, counts, active)
        return i + 1, zr, zi, counts, active

    _, _, _, counts, _ = tf.while_loop(cond, body, (i, zr, zi, counts, active))
    return counts


def render_frame(params: RenderParameters, *, device: Optional[str] = None) -> RenderResult:
    """Render ``params`` on whole tensors; yields the same bytes as :func:`render`."""

    re, im = sample_grid(params.bounds, params.upper_left, params.lower_right)

    with tf.device(device if device is not None else "/CPU:0"):
        cr = tf.convert_to_tensor(re, dtype=tf.float64)
        ci = tf.convert_to_tensor(im, dtype=tf.float64)
        counts = _escape_run(cr, ci)

    iterations = counts.numpy().astype(np.int32, copy=False)
    return RenderResult(pixels=shade_array(iterations), iterations=iterations)
