import numpy as np

from mandelbrot import RenderParameters, escape_time, pixel_to_point, render, render_frame, shade


def test_single_pixel_origin_is_black():
    assert render((1, 1), 0j, 0j) == b"\x00"


def test_buffer_length_matches_bounds():
    for bounds in [(1, 1), (3, 7), (16, 4)]:
        pixels = render(bounds, complex(-2.0, 1.25), complex(0.5, -1.25))
        assert isinstance(pixels, bytes)
        assert len(pixels) == bounds[0] * bounds[1]


def test_render_is_deterministic():
    args = ((24, 18), complex(-2.0, 1.2), complex(0.6, -1.2))
    assert render(*args) == render(*args)


def test_render_is_row_major():
    bounds = (5, 3)
    upper_left, lower_right = complex(-2.0, 1.5), complex(1.0, -1.5)
    pixels = render(bounds, upper_left, lower_right)
    for row in range(3):
        for col in range(5):
            point = pixel_to_point(bounds, (col, row), upper_left, lower_right)
            assert pixels[row * 5 + col] == shade(escape_time(point))


def test_far_region_is_bright():
    pixels = render((4, 4), complex(10.0, 10.0), complex(12.0, 8.0))
    assert pixels == bytes([255]) * 16


def test_conjugate_rows_match():
    # Rows 1 and 3 sample imaginary parts 0.5 and -0.5.
    pixels = render((4, 4), complex(-1.0, 1.0), complex(1.0, -1.0))
    assert pixels[4:8] == pixels[12:16]


def test_render_parameters_bounds_and_inversion():
    params = RenderParameters(width=4, height=3, upper_left=complex(-1.0, 1.0), lower_right=complex(1.0, -1.0))
    assert params.bounds == (4, 3)
    assert not params.is_inverted()
    flipped = RenderParameters(width=4, height=3, upper_left=complex(1.0, 1.0), lower_right=complex(-1.0, -1.0))
    assert flipped.is_inverted()
    assert RenderParameters(width=1, height=1, upper_left=0j, lower_right=0j).is_inverted()


def test_render_frame_matches_sequential_render():
    params = RenderParameters(width=32, height=24, upper_left=complex(-2.0, 1.2), lower_right=complex(0.6, -1.2))
    result = render_frame(params)
    assert result.pixels.shape == (24, 32)
    assert result.pixels.dtype == np.uint8
    assert result.tobytes() == render(params.bounds, params.upper_left, params.lower_right)


def test_render_frame_iterations():
    params = RenderParameters(width=3, height=1, upper_left=complex(0.0, 0.0), lower_right=complex(3.0, 0.0))
    result = render_frame(params)
    # Samples are 0, 1 and 2 on the real axis.
    assert result.iterations.tolist() == [[-1, 2, 1]]
    assert result.pixels.tolist() == [[0, 253, 254]]


def test_render_frame_single_pixel_origin():
    params = RenderParameters(width=1, height=1, upper_left=0j, lower_right=0j)
    assert render_frame(params).tobytes() == b"\x00"
