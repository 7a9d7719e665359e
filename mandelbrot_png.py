import os
import sys
import time
import warnings
from argparse import ArgumentParser
from collections import Counter
from dataclasses import dataclass
from pathlib import Path

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import tensorflow as tf
import PIL.Image

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")

from mandelbrot import RenderParameters, render, render_frame

DEFAULT_OUTPUT = "mandelbrot.png"
DEFAULT_UPPER_LEFT = complex(-1.0, 1.0)
DEFAULT_LOWER_RIGHT = complex(1.0, -1.0)
DEFAULT_BOUNDS = (1000, 1000)
BACKENDS = ("tensorflow", "python")
_VALUE_OPTIONS = {"--output", "--backend"}

USAGE = (
    "Program requires 6 args: left_x upper_y right_x lower_y pixels_w pixels_h\n"
    "Default run is -1.0 1.0 1.0 -1.0 1000 1000"
)


@dataclass(frozen=True)
class CliOptions:
    params: RenderParameters
    output: Path
    backend: str
    verbose: bool
    defaults_used: bool


def build_parser():
    parser = ArgumentParser(
        description="Render the Mandelbrot set over a region of the complex plane as a grayscale PNG.",
        epilog=USAGE,
    )

    parser.add_argument('coords', nargs='*', metavar='COORD',
                        help='left_x upper_y right_x lower_y pixels_w pixels_h (all six, or none for the defaults)')

    parser.add_argument('--output', type=str, dest='output', metavar='OUTPUT', default=DEFAULT_OUTPUT,
                        help='destination PNG file. Default: "%s".' % DEFAULT_OUTPUT)

    parser.add_argument('--backend', choices=BACKENDS, default='tensorflow',
                        help='"tensorflow" evaluates the whole grid as tensors, "python" walks every pixel in turn.')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def _parse_region(coords: list[str], parser: ArgumentParser) -> RenderParameters:
    try:
        re_1, im_1, re_2, im_2 = (float(value) for value in coords[:4])
    except ValueError:
        parser.error("Coordinates must be numbers, got: %s" % " ".join(coords[:4]))
    try:
        width, height = (int(value) for value in coords[4:])
    except ValueError:
        parser.error("Pixel dimensions must be integers, got: %s" % " ".join(coords[4:]))
    if width <= 0 or height <= 0:
        parser.error("Pixel dimensions must be positive, got %dx%d." % (width, height))
    return RenderParameters(
        width=width,
        height=height,
        upper_left=complex(re_1, im_1),
        lower_right=complex(re_2, im_2),
    )


def resolve_output_path(output_arg: str, parser: ArgumentParser) -> Path:
    output_path = Path(output_arg).expanduser()
    if output_path.exists() and output_path.is_dir():
        parser.error("--output must point to a file, not a directory.")
    if output_path.suffix:
        if output_path.suffix.lower() != ".png":
            parser.error("--output extension %s is not .png." % output_path.suffix)
    else:
        output_path = output_path.with_suffix(".png")
    return output_path.resolve()


def _is_number(token: str) -> bool:
    try:
        float(token)
    except ValueError:
        return False
    return True


def _collect_coords(argv: list[str], coords: list[str], extras: list[str], parser: ArgumentParser) -> list[str]:
    """Merge positionals with numbers argparse mistook for options (e.g. ``-1e-3``), in command-line order."""

    unknown = [token for token in extras if not _is_number(token)]
    if unknown:
        parser.error("unrecognized arguments: %s" % " ".join(unknown))
    if not extras:
        return list(coords)

    pending = Counter(coords) + Counter(extras)
    ordered: list[str] = []
    skip_value = False
    for token in argv:
        if skip_value:
            skip_value = False
            continue
        if token in _VALUE_OPTIONS:
            skip_value = True
            continue
        if pending[token] > 0:
            ordered.append(token)
            pending[token] -= 1
    return ordered


def parse_args(argv=None) -> CliOptions:
    parser = build_parser()
    argv = list(sys.argv[1:] if argv is None else argv)
    opt, extras = parser.parse_known_args(argv)
    coords = _collect_coords(argv, opt.coords, extras, parser)

    if len(coords) == 6:
        params = _parse_region(coords, parser)
        defaults_used = False
    elif not coords:
        params = RenderParameters(
            width=DEFAULT_BOUNDS[0],
            height=DEFAULT_BOUNDS[1],
            upper_left=DEFAULT_UPPER_LEFT,
            lower_right=DEFAULT_LOWER_RIGHT,
        )
        defaults_used = True
    else:
        parser.error(USAGE)

    return CliOptions(
        params=params,
        output=resolve_output_path(opt.output, parser),
        backend=opt.backend,
        verbose=bool(opt.verbose),
        defaults_used=defaults_used,
    )


def select_device() -> str:
    # Prefer the first visible GPU and fall back to the CPU.
    gpus = tf.config.list_physical_devices('GPU')
    if not gpus:
        log("No GPU found, using CPU")
        return '/CPU:0'
    try:
        for gpu in gpus:
            tf.config.experimental.set_memory_growth(gpu, True)
    except RuntimeError as e:
        log(e)
        return '/CPU:0'
    log("GPU found, using %s" % gpus[0].name)
    return '/GPU:0'


def write_grayscale_png(pixels: bytes, bounds: tuple[int, int], output_path: Path) -> None:
    """Encode a row-major 8-bit buffer as a grayscale PNG at ``output_path``."""

    image = PIL.Image.frombytes("L", bounds, pixels)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(output_path), format="PNG")


def main(argv=None) -> int:
    options = parse_args(argv)

    global VERBOSE
    VERBOSE = options.verbose

    if options.defaults_used:
        print('Using defaults. Run with "--help" for more options')

    params = options.params
    if params.is_inverted():
        warnings.warn(
            "Region %s .. %s is inverted or empty; the image will be mirrored or degenerate."
            % (params.upper_left, params.lower_right),
            UserWarning,
        )

    log("TensorFlow version: %s" % tf.__version__)
    log("Rendering %dx%d pixels over %s .. %s with the %s backend"
        % (params.width, params.height, params.upper_left, params.lower_right, options.backend))

    print("Running..")
    start = time.perf_counter()

    if options.backend == "python":
        pixels = render(params.bounds, params.upper_left, params.lower_right)
    else:
        pixels = render_frame(params, device=select_device()).tobytes()

    write_grayscale_png(pixels, params.bounds, options.output)
    elapsed = time.perf_counter() - start
    print("Done in {0:.3f}s. Find output in {1}".format(elapsed, options.output))
    return 0


if __name__ == '__main__':
    sys.exit(main())
