import argparse
import logging
import sys

from .app import run
from .compute import list_divergence_names
from .config import DEFAULT_PRESET, get_preset, list_preset_names
from .renderer import DEFAULT_HEIGHT, DEFAULT_WIDTH


LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def build_parser():
    parser = argparse.ArgumentParser(
        prog="mandelbrot_sketch",
        description="Render the Mandelbrot set and tweak it from a settings panel.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--preset", choices=list_preset_names(), default=DEFAULT_PRESET,
        help="Which variant of the sketch to start with.",
    )
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH, help="Canvas width in pixels.")
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT, help="Canvas height in pixels.")
    parser.add_argument(
        "--max-iter", type=int, default=None, metavar="N",
        help="Override the preset's iteration cap.",
    )
    parser.add_argument(
        "--divergence", choices=list_divergence_names(), default=None,
        help="Override the preset's divergence test.",
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Seed for the random palette.",
    )
    parser.add_argument(
        "--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def parse_args(argv=None):
    return build_parser().parse_args(argv)


def configure_logging(level="INFO"):
    """Send log records of the package to stdout."""
    logger = logging.getLogger("mandelbrot_sketch")
    logger.setLevel(level)
    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console_handler)
    return logger


def main(argv=None):
    """Entry point of `python -m mandelbrot_sketch`."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.width < 1 or args.height < 1:
        parser.error(f"canvas must be at least 1x1 pixels, got {args.width}x{args.height}")

    settings = get_preset(args.preset)
    changes = {}
    if args.max_iter is not None:
        changes['max_iterations'] = args.max_iter
    if args.divergence is not None:
        changes['divergence'] = args.divergence
    if args.seed is not None:
        changes['seed'] = args.seed
    if changes:
        try:
            settings = settings.replace(**changes)
        except ValueError as e:
            parser.error(str(e))

    configure_logging(args.log_level)
    run(args.width, args.height, settings)
