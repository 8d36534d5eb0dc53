"""
Command-line entry point.

Usage:
    pattern-vectorizer vectorize photo.jpg --corners 12,30 790,25 800,610 5,600 \\
        --calibrate 100,100,478,100,10 --svg molde.svg --dxf molde.dxf
    pattern-vectorizer calibrate 0,0 100,0 10
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from pattern_vectorizer import __version__
from pattern_vectorizer.calibration import calibrate, calibration_from
from pattern_vectorizer.export import DXFWriter, PNGWriter, PageTransform, SVGWriter
from pattern_vectorizer.ingest import load_image
from pattern_vectorizer.shared.config import (
    EdgeDetectionConfig,
    Settings,
    SimplifierConfig,
    get_settings,
)
from pattern_vectorizer.shared.errors import ConfigurationError, PatternVectorizerError
from pattern_vectorizer.shared.logging_setup import configure_logging
from pattern_vectorizer.vectorization import VectorizationHandler

logger = logging.getLogger(__name__)


def parse_point(value: str) -> tuple[float, float]:
    """``"x,y"`` to a float pair."""
    parts = value.split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"expected x,y but got {value!r}")
    try:
        return (float(parts[0]), float(parts[1]))
    except ValueError:
        raise argparse.ArgumentTypeError(f"non-numeric point {value!r}")


def parse_calibration(value: str) -> tuple[tuple[float, float], tuple[float, float], float]:
    """``"x1,y1,x2,y2,cm"`` to two points and a distance."""
    parts = value.split(",")
    if len(parts) != 5:
        raise argparse.ArgumentTypeError(f"expected x1,y1,x2,y2,cm but got {value!r}")
    try:
        x1, y1, x2, y2, cm = (float(p) for p in parts)
    except ValueError:
        raise argparse.ArgumentTypeError(f"non-numeric calibration {value!r}")
    return ((x1, y1), (x2, y2), cm)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pattern-vectorizer",
        description="Turn a photo of a sewing pattern into a 1:1 vector outline.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=str, default=None, help="YAML config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    vec = subparsers.add_parser("vectorize", help="Vectorize a pattern photo")
    vec.add_argument("image", type=str, help="Input image")
    vec.add_argument(
        "--corners", type=parse_point, nargs=4, metavar="X,Y", default=None,
        help="Pattern corners in the photo: top-left top-right bottom-right bottom-left",
    )
    vec.add_argument(
        "--calibrate", type=parse_calibration, default=None, metavar="X1,Y1,X2,Y2,CM",
        help="Reference segment in the rectified image and its real length",
    )
    vec.add_argument("--svg", type=str, default=None, help="SVG output path")
    vec.add_argument("--dxf", type=str, default=None, help="DXF output path")
    vec.add_argument("--png", type=str, default=None, help="PNG preview output path")
    vec.add_argument("--customer", type=str, default="", help="Customer name on the sheet")
    vec.add_argument("--epsilon", type=float, default=None, help="Simplification tolerance (px)")
    vec.add_argument("--low", type=float, default=None, help="Canny low threshold")
    vec.add_argument("--high", type=float, default=None, help="Canny high threshold")

    cal = subparsers.add_parser("calibrate", help="Compute pixels per centimetre")
    cal.add_argument("point1", type=parse_point)
    cal.add_argument("point2", type=parse_point)
    cal.add_argument("distance_cm", type=float)

    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Fold command-line threshold and tolerance flags into settings."""
    edges = settings.edges.model_dump()
    if args.low is not None:
        edges["low_threshold"] = args.low
    if args.high is not None:
        edges["high_threshold"] = args.high

    simplifier = settings.simplifier.model_dump()
    if args.epsilon is not None:
        simplifier["epsilon"] = args.epsilon

    try:
        return settings.model_copy(update={
            "edges": EdgeDetectionConfig(**edges),
            "simplifier": SimplifierConfig(**simplifier),
        })
    except ValueError as e:
        raise ConfigurationError(str(e)) from e


def run_vectorize(args: argparse.Namespace, settings: Settings) -> int:
    settings = apply_overrides(settings, args)
    image = load_image(args.image)

    calibration = None
    if args.calibrate is not None:
        point1, point2, cm = args.calibrate
        calibration = calibration_from(point1, point2, cm)

    handler = VectorizationHandler(settings)
    result = handler.vectorize(image, corners=args.corners, calibration=calibration)

    transform = PageTransform.fit(
        result.polygons,
        settings.export,
        calibration.pixels_per_cm if calibration else None,
    )

    print(f"{len(result.polygons)} outlines, largest has {len(result.largest)} points")
    if calibration:
        print(
            f"Size: {transform.pattern_width_cm:.1f} x {transform.pattern_height_cm:.1f} cm "
            f"({calibration.pixels_per_cm:.2f} px/cm)"
        )

    if args.svg:
        path = SVGWriter(settings.export).write(result.polygons, args.svg, transform, args.customer)
        print(f"Wrote {path}")
    if args.dxf:
        path = DXFWriter(settings.export).save(result.polygons, args.dxf, transform)
        print(f"Wrote {path}")
    if args.png:
        path = PNGWriter(settings.export).save(result.polygons, args.png, transform, args.customer)
        print(f"Wrote {path}")

    return 0


def run_calibrate(args: argparse.Namespace) -> int:
    pixels_per_cm = calibrate(args.point1, args.point2, args.distance_cm)
    print(f"{pixels_per_cm:.4f} px/cm")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = get_settings(str(Path(args.config)) if args.config else None)
        configure_logging(settings.logging, verbose=args.verbose)

        if args.command == "vectorize":
            return run_vectorize(args, settings)
        return run_calibrate(args)
    except PatternVectorizerError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
