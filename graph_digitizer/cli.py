"""Command-line interface: extract data points from a graph image without the UI."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .calibration import ANCHOR_KEYS
from .color import parse_hex_color
from .cv_utils import load_image
from .export import format_number, write_csv, write_spreadsheet_xml
from .model import DigitizerState
from .region import Rect
from .settings import load_settings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="graph-digitizer",
        description="Extract (x, y) data points from a plotted graph image by color",
        epilog="Example: graph-digitizer plot.png --cal x1 10 40 0 --cal x2 90 40 10 "
               "--cal y1 10 40 0 --cal y2 10 10 5 --color 0000ff --csv out.csv",
    )
    parser.add_argument("image", help="Path to the graph image (PNG, JPG, etc.)")
    parser.add_argument(
        "--cal",
        nargs=4,
        action="append",
        metavar=("KEY", "PX", "PY", "VALUE"),
        default=[],
        help="Calibration anchor: key (x1, x2, y1, y2), pixel x, pixel y, axis value. Give all four.",
    )
    parser.add_argument("--roi", nargs=4, type=float, metavar=("X1", "Y1", "X2", "Y2"),
                        help="Only scan inside this pixel rectangle")
    parser.add_argument("--exclude", nargs=4, type=float, action="append", default=[],
                        metavar=("X1", "Y1", "X2", "Y2"), help="Skip this pixel rectangle (repeatable)")
    parser.add_argument("--color", help="Target color as hex, e.g. 0000ff")
    parser.add_argument("--tol", type=int, help="Color tolerance (Euclidean RGB distance)")
    parser.add_argument("--min-size", type=int, help="Minimum component size in pixels")
    parser.add_argument("--dot-span", type=int, help="Largest bounding-box span treated as a marker dot")
    parser.add_argument("--csv", help="Write points as CSV")
    parser.add_argument("--xls", help="Write points as a SpreadsheetML (.xls) workbook")
    parser.add_argument("--annotate", help="Write an annotated copy of the image")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress progress messages")
    return parser


def _print_rows(rows) -> None:
    print(f"{'#':>5}  {'X':>14}  {'Y':>14}  {'px':>6}  {'py':>6}")
    for r in rows:
        print(f"{r['index'] + 1:>5}  {format_number(r['x']):>14}  {format_number(r['y']):>14}  {r['px']:>6}  {r['py']:>6}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    image_path = Path(args.image)
    if not image_path.exists():
        print(f"Error: Image file not found: {args.image}", file=sys.stderr)
        return 1

    settings = load_settings()
    if args.color is not None:
        if parse_hex_color(args.color) is None:
            print(f"Warning: ignoring malformed color {args.color!r}", file=sys.stderr)
        else:
            settings.target_hex = args.color
    if args.tol is not None:
        settings.tolerance = args.tol
    if args.min_size is not None:
        settings.min_point_size = args.min_size
    if args.dot_span is not None:
        settings.dot_max_span = args.dot_span

    try:
        buffer = load_image(image_path)
    except OSError as e:
        print(f"Error: Could not load image: {e}", file=sys.stderr)
        return 1

    state = DigitizerState(buffer, params=settings.to_params())
    settings.apply_to(state.matcher)

    for key, px, py, value in args.cal:
        if key not in ANCHOR_KEYS:
            print(f"Error: Unknown calibration key {key!r} (expected one of {', '.join(ANCHOR_KEYS)})", file=sys.stderr)
            return 1
        try:
            state.calibration.set_point(key, float(px), float(py))
        except ValueError:
            print(f"Error: Calibration pixel for {key} must be numeric", file=sys.stderr)
            return 1
        state.calibration.set_value(key, value)

    if args.roi:
        state.region.set_roi(Rect(*args.roi))
    for rect in args.exclude:
        state.region.add_exclude(Rect(*rect))

    result = state.run_extraction()
    if not result.ok:
        print(f"Error: {result.message}", file=sys.stderr)
        if result.status == "not_calibrated":
            print(f"  {state.status_message()}", file=sys.stderr)
        return 1

    rows = state.store.to_rows()
    logger.info("%d points extracted", len(rows))
    try:
        if args.csv:
            write_csv(args.csv, rows)
        if args.xls:
            write_spreadsheet_xml(args.xls, rows)
        if args.annotate:
            from .render import render_overlay, save_overlay
            save_overlay(args.annotate, render_overlay(
                buffer, calibration=state.calibration, region=state.region, points=state.store.points,
            ))
    except (OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not (args.csv or args.xls):
        _print_rows(rows)
    return 0


if __name__ == "__main__":
    sys.exit(main())
