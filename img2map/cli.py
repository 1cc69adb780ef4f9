# img2map/cli.py
"""
Command line entry point.

Usage:
  img2map export-mappings
  img2map convert INPUT [-o OUTPUT] [-m MAPPINGS] [-t N] [-r FILTER] [--match exact|nearest] [--debug]
  img2map convert-directory INPUT_DIR [-o OUTPUT_DIR] [-j JOBS] [same options]

Exit codes:
  0  success
  1  a file failed to convert (batch mode: at least one file)
  2  palette, template or directory error, or bad arguments
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .classify import MATCH_MODES, Classifier, build_classifier
from .convert import (
    ConversionResult,
    FileFailure,
    MapWriter,
    convert_directory,
    convert_image,
)
from .core_types import color_to_hex
from .errors import Img2MapError
from .image_io import RESIZE_FILTERS
from .palette_data import DEFAULT_MAPPINGS, load_palette
from .utils import (
    debug_log,
    enable_line_buffered_stdout,
    error,
    format_seconds_compact,
    format_total_duration_compact,
    key_value_pairs_to_string,
    log,
    print_banner,
    print_config_line,
    warn,
)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_FATAL = 2


def _tile_size(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None
    if n < 1:
        raise argparse.ArgumentTypeError("tile size must be >= 1")
    return n


def _jobs(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None
    if n < 1:
        raise argparse.ArgumentTypeError("jobs must be >= 1")
    return n


def _add_global_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-m", "--mappings", type=Path, default=None,
        help="Palette JSON file. Omit for the built-in mappings.",
    )
    parser.add_argument(
        "-t", "--tile-size", type=_tile_size, default=1,
        help="Source pixels per tile. The image is downscaled by this factor first.",
    )
    parser.add_argument(
        "-r", "--resize-filter", choices=RESIZE_FILTERS, default="nearest",
        help="Filter used when tile size > 1.",
    )
    parser.add_argument(
        "--match", choices=MATCH_MODES, default="exact",
        help='"exact" needs literal colour matches; "nearest" picks the closest palette colour.',
    )
    parser.add_argument("--debug", action="store_true", help="Verbose per-file details")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="img2map",
        description="Convert images into DDNet map game layers by palette colour.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("export-mappings", help="Print the built-in mappings to stdout")

    p_conv = sub.add_parser("convert", help="Convert one image to a map")
    p_conv.add_argument("input", type=Path, help="Input image")
    p_conv.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output map path (default: input with .map extension)",
    )
    _add_global_options(p_conv)

    p_dir = sub.add_parser("convert-directory", help="Convert every image in a directory")
    p_dir.add_argument("input_dir", type=Path, help="Directory with input images")
    p_dir.add_argument(
        "-o", "--output-dir", type=Path, default=None,
        help="Output directory (default: the input directory)",
    )
    p_dir.add_argument(
        "-j", "--jobs", type=_jobs, default=1, help="Files converted in parallel"
    )
    _add_global_options(p_dir)
    return parser


def _load_classifier(args: argparse.Namespace) -> Classifier:
    palette = load_palette(args.mappings)
    if args.debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Mappings", str(args.mappings) if args.mappings else "<default>"),
                    ("Entries", len(palette)),
                ]
            )
        )
        for entry in palette:
            debug_log(f"  {color_to_hex(entry.color)} -> {entry.tile} ({entry.tile.tile_id})")
    return build_classifier(palette, args.match)


def _report_result(result: ConversionResult, debug: bool) -> None:
    print_banner(result.input_path.name)
    (W0, H0), (W, H) = result.source_size, result.grid_size
    if debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Loaded", f"{W0}x{H0}"),
                    ("Grid", f"{W}x{H}"),
                    ("Unique colours", result.unique_colors),
                ]
            )
        )
    log(f"exporting map to {result.output_path}")
    log("Tiles used:")
    for tile_id, count in result.usage:
        log(f"  {tile_id:>3}: {count:,}")
    if debug:
        debug_log(f"Total {format_seconds_compact(result.seconds)}")


def _report_failure(failure: FileFailure) -> None:
    print_banner(failure.path.name)
    warn(f"skipped: {failure.error}")


def _run_convert(args: argparse.Namespace, writer: Optional[MapWriter]) -> int:
    classifier = _load_classifier(args)
    try:
        result = convert_image(
            args.input,
            classifier,
            tile_size=args.tile_size,
            resize_filter=args.resize_filter,
            output_path=args.output,
            writer=writer,
        )
    except Img2MapError as exc:
        error(str(exc))
        return EXIT_FATAL if exc.fatal else EXIT_FAILED
    _report_result(result, args.debug)
    return EXIT_OK


def _run_convert_directory(args: argparse.Namespace, writer: Optional[MapWriter]) -> int:
    classifier = _load_classifier(args)
    report = convert_directory(
        args.input_dir,
        classifier,
        output_dir=args.output_dir,
        tile_size=args.tile_size,
        resize_filter=args.resize_filter,
        jobs=args.jobs,
        writer=writer,
        on_result=lambda r: _report_result(r, args.debug),
        on_failure=_report_failure,
    )
    total = sum(r.seconds for r in report.converted)
    log(
        f"\nConverted {len(report.converted)} file(s), failed {len(report.failed)} "
        f"in {format_total_duration_compact(total)}"
    )
    return EXIT_OK if report.ok else EXIT_FAILED


def main(argv: Optional[Sequence[str]] = None, writer: Optional[MapWriter] = None) -> int:
    """Parse argv and run one subcommand. Returns the process exit code."""
    enable_line_buffered_stdout()
    args = build_parser().parse_args(argv)

    if args.command == "export-mappings":
        sys.stdout.write(DEFAULT_MAPPINGS)
        sys.stdout.flush()
        return EXIT_OK

    print_config_line(
        "run",
        [
            ("Match", args.match),
            ("Tile size", args.tile_size),
            ("Filter", args.resize_filter),
        ]
        + ([("Jobs", args.jobs)] if args.command == "convert-directory" else []),
        debug=args.debug,
    )

    try:
        if args.command == "convert":
            return _run_convert(args, writer)
        return _run_convert_directory(args, writer)
    except Img2MapError as exc:
        error(str(exc))
        return EXIT_FATAL


def run() -> None:
    sys.exit(main())


__all__: List[str] = ["build_parser", "main", "run"]
