# SPDX-License-Identifier: MIT
"""Command-line interface for the animation converter."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from anim_converter.batch import DEFAULT_PATTERN, BatchDriver, find_animation_files
from anim_converter.errors import ConversionError
from anim_converter.export.settings import ExportFormat, ExportSettings
from anim_converter.parser.object_set import MsgpackObjectDecoder, load_skeleton

EPILOG = """\
examples:
  anim-convert skeleton.skl animation.anmb
  anim-convert skeleton.skl animations/ -gltf
  anim-convert skeleton.skl animation.anmb -o output/ -dae
  anim-convert skeleton.skl animations/ -o output/ -gltf
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="anim-convert",
        description="Convert skeletal animations into glTF or Collada scenes",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "skeleton",
        type=Path,
        help="Path to the skeleton file",
    )
    parser.add_argument(
        "animations",
        type=Path,
        help="Animation file, or folder searched recursively for animation files",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output folder (default: same folder as each input animation)",
    )
    format_group = parser.add_mutually_exclusive_group()
    format_group.add_argument(
        "-gltf",
        dest="export_format",
        action="store_const",
        const=ExportFormat.GLTF,
        help="Export as glTF (default)",
    )
    format_group.add_argument(
        "-dae",
        dest="export_format",
        action="store_const",
        const=ExportFormat.DAE,
        help="Export as Collada DAE",
    )
    parser.add_argument(
        "--pattern",
        type=str,
        default=DEFAULT_PATTERN,
        help="Glob used to find animation files in a folder (default: %(default)s)",
    )
    parser.add_argument(
        "--frame-rate",
        type=float,
        default=30.0,
        help="Frames per second of the exported animation (default: %(default)s)",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the progress bar",
    )
    parser.set_defaults(export_format=ExportFormat.GLTF)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Convert animations from the command line."""
    args = build_parser().parse_args(argv)

    if not args.skeleton.is_file():
        print(f"Error: Skeleton file not found: {args.skeleton}", file=sys.stderr)
        return 1

    if args.frame_rate <= 0:
        print(f"Error: Frame rate must be positive, got {args.frame_rate}", file=sys.stderr)
        return 1

    decoder = MsgpackObjectDecoder()

    print(f"Loading skeleton from: {args.skeleton}")
    try:
        skeleton = load_skeleton(args.skeleton, decoder)
    except ConversionError as e:
        print(f"Error: Failed to load skeleton: {e}", file=sys.stderr)
        return 1

    if args.animations.is_dir():
        print(f"Searching for {args.pattern} files in: {args.animations}")
        animation_files = find_animation_files(args.animations, args.pattern)
        print(f"Found {len(animation_files)} animation file(s)")
        input_root = args.animations
    elif args.animations.is_file():
        animation_files = [args.animations]
        input_root = args.animations.parent
    else:
        print(f"Error: Animation path not found: {args.animations}", file=sys.stderr)
        return 1

    if not animation_files:
        print("No animation files found.", file=sys.stderr)
        return 1

    print(f"Export format: {args.export_format.name}")
    print(f"Output folder: {args.output or 'same as input'}")

    driver = BatchDriver(
        skeleton,
        decoder,
        export_format=args.export_format,
        settings=ExportSettings(frame_rate=args.frame_rate),
        show_progress=not args.no_progress,
    )
    report = driver.run(animation_files, input_root=input_root, output_root=args.output)

    print(
        f"All animations processed: {len(report.succeeded)} exported, "
        f"{len(report.failed)} failed."
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
