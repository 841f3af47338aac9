#!/usr/bin/env python3
"""
Chroma Key Matting CLI

Keys a flat background color out of each input image, cleans the alpha with
erosion/dilation and small-region removal, and writes a transparent PNG.
"""

import argparse
import sys
from pathlib import Path

from chromacut.pipeline import (
    ConfigurationError,
    KeyColor,
    MattingPipeline,
    PipelineConfig,
    PipelineLogger,
)


def _key_color(value: str) -> KeyColor:
    try:
        return KeyColor.from_hex(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chromacut",
        description="Remove a flat key-color background from images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Automatic key color (green or magenta depending on brightness)
  %(prog)s input.png

  # Explicit key color and a looser tolerance
  %(prog)s --key-color "#00FF00" --tolerance 70 input.png

  # Keep small fragments, debug logging
  %(prog)s --min-region-size 5 --debug input.png
        """,
    )

    parser.add_argument("files", nargs="+", type=Path, help="Input image files")

    # Output options
    parser.add_argument(
        "-o", "--output", type=Path, help="Output path (for single file only)"
    )

    # Keying options
    parser.add_argument(
        "--key-color",
        type=_key_color,
        metavar="HEX",
        help="Background color to remove, e.g. #00FF00 (default: chosen from image)",
    )
    parser.add_argument(
        "--tolerance",
        type=float,
        default=50.0,
        help="RGB distance below which pixels are removed (default: 50)",
    )

    # Cleanup options
    parser.add_argument(
        "--min-region-size",
        type=int,
        default=50,
        metavar="N",
        help="Drop connected regions smaller than N pixels (default: 50)",
    )
    parser.add_argument(
        "--flood-fill",
        action="store_true",
        help="Label regions with the work-list flood fill instead of OpenCV",
    )

    # Logging options
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug mode with detailed logging"
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Custom log file path (default: ~/.local/share/chromacut/debug.log)",
    )

    return parser


def main(argv=None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.output and len(args.files) > 1:
        parser.error("--output can only be used with a single input file")

    try:
        config = PipelineConfig(
            tolerance=args.tolerance,
            min_region_size=args.min_region_size,
            region_labeling="flood_fill" if args.flood_fill else "components",
            key_color=args.key_color,
            output_path=args.output,
        )
    except ConfigurationError as e:
        parser.error(str(e))

    logger = PipelineLogger(
        log_file=args.log_file, debug_mode=args.debug, verbose=args.verbose
    )
    pipeline = MattingPipeline(config=config, logger=logger)

    logger.log_info(f"Processing {len(args.files)} image(s)...")

    success_count = 0

    for file_path in args.files:
        if not file_path.exists():
            logger.log_error(f"✗ File not found: {file_path}")
            continue

        try:
            output_path = pipeline.process(file_path)
        except Exception:
            # Already reported and recorded by the pipeline logger
            continue

        logger.log_info(f"✓ Success: {file_path} → {output_path}")
        success_count += 1

    logger.log_info(f"\nDone! Processed {success_count}/{len(args.files)} images.")

    return 0 if success_count == len(args.files) else 1


if __name__ == "__main__":
    sys.exit(main())
