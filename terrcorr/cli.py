# -*- coding: utf-8 -*-
"""
terrcorr-deskew - Command-line terrain correction of a slant-range scene.

Usage
-----
::

    terrcorr-deskew slant_dem.npy corrected.npy --sar scene.npy \\
        --output-mask mask.npy --fill-value leave

Without ``--sar`` the DEM itself is corrected. Exits with status 1 on any
terrcorr error after logging the diagnostic.

Author
------
Duane Smalley, PhD
duane.d.smalley@gmail.com

License
-------
MIT License
Copyright (c) 2024 geoint.org
See LICENSE file for full text.

Created
-------
2026-02-26

Modified
--------
2026-03-02
"""

# Standard library
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# terrcorr internal
from terrcorr.exceptions import TerrcorrError
from terrcorr.image_processing.terrain.pipeline import TerrainCorrectionPipeline
from terrcorr.vocabulary import GroundDemSource

logger = logging.getLogger('terrcorr.cli')

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def _fill_value(text: str) -> Optional[float]:
    if text.lower() == 'leave':
        return None
    try:
        return float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"expected a number or 'leave', got {text!r}") from None


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Parameters
    ----------
    argv : List[str], optional
        Arguments without the program name; ``sys.argv[1:]`` when omitted.

    Returns
    -------
    argparse.Namespace
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        prog='terrcorr-deskew',
        description="Remove terrain-induced side-looking effects from a "
                    "slant-range SAR image (or its DEM) and write it in "
                    "ground range.",
    )
    parser.add_argument(
        "slant_dem",
        type=Path,
        help="Slant-range DEM registered to the SAR image.",
    )
    parser.add_argument(
        "output",
        type=Path,
        help="Ground-range output (.npy, .tif).",
    )
    parser.add_argument(
        "--ground-dem",
        type=Path,
        default=None,
        help="Ground-range DEM with the same sample count as the slant DEM.",
    )
    parser.add_argument(
        "--sar",
        type=Path,
        default=None,
        help="Slant-range SAR image. Without it the DEM is corrected.",
    )
    parser.add_argument(
        "--no-radiometric",
        action="store_true",
        help="Skip radiometric compensation.",
    )
    parser.add_argument(
        "--input-mask",
        type=Path,
        default=None,
        help="Slant-range user mask the size of the SAR image "
             "(1 = normal, 2 = invalid, other = user masked).",
    )
    parser.add_argument(
        "--output-mask",
        type=Path,
        default=None,
        help="Write the layover/shadow mask here.",
    )
    parser.add_argument(
        "--no-fill-holes",
        action="store_true",
        help="Zero layover and shadow pixels instead of keeping "
             "interpolated data.",
    )
    parser.add_argument(
        "--fill-value",
        type=_fill_value,
        default=None,
        metavar="{FLOAT|leave}",
        help="Value for user-masked pixels, or 'leave' to keep the data "
             "(default: leave).",
    )
    parser.add_argument(
        "--ground-dem-source",
        choices=[s.value for s in GroundDemSource],
        default=GroundDemSource.BACKCONVERTED.value,
        help="Ground-range DEM used for geometric compensation "
             "(default: backconverted).",
    )
    parser.add_argument(
        "--log",
        type=Path,
        default=None,
        help="Append log messages to this file.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only report warnings and errors.",
    )
    return parser.parse_args(argv)


def configure_logging(log_file: Optional[Path], quiet: bool) -> None:
    """Route terrcorr log records to stderr and, optionally, a file."""
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, mode='a'))
    logging.basicConfig(
        level=logging.WARNING if quiet else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def build_pipeline(args: argparse.Namespace) -> TerrainCorrectionPipeline:
    """Translate parsed arguments into a configured pipeline."""
    pipeline = (TerrainCorrectionPipeline()
                .with_slant_dem(args.slant_dem)
                .with_output(args.output)
                .with_radiometric(not args.no_radiometric)
                .with_fill_holes(not args.no_fill_holes)
                .with_fill_value(args.fill_value)
                .with_ground_dem_source(args.ground_dem_source))
    if args.ground_dem is not None:
        pipeline.with_ground_dem(args.ground_dem)
    if args.sar is not None:
        pipeline.with_sar(args.sar)
    if args.input_mask is not None:
        pipeline.with_input_mask(args.input_mask)
    if args.output_mask is not None:
        pipeline.with_output_mask(args.output_mask)
    return pipeline


def main(argv: Optional[List[str]] = None) -> int:
    """Run ``terrcorr-deskew``; returns the process exit status."""
    args = parse_args(argv)
    configure_logging(args.log, args.quiet)
    try:
        result = build_pipeline(args).run()
    except TerrcorrError as exc:
        logger.error("%s", exc)
        return 1
    logger.info("Wrote %s (%dx%d, ground pixel %.3f m)",
                result.output_path, result.metadata.line_count,
                result.metadata.sample_count, result.ground_pixel_size)
    return 0


if __name__ == '__main__':
    sys.exit(main())
