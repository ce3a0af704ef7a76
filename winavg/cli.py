# -*- coding: utf-8 -*-
"""
Command Line Interface - Run the window average operator on a GeoTIFF.

Usage::

    winavg scene.tif scene_avg.tif --bands B4 B8 --window-size 5 \\
        --mask "(B8 > 0.1) & (B4 > 0)"

Exit status is 0 on success, 2 when parameters are rejected, 1 when the
input cannot be read or the output cannot be written.

Author
------
Steven Siebert

License
-------
MIT License
Copyright (c) 2024 geoint.org
See LICENSE file for full text.

Created
-------
2026-10-19

Modified
--------
2026-10-19
"""

# Standard library
import argparse
import logging
import sys
import time
from typing import List, Optional

# WinAvg internal
from winavg.exceptions import DependencyError, WinAvgError, ValidationError
from winavg.operator import WindowAverageOperator
from winavg.product import Product
from winavg.vocabulary import OutputFormat

logger = logging.getLogger(__name__)


def setup_logging(level: int = logging.INFO) -> None:
    """Configure the root logger for command-line use."""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='winavg',
        description=(
            "Average pixels of a masked area within a moving window. "
            "Writes <band>_avg and <band>_cnt for every selected band."
        ),
    )
    parser.add_argument('input', help="Source GeoTIFF.")
    parser.add_argument('output', help="Output .tif/.tiff or .npz file.")
    parser.add_argument(
        '-b', '--bands', nargs='+', required=True, metavar='BAND',
        help="Names of the bands to be processed.",
    )
    parser.add_argument(
        '-w', '--window-size', type=int, default=3,
        help="Odd window side length in [3, 125] (default: 3).",
    )
    parser.add_argument(
        '-m', '--mask', required=True, metavar='EXPR',
        help="Mask expression over band names, e.g. '(B8 > 0.1) & (B4 > 0)'.",
    )
    parser.add_argument(
        '--tile-size', type=int, default=512,
        help="Tile side length used to split the work (default: 512).",
    )
    parser.add_argument(
        '--workers', type=int, default=None,
        help="Number of worker threads (default: chosen by Python).",
    )
    parser.add_argument(
        '--format', choices=[f.value for f in OutputFormat], default=None,
        help="Output format (default: inferred from the output extension).",
    )
    parser.add_argument(
        '-v', '--verbose', action='store_true', help="Enable debug logging.",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    start = time.perf_counter()
    try:
        operator = WindowAverageOperator(
            band_names=list(args.bands),
            window_size=args.window_size,
            mask_expression=args.mask,
        )
        with Product.from_geotiff(args.input) as product:
            operator.write(
                product,
                args.output,
                format=args.format,
                tile_size=args.tile_size,
                max_workers=args.workers,
            )
    except ValidationError as e:
        logger.error("Invalid parameters: %s", e)
        return 2
    except (DependencyError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 1
    except (WinAvgError, OSError, ValueError) as e:
        logger.error("Processing failed: %s", e)
        return 1

    logger.info(
        "Finished %s in %.2f s", args.output, time.perf_counter() - start
    )
    return 0


if __name__ == '__main__':
    sys.exit(main())
