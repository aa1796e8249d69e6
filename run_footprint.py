#!/usr/bin/env python3
"""
Biodiversity Foodprint - command-line runner.

Usage:
    python run_footprint.py --help
    python run_footprint.py --data-dir data/ --country Brazil --year 2022
    python run_footprint.py --data-dir data/ --food-balance FAOSTAT_peru.csv \
        --trade-flows RTE_peru.xlsx --country Peru --output out/peru.xlsx

Input files default to the names in config/source_config.py.  Only the
FAOSTAT and Resource Trade Earth files change between countries; the
BIOVALENT table and the matching tables are reused.
"""

import argparse
import logging
import sys
from pathlib import Path

from config.source_config import (
    DEFAULT_COUNTRY,
    DEFAULT_INPUT_FILES,
    DEFAULT_OUTPUT_FILE,
    DEFAULT_REFERENCE_YEAR,
)
from processing.file_reader import load_inputs
from processing.footprint_pipeline import run_footprint
from processing.validation import SchemaViolationError
from utils.excel_formatter import format_and_save

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Location-specific biodiversity footprint of food consumption",
    )
    parser.add_argument("--data-dir", type=Path, default=Path("."),
                        help="Directory holding the input files (default: current directory)")
    parser.add_argument("--country", default=DEFAULT_COUNTRY,
                        help=f"Consuming country, matched against the FAOSTAT Area (default: {DEFAULT_COUNTRY})")
    parser.add_argument("--all-areas", action="store_true",
                        help="Do not filter FAOSTAT rows by Area")
    parser.add_argument("--year", type=int, default=DEFAULT_REFERENCE_YEAR,
                        help=f"Reference year for trade flows (default: {DEFAULT_REFERENCE_YEAR})")
    parser.add_argument("--output", type=Path, default=Path(DEFAULT_OUTPUT_FILE),
                        help=f"Output workbook (default: {DEFAULT_OUTPUT_FILE})")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    for key in DEFAULT_INPUT_FILES:
        parser.add_argument(
            f"--{key.replace('_', '-')}",
            dest=key,
            default=None,
            help=f"Override the {key.replace('_', ' ')} file (default: {DEFAULT_INPUT_FILES[key][0]})",
        )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # A file override keeps the default sheet name for that table
    overrides = {
        key: (getattr(args, key), sheet_name)
        for key, (_, sheet_name) in DEFAULT_INPUT_FILES.items()
        if getattr(args, key) is not None
    }

    try:
        inputs = load_inputs(args.data_dir, overrides)
        result = run_footprint(
            inputs,
            country=None if args.all_areas else args.country,
            reference_year=args.year,
        )
    except (FileNotFoundError, SchemaViolationError) as exc:
        logger.error(str(exc))
        return 1

    files = {**DEFAULT_INPUT_FILES, **overrides}
    run_info = {f"Input: {key}": name for key, (name, _) in files.items()}
    output_path = format_and_save(result, args.output, run_info)

    if not result.coverage.is_complete:
        logger.warning("Coverage gaps found; see the 'Coverage Report' sheet")

    logger.info(f"Summary written to {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
