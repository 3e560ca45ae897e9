"""
Command-line driver for ChiMerge.

Run with: python -m chimerge iris.data --column 3 --max-interval 5 --batch-merge
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import ChiMergeConfig, DEFAULT_CHI_THRESHOLD
from .dataset import Dataset
from .exceptions import ConfigurationError
from .report import chi_pairs_text, format_report, intervals_text, successive_merges_table


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chimerge",
        description="Discretize numeric attributes of a CSV dataset with ChiMerge."
    )
    parser.add_argument("datafile", help="Header-less CSV file, class label in the last column")
    parser.add_argument(
        "-c", "--column", type=int, action="append", dest="columns",
        help="Attribute column to discretize (repeatable, default: all)"
    )
    parser.add_argument(
        "--class-column", type=int, default=-1,
        help="Position of the class column (default: last)"
    )
    parser.add_argument("--max-interval", type=int, default=None)

    threshold = parser.add_mutually_exclusive_group()
    threshold.add_argument(
        "--chi-threshold", type=float, default=None,
        help=f"Stop when the lowest chi exceeds this value (default {DEFAULT_CHI_THRESHOLD})"
    )
    threshold.add_argument(
        "--significance", type=float, default=None,
        help="Derive the chi threshold from a significance level instead"
    )

    parser.add_argument("--expected-freq-threshold", type=float, default=None)
    parser.add_argument(
        "--batch-merge", action="store_true",
        help="Merge every pair tied at the lowest chi in one round"
    )
    parser.add_argument(
        "--rounds", action="store_true",
        help="Also print the successive merges and the per-round history"
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Log progress (-v) or every merge (-vv)"
    )
    return parser


def make_config(args: argparse.Namespace, n_classes: int) -> ChiMergeConfig:
    """Turn parsed options into a ChiMergeConfig."""
    options = {
        "max_interval": args.max_interval,
        "expected_freq_threshold": args.expected_freq_threshold,
        "batch_merge": args.batch_merge or None,
    }
    options = {k: v for k, v in options.items() if v is not None}

    if args.significance is not None:
        return ChiMergeConfig.from_significance(args.significance, n_classes, **options)
    if args.chi_threshold is not None:
        options["chi_threshold"] = args.chi_threshold
    return ChiMergeConfig(**options)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        dataset = Dataset.from_csv(args.datafile, class_column=args.class_column)
        config = make_config(args, len(dataset.class_list))
        columns = args.columns if args.columns else list(dataset.attribute_columns)
        tables = [dataset.discretize_by_chi(column, config=config) for column in columns]
    except ConfigurationError as exc:
        parser.error(str(exc))
    except (OSError, ValueError) as exc:
        print(f"chimerge: cannot read {args.datafile}: {exc}", file=sys.stderr)
        return 1

    for table in tables:
        print(format_report(table))
        if args.rounds:
            _, text = successive_merges_table(table)
            print(text)
            print(table.history.get_summary())
            print(intervals_text(table))
            print(chi_pairs_text(table))
    return 0


if __name__ == "__main__":
    sys.exit(main())
