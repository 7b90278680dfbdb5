#!/usr/bin/env python3
"""
Unit Root Testing from the Command Line

Reads a CSV of time series (one variable per column) and runs one of:
1. ADF stationarity classification at level and first difference (default)
2. Sequential differencing until every variable is stationary (--max-diff)
3. Panel unit root tests, treating columns as units (--panel)

Usage:
    python -m urtools.scripts.run_unit_root data.csv --type trend
    python -m urtools.scripts.run_unit_root data.csv --max-diff 2
    python -m urtools.scripts.run_unit_root panel.csv --panel
"""

import argparse
import logging
from pathlib import Path

import pandas as pd
import structlog

from urtools.config import settings
from urtools.statistics.differencing import remove_unit_root
from urtools.statistics.panel import panel_unit_root_tests
from urtools.statistics.stationarity import adf_test, format_adf_table

logger = structlog.get_logger()


def configure_logging(level: str) -> None:
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
    )


def run(args: argparse.Namespace) -> None:
    data = pd.read_csv(args.csv, index_col=args.index_col)
    logger.info("Loaded data", path=str(args.csv), shape=data.shape)

    if args.panel:
        results = panel_unit_root_tests(data.select_dtypes(include="number"), exo=args.exo)
        results.summary()
        return

    if args.max_diff is not None:
        result = remove_unit_root(data, max_diff=args.max_diff, type=args.type)
        print("\nDifferencing control:")
        print(result.control.to_string(index=False) if not result.control.empty else "(none)")
        if args.output:
            result.data.to_csv(args.output)
            logger.info("Saved differenced data", path=str(args.output))
        return

    report = adf_test(data, type=args.type)
    if args.latex:
        print(format_adf_table(report))
        return
    for title, table in report.tables().items():
        print(f"\n{title}:")
        print(table.to_string(index=False))


def main():
    parser = argparse.ArgumentParser(description="Unit root tests for time series and panels")
    parser.add_argument("csv", type=Path, help="CSV file with one series per column")
    parser.add_argument(
        "--index-col",
        type=int,
        default=None,
        help="Column to use as the row index (e.g. dates)",
    )
    parser.add_argument(
        "--type",
        choices=["none", "drift", "trend"],
        default=settings.adf_type,
        help="ADF deterministic specification",
    )
    parser.add_argument(
        "--max-diff",
        type=int,
        default=None,
        help="Difference non-stationary columns up to this many times",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Where to write the differenced data (with --max-diff)",
    )
    parser.add_argument(
        "--panel",
        action="store_true",
        help="Run Maddala-Wu, Choi and Levin-Lin-Chu tests with columns as units",
    )
    parser.add_argument(
        "--exo",
        choices=["none", "intercept", "trend"],
        default=settings.panel_exo,
        help="Deterministic terms for the panel tests",
    )
    parser.add_argument(
        "--latex",
        action="store_true",
        help="Print the ADF results as a LaTeX table",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Logging level",
    )
    args = parser.parse_args()

    configure_logging(args.log_level)
    run(args)


if __name__ == "__main__":
    main()
