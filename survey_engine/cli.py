#!/usr/bin/env python3
"""
Survey Engine CLI
=================

Clean a survey CSV and print weighted estimates.

Usage:
    python -m survey_engine.cli survey.csv --config run.yaml
    python -m survey_engine.cli survey.csv --suggest
    python -m survey_engine.cli survey.csv --config run.yaml --output results.json

Options:
    --config          YAML file with cleaning / weights / analysis sections
    --suggest         Use suggested configurations (default without --config)
    --critical-value  'table' (default) or 'student-t'
    --output          Write JSON results to this file instead of printing
    --include-rows    Include cleaned rows in the JSON output
    --log-level       DEBUG, INFO, WARNING, ERROR
    --log-file        Also log to logs/survey_engine_YYYYMMDD.log
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import pandas as pd

from .config_loader import RunConfig, load_config_file
from .dataset import TabularDataset
from .engine import SurveyEngine, SurveyRunResult
from .exceptions import SurveyEngineError
from .recommendations import suggest_configs
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Survey Engine - cleaning and weighted estimation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("data", type=Path, help="CSV file with a header row")
    parser.add_argument("--config", type=Path, help="YAML run configuration")
    parser.add_argument(
        "--suggest",
        action="store_true",
        help="Use suggested configurations",
    )
    parser.add_argument(
        "--critical-value",
        choices=["table", "student-t"],
        default="table",
        help="Critical value for margins of error",
    )
    parser.add_argument("--output", type=Path, help="Write JSON results to this file")
    parser.add_argument(
        "--include-rows",
        action="store_true",
        help="Include cleaned rows in JSON output",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    parser.add_argument("--log-file", action="store_true", help="Also log to a file")
    return parser.parse_args(argv)


def load_dataset(path: Path) -> TabularDataset:
    """Read a CSV, dropping blank lines and coercing numeric columns."""
    df = pd.read_csv(path, skip_blank_lines=True)
    df = df.dropna(how="all")
    logger.info(f"Loaded {len(df)} rows x {len(df.columns)} columns from {path}")
    return TabularDataset.from_frame(df)


def format_result(result: SurveyRunResult) -> str:
    """Plain-text tables of estimates and descriptive statistics."""
    lines = [
        f"Rows: {result.original_rows} -> {result.cleaned_rows} "
        f"({result.retention_pct:.1f}% retained)",
        "",
        f"{'Variable':<20} {'Estimate':>12} {'SE':>10} {'MoE':>10} {'CI low':>12} {'CI high':>12} {'n':>6}",
        "-" * 88,
    ]
    for e in result.estimates:
        low, high = e.confidence_interval
        lines.append(
            f"{e.variable:<20} {e.estimate:>12.4f} {e.standard_error:>10.4f} "
            f"{e.margin_of_error:>10.4f} {low:>12.4f} {high:>12.4f} {e.sample_size:>6}"
        )

    lines += [
        "",
        f"{'Column':<20} {'Count':>6} {'Mean':>12} {'Median':>12} {'Std':>12} {'Min':>12} {'Max':>12}",
        "-" * 92,
    ]
    for d in result.descriptive_stats:
        lines.append(
            f"{d.column:<20} {d.count:>6} {d.mean:>12.4f} {d.median:>12.4f} "
            f"{d.std:>12.4f} {d.min:>12.4f} {d.max:>12.4f}"
        )

    if result.flags:
        lines += ["", f"Flagged cells: {len(result.flags)}"]
        for flag in result.flags[:20]:
            lines.append(f"  row {flag.row_index}: {flag.rule_id} (value={flag.value!r})")

    return "\n".join(lines)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(level=args.log_level, log_file=args.log_file)

    try:
        dataset = load_dataset(args.data)

        if args.config and not args.suggest:
            run_config = load_config_file(args.config)
        else:
            cleaning, weights, analysis = suggest_configs(dataset)
            run_config = RunConfig(cleaning=cleaning, weights=weights, analysis=analysis)

        engine = SurveyEngine(critical_value=args.critical_value)
        result = engine.run(dataset, run_config.cleaning, run_config.weights, run_config.analysis)

    except (SurveyEngineError, OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, "w") as f:
            json.dump(result.to_dict(include_rows=args.include_rows), f, indent=2, default=str)
        logger.info(f"Results written to {args.output}")
    else:
        print(format_result(result))

    return 0


if __name__ == "__main__":
    sys.exit(main())
