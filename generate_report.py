#!/usr/bin/env python3
"""
Summarize a sampling benchmark results file.

Usage:
    # Phase timing table on stdout
    python generate_report.py results/my_test.csv

    # Also render a stacked phase-timing chart
    python generate_report.py results/my_test.csv --plot results/my_test.png
"""

import argparse
import sys
from pathlib import Path

from samplingbench.report import (
    load_results_csv,
    plot_timing_breakdown,
    print_console_report,
    print_phase_summary,
)


def main():
    parser = argparse.ArgumentParser(
        description="Summarize sampling benchmark results",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "results",
        help="Path to a results CSV written by run_benchmark.py",
    )
    parser.add_argument(
        "--plot", "-p",
        help="Save a phase timing chart to this path",
    )
    args = parser.parse_args()

    if not Path(args.results).exists():
        print(f"Error: Results file not found: {args.results}", file=sys.stderr)
        sys.exit(1)

    try:
        results = load_results_csv(args.results)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    records = results.astype(str).to_dict(orient="records")
    print_console_report(records)
    print_phase_summary(results)

    if args.plot:
        plot_timing_breakdown(
            results,
            args.plot,
            title=f"{Path(args.results).stem} - phase timings by sample rate",
        )


if __name__ == "__main__":
    main()
