#!/usr/bin/env python3
"""
Sampling Benchmark Tool

Times percentile outlier classification followed by apriori explanation
across a grid of sample rates and outlier sample fractions.

Usage:
    python run_benchmark.py configs/example.json

    # Write results somewhere other than results/
    python run_benchmark.py configs/example.yaml --output-dir out
"""

import argparse
import logging
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from samplingbench.config import BenchmarkConfig
from samplingbench.report import print_console_report, write_results_csv
from samplingbench.runner import WARMUP_SECONDS, run_benchmark


def print_banner(config: BenchmarkConfig, config_path: str, output_dir: str) -> None:
    """Print the run parameters."""
    print("=" * 80)
    print("SAMPLING BENCHMARK")
    print("=" * 80)
    print(f"Config:           {config_path}")
    print(f"Test name:        {config.test_name}")
    print(f"Dataset:          {config.file_name}")
    print(f"Metric:           {config.metric} (cutoff {config.cutoff}%)")
    print(f"Attributes:       {', '.join(config.attributes)}")
    print(f"Sample rates:     {list(config.sample_rates)}")
    print(f"Outlier fracs:    {list(config.outlier_sample_fractions)}")
    print(f"Trials:           {config.num_trials}")
    print(f"Output:           {output_dir}")
    print("=" * 80)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Sampling Benchmark Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python run_benchmark.py configs/example.json
    python run_benchmark.py configs/example.yaml --output-dir out --warmup-seconds 5
        """,
    )
    parser.add_argument(
        "config",
        help="Path to the benchmark config file (JSON or YAML)",
    )
    parser.add_argument(
        "--output-dir", "-o",
        default="results",
        help="Output directory for results (default: results)",
    )
    parser.add_argument(
        "--warmup-seconds",
        type=float,
        default=WARMUP_SECONDS,
        help=f"Warm-up budget in seconds (default: {WARMUP_SECONDS})",
    )

    args = parser.parse_args(argv)

    if not Path(args.config).exists():
        print(f"Error: Config file not found: {args.config}")
        sys.exit(1)

    try:
        config = BenchmarkConfig.from_file(args.config)
        logging.basicConfig(
            level=logging.DEBUG if config.verbose else logging.WARNING,
            format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        )
        print_banner(config, args.config, args.output_dir)

        results = run_benchmark(config, warmup_seconds=args.warmup_seconds)

        write_results_csv(
            results,
            config.test_name,
            output_dir=args.output_dir,
            add_timestamp=config.append_timestamp,
        )
        print_console_report(results)

    except KeyboardInterrupt:
        print("\nBenchmark interrupted by user.")
        sys.exit(1)
    except Exception as e:
        print(f"\nError during benchmark: {e}")
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
