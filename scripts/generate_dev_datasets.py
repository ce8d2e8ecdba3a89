#!/usr/bin/env python3
"""
Generate a small synthetic dataset and matching config for fast iteration.

Creates a CSV with categorical attribute columns and one numeric metric.
Rows matching a planted attribute combination get inflated metric values,
so the explanation stage has something to find. A JSON config pointing at
the CSV is written next to it.

These run in seconds and exercise the same code paths as real datasets.
NOT for actual benchmarking.

Usage:
    python scripts/generate_dev_datasets.py                  # data/dev.csv
    python scripts/generate_dev_datasets.py --rows 500000 --output data
"""

import argparse
import json
import sys
from pathlib import Path

import numpy as np
import pandas as pd

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))
from samplingbench.config import OUTLIER_SAMPLING_DISABLED


NUM_ROWS = 100_000
ATTRIBUTE_CARDINALITIES = {
    "location": 20,
    "version": 8,
    "device": 50,
    "carrier": 5,
}
PLANTED = {"location": "location_3", "version": "version_1"}


def generate_dataset(num_rows: int, seed: int = 0) -> pd.DataFrame:
    """Generate attribute columns plus a log-normal metric with a planted anomaly."""
    rng = np.random.default_rng(seed)
    data = {}
    for name, cardinality in ATTRIBUTE_CARDINALITIES.items():
        codes = rng.integers(0, cardinality, size=num_rows)
        data[name] = np.char.add(f"{name}_", codes.astype(str))

    metric = rng.lognormal(mean=3.0, sigma=0.5, size=num_rows)
    planted = np.ones(num_rows, dtype=bool)
    for name, value in PLANTED.items():
        planted &= data[name] == value
    metric[planted] *= rng.uniform(5.0, 10.0, size=int(planted.sum()))
    data["latency"] = metric

    return pd.DataFrame(data)


def write_config(config_path: Path, csv_path: Path) -> None:
    """Write a benchmark config for the generated dataset."""
    config = {
        "testName": "dev",
        "fileName": str(csv_path),
        "metric": "latency",
        "cutoff": 1.0,
        "includeHi": True,
        "includeLo": False,
        "attributes": list(ATTRIBUTE_CARDINALITIES),
        "minSupport": 0.01,
        "minRatioMetric": 3.0,
        "sampleRates": [0.1, 0.5, 1.0],
        "outlierSampleFractions": [OUTLIER_SAMPLING_DISABLED, 0.5],
        "numTrials": 3,
    }
    with open(config_path, "w") as f:
        json.dump(config, f, indent=2)


def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic dev dataset")
    parser.add_argument(
        "--rows",
        type=int,
        default=NUM_ROWS,
        help=f"Number of rows (default: {NUM_ROWS:,})",
    )
    parser.add_argument(
        "--output",
        default="data",
        help="Output directory (default: data)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed (default: 0)",
    )
    args = parser.parse_args()

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)

    csv_path = output_dir / "dev.csv"
    print(f"Generating {args.rows:,} rows...")
    df = generate_dataset(args.rows, seed=args.seed)
    df.to_csv(csv_path, index=False)
    print(f"Saved dataset to {csv_path}")

    config_path = output_dir / "dev.json"
    write_config(config_path, csv_path)
    print(f"Saved config to {config_path}")


if __name__ == "__main__":
    main()
