"""Report generation for benchmark results."""

import csv
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from .metrics import summarize_records
from .results import FINE_TIMING_FIELDS, RESULT_FIELDS

# Phases stacked in the timing breakdown chart
BREAKDOWN_FIELDS = [
    "cutoff_time",
    "sampling_time",
    "encoding_time",
    "shard_time",
    "initialization_time",
    "rowstore_time",
    "order1_time",
    "order2_time",
    "order3_time",
]


def get_output_path(
    test_name: str,
    output_dir: str = "results",
    add_timestamp: bool = False,
    now: Optional[datetime] = None,
) -> Path:
    """
    Return the results file path for a test.

    Args:
        test_name: Name of the benchmark test
        output_dir: Directory holding result files
        add_timestamp: Append the generation time to the file name
        now: Timestamp to use (default: current time)

    Returns:
        Path of the CSV file
    """
    name = test_name
    if add_timestamp:
        stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
        name = f"{test_name}_{stamp}"
    return Path(output_dir) / f"{name}.csv"


def write_results_csv(
    results: List[Dict[str, str]],
    test_name: str,
    output_dir: str = "results",
    add_timestamp: bool = False,
) -> Path:
    """
    Save all result records to CSV.

    Columns follow RESULT_FIELDS; keys outside that set are appended
    in sorted order.

    Args:
        results: Result records in sweep order
        test_name: Name of the benchmark test (used as file name)
        output_dir: Directory for the output file
        add_timestamp: Append the generation time to the file name

    Returns:
        Path of the written file
    """
    path = get_output_path(test_name, output_dir, add_timestamp)
    path.parent.mkdir(parents=True, exist_ok=True)

    extra = sorted({k for r in results for k in r} - set(RESULT_FIELDS))
    fieldnames = RESULT_FIELDS + extra

    with open(path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames, restval="")
        writer.writeheader()
        for record in results:
            writer.writerow(record)

    print(f"Saved {len(results)} results to {path}")
    return path


def print_console_report(results: List[Dict[str, str]]) -> None:
    """
    Print per-configuration timing statistics in a formatted table.

    Args:
        results: Result records in sweep order
    """
    if not results:
        print("No results to report")
        return

    classification = summarize_records(results, "classification_time")
    summarization = summarize_records(results, "summarization_time")

    print("\n" + "=" * 90)
    print("SAMPLING BENCHMARK RESULTS")
    print(f"Dataset:        {results[0]['dataset']}")
    print(f"Records:        {len(results)}")

    print("-" * 90)
    print(
        f"{'Rate':>10} {'Outlier frac':>13} {'Trials':>7} "
        f"{'Class mean':>11} {'Class p95':>10} "
        f"{'Summ mean':>11} {'Summ p95':>10}"
    )
    print("-" * 90)

    for c, s in zip(classification, summarization):
        print(
            f"{c['sample_rate']:>10} {c['outlier_sample_fraction']:>13} "
            f"{c['trials']:>7} {c['mean']:>11.1f} {c['p95']:>10.1f} "
            f"{s['mean']:>11.1f} {s['p95']:>10.1f}"
        )

    print("=" * 90)


def load_results_csv(path: str) -> pd.DataFrame:
    """Read a results CSV written by write_results_csv."""
    df = pd.read_csv(path)
    required = ["sample_rate", "outlier_sample_fraction"] + FINE_TIMING_FIELDS
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"Not a results file, missing columns: {', '.join(missing)}")
    return df


def plot_timing_breakdown(
    results: pd.DataFrame,
    output_path: str,
    title: str = "Phase timings by sample rate",
) -> None:
    """
    Create a stacked bar chart of mean phase timings per sample rate.

    Args:
        results: Results table as returned by load_results_csv
        output_path: Path to save the plot
        title: Plot title
    """
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    means = results.groupby("sample_rate")[BREAKDOWN_FIELDS].mean().sort_index()
    labels = [f"{rate:g}" for rate in means.index]

    fig, ax = plt.subplots(figsize=(10, 6))

    bottom = [0.0] * len(means)
    for field in BREAKDOWN_FIELDS:
        heights = means[field].tolist()
        ax.bar(labels, heights, bottom=bottom, label=field.replace("_time", ""))
        bottom = [b + h for b, h in zip(bottom, heights)]

    ax.set_xlabel("Sample rate", fontsize=12)
    ax.set_ylabel("Mean time (ms)", fontsize=12)
    ax.set_title(title, fontsize=14)
    ax.grid(True, axis="y", alpha=0.3)
    ax.legend(fontsize=8)

    plt.tight_layout()
    plt.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)

    print(f"Saved plot to {path}")


def print_phase_summary(results: pd.DataFrame) -> None:
    """Print mean fine-grained phase timings per sample rate."""
    means = results.groupby("sample_rate")[FINE_TIMING_FIELDS].mean().sort_index()
    print("\nPHASE TIMINGS (mean ms)")
    print("-" * 90)
    print(means.to_string(float_format=lambda v: f"{v:.3f}"))
    print("-" * 90)
