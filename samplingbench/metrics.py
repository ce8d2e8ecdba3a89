"""Timing statistics over benchmark result records."""

from typing import Dict, List, Sequence, Tuple

import numpy as np


def calculate_timing_percentiles(timings_ms: Sequence[float]) -> dict:
    """
    Calculate timing percentiles from a list of measurements.

    Args:
        timings_ms: List of timing measurements in milliseconds

    Returns:
        Dictionary with P50, P95, P99 timings
    """
    if len(timings_ms) == 0:
        return {"p50": 0.0, "p95": 0.0, "p99": 0.0}

    arr = np.array(timings_ms, dtype=np.float64)
    return {
        "p50": float(np.percentile(arr, 50)),
        "p95": float(np.percentile(arr, 95)),
        "p99": float(np.percentile(arr, 99)),
    }


def calculate_mean(values: Sequence[float]) -> float:
    """Mean of the values, or 0.0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.array(values, dtype=np.float64)))


def summarize_records(
    records: List[Dict[str, str]],
    field: str,
) -> List[Dict[str, object]]:
    """
    Aggregate one timing field per (sample rate, outlier fraction) pair.

    Groups keep the order in which their first record appears, which is
    the sweep order.

    Args:
        records: Result records as produced by the runner
        field: Name of a numeric field to aggregate

    Returns:
        One dictionary per group with sample_rate, outlier_sample_fraction,
        trials, mean, p50, p95 and p99
    """
    groups: Dict[Tuple[str, str], List[float]] = {}
    for record in records:
        key = (record["sample_rate"], record["outlier_sample_fraction"])
        groups.setdefault(key, []).append(float(record[field]))

    summary = []
    for (sample_rate, fraction), values in groups.items():
        percentiles = calculate_timing_percentiles(values)
        summary.append({
            "sample_rate": sample_rate,
            "outlier_sample_fraction": fraction,
            "trials": len(values),
            "mean": calculate_mean(values),
            **percentiles,
        })
    return summary
