"""Data classes and record building for benchmark results."""

from dataclasses import dataclass
from typing import Dict, List

from .pipeline.base import ClassifierRunResult, SummarizerRunResult

# Column order of the results file
RESULT_FIELDS: List[str] = [
    "dataset",
    "trial",
    "sample_rate",
    "outlier_sample_fraction",
    "classification_time",
    "summarization_time",
    "cutoff_time",
    "sampling_time",
    "encoding_time",
    "explanation_time",
    "shard_time",
    "initialization_time",
    "rowstore_time",
    "order1_time",
    "order2_time",
    "order3_time",
    "calc_errors",
    "num_outliers",
    "num_explanations",
]

# Collaborator-reported timings, written as fractional milliseconds
FINE_TIMING_FIELDS = [
    "cutoff_time",
    "sampling_time",
    "encoding_time",
    "explanation_time",
    "shard_time",
    "initialization_time",
    "rowstore_time",
    "order1_time",
    "order2_time",
    "order3_time",
]


@dataclass(frozen=True)
class SweepPoint:
    """Coordinates of one measured iteration."""

    sample_rate: float
    outlier_sample_fraction: float
    trial: int

    def get_description(self) -> str:
        """Return the progress line printed when the point starts."""
        return (
            f"Sample rate {self.sample_rate:f}, "
            f"outlier sample fraction {self.outlier_sample_fraction:f}, "
            f"trial {self.trial:d}"
        )


def build_result_record(
    point: SweepPoint,
    dataset: str,
    classifier_result: ClassifierRunResult,
    summarizer_result: SummarizerRunResult,
    classification_time_ms: int,
    summarization_time_ms: int,
) -> Dict[str, str]:
    """
    Assemble the flat record for one sweep point.

    Every field is always present. Coarse timings measured by the runner
    are whole milliseconds; phase timings reported by the classifier and
    summarizer are fractional milliseconds.

    Args:
        point: Sweep coordinates of the iteration
        dataset: Dataset identifier from the config
        classifier_result: Output of the classification stage
        summarizer_result: Output of the summarization stage
        classification_time_ms: Wall time of the classification stage
        summarization_time_ms: Wall time of the summarization stage

    Returns:
        Mapping from field name to string value
    """
    order1, order2, order3 = summarizer_result.explain_times
    return {
        "dataset": dataset,
        "trial": f"{point.trial:d}",
        "sample_rate": f"{point.sample_rate:f}",
        "outlier_sample_fraction": f"{point.outlier_sample_fraction:f}",
        "classification_time": f"{classification_time_ms:d}",
        "summarization_time": f"{summarization_time_ms:d}",
        "cutoff_time": f"{classifier_result.cutoff_time:f}",
        "sampling_time": f"{classifier_result.classification_time:f}",
        "encoding_time": f"{summarizer_result.encoding_time:f}",
        "explanation_time": f"{summarizer_result.explanation_time:f}",
        "shard_time": f"{summarizer_result.shard_time:f}",
        "initialization_time": f"{summarizer_result.initialization_time:f}",
        "rowstore_time": f"{summarizer_result.rowstore_time:f}",
        "order1_time": f"{order1:f}",
        "order2_time": f"{order2:f}",
        "order3_time": f"{order3:f}",
        "calc_errors": "true" if summarizer_result.calc_errors else "false",
        "num_outliers": f"{classifier_result.num_outliers:d}",
        "num_explanations": f"{len(summarizer_result.explanation.items):d}",
    }
