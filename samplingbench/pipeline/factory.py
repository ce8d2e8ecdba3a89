"""Builds fresh classifier/summarizer pairs for each benchmark iteration."""

import os
from typing import Optional

from ..config import BenchmarkConfig
from .apriori import APLOutlierSummarizer
from .base import (
    BaseClassifier,
    BasePipelineFactory,
    BaseSummarizer,
    ClassifierRunResult,
)
from .percentile import PercentileClassifier


class PipelineFactory(BasePipelineFactory):
    """Creates pipeline stages configured from a BenchmarkConfig."""

    def __init__(self, config: BenchmarkConfig, num_threads: Optional[int] = None):
        """
        Initialize the factory.

        Args:
            config: Benchmark configuration supplying the fixed settings
            num_threads: Summarizer worker count (default: all host CPUs)
        """
        self.config = config
        self.num_threads = num_threads if num_threads is not None else (os.cpu_count() or 1)

    def get_classifier(
        self, sample_rate: float, outlier_sample_fraction: float
    ) -> BaseClassifier:
        """Return a new classifier for one sweep point."""
        return PercentileClassifier(
            metric=self.config.metric,
            percentile=self.config.cutoff,
            include_high=self.config.include_hi,
            include_low=self.config.include_lo,
            sample_rate=sample_rate,
            outlier_sample_fraction=outlier_sample_fraction,
        )

    def get_summarizer(
        self, classifier_result: ClassifierRunResult, sample_rate: float
    ) -> BaseSummarizer:
        """
        Return a new summarizer wired to a classifier's output.

        Error estimates are only calculated for sampled runs; at the full
        rate there is no sampling error to quantify.
        """
        return APLOutlierSummarizer(
            outlier_column=classifier_result.output_column,
            attributes=self.config.attributes,
            min_support=self.config.min_support,
            min_ratio_metric=self.config.min_ratio_metric,
            ratio_metric=self.config.ratio_metric,
            num_threads=self.num_threads,
            inlier_weight=classifier_result.inlier_weight,
            outlier_sample_rate=classifier_result.outlier_sample_rate,
            full_num_outliers=classifier_result.num_outliers,
            calc_errors=sample_rate < 1.0,
        )
