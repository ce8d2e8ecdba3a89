"""Abstract base classes for the classification and summarization stages."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import pandas as pd


@dataclass
class ClassifierRunResult:
    """Labeled data and internal metrics from one classification run."""

    labeled: pd.DataFrame
    output_column: str
    cutoff_time: float  # ms
    classification_time: float  # ms
    inlier_weight: float = 1.0
    outlier_sample_rate: float = 1.0
    num_outliers: int = 0


@dataclass
class ExplanationItem:
    """An attribute-value combination associated with outliers."""

    values: Dict[str, str]
    support: float
    ratio: float
    num_outliers: float
    num_total: float
    error: float = 0.0

    def get_description(self) -> str:
        """Return a human-readable description of the combination."""
        return ", ".join(f"{k}={v}" for k, v in self.values.items())


@dataclass
class Explanation:
    """All combinations reported by a summarizer run."""

    attributes: List[str]
    num_outliers: float
    num_inliers: float
    items: List[ExplanationItem] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)


@dataclass
class SummarizerRunResult:
    """Explanation and internal metrics from one summarization run."""

    explanation: Explanation
    encoding_time: float  # ms
    explanation_time: float  # ms
    shard_time: float = 0.0
    initialization_time: float = 0.0
    rowstore_time: float = 0.0
    explain_times: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    calc_errors: bool = False


class BaseClassifier(ABC):
    """
    Abstract base class for outlier classifiers.

    A classifier instance is built for a single run; it labels each row of
    the input as outlier or inlier and reports its own phase timings.
    """

    @property
    @abstractmethod
    def output_column_name(self) -> str:
        """Return the name of the boolean outlier column it adds."""
        pass

    @abstractmethod
    def process(self, df: pd.DataFrame) -> ClassifierRunResult:
        """
        Label the rows of a dataset.

        Args:
            df: Input dataset (not modified)

        Returns:
            ClassifierRunResult with the labeled rows and timings
        """
        pass


class BaseSummarizer(ABC):
    """
    Abstract base class for outlier summarizers.

    A summarizer instance is built for a single run; it searches labeled
    data for attribute combinations that explain the outliers.
    """

    @abstractmethod
    def process(self, df: pd.DataFrame) -> SummarizerRunResult:
        """
        Explain the outliers in a labeled dataset.

        Args:
            df: Labeled dataset produced by a classifier

        Returns:
            SummarizerRunResult with the explanation and timings
        """
        pass


class BasePipelineFactory(ABC):
    """
    Abstract base class for pipeline factories.

    The benchmark runner asks a factory for a new classifier and summarizer
    on every iteration, so no stage state carries over between runs.
    """

    @abstractmethod
    def get_classifier(
        self, sample_rate: float, outlier_sample_fraction: float
    ) -> BaseClassifier:
        """Return a new classifier for one sweep point."""
        pass

    @abstractmethod
    def get_summarizer(
        self, classifier_result: ClassifierRunResult, sample_rate: float
    ) -> BaseSummarizer:
        """Return a new summarizer wired to a classifier's output."""
        pass
