# Pipeline collaborators package
from .apriori import APLOutlierSummarizer
from .base import (
    BaseClassifier,
    BasePipelineFactory,
    BaseSummarizer,
    ClassifierRunResult,
    Explanation,
    ExplanationItem,
    SummarizerRunResult,
)
from .factory import PipelineFactory
from .percentile import PercentileClassifier

__all__ = [
    'APLOutlierSummarizer',
    'BaseClassifier',
    'BasePipelineFactory',
    'BaseSummarizer',
    'ClassifierRunResult',
    'Explanation',
    'ExplanationItem',
    'PercentileClassifier',
    'PipelineFactory',
    'SummarizerRunResult',
]
