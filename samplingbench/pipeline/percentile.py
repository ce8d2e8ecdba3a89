"""Percentile-based outlier classifier."""

import logging
import time
from typing import Optional

import numpy as np
import pandas as pd

from ..config import OUTLIER_SAMPLING_DISABLED
from ..errors import PipelineError
from .base import BaseClassifier, ClassifierRunResult

logger = logging.getLogger(__name__)


class PercentileClassifier(BaseClassifier):
    """
    Labels rows in the top and/or bottom percentile of a metric as outliers.

    With a sample rate below 1.0 the cutoffs are estimated from a uniform
    row sample and inliers are sub-sampled at that rate; the returned
    inlier weight scales their counts back up. A positive outlier sample
    fraction sub-samples the outliers the same way.
    """

    def __init__(
        self,
        metric: str,
        percentile: float = 1.0,
        include_high: bool = True,
        include_low: bool = True,
        sample_rate: float = 1.0,
        outlier_sample_fraction: float = OUTLIER_SAMPLING_DISABLED,
        output_column: str = "_OUTLIER",
        seed: Optional[int] = None,
    ):
        """
        Initialize the classifier.

        Args:
            metric: Numeric column to classify on
            percentile: Percent of rows (0-100] in each flagged tail
            include_high: Flag rows at or above the high cutoff
            include_low: Flag rows at or below the low cutoff
            sample_rate: Fraction of rows used (1.0 = all rows)
            outlier_sample_fraction: Fraction of outliers kept, or the
                disabled sentinel to keep all of them
            output_column: Name of the boolean column added to the output
            seed: Optional random seed for the row samples
        """
        self.metric = metric
        self.percentile = percentile
        self.include_high = include_high
        self.include_low = include_low
        self.sample_rate = sample_rate
        self.outlier_sample_fraction = outlier_sample_fraction
        self._output_column = output_column
        self._rng = np.random.default_rng(seed)

    @property
    def output_column_name(self) -> str:
        return self._output_column

    @property
    def samples_outliers(self) -> bool:
        """True when the outlier sample fraction is not the disabled sentinel."""
        return self.outlier_sample_fraction != OUTLIER_SAMPLING_DISABLED

    def _validate(self, df: pd.DataFrame) -> None:
        if self.metric not in df.columns:
            raise PipelineError(f"Metric column '{self.metric}' not found in input")
        if not 0.0 < self.percentile <= 100.0:
            raise PipelineError(f"Percentile must be in (0, 100], got {self.percentile}")
        if not 0.0 < self.sample_rate <= 1.0:
            raise PipelineError(f"Sample rate must be in (0, 1], got {self.sample_rate}")
        if self.samples_outliers and not 0.0 < self.outlier_sample_fraction <= 1.0:
            raise PipelineError(
                f"Outlier sample fraction must be in (0, 1], "
                f"got {self.outlier_sample_fraction}"
            )
        if len(df) == 0:
            raise PipelineError("Cannot classify an empty dataset")

    def _sample(self, indices: np.ndarray, rate: float) -> np.ndarray:
        """Return a sorted uniform sample of ``indices`` at ``rate``."""
        if rate >= 1.0 or len(indices) == 0:
            return indices
        size = max(1, int(round(len(indices) * rate)))
        return np.sort(self._rng.choice(indices, size=size, replace=False))

    def process(self, df: pd.DataFrame) -> ClassifierRunResult:
        self._validate(df)
        values = df[self.metric].to_numpy(dtype=np.float64)
        num_rows = len(values)

        # Cutoff computation
        start_time = time.perf_counter()
        sample_idx = self._sample(np.arange(num_rows), self.sample_rate)
        sampled_values = values[sample_idx]
        low_cutoff = np.nanpercentile(sampled_values, self.percentile)
        high_cutoff = np.nanpercentile(sampled_values, 100.0 - self.percentile)
        cutoff_time = (time.perf_counter() - start_time) * 1000

        # Labeling and sub-sampling
        start_time = time.perf_counter()
        is_outlier = np.zeros(num_rows, dtype=bool)
        if self.include_high:
            is_outlier |= values >= high_cutoff
        if self.include_low:
            is_outlier |= values <= low_cutoff
        num_outliers = int(is_outlier.sum())

        outlier_idx = np.flatnonzero(is_outlier)
        inlier_idx = np.flatnonzero(~is_outlier)

        kept_inliers = self._sample(inlier_idx, self.sample_rate)
        inlier_weight = 1.0 / self.sample_rate

        if self.samples_outliers:
            kept_outliers = self._sample(outlier_idx, self.outlier_sample_fraction)
            outlier_sample_rate = self.outlier_sample_fraction
        else:
            kept_outliers = outlier_idx
            outlier_sample_rate = 1.0

        keep = np.sort(np.concatenate([kept_outliers, kept_inliers]))
        labeled = df.iloc[keep].reset_index(drop=True)
        labeled[self._output_column] = is_outlier[keep]
        classification_time = (time.perf_counter() - start_time) * 1000

        logger.debug(
            "Cutoffs low=%f high=%f: %d outliers of %d rows, kept %d rows",
            low_cutoff, high_cutoff, num_outliers, num_rows, len(keep),
        )

        return ClassifierRunResult(
            labeled=labeled,
            output_column=self._output_column,
            cutoff_time=cutoff_time,
            classification_time=classification_time,
            inlier_weight=inlier_weight,
            outlier_sample_rate=outlier_sample_rate,
            num_outliers=num_outliers,
        )
