"""Apriori-style outlier summarizer over attribute combinations."""

import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor
from itertools import combinations
from typing import Dict, List, Optional, Sequence, Set, Tuple

import numpy as np
import pandas as pd

from ..errors import PipelineError
from .base import BaseSummarizer, Explanation, ExplanationItem, SummarizerRunResult

logger = logging.getLogger(__name__)

# Highest number of attributes combined in one explanation
MAX_ORDER = 3

# A combination is a tuple of (attribute index, value code) pairs,
# sorted by attribute index
Combination = Tuple[Tuple[int, int], ...]
Counts = Dict[Combination, List[float]]
# Attribute indices mapped to the value-code tuples to count for them
Candidates = Dict[Tuple[int, ...], Set[Tuple[int, ...]]]


def global_ratio(o: float, i: float, total_o: float, total_i: float) -> float:
    """Outlier rate of the combination relative to the global outlier rate."""
    if o + i == 0 or total_o == 0:
        return 0.0
    return (o / (o + i)) / (total_o / (total_o + total_i))


def risk_ratio(o: float, i: float, total_o: float, total_i: float) -> float:
    """Outlier rate inside the combination relative to the rate outside it."""
    if o + i == 0:
        return 0.0
    rest_o = total_o - o
    rest_total = rest_o + (total_i - i)
    if rest_total <= 0 or rest_o <= 0:
        return math.inf if o > 0 else 0.0
    return (o / (o + i)) / (rest_o / rest_total)


RATIO_METRICS = {
    "globalRatio": global_ratio,
    "riskRatio": risk_ratio,
}


def apriori_candidates(supported: Set[Combination]) -> Candidates:
    """
    Build the next-order candidates from the supported combinations.

    Two supported combinations sharing all but their last pair are joined
    when their last pairs name different attributes. A joined combination
    is kept only if every one of its sub-combinations one order down is
    itself supported.

    Args:
        supported: Combinations of one order that may be extended

    Returns:
        Candidate value tuples grouped by attribute indices
    """
    candidates: Candidates = {}
    ordered = sorted(supported)
    for idx, first in enumerate(ordered):
        for second in ordered[idx + 1:]:
            if first[:-1] != second[:-1]:
                break
            if first[-1][0] == second[-1][0]:
                continue
            combo = first + (second[-1],)
            if not all(sub in supported for sub in combinations(combo, len(first))):
                continue
            attrs = tuple(a for a, _ in combo)
            candidates.setdefault(attrs, set()).add(tuple(v for _, v in combo))
    return candidates


def _count_shard(
    codes: np.ndarray,
    outlier_w: np.ndarray,
    inlier_w: np.ndarray,
    attribute_sets: Sequence[Tuple[int, ...]],
    candidates: Optional[Candidates] = None,
) -> Counts:
    """
    Weighted outlier/inlier counts for value combinations in a shard.

    Without candidates every value combination of each attribute set is
    counted; with candidates only the listed value tuples are.
    """
    counts: Counts = {}
    if len(codes) == 0:
        return counts
    for cols in attribute_sets:
        block = codes[:, list(cols)]
        o_w, i_w = outlier_w, inlier_w
        wanted = None
        if candidates is not None:
            wanted = candidates[cols]
            allowed = np.array(sorted(wanted), dtype=np.int64)
            mask = np.ones(len(block), dtype=bool)
            for j in range(len(cols)):
                mask &= np.isin(block[:, j], allowed[:, j])
            block, o_w, i_w = block[mask], o_w[mask], i_w[mask]
            if len(block) == 0:
                continue
        uniques, inverse = np.unique(block, axis=0, return_inverse=True)
        inverse = inverse.reshape(-1)
        o_counts = np.bincount(inverse, weights=o_w, minlength=len(uniques))
        i_counts = np.bincount(inverse, weights=i_w, minlength=len(uniques))
        for row, o, i in zip(uniques, o_counts, i_counts):
            values = tuple(int(v) for v in row)
            if wanted is not None and values not in wanted:
                continue
            counts[tuple(zip(cols, values))] = [float(o), float(i)]
    return counts


def _merge_counts(shard_counts: Sequence[Counts]) -> Counts:
    merged: Counts = {}
    for counts in shard_counts:
        for combo, (o, i) in counts.items():
            total = merged.setdefault(combo, [0.0, 0.0])
            total[0] += o
            total[1] += i
    return merged


class APLOutlierSummarizer(BaseSummarizer):
    """
    Finds attribute-value combinations over-represented among outliers.

    Combinations of one, two and three attributes are searched in order.
    A combination is reported when its outlier support and its ratio metric
    both pass their thresholds; reported combinations are not extended, and
    higher-order candidates are only built, and counted, when every
    lower-order sub-combination had enough support.
    """

    def __init__(
        self,
        outlier_column: str,
        attributes: Sequence[str],
        min_support: float = 0.01,
        min_ratio_metric: float = 3.0,
        ratio_metric: str = "globalRatio",
        num_threads: int = 1,
        inlier_weight: float = 1.0,
        outlier_sample_rate: float = 1.0,
        full_num_outliers: Optional[int] = None,
        calc_errors: bool = False,
    ):
        self.outlier_column = outlier_column
        self.attributes = list(attributes)
        self.min_support = min_support
        self.min_ratio_metric = min_ratio_metric
        self.ratio_metric = ratio_metric
        self.num_threads = max(1, num_threads)
        self.inlier_weight = inlier_weight
        self.outlier_sample_rate = outlier_sample_rate
        self.full_num_outliers = full_num_outliers
        self.calc_errors = calc_errors

    def _validate(self, df: pd.DataFrame) -> None:
        if self.ratio_metric not in RATIO_METRICS:
            raise PipelineError(
                f"Unknown ratio metric: {self.ratio_metric}. "
                f"Supported: {', '.join(RATIO_METRICS)}"
            )
        if self.outlier_column not in df.columns:
            raise PipelineError(f"Outlier column '{self.outlier_column}' not found in input")
        missing = [a for a in self.attributes if a not in df.columns]
        if missing:
            raise PipelineError(f"Attribute columns not found in input: {', '.join(missing)}")
        if self.outlier_sample_rate <= 0 or self.inlier_weight <= 0:
            raise PipelineError("Inlier weight and outlier sample rate must be positive")

    def process(self, df: pd.DataFrame) -> SummarizerRunResult:
        self._validate(df)
        ratio_fn = RATIO_METRICS[self.ratio_metric]

        # Encoding
        start_time = time.perf_counter()
        encoded = []
        decoders = []
        for attr in self.attributes:
            codes, uniques = pd.factorize(df[attr], use_na_sentinel=False)
            encoded.append(codes.astype(np.int64))
            decoders.append(uniques)
        encoding_time = (time.perf_counter() - start_time) * 1000

        explanation_start = time.perf_counter()

        # Sharding
        start_time = time.perf_counter()
        num_rows = len(df)
        num_shards = max(1, min(self.num_threads, num_rows))
        shards = np.array_split(np.arange(num_rows), num_shards)
        shard_time = (time.perf_counter() - start_time) * 1000

        # Initialization
        start_time = time.perf_counter()
        is_outlier = df[self.outlier_column].to_numpy(dtype=bool)
        outlier_w = np.where(is_outlier, 1.0 / self.outlier_sample_rate, 0.0)
        inlier_w = np.where(is_outlier, 0.0, self.inlier_weight)
        num_sampled_outliers = int(is_outlier.sum())
        if self.full_num_outliers is not None:
            total_outliers = float(self.full_num_outliers)
        else:
            total_outliers = float(outlier_w.sum())
        total_inliers = float(inlier_w.sum())
        initialization_time = (time.perf_counter() - start_time) * 1000

        # Row store
        start_time = time.perf_counter()
        if encoded:
            codes = np.column_stack(encoded)
        else:
            codes = np.empty((num_rows, 0), dtype=np.int64)
        row_shards = [(codes[idx], outlier_w[idx], inlier_w[idx]) for idx in shards]
        rowstore_time = (time.perf_counter() - start_time) * 1000

        items: List[ExplanationItem] = []
        explain_times = [0.0] * MAX_ORDER
        supported: Set[Combination] = set()
        num_attributes = len(self.attributes)

        with ThreadPoolExecutor(max_workers=self.num_threads) as executor:
            for order in range(1, MAX_ORDER + 1):
                start_time = time.perf_counter()
                if order > num_attributes or total_outliers == 0:
                    explain_times[order - 1] = (time.perf_counter() - start_time) * 1000
                    continue

                candidates: Optional[Candidates] = None
                if order == 1:
                    attribute_sets = [(a,) for a in range(num_attributes)]
                else:
                    candidates = apriori_candidates(supported)
                    attribute_sets = sorted(candidates)

                counts: Counts = {}
                if attribute_sets:
                    futures = [
                        executor.submit(_count_shard, c, o, i, attribute_sets, candidates)
                        for c, o, i in row_shards
                    ]
                    counts = _merge_counts([f.result() for f in futures])

                next_supported: Set[Combination] = set()
                for combo in sorted(counts):
                    o, i = counts[combo]
                    support = o / total_outliers
                    if support < self.min_support:
                        continue
                    ratio = ratio_fn(o, i, total_outliers, total_inliers)
                    if ratio >= self.min_ratio_metric:
                        items.append(
                            ExplanationItem(
                                values={
                                    self.attributes[a]: str(decoders[a][v])
                                    for a, v in combo
                                },
                                support=support,
                                ratio=ratio,
                                num_outliers=o,
                                num_total=o + i,
                                error=self._support_error(support, num_sampled_outliers),
                            )
                        )
                    else:
                        next_supported.add(combo)
                supported = next_supported
                explain_times[order - 1] = (time.perf_counter() - start_time) * 1000
                logger.debug(
                    "Order %d: %d combinations counted, %d kept for expansion",
                    order, len(counts), len(supported),
                )

        explanation_time = (time.perf_counter() - explanation_start) * 1000

        explanation = Explanation(
            attributes=list(self.attributes),
            num_outliers=total_outliers,
            num_inliers=total_inliers,
            items=items,
        )
        return SummarizerRunResult(
            explanation=explanation,
            encoding_time=encoding_time,
            explanation_time=explanation_time,
            shard_time=shard_time,
            initialization_time=initialization_time,
            rowstore_time=rowstore_time,
            explain_times=tuple(explain_times),
            calc_errors=self.calc_errors,
        )

    def _support_error(self, support: float, num_sampled_outliers: int) -> float:
        """Binomial standard error of a support estimated from sampled outliers."""
        if not self.calc_errors or num_sampled_outliers == 0:
            return 0.0
        p = min(max(support, 0.0), 1.0)
        return math.sqrt(p * (1.0 - p) / num_sampled_outliers)
