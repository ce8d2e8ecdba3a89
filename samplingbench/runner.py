"""Benchmark runner for the sampling parameter sweep."""

import gc
import logging
import time
from typing import Callable, Dict, Iterator, List, Optional

import pandas as pd

from .config import OUTLIER_SAMPLING_DISABLED, BenchmarkConfig
from .data_loader import load_csv_dataset
from .pipeline.base import BasePipelineFactory
from .pipeline.factory import PipelineFactory
from .results import SweepPoint, build_result_record

logger = logging.getLogger(__name__)

# Wall-clock budget of the warm-up phase
WARMUP_SECONDS = 1.0


def iter_sweep_points(config: BenchmarkConfig) -> Iterator[SweepPoint]:
    """
    Yield sweep coordinates in measurement order.

    Outer loop over sample rates, middle over outlier sample fractions,
    inner over trial index, each in config order.
    """
    for sample_rate in config.sample_rates:
        for fraction in config.outlier_sample_fractions:
            for trial in range(config.num_trials):
                yield SweepPoint(sample_rate, fraction, trial)


class BenchmarkRunner:
    """Orchestrates the warm-up phase and the timed parameter sweep."""

    def __init__(
        self,
        config: BenchmarkConfig,
        dataset: pd.DataFrame,
        factory: Optional[BasePipelineFactory] = None,
        gc_hook: Optional[Callable[[], object]] = gc.collect,
        clock: Callable[[], float] = time.perf_counter,
    ):
        """
        Initialize the benchmark runner.

        Args:
            config: Benchmark configuration
            dataset: Loaded dataset, shared read-only by every iteration
            factory: Builds the classifier/summarizer pair per iteration
            gc_hook: Called before each iteration to reclaim memory
                (None to skip)
            clock: Monotonic clock in seconds used for wall timings
        """
        self.config = config
        self.dataset = dataset
        self.factory = factory if factory is not None else PipelineFactory(config)
        self.gc_hook = gc_hook
        self.clock = clock

    def _collect_garbage(self) -> None:
        if self.gc_hook is not None:
            self.gc_hook()

    def _elapsed_ms(self, start: float) -> int:
        return int((self.clock() - start) * 1000)

    def warm_start(self, budget_seconds: float = WARMUP_SECONDS) -> int:
        """
        Run the full pipeline repeatedly until the time budget is used up.

        Runs at the full sample rate with outlier sampling disabled and
        discards every result. The budget is checked before each
        iteration, so the loop overruns it by at most one iteration.

        Args:
            budget_seconds: Wall-clock budget for the warm-up loop

        Returns:
            Number of warm-up iterations performed
        """
        iterations = 0
        start = self.clock()
        while self.clock() - start < budget_seconds:
            self._collect_garbage()
            classifier = self.factory.get_classifier(1.0, OUTLIER_SAMPLING_DISABLED)
            classifier_result = classifier.process(self.dataset)
            summarizer = self.factory.get_summarizer(classifier_result, 1.0)
            summarizer.process(classifier_result.labeled)
            iterations += 1

        logger.debug("Warm-up ran %d iterations", iterations)
        return iterations

    def run_trial(self, point: SweepPoint) -> Dict[str, str]:
        """
        Run and time the pipeline for one sweep point.

        Args:
            point: Sweep coordinates

        Returns:
            Result record for the iteration
        """
        classifier = self.factory.get_classifier(
            point.sample_rate, point.outlier_sample_fraction
        )
        start_time = self.clock()
        classifier_result = classifier.process(self.dataset)
        classification_time = self._elapsed_ms(start_time)

        summarizer = self.factory.get_summarizer(classifier_result, point.sample_rate)
        start_time = self.clock()
        summarizer_result = summarizer.process(classifier_result.labeled)
        summarization_time = self._elapsed_ms(start_time)

        return build_result_record(
            point,
            self.config.dataset_name,
            classifier_result,
            summarizer_result,
            classification_time,
            summarization_time,
        )

    def run_sweep(self) -> List[Dict[str, str]]:
        """
        Run every sweep point in order and collect one record per point.

        Any failure aborts the whole sweep; partial results are discarded.

        Returns:
            Result records in sweep order
        """
        results: List[Dict[str, str]] = []
        for point in iter_sweep_points(self.config):
            self._collect_garbage()
            print(point.get_description())
            results.append(self.run_trial(point))
        return results


def run_benchmark(
    config: BenchmarkConfig,
    warmup_seconds: float = WARMUP_SECONDS,
    factory: Optional[BasePipelineFactory] = None,
    loader: Callable[..., pd.DataFrame] = load_csv_dataset,
) -> List[Dict[str, str]]:
    """
    Load the dataset, warm up, and run the full sweep.

    Args:
        config: Benchmark configuration
        warmup_seconds: Warm-up budget (0 skips the warm-up)
        factory: Optional pipeline factory override
        loader: Dataset loader taking (file name, metric, attributes)

    Returns:
        Result records in sweep order
    """
    start_time = time.perf_counter()
    dataset = loader(config.file_name, config.metric, list(config.attributes))
    elapsed = int((time.perf_counter() - start_time) * 1000)

    print(f"Loading time: {elapsed:d} ms")
    print(f"{len(dataset):d} rows")

    runner = BenchmarkRunner(config, dataset, factory=factory)
    runner.warm_start(warmup_seconds)
    return runner.run_sweep()
