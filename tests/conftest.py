"""Pytest fixtures for sampling benchmark tests."""

import json
import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
import pytest

from samplingbench.config import BenchmarkConfig
from samplingbench.pipeline.base import (
    BaseClassifier,
    BasePipelineFactory,
    BaseSummarizer,
    ClassifierRunResult,
    Explanation,
    SummarizerRunResult,
)

NUM_ROWS = 2000


def make_dataset(num_rows: int = NUM_ROWS) -> pd.DataFrame:
    """
    Deterministic dataset with one planted anomaly.

    Rows with location=L3 and version=V1 (one in every 40) carry metric
    values far above every other row.
    """
    location = [f"L{i % 10}" for i in range(num_rows)]
    version = [f"V{(i // 10) % 4}" for i in range(num_rows)]
    device = [f"D{(i // 40) % 5}" for i in range(num_rows)]
    latency = []
    for i in range(num_rows):
        if i % 10 == 3 and (i // 10) % 4 == 1:
            latency.append(1000.0 + i)
        else:
            latency.append(((i * 7919) % 1000) / 10.0)
    return pd.DataFrame({
        "location": location,
        "version": version,
        "device": device,
        "latency": latency,
    })


def config_dict(**overrides: Any) -> Dict[str, Any]:
    """Config mapping in the camelCase file format."""
    conf: Dict[str, Any] = {
        "testName": "unit",
        "fileName": "data/unit.csv",
        "metric": "latency",
        "includeLo": False,
        "attributes": ["location", "version", "device"],
        "sampleRates": [1.0],
        "outlierSampleFractions": [-1.0],
        "numTrials": 1,
    }
    conf.update(overrides)
    return conf


def make_config(**overrides: Any) -> BenchmarkConfig:
    return BenchmarkConfig.from_dict(config_dict(**overrides))


class ManualClock:
    """Clock that only moves when advanced."""

    def __init__(self) -> None:
        self.now = 0.0

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


class FakeClassifier(BaseClassifier):
    def __init__(self, factory: "FakeFactory", sample_rate: float, fraction: float):
        self.factory = factory
        self.sample_rate = sample_rate
        self.fraction = fraction

    @property
    def output_column_name(self) -> str:
        return "_OUTLIER"

    def process(self, df: pd.DataFrame) -> ClassifierRunResult:
        if self.factory.fail_on == (self.sample_rate, self.fraction):
            raise RuntimeError("classifier failed")
        if self.factory.clock is not None:
            self.factory.clock.advance(self.factory.classify_seconds)
        labeled = df.copy()
        labeled["_OUTLIER"] = False
        return ClassifierRunResult(
            labeled=labeled,
            output_column="_OUTLIER",
            cutoff_time=1.25,
            classification_time=2.5,
            inlier_weight=1.0 / self.sample_rate,
            outlier_sample_rate=1.0,
            num_outliers=7,
        )


class FakeSummarizer(BaseSummarizer):
    def __init__(self, factory: "FakeFactory", calc_errors: bool):
        self.factory = factory
        self.calc_errors = calc_errors

    def process(self, df: pd.DataFrame) -> SummarizerRunResult:
        if self.factory.clock is not None:
            self.factory.clock.advance(self.factory.summarize_seconds)
        return SummarizerRunResult(
            explanation=Explanation(attributes=[], num_outliers=0, num_inliers=0),
            encoding_time=0.5,
            explanation_time=3.0,
            shard_time=0.1,
            initialization_time=0.2,
            rowstore_time=0.3,
            explain_times=(1.0, 2.0, 4.0),
            calc_errors=self.calc_errors,
        )


class FakeFactory(BasePipelineFactory):
    """Records every pipeline it builds."""

    def __init__(self, clock: Optional[ManualClock] = None, classify_seconds: float = 0.0,
                 summarize_seconds: float = 0.0,
                 fail_on: Optional[Tuple[float, float]] = None):
        self.clock = clock
        self.classify_seconds = classify_seconds
        self.summarize_seconds = summarize_seconds
        self.fail_on = fail_on
        self.classifier_calls: List[Tuple[float, float]] = []
        self.summarizer_calls: List[float] = []

    def get_classifier(self, sample_rate: float, outlier_sample_fraction: float):
        self.classifier_calls.append((sample_rate, outlier_sample_fraction))
        return FakeClassifier(self, sample_rate, outlier_sample_fraction)

    def get_summarizer(self, classifier_result: ClassifierRunResult, sample_rate: float):
        self.summarizer_calls.append(sample_rate)
        return FakeSummarizer(self, sample_rate < 1.0)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def dataset() -> pd.DataFrame:
    return make_dataset()


@pytest.fixture
def dataset_csv(temp_dir: Path, dataset: pd.DataFrame) -> Path:
    path = temp_dir / "unit.csv"
    dataset.to_csv(path, index=False)
    return path


@pytest.fixture
def config_file(temp_dir: Path, dataset_csv: Path) -> Path:
    """Degenerate single-point config pointing at the dataset CSV."""
    path = temp_dir / "unit.json"
    path.write_text(json.dumps(config_dict(fileName=str(dataset_csv))))
    return path
