"""Tests for the warm-up phase, the sweep loop and result records."""

from pathlib import Path

import pandas as pd
import pytest

from conftest import FakeFactory, ManualClock, make_config
from samplingbench.config import OUTLIER_SAMPLING_DISABLED
from samplingbench.errors import DataLoadError
from samplingbench.pipeline.base import (
    ClassifierRunResult,
    Explanation,
    ExplanationItem,
    SummarizerRunResult,
)
from samplingbench.results import RESULT_FIELDS, SweepPoint, build_result_record
from samplingbench.runner import BenchmarkRunner, iter_sweep_points, run_benchmark


def make_runner(config, dataset, factory=None, gc_calls=None, clock=None):
    hook = (lambda: gc_calls.append(1)) if gc_calls is not None else None
    kwargs = {"clock": clock} if clock is not None else {}
    return BenchmarkRunner(
        config, dataset, factory=factory or FakeFactory(), gc_hook=hook, **kwargs
    )


class TestSweepPoints:
    """Tests for sweep ordering."""

    def test_nested_order(self) -> None:
        config = make_config(
            sampleRates=[0.5, 1.0], outlierSampleFractions=[0.1, -1.0], numTrials=2
        )

        points = [
            (p.sample_rate, p.outlier_sample_fraction, p.trial)
            for p in iter_sweep_points(config)
        ]

        assert points == [
            (0.5, 0.1, 0), (0.5, 0.1, 1), (0.5, -1.0, 0), (0.5, -1.0, 1),
            (1.0, 0.1, 0), (1.0, 0.1, 1), (1.0, -1.0, 0), (1.0, -1.0, 1),
        ]

    def test_description(self) -> None:
        point = SweepPoint(0.5, OUTLIER_SAMPLING_DISABLED, 3)
        assert point.get_description() == (
            "Sample rate 0.500000, outlier sample fraction -1.000000, trial 3"
        )


class TestRunSweep:
    """Tests for BenchmarkRunner.run_sweep with fake collaborators."""

    def test_record_count(self, dataset: pd.DataFrame) -> None:
        config = make_config(
            sampleRates=[0.1, 0.5, 1.0], outlierSampleFractions=[0.1, 0.5], numTrials=3
        )
        results = make_runner(config, dataset).run_sweep()
        assert len(results) == 3 * 2 * 3

    def test_scenario_two_rates_two_trials(self, dataset: pd.DataFrame) -> None:
        config = make_config(sampleRates=[0.5, 1.0], outlierSampleFractions=[0.1], numTrials=2)

        results = make_runner(config, dataset).run_sweep()

        assert [(r["sample_rate"], r["trial"]) for r in results] == [
            ("0.500000", "0"), ("0.500000", "1"), ("1.000000", "0"), ("1.000000", "1"),
        ]
        assert {r["outlier_sample_fraction"] for r in results} == {"0.100000"}

    def test_coordinates_match_pipeline_inputs(self, dataset: pd.DataFrame) -> None:
        config = make_config(
            sampleRates=[0.2, 1.0], outlierSampleFractions=[0.3, -1.0], numTrials=2
        )
        factory = FakeFactory()

        results = make_runner(config, dataset, factory=factory).run_sweep()

        assert [
            (float(r["sample_rate"]), float(r["outlier_sample_fraction"])) for r in results
        ] == factory.classifier_calls
        assert factory.summarizer_calls == [c[0] for c in factory.classifier_calls]

    def test_degenerate_config(self, dataset: pd.DataFrame) -> None:
        config = make_config(sampleRates=[1.0], outlierSampleFractions=[-1.0], numTrials=1)

        results = make_runner(config, dataset).run_sweep()

        assert len(results) == 1
        assert results[0]["sample_rate"] == "1.000000"
        assert results[0]["outlier_sample_fraction"] == "-1.000000"
        assert results[0]["trial"] == "0"
        assert results[0]["dataset"] == "data/unit.csv"

    def test_deterministic_order(self, dataset: pd.DataFrame) -> None:
        config = make_config(sampleRates=[1.0, 0.5], outlierSampleFractions=[0.5, 0.1], numTrials=2)
        keys = ("sample_rate", "outlier_sample_fraction", "trial")

        first = [tuple(r[k] for k in keys) for r in make_runner(config, dataset).run_sweep()]
        second = [tuple(r[k] for k in keys) for r in make_runner(config, dataset).run_sweep()]

        assert first == second

    def test_gc_before_each_point(self, dataset: pd.DataFrame) -> None:
        config = make_config(sampleRates=[0.5, 1.0], numTrials=3)
        gc_calls = []

        make_runner(config, dataset, gc_calls=gc_calls).run_sweep()

        assert len(gc_calls) == 6

    def test_no_gc_hook(self, dataset: pd.DataFrame) -> None:
        runner = make_runner(make_config(), dataset)
        assert len(runner.run_sweep()) == 1

    def test_coarse_timings_from_clock(self, dataset: pd.DataFrame) -> None:
        clock = ManualClock()
        factory = FakeFactory(clock=clock, classify_seconds=0.25, summarize_seconds=1.5)

        results = make_runner(make_config(), dataset, factory=factory, clock=clock).run_sweep()

        assert results[0]["classification_time"] == "250"
        assert results[0]["summarization_time"] == "1500"
        assert results[0]["cutoff_time"] == "1.250000"

    def test_failure_aborts_sweep(self, dataset: pd.DataFrame) -> None:
        config = make_config(sampleRates=[0.5, 1.0], numTrials=2)
        factory = FakeFactory(fail_on=(1.0, -1.0))

        with pytest.raises(RuntimeError, match="classifier failed"):
            make_runner(config, dataset, factory=factory).run_sweep()

        assert factory.classifier_calls == [(0.5, -1.0), (0.5, -1.0), (1.0, -1.0)]

    def test_progress_lines(self, dataset: pd.DataFrame, capsys) -> None:
        config = make_config(sampleRates=[0.5], numTrials=2)

        make_runner(config, dataset).run_sweep()

        out = capsys.readouterr().out
        assert "Sample rate 0.500000, outlier sample fraction -1.000000, trial 0" in out
        assert "Sample rate 0.500000, outlier sample fraction -1.000000, trial 1" in out


class TestWarmStart:
    """Tests for BenchmarkRunner.warm_start."""

    def test_runs_until_budget(self, dataset: pd.DataFrame) -> None:
        clock = ManualClock()
        factory = FakeFactory(clock=clock, classify_seconds=0.3, summarize_seconds=0.1)
        gc_calls = []
        runner = make_runner(make_config(), dataset, factory=factory,
                             gc_calls=gc_calls, clock=clock)

        iterations = runner.warm_start(budget_seconds=1.0)

        assert iterations == 3
        assert len(gc_calls) == 3
        # Overruns the budget by at most one iteration
        assert 1.0 <= clock.now <= 1.0 + 0.4 + 1e-9

    def test_uses_full_rate_and_disabled_fraction(self, dataset: pd.DataFrame) -> None:
        clock = ManualClock()
        factory = FakeFactory(clock=clock, classify_seconds=0.5)
        runner = make_runner(make_config(), dataset, factory=factory, clock=clock)

        runner.warm_start(budget_seconds=1.0)

        assert factory.classifier_calls == [(1.0, OUTLIER_SAMPLING_DISABLED)] * 2
        assert factory.summarizer_calls == [1.0, 1.0]

    def test_zero_budget(self, dataset: pd.DataFrame) -> None:
        factory = FakeFactory()
        runner = make_runner(make_config(), dataset, factory=factory)

        assert runner.warm_start(budget_seconds=0.0) == 0
        assert factory.classifier_calls == []

    def test_failure_propagates(self, dataset: pd.DataFrame) -> None:
        factory = FakeFactory(fail_on=(1.0, OUTLIER_SAMPLING_DISABLED))
        runner = make_runner(make_config(), dataset, factory=factory)

        with pytest.raises(RuntimeError):
            runner.warm_start(budget_seconds=1.0)

    def test_wall_clock_budget(self, dataset: pd.DataFrame) -> None:
        runner = make_runner(make_config(), dataset)
        assert runner.warm_start(budget_seconds=0.05) >= 1


class TestRunBenchmark:
    """Tests for the load, warm-up and sweep sequence."""

    def test_load_failure_before_sweep(self, temp_dir: Path) -> None:
        config = make_config(fileName=str(temp_dir / "absent.csv"))
        factory = FakeFactory()

        with pytest.raises(DataLoadError):
            run_benchmark(config, warmup_seconds=0.0, factory=factory)

        assert factory.classifier_calls == []

    def test_real_pipeline(self, dataset_csv: Path, capsys) -> None:
        config = make_config(
            fileName=str(dataset_csv),
            sampleRates=[0.5, 1.0],
            outlierSampleFractions=[0.5, -1.0],
            numTrials=2,
        )

        results = run_benchmark(config, warmup_seconds=0.0)

        assert len(results) == 8
        for record in results:
            assert list(record) == RESULT_FIELDS
            expected = "true" if float(record["sample_rate"]) < 1.0 else "false"
            assert record["calc_errors"] == expected
            assert int(record["num_outliers"]) > 0
            assert int(record["num_explanations"]) > 0
        out = capsys.readouterr().out
        assert "Loading time:" in out
        assert "2000 rows" in out


class TestBuildResultRecord:
    """Tests for build_result_record."""

    def make_results(self):
        classifier_result = ClassifierRunResult(
            labeled=pd.DataFrame(),
            output_column="_OUTLIER",
            cutoff_time=0.123456789,
            classification_time=4.5,
            num_outliers=12,
        )
        explanation = Explanation(
            attributes=["location"],
            num_outliers=12,
            num_inliers=100,
            items=[ExplanationItem({"location": "L3"}, 1.0, 10.0, 12, 20)],
        )
        summarizer_result = SummarizerRunResult(
            explanation=explanation,
            encoding_time=1.0,
            explanation_time=2.0,
            shard_time=0.25,
            initialization_time=0.5,
            rowstore_time=0.75,
            explain_times=(0.1, 0.2, 0.3),
        )
        return classifier_result, summarizer_result

    def test_fields_and_formatting(self) -> None:
        classifier_result, summarizer_result = self.make_results()

        record = build_result_record(
            SweepPoint(0.25, 0.1, 2), "data.csv", classifier_result, summarizer_result, 17, 42
        )

        assert list(record) == RESULT_FIELDS
        assert record == {
            "dataset": "data.csv",
            "trial": "2",
            "sample_rate": "0.250000",
            "outlier_sample_fraction": "0.100000",
            "classification_time": "17",
            "summarization_time": "42",
            "cutoff_time": "0.123457",
            "sampling_time": "4.500000",
            "encoding_time": "1.000000",
            "explanation_time": "2.000000",
            "shard_time": "0.250000",
            "initialization_time": "0.500000",
            "rowstore_time": "0.750000",
            "order1_time": "0.100000",
            "order2_time": "0.200000",
            "order3_time": "0.300000",
            "calc_errors": "false",
            "num_outliers": "12",
            "num_explanations": "1",
        }

    def test_sentinel_fraction(self) -> None:
        classifier_result, summarizer_result = self.make_results()

        record = build_result_record(
            SweepPoint(1.0, OUTLIER_SAMPLING_DISABLED, 0), "d", classifier_result,
            summarizer_result, 0, 0,
        )

        assert record["sample_rate"] == "1.000000"
        assert record["outlier_sample_fraction"] == "-1.000000"
