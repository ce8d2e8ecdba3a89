"""Configuration loading utilities for the sampling benchmark."""

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import yaml

from .errors import ConfigError

# Outlier sample fraction that turns off outlier sub-sampling
OUTLIER_SAMPLING_DISABLED = -1.0

REQUIRED_KEYS = [
    "testName",
    "fileName",
    "metric",
    "attributes",
    "sampleRates",
    "outlierSampleFractions",
    "numTrials",
]


def load_yaml_config(path: str) -> Dict[str, Any]:
    """
    Load a YAML (or JSON) configuration file.

    JSON documents are valid YAML, so JSON benchmark configs
    load through the same path.

    Args:
        path: Path to the configuration file

    Returns:
        Dictionary containing the parsed configuration

    Raises:
        FileNotFoundError: If the config file does not exist
        ConfigError: If the file is malformed or is not a mapping
    """
    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Malformed config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at top level")
    return data


def _as_bool(conf: Dict[str, Any], key: str, default: bool) -> bool:
    value = conf.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' must be true or false, got {value!r}")
    return value


def _as_float(conf: Dict[str, Any], key: str, default: Any = None) -> float:
    value = conf.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"'{key}' must be a number, got {value!r}")
    return float(value)


def _as_float_list(conf: Dict[str, Any], key: str) -> Tuple[float, ...]:
    values = conf[key]
    if not isinstance(values, list) or not values:
        raise ConfigError(f"'{key}' must be a non-empty list of numbers")
    result = []
    for v in values:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ConfigError(f"'{key}' contains a non-numeric value: {v!r}")
        result.append(float(v))
    return tuple(result)


@dataclass(frozen=True)
class BenchmarkConfig:
    """Immutable, validated benchmark parameters."""

    test_name: str
    file_name: str
    metric: str
    attributes: Tuple[str, ...]
    sample_rates: Tuple[float, ...]
    outlier_sample_fractions: Tuple[float, ...]
    num_trials: int
    cutoff: float = 1.0  # percent of rows in each tail
    include_hi: bool = True
    include_lo: bool = True
    ratio_metric: str = "globalRatio"
    min_ratio_metric: float = 3.0
    min_support: float = 0.01
    verbose: bool = False
    calc_error: bool = False  # accepted only; errors follow sample_rate < 1.0
    append_timestamp: bool = False

    def __post_init__(self):
        if not self.sample_rates:
            raise ConfigError("sampleRates must not be empty")
        for rate in self.sample_rates:
            if not 0.0 < rate <= 1.0:
                raise ConfigError(f"Sample rate must be in (0, 1], got {rate}")

        if not self.outlier_sample_fractions:
            raise ConfigError("outlierSampleFractions must not be empty")
        for fraction in self.outlier_sample_fractions:
            if fraction != OUTLIER_SAMPLING_DISABLED and not 0.0 < fraction <= 1.0:
                raise ConfigError(
                    f"Outlier sample fraction must be in (0, 1] or "
                    f"{OUTLIER_SAMPLING_DISABLED}, got {fraction}"
                )

        if self.num_trials < 1:
            raise ConfigError(f"numTrials must be at least 1, got {self.num_trials}")
        if not self.attributes:
            raise ConfigError("attributes must not be empty")
        if not 0.0 < self.cutoff <= 100.0:
            raise ConfigError(f"cutoff must be in (0, 100], got {self.cutoff}")
        if not 0.0 <= self.min_support <= 1.0:
            raise ConfigError(f"minSupport must be in [0, 1], got {self.min_support}")
        if self.min_ratio_metric < 1.0:
            raise ConfigError(
                f"minRatioMetric must be at least 1, got {self.min_ratio_metric}"
            )

    @property
    def dataset_name(self) -> str:
        """Identifier written to the ``dataset`` column of every record."""
        return self.file_name

    @classmethod
    def from_dict(cls, conf: Dict[str, Any]) -> "BenchmarkConfig":
        """
        Build a config from the parsed configuration mapping.

        Keys use the camelCase names of the benchmark config files.

        Raises:
            ConfigError: If a required key is missing or a value is malformed
        """
        missing = [key for key in REQUIRED_KEYS if key not in conf]
        if missing:
            raise ConfigError(f"Missing required config keys: {', '.join(missing)}")

        attributes: List[Any] = conf["attributes"]
        if not isinstance(attributes, list) or not all(
            isinstance(a, str) for a in attributes
        ):
            raise ConfigError("'attributes' must be a list of column names")

        num_trials = conf["numTrials"]
        if isinstance(num_trials, bool) or not isinstance(num_trials, int):
            raise ConfigError(f"'numTrials' must be an integer, got {num_trials!r}")

        for key in ("testName", "fileName", "metric"):
            if not isinstance(conf[key], str) or not conf[key]:
                raise ConfigError(f"'{key}' must be a non-empty string")

        ratio_metric = conf.get("ratioMetric", "globalRatio")
        if not isinstance(ratio_metric, str):
            raise ConfigError(f"'ratioMetric' must be a string, got {ratio_metric!r}")

        return cls(
            test_name=conf["testName"],
            file_name=conf["fileName"],
            metric=conf["metric"],
            attributes=tuple(attributes),
            sample_rates=_as_float_list(conf, "sampleRates"),
            outlier_sample_fractions=_as_float_list(conf, "outlierSampleFractions"),
            num_trials=num_trials,
            cutoff=_as_float(conf, "cutoff", 1.0),
            include_hi=_as_bool(conf, "includeHi", True),
            include_lo=_as_bool(conf, "includeLo", True),
            ratio_metric=ratio_metric,
            min_ratio_metric=_as_float(conf, "minRatioMetric", 3.0),
            min_support=_as_float(conf, "minSupport", 0.01),
            verbose=_as_bool(conf, "verbose", False),
            calc_error=_as_bool(conf, "calcError", False),
            append_timestamp=_as_bool(conf, "appendTimeStamp", False),
        )

    @classmethod
    def from_file(cls, path: str) -> "BenchmarkConfig":
        """Load and validate a benchmark config file."""
        return cls.from_dict(load_yaml_config(path))
