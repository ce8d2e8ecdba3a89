"""Exception types raised by the sampling benchmark."""


class BenchmarkError(Exception):
    """Base class for all benchmark failures."""


class ConfigError(BenchmarkError, ValueError):
    """A configuration key is missing or holds a malformed value."""


class DataLoadError(BenchmarkError):
    """The input dataset could not be loaded or does not match the schema."""


class PipelineError(BenchmarkError):
    """The classifier or summarizer rejected its input."""
