"""Sampling benchmark for percentile outlier classification and explanation."""

__version__ = "0.1.0"
