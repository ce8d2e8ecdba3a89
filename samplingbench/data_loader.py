"""Data loading utilities for tabular benchmark datasets."""

from pathlib import Path
from typing import Sequence

import pandas as pd

from .errors import DataLoadError


def load_csv_dataset(
    filename: str,
    metric: str,
    attributes: Sequence[str],
) -> pd.DataFrame:
    """
    Load the metric and attribute columns of a CSV dataset.

    Only the required columns are read. The metric column is typed as
    float64 and every attribute column as string, so attribute values
    such as ``"007"`` keep their exact spelling.

    Args:
        filename: Path to the CSV file
        metric: Name of the numeric column used for classification
        attributes: Names of the categorical explanation columns

    Returns:
        DataFrame with the attribute columns followed by the metric column

    Raises:
        DataLoadError: If the file is missing, a required column is absent,
            the metric column is not numeric, or the dataset is empty
    """
    path = Path(filename)
    if not path.exists():
        raise DataLoadError(f"File not found: {filename}")

    required_columns = list(dict.fromkeys(list(attributes) + [metric]))

    try:
        header = pd.read_csv(path, nrows=0)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise DataLoadError(f"Could not parse {filename}: {e}") from e

    missing = [c for c in required_columns if c not in header.columns]
    if missing:
        raise DataLoadError(
            f"Missing required columns in {filename}: {', '.join(missing)}"
        )

    dtypes = {col: str for col in attributes if col != metric}
    try:
        df = pd.read_csv(
            path,
            usecols=required_columns,
            dtype=dtypes,
            keep_default_na=False,
        )
    except pd.errors.ParserError as e:
        raise DataLoadError(f"Could not parse {filename}: {e}") from e

    try:
        df[metric] = pd.to_numeric(df[metric], errors="raise").astype("float64")
    except (ValueError, TypeError) as e:
        raise DataLoadError(f"Metric column '{metric}' is not numeric: {e}") from e

    if df.empty:
        raise DataLoadError(f"Dataset {filename} has no rows")

    return df[required_columns]
