"""Loading tabular data from CSV and Parquet files."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd

logger = logging.getLogger(__name__)


class DataFormat(str, Enum):
    """Supported data formats."""

    CSV = "csv"
    PARQUET = "parquet"
    PARQUET_DATASET = "parquet_dataset"

    @classmethod
    def from_path(cls, path: Path) -> DataFormat:
        """Infer format from a file suffix, or a directory for a Parquet dataset.

        Raises:
            ValueError: If the format cannot be inferred
        """
        path = Path(path)

        if path.is_dir():
            return cls.PARQUET_DATASET

        suffix = path.suffix.lower()
        if suffix == ".csv":
            return cls.CSV
        elif suffix == ".parquet":
            return cls.PARQUET
        else:
            raise ValueError(
                f"Cannot infer data format from path: {path}. "
                f"Expected .csv, .parquet file, or directory for parquet dataset."
            )


def validate_parquet_available() -> None:
    """Check that PyArrow is importable.

    Raises:
        ImportError: If PyArrow is not installed
    """
    try:
        import pyarrow  # noqa: F401
    except ImportError as exc:
        raise ImportError(
            "PyArrow is required for Parquet support but is not installed.\n"
            "Install with: pip install plotstats[parquet] or pip install pyarrow"
        ) from exc


def load_table(path: Union[str, Path], columns: Optional[List[str]] = None) -> pd.DataFrame:
    """Load a table from a CSV file, a Parquet file or a Parquet dataset directory.

    Args:
        path: Path to data file or directory
        columns: Optional subset of columns to load

    Returns:
        Loaded dataframe

    Raises:
        FileNotFoundError: If the path does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    fmt = DataFormat.from_path(path)
    logger.info(f"Loading table from {path} (format: {fmt.value})")

    if fmt == DataFormat.CSV:
        kwargs = {}
        if columns is not None:
            kwargs["usecols"] = columns
        return pd.read_csv(path, **kwargs)

    validate_parquet_available()

    if fmt == DataFormat.PARQUET:
        import pyarrow.parquet as pq

        return pq.read_table(path, columns=columns).to_pandas()

    import pyarrow.dataset as ds

    files = [
        f for f in path.glob("**/*.parquet") if not f.name.startswith((".", "_"))
    ]
    if not files:
        raise ValueError(f"No parquet files found in {path}")

    logger.info(f"Found {len(files)} parquet files in dataset directory")
    dataset = ds.dataset(path, format="parquet")
    return dataset.to_table(columns=columns).to_pandas()
