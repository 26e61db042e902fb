"""Data preparation: column selection, missing values, counts and paired layouts."""

from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np
import pandas as pd

from plotstats.exceptions import InsufficientData, MissingColumn

logger = logging.getLogger(__name__)


def select_columns(data: pd.DataFrame, **roles: Optional[str]) -> pd.DataFrame:
    """Select referenced columns, rename them to their roles and drop missing rows.

    Args:
        data: Input dataframe (not modified)
        **roles: Mapping of role name (``x``, ``y``, ``main``, ``condition``,
            ``counts``) to column name; roles set to None are skipped

    Returns:
        Dataframe with one column per role, without missing values

    Raises:
        MissingColumn: If a referenced column does not exist
    """
    if not isinstance(data, pd.DataFrame):
        raise TypeError(f"data must be a pandas DataFrame, got {type(data).__name__}")

    selected = {role: col for role, col in roles.items() if col is not None}
    for col in selected.values():
        if col not in data.columns:
            raise MissingColumn(col, data.columns.tolist())

    df = pd.DataFrame({role: data[col].values for role, col in selected.items()}, index=data.index)
    n_before = len(df)
    df = df.dropna().reset_index(drop=True)

    n_dropped = n_before - len(df)
    if n_dropped > 0:
        logger.info(f"Dropped {n_dropped} of {n_before} rows with missing values")

    return df


def uncount(data: pd.DataFrame, counts: str = "counts") -> pd.DataFrame:
    """Expand a frequency column so that each row stands for one observation.

    Args:
        data: Dataframe with a non-negative integer count column
        counts: Name of the count column (removed from the result)

    Returns:
        Expanded dataframe
    """
    if counts not in data.columns:
        raise MissingColumn(counts, data.columns.tolist())

    weights = pd.to_numeric(data[counts])
    if (weights < 0).any() or not np.allclose(weights, np.round(weights)):
        raise ValueError(f"Column '{counts}' must contain non-negative integer counts")

    repeated = data.loc[data.index.repeat(weights.astype(int))]
    return repeated.drop(columns=[counts]).reset_index(drop=True)


def level_order(values: pd.Series) -> List:
    """Distinct levels of a column in order of first appearance.

    Categorical columns follow the same rule: category order is ignored and
    unused categories are dropped.
    """
    return list(pd.unique(values.dropna()))


def paired_wide(df: pd.DataFrame, x: str = "x", y: str = "y") -> pd.DataFrame:
    """Reshape long within-subjects data to one row per subject.

    Rows are matched across levels of ``x`` by their running position within
    each level. Subjects without an observation in every level are dropped.

    Args:
        df: Long dataframe (already cleaned of missing values)
        x: Condition column
        y: Measurement column

    Returns:
        Wide dataframe, one column per level of ``x`` in level order
    """
    levels = level_order(df[x])
    long = df[[x, y]].copy()
    long["rowid"] = long.groupby(x, sort=False, observed=True).cumcount()

    wide = long.pivot(index="rowid", columns=x, values=y)
    wide = wide.reindex(columns=levels)

    n_before = len(wide)
    wide = wide.dropna().reset_index(drop=True)
    wide.columns.name = None

    if len(wide) < n_before:
        logger.info(f"Dropped {n_before - len(wide)} incomplete subjects from paired data")

    return wide


def group_arrays(df: pd.DataFrame, x: str = "x", y: str = "y") -> List[np.ndarray]:
    """Split a numeric column into arrays per level of ``x`` (level order)."""
    return [
        df.loc[df[x] == level, y].to_numpy(dtype=float) for level in level_order(df[x])
    ]


def require_min_n(n: int, minimum: int, what: str = "observations") -> None:
    """Raise InsufficientData when fewer than ``minimum`` items are available."""
    if n < minimum:
        raise InsufficientData(
            f"At least {minimum} {what} required, found {n}", required=minimum, observed=n
        )
