"""Data loading and preparation."""

from plotstats.data.loaders import DataFormat, load_table
from plotstats.data.prepare import (
    level_order,
    paired_wide,
    select_columns,
    uncount,
)

__all__ = [
    "DataFormat",
    "load_table",
    "level_order",
    "paired_wide",
    "select_columns",
    "uncount",
]
