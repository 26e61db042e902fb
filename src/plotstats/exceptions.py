"""Error taxonomy for plotstats.

Validation errors are raised immediately and carry enough context to fix the
call. Numeric degeneracy (zero variance, singular fits) is never an error: it
shows up as ``NaN`` fields in the result and as ``"NA"`` in the subtitle.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence


class PlotStatsError(Exception):
    """Base class for all plotstats errors."""


class UnsupportedTestKind(PlotStatsError, ValueError):
    """Raised when a test type, effect-size type or similar tag is not recognised."""

    def __init__(self, kind: str, value: object, accepted: Iterable[str]):
        self.kind = kind
        self.value = value
        self.accepted = list(accepted)
        super().__init__(
            f"Unsupported {kind} {value!r}. Accepted values: {', '.join(self.accepted)}"
        )


class InsufficientData(PlotStatsError, ValueError):
    """Raised when fewer observations are available than the test requires."""

    def __init__(self, message: str, required: Optional[int] = None, observed: Optional[int] = None):
        self.required = required
        self.observed = observed
        super().__init__(message)


class MissingColumn(PlotStatsError, KeyError):
    """Raised when a referenced column is absent from the dataset."""

    def __init__(self, column: str, available: Sequence[str]):
        self.column = column
        self.available = list(available)
        super().__init__(column)

    def __str__(self) -> str:
        return f"Column '{self.column}' not found in data. Available columns: {self.available}"
