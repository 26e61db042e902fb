"""Seeded percentile bootstrap."""

from __future__ import annotations

import warnings
from typing import Callable, Optional, Tuple

import numpy as np


def bootstrap_ci(
    statistic: Callable[..., float],
    *samples: np.ndarray,
    nboot: int = 100,
    conf_level: float = 0.95,
    seed: Optional[int] = None,
    paired: bool = False,
) -> Tuple[float, float]:
    """Percentile bootstrap confidence interval.

    Args:
        statistic: Function of the (resampled) samples returning a float
        *samples: One or more 1-D arrays
        nboot: Number of resamples
        conf_level: Confidence level
        seed: Seed for ``numpy.random.default_rng``; identical seeds give
            identical intervals
        paired: Resample the same row indices across samples (samples must
            have equal length); otherwise each sample is resampled on its own

    Returns:
        Tuple of (low, high); (NaN, NaN) if fewer than two resamples give a
        finite statistic
    """
    rng = np.random.default_rng(seed)
    arrays = [np.asarray(s) for s in samples]

    if paired and len({len(a) for a in arrays}) > 1:
        raise ValueError("Paired bootstrap requires samples of equal length")

    values = np.empty(nboot, dtype=float)
    with warnings.catch_warnings(), np.errstate(all="ignore"):
        warnings.simplefilter("ignore")
        for b in range(nboot):
            if paired:
                idx = rng.integers(0, len(arrays[0]), size=len(arrays[0]))
                resampled = [a[idx] for a in arrays]
            else:
                resampled = [a[rng.integers(0, len(a), size=len(a))] for a in arrays]
            try:
                values[b] = float(statistic(*resampled))
            except (ValueError, ZeroDivisionError, FloatingPointError):
                values[b] = np.nan

    finite = values[np.isfinite(values)]
    if len(finite) < 2:
        return np.nan, np.nan

    alpha = 1.0 - conf_level
    low, high = np.quantile(finite, [alpha / 2.0, 1.0 - alpha / 2.0])
    return float(low), float(high)
