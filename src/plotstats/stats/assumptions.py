"""Assumption checks reported alongside parametric tests."""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

import numpy as np
from scipy import stats

logger = logging.getLogger(__name__)


def shapiro_safe(x: np.ndarray) -> Tuple[float, float, int]:
    """Perform Shapiro-Wilk test with safe handling.

    Args:
        x: Array of values

    Returns:
        Tuple of (W_statistic, p_value, n_valid)

    Notes:
        - Returns (nan, nan, n) if n < 3 or constant values
        - Subsamples to 5000 if n > 5000 (SciPy accuracy recommendation)
    """
    x = np.asarray(x, dtype=float)
    x = x[np.isfinite(x)]
    n = len(x)

    if n < 3:
        return np.nan, np.nan, n

    if np.allclose(np.nanstd(x), 0.0):
        return np.nan, np.nan, n

    if n > 5000:
        rng = np.random.default_rng(0)
        x = rng.choice(x, size=5000, replace=False)
        n = 5000

    W, p = stats.shapiro(x)
    return float(W), float(p), int(n)


def bartlett_safe(groups: List[np.ndarray]) -> Tuple[float, float]:
    """Bartlett's test for homogeneity of variances; (nan, nan) when undefined."""
    usable = [np.asarray(g, dtype=float) for g in groups if len(g) >= 2]
    if len(usable) < 2 or any(np.allclose(np.std(g), 0.0) for g in usable):
        return np.nan, np.nan
    stat, p = stats.bartlett(*usable)
    return float(stat), float(p)


def log_assumption_notes(groups: List[np.ndarray], labels: Sequence[str], k: int = 2, alpha: float = 0.05) -> None:
    """Log normality per group and homogeneity of variance across groups."""
    for label, values in zip(labels, groups):
        W, p, n = shapiro_safe(values)
        if np.isfinite(p):
            verdict = "not normal" if p < alpha else "normal"
            logger.info(
                f"Shapiro-Wilk normality test for '{label}': W = {W:.{k}f}, p = {p:.{k}f}, n = {n} ({verdict})"
            )
        else:
            logger.info(f"Shapiro-Wilk normality test for '{label}' not performed (n = {n})")

    if len(groups) >= 2:
        stat, p = bartlett_safe(groups)
        if np.isfinite(p):
            verdict = "unequal" if p < alpha else "equal"
            logger.info(
                f"Bartlett's test for homogeneity of variances: K2 = {stat:.{k}f}, p = {p:.{k}f} ({verdict} variances)"
            )
