"""Bayes factors.

All functions return the natural logarithm of BF01 (evidence in favor of the
null hypothesis), which is what the subtitles and captions report.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np
import pandas as pd
import pingouin as pg
import statsmodels.formula.api as smf
from scipy.special import gammaln


def _log_bf01(bf10: float) -> float:
    bf10 = float(bf10)
    if not np.isfinite(bf10) or bf10 <= 0:
        return np.nan
    return -math.log(bf10)


def bf_ttest(t: float, nx: int, ny: Optional[int] = None, paired: bool = False, r: float = 0.707) -> float:
    """JZS Bayes factor for a one-sample, paired or two-sample t statistic.

    Returns:
        log_e(BF01)
    """
    if not np.isfinite(t):
        return np.nan
    return _log_bf01(pg.bayesfactor_ttest(t, nx, ny=ny, paired=paired, r=r))


def bf_pearson(r: float, n: int) -> float:
    """Bayes factor for a Pearson correlation (Ly et al. stretched beta prior).

    Returns:
        log_e(BF01)
    """
    if not np.isfinite(r) or n < 3:
        return np.nan
    return _log_bf01(pg.bayesfactor_pearson(r, n))


def bf_oneway_bic(y: np.ndarray, groups: Sequence) -> float:
    """BIC approximation of the Bayes factor for a one-way between-subjects design.

    ``log BF01 = (BIC_alternative - BIC_null) / 2`` (Wagenmakers, 2007).
    """
    df = pd.DataFrame({"y": np.asarray(y, dtype=float), "g": pd.Categorical(groups)})
    full = smf.ols("y ~ C(g)", data=df).fit()
    null = smf.ols("y ~ 1", data=df).fit()
    return float((full.bic - null.bic) / 2.0)


def bf_rm_bic(wide: np.ndarray) -> float:
    """BIC approximation of the Bayes factor for a one-way within-subjects design.

    Both models include subject intercepts; the alternative adds the
    condition effect.
    """
    wide = np.asarray(wide, dtype=float)
    n, k = wide.shape
    df = pd.DataFrame(
        {
            "y": wide.ravel(),
            "subject": np.repeat(np.arange(n), k).astype(str),
            "condition": np.tile(np.arange(k), n).astype(str),
        }
    )
    full = smf.ols("y ~ C(subject) + C(condition)", data=df).fit()
    null = smf.ols("y ~ C(subject)", data=df).fit()
    return float((full.bic - null.bic) / 2.0)


def _lmultibeta(alpha: np.ndarray) -> float:
    alpha = np.asarray(alpha, dtype=float).ravel()
    return float(np.sum(gammaln(alpha)) - gammaln(np.sum(alpha)))


def bf_contingency(
    table: np.ndarray,
    sampling_plan: str = "indepMulti",
    fixed_margin: str = "rows",
    prior_concentration: float = 1.0,
) -> float:
    """Gunel-Dickey Bayes factor for independence in a two-way table.

    Args:
        table: Observed counts (rows x columns)
        sampling_plan: "jointMulti" (total fixed) or "indepMulti" (one margin fixed)
        fixed_margin: Which margin is fixed under "indepMulti" ("rows" or "cols")
        prior_concentration: Dirichlet concentration per cell

    Returns:
        log_e(BF01)
    """
    y = np.asarray(table, dtype=float)
    if sampling_plan == "indepMulti" and fixed_margin == "cols":
        y = y.T

    I, J = y.shape
    a = np.full_like(y, prior_concentration)

    if sampling_plan == "jointMulti":
        ar, ac = a.sum(axis=1), a.sum(axis=0)
        yr, yc = y.sum(axis=1), y.sum(axis=0)
        lbf10 = (
            _lmultibeta(y + a)
            + _lmultibeta(ar - (J - 1))
            + _lmultibeta(ac - (I - 1))
            - _lmultibeta(a)
            - _lmultibeta(yr + ar - (J - 1))
            - _lmultibeta(yc + ac - (I - 1))
        )
    else:
        ac, yc = a.sum(axis=0), y.sum(axis=0)
        lbf10 = (
            sum(_lmultibeta(y[i] + a[i]) for i in range(I))
            + _lmultibeta(ac - (I - 1))
            - sum(_lmultibeta(a[i]) for i in range(I))
            - _lmultibeta(yc + ac - (I - 1))
        )

    return float(-lbf10) if np.isfinite(lbf10) else np.nan


def bf_multinomial(counts: np.ndarray, expected: np.ndarray, prior_concentration: float = 1.0) -> float:
    """Bayes factor for observed category counts against fixed proportions.

    The alternative places a symmetric Dirichlet prior on the category
    proportions.

    Returns:
        log_e(BF01)
    """
    counts = np.asarray(counts, dtype=float)
    p0 = np.asarray(expected, dtype=float)
    p0 = p0 / p0.sum()
    a = np.full_like(counts, prior_concentration)

    with np.errstate(divide="ignore", invalid="ignore"):
        log_null = float(np.sum(np.where(counts > 0, counts * np.log(p0), 0.0)))
    lbf10 = _lmultibeta(counts + a) - _lmultibeta(a) - log_null
    return float(-lbf10) if np.isfinite(lbf10) else np.nan
