"""Effect sizes and their confidence intervals."""

from __future__ import annotations

import math
import warnings
from typing import Callable, List, Optional, Tuple

import numpy as np
from scipy import optimize
from scipy import stats as sp_stats
from scipy.stats.contingency import association
from statsmodels.stats.proportion import proportion_confint

from plotstats.stats.robust import trimmed_mean, winvar

NAN_CI = (np.nan, np.nan)


def cohen_d(x: np.ndarray, y: Optional[np.ndarray] = None, mu: float = 0.0, paired: bool = False) -> float:
    """Calculate Cohen's d effect size.

    Args:
        x: First group values
        y: Second group values; None for a one-sample effect against ``mu``
        mu: Reference value for the one-sample case
        paired: Use differences ``x - y`` (Cohen's d_z)

    Returns:
        Cohen's d (pooled standard deviation for independent groups)

    Notes:
        Returns NaN if insufficient data or zero variance
    """
    x = np.asarray(x, dtype=float)

    if y is not None and paired:
        x = x - np.asarray(y, dtype=float)
        y = None

    if y is None:
        if len(x) < 2:
            return np.nan
        sd = np.std(x, ddof=1)
        if not np.isfinite(sd) or sd <= 0:
            return np.nan
        return float((np.mean(x) - mu) / sd)

    y = np.asarray(y, dtype=float)
    nx, ny = len(x), len(y)

    if nx < 2 or ny < 2:
        return np.nan

    # Sample variances
    sx, sy = np.var(x, ddof=1), np.var(y, ddof=1)

    # Pooled variance
    sp2 = ((nx - 1) * sx + (ny - 1) * sy) / (nx + ny - 2)

    if not np.isfinite(sp2) or sp2 <= 0:
        return np.nan

    return float((np.mean(x) - np.mean(y)) / np.sqrt(sp2))


def hedges_correction(df: float) -> float:
    """Small-sample correction factor J for Hedges' g."""
    if df <= 0:
        return np.nan
    return 1.0 - (3.0 / (4.0 * df - 1.0))


def hedges_g(x: np.ndarray, y: Optional[np.ndarray] = None, mu: float = 0.0, paired: bool = False) -> float:
    """Calculate Hedges' g effect size (small-sample corrected Cohen's d).

    Notes:
        Returns NaN if insufficient data or zero variance
    """
    d = cohen_d(x, y, mu=mu, paired=paired)
    if not np.isfinite(d):
        return np.nan

    if y is None or paired:
        df = len(x) - 1
    else:
        df = len(x) + len(y) - 2

    return d * hedges_correction(df)


def _solve_ncp(cdf: Callable[[float], float], target: float, start: float, lower: Optional[float] = None) -> float:
    """Find the noncentrality parameter at which a decreasing ``cdf`` equals ``target``.

    The bracket is widened until it contains the root; NaN if none is found.
    """
    def func(ncp):
        return cdf(ncp) - target

    step = max(1.0, abs(start))
    lo, hi = start - step, start + step
    if lower is not None:
        lo = max(lo, lower)

    with warnings.catch_warnings(), np.errstate(all="ignore"):
        warnings.simplefilter("ignore")
        for _ in range(60):
            f_lo, f_hi = func(lo), func(hi)
            if not (np.isfinite(f_lo) and np.isfinite(f_hi)):
                return np.nan
            if f_lo >= 0 >= f_hi:
                return float(optimize.brentq(func, lo, hi, xtol=1e-10))
            step *= 2.0
            if f_lo < 0:
                if lower is not None and lo <= lower:
                    return np.nan
                lo = start - step if lower is None else max(start - step, lower)
            if f_hi > 0:
                hi = start + step
    return np.nan


def t_noncentral_ci(t: float, df: float, conf_level: float = 0.95) -> Tuple[float, float]:
    """Confidence interval for the noncentrality parameter of a t statistic."""
    if not (np.isfinite(t) and np.isfinite(df)) or df <= 0:
        return NAN_CI

    alpha = 1.0 - conf_level

    def cdf(ncp):
        return sp_stats.nct.cdf(t, df, ncp)

    low = _solve_ncp(cdf, 1.0 - alpha / 2.0, t)
    high = _solve_ncp(cdf, alpha / 2.0, t)
    return low, high


def d_confint(t: float, df: float, n1: int, n2: Optional[int] = None, conf_level: float = 0.95) -> Tuple[float, float]:
    """Noncentral-t confidence interval for a standardized mean difference.

    Args:
        t: Observed t statistic
        df: Degrees of freedom of the t statistic
        n1: Size of the (first) sample
        n2: Size of the second independent sample; None for one-sample/paired
        conf_level: Confidence level

    Returns:
        Tuple of (low, high) on the d scale
    """
    scale = math.sqrt(1.0 / n1) if n2 is None else math.sqrt(1.0 / n1 + 1.0 / n2)
    low, high = t_noncentral_ci(t, df, conf_level)
    return low * scale, high * scale


def eta_squared_from_f(f: float, df1: float, df2: float) -> float:
    """(Partial) eta-squared from an F statistic."""
    denom = f * df1 + df2
    if not np.isfinite(f) or denom <= 0:
        return np.nan
    return float(f * df1 / denom)


def omega_squared_from_f(f: float, df1: float, n: int) -> float:
    """(Partial) omega-squared from a one-way F statistic."""
    denom = df1 * (f - 1.0) + n
    if not np.isfinite(f) or denom <= 0:
        return np.nan
    return float(df1 * (f - 1.0) / denom)


def f_noncentral_ci(f: float, df1: float, df2: float, conf_level: float = 0.95) -> Tuple[float, float]:
    """Confidence interval for the noncentrality parameter of an F statistic.

    Bounds that fall below zero are clipped to zero.
    """
    if not (np.isfinite(f) and np.isfinite(df1) and np.isfinite(df2)) or df1 <= 0 or df2 <= 0:
        return NAN_CI

    alpha = 1.0 - conf_level

    def cdf(ncp):
        return sp_stats.ncf.cdf(f, df1, df2, ncp)

    bounds = []
    for target in (1.0 - alpha / 2.0, alpha / 2.0):
        if sp_stats.f.cdf(f, df1, df2) <= target:
            bounds.append(0.0)
        else:
            bounds.append(_solve_ncp(cdf, target, max(f * df1, 1.0), lower=0.0))
    return bounds[0], bounds[1]


def eta_squared_confint(f: float, df1: float, df2: float, conf_level: float = 0.95) -> Tuple[float, float]:
    """Noncentral-F confidence interval for eta-squared."""
    low, high = f_noncentral_ci(f, df1, df2, conf_level)
    total = df1 + df2 + 1.0
    return low / (low + total), high / (high + total)


def oneway_effsizes(groups: List[np.ndarray]) -> Tuple[float, float]:
    """Eta-squared and omega-squared from sums of squares of independent groups."""
    groups = [np.asarray(g, dtype=float) for g in groups]
    allv = np.concatenate(groups)
    n, k = len(allv), len(groups)
    grand = allv.mean()

    ss_between = sum(len(g) * (g.mean() - grand) ** 2 for g in groups)
    ss_within = sum(np.sum((g - g.mean()) ** 2) for g in groups)
    ss_total = ss_between + ss_within

    if ss_total <= 0 or n <= k:
        return np.nan, np.nan

    ms_within = ss_within / (n - k)
    eta2 = ss_between / ss_total
    omega2 = (ss_between - (k - 1) * ms_within) / (ss_total + ms_within)
    return float(eta2), float(omega2)


def rm_effsizes(wide: np.ndarray) -> dict:
    """Effect sizes for a one-way repeated-measures design.

    Args:
        wide: Array of shape (n_subjects, n_conditions)

    Returns:
        Dictionary with keys: eta2, eta2_p, omega2, omega2_p
    """
    wide = np.asarray(wide, dtype=float)
    n, k = wide.shape
    grand = wide.mean()

    ss_cond = n * np.sum((wide.mean(axis=0) - grand) ** 2)
    ss_subj = k * np.sum((wide.mean(axis=1) - grand) ** 2)
    ss_total = np.sum((wide - grand) ** 2)
    ss_error = ss_total - ss_cond - ss_subj

    df_cond, df_error = k - 1, (k - 1) * (n - 1)
    out = {"eta2": np.nan, "eta2_p": np.nan, "omega2": np.nan, "omega2_p": np.nan}
    if ss_total <= 0 or df_error <= 0:
        return out

    ms_cond = ss_cond / df_cond
    ms_error = ss_error / df_error
    ms_subj = ss_subj / (n - 1)

    out["eta2"] = float(ss_cond / ss_total)
    if ss_cond + ss_error > 0:
        out["eta2_p"] = float(ss_cond / (ss_cond + ss_error))
    out["omega2"] = float(df_cond * (ms_cond - ms_error) / (ss_total + ms_subj))
    denom = df_cond * ms_cond + (n * k - df_cond) * ms_error
    if denom > 0:
        out["omega2_p"] = float(df_cond * (ms_cond - ms_error) / denom)
    return out


def rank_biserial(x: np.ndarray, y: Optional[np.ndarray] = None, mu: float = 0.0, paired: bool = False) -> float:
    """Rank-biserial correlation.

    For independent groups computed from Mann-Whitney U as
    ``r = 2 * U_x / (nx * ny) - 1`` (positive when x tends to exceed y). For
    one-sample or paired data the matched-pairs version on ``x - mu`` (or
    ``x - y``) is used, ignoring zero differences.

    Returns:
        Rank-biserial correlation in range [-1, 1]; NaN if insufficient data
    """
    x = np.asarray(x, dtype=float)

    if y is None or paired:
        diff = x - (np.asarray(y, dtype=float) if y is not None else mu)
        diff = diff[diff != 0]
        if len(diff) == 0:
            return np.nan
        ranks = sp_stats.rankdata(np.abs(diff))
        total = ranks.sum()
        return float((ranks[diff > 0].sum() - ranks[diff < 0].sum()) / total)

    y = np.asarray(y, dtype=float)
    nx, ny = len(x), len(y)
    if nx == 0 or ny == 0:
        return np.nan

    U, _ = sp_stats.mannwhitneyu(x, y, alternative="two-sided")
    return float(2.0 * U / (nx * ny) - 1.0)


def epsilon_squared(h: float, n: int) -> float:
    """Epsilon-squared for a Kruskal-Wallis H statistic."""
    if not np.isfinite(h) or n <= 1:
        return np.nan
    return float(h / ((n ** 2 - 1) / (n + 1)))


def kendall_w(chi2: float, n: int, k: int) -> float:
    """Kendall's coefficient of concordance from a Friedman chi-squared statistic."""
    if not np.isfinite(chi2) or n <= 0 or k <= 1:
        return np.nan
    return float(chi2 / (n * (k - 1)))


def explanatory_xi(groups: List[np.ndarray], tr: float = 0.2) -> float:
    """Explanatory measure of effect size for trimmed means (Wilcox & Tian).

    ``xi^2`` is the variance of the trimmed means over the winsorized variance
    of the pooled data, capped at 1.
    """
    groups = [np.asarray(g, dtype=float) for g in groups]
    tms = np.array([trimmed_mean(g, tr) for g in groups])
    pooled_var = winvar(np.concatenate(groups), tr)

    if not np.isfinite(pooled_var) or pooled_var <= 0:
        return np.nan

    xi2 = min(float(np.var(tms, ddof=1)) / pooled_var, 1.0)
    return float(np.sqrt(xi2))


def correlation_t(r: float, n: int) -> float:
    """t statistic of a correlation coefficient with ``n - 2`` degrees of freedom."""
    if not np.isfinite(r) or n <= 2:
        return np.nan
    if abs(r) >= 1.0:
        return math.copysign(np.inf, r)
    return float(r * math.sqrt((n - 2) / (1.0 - r ** 2)))


def fisher_z_ci(r: float, n: int, conf_level: float = 0.95, se: Optional[float] = None) -> Tuple[float, float]:
    """Fisher-z confidence interval for a correlation coefficient.

    Args:
        se: Standard error on the z scale; defaults to ``1 / sqrt(n - 3)``
    """
    if not np.isfinite(r) or n <= 3 or abs(r) >= 1.0:
        return NAN_CI

    if se is None:
        se = 1.0 / math.sqrt(n - 3)

    z = np.arctanh(r)
    crit = sp_stats.norm.ppf(1.0 - (1.0 - conf_level) / 2.0)
    return float(np.tanh(z - crit * se)), float(np.tanh(z + crit * se))


def cramers_v(table: np.ndarray) -> float:
    """Cramér's V for a contingency table (no bias correction)."""
    table = np.asarray(table)
    if table.ndim != 2 or min(table.shape) < 2 or table.sum() == 0:
        return np.nan
    # Empty rows/columns carry no information about association
    table = table[table.sum(axis=1) > 0][:, table.sum(axis=0) > 0]
    if min(table.shape) < 2:
        return np.nan
    with np.errstate(all="ignore"):
        return float(association(table, method="cramer", correction=False))


def cohens_g(table: np.ndarray, conf_level: float = 0.95) -> Tuple[float, float, float]:
    """Cohen's g for a paired 2x2 table, with a Clopper-Pearson interval.

    Returns:
        Tuple of (g, low, high); NaN values if there are no discordant pairs
    """
    table = np.asarray(table)
    b, c = int(table[0, 1]), int(table[1, 0])
    discordant = b + c
    if discordant == 0:
        return np.nan, np.nan, np.nan

    larger = max(b, c)
    low, high = proportion_confint(larger, discordant, alpha=1.0 - conf_level, method="beta")
    return larger / discordant - 0.5, float(low) - 0.5, float(high) - 0.5
