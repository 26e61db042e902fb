"""Robust tests based on trimmed means and winsorized variances."""

from __future__ import annotations

import math
from typing import Any, Dict, List

import numpy as np
import pingouin as pg
from scipy import stats


def trimmed_mean(x: np.ndarray, tr: float = 0.2) -> float:
    """Mean after trimming ``tr`` from each tail."""
    return float(stats.trim_mean(np.asarray(x, dtype=float), tr))


def winsorize(x: np.ndarray, tr: float = 0.2) -> np.ndarray:
    """Winsorize ``tr`` of each tail (same rounding of ``g`` as the trimmed mean)."""
    x = np.asarray(x, dtype=float)
    n = len(x)
    g = int(math.floor(tr * n))
    if g == 0 or n == 0:
        return x.copy()
    ordered = np.sort(x)
    return np.clip(x, ordered[g], ordered[n - g - 1])


def winvar(x: np.ndarray, tr: float = 0.2) -> float:
    """Winsorized sample variance."""
    w = winsorize(x, tr)
    if len(w) < 2:
        return np.nan
    return float(np.var(w, ddof=1))


def trimmed_onesample(x: np.ndarray, mu: float = 0.0, tr: float = 0.2, conf_level: float = 0.95) -> Dict[str, Any]:
    """One-sample test on the trimmed mean (Tukey-McLaughlin).

    Returns:
        Dictionary with keys: statistic, df, p_value, estimate, conf_low, conf_high
    """
    x = np.asarray(x, dtype=float)
    n = len(x)
    g = int(math.floor(tr * n))
    df = n - 2 * g - 1
    est = trimmed_mean(x, tr)

    with np.errstate(all="ignore"):
        se = math.sqrt(winvar(x, tr)) / ((1 - 2 * tr) * math.sqrt(n))
        t_stat = (est - mu) / se if se > 0 else np.nan

    if df < 1 or not np.isfinite(t_stat):
        return {"statistic": np.nan, "df": float(df), "p_value": np.nan,
                "estimate": est, "conf_low": np.nan, "conf_high": np.nan}

    crit = stats.t.ppf(1 - (1 - conf_level) / 2, df)
    return {
        "statistic": float(t_stat),
        "df": float(df),
        "p_value": float(2 * stats.t.sf(abs(t_stat), df)),
        "estimate": est,
        "conf_low": float(est - crit * se),
        "conf_high": float(est + crit * se),
    }


def yuen(x: np.ndarray, y: np.ndarray, tr: float = 0.2) -> Dict[str, Any]:
    """Yuen's test for independent trimmed means.

    Returns:
        Dictionary with keys: statistic, df, p_value, difference
    """
    x, y = np.asarray(x, dtype=float), np.asarray(y, dtype=float)
    h1 = np.float64(len(x) - 2 * int(math.floor(tr * len(x))))
    h2 = np.float64(len(y) - 2 * int(math.floor(tr * len(y))))

    with np.errstate(all="ignore"):
        d1 = (len(x) - 1) * winvar(x, tr) / (h1 * (h1 - 1))
        d2 = (len(y) - 1) * winvar(y, tr) / (h2 * (h2 - 1))
        diff = trimmed_mean(x, tr) - trimmed_mean(y, tr)
        t_stat = diff / np.sqrt(d1 + d2) if (d1 + d2) > 0 else np.nan
        df = (d1 + d2) ** 2 / (d1 ** 2 / (h1 - 1) + d2 ** 2 / (h2 - 1)) if (d1 + d2) > 0 else np.nan

    p_val = 2 * stats.t.sf(abs(t_stat), df) if np.isfinite(t_stat) and np.isfinite(df) else np.nan
    return {"statistic": float(t_stat), "df": float(df), "p_value": float(p_val), "difference": float(diff)}


def yuen_paired(x: np.ndarray, y: np.ndarray, tr: float = 0.2) -> Dict[str, Any]:
    """Yuen's test for dependent trimmed means.

    Returns:
        Dictionary with keys: statistic, df, p_value, difference
    """
    x, y = np.asarray(x, dtype=float), np.asarray(y, dtype=float)
    n = len(x)
    h = np.float64(n - 2 * int(math.floor(tr * n)))
    wx, wy = winsorize(x, tr), winsorize(y, tr)

    q1 = np.sum((wx - wx.mean()) ** 2)
    q2 = np.sum((wy - wy.mean()) ** 2)
    q3 = np.sum((wx - wx.mean()) * (wy - wy.mean()))
    df = h - 1

    with np.errstate(all="ignore"):
        se = np.sqrt(max(q1 + q2 - 2 * q3, 0.0) / (h * (h - 1)))
        diff = trimmed_mean(x, tr) - trimmed_mean(y, tr)
        t_stat = diff / se if se > 0 else np.nan

    p_val = 2 * stats.t.sf(abs(t_stat), df) if np.isfinite(t_stat) and df > 0 else np.nan
    return {"statistic": float(t_stat), "df": float(df), "p_value": float(p_val), "difference": float(diff)}


def trimmed_anova(groups: List[np.ndarray], tr: float = 0.2) -> Dict[str, Any]:
    """Heteroscedastic one-way ANOVA on trimmed means (Welch-type).

    Returns:
        Dictionary with keys: statistic, df1, df2, p_value
    """
    groups = [np.asarray(g, dtype=float) for g in groups]
    J = len(groups)
    n = np.array([len(g) for g in groups], dtype=float)
    h = n - 2 * np.floor(tr * n)
    tm = np.array([trimmed_mean(g, tr) for g in groups])
    wv = np.array([winvar(g, tr) for g in groups])

    with np.errstate(all="ignore"):
        w = h * (h - 1) / ((n - 1) * wv)
        u = w.sum()
        xtil = np.sum(w * tm) / u
        a = np.sum(w * (tm - xtil) ** 2) / (J - 1)
        lam = np.sum((1 - w / u) ** 2 / (h - 1))
        b = 2 * (J - 2) * lam / (J ** 2 - 1)
        f_stat = a / (1 + b)
        df2 = 1.0 / (3 * lam / (J ** 2 - 1))

    df1 = float(J - 1)
    if not (np.isfinite(f_stat) and np.isfinite(df2)):
        return {"statistic": np.nan, "df1": df1, "df2": np.nan, "p_value": np.nan}

    return {
        "statistic": float(f_stat),
        "df1": df1,
        "df2": float(df2),
        "p_value": float(stats.f.sf(f_stat, df1, df2)),
    }


def trimmed_rm_anova(wide: np.ndarray, tr: float = 0.2) -> Dict[str, Any]:
    """One-way repeated-measures ANOVA on trimmed means.

    Degrees of freedom are adjusted with a Huynh-Feldt epsilon estimated
    from the winsorized covariance matrix.

    Args:
        wide: Array of shape (n_subjects, n_conditions)

    Returns:
        Dictionary with keys: statistic, df1, df2, p_value, epsilon
    """
    wide = np.asarray(wide, dtype=float)
    n, J = wide.shape
    g = int(math.floor(tr * n))
    h = n - 2 * g

    tm = np.array([trimmed_mean(wide[:, j], tr) for j in range(J)])
    qc = h * np.sum((tm - tm.mean()) ** 2)

    win = np.column_stack([winsorize(wide[:, j], tr) for j in range(J)])
    resid = win - win.mean(axis=1, keepdims=True) - win.mean(axis=0, keepdims=True) + win.mean()
    qe = np.sum(resid ** 2)

    with np.errstate(all="ignore"):
        f_stat = (qc / (J - 1)) / (qe / ((h - 1) * (J - 1)))

        # Huynh-Feldt epsilon from the double-centred winsorized covariance
        v = np.cov(win, rowvar=False)
        centred = v - v.mean(axis=0) - v.mean(axis=1)[:, None] + v.mean()
        gg = np.trace(centred) ** 2 / ((J - 1) * np.sum(centred ** 2))
        hf = (n * (J - 1) * gg - 2) / ((J - 1) * (n - 1 - (J - 1) * gg))
        eps = float(min(max(hf, gg), 1.0))

    df1 = (J - 1) * eps
    df2 = (J - 1) * (h - 1) * eps
    if not (np.isfinite(f_stat) and np.isfinite(eps)):
        return {"statistic": np.nan, "df1": float(J - 1), "df2": np.nan, "p_value": np.nan, "epsilon": np.nan}

    return {
        "statistic": float(f_stat),
        "df1": float(df1),
        "df2": float(df2),
        "p_value": float(stats.f.sf(f_stat, df1, df2)),
        "epsilon": eps,
    }


def percentage_bend(x: np.ndarray, y: np.ndarray) -> Dict[str, Any]:
    """Percentage bend correlation via pingouin.

    Returns:
        Dictionary with keys: r, p_value, n
    """
    res = pg.corr(np.asarray(x, dtype=float), np.asarray(y, dtype=float), method="percbend")
    return {
        "r": float(res["r"].iloc[0]),
        "p_value": float(res["p-val"].iloc[0]),
        "n": int(res["n"].iloc[0]),
    }
