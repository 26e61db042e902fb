"""Test runners.

Each runner takes a cleaned dataframe whose columns are named after their
roles (``x``, ``y``, ``main``, ``condition``) plus the resolved options, and
returns an unrounded StatResult. Runners are registered per
(family, type, paired) combination.
"""

from __future__ import annotations

import logging
import warnings
from functools import wraps
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.stats.anova import AnovaRM
from statsmodels.stats.contingency_tables import SquareTable, mcnemar
from statsmodels.stats.oneway import anova_oneway

from plotstats.config import EffsizeType, StatsOptions, TestType
from plotstats.data.prepare import group_arrays, level_order, paired_wide, require_min_n
from plotstats.exceptions import InsufficientData, UnsupportedTestKind
from plotstats.stats import bayes, effects, robust
from plotstats.stats.assumptions import log_assumption_notes
from plotstats.stats.bootstrap import bootstrap_ci
from plotstats.stats.results import StatResult, TestFamily

logger = logging.getLogger(__name__)

Runner = Callable[..., StatResult]

_RUNNER_REGISTRY: Dict[Tuple[TestFamily, TestType, bool], Runner] = {}


def register_runner(family: TestFamily, test_type: TestType, paired: bool = False):
    """Decorator to register a test runner for one (family, type, paired) combination."""

    def decorator(func: Runner) -> Runner:
        @wraps(func)
        def wrapper(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
            with warnings.catch_warnings(), np.errstate(all="ignore"):
                warnings.simplefilter("ignore", RuntimeWarning)
                return func(df, options, **kwargs)

        _RUNNER_REGISTRY[(family, test_type, paired)] = wrapper
        wrapper.family = family
        wrapper.test_type = test_type
        wrapper.paired = paired
        return wrapper

    return decorator


def get_runner(family: TestFamily, test_type: TestType, paired: bool = False) -> Runner:
    """Look up the runner for a combination.

    Raises:
        UnsupportedTestKind: If no runner exists; the message lists the types
            accepted for this family and design
    """
    key = (family, test_type, paired)
    if key not in _RUNNER_REGISTRY:
        accepted = [t.value for (f, t, p) in _RUNNER_REGISTRY if f == family and p == paired]
        design = "paired" if paired else "unpaired"
        raise UnsupportedTestKind(f"test type for {family.value} ({design})", test_type.value, accepted)
    return _RUNNER_REGISTRY[key]


def list_runners() -> List[Tuple[TestFamily, TestType, bool]]:
    """List all registered (family, type, paired) combinations."""
    return list(_RUNNER_REGISTRY.keys())


# ──────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────


def _result(family: TestFamily, options: StatsOptions, **fields) -> StatResult:
    return StatResult(family=family, test_type=options.type, conf_level=options.conf_level, **fields)


def _unpaired_groups(df: pd.DataFrame, expected: Optional[int] = None) -> Tuple[List, List[np.ndarray]]:
    levels = level_order(df["x"])
    if expected is not None and len(levels) < expected:
        raise InsufficientData(
            f"Exactly {expected} groups required, found {len(levels)}",
            required=expected,
            observed=len(levels),
        )
    if expected is not None and len(levels) > expected:
        raise ValueError(f"Exactly {expected} groups required, found {len(levels)}")
    groups = group_arrays(df, "x", "y")
    for level, g in zip(levels, groups):
        require_min_n(len(g), 2, f"observations in group '{level}'")
    return levels, groups


def _paired_matrix(df: pd.DataFrame) -> Tuple[List, np.ndarray]:
    wide = paired_wide(df, "x", "y")
    require_min_n(len(wide), 2, "complete subjects")
    return list(wide.columns), wide.to_numpy(dtype=float)


def _d_or_g(options: StatsOptions) -> str:
    return "d" if options.effsize_type == EffsizeType.BIASED else "g"


def _standardized_difference(
    options: StatsOptions,
    t: float,
    df: float,
    x: np.ndarray,
    y: Optional[np.ndarray] = None,
    paired: bool = False,
) -> Tuple[str, float, float, float]:
    """Cohen's d or Hedges' g with its noncentral-t interval."""
    key = _d_or_g(options)
    if y is None or paired:
        n1, n2, corr_df = len(x), None, len(x) - 1
    else:
        n1, n2, corr_df = len(x), len(y), len(x) + len(y) - 2

    mu = options.test_value if y is None else 0.0
    d = effects.cohen_d(x, y, mu=mu, paired=paired)
    low, high = effects.d_confint(t, df, n1, n2, options.conf_level)

    if key == "g":
        j = effects.hedges_correction(corr_df)
        return key, d * j, low * j, high * j
    return key, d, low, high


def _anova_effsize_key(options: StatsOptions) -> str:
    base = "eta2" if options.effsize_type == EffsizeType.BIASED else "omega2"
    return f"{base}_p" if options.partial else base


def _signed_rank_v(diff: np.ndarray) -> float:
    """Sum of ranks of positive differences (zeros dropped)."""
    diff = diff[diff != 0]
    if len(diff) == 0:
        return np.nan
    ranks = stats.rankdata(np.abs(diff))
    return float(ranks[diff > 0].sum())


def _wilcoxon_p(diff: np.ndarray) -> float:
    try:
        return float(stats.wilcoxon(diff, zero_method="wilcox").pvalue)
    except ValueError:
        return np.nan


# ──────────────────────────────────────────────────────────────
# One-sample
# ──────────────────────────────────────────────────────────────


@register_runner(TestFamily.ONE_SAMPLE, TestType.PARAMETRIC)
def onesample_parametric(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    x = df["x"].to_numpy(dtype=float)
    require_min_n(len(x), 2)

    res = stats.ttest_1samp(x, options.test_value)
    t, dof = float(res.statistic), float(len(x) - 1)
    key, est, low, high = _standardized_difference(options, t, dof, x)

    return _result(
        TestFamily.ONE_SAMPLE, options,
        method="One Sample t-test",
        statistic=t, statistic_symbol="t", df1=dof, p_value=float(res.pvalue), n=len(x),
        effsize=key, estimate=est, conf_low=low, conf_high=high,
    )


@register_runner(TestFamily.ONE_SAMPLE, TestType.NONPARAMETRIC)
def onesample_nonparametric(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    x = df["x"].to_numpy(dtype=float)
    require_min_n(len(x), 2)
    mu = options.test_value

    est = effects.rank_biserial(x, mu=mu)
    low, high = bootstrap_ci(
        lambda s: effects.rank_biserial(s, mu=mu), x,
        nboot=options.nboot, conf_level=options.conf_level, seed=options.seed,
    )

    return _result(
        TestFamily.ONE_SAMPLE, options,
        method="Wilcoxon signed rank test",
        statistic=_signed_rank_v(x - mu), statistic_symbol="V", p_value=_wilcoxon_p(x - mu), n=len(x),
        effsize="r_rankbis", estimate=est, conf_low=low, conf_high=high,
    )


@register_runner(TestFamily.ONE_SAMPLE, TestType.ROBUST)
def onesample_robust(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    x = df["x"].to_numpy(dtype=float)
    require_min_n(len(x), 2)

    res = robust.trimmed_onesample(x, mu=options.test_value, tr=options.tr, conf_level=options.conf_level)

    return _result(
        TestFamily.ONE_SAMPLE, options,
        method="One-sample trimmed mean test",
        statistic=res["statistic"], statistic_symbol="t", df1=res["df"], p_value=res["p_value"], n=len(x),
        effsize="mu_trimmed", estimate=res["estimate"], conf_low=res["conf_low"], conf_high=res["conf_high"],
    )


@register_runner(TestFamily.ONE_SAMPLE, TestType.BAYES)
def onesample_bayes(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    x = df["x"].to_numpy(dtype=float)
    require_min_n(len(x), 2)

    t = float(stats.ttest_1samp(x, options.test_value).statistic)
    return _result(
        TestFamily.ONE_SAMPLE, options,
        method="Bayesian one-sample t-test",
        statistic=t, statistic_symbol="t", df1=float(len(x) - 1), p_value=np.nan, n=len(x),
        log_bf01=bayes.bf_ttest(t, len(x), r=options.bf_prior), bf_prior=options.bf_prior,
    )


# ──────────────────────────────────────────────────────────────
# Two independent samples
# ──────────────────────────────────────────────────────────────


@register_runner(TestFamily.TWO_SAMPLE, TestType.PARAMETRIC)
def twosample_parametric(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    levels, (a, b) = _unpaired_groups(df, expected=2)
    if options.messages:
        log_assumption_notes([a, b], [str(l) for l in levels], k=options.k)

    res = stats.ttest_ind(a, b, equal_var=options.var_equal)
    t = float(res.statistic)
    if options.var_equal:
        dof = float(len(a) + len(b) - 2)
        method = "Student's t-test"
    else:
        va, vb = np.var(a, ddof=1) / len(a), np.var(b, ddof=1) / len(b)
        dof = float((va + vb) ** 2 / (va ** 2 / (len(a) - 1) + vb ** 2 / (len(b) - 1)))
        method = "Welch's t-test"

    key, est, low, high = _standardized_difference(options, t, dof, a, b)

    return _result(
        TestFamily.TWO_SAMPLE, options,
        method=method,
        statistic=t, statistic_symbol="t", df1=dof, p_value=float(res.pvalue), n=len(a) + len(b),
        effsize=key, estimate=est, conf_low=low, conf_high=high,
    )


@register_runner(TestFamily.TWO_SAMPLE, TestType.NONPARAMETRIC)
def twosample_nonparametric(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    _, (a, b) = _unpaired_groups(df, expected=2)

    res = stats.mannwhitneyu(a, b, alternative="two-sided")
    est = effects.rank_biserial(a, b)
    low, high = bootstrap_ci(
        effects.rank_biserial, a, b,
        nboot=options.nboot, conf_level=options.conf_level, seed=options.seed,
    )

    return _result(
        TestFamily.TWO_SAMPLE, options,
        method="Mann-Whitney U test",
        statistic=float(res.statistic), statistic_symbol="U", p_value=float(res.pvalue), n=len(a) + len(b),
        effsize="r_rankbis", estimate=est, conf_low=low, conf_high=high,
    )


@register_runner(TestFamily.TWO_SAMPLE, TestType.ROBUST)
def twosample_robust(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    _, (a, b) = _unpaired_groups(df, expected=2)
    tr = options.tr

    res = robust.yuen(a, b, tr=tr)
    est = effects.explanatory_xi([a, b], tr)
    low, high = bootstrap_ci(
        lambda u, v: effects.explanatory_xi([u, v], tr), a, b,
        nboot=options.nboot, conf_level=options.conf_level, seed=options.seed,
    )

    return _result(
        TestFamily.TWO_SAMPLE, options,
        method="Yuen's test on trimmed means",
        statistic=res["statistic"], statistic_symbol="t", df1=res["df"], p_value=res["p_value"],
        n=len(a) + len(b),
        effsize="xi", estimate=est, conf_low=low, conf_high=high,
    )


@register_runner(TestFamily.TWO_SAMPLE, TestType.BAYES)
def twosample_bayes(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    _, (a, b) = _unpaired_groups(df, expected=2)

    t = float(stats.ttest_ind(a, b, equal_var=True).statistic)
    return _result(
        TestFamily.TWO_SAMPLE, options,
        method="Bayesian two-sample t-test",
        statistic=t, statistic_symbol="t", df1=float(len(a) + len(b) - 2), p_value=np.nan,
        n=len(a) + len(b),
        log_bf01=bayes.bf_ttest(t, len(a), len(b), r=options.bf_prior), bf_prior=options.bf_prior,
    )


# ──────────────────────────────────────────────────────────────
# Two paired samples
# ──────────────────────────────────────────────────────────────


def _two_paired(df: pd.DataFrame) -> Tuple[List, np.ndarray, np.ndarray]:
    levels, wide = _paired_matrix(df)
    if len(levels) < 2:
        raise InsufficientData(
            f"Exactly 2 conditions required, found {len(levels)}", required=2, observed=len(levels)
        )
    if len(levels) > 2:
        raise ValueError(f"Exactly 2 conditions required, found {len(levels)}")
    return levels, wide[:, 0], wide[:, 1]


@register_runner(TestFamily.TWO_SAMPLE, TestType.PARAMETRIC, paired=True)
def paired_parametric(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    _, a, b = _two_paired(df)

    res = stats.ttest_rel(a, b)
    t, dof = float(res.statistic), float(len(a) - 1)
    key, est, low, high = _standardized_difference(options, t, dof, a, b, paired=True)

    return _result(
        TestFamily.TWO_SAMPLE, options,
        method="Paired t-test",
        statistic=t, statistic_symbol="t", df1=dof, p_value=float(res.pvalue), n=len(a),
        effsize=key, estimate=est, conf_low=low, conf_high=high,
    )


@register_runner(TestFamily.TWO_SAMPLE, TestType.NONPARAMETRIC, paired=True)
def paired_nonparametric(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    _, a, b = _two_paired(df)

    est = effects.rank_biserial(a, b, paired=True)
    low, high = bootstrap_ci(
        lambda u, v: effects.rank_biserial(u, v, paired=True), a, b,
        nboot=options.nboot, conf_level=options.conf_level, seed=options.seed, paired=True,
    )

    return _result(
        TestFamily.TWO_SAMPLE, options,
        method="Wilcoxon signed rank test",
        statistic=_signed_rank_v(a - b), statistic_symbol="V", p_value=_wilcoxon_p(a - b), n=len(a),
        effsize="r_rankbis", estimate=est, conf_low=low, conf_high=high,
    )


@register_runner(TestFamily.TWO_SAMPLE, TestType.ROBUST, paired=True)
def paired_robust(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    _, a, b = _two_paired(df)
    tr = options.tr

    res = robust.yuen_paired(a, b, tr=tr)
    est = effects.explanatory_xi([a, b], tr)
    low, high = bootstrap_ci(
        lambda u, v: effects.explanatory_xi([u, v], tr), a, b,
        nboot=options.nboot, conf_level=options.conf_level, seed=options.seed, paired=True,
    )

    return _result(
        TestFamily.TWO_SAMPLE, options,
        method="Yuen's test on trimmed means for dependent samples",
        statistic=res["statistic"], statistic_symbol="t", df1=res["df"], p_value=res["p_value"], n=len(a),
        effsize="xi", estimate=est, conf_low=low, conf_high=high,
    )


@register_runner(TestFamily.TWO_SAMPLE, TestType.BAYES, paired=True)
def paired_bayes(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    _, a, b = _two_paired(df)

    t = float(stats.ttest_rel(a, b).statistic)
    return _result(
        TestFamily.TWO_SAMPLE, options,
        method="Bayesian paired t-test",
        statistic=t, statistic_symbol="t", df1=float(len(a) - 1), p_value=np.nan, n=len(a),
        log_bf01=bayes.bf_ttest(t, len(a), paired=True, r=options.bf_prior), bf_prior=options.bf_prior,
    )


# ──────────────────────────────────────────────────────────────
# One-way ANOVA, independent groups
# ──────────────────────────────────────────────────────────────


@register_runner(TestFamily.ANOVA, TestType.PARAMETRIC)
def anova_parametric(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    levels, groups = _unpaired_groups(df)
    if options.messages:
        log_assumption_notes(groups, [str(l) for l in levels], k=options.k)

    y = np.concatenate(groups)
    g = np.repeat(np.arange(len(groups)), [len(a) for a in groups])
    res = anova_oneway(y, g, use_var="equal" if options.var_equal else "unequal")
    df1, df2 = (float(v) for v in res.df)

    key = _anova_effsize_key(options)
    eta2, omega2 = effects.oneway_effsizes(groups)
    n, k = len(y), len(groups)

    if key.startswith("eta2"):
        est = eta2
        # Fisher F reproduces eta-squared exactly: F = eta2 / (1 - eta2) * (n - k) / (k - 1)
        f_fisher = eta2 / (1.0 - eta2) * (n - k) / (k - 1) if eta2 < 1 else np.nan
        low, high = effects.eta_squared_confint(f_fisher, k - 1, n - k, options.conf_level)
    else:
        est = omega2
        low, high = bootstrap_ci(
            lambda *gs: effects.oneway_effsizes(gs)[1], *groups,
            nboot=options.nboot, conf_level=options.conf_level, seed=options.seed,
        )

    method = "Fisher's one-way ANOVA" if options.var_equal else "Welch's one-way ANOVA"
    return _result(
        TestFamily.ANOVA, options,
        method=method,
        statistic=float(res.statistic), statistic_symbol="F", df1=df1, df2=df2,
        p_value=float(res.pvalue), n=n,
        effsize=key, estimate=est, conf_low=low, conf_high=high,
    )


@register_runner(TestFamily.ANOVA, TestType.NONPARAMETRIC)
def anova_nonparametric(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    _, groups = _unpaired_groups(df)
    n = sum(len(a) for a in groups)

    try:
        h, p_val = stats.kruskal(*groups)
    except ValueError:
        h, p_val = np.nan, np.nan

    def eps2(*gs):
        return effects.epsilon_squared(stats.kruskal(*gs).statistic, sum(len(a) for a in gs))

    low, high = bootstrap_ci(
        eps2, *groups, nboot=options.nboot, conf_level=options.conf_level, seed=options.seed,
    )

    return _result(
        TestFamily.ANOVA, options,
        method="Kruskal-Wallis rank sum test",
        statistic=float(h), statistic_symbol="chi2_kw", df1=float(len(groups) - 1),
        p_value=float(p_val), n=n,
        effsize="epsilon2", estimate=effects.epsilon_squared(h, n), conf_low=low, conf_high=high,
    )


@register_runner(TestFamily.ANOVA, TestType.ROBUST)
def anova_robust(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    _, groups = _unpaired_groups(df)
    tr = options.tr

    res = robust.trimmed_anova(groups, tr=tr)
    low, high = bootstrap_ci(
        lambda *gs: effects.explanatory_xi(list(gs), tr), *groups,
        nboot=options.nboot, conf_level=options.conf_level, seed=options.seed,
    )

    return _result(
        TestFamily.ANOVA, options,
        method="Heteroscedastic one-way ANOVA for trimmed means",
        statistic=res["statistic"], statistic_symbol="F", df1=res["df1"], df2=res["df2"],
        p_value=res["p_value"], n=sum(len(a) for a in groups),
        effsize="xi", estimate=effects.explanatory_xi(groups, tr), conf_low=low, conf_high=high,
    )


@register_runner(TestFamily.ANOVA, TestType.BAYES)
def anova_bayes(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    _, groups = _unpaired_groups(df)
    y = np.concatenate(groups)
    g = np.repeat(np.arange(len(groups)), [len(a) for a in groups])

    f_stat = float(stats.f_oneway(*groups).statistic)
    return _result(
        TestFamily.ANOVA, options,
        method="Bayesian one-way ANOVA (BIC approximation)",
        statistic=f_stat, statistic_symbol="F", df1=float(len(groups) - 1), df2=float(len(y) - len(groups)),
        p_value=np.nan, n=len(y),
        log_bf01=bayes.bf_oneway_bic(y, g),
    )


# ──────────────────────────────────────────────────────────────
# One-way ANOVA, repeated measures
# ──────────────────────────────────────────────────────────────


def _rm_anova_table(wide: np.ndarray) -> Tuple[float, float, float, float]:
    n, k = wide.shape
    long = pd.DataFrame(
        {
            "y": wide.ravel(),
            "subject": np.repeat(np.arange(n), k),
            "condition": np.tile(np.arange(k), n),
        }
    )
    table = AnovaRM(long, depvar="y", subject="subject", within=["condition"]).fit().anova_table
    row = table.iloc[0]
    return float(row["F Value"]), float(row["Num DF"]), float(row["Den DF"]), float(row["Pr > F"])


@register_runner(TestFamily.ANOVA, TestType.PARAMETRIC, paired=True)
def rm_anova_parametric(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    levels, wide = _paired_matrix(df)
    if options.messages:
        log_assumption_notes([wide[:, j] for j in range(wide.shape[1])], [str(l) for l in levels], k=options.k)

    f_stat, df1, df2, p_val = _rm_anova_table(wide)
    key = _anova_effsize_key(options)
    est = effects.rm_effsizes(wide)[key]

    low, high = bootstrap_ci(
        lambda *cols: effects.rm_effsizes(np.column_stack(cols))[key],
        *[wide[:, j] for j in range(wide.shape[1])],
        nboot=options.nboot, conf_level=options.conf_level, seed=options.seed, paired=True,
    )

    return _result(
        TestFamily.ANOVA, options,
        method="One-way repeated measures ANOVA",
        statistic=f_stat, statistic_symbol="F", df1=df1, df2=df2, p_value=p_val, n=wide.shape[0],
        effsize=key, estimate=est, conf_low=low, conf_high=high,
    )


@register_runner(TestFamily.ANOVA, TestType.NONPARAMETRIC, paired=True)
def rm_anova_nonparametric(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    _, wide = _paired_matrix(df)
    n, k = wide.shape
    cols = [wide[:, j] for j in range(k)]

    try:
        chi2, p_val = stats.friedmanchisquare(*cols)
    except ValueError:
        chi2, p_val = np.nan, np.nan

    def w(*cs):
        return effects.kendall_w(stats.friedmanchisquare(*cs).statistic, len(cs[0]), len(cs))

    low, high = bootstrap_ci(
        w, *cols, nboot=options.nboot, conf_level=options.conf_level, seed=options.seed, paired=True,
    )

    return _result(
        TestFamily.ANOVA, options,
        method="Friedman rank sum test",
        statistic=float(chi2), statistic_symbol="chi2_friedman", df1=float(k - 1), p_value=float(p_val), n=n,
        effsize="kendall_w", estimate=effects.kendall_w(chi2, n, k), conf_low=low, conf_high=high,
    )


@register_runner(TestFamily.ANOVA, TestType.ROBUST, paired=True)
def rm_anova_robust(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    _, wide = _paired_matrix(df)
    res = robust.trimmed_rm_anova(wide, tr=options.tr)

    return _result(
        TestFamily.ANOVA, options,
        method="Repeated measures ANOVA for trimmed means",
        statistic=res["statistic"], statistic_symbol="F", df1=res["df1"], df2=res["df2"],
        p_value=res["p_value"], n=wide.shape[0],
        details={"epsilon": res["epsilon"]},
    )


@register_runner(TestFamily.ANOVA, TestType.BAYES, paired=True)
def rm_anova_bayes(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    _, wide = _paired_matrix(df)
    f_stat, df1, df2, _ = _rm_anova_table(wide)

    return _result(
        TestFamily.ANOVA, options,
        method="Bayesian repeated measures ANOVA (BIC approximation)",
        statistic=f_stat, statistic_symbol="F", df1=df1, df2=df2, p_value=np.nan, n=wide.shape[0],
        log_bf01=bayes.bf_rm_bic(wide),
    )


# ──────────────────────────────────────────────────────────────
# Correlation
# ──────────────────────────────────────────────────────────────


def _xy(df: pd.DataFrame) -> Tuple[np.ndarray, np.ndarray]:
    x = df["x"].to_numpy(dtype=float)
    y = df["y"].to_numpy(dtype=float)
    require_min_n(len(x), 3, "pairs of observations")
    return x, y


def _correlation_result(options, method, effsize, r, p_val, n, se=None) -> StatResult:
    low, high = effects.fisher_z_ci(r, n, options.conf_level, se=se)
    return _result(
        TestFamily.CORRELATION, options,
        method=method,
        statistic=effects.correlation_t(r, n), statistic_symbol="t", df1=float(n - 2),
        p_value=p_val, n=n,
        effsize=effsize, estimate=float(r), conf_low=low, conf_high=high,
    )


@register_runner(TestFamily.CORRELATION, TestType.PARAMETRIC)
def correlation_parametric(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    x, y = _xy(df)
    r, p_val = stats.pearsonr(x, y)
    return _correlation_result(
        options, "Pearson's product-moment correlation", "r_pearson", float(r), float(p_val), len(x)
    )


@register_runner(TestFamily.CORRELATION, TestType.NONPARAMETRIC)
def correlation_nonparametric(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    x, y = _xy(df)
    rho, p_val = stats.spearmanr(x, y)
    rho, n = float(rho), len(x)
    # Bonett-Wright standard error for Spearman's rho
    se = np.sqrt((1 + rho ** 2 / 2) / (n - 3)) if n > 3 else None
    return _correlation_result(
        options, "Spearman's rank correlation rho", "rho_spearman", rho, float(p_val), n, se=se
    )


@register_runner(TestFamily.CORRELATION, TestType.ROBUST)
def correlation_robust(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    x, y = _xy(df)
    res = robust.percentage_bend(x, y)
    return _correlation_result(
        options, "Percentage bend correlation", "r_pb", res["r"], res["p_value"], len(x)
    )


@register_runner(TestFamily.CORRELATION, TestType.BAYES)
def correlation_bayes(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    x, y = _xy(df)
    r = float(stats.pearsonr(x, y)[0])
    n = len(x)
    return _result(
        TestFamily.CORRELATION, options,
        method="Bayesian Pearson correlation",
        statistic=effects.correlation_t(r, n), statistic_symbol="t", df1=float(n - 2), p_value=np.nan, n=n,
        log_bf01=bayes.bf_pearson(r, n),
        details={"r": r},
    )


# ──────────────────────────────────────────────────────────────
# Contingency tables
# ──────────────────────────────────────────────────────────────


def contingency_table(df: pd.DataFrame) -> pd.DataFrame:
    """Cross-tabulate ``main`` (rows) by ``condition`` (columns) in level order."""
    table = pd.crosstab(df["main"], df["condition"])
    return table.reindex(index=level_order(df["main"]), columns=level_order(df["condition"]), fill_value=0)


def _require_levels(df: pd.DataFrame, *cols: str) -> None:
    for col in cols:
        n_levels = df[col].nunique()
        if n_levels < 2:
            raise InsufficientData(
                f"At least 2 levels of '{col}' required, found {n_levels}", required=2, observed=n_levels
            )


@register_runner(TestFamily.CONTINGENCY, TestType.PARAMETRIC)
def contingency_parametric(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    _require_levels(df, "main", "condition")
    table = contingency_table(df).to_numpy()

    chi2, p_val, dof, _ = stats.chi2_contingency(table, correction=False)

    main_codes = pd.factorize(df["main"])[0]
    cond_codes = pd.factorize(df["condition"])[0]

    def v(m, c):
        return effects.cramers_v(pd.crosstab(m, c).to_numpy())

    low, high = bootstrap_ci(
        v, main_codes, cond_codes,
        nboot=options.nboot, conf_level=options.conf_level, seed=options.seed, paired=True,
    )

    return _result(
        TestFamily.CONTINGENCY, options,
        method="Pearson's chi-squared test",
        statistic=float(chi2), statistic_symbol="chi2", df1=float(dof), p_value=float(p_val),
        n=int(table.sum()),
        effsize="cramer_v", estimate=effects.cramers_v(table), conf_low=low, conf_high=high,
    )


@register_runner(TestFamily.CONTINGENCY, TestType.BAYES)
def contingency_bayes(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    _require_levels(df, "main", "condition")
    table = contingency_table(df).to_numpy()

    chi2, _, dof, _ = stats.chi2_contingency(table, correction=False)
    return _result(
        TestFamily.CONTINGENCY, options,
        method="Bayesian contingency table analysis",
        statistic=float(chi2), statistic_symbol="chi2", df1=float(dof), p_value=np.nan, n=int(table.sum()),
        log_bf01=bayes.bf_contingency(
            table, options.sampling_plan, options.fixed_margin, options.prior_concentration
        ),
        details={"sampling_plan": options.sampling_plan},
    )


@register_runner(TestFamily.CONTINGENCY, TestType.PARAMETRIC, paired=True)
def contingency_paired(df: pd.DataFrame, options: StatsOptions, **kwargs) -> StatResult:
    _require_levels(df, "main", "condition")
    levels = level_order(df["main"])
    levels += [l for l in level_order(df["condition"]) if l not in levels]
    table = pd.crosstab(df["main"], df["condition"]).reindex(index=levels, columns=levels, fill_value=0).to_numpy()
    n = int(table.sum())

    if table.shape == (2, 2):
        res = mcnemar(table, exact=False, correction=True)
        g, low, high = effects.cohens_g(table, options.conf_level)
        return _result(
            TestFamily.CONTINGENCY, options,
            method="McNemar's chi-squared test",
            statistic=float(res.statistic), statistic_symbol="chi2", df1=1.0, p_value=float(res.pvalue), n=n,
            effsize="cohen_g", estimate=g, conf_low=low, conf_high=high,
        )

    res = SquareTable(table, shift_zeros=False).symmetry()
    return _result(
        TestFamily.CONTINGENCY, options,
        method="Bowker's test of symmetry",
        statistic=float(res.statistic), statistic_symbol="chi2", df1=float(res.df), p_value=float(res.pvalue),
        n=n,
    )


# ──────────────────────────────────────────────────────────────
# One-sample proportion test
# ──────────────────────────────────────────────────────────────


def _counts_and_expected(df: pd.DataFrame, ratio: Optional[List[float]]) -> Tuple[np.ndarray, np.ndarray]:
    _require_levels(df, "main")
    levels = level_order(df["main"])
    counts = df["main"].value_counts().reindex(levels).to_numpy(dtype=float)

    if ratio is None:
        ratio = np.full(len(levels), 1.0 / len(levels))
    ratio = np.asarray(ratio, dtype=float)
    if len(ratio) != len(levels):
        raise ValueError(f"ratio must have {len(levels)} entries (one per level), got {len(ratio)}")
    if np.any(ratio < 0) or not np.isclose(ratio.sum(), 1.0):
        raise ValueError(f"ratio must contain non-negative proportions summing to 1, got {ratio.tolist()}")

    return counts, ratio * counts.sum()


@register_runner(TestFamily.PROPORTION, TestType.PARAMETRIC)
def proportion_parametric(df: pd.DataFrame, options: StatsOptions, ratio: Optional[List[float]] = None, **kwargs) -> StatResult:
    counts, expected = _counts_and_expected(df, ratio)
    res = stats.chisquare(counts, f_exp=expected)

    return _result(
        TestFamily.PROPORTION, options,
        method="Chi-squared test for given probabilities",
        statistic=float(res.statistic), statistic_symbol="chi2", df1=float(len(counts) - 1),
        p_value=float(res.pvalue), n=int(counts.sum()),
    )


@register_runner(TestFamily.PROPORTION, TestType.BAYES)
def proportion_bayes(df: pd.DataFrame, options: StatsOptions, ratio: Optional[List[float]] = None, **kwargs) -> StatResult:
    counts, expected = _counts_and_expected(df, ratio)
    res = stats.chisquare(counts, f_exp=expected)

    return _result(
        TestFamily.PROPORTION, options,
        method="Bayesian multinomial test",
        statistic=float(res.statistic), statistic_symbol="chi2", df1=float(len(counts) - 1),
        p_value=np.nan, n=int(counts.sum()),
        log_bf01=bayes.bf_multinomial(counts, expected, options.prior_concentration),
    )
