"""Tests for test selection and the public subtitle functions."""

import numpy as np
import pandas as pd
import pytest
from scipy import optimize, stats

from plotstats.config import StatsOptions
from plotstats.data.prepare import select_columns
from plotstats.exceptions import InsufficientData, MissingColumn, UnsupportedTestKind
from plotstats.stats.results import TestFamily
from plotstats.stats.tests import onesample_parametric
from plotstats.subtitles.dispatch import (
    dispatch,
    groups_family,
    parse_family,
    run_bayes_caption,
    subtitle,
    subtitle_contingency,
    subtitle_correlation,
    subtitle_groups,
    subtitle_onesample,
    supported_types,
)
from plotstats.subtitles.templates import bayes_subtitle, frequentist_subtitle


def _ncp_bound(t, df, target):
    return optimize.brentq(lambda ncp: stats.nct.cdf(t, df, ncp) - target, t - 10, t + 10, xtol=1e-12)


def test_onesample_golden_symmetric():
    """Fixed subtitle for a sample centred exactly on the test value.

    With t = 0 the noncentral t bounds are -+z(0.975) = -+1.959964, so the
    Hedges' g interval is -+1.959964 * J / sqrt(n) with J = 1 - 3 / (4 * 4 - 1).
    """
    data = pd.DataFrame({"value": [-2.0, -1.0, 0.0, 1.0, 2.0]})

    sub = subtitle_onesample(data, "value", k=4, messages=False)

    assert sub.text == "t(4) = 0.0000, p = 1.0000, g = 0.0000, CI95% [-0.7012, 0.7012], n = 5"


def test_onesample_agrees_with_scipy_nct():
    """One-sample t-test subtitle on 700 observations matches scipy's noncentral t."""
    rng = np.random.default_rng(2024)
    values = rng.normal(0.1, 1.0, 700)
    data = pd.DataFrame({"value": values})

    res = stats.ttest_1samp(values, 0.0)
    t, p = float(res.statistic), float(res.pvalue)
    j = 1 - 3 / (4 * 699 - 1)
    g = values.mean() / values.std(ddof=1) * j
    scale = j / np.sqrt(700)
    low = _ncp_bound(t, 699, 0.975) * scale
    high = _ncp_bound(t, 699, 0.025) * scale
    p_text = "< 0.001" if p < 0.001 else f"{p:.4f}"

    expected = f"t(699) = {t:.4f}, p = {p_text}, g = {g:.4f}, CI95% [{low:.4f}, {high:.4f}], n = 700"
    assert str(subtitle_onesample(data, "value", k=4, messages=False)) == expected


class TestDispatch:
    """Tests for runner and template selection."""

    def test_parse_family_aliases(self):
        assert parse_family("two-sample") == TestFamily.TWO_SAMPLE
        assert parse_family("OneSample") == TestFamily.ONE_SAMPLE
        assert parse_family(TestFamily.ANOVA) == TestFamily.ANOVA

    def test_parse_family_unknown(self):
        with pytest.raises(UnsupportedTestKind, match="test family"):
            parse_family("regression")

    def test_paired_ignored_for_onesample(self):
        """One-sample tests have no within-subjects variant."""
        runner, formatter = dispatch("onesample", "p", paired=True)

        assert runner.__name__ == onesample_parametric.__name__
        assert formatter is frequentist_subtitle

    def test_bayes_formatter(self):
        _, formatter = dispatch("correlation", "bf")
        assert formatter is bayes_subtitle

    def test_unsupported_combination(self):
        with pytest.raises(UnsupportedTestKind) as excinfo:
            dispatch("contingency", "np")
        assert "parametric" in excinfo.value.accepted

    def test_supported_types(self):
        assert len(supported_types(TestFamily.ANOVA, paired=True)) == 4
        assert [t.value for t in supported_types(TestFamily.CONTINGENCY, paired=True)] == ["parametric"]

    def test_groups_family(self):
        two = pd.DataFrame({"x": ["a", "b"]})
        three = pd.DataFrame({"x": ["a", "b", "c"]})

        assert groups_family(two) == TestFamily.TWO_SAMPLE
        assert groups_family(three) == TestFamily.ANOVA
        with pytest.raises(InsufficientData):
            groups_family(pd.DataFrame({"x": ["a", "a"]}))


class TestSubtitleFunctions:
    """Tests for the public subtitle functions."""

    def test_two_groups_use_t_test(self, two_group_data, options):
        sub = subtitle_groups(two_group_data, "group", "score", options)

        assert sub.text.startswith("t(")
        assert ", g = " in sub.text
        assert sub.text.endswith("n = 50")

    def test_three_groups_use_anova(self, three_group_data, options):
        sub = subtitle_groups(three_group_data, "cond", "y", options)

        assert sub.text.startswith("F(2, ")
        assert "ω²p" in sub.text

    def test_within_subjects(self, within_data, options):
        sub = subtitle_groups(within_data, "time", "y", options, paired=True)
        assert sub.text.startswith("F(2, 28) = ")
        assert sub.text.endswith("n = 15")

    def test_nonparametric_type_alias(self, three_group_data, options):
        sub = subtitle_groups(three_group_data, "cond", "y", options, type="np")
        assert sub.text.startswith("χ²_Kruskal-Wallis(2) = ")

    def test_correlation(self, correlation_data, options):
        sub = subtitle_correlation(correlation_data, "x", "y", options)

        assert sub.text.startswith("t(58) = ")
        assert "r_Pearson = " in sub.text

    def test_contingency(self, categorical_data, options):
        sub = subtitle_contingency(categorical_data, "main", "condition", options=options)

        assert sub.text.startswith("χ²(1) = ")
        assert "V_Cramer" in sub.text
        assert sub.text.endswith("n = 120")

    def test_proportion(self, categorical_data, options):
        sub = subtitle_contingency(categorical_data, "main", options=options)

        assert sub.text.startswith("χ²(1) = ")
        assert "CI" not in sub.text

    def test_counts_column_matches_raw_rows(self, categorical_data, options):
        """Aggregated counts give the same result as one row per observation."""
        counted = categorical_data.groupby(["main", "condition"]).size().reset_index(name="freq")

        raw = subtitle_contingency(categorical_data, "main", "condition", options=options, type="bayes")
        agg = subtitle_contingency(counted, "main", "condition", counts="freq", options=options, type="bayes")

        assert raw == agg

    def test_missing_rows_dropped(self, two_group_data, options):
        """n equals the number of complete rows."""
        data = two_group_data.copy()
        data.loc[[0, 30], "score"] = np.nan

        sub = subtitle_groups(data, "group", "score", options)
        assert sub.text.endswith("n = 48")

    def test_degenerate_data_renders_na(self, options, caplog):
        """Constant groups give NA and a warning instead of an error."""
        data = pd.DataFrame({"g": ["a"] * 6 + ["b"] * 6, "v": [1.0] * 6 + [2.0] * 6})

        with caplog.at_level("WARNING"):
            sub = subtitle_groups(data, "g", "v", options, type="robust")

        assert sub.text.startswith("t(NA) = NA, p = NA, ξ = ")
        assert "statistic not defined for these data, shown as NA" in caplog.text

    def test_degenerate_anova_renders_na_interval(self, options):
        """Undefined partial omega-squared and its interval render as NA."""
        data = pd.DataFrame({"g": np.repeat(["a", "b", "c"], 4), "v": [5.0] * 12})

        sub = subtitle_groups(data, "g", "v", options)

        assert sub.text == "F(2, NA) = NA, p = NA, ω²p = NA, CI95% [NA, NA], n = 12"

    def test_results_subtitle_off(self, two_group_data, categorical_data, onesample_data):
        """No test is run when results_subtitle is False."""
        opts = StatsOptions(results_subtitle=False)

        assert subtitle_onesample(onesample_data, "value", opts) is None
        assert subtitle_groups(two_group_data, "group", "score", opts) is None
        assert subtitle_contingency(categorical_data, "main", "condition", options=opts) is None
        assert subtitle(two_group_data, "anova", "group", "score", options=opts) is None

    def test_seed_makes_subtitle_reproducible(self, three_group_data):
        """Identical seeds give identical bootstrap intervals."""
        first = subtitle_groups(three_group_data, "cond", "y", type="np", seed=7, nboot=50, messages=False)
        second = subtitle_groups(three_group_data, "cond", "y", type="np", seed=7, nboot=50, messages=False)
        assert first == second

    def test_bogus_type(self, onesample_data):
        with pytest.raises(UnsupportedTestKind, match="bogus"):
            subtitle_onesample(onesample_data, "value", type="bogus")

    def test_missing_column(self, onesample_data):
        with pytest.raises(MissingColumn):
            subtitle_onesample(onesample_data, "nope")


class TestGenericSubtitle:
    """Tests for the family-dispatching subtitle()."""

    def test_matches_specific_function(self, three_group_data, options):
        assert subtitle(three_group_data, "anova", "cond", "y", options=options) == subtitle_groups(
            three_group_data, "cond", "y", options
        )

    def test_onesample(self, onesample_data, options):
        assert subtitle(onesample_data, "onesample", "value", options=options).text.startswith("t(39)")

    def test_contingency_needs_y(self, categorical_data):
        with pytest.raises(ValueError, match="needs both"):
            subtitle(categorical_data, "contingency", "main")

    def test_twosample_needs_y(self, two_group_data):
        with pytest.raises(ValueError, match="needs both"):
            subtitle(two_group_data, "twosample", "group")

    def test_proportion(self, categorical_data, options):
        sub = subtitle(categorical_data, "proportion", "main", options=options)
        assert sub == subtitle_contingency(categorical_data, "main", options=options)


class TestBayesCaption:
    """Tests for the Bayes factor caption."""

    def test_caption_for_parametric(self, onesample_data, options):
        df = select_columns(onesample_data, x="value")
        caption = run_bayes_caption(df, TestFamily.ONE_SAMPLE, options)

        assert caption.text.startswith("In favor of null: log_e(BF01) = ")
        assert "r_Cauchy^JZS = 0.71" in caption.text

    def test_no_caption_when_disabled(self, onesample_data, options):
        df = select_columns(onesample_data, x="value")
        assert run_bayes_caption(df, TestFamily.ONE_SAMPLE, options.updated(bf_message=False)) is None

    def test_no_caption_for_bayes_subtitle(self, onesample_data, options):
        df = select_columns(onesample_data, x="value")
        assert run_bayes_caption(df, TestFamily.ONE_SAMPLE, options.updated(type="bayes")) is None

    def test_no_caption_without_bayes_runner(self, options):
        """Paired contingency tables have no Bayes factor."""
        df = pd.DataFrame({"main": ["a", "b", "a", "b"], "condition": ["a", "a", "b", "b"]})
        assert run_bayes_caption(df, TestFamily.CONTINGENCY, options.updated(paired=True)) is None
