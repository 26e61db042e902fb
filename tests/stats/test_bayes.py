"""Tests for Bayes factors (log_e BF01)."""

import math

import numpy as np
import pingouin as pg
import pytest

from plotstats.stats.bayes import (
    bf_contingency,
    bf_multinomial,
    bf_oneway_bic,
    bf_pearson,
    bf_rm_bic,
    bf_ttest,
)


def test_bf_ttest_matches_pingouin():
    """The JZS Bayes factor is pingouin's, inverted and logged."""
    expected = -math.log(pg.bayesfactor_ttest(2.5, 30, r=0.707))
    assert bf_ttest(2.5, 30) == pytest.approx(expected)


def test_bf_ttest_two_sample_and_prior():
    """Wider priors give more support to the null for small effects."""
    narrow = bf_ttest(0.5, 20, 20, r=0.5)
    wide = bf_ttest(0.5, 20, 20, r=1.414)
    assert wide > narrow > 0


def test_bf_ttest_nan_statistic():
    """Non-finite statistics give NaN."""
    assert np.isnan(bf_ttest(np.nan, 10))


def test_bf_pearson_sign():
    """Strong correlations favour the alternative; tiny ones the null."""
    assert bf_pearson(0.8, 40) < 0
    assert bf_pearson(0.01, 40) > 0


def test_bf_oneway_bic_separated_groups():
    """Clearly different means give evidence against the null."""
    np.random.seed(42)
    y = np.concatenate([np.random.normal(m, 1, 20) for m in (0, 2, 4)])
    g = np.repeat(["a", "b", "c"], 20)
    assert bf_oneway_bic(y, g) < 0


def test_bf_oneway_bic_equal_groups():
    """Equal means favour the null."""
    np.random.seed(42)
    y = np.random.normal(0, 1, 90)
    g = np.repeat(["a", "b", "c"], 30)
    assert bf_oneway_bic(y, g) > 0


def test_bf_rm_bic_effect():
    """A consistent condition effect favours the alternative."""
    np.random.seed(42)
    wide = np.random.normal(0, 2, (20, 1)) + np.array([0.0, 1.0, 2.0]) + np.random.normal(0, 0.5, (20, 3))
    assert bf_rm_bic(wide) < 0


def test_bf_contingency_association():
    """A strongly associated table favours the alternative."""
    table = np.array([[40, 10], [10, 40]])
    assert bf_contingency(table) < 0
    assert bf_contingency(table, sampling_plan="jointMulti") < 0
    assert bf_contingency(table, fixed_margin="cols") < 0


def test_bf_contingency_independence():
    """A perfectly balanced table favours the null."""
    table = np.array([[25, 25], [25, 25]])
    assert bf_contingency(table) > 0


def test_bf_multinomial():
    """Counts close to the expected proportions favour the null."""
    assert bf_multinomial(np.array([50, 50, 50]), np.array([1, 1, 1])) > 0
    assert bf_multinomial(np.array([100, 10, 10]), np.array([1, 1, 1])) < 0
