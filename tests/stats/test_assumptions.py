"""Tests for assumption checks."""

import numpy as np

from plotstats.stats.assumptions import bartlett_safe, log_assumption_notes, shapiro_safe


def test_shapiro_safe_normal_data():
    """Test Shapiro-Wilk on normally distributed data."""
    np.random.seed(42)
    x = np.random.normal(0, 1, 50)

    W, p, n = shapiro_safe(x)

    assert n == 50
    assert 0 <= W <= 1
    assert 0 <= p <= 1


def test_shapiro_safe_insufficient_data():
    """Test Shapiro-Wilk with insufficient data."""
    W, p, n = shapiro_safe(np.array([1.0, 2.0]))

    assert n == 2
    assert np.isnan(W)
    assert np.isnan(p)


def test_shapiro_safe_constant_data():
    """Test Shapiro-Wilk with constant data."""
    W, p, n = shapiro_safe(np.array([5.0, 5.0, 5.0, 5.0]))

    assert n == 4
    assert np.isnan(W)


def test_shapiro_safe_handles_nan():
    """Test Shapiro-Wilk handles NaN values."""
    _, _, n = shapiro_safe(np.array([1.0, 2.0, np.nan, 3.0, 4.0, 5.0]))
    assert n == 5


def test_shapiro_safe_large_sample():
    """Test Shapiro-Wilk subsamples large datasets."""
    np.random.seed(42)
    _, _, n = shapiro_safe(np.random.normal(0, 1, 10000))
    assert n == 5000


def test_bartlett_safe():
    """Bartlett's test needs two non-constant groups."""
    np.random.seed(42)
    stat, p = bartlett_safe([np.random.normal(0, 1, 30), np.random.normal(0, 3, 30)])
    assert stat > 0
    assert p < 0.05

    stat, p = bartlett_safe([np.ones(5), np.random.normal(0, 1, 5)])
    assert np.isnan(stat) and np.isnan(p)


def test_log_assumption_notes(caplog):
    """Normality per group and variance homogeneity are logged."""
    np.random.seed(42)
    groups = [np.random.normal(0, 1, 20), np.random.normal(1, 1, 20)]

    with caplog.at_level("INFO"):
        log_assumption_notes(groups, ["a", "b"], k=3)

    assert "Shapiro-Wilk normality test for 'a'" in caplog.text
    assert "Shapiro-Wilk normality test for 'b'" in caplog.text
    assert "Bartlett's test" in caplog.text


def test_log_assumption_notes_small_group(caplog):
    """Groups too small for Shapiro-Wilk are reported as not performed."""
    with caplog.at_level("INFO"):
        log_assumption_notes([np.array([1.0, 2.0])], ["tiny"])
    assert "not performed" in caplog.text
