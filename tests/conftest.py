"""Pytest configuration and fixtures."""

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

from plotstats.config import StatsOptions


@pytest.fixture(autouse=True)
def close_figures():
    """Close all figures after each test."""
    yield
    plt.close("all")


@pytest.fixture
def options():
    """Default options with a fixed seed and few resamples."""
    return StatsOptions(seed=123, nboot=50, messages=False)


@pytest.fixture
def onesample_data():
    """Normally distributed measurements with mean around 0.5."""
    np.random.seed(42)
    return pd.DataFrame({"value": np.random.normal(0.5, 1.0, 40)})


@pytest.fixture
def two_group_data():
    """Two groups of 25 with a shifted mean."""
    np.random.seed(42)
    return pd.DataFrame(
        {
            "group": ["control"] * 25 + ["treated"] * 25,
            "score": np.concatenate([np.random.normal(10, 2, 25), np.random.normal(12, 2, 25)]),
        }
    )


@pytest.fixture
def three_group_data():
    """Three groups of unequal size (first appearance order: b, a, c)."""
    np.random.seed(42)
    groups = ["b"] * 20 + ["a"] * 18 + ["c"] * 22
    means = {"a": 5.0, "b": 6.0, "c": 7.5}
    return pd.DataFrame(
        {
            "cond": groups,
            "y": [np.random.normal(means[g], 1.5) for g in groups],
        }
    )


@pytest.fixture
def within_data():
    """Long-format repeated measures: 15 subjects x 3 conditions."""
    np.random.seed(42)
    n = 15
    subject = np.random.normal(0, 2, n)
    rows = []
    for cond, shift in [("pre", 0.0), ("mid", 0.8), ("post", 1.5)]:
        for i in range(n):
            rows.append({"time": cond, "y": 10 + subject[i] + shift + np.random.normal(0, 1)})
    return pd.DataFrame(rows)


@pytest.fixture
def correlation_data():
    """Two positively correlated variables."""
    np.random.seed(42)
    x = np.random.normal(0, 1, 60)
    return pd.DataFrame({"x": x, "y": 0.6 * x + np.random.normal(0, 0.8, 60)})


@pytest.fixture
def categorical_data():
    """Two categorical variables with an association, plus a grouping column."""
    np.random.seed(42)
    n = 120
    condition = np.random.choice(["low", "high"], size=n)
    main = np.where(
        condition == "high",
        np.random.choice(["yes", "no"], size=n, p=[0.7, 0.3]),
        np.random.choice(["yes", "no"], size=n, p=[0.35, 0.65]),
    )
    return pd.DataFrame(
        {
            "main": main,
            "condition": condition,
            "site": np.random.choice(["north", "south", "east"], size=n),
        }
    )
