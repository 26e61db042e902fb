"""Hypothesis tests, effect sizes and Bayes factors."""

from plotstats.stats.results import StatResult, TestFamily
from plotstats.stats.tests import get_runner, list_runners, register_runner

__all__ = ["StatResult", "TestFamily", "get_runner", "list_runners", "register_runner"]
