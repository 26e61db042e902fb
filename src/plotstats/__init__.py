"""
plotstats: statistical plots with the test results in the subtitle.

This package provides:
- Histograms, scatterplots, box/violin, pie and bar charts annotated with a
  hypothesis test, effect size with confidence interval and sample size
- Parametric, nonparametric, robust and Bayesian variants of each test
- Grouped variants drawing one panel per level of a grouping column
- Plain-text and mathtext subtitles usable without plotting
- A Typer CLI
"""

__version__ = "0.1.0"

from plotstats.config import StatsOptions, TestType, load_options
from plotstats.exceptions import InsufficientData, MissingColumn, PlotStatsError, UnsupportedTestKind
from plotstats.plots import (
    CombinedPlot,
    StatsPlot,
    combine_plots,
    ggbarstats,
    ggbetweenstats,
    gghistostats,
    ggpiestats,
    ggscatterstats,
    ggwithinstats,
    grouped_ggbarstats,
    grouped_ggbetweenstats,
    grouped_gghistostats,
    grouped_ggpiestats,
    grouped_ggscatterstats,
    grouped_ggwithinstats,
    proptest_by_level,
)
from plotstats.stats.results import StatResult, TestFamily
from plotstats.subtitles import (
    Subtitle,
    subtitle,
    subtitle_contingency,
    subtitle_correlation,
    subtitle_groups,
    subtitle_onesample,
)

__all__ = [
    "__version__",
    "CombinedPlot",
    "InsufficientData",
    "MissingColumn",
    "PlotStatsError",
    "StatResult",
    "StatsOptions",
    "StatsPlot",
    "Subtitle",
    "TestFamily",
    "TestType",
    "UnsupportedTestKind",
    "combine_plots",
    "ggbarstats",
    "ggbetweenstats",
    "gghistostats",
    "ggpiestats",
    "ggscatterstats",
    "ggwithinstats",
    "grouped_ggbarstats",
    "grouped_ggbetweenstats",
    "grouped_gghistostats",
    "grouped_ggpiestats",
    "grouped_ggscatterstats",
    "grouped_ggwithinstats",
    "load_options",
    "proptest_by_level",
    "subtitle",
    "subtitle_contingency",
    "subtitle_correlation",
    "subtitle_groups",
    "subtitle_onesample",
]
