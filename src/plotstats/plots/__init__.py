"""Statistical plots."""

from plotstats.plots.base import CombinedPlot, StatsPlot
from plotstats.plots.betweenstats import ggbetweenstats, ggwithinstats
from plotstats.plots.grouped import (
    combine_plots,
    grouped_ggbarstats,
    grouped_ggbetweenstats,
    grouped_gghistostats,
    grouped_ggpiestats,
    grouped_ggscatterstats,
    grouped_ggwithinstats,
)
from plotstats.plots.histostats import gghistostats
from plotstats.plots.piestats import ggbarstats, ggpiestats, proptest_by_level
from plotstats.plots.scatterstats import ggscatterstats

__all__ = [
    "CombinedPlot",
    "StatsPlot",
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
    "proptest_by_level",
]
