"""Scatterplot with a correlation test in the subtitle."""

from __future__ import annotations

import logging
from typing import Optional

import pandas as pd
import seaborn as sns

from plotstats.config import StatsOptions, resolve_options
from plotstats.data.prepare import select_columns
from plotstats.exceptions import UnsupportedTestKind
from plotstats.plots.base import (
    FigureLike,
    StatsPlot,
    annotate,
    caption_text,
    compute_statistics,
    new_figure,
    stats_plot,
)
from plotstats.plots.theme import style_axes
from plotstats.stats.results import TestFamily

logger = logging.getLogger(__name__)

SMOOTHERS = ("linear", "lowess")


def ggscatterstats(
    data: pd.DataFrame,
    x: str,
    y: str,
    method: str = "linear",
    point_color: str = "black",
    point_size: float = 20.0,
    point_alpha: float = 0.4,
    line_color: str = "blue",
    title: Optional[str] = None,
    caption: Optional[str] = None,
    xlab: Optional[str] = None,
    ylab: Optional[str] = None,
    fig: Optional[FigureLike] = None,
    options: Optional[StatsOptions] = None,
    **overrides,
) -> StatsPlot:
    """Scatterplot of ``y`` against ``x`` with a fitted line and correlation test.

    ``method`` selects the smoother: "linear" (least squares with a
    confidence band at ``conf_level``) or "lowess".
    """
    options = resolve_options(options, **overrides)
    if method not in SMOOTHERS:
        raise UnsupportedTestKind("smoothing method", method, SMOOTHERS)

    df = select_columns(data, x=x, y=y)
    subtitle, result, bf_caption = compute_statistics(df, TestFamily.CORRELATION, options)

    def draw(target):
        figure = new_figure(target)
        ax = figure.subplots()

        sns.regplot(
            data=df,
            x="x",
            y="y",
            lowess=method == "lowess",
            ci=None if method == "lowess" else int(round(options.conf_level * 100)),
            seed=options.seed,
            scatter_kws={"color": point_color, "s": point_size, "alpha": point_alpha},
            line_kws={"color": line_color, "linewidth": 1.5},
            ax=ax,
        )

        ax.set_xlabel(xlab or x)
        ax.set_ylabel(ylab or y)
        style_axes(ax, grid_axis="both")
        annotate(figure, ax, title, subtitle, caption_text(bf_caption, caption))
        return figure, ax

    return stats_plot(draw, fig, subtitle, bf_caption, caption, result)
