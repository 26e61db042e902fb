"""Histogram with a one-sample test in the subtitle."""

from __future__ import annotations

import logging
from typing import Optional, Union

import numpy as np
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
from plotstats.plots.theme import LABEL_FONTSIZE, style_axes
from plotstats.stats.results import TestFamily
from plotstats.subtitles.formatting import format_value

logger = logging.getLogger(__name__)

BAR_MEASURES = {"count": "count", "proportion": "proportion", "density": "density"}
CENTRALITY = ("mean", "median")


def _centrality(centrality_para: Union[bool, str]) -> Optional[str]:
    if centrality_para is False or centrality_para is None:
        return None
    if centrality_para is True:
        return "mean"
    if centrality_para not in CENTRALITY:
        raise UnsupportedTestKind("centrality parameter", centrality_para, CENTRALITY)
    return centrality_para


def gghistostats(
    data: pd.DataFrame,
    x: str,
    binwidth: Optional[float] = None,
    bar_measure: str = "count",
    centrality_para: Union[bool, str] = True,
    test_value_line: bool = False,
    title: Optional[str] = None,
    caption: Optional[str] = None,
    xlab: Optional[str] = None,
    ylab: Optional[str] = None,
    bar_color: str = "black",
    bar_fill: str = "grey",
    fig: Optional[FigureLike] = None,
    options: Optional[StatsOptions] = None,
    **overrides,
) -> StatsPlot:
    """Histogram of ``x`` with a one-sample test against ``test_value``.

    Args:
        data: Input dataframe
        x: Numeric column
        binwidth: Width of histogram bins (seaborn chooses when None)
        bar_measure: "count", "proportion" or "density"
        centrality_para: Draw a line at the "mean" or "median" (True means mean)
        test_value_line: Draw a line at the test value
        title, caption, xlab, ylab: Labels
        bar_color, bar_fill: Histogram edge and fill colors
        fig: Figure or sub-figure to draw into
        options: StatsOptions; keyword overrides (``type``, ``test_value``,
            ``k``, ...) are applied on top

    Returns:
        StatsPlot
    """
    options = resolve_options(options, **overrides)
    if bar_measure not in BAR_MEASURES:
        raise UnsupportedTestKind("bar measure", bar_measure, BAR_MEASURES)
    centrality = _centrality(centrality_para)

    df = select_columns(data, x=x)
    subtitle, result, bf_caption = compute_statistics(df, TestFamily.ONE_SAMPLE, options)
    values = df["x"].to_numpy(dtype=float)

    def draw(target):
        figure = new_figure(target)
        ax = figure.subplots()

        sns.histplot(
            x=values,
            binwidth=binwidth,
            stat=BAR_MEASURES[bar_measure],
            color=bar_fill,
            edgecolor=bar_color,
            alpha=0.7,
            ax=ax,
        )

        if centrality is not None and len(values) > 0:
            center = float(np.mean(values) if centrality == "mean" else np.median(values))
            label = r"$\hat{\mu}$" if centrality == "mean" else r"$\tilde{x}$"
            ax.axvline(center, color="blue", linestyle="--", linewidth=1.2)
            ax.annotate(
                f"{label} = {format_value(center, options.k)}",
                xy=(center, 1.0),
                xycoords=("data", "axes fraction"),
                xytext=(3, -3),
                textcoords="offset points",
                va="top",
                color="blue",
                fontsize=LABEL_FONTSIZE,
            )

        if test_value_line:
            ax.axvline(options.test_value, color="black", linestyle=":", linewidth=1.2)
            ax.annotate(
                f"test = {format_value(options.test_value, options.k)}",
                xy=(options.test_value, 0.92),
                xycoords=("data", "axes fraction"),
                xytext=(3, -3),
                textcoords="offset points",
                va="top",
                fontsize=LABEL_FONTSIZE,
            )

        ax.set_xlabel(xlab or x)
        ax.set_ylabel(ylab or bar_measure)
        style_axes(ax)
        annotate(figure, ax, title, subtitle, caption_text(bf_caption, caption))
        return figure, ax

    return stats_plot(draw, fig, subtitle, bf_caption, caption, result)
