"""Repeat a plot per level of a grouping column and compose panels into one figure."""

from __future__ import annotations

import logging
import math
import string
from typing import Callable, List, Optional, Sequence, Union

import matplotlib.pyplot as plt
import pandas as pd

from plotstats.data.prepare import level_order
from plotstats.exceptions import InsufficientData, MissingColumn
from plotstats.plots.base import CombinedPlot, StatsPlot
from plotstats.plots.betweenstats import ggbetweenstats, ggwithinstats
from plotstats.plots.histostats import gghistostats
from plotstats.plots.piestats import ggbarstats, ggpiestats
from plotstats.plots.scatterstats import ggscatterstats
from plotstats.plots.theme import CAPTION_FONTSIZE, FIGSIZE

logger = logging.getLogger(__name__)

Labels = Optional[Union[str, Sequence[str]]]


def panel_labels(n: int, labels: Labels = "auto") -> List[Optional[str]]:
    """Panel tags: "auto" gives (a), (b), ...; None gives no tags."""
    if labels is None:
        return [None] * n
    if isinstance(labels, str):
        if labels != "auto":
            raise ValueError(f"labels must be 'auto', None or a sequence of strings, got {labels!r}")
        letters = string.ascii_lowercase
        tags = []
        for i in range(n):
            tag = letters[i % 26] * (i // 26 + 1)
            tags.append(f"({tag})")
        return tags
    labels = list(labels)
    if len(labels) < n:
        raise ValueError(f"{len(labels)} labels given for {n} panels")
    return labels[:n]


def _grid(n: int, ncols: int, figsize=None):
    if ncols < 1:
        raise ValueError(f"ncols must be >= 1, got {ncols}")
    ncols = min(ncols, n)
    nrows = math.ceil(n / ncols)
    if figsize is None:
        figsize = (FIGSIZE[0] * ncols, FIGSIZE[1] * nrows)
    fig = plt.figure(figsize=figsize, layout="constrained")
    subfigs = fig.subfigures(nrows, ncols, squeeze=False)
    return fig, subfigs.ravel().tolist()


def _finish(fig, subfigs, panels, labels, title, caption):
    for sub, tag in zip(subfigs, panel_labels(len(panels), labels)):
        if tag is not None:
            sub.text(0.01, 0.99, tag, ha="left", va="top", fontweight="bold")
    if title:
        fig.suptitle(title, fontsize="x-large")
    if caption:
        fig.supxlabel(caption, x=0.99, ha="right", fontsize=CAPTION_FONTSIZE)


def grouped_plot(
    plot_func: Callable[..., StatsPlot],
    data: pd.DataFrame,
    grouping_var: str,
    ncols: int = 2,
    labels: Labels = "auto",
    title: Optional[str] = None,
    caption: Optional[str] = None,
    figsize=None,
    **kwargs,
) -> CombinedPlot:
    """Call ``plot_func`` once per level of ``grouping_var``.

    Levels are taken in order of first appearance and drawn row-major into
    sub-figures. Every panel receives the same keyword arguments (options and
    seed included), and is titled ``"<grouping_var>: <level>"``. Rows with a
    missing grouping value are dropped.

    Args:
        plot_func: Base plot function (gghistostats, ggbetweenstats, ...)
        data: Input dataframe
        grouping_var: Column whose levels define the panels
        ncols: Number of panel columns
        labels: Panel tags; "auto" for (a), (b), ..., None for none
        title: Title of the combined figure
        caption: Caption of the combined figure
        figsize: Size of the combined figure
        **kwargs: Passed to ``plot_func``

    Returns:
        CombinedPlot with one panel per level
    """
    if grouping_var not in data.columns:
        raise MissingColumn(grouping_var, data.columns.tolist())

    data = data[data[grouping_var].notna()]
    levels = level_order(data[grouping_var])
    if not levels:
        raise InsufficientData(f"Grouping variable '{grouping_var}' has no levels", required=1, observed=0)

    logger.info(f"Drawing {len(levels)} panels for levels of '{grouping_var}'")
    fig, subfigs = _grid(len(levels), ncols, figsize)

    panels = []
    for level, sub in zip(levels, subfigs):
        subset = data[data[grouping_var] == level]
        panels.append(plot_func(subset, fig=sub, title=f"{grouping_var}: {level}", **kwargs))

    _finish(fig, subfigs, panels, labels, title, caption)
    return CombinedPlot(figure=fig, panels=panels, levels=levels)


def combine_plots(
    plots: Sequence[StatsPlot],
    ncols: int = 2,
    labels: Labels = "auto",
    title: Optional[str] = None,
    caption: Optional[str] = None,
    figsize=None,
) -> CombinedPlot:
    """Redraw already-built plots side by side in one figure.

    Statistics are not recomputed; each plot is re-rendered through its
    stored draw callback.
    """
    plots = list(plots)
    if not plots:
        raise ValueError("combine_plots needs at least one plot")

    fig, subfigs = _grid(len(plots), ncols, figsize)
    panels = []
    for plot, sub in zip(plots, subfigs):
        if plot.draw is None:
            raise ValueError("Plot has no draw callback and cannot be combined")
        panels.append(plot.draw(sub))

    _finish(fig, subfigs, panels, labels, title, caption)
    return CombinedPlot(figure=fig, panels=panels)


def grouped_gghistostats(data: pd.DataFrame, x: str, grouping_var: str, **kwargs) -> CombinedPlot:
    """gghistostats for each level of ``grouping_var``."""
    return grouped_plot(gghistostats, data, grouping_var, x=x, **kwargs)


def grouped_ggscatterstats(data: pd.DataFrame, x: str, y: str, grouping_var: str, **kwargs) -> CombinedPlot:
    """ggscatterstats for each level of ``grouping_var``."""
    return grouped_plot(ggscatterstats, data, grouping_var, x=x, y=y, **kwargs)


def grouped_ggbetweenstats(data: pd.DataFrame, x: str, y: str, grouping_var: str, **kwargs) -> CombinedPlot:
    """ggbetweenstats for each level of ``grouping_var``."""
    return grouped_plot(ggbetweenstats, data, grouping_var, x=x, y=y, **kwargs)


def grouped_ggwithinstats(data: pd.DataFrame, x: str, y: str, grouping_var: str, **kwargs) -> CombinedPlot:
    """ggwithinstats for each level of ``grouping_var``."""
    return grouped_plot(ggwithinstats, data, grouping_var, x=x, y=y, **kwargs)


def grouped_ggpiestats(
    data: pd.DataFrame, main: str, grouping_var: str, condition: Optional[str] = None, **kwargs
) -> CombinedPlot:
    """ggpiestats for each level of ``grouping_var``."""
    return grouped_plot(ggpiestats, data, grouping_var, main=main, condition=condition, **kwargs)


def grouped_ggbarstats(
    data: pd.DataFrame, main: str, condition: str, grouping_var: str, **kwargs
) -> CombinedPlot:
    """ggbarstats for each level of ``grouping_var``."""
    return grouped_plot(ggbarstats, data, grouping_var, main=main, condition=condition, **kwargs)
