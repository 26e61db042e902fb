"""Box/violin plots comparing groups, between or within subjects."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import pandas as pd
import seaborn as sns

from plotstats.config import StatsOptions, resolve_options
from plotstats.data.prepare import level_order, paired_wide, select_columns
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
from plotstats.plots.theme import LABEL_FONTSIZE, choose_colors, level_labels, style_axes
from plotstats.subtitles.dispatch import groups_family
from plotstats.subtitles.formatting import format_value

logger = logging.getLogger(__name__)

PLOT_TYPES = ("box", "violin", "boxviolin")


def _draw_groups(ax, df, levels, colors, plot_type, options, mean_plotting, paired):
    palette = {str(lvl): colors[lvl] for lvl in levels}
    order = [str(lvl) for lvl in levels]
    frame = df.assign(x=df["x"].astype(str))

    if plot_type in ("violin", "boxviolin"):
        sns.violinplot(
            data=frame, x="x", y="y", hue="x", order=order, palette=palette,
            inner=None, cut=0, linewidth=0.8, legend=False, ax=ax,
        )
        for coll in ax.collections:
            coll.set_alpha(0.2)

    if plot_type in ("box", "boxviolin"):
        sns.boxplot(
            data=frame, x="x", y="y", hue="x", order=order, palette=palette,
            width=0.3 if plot_type == "boxviolin" else 0.6, fliersize=0, legend=False, ax=ax,
        )

    if paired:
        # subject trajectories across conditions
        wide = paired_wide(df, "x", "y")
        positions = np.arange(len(levels))
        for _, row in wide.iterrows():
            ax.plot(positions, row.to_numpy(dtype=float), color="grey", alpha=0.3, linewidth=0.6, zorder=1)
        for pos, lvl in zip(positions, levels):
            ax.scatter(np.full(len(wide), pos), wide[lvl], color=colors[lvl], s=12, alpha=0.7, zorder=2)
    else:
        sns.stripplot(
            data=frame, x="x", y="y", hue="x", order=order, palette=palette,
            size=4, alpha=0.5, jitter=0.15, legend=False, ax=ax,
        )

    if mean_plotting:
        for pos, lvl in enumerate(levels):
            mean = float(df.loc[df["x"] == lvl, "y"].mean())
            ax.scatter([pos], [mean], color="darkred", s=40, zorder=4)
            ax.annotate(
                rf"$\hat{{\mu}}$ = {format_value(mean, options.k)}",
                xy=(pos, mean),
                xytext=(12, 0),
                textcoords="offset points",
                va="center",
                fontsize=LABEL_FONTSIZE,
                bbox={"boxstyle": "round", "facecolor": "white", "alpha": 0.8, "edgecolor": "darkred"},
                zorder=5,
            )


def ggbetweenstats(
    data: pd.DataFrame,
    x: str,
    y: str,
    plot_type: str = "boxviolin",
    mean_plotting: bool = True,
    sample_size_label: bool = True,
    palette=None,
    title: Optional[str] = None,
    caption: Optional[str] = None,
    xlab: Optional[str] = None,
    ylab: Optional[str] = None,
    fig: Optional[FigureLike] = None,
    options: Optional[StatsOptions] = None,
    **overrides,
) -> StatsPlot:
    """Compare ``y`` across levels of ``x``.

    Two levels run a two-sample test, more levels a one-way ANOVA of the
    selected type. With ``paired=True`` the design is within subjects:
    rows are matched by their position within each level and subjects are
    connected by lines.

    Args:
        data: Input dataframe
        x: Grouping column
        y: Numeric column
        plot_type: "box", "violin" or "boxviolin"
        mean_plotting: Mark and label group means
        sample_size_label: Add ``(n = ...)`` to the x tick labels
        palette: seaborn palette name or colors; default blue/red/yellow/green
        title, caption, xlab, ylab: Labels
        fig: Figure or sub-figure to draw into
        options: StatsOptions; keyword overrides are applied on top

    Returns:
        StatsPlot
    """
    options = resolve_options(options, **overrides)
    if plot_type not in PLOT_TYPES:
        raise UnsupportedTestKind("plot type", plot_type, PLOT_TYPES)

    df = select_columns(data, x=x, y=y)
    family = groups_family(df)
    subtitle, result, bf_caption = compute_statistics(df, family, options)

    levels = level_order(df["x"])
    colors = choose_colors(levels, palette)
    if options.paired:
        wide = paired_wide(df, "x", "y")
        n_per_level = [len(wide)] * len(levels)
    else:
        n_per_level = [int((df["x"] == lvl).sum()) for lvl in levels]

    def draw(target):
        figure = new_figure(target)
        ax = figure.subplots()

        _draw_groups(ax, df, levels, colors, plot_type, options, mean_plotting, options.paired)

        ax.set_xticks(np.arange(len(levels)))
        ax.set_xticklabels(level_labels(levels, n_per_level if sample_size_label else None))
        ax.set_xlabel(xlab or x)
        ax.set_ylabel(ylab or y)
        style_axes(ax)
        annotate(figure, ax, title, subtitle, caption_text(bf_caption, caption))
        return figure, ax

    return stats_plot(draw, fig, subtitle, bf_caption, caption, result)


def ggwithinstats(
    data: pd.DataFrame,
    x: str,
    y: str,
    options: Optional[StatsOptions] = None,
    **kwargs,
) -> StatsPlot:
    """Within-subjects version of ggbetweenstats (``paired=True``)."""
    options = resolve_options(options, paired=True)
    return ggbetweenstats(data, x, y, options=options, **kwargs)
