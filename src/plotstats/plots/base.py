"""Plot containers and helpers shared by all plot functions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple, Union

import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.axes import Axes
from matplotlib.figure import Figure, SubFigure

from plotstats.config import StatsOptions
from plotstats.stats.results import StatResult, TestFamily
from plotstats.subtitles.dispatch import run_bayes_caption, run_test
from plotstats.subtitles.templates import Subtitle
from plotstats.plots.theme import CAPTION_FONTSIZE, FIGSIZE, SUBTITLE_FONTSIZE

logger = logging.getLogger(__name__)

FigureLike = Union[Figure, SubFigure]


def root_figure(fig: FigureLike) -> Figure:
    """Top-level Figure of a figure or sub-figure."""
    while isinstance(fig, SubFigure):
        fig = fig.figure
    return fig


@dataclass
class StatsPlot:
    """A rendered statistical plot.

    Attributes:
        figure: Figure (or sub-figure) the plot was drawn into
        axes: Axes, or array of axes for faceted plots
        subtitle: Test result subtitle; None when ``results_subtitle=False``
        caption: Bayes factor caption when one was computed, else the user caption
        result: Unrounded test result; None when no test ran
        draw: Callable re-rendering the same plot into another figure
    """

    figure: FigureLike
    axes: Any
    subtitle: Optional[Subtitle] = None
    caption: Optional[Union[Subtitle, str]] = None
    result: Optional[StatResult] = None
    draw: Optional[Callable[[Optional[FigureLike]], "StatsPlot"]] = field(default=None, repr=False)

    def savefig(self, path: Union[str, Path], **kwargs) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        root_figure(self.figure).savefig(path, **kwargs)
        return path


@dataclass
class CombinedPlot:
    """Several StatsPlot panels composed into one figure."""

    figure: Figure
    panels: List[StatsPlot]
    levels: Optional[List] = None

    def savefig(self, path: Union[str, Path], **kwargs) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.figure.savefig(path, **kwargs)
        return path


def new_figure(fig: Optional[FigureLike] = None, figsize: Tuple[float, float] = FIGSIZE) -> FigureLike:
    """Use ``fig`` when given, otherwise create a constrained-layout figure."""
    if fig is not None:
        return fig
    return plt.figure(figsize=figsize, layout="constrained")


def compute_statistics(
    df: pd.DataFrame, family: TestFamily, options: StatsOptions, **kwargs
) -> Tuple[Optional[Subtitle], Optional[StatResult], Optional[Subtitle]]:
    """Run the test for a plot.

    Returns:
        Tuple of (subtitle, result, bayes_caption); all None when
        ``results_subtitle`` is off
    """
    if not options.results_subtitle:
        return None, None, None
    subtitle, result = run_test(df, family, options, **kwargs)
    caption = run_bayes_caption(df, family, options, **kwargs)
    return subtitle, result, caption


def caption_text(bf_caption: Optional[Subtitle], caption: Optional[str]) -> Optional[str]:
    """Bayes caption (mathtext) above the user caption."""
    lines = [c for c in (bf_caption.mathtext if bf_caption is not None else None, caption) if c]
    return "\n".join(lines) if lines else None


def annotate(
    fig: FigureLike,
    ax: Optional[Axes],
    title: Optional[str] = None,
    subtitle: Optional[Subtitle] = None,
    caption: Optional[str] = None,
) -> None:
    """Place title, subtitle and caption.

    With a single ``ax`` the subtitle becomes the axes title; for faceted
    plots (``ax=None``) it goes below the figure title.
    """
    if ax is not None:
        if title:
            fig.suptitle(title)
        if subtitle is not None:
            ax.set_title(subtitle.mathtext, fontsize=SUBTITLE_FONTSIZE)
    else:
        header = [t for t in (title, subtitle.mathtext if subtitle is not None else None) if t]
        if header:
            fig.suptitle("\n".join(header), fontsize=SUBTITLE_FONTSIZE + 1)

    if caption:
        fig.supxlabel(caption, x=0.98, ha="right", fontsize=CAPTION_FONTSIZE)


def stats_plot(
    draw: Callable[[Optional[FigureLike]], Tuple[FigureLike, Any]],
    fig: Optional[FigureLike],
    subtitle: Optional[Subtitle],
    bf_caption: Optional[Subtitle],
    caption: Optional[str],
    result: Optional[StatResult],
) -> StatsPlot:
    """Draw a plot and wrap it with a re-drawing callback.

    ``draw`` renders into the given figure (or a new one) and returns
    ``(figure, axes)``; the statistics are computed once, outside ``draw``.
    """

    def render(target: Optional[FigureLike] = None) -> StatsPlot:
        figure, axes = draw(target)
        return StatsPlot(
            figure=figure,
            axes=axes,
            subtitle=subtitle,
            caption=bf_caption if bf_caption is not None else caption,
            result=result,
            draw=render,
        )

    return render(fig)
