"""Colors and axis styling shared by all plots."""

from __future__ import annotations

import warnings
from typing import Dict, List, Optional, Sequence, Union

import matplotlib
import matplotlib.colors as mcolors
import numpy as np
import seaborn as sns
from matplotlib.axes import Axes

# Suppress seaborn/pandas FutureWarnings
warnings.filterwarnings("ignore", category=FutureWarning, module="seaborn")
warnings.filterwarnings("ignore", category=FutureWarning, module="pandas")

FIGSIZE = (6.5, 5.0)
SUBTITLE_FONTSIZE = 9
CAPTION_FONTSIZE = 8
LABEL_FONTSIZE = 8


def choose_colors(levels: Sequence, palette: Optional[Union[str, Sequence]] = None) -> Dict[object, tuple]:
    """Map levels to colors.

    Without a palette the first four levels are blue, red, yellow and green,
    further levels are taken from the tab20 colormap. A palette may be any
    name or list of colors seaborn understands.

    Args:
        levels: Levels in display order
        palette: Optional seaborn palette name or list of colors

    Returns:
        Dictionary mapping level to RGBA tuple
    """
    levels = list(levels)
    if palette is not None:
        colors = sns.color_palette(palette, n_colors=len(levels))
        return {lvl: mcolors.to_rgba(c) for lvl, c in zip(levels, colors)}

    base_names = ["blue", "red", "yellow", "green"]
    colors = {}

    for i, lvl in enumerate(levels[: len(base_names)]):
        colors[lvl] = mcolors.to_rgba(base_names[i], alpha=0.6)

    if len(levels) > len(base_names):
        extra_cmap = matplotlib.colormaps["tab20"].resampled(len(levels) - len(base_names))
        for j, lvl in enumerate(levels[len(base_names) :]):
            colors[lvl] = extra_cmap(j)

    return colors


def style_axes(ax: Axes, grid_axis: Optional[str] = "y") -> None:
    """Light grid, no top/right spines."""
    if grid_axis is not None:
        ax.grid(axis=grid_axis, alpha=0.2)
    ax.set_axisbelow(True)
    sns.despine(ax=ax)


def text_color_for(color: tuple) -> str:
    """Black or white, whichever reads better on ``color``."""
    r, g, b = mcolors.to_rgb(color)
    luminance = 0.299 * r + 0.587 * g + 0.114 * b
    return "black" if luminance > 0.5 else "white"


def level_labels(levels: List, n_per_level: Optional[Sequence[int]] = None) -> List[str]:
    """Tick labels, optionally with a second line ``(n = ...)``."""
    if n_per_level is None:
        return [str(lvl) for lvl in levels]
    return [f"{lvl}\n(n = {int(n)})" for lvl, n in zip(levels, np.asarray(n_per_level))]
