"""Pie and stacked bar charts for categorical data."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
from matplotlib.patches import Patch
from scipy import stats

from plotstats.config import StatsOptions, resolve_options
from plotstats.data.prepare import level_order
from plotstats.exceptions import InsufficientData, UnsupportedTestKind
from plotstats.plots.base import (
    FigureLike,
    StatsPlot,
    annotate,
    caption_text,
    compute_statistics,
    new_figure,
    stats_plot,
)
from plotstats.plots.theme import LABEL_FONTSIZE, choose_colors, level_labels, style_axes, text_color_for
from plotstats.stats.results import TestFamily
from plotstats.subtitles.dispatch import contingency_data
from plotstats.subtitles.formatting import format_p, format_percent, format_value

logger = logging.getLogger(__name__)

SLICE_LABELS = ("percentage", "counts", "both")


def significance_stars(p: float) -> str:
    """Conventional significance code for a p-value."""
    if not np.isfinite(p):
        return "NA"
    if p < 0.001:
        return "***"
    if p < 0.01:
        return "**"
    if p < 0.05:
        return "*"
    return "ns"


def _proptest_table(df: pd.DataFrame) -> pd.DataFrame:
    main_levels = level_order(df["main"])
    rows = []
    for level in level_order(df["condition"]):
        counts = df.loc[df["condition"] == level, "main"].value_counts().reindex(main_levels, fill_value=0)
        counts = counts.to_numpy(dtype=float)
        if len(counts) < 2:
            stat, p_val = np.nan, np.nan
        else:
            with np.errstate(all="ignore"):
                stat, p_val = stats.chisquare(counts)
        rows.append(
            {
                "condition": level,
                "statistic": float(stat),
                "df": len(counts) - 1,
                "p_value": float(p_val),
                "significance": significance_stars(float(p_val)),
                "n": int(counts.sum()),
            }
        )
    return pd.DataFrame(rows, columns=["condition", "statistic", "df", "p_value", "significance", "n"])


def proptest_by_level(
    data: pd.DataFrame,
    main: str,
    condition: str,
    counts: Optional[str] = None,
) -> pd.DataFrame:
    """Goodness-of-fit test of ``main`` (equal proportions) within each level of ``condition``.

    Returns:
        DataFrame with columns: condition, statistic, df, p_value, significance, n
    """
    df = contingency_data(data, main, condition, counts)
    return _proptest_table(df)


def _log_proptests(table: pd.DataFrame, main: str, condition: str, k: int) -> None:
    shown = table.assign(
        statistic=table["statistic"].map(lambda v: format_value(v, k)),
        p_value=table["p_value"].map(lambda v: format_p(v, k)),
    )
    logger.info(
        f"Proportion tests for '{main}' within each level of '{condition}':\n{shown.to_string(index=False)}"
    )


def _slice_text(count: float, total: float, slice_label: str, perc_k: int) -> str:
    pct = format_percent(100.0 * count / total if total > 0 else np.nan, perc_k)
    if slice_label == "percentage":
        return pct
    if slice_label == "counts":
        return f"n = {int(count)}"
    return f"{int(count)}\n({pct})"


def _legend_labels(levels: List, factor_levels: Optional[Sequence[str]]) -> List[str]:
    if factor_levels is None:
        return [str(lvl) for lvl in levels]
    if len(factor_levels) != len(levels):
        raise ValueError(
            f"factor_levels has {len(factor_levels)} labels but there are {len(levels)} levels: {levels}"
        )
    return [str(lbl) for lbl in factor_levels]


def _prepare(data, main, condition, counts, ratio, options):
    df = contingency_data(data, main, condition, counts)
    if len(df) == 0:
        raise InsufficientData("No complete observations left after removing missing values", required=1, observed=0)
    if condition is None:
        stats_out = compute_statistics(df, TestFamily.PROPORTION, options, ratio=ratio)
    else:
        stats_out = compute_statistics(df, TestFamily.CONTINGENCY, options)
    return df, stats_out


def ggpiestats(
    data: pd.DataFrame,
    main: str,
    condition: Optional[str] = None,
    counts: Optional[str] = None,
    ratio: Optional[Sequence[float]] = None,
    slice_label: str = "percentage",
    facet_proptest: bool = True,
    sample_size_label: bool = True,
    factor_levels: Optional[Sequence[str]] = None,
    legend_title: Optional[str] = None,
    palette=None,
    title: Optional[str] = None,
    caption: Optional[str] = None,
    fig: Optional[FigureLike] = None,
    options: Optional[StatsOptions] = None,
    **overrides,
) -> StatsPlot:
    """Pie chart of ``main``, one pie per level of ``condition`` when given.

    Without ``condition`` the subtitle reports a goodness-of-fit test
    against ``ratio`` (equal proportions by default); with it, a test of
    association (McNemar for ``paired=True``). Each facet is labelled with
    its own proportion test (``facet_proptest``) and sample size.

    Args:
        data: Input dataframe
        main: Categorical column shown as slices
        condition: Optional categorical column, one pie per level
        counts: Optional column of frequencies for aggregated data
        ratio: Expected proportions of ``main`` levels for the one-way test
        slice_label: "percentage", "counts" or "both"
        facet_proptest: Label each pie with its proportion test significance
        sample_size_label: Label each pie with ``(n = ...)``
        factor_levels: Legend labels replacing the levels of ``main``
        legend_title: Legend title (defaults to ``main``)
        palette: seaborn palette name or colors
        title, caption: Labels
        fig: Figure or sub-figure to draw into
        options: StatsOptions; keyword overrides are applied on top

    Returns:
        StatsPlot whose ``axes`` is a list with one axes per pie
    """
    options = resolve_options(options, **overrides)
    if slice_label not in SLICE_LABELS:
        raise UnsupportedTestKind("slice label", slice_label, SLICE_LABELS)

    df, (subtitle, result, bf_caption) = _prepare(data, main, condition, counts, ratio, options)

    main_levels = level_order(df["main"])
    colors = choose_colors(main_levels, palette)
    legend = _legend_labels(main_levels, factor_levels)

    if condition is None:
        facets = [(None, df)]
        proptests = None
    else:
        facets = [(lvl, df[df["condition"] == lvl]) for lvl in level_order(df["condition"])]
        proptests = _proptest_table(df) if facet_proptest else None
        if proptests is not None and options.messages:
            _log_proptests(proptests, main, condition, options.k)

    def draw(target):
        figure = new_figure(target, figsize=(max(4.0 * len(facets), 5.0), 5.0))
        axes = np.atleast_1d(figure.subplots(1, len(facets))).tolist()

        for i, (ax, (level, subset)) in enumerate(zip(axes, facets)):
            freq = subset["main"].value_counts().reindex(main_levels, fill_value=0).to_numpy(dtype=float)
            total = freq.sum()
            shown = freq > 0
            _, texts = ax.pie(
                freq[shown],
                colors=[colors[lvl] for lvl, s in zip(main_levels, shown) if s],
                labels=[_slice_text(c, total, slice_label, options.perc_k) for c in freq[shown]],
                labeldistance=0.6,
                startangle=90,
                counterclock=False,
                wedgeprops={"edgecolor": "black", "linewidth": 0.8},
                textprops={"fontsize": LABEL_FONTSIZE, "ha": "center"},
            )
            for text, lvl in zip(texts, [lvl for lvl, s in zip(main_levels, shown) if s]):
                text.set_color(text_color_for(colors[lvl]))

            header = [] if level is None else [str(level)]
            if proptests is not None:
                header.append(proptests.iloc[i]["significance"])
            if sample_size_label and level is not None:
                header.append(f"(n = {int(total)})")
            if header:
                ax.set_title("\n".join(header), fontsize=LABEL_FONTSIZE + 1)
            ax.set_aspect("equal")

        handles = [
            Patch(facecolor=colors[lvl], edgecolor="black", label=lbl) for lvl, lbl in zip(main_levels, legend)
        ]
        axes[-1].legend(
            handles=handles,
            title=legend_title or main,
            loc="center left",
            bbox_to_anchor=(1.0, 0.5),
            fontsize=LABEL_FONTSIZE,
        )
        annotate(figure, axes[0] if len(axes) == 1 else None, title, subtitle, caption_text(bf_caption, caption))
        return figure, axes

    return stats_plot(draw, fig, subtitle, bf_caption, caption, result)


def ggbarstats(
    data: pd.DataFrame,
    main: str,
    condition: str,
    counts: Optional[str] = None,
    bar_label: str = "percentage",
    bar_proptest: bool = True,
    sample_size_label: bool = True,
    factor_levels: Optional[Sequence[str]] = None,
    legend_title: Optional[str] = None,
    palette=None,
    title: Optional[str] = None,
    caption: Optional[str] = None,
    xlab: Optional[str] = None,
    ylab: Optional[str] = "percent",
    fig: Optional[FigureLike] = None,
    options: Optional[StatsOptions] = None,
    **overrides,
) -> StatsPlot:
    """Stacked percentage bars of ``main`` within each level of ``condition``.

    Reports the same association test as ggpiestats. Bars are labelled with
    their per-level proportion test significance (``bar_proptest``) and
    sample size on the x axis.
    """
    options = resolve_options(options, **overrides)
    if bar_label not in SLICE_LABELS:
        raise UnsupportedTestKind("bar label", bar_label, SLICE_LABELS)

    df, (subtitle, result, bf_caption) = _prepare(data, main, condition, counts, None, options)

    main_levels = level_order(df["main"])
    cond_levels = level_order(df["condition"])
    colors = choose_colors(main_levels, palette)
    legend = _legend_labels(main_levels, factor_levels)

    table = pd.crosstab(df["main"], df["condition"]).reindex(index=main_levels, columns=cond_levels, fill_value=0)
    totals = table.sum(axis=0).to_numpy(dtype=float)
    with np.errstate(all="ignore"):
        percents = 100.0 * table.to_numpy(dtype=float) / totals

    proptests = _proptest_table(df) if bar_proptest else None
    if proptests is not None and options.messages:
        _log_proptests(proptests, main, condition, options.k)

    def draw(target):
        figure = new_figure(target)
        ax = figure.subplots()
        positions = np.arange(len(cond_levels))
        bottom = np.zeros(len(cond_levels))

        for i, (lvl, lbl) in enumerate(zip(main_levels, legend)):
            heights = np.nan_to_num(percents[i])
            ax.bar(positions, heights, bottom=bottom, color=colors[lvl], edgecolor="black",
                   linewidth=0.6, width=0.6, label=lbl)
            for pos, h, b, c in zip(positions, heights, bottom, table.iloc[i].to_numpy()):
                if c > 0:
                    ax.text(
                        pos, b + h / 2, _slice_text(c, totals[pos], bar_label, options.perc_k),
                        ha="center", va="center", fontsize=LABEL_FONTSIZE, color=text_color_for(colors[lvl]),
                    )
            bottom = bottom + heights

        if proptests is not None:
            for pos, sig in zip(positions, proptests["significance"]):
                ax.text(pos, 102, sig, ha="center", va="bottom", fontsize=LABEL_FONTSIZE)

        ax.set_ylim(0, 110)
        ax.set_xticks(positions)
        ax.set_xticklabels(level_labels(cond_levels, totals if sample_size_label else None))
        ax.set_xlabel(xlab or condition)
        ax.set_ylabel(ylab)
        ax.legend(title=legend_title or main, loc="upper left", bbox_to_anchor=(1.0, 1.0), fontsize=LABEL_FONTSIZE)
        style_axes(ax)
        annotate(figure, ax, title, subtitle, caption_text(bf_caption, caption))
        return figure, ax

    return stats_plot(draw, fig, subtitle, bf_caption, caption, result)
