"""Tests for the single-panel plot functions."""

from __future__ import annotations

import pandas as pd
import pytest
from scipy import stats

from plotstats.exceptions import UnsupportedTestKind
from plotstats.plots import (
    StatsPlot,
    ggbarstats,
    ggbetweenstats,
    gghistostats,
    ggpiestats,
    ggscatterstats,
    ggwithinstats,
    proptest_by_level,
)
from plotstats.plots.piestats import significance_stars
from plotstats.plots.theme import choose_colors, level_labels
from plotstats.stats.results import TestFamily
from plotstats.subtitles import subtitle_groups, subtitle_onesample


class TestTheme:
    """Tests for shared styling helpers."""

    def test_choose_colors_default(self):
        """First four levels are blue, red, yellow, green."""
        colors = choose_colors(["a", "b", "c", "d", "e", "f"])

        assert list(colors) == ["a", "b", "c", "d", "e", "f"]
        assert colors["a"][:3] == (0.0, 0.0, 1.0)
        assert colors["b"][:3] == (1.0, 0.0, 0.0)

    def test_choose_colors_palette(self):
        colors = choose_colors(["x", "y"], palette="Set2")
        assert len(colors) == 2

    def test_level_labels(self):
        assert level_labels(["a", "b"], [3, 4]) == ["a\n(n = 3)", "b\n(n = 4)"]
        assert level_labels(["a"]) == ["a"]


class TestHistostats:
    """Tests for gghistostats."""

    def test_subtitle_and_caption(self, onesample_data, options):
        plot = gghistostats(onesample_data, "value", options=options, title="Values")

        assert isinstance(plot, StatsPlot)
        assert plot.subtitle == subtitle_onesample(onesample_data, "value", options)
        assert plot.axes.get_title() == plot.subtitle.mathtext
        assert plot.result.family == TestFamily.ONE_SAMPLE
        assert str(plot.caption).startswith("In favor of null: ")

    def test_results_subtitle_off(self, onesample_data, options):
        """No test and the user caption is kept."""
        plot = gghistostats(onesample_data, "value", options=options, results_subtitle=False, caption="Source: lab")

        assert plot.subtitle is None
        assert plot.result is None
        assert plot.caption == "Source: lab"
        assert plot.axes.get_title() == ""

    def test_bayes_type_has_no_caption(self, onesample_data, options):
        plot = gghistostats(onesample_data, "value", options=options, type="bayes")

        assert "log_e(BF01)" in plot.subtitle.text
        assert plot.caption is None

    def test_options_and_lines(self, onesample_data, options):
        plot = gghistostats(
            onesample_data, "value", options=options, bar_measure="density",
            centrality_para="median", test_value_line=True, test_value=0.5, binwidth=0.5,
        )
        ref = stats.ttest_1samp(onesample_data["value"], 0.5)

        assert plot.result.statistic == pytest.approx(ref.statistic)
        assert len(plot.axes.lines) == 2
        assert plot.axes.get_ylabel() == "density"

    def test_invalid_bar_measure(self, onesample_data, options):
        with pytest.raises(UnsupportedTestKind):
            gghistostats(onesample_data, "value", options=options, bar_measure="area")

    def test_savefig(self, onesample_data, options, tmp_path):
        path = gghistostats(onesample_data, "value", options=options).savefig(tmp_path / "out" / "hist.png")
        assert path.exists()


class TestScatterstats:
    """Tests for ggscatterstats."""

    def test_linear(self, correlation_data, options):
        plot = ggscatterstats(correlation_data, "x", "y", options=options)

        assert "r_Pearson" in plot.subtitle.text
        assert plot.axes.get_xlabel() == "x"

    def test_lowess_spearman(self, correlation_data, options):
        plot = ggscatterstats(correlation_data, "x", "y", method="lowess", options=options, type="np")
        assert "ρ_Spearman" in plot.subtitle.text

    def test_invalid_method(self, correlation_data, options):
        with pytest.raises(UnsupportedTestKind):
            ggscatterstats(correlation_data, "x", "y", method="spline", options=options)


class TestBetweenstats:
    """Tests for ggbetweenstats and ggwithinstats."""

    def test_two_groups(self, two_group_data, options):
        plot = ggbetweenstats(two_group_data, "group", "score", options=options)
        labels = [t.get_text() for t in plot.axes.get_xticklabels()]

        assert plot.result.family == TestFamily.TWO_SAMPLE
        assert labels == ["control\n(n = 25)", "treated\n(n = 25)"]
        assert plot.subtitle == subtitle_groups(two_group_data, "group", "score", options)

    @pytest.mark.parametrize("plot_type", ["box", "violin", "boxviolin"])
    def test_plot_types(self, three_group_data, options, plot_type):
        plot = ggbetweenstats(three_group_data, "cond", "y", plot_type=plot_type, options=options)

        assert plot.result.family == TestFamily.ANOVA
        assert len(plot.axes.get_xticklabels()) == 3

    def test_tick_labels_follow_first_appearance(self, three_group_data, options):
        plot = ggbetweenstats(three_group_data, "cond", "y", sample_size_label=False, options=options)
        assert [t.get_text() for t in plot.axes.get_xticklabels()] == ["b", "a", "c"]

    def test_invalid_plot_type(self, two_group_data, options):
        with pytest.raises(UnsupportedTestKind):
            ggbetweenstats(two_group_data, "group", "score", plot_type="bar", options=options)

    def test_within(self, within_data, options):
        plot = ggwithinstats(within_data, "time", "y", options=options, mean_plotting=False)

        assert plot.result.n == 15
        assert plot.result.method == "One-way repeated measures ANOVA"
        assert [t.get_text() for t in plot.axes.get_xticklabels()][0] == "pre\n(n = 15)"

    def test_within_keeps_type(self, within_data, options):
        plot = ggwithinstats(within_data, "time", "y", options=options.updated(type="np"))
        assert plot.result.method == "Friedman rank sum test"

    def test_draw_callback_reuses_statistics(self, two_group_data, options):
        """Redrawing gives a new figure with the same statistics."""
        plot = ggbetweenstats(two_group_data, "group", "score", options=options)
        again = plot.draw(None)

        assert again.figure is not plot.figure
        assert again.subtitle is plot.subtitle
        assert again.result is plot.result


class TestPieBarstats:
    """Tests for ggpiestats and ggbarstats."""

    def test_pie_one_way(self, categorical_data, options):
        plot = ggpiestats(categorical_data, "main", options=options)

        assert len(plot.axes) == 1
        assert plot.result.family == TestFamily.PROPORTION
        assert plot.axes[0].get_legend() is not None

    def test_pie_facets(self, categorical_data, options):
        plot = ggpiestats(categorical_data, "main", "condition", options=options, slice_label="both")
        titles = [ax.get_title() for ax in plot.axes]

        assert len(plot.axes) == 2
        assert plot.result.family == TestFamily.CONTINGENCY
        assert titles[0].startswith(str(categorical_data["condition"].iloc[0]))
        assert all("(n = " in t for t in titles)

    def test_pie_factor_levels(self, categorical_data, options):
        plot = ggpiestats(categorical_data, "main", options=options, factor_levels=["A", "B"], legend_title="Answer")
        legend = plot.axes[-1].get_legend()

        assert [t.get_text() for t in legend.get_texts()] == ["A", "B"]
        assert legend.get_title().get_text() == "Answer"

    def test_pie_factor_levels_mismatch(self, categorical_data, options):
        with pytest.raises(ValueError, match="factor_levels"):
            ggpiestats(categorical_data, "main", options=options, factor_levels=["A"])

    def test_pie_paired_uses_mcnemar(self, options):
        pairs = [("yes", "yes")] * 10 + [("yes", "no")] * 8 + [("no", "yes")] * 2 + [("no", "no")] * 5
        data = pd.DataFrame(pairs, columns=["before", "after"])
        plot = ggpiestats(data, "before", "after", options=options, paired=True)

        assert plot.result.method == "McNemar's chi-squared test"
        assert plot.caption is None

    def test_pie_counts(self, categorical_data, options):
        counted = categorical_data.groupby(["main", "condition"]).size().reset_index(name="freq")
        plot = ggpiestats(counted, "main", "condition", counts="freq", options=options)
        assert plot.result.n == 120

    def test_bar(self, categorical_data, options):
        plot = ggbarstats(categorical_data, "main", "condition", options=options)
        labels = [t.get_text() for t in plot.axes.get_xticklabels()]

        assert len(labels) == 2
        assert all("(n = " in lbl for lbl in labels)
        assert plot.axes.get_ylim() == (0, 110)

    def test_invalid_slice_label(self, categorical_data, options):
        with pytest.raises(UnsupportedTestKind):
            ggpiestats(categorical_data, "main", options=options, slice_label="angle")


class TestProptests:
    """Tests for per-level proportion tests."""

    def test_proptest_by_level(self, categorical_data):
        table = proptest_by_level(categorical_data, "main", "condition")

        assert list(table.columns) == ["condition", "statistic", "df", "p_value", "significance", "n"]
        assert table["n"].sum() == 120
        assert (table["df"] == 1).all()

    def test_significance_stars(self):
        assert significance_stars(0.0001) == "***"
        assert significance_stars(0.005) == "**"
        assert significance_stars(0.03) == "*"
        assert significance_stars(0.2) == "ns"
        assert significance_stars(float("nan")) == "NA"
